import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from rmdb.buffer_pool import BufferPoolManager
from rmdb.defs import PAGE_SIZE
from rmdb.disk_manager import DiskManager
from rmdb.errors import UnixError
from rmdb.page import Page, PageId


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    dm = DiskManager()
    dm.create_file("basic")
    fd = dm.open_file("basic")
    yield dm, fd
    for open_fd in list(dm._fd2path):
        dm.close_file(open_fd)


def test_sample(env):
    dm, fd = env
    pool_size = 10
    bpm = BufferPoolManager(pool_size, dm)

    page0 = bpm.new_page(fd)
    assert page0 is not None
    assert page0.page_id.page_no == 0

    page0.data[:6] = b"Hello\0"
    assert page0.data.startswith(b"Hello\0")

    for _ in range(1, pool_size):
        assert bpm.new_page(fd) is not None
    for _ in range(pool_size, pool_size * 2):
        assert bpm.new_page(fd) is None

    for i in range(5):
        assert bpm.unpin_page(PageId(fd, i), True) is True
    for _ in range(4):
        assert bpm.new_page(fd) is not None

    page0 = bpm.fetch_page(PageId(fd, 0))
    assert page0 is not None
    assert page0.data.startswith(b"Hello\0")
    assert bpm.unpin_page(PageId(fd, 0), True) is True

    assert bpm.new_page(fd) is not None
    assert bpm.fetch_page(PageId(fd, 0)) is None

    bpm.flush_all_pages(fd)
    assert dm.read_page(fd, 0, PAGE_SIZE).startswith(b"Hello\0")


def _concurrent_worker(bpm, fd):
    page_ids = []
    created = []
    unpinned = []
    matches = []
    for _ in range(10):
        page = bpm.new_page(fd)
        created.append(page is not None)
        if page is None:
            continue
        text = str(page.page_id.page_no).encode() + b"\0"
        page.data[: len(text)] = text
        page_ids.append(page.page_id)
    unpinned.extend(bpm.unpin_page(pid, True) for pid in page_ids)
    for pid in page_ids:
        page = bpm.fetch_page(pid)
        if page is None:
            matches.append(False)
            continue
        text = str(pid.page_no).encode() + b"\0"
        matches.append(bytes(page.data[: len(text)]) == text)
        unpinned.append(bpm.unpin_page(pid, True))
    deleted = [bpm.delete_page(pid) for pid in page_ids]
    bpm.flush_all_pages(fd)
    return created, unpinned, matches, deleted


def test_concurrency(env):
    dm, fd = env
    results = []

    for _ in range(5):
        bpm = BufferPoolManager(50, dm)
        with ThreadPoolExecutor(max_workers=5) as executor:
            futures = [executor.submit(_concurrent_worker, bpm, fd) for _ in range(5)]
            results.extend(future.result() for future in futures)

    expected = ([True] * 10, [True] * 20, [True] * 10, [True] * 10)
    assert results == [expected] * 25


def _storage_run(tmp_dm, num_files, num_pages, pool_size, rounds, seed):
    rng = random.Random(seed)
    bpm = BufferPoolManager(pool_size, tmp_dm)
    mock = {}
    fds = []
    for i in range(num_files):
        name = f"{i}.txt"
        tmp_dm.create_file(name)
        fd = tmp_dm.open_file(name)
        tmp_dm.set_fd2pageno(fd, 0)
        fds.append(fd)

    for fd in fds:
        for i in range(num_pages):
            buf = rng.randbytes(PAGE_SIZE)
            page = bpm.new_page(fd)
            assert page is not None
            assert page.page_id.page_no == i
            page.data[:] = buf
            assert bpm.unpin_page(page.page_id, True)
            mock[(fd, i)] = buf
            cached = bpm.fetch_page(PageId(fd, i))
            assert bytes(cached.data) == buf
            bpm.unpin_page(PageId(fd, i), False)

    for fd in fds:
        bpm.flush_all_pages(fd)
    for (fd, page_no), buf in mock.items():
        assert tmp_dm.read_page(fd, page_no, PAGE_SIZE) == buf

    for _ in range(rounds):
        fd = rng.choice(fds)
        page_no = rng.randrange(num_pages)
        page = bpm.fetch_page(PageId(fd, page_no))
        assert bytes(page.data) == mock[(fd, page_no)]
        buf = rng.randbytes(PAGE_SIZE)
        page.data[:] = buf
        mock[(fd, page_no)] = buf
        bpm.unpin_page(page.page_id, True)
        if rng.randrange(10) == 0:
            assert bpm.flush_page(page.page_id)
            assert tmp_dm.read_page(fd, page_no, PAGE_SIZE) == buf
        if rng.randrange(100) == 0:
            bpm.flush_all_pages(fd)

    for (fd, page_no), buf in mock.items():
        page = bpm.fetch_page(PageId(fd, page_no))
        assert bytes(page.data) == buf
        bpm.unpin_page(PageId(fd, page_no), False)

    for fd in fds:
        bpm.flush_all_pages(fd)
    for (fd, page_no), buf in mock.items():
        assert tmp_dm.read_page(fd, page_no, PAGE_SIZE) == buf
    return len(mock)


def test_storage_all_in_memory(env):
    dm, _ = env
    assert _storage_run(dm, num_files=4, num_pages=16, pool_size=64, rounds=500, seed=1) == 64


def test_storage_with_eviction(env):
    dm, _ = env
    assert _storage_run(dm, num_files=3, num_pages=20, pool_size=8, rounds=400, seed=2) == 60


def test_lru_eviction_order(env):
    dm, fd = env
    bpm = BufferPoolManager(3, dm)
    pages = [bpm.new_page(fd) for _ in range(3)]
    for page in pages:
        page.data[:1] = bytes([page.page_id.page_no + 1])
    for no in (1, 0, 2):
        assert bpm.unpin_page(PageId(fd, no), True)
    new = bpm.new_page(fd)
    assert new.page_id.page_no == 3
    assert bpm.flush_page(PageId(fd, 1)) is False
    assert bpm.flush_page(PageId(fd, 0)) is True
    assert dm.read_page(fd, 1, PAGE_SIZE)[0] == 2


def test_fetch_pins_cached_page_against_eviction(env):
    dm, fd = env
    bpm = BufferPoolManager(2, dm)
    p0 = bpm.new_page(fd)
    p1 = bpm.new_page(fd)
    bpm.unpin_page(p0.page_id, True)
    bpm.unpin_page(p1.page_id, True)
    again = bpm.fetch_page(PageId(fd, 0))
    assert again is p0
    new = bpm.new_page(fd)
    assert new is p1
    assert bpm.new_page(fd) is None


def test_fetch_missing_page_raises_and_frees_frame(env):
    dm, fd = env
    bpm = BufferPoolManager(1, dm)
    with pytest.raises(UnixError):
        bpm.fetch_page(PageId(fd, 5))
    assert bpm.new_page(fd) is not None


def test_unpin_flush_delete_unknown(env):
    dm, fd = env
    bpm = BufferPoolManager(4, dm)
    unknown = PageId(fd, 42)
    assert bpm.unpin_page(unknown, False) is False
    assert bpm.flush_page(unknown) is False
    assert bpm.delete_page(unknown) is False


def test_delete_pinned_page_fails(env):
    dm, fd = env
    bpm = BufferPoolManager(1, dm)
    page = bpm.new_page(fd)
    assert bpm.delete_page(page.page_id) is False
    assert bpm.unpin_page(page.page_id, False)
    assert bpm.delete_page(page.page_id) is True
    assert bpm.flush_page(page.page_id) is False
    assert bpm.new_page(fd) is not None
    assert bpm.new_page(fd) is None


def test_mark_dirty():
    page = Page()
    assert page.is_dirty is False
    BufferPoolManager.mark_dirty(page)
    assert page.is_dirty is True


def test_new_page_is_zeroed(env):
    dm, fd = env
    bpm = BufferPoolManager(1, dm)
    page = bpm.new_page(fd)
    page.data[:4] = b"abcd"
    bpm.unpin_page(page.page_id, True)
    second = bpm.new_page(fd)
    assert second.page_id.page_no == 1
    assert bytes(second.data) == bytes(PAGE_SIZE)
    assert dm.read_page(fd, 0, PAGE_SIZE)[:4] == b"abcd"