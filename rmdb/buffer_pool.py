"""Buffer pool caching disk pages in a fixed number of frames with LRU eviction."""

from __future__ import annotations

import threading
from collections import OrderedDict, deque
from typing import Deque, Dict, List, Optional

from .defs import PAGE_SIZE
from .disk_manager import DiskManager
from .page import Page, PageId


class _LRUReplacer:
    """Tracks unpinned frames; the least recently unpinned one is evicted first."""

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._frames: "OrderedDict[int, None]" = OrderedDict()

    def victim(self) -> Optional[int]:
        if not self._frames:
            return None
        frame_id, _ = self._frames.popitem(last=False)
        return frame_id

    def pin(self, frame_id: int) -> None:
        self._frames.pop(frame_id, None)

    def unpin(self, frame_id: int) -> None:
        if frame_id not in self._frames and len(self._frames) < self._capacity:
            self._frames[frame_id] = None

    def __len__(self) -> int:
        return len(self._frames)


class BufferPoolManager:
    """Keeps up to ``pool_size`` pages in memory, writing dirty pages back on eviction."""

    def __init__(self, pool_size: int, disk_manager: DiskManager) -> None:
        self.pool_size = pool_size
        self.disk_manager = disk_manager
        self._pages: List[Page] = [Page() for _ in range(pool_size)]
        self._page_table: Dict[PageId, int] = {}
        self._free_list: Deque[int] = deque(range(pool_size))
        self._replacer = _LRUReplacer(pool_size)
        self._latch = threading.RLock()

    @staticmethod
    def mark_dirty(page: Page) -> None:
        page.is_dirty = True

    def _find_victim(self) -> Optional[int]:
        if self._free_list:
            return self._free_list.popleft()
        return self._replacer.victim()

    def _update_page(self, page: Page, new_page_id: PageId, frame_id: int) -> None:
        """Write the frame's old page back if dirty and rebind the frame to a new page."""
        if page.is_dirty:
            self.disk_manager.write_page(page.page_id.fd, page.page_id.page_no, page.data, PAGE_SIZE)
        if self._page_table.get(page.page_id) == frame_id:
            del self._page_table[page.page_id]
        self._page_table[new_page_id] = frame_id
        page.page_id = new_page_id
        page.is_dirty = False

    def fetch_page(self, page_id: PageId) -> Optional[Page]:
        """Pin and return the page, reading it from disk if needed; None if no frame is free."""
        with self._latch:
            frame_id = self._page_table.get(page_id)
            if frame_id is not None:
                page = self._pages[frame_id]
                page.pin_count += 1
                self._replacer.pin(frame_id)
                return page

            frame_id = self._find_victim()
            if frame_id is None:
                return None
            page = self._pages[frame_id]
            self._update_page(page, page_id, frame_id)
            try:
                data = self.disk_manager.read_page(page_id.fd, page_id.page_no, PAGE_SIZE)
            except Exception:
                del self._page_table[page_id]
                page.page_id = PageId(-1)
                page.reset_memory()
                page.pin_count = 0
                self._free_list.append(frame_id)
                raise
            page.data[:] = data
            page.pin_count = 1
            return page

    def unpin_page(self, page_id: PageId, is_dirty: bool) -> bool:
        """Drop one pin on a cached page; False if the page is not in the pool."""
        with self._latch:
            frame_id = self._page_table.get(page_id)
            if frame_id is None:
                return False
            page = self._pages[frame_id]
            if is_dirty:
                page.is_dirty = True
            if page.pin_count > 0:
                page.pin_count -= 1
            if page.pin_count == 0:
                self._replacer.unpin(frame_id)
            return True

    def _flush(self, page_id: PageId) -> bool:
        frame_id = self._page_table.get(page_id)
        if frame_id is None:
            return False
        page = self._pages[frame_id]
        self.disk_manager.write_page(page_id.fd, page_id.page_no, page.data, PAGE_SIZE)
        page.is_dirty = False
        return True

    def flush_page(self, page_id: PageId) -> bool:
        """Write a cached page to disk whether or not it is pinned; False if not cached."""
        with self._latch:
            return self._flush(page_id)

    def new_page(self, fd: int) -> Optional[Page]:
        """Allocate a fresh zeroed page in the file, pinned; None if no frame is free."""
        with self._latch:
            frame_id = self._find_victim()
            if frame_id is None:
                return None
            page_id = PageId(fd, self.disk_manager.allocate_page(fd))
            page = self._pages[frame_id]
            self._update_page(page, page_id, frame_id)
            page.reset_memory()
            page.pin_count = 1
            return page

    def delete_page(self, page_id: PageId) -> bool:
        """Evict an unpinned page without writing it; False if absent or pinned."""
        with self._latch:
            frame_id = self._page_table.get(page_id)
            if frame_id is None:
                return False
            page = self._pages[frame_id]
            if page.pin_count > 0:
                return False
            del self._page_table[page_id]
            self._replacer.pin(frame_id)
            page.reset_memory()
            page.page_id = PageId(-1)
            page.is_dirty = False
            self._free_list.append(frame_id)
            return True

    def flush_all_pages(self, fd: int) -> None:
        """Write every cached page of the file to disk."""
        with self._latch:
            for page_id in [pid for pid in self._page_table if pid.fd == fd]:
                self._flush(page_id)