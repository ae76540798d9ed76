"""Page-level file I/O, file bookkeeping and write-ahead log access."""

from __future__ import annotations

import errno
import os
import shutil
import threading
from typing import Dict, Optional, Set

from .defs import LOG_FILE_NAME, PAGE_SIZE
from .errors import (
    DbFileNotFoundError,
    FileAlreadyExistsError,
    FileNotOpenError,
    UnixError,
)

_BINARY = getattr(os, "O_BINARY", 0)


class DiskManager:
    """Reads and writes pages of open files and tracks page allocation per file."""

    MAX_FD = 8192

    def __init__(self) -> None:
        self._path2fd: Dict[str, int] = {}
        self._fd2path: Dict[int, str] = {}
        self._fd2pageno: Dict[int, int] = {}
        self._deallocated: Set[int] = set()
        self.log_fd = -1
        self._latch = threading.RLock()

    # ------------------------------------------------------------------ pages

    def write_page(self, fd: int, page_no: int, data, num_bytes: int = PAGE_SIZE) -> None:
        """Write ``num_bytes`` of ``data`` to page ``page_no`` of the file."""
        view = memoryview(data)[:num_bytes]
        if len(view) != num_bytes:
            raise ValueError(f"need {num_bytes} bytes of data, got {len(view)}")
        with self._latch:
            try:
                os.lseek(fd, page_no * PAGE_SIZE, os.SEEK_SET)
                written = os.write(fd, view)
            except OSError as err:
                raise UnixError.from_os_error(err) from err
        if written != num_bytes:
            raise UnixError(errno.EIO)

    def read_page(self, fd: int, page_no: int, num_bytes: int = PAGE_SIZE) -> bytes:
        """Read ``num_bytes`` from the start of page ``page_no``; a short read raises."""
        with self._latch:
            try:
                os.lseek(fd, page_no * PAGE_SIZE, os.SEEK_SET)
                data = os.read(fd, num_bytes)
            except OSError as err:
                raise UnixError.from_os_error(err) from err
        if len(data) != num_bytes:
            raise UnixError(errno.EIO)
        return data

    def allocate_page(self, fd: int) -> int:
        """Hand out the next page number of the file."""
        if not 0 <= fd < self.MAX_FD:
            raise ValueError(f"file descriptor out of range: {fd}")
        with self._latch:
            page_no = self._fd2pageno.get(fd, 0)
            self._fd2pageno[fd] = page_no + 1
            return page_no

    def deallocate_page(self, page_id: int) -> None:
        """Record a page number as released; page numbers are never handed out again."""
        with self._latch:
            self._deallocated.add(page_id)

    # ------------------------------------------------------------ directories

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def create_dir(self, path: str) -> None:
        """Create a directory; an existing one is left as it is."""
        try:
            os.mkdir(path)
        except FileExistsError:
            pass
        except OSError as err:
            raise UnixError.from_os_error(err) from err

    def destroy_dir(self, path: str) -> None:
        """Remove a directory and everything below it."""
        try:
            shutil.rmtree(path)
        except OSError as err:
            raise UnixError.from_os_error(err) from err

    # ------------------------------------------------------------------ files

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def create_file(self, path: str) -> None:
        """Create an empty file; raises if it already exists."""
        if self.is_file(path):
            raise FileAlreadyExistsError(path)
        try:
            with open(path, "xb"):
                pass
        except FileExistsError as err:
            raise FileAlreadyExistsError(path) from err
        except OSError as err:
            raise DbFileNotFoundError(path) from err

    def destroy_file(self, path: str) -> None:
        """Close the file if it is open, then delete it."""
        with self._latch:
            if path in self._path2fd:
                self.close_file(self._path2fd[path])
        if not self.is_file(path):
            raise DbFileNotFoundError(path)
        try:
            os.remove(path)
        except OSError as err:
            raise UnixError.from_os_error(err) from err

    def open_file(self, path: str) -> int:
        """Open a file for reading and writing and return its descriptor."""
        with self._latch:
            if path in self._path2fd:
                return self._path2fd[path]
            if not self.is_file(path):
                raise DbFileNotFoundError(path)
            try:
                fd = os.open(path, os.O_RDWR | _BINARY)
            except OSError as err:
                raise UnixError.from_os_error(err) from err
            self._path2fd[path] = fd
            self._fd2path[fd] = path
            self._fd2pageno[fd] = self.get_file_size(path) // PAGE_SIZE
            return fd

    def close_file(self, fd: int) -> None:
        """Close an open file by descriptor."""
        with self._latch:
            if fd not in self._fd2path:
                raise FileNotOpenError(fd)
            path = self._fd2path[fd]
            try:
                os.close(fd)
            except OSError as err:
                raise UnixError.from_os_error(err) from err
            del self._path2fd[path]
            del self._fd2path[fd]
            if self.log_fd == fd:
                self.log_fd = -1

    def close_file_by_path(self, path: str) -> None:
        """Close an open file by path."""
        with self._latch:
            if path not in self._path2fd:
                raise DbFileNotFoundError(path)
            self.close_file(self._path2fd[path])

    def get_file_size(self, file_name: str) -> int:
        """Size of the file in bytes, or -1 if it cannot be examined."""
        try:
            return os.stat(file_name).st_size
        except OSError:
            return -1

    def get_file_name(self, fd: int) -> str:
        with self._latch:
            if fd not in self._fd2path:
                raise FileNotOpenError(fd)
            return self._fd2path[fd]

    def get_file_fd(self, file_name: str) -> int:
        """Descriptor of the file, opening it if needed."""
        with self._latch:
            if file_name in self._path2fd:
                return self._path2fd[file_name]
            return self.open_file(file_name)

    # -------------------------------------------------------------------- log

    def _ensure_log_open(self) -> None:
        if self.log_fd == -1:
            self.log_fd = self.open_file(LOG_FILE_NAME)

    def read_log(self, size: int, offset: int) -> Optional[bytes]:
        """Read up to ``size`` bytes of the log from ``offset``.

        Returns None when ``offset`` lies past the end of the log.
        """
        with self._latch:
            self._ensure_log_open()
            file_size = self.get_file_size(LOG_FILE_NAME)
            if offset > file_size:
                return None
            size = min(size, file_size - offset)
            if size == 0:
                return b""
            try:
                os.lseek(self.log_fd, offset, os.SEEK_SET)
                data = os.read(self.log_fd, size)
            except OSError as err:
                raise UnixError.from_os_error(err) from err
        if len(data) != size:
            raise UnixError(errno.EIO)
        return data

    def write_log(self, log_data) -> None:
        """Append ``log_data`` to the end of the log."""
        data = bytes(log_data)
        with self._latch:
            self._ensure_log_open()
            try:
                os.lseek(self.log_fd, 0, os.SEEK_END)
                written = os.write(self.log_fd, data)
            except OSError as err:
                raise UnixError.from_os_error(err) from err
        if written != len(data):
            raise UnixError(errno.EIO)

    # ------------------------------------------------------- page allocation

    def set_fd2pageno(self, fd: int, start_page_no: int) -> None:
        """Set the number of pages already allocated in the file."""
        with self._latch:
            self._fd2pageno[fd] = start_page_no

    def get_fd2pageno(self, fd: int) -> int:
        """Number of pages already allocated in the file."""
        with self._latch:
            return self._fd2pageno.get(fd, 0)