"""Page identifiers and in-memory pages."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .defs import INVALID_PAGE_ID, PAGE_SIZE

_LSN = struct.Struct("<i")


@dataclass(frozen=True)
class PageId:
    """Identifies a page by its open file descriptor and page number."""

    fd: int
    page_no: int = INVALID_PAGE_ID

    def key(self) -> int:
        """Pack the id into a single integer."""
        return (self.fd << 16) | self.page_no

    def __lt__(self, other: "PageId") -> bool:
        if not isinstance(other, PageId):
            return NotImplemented
        if self.fd < other.fd:
            return True
        return self.page_no < other.page_no

    def __str__(self) -> str:
        return f"{{fd: {self.fd} page_no: {self.page_no}}}"


@dataclass(eq=False)
class Page:
    """A page-sized block of bytes together with its buffer-pool state."""

    OFFSET_PAGE_START = 0
    OFFSET_LSN = 0
    OFFSET_PAGE_HDR = 4

    page_id: PageId = field(default_factory=lambda: PageId(-1))
    data: bytearray = field(default_factory=lambda: bytearray(PAGE_SIZE), repr=False)
    is_dirty: bool = False
    pin_count: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)
        if len(self.data) != PAGE_SIZE:
            raise ValueError(f"page data must be {PAGE_SIZE} bytes, got {len(self.data)}")

    def reset_memory(self) -> None:
        """Zero the page contents in place."""
        self.data[:] = bytes(PAGE_SIZE)

    @property
    def page_lsn(self) -> int:
        """Log sequence number stored in the first bytes of the page."""
        return _LSN.unpack_from(self.data, self.OFFSET_LSN)[0]

    @page_lsn.setter
    def page_lsn(self, lsn: int) -> None:
        if not -(1 << 31) <= lsn < (1 << 31):
            raise ValueError(f"lsn out of range: {lsn}")
        _LSN.pack_into(self.data, self.OFFSET_LSN, lsn)