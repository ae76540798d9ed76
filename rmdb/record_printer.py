"""Execution context and tabular formatting of query results."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from .defs import BUFFER_LENGTH

RECORD_COUNT_LENGTH = 40


class Context:
    """Per-statement state: transaction handles and the result text sent back to a client."""

    def __init__(
        self,
        lock_mgr: Any = None,
        log_mgr: Any = None,
        txn: Any = None,
        buffer_length: int = BUFFER_LENGTH,
    ) -> None:
        self.lock_mgr = lock_mgr
        self.log_mgr = log_mgr
        self.txn = txn
        self.buffer_length = buffer_length
        self.offset = 0
        self.ellipsis = False
        self._chunks: List[str] = []

    def write(self, text: str) -> None:
        """Append text to the result; ``offset`` counts the bytes written so far."""
        self._chunks.append(text)
        self.offset += len(text.encode("utf-8"))

    def output(self) -> str:
        """The result text written so far."""
        return "".join(self._chunks)


def _emit(context: Context, text: str, mark_overflow: bool = True) -> None:
    """Write text if it leaves room for the record count; otherwise flag the output as cut."""
    size = len(text.encode("utf-8"))
    if not context.ellipsis and context.offset + RECORD_COUNT_LENGTH + size < context.buffer_length:
        context.write(text)
    elif mark_overflow:
        context.ellipsis = True


class RecordPrinter:
    """Formats rows as a fixed-width text table into a :class:`Context`."""

    COL_WIDTH = 16

    def __init__(self, num_cols: int) -> None:
        if num_cols <= 0:
            raise ValueError(f"a table needs at least one column, got {num_cols}")
        self.num_cols = num_cols

    def print_separator(self, context: Context) -> None:
        cell = "+" + "-" * (self.COL_WIDTH + 2)
        for _ in range(self.num_cols):
            _emit(context, cell)
        _emit(context, "+\n")

    def print_record(self, rec_str: Iterable[Any], context: Context) -> None:
        values = [str(value) for value in rec_str]
        if len(values) != self.num_cols:
            raise ValueError(f"expected {self.num_cols} values, got {len(values)}")
        width = self.COL_WIDTH
        for col in values:
            if len(col) > width:
                col = col[: width - 3] + "..."
            _emit(context, f"| {col:>{width}} ")
        _emit(context, "|\n", mark_overflow=False)

    @staticmethod
    def print_record_count(num_rec: int, context: Optional[Context]) -> None:
        text = "... ...\n" if context.ellipsis else ""
        context.write(text + f"Total record(s): {num_rec}\n")