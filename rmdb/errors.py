"""Error types raised by the storage, record, index and system layers."""

from __future__ import annotations

import os
from enum import IntEnum
from typing import Iterable, Optional


class RMDBError(Exception):
    """Base class of all database errors; the message always starts with ``Error: ``."""

    def __init__(self, msg: str = "") -> None:
        self.message = "Error: " + msg
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class InternalError(RMDBError):
    """An unexpected internal state was reached."""


class UnixError(RMDBError):
    """An operating-system call failed."""

    def __init__(self, errno_code: Optional[int] = None) -> None:
        self.errno = errno_code
        text = os.strerror(errno_code) if errno_code is not None else "Unknown error"
        super().__init__(text)

    @classmethod
    def from_os_error(cls, err: OSError) -> "UnixError":
        return cls(err.errno)


class FileNotOpenError(RMDBError):
    def __init__(self, fd: int) -> None:
        self.fd = fd
        super().__init__(f"Invalid file descriptor: {fd}")


class FileNotClosedError(RMDBError):
    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"File is opened: {filename}")


class FileAlreadyExistsError(RMDBError):
    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"File already exists: {filename}")


class DbFileNotFoundError(RMDBError):
    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"File not found: {filename}")


class RecordNotFoundError(RMDBError):
    def __init__(self, page_no: int, slot_no: int) -> None:
        self.page_no = page_no
        self.slot_no = slot_no
        super().__init__(f"Record not found: ({page_no},{slot_no})")


class InvalidRecordSizeError(RMDBError):
    def __init__(self, record_size: int) -> None:
        self.record_size = record_size
        super().__init__(f"Invalid record size: {record_size}")


class InvalidColLengthError(RMDBError):
    def __init__(self, col_len: int) -> None:
        self.col_len = col_len
        super().__init__(f"Invalid column length: {col_len}")


class IndexEntryNotFoundError(RMDBError):
    def __init__(self) -> None:
        super().__init__("Index entry not found")


class DatabaseNotFoundError(RMDBError):
    def __init__(self, db_name: str) -> None:
        self.db_name = db_name
        super().__init__(f"Database not found: {db_name}")


class DatabaseExistsError(RMDBError):
    def __init__(self, db_name: str) -> None:
        self.db_name = db_name
        super().__init__(f"Database already exists: {db_name}")


class TableNotFoundError(RMDBError):
    def __init__(self, tab_name: str) -> None:
        self.tab_name = tab_name
        super().__init__(f"Table not found: {tab_name}")


class TableExistsError(RMDBError):
    def __init__(self, tab_name: str) -> None:
        self.tab_name = tab_name
        super().__init__(f"Table already exists: {tab_name}")


class ColumnNotFoundError(RMDBError):
    def __init__(self, col_name: str) -> None:
        self.col_name = col_name
        super().__init__(f"Column not found: {col_name}")


class IndexNotFoundError(RMDBError):
    def __init__(self, tab_name: str, col_names: Iterable[str]) -> None:
        self.tab_name = tab_name
        self.col_names = list(col_names)
        super().__init__(f"Index not found: {tab_name}.({', '.join(self.col_names)})")


class IndexExistsError(RMDBError):
    def __init__(self, tab_name: str, col_names: Iterable[str]) -> None:
        self.tab_name = tab_name
        self.col_names = list(col_names)
        super().__init__(f"Index already exists: {tab_name}.({', '.join(self.col_names)})")


class InvalidValueCountError(RMDBError):
    def __init__(self) -> None:
        super().__init__("Invalid value count")


class StringOverflowError(RMDBError):
    def __init__(self) -> None:
        super().__init__("String is too long")


class IncompatibleTypeError(RMDBError):
    def __init__(self, lhs: str, rhs: str) -> None:
        self.lhs = lhs
        self.rhs = rhs
        super().__init__(f"Incompatible type error: lhs {lhs}, rhs {rhs}")


class AmbiguousColumnError(RMDBError):
    def __init__(self, col_name: str) -> None:
        self.col_name = col_name
        super().__init__(f"Ambiguous column: {col_name}")


class PageNotExistError(RMDBError):
    def __init__(self, table_name: str, page_no: int) -> None:
        self.table_name = table_name
        self.page_no = page_no
        super().__init__(f"Page {page_no} in table {table_name}not exits")


class ExceptionType(IntEnum):
    """Kinds of runtime exception raised by the execution layer."""

    INVALID = 0
    OUT_OF_RANGE = 1
    CONVERSION = 2
    UNKNOWN_TYPE = 3
    DECIMAL = 4
    MISMATCH_TYPE = 5
    DIVIDE_BY_ZERO = 6
    INCOMPATIBLE_TYPE = 8
    OUT_OF_MEMORY = 9
    NOT_IMPLEMENTED = 11
    EXECUTION = 12


_EXCEPTION_TYPE_NAMES = {
    ExceptionType.INVALID: "Invalid",
    ExceptionType.OUT_OF_RANGE: "Out of Range",
    ExceptionType.CONVERSION: "Conversion",
    ExceptionType.UNKNOWN_TYPE: "Unknown Type",
    ExceptionType.DECIMAL: "Decimal",
    ExceptionType.MISMATCH_TYPE: "Mismatch Type",
    ExceptionType.DIVIDE_BY_ZERO: "Divide by Zero",
    ExceptionType.INCOMPATIBLE_TYPE: "Incompatible type",
    ExceptionType.OUT_OF_MEMORY: "Out of Memory",
    ExceptionType.NOT_IMPLEMENTED: "Not implemented",
    ExceptionType.EXECUTION: "Execution",
}


def exception_type_to_string(exception_type) -> str:
    """Return a readable name for an exception type; unknown values give ``Unknown``."""
    try:
        return _EXCEPTION_TYPE_NAMES[ExceptionType(exception_type)]
    except (ValueError, KeyError):
        return "Unknown"


class DbException(RuntimeError):
    """A runtime exception carrying an :class:`ExceptionType`."""

    def __init__(self, message: str, exception_type: ExceptionType = ExceptionType.INVALID) -> None:
        super().__init__(message)
        self.message = message
        self.exception_type = ExceptionType(exception_type)


class NotImplementedFeatureError(DbException):
    def __init__(self, message: str) -> None:
        super().__init__(message, ExceptionType.NOT_IMPLEMENTED)


class ExecutionError(DbException):
    def __init__(self, message: str) -> None:
        super().__init__(message, ExceptionType.EXECUTION)