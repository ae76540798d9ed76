"""Transaction states, write records, lock identifiers and abort exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional

from .defs import Rid

_MASK64 = (1 << 64) - 1
_SIGN64 = 1 << 63


class TransactionState(Enum):
    """Lifecycle state of a transaction."""

    DEFAULT = 0
    GROWING = 1
    SHRINKING = 2
    COMMITTED = 3
    ABORTED = 4


class IsolationLevel(Enum):
    """Isolation levels; the system runs at SERIALIZABLE by default."""

    READ_UNCOMMITTED = 0
    REPEATABLE_READ = 1
    READ_COMMITTED = 2
    SERIALIZABLE = 3


class WType(IntEnum):
    """Kind of write performed by a transaction."""

    INSERT_TUPLE = 0
    DELETE_TUPLE = 1
    UPDATE_TUPLE = 2


@dataclass
class WriteRecord:
    """A write made by a transaction, kept so it can be rolled back.

    Inserts carry only the rid; deletes and updates also carry the old record.
    """

    wtype: WType
    tab_name: str
    rid: Rid
    record: Optional[Any] = field(default=None)


class LockDataType(IntEnum):
    """Granularity of a lock: a whole table or a single record."""

    TABLE = 0
    RECORD = 1


def _to_int64(value: int) -> int:
    value &= _MASK64
    return value - (1 << 64) if value & _SIGN64 else value


@dataclass(frozen=True)
class LockDataId:
    """Identifies the object a lock is held on."""

    fd: int
    rid: Rid
    type: LockDataType

    @classmethod
    def table(cls, fd: int) -> "LockDataId":
        """Identifier of a table-level lock."""
        return cls(fd, Rid(-1, -1), LockDataType.TABLE)

    @classmethod
    def record(cls, fd: int, rid: Rid) -> "LockDataId":
        """Identifier of a record-level lock."""
        return cls(fd, rid, LockDataType.RECORD)

    def key(self) -> int:
        """Pack the identifier into a signed 64-bit integer."""
        if self.type == LockDataType.TABLE:
            return self.fd
        packed = (
            (int(self.type) << 63)
            | (self.fd << 31)
            | (self.rid.page_no << 16)
            | self.rid.slot_no
        )
        return _to_int64(packed)

    def __hash__(self) -> int:
        return hash(self.key())


class AbortReason(IntEnum):
    """Why a transaction had to be aborted."""

    LOCK_ON_SHIRINKING = 0
    UPGRADE_CONFLICT = 1
    DEADLOCK_PREVENTION = 2


class TransactionAbortException(Exception):
    """Raised when a transaction must be rolled back."""

    def __init__(self, txn_id: int, abort_reason: AbortReason) -> None:
        self.txn_id = txn_id
        self.abort_reason = abort_reason
        super().__init__(self.info())

    def info(self) -> str:
        """Readable description of the abort."""
        if self.abort_reason == AbortReason.LOCK_ON_SHIRINKING:
            return (
                f"Transaction {self.txn_id} aborted because it cannot request locks "
                "on SHRINKING phase\n"
            )
        if self.abort_reason == AbortReason.UPGRADE_CONFLICT:
            return (
                f"Transaction {self.txn_id} aborted because another transaction "
                "is waiting for upgrading\n"
            )
        if self.abort_reason == AbortReason.DEADLOCK_PREVENTION:
            return f"Transaction {self.txn_id} aborted for deadlock prevention\n"
        return "Transaction aborted\n"