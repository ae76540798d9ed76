"""Transactions and the undo-log structures used for multi-version reads."""

from __future__ import annotations

import copy
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, List, Optional, Set

from .defs import INVALID_LSN, INVALID_TS, INVALID_TXN_ID
from .txn_defs import IsolationLevel, LockDataId, TransactionState, WriteRecord


@dataclass(frozen=True)
class UndoLink:
    """Points to the previous version of a tuple in some transaction's undo logs."""

    prev_txn: int = INVALID_TXN_ID
    prev_log_idx: int = 0

    def is_valid(self) -> bool:
        return self.prev_txn != INVALID_TXN_ID


@dataclass
class UndoLog:
    """A previous version of a tuple, holding only the fields that changed."""

    is_deleted: bool = False
    modified_fields: List[bool] = field(default_factory=list)
    tuple_values: List[Any] = field(default_factory=list)
    tuple_record: Optional[Any] = None
    ts: int = INVALID_TS
    prev_version: UndoLink = field(default_factory=UndoLink)


class Transaction:
    """State of one transaction: its writes, locks, touched index pages and undo logs."""

    def __init__(
        self,
        txn_id: int,
        isolation_level: IsolationLevel = IsolationLevel.SERIALIZABLE,
    ) -> None:
        self.txn_id = txn_id
        self.isolation_level = isolation_level
        self.state = TransactionState.DEFAULT
        self.txn_mode = False
        self.thread_id = threading.get_ident()
        self.prev_lsn = INVALID_LSN
        self.start_ts = 0
        self.read_ts = 0
        self.commit_ts = INVALID_TS
        self.write_set: Deque[WriteRecord] = deque()
        self.lock_set: Set[LockDataId] = set()
        self.index_latch_page_set: Deque[Any] = deque()
        self.index_deleted_page_set: Deque[Any] = deque()
        self._undo_logs: List[UndoLog] = []
        self._latch = threading.Lock()

    def append_write_record(self, write_record: WriteRecord) -> None:
        self.write_set.append(write_record)

    def append_index_deleted_page(self, page: Any) -> None:
        self.index_deleted_page_set.append(page)

    def append_index_latch_page(self, page: Any) -> None:
        self.index_latch_page_set.append(page)

    def modify_undo_log(self, log_idx: int, new_log: UndoLog) -> None:
        """Replace an existing undo log in place."""
        with self._latch:
            if not 0 <= log_idx < len(self._undo_logs):
                raise IndexError(f"undo log index out of range: {log_idx}")
            self._undo_logs[log_idx] = new_log

    def append_undo_log(self, log: UndoLog) -> UndoLink:
        """Store an undo log and return a link to it."""
        with self._latch:
            self._undo_logs.append(log)
            return UndoLink(self.txn_id, len(self._undo_logs) - 1)

    def get_undo_log(self, log_id: int) -> UndoLog:
        """Return a copy of the undo log at ``log_id``."""
        with self._latch:
            if not 0 <= log_id < len(self._undo_logs):
                raise IndexError(f"undo log index out of range: {log_id}")
            return copy.deepcopy(self._undo_logs[log_id])

    def undo_log_num(self) -> int:
        with self._latch:
            return len(self._undo_logs)