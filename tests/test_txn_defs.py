import pytest

from rmdb.defs import Rid
from rmdb.txn_defs import (
    AbortReason,
    LockDataId,
    LockDataType,
    TransactionAbortException,
    WriteRecord,
    WType,
)


def test_table_lock_key_is_fd():
    lock = LockDataId.table(7)
    assert lock.key() == 7
    assert lock.type == LockDataType.TABLE
    assert lock.rid == Rid(-1, -1)


def test_record_lock_key_sets_sign_bit_and_slot():
    lock = LockDataId.record(3, Rid(2, 5))
    key = lock.key()
    assert key < 0
    assert key & 0xFFFF == 5
    assert -(1 << 63) <= key < (1 << 63)


def test_record_locks_distinguish_rids():
    a = LockDataId.record(3, Rid(2, 5))
    b = LockDataId.record(3, Rid(2, 6))
    c = LockDataId.record(4, Rid(2, 5))
    assert len({a.key(), b.key(), c.key()}) == 3


def test_equality_and_hash_in_set():
    a = LockDataId.record(1, Rid(0, 1))
    b = LockDataId.record(1, Rid(0, 1))
    assert a == b
    assert len({a, b, LockDataId.table(1)}) == 2


def test_table_and_record_lock_differ():
    assert (LockDataId.table(1) == LockDataId.record(1, Rid(-1, -1))) is False


def test_write_record_insert_has_no_record():
    rec = WriteRecord(WType.INSERT_TUPLE, "t", Rid(1, 2))
    assert rec.record is None
    assert rec.tab_name == "t"
    upd = WriteRecord(WType.UPDATE_TUPLE, "t", Rid(1, 2), b"abc")
    assert upd.record == b"abc"
    assert upd.wtype == WType.UPDATE_TUPLE


@pytest.mark.parametrize(
    "reason, expected",
    [
        (
            AbortReason.LOCK_ON_SHIRINKING,
            "Transaction 4 aborted because it cannot request locks on SHRINKING phase\n",
        ),
        (
            AbortReason.UPGRADE_CONFLICT,
            "Transaction 4 aborted because another transaction is waiting for upgrading\n",
        ),
        (AbortReason.DEADLOCK_PREVENTION, "Transaction 4 aborted for deadlock prevention\n"),
    ],
)
def test_abort_info(reason, expected):
    exc = TransactionAbortException(4, reason)
    assert exc.info() == expected
    assert exc.txn_id == 4
    assert exc.abort_reason == reason


def test_abort_exception_is_raisable():
    exc = TransactionAbortException(9, AbortReason.DEADLOCK_PREVENTION)
    assert isinstance(exc, Exception)
    assert "9" in str(exc)
    assert exc.info() == "Transaction 9 aborted for deadlock prevention\n"