# rmdb

The lower layers of a small relational database engine, usable as a library.

## What is in it

- `rmdb.disk_manager.DiskManager` creates, opens, closes and removes page
  files and reads and writes fixed-size pages of 4096 bytes
  (`write_page`, `read_page`). It hands out page numbers per file
  (`allocate_page`, `get_fd2pageno`, `set_fd2pageno`) and appends to and
  reads from a log file named `db.log` in the current directory
  (`write_log`, `read_log`).
- `rmdb.buffer_pool.BufferPoolManager` caches pages in a fixed number of
  frames. `new_page(fd)` allocates a zeroed, pinned page; `fetch_page`
  pins a page, reading it from disk if needed; `unpin_page` releases a pin
  and can mark the page dirty. Dirty pages are written back when their frame
  is reused, and the least recently unpinned frame is evicted first. When
  every frame is pinned, `new_page` and `fetch_page` return `None`.
  `flush_page`, `flush_all_pages` and `delete_page` complete the interface.
- `rmdb.page` defines `PageId` (file descriptor and page number) and `Page`
  (a 4096-byte `bytearray` in `data`, with `page_id`, `is_dirty`,
  `pin_count` and a `page_lsn` property stored in the first four bytes).
- `rmdb.sm_meta` holds catalog metadata: `DbMeta`, `TabMeta`, `ColMeta` and
  `IndexMeta`. `DbMeta.dumps()` and `DbMeta.loads()` convert it to and from
  the plain-text `db.meta` format.
- `rmdb.sm_manager.SmManager` creates a database directory holding an empty
  `db.meta` and `db.log` (`create_db`), removes it (`drop_db`), writes the
  catalog to `db.meta` in the current directory (`flush_meta`), lists tables
  (`show_tables`, which also appends them to `output.txt`) and describes a
  table's columns (`desc_table`). `ColDef` describes a column to be created.
- `rmdb.record_printer.RecordPrinter` formats rows as a fixed-width text
  table into a `Context`, whose `output()` returns the text. Output that
  would overflow the context's buffer length is dropped and the table is
  marked as cut off, which `print_record_count` reports with `... ...`.
- `rmdb.txn_defs` defines `TransactionState`, `IsolationLevel`, `WType`,
  `WriteRecord`, `LockDataId` (with `table`, `record` and `key`),
  `AbortReason` and `TransactionAbortException`.
- `rmdb.transaction` defines `Transaction`, which keeps a transaction's write
  set, lock set, index page sets and undo logs, together with `UndoLink` and
  `UndoLog`.
- `rmdb.defs` holds `Rid`, `ColType`, `coltype2str`, the abstract `RecScan`
  and the configuration constants such as `PAGE_SIZE`.

Failures raise subclasses of `rmdb.errors.RMDBError`, whose messages start
with `Error: `.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Example

```python
from rmdb.disk_manager import DiskManager
from rmdb.buffer_pool import BufferPoolManager
from rmdb.page import PageId

disk = DiskManager()
disk.create_file("data.tbl")
fd = disk.open_file("data.tbl")

pool = BufferPoolManager(10, disk)
page = pool.new_page(fd)
page.data[:5] = b"Hello"
pool.unpin_page(page.page_id, True)
pool.flush_all_pages(fd)

again = pool.fetch_page(PageId(fd, 0))
assert bytes(again.data[:5]) == b"Hello"
pool.unpin_page(again.page_id, False)
disk.close_file(fd)
```

Catalog text round trip:

```python
from rmdb.defs import ColType
from rmdb.sm_meta import ColMeta, DbMeta, TabMeta

db = DbMeta("shop")
db.set_tab_meta("items", TabMeta("items", [ColMeta("items", "id", ColType.INT, 4, 0)]))
assert DbMeta.loads(db.dumps()).get_table("items").get_col("id").length == 4
```

## What it does not do

This package is not a complete database. It has no record files or slotted
pages, no indexes, no SQL parser, planner or executors, no lock manager or
transaction manager that begins, commits or aborts transactions, no log
recovery, and no network server or command-line program. `SmManager` keeps
the catalog and writes it out, but it does not open or close databases or
create tables, indexes or their files.