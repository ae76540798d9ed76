"""System manager: database directories, catalog persistence and DDL output."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .defs import DB_META_NAME, LOG_FILE_NAME, ColType, coltype2str
from .disk_manager import DiskManager
from .errors import DatabaseExistsError, DatabaseNotFoundError, UnixError
from .record_printer import Context, RecordPrinter
from .sm_meta import DbMeta

OUTPUT_FILE_NAME = "output.txt"


@dataclass
class ColDef:
    """A column as given in a CREATE TABLE statement."""

    name: str
    col_type: ColType
    length: int


class SmManager:
    """Manages the catalog of the open database and runs metadata statements."""

    def __init__(
        self,
        disk_manager: DiskManager,
        buffer_pool_manager: Any = None,
        rm_manager: Any = None,
        ix_manager: Any = None,
    ) -> None:
        self.disk_manager = disk_manager
        self.buffer_pool_manager = buffer_pool_manager
        self.rm_manager = rm_manager
        self.ix_manager = ix_manager
        self.db = DbMeta()
        self.fhs: Dict[str, Any] = {}
        self.ihs: Dict[str, Any] = {}

    def is_dir(self, db_name: str) -> bool:
        return os.path.isdir(db_name)

    def create_db(self, db_name: str) -> None:
        """Create the database directory with an empty catalog and log file."""
        if self.is_dir(db_name):
            raise DatabaseExistsError(db_name)
        try:
            os.mkdir(db_name)
            with open(os.path.join(db_name, DB_META_NAME), "w", encoding="utf-8") as meta:
                meta.write(DbMeta(db_name).dumps())
        except OSError as err:
            raise UnixError.from_os_error(err) from err
        self.disk_manager.create_file(os.path.join(db_name, LOG_FILE_NAME))

    def drop_db(self, db_name: str) -> None:
        """Remove the database directory and everything in it."""
        if not self.is_dir(db_name):
            raise DatabaseNotFoundError(db_name)
        try:
            shutil.rmtree(db_name)
        except OSError as err:
            raise UnixError.from_os_error(err) from err

    def flush_meta(self) -> None:
        """Overwrite the catalog file in the current directory."""
        try:
            with open(DB_META_NAME, "w", encoding="utf-8") as meta:
                meta.write(self.db.dumps())
        except OSError as err:
            raise UnixError.from_os_error(err) from err

    def show_tables(self, context: Optional[Context]) -> None:
        """List the tables to the context and append them to the output file."""
        printer = RecordPrinter(1)
        with open(OUTPUT_FILE_NAME, "a", encoding="utf-8") as outfile:
            outfile.write("| Tables |\n")
            printer.print_separator(context)
            printer.print_record(["Tables"], context)
            printer.print_separator(context)
            for name in sorted(self.db.tabs):
                tab = self.db.tabs[name]
                printer.print_record([tab.name], context)
                outfile.write(f"| {tab.name} |\n")
            printer.print_separator(context)

    def desc_table(self, tab_name: str, context: Optional[Context]) -> None:
        """Describe the columns of a table to the context."""
        tab = self.db.get_table(tab_name)
        captions = ["Field", "Type", "Index"]
        printer = RecordPrinter(len(captions))
        printer.print_separator(context)
        printer.print_record(captions, context)
        printer.print_separator(context)
        for col in tab.cols:
            printer.print_record([col.name, coltype2str(col.col_type), "YES" if col.index else "NO"], context)
        printer.print_separator(context)