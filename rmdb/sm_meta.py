"""Catalog metadata for columns, indexes, tables and databases, with text serialization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence

from .defs import ColType
from .errors import ColumnNotFoundError, IndexNotFoundError, TableNotFoundError


def _take(tokens: Iterator[str]) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise ValueError("metadata text ends too early") from None


def _take_int(tokens: Iterator[str]) -> int:
    token = _take(tokens)
    try:
        return int(token)
    except ValueError:
        raise ValueError(f"expected an integer in metadata, got {token!r}") from None


def _take_bool(tokens: Iterator[str]) -> bool:
    token = _take(tokens)
    if token not in ("0", "1"):
        raise ValueError(f"expected 0 or 1 in metadata, got {token!r}")
    return token == "1"


@dataclass
class ColMeta:
    """A column of a table."""

    tab_name: str
    name: str
    col_type: ColType
    length: int
    offset: int
    index: bool = False

    def __post_init__(self) -> None:
        self.col_type = ColType(self.col_type)

    def dumps(self) -> str:
        return (
            f"{self.tab_name} {self.name} {int(self.col_type)} "
            f"{self.length} {self.offset} {int(self.index)}"
        )

    @classmethod
    def _read(cls, tokens: Iterator[str]) -> "ColMeta":
        tab_name = _take(tokens)
        name = _take(tokens)
        col_type = ColType(_take_int(tokens))
        length = _take_int(tokens)
        offset = _take_int(tokens)
        index = _take_bool(tokens)
        return cls(tab_name, name, col_type, length, offset, index)


@dataclass
class IndexMeta:
    """An index over one or more columns of a table."""

    tab_name: str
    col_tot_len: int
    col_num: int
    cols: List[ColMeta] = field(default_factory=list)

    def dumps(self) -> str:
        return "\n".join(
            [f"{self.tab_name} {self.col_tot_len} {self.col_num}"] + [col.dumps() for col in self.cols]
        )

    @classmethod
    def _read(cls, tokens: Iterator[str]) -> "IndexMeta":
        tab_name = _take(tokens)
        col_tot_len = _take_int(tokens)
        col_num = _take_int(tokens)
        cols = [ColMeta._read(tokens) for _ in range(col_num)]
        return cls(tab_name, col_tot_len, col_num, cols)


@dataclass
class TabMeta:
    """A table: its columns and the indexes built on it."""

    name: str = ""
    cols: List[ColMeta] = field(default_factory=list)
    indexes: List[IndexMeta] = field(default_factory=list)

    def is_col(self, col_name: str) -> bool:
        return any(col.name == col_name for col in self.cols)

    def _find_index(self, col_names: Sequence[str]):
        names = list(col_names)
        for index in self.indexes:
            if index.col_num == len(names) and [col.name for col in index.cols[: len(names)]] == names:
                return index
        return None

    def is_index(self, col_names: Sequence[str]) -> bool:
        """True if an index exists over exactly these columns, in this order."""
        return self._find_index(col_names) is not None

    def get_index_meta(self, col_names: Sequence[str]) -> IndexMeta:
        index = self._find_index(col_names)
        if index is None:
            raise IndexNotFoundError(self.name, col_names)
        return index

    def get_col(self, col_name: str) -> ColMeta:
        for col in self.cols:
            if col.name == col_name:
                return col
        raise ColumnNotFoundError(col_name)

    def dumps(self) -> str:
        lines = [self.name, str(len(self.cols))]
        lines.extend(col.dumps() for col in self.cols)
        lines.append(str(len(self.indexes)))
        lines.extend(index.dumps() for index in self.indexes)
        return "\n".join(lines) + "\n"

    @classmethod
    def _read(cls, tokens: Iterator[str]) -> "TabMeta":
        name = _take(tokens)
        cols = [ColMeta._read(tokens) for _ in range(_take_int(tokens))]
        indexes = [IndexMeta._read(tokens) for _ in range(_take_int(tokens))]
        return cls(name, cols, indexes)


@dataclass
class DbMeta:
    """A database: its name and its tables, keyed by table name."""

    name: str = ""
    tabs: Dict[str, TabMeta] = field(default_factory=dict)

    def is_table(self, tab_name: str) -> bool:
        return tab_name in self.tabs

    def set_tab_meta(self, tab_name: str, meta: TabMeta) -> None:
        self.tabs[tab_name] = meta

    def get_table(self, tab_name: str) -> TabMeta:
        try:
            return self.tabs[tab_name]
        except KeyError:
            raise TableNotFoundError(tab_name) from None

    def dumps(self) -> str:
        """Serialize to the catalog text format; tables appear in name order."""
        parts = [f"{self.name}\n{len(self.tabs)}\n"]
        parts.extend(self.tabs[name].dumps() + "\n" for name in sorted(self.tabs))
        return "".join(parts)

    @classmethod
    def loads(cls, text: str) -> "DbMeta":
        tokens = iter(text.split())
        name = _take(tokens)
        db = cls(name)
        for _ in range(_take_int(tokens)):
            tab = TabMeta._read(tokens)
            db.tabs[tab.name] = tab
        return db