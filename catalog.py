import dataclasses
import enum
import os
from dataclasses import dataclass
from datetime import datetime

from colors import Color, ColorAssigner
from utils import human_size


@dataclass(frozen=True)
class FileRecord:
    path: str
    size: int
    modified: float
    fingerprint: bytes | None = None
    color_id: int | None = None

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)

    @property
    def resolved(self) -> bool:
        return self.fingerprint is not None


class RemovalIndexConflict(ValueError):
    """Rows passed to remove_rows were not unique and strictly descending."""


class Column(enum.IntEnum):
    NAME = 0
    DIRECTORY = 1
    SIZE = 2
    MODIFIED = 3
    HASH = 4


COLUMN_TITLES = {
    Column.NAME: "Name",
    Column.DIRECTORY: "Directory",
    Column.SIZE: "Size",
    Column.MODIFIED: "Last modified",
    Column.HASH: "Hash",
}


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _sort_key(column: Column, r: FileRecord):
    if column == Column.NAME:
        return (r.name.lower(), r.name)
    if column == Column.DIRECTORY:
        return (r.directory.lower(), r.directory)
    if column == Column.SIZE:
        return r.size
    if column == Column.MODIFIED:
        return r.modified
    # unresolved hashes sort first
    return (r.fingerprint is not None, r.fingerprint or b"")


def compare_records(column: Column, a: FileRecord, b: FileRecord) -> int:
    """Order two records by column: negative, zero or positive."""
    return _cmp(_sort_key(column, a), _sort_key(column, b))


def column_text(column: Column, r: FileRecord) -> str:
    if column == Column.NAME:
        return r.name
    if column == Column.DIRECTORY:
        return r.directory
    if column == Column.SIZE:
        return human_size(r.size)
    if column == Column.MODIFIED:
        return datetime.fromtimestamp(r.modified).strftime("%Y-%m-%d %H:%M:%S") if r.modified else ""
    return (r.fingerprint.hex()[:16] + "…") if r.fingerprint else "?"


def normalize_rows(rows) -> list[int]:
    """Deduplicate and sort rows highest first, ready for remove_rows."""
    return sorted(set(rows), reverse=True)


# ================== Catalog ==================
class FileCatalog:
    """
    Ordered table of collected files. Row index is display order; removing rows shifts later rows up.
    Every append recolors the whole catalog so duplicates are found across old and new rows alike.
    """
    def __init__(self, records=None):
        self._rows: list[FileRecord] = []
        self.colors: list[Color] = []
        if records:
            self.append(records)

    def __len__(self):
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    def row_count(self) -> int:
        return len(self._rows)

    def get(self, row: int) -> FileRecord:
        if not 0 <= row < len(self._rows):
            raise IndexError(f"row {row} out of range")
        return self._rows[row]

    def color(self, row: int) -> Color | None:
        color_id = self.get(row).color_id
        return None if color_id is None else self.colors[color_id]

    def paths(self, rows) -> list[str]:
        return [self.get(r).path for r in rows]

    def unique_count(self) -> int:
        return len({r.color_id for r in self._rows if r.resolved})

    def append(self, records) -> int:
        """Add records at the end, recolor everything, return the number of unique fingerprints."""
        self._rows.extend(records)
        self.recolor()
        return self.unique_count()

    def recolor(self):
        assigner = ColorAssigner()
        rows = []
        for r in self._rows:
            color_id = assigner.color_id_for(r.fingerprint) if r.resolved else None
            rows.append(r if r.color_id == color_id else dataclasses.replace(r, color_id=color_id))
        self._rows = rows
        self.colors = list(assigner.colors)

    def remove_rows(self, rows: list[int]):
        """Remove rows given highest first; see normalize_rows."""
        rows = list(rows)
        for prev, cur in zip(rows, rows[1:]):
            if cur >= prev:
                raise RemovalIndexConflict(f"rows must be unique and descending: {rows}")
        if rows and (rows[0] >= len(self._rows) or rows[-1] < 0):
            raise IndexError(f"rows out of range: {rows}")
        for r in rows:
            del self._rows[r]

    def clear(self):
        self._rows = []
        self.colors = []
