from dataclasses import dataclass, field

from catalog import FileCatalog


@dataclass
class NavigationResult:
    rows: list[int] = field(default_factory=list)
    current: int = -1
    message: str = ""

    @property
    def found(self) -> bool:
        return len(self.rows) > 1


# ================== Duplicate Navigator ==================
class DuplicateNavigator:
    """
    Step through duplicate groups in catalog order.
    Each call starts right after current_row and returns the first row whose fingerprint reappears further
    down, together with every matching row below it. No wrap-around: a miss clears the selection, so the
    next call starts from row 0 again.
    """
    def __init__(self, catalog: FileCatalog):
        self.catalog = catalog
        self.search_start = 0

    def _start(self, current_row: int) -> int:
        if 0 <= current_row and current_row + 1 < self.catalog.row_count():
            return current_row + 1
        return 0

    def select_next(self, current_row: int = -1, accept=None) -> NavigationResult:
        """Find the next group; accept(row) limits the search to rows the view shows."""
        self.search_start = self._start(current_row)
        records = list(self.catalog)
        shown = [accept is None or accept(r) for r in range(len(records))]
        for anchor in range(self.search_start, len(records)):
            fp = records[anchor].fingerprint
            if fp is None or not shown[anchor]:
                continue
            rows = [anchor] + [r for r in range(anchor + 1, len(records)) if shown[r] and records[r].fingerprint == fp]
            if len(rows) > 1:
                return NavigationResult(rows, anchor, f"Found {len(rows)} duplicate file(s)")
        return NavigationResult([], -1, f"No duplicates found after row {self.search_start}")
