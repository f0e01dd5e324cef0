from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from catalog import Column, FileCatalog, FileRecord, RemovalIndexConflict, column_text, compare_records, normalize_rows
from colors import ORDINAL_COLORS, ColorAssigner
from navigator import DuplicateNavigator


def rec(name, fp, size=1, modified=0.0):
    return FileRecord(f"/data/{name}", size, modified, fp)


def catalog_of(*fps):
    return FileCatalog([rec(f"f{i}", fp) for i, fp in enumerate(fps)])


def test_color_assigner_ordinal_then_random():
    colors = ColorAssigner(seed=1)
    fps = [bytes([i]) * 20 for i in range(len(ORDINAL_COLORS) + 30)]
    assigned = [colors.color_for(fp) for fp in fps]
    assert assigned[:len(ORDINAL_COLORS)] == ORDINAL_COLORS
    assert len(set(assigned)) == len(fps)
    # idempotent within one instance
    assert colors.color_for(fps[3]) == assigned[3]
    assert colors.color_id_for(fps[40]) == 40
    assert len(colors) == len(fps)


def test_color_assigner_rejects_unresolved():
    with pytest.raises(ValueError):
        ColorAssigner().color_id_for(None)


def test_color_order_follows_scan_order():
    first = ColorAssigner()
    second = ColorAssigner()
    assert first.color_for(b"a") == second.color_for(b"b")
    assert first.color_for(b"a").name() == "#ffffff"


def test_unresolved_records_never_share_color():
    catalog = catalog_of(None, b"x", None, b"x")
    assert catalog.get(0).color_id is None
    assert catalog.get(2).color_id is None
    assert catalog.get(1).color_id == 0
    assert catalog.color(0) is None
    assert catalog.unique_count() == 1


def test_remove_rows_round_trip():
    catalog = catalog_of(*(bytes([i]) for i in range(6)))
    original = [catalog.get(i) for i in range(6)]
    rows = normalize_rows({4, 1, 2})
    assert rows == [4, 2, 1]
    catalog.remove_rows(rows)
    assert catalog.row_count() == 3
    assert list(catalog) == [original[0], original[3], original[5]]


def test_remove_rows_requires_descending_unique():
    catalog = catalog_of(b"a", b"b", b"c", b"d", b"e")
    with pytest.raises(RemovalIndexConflict):
        catalog.remove_rows([4, 1, 2])
    with pytest.raises(RemovalIndexConflict):
        catalog.remove_rows([2, 2])
    with pytest.raises(IndexError):
        catalog.remove_rows([5, 0])
    assert catalog.row_count() == 5


def test_normalize_deduplicates():
    assert normalize_rows([1, 3, 1, 0, 3]) == [3, 1, 0]


def test_get_out_of_range():
    with pytest.raises(IndexError):
        FileCatalog().get(0)


def test_navigator_steps_through_groups():
    #                a     b     a     c     b     c
    catalog = catalog_of(b"a", b"b", b"a", b"c", b"b", b"c")
    nav = DuplicateNavigator(catalog)

    first = nav.select_next(-1)
    assert first.rows == [0, 2]
    second = nav.select_next(first.current)
    assert second.rows == [1, 4]
    third = nav.select_next(second.current)
    assert third.rows == [3, 5]
    done = nav.select_next(third.current)
    assert done.rows == [] and done.current == -1
    assert done.message == "No duplicates found after row 4"
    # a miss clears the selection so the next call restarts at the top
    again = nav.select_next(done.current)
    assert again.rows == [0, 2]


def test_navigator_group_includes_all_matches_below():
    catalog = catalog_of(b"x", b"y", b"x", b"x")
    nav = DuplicateNavigator(catalog)
    assert nav.select_next(-1).rows == [0, 2, 3]
    # resuming after the anchor finds the rest of the same group
    assert nav.select_next(0).rows == [2, 3]


def test_navigator_last_row_restarts_at_top():
    catalog = catalog_of(b"x", b"x", b"y")
    nav = DuplicateNavigator(catalog)
    assert nav.select_next(2).rows == [0, 1]
    assert nav.search_start == 0
    assert nav.select_next(99).rows == [0, 1]


def test_navigator_without_duplicates_is_idempotent():
    catalog = catalog_of(b"x", None, None, b"y")
    nav = DuplicateNavigator(catalog)
    for _ in range(3):
        result = nav.select_next(-1)
        assert not result.found
        assert result.rows == []
    assert DuplicateNavigator(FileCatalog()).select_next(-1).message == "No duplicates found after row 0"


def test_compare_records_by_column():
    a = FileRecord("/b/Alpha.txt", 10, 5.0, b"\x02")
    b = FileRecord("/a/beta.txt", 2, 9.0, None)
    assert compare_records(Column.NAME, a, b) < 0
    assert compare_records(Column.DIRECTORY, a, b) > 0
    assert compare_records(Column.SIZE, a, b) > 0
    assert compare_records(Column.MODIFIED, a, b) < 0
    assert compare_records(Column.HASH, a, b) > 0
    assert compare_records(Column.NAME, a, a) == 0


def test_column_text():
    r = FileRecord("/data/file.bin", 2048, 0.0, bytes(range(20)))
    assert column_text(Column.NAME, r) == "file.bin"
    assert column_text(Column.DIRECTORY, r) == "/data"
    assert column_text(Column.SIZE, r) == "2.0 KB"
    assert column_text(Column.MODIFIED, r) == ""
    assert column_text(Column.HASH, r).startswith("0001020304")
    assert column_text(Column.HASH, FileRecord("/x", 0, 0.0)) == "?"


def test_navigator_skips_rows_the_view_hides():
    catalog = catalog_of(b"x", b"x", b"y", b"y")
    nav = DuplicateNavigator(catalog)
    shown = lambda r: r != 0

    first = nav.select_next(-1, accept=shown)
    assert first.rows == [2, 3]
    assert nav.select_next(first.current, accept=shown).rows == []
    assert nav.select_next(-1, accept=shown).rows == [2, 3]
    # hidden rows are not pulled into a visible anchor's group
    assert nav.select_next(-1, accept=lambda r: r != 1).rows == [2, 3]
