import logging
import sys
from contextlib import contextmanager

from PySide6.QtCore import (
    QAbstractTableModel,
    QByteArray,
    QItemSelectionModel,
    QModelIndex,
    QSortFilterProxyModel,
    QUrl,
    Qt,
    Signal,
)
from PySide6.QtGui import QAction, QBrush, QColor, QDesktopServices, QKeySequence, QPainter, QPalette, QPixmap
from PySide6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QTableView,
    QVBoxLayout,
    QWidget,
)

import file_ops
from catalog import COLUMN_TITLES, Column, FileCatalog, column_text, compare_records, normalize_rows
from collector import Answer, Collector
from diff_tool import run_diff
from navigator import DuplicateNavigator
from settings import HEADER_STATE, WINDOW_GEOMETRY, WINDOW_STATE, Settings
from utils import (
    APP_NAME,
    APP_VERSION,
    DIFF_SIZE_WARNING,
    STATUS_INFINITE,
    STATUS_LONG,
    STATUS_SHORT,
    human_size,
)

log = logging.getLogger(__name__)


@contextmanager
def busy(*widgets):
    """Disable widgets and show a busy cursor for the duration of the block."""
    backup = [w.isEnabled() for w in widgets]
    for w in widgets:
        w.setEnabled(False)
    QApplication.setOverrideCursor(Qt.CursorShape.BusyCursor)
    QApplication.processEvents()
    try:
        yield
    finally:
        QApplication.restoreOverrideCursor()
        for w, enabled in zip(widgets, backup):
            w.setEnabled(enabled)
        QApplication.processEvents()


def swatch(color, size: int = 16) -> QPixmap:
    """Colored square with a 1px black border; None draws a crossed box."""
    pix = QPixmap(size, size)
    pix.fill(Qt.GlobalColor.transparent)
    painter = QPainter(pix)
    if color is None:
        painter.setBrush(QBrush(Qt.GlobalColor.black, Qt.BrushStyle.DiagCrossPattern))
    else:
        painter.setBrush(QColor(color.name()))
    painter.setPen(Qt.GlobalColor.black)
    painter.drawRect(pix.rect().adjusted(0, 0, -1, -1))
    painter.end()
    return pix


# -------------------- Models --------------------
class FileTableModel(QAbstractTableModel):
    def __init__(self, catalog: FileCatalog, parent=None):
        super().__init__(parent)
        self.catalog = catalog
        self._pixmaps = {}

    def rowCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else self.catalog.row_count()

    def columnCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(Column)

    def headerData(self, section, orientation, role=Qt.ItemDataRole.DisplayRole):
        if orientation != Qt.Orientation.Horizontal or role != Qt.ItemDataRole.DisplayRole:
            return None
        return COLUMN_TITLES.get(Column(section)) if 0 <= section < len(Column) else None

    def data(self, index, role=Qt.ItemDataRole.DisplayRole):
        if not index.isValid() or index.row() >= self.catalog.row_count():
            return None
        r = self.catalog.get(index.row())
        column = Column(index.column())
        if role == Qt.ItemDataRole.DisplayRole:
            return column_text(column, r)
        if role == Qt.ItemDataRole.DecorationRole and column == Column.NAME:
            return self._swatch(self.catalog.color(index.row()))
        if role == Qt.ItemDataRole.ToolTipRole:
            if column == Column.HASH:
                return r.fingerprint.hex() if r.fingerprint else "Unable to read this file"
            return r.path
        return None

    def _swatch(self, color):
        if color not in self._pixmaps:
            self._pixmaps[color] = swatch(color)
        return self._pixmaps[color]

    def record(self, row: int):
        return self.catalog.get(row)

    def add(self, records) -> int:
        self.beginResetModel()
        try:
            return self.catalog.append(records)
        finally:
            self._pixmaps.clear()
            self.endResetModel()

    def remove(self, rows):
        self.beginResetModel()
        try:
            self.catalog.remove_rows(normalize_rows(rows))
        finally:
            self.endResetModel()


class FileSortProxy(QSortFilterProxyModel):
    def lessThan(self, left, right):
        src = self.sourceModel()
        a, b = src.record(left.row()), src.record(right.row())
        return compare_records(Column(left.column()), a, b) < 0


class HeaderWatcher:
    """Third click in a row on the same header section turns sorting off."""
    def __init__(self):
        self.clicked = [-1, -1, -1]

    def third_click_in_a_row(self, column: int) -> bool:
        self.clicked = [column] + self.clicked[:2]
        if column < 0:
            return False
        return self.clicked[0] == self.clicked[1] == self.clicked[2]


# -------------------- Widgets --------------------
class FileList(QTableView):
    dropped = Signal(list)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAcceptDrops(True)
        self.setDragDropMode(QAbstractItemView.DragDropMode.DropOnly)
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.horizontalHeader().setStretchLastSection(True)
        self.verticalHeader().setVisible(False)
        self._palette = self.palette()

    @staticmethod
    def acceptable(mime) -> bool:
        return mime.hasUrls() and bool(mime.urls()) and all(u.isLocalFile() for u in mime.urls())

    def highlight(self, on: bool = True):
        if not on:
            self.setPalette(self._palette)
            return
        p = QPalette(self._palette)
        p.setColor(QPalette.ColorRole.Window, p.color(QPalette.ColorRole.Highlight))
        p.setColor(QPalette.ColorRole.Base, p.color(QPalette.ColorRole.Highlight).lighter(220))
        self.setPalette(p)

    def dragEnterEvent(self, e):
        if not self.acceptable(e.mimeData()):
            e.ignore()
            return
        self.highlight()
        e.acceptProposedAction()

    def dragMoveEvent(self, e):
        e.acceptProposedAction()

    def dragLeaveEvent(self, e):
        self.highlight(False)
        e.accept()

    def dropEvent(self, e):
        self.highlight(False)
        mime = e.mimeData()
        if not self.acceptable(mime):
            e.ignore()
            return
        e.acceptProposedAction()
        self.dropped.emit([u.toLocalFile() for u in mime.urls()])


class SettingsDialog(QDialog):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        layout = QVBoxLayout(self)
        form = QFormLayout()
        layout.addLayout(form)
        self.diff_command_edit = QLineEdit()
        self.diff_command_edit.setPlaceholderText("e.g. meld")
        form.addRow("Side-by-side diff command:", self.diff_command_edit)
        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def diff_command(self) -> str:
        return self.diff_command_edit.text().strip()

    def set_diff_command(self, command: str):
        self.diff_command_edit.setText(command)


# -------------------- Main Window --------------------
class App(QMainWindow):
    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__()
        self.settings = settings if settings is not None else Settings()
        self.setWindowTitle("Diff over multiple files")
        self.resize(1000, 600)

        self.catalog = FileCatalog()
        self.navigator = DuplicateNavigator(self.catalog)
        self.model = FileTableModel(self.catalog, self)
        self.proxy = FileSortProxy(self)
        self.proxy.setSourceModel(self.model)
        self.proxy.setFilterKeyColumn(Column.NAME)
        self.proxy.setFilterCaseSensitivity(Qt.CaseSensitivity.CaseInsensitive)
        self.header_watcher = HeaderWatcher()

        # -------------------- Layout --------------------
        central = QWidget(self)
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        filter_layout = QHBoxLayout()
        layout.addLayout(filter_layout)
        filter_layout.addWidget(QLabel("Search:"))
        self.search_box = QLineEdit()
        filter_layout.addWidget(self.search_box)
        self.search_box.textChanged.connect(self.proxy.setFilterFixedString)

        self.table = FileList(self)
        self.table.setModel(self.proxy)
        self.table.setSortingEnabled(True)
        self.table.sortByColumn(-1, Qt.SortOrder.AscendingOrder)
        layout.addWidget(self.table)
        self.table.dropped.connect(self.add_paths)
        self.table.doubleClicked.connect(self.open_selected)
        self.table.horizontalHeader().sortIndicatorChanged.connect(self._on_sort_indicator)
        self.table.selectionModel().selectionChanged.connect(self._on_selection_change)

        self._setup_actions()
        self._load_settings()
        self._on_selection_change()
        self.set_status("Drag'n'drop files or directories here", STATUS_INFINITE)

    def _setup_actions(self):
        def action(text, slot, shortcut=None):
            a = QAction(text, self)
            if shortcut:
                a.setShortcut(QKeySequence(shortcut))
            a.triggered.connect(slot)
            return a

        self.action_add_files = action("Add files…", self.add_files, "Ctrl+O")
        self.action_add_directory = action("Add directory…", self.add_directory)
        self.action_settings = action("Settings…", self.edit_settings)
        self.action_quit = action("Quit", self.close, "Ctrl+Q")
        self.action_open = action("Open", self.open_selected, "Return")
        self.action_remove = action("Remove from list", self.remove_selected, "Delete")
        self.action_delete = action("Delete file(s)…", self.delete_selected_files, "Shift+Delete")
        self.action_diff = action("Diff", self.diff_selected, "Ctrl+D")
        self.action_duplicates = action("Show duplicates", self.show_next_duplicates, "F3")
        self.action_about = action("About", self.about)
        self.action_about_qt = action("About Qt", lambda: QApplication.aboutQt())

        menu = self.menuBar().addMenu("File")
        for a in (self.action_add_files, self.action_add_directory, self.action_settings):
            menu.addAction(a)
        menu.addSeparator()
        menu.addAction(self.action_quit)
        menu = self.menuBar().addMenu("Edit")
        for a in (self.action_open, self.action_diff, self.action_duplicates, self.action_remove, self.action_delete):
            menu.addAction(a)
        menu = self.menuBar().addMenu("Help")
        menu.addAction(self.action_about)
        menu.addAction(self.action_about_qt)

        self.table.setContextMenuPolicy(Qt.ContextMenuPolicy.ActionsContextMenu)
        for a in (self.action_open, self.action_remove, self.action_diff):
            self.table.addAction(a)

    # -------------------- Helpers --------------------
    def set_status(self, text: str, timeout: int = STATUS_SHORT):
        self.statusBar().showMessage(text, timeout)
        QApplication.processEvents()

    def selected_rows(self) -> list[int]:
        """Selected rows in catalog order terms, in selection order."""
        rows = self.table.selectionModel().selectedRows()
        return [self.proxy.mapToSource(i).row() for i in rows]

    def _on_selection_change(self, *args):
        enabled = bool(self.table.selectionModel().selectedRows())
        for a in (self.action_open, self.action_remove, self.action_delete, self.action_diff):
            a.setEnabled(enabled)

    def _on_sort_indicator(self, column, order):
        if self.header_watcher.third_click_in_a_row(column):
            self.table.sortByColumn(-1, Qt.SortOrder.AscendingOrder)

    def _load_settings(self):
        def restore(key, fn):
            if self.settings.contains(key):
                fn(QByteArray.fromBase64(self.settings.value(key).encode("ascii")))

        restore(WINDOW_GEOMETRY, self.restoreGeometry)
        restore(WINDOW_STATE, self.restoreState)
        restore(HEADER_STATE, self.table.horizontalHeader().restoreState)

    def _store_settings(self):
        def store(key, data):
            self.settings.set_value(key, bytes(data.toBase64()).decode("ascii"))

        store(WINDOW_GEOMETRY, self.saveGeometry())
        store(WINDOW_STATE, self.saveState())
        store(HEADER_STATE, self.table.horizontalHeader().saveState())
        self.settings.save()

    def closeEvent(self, e):
        self._store_settings()
        super().closeEvent(e)

    # -------------------- Collecting --------------------
    def _confirm_expand(self, path: str) -> Answer:
        buttons = (
            QMessageBox.StandardButton.YesToAll
            | QMessageBox.StandardButton.Yes
            | QMessageBox.StandardButton.No
            | QMessageBox.StandardButton.Cancel
        )
        reply = QMessageBox.question(
            self,
            "",
            f"'{path}' is a directory.\nDo you want to add all files from this directory?",
            buttons,
        )
        return {
            QMessageBox.StandardButton.YesToAll: Answer.YES_TO_ALL,
            QMessageBox.StandardButton.Yes: Answer.YES,
            QMessageBox.StandardButton.No: Answer.NO,
        }.get(reply, Answer.CANCEL)

    def add_paths(self, paths: list[str]):
        collector = Collector(confirm_expand=self._confirm_expand, ui_progress=self.set_status, ui_log=log.debug)
        with busy(self.centralWidget(), self.menuBar()):
            result = collector.collect(paths)
            if result.records:
                unique = self.model.add(result.records)
                self.set_status(f"There are {unique}/{self.catalog.row_count()} unique file(s)", STATUS_INFINITE)
            else:
                self.statusBar().clearMessage()
        if result.warnings:
            QMessageBox.warning(self, "", "\n".join(result.warnings))
        return result

    def add_files(self):
        paths, _ = QFileDialog.getOpenFileNames(self, "Add files")
        if paths:
            self.add_paths(paths)

    def add_directory(self):
        p = QFileDialog.getExistingDirectory(self, "Add directory")
        if p:
            self.add_paths([p])

    # -------------------- Actions --------------------
    def edit_settings(self) -> bool:
        dialog = SettingsDialog(self)
        dialog.set_diff_command(self.settings.diff_command)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return False
        self.settings.diff_command = dialog.diff_command()
        self.settings.save()
        return True

    def remove_selected(self):
        rows = self.selected_rows()
        if rows:
            self.model.remove(rows)
        self.statusBar().clearMessage()

    def delete_selected_files(self):
        rows = self.selected_rows()
        if not rows:
            return
        confirm = QMessageBox.warning(
            self,
            "Remove files",
            f"Remove {len(rows)} file(s) from disk?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if confirm != QMessageBox.StandardButton.Yes:
            return
        removed, error = file_ops.delete_files(self.catalog.paths(rows))
        if error:
            QMessageBox.critical(self, "Remove files", error)
        self.model.remove([rows[i] for i in removed])
        self.set_status(f"Deleted {len(removed)} file(s).")

    def diff_selected(self):
        rows = self.selected_rows()
        if len(rows) < 2:
            self.set_status("Nothing selected")
            return
        command = self.settings.diff_command
        if not command:
            self.set_status("Please set side-by-side diff command", STATUS_LONG)
            if not self.edit_settings():
                return
            command = self.settings.diff_command
        f1, f2 = self.catalog.get(rows[0]), self.catalog.get(rows[1])
        total = f1.size + f2.size
        if total > DIFF_SIZE_WARNING:
            response = QMessageBox.warning(
                self,
                "",
                f"Files are too big ({human_size(total)})! Show anyway?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            )
            if response != QMessageBox.StandardButton.Yes:
                return
        error = run_diff(command, f1.path, f2.path)
        if error:
            QMessageBox.warning(self, "", error)

    def open_selected(self, *args):
        rows = self.selected_rows()
        if not rows:
            self.set_status("Nothing selected")
            return
        QDesktopServices.openUrl(QUrl.fromLocalFile(self.catalog.get(rows[0]).path))

    def show_next_duplicates(self):
        current = self.table.currentIndex()
        row = self.proxy.mapToSource(current).row() if current.isValid() and self.table.selectionModel().isSelected(current) else -1
        result = self.navigator.select_next(row, accept=lambda r: self.proxy.filterAcceptsRow(r, QModelIndex()))
        sel = self.table.selectionModel()
        sel.clearSelection()
        for r in result.rows:
            idx = self.proxy.mapFromSource(self.model.index(r, 0))
            if idx.isValid():
                sel.select(idx, QItemSelectionModel.SelectionFlag.Select | QItemSelectionModel.SelectionFlag.Rows)
        if result.found:
            anchor = self.proxy.mapFromSource(self.model.index(result.current, 0))
            sel.setCurrentIndex(anchor, QItemSelectionModel.SelectionFlag.NoUpdate)
            self.table.scrollTo(anchor)
        else:
            sel.setCurrentIndex(QModelIndex(), QItemSelectionModel.SelectionFlag.NoUpdate)
        self.set_status(result.message)
        return result

    def about(self):
        QMessageBox.about(self, APP_NAME, f"{APP_NAME} {APP_VERSION}\nDiff over multiple files. Drag'n'drop files or directories here.")


def main():  # pragma: no cover - UI entry point
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    win = App(Settings())
    win.show()
    app.exec()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
