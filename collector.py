import enum
import logging
import os
from dataclasses import dataclass, field

from catalog import FileRecord
from colors import Color, ColorAssigner
from hashing import fingerprint
from utils import iter_files, to_long_path, STATUS_INFINITE

log = logging.getLogger(__name__)


class Answer(enum.Enum):
    YES = "yes"
    YES_TO_ALL = "yes_to_all"
    NO = "no"
    CANCEL = "cancel"


# ================== Path Expander ==================
class PathExpander:
    """
    Turn dropped files and directories into a flat list of files.
    Every directory is confirmed through confirm_expand(dir) unless the user already answered YES_TO_ALL
    in this batch; CANCEL stops the whole batch but keeps what was gathered so far.
    """
    def __init__(self, confirm_expand=None):
        self.confirm_expand = confirm_expand or (lambda path: Answer.YES)
        self.warnings: list[str] = []
        self.cancelled = False
        self._yes_to_all = False

    def expand(self, path_refs) -> list[str]:
        self.warnings = []
        self.cancelled = False
        self._yes_to_all = False
        files = []
        for ref in path_refs:
            path = os.path.abspath(str(ref))
            lp = to_long_path(path)
            if os.path.isfile(lp):
                files.append(path)
            elif os.path.isdir(lp):
                files.extend(self._expand_dir(path))
                if self.cancelled:
                    log.debug("expansion cancelled at %s", path)
                    break
            else:
                self.warnings.append(f"Cannot add '{path}'")
        return files

    def _expand_dir(self, path: str) -> list[str]:
        if not self._yes_to_all:
            answer = self.confirm_expand(path)
            if answer == Answer.CANCEL:
                self.cancelled = True
                return []
            if answer == Answer.NO:
                return []
            if answer == Answer.YES_TO_ALL:
                self._yes_to_all = True
        return list(iter_files(path))


@dataclass
class CollectResult:
    """Records of one batch. Their color_id values index into colors; FileCatalog.append recolors them."""
    records: list[FileRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cancelled: bool = False
    colors: list[Color] = field(default_factory=list)


# ================== Collector ==================
class Collector:
    """
    Expand path references, fingerprint every file and build catalog records.
    Files that cannot be read are still returned, with no fingerprint, and reported in warnings.
    """
    def __init__(self, confirm_expand=None, ui_progress=None, ui_log=None):
        self.expander = PathExpander(confirm_expand)
        self.ui_progress = ui_progress or (lambda txt, timeout: None)
        self.ui_log = ui_log or (lambda msg: None)

    def collect(self, path_refs) -> CollectResult:
        result = CollectResult()
        paths = self.expander.expand(path_refs)
        result.warnings.extend(self.expander.warnings)
        result.cancelled = self.expander.cancelled

        colors = ColorAssigner()
        for p in paths:
            self.ui_progress(f"Calculate hash for '{p}'...", STATUS_INFINITE)
            try:
                st = os.stat(to_long_path(p))
                size, modified = st.st_size, st.st_mtime
            except OSError as e:
                log.debug("stat failed for %s: %s", p, e)
                size, modified = 0, 0.0
            h = fingerprint(p)
            if h.ok:
                result.records.append(FileRecord(p, size, modified, h.digest, colors.color_id_for(h.digest)))
                self.ui_log(f"Hashed: {p}")
            else:
                result.records.append(FileRecord(p, size, modified))
                result.warnings.append(h.error.message())
                self.ui_log(f"Failed: {p} ({h.error.reason})")
        result.colors = list(colors.colors)
        return result
