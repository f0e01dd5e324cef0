import os
from pathlib import Path

# ================== Config ==================
APP_NAME = "MultiDiff"
APP_VERSION = "0.1"
READ_CHUNK = 1024 * 1024  # 1MB
DIFF_SIZE_WARNING = 512 * 1024  # ask before diffing pairs bigger than this

# status bar timeouts, ms
STATUS_SHORT = 2000
STATUS_LONG = 15000
STATUS_INFINITE = 0


def to_long_path(p: str | Path) -> str:
    r"""Return a path string with Windows long-path prefixes when needed."""
    path_str = str(p)
    if os.name != "nt":
        return path_str
    path_str = os.path.abspath(path_str)
    if path_str.startswith("\\\\?\\"):
        return path_str
    if path_str.startswith("\\\\"):
        return "\\\\?\\UNC\\" + path_str[2:]
    return "\\\\?\\" + path_str


def human_size(n: int) -> str:
    x = float(n)
    for u in ("B","KB","MB","GB","TB"):
        if x < 1024 or u == "TB":
            return f"{x:.1f} {u}" if u != "B" else f"{int(x)} {u}"
        x /= 1024.0


def iter_files(folder: str | Path):
    """Yield every regular file below folder, hidden ones included.

    Entries of each directory are visited in name order, files first, so
    the result does not depend on the filesystem's listing order.
    """
    stack = [Path(folder)]
    while stack:
        current = stack.pop()
        try:
            entries = sorted(current.iterdir(), key=lambda p: p.name)
        except OSError:
            continue
        subdirs = []
        for path in entries:
            if path.is_dir() and not path.is_symlink():
                subdirs.append(path)
            elif path.is_file():
                yield str(path)
        stack.extend(reversed(subdirs))
