from send2trash import send2trash
from utils import to_long_path


def send_to_recycle_bin(path: str) -> None:
    """Move file at path to the OS recycle bin."""
    send2trash(to_long_path(path))


def delete_files(paths: list[str]) -> tuple[list[int], str | None]:
    """Recycle paths in order and return (indices removed, error).

    The same path may appear more than once; later copies count as removed.
    Stops at the first failure.
    """
    removed = []
    done = set()
    for i, path in enumerate(paths):
        if path not in done:
            try:
                send_to_recycle_bin(path)
            except OSError as e:
                return removed, f"Cannot remove '{path}': {e}"
            done.add(path)
        removed.append(i)
    return removed, None
