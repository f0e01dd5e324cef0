import hashlib
from dataclasses import dataclass

from utils import to_long_path, READ_CHUNK

CANNOT_OPEN = "cannot open"
CANNOT_READ = "cannot read"


@dataclass(frozen=True)
class ReadError:
    path: str
    reason: str

    def message(self) -> str:
        if self.reason == CANNOT_OPEN:
            return f"Unable to open '{self.path}'"
        return f"Cannot read '{self.path}'"


@dataclass(frozen=True)
class HashResult:
    """Outcome of fingerprinting one file: a digest or a ReadError, never both."""
    path: str
    digest: bytes | None = None
    error: ReadError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fingerprint(path: str) -> HashResult:
    """Stream the file through SHA-1 and return its 20-byte digest."""
    try:
        f = open(to_long_path(path), "rb", buffering=READ_CHUNK)
    except OSError:
        return HashResult(path, error=ReadError(path, CANNOT_OPEN))
    h = hashlib.sha1()
    with f:
        try:
            while True:
                b = f.read(READ_CHUNK)
                if not b:
                    break
                h.update(b)
        except OSError:
            return HashResult(path, error=ReadError(path, CANNOT_READ))
    return HashResult(path, digest=h.digest())
