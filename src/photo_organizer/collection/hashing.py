"""Content hashing for collection files."""

from __future__ import annotations

import hashlib
from pathlib import Path

from .errors import FileAccessError, HashError

DEFAULT_CHUNK_SIZE = 1 << 20


class ContentHasher:
    """Compute SHA-256 content digests used to identify files across renames."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def compute(self, path: Path) -> str:
        """Return the hex-encoded SHA-256 digest of the file at path.

        Args:
            path: File to hash.

        Returns:
            str: Lower-case hex digest (64 characters).

        Raises:
            FileAccessError: If the file cannot be opened.
            HashError: If reading the file fails after it was opened.
        """
        try:
            handle = path.open("rb")
        except OSError as exc:
            raise FileAccessError(path, f"could not open for hashing ({exc})") from exc

        digest = hashlib.sha256()
        with handle:
            try:
                for chunk in iter(lambda: handle.read(self.chunk_size), b""):
                    digest.update(chunk)
            except OSError as exc:
                cause = FileAccessError(path, f"read failed ({exc})")
                raise HashError(path, "could not compute content digest") from cause
        return digest.hexdigest()


__all__ = ["ContentHasher", "DEFAULT_CHUNK_SIZE"]
