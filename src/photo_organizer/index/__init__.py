"""Index persistence helpers for photo collections."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Tuple

from pydantic import ValidationError

from .errors import IndexFileError, MissingIndexError
from .models import DEFAULT_NAMING_SCHEME, IndexEntry, NamingConfig, PhotoIndex

LOGGER = logging.getLogger(__name__)

INDEX_FILE_NAME = "photo_organizer_index.json"


class IndexRepository:
    """Read and write the index file stored at a collection root."""

    def __init__(self, file_name: str = INDEX_FILE_NAME) -> None:
        """Initialize the repository with an optional index file name.

        Args:
            file_name: Name of the index file within a collection root.
        """
        self._file_name = file_name

    @property
    def file_name(self) -> str:
        """Return the index file name used for collections."""
        return self._file_name

    def index_path(self, root: Path) -> Path:
        """Return the location of the index file for root."""
        return root / self._file_name

    def load(self, root: Path) -> PhotoIndex:
        """Load the index for the given collection root.

        Args:
            root: Root path of the collection.

        Returns:
            PhotoIndex: Deserialized index.

        Raises:
            MissingIndexError: If no index file is present.
            IndexFileError: If the stored data cannot be parsed or validated.
        """
        path = self.index_path(root)
        if not path.exists():
            raise MissingIndexError(f"No index file found at {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise IndexFileError(f"Invalid index file {path}: {exc}") from exc
        except OSError as exc:
            raise IndexFileError(f"Could not read index file {path}: {exc}") from exc

        try:
            return PhotoIndex.model_validate(data)
        except ValidationError as exc:
            raise IndexFileError(f"Invalid index data in {path}: {exc}") from exc

    def save(self, root: Path, index: PhotoIndex) -> None:
        """Write the whole index for root, entries sorted by path.

        Args:
            root: Root path of the collection.
            index: Index to serialize.
        """
        index.sort()
        payload = index.model_dump(mode="json")
        path = self.index_path(root)
        try:
            path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise IndexFileError(f"Could not write index file {path}: {exc}") from exc

    def initialize(self, root: Path, naming_config: Optional[NamingConfig] = None) -> PhotoIndex:
        """Create an empty index at root.

        Args:
            root: Directory that becomes the collection root.
            naming_config: Naming scheme to record; defaults apply when omitted.

        Returns:
            PhotoIndex: The freshly written index.

        Raises:
            IndexFileError: If an index file already exists at root.
        """
        if self.index_path(root).exists():
            raise IndexFileError(f"An index file already exists in {root}")
        index = PhotoIndex(naming_config=naming_config or NamingConfig())
        self.save(root, index)
        return index

    def find_root(self, start: Path) -> Optional[Tuple[Path, str]]:
        """Locate the collection containing start.

        Args:
            start: Directory somewhere inside a collection.

        Returns:
            Optional[Tuple[Path, str]]: Collection root and the POSIX path of start
                relative to it (empty for the root itself), or None when start
                is not part of a collection.
        """
        start = start.expanduser().resolve()
        for candidate in [start, *start.parents]:
            if self.index_path(candidate).is_file():
                subdir = start.relative_to(candidate).as_posix()
                return candidate, "" if subdir == "." else subdir
        return None

    def is_versioned(self, root: Path) -> bool:
        """Return whether the index file is tracked by a git repository."""
        git = shutil.which("git")
        if git is None:
            return False
        try:
            completed = subprocess.run(
                [git, "ls-files", "--error-unmatch", self._file_name],
                cwd=root,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            LOGGER.debug("Could not run git in %s: %s", root, exc)
            return False
        return completed.returncode == 0


__all__ = [
    "IndexRepository",
    "INDEX_FILE_NAME",
    "DEFAULT_NAMING_SCHEME",
    "IndexEntry",
    "NamingConfig",
    "PhotoIndex",
    "IndexFileError",
    "MissingIndexError",
]
