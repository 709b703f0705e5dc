"""Discovery of photo files within a collection."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, List

from pydantic import BaseModel

from photo_organizer.index.models import NamingConfig

from .errors import FileAccessError
from .naming import normalize_extension


class LivePhoto(BaseModel):
    """A photo observed on disk, identified by its collection-relative path."""

    relative_path: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.relative_path).name

    @property
    def parent(self) -> str:
        parent = PurePosixPath(self.relative_path).parent.as_posix()
        return "" if parent == "." else parent


def _is_hidden(path: Path) -> bool:
    return any(part.startswith(".") for part in path.parts if part not in (".", ".."))


def to_index_key(path: Path) -> str:
    """Return a relative path normalized to forward slashes."""
    return path.as_posix().replace("\\", "/")


class CollectionScanner:
    """Walk a collection root and yield files with a configured photo extension."""

    def __init__(self, naming_config: NamingConfig, *, include_hidden: bool = False) -> None:
        self.extensions = {
            normalize_extension(extension)
            for extensions in naming_config.file_types.values()
            for extension in extensions
        }
        self.include_hidden = include_hidden

    def scan(self, root: Path) -> List[LivePhoto]:
        """Return all photos below root, sorted by relative path.

        Raises:
            FileAccessError: If the directory tree cannot be traversed.
        """
        photos = [LivePhoto(relative_path=to_index_key(path)) for path in self._iter_photos(root)]
        photos.sort(key=lambda photo: photo.relative_path)
        return photos

    def _iter_photos(self, root: Path) -> Iterator[Path]:
        for directory, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            current = Path(directory)
            relative_dir = current.relative_to(root)
            if not self.include_hidden:
                dirnames[:] = [name for name in dirnames if not name.startswith(".")]
            for filename in filenames:
                relative = relative_dir / filename
                if not self.include_hidden and _is_hidden(relative):
                    continue
                if not (current / filename).is_file():
                    continue
                if normalize_extension(Path(filename).suffix) in self.extensions:
                    yield relative


def _raise_walk_error(exc: OSError) -> None:
    raise FileAccessError(Path(exc.filename or "."), f"could not traverse directory ({exc})")


def photos_in_subdir(
    photos: Iterable[LivePhoto],
    subdir: str,
    recursive: bool,
) -> List[LivePhoto]:
    """Filter photos to those located in subdir (or below it when recursive).

    Args:
        photos: Photos of the whole collection.
        subdir: Collection-relative directory; empty for the root.
        recursive: Whether photos in nested directories are included.

    Returns:
        List[LivePhoto]: Matching photos in their original order.
    """
    prefix = f"{subdir.rstrip('/')}/" if subdir else ""
    selected: List[LivePhoto] = []
    for photo in photos:
        if recursive:
            if photo.relative_path.startswith(prefix):
                selected.append(photo)
        elif photo.parent == subdir.rstrip("/"):
            selected.append(photo)
    return selected


__all__ = ["CollectionScanner", "LivePhoto", "photos_in_subdir", "to_index_key"]
