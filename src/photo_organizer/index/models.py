"""Index data models persisted at the root of every photo collection."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_NAMING_SCHEME = "%Y%m%d_%H%M%S_%{type}.%{fileextension}"


def _default_file_types() -> Dict[str, List[str]]:
    return {"IMG": ["jpg", "jpeg", "png", "heic"], "VID": ["mp4", "mov"]}


class NamingConfig(BaseModel):
    """Naming scheme and file type mapping of a collection.

    Attributes:
        naming_scheme: Template combining strftime directives with the
            ``%{type}`` and ``%{fileextension}`` placeholders.
        file_types: Mapping of type tags (e.g. ``IMG``) to file extensions.
    """

    model_config = ConfigDict(extra="forbid")

    naming_scheme: str = DEFAULT_NAMING_SCHEME
    file_types: Dict[str, List[str]] = Field(default_factory=_default_file_types)


class IndexEntry(BaseModel):
    """A tracked photo.

    Attributes:
        path: Collection-relative POSIX path; unique within the index.
        original_filename: Filename recorded when the photo was first indexed.
        content_hash: Hex digest of the file contents at the last (re)hash.
    """

    model_config = ConfigDict(extra="forbid")

    path: str
    original_filename: str
    content_hash: str

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        normalized = value.replace("\\", "/")
        if not normalized or normalized.startswith("/"):
            raise ValueError(f"index paths must be relative: {value!r}")
        return normalized

    @property
    def filename(self) -> str:
        return PurePosixPath(self.path).name


class PhotoIndex(BaseModel):
    """Full persisted state of one collection."""

    model_config = ConfigDict(extra="forbid")

    naming_config: NamingConfig = Field(default_factory=NamingConfig)
    photos: List[IndexEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_paths(self) -> "PhotoIndex":
        seen: set[str] = set()
        for entry in self.photos:
            if entry.path in seen:
                raise ValueError(f"duplicate index path: {entry.path}")
            seen.add(entry.path)
        return self

    def entry_map(self) -> Dict[str, IndexEntry]:
        """Return entries keyed by path."""
        return {entry.path: entry for entry in self.photos}

    def paths(self) -> set[str]:
        return {entry.path for entry in self.photos}

    def sort(self) -> None:
        """Order entries by path, as written to disk."""
        self.photos.sort(key=lambda entry: entry.path)


__all__ = ["DEFAULT_NAMING_SCHEME", "NamingConfig", "IndexEntry", "PhotoIndex"]
