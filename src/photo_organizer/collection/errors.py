"""Errors raised while hashing, inspecting, naming, and renaming photos."""

from __future__ import annotations

from pathlib import Path


class CollectionError(Exception):
    """Base exception for per-file collection operations."""


class FileAccessError(CollectionError):
    """Raised when a file cannot be opened or read."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class HashError(CollectionError):
    """Raised when computing a content digest fails part-way through."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class MetadataUnavailableError(CollectionError):
    """Raised when a photo lacks the metadata needed for an operation."""


class NamingConfigError(CollectionError):
    """Raised when the naming configuration cannot name a file."""


class TargetExistsError(CollectionError):
    """Raised when a rename destination is already occupied."""

    def __init__(self, source: Path, destination: Path) -> None:
        super().__init__(f"Cannot rename {source}: target {destination} already exists")
        self.source = source
        self.destination = destination


__all__ = [
    "CollectionError",
    "FileAccessError",
    "HashError",
    "MetadataUnavailableError",
    "NamingConfigError",
    "TargetExistsError",
]
