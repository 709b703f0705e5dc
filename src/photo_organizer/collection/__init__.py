"""Per-file operations on a photo collection: hashing, metadata, naming, scanning."""

from .errors import (
    CollectionError,
    FileAccessError,
    HashError,
    MetadataUnavailableError,
    NamingConfigError,
    TargetExistsError,
)
from .hashing import ContentHasher
from .metadata import MetadataExtractor, PhotoMetadata
from .naming import canonical_name, canonical_name_for_file
from .scanner import CollectionScanner, LivePhoto, photos_in_subdir

__all__ = [
    "CollectionError",
    "FileAccessError",
    "HashError",
    "MetadataUnavailableError",
    "NamingConfigError",
    "TargetExistsError",
    "ContentHasher",
    "MetadataExtractor",
    "PhotoMetadata",
    "canonical_name",
    "canonical_name_for_file",
    "CollectionScanner",
    "LivePhoto",
    "photos_in_subdir",
]
