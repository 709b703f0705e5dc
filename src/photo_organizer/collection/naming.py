"""Canonical filename resolution from metadata and the naming scheme."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from photo_organizer.index.models import NamingConfig

from .errors import MetadataUnavailableError, NamingConfigError
from .metadata import MetadataExtractor, PhotoMetadata

TYPE_PLACEHOLDER = "%{type}"
EXTENSION_PLACEHOLDER = "%{fileextension}"
EXTENSION_ALIASES = {"jpeg": "jpg"}

_UNRESOLVED_PLACEHOLDER = re.compile(r"%\{[^}]*\}")


def normalize_extension(extension: str) -> str:
    """Return the extension lower-cased and without a leading dot."""
    return extension.lstrip(".").lower()


def resolve_type_tag(extension: str, naming_config: NamingConfig) -> str:
    """Return the single type tag configured for the given extension.

    Raises:
        NamingConfigError: If no tag or more than one tag lists the extension.
    """
    normalized = normalize_extension(extension)
    if not normalized:
        raise NamingConfigError("File has no extension; cannot determine its type.")
    tags = sorted(
        tag
        for tag, extensions in naming_config.file_types.items()
        if normalized in {normalize_extension(value) for value in extensions}
    )
    if not tags:
        raise NamingConfigError(f"No file type configured for extension '{normalized}'.")
    if len(tags) > 1:
        raise NamingConfigError(
            f"Extension '{normalized}' is ambiguous between file types: {', '.join(tags)}."
        )
    return tags[0]


def canonical_name(
    metadata: PhotoMetadata,
    extension: str,
    naming_config: NamingConfig,
) -> str:
    """Return the filename a photo should have according to the naming scheme.

    The ``%{type}`` and ``%{fileextension}`` placeholders are substituted first;
    every remaining directive is a ``strftime`` directive applied to the local
    capture timestamp.

    Args:
        metadata: Metadata extracted from the photo.
        extension: The photo's current file extension (with or without dot).
        naming_config: Naming scheme and type mapping of the collection.

    Returns:
        str: The canonical filename.

    Raises:
        MetadataUnavailableError: If the capture time is unknown.
        NamingConfigError: If the extension cannot be mapped to exactly one type
            or the scheme contains an unknown placeholder.
    """
    if metadata.timestamp_local is None:
        raise MetadataUnavailableError("Cannot name a file with unknown capture time.")

    tag = resolve_type_tag(extension, naming_config)
    normalized = normalize_extension(extension)
    normalized = EXTENSION_ALIASES.get(normalized, normalized)

    template = naming_config.naming_scheme
    template = template.replace(TYPE_PLACEHOLDER, _escape(tag))
    template = template.replace(EXTENSION_PLACEHOLDER, _escape(normalized))

    unresolved = _UNRESOLVED_PLACEHOLDER.search(template)
    if unresolved is not None:
        raise NamingConfigError(f"Unknown placeholder {unresolved.group(0)} in naming scheme.")

    name = metadata.timestamp_local.strftime(template)
    if not name or "/" in name:
        raise NamingConfigError(f"Naming scheme produced an invalid filename: {name!r}")
    return name


def canonical_name_for_file(
    path: Path,
    naming_config: NamingConfig,
    extractor: Optional[MetadataExtractor] = None,
) -> str:
    """Extract metadata from path and resolve its canonical name."""
    extractor = extractor or MetadataExtractor()
    metadata = extractor.extract(path)
    return canonical_name(metadata, path.suffix, naming_config)


def _escape(value: str) -> str:
    return value.replace("%", "%%")


__all__ = [
    "canonical_name",
    "canonical_name_for_file",
    "normalize_extension",
    "resolve_type_tag",
    "EXTENSION_ALIASES",
    "TYPE_PLACEHOLDER",
    "EXTENSION_PLACEHOLDER",
]
