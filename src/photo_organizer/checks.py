"""Read-only consistency checks over an index."""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from photo_organizer.collection.errors import CollectionError, HashError
from photo_organizer.collection.metadata import MetadataExtractor
from photo_organizer.collection.naming import canonical_name_for_file
from photo_organizer.index.models import NamingConfig, PhotoIndex

LOGGER = logging.getLogger(__name__)


class DuplicateGroup(BaseModel):
    """Indexed paths sharing one content hash."""

    content_hash: str
    paths: List[str]


class IntegrityProblem(BaseModel):
    """A file whose content could not be confirmed against its recorded hash."""

    path: str
    kind: Literal["hash_mismatch", "unreadable"]
    recorded_hash: str
    actual_hash: Optional[str] = None
    detail: Optional[str] = None


class NamingIssue(BaseModel):
    """A file whose name does not follow, or cannot be checked against, the scheme."""

    path: str
    kind: Literal["misnamed", "undetermined"]
    expected: Optional[str] = None
    detail: Optional[str] = None


class CheckReport(BaseModel):
    """Combined outcome of all collection checks."""

    duplicates: List[DuplicateGroup] = Field(default_factory=list)
    integrity: List[IntegrityProblem] = Field(default_factory=list)
    naming: List[NamingIssue] = Field(default_factory=list)

    @property
    def problems_found(self) -> bool:
        return bool(self.duplicates or self.integrity or self.naming)


def check_duplicates(index: PhotoIndex) -> List[DuplicateGroup]:
    """Group indexed photos by content hash and return groups with several members."""
    by_hash: Dict[str, List[str]] = defaultdict(list)
    for entry in index.photos:
        by_hash[entry.content_hash].append(entry.path)

    groups = [
        DuplicateGroup(content_hash=content_hash, paths=sorted(paths))
        for content_hash, paths in sorted(by_hash.items())
        if len(paths) > 1
    ]
    for group in groups:
        LOGGER.warning("These files seem to be duplicates (hash: %s):", group.content_hash)
        for path in group.paths:
            LOGGER.warning("  %s", path)
    return groups


def check_integrity(
    root: Path,
    index: PhotoIndex,
    hash_path: Callable[[Path], str],
) -> List[IntegrityProblem]:
    """Re-hash every indexed photo and report drift or unreadable files.

    Args:
        root: Collection root.
        index: Index whose recorded hashes are verified.
        hash_path: Callable hashing an absolute file path.

    Returns:
        List[IntegrityProblem]: One entry per photo that failed verification.
    """
    problems: List[IntegrityProblem] = []
    for entry in index.photos:
        try:
            actual = hash_path(root / entry.path)
        except (CollectionError, OSError) as exc:
            detail = str(exc)
            if isinstance(exc, HashError) and exc.__cause__ is not None:
                detail = f"{exc} ({exc.__cause__})"
            LOGGER.warning("Skipping file %s: could not re-hash the file (%s)", entry.path, detail)
            problems.append(
                IntegrityProblem(
                    path=entry.path,
                    kind="unreadable",
                    recorded_hash=entry.content_hash,
                    detail=detail,
                )
            )
            continue

        if actual != entry.content_hash:
            LOGGER.warning(
                "%s: hash does not match (recorded %s but was %s)",
                entry.path,
                entry.content_hash,
                actual,
            )
            problems.append(
                IntegrityProblem(
                    path=entry.path,
                    kind="hash_mismatch",
                    recorded_hash=entry.content_hash,
                    actual_hash=actual,
                )
            )
    return problems


def check_naming(
    root: Path,
    index: PhotoIndex,
    naming_config: NamingConfig,
    extractor: Optional[MetadataExtractor] = None,
) -> List[NamingIssue]:
    """Compare each indexed photo's filename with its canonical name."""
    extractor = extractor or MetadataExtractor()
    issues: List[NamingIssue] = []
    for entry in index.photos:
        try:
            expected = canonical_name_for_file(root / entry.path, naming_config, extractor)
        except CollectionError as exc:
            LOGGER.warning("Could not determine correct filename for %s: %s", entry.path, exc)
            issues.append(NamingIssue(path=entry.path, kind="undetermined", detail=str(exc)))
            continue

        if expected != entry.filename:
            LOGGER.warning("%s: should be named %s", entry.path, expected)
            issues.append(NamingIssue(path=entry.path, kind="misnamed", expected=expected))
    return issues


def run_checks(
    root: Path,
    index: PhotoIndex,
    hash_path: Callable[[Path], str],
    extractor: Optional[MetadataExtractor] = None,
) -> CheckReport:
    """Run duplicate, integrity, and naming checks; all of them always run."""
    duplicates = check_duplicates(index)
    integrity = check_integrity(root, index, hash_path)
    naming = check_naming(root, index, index.naming_config, extractor)
    return CheckReport(duplicates=duplicates, integrity=integrity, naming=naming)


__all__ = [
    "CheckReport",
    "DuplicateGroup",
    "IntegrityProblem",
    "NamingIssue",
    "check_duplicates",
    "check_integrity",
    "check_naming",
    "run_checks",
]
