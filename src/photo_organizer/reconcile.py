"""Reconciliation of a persisted index with the photos found on disk."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import PurePosixPath
from typing import Callable, Iterable, List, Tuple

from pydantic import BaseModel, Field

from photo_organizer.collection.scanner import LivePhoto
from photo_organizer.index.models import IndexEntry, PhotoIndex

LOGGER = logging.getLogger(__name__)

HashFunction = Callable[[str], str]


class ReconciliationResult(BaseModel):
    """Changes detected while reconciling an index with the live file set.

    Attributes:
        added: Paths of photos that were not indexed before.
        deleted: Paths of indexed photos that no longer exist.
        renamed: Pairs of (old path, new path) matched by content hash.
    """

    added: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    renamed: List[Tuple[str, str]] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Return whether the index differs from its previous state."""
        return bool(self.added or self.deleted or self.renamed)


def reconcile(
    index: PhotoIndex,
    live_photos: Iterable[LivePhoto],
    hash_path: HashFunction,
    *,
    workers: int = 1,
) -> Tuple[PhotoIndex, ReconciliationResult]:
    """Align an index with the photos currently present in the collection.

    Paths present in both the index and on disk are kept without hashing.
    Indexed paths that vanished form a pool of candidates; every new path is
    hashed and matched against that pool, so a moved or renamed file keeps
    its original filename and hash. Unmatched new paths are additions and
    unmatched pool entries are deletions.

    The pool is ordered by path and new paths are processed in lexicographic
    order, so when several vanished entries share a hash the one with the
    smallest path is bound first.

    Args:
        index: Index as last persisted. It is not modified.
        live_photos: Photos found by the scanner.
        hash_path: Callable returning the content hash for a relative path.
        workers: Number of threads used to hash new files.

    Returns:
        Tuple[PhotoIndex, ReconciliationResult]: The updated index and a report
            of the applied changes.

    Raises:
        FileAccessError: If a new file cannot be opened for hashing.
        HashError: If hashing a new file fails.
    """
    updated = index.model_copy(deep=True)
    result = ReconciliationResult()

    indexed_paths = updated.paths()
    live_paths = {photo.relative_path for photo in live_photos}

    missing = indexed_paths - live_paths
    new_paths = sorted(live_paths - indexed_paths)

    pool: List[IndexEntry] = sorted(
        (entry for entry in updated.photos if entry.path in missing),
        key=lambda entry: entry.path,
    )
    updated.photos = [entry for entry in updated.photos if entry.path not in missing]

    for path, content_hash in zip(new_paths, _hash_all(new_paths, hash_path, workers)):
        match = next(
            (position for position, entry in enumerate(pool) if entry.content_hash == content_hash),
            None,
        )
        if match is not None:
            previous = pool.pop(match)
            LOGGER.info("Renamed: %s -> %s", previous.path, path)
            updated.photos.append(previous.model_copy(update={"path": path}))
            result.renamed.append((previous.path, path))
        else:
            LOGGER.info("Added: %s", path)
            updated.photos.append(
                IndexEntry(
                    path=path,
                    original_filename=PurePosixPath(path).name,
                    content_hash=content_hash,
                )
            )
            result.added.append(path)

    for entry in pool:
        LOGGER.info("Deleted: %s", entry.path)
        result.deleted.append(entry.path)

    updated.sort()
    return updated, result


def _hash_all(paths: List[str], hash_path: HashFunction, workers: int) -> List[str]:
    if workers <= 1 or len(paths) <= 1:
        return [hash_path(path) for path in paths]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(hash_path, paths))


__all__ = ["ReconciliationResult", "reconcile", "HashFunction"]
