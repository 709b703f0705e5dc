"""Executor for rename plans."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from photo_organizer.collection.errors import TargetExistsError
from photo_organizer.index.models import PhotoIndex

from .models import RenameOperation, RenameOutcome, RenamePlan, SkippedPhoto

LOGGER = logging.getLogger(__name__)


class RenameExecutor:
    """Apply rename plans without ever overwriting existing files."""

    def apply(self, plan: RenamePlan, root: Path, dry_run: bool = False) -> RenameOutcome:
        """Apply the given plan.

        Each operation is validated on its own; a conflict or failure skips that
        operation and the remaining ones still run.

        Args:
            plan: Plan computed by the planner.
            root: Collection root path.
            dry_run: When true, report what would happen without renaming.

        Returns:
            RenameOutcome: Applied, conflicting, and failed operations.
        """
        outcome = RenameOutcome(dry_run=dry_run)
        claimed: set[str] = set()
        # Dry runs leave files in place, so paths earlier operations would free are tracked.
        vacated: set[str] = set()

        for operation in plan.renames:
            source, destination = operation.absolute(root)
            try:
                self._validate(operation, source, destination, claimed, vacated)
            except TargetExistsError as exc:
                LOGGER.error("Cannot rename: %s", exc)
                outcome.conflicts.append(operation)
                continue
            except FileNotFoundError as exc:
                LOGGER.warning("%s", exc)
                outcome.failures.append(SkippedPhoto(path=operation.source, reason=str(exc)))
                continue

            claimed.add(operation.destination)
            if dry_run:
                vacated.add(operation.source)
                vacated.discard(operation.destination)
                claimed.discard(operation.source)
                LOGGER.info(
                    "%s: would rename file to %s (dry run)", operation.source, destination.name
                )
                outcome.applied.append(operation)
                continue

            LOGGER.info("%s: renaming file to %s", operation.source, destination.name)
            try:
                source.rename(destination)
            except OSError as exc:
                LOGGER.warning("%s: rename failed - %s", operation.source, exc)
                outcome.failures.append(SkippedPhoto(path=operation.source, reason=str(exc)))
                continue
            outcome.applied.append(operation)

        return outcome

    def _validate(
        self,
        operation: RenameOperation,
        source: Path,
        destination: Path,
        claimed: set[str],
        vacated: set[str],
    ) -> None:
        if operation.source in vacated or not (source.exists() or operation.source in claimed):
            raise FileNotFoundError(f"Source path is missing: {source}")
        # Checked right before renaming; a file created in between is not detected.
        occupied = destination.exists() and operation.destination not in vacated
        if occupied or operation.destination in claimed:
            raise TargetExistsError(source, destination)


def apply_renames_to_index(index: PhotoIndex, operations: Iterable[RenameOperation]) -> int:
    """Move index entries along with renamed files.

    Entries keep their content hash and original filename. Sources that are
    not indexed are ignored.

    Returns:
        int: Number of index entries that moved.
    """
    entries = index.entry_map()
    moved = 0
    for operation in operations:
        entry = entries.pop(operation.source, None)
        if entry is None:
            continue
        entry.path = operation.destination
        entries[entry.path] = entry
        moved += 1
    if moved:
        index.photos = list(entries.values())
        index.sort()
    return moved
