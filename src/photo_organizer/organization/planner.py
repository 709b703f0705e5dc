"""Planner for canonical-name renames."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional

from photo_organizer.collection.errors import CollectionError
from photo_organizer.collection.metadata import MetadataExtractor
from photo_organizer.collection.naming import canonical_name_for_file
from photo_organizer.collection.scanner import LivePhoto
from photo_organizer.index.models import NamingConfig

from .models import RenameOperation, RenamePlan, SkippedPhoto

LOGGER = logging.getLogger(__name__)


class RenamePlanner:
    """Derive rename operations from photo metadata and the naming scheme."""

    def __init__(self, extractor: Optional[MetadataExtractor] = None) -> None:
        self.extractor = extractor or MetadataExtractor()

    def build_plan(
        self,
        root: Path,
        photos: Iterable[LivePhoto],
        naming_config: NamingConfig,
    ) -> RenamePlan:
        """Produce a rename plan for the given photos.

        Args:
            root: Collection root.
            photos: Photos to consider, typically restricted to one directory.
            naming_config: Naming scheme of the collection.

        Returns:
            RenamePlan: Renames within each photo's directory, plus photos that
                could not be named.
        """
        plan = RenamePlan()
        for photo in photos:
            try:
                name = canonical_name_for_file(
                    root / photo.relative_path, naming_config, self.extractor
                )
            except CollectionError as exc:
                LOGGER.warning("%s: could not process file - %s", photo.relative_path, exc)
                plan.skipped.append(SkippedPhoto(path=photo.relative_path, reason=str(exc)))
                continue

            if name == photo.name:
                LOGGER.debug("%s: rename not necessary", photo.relative_path)
                plan.unchanged += 1
                continue

            destination = PurePosixPath(photo.relative_path).with_name(name).as_posix()
            plan.renames.append(
                RenameOperation(source=photo.relative_path, destination=destination)
            )
        return plan
