"""Rename plan data models."""

from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field


class RenameOperation(BaseModel):
    """Represents renaming one photo to its canonical name.

    Attributes:
        source: Collection-relative path before the rename.
        destination: Collection-relative path after the rename.
    """

    source: str
    destination: str

    def absolute(self, root: Path) -> tuple[Path, Path]:
        return root / self.source, root / self.destination


class SkippedPhoto(BaseModel):
    """A photo left out of a plan because its canonical name is unknown."""

    path: str
    reason: str


class RenamePlan(BaseModel):
    """Renames required to bring a set of photos in line with the naming scheme."""

    renames: List[RenameOperation] = Field(default_factory=list)
    skipped: List[SkippedPhoto] = Field(default_factory=list)
    unchanged: int = 0


class RenameOutcome(BaseModel):
    """Result of applying a rename plan.

    Attributes:
        applied: Operations that were executed (or would be, in dry-run mode).
        conflicts: Operations refused because the destination was occupied.
        failures: Operations that failed for another reason.
    """

    applied: List[RenameOperation] = Field(default_factory=list)
    conflicts: List[RenameOperation] = Field(default_factory=list)
    failures: List[SkippedPhoto] = Field(default_factory=list)
    dry_run: bool = False


__all__ = ["RenameOperation", "SkippedPhoto", "RenamePlan", "RenameOutcome"]
