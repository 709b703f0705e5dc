"""Renaming photos to their canonical names."""

from .executor import RenameExecutor, apply_renames_to_index
from .models import RenameOperation, RenameOutcome, RenamePlan, SkippedPhoto
from .planner import RenamePlanner

__all__ = [
    "RenameExecutor",
    "RenameOperation",
    "RenameOutcome",
    "RenamePlan",
    "RenamePlanner",
    "SkippedPhoto",
    "apply_renames_to_index",
]
