"""Index file errors."""


class IndexFileError(Exception):
    """Base exception for index repository operations."""


class MissingIndexError(IndexFileError):
    """Raised when no index file exists for a collection."""
