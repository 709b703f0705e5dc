"""photo-organizer keeps photo collections in sync with a content-hash index."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("photo-organizer")
except PackageNotFoundError:
    # Imported from a source tree that was never installed.
    __version__ = "0.0.0"

__all__ = ["__version__"]
