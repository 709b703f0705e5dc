"""HTML thumbnail catalogues for collection directories."""

from __future__ import annotations

import base64
import html
import io
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Sequence, Tuple

from PIL import Image, ImageOps

from photo_organizer.collection.scanner import LivePhoto, photos_in_subdir

LOGGER = logging.getLogger(__name__)

_ENTRY_PATTERN = re.compile(r"^<h1>(.+)</h1>$")


class ThumbnailCatalogue:
    """Write one self-contained HTML page of thumbnails per directory."""

    def __init__(
        self,
        output_filename: str = "thumbcat.html",
        resize_width: int = 320,
        workers: int = 4,
    ) -> None:
        self.output_filename = output_filename
        self.resize_width = resize_width
        self.workers = max(1, workers)

    def generate(
        self,
        root: Path,
        subdir: str,
        photos: Sequence[LivePhoto],
        *,
        force: bool = False,
        recursive: bool = False,
    ) -> List[Path]:
        """Create catalogues for subdir, and for nested directories when recursive.

        Subdirectories are processed first, in sorted order.

        Returns:
            List[Path]: Catalogue files that were (re)written.
        """
        written: List[Path] = []
        directory = root / subdir
        if recursive:
            children = sorted(
                child.name
                for child in directory.iterdir()
                if child.is_dir() and not child.name.startswith(".")
            )
            for child in children:
                nested = f"{subdir}/{child}" if subdir else child
                written.extend(
                    self.generate(root, nested, photos, force=force, recursive=recursive)
                )

        current = photos_in_subdir(photos, subdir, recursive=False)
        html_path = directory / self.output_filename
        names = [photo.name for photo in current]

        if not force and html_path.is_file():
            if not current:
                LOGGER.warning(
                    "Existing thumbnail catalogue found in directory without photos: %s", directory
                )
            if read_catalogue_entries(html_path) == names:
                LOGGER.info(
                    "Thumbnail catalogue in %s seems up-to-date, skipping directory.", html_path
                )
                return written

        if not current:
            LOGGER.info("No photos found in %s, skipping directory.", directory)
            return written

        LOGGER.info("Creating thumbnail catalogue in %s...", directory)
        paths = [root / photo.relative_path for photo in current]
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            thumbnails = list(executor.map(self._thumbnail_or_error, paths))

        html_path.write_text(
            render_catalogue(subdir or ".", list(zip(names, thumbnails))), encoding="utf-8"
        )
        LOGGER.info("File %s generated successfully.", html_path)
        written.append(html_path)
        return written

    def thumbnail(self, path: Path) -> bytes:
        """Return a JPEG thumbnail of the image at path scaled to the configured width."""
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            if img.width > self.resize_width:
                height = max(1, round(img.height * self.resize_width / img.width))
                img = img.resize((self.resize_width, height))
            buffer = io.BytesIO()
            img.convert("RGB").save(buffer, format="JPEG", quality=85)
        return buffer.getvalue()

    def _thumbnail_or_error(self, path: Path) -> bytes | str:
        try:
            return self.thumbnail(path)
        except (OSError, Image.DecompressionBombError) as exc:
            LOGGER.warning("Could not create thumbnail for %s: %s", path, exc)
            return f"Could not create thumbnail: {exc}"


def render_catalogue(title: str, entries: Sequence[Tuple[str, bytes | str]]) -> str:
    """Render the catalogue page; an entry holds JPEG bytes or an error message."""
    lines = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="utf-8">',
        f"<title>Thumbnail Catalogue for Directory {html.escape(title)}</title>",
        "<style>h1 { font-size: large }</style>",
        "</head>",
        "<body>",
    ]
    for name, data in entries:
        lines.append(f"<h1>{html.escape(name, quote=False)}</h1>")
        if isinstance(data, bytes):
            encoded = base64.b64encode(data).decode("ascii")
            lines.append(
                f'<p><img src="data:image/jpeg;base64,{encoded}" style="width: 100%" /></p>'
            )
        else:
            lines.append(f"<p>{html.escape(data)}</p>")
    lines.extend(["</body>", "</html>"])
    return "\n".join(lines) + "\n"


def read_catalogue_entries(html_path: Path) -> List[str]:
    """Return the photo names listed in an existing catalogue, in order."""
    entries: List[str] = []
    with html_path.open("r", encoding="utf-8", errors="replace") as handle:
        for line in handle:
            match = _ENTRY_PATTERN.match(line.rstrip("\n"))
            if match:
                entries.append(html.unescape(match.group(1)))
    return entries


__all__ = ["ThumbnailCatalogue", "render_catalogue", "read_catalogue_entries"]
