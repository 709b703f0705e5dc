"""Shared fixtures for photo-organizer tests."""

from __future__ import annotations

import os
import struct
import zlib
from pathlib import Path
from typing import Callable, Optional, Tuple

import pytest
from PIL import ExifTags, Image

JpegFactory = Callable[..., Path]


def write_jpeg(
    path: Path,
    *,
    timestamp: Optional[str] = None,
    make: Optional[str] = None,
    model: Optional[str] = None,
    color: Tuple[int, int, int] = (200, 30, 30),
    size: Tuple[int, int] = (64, 48),
) -> Path:
    """Write a small JPEG, optionally carrying EXIF DateTime/Make/Model tags.

    Args:
        path: Destination file.
        timestamp: EXIF timestamp such as ``2022:05:07 12:32:10``.
        make: Camera manufacturer tag.
        model: Camera model tag.
        color: Fill color; different colors produce different content hashes.
        size: Image dimensions.

    Returns:
        Path: The written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    image = Image.new("RGB", size, color)
    exif = Image.Exif()
    if timestamp is not None:
        exif[ExifTags.Base.DateTime] = timestamp
    if make is not None:
        exif[ExifTags.Base.Make] = make
    if model is not None:
        exif[ExifTags.Base.Model] = model
    if len(exif):
        image.save(path, format="JPEG", exif=exif)
    else:
        image.save(path, format="JPEG")
    return path


def write_oversized_png(path: Path, width: int = 40000, height: int = 40000) -> Path:
    """Write a PNG holding only a header that claims huge dimensions.

    Pillow refuses to open such files as possible decompression bombs.
    """

    def chunk(kind: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(kind + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b""))
    return path


@pytest.fixture
def make_jpeg() -> JpegFactory:
    return write_jpeg


@pytest.fixture
def cli_env(tmp_path: Path) -> dict[str, str]:
    """Return environment variables isolating the CLI from the user's settings."""
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    env["PHOTO_ORGANIZER__CLI__GIT_HINT"] = "false"
    return env


@pytest.fixture
def make_oversized_png() -> Callable[..., Path]:
    return write_oversized_png
