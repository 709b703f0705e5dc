"""EXIF metadata extraction for photos."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Tuple

from PIL import ExifTags, Image, UnidentifiedImageError
from pydantic import BaseModel

from .errors import FileAccessError, MetadataUnavailableError

LOGGER = logging.getLogger(__name__)

EXIF_TIMESTAMP_FORMAT = "%Y:%m:%d %H:%M:%S"


class PhotoMetadata(BaseModel):
    """Subset of embedded metadata used by naming, listing, and export.

    Every field is optional since EXIF presence is never guaranteed.

    Attributes:
        make: Camera manufacturer.
        model: Camera model.
        timestamp_local: Capture time, assumed to be recorded in local time.
        location: Latitude and longitude in signed decimal degrees.
        altitude: Altitude in metres, negative below sea level.
    """

    make: Optional[str] = None
    model: Optional[str] = None
    timestamp_local: Optional[datetime] = None
    location: Optional[Tuple[float, float]] = None
    altitude: Optional[float] = None


class MetadataExtractor:
    """Read EXIF tags from image files through Pillow."""

    def extract(self, path: Path) -> PhotoMetadata:
        """Return the metadata embedded in the file at path.

        Args:
            path: Image file to inspect.

        Returns:
            PhotoMetadata: Parsed metadata; missing tags are left as None.

        Raises:
            FileAccessError: If the file cannot be opened.
            MetadataUnavailableError: If the file carries no readable EXIF block.
        """
        try:
            with Image.open(path) as img:
                exif = img.getexif()
                exif_ifd = dict(exif.get_ifd(ExifTags.IFD.Exif))
                gps_ifd = dict(exif.get_ifd(ExifTags.IFD.GPSInfo))
                primary = dict(exif)
        except UnidentifiedImageError as exc:
            raise MetadataUnavailableError(f"{path}: not a readable image ({exc})") from exc
        except Image.DecompressionBombError as exc:
            raise MetadataUnavailableError(f"{path}: image too large to inspect ({exc})") from exc
        except OSError as exc:
            raise FileAccessError(path, f"could not open for reading EXIF data ({exc})") from exc

        if not primary and not exif_ifd and not gps_ifd:
            raise MetadataUnavailableError(f"{path}: no EXIF data found")

        # DateTimeOriginal is the capture time; DateTime is rewritten by some editors.
        raw_timestamp = exif_ifd.get(ExifTags.Base.DateTimeOriginal) or primary.get(
            ExifTags.Base.DateTime
        )

        return PhotoMetadata(
            make=_clean_ascii(primary.get(ExifTags.Base.Make)),
            model=_clean_ascii(primary.get(ExifTags.Base.Model)),
            timestamp_local=_parse_timestamp(raw_timestamp, path),
            location=_parse_location(gps_ifd),
            altitude=_parse_altitude(gps_ifd),
        )


def _clean_ascii(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    text = str(value).strip("\x00 ").strip()
    return text or None


def _parse_timestamp(value: Any, path: Path) -> Optional[datetime]:
    text = _clean_ascii(value)
    if text is None:
        return None
    try:
        return datetime.strptime(text, EXIF_TIMESTAMP_FORMAT)
    except ValueError:
        LOGGER.debug("%s: could not parse EXIF timestamp %r", path, text)
        return None


def dms_to_decimal(values: Sequence[Any], reference: Any) -> float:
    """Convert EXIF degree/minute/second rationals into signed decimal degrees.

    Args:
        values: Degrees, minutes, and seconds (rationals or floats).
        reference: Hemisphere reference (``N``/``S``/``E``/``W``).

    Returns:
        float: Decimal degrees, negative for the southern and western hemispheres.
    """
    degrees, minutes, seconds = (float(part) for part in values)
    decimal = degrees + minutes / 60 + seconds / 3600
    if _clean_ascii(reference) in {"S", "W"}:
        decimal = -decimal
    return decimal


def _parse_location(gps: Mapping[int, Any]) -> Optional[Tuple[float, float]]:
    latitude = gps.get(ExifTags.GPS.GPSLatitude)
    longitude = gps.get(ExifTags.GPS.GPSLongitude)
    if latitude is None or longitude is None:
        return None
    try:
        return (
            dms_to_decimal(latitude, gps.get(ExifTags.GPS.GPSLatitudeRef)),
            dms_to_decimal(longitude, gps.get(ExifTags.GPS.GPSLongitudeRef)),
        )
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def _parse_altitude(gps: Mapping[int, Any]) -> Optional[float]:
    altitude = gps.get(ExifTags.GPS.GPSAltitude)
    if altitude is None:
        return None
    try:
        value = float(altitude)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    # AltitudeRef 1 means below sea level.
    reference = gps.get(ExifTags.GPS.GPSAltitudeRef)
    if isinstance(reference, bytes):
        reference = reference[0] if reference else 0
    if reference == 1:
        value = -value
    return value


__all__ = ["MetadataExtractor", "PhotoMetadata", "dms_to_decimal", "EXIF_TIMESTAMP_FORMAT"]
