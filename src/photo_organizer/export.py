"""GPX export of photo locations."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, Optional

from photo_organizer.collection.errors import CollectionError
from photo_organizer.collection.metadata import MetadataExtractor
from photo_organizer.collection.scanner import LivePhoto

LOGGER = logging.getLogger(__name__)

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"


def export_gpx(
    root: Path,
    photos: Iterable[LivePhoto],
    destination: Path,
    extractor: Optional[MetadataExtractor] = None,
) -> int:
    """Write a GPX 1.1 file with one waypoint per geotagged photo.

    Photos without a location or with unreadable metadata are logged and skipped.

    Args:
        root: Collection root.
        photos: Photos to export.
        destination: GPX file to write.
        extractor: Metadata extractor; a default one is used when omitted.

    Returns:
        int: Number of waypoints written.
    """
    extractor = extractor or MetadataExtractor()
    ET.register_namespace("", GPX_NAMESPACE)
    document = ET.Element(
        f"{{{GPX_NAMESPACE}}}gpx", {"version": "1.1", "creator": "photo-organizer"}
    )

    count = 0
    for photo in photos:
        try:
            metadata = extractor.extract(root / photo.relative_path)
        except CollectionError as exc:
            LOGGER.warning("Could not read EXIF data from %s: %s", photo.relative_path, exc)
            continue
        if metadata.location is None:
            LOGGER.warning("No location found in EXIF data from %s!", photo.relative_path)
            continue

        latitude, longitude = metadata.location
        waypoint = ET.SubElement(
            document,
            f"{{{GPX_NAMESPACE}}}wpt",
            {"lat": f"{latitude:.7f}", "lon": f"{longitude:.7f}"},
        )
        if metadata.altitude is not None:
            ET.SubElement(waypoint, f"{{{GPX_NAMESPACE}}}ele").text = f"{metadata.altitude:g}"
        if metadata.timestamp_local is not None:
            # GPX expects UTC; the local capture time is written without an offset.
            ET.SubElement(waypoint, f"{{{GPX_NAMESPACE}}}time").text = (
                metadata.timestamp_local.isoformat()
            )
        ET.SubElement(waypoint, f"{{{GPX_NAMESPACE}}}name").text = photo.relative_path
        count += 1

    destination.parent.mkdir(parents=True, exist_ok=True)
    ET.ElementTree(document).write(destination, encoding="utf-8", xml_declaration=True)
    return count


__all__ = ["export_gpx", "GPX_NAMESPACE"]
