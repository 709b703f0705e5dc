"""GPX export tests."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Dict

from photo_organizer.collection import LivePhoto, MetadataUnavailableError, PhotoMetadata
from photo_organizer.export import GPX_NAMESPACE, export_gpx

NS = {"gpx": GPX_NAMESPACE}


class FakeExtractor:
    """Return canned metadata keyed by file name."""

    def __init__(self, metadata: Dict[str, PhotoMetadata]) -> None:
        self.metadata = metadata

    def extract(self, path: Path) -> PhotoMetadata:
        if path.name not in self.metadata:
            raise MetadataUnavailableError(f"{path}: no EXIF data found")
        return self.metadata[path.name]


def test_export_writes_waypoints_for_geotagged_photos(tmp_path: Path) -> None:
    extractor = FakeExtractor(
        {
            "a.jpg": PhotoMetadata(
                location=(52.5, 13.25),
                altitude=34.0,
                timestamp_local=datetime(2022, 5, 7, 12, 32, 10),
            ),
            "b.jpg": PhotoMetadata(make="Canon"),
        }
    )
    photos = [
        LivePhoto(relative_path="trip/a.jpg"),
        LivePhoto(relative_path="b.jpg"),
        LivePhoto(relative_path="c.jpg"),
    ]
    destination = tmp_path / "out" / "locations.gpx"

    count = export_gpx(tmp_path, photos, destination, extractor=extractor)

    assert count == 1
    document = ET.parse(destination).getroot()
    assert document.get("version") == "1.1"
    [waypoint] = document.findall("gpx:wpt", NS)
    assert float(waypoint.get("lat")) == 52.5
    assert float(waypoint.get("lon")) == 13.25
    assert waypoint.findtext("gpx:ele", namespaces=NS) == "34"
    assert waypoint.findtext("gpx:time", namespaces=NS) == "2022-05-07T12:32:10"
    assert waypoint.findtext("gpx:name", namespaces=NS) == "trip/a.jpg"


def test_export_without_locations_writes_empty_track(tmp_path: Path) -> None:
    destination = tmp_path / "empty.gpx"

    count = export_gpx(tmp_path, [], destination, extractor=FakeExtractor({}))

    assert count == 0
    assert ET.parse(destination).getroot().findall("gpx:wpt", NS) == []
