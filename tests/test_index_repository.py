"""Index repository tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from photo_organizer.index import (
    INDEX_FILE_NAME,
    IndexEntry,
    IndexFileError,
    IndexRepository,
    MissingIndexError,
    NamingConfig,
    PhotoIndex,
)


def _index() -> PhotoIndex:
    """Return a sample index with two unsorted entries.

    Returns:
        PhotoIndex: Index tracking two photos.
    """
    return PhotoIndex(
        naming_config=NamingConfig(naming_scheme="%Y_%{type}.%{fileextension}"),
        photos=[
            IndexEntry(path="b/2.jpg", original_filename="DSC_2.jpg", content_hash="H2"),
            IndexEntry(path="a.jpg", original_filename="DSC_1.jpg", content_hash="H1"),
        ],
    )


def test_initialize_writes_empty_index(tmp_path: Path) -> None:
    """Ensure initialize creates an index file with default settings.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = IndexRepository()

    index = repo.initialize(tmp_path)

    assert (tmp_path / INDEX_FILE_NAME).is_file()
    assert index.photos == []
    assert repo.load(tmp_path) == index


def test_initialize_refuses_existing_index(tmp_path: Path) -> None:
    repo = IndexRepository()
    repo.initialize(tmp_path)

    with pytest.raises(IndexFileError):
        repo.initialize(tmp_path)


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    """Ensure save followed by load returns the same index, sorted by path.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = IndexRepository()

    repo.save(tmp_path, _index())
    loaded = repo.load(tmp_path)

    assert [entry.path for entry in loaded.photos] == ["a.jpg", "b/2.jpg"]
    assert loaded.photos[1].original_filename == "DSC_2.jpg"
    assert loaded.naming_config.naming_scheme == "%Y_%{type}.%{fileextension}"


def test_saved_file_is_stable_json(tmp_path: Path) -> None:
    repo = IndexRepository()
    repo.save(tmp_path, _index())
    first = (tmp_path / INDEX_FILE_NAME).read_text(encoding="utf-8")

    repo.save(tmp_path, repo.load(tmp_path))
    second = (tmp_path / INDEX_FILE_NAME).read_text(encoding="utf-8")

    assert first == second
    assert first.endswith("\n")
    assert json.loads(first)["photos"][0]["path"] == "a.jpg"


def test_load_missing_index(tmp_path: Path) -> None:
    with pytest.raises(MissingIndexError):
        IndexRepository().load(tmp_path)


def test_load_invalid_json(tmp_path: Path) -> None:
    (tmp_path / INDEX_FILE_NAME).write_text("{not json", encoding="utf-8")

    with pytest.raises(IndexFileError):
        IndexRepository().load(tmp_path)


def test_load_rejects_duplicate_paths(tmp_path: Path) -> None:
    entry = {"path": "a.jpg", "original_filename": "a.jpg", "content_hash": "H"}
    payload = {"naming_config": NamingConfig().model_dump(), "photos": [entry, entry]}
    (tmp_path / INDEX_FILE_NAME).write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(IndexFileError, match="duplicate"):
        IndexRepository().load(tmp_path)


def test_entry_paths_are_normalized_to_forward_slashes() -> None:
    entry = IndexEntry(path="trip\\a.jpg", original_filename="a.jpg", content_hash="H")

    assert entry.path == "trip/a.jpg"
    assert entry.filename == "a.jpg"


def test_find_root_from_nested_directory(tmp_path: Path) -> None:
    repo = IndexRepository()
    repo.initialize(tmp_path)
    nested = tmp_path / "2022" / "may"
    nested.mkdir(parents=True)

    assert repo.find_root(nested) == (tmp_path.resolve(), "2022/may")
    assert repo.find_root(tmp_path) == (tmp_path.resolve(), "")


def test_find_root_outside_collection(tmp_path: Path) -> None:
    assert IndexRepository().find_root(tmp_path) is None


def test_is_versioned_false_outside_git(tmp_path: Path) -> None:
    repo = IndexRepository()
    repo.initialize(tmp_path)

    assert repo.is_versioned(tmp_path) is False
