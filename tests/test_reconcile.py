"""Index reconciliation tests."""

from __future__ import annotations

from typing import Dict, List

import pytest

from photo_organizer.collection import HashError, LivePhoto
from photo_organizer.index import IndexEntry, PhotoIndex
from photo_organizer.reconcile import reconcile


def _live(*paths: str) -> List[LivePhoto]:
    return [LivePhoto(relative_path=path) for path in paths]


def _index(*entries: tuple[str, str, str]) -> PhotoIndex:
    return PhotoIndex(
        photos=[
            IndexEntry(path=path, original_filename=original, content_hash=content_hash)
            for path, original, content_hash in entries
        ]
    )


class RecordingHasher:
    """Hash lookup that records which paths were hashed."""

    def __init__(self, hashes: Dict[str, str]) -> None:
        self.hashes = hashes
        self.calls: List[str] = []

    def __call__(self, path: str) -> str:
        self.calls.append(path)
        return self.hashes[path]


def test_unchanged_collection_is_not_rehashed() -> None:
    index = _index(("a.jpg", "a.jpg", "H1"), ("b.jpg", "b.jpg", "H2"))
    hasher = RecordingHasher({})

    updated, result = reconcile(index, _live("a.jpg", "b.jpg"), hasher)

    assert not result.changed
    assert hasher.calls == []
    assert updated == index


def test_rename_keeps_original_filename_and_hash() -> None:
    index = _index(("IMG_1.jpg", "IMG_1.jpg", "H1"))
    hashes = {"2022/20220507_123210_IMG.jpg": "H1"}

    updated, result = reconcile(
        index, _live("2022/20220507_123210_IMG.jpg"), hashes.__getitem__
    )

    assert result.renamed == [("IMG_1.jpg", "2022/20220507_123210_IMG.jpg")]
    assert result.added == []
    assert result.deleted == []
    [entry] = updated.photos
    assert entry.path == "2022/20220507_123210_IMG.jpg"
    assert entry.original_filename == "IMG_1.jpg"
    assert entry.content_hash == "H1"


def test_new_content_is_added_and_missing_content_deleted() -> None:
    index = _index(("old.jpg", "old.jpg", "H1"))
    hashes = {"new.jpg": "H2"}

    updated, result = reconcile(index, _live("new.jpg"), hashes.__getitem__)

    assert result.added == ["new.jpg"]
    assert result.deleted == ["old.jpg"]
    assert result.renamed == []
    assert [(e.path, e.original_filename, e.content_hash) for e in updated.photos] == [
        ("new.jpg", "new.jpg", "H2")
    ]


def test_identical_content_binds_to_smallest_missing_path_first() -> None:
    index = _index(("b.jpg", "b.jpg", "H"), ("a.jpg", "a.jpg", "H"))
    hashes = {"y.jpg": "H", "x.jpg": "H", "z.jpg": "H"}

    updated, result = reconcile(index, _live("z.jpg", "y.jpg", "x.jpg"), hashes.__getitem__)

    assert result.renamed == [("a.jpg", "x.jpg"), ("b.jpg", "y.jpg")]
    assert result.added == ["z.jpg"]
    originals = {entry.path: entry.original_filename for entry in updated.photos}
    assert originals == {"x.jpg": "a.jpg", "y.jpg": "b.jpg", "z.jpg": "z.jpg"}


def test_reconcile_does_not_modify_the_input_index() -> None:
    index = _index(("old.jpg", "old.jpg", "H1"))
    snapshot = index.model_copy(deep=True)

    reconcile(index, _live("new.jpg"), {"new.jpg": "H1"}.__getitem__)

    assert index == snapshot


def test_second_pass_reports_no_changes() -> None:
    index = _index(("keep.jpg", "keep.jpg", "H1"), ("gone.jpg", "gone.jpg", "H2"))
    hashes = {"moved/gone.jpg": "H2", "fresh.jpg": "H3"}
    live = _live("keep.jpg", "moved/gone.jpg", "fresh.jpg")

    first, first_result = reconcile(index, live, hashes.__getitem__)
    second, second_result = reconcile(first, live, hashes.__getitem__)

    assert first_result.changed
    assert not second_result.changed
    assert second == first


def test_result_entries_are_sorted_by_path() -> None:
    hashes = {"c.jpg": "H3", "a.jpg": "H1", "b/b.jpg": "H2"}

    updated, _ = reconcile(PhotoIndex(), _live("c.jpg", "b/b.jpg", "a.jpg"), hashes.__getitem__)

    assert [entry.path for entry in updated.photos] == ["a.jpg", "b/b.jpg", "c.jpg"]


def test_parallel_hashing_matches_sequential() -> None:
    hashes = {f"p{number:02d}.jpg": f"H{number}" for number in range(20)}
    live = _live(*hashes)

    sequential, _ = reconcile(PhotoIndex(), live, hashes.__getitem__)
    parallel, _ = reconcile(PhotoIndex(), live, hashes.__getitem__, workers=4)

    assert parallel == sequential


def test_hash_failure_propagates() -> None:
    def failing(path: str) -> str:
        raise HashError(path, "boom")  # type: ignore[arg-type]

    with pytest.raises(HashError):
        reconcile(PhotoIndex(), _live("a.jpg"), failing)


def test_reconcile_logs_changes(caplog: pytest.LogCaptureFixture) -> None:
    index = _index(("old.jpg", "old.jpg", "H1"))

    with caplog.at_level("INFO", logger="photo_organizer"):
        reconcile(index, _live("new.jpg"), {"new.jpg": "H1"}.__getitem__)

    assert "Renamed: old.jpg -> new.jpg" in caplog.text
