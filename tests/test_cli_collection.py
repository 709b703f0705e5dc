"""CLI tests for collection commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from photo_organizer.cli import cli
from photo_organizer.index import INDEX_FILE_NAME, IndexRepository


def _collection(tmp_path: Path, runner: CliRunner, env: dict[str, str]) -> Path:
    root = tmp_path / "photos"
    root.mkdir()
    result = runner.invoke(cli, ["init", str(root)], env=env)
    assert result.exit_code == 0, result.output
    return root


def _paths(root: Path) -> list[str]:
    return [entry.path for entry in IndexRepository().load(root).photos]


def test_init_creates_index(tmp_path: Path, cli_env: dict[str, str]) -> None:
    runner = CliRunner()

    root = _collection(tmp_path, runner, cli_env)

    assert (root / INDEX_FILE_NAME).is_file()
    assert IndexRepository().load(root).photos == []


def test_init_inside_existing_collection_fails(tmp_path: Path, cli_env: dict[str, str]) -> None:
    runner = CliRunner()
    root = _collection(tmp_path, runner, cli_env)
    nested = root / "nested"
    nested.mkdir()

    result = runner.invoke(cli, ["init", str(nested)], env=cli_env)

    assert result.exit_code != 0
    assert not (nested / INDEX_FILE_NAME).exists()


def test_update_tracks_additions_and_renames(
    tmp_path: Path, cli_env: dict[str, str], make_jpeg
) -> None:
    runner = CliRunner()
    root = _collection(tmp_path, runner, cli_env)
    make_jpeg(root / "IMG_0001.jpg", color=(1, 2, 3))
    make_jpeg(root / "trip" / "IMG_0002.jpg", color=(4, 5, 6))

    first = runner.invoke(cli, ["update", str(root)], env=cli_env)

    assert first.exit_code == 0, first.output
    assert _paths(root) == ["IMG_0001.jpg", "trip/IMG_0002.jpg"]

    (root / "IMG_0001.jpg").rename(root / "trip" / "renamed.jpg")
    second = runner.invoke(cli, ["update", str(root / "trip")], env=cli_env)

    assert second.exit_code == 0, second.output
    entries = IndexRepository().load(root).entry_map()
    assert set(entries) == {"trip/IMG_0002.jpg", "trip/renamed.jpg"}
    assert entries["trip/renamed.jpg"].original_filename == "IMG_0001.jpg"


def test_update_dry_run_json_leaves_index(
    tmp_path: Path, cli_env: dict[str, str], make_jpeg
) -> None:
    runner = CliRunner()
    root = _collection(tmp_path, runner, cli_env)
    make_jpeg(root / "a.jpg")

    result = runner.invoke(cli, ["-q", "update", "--dry-run", "--json", str(root)], env=cli_env)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["dry_run"] is True
    assert payload["persisted"] is False
    assert payload["result"]["added"] == ["a.jpg"]
    assert _paths(root) == []


def test_update_outside_collection_fails(tmp_path: Path, cli_env: dict[str, str]) -> None:
    runner = CliRunner()
    outside = tmp_path / "elsewhere"
    outside.mkdir()

    result = runner.invoke(cli, ["update", str(outside)], env=cli_env)

    assert result.exit_code != 0
    assert "po init" in result.output


def test_check_exit_code_reflects_problems(
    tmp_path: Path, cli_env: dict[str, str], make_jpeg
) -> None:
    runner = CliRunner()
    root = _collection(tmp_path, runner, cli_env)
    photo = make_jpeg(root / "20220507_123210_IMG.jpg", timestamp="2022:05:07 12:32:10")
    assert runner.invoke(cli, ["update", str(root)], env=cli_env).exit_code == 0

    clean = runner.invoke(cli, ["check", str(root)], env=cli_env)
    assert clean.exit_code == 0, clean.output

    photo.write_bytes(photo.read_bytes() + b"\x00")
    dirty = runner.invoke(cli, ["check", str(root)], env=cli_env)
    assert dirty.exit_code == 1


def test_rename_moves_files_and_index_entries(
    tmp_path: Path, cli_env: dict[str, str], make_jpeg
) -> None:
    runner = CliRunner()
    root = _collection(tmp_path, runner, cli_env)
    make_jpeg(root / "IMG_0001.JPG", timestamp="2022:05:07 12:32:10")
    assert runner.invoke(cli, ["update", str(root)], env=cli_env).exit_code == 0

    preview = runner.invoke(cli, ["rename", "--dry-run", str(root)], env=cli_env)
    assert preview.exit_code == 0, preview.output
    assert (root / "IMG_0001.JPG").exists()

    result = runner.invoke(cli, ["rename", str(root)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert (root / "20220507_123210_IMG.jpg").is_file()
    assert not (root / "IMG_0001.JPG").exists()
    [entry] = IndexRepository().load(root).photos
    assert entry.path == "20220507_123210_IMG.jpg"
    assert entry.original_filename == "IMG_0001.JPG"


def test_list_shows_photos(tmp_path: Path, cli_env: dict[str, str], make_jpeg) -> None:
    runner = CliRunner()
    root = _collection(tmp_path, runner, cli_env)
    make_jpeg(root / "a.jpg", make="Canon", timestamp="2022:05:07 12:32:10")

    result = runner.invoke(cli, ["list", str(root)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "a.jpg" in result.output
    assert "Canon" in result.output


def test_thumbcat_writes_catalogue(tmp_path: Path, cli_env: dict[str, str], make_jpeg) -> None:
    runner = CliRunner()
    root = _collection(tmp_path, runner, cli_env)
    make_jpeg(root / "a.jpg")

    result = runner.invoke(cli, ["thumbcat", "--width", "32", str(root)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "<h1>a.jpg</h1>" in (root / "thumbcat.html").read_text(encoding="utf-8")


def test_map_writes_gpx(tmp_path: Path, cli_env: dict[str, str], make_jpeg) -> None:
    runner = CliRunner()
    root = _collection(tmp_path, runner, cli_env)
    make_jpeg(root / "a.jpg", timestamp="2022:05:07 12:32:10")
    output = tmp_path / "locations.gpx"

    result = runner.invoke(cli, ["map", "--output", str(output), str(root)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert output.is_file()
    assert "<gpx" in output.read_text(encoding="utf-8")
