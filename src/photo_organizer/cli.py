"""Command line interface for photo-organizer."""

from __future__ import annotations

import difflib
import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from photo_organizer.catalogue import ThumbnailCatalogue
from photo_organizer.checks import run_checks
from photo_organizer.collection import (
    CollectionError,
    CollectionScanner,
    ContentHasher,
    LivePhoto,
    MetadataExtractor,
    photos_in_subdir,
)
from photo_organizer.config import (
    TIMESTAMP_MARKER,
    ConfigError,
    ConfigManager,
    OrganizerConfig,
    resolve_with_precedence,
)
from photo_organizer.export import export_gpx
from photo_organizer.index import IndexFileError, IndexRepository, PhotoIndex
from photo_organizer.log import configure_logging, resolve_level
from photo_organizer.organization import RenameExecutor, RenamePlanner, apply_renames_to_index
from photo_organizer.reconcile import reconcile

LOGGER = logging.getLogger(__name__)

console = Console()


@dataclass
class CollectionSession:
    """Everything a collection command needs after locating its collection."""

    root: Path
    subdir: str
    index: PhotoIndex
    config: OrganizerConfig
    repository: IndexRepository

    def hasher(self) -> ContentHasher:
        return ContentHasher(chunk_size=self.config.processing.hash_chunk_size_kb * 1024)

    def scan(self) -> list[LivePhoto]:
        scanner = CollectionScanner(
            self.index.naming_config,
            include_hidden=self.config.processing.include_hidden,
        )
        try:
            return scanner.scan(self.root)
        except CollectionError as exc:
            raise click.ClickException(f"Could not scan collection {self.root}: {exc}") from exc


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Report a command failure as JSON or as a click error.

    Raises:
        SystemExit: After printing the JSON error object.
        click.ClickException: Otherwise, wrapping the message.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(ctx: click.Context, message: Any, *, mode: str = "detail") -> None:
    """Print CLI output unless quiet mode suppresses it.

    Args:
        ctx: Click context holding the quiet flag.
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
    """
    options = ctx.find_root().obj or {}
    if options.get("quiet", False) and mode not in {"warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _load_config(ctx: click.Context) -> OrganizerConfig:
    """Load settings and configure logging from them and the global flags."""
    try:
        manager = ConfigManager()
        manager.ensure_exists()
        config = manager.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    options = ctx.find_root().obj or {}
    quiet = options.get("quiet", False) or config.cli.quiet_default
    options["quiet"] = quiet
    configure_logging(resolve_level(config.logging.level, options.get("verbose", 0), quiet))
    return config


def _open_collection(ctx: click.Context, path: str) -> CollectionSession:
    """Locate the collection containing path and load its index.

    Raises:
        click.ClickException: If path is outside a collection or the index is invalid.
    """
    config = _load_config(ctx)
    repository = IndexRepository()
    found = repository.find_root(Path(path))
    if found is None:
        raise click.ClickException(
            f"{Path(path).resolve()} does not seem to be part of a photo collection. "
            'Run "po init" in this or the appropriate parent directory.'
        )
    root, subdir = found

    try:
        index = repository.load(root)
    except IndexFileError as exc:
        raise click.ClickException(str(exc)) from exc

    if config.cli.git_hint and not repository.is_versioned(root):
        LOGGER.warning(
            "Index file in %s does not seem to be versioned using Git. "
            "Setting up a Git repository for tracking changes of the index file is recommended.",
            root,
        )

    return CollectionSession(
        root=root, subdir=subdir, index=index, config=config, repository=repository
    )


path_argument = click.argument(
    "path",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=str),
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="photo-organizer")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable).")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: bool) -> None:
    """Organize photo collections tracked by an index of paths and content hashes."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


@cli.command()
@path_argument
@click.pass_context
def init(ctx: click.Context, path: str) -> None:
    """Create an empty index file in PATH, making it a collection root."""
    config = _load_config(ctx)
    target = Path(path).expanduser().resolve()
    repository = IndexRepository()

    found = repository.find_root(target)
    if found is not None:
        raise click.ClickException(
            f"Cannot initialize a new photo collection here: {target} is already within "
            f"the collection at {found[0]}."
        )

    try:
        repository.initialize(target, config.naming.to_naming_config())
    except IndexFileError as exc:
        raise click.ClickException(str(exc)) from exc

    _emit_message(ctx, f"[green]Empty index file created for directory {target}.[/green]")
    _emit_message(
        ctx,
        "Adjust the naming options in the index file if desired and then run `po update`.",
    )


@cli.command()
@path_argument
@click.option("--dry-run", is_flag=True, help="Report changes without writing the index.")
@click.option("--json", "json_output", is_flag=True, help="Emit the changes as JSON.")
@click.pass_context
def update(ctx: click.Context, path: str, dry_run: bool, json_output: bool) -> None:
    """Update the index with added, renamed, and deleted photos."""
    try:
        session = _open_collection(ctx, path)
        photos = session.scan()
        hasher = session.hasher()
        root = session.root

        try:
            updated, result = reconcile(
                session.index,
                photos,
                lambda relative: hasher.compute(root / relative),
                workers=session.config.processing.hash_workers,
            )
        except CollectionError as exc:
            raise click.ClickException(f"Could not update index: {exc}") from exc

        persisted = False
        if result.changed and not dry_run:
            session.repository.save(root, updated)
            persisted = True
            LOGGER.info("Index file for %s has been updated.", root)
        elif result.changed:
            LOGGER.info("Dry run selected; index file not being updated.")
        else:
            LOGGER.debug("No changes, index file not being updated.")

        if json_output:
            console.print_json(
                data={
                    "root": root.as_posix(),
                    "dry_run": dry_run,
                    "changed": result.changed,
                    "persisted": persisted,
                    "result": result.model_dump(mode="json"),
                    "tracked": len(updated.photos),
                }
            )
            return

        metrics: dict[str, Any] = {
            "added": len(result.added),
            "renamed": len(result.renamed),
            "deleted": len(result.deleted),
            "tracked": len(updated.photos),
        }
        if dry_run:
            metrics["dry_run"] = True
        _emit_message(ctx, _format_summary_line("Update", root, metrics), mode="summary")
    except IndexFileError as exc:
        _handle_cli_error(str(exc), code="index_error", json_output=json_output, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)


@cli.command()
@path_argument
@click.option("--json", "json_output", is_flag=True, help="Emit the findings as JSON.")
@click.pass_context
def check(ctx: click.Context, path: str, json_output: bool) -> None:
    """Verify duplicates, content hashes, and file naming; exit 1 on problems."""
    try:
        session = _open_collection(ctx, path)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)
        return

    root = session.root
    hasher = session.hasher()

    stale = False
    try:
        _, pending = reconcile(
            session.index,
            session.scan(),
            lambda relative: hasher.compute(root / relative),
            workers=session.config.processing.hash_workers,
        )
        stale = pending.changed
    except CollectionError as exc:
        LOGGER.warning("Could not verify that the index file is up-to-date: %s", exc)
    if stale:
        LOGGER.warning(
            'Index file is not up-to-date! Consider running "po update" before "po check" '
            "to get accurate results."
        )

    report = run_checks(root, session.index, hasher.compute, MetadataExtractor())

    if json_output:
        payload = report.model_dump(mode="json")
        payload["index_up_to_date"] = not stale
        payload["problems_found"] = report.problems_found
        console.print_json(data=payload)
    else:
        metrics = {
            "photos": len(session.index.photos),
            "duplicate_groups": len(report.duplicates),
            "integrity_problems": len(report.integrity),
            "naming_issues": len(report.naming),
        }
        _emit_message(ctx, _format_summary_line("Check", root, metrics), mode="summary")

    if report.problems_found:
        ctx.exit(1)


@cli.command(name="list")
@path_argument
@click.option("-r", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.pass_context
def list_photos(ctx: click.Context, path: str, recursive: bool) -> None:
    """Show EXIF metadata and index details for photos in PATH."""
    session = _open_collection(ctx, path)
    photos = photos_in_subdir(session.scan(), session.subdir, recursive)
    entries = session.index.entry_map()
    extractor = MetadataExtractor()
    prefix = f"{session.subdir}/" if session.subdir else ""

    table = Table(title=f"Photos in {session.root / session.subdir}")
    table.add_column("File", overflow="fold")
    table.add_column("Camera")
    table.add_column("Taken")
    table.add_column("Location")
    table.add_column("Original name", overflow="fold")

    for photo in photos:
        try:
            metadata = extractor.extract(session.root / photo.relative_path)
        except CollectionError as exc:
            LOGGER.debug("%s: %s", photo.relative_path, exc)
            camera, taken, location = "Could not read EXIF data", "-", "-"
        else:
            camera = (
                f"{metadata.make or '<unknown make>'} / {metadata.model or '<unknown model>'}"
            )
            taken = (
                metadata.timestamp_local.strftime("%d.%m.%Y %H:%M")
                if metadata.timestamp_local
                else "unknown time"
            )
            if metadata.location is not None:
                latitude, longitude = metadata.location
                altitude = f"{metadata.altitude:g}m" if metadata.altitude is not None else "?"
                location = f"{latitude:.4f},{longitude:.4f},{altitude}"
            else:
                location = "?"

        entry = entries.get(photo.relative_path)
        original = entry.original_filename if entry else "photo not indexed!"
        table.add_row(photo.relative_path[len(prefix) :], camera, taken, location, original)

    _emit_message(ctx, table)


@cli.command()
@path_argument
@click.option("-r", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.option("--dry-run", is_flag=True, help="Preview renames without modifying files.")
@click.pass_context
def rename(ctx: click.Context, path: str, recursive: bool, dry_run: bool) -> None:
    """Rename photos in PATH to follow the collection's naming scheme."""
    session = _open_collection(ctx, path)
    photos = photos_in_subdir(session.scan(), session.subdir, recursive)

    plan = RenamePlanner().build_plan(session.root, photos, session.index.naming_config)
    outcome = RenameExecutor().apply(plan, session.root, dry_run=dry_run)

    if not dry_run:
        moved = apply_renames_to_index(session.index, outcome.applied)
        if moved:
            try:
                session.repository.save(session.root, session.index)
            except IndexFileError as exc:
                raise click.ClickException(str(exc)) from exc
            LOGGER.info("Index file for %s has been updated.", session.root)

    metrics: dict[str, Any] = {
        "renamed": len(outcome.applied),
        "unchanged": plan.unchanged,
        "conflicts": len(outcome.conflicts),
        "skipped": len(plan.skipped) + len(outcome.failures),
    }
    if dry_run:
        metrics["dry_run"] = True
    _emit_message(ctx, _format_summary_line("Rename", session.root, metrics), mode="summary")


@cli.command()
@path_argument
@click.option("-r", "--recursive", is_flag=True, help="Also create catalogues in subdirectories.")
@click.option("--force", is_flag=True, help="Regenerate catalogues that look up-to-date.")
@click.option("--output-filename", type=str, help="Catalogue file name in each directory.")
@click.option("--width", type=click.IntRange(min=16), help="Thumbnail width in pixels.")
@click.pass_context
def thumbcat(
    ctx: click.Context,
    path: str,
    recursive: bool,
    force: bool,
    output_filename: str | None,
    width: int | None,
) -> None:
    """Create an HTML thumbnail catalogue for the photos in PATH."""
    session = _open_collection(ctx, path)
    options = session.config.thumbcat
    catalogue = ThumbnailCatalogue(
        output_filename=output_filename or options.output_filename,
        resize_width=width or options.resize_width,
        workers=session.config.processing.hash_workers,
    )
    try:
        written = catalogue.generate(
            session.root, session.subdir, session.scan(), force=force, recursive=recursive
        )
    except OSError as exc:
        raise click.ClickException(f"Could not write thumbnail catalogue: {exc}") from exc

    _emit_message(
        ctx,
        _format_summary_line("Thumbcat", session.root, {"catalogues": len(written)}),
        mode="summary",
    )


@cli.command(name="map")
@path_argument
@click.option("-r", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.option("--output", type=click.Path(dir_okay=False, path_type=str), help="GPX file to write.")
@click.option("--command", "viewer", type=str, help="Program to open the GPX file with.")
@click.pass_context
def map_photos(
    ctx: click.Context,
    path: str,
    recursive: bool,
    output: str | None,
    viewer: str | None,
) -> None:
    """Export GPS locations of photos in PATH as GPX and optionally open a viewer."""
    session = _open_collection(ctx, path)
    photos = photos_in_subdir(session.scan(), session.subdir, recursive)
    destination = Path(output or session.config.map.output_path).expanduser()

    try:
        count = export_gpx(session.root, photos, destination)
    except OSError as exc:
        raise click.ClickException(f"Could not write GPX file {destination}: {exc}") from exc

    _emit_message(
        ctx,
        _format_summary_line("Map", session.root, {"waypoints": count, "file": destination}),
        mode="summary",
    )

    command = viewer or session.config.map.command
    if command:
        LOGGER.info("Invoking external command %s...", command)
        try:
            subprocess.Popen([*shlex.split(command), str(destination)])
        except OSError as exc:
            raise click.ClickException(f"Could not start {command}: {exc}") from exc


@cli.group()
def config() -> None:
    """Manage photo-organizer settings."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore PHOTO_ORGANIZER__ environment variables.")
def config_view(no_env: bool) -> None:
    """Display the effective settings after applying precedence rules."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        settings = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(settings.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a setting expressed as a dotted KEY."""
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'thumbcat.resize_width'."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"VALUE is not a valid YAML scalar: {exc}") from exc

    try:
        manager.set_value(".".join(segments), parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = manager.read_text().splitlines()

    # The timestamp line always changes, so it is excluded from the diff.
    diff = list(
        difflib.unified_diff(
            [line for line in before if not line.startswith(TIMESTAMP_MARKER)],
            [line for line in after if not line.startswith(TIMESTAMP_MARKER)],
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    if not diff:
        console.print(f"[yellow]{key} already has that value.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the settings file in an interactive editor session."""
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Editor closed without saving; settings unchanged.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]Settings file unchanged.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Edited settings are not valid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Settings must be a YAML mapping of sections.")

    try:
        resolve_with_precedence(defaults=OrganizerConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print(f"[green]Settings updated in {manager.config_path}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
