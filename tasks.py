"""Invoke tasks for photo-organizer development.

All tasks run through `uv` so that local runs use the locked environment.
"""

from __future__ import annotations

import shlex
import shutil
from pathlib import Path

from invoke import Collection, Context, task

ROOT = Path(__file__).parent
SOURCES = ("src", "tests", "tasks.py")


def _uv(ctx: Context, *args: str) -> None:
    ctx.run(shlex.join(("uv", *args)), echo=True, pty=True)


@task(help={"dev": "Install the dev extra as well (default: yes)."})
def sync(ctx: Context, dev: bool = True) -> None:
    """Create or update the virtual environment."""
    _uv(ctx, "sync", *(("--extra", "dev") if dev else ()))


@task
def clean(ctx: Context) -> None:
    """Remove build artifacts and tool caches."""
    for name in ("dist", "build", ".pytest_cache", ".mypy_cache", ".ruff_cache"):
        shutil.rmtree(ROOT / name, ignore_errors=True)


@task(pre=[clean])
def build(ctx: Context) -> None:
    """Build the sdist and wheel into dist/."""
    _uv(ctx, "build")


@task(
    help={
        "k": "Only run tests matching this pytest -k expression.",
        "path": "Test file or directory (default: tests).",
        "options": "Extra flags passed through to pytest.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the test suite."""
    args = ["run", "pytest", *shlex.split(options)]
    if k:
        args += ["-k", k]
    _uv(ctx, *args, path)


@task(help={"fix": "Apply safe fixes and reformat instead of only checking."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint rules with ruff."""
    if fix:
        _uv(ctx, "run", "ruff", "format", *SOURCES)
        _uv(ctx, "run", "ruff", "check", "--fix", *SOURCES)
        return
    _uv(ctx, "run", "ruff", "format", "--check", *SOURCES)
    _uv(ctx, "run", "ruff", "check", *SOURCES)


@task
def mypy(ctx: Context) -> None:
    """Type-check the package."""
    _uv(ctx, "run", "mypy")


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks, and tests like CI does."""
    lint(ctx)
    mypy(ctx)
    tests(ctx)


namespace = Collection(sync, clean, build, tests, lint, mypy, ci)
