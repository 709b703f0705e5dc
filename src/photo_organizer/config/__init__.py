"""Application settings for photo-organizer.

Settings are stored as YAML in ``~/.photo-organizer/config.yaml``. Values are
resolved with the precedence defaults < file < environment < command line,
where environment variables take the form ``PHOTO_ORGANIZER__SECTION__KEY``
and hold YAML scalars (``PHOTO_ORGANIZER__PROCESSING__HASH_WORKERS=8``).
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import OrganizerConfig
from .resolver import (
    ENV_PREFIX,
    expand_dotted,
    flatten_for_env,
    merge_settings,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.photo-organizer/config.yaml")
TIMESTAMP_MARKER = "# Last updated:"

_HEADER_LINES = (
    "# photo-organizer settings",
    "# Edit with `po config edit` or `po config set KEY --value VALUE`.",
    "# `naming` only seeds `po init`; each collection keeps its own scheme in its index.",
)


def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``PHOTO_ORGANIZER__`` variables into a nested override mapping.

    Args:
        env: Environment mapping, usually ``os.environ``.

    Returns:
        dict[str, Any]: Overrides keyed by lower-cased section and field names.
    """
    dotted: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            dotted[".".join(segments)] = yaml.safe_load(raw)
        except yaml.YAMLError:
            dotted[".".join(segments)] = raw
    return expand_dotted(dotted, "environment")


class ConfigManager:
    """Read, resolve, and write the settings file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        """Return the settings file location with ``~`` expanded."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        environ: Mapping[str, str] | None = None,
    ) -> OrganizerConfig:
        """Return the effective settings.

        Args:
            cli_overrides: Highest-precedence values, nested or dotted.
            include_env: Whether ``PHOTO_ORGANIZER__`` variables are applied.
            ensure_file: Whether a default settings file is created when missing.
            environ: Environment mapping used instead of the process environment.

        Returns:
            OrganizerConfig: Validated settings.

        Raises:
            ConfigError: If the file cannot be parsed or a value is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        environment: dict[str, Any] | None = None
        if include_env:
            environment = env_overrides(self._env if environ is None else environ) or None

        return resolve_with_precedence(
            defaults=OrganizerConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=environment,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the settings file.

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping.
        """
        text = self.read_text()
        if not text:
            return {}
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(
                f"Failed to parse configuration file {self._config_path}: {exc}"
            ) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration file {self._config_path} must contain a mapping at the top level."
            )
        return data

    def save(self, config: OrganizerConfig | Mapping[str, Any]) -> None:
        """Write settings, or a partial override mapping, to the settings file."""
        if isinstance(config, OrganizerConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)

        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(data, sort_keys=False)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(
            "\n".join([*_HEADER_LINES, f"{TIMESTAMP_MARKER} {stamp}", body]), encoding="utf-8"
        )

    def set_value(self, key: str, value: Any) -> dict[str, Any]:
        """Validate and persist a single dotted setting.

        Returns:
            dict[str, Any]: The file overrides after the assignment.

        Raises:
            ConfigError: If the key conflicts with the file layout or the value is invalid.
        """
        data = merge_settings(self.load_file_overrides(), expand_dotted({key: value}, "CLI"))
        resolve_with_precedence(defaults=OrganizerConfig(), file_overrides=data)
        self.save(data)
        return data

    def ensure_exists(self) -> Path:
        """Create the settings file with default values when it is missing."""
        if not self._config_path.exists():
            self.save(OrganizerConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the settings file contents, or an empty string when missing."""
        try:
            return self._config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except OSError as exc:
            raise ConfigError(
                f"Could not read configuration file {self._config_path}: {exc}"
            ) from exc


__all__ = [
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "TIMESTAMP_MARKER",
    "OrganizerConfig",
    "env_overrides",
    "expand_dotted",
    "flatten_for_env",
    "merge_settings",
    "resolve_with_precedence",
]
