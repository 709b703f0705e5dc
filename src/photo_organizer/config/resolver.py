"""Merging of settings sources into a validated configuration."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import OrganizerConfig

ENV_PREFIX = "PHOTO_ORGANIZER__"

# Free-form mappings that an override replaces as a whole.
ATOMIC_KEYS = frozenset({"file_types"})


def resolve_with_precedence(
    *,
    defaults: OrganizerConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> OrganizerConfig:
    """Merge settings sources: defaults < file < environment < CLI.

    Override mappings may be nested or use dotted keys such as
    ``thumbcat.resize_width``.

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid.
    """
    merged = defaults.model_dump(mode="python")
    sources = (("file", file_overrides), ("environment", env_overrides), ("CLI", cli_overrides))
    for label, source in sources:
        if source is not None:
            merged = merge_settings(merged, expand_dotted(source, label))

    try:
        return OrganizerConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted(source: Mapping[str, Any], label: str = "settings") -> dict[str, Any]:
    """Return source with dotted keys turned into nested mappings."""
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label} override keys must be strings, got {key!r}.")
        *parents, leaf = key.split(".")
        node = expanded
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(f"{label} override {key} conflicts with the value of {segment}.")
            node = child
        if isinstance(value, MappingABC) and leaf not in ATOMIC_KEYS:
            existing = node.get(leaf)
            base = existing if isinstance(existing, dict) else {}
            value = merge_settings(base, expand_dotted(value, label))
        node[leaf] = deepcopy(value)
    return expanded


def merge_settings(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = deepcopy(dict(base))
    for key, value in overrides.items():
        current = merged.get(key)
        if key not in ATOMIC_KEYS and isinstance(value, MappingABC) and isinstance(current, dict):
            merged[key] = merge_settings(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def flatten_for_env(config: OrganizerConfig) -> Dict[str, str]:
    """Render config as ``PHOTO_ORGANIZER__SECTION__KEY`` variables in YAML syntax."""
    flat: Dict[str, str] = {}
    pending = [((key,), value) for key, value in config.model_dump(mode="python").items()]
    while pending:
        path, value = pending.pop()
        if isinstance(value, dict) and path[-1] not in ATOMIC_KEYS:
            pending.extend((path + (key,), child) for key, child in value.items())
            continue
        name = ENV_PREFIX + "__".join(part.upper() for part in path)
        if isinstance(value, (dict, list)):
            flat[name] = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            flat[name] = "null" if value is None else str(value)
    return flat


__all__ = [
    "resolve_with_precedence",
    "expand_dotted",
    "merge_settings",
    "flatten_for_env",
    "ENV_PREFIX",
]
