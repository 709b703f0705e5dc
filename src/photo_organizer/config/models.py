"""Configuration models describing photo-organizer settings."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from photo_organizer.index.models import DEFAULT_NAMING_SCHEME, NamingConfig


class SettingsBaseModel(BaseModel):
    """Shared configuration for settings models."""

    model_config = ConfigDict(extra="forbid")


class NamingDefaults(SettingsBaseModel):
    """Naming scheme written into new collections by `po init`.

    Attributes:
        naming_scheme: Template with strftime directives plus ``%{type}`` and
            ``%{fileextension}`` placeholders.
        file_types: Mapping of type tags to the extensions they cover.
    """

    naming_scheme: str = DEFAULT_NAMING_SCHEME
    file_types: Dict[str, List[str]] = Field(
        default_factory=lambda: NamingConfig().file_types
    )

    def to_naming_config(self) -> NamingConfig:
        return NamingConfig(naming_scheme=self.naming_scheme, file_types=self.file_types)


class ProcessingOptions(SettingsBaseModel):
    """Options governing scanning and hashing.

    Attributes:
        include_hidden: Whether hidden files and directories are scanned.
        hash_workers: Threads used to hash new files during updates.
        hash_chunk_size_kb: Read size used while hashing.
    """

    include_hidden: bool = False
    hash_workers: int = Field(default=4, ge=1)
    hash_chunk_size_kb: int = Field(default=1024, ge=1)


class LoggingSettings(SettingsBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Default logging level before -v/-q adjustments.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class CLIOptions(SettingsBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands only log warnings and errors by default.
        git_hint: Whether to warn when the index file is not tracked by git.
    """

    quiet_default: bool = False
    git_hint: bool = True


class ThumbcatOptions(SettingsBaseModel):
    """Thumbnail catalogue defaults."""

    output_filename: str = "thumbcat.html"
    resize_width: int = Field(default=320, ge=16)


class MapOptions(SettingsBaseModel):
    """GPX export defaults.

    Attributes:
        output_path: File the GPX waypoints are written to.
        command: Optional viewer invoked with the GPX file as its argument.
    """

    output_path: str = "~/.photo-organizer/photo_locations.gpx"
    command: Optional[str] = None


class OrganizerConfig(SettingsBaseModel):
    """Top-level settings.

    Attributes:
        naming: Defaults for new collections.
        processing: Scanning and hashing options.
        logging: Logging configuration.
        cli: CLI presentation defaults.
        thumbcat: Thumbnail catalogue defaults.
        map: GPX export defaults.
    """

    naming: NamingDefaults = Field(default_factory=NamingDefaults)
    processing: ProcessingOptions = Field(default_factory=ProcessingOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)
    thumbcat: ThumbcatOptions = Field(default_factory=ThumbcatOptions)
    map: MapOptions = Field(default_factory=MapOptions)


__all__ = [
    "SettingsBaseModel",
    "NamingDefaults",
    "ProcessingOptions",
    "LoggingSettings",
    "CLIOptions",
    "ThumbcatOptions",
    "MapOptions",
    "OrganizerConfig",
]
