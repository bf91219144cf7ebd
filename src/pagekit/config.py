"""
Configuration for pagekit.

Two layers:

- ``SiteConfig``: what to build (source/output dirs, templates, required
  front-matter keys). Usually loaded from ``pagekit.yaml``.
- ``PagekitSettings``: how to run (log level and format, which config file
  to read). Read from ``PAGEKIT_*`` environment variables and ``.env``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from fnmatch import fnmatch
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagekit.errors import InvalidConfigError, MissingConfigError

DEFAULT_REQUIRED_KEYS = ["title", "last_reviewed_on", "review_in", "owner_slack"]


@dataclass
class SiteConfig:
    """Configuration for building a directory of pages.

    Attributes:
        source_dir: Directory containing page sources
        output_dir: Where to write rendered HTML
        template_dir: Directory with templates overriding the packaged ones
        patterns: Glob patterns selecting page sources
        skip_patterns: Glob patterns; a path with a matching segment is excluded
        required_keys: Front-matter keys every page must set
        warn_within_days: Review window reported as ``due_soon``
        layout: Layout template name
    """

    source_dir: Path = field(default_factory=lambda: Path("content"))
    output_dir: Path = field(default_factory=lambda: Path("build"))
    template_dir: Path | None = None

    patterns: list[str] = field(default_factory=lambda: ["*.md"])
    skip_patterns: list[str] = field(default_factory=lambda: [
        "_drafts", ".git", "node_modules", "README.md",
    ])

    required_keys: list[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_KEYS))
    warn_within_days: int = 30

    layout: str = "layout.html"

    def __post_init__(self):
        """Convert paths to Path objects if strings."""
        if isinstance(self.source_dir, str):
            self.source_dir = Path(self.source_dir)
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        if isinstance(self.template_dir, str):
            self.template_dir = Path(self.template_dir)
        if isinstance(self.patterns, str):
            self.patterns = [self.patterns]
        if not isinstance(self.warn_within_days, int) or self.warn_within_days < 0:
            raise InvalidConfigError("warn_within_days", self.warn_within_days)

    @classmethod
    def from_yaml(cls, yaml_path: Path | str) -> SiteConfig:
        """Load configuration from YAML file.

        Relative directories in the file are resolved against the file's
        own directory.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            SiteConfig instance
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.is_file():
            raise MissingConfigError(
                str(yaml_path), f"Config file not found: {yaml_path}"
            )

        try:
            with open(yaml_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InvalidConfigError(
                str(yaml_path), None, f"Config file is not valid YAML: {e}"
            ) from e

        if not isinstance(data, dict):
            raise InvalidConfigError(
                str(yaml_path), data, f"Config file must contain a mapping: {yaml_path}"
            )

        base = yaml_path.parent
        for key in ("source_dir", "output_dir", "template_dir"):
            value = data.get(key)
            if value is not None and not Path(value).is_absolute():
                data[key] = base / value

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SiteConfig:
        """Create config from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                raise InvalidConfigError(key, data[key], f"Unknown configuration key: {key}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "source_dir": str(self.source_dir),
            "output_dir": str(self.output_dir),
            "template_dir": str(self.template_dir) if self.template_dir else None,
            "patterns": self.patterns,
            "skip_patterns": self.skip_patterns,
            "required_keys": self.required_keys,
            "warn_within_days": self.warn_within_days,
            "layout": self.layout,
        }

    def should_skip(self, file_path: Path) -> bool:
        """Check if any path segment matches a skip pattern (glob syntax)."""
        return any(
            fnmatch(part, pattern)
            for part in file_path.parts
            for pattern in self.skip_patterns
        )


class PagekitSettings(BaseSettings):
    """Runtime settings read from ``PAGEKIT_*`` environment variables.

    Fields
    ──────
    log_level    : structlog log level
    log_json     : force JSON (true) or console (false) logs; unset = auto
    config_file  : YAML site config used when ``--config`` is not given
    """

    model_config = SettingsConfigDict(
        env_prefix="PAGEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"
    log_json: bool | None = None
    config_file: Path = Path("pagekit.yaml")


def load_site_config(path: Path | str | None = None) -> SiteConfig:
    """Resolve the site config.

    An explicit ``path`` must exist. Without one, the settings'
    ``config_file`` is used when present and defaults apply otherwise.
    """
    if path is not None:
        return SiteConfig.from_yaml(path)

    candidate = PagekitSettings().config_file
    if candidate.is_file():
        return SiteConfig.from_yaml(candidate)
    return SiteConfig()


__all__ = [
    "DEFAULT_REQUIRED_KEYS",
    "SiteConfig",
    "PagekitSettings",
    "load_site_config",
]
