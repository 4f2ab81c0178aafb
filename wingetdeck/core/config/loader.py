"""
Configuration loader — reads deck.yml into a Settings model.

It reads YAML, validates against a Pydantic schema, and returns
typed settings. A missing file is not an error: every setting has
a default, so the control plane runs without any configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, ValidationError

from wingetdeck.core.persistence.audit import DEFAULT_AUDIT_PATH

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "deck.yml"


class ConfigError(Exception):
    """Raised when deck.yml is unreadable or invalid."""


class Settings(BaseModel):
    """Runtime settings for the control plane and CLI."""

    model_config = ConfigDict(extra="forbid")

    # HTTP listener
    host: str = "127.0.0.1"
    port: int = Field(default=9090, ge=1, le=65535)

    # Inventory cache
    cache_ttl: float = Field(default=300.0, ge=0)

    # Package manager
    winget: str = "winget"
    probe_timeout: PositiveFloat | None = 120.0
    install_timeout: PositiveFloat | None = None
    disable_interactivity: bool = True

    # Files (relative paths resolve against the config directory)
    catalog: Path | None = None
    audit_file: Path = DEFAULT_AUDIT_PATH

    # Directory relative paths resolve against; not read from YAML
    root: Path = Field(default_factory=Path.cwd, exclude=True)

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    @property
    def catalog_path(self) -> Path | None:
        return self.resolve(self.catalog) if self.catalog else None

    @property
    def audit_path(self) -> Path:
        return self.resolve(self.audit_file)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for deck.yml starting from the given directory, walking up.

    Returns:
        Path to deck.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to deck.yml. If None, searches upward and
            falls back to defaults when nothing is found.

    Raises:
        ConfigError: An explicit file is missing, or a file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return Settings()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "deck" key or be flat
    data = data.get("deck", data)

    try:
        settings = Settings.model_validate({**data, "root": path.parent.resolve()})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded settings from %s (port %d, ttl %ss)", path, settings.port, settings.cache_ttl)
    return settings
