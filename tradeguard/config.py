"""Configuration for TradeGuard.

Settings live in ``config.toml`` under the config directory
(``~/.config/tradeguard`` unless ``TRADEGUARD_HOME`` is set).
"""

import logging
import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "TRADEGUARD_HOME"
CONFIG_FILENAME = "config.toml"
DB_FILENAME = "tradeguard.db"
LOG_FILENAME = "tradeguard.log"


def get_config_dir() -> Path:
    """Directory holding the config file, database and log."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "tradeguard"


def get_config_path() -> Path:
    """Path of ``config.toml``."""
    return get_config_dir() / CONFIG_FILENAME


class Settings(BaseModel):
    """Resolved application settings."""

    db_path: Path = Field(..., description="SQLite database file")
    currency: str = Field(default="¥", description="Currency symbol for display")
    log_level: str = Field(default="WARNING", description="Logging level name")
    log_file: Optional[Path] = Field(default=None, description="Log file, None to disable")

    model_config = {"frozen": True}


def _load_raw(config_path: Path) -> dict:
    """Read the toml file, returning an empty dict if missing or unreadable."""
    if not config_path.exists():
        return {}
    try:
        return toml.load(config_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Could not read %s, using defaults: %s", config_path, e)
        return {}


def _section(raw: dict, name: str) -> dict:
    """Return a config table, or an empty dict if it is missing or not a table."""
    section = raw.get(name, {})
    if not isinstance(section, dict):
        logger.warning("[%s] in config is not a table, using defaults", name)
        return {}
    return section


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings, falling back to defaults for anything not configured.

    Args:
        config_path: Explicit config file. Defaults to ``get_config_path()``.
    """
    config_path = config_path or get_config_path()
    config_dir = config_path.parent
    raw = _load_raw(config_path)

    storage = _section(raw, "storage")
    display = _section(raw, "display")
    logging_config = _section(raw, "logging")

    db_path = storage.get("db_path") or str(config_dir / DB_FILENAME)
    log_file = logging_config.get("file", str(config_dir / LOG_FILENAME))

    return Settings(
        db_path=Path(db_path).expanduser(),
        currency=display.get("currency", "¥"),
        log_level=str(logging_config.get("level", "WARNING")).upper(),
        log_file=Path(log_file).expanduser() if log_file else None,
    )


def create_template_config(config_path: Optional[Path] = None) -> Path:
    """Write a template ``config.toml``.

    Returns:
        Path of the written file.
    """
    config_path = config_path or get_config_path()
    config_dir = config_path.parent
    config_dir.mkdir(parents=True, exist_ok=True)

    template = {
        "storage": {
            "db_path": str(config_dir / DB_FILENAME),
        },
        "display": {
            "currency": "¥",
        },
        "logging": {
            "level": "WARNING",
            "file": str(config_dir / LOG_FILENAME),  # empty string disables file logging
        },
    }

    with open(config_path, "w", encoding="utf-8") as f:
        toml.dump(template, f)

    return config_path
