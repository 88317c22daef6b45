"""ytmp3 application configuration.

Loads settings from a single YAML file:
  * ytmp3.settings.yaml  (path overridable with YTMP3_SETTINGS)

The PORT environment variable overrides ``server.port`` so the service can
run on platforms that assign the port at launch.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("ytmp3.settings.yaml")
SETTINGS_ENV = "YTMP3_SETTINGS"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _base_dir_for(settings_path: Path) -> Path:
    """Directory that relative paths in *settings_path* are resolved against.

    A settings file kept under ``<project>/config/`` refers to paths from the
    project root; any other layout uses the settings file's own directory.
    """
    parent = settings_path.resolve().parent
    if parent.name == "config":
        return parent.parent
    return parent


def _resolve(path: str, base_dir: Path) -> str:
    p = Path(path)
    if p.is_absolute():
        return str(p)
    return str(base_dir / p)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:            str       = "0.0.0.0"
    port:            int       = 3000
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])


class DownloaderSettings(BaseModel):
    """How the yt-dlp binary is invoked."""
    binary:                  str       = "yt-dlp"
    info_timeout_seconds:    float     = 60
    convert_timeout_seconds: float     = 300
    allowed_hosts:           List[str] = Field(
        default_factory=lambda: ["youtube.com", "youtu.be"]
    )
    default_quality:         str       = "320"

    @field_validator("info_timeout_seconds", "convert_timeout_seconds")
    @classmethod
    def check_positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


class StorageSettings(BaseModel):
    """Flat directory of converted files plus the reaper schedule."""
    downloads_dir:          str = "downloads"
    max_age_seconds:        int = 3600
    sweep_interval_seconds: int = 3600

    @field_validator("max_age_seconds", "sweep_interval_seconds")
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


class StaticSettings(BaseModel):
    enabled:   bool = True
    directory: str  = "public"


class LoggingSettings(BaseModel):
    level: str = "info"


class AppSettings(BaseModel):
    server:     ServerSettings     = Field(default_factory=ServerSettings)
    downloader: DownloaderSettings = Field(default_factory=DownloaderSettings)
    storage:    StorageSettings    = Field(default_factory=StorageSettings)
    static:     StaticSettings     = Field(default_factory=StaticSettings)
    logging:    LoggingSettings    = Field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(settings_path: Optional[Path] = None) -> AppSettings:
    """Load settings from YAML, resolve relative paths, apply env overrides."""
    if settings_path is None:
        settings_path = Path(os.environ.get(SETTINGS_ENV, SETTINGS_FILE))
    settings_path = Path(settings_path)

    data = _load_yaml(settings_path)
    cfg = AppSettings(**data)

    base_dir = _base_dir_for(settings_path)
    cfg.storage.downloads_dir = _resolve(cfg.storage.downloads_dir, base_dir)
    cfg.static.directory = _resolve(cfg.static.directory, base_dir)

    port = os.environ.get("PORT")
    if port:
        try:
            cfg.server.port = int(port)
        except ValueError:
            logger.warning("Ignoring non-numeric PORT=%r", port)

    logger.info(
        "Settings loaded (server=%s:%s, downloads_dir=%s, max_age=%ss)",
        cfg.server.host,
        cfg.server.port,
        cfg.storage.downloads_dir,
        cfg.storage.max_age_seconds,
    )
    return cfg


_config: Optional[AppSettings] = None


def get_config() -> AppSettings:
    """Return the process-wide settings, loading them on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: AppSettings) -> None:
    global _config
    _config = config


def reset_config() -> None:
    """Forget the cached settings (for testing)."""
    global _config
    _config = None
