# src/greencrowd/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/greencrowd/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `GREENCROWD_CONFIG_PATH`
- environment variables (e.g., `GREENCROWD_LOG_LEVEL`, `GREENCROWD_CATALOG_PATH`, `GREENCROWD_CORS_ORIGINS`)

Design rule:
- Tuning knobs live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from greencrowd.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `greencrowd.config`."""
    text = resources.files("greencrowd.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "GreenCrowd"
    log_level: str = "INFO"


class ApiSettings(BaseModel):
    # Origins of the PWA allowed to call the API with cookies; empty disables CORS.
    cors_origins: list[str] = Field(default_factory=list)
    cors_allow_credentials: bool = True


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/campaigns.json"


class GeofenceSettings(BaseModel):
    default_poi_radius_m: float = Field(50.0, gt=0)


class KmlSettings(BaseModel):
    document_name: str = "GreenCrowd areas"
    export_filename: str = "exported-areas.kml"


class EventLogSettings(BaseModel):
    enabled: bool = True
    max_metadata_keys: int = Field(50, ge=0)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    geofence: GeofenceSettings = Field(default_factory=GeofenceSettings)  # type: ignore
    kml: KmlSettings = Field(default_factory=KmlSettings)
    events: EventLogSettings = Field(default_factory=EventLogSettings)  # type: ignore


def _env_flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("GREENCROWD_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    catalog_path = os.getenv("GREENCROWD_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    cors_origins = os.getenv("GREENCROWD_CORS_ORIGINS")
    if cors_origins:
        data.setdefault("api", {})["cors_origins"] = [s.strip() for s in cors_origins.split(",") if s.strip()]

    event_logging = os.getenv("GREENCROWD_EVENT_LOGGING")
    if event_logging:
        data.setdefault("events", {})["enabled"] = _env_flag(event_logging)

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("GREENCROWD_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
