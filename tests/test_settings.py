from __future__ import annotations

from pathlib import Path

import pytest

from greencrowd.config.settings import get_logging_config, get_settings
from greencrowd.core.env import get_project_root, resolve_project_path


@pytest.fixture
def fresh_settings():
    # get_settings() is lru_cached; clear around env-dependent tests so they do not leak.
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()


def test_packaged_defaults_load(fresh_settings, monkeypatch):
    for name in ["GREENCROWD_CONFIG_PATH", "GREENCROWD_LOG_LEVEL", "GREENCROWD_CATALOG_PATH", "GREENCROWD_EVENT_LOGGING"]:
        monkeypatch.delenv(name, raising=False)

    settings = fresh_settings()

    assert settings.app.name == "GreenCrowd"
    assert settings.catalog.path == "data/catalogs/campaigns.json"
    assert settings.geofence.default_poi_radius_m > 0
    assert settings.events.enabled is True


def test_env_overrides_whitelisted_knobs(fresh_settings, monkeypatch):
    monkeypatch.setenv("GREENCROWD_LOG_LEVEL", "debug")
    monkeypatch.setenv("GREENCROWD_CATALOG_PATH", "/tmp/other.json")
    monkeypatch.setenv("GREENCROWD_EVENT_LOGGING", "0")

    settings = fresh_settings()

    assert settings.app.log_level == "debug"
    assert settings.catalog.path == "/tmp/other.json"
    assert settings.events.enabled is False


def test_external_config_file_replaces_packaged_defaults(fresh_settings, monkeypatch, tmp_path):
    config = tmp_path / "greencrowd.yaml"
    config.write_text("geofence:\n  default_poi_radius_m: 25\n", encoding="utf-8")
    monkeypatch.setenv("GREENCROWD_CONFIG_PATH", str(config))
    monkeypatch.delenv("GREENCROWD_CATALOG_PATH", raising=False)

    settings = fresh_settings()

    assert settings.geofence.default_poi_radius_m == 25
    # Sections missing from the file fall back to model defaults.
    assert settings.catalog.path == "data/catalogs/campaigns.json"


def test_invalid_config_is_rejected(fresh_settings, monkeypatch, tmp_path):
    config = tmp_path / "bad.yaml"
    config.write_text("geofence:\n  default_poi_radius_m: -1\n", encoding="utf-8")
    monkeypatch.setenv("GREENCROWD_CONFIG_PATH", str(config))

    with pytest.raises(ValueError):
        fresh_settings()


def test_logging_config_declares_event_logger():
    config = get_logging_config()
    assert "greencrowd.events" in config["loggers"]


def test_cors_origins_from_env(fresh_settings, monkeypatch):
    monkeypatch.setenv("GREENCROWD_CORS_ORIGINS", "https://app.greencrowd.example, http://localhost:3000,")

    settings = fresh_settings()

    assert settings.api.cors_origins == ["https://app.greencrowd.example", "http://localhost:3000"]


@pytest.fixture
def fresh_root():
    get_project_root.cache_clear()
    yield
    get_project_root.cache_clear()


def test_project_root_is_found_from_catalog_directory(fresh_root, monkeypatch, tmp_path):
    (tmp_path / "data" / "catalogs").mkdir(parents=True)
    nested = tmp_path / "deep" / "er"
    nested.mkdir(parents=True)
    monkeypatch.delenv("GREENCROWD_PROJECT_ROOT", raising=False)
    monkeypatch.chdir(nested)

    assert get_project_root() == tmp_path.resolve()
    assert resolve_project_path("data/catalogs/x.json") == tmp_path.resolve() / "data" / "catalogs" / "x.json"


def test_project_root_override(fresh_root, monkeypatch, tmp_path):
    monkeypatch.setenv("GREENCROWD_PROJECT_ROOT", str(tmp_path))
    assert get_project_root() == tmp_path.resolve()
    assert resolve_project_path("/abs/path.json") == Path("/abs/path.json")
