"""
Project root and `.env` handling.

The catalog path in settings is relative (`data/catalogs/campaigns.json`), and the
API, CLI and tests are launched from different directories. Relative paths are
therefore resolved against the checkout that holds the catalog directory.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

CATALOG_DIR = Path("data") / "catalogs"


@lru_cache
def get_project_root() -> Path:
    """`GREENCROWD_PROJECT_ROOT`, else the nearest parent of the cwd with `data/catalogs/` or `.env`."""
    override = os.getenv("GREENCROWD_PROJECT_ROOT")
    if override:
        return Path(override).expanduser().resolve()

    cwd = Path.cwd().resolve()
    for candidate in [cwd, *cwd.parents]:
        if (candidate / CATALOG_DIR).is_dir() or (candidate / ".env").is_file():
            return candidate
    return cwd


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project `.env` once, without overriding variables already set."""
    env_path = get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_project_root() / p).resolve()
