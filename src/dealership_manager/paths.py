"""Filesystem paths for DealershipManager."""

from __future__ import annotations

import os
from pathlib import Path

from dealership_manager.config import (
    APP_DATA_DIRNAME,
    BACKUP_DIRNAME,
    CONFIG_FILENAME,
    DB_FILENAME,
    DOCUMENTS_DIRNAME,
    EXPORTS_DIRNAME,
    LOGS_DIRNAME,
)


def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_app_data_dir() -> Path:
    """Create and return the app data directory for the current user."""
    override = os.getenv("DEALERSHIP_MANAGER_HOME")
    if override:
        return _ensure_dir(Path(override))
    appdata = os.getenv("APPDATA")
    if appdata:
        base_dir = Path(appdata)
    else:
        base_dir = Path.home() / ".dealership_manager"
    return _ensure_dir(base_dir / APP_DATA_DIRNAME)


def get_db_path() -> Path:
    """Return the path to the SQLite database file."""
    return get_app_data_dir() / DB_FILENAME


def get_config_path() -> Path:
    """Return the path to the JSON settings file."""
    return get_app_data_dir() / CONFIG_FILENAME


def get_backup_dir() -> Path:
    """Create and return the backup directory inside the app data folder."""
    return _ensure_dir(get_app_data_dir() / BACKUP_DIRNAME)


def get_logs_dir() -> Path:
    """Create and return the log directory inside the app data folder."""
    return _ensure_dir(get_app_data_dir() / LOGS_DIRNAME)


def get_documents_dir() -> Path:
    """Create and return the default invoices directory."""
    return _ensure_dir(get_app_data_dir() / DOCUMENTS_DIRNAME)


def get_exports_dir() -> Path:
    """Create and return the report exports directory."""
    return _ensure_dir(get_app_data_dir() / EXPORTS_DIRNAME)
