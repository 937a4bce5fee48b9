"""Database backups: timestamped copies, retention and restore."""

from __future__ import annotations

import logging
import shutil
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from dealership_manager.config import BACKUP_RETENTION_COUNT
from dealership_manager.utils.config_store import load_config_data, update_config_data

REQUIRED_TABLES = frozenset(
    {"customers", "inventory_items", "transactions", "payments", "expenses"}
)
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupSettings:
    auto_backup_on_start: bool = False


@dataclass(frozen=True)
class RestoreResult:
    restored_path: Path
    safety_backup_path: Optional[Path]
    integrity_check_results: list[str]

    @property
    def ok(self) -> bool:
        return self.integrity_check_results == ["ok"]


def load_backup_settings(config_path: Path) -> BackupSettings:
    data = load_config_data(config_path)
    return BackupSettings(auto_backup_on_start=bool(data.get("auto_backup_on_start")))


def save_backup_settings(config_path: Path, settings: BackupSettings) -> None:
    update_config_data(config_path, auto_backup_on_start=settings.auto_backup_on_start)


def export_backup(
    db_path: Path | str,
    backup_dir: Path | str,
    *,
    label: Optional[str] = None,
    retention_count: Optional[int] = BACKUP_RETENTION_COUNT,
) -> Path:
    """Copy the database into ``backup_dir`` under a timestamped name."""
    source = Path(db_path)
    if not source.is_file():
        raise FileNotFoundError(f"Database not found: {source}")
    target_dir = Path(backup_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    suffix = f"_{label}" if label else ""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = target_dir / f"{source.stem}_{stamp}{suffix}.db"
    shutil.copy2(source, backup_path)
    logger.info("Database backup written to %s", backup_path)
    prune_old_backups(target_dir, retention_count)
    return backup_path


def list_backups(backup_dir: Path | str) -> list[Path]:
    """Backups in ``backup_dir``, newest first."""
    target_dir = Path(backup_dir)
    if not target_dir.is_dir():
        return []
    return sorted(
        (path for path in target_dir.glob("*.db") if path.is_file()),
        key=lambda path: (path.stat().st_mtime, path.name),
        reverse=True,
    )


def prune_old_backups(
    backup_dir: Path | str, retention_count: Optional[int] = BACKUP_RETENTION_COUNT
) -> list[Path]:
    if not retention_count or retention_count <= 0:
        return []
    stale = list_backups(backup_dir)[retention_count:]
    for path in stale:
        path.unlink(missing_ok=True)
    if stale:
        logger.info("Pruned %s old backups", len(stale))
    return stale


def run_integrity_check(db_path: Path | str) -> list[str]:
    """Return the rows of ``PRAGMA integrity_check``; ``["ok"]`` when healthy."""
    try:
        connection = sqlite3.connect(str(db_path))
    except sqlite3.Error as exc:
        raise ValueError(f"Cannot open database for checking: {db_path}") from exc
    try:
        return [row[0] for row in connection.execute("PRAGMA integrity_check;")]
    finally:
        connection.close()


def restore_backup(
    backup_file: Path | str,
    db_path: Path | str,
    backup_dir: Path | str,
) -> RestoreResult:
    """Replace the live database with ``backup_file``.

    The current database is copied aside first so the restore can be undone.
    """
    backup_path = Path(backup_file)
    if not backup_path.is_file():
        raise FileNotFoundError(f"Backup file not found: {backup_path}")
    if backup_path.suffix.lower() != ".db":
        raise ValueError("Backup file must be a .db SQLite database.")
    _check_tables(backup_path, REQUIRED_TABLES)

    database_path = Path(db_path)
    safety_backup = None
    if database_path.exists():
        safety_backup = export_backup(
            database_path, backup_dir, label="pre_restore", retention_count=None
        )

    source = sqlite3.connect(str(backup_path))
    destination = sqlite3.connect(str(database_path))
    try:
        source.backup(destination)
        destination.commit()
    finally:
        destination.close()
        source.close()

    results = run_integrity_check(database_path)
    logger.info("Restored %s; integrity_check: %s", backup_path, "; ".join(results))
    return RestoreResult(
        restored_path=database_path,
        safety_backup_path=safety_backup,
        integrity_check_results=results,
    )


def _check_tables(backup_path: Path, required: Iterable[str]) -> None:
    connection = sqlite3.connect(str(backup_path))
    try:
        tables = {
            row[0]
            for row in connection.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            )
        }
    except sqlite3.DatabaseError as exc:
        raise ValueError(f"Not a valid SQLite database: {backup_path}") from exc
    finally:
        connection.close()
    missing = sorted(set(required) - tables)
    if missing:
        raise ValueError(f"Backup is missing tables: {', '.join(missing)}")
