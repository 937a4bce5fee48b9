from __future__ import annotations

import sqlite3

import pytest

from dealership_manager.utils.backup import (
    BackupSettings,
    export_backup,
    list_backups,
    load_backup_settings,
    prune_old_backups,
    restore_backup,
    run_integrity_check,
    save_backup_settings,
)


def test_backup_and_restore(services, connection, db_path, tmp_path) -> None:
    services.customers.create_customer({"name": "Before", "contact": "0700000001"})
    backup_dir = tmp_path / "backups"
    backup = export_backup(db_path, backup_dir)
    assert backup.exists()
    assert list_backups(backup_dir) == [backup]

    services.customers.create_customer({"name": "After", "contact": "0700000002"})
    connection.close()

    result = restore_backup(backup, db_path, backup_dir)
    assert result.ok
    assert result.safety_backup_path is not None
    assert result.safety_backup_path.name.endswith("_pre_restore.db")

    restored = sqlite3.connect(db_path)
    try:
        names = [row[0] for row in restored.execute("SELECT name FROM customers")]
    finally:
        restored.close()
    assert names == ["Before"]


def test_retention_keeps_newest(connection, db_path, tmp_path) -> None:
    backup_dir = tmp_path / "backups"
    for _ in range(4):
        export_backup(db_path, backup_dir, retention_count=None)
    removed = prune_old_backups(backup_dir, 2)
    assert len(removed) == 2
    assert len(list_backups(backup_dir)) == 2


def test_restore_rejects_bad_files(db_path, tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        restore_backup(tmp_path / "missing.db", db_path, tmp_path)
    text_file = tmp_path / "notes.txt"
    text_file.write_text("hello", encoding="utf-8")
    with pytest.raises(ValueError):
        restore_backup(text_file, db_path, tmp_path)
    empty = tmp_path / "empty.db"
    sqlite3.connect(empty).close()
    with pytest.raises(ValueError, match="missing tables"):
        restore_backup(empty, db_path, tmp_path)


def test_integrity_check(connection, db_path) -> None:
    assert run_integrity_check(db_path) == ["ok"]


def test_backup_settings_round_trip(tmp_path) -> None:
    config_path = tmp_path / "config.json"
    assert load_backup_settings(config_path) == BackupSettings()
    save_backup_settings(config_path, BackupSettings(auto_backup_on_start=True))
    assert load_backup_settings(config_path).auto_backup_on_start
