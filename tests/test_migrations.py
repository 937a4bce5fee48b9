from __future__ import annotations

import sqlite3

import pytest

from dealership_manager.db.migrations import (
    LATEST_SCHEMA_VERSION,
    apply_migrations,
    get_schema_version,
)


def test_migrations_are_idempotent(connection) -> None:
    assert get_schema_version(connection) == LATEST_SCHEMA_VERSION
    apply_migrations(connection)
    assert get_schema_version(connection) == LATEST_SCHEMA_VERSION


def test_expected_tables_exist(connection) -> None:
    tables = {
        row[0]
        for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    }
    assert {
        "customers",
        "leasing_companies",
        "inventory_items",
        "vehicle_orders",
        "transactions",
        "leasing_details",
        "payments",
        "expenses",
        "documents",
    } <= tables


def test_balance_cannot_go_negative(connection, reservation) -> None:
    with pytest.raises(sqlite3.IntegrityError):
        connection.execute(
            "UPDATE transactions SET balance_remaining = -1 WHERE id = ?",
            (reservation.id,),
        )
    connection.rollback()
