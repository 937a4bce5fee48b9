"""Database connection helpers."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


def get_connection(database_path: Path | str) -> sqlite3.Connection:
    """Create a SQLite connection with foreign keys enabled."""
    connection = sqlite3.connect(str(database_path))
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON;")
    return connection


@contextmanager
def transaction(connection: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Provide a transaction scope for SQLite operations.

    Everything executed inside the block is committed together or rolled back
    together. Repositories never commit on their own, so a service can chain
    several repository calls inside one scope.
    """
    try:
        yield connection
    except Exception:
        connection.rollback()
        raise
    else:
        connection.commit()
