"""Repository for customer persistence."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Optional

from dealership_manager.domain.models import Customer
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.mappers import customer_from_row


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class CustomerRepo:
    """CRUD operations for customers."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(
        self,
        name: str,
        contact: str,
        title: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        nic: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Customer:
        created_at = _now_iso()
        try:
            cursor = self._connection.execute(
                """
                INSERT INTO customers (
                    name,
                    title,
                    contact,
                    email,
                    address,
                    nic,
                    notes,
                    created_at,
                    updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (name, title, contact, email, address, nic, notes, created_at, created_at),
            )
        except Exception:
            self._logger.exception("Failed to create customer")
            raise

        return Customer(
            id=cursor.lastrowid,
            name=name,
            contact=contact,
            title=title,
            email=email,
            address=address,
            nic=nic,
            notes=notes,
            created_at=created_at,
            updated_at=created_at,
        )

    def update(
        self,
        customer_id: int,
        name: str,
        contact: str,
        title: Optional[str],
        email: Optional[str],
        address: Optional[str],
        nic: Optional[str],
        notes: Optional[str],
    ) -> Optional[Customer]:
        updated_at = _now_iso()
        try:
            cursor = self._connection.execute(
                """
                UPDATE customers
                SET
                    name = ?,
                    title = ?,
                    contact = ?,
                    email = ?,
                    address = ?,
                    nic = ?,
                    notes = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (name, title, contact, email, address, nic, notes, updated_at, customer_id),
            )
        except Exception:
            self._logger.exception("Failed to update customer id=%s", customer_id)
            raise

        if cursor.rowcount == 0:
            return None
        return self.get_by_id(customer_id)

    def delete(self, customer_id: int) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM customers WHERE id = ?",
                (customer_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete customer id=%s", customer_id)
            raise
        return cursor.rowcount > 0

    def list_all(self) -> List[Customer]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM customers ORDER BY name, id"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list customers")
            raise
        return [customer_from_row(row) for row in rows]

    def search(self, term: str) -> List[Customer]:
        term = term.strip()
        if not term:
            return self.list_all()
        pattern = f"%{term.lower()}%"
        try:
            rows = self._connection.execute(
                """
                SELECT *
                FROM customers
                WHERE LOWER(name) LIKE ?
                   OR LOWER(contact) LIKE ?
                   OR LOWER(COALESCE(nic, '')) LIKE ?
                ORDER BY name, id
                """,
                (pattern, pattern, pattern),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to search customers term=%s", term)
            raise
        return [customer_from_row(row) for row in rows]

    def find_by_contact(self, contact: str) -> Optional[Customer]:
        """Return the first customer whose contact matches exactly."""
        try:
            row = self._connection.execute(
                "SELECT * FROM customers WHERE contact = ? ORDER BY id LIMIT 1",
                (contact,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to find customer by contact")
            raise
        return customer_from_row(row) if row else None

    def get_by_id(self, customer_id: int) -> Optional[Customer]:
        try:
            row = self._connection.execute(
                "SELECT * FROM customers WHERE id = ?",
                (customer_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to get customer id=%s", customer_id)
            raise
        return customer_from_row(row) if row else None

    def count_transactions(self, customer_id: int) -> int:
        row = self._connection.execute(
            "SELECT COUNT(*) AS total FROM transactions WHERE customer_id = ?",
            (customer_id,),
        ).fetchone()
        return int(row["total"]) if row else 0
