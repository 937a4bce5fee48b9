"""Repository for the append-only payment ledger."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from dealership_manager.domain.models import PaymentMethod, PaymentRecord
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.mappers import payment_from_row


class PaymentRepository:
    """Data access for payments. Records are never updated once written."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def list_by_transaction(self, transaction_id: int) -> list[PaymentRecord]:
        try:
            rows = self._connection.execute(
                """
                SELECT *
                FROM payments
                WHERE transaction_id = ?
                ORDER BY id
                """,
                (transaction_id,),
            ).fetchall()
        except Exception:
            self._logger.exception(
                "Failed to list payments transaction_id=%s", transaction_id
            )
            raise
        return [payment_from_row(row) for row in rows]

    def get_by_id(self, payment_id: int) -> Optional[PaymentRecord]:
        try:
            row = self._connection.execute(
                "SELECT * FROM payments WHERE id = ?",
                (payment_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch payment id=%s", payment_id)
            raise
        return payment_from_row(row) if row else None

    def append(
        self,
        transaction_id: int,
        amount: float,
        payment_method: PaymentMethod,
        payment_date: str,
        received_by: str,
        notes: Optional[str],
    ) -> PaymentRecord:
        created_at = datetime.now().isoformat(timespec="seconds")
        try:
            cursor = self._connection.execute(
                """
                INSERT INTO payments (
                    transaction_id,
                    amount,
                    payment_method,
                    payment_date,
                    received_by,
                    notes,
                    created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transaction_id,
                    amount,
                    payment_method.value,
                    payment_date,
                    received_by,
                    notes,
                    created_at,
                ),
            )
        except Exception:
            self._logger.exception(
                "Failed to append payment transaction_id=%s", transaction_id
            )
            raise
        return PaymentRecord(
            id=int(cursor.lastrowid),
            transaction_id=transaction_id,
            amount=amount,
            payment_method=payment_method,
            payment_date=payment_date,
            received_by=received_by,
            notes=notes,
        )

    def get_paid_total(self, transaction_id: int) -> float:
        try:
            row = self._connection.execute(
                """
                SELECT COALESCE(SUM(amount), 0) AS paid_total
                FROM payments
                WHERE transaction_id = ?
                """,
                (transaction_id,),
            ).fetchone()
        except Exception:
            self._logger.exception(
                "Failed to calculate paid total transaction_id=%s", transaction_id
            )
            raise
        return float(row["paid_total"] or 0) if row else 0.0
