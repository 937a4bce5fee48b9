"""Repository for sales, reservations and leasing transactions."""

from __future__ import annotations

import dataclasses
import sqlite3
from datetime import datetime
from typing import Optional

from dealership_manager.domain.models import (
    LeasingDetails,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.mappers import (
    leasing_details_from_row,
    transaction_from_row,
    transaction_to_record,
)
from dealership_manager.repositories.payment_repo import PaymentRepository


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class TransactionRepo:
    """Data access for transactions and their leasing details.

    Loaded transactions always carry their payment ledger and leasing terms.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)
        self._payments = PaymentRepository(connection)

    def create(self, transaction: Transaction) -> Transaction:
        timestamp = _now_iso()
        record = transaction_to_record(transaction)
        record["created_at"] = timestamp
        record["updated_at"] = timestamp
        columns = ", ".join(record)
        placeholders = ", ".join(["?"] * len(record))
        try:
            cursor = self._connection.execute(
                f"INSERT INTO transactions ({columns}) VALUES ({placeholders})",
                tuple(record.values()),
            )
            transaction_id = int(cursor.lastrowid)
            if transaction.leasing is not None:
                self._insert_leasing(transaction_id, transaction.leasing)
        except Exception:
            self._logger.exception(
                "Failed to create transaction customer_id=%s inventory_id=%s",
                transaction.customer_id,
                transaction.inventory_id,
            )
            raise
        return dataclasses.replace(
            transaction,
            id=transaction_id,
            payments=[],
            created_at=timestamp,
            updated_at=timestamp,
        )

    def _insert_leasing(self, transaction_id: int, leasing: LeasingDetails) -> None:
        self._connection.execute(
            """
            INSERT INTO leasing_details (
                transaction_id,
                leasing_company_id,
                leasing_company_name,
                leasing_company_branch,
                lease_reference_no,
                down_payment,
                leasing_amount,
                monthly_installment,
                tenure,
                interest_rate,
                start_date,
                end_date
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                transaction_id,
                leasing.leasing_company_id,
                leasing.leasing_company_name,
                leasing.leasing_company_branch,
                leasing.lease_reference_no,
                leasing.down_payment,
                leasing.leasing_amount,
                leasing.monthly_installment,
                leasing.tenure,
                leasing.interest_rate,
                leasing.start_date,
                leasing.end_date,
            ),
        )

    def _load_leasing(self, transaction_id: int) -> Optional[LeasingDetails]:
        row = self._connection.execute(
            "SELECT * FROM leasing_details WHERE transaction_id = ?",
            (transaction_id,),
        ).fetchone()
        return leasing_details_from_row(row) if row else None

    def _hydrate(self, row: sqlite3.Row) -> Transaction:
        transaction = transaction_from_row(row)
        transaction.leasing = self._load_leasing(int(row["id"]))
        transaction.payments = self._payments.list_by_transaction(int(row["id"]))
        return transaction

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        try:
            row = self._connection.execute(
                "SELECT * FROM transactions WHERE id = ?",
                (transaction_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch transaction id=%s", transaction_id)
            raise
        return self._hydrate(row) if row else None

    def list_transactions(
        self,
        *,
        status: Optional[TransactionStatus] = None,
        transaction_type: Optional[TransactionType] = None,
        search: Optional[str] = None,
    ) -> list[Transaction]:
        filters = []
        params: list[object] = []
        if status is not None:
            filters.append("t.status = ?")
            params.append(status.value)
        if transaction_type is not None:
            filters.append("t.type = ?")
            params.append(transaction_type.value)
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            filters.append(
                """(
                    LOWER(t.vehicle_brand) LIKE ?
                    OR LOWER(t.vehicle_model) LIKE ?
                    OR LOWER(COALESCE(t.invoice_number, '')) LIKE ?
                    OR LOWER(c.name) LIKE ?
                    OR CAST(t.id AS TEXT) = ?
                )"""
            )
            params.extend([pattern] * 4)
            params.append(search.strip())
        where_clause = f"WHERE {' AND '.join(filters)}" if filters else ""
        try:
            rows = self._connection.execute(
                f"""
                SELECT t.*
                FROM transactions t
                JOIN customers c ON c.id = t.customer_id
                {where_clause}
                ORDER BY t.created_at DESC, t.id DESC
                """,
                params,
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list transactions")
            raise
        return [self._hydrate(row) for row in rows]

    def update_ledger(
        self,
        transaction_id: int,
        *,
        total_paid: float,
        balance_remaining: float,
        status: TransactionStatus,
        transaction_type: TransactionType,
        completion_date: Optional[str],
    ) -> bool:
        try:
            cursor = self._connection.execute(
                """
                UPDATE transactions
                SET total_paid = ?,
                    balance_remaining = ?,
                    status = ?,
                    type = ?,
                    completion_date = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    total_paid,
                    balance_remaining,
                    status.value,
                    transaction_type.value,
                    completion_date,
                    _now_iso(),
                    transaction_id,
                ),
            )
        except Exception:
            self._logger.exception(
                "Failed to update ledger transaction_id=%s", transaction_id
            )
            raise
        return cursor.rowcount > 0

    def set_status(self, transaction_id: int, status: TransactionStatus) -> bool:
        try:
            cursor = self._connection.execute(
                """
                UPDATE transactions
                SET status = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (status.value, _now_iso(), transaction_id),
            )
        except Exception:
            self._logger.exception(
                "Failed to set transaction status id=%s", transaction_id
            )
            raise
        return cursor.rowcount > 0

    def list_overdue_candidates(self, reference_date: str) -> list[int]:
        """Return ids of open transactions whose expected delivery has passed."""
        rows = self._connection.execute(
            """
            SELECT id
            FROM transactions
            WHERE status IN (?, ?)
              AND balance_remaining > 0
              AND expected_delivery IS NOT NULL
              AND date(expected_delivery) < date(?)
            ORDER BY id
            """,
            (
                TransactionStatus.PENDING.value,
                TransactionStatus.PARTIAL_PAID.value,
                reference_date,
            ),
        ).fetchall()
        return [int(row["id"]) for row in rows]

    def delete(self, transaction_id: int) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM transactions WHERE id = ?",
                (transaction_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete transaction id=%s", transaction_id)
            raise
        return cursor.rowcount > 0
