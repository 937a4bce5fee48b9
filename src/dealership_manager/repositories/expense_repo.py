"""Repository for expense persistence."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from dealership_manager.domain.models import Expense
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.mappers import expense_from_row


class ExpenseRepo:
    """Data access for expenses."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(
        self,
        category: str,
        description: Optional[str],
        amount: float,
        date: str,
        currency: str,
        payment_method: Optional[str],
        notes: Optional[str],
    ) -> Expense:
        created_at = datetime.now().isoformat(timespec="seconds")
        try:
            cursor = self._connection.execute(
                """
                INSERT INTO expenses (
                    category,
                    description,
                    amount,
                    date,
                    currency,
                    payment_method,
                    notes,
                    created_at,
                    updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    category,
                    description,
                    amount,
                    date,
                    currency,
                    payment_method,
                    notes,
                    created_at,
                    created_at,
                ),
            )
        except Exception:
            self._logger.exception("Failed to create expense")
            raise
        return Expense(
            id=int(cursor.lastrowid),
            category=category,
            description=description,
            amount=amount,
            date=date,
            currency=currency,
            payment_method=payment_method,
            notes=notes,
            created_at=created_at,
            updated_at=created_at,
        )

    def update(
        self,
        expense_id: int,
        category: str,
        description: Optional[str],
        amount: float,
        date: str,
        currency: str,
        payment_method: Optional[str],
        notes: Optional[str],
    ) -> bool:
        try:
            cursor = self._connection.execute(
                """
                UPDATE expenses
                SET category = ?,
                    description = ?,
                    amount = ?,
                    date = ?,
                    currency = ?,
                    payment_method = ?,
                    notes = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    category,
                    description,
                    amount,
                    date,
                    currency,
                    payment_method,
                    notes,
                    datetime.now().isoformat(timespec="seconds"),
                    expense_id,
                ),
            )
        except Exception:
            self._logger.exception("Failed to update expense id=%s", expense_id)
            raise
        return cursor.rowcount > 0

    def delete(self, expense_id: int) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM expenses WHERE id = ?",
                (expense_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete expense id=%s", expense_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        try:
            row = self._connection.execute(
                "SELECT * FROM expenses WHERE id = ?",
                (expense_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch expense id=%s", expense_id)
            raise
        return expense_from_row(row) if row else None

    def list_expenses(
        self,
        *,
        category: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[Expense]:
        filters = []
        params: list[object] = []
        if category:
            filters.append("category = ?")
            params.append(category)
        if start_date:
            filters.append("date(date) >= ?")
            params.append(start_date)
        if end_date:
            filters.append("date(date) <= ?")
            params.append(end_date)
        where_clause = f"WHERE {' AND '.join(filters)}" if filters else ""
        try:
            rows = self._connection.execute(
                f"""
                SELECT *
                FROM expenses
                {where_clause}
                ORDER BY date(date) DESC, id DESC
                """,
                params,
            ).fetchall()
        except Exception:
            self._logger.exception(
                "Failed to list expenses period=%s..%s", start_date, end_date
            )
            raise
        return [expense_from_row(row) for row in rows]

    def list_categories(self) -> list[str]:
        try:
            rows = self._connection.execute(
                """
                SELECT DISTINCT category
                FROM expenses
                WHERE category IS NOT NULL
                  AND trim(category) != ''
                ORDER BY category
                """
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list expense categories")
            raise
        return [row["category"] for row in rows if row["category"]]
