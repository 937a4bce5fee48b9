"""Expense service for business rules."""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional

from dealership_manager.config import DEFAULT_CURRENCY
from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import Expense
from dealership_manager.repositories.expense_repo import ExpenseRepo
from dealership_manager.services.errors import NotFoundError, ValidationError
from dealership_manager.services.pricing import parse_amount, parse_money


@dataclass(slots=True)
class ExpenseStats:
    total: float = 0.0
    average: float = 0.0
    count: int = 0
    categories: int = 0
    by_category: dict[str, float] = field(default_factory=dict)


def summarize_expenses(expenses: list[Expense]) -> ExpenseStats:
    by_category: dict[str, float] = defaultdict(float)
    for expense in expenses:
        by_category[expense.category] += expense.amount
    total = sum(expense.amount for expense in expenses)
    count = len(expenses)
    return ExpenseStats(
        total=total,
        average=total / count if count else 0.0,
        count=count,
        categories=len(by_category),
        by_category=dict(sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)),
    )


class ExpenseService:
    """Service for expense operations."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._repo = ExpenseRepo(connection)

    def list_expenses(
        self,
        *,
        category: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[Expense]:
        return self._repo.list_expenses(
            category=category, start_date=start_date, end_date=end_date
        )

    def list_categories(self) -> list[str]:
        return self._repo.list_categories()

    def get_expense(self, expense_id: int) -> Expense:
        expense = self._repo.get_by_id(expense_id)
        if not expense:
            raise NotFoundError(f"Expense {expense_id} not found.")
        return expense

    def get_stats(
        self,
        *,
        category: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> ExpenseStats:
        return summarize_expenses(
            self.list_expenses(
                category=category, start_date=start_date, end_date=end_date
            )
        )

    def create_expense(
        self,
        date: str,
        category: str,
        description: Optional[str],
        amount: float | str,
        currency: Optional[str] = None,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Expense:
        value = parse_money(amount)
        category = self._validate(date, category, value)
        with transaction(self._connection):
            return self._repo.create(
                category=category,
                description=description,
                amount=value,
                date=date,
                currency=currency or DEFAULT_CURRENCY,
                payment_method=payment_method,
                notes=notes,
            )

    def update_expense(
        self,
        expense_id: int,
        date: str,
        category: str,
        description: Optional[str],
        amount: float | str,
        currency: Optional[str] = None,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Expense:
        value = parse_money(amount)
        category = self._validate(date, category, value)
        existing = self.get_expense(expense_id)
        with transaction(self._connection):
            self._repo.update(
                expense_id=expense_id,
                category=category,
                description=description,
                amount=value,
                date=date,
                currency=currency or existing.currency,
                payment_method=payment_method,
                notes=notes,
            )
        return self.get_expense(expense_id)

    def delete_expense(self, expense_id: int) -> bool:
        self.get_expense(expense_id)
        with transaction(self._connection):
            return self._repo.delete(expense_id)

    def _validate(self, date: str, category: Optional[str], amount: float) -> str:
        if not date:
            raise ValidationError("Expense date is required.")
        if amount <= 0:
            raise ValidationError("Expense amount must be greater than zero.")
        category = (category or "").strip()
        if not category:
            raise ValidationError("Expense category is required.")
        return category
