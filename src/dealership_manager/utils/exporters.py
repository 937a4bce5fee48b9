"""CSV exports of transactions and expenses."""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Iterable, Sequence

from dealership_manager.domain.models import Expense, Transaction

TRANSACTION_HEADERS = [
    "Date",
    "Transaction ID",
    "Type",
    "Customer ID",
    "Vehicle",
    "Status",
    "Total Amount",
    "Paid",
    "Balance",
    "Currency",
]

EXPENSE_HEADERS = ["Date", "Expense ID", "Category", "Description", "Amount", "Currency"]


def export_filename(prefix: str, suffix: str = "csv") -> str:
    return f"{prefix}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{suffix}"


def transaction_row(item: Transaction) -> list[str]:
    vehicle = item.vehicle
    return [
        item.completion_date or item.reservation_date or "",
        str(item.id),
        item.type.value,
        str(item.customer_id),
        f"{vehicle.brand} {vehicle.model} ({vehicle.year})",
        item.status.value,
        f"{item.pricing.total_amount:.2f}",
        f"{item.total_paid:.2f}",
        f"{item.balance_remaining:.2f}",
        item.currency,
    ]


def expense_row(item: Expense) -> list[str]:
    return [
        item.date,
        str(item.id),
        item.category,
        item.description or "",
        f"{item.amount:.2f}",
        item.currency,
    ]


def write_csv(filepath: Path, headers: Sequence[str], rows: Iterable[Sequence[str]]) -> Path:
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with filepath.open("w", encoding="utf-8-sig", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(headers)
        writer.writerows(rows)
    return filepath


def export_transactions_csv(transactions: Iterable[Transaction], filepath: Path) -> Path:
    return write_csv(filepath, TRANSACTION_HEADERS, (transaction_row(t) for t in transactions))


def export_expenses_csv(expenses: Iterable[Expense], filepath: Path) -> Path:
    return write_csv(filepath, EXPENSE_HEADERS, (expense_row(e) for e in expenses))
