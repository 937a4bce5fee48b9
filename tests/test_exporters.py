from __future__ import annotations

import csv

from dealership_manager.utils.exporters import (
    EXPENSE_HEADERS,
    TRANSACTION_HEADERS,
    export_expenses_csv,
    export_filename,
    export_transactions_csv,
)


def _read(path):
    with path.open(encoding="utf-8-sig", newline="") as handle:
        return list(csv.reader(handle))


def test_export_transactions(services, reservation, tmp_path) -> None:
    services.payments.add_payment(reservation.id, 3000, "cash", "Admin")
    path = export_transactions_csv(
        services.transactions.list_transactions(), tmp_path / "exports" / "tx.csv"
    )
    header, row = _read(path)
    assert header == TRANSACTION_HEADERS
    assert row[1] == str(reservation.id)
    assert row[4] == "Toyota Corolla (2021)"
    assert row[5] == "partial_paid"
    assert row[6:10] == ["33500.00", "3000.00", "30500.00", "LKR"]


def test_export_expenses(services, tmp_path) -> None:
    services.expenses.create_expense("2024-02-01", "Marketing", "Ads, flyers", 2500)
    path = export_expenses_csv(services.expenses.list_expenses(), tmp_path / "exp.csv")
    header, row = _read(path)
    assert header == EXPENSE_HEADERS
    assert row[0] == "2024-02-01"
    assert row[3] == "Ads, flyers"
    assert row[4] == "2500.00"


def test_export_filename() -> None:
    name = export_filename("transactions")
    assert name.startswith("transactions_")
    assert name.endswith(".csv")
