from __future__ import annotations

import pytest

from dealership_manager.app import main
from dealership_manager.services.pricing import calculate_monthly_installment
from dealership_manager.utils.formatting import format_currency


@pytest.fixture
def run(db_path, capsys):
    def _run(*args: str) -> tuple[int, str, str]:
        code = main(["--db", str(db_path), *args])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return _run


def test_init(run) -> None:
    code, out, _ = run("init")
    assert code == 0
    assert "schema v" in out


def test_sale_flow(run, tmp_path) -> None:
    code, out, _ = run(
        "inventory", "add",
        "--brand", "Toyota", "--model", "Aqua", "--color", "Blue",
        "--year", "2019", "--purchase-price", "25000", "--selling-price", "32000",
    )
    assert code == 0
    assert "Vehicle 1 added" in out

    code, out, _ = run(
        "reserve", "--vehicle", "1",
        "--customer-name", "Nimal Silva", "--contact", "0771234567",
        "--price", "32000", "--taxes", "1600", "--fees", "400", "--discount", "500",
    )
    assert code == 0
    assert "LKR 33,500.00" in out

    code, out, _ = run("pay", "1", "3000")
    assert code == 0
    assert "Partial Paid" in out
    assert "LKR 30,500.00" in out

    code, out, _ = run("pay", "1", "30500", "--method", "bank_transfer")
    assert "Completed" in out

    code, out, _ = run("transactions", "show", "1")
    assert "Sale" in out

    code, out, _ = run("invoice", "1", "--output-dir", str(tmp_path / "docs"))
    assert code == 0
    assert list((tmp_path / "docs").glob("Customer_Invoice_INV-*_Nimal_Silva.pdf"))

    code, out, _ = run("dashboard")
    assert "Vehicles sold" in out


def test_service_errors_return_non_zero(run) -> None:
    code, _, err = run("pay", "42", "100")
    assert code == 1
    assert "Transaction 42 not found" in err


def test_leasing_reservation(run) -> None:
    run(
        "inventory", "add",
        "--brand", "Honda", "--model", "Vezel", "--color", "Grey",
        "--year", "2020", "--purchase-price", "4000000", "--selling-price", "5375000",
    )
    code, out, _ = run(
        "reserve", "--vehicle", "1",
        "--customer-name", "Kumar", "--contact", "0711111111",
        "--price", "5375000", "--mode", "leasing",
        "--leasing-company", "LB Finance", "--lease-ref", "LB-1",
        "--down-payment", "1075000", "--tenure", "48", "--rate", "12.5",
    )
    assert code == 0
    assert "over 48 months" in out
    installment = calculate_monthly_installment(4_300_000, 48, 12.5)
    assert f"{format_currency(installment, decimals=0)} per month" in out


def test_orders_and_export(run, tmp_path) -> None:
    code, out, _ = run(
        "orders", "add", "--model", "Nissan Leaf", "--year", "2021",
        "--vehicle-cost", "900000", "--duty", "100000", "--expense", "Port=5000",
    )
    assert code == 0
    assert "LKR 1,005,000.00" in out
    assert run("orders", "move", "1")[0] == 1
    run("orders", "status", "1", "completed")
    code, out, _ = run("orders", "move", "1")
    assert code == 0
    assert "Nissan Leaf" in out

    run("expenses", "add", "--date", "2024-01-05", "--category", "Rent", "--amount", "1000")
    target = tmp_path / "expenses.csv"
    code, out, _ = run("export", "expenses", "--output", str(target))
    assert code == 0
    assert target.read_text(encoding="utf-8-sig").startswith("Date,Expense ID")


def test_report_pdf(run, tmp_path) -> None:
    target = tmp_path / "report.pdf"
    code, out, _ = run("report", "--period", "year", "--pdf", str(target))
    assert code == 0
    assert "Net profit" in out
    assert target.read_bytes().startswith(b"%PDF")


def test_order_bank_invoice(run, tmp_path) -> None:
    code, _, _ = run(
        "orders", "add", "--model", "Toyota Aqua", "--year", "2019",
        "--vehicle-cost", "750000", "--lc-bank", "Sampath Bank", "--lc-amount", "600000",
    )
    assert code == 0
    code, out, _ = run("orders", "invoice", "1", "--output-dir", str(tmp_path / "docs"))
    assert code == 0
    assert "Bank_Invoice_IMP-" in out
    assert list((tmp_path / "docs").glob("*.pdf"))
    assert run("orders", "invoice", "99")[0] == 1
