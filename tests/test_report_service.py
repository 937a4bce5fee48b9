from __future__ import annotations

from datetime import date

import pytest

from dealership_manager.domain.models import (
    Expense,
    OrderStatus,
    Pricing,
    Transaction,
    TransactionStatus,
    TransactionType,
    VehicleDetails,
)
from dealership_manager.services.errors import ValidationError
from dealership_manager.services.report_service import (
    DateRange,
    monthly_trend,
    resolve_period,
    summarize,
)

TODAY = date(2024, 6, 15)


def _transaction(
    total: float,
    status: TransactionStatus,
    transaction_type: TransactionType,
    *,
    brand: str = "Toyota",
    completion_date: str | None = None,
    reservation_date: str | None = "2024-06-01",
) -> Transaction:
    return Transaction(
        id=None,
        customer_id=1,
        inventory_id=None,
        type=transaction_type,
        status=status,
        vehicle=VehicleDetails(brand=brand, model="X", year=2020, color="White"),
        pricing=Pricing(vehicle_price=total, taxes=0, fees=0, discount=0, total_amount=total),
        total_paid=0.0,
        balance_remaining=total,
        currency="LKR",
        reservation_date=reservation_date,
        completion_date=completion_date,
    )


def _expense(amount: float, when: str, category: str = "Rent") -> Expense:
    return Expense(
        id=None, category=category, description=None, amount=amount, date=when, currency="LKR"
    )


def test_resolve_named_periods() -> None:
    assert resolve_period("all", today=TODAY) == DateRange()
    assert resolve_period("today", today=TODAY) == DateRange(TODAY, TODAY)
    assert resolve_period("week", today=TODAY).start == date(2024, 6, 8)
    assert resolve_period("month", today=TODAY).start == date(2024, 5, 15)
    assert resolve_period("year", today=TODAY).start == date(2023, 6, 15)


def test_resolve_custom_period() -> None:
    period = resolve_period("custom", "2024-01-01", "2024-01-31")
    assert period == DateRange(date(2024, 1, 1), date(2024, 1, 31))
    assert period.label == "2024-01-01 to 2024-01-31"


@pytest.mark.parametrize(
    "period, start, end",
    [("custom", None, "2024-01-31"), ("custom", "2024-02-01", "2024-01-01"), ("decade", None, None)],
)
def test_resolve_period_errors(period, start, end) -> None:
    with pytest.raises(ValidationError):
        resolve_period(period, start, end, today=TODAY)


def test_summarize_counts_only_paid_transactions_as_revenue() -> None:
    transactions = [
        _transaction(
            1000, TransactionStatus.COMPLETED, TransactionType.SALE, completion_date="2024-06-10"
        ),
        _transaction(500, TransactionStatus.PARTIAL_PAID, TransactionType.RESERVATION, brand="Honda"),
        _transaction(
            800, TransactionStatus.COMPLETED, TransactionType.LEASING, completion_date="2024-06-12"
        ),
        _transaction(
            9999, TransactionStatus.COMPLETED, TransactionType.SALE, completion_date="2023-01-01"
        ),
    ]
    expenses = [_expense(300, "2024-06-02"), _expense(50, "2024-06-03", "Fuel"), _expense(7, "2020-01-01")]
    summary = summarize(transactions, expenses, resolve_period("month", today=TODAY))

    assert summary.total_revenue == 1800
    assert summary.total_expenses == 350
    assert summary.total_profit == 1450
    assert summary.total_sales == 1
    assert summary.total_reservations == 1
    assert summary.total_leasing == 1
    assert summary.sales_by_brand == {"Toyota": 1800, "Honda": 500}
    assert summary.expenses_by_category == {"Rent": 300, "Fuel": 50}
    assert len(summary.transactions) == 3


def test_monthly_trend() -> None:
    transactions = [
        _transaction(
            1000, TransactionStatus.COMPLETED, TransactionType.SALE, completion_date="2024-06-01"
        ),
        _transaction(
            400, TransactionStatus.FULLY_PAID, TransactionType.SALE, completion_date="2024-04-20"
        ),
    ]
    expenses = [_expense(100, "2024-06-05"), _expense(600, "2024-05-05")]
    points = monthly_trend(transactions, expenses, months=3, today=TODAY)

    assert [p.month for p in points] == ["Apr 2024", "May 2024", "Jun 2024"]
    assert [p.revenue for p in points] == [400, 0, 1000]
    assert [p.profit for p in points] == [400, -600, 900]


def test_build_summary_from_database(services, reservation) -> None:
    services.payments.add_payment(reservation.id, 33500, "cash", "Admin")
    services.expenses.create_expense(date.today().isoformat(), "Rent", None, 1500)
    summary = services.reports.build_summary("today")
    assert summary.total_revenue == 33500
    assert summary.total_expenses == 1500
    assert summary.total_sales == 1
    assert len(services.reports.monthly_trend()) == 6


def test_dashboard_metrics(services, vehicle, reservation) -> None:
    services.payments.add_payment(reservation.id, 3000, "cash", "Admin")
    order = services.orders.create_order({"model": "Honda Civic", "year": 2022, "vehicle_cost": 500_000})
    moved = services.orders.create_order({"model": "Honda Fit", "year": 2019, "vehicle_cost": 200_000})
    services.orders.update_status(moved.id, OrderStatus.COMPLETED)
    stock = services.orders.move_to_inventory(moved.id)

    metrics = services.reports.dashboard_metrics()
    assert metrics.total_revenue == 0
    assert metrics.pending_payments == 30500
    assert metrics.total_deposits == 3000
    assert metrics.active_reservations == 1
    assert metrics.available_inventory == 1
    assert metrics.reserved_inventory == 1
    assert metrics.total_orders == 2
    assert metrics.completed_orders == 1
    assert metrics.pending_orders == 1
    assert metrics.inventory_value == pytest.approx(31000 + stock.market_value)
    assert metrics.total_assets == pytest.approx(order.total_cost + 28000 + 200_000)


def test_dashboard_counts_overdue_balances(
    services, vehicle, customer_data, scenario_pricing
) -> None:
    late = services.transactions.create_reservation(
        vehicle.id, customer_data, scenario_pricing, expected_delivery="2023-12-01"
    )
    before = services.reports.dashboard_metrics()
    assert services.transactions.mark_overdue_transactions("2024-01-01") == [late.id]

    after = services.reports.dashboard_metrics()
    assert before.pending_payments == after.pending_payments == 33500
    assert before.active_reservations == after.active_reservations == 1
