from __future__ import annotations

import sqlite3

import pytest

from dealership_manager.domain.models import InventoryStatus, PaymentMethod, TransactionStatus
from dealership_manager.services.errors import NotFoundError, ValidationError


@pytest.mark.parametrize("amount", [0, -100, "abc", ""])
def test_rejects_non_positive_amounts(services, reservation, amount) -> None:
    with pytest.raises(ValidationError):
        services.payments.add_payment(reservation.id, amount, "cash", "Admin")


def test_requires_receiver(services, reservation) -> None:
    with pytest.raises(ValidationError):
        services.payments.add_payment(reservation.id, 100, "cash", "  ")


def test_rejects_unknown_method(services, reservation) -> None:
    with pytest.raises(ValidationError):
        services.payments.add_payment(reservation.id, 100, "bitcoin", "Admin")


def test_unknown_transaction(services) -> None:
    with pytest.raises(NotFoundError):
        services.payments.add_payment(404, 100, "cash", "Admin")


def test_rejects_payments_on_closed_transactions(services, reservation) -> None:
    services.payments.add_payment(reservation.id, 33500, "cash", "Admin")
    with pytest.raises(ValidationError):
        services.payments.add_payment(reservation.id, 10, "cash", "Admin")


def test_rejects_payments_on_cancelled_transactions(services, reservation) -> None:
    services.transactions.cancel_transaction(reservation.id)
    with pytest.raises(ValidationError):
        services.payments.add_payment(reservation.id, 10, "cash", "Admin")


def test_payment_record_fields(services, reservation) -> None:
    services.payments.add_payment(
        reservation.id,
        "2,500",
        PaymentMethod.CARD,
        "Cashier",
        notes="Deposit",
        payment_date="2024-04-02",
    )
    [record] = services.payments.list_payments(reservation.id)
    assert record.amount == 2500
    assert record.payment_method == PaymentMethod.CARD
    assert record.payment_date == "2024-04-02"
    assert record.received_by == "Cashier"
    assert record.notes == "Deposit"
    assert services.payments.get_paid_total(reservation.id) == 2500


def test_overpayment_completes_with_zero_balance(services, reservation) -> None:
    updated = services.payments.add_payment(reservation.id, 40000, "cash", "Admin")
    assert updated.status == TransactionStatus.COMPLETED
    assert updated.balance_remaining == 0
    assert updated.total_paid == 40000


def test_payments_are_append_only(services, connection, reservation) -> None:
    services.payments.add_payment(reservation.id, 1000, "cash", "Admin")
    with pytest.raises(sqlite3.DatabaseError, match="append-only"):
        connection.execute("UPDATE payments SET amount = 1")
    connection.rollback()


def test_fractional_total_settles_with_exact_payment(
    services, vehicle, customer_data
) -> None:
    created = services.transactions.create_reservation(
        vehicle.id, customer_data, {"vehicle_price": "1.62", "taxes": "0.01"}
    )
    assert created.pricing.total_amount == 1.63

    settled = services.payments.add_payment(created.id, "1.63", "cash", "Admin")
    assert settled.status == TransactionStatus.COMPLETED
    assert settled.balance_remaining == 0
    assert services.inventory.get_item(vehicle.id).status == InventoryStatus.SOLD


def test_split_fractional_payments_settle(services, vehicle, customer_data) -> None:
    created = services.transactions.create_reservation(
        vehicle.id, customer_data, {"vehicle_price": "0.3"}
    )
    services.payments.add_payment(created.id, "0.1", "cash", "Admin")
    settled = services.payments.add_payment(created.id, "0.2", "cash", "Admin")
    assert settled.total_paid == 0.3
    assert settled.status == TransactionStatus.COMPLETED


def test_overdue_transaction_accepts_payments(
    services, vehicle, customer_data, scenario_pricing
) -> None:
    late = services.transactions.create_reservation(
        vehicle.id, customer_data, scenario_pricing, expected_delivery="2024-01-10"
    )
    services.transactions.mark_overdue_transactions("2024-02-01")

    partial = services.payments.add_payment(late.id, 3000, "cash", "Admin")
    assert partial.status == TransactionStatus.PARTIAL_PAID
    assert partial.balance_remaining == 30500

    settled = services.payments.add_payment(late.id, 30500, "cash", "Admin")
    assert settled.status == TransactionStatus.COMPLETED
    assert services.inventory.get_item(vehicle.id).status == InventoryStatus.SOLD
