from __future__ import annotations

from dealership_manager.domain.models import (
    PaymentMethod,
    PaymentRecord,
    Pricing,
    Transaction,
    TransactionStatus,
    TransactionType,
    VehicleDetails,
)
from dealership_manager.services.ledger import apply_payment, recompute_totals


def _transaction(total: float, **overrides) -> Transaction:
    values = dict(
        id=1,
        customer_id=1,
        inventory_id=1,
        type=TransactionType.RESERVATION,
        status=TransactionStatus.PENDING,
        vehicle=VehicleDetails(brand="Toyota", model="Aqua", year=2018, color="Red"),
        pricing=Pricing(
            vehicle_price=total, taxes=0, fees=0, discount=0, total_amount=total
        ),
        total_paid=0.0,
        balance_remaining=total,
        currency="LKR",
    )
    values.update(overrides)
    return Transaction(**values)


def _payment(amount: float, payment_date: str = "2024-06-01") -> PaymentRecord:
    return PaymentRecord(
        id=None,
        transaction_id=1,
        amount=amount,
        payment_method=PaymentMethod.CASH,
        payment_date=payment_date,
        received_by="Admin",
    )


def test_no_payments_keeps_status() -> None:
    state = recompute_totals(_transaction(1000), [])
    assert state.status == TransactionStatus.PENDING
    assert state.balance_remaining == 1000
    assert state.completion_date is None


def test_partial_payment() -> None:
    state = apply_payment(_transaction(33500), _payment(3000))
    assert state.total_paid == 3000
    assert state.balance_remaining == 30500
    assert state.status == TransactionStatus.PARTIAL_PAID
    assert state.type == TransactionType.RESERVATION


def test_full_payment_promotes_reservation_to_sale() -> None:
    current = _transaction(33500, payments=[_payment(3000)])
    state = apply_payment(current, _payment(30500, "2024-06-15"))
    assert state.balance_remaining == 0
    assert state.is_completed
    assert state.type == TransactionType.SALE
    assert state.completion_date == "2024-06-15"


def test_overpayment_clamps_balance_at_zero() -> None:
    state = apply_payment(_transaction(1000), _payment(1500))
    assert state.total_paid == 1500
    assert state.balance_remaining == 0
    assert state.status == TransactionStatus.COMPLETED


def test_leasing_type_is_not_promoted() -> None:
    state = apply_payment(_transaction(1000, type=TransactionType.LEASING), _payment(1000))
    assert state.type == TransactionType.LEASING
    assert state.status == TransactionStatus.COMPLETED


def test_existing_completion_date_is_kept() -> None:
    current = _transaction(1000, completion_date="2024-01-01")
    state = recompute_totals(current, [_payment(1000)], today="2024-02-02")
    assert state.completion_date == "2024-01-01"


def test_fractional_payment_settles_exactly() -> None:
    transaction = _transaction(
        1.63,
        pricing=Pricing(
            vehicle_price=1.62, taxes=0.01, fees=0, discount=0, total_amount=1.62 + 0.01
        ),
    )
    state = apply_payment(transaction, _payment(1.63))
    assert state.status == TransactionStatus.COMPLETED
    assert state.balance_remaining == 0
    assert state.type == TransactionType.SALE


def test_payments_in_cents_sum_without_residue() -> None:
    state = recompute_totals(_transaction(0.3), [_payment(0.1), _payment(0.2)])
    assert state.total_paid == 0.3
    assert state.is_completed
