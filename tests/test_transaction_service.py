from __future__ import annotations

import pytest

from dealership_manager.domain.models import (
    InventoryStatus,
    PaymentMode,
    TransactionStatus,
    TransactionType,
)
from dealership_manager.services.errors import NotFoundError, ValidationError
from dealership_manager.services.pricing import calculate_monthly_installment


def test_reservation_reserves_vehicle(services, vehicle, reservation) -> None:
    assert reservation.id is not None
    assert reservation.type == TransactionType.RESERVATION
    assert reservation.status == TransactionStatus.PENDING
    assert reservation.pricing.total_amount == 33500
    assert reservation.balance_remaining == 33500
    assert reservation.invoice_number.startswith("INV-")
    assert reservation.vehicle.brand == "Toyota"
    assert services.inventory.get_item(vehicle.id).status == InventoryStatus.RESERVED


def test_reservation_flow_to_sale(services, vehicle, reservation) -> None:
    partial = services.payments.add_payment(reservation.id, 3000, "cash", "Admin")
    assert partial.status == TransactionStatus.PARTIAL_PAID
    assert partial.balance_remaining == 30500
    assert partial.total_paid == 3000

    settled = services.payments.add_payment(reservation.id, 30500, "bank_transfer", "Admin")
    assert settled.balance_remaining == 0
    assert settled.status == TransactionStatus.COMPLETED
    assert settled.type == TransactionType.SALE
    assert settled.completion_date is not None
    assert [p.amount for p in settled.payments] == [3000, 30500]
    assert services.inventory.get_item(vehicle.id).status == InventoryStatus.SOLD


def test_reserved_vehicle_cannot_be_reserved_again(
    services, vehicle, reservation, scenario_pricing
) -> None:
    with pytest.raises(ValidationError):
        services.transactions.create_reservation(
            vehicle.id, {"name": "Other", "contact": "0711111111"}, scenario_pricing
        )


def test_missing_vehicle(services, customer_data, scenario_pricing) -> None:
    with pytest.raises(NotFoundError):
        services.transactions.create_reservation(999, customer_data, scenario_pricing)


def test_negative_total_is_rejected(services, vehicle, customer_data) -> None:
    with pytest.raises(ValidationError):
        services.transactions.create_reservation(
            vehicle.id,
            customer_data,
            {"vehicle_price": 1000, "discount": 5000},
        )
    assert services.inventory.get_item(vehicle.id).status == InventoryStatus.AVAILABLE


def test_failed_reservation_rolls_back_customer(
    services, vehicle, customer_data, scenario_pricing
) -> None:
    with pytest.raises(NotFoundError):
        services.transactions.create_reservation(
            vehicle.id,
            customer_data,
            scenario_pricing,
            payment_mode=PaymentMode.LEASING,
            leasing_data={
                "leasing_company_id": 999,
                "lease_reference_no": "LR-1",
                "tenure": 48,
                "interest_rate": 12.5,
            },
        )
    assert services.customers.list_customers() == []
    assert services.transactions.list_transactions() == []
    assert services.inventory.get_item(vehicle.id).status == InventoryStatus.AVAILABLE


def test_leasing_reservation(services, vehicle, customer_data, scenario_pricing) -> None:
    company = services.leasing_companies.create_company("People's Leasing", branch="Ampara")
    leased = services.transactions.create_reservation(
        vehicle.id,
        customer_data,
        scenario_pricing,
        payment_mode="leasing",
        leasing_data={
            "leasing_company_name": "People's Leasing",
            "lease_reference_no": "PL-2024-001",
            "tenure": 48,
            "interest_rate": 12.5,
            "start_date": "2024-03-15",
        },
    )
    assert leased.type == TransactionType.LEASING
    assert leased.is_leasing
    details = leased.leasing
    assert details.leasing_company_id == company.id
    assert details.leasing_company_branch == "Ampara"
    assert details.down_payment == 6700
    assert details.leasing_amount == 26800
    assert details.monthly_installment == calculate_monthly_installment(26800, 48, 12.5)
    assert details.end_date == "2028-03-15"

    stored = services.transactions.get_transaction(leased.id)
    assert stored.leasing == details


def test_leasing_requires_details(services, vehicle, customer_data, scenario_pricing) -> None:
    with pytest.raises(ValidationError):
        services.transactions.create_reservation(
            vehicle.id, customer_data, scenario_pricing, payment_mode="leasing"
        )
    with pytest.raises(ValidationError):
        services.transactions.create_reservation(
            vehicle.id,
            customer_data,
            scenario_pricing,
            payment_mode="leasing",
            leasing_data={"leasing_company_name": "HNB", "tenure": 12, "interest_rate": 10},
        )


def test_existing_customer_is_reused_by_exact_contact(
    services, vehicle, customer_data, scenario_pricing
) -> None:
    existing = services.customers.create_customer(customer_data)
    reserved = services.transactions.create_reservation(
        vehicle.id, customer_data, scenario_pricing
    )
    assert reserved.customer_id == existing.id
    assert len(services.customers.list_customers()) == 1


def test_differently_formatted_contacts_create_separate_customers(
    services, scenario_pricing
) -> None:
    first = services.inventory.create_item(
        {"brand": "Nissan", "model": "Leaf", "year": 2020, "color": "Grey"}
    )
    second = services.inventory.create_item(
        {"brand": "Suzuki", "model": "Alto", "year": 2022, "color": "Red"}
    )
    one = services.transactions.create_reservation(
        first.id, {"name": "Ali", "contact": "+971-50-123-4567"}, scenario_pricing
    )
    two = services.transactions.create_reservation(
        second.id, {"name": "Ali", "contact": "0501234567"}, scenario_pricing
    )
    assert one.customer_id != two.customer_id
    assert len(services.customers.list_customers()) == 2


def test_cancel_releases_vehicle(services, vehicle, reservation) -> None:
    cancelled = services.transactions.cancel_transaction(reservation.id)
    assert cancelled.status == TransactionStatus.CANCELLED
    assert services.inventory.get_item(vehicle.id).status == InventoryStatus.AVAILABLE
    with pytest.raises(ValidationError):
        services.transactions.cancel_transaction(reservation.id)


def test_delete_open_transaction_releases_vehicle(services, vehicle, reservation) -> None:
    assert services.transactions.delete_transaction(reservation.id)
    assert services.inventory.get_item(vehicle.id).status == InventoryStatus.AVAILABLE
    with pytest.raises(NotFoundError):
        services.transactions.get_transaction(reservation.id)


def test_mark_overdue(services, vehicle, customer_data, scenario_pricing) -> None:
    late = services.transactions.create_reservation(
        vehicle.id, customer_data, scenario_pricing, expected_delivery="2024-01-10"
    )
    assert services.transactions.mark_overdue_transactions("2024-01-10") == []
    assert services.transactions.mark_overdue_transactions("2024-02-01") == [late.id]
    assert services.transactions.get_transaction(late.id).status == TransactionStatus.OVERDUE

    paid = services.payments.add_payment(late.id, 1000, "cash", "Admin")
    assert paid.status == TransactionStatus.PARTIAL_PAID


def test_list_transactions_filters(services, reservation) -> None:
    assert services.transactions.list_transactions(search="corolla")[0].id == reservation.id
    assert services.transactions.list_transactions(search="jane")[0].id == reservation.id
    assert services.transactions.list_transactions(search=str(reservation.id))
    assert services.transactions.list_transactions(status=TransactionStatus.COMPLETED) == []
    assert services.transactions.list_transactions(
        transaction_type=TransactionType.RESERVATION
    )
