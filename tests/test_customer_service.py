from __future__ import annotations

import pytest

from dealership_manager.services.errors import NotFoundError, ValidationError


def test_create_and_search(services, customer_data) -> None:
    customer = services.customers.create_customer(customer_data)
    assert customer.id is not None
    assert services.customers.list_customers("perera")[0].id == customer.id
    assert services.customers.list_customers("77-123")[0].id == customer.id
    assert services.customers.list_customers("nobody") == []


@pytest.mark.parametrize("missing", ["name", "contact"])
def test_name_and_contact_are_required(services, customer_data, missing) -> None:
    customer_data[missing] = "   "
    with pytest.raises(ValidationError):
        services.customers.create_customer(customer_data)


def test_update_customer(services, customer_data) -> None:
    customer = services.customers.create_customer(customer_data)
    updated = services.customers.update_customer(
        customer.id, {**customer_data, "email": "jane@example.com"}
    )
    assert updated.email == "jane@example.com"
    with pytest.raises(NotFoundError):
        services.customers.update_customer(999, customer_data)


def test_find_or_create_matches_exact_contact(services, customer_data) -> None:
    first, created = services.customers.find_or_create(customer_data)
    again, created_again = services.customers.find_or_create(customer_data)
    assert created and not created_again
    assert first.id == again.id


def test_delete_customer_with_transactions_is_rejected(services, reservation) -> None:
    with pytest.raises(ValidationError):
        services.customers.delete_customer(reservation.customer_id)


def test_delete_customer(services, customer_data) -> None:
    customer = services.customers.create_customer(customer_data)
    assert services.customers.delete_customer(customer.id)
    with pytest.raises(NotFoundError):
        services.customers.get_customer(customer.id)


def test_leasing_company_names_are_unique(services) -> None:
    company = services.leasing_companies.create_company("LOLC", branch="Kandy")
    assert services.leasing_companies.get_company(company.id).branch == "Kandy"
    assert [c.name for c in services.leasing_companies.list_companies()] == ["LOLC"]
    with pytest.raises(ValidationError):
        services.leasing_companies.create_company("LOLC")
    with pytest.raises(ValidationError):
        services.leasing_companies.create_company(" ")
