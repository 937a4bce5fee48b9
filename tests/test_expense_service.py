from __future__ import annotations

import pytest

from dealership_manager.services.errors import NotFoundError, ValidationError


@pytest.fixture
def expenses(services):
    services.expenses.create_expense("2024-03-01", "Rent", "Showroom rent", 150_000)
    services.expenses.create_expense("2024-03-10", "Utilities", "Electricity", "12,000")
    services.expenses.create_expense(
        "2024-04-05", "Rent", "Showroom rent", 150_000, payment_method="bank_transfer"
    )
    return services.expenses


def test_filters_and_categories(expenses) -> None:
    assert len(expenses.list_expenses()) == 3
    assert len(expenses.list_expenses(category="Rent")) == 2
    march = expenses.list_expenses(start_date="2024-03-01", end_date="2024-03-31")
    assert [e.description for e in march] == ["Electricity", "Showroom rent"]
    assert expenses.list_categories() == ["Rent", "Utilities"]


def test_stats(expenses) -> None:
    stats = expenses.get_stats()
    assert stats.total == 312_000
    assert stats.count == 3
    assert stats.average == pytest.approx(104_000)
    assert stats.categories == 2
    assert list(stats.by_category) == ["Rent", "Utilities"]


@pytest.mark.parametrize(
    "date, category, amount",
    [("", "Rent", 100), ("2024-01-01", " ", 100), ("2024-01-01", "Rent", 0)],
)
def test_invalid_expenses(services, date, category, amount) -> None:
    with pytest.raises(ValidationError):
        services.expenses.create_expense(date, category, None, amount)


def test_update_and_delete(services) -> None:
    expense = services.expenses.create_expense("2024-05-01", "Fuel", None, 5000, currency="USD")
    updated = services.expenses.update_expense(expense.id, "2024-05-02", "Fuel", "Test drive", 6000)
    assert updated.amount == 6000
    assert updated.currency == "USD"
    assert updated.description == "Test drive"
    assert services.expenses.delete_expense(expense.id)
    with pytest.raises(NotFoundError):
        services.expenses.get_expense(expense.id)
