from __future__ import annotations

import math

import pytest

from dealership_manager.domain.models import InventoryItem
from dealership_manager.services.errors import ValidationError
from dealership_manager.services.pricing import (
    build_leasing_terms,
    build_pricing,
    calculate_end_date,
    calculate_monthly_installment,
    calculate_total_amount,
    default_down_payment,
    parse_amount,
    round_half_up,
    suggested_pricing,
    validate_pricing,
)


def test_total_amount_adds_taxes_and_fees_and_subtracts_discount() -> None:
    assert calculate_total_amount(32000, 1600, 400, 500) == 33500


def test_total_amount_accepts_form_strings() -> None:
    assert calculate_total_amount("32,000", "1600", "", None) == 33600


def test_total_amount_is_not_clamped() -> None:
    assert calculate_total_amount(100, 0, 0, 250) == -150


def test_validate_pricing_rejects_negative_total() -> None:
    with pytest.raises(ValidationError):
        validate_pricing(build_pricing(100, 0, 0, 250))


@pytest.mark.parametrize(
    "values",
    [
        (0, 0, 0, 0),
        (1000, -1, 0, 0),
        (1000, 0, -1, 0),
        (1000, 0, 0, -1),
    ],
)
def test_validate_pricing_rejects_invalid_components(values) -> None:
    with pytest.raises(ValidationError):
        validate_pricing(build_pricing(*values))


def test_monthly_installment_matches_amortization_formula() -> None:
    installment = calculate_monthly_installment(4_300_000, 48, 12.5)
    rate = 12.5 / 100 / 12
    growth = (1 + rate) ** 48
    expected = 4_300_000 * rate * growth / (growth - 1)
    assert installment == math.floor(expected + 0.5)
    assert 114_000 <= installment <= 116_000


@pytest.mark.parametrize(
    "principal, tenure, rate",
    [(0, 48, 12.5), (100000, 0, 12.5), (100000, 48, 0), (-5, 12, 10)],
)
def test_monthly_installment_is_zero_for_non_positive_inputs(principal, tenure, rate) -> None:
    assert calculate_monthly_installment(principal, tenure, rate) == 0


def test_monthly_installment_is_stable_across_calls() -> None:
    first = calculate_monthly_installment(1_250_000, 36, 14)
    assert all(calculate_monthly_installment(1_250_000, 36, 14) == first for _ in range(5))


def test_parse_amount_treats_garbage_as_zero() -> None:
    assert parse_amount(None) == 0.0
    assert parse_amount("   ") == 0.0
    assert parse_amount("abc") == 0.0
    assert parse_amount(float("nan")) == 0.0
    assert parse_amount(float("inf")) == 0.0
    assert parse_amount("1,234.50") == 1234.5


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_default_down_payment_is_twenty_percent() -> None:
    assert default_down_payment(33500) == 6700


def test_end_date_adds_calendar_months() -> None:
    assert calculate_end_date("2024-01-31", 1) == "2024-02-29"
    assert calculate_end_date("2024-03-15", 48) == "2028-03-15"


def test_leasing_terms_default_down_payment() -> None:
    terms = build_leasing_terms(1_000_000, None, 24, 10, "2024-05-01")
    assert terms["down_payment"] == 200_000
    assert terms["leasing_amount"] == 800_000
    assert terms["monthly_installment"] == calculate_monthly_installment(800_000, 24, 10)
    assert terms["end_date"] == "2026-05-01"


@pytest.mark.parametrize(
    "down_payment, tenure, rate",
    [(-1, 12, 10), (2_000_000, 12, 10), (100, 0, 10), (100, 12, -1)],
)
def test_leasing_terms_reject_invalid_inputs(down_payment, tenure, rate) -> None:
    with pytest.raises(ValidationError):
        build_leasing_terms(1_000_000, down_payment, tenure, rate)


def test_suggested_pricing_uses_list_price_and_tax_estimate() -> None:
    item = InventoryItem(
        id=1,
        brand="Honda",
        model="Fit",
        year=2019,
        color="Blue",
        purchase_price=9000,
        currency="LKR",
        market_value=11000,
        selling_price=12000,
    )
    pricing = suggested_pricing(item)
    assert pricing.vehicle_price == 12000
    assert pricing.taxes == 600
    assert pricing.total_amount == 12600


def test_money_amounts_are_kept_in_cents() -> None:
    assert calculate_total_amount("1.62", "0.01") == 1.63
    assert calculate_total_amount(0.1, 0.2) == 0.3
    pricing = build_pricing("1,000.50", "0.104")
    assert pricing.vehicle_price == 1000.5
    assert pricing.taxes == 0.1
    assert pricing.total_amount == 1000.6
