"""Pricing and leasing amortization calculators.

Everything here is pure: no database access and no side effects, so the
same inputs always produce the same figures.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from dealership_manager.config import DEFAULT_DOWN_PAYMENT_RATIO, DEFAULT_TAX_RATE
from dealership_manager.domain.models import InventoryItem, Pricing
from dealership_manager.services.errors import ValidationError


def parse_amount(value: Any) -> float:
    """Coerce form input to a float, treating blanks and garbage as zero."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def round_money(value: float) -> float:
    """Quantize a money figure to cents."""
    return round(value, 2)


def parse_money(value: Any) -> float:
    return round_money(parse_amount(value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_total_amount(
    vehicle_price: Any,
    taxes: Any = 0,
    fees: Any = 0,
    discount: Any = 0,
) -> float:
    """Return price + taxes + fees - discount in cents. The result is not clamped."""
    return round_money(
        parse_money(vehicle_price)
        + parse_money(taxes)
        + parse_money(fees)
        - parse_money(discount)
    )


def build_pricing(
    vehicle_price: Any,
    taxes: Any = 0,
    fees: Any = 0,
    discount: Any = 0,
) -> Pricing:
    return Pricing(
        vehicle_price=parse_money(vehicle_price),
        taxes=parse_money(taxes),
        fees=parse_money(fees),
        discount=parse_money(discount),
        total_amount=calculate_total_amount(vehicle_price, taxes, fees, discount),
    )


def validate_pricing(pricing: Pricing) -> None:
    """Reject negative components and totals that would go below zero."""
    if pricing.vehicle_price <= 0:
        raise ValidationError("Vehicle price must be greater than zero.")
    for label, amount in (
        ("Taxes", pricing.taxes),
        ("Fees", pricing.fees),
        ("Discount", pricing.discount),
    ):
        if amount < 0:
            raise ValidationError(f"{label} cannot be negative.")
    if pricing.total_amount < 0:
        raise ValidationError(
            "Discount exceeds the vehicle price plus taxes and fees."
        )


def suggested_pricing(item: InventoryItem) -> Pricing:
    """Pre-fill pricing for a vehicle: list price plus the default tax estimate."""
    vehicle_price = item.list_price
    taxes = float(round_half_up(vehicle_price * DEFAULT_TAX_RATE))
    return build_pricing(vehicle_price, taxes, 0, 0)


def calculate_monthly_installment(
    principal: Any,
    tenure: Any,
    interest_rate: Any,
) -> int:
    """Amortized monthly installment for an annual percentage rate.

    Returns 0 when any of principal, tenure or rate is not positive.
    """
    principal_value = parse_amount(principal)
    months = int(parse_amount(tenure))
    rate = parse_amount(interest_rate)
    if principal_value <= 0 or months <= 0 or rate <= 0:
        return 0
    monthly_rate = rate / 100 / 12
    growth = (1 + monthly_rate) ** months
    installment = principal_value * monthly_rate * growth / (growth - 1)
    return round_half_up(installment)


def default_down_payment(total_amount: float) -> float:
    return float(round_half_up(total_amount * DEFAULT_DOWN_PAYMENT_RATIO))


def _parse_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return isoparse(value).date()
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value}") from exc


def calculate_end_date(start_date: Optional[str], tenure: int) -> str:
    start = _parse_date(start_date)
    return (start + relativedelta(months=max(tenure, 0))).isoformat()


def build_leasing_terms(
    total_amount: float,
    down_payment: Any,
    tenure: Any,
    interest_rate: Any,
    start_date: Optional[str] = None,
) -> dict[str, Any]:
    """Derive leasing amount, installment and end date from the inputs.

    The down payment defaults to 20% of the total when not supplied.
    """
    months = int(parse_amount(tenure))
    rate = parse_amount(interest_rate)
    if months <= 0:
        raise ValidationError("Leasing tenure must be at least one month.")
    if rate < 0:
        raise ValidationError("Interest rate cannot be negative.")
    if down_payment is None or (isinstance(down_payment, str) and not down_payment.strip()):
        down = default_down_payment(total_amount)
    else:
        down = parse_money(down_payment)
    if down < 0:
        raise ValidationError("Down payment cannot be negative.")
    if down > total_amount:
        raise ValidationError("Down payment cannot exceed the total amount.")
    leasing_amount = round_money(total_amount - down)
    start = _parse_date(start_date)
    return {
        "down_payment": down,
        "leasing_amount": leasing_amount,
        "monthly_installment": calculate_monthly_installment(
            leasing_amount, months, rate
        ),
        "tenure": months,
        "interest_rate": rate,
        "start_date": start.isoformat(),
        "end_date": calculate_end_date(start.isoformat(), months),
    }
