"""Display formatting for amounts and dates."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Optional

from dateutil.parser import isoparse

from dealership_manager.config import DEFAULT_CURRENCY


def format_amount(value: Any, decimals: int = 2) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = 0.0
    if math.isnan(number) or math.isinf(number):
        number = 0.0
    return f"{number:,.{decimals}f}"


def format_currency(value: Any, currency: Optional[str] = None, decimals: int = 2) -> str:
    """Format ``value`` as ``"LKR 1,234.00"``; invalid numbers render as zero."""
    return f"{currency or DEFAULT_CURRENCY} {format_amount(value, decimals)}"


def format_date(value: Optional[str | date], fmt: str = "%d/%m/%Y", default: str = "N/A") -> str:
    if not value:
        return default
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)
    try:
        return isoparse(value).strftime(fmt)
    except ValueError:
        return str(value)


def humanize(value: Optional[str]) -> str:
    """``"partial_paid"`` -> ``"Partial Paid"``."""
    if not value:
        return ""
    return " ".join(part.capitalize() for part in str(value).split("_"))
