"""Import order service: landed costs, profit and arrival into stock."""

from __future__ import annotations

import dataclasses
import sqlite3
import time
from datetime import date
from typing import Any, Mapping, Optional

from dealership_manager.config import (
    DEFAULT_COUNTRY_OF_ORIGIN,
    DEFAULT_CURRENCY,
    MARKET_VALUE_MARKUP,
    SELLING_PRICE_MARKUP,
)
from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import (
    ImportCosts,
    InventoryItem,
    InventoryStatus,
    OrderStatus,
    VehicleCondition,
    VehicleOrder,
)
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.inventory_repo import InventoryRepo
from dealership_manager.repositories.vehicle_order_repo import VehicleOrderRepo
from dealership_manager.services.errors import NotFoundError, ValidationError
from dealership_manager.services.pricing import parse_amount, parse_money, round_money

# Keyword -> brand, checked in order against the lower-cased model name.
BRAND_KEYWORDS: dict[str, str] = {
    "toyota": "Toyota",
    "camry": "Toyota",
    "corolla": "Toyota",
    "prius": "Toyota",
    "honda": "Honda",
    "accord": "Honda",
    "civic": "Honda",
    "cr-v": "Honda",
    "bmw": "BMW",
    "x5": "BMW",
    "x3": "BMW",
    "3 series": "BMW",
    "nissan": "Nissan",
    "gtr": "Nissan",
    "altima": "Nissan",
    "tesla": "Tesla",
    "model s": "Tesla",
    "model 3": "Tesla",
    "jeep": "Jeep",
    "wrangler": "Jeep",
    "mercedes": "Mercedes",
    "audi": "Audi",
}

COST_FIELDS = (
    "vehicle_cost",
    "fuel",
    "duty",
    "driver_charge",
    "clearance_charge",
    "demurrage",
    "tax",
)

UNKNOWN_COLOR = "To Be Determined"
DEFAULT_LOCATION = "Showroom"


def infer_brand(model: str) -> str:
    model_lower = model.lower()
    for keyword, brand in BRAND_KEYWORDS.items():
        if keyword in model_lower:
            return brand
    parts = model.split()
    return parts[0] if parts else model


def calculate_profit(order: VehicleOrder) -> float:
    if not order.selling_price:
        return 0.0
    return float(order.selling_price) - order.total_cost


def calculate_profit_margin(order: VehicleOrder) -> float:
    if not order.selling_price:
        return 0.0
    return calculate_profit(order) / float(order.selling_price) * 100


def build_costs(data: Mapping[str, Any]) -> ImportCosts:
    custom = data.get("custom_expenses") or {}
    return ImportCosts(
        **{name: parse_money(data.get(name)) for name in COST_FIELDS},
        custom_expenses={
            str(name).strip(): parse_money(amount)
            for name, amount in dict(custom).items()
            if str(name).strip()
        },
    )


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_amount(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_money(value)


def _coerce_status(value: OrderStatus | str | None) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    if not value:
        return OrderStatus.ORDERED
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Invalid order status: {value}") from exc


class VehicleOrderService:
    """Service for import order tracking."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._repo = VehicleOrderRepo(connection)
        self._inventory_repo = InventoryRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def list_orders(
        self,
        *,
        status: Optional[OrderStatus] = None,
        search: Optional[str] = None,
    ) -> list[VehicleOrder]:
        return self._repo.list_orders(status=status, search=search)

    def get_order(self, order_id: int) -> VehicleOrder:
        order = self._repo.get_by_id(order_id)
        if not order:
            raise NotFoundError(f"Vehicle order {order_id} not found.")
        return order

    def _next_order_number(self) -> str:
        stamp = int(time.time() * 1000)
        while self._connection.execute(
            "SELECT 1 FROM vehicle_orders WHERE order_number = ?", (f"IMP-{stamp}",)
        ).fetchone():
            stamp += 1
        return f"IMP-{stamp}"

    def build_order(self, data: Mapping[str, Any]) -> VehicleOrder:
        model = _optional_text(data.get("model"))
        if not model:
            raise ValidationError("Vehicle model is required.")
        costs = build_costs(data)
        if costs.vehicle_cost <= 0:
            raise ValidationError("Vehicle cost must be greater than zero.")
        if any(
            amount < 0
            for amount in (
                *(getattr(costs, name) for name in COST_FIELDS),
                *costs.custom_expenses.values(),
            )
        ):
            raise ValidationError("Import costs cannot be negative.")
        year = int(parse_amount(data.get("year"))) or date.today().year
        return VehicleOrder(
            id=None,
            order_number=_optional_text(data.get("order_number")) or self._next_order_number(),
            model=model,
            year=year,
            order_date=_optional_text(data.get("order_date")) or date.today().isoformat(),
            status=_coerce_status(data.get("status")),
            currency=_optional_text(data.get("currency")) or DEFAULT_CURRENCY,
            costs=costs,
            total_cost=round_money(costs.total_cost),
            country=_optional_text(data.get("country")) or DEFAULT_COUNTRY_OF_ORIGIN,
            supplier=_optional_text(data.get("supplier")),
            selling_price=_optional_amount(data.get("selling_price")),
            expected_delivery=_optional_text(data.get("expected_delivery")),
            payment_method=_optional_text(data.get("payment_method")),
            vehicle_number=_optional_text(data.get("vehicle_number")),
            vin_number=_optional_text(data.get("vin_number")),
            license_plate_number=_optional_text(data.get("license_plate_number")),
            lc_amount=_optional_amount(data.get("lc_amount")),
            lc_bank=_optional_text(data.get("lc_bank")),
            notes=_optional_text(data.get("notes")),
        )

    def create_order(self, data: Mapping[str, Any]) -> VehicleOrder:
        order = self.build_order(data)
        with transaction(self._connection):
            created = self._repo.create(order)
        self._logger.info(
            "Vehicle order created id=%s number=%s total_cost=%.2f",
            created.id,
            created.order_number,
            created.total_cost,
        )
        return created

    def update_order(self, order_id: int, data: Mapping[str, Any]) -> VehicleOrder:
        existing = self.get_order(order_id)
        order = dataclasses.replace(
            self.build_order({"order_number": existing.order_number, **data}),
            id=order_id,
            inventory_item_id=existing.inventory_item_id,
        )
        with transaction(self._connection):
            self._repo.update(order_id, order)
        return self.get_order(order_id)

    def update_status(self, order_id: int, status: OrderStatus | str) -> VehicleOrder:
        self.get_order(order_id)
        with transaction(self._connection):
            self._repo.set_status(order_id, _coerce_status(status))
        return self.get_order(order_id)

    def delete_order(self, order_id: int) -> bool:
        self.get_order(order_id)
        with transaction(self._connection):
            return self._repo.delete(order_id)

    def move_to_inventory(self, order_id: int) -> InventoryItem:
        """Turn a completed order into an available stock vehicle."""
        order = self.get_order(order_id)
        if order.status != OrderStatus.COMPLETED:
            raise ValidationError("Vehicle must be completed before adding to inventory.")
        if order.inventory_item_id is not None:
            raise ValidationError(
                f"Order {order.order_number} is already in inventory "
                f"(vehicle {order.inventory_item_id})."
            )
        today = date.today().isoformat()
        with transaction(self._connection):
            item = self._inventory_repo.create(
                InventoryItem(
                    id=None,
                    brand=infer_brand(order.model),
                    model=order.model,
                    year=order.year,
                    color=UNKNOWN_COLOR,
                    purchase_price=order.total_cost,
                    currency=order.currency,
                    status=InventoryStatus.AVAILABLE,
                    condition=VehicleCondition.EXCELLENT,
                    mileage=0,
                    market_value=round(order.total_cost * MARKET_VALUE_MARKUP, 2),
                    selling_price=round(order.total_cost * SELLING_PRICE_MARKUP, 2),
                    location=DEFAULT_LOCATION,
                    vin=order.vin_number,
                    license_plate=order.license_plate_number,
                    registration_no=order.vehicle_number,
                    supplier=order.supplier,
                    purchase_date=order.order_date,
                    notes=(
                        f"Converted from order {order.order_number} on {today}. "
                        f"Original order notes: {order.notes or 'None'}"
                    ),
                    source_order_id=order.id,
                )
            )
            order_notes = "\n".join(
                part
                for part in (order.notes, f"Added to inventory as vehicle {item.id} on {today}")
                if part
            )
            self._repo.link_inventory_item(order_id, int(item.id), order_notes)
        self._logger.info(
            "Order %s moved to inventory as vehicle id=%s", order.order_number, item.id
        )
        return item
