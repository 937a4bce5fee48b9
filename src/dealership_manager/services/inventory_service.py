"""Inventory service for stock vehicles."""

from __future__ import annotations

import dataclasses
import sqlite3
from datetime import date
from typing import Any, Mapping, Optional

from dealership_manager.config import DEFAULT_CURRENCY
from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import (
    BodyType,
    FuelType,
    InventoryItem,
    InventoryStatus,
    Transmission,
    VehicleCondition,
)
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.inventory_repo import InventoryRepo
from dealership_manager.services.errors import NotFoundError, ValidationError
from dealership_manager.services.pricing import parse_amount


def _enum_value(enum_cls, value: Any, default):
    if value is None or value == "":
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Invalid {enum_cls.__name__}: {value}") from exc


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _features(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(feature).strip() for feature in value if str(feature).strip()]


class InventoryService:
    """Service for inventory CRUD and status changes."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._repo = InventoryRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def list_items(
        self,
        *,
        status: Optional[InventoryStatus] = None,
        condition: Optional[VehicleCondition] = None,
        search: Optional[str] = None,
    ) -> list[InventoryItem]:
        return self._repo.list_items(status=status, condition=condition, search=search)

    def get_item(self, item_id: int) -> InventoryItem:
        item = self._repo.get_by_id(item_id)
        if not item:
            raise NotFoundError(f"Vehicle {item_id} not found.")
        return item

    def build_item(self, data: Mapping[str, Any]) -> InventoryItem:
        """Validate form-style input and build an unsaved inventory item."""
        brand = _optional_text(data.get("brand"))
        model = _optional_text(data.get("model"))
        color = _optional_text(data.get("color"))
        if not brand or not model:
            raise ValidationError("Brand and model are required.")
        if not color:
            raise ValidationError("Color is required.")
        year = int(parse_amount(data.get("year")))
        if year < 1900 or year > date.today().year + 1:
            raise ValidationError(f"Invalid model year: {data.get('year')}")
        purchase_price = parse_amount(data.get("purchase_price"))
        market_value = parse_amount(data.get("market_value"))
        selling_price = data.get("selling_price")
        mileage = int(parse_amount(data.get("mileage")))
        if purchase_price < 0 or market_value < 0 or mileage < 0:
            raise ValidationError("Prices and mileage cannot be negative.")
        return InventoryItem(
            id=None,
            brand=brand,
            model=model,
            year=year,
            color=color,
            purchase_price=purchase_price,
            currency=_optional_text(data.get("currency")) or DEFAULT_CURRENCY,
            status=_enum_value(InventoryStatus, data.get("status"), InventoryStatus.AVAILABLE),
            condition=_enum_value(VehicleCondition, data.get("condition"), VehicleCondition.GOOD),
            fuel_type=_enum_value(FuelType, data.get("fuel_type"), FuelType.GASOLINE),
            transmission=_enum_value(
                Transmission, data.get("transmission"), Transmission.AUTOMATIC
            ),
            body_type=_enum_value(BodyType, data.get("body_type"), BodyType.SEDAN),
            mileage=mileage,
            market_value=market_value,
            selling_price=parse_amount(selling_price) if selling_price not in (None, "") else None,
            location=_optional_text(data.get("location")),
            vin=_optional_text(data.get("vin")),
            license_plate=_optional_text(data.get("license_plate")),
            registration_no=_optional_text(data.get("registration_no")),
            engine_no=_optional_text(data.get("engine_no")),
            engine_size=_optional_text(data.get("engine_size")),
            supplier=_optional_text(data.get("supplier")),
            purchase_date=_optional_text(data.get("purchase_date")),
            features=_features(data.get("features")),
            notes=_optional_text(data.get("notes")),
        )

    def create_item(self, data: Mapping[str, Any]) -> InventoryItem:
        item = self.build_item(data)
        with transaction(self._connection):
            created = self._repo.create(item)
        self._logger.info(
            "Vehicle added to inventory id=%s %s %s", created.id, created.brand, created.model
        )
        return created

    def update_item(self, item_id: int, data: Mapping[str, Any]) -> InventoryItem:
        existing = self.get_item(item_id)
        item = dataclasses.replace(
            self.build_item({"status": existing.status, **data}),
            id=item_id,
            source_order_id=existing.source_order_id,
        )
        with transaction(self._connection):
            self._repo.update(item_id, item)
        return self.get_item(item_id)

    def set_status(self, item_id: int, status: InventoryStatus) -> bool:
        self.get_item(item_id)
        with transaction(self._connection):
            return self._repo.set_status(item_id, status)

    def delete_item(self, item_id: int) -> bool:
        self.get_item(item_id)
        if self._repo.count_transactions(item_id):
            raise ValidationError("Vehicle is referenced by transactions.")
        with transaction(self._connection):
            return self._repo.delete(item_id)

    def get_status_counts(self) -> dict[InventoryStatus, int]:
        counts = {status: 0 for status in InventoryStatus}
        for item in self._repo.list_items():
            counts[item.status] += 1
        return counts
