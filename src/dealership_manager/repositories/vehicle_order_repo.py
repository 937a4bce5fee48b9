"""Repository for import order persistence."""

from __future__ import annotations

import dataclasses
import sqlite3
from datetime import datetime
from typing import Optional

from dealership_manager.domain.models import OrderStatus, VehicleOrder
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.mappers import (
    vehicle_order_from_row,
    vehicle_order_to_record,
)


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class VehicleOrderRepo:
    """Data access for vehicle import orders."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, order: VehicleOrder) -> VehicleOrder:
        timestamp = _now_iso()
        record = vehicle_order_to_record(order)
        record["created_at"] = timestamp
        record["updated_at"] = timestamp
        columns = ", ".join(record)
        placeholders = ", ".join(["?"] * len(record))
        try:
            cursor = self._connection.execute(
                f"INSERT INTO vehicle_orders ({columns}) VALUES ({placeholders})",
                tuple(record.values()),
            )
        except Exception:
            self._logger.exception(
                "Failed to create vehicle order number=%s", order.order_number
            )
            raise
        return dataclasses.replace(
            order,
            id=int(cursor.lastrowid),
            created_at=timestamp,
            updated_at=timestamp,
        )

    def update(self, order_id: int, order: VehicleOrder) -> bool:
        record = vehicle_order_to_record(order)
        record["updated_at"] = _now_iso()
        assignments = ", ".join(f"{column} = ?" for column in record)
        try:
            cursor = self._connection.execute(
                f"UPDATE vehicle_orders SET {assignments} WHERE id = ?",
                (*record.values(), order_id),
            )
        except Exception:
            self._logger.exception("Failed to update vehicle order id=%s", order_id)
            raise
        return cursor.rowcount > 0

    def set_status(self, order_id: int, status: OrderStatus) -> bool:
        try:
            cursor = self._connection.execute(
                """
                UPDATE vehicle_orders
                SET status = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (status.value, _now_iso(), order_id),
            )
        except Exception:
            self._logger.exception("Failed to set order status id=%s", order_id)
            raise
        return cursor.rowcount > 0

    def link_inventory_item(
        self, order_id: int, inventory_item_id: int, notes: Optional[str]
    ) -> bool:
        try:
            cursor = self._connection.execute(
                """
                UPDATE vehicle_orders
                SET inventory_item_id = ?,
                    notes = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (inventory_item_id, notes, _now_iso(), order_id),
            )
        except Exception:
            self._logger.exception(
                "Failed to link inventory item to order id=%s", order_id
            )
            raise
        return cursor.rowcount > 0

    def get_by_id(self, order_id: int) -> Optional[VehicleOrder]:
        try:
            row = self._connection.execute(
                "SELECT * FROM vehicle_orders WHERE id = ?",
                (order_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch vehicle order id=%s", order_id)
            raise
        return vehicle_order_from_row(row) if row else None

    def list_orders(
        self,
        *,
        status: Optional[OrderStatus] = None,
        search: Optional[str] = None,
    ) -> list[VehicleOrder]:
        filters = []
        params: list[object] = []
        if status is not None:
            filters.append("status = ?")
            params.append(status.value)
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            filters.append(
                """(
                    LOWER(model) LIKE ?
                    OR LOWER(order_number) LIKE ?
                    OR LOWER(COALESCE(country, '')) LIKE ?
                    OR LOWER(COALESCE(supplier, '')) LIKE ?
                )"""
            )
            params.extend([pattern] * 4)
        where_clause = f"WHERE {' AND '.join(filters)}" if filters else ""
        try:
            rows = self._connection.execute(
                f"""
                SELECT *
                FROM vehicle_orders
                {where_clause}
                ORDER BY order_date DESC, id DESC
                """,
                params,
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list vehicle orders")
            raise
        return [vehicle_order_from_row(row) for row in rows]

    def delete(self, order_id: int) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM vehicle_orders WHERE id = ?",
                (order_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete vehicle order id=%s", order_id)
            raise
        return cursor.rowcount > 0
