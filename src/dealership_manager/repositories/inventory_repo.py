"""Repository for vehicle inventory persistence."""

from __future__ import annotations

import dataclasses
import sqlite3
from datetime import datetime
from typing import Optional

from dealership_manager.domain.models import InventoryItem, InventoryStatus, VehicleCondition
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.mappers import (
    inventory_item_from_row,
    inventory_item_to_record,
)


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class InventoryRepo:
    """Data access for stock vehicles."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, item: InventoryItem) -> InventoryItem:
        timestamp = _now_iso()
        record = inventory_item_to_record(item)
        record["created_at"] = timestamp
        record["updated_at"] = timestamp
        columns = ", ".join(record)
        placeholders = ", ".join(["?"] * len(record))
        try:
            cursor = self._connection.execute(
                f"INSERT INTO inventory_items ({columns}) VALUES ({placeholders})",
                tuple(record.values()),
            )
        except Exception:
            self._logger.exception(
                "Failed to create inventory item %s %s", item.brand, item.model
            )
            raise
        return dataclasses.replace(
            item,
            id=int(cursor.lastrowid),
            created_at=timestamp,
            updated_at=timestamp,
        )

    def update(self, item_id: int, item: InventoryItem) -> bool:
        record = inventory_item_to_record(item)
        record["updated_at"] = _now_iso()
        assignments = ",\n                    ".join(f"{column} = ?" for column in record)
        try:
            cursor = self._connection.execute(
                f"""
                UPDATE inventory_items
                SET {assignments}
                WHERE id = ?
                """,
                (*record.values(), item_id),
            )
        except Exception:
            self._logger.exception("Failed to update inventory item id=%s", item_id)
            raise
        return cursor.rowcount > 0

    def set_status(self, item_id: int, status: InventoryStatus) -> bool:
        try:
            cursor = self._connection.execute(
                """
                UPDATE inventory_items
                SET status = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (status.value, _now_iso(), item_id),
            )
        except Exception:
            self._logger.exception(
                "Failed to set inventory status id=%s status=%s", item_id, status
            )
            raise
        return cursor.rowcount > 0

    def get_by_id(self, item_id: int) -> Optional[InventoryItem]:
        try:
            row = self._connection.execute(
                "SELECT * FROM inventory_items WHERE id = ?",
                (item_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch inventory item id=%s", item_id)
            raise
        return inventory_item_from_row(row) if row else None

    def list_items(
        self,
        *,
        status: Optional[InventoryStatus] = None,
        condition: Optional[VehicleCondition] = None,
        search: Optional[str] = None,
    ) -> list[InventoryItem]:
        filters = []
        params: list[object] = []

        if status is not None:
            filters.append("status = ?")
            params.append(status.value)

        if condition is not None:
            filters.append("condition = ?")
            params.append(condition.value)

        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            filters.append(
                """(
                    LOWER(brand) LIKE ?
                    OR LOWER(model) LIKE ?
                    OR LOWER(color) LIKE ?
                    OR LOWER(COALESCE(vin, '')) LIKE ?
                    OR LOWER(COALESCE(license_plate, '')) LIKE ?
                )"""
            )
            params.extend([pattern] * 5)

        where_clause = f"WHERE {' AND '.join(filters)}" if filters else ""
        try:
            rows = self._connection.execute(
                f"""
                SELECT *
                FROM inventory_items
                {where_clause}
                ORDER BY created_at DESC, id DESC
                """,
                params,
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list inventory items")
            raise
        return [inventory_item_from_row(row) for row in rows]

    def delete(self, item_id: int) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM inventory_items WHERE id = ?",
                (item_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete inventory item id=%s", item_id)
            raise
        return cursor.rowcount > 0

    def count_transactions(self, item_id: int) -> int:
        row = self._connection.execute(
            "SELECT COUNT(*) AS total FROM transactions WHERE inventory_id = ?",
            (item_id,),
        ).fetchone()
        return int(row["total"]) if row else 0
