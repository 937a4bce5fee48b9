"""Repository for leasing company persistence."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from dealership_manager.domain.models import LeasingCompany
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.mappers import leasing_company_from_row


class LeasingCompanyRepo:
    """Data access for leasing companies."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, company: LeasingCompany) -> LeasingCompany:
        created_at = datetime.now().isoformat(timespec="seconds")
        try:
            cursor = self._connection.execute(
                """
                INSERT INTO leasing_companies (
                    name,
                    branch,
                    contact_person,
                    phone,
                    email,
                    address,
                    created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    company.name,
                    company.branch,
                    company.contact_person,
                    company.phone,
                    company.email,
                    company.address,
                    created_at,
                ),
            )
        except Exception:
            self._logger.exception("Failed to create leasing company name=%s", company.name)
            raise
        return LeasingCompany(
            id=int(cursor.lastrowid),
            name=company.name,
            branch=company.branch,
            contact_person=company.contact_person,
            phone=company.phone,
            email=company.email,
            address=company.address,
            created_at=created_at,
        )

    def get_by_id(self, company_id: int) -> Optional[LeasingCompany]:
        try:
            row = self._connection.execute(
                "SELECT * FROM leasing_companies WHERE id = ?",
                (company_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch leasing company id=%s", company_id)
            raise
        return leasing_company_from_row(row) if row else None

    def get_by_name(self, name: str) -> Optional[LeasingCompany]:
        row = self._connection.execute(
            "SELECT * FROM leasing_companies WHERE LOWER(name) = LOWER(?)",
            (name.strip(),),
        ).fetchone()
        return leasing_company_from_row(row) if row else None

    def list_all(self) -> list[LeasingCompany]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM leasing_companies ORDER BY name"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list leasing companies")
            raise
        return [leasing_company_from_row(row) for row in rows]
