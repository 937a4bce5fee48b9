"""Leasing company registry."""

from __future__ import annotations

import sqlite3
from typing import Optional

from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import LeasingCompany
from dealership_manager.repositories.leasing_company_repo import LeasingCompanyRepo
from dealership_manager.services.errors import NotFoundError, ValidationError


class LeasingCompanyService:
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._repo = LeasingCompanyRepo(connection)

    def list_companies(self) -> list[LeasingCompany]:
        return self._repo.list_all()

    def get_company(self, company_id: int) -> LeasingCompany:
        company = self._repo.get_by_id(company_id)
        if not company:
            raise NotFoundError(f"Leasing company {company_id} not found.")
        return company

    def create_company(
        self,
        name: str,
        branch: Optional[str] = None,
        contact_person: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
    ) -> LeasingCompany:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Leasing company name is required.")
        if self._repo.get_by_name(name):
            raise ValidationError(f"Leasing company '{name}' already exists.")
        with transaction(self._connection):
            return self._repo.create(
                LeasingCompany(
                    id=None,
                    name=name,
                    branch=branch,
                    contact_person=contact_person,
                    phone=phone,
                    email=email,
                    address=address,
                )
            )
