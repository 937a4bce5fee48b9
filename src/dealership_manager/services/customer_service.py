"""Customer service for business rules."""

from __future__ import annotations

import sqlite3
from typing import Any, Mapping, Optional

from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import Customer
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.customer_repo import CustomerRepo
from dealership_manager.services.errors import NotFoundError, ValidationError


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class CustomerService:
    """Service for customer operations."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._repo = CustomerRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def list_customers(self, search: Optional[str] = None) -> list[Customer]:
        if search:
            return self._repo.search(search)
        return self._repo.list_all()

    def get_customer(self, customer_id: int) -> Customer:
        customer = self._repo.get_by_id(customer_id)
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found.")
        return customer

    def create_customer(self, data: Mapping[str, Any]) -> Customer:
        fields = self._validate(data)
        with transaction(self._connection):
            customer = self._repo.create(**fields)
        self._logger.info("Customer created id=%s", customer.id)
        return customer

    def update_customer(self, customer_id: int, data: Mapping[str, Any]) -> Customer:
        fields = self._validate(data)
        with transaction(self._connection):
            customer = self._repo.update(customer_id, **fields)
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found.")
        return customer

    def delete_customer(self, customer_id: int) -> bool:
        self.get_customer(customer_id)
        if self._repo.count_transactions(customer_id):
            raise ValidationError(
                "Customer has transactions and cannot be deleted."
            )
        with transaction(self._connection):
            return self._repo.delete(customer_id)

    def find_or_create(self, data: Mapping[str, Any]) -> tuple[Customer, bool]:
        """Return the customer with an identical contact, creating one if needed.

        Contacts are compared verbatim, so differently formatted numbers yield
        separate customers. Runs inside the caller's transaction.
        """
        fields = self._validate(data)
        existing = self._repo.find_by_contact(fields["contact"])
        if existing:
            return existing, False
        return self._repo.create(**fields), True

    def _validate(self, data: Mapping[str, Any]) -> dict[str, Optional[str]]:
        name = _clean(data.get("name"))
        contact = _clean(data.get("contact"))
        if not name:
            raise ValidationError("Customer name is required.")
        if not contact:
            raise ValidationError("Customer contact is required.")
        return {
            "name": name,
            "contact": contact,
            "title": _clean(data.get("title")),
            "email": _clean(data.get("email")),
            "address": _clean(data.get("address")),
            "nic": _clean(data.get("nic")),
            "notes": _clean(data.get("notes")),
        }
