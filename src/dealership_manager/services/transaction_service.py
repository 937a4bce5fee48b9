"""Transaction service: reservations, sales and leasing deals."""

from __future__ import annotations

import sqlite3
import time
from datetime import date
from typing import Any, Mapping, Optional

from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import (
    OPEN_TRANSACTION_STATUSES,
    InventoryItem,
    InventoryStatus,
    LeasingDetails,
    PaymentMode,
    Transaction,
    TransactionStatus,
    TransactionType,
    VehicleDetails,
)
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.inventory_repo import InventoryRepo
from dealership_manager.repositories.leasing_company_repo import LeasingCompanyRepo
from dealership_manager.repositories.transaction_repo import TransactionRepo
from dealership_manager.services.customer_service import CustomerService
from dealership_manager.services.errors import NotFoundError, ValidationError
from dealership_manager.services.pricing import (
    build_leasing_terms,
    build_pricing,
    validate_pricing,
)


def _coerce_payment_mode(value: PaymentMode | str | None) -> PaymentMode:
    if isinstance(value, PaymentMode):
        return value
    if not value:
        return PaymentMode.CASH
    try:
        return PaymentMode(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Invalid payment mode: {value}") from exc


class TransactionService:
    """Service for transaction lifecycle rules."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._repo = TransactionRepo(connection)
        self._inventory_repo = InventoryRepo(connection)
        self._leasing_repo = LeasingCompanyRepo(connection)
        self._customer_service = CustomerService(connection)
        self._logger = get_logger(self.__class__.__name__)

    def get_transaction(self, transaction_id: int) -> Transaction:
        found = self._repo.get_by_id(transaction_id)
        if not found:
            raise NotFoundError(f"Transaction {transaction_id} not found.")
        return found

    def list_transactions(
        self,
        *,
        status: Optional[TransactionStatus] = None,
        transaction_type: Optional[TransactionType] = None,
        search: Optional[str] = None,
    ) -> list[Transaction]:
        return self._repo.list_transactions(
            status=status, transaction_type=transaction_type, search=search
        )

    def create_reservation(
        self,
        inventory_id: int,
        customer_data: Mapping[str, Any],
        pricing_data: Mapping[str, Any],
        payment_mode: PaymentMode | str | None = PaymentMode.CASH,
        leasing_data: Optional[Mapping[str, Any]] = None,
        expected_delivery: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Transaction:
        """Reserve a vehicle for a customer.

        The customer lookup or creation, the transaction insert and the
        inventory status change are committed together or not at all.
        """
        mode = _coerce_payment_mode(payment_mode)
        pricing = build_pricing(
            pricing_data.get("vehicle_price"),
            pricing_data.get("taxes"),
            pricing_data.get("fees"),
            pricing_data.get("discount"),
        )
        validate_pricing(pricing)
        if mode == PaymentMode.LEASING and not leasing_data:
            raise ValidationError("Leasing details are required for leasing deals.")

        with transaction(self._connection):
            item = self._get_available_item(inventory_id)
            customer, created = self._customer_service.find_or_create(customer_data)
            if created:
                self._logger.info("Customer created during reservation id=%s", customer.id)
            leasing = None
            if mode == PaymentMode.LEASING:
                leasing = self._build_leasing(pricing.total_amount, leasing_data or {})
            reserved = self._repo.create(
                Transaction(
                    id=None,
                    customer_id=int(customer.id),
                    inventory_id=item.id,
                    type=(
                        TransactionType.LEASING
                        if mode == PaymentMode.LEASING
                        else TransactionType.RESERVATION
                    ),
                    status=TransactionStatus.PENDING,
                    vehicle=VehicleDetails(
                        brand=item.brand,
                        model=item.model,
                        year=item.year,
                        color=item.color,
                        registration_no=item.registration_no or item.license_plate,
                    ),
                    pricing=pricing,
                    total_paid=0.0,
                    balance_remaining=pricing.total_amount,
                    currency=item.currency,
                    payment_mode=mode,
                    invoice_number=self._next_invoice_number(),
                    reservation_date=date.today().isoformat(),
                    expected_delivery=expected_delivery,
                    notes=notes,
                    leasing=leasing,
                )
            )
            self._inventory_repo.set_status(item.id, InventoryStatus.RESERVED)
        self._logger.info(
            "Reservation created id=%s inventory_id=%s total=%.2f",
            reserved.id,
            inventory_id,
            pricing.total_amount,
        )
        return reserved

    def cancel_transaction(self, transaction_id: int) -> Transaction:
        current = self.get_transaction(transaction_id)
        if current.status == TransactionStatus.CANCELLED:
            raise ValidationError("Transaction is already cancelled.")
        with transaction(self._connection):
            self._repo.set_status(transaction_id, TransactionStatus.CANCELLED)
            self._release_vehicle(current)
        self._logger.info("Transaction cancelled id=%s", transaction_id)
        return self.get_transaction(transaction_id)

    def delete_transaction(self, transaction_id: int) -> bool:
        current = self.get_transaction(transaction_id)
        with transaction(self._connection):
            if current.status in OPEN_TRANSACTION_STATUSES:
                self._release_vehicle(current)
            deleted = self._repo.delete(transaction_id)
        self._logger.info("Transaction deleted id=%s", transaction_id)
        return deleted

    def mark_overdue_transactions(
        self, reference_date: Optional[str] = None
    ) -> list[int]:
        """Flag open transactions whose expected delivery date has passed."""
        reference = reference_date or date.today().isoformat()
        with transaction(self._connection):
            overdue_ids = self._repo.list_overdue_candidates(reference)
            for transaction_id in overdue_ids:
                self._repo.set_status(transaction_id, TransactionStatus.OVERDUE)
        if overdue_ids:
            self._logger.info(
                "Marked %s transactions overdue as of %s", len(overdue_ids), reference
            )
        return overdue_ids

    def _get_available_item(self, inventory_id: int) -> InventoryItem:
        item = self._inventory_repo.get_by_id(inventory_id)
        if not item:
            raise NotFoundError(f"Vehicle {inventory_id} not found.")
        if item.status != InventoryStatus.AVAILABLE:
            raise ValidationError(
                f"Vehicle {inventory_id} is not available (status: {item.status.value})."
            )
        return item

    def _release_vehicle(self, current: Transaction) -> None:
        if current.inventory_id is None:
            return
        item = self._inventory_repo.get_by_id(current.inventory_id)
        if item and item.status == InventoryStatus.RESERVED:
            self._inventory_repo.set_status(item.id, InventoryStatus.AVAILABLE)

    def _build_leasing(
        self, total_amount: float, leasing_data: Mapping[str, Any]
    ) -> LeasingDetails:
        company_id = leasing_data.get("leasing_company_id")
        company_name = (leasing_data.get("leasing_company_name") or "").strip()
        branch = leasing_data.get("leasing_company_branch")
        if company_id:
            company = self._leasing_repo.get_by_id(int(company_id))
            if not company:
                raise NotFoundError(f"Leasing company {company_id} not found.")
            company_name = company.name
            branch = branch or company.branch
        elif company_name:
            company = self._leasing_repo.get_by_name(company_name)
            if company:
                company_id = company.id
                branch = branch or company.branch
        if not company_name:
            raise ValidationError("Leasing company is required.")
        reference = (leasing_data.get("lease_reference_no") or "").strip()
        if not reference:
            raise ValidationError("Lease reference number is required.")
        terms = build_leasing_terms(
            total_amount,
            leasing_data.get("down_payment"),
            leasing_data.get("tenure"),
            leasing_data.get("interest_rate"),
            leasing_data.get("start_date"),
        )
        return LeasingDetails(
            leasing_company_id=int(company_id) if company_id else None,
            leasing_company_name=company_name,
            leasing_company_branch=branch,
            lease_reference_no=reference,
            **terms,
        )

    def _next_invoice_number(self) -> str:
        stamp = int(time.time() * 1000)
        while self._connection.execute(
            "SELECT 1 FROM transactions WHERE invoice_number = ?",
            (f"INV-{stamp}",),
        ).fetchone():
            stamp += 1
        return f"INV-{stamp}"
