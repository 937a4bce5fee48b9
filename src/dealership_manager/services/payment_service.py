"""Payment service for business rules."""

from __future__ import annotations

import sqlite3
from datetime import date
from typing import Optional

from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import (
    InventoryStatus,
    PaymentMethod,
    PaymentRecord,
    Transaction,
    TransactionStatus,
)
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.inventory_repo import InventoryRepo
from dealership_manager.repositories.payment_repo import PaymentRepository
from dealership_manager.repositories.transaction_repo import TransactionRepo
from dealership_manager.services.errors import NotFoundError, ValidationError
from dealership_manager.services.ledger import apply_payment
from dealership_manager.services.pricing import parse_money

CLOSED_STATUSES = (TransactionStatus.CANCELLED, TransactionStatus.COMPLETED)


def _coerce_method(value: PaymentMethod | str | None) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    if not value:
        return PaymentMethod.CASH
    try:
        return PaymentMethod(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Invalid payment method: {value}") from exc


class PaymentService:
    """Service for payment operations."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._repo = PaymentRepository(connection)
        self._transaction_repo = TransactionRepo(connection)
        self._inventory_repo = InventoryRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def list_payments(self, transaction_id: int) -> list[PaymentRecord]:
        return self._repo.list_by_transaction(transaction_id)

    def get_paid_total(self, transaction_id: int) -> float:
        return self._repo.get_paid_total(transaction_id)

    def add_payment(
        self,
        transaction_id: int,
        amount: float | str,
        payment_method: PaymentMethod | str | None,
        received_by: str,
        notes: Optional[str] = None,
        payment_date: Optional[str] = None,
    ) -> Transaction:
        """Append a payment and settle the transaction ledger.

        The payment row, the new totals and, once the balance is cleared, the
        vehicle's sold status are committed in a single database transaction.
        """
        value = parse_money(amount)
        if value <= 0:
            raise ValidationError("Payment amount must be greater than zero.")
        received_by = (received_by or "").strip()
        if not received_by:
            raise ValidationError("Receiver name is required.")
        method = _coerce_method(payment_method)

        current = self._transaction_repo.get_by_id(transaction_id)
        if not current:
            raise NotFoundError(f"Transaction {transaction_id} not found.")
        if current.status in CLOSED_STATUSES:
            raise ValidationError(
                f"Cannot add payments to a {current.status.value} transaction."
            )
        if value > current.balance_remaining:
            self._logger.warning(
                "Payment %.2f exceeds balance %.2f for transaction id=%s",
                value,
                current.balance_remaining,
                transaction_id,
            )

        with transaction(self._connection):
            record = self._repo.append(
                transaction_id,
                value,
                method,
                payment_date or date.today().isoformat(),
                received_by,
                notes,
            )
            state = apply_payment(current, record)
            self._transaction_repo.update_ledger(
                transaction_id,
                total_paid=state.total_paid,
                balance_remaining=state.balance_remaining,
                status=state.status,
                transaction_type=state.type,
                completion_date=state.completion_date,
            )
            if state.is_completed and current.inventory_id is not None:
                self._inventory_repo.set_status(current.inventory_id, InventoryStatus.SOLD)

        self._logger.info(
            "Payment recorded transaction_id=%s amount=%.2f status=%s",
            transaction_id,
            value,
            state.status.value,
        )
        updated = self._transaction_repo.get_by_id(transaction_id)
        if not updated:
            raise NotFoundError(f"Transaction {transaction_id} not found.")
        return updated
