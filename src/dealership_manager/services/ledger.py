"""Payment ledger rules for transactions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from dealership_manager.domain.models import (
    PaymentRecord,
    Transaction,
    TransactionStatus,
    TransactionType,
)


@dataclass(frozen=True, slots=True)
class LedgerState:
    total_paid: float
    balance_remaining: float
    status: TransactionStatus
    type: TransactionType
    completion_date: Optional[str]

    @property
    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED


def recompute_totals(
    transaction: Transaction,
    payments: Iterable[PaymentRecord],
    today: Optional[str] = None,
) -> LedgerState:
    """Fold the payment records into totals and derive status and type.

    A reservation that is fully paid becomes a sale and is marked completed.
    A transaction with nothing paid keeps its current status. Amounts are
    compared in cents.
    """
    total_amount = transaction.pricing.total_amount
    total_paid = round(sum(payment.amount for payment in payments), 2)
    outstanding = round(total_amount - total_paid, 2)

    status = transaction.status
    transaction_type = transaction.type
    completion_date = transaction.completion_date

    if outstanding <= 0:
        status = TransactionStatus.COMPLETED
        completion_date = completion_date or today or date.today().isoformat()
        if transaction_type == TransactionType.RESERVATION:
            transaction_type = TransactionType.SALE
    elif total_paid > 0:
        status = TransactionStatus.PARTIAL_PAID

    return LedgerState(
        total_paid=total_paid,
        balance_remaining=max(0.0, outstanding),
        status=status,
        type=transaction_type,
        completion_date=completion_date,
    )


def apply_payment(
    transaction: Transaction,
    payment: PaymentRecord,
    today: Optional[str] = None,
) -> LedgerState:
    """Return the ledger state after appending ``payment`` to the transaction."""
    return recompute_totals(
        transaction,
        [*transaction.payments, payment],
        today=today or payment.payment_date,
    )
