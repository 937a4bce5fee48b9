"""Financial reports and dashboard metrics."""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from dealership_manager.config import MONTHLY_TREND_MONTHS
from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import (
    PAID_TRANSACTION_STATUSES,
    Document,
    DocumentType,
    Expense,
    InventoryStatus,
    OrderStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from dealership_manager.logging_config import get_logger
from dealership_manager.repositories.document_repo import DocumentRepository
from dealership_manager.repositories.expense_repo import ExpenseRepo
from dealership_manager.repositories.inventory_repo import InventoryRepo
from dealership_manager.repositories.transaction_repo import TransactionRepo
from dealership_manager.repositories.vehicle_order_repo import VehicleOrderRepo
from dealership_manager.services.errors import ValidationError
from dealership_manager.utils.pdf_generator import generate_report_pdf

PERIODS = ("all", "today", "week", "month", "year", "custom")


@dataclass(frozen=True, slots=True)
class DateRange:
    start: Optional[date] = None
    end: Optional[date] = None

    def contains(self, value: Optional[date]) -> bool:
        if value is None:
            return self.start is None and self.end is None
        if self.start and value < self.start:
            return False
        if self.end and value > self.end:
            return False
        return True

    @property
    def label(self) -> str:
        if not self.start and not self.end:
            return "All time"
        start = self.start.isoformat() if self.start else "..."
        end = self.end.isoformat() if self.end else "today"
        return f"{start} to {end}"


@dataclass(slots=True)
class ReportSummary:
    period: DateRange
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    total_profit: float = 0.0
    total_sales: int = 0
    total_reservations: int = 0
    total_leasing: int = 0
    sales_by_brand: dict[str, float] = field(default_factory=dict)
    expenses_by_category: dict[str, float] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class MonthlyPoint:
    month: str
    revenue: float
    expense: float
    profit: float


@dataclass(slots=True)
class DashboardMetrics:
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    pending_payments: float = 0.0
    total_deposits: float = 0.0
    active_reservations: int = 0
    available_inventory: int = 0
    reserved_inventory: int = 0
    sold_inventory: int = 0
    inventory_value: float = 0.0
    total_orders: int = 0
    completed_orders: int = 0
    pending_orders: int = 0
    total_assets: float = 0.0


def _to_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return isoparse(value).date()
    except ValueError:
        return None


def resolve_period(
    period: str = "all",
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    today: Optional[date] = None,
) -> DateRange:
    """Translate a named reporting period into an inclusive date range."""
    today = today or date.today()
    if period not in PERIODS:
        raise ValidationError(f"Unknown report period: {period}")
    if period == "all":
        return DateRange()
    if period == "today":
        return DateRange(today, today)
    if period == "week":
        return DateRange(today - timedelta(days=7), today)
    if period == "month":
        return DateRange(today - relativedelta(months=1), today)
    if period == "year":
        return DateRange(today - relativedelta(years=1), today)
    start = _to_date(start_date)
    end = _to_date(end_date)
    if not start or not end:
        raise ValidationError("Custom period requires valid start and end dates.")
    if end < start:
        raise ValidationError("End date must be on or after the start date.")
    return DateRange(start, end)


def transaction_date(transaction: Transaction) -> Optional[date]:
    """Completion date when settled, else the reservation date."""
    return _to_date(transaction.completion_date) or _to_date(
        transaction.reservation_date
    ) or _to_date(transaction.created_at)


def is_revenue(transaction: Transaction) -> bool:
    return transaction.status in PAID_TRANSACTION_STATUSES


def summarize(
    transactions: Iterable[Transaction],
    expenses: Iterable[Expense],
    period: DateRange,
) -> ReportSummary:
    selected = [t for t in transactions if period.contains(transaction_date(t))]
    selected_expenses = [e for e in expenses if period.contains(_to_date(e.date))]

    by_brand: dict[str, float] = defaultdict(float)
    for item in selected:
        by_brand[item.vehicle.brand] += item.pricing.total_amount
    by_category: dict[str, float] = defaultdict(float)
    for expense in selected_expenses:
        by_category[expense.category] += expense.amount

    revenue = sum(t.pricing.total_amount for t in selected if is_revenue(t))
    spent = sum(e.amount for e in selected_expenses)
    return ReportSummary(
        period=period,
        total_revenue=revenue,
        total_expenses=spent,
        total_profit=revenue - spent,
        total_sales=sum(1 for t in selected if t.type == TransactionType.SALE),
        total_reservations=sum(
            1 for t in selected if t.type == TransactionType.RESERVATION
        ),
        total_leasing=sum(1 for t in selected if t.type == TransactionType.LEASING),
        sales_by_brand=dict(by_brand),
        expenses_by_category=dict(by_category),
        transactions=selected,
        expenses=selected_expenses,
    )


def monthly_trend(
    transactions: Iterable[Transaction],
    expenses: Iterable[Expense],
    months: int = MONTHLY_TREND_MONTHS,
    today: Optional[date] = None,
) -> list[MonthlyPoint]:
    """Revenue, expense and profit per calendar month, oldest month first."""
    today = today or date.today()
    transactions = list(transactions)
    expenses = list(expenses)
    points: list[MonthlyPoint] = []
    for offset in range(months - 1, -1, -1):
        month_start = today.replace(day=1) - relativedelta(months=offset)
        key = (month_start.year, month_start.month)

        def in_month(value: Optional[date]) -> bool:
            return value is not None and (value.year, value.month) == key

        revenue = sum(
            t.pricing.total_amount
            for t in transactions
            if is_revenue(t) and in_month(transaction_date(t))
        )
        expense = sum(e.amount for e in expenses if in_month(_to_date(e.date)))
        points.append(
            MonthlyPoint(
                month=month_start.strftime("%b %Y"),
                revenue=revenue,
                expense=expense,
                profit=revenue - expense,
            )
        )
    return points


class ReportService:
    """Service assembling reports from the stored records."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._transactions = TransactionRepo(connection)
        self._expenses = ExpenseRepo(connection)
        self._inventory = InventoryRepo(connection)
        self._orders = VehicleOrderRepo(connection)
        self._documents = DocumentRepository(connection)
        self._logger = get_logger(self.__class__.__name__)

    def build_summary(
        self,
        period: str = "month",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ReportSummary:
        date_range = resolve_period(period, start_date, end_date, today=today)
        summary = summarize(
            self._transactions.list_transactions(),
            self._expenses.list_expenses(),
            date_range,
        )
        self._logger.info(
            "Report built period=%s transactions=%s expenses=%s",
            date_range.label,
            len(summary.transactions),
            len(summary.expenses),
        )
        return summary

    def monthly_trend(
        self, months: int = MONTHLY_TREND_MONTHS, today: Optional[date] = None
    ) -> list[MonthlyPoint]:
        return monthly_trend(
            self._transactions.list_transactions(),
            self._expenses.list_expenses(),
            months=months,
            today=today,
        )

    def dashboard_metrics(self) -> DashboardMetrics:
        transactions = self._transactions.list_transactions()
        expenses = self._expenses.list_expenses()
        items = self._inventory.list_items()
        orders = self._orders.list_orders()

        revenue = sum(t.pricing.total_amount for t in transactions if is_revenue(t))
        spent = sum(e.amount for e in expenses)
        awaiting = (
            TransactionStatus.PENDING,
            TransactionStatus.PARTIAL_PAID,
            TransactionStatus.OVERDUE,
        )
        unsold = [item for item in items if item.status != InventoryStatus.SOLD]
        # Orders already moved to stock are counted through their vehicle.
        orders_in_transit = [o for o in orders if o.inventory_item_id is None]
        completed = sum(1 for o in orders if o.status == OrderStatus.COMPLETED)
        return DashboardMetrics(
            total_revenue=revenue,
            total_expenses=spent,
            net_profit=revenue - spent,
            pending_payments=sum(
                t.balance_remaining for t in transactions if t.status in awaiting
            ),
            total_deposits=sum(t.total_paid for t in transactions),
            active_reservations=sum(
                1
                for t in transactions
                if t.type == TransactionType.RESERVATION and t.status in awaiting
            ),
            available_inventory=sum(
                1 for item in items if item.status == InventoryStatus.AVAILABLE
            ),
            reserved_inventory=sum(
                1 for item in items if item.status == InventoryStatus.RESERVED
            ),
            sold_inventory=sum(1 for item in items if item.status == InventoryStatus.SOLD),
            inventory_value=sum(item.market_value for item in unsold),
            total_orders=len(orders),
            completed_orders=completed,
            pending_orders=len(orders) - completed,
            total_assets=sum(o.total_cost for o in orders_in_transit)
            + sum(item.purchase_price for item in unsold),
        )

    def generate_report(
        self,
        output_path: Path | str,
        period: str = "month",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Document:
        """Write the period report with its monthly trend to PDF and record it."""
        summary = self.build_summary(period, start_date, end_date)
        path = generate_report_pdf(summary, self.monthly_trend(), Path(output_path))
        with transaction(self._connection):
            document = self._documents.add(
                Document(
                    id=None,
                    doc_type=DocumentType.REPORT,
                    file_name=path.name,
                    file_path=str(path),
                    generated_at=datetime.now().isoformat(timespec="seconds"),
                    notes=summary.period.label,
                )
            )
        self._logger.info("Report written to %s", path)
        return document
