"""Service container shared by the command line and scripts."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dealership_manager.paths import get_config_path
from dealership_manager.services.customer_service import CustomerService
from dealership_manager.services.expense_service import ExpenseService
from dealership_manager.services.inventory_service import InventoryService
from dealership_manager.services.invoice_service import InvoiceService
from dealership_manager.services.leasing_company_service import LeasingCompanyService
from dealership_manager.services.payment_service import PaymentService
from dealership_manager.services.report_service import ReportService
from dealership_manager.services.transaction_service import TransactionService
from dealership_manager.services.vehicle_order_service import VehicleOrderService


@dataclass(frozen=True)
class AppServices:
    """Services bound to one database connection."""

    connection: sqlite3.Connection
    customers: CustomerService
    leasing_companies: LeasingCompanyService
    inventory: InventoryService
    orders: VehicleOrderService
    transactions: TransactionService
    payments: PaymentService
    expenses: ExpenseService
    reports: ReportService
    invoices: InvoiceService

    @classmethod
    def build(
        cls, connection: sqlite3.Connection, config_path: Optional[Path] = None
    ) -> "AppServices":
        return cls(
            connection=connection,
            customers=CustomerService(connection),
            leasing_companies=LeasingCompanyService(connection),
            inventory=InventoryService(connection),
            orders=VehicleOrderService(connection),
            transactions=TransactionService(connection),
            payments=PaymentService(connection),
            expenses=ExpenseService(connection),
            reports=ReportService(connection),
            invoices=InvoiceService(connection, config_path or get_config_path()),
        )
