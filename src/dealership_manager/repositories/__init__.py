"""Repositories for data access."""

from dealership_manager.repositories.customer_repo import CustomerRepo
from dealership_manager.repositories.document_repo import DocumentRepository
from dealership_manager.repositories.expense_repo import ExpenseRepo
from dealership_manager.repositories.inventory_repo import InventoryRepo
from dealership_manager.repositories.leasing_company_repo import LeasingCompanyRepo
from dealership_manager.repositories.payment_repo import PaymentRepository
from dealership_manager.repositories.transaction_repo import TransactionRepo
from dealership_manager.repositories.vehicle_order_repo import VehicleOrderRepo

__all__ = [
    "CustomerRepo",
    "DocumentRepository",
    "ExpenseRepo",
    "InventoryRepo",
    "LeasingCompanyRepo",
    "PaymentRepository",
    "TransactionRepo",
    "VehicleOrderRepo",
]
