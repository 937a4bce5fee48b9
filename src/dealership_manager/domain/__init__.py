"""Domain models for DealershipManager."""

from dealership_manager.domain.models import (
    Customer,
    Document,
    DocumentType,
    Expense,
    ImportCosts,
    InventoryItem,
    InventoryStatus,
    LeasingCompany,
    LeasingDetails,
    OrderStatus,
    PaymentMethod,
    PaymentMode,
    PaymentRecord,
    Pricing,
    Transaction,
    TransactionStatus,
    TransactionType,
    VehicleDetails,
    VehicleOrder,
)

__all__ = [
    "Customer",
    "Document",
    "DocumentType",
    "Expense",
    "ImportCosts",
    "InventoryItem",
    "InventoryStatus",
    "LeasingCompany",
    "LeasingDetails",
    "OrderStatus",
    "PaymentMethod",
    "PaymentMode",
    "PaymentRecord",
    "Pricing",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "VehicleDetails",
    "VehicleOrder",
]
