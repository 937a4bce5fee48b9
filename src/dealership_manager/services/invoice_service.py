"""Invoice assembly and PDF generation."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from dealership_manager.config import (
    DEFAULT_BANK,
    DEFAULT_COUNTRY_OF_ORIGIN,
    DEFAULT_CURRENCY,
    SELLER,
    BankInfo,
    SellerInfo,
)
from dealership_manager.db.connection import transaction
from dealership_manager.domain.models import (
    PAID_TRANSACTION_STATUSES,
    Customer,
    Document,
    DocumentType,
    InventoryItem,
    Transaction,
    TransactionType,
    VehicleOrder,
)
from dealership_manager.logging_config import get_logger
from dealership_manager.paths import get_config_path
from dealership_manager.repositories.customer_repo import CustomerRepo
from dealership_manager.repositories.document_repo import DocumentRepository
from dealership_manager.repositories.inventory_repo import InventoryRepo
from dealership_manager.repositories.transaction_repo import TransactionRepo
from dealership_manager.repositories.vehicle_order_repo import VehicleOrderRepo
from dealership_manager.services.errors import NotFoundError, ValidationError
from dealership_manager.services.vehicle_order_service import infer_brand
from dealership_manager.utils.documents import build_document_filename, resolve_documents_dir
from dealership_manager.utils.formatting import format_date, humanize
from dealership_manager.utils.pdf_generator import generate_invoice_pdf

UNKNOWN_CUSTOMER = "Unknown Customer"
NOT_AVAILABLE = "N/A"
DEFAULT_FUEL_LABEL = "PETROL"
DEFAULT_TITLE = "Mr."

INVOICE_KINDS = {
    "customer": DocumentType.CUSTOMER_INVOICE,
    "bank": DocumentType.BANK_INVOICE,
}


@dataclass(frozen=True, slots=True)
class InvoiceData:
    """Flat view of a transaction or import order as printed on an invoice."""

    invoice_number: str
    date: str
    customer_name: str
    customer_title: str
    customer_address: str
    customer_contact: str
    customer_nic: str
    bank_name: str
    bank_branch: str
    vehicle_registered_no: str
    make: str
    model: str
    year_of_manufacture: int
    chassis_no: str
    engine_no: str
    fuel_type: str
    colour: str
    country_of_origin: str
    vehicle_cost: float
    taxes: float
    fees: float
    discount: float
    total_amount: float
    advance_amount: float
    loan_amount: float
    balance_amount: float
    payment_method: str
    payment_status: str
    currency: str
    seller_name: str
    seller_contact: str
    seller_nic: str
    seller_address: str
    lease_reference_no: Optional[str] = None
    monthly_installment: Optional[int] = None
    tenure: Optional[int] = None
    cost_breakdown: tuple[tuple[str, float], ...] = ()

    @property
    def is_fully_paid(self) -> bool:
        return self.balance_amount <= 0


def _is_settled(transaction: Transaction) -> bool:
    return transaction.status in PAID_TRANSACTION_STATUSES


def status_payment_label(transaction: Transaction) -> str:
    if _is_settled(transaction):
        return "FULL PAYMENT"
    if transaction.type == TransactionType.RESERVATION:
        return "RESERVATION - PARTIAL PAYMENT"
    if transaction.type == TransactionType.LEASING:
        return "LEASING"
    return "PARTIAL PAYMENT"


def payment_method_label(transaction: Transaction) -> str:
    """Explicit payment mode, else the last payment's method, else the status."""
    if transaction.payment_mode is not None:
        return humanize(transaction.payment_mode.value).upper()
    if transaction.payments:
        return humanize(transaction.payments[-1].payment_method.value).upper()
    return status_payment_label(transaction)


def payment_status_label(transaction: Transaction) -> str:
    return "FULLY PAID" if _is_settled(transaction) else "PARTIAL PAYMENT"


def _or_default(value: Optional[str], default: str = NOT_AVAILABLE) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def build_invoice_data(
    transaction: Transaction,
    customer: Optional[Customer],
    vehicle: Optional[InventoryItem],
    *,
    seller: SellerInfo = SELLER,
    bank: BankInfo = DEFAULT_BANK,
    issued_on: Optional[date] = None,
) -> InvoiceData:
    """Assemble the invoice view of a transaction.

    Missing customer or vehicle records fall back to placeholder text instead
    of failing, so an invoice can always be printed.
    """
    leasing = transaction.leasing
    chassis = None
    engine = None
    fuel = None
    registered = transaction.vehicle.registration_no
    if vehicle is not None:
        chassis = vehicle.vin
        engine = vehicle.engine_no
        fuel = vehicle.fuel_type.value.upper()
        registered = vehicle.license_plate or registered

    return InvoiceData(
        invoice_number=transaction.invoice_number or f"INV-{transaction.id}",
        date=format_date(issued_on or date.today()),
        customer_name=_or_default(customer.name if customer else None, UNKNOWN_CUSTOMER),
        customer_title=_or_default(customer.title if customer else None, DEFAULT_TITLE),
        customer_address=_or_default(customer.address if customer else None),
        customer_contact=_or_default(customer.contact if customer else None),
        customer_nic=_or_default(customer.nic if customer else None),
        bank_name=_or_default(leasing.leasing_company_name if leasing else None, bank.name),
        bank_branch=_or_default(leasing.leasing_company_branch if leasing else None, bank.branch),
        vehicle_registered_no=_or_default(registered, ""),
        make=transaction.vehicle.brand,
        model=transaction.vehicle.model,
        year_of_manufacture=transaction.vehicle.year,
        chassis_no=_or_default(chassis),
        engine_no=_or_default(engine),
        fuel_type=fuel or DEFAULT_FUEL_LABEL,
        colour=transaction.vehicle.color.upper(),
        country_of_origin=DEFAULT_COUNTRY_OF_ORIGIN,
        vehicle_cost=transaction.pricing.vehicle_price,
        taxes=transaction.pricing.taxes,
        fees=transaction.pricing.fees,
        discount=transaction.pricing.discount,
        total_amount=transaction.pricing.total_amount,
        advance_amount=transaction.total_paid,
        loan_amount=transaction.balance_remaining,
        balance_amount=transaction.balance_remaining,
        payment_method=payment_method_label(transaction),
        payment_status=payment_status_label(transaction),
        currency=transaction.currency or DEFAULT_CURRENCY,
        seller_name=seller.name,
        seller_contact=seller.contact,
        seller_nic=seller.nic,
        seller_address=seller.address,
        lease_reference_no=leasing.lease_reference_no if leasing else None,
        monthly_installment=leasing.monthly_installment if leasing else None,
        tenure=leasing.tenure if leasing else None,
    )


ORDER_COST_LABELS = (
    ("vehicle_cost", "Vehicle Cost"),
    ("fuel", "Fuel"),
    ("duty", "Duty"),
    ("driver_charge", "Driver Charge"),
    ("clearance_charge", "Clearance Charge"),
    ("demurrage", "Demurrage"),
    ("tax", "Tax"),
)


def build_order_invoice_data(
    order: VehicleOrder,
    *,
    seller: SellerInfo = SELLER,
    bank: BankInfo = DEFAULT_BANK,
    issued_on: Optional[date] = None,
) -> InvoiceData:
    """Assemble the bank (LC) invoice view of an import order.

    The letter of credit bank and amount are used when present; otherwise the
    default bank and the full landed cost.
    """
    costs = order.costs
    breakdown = [
        (label, getattr(costs, name))
        for name, label in ORDER_COST_LABELS
        if getattr(costs, name)
    ]
    breakdown.extend((name, amount) for name, amount in costs.custom_expenses.items() if amount)
    return InvoiceData(
        invoice_number=order.order_number,
        date=format_date(issued_on or date.today()),
        customer_name=UNKNOWN_CUSTOMER,
        customer_title=DEFAULT_TITLE,
        customer_address=NOT_AVAILABLE,
        customer_contact=NOT_AVAILABLE,
        customer_nic=NOT_AVAILABLE,
        bank_name=_or_default(order.lc_bank, bank.name),
        bank_branch=bank.branch,
        vehicle_registered_no=_or_default(
            order.license_plate_number or order.vehicle_number, ""
        ),
        make=infer_brand(order.model),
        model=order.model,
        year_of_manufacture=order.year,
        chassis_no=_or_default(order.vin_number),
        engine_no=NOT_AVAILABLE,
        fuel_type=DEFAULT_FUEL_LABEL,
        colour=NOT_AVAILABLE,
        country_of_origin=_or_default(order.country, DEFAULT_COUNTRY_OF_ORIGIN).upper(),
        vehicle_cost=costs.vehicle_cost,
        taxes=costs.total_taxes,
        fees=round(costs.total_fees + costs.custom_total, 2),
        discount=0.0,
        total_amount=order.total_cost,
        advance_amount=0.0,
        loan_amount=order.lc_amount or order.total_cost,
        balance_amount=order.total_cost,
        payment_method="LEASING" if order.lc_amount else "PENDING",
        payment_status="PENDING",
        currency=order.currency or DEFAULT_CURRENCY,
        seller_name=seller.name,
        seller_contact=seller.contact,
        seller_nic=seller.nic,
        seller_address=seller.address,
        cost_breakdown=tuple(breakdown),
    )


class InvoiceService:
    """Render invoices to PDF and keep track of the generated files."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        config_path: Optional[Path] = None,
    ) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._transactions = TransactionRepo(connection)
        self._customers = CustomerRepo(connection)
        self._inventory = InventoryRepo(connection)
        self._orders = VehicleOrderRepo(connection)
        self._documents = DocumentRepository(connection)
        self._config_path = config_path or get_config_path()
        self._logger = get_logger(self.__class__.__name__)

    def get_invoice_data(self, transaction_id: int) -> InvoiceData:
        found = self._transactions.get_by_id(transaction_id)
        if not found:
            raise NotFoundError(f"Transaction {transaction_id} not found.")
        customer = self._customers.get_by_id(found.customer_id)
        vehicle = (
            self._inventory.get_by_id(found.inventory_id)
            if found.inventory_id is not None
            else None
        )
        return build_invoice_data(found, customer, vehicle)

    def get_order_invoice_data(self, order_id: int) -> InvoiceData:
        order = self._orders.get_by_id(order_id)
        if not order:
            raise NotFoundError(f"Vehicle order {order_id} not found.")
        return build_order_invoice_data(order)

    def _render(
        self,
        data: InvoiceData,
        doc_type: DocumentType,
        output_dir: Optional[Path | str],
        *,
        transaction_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Document:
        target_dir = resolve_documents_dir(self._config_path, output_dir)
        file_name = build_document_filename(
            data.invoice_number, doc_type, data.customer_name
        )
        output_path = target_dir / file_name
        try:
            generate_invoice_pdf(data, output_path, doc_type=doc_type)
        except Exception:
            self._logger.exception(
                "Failed to render invoice %s type=%s", data.invoice_number, doc_type.value
            )
            raise
        with transaction(self._connection):
            document = self._documents.add(
                Document(
                    id=None,
                    doc_type=doc_type,
                    file_name=file_name,
                    file_path=str(output_path),
                    generated_at=datetime.now().isoformat(timespec="seconds"),
                    transaction_id=transaction_id,
                    notes=notes,
                )
            )
        self._logger.info("Invoice generated %s", output_path)
        return document

    def generate_invoice(
        self,
        transaction_id: int,
        kind: str = "customer",
        output_dir: Optional[Path | str] = None,
    ) -> Document:
        doc_type = INVOICE_KINDS.get(kind)
        if doc_type is None:
            raise ValidationError(f"Unknown invoice type: {kind}")
        data = self.get_invoice_data(transaction_id)
        return self._render(data, doc_type, output_dir, transaction_id=transaction_id)

    def generate_order_invoice(
        self,
        order_id: int,
        output_dir: Optional[Path | str] = None,
    ) -> Document:
        """Render the bank invoice backing an import order's letter of credit."""
        data = self.get_order_invoice_data(order_id)
        return self._render(
            data,
            DocumentType.BANK_INVOICE,
            output_dir,
            notes=f"Vehicle order {data.invoice_number}",
        )

    def list_documents(self, transaction_id: Optional[int] = None) -> list[Document]:
        return self._documents.list_documents(transaction_id=transaction_id)
