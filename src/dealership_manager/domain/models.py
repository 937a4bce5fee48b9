"""Domain dataclasses and enums."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    RESERVATION = "reservation"
    SALE = "sale"
    LEASING = "leasing"
    REFUND = "refund"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    PARTIAL_PAID = "partial_paid"
    FULLY_PAID = "fully_paid"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# Statuses that still accept payments.
OPEN_TRANSACTION_STATUSES = (
    TransactionStatus.PENDING,
    TransactionStatus.PARTIAL_PAID,
    TransactionStatus.OVERDUE,
)

# Statuses counted as revenue in reports.
PAID_TRANSACTION_STATUSES = (
    TransactionStatus.COMPLETED,
    TransactionStatus.FULLY_PAID,
)


class PaymentMode(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    LEASING = "leasing"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    FINANCE = "finance"
    LEASING = "leasing"


class InventoryStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"
    MAINTENANCE = "maintenance"


class VehicleCondition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_REPAIR = "needs_repair"


class FuelType(str, Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    HYBRID = "hybrid"
    ELECTRIC = "electric"


class Transmission(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"
    CVT = "cvt"


class BodyType(str, Enum):
    SEDAN = "sedan"
    SUV = "suv"
    HATCHBACK = "hatchback"
    COUPE = "coupe"
    PICKUP = "pickup"
    VAN = "van"
    OTHER = "other"


class OrderStatus(str, Enum):
    ORDERED = "ordered"
    SHIPPED = "shipped"
    CLEARING = "clearing"
    COMPLETED = "completed"


class DocumentType(str, Enum):
    CUSTOMER_INVOICE = "customer_invoice"
    BANK_INVOICE = "bank_invoice"
    REPORT = "report"


@dataclass(slots=True)
class Customer:
    id: Optional[int]
    name: str
    contact: str
    title: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    nic: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class LeasingCompany:
    id: Optional[int]
    name: str
    branch: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(slots=True)
class InventoryItem:
    id: Optional[int]
    brand: str
    model: str
    year: int
    color: str
    purchase_price: float
    currency: str
    status: InventoryStatus = InventoryStatus.AVAILABLE
    condition: VehicleCondition = VehicleCondition.GOOD
    fuel_type: FuelType = FuelType.GASOLINE
    transmission: Transmission = Transmission.AUTOMATIC
    body_type: BodyType = BodyType.SEDAN
    mileage: int = 0
    market_value: float = 0.0
    selling_price: Optional[float] = None
    location: Optional[str] = None
    vin: Optional[str] = None
    license_plate: Optional[str] = None
    registration_no: Optional[str] = None
    engine_no: Optional[str] = None
    engine_size: Optional[str] = None
    supplier: Optional[str] = None
    purchase_date: Optional[str] = None
    features: list[str] = field(default_factory=list)
    notes: Optional[str] = None
    source_order_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def list_price(self) -> float:
        """Price offered to customers: selling price, else market value."""
        if self.selling_price:
            return float(self.selling_price)
        return float(self.market_value or 0.0)


@dataclass(slots=True)
class ImportCosts:
    """Landed cost breakdown of an import order."""

    vehicle_cost: float
    fuel: float = 0.0
    duty: float = 0.0
    driver_charge: float = 0.0
    clearance_charge: float = 0.0
    demurrage: float = 0.0
    tax: float = 0.0
    custom_expenses: dict[str, float] = field(default_factory=dict)

    @property
    def total_taxes(self) -> float:
        return self.duty + self.tax

    @property
    def total_fees(self) -> float:
        return self.clearance_charge + self.demurrage + self.fuel + self.driver_charge

    @property
    def custom_total(self) -> float:
        return sum(self.custom_expenses.values())

    @property
    def total_cost(self) -> float:
        return self.vehicle_cost + self.total_taxes + self.total_fees + self.custom_total


@dataclass(slots=True)
class VehicleOrder:
    id: Optional[int]
    order_number: str
    model: str
    year: int
    order_date: str
    status: OrderStatus
    currency: str
    costs: ImportCosts
    total_cost: float
    country: Optional[str] = None
    supplier: Optional[str] = None
    selling_price: Optional[float] = None
    expected_delivery: Optional[str] = None
    payment_method: Optional[str] = None
    vehicle_number: Optional[str] = None
    vin_number: Optional[str] = None
    license_plate_number: Optional[str] = None
    lc_amount: Optional[float] = None
    lc_bank: Optional[str] = None
    notes: Optional[str] = None
    inventory_item_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class Pricing:
    vehicle_price: float
    taxes: float
    fees: float
    discount: float
    total_amount: float


@dataclass(slots=True)
class VehicleDetails:
    """Snapshot of the vehicle taken when the transaction is created."""

    brand: str
    model: str
    year: int
    color: str
    registration_no: Optional[str] = None


@dataclass(slots=True)
class LeasingDetails:
    leasing_company_id: Optional[int]
    leasing_company_name: str
    lease_reference_no: str
    down_payment: float
    leasing_amount: float
    monthly_installment: int
    tenure: int
    interest_rate: float
    start_date: str
    end_date: str
    leasing_company_branch: Optional[str] = None


@dataclass(slots=True, frozen=True)
class PaymentRecord:
    id: Optional[int]
    transaction_id: int
    amount: float
    payment_method: PaymentMethod
    payment_date: str
    received_by: str
    notes: Optional[str] = None


@dataclass(slots=True)
class Transaction:
    id: Optional[int]
    customer_id: int
    inventory_id: Optional[int]
    type: TransactionType
    status: TransactionStatus
    vehicle: VehicleDetails
    pricing: Pricing
    total_paid: float
    balance_remaining: float
    currency: str
    payment_mode: Optional[PaymentMode] = None
    invoice_number: Optional[str] = None
    reservation_date: Optional[str] = None
    expected_delivery: Optional[str] = None
    completion_date: Optional[str] = None
    notes: Optional[str] = None
    leasing: Optional[LeasingDetails] = None
    payments: list[PaymentRecord] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_leasing(self) -> bool:
        return self.payment_mode == PaymentMode.LEASING


@dataclass(slots=True)
class Expense:
    id: Optional[int]
    category: str
    description: Optional[str]
    amount: float
    date: str
    currency: str
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class Document:
    id: Optional[int]
    doc_type: DocumentType
    file_name: str
    file_path: str
    generated_at: str
    transaction_id: Optional[int] = None
    notes: Optional[str] = None
