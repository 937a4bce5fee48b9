"""SQLite row mappers for domain models."""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Dict, Optional

from dealership_manager.domain.models import (
    BodyType,
    Customer,
    Document,
    DocumentType,
    Expense,
    FuelType,
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
    Transmission,
    VehicleCondition,
    VehicleDetails,
    VehicleOrder,
)


def _row_value(row: sqlite3.Row, key: str) -> Any:
    return row[key] if key in row.keys() else None


def _load_json(raw: Optional[str], default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


def customer_from_row(row: sqlite3.Row) -> Customer:
    return Customer(
        id=_row_value(row, "id"),
        name=row["name"],
        contact=row["contact"],
        title=_row_value(row, "title"),
        email=_row_value(row, "email"),
        address=_row_value(row, "address"),
        nic=_row_value(row, "nic"),
        notes=_row_value(row, "notes"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def leasing_company_from_row(row: sqlite3.Row) -> LeasingCompany:
    return LeasingCompany(
        id=_row_value(row, "id"),
        name=row["name"],
        branch=_row_value(row, "branch"),
        contact_person=_row_value(row, "contact_person"),
        phone=_row_value(row, "phone"),
        email=_row_value(row, "email"),
        address=_row_value(row, "address"),
        created_at=_row_value(row, "created_at"),
    )


def inventory_item_from_row(row: sqlite3.Row) -> InventoryItem:
    features = _load_json(_row_value(row, "features"), [])
    return InventoryItem(
        id=_row_value(row, "id"),
        brand=row["brand"],
        model=row["model"],
        year=int(row["year"]),
        color=row["color"],
        purchase_price=float(row["purchase_price"]),
        currency=row["currency"],
        status=InventoryStatus(row["status"]),
        condition=VehicleCondition(row["condition"]),
        fuel_type=FuelType(row["fuel_type"]),
        transmission=Transmission(row["transmission"]),
        body_type=BodyType(row["body_type"]),
        mileage=int(row["mileage"] or 0),
        market_value=float(row["market_value"] or 0),
        selling_price=_row_value(row, "selling_price"),
        location=_row_value(row, "location"),
        vin=_row_value(row, "vin"),
        license_plate=_row_value(row, "license_plate"),
        registration_no=_row_value(row, "registration_no"),
        engine_no=_row_value(row, "engine_no"),
        engine_size=_row_value(row, "engine_size"),
        supplier=_row_value(row, "supplier"),
        purchase_date=_row_value(row, "purchase_date"),
        features=[str(feature) for feature in features],
        notes=_row_value(row, "notes"),
        source_order_id=_row_value(row, "source_order_id"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def inventory_item_to_record(item: InventoryItem) -> Dict[str, Any]:
    return {
        "brand": item.brand,
        "model": item.model,
        "year": item.year,
        "color": item.color,
        "mileage": item.mileage,
        "condition": item.condition.value,
        "purchase_price": item.purchase_price,
        "market_value": item.market_value,
        "selling_price": item.selling_price,
        "currency": item.currency,
        "location": item.location,
        "status": item.status.value,
        "vin": item.vin,
        "license_plate": item.license_plate,
        "registration_no": item.registration_no,
        "engine_no": item.engine_no,
        "fuel_type": item.fuel_type.value,
        "transmission": item.transmission.value,
        "engine_size": item.engine_size,
        "body_type": item.body_type.value,
        "supplier": item.supplier,
        "purchase_date": item.purchase_date,
        "features": json.dumps(item.features, ensure_ascii=False),
        "notes": item.notes,
        "source_order_id": item.source_order_id,
    }


def vehicle_order_from_row(row: sqlite3.Row) -> VehicleOrder:
    custom_expenses = _load_json(_row_value(row, "custom_expenses"), {})
    costs = ImportCosts(
        vehicle_cost=float(row["vehicle_cost"]),
        fuel=float(row["fuel"]),
        duty=float(row["duty"]),
        driver_charge=float(row["driver_charge"]),
        clearance_charge=float(row["clearance_charge"]),
        demurrage=float(row["demurrage"]),
        tax=float(row["tax"]),
        custom_expenses={str(k): float(v) for k, v in custom_expenses.items()},
    )
    return VehicleOrder(
        id=_row_value(row, "id"),
        order_number=row["order_number"],
        model=row["model"],
        year=int(row["year"]),
        order_date=row["order_date"],
        status=OrderStatus(row["status"]),
        currency=row["currency"],
        costs=costs,
        total_cost=float(row["total_cost"]),
        country=_row_value(row, "country"),
        supplier=_row_value(row, "supplier"),
        selling_price=_row_value(row, "selling_price"),
        expected_delivery=_row_value(row, "expected_delivery"),
        payment_method=_row_value(row, "payment_method"),
        vehicle_number=_row_value(row, "vehicle_number"),
        vin_number=_row_value(row, "vin_number"),
        license_plate_number=_row_value(row, "license_plate_number"),
        lc_amount=_row_value(row, "lc_amount"),
        lc_bank=_row_value(row, "lc_bank"),
        notes=_row_value(row, "notes"),
        inventory_item_id=_row_value(row, "inventory_item_id"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def vehicle_order_to_record(order: VehicleOrder) -> Dict[str, Any]:
    costs = order.costs
    return {
        "order_number": order.order_number,
        "model": order.model,
        "year": order.year,
        "country": order.country,
        "supplier": order.supplier,
        "order_date": order.order_date,
        "status": order.status.value,
        "currency": order.currency,
        "vehicle_cost": costs.vehicle_cost,
        "fuel": costs.fuel,
        "duty": costs.duty,
        "driver_charge": costs.driver_charge,
        "clearance_charge": costs.clearance_charge,
        "demurrage": costs.demurrage,
        "tax": costs.tax,
        "custom_expenses": json.dumps(costs.custom_expenses, ensure_ascii=False),
        "total_cost": order.total_cost,
        "selling_price": order.selling_price,
        "expected_delivery": order.expected_delivery,
        "payment_method": order.payment_method,
        "vehicle_number": order.vehicle_number,
        "vin_number": order.vin_number,
        "license_plate_number": order.license_plate_number,
        "lc_amount": order.lc_amount,
        "lc_bank": order.lc_bank,
        "notes": order.notes,
        "inventory_item_id": order.inventory_item_id,
    }


def leasing_details_from_row(row: sqlite3.Row) -> LeasingDetails:
    return LeasingDetails(
        leasing_company_id=_row_value(row, "leasing_company_id"),
        leasing_company_name=row["leasing_company_name"],
        leasing_company_branch=_row_value(row, "leasing_company_branch"),
        lease_reference_no=row["lease_reference_no"],
        down_payment=float(row["down_payment"]),
        leasing_amount=float(row["leasing_amount"]),
        monthly_installment=int(row["monthly_installment"]),
        tenure=int(row["tenure"]),
        interest_rate=float(row["interest_rate"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
    )


def payment_from_row(row: sqlite3.Row) -> PaymentRecord:
    return PaymentRecord(
        id=_row_value(row, "id"),
        transaction_id=row["transaction_id"],
        amount=float(row["amount"]),
        payment_method=PaymentMethod(row["payment_method"]),
        payment_date=row["payment_date"],
        received_by=row["received_by"],
        notes=_row_value(row, "notes"),
    )


def transaction_from_row(row: sqlite3.Row) -> Transaction:
    raw_mode = _row_value(row, "payment_mode")
    return Transaction(
        id=_row_value(row, "id"),
        customer_id=row["customer_id"],
        inventory_id=_row_value(row, "inventory_id"),
        type=TransactionType(row["type"]),
        status=TransactionStatus(row["status"]),
        vehicle=VehicleDetails(
            brand=row["vehicle_brand"],
            model=row["vehicle_model"],
            year=int(row["vehicle_year"]),
            color=row["vehicle_color"],
            registration_no=_row_value(row, "vehicle_registration_no"),
        ),
        pricing=Pricing(
            vehicle_price=float(row["vehicle_price"]),
            taxes=float(row["taxes"]),
            fees=float(row["fees"]),
            discount=float(row["discount"]),
            total_amount=float(row["total_amount"]),
        ),
        total_paid=float(row["total_paid"]),
        balance_remaining=float(row["balance_remaining"]),
        currency=row["currency"],
        payment_mode=PaymentMode(raw_mode) if raw_mode else None,
        invoice_number=_row_value(row, "invoice_number"),
        reservation_date=_row_value(row, "reservation_date"),
        expected_delivery=_row_value(row, "expected_delivery"),
        completion_date=_row_value(row, "completion_date"),
        notes=_row_value(row, "notes"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def transaction_to_record(transaction: Transaction) -> Dict[str, Any]:
    return {
        "customer_id": transaction.customer_id,
        "inventory_id": transaction.inventory_id,
        "type": transaction.type.value,
        "status": transaction.status.value,
        "vehicle_brand": transaction.vehicle.brand,
        "vehicle_model": transaction.vehicle.model,
        "vehicle_year": transaction.vehicle.year,
        "vehicle_color": transaction.vehicle.color,
        "vehicle_registration_no": transaction.vehicle.registration_no,
        "vehicle_price": transaction.pricing.vehicle_price,
        "taxes": transaction.pricing.taxes,
        "fees": transaction.pricing.fees,
        "discount": transaction.pricing.discount,
        "total_amount": transaction.pricing.total_amount,
        "total_paid": transaction.total_paid,
        "balance_remaining": transaction.balance_remaining,
        "currency": transaction.currency,
        "payment_mode": transaction.payment_mode.value if transaction.payment_mode else None,
        "invoice_number": transaction.invoice_number,
        "reservation_date": transaction.reservation_date,
        "expected_delivery": transaction.expected_delivery,
        "completion_date": transaction.completion_date,
        "notes": transaction.notes,
    }


def expense_from_row(row: sqlite3.Row) -> Expense:
    return Expense(
        id=_row_value(row, "id"),
        category=row["category"],
        description=_row_value(row, "description"),
        amount=float(row["amount"]),
        date=row["date"],
        currency=row["currency"],
        payment_method=_row_value(row, "payment_method"),
        notes=_row_value(row, "notes"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def document_from_row(row: sqlite3.Row) -> Document:
    return Document(
        id=_row_value(row, "id"),
        doc_type=DocumentType(row["doc_type"]),
        file_name=row["file_name"],
        file_path=row["file_path"],
        generated_at=row["generated_at"],
        transaction_id=_row_value(row, "transaction_id"),
        notes=_row_value(row, "notes"),
    )
