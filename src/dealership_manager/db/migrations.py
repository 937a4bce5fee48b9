"""Database migrations for SQLite schema versioning."""

from __future__ import annotations

from dataclasses import dataclass
import sqlite3

from dealership_manager.db.connection import transaction
from dealership_manager.logging_config import get_logger


@dataclass(frozen=True)
class Migration:
    version: int
    script: str
    requires_foreign_keys_off: bool = False


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        script="""
        CREATE TABLE IF NOT EXISTS customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            title TEXT,
            contact TEXT NOT NULL,
            email TEXT,
            address TEXT,
            nic TEXT,
            notes TEXT,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS leasing_companies (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            branch TEXT,
            contact_person TEXT,
            phone TEXT,
            email TEXT,
            address TEXT,
            created_at TEXT
        );

        CREATE TABLE IF NOT EXISTS vehicle_orders (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_number TEXT NOT NULL UNIQUE,
            model TEXT NOT NULL,
            year INTEGER NOT NULL,
            country TEXT,
            supplier TEXT,
            order_date TEXT NOT NULL,
            status TEXT NOT NULL CHECK (status IN ('ordered', 'shipped', 'clearing', 'completed')),
            currency TEXT NOT NULL,
            vehicle_cost REAL NOT NULL DEFAULT 0 CHECK (vehicle_cost >= 0),
            fuel REAL NOT NULL DEFAULT 0,
            duty REAL NOT NULL DEFAULT 0,
            driver_charge REAL NOT NULL DEFAULT 0,
            clearance_charge REAL NOT NULL DEFAULT 0,
            demurrage REAL NOT NULL DEFAULT 0,
            tax REAL NOT NULL DEFAULT 0,
            custom_expenses TEXT NOT NULL DEFAULT '{}',
            total_cost REAL NOT NULL DEFAULT 0,
            selling_price REAL,
            expected_delivery TEXT,
            payment_method TEXT,
            vehicle_number TEXT,
            vin_number TEXT,
            license_plate_number TEXT,
            lc_amount REAL,
            lc_bank TEXT,
            notes TEXT,
            inventory_item_id INTEGER,
            created_at TEXT,
            updated_at TEXT,
            FOREIGN KEY (inventory_item_id) REFERENCES inventory_items(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS inventory_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            brand TEXT NOT NULL,
            model TEXT NOT NULL,
            year INTEGER NOT NULL,
            color TEXT NOT NULL,
            mileage INTEGER NOT NULL DEFAULT 0 CHECK (mileage >= 0),
            condition TEXT NOT NULL CHECK (condition IN ('excellent', 'good', 'fair', 'needs_repair')),
            purchase_price REAL NOT NULL DEFAULT 0 CHECK (purchase_price >= 0),
            market_value REAL NOT NULL DEFAULT 0,
            selling_price REAL,
            currency TEXT NOT NULL,
            location TEXT,
            status TEXT NOT NULL CHECK (status IN ('available', 'reserved', 'sold', 'maintenance')),
            vin TEXT,
            license_plate TEXT,
            registration_no TEXT,
            engine_no TEXT,
            fuel_type TEXT NOT NULL,
            transmission TEXT NOT NULL,
            engine_size TEXT,
            body_type TEXT NOT NULL,
            supplier TEXT,
            purchase_date TEXT,
            features TEXT NOT NULL DEFAULT '[]',
            notes TEXT,
            source_order_id INTEGER,
            created_at TEXT,
            updated_at TEXT,
            FOREIGN KEY (source_order_id) REFERENCES vehicle_orders(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS transactions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            customer_id INTEGER NOT NULL,
            inventory_id INTEGER,
            type TEXT NOT NULL CHECK (type IN ('reservation', 'sale', 'leasing', 'refund')),
            status TEXT NOT NULL CHECK (
                status IN ('pending', 'partial_paid', 'fully_paid', 'completed', 'overdue', 'cancelled')
            ),
            vehicle_brand TEXT NOT NULL,
            vehicle_model TEXT NOT NULL,
            vehicle_year INTEGER NOT NULL,
            vehicle_color TEXT NOT NULL,
            vehicle_registration_no TEXT,
            vehicle_price REAL NOT NULL DEFAULT 0,
            taxes REAL NOT NULL DEFAULT 0,
            fees REAL NOT NULL DEFAULT 0,
            discount REAL NOT NULL DEFAULT 0,
            total_amount REAL NOT NULL DEFAULT 0,
            total_paid REAL NOT NULL DEFAULT 0 CHECK (total_paid >= 0),
            balance_remaining REAL NOT NULL DEFAULT 0 CHECK (balance_remaining >= 0),
            currency TEXT NOT NULL,
            payment_mode TEXT CHECK (payment_mode IS NULL OR payment_mode IN ('cash', 'bank_transfer', 'leasing')),
            invoice_number TEXT UNIQUE,
            reservation_date TEXT,
            expected_delivery TEXT,
            completion_date TEXT,
            notes TEXT,
            created_at TEXT,
            updated_at TEXT,
            FOREIGN KEY (customer_id) REFERENCES customers(id),
            FOREIGN KEY (inventory_id) REFERENCES inventory_items(id)
        );

        CREATE TABLE IF NOT EXISTS leasing_details (
            transaction_id INTEGER PRIMARY KEY,
            leasing_company_id INTEGER,
            leasing_company_name TEXT NOT NULL,
            leasing_company_branch TEXT,
            lease_reference_no TEXT NOT NULL,
            down_payment REAL NOT NULL DEFAULT 0,
            leasing_amount REAL NOT NULL DEFAULT 0,
            monthly_installment INTEGER NOT NULL DEFAULT 0,
            tenure INTEGER NOT NULL DEFAULT 0,
            interest_rate REAL NOT NULL DEFAULT 0,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            FOREIGN KEY (transaction_id) REFERENCES transactions(id) ON DELETE CASCADE,
            FOREIGN KEY (leasing_company_id) REFERENCES leasing_companies(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS payments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            transaction_id INTEGER NOT NULL,
            amount REAL NOT NULL CHECK (amount > 0),
            payment_method TEXT NOT NULL,
            payment_date TEXT NOT NULL,
            received_by TEXT NOT NULL,
            notes TEXT,
            created_at TEXT,
            FOREIGN KEY (transaction_id) REFERENCES transactions(id) ON DELETE CASCADE
        );

        CREATE TRIGGER IF NOT EXISTS trg_payments_append_only
        BEFORE UPDATE ON payments
        BEGIN
            SELECT RAISE(ABORT, 'payments are append-only');
        END;

        CREATE TABLE IF NOT EXISTS expenses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            category TEXT NOT NULL,
            description TEXT,
            amount REAL NOT NULL CHECK (amount > 0),
            date TEXT NOT NULL,
            currency TEXT NOT NULL,
            payment_method TEXT,
            notes TEXT,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_customers_contact
            ON customers(contact);
        CREATE INDEX IF NOT EXISTS idx_inventory_items_status
            ON inventory_items(status);
        CREATE INDEX IF NOT EXISTS idx_vehicle_orders_status
            ON vehicle_orders(status);
        CREATE INDEX IF NOT EXISTS idx_transactions_status
            ON transactions(status);
        CREATE INDEX IF NOT EXISTS idx_transactions_customer_id
            ON transactions(customer_id);
        CREATE INDEX IF NOT EXISTS idx_transactions_inventory_id
            ON transactions(inventory_id);
        CREATE INDEX IF NOT EXISTS idx_payments_transaction_id
            ON payments(transaction_id);
        CREATE INDEX IF NOT EXISTS idx_expenses_date
            ON expenses(date);
        """,
    ),
    Migration(
        version=2,
        script="""
        CREATE TABLE IF NOT EXISTS documents (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            doc_type TEXT NOT NULL CHECK (doc_type IN ('customer_invoice', 'bank_invoice', 'report')),
            transaction_id INTEGER,
            file_name TEXT NOT NULL,
            file_path TEXT NOT NULL,
            generated_at TEXT NOT NULL,
            notes TEXT,
            FOREIGN KEY (transaction_id) REFERENCES transactions(id) ON DELETE SET NULL
        );

        CREATE INDEX IF NOT EXISTS idx_documents_transaction_generated_at
            ON documents(transaction_id, generated_at);
        """,
    ),
]

LATEST_SCHEMA_VERSION = MIGRATIONS[-1].version


def _fetch_schema_version(connection: sqlite3.Connection) -> int:
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS app_meta (
            schema_version INTEGER NOT NULL
        );
        """
    )
    row = connection.execute(
        "SELECT schema_version FROM app_meta LIMIT 1"
    ).fetchone()
    if row is None:
        connection.execute("INSERT INTO app_meta (schema_version) VALUES (0)")
        return 0
    return int(row[0])


def get_schema_version(connection: sqlite3.Connection) -> int:
    """Return the schema version recorded in the database."""
    with transaction(connection):
        return _fetch_schema_version(connection)


def apply_migrations(connection: sqlite3.Connection) -> None:
    """Apply pending database migrations."""
    logger = get_logger(__name__)
    current_version = get_schema_version(connection)

    for migration in MIGRATIONS:
        if migration.version <= current_version:
            continue

        if migration.requires_foreign_keys_off:
            connection.execute("PRAGMA foreign_keys = OFF;")

        with transaction(connection):
            connection.executescript(migration.script)
            connection.execute(
                "UPDATE app_meta SET schema_version = ?",
                (migration.version,),
            )

        if migration.requires_foreign_keys_off:
            connection.execute("PRAGMA foreign_keys = ON;")

        logger.info("Applied schema migration %s", migration.version)
        current_version = migration.version
