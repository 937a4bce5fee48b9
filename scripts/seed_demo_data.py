"""Seed demo data into the DealershipManager SQLite database."""

from __future__ import annotations

import argparse
import random
import sys
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from dealership_manager.app_services import AppServices
from dealership_manager.db.connection import get_connection
from dealership_manager.db.migrations import apply_migrations
from dealership_manager.domain.models import OrderStatus, PaymentMode
from dealership_manager.paths import get_db_path

SEED_TAG = "Seed Demo"
DEFAULT_SEED = 42


@dataclass(frozen=True)
class VehicleSeed:
    brand: str
    model: str
    year: int
    color: str
    purchase_price: float
    body_type: str
    fuel_type: str


VEHICLES = [
    VehicleSeed("Toyota", "Aqua", 2018, "Silver", 5_200_000, "hatchback", "hybrid"),
    VehicleSeed("Toyota", "Premio", 2017, "Pearl White", 8_900_000, "sedan", "gasoline"),
    VehicleSeed("Honda", "Vezel", 2019, "Black", 9_400_000, "suv", "hybrid"),
    VehicleSeed("Suzuki", "Wagon R", 2020, "Blue", 4_100_000, "hatchback", "gasoline"),
    VehicleSeed("Nissan", "X-Trail", 2016, "Grey", 7_600_000, "suv", "diesel"),
    VehicleSeed("Mitsubishi", "Montero", 2015, "Black", 14_500_000, "suv", "diesel"),
]

CUSTOMERS = [
    ("Mr.", "Nimal Perera", "0771234567"),
    ("Mrs.", "Fathima Rizwan", "0759876543"),
    ("Mr.", "Kumar Rajan", "0712223344"),
    ("Ms.", "Dilani Fernando", "0765554433"),
]

EXPENSES = [
    ("Rent", "Showroom rent", 150_000),
    ("Utilities", "Electricity", 18_500),
    ("Marketing", "Newspaper advertisement", 25_000),
    ("Salaries", "Sales staff", 240_000),
]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed demo data for DealershipManager")
    parser.add_argument("--db", type=Path, help="Database file (defaults to the app database)")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Remove the current database before seeding.",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed.")
    return parser.parse_args()


def _seed_exists(services: AppServices) -> bool:
    return any(
        (customer.notes or "") == SEED_TAG for customer in services.customers.list_customers()
    )


def main() -> None:
    args = _parse_args()
    rng = random.Random(args.seed)
    db_path = args.db or get_db_path()
    if args.reset and db_path.exists():
        db_path.unlink()

    connection = get_connection(db_path)
    try:
        apply_migrations(connection)
        services = AppServices.build(connection)
        if _seed_exists(services):
            print("Seed data already present; use --reset to recreate it.")
            return

        today = date.today()
        vehicles = []
        for seed in VEHICLES:
            vehicles.append(
                services.inventory.create_item(
                    {
                        "brand": seed.brand,
                        "model": seed.model,
                        "year": seed.year,
                        "color": seed.color,
                        "purchase_price": seed.purchase_price,
                        "market_value": round(seed.purchase_price * 1.1, -3),
                        "selling_price": round(seed.purchase_price * 1.18, -3),
                        "mileage": rng.randint(15_000, 90_000),
                        "body_type": seed.body_type,
                        "fuel_type": seed.fuel_type,
                        "location": "Showroom",
                        "notes": SEED_TAG,
                    }
                )
            )

        services.leasing_companies.create_company(
            "People's Leasing", branch="Kalmunai", phone="067 222 1111"
        )

        transaction_count = 0
        for index, (title, name, contact) in enumerate(CUSTOMERS):
            vehicle = vehicles[index]
            customer = {"title": title, "name": name, "contact": contact, "notes": SEED_TAG}
            pricing = {"vehicle_price": vehicle.list_price, "fees": 25_000}
            if index == len(CUSTOMERS) - 1:
                reserved = services.transactions.create_reservation(
                    vehicle.id or 0,
                    customer,
                    pricing,
                    payment_mode=PaymentMode.LEASING,
                    leasing_data={
                        "leasing_company_name": "People's Leasing",
                        "lease_reference_no": f"PL-{today.year}-{index:03d}",
                        "tenure": 48,
                        "interest_rate": 12.5,
                    },
                )
            else:
                reserved = services.transactions.create_reservation(
                    vehicle.id or 0,
                    customer,
                    pricing,
                    expected_delivery=(today + timedelta(days=rng.randint(-10, 30))).isoformat(),
                )
            transaction_count += 1
            deposit = round(reserved.pricing.total_amount * rng.choice([0.1, 0.25, 1.0]), 2)
            services.payments.add_payment(
                reserved.id or 0,
                deposit,
                rng.choice(["cash", "bank_transfer"]),
                "Seed",
                payment_date=(today - timedelta(days=rng.randint(0, 60))).isoformat(),
            )

        order = services.orders.create_order(
            {
                "model": "Toyota Land Cruiser Prado",
                "year": 2021,
                "vehicle_cost": 28_000_000,
                "duty": 9_500_000,
                "clearance_charge": 180_000,
                "driver_charge": 15_000,
                "selling_price": 42_000_000,
                "supplier": "Yokohama Auto Export",
                "notes": SEED_TAG,
            }
        )
        services.orders.update_status(order.id or 0, OrderStatus.SHIPPED)

        for category, description, amount in EXPENSES:
            services.expenses.create_expense(
                (today - timedelta(days=rng.randint(0, 90))).isoformat(),
                category,
                description,
                amount,
                notes=SEED_TAG,
            )

        print("\nSeed completed:")
        print(f"Vehicles: {len(vehicles)}")
        print(f"Transactions: {transaction_count}")
        print("Import orders: 1")
        print(f"Expenses: {len(EXPENSES)}")
    finally:
        connection.close()


if __name__ == "__main__":
    main()
