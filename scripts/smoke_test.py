"""Smoke test for core dealership flows."""

from __future__ import annotations

import tempfile
from datetime import date, timedelta
from pathlib import Path
import sys

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR / "src"))

from dealership_manager.app_services import AppServices  # noqa: E402
from dealership_manager.db.connection import get_connection  # noqa: E402
from dealership_manager.db.migrations import apply_migrations  # noqa: E402
from dealership_manager.domain.models import (  # noqa: E402
    InventoryStatus,
    OrderStatus,
    PaymentMode,
    TransactionStatus,
)
from dealership_manager.utils.backup import export_backup, restore_backup  # noqa: E402
from dealership_manager.utils.exporters import export_transactions_csv  # noqa: E402


def main() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        db_path = temp_path / "smoke_test.db"
        connection = get_connection(db_path)
        try:
            apply_migrations(connection)
            services = AppServices.build(connection, config_path=temp_path / "config.json")

            vehicle = services.inventory.create_item(
                {
                    "brand": "Toyota",
                    "model": "Corolla",
                    "year": 2021,
                    "color": "White",
                    "purchase_price": 28000,
                    "selling_price": 32000,
                }
            )
            reservation = services.transactions.create_reservation(
                vehicle.id or 0,
                {"name": "Smoke Customer", "contact": "0770000000"},
                {"vehicle_price": 32000, "taxes": 1600, "fees": 400, "discount": 500},
                expected_delivery=(date.today() + timedelta(days=14)).isoformat(),
            )
            assert reservation.pricing.total_amount == 33500

            partial = services.payments.add_payment(reservation.id or 0, 3000, "cash", "Smoke")
            assert partial.status == TransactionStatus.PARTIAL_PAID
            settled = services.payments.add_payment(
                reservation.id or 0, 30500, "bank_transfer", "Smoke"
            )
            assert settled.status == TransactionStatus.COMPLETED
            assert services.inventory.get_item(vehicle.id or 0).status == InventoryStatus.SOLD

            order = services.orders.create_order(
                {"model": "Honda Civic", "year": 2022, "vehicle_cost": 3_800_000, "duty": 1_000_000}
            )
            services.orders.update_status(order.id or 0, OrderStatus.COMPLETED)
            stock = services.orders.move_to_inventory(order.id or 0)

            leased = services.transactions.create_reservation(
                stock.id or 0,
                {"name": "Leasing Customer", "contact": "0771111111"},
                {"vehicle_price": stock.list_price},
                payment_mode=PaymentMode.LEASING,
                leasing_data={
                    "leasing_company_name": "Smoke Leasing",
                    "lease_reference_no": "SL-1",
                    "tenure": 48,
                    "interest_rate": 12.5,
                },
            )

            services.expenses.create_expense(
                date.today().isoformat(), "Utilities", "Electricity", 12000
            )

            services.invoices.generate_invoice(reservation.id or 0, "customer", temp_path)
            services.invoices.generate_invoice(leased.id or 0, "bank", temp_path)
            services.reports.generate_report(temp_path / "report.pdf", "month")
            services.reports.dashboard_metrics()
            export_transactions_csv(
                services.transactions.list_transactions(), temp_path / "transactions.csv"
            )
            backup_path = export_backup(db_path, temp_path / "backups")
        finally:
            connection.close()

        result = restore_backup(backup_path, db_path, temp_path / "backups")
        assert result.ok

    print("OK")


if __name__ == "__main__":
    main()
