"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dealership_manager.app_services import AppServices
from dealership_manager.config import AppConfig
from dealership_manager.db.connection import get_connection
from dealership_manager.db.migrations import apply_migrations, get_schema_version
from dealership_manager.domain.models import (
    InventoryStatus,
    OrderStatus,
    PaymentMethod,
    PaymentMode,
    TransactionStatus,
    TransactionType,
    VehicleCondition,
)
from dealership_manager.logging_config import configure_logging, get_logger
from dealership_manager.paths import (
    get_backup_dir,
    get_config_path,
    get_db_path,
    get_exports_dir,
)
from dealership_manager.services.errors import ServiceError
from dealership_manager.services.report_service import resolve_period, summarize
from dealership_manager.services.vehicle_order_service import (
    calculate_profit,
    calculate_profit_margin,
)
from dealership_manager.utils.backup import (
    BackupSettings,
    export_backup,
    list_backups,
    load_backup_settings,
    restore_backup,
    run_integrity_check,
    save_backup_settings,
)
from dealership_manager.utils.exporters import (
    export_expenses_csv,
    export_filename,
    export_transactions_csv,
)
from dealership_manager.utils.formatting import format_currency, humanize


def _print_rows(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
    if not rows:
        print("No records found.")
        return
    table = [list(map(str, headers))] + [[str(cell) for cell in row] for row in rows]
    widths = [max(len(row[i]) for row in table) for i in range(len(headers))]
    for index, row in enumerate(table):
        print("  ".join(cell.ljust(width) for cell, width in zip(row, widths)))
        if index == 0:
            print("  ".join("-" * width for width in widths))


def _add_period_arguments(parser: argparse.ArgumentParser, default: str = "month") -> None:
    parser.add_argument(
        "--period",
        choices=["all", "today", "week", "month", "year", "custom"],
        default=default,
    )
    parser.add_argument("--start", help="Start date for a custom period (YYYY-MM-DD)")
    parser.add_argument("--end", help="End date for a custom period (YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dealership-manager",
        description="Vehicle dealership back office.",
    )
    parser.add_argument("--db", type=Path, help="Path to the SQLite database file")
    parser.add_argument("-v", "--verbose", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init", help="Create or upgrade the database")

    inventory = commands.add_parser("inventory", help="Stock vehicles")
    inventory_cmd = inventory.add_subparsers(dest="action", required=True)
    inv_list = inventory_cmd.add_parser("list")
    inv_list.add_argument("--status", choices=[s.value for s in InventoryStatus])
    inv_list.add_argument("--condition", choices=[c.value for c in VehicleCondition])
    inv_list.add_argument("--search")
    inv_add = inventory_cmd.add_parser("add")
    for name in ("brand", "model", "color"):
        inv_add.add_argument(f"--{name}", required=True)
    inv_add.add_argument("--year", type=int, required=True)
    inv_add.add_argument("--purchase-price", required=True)
    inv_add.add_argument("--market-value", default="0")
    inv_add.add_argument("--selling-price")
    inv_add.add_argument("--mileage", default="0")
    inv_add.add_argument("--condition", default=VehicleCondition.GOOD.value)
    inv_add.add_argument("--fuel-type")
    inv_add.add_argument("--transmission")
    inv_add.add_argument("--body-type")
    inv_add.add_argument("--currency")
    for name in ("vin", "license-plate", "registration-no", "engine-no", "location", "notes"):
        inv_add.add_argument(f"--{name}")
    inv_status = inventory_cmd.add_parser("status")
    inv_status.add_argument("item_id", type=int)
    inv_status.add_argument("status", choices=[s.value for s in InventoryStatus])

    customers = commands.add_parser("customers", help="Customer records")
    customers_cmd = customers.add_subparsers(dest="action", required=True)
    cust_list = customers_cmd.add_parser("list")
    cust_list.add_argument("--search")
    cust_add = customers_cmd.add_parser("add")
    cust_add.add_argument("--name", required=True)
    cust_add.add_argument("--contact", required=True)
    for name in ("title", "email", "address", "nic", "notes"):
        cust_add.add_argument(f"--{name}")

    leasing = commands.add_parser("leasing-companies", help="Leasing companies")
    leasing_cmd = leasing.add_subparsers(dest="action", required=True)
    leasing_cmd.add_parser("list")
    leasing_add = leasing_cmd.add_parser("add")
    leasing_add.add_argument("--name", required=True)
    for name in ("branch", "contact-person", "phone", "email", "address"):
        leasing_add.add_argument(f"--{name}")

    orders = commands.add_parser("orders", help="Import orders")
    orders_cmd = orders.add_subparsers(dest="action", required=True)
    ord_list = orders_cmd.add_parser("list")
    ord_list.add_argument("--status", choices=[s.value for s in OrderStatus])
    ord_list.add_argument("--search")
    ord_add = orders_cmd.add_parser("add")
    ord_add.add_argument("--model", required=True)
    ord_add.add_argument("--year", type=int, required=True)
    ord_add.add_argument("--vehicle-cost", required=True)
    for name in ("fuel", "duty", "driver-charge", "clearance-charge", "demurrage", "tax"):
        ord_add.add_argument(f"--{name}", default="0")
    ord_add.add_argument(
        "--expense",
        action="append",
        default=[],
        metavar="NAME=AMOUNT",
        help="Additional named cost, may be repeated",
    )
    for name in (
        "country",
        "supplier",
        "selling-price",
        "expected-delivery",
        "payment-method",
        "currency",
        "vehicle-number",
        "vin-number",
        "license-plate-number",
        "lc-amount",
        "lc-bank",
        "notes",
    ):
        ord_add.add_argument(f"--{name}")
    ord_status = orders_cmd.add_parser("status")
    ord_status.add_argument("order_id", type=int)
    ord_status.add_argument("status", choices=[s.value for s in OrderStatus])
    ord_move = orders_cmd.add_parser("move", help="Move a completed order into inventory")
    ord_move.add_argument("order_id", type=int)
    ord_invoice = orders_cmd.add_parser("invoice", help="Print the bank invoice for an order")
    ord_invoice.add_argument("order_id", type=int)
    ord_invoice.add_argument("--output-dir", type=Path)

    reserve = commands.add_parser("reserve", help="Reserve a vehicle for a customer")
    reserve.add_argument("--vehicle", type=int, required=True, dest="inventory_id")
    reserve.add_argument("--customer-name", required=True)
    reserve.add_argument("--contact", required=True)
    for name in ("title", "email", "address", "nic"):
        reserve.add_argument(f"--{name}")
    reserve.add_argument("--price", required=True)
    reserve.add_argument("--taxes", default="0")
    reserve.add_argument("--fees", default="0")
    reserve.add_argument("--discount", default="0")
    reserve.add_argument(
        "--mode", choices=[m.value for m in PaymentMode], default=PaymentMode.CASH.value
    )
    reserve.add_argument("--expected-delivery")
    reserve.add_argument("--notes")
    reserve.add_argument("--leasing-company")
    reserve.add_argument("--lease-ref")
    reserve.add_argument("--down-payment")
    reserve.add_argument("--tenure", type=int)
    reserve.add_argument("--rate", help="Annual interest rate in percent")
    reserve.add_argument("--lease-start")

    pay = commands.add_parser("pay", help="Record a payment")
    pay.add_argument("transaction_id", type=int)
    pay.add_argument("amount")
    pay.add_argument(
        "--method", choices=[m.value for m in PaymentMethod], default=PaymentMethod.CASH.value
    )
    pay.add_argument("--received-by", default="Admin")
    pay.add_argument("--date")
    pay.add_argument("--notes")

    transactions = commands.add_parser("transactions", help="Sales and reservations")
    tx_cmd = transactions.add_subparsers(dest="action", required=True)
    tx_list = tx_cmd.add_parser("list")
    tx_list.add_argument("--status", choices=[s.value for s in TransactionStatus])
    tx_list.add_argument("--type", choices=[t.value for t in TransactionType])
    tx_list.add_argument("--search")
    tx_show = tx_cmd.add_parser("show")
    tx_show.add_argument("transaction_id", type=int)
    tx_cancel = tx_cmd.add_parser("cancel")
    tx_cancel.add_argument("transaction_id", type=int)

    invoice = commands.add_parser("invoice", help="Print an invoice to PDF")
    invoice.add_argument("transaction_id", type=int)
    invoice.add_argument("--kind", choices=["customer", "bank"], default="customer")
    invoice.add_argument("--output-dir", type=Path)

    expenses = commands.add_parser("expenses", help="Business expenses")
    exp_cmd = expenses.add_subparsers(dest="action", required=True)
    exp_list = exp_cmd.add_parser("list")
    exp_list.add_argument("--category")
    exp_list.add_argument("--start")
    exp_list.add_argument("--end")
    exp_add = exp_cmd.add_parser("add")
    exp_add.add_argument("--date", required=True)
    exp_add.add_argument("--category", required=True)
    exp_add.add_argument("--amount", required=True)
    exp_add.add_argument("--description")
    exp_add.add_argument("--currency")
    exp_add.add_argument("--payment-method")
    exp_add.add_argument("--notes")

    report = commands.add_parser("report", help="Financial summary")
    _add_period_arguments(report)
    report.add_argument("--pdf", type=Path, help="Also write the report to this PDF")

    commands.add_parser("dashboard", help="Headline business metrics")

    export = commands.add_parser("export", help="Export records to CSV")
    export.add_argument("dataset", choices=["transactions", "expenses"])
    _add_period_arguments(export, default="all")
    export.add_argument("--output", type=Path)

    backup = commands.add_parser("backup", help="Database backups")
    backup_cmd = backup.add_subparsers(dest="action", required=True)
    backup_cmd.add_parser("create")
    backup_cmd.add_parser("list")
    backup_cmd.add_parser("check")
    backup_restore = backup_cmd.add_parser("restore")
    backup_restore.add_argument("file", type=Path)
    backup_restore.add_argument("--yes", action="store_true", help="Confirm overwrite")
    backup_auto = backup_cmd.add_parser("auto")
    backup_auto.add_argument("state", choices=["on", "off"])

    overdue = commands.add_parser("mark-overdue", help="Flag late open transactions")
    overdue.add_argument("--date", help="Reference date (defaults to today)")
    return parser


def _run_inventory(args: argparse.Namespace, services: AppServices) -> None:
    if args.action == "list":
        items = services.inventory.list_items(
            status=InventoryStatus(args.status) if args.status else None,
            condition=VehicleCondition(args.condition) if args.condition else None,
            search=args.search,
        )
        _print_rows(
            ["ID", "Vehicle", "Year", "Color", "Status", "Price"],
            [
                (
                    item.id,
                    f"{item.brand} {item.model}",
                    item.year,
                    item.color,
                    item.status.value,
                    format_currency(item.list_price, item.currency),
                )
                for item in items
            ],
        )
    elif args.action == "add":
        data = {key: value for key, value in vars(args).items() if value is not None}
        item = services.inventory.create_item(data)
        print(f"Vehicle {item.id} added: {item.brand} {item.model} ({item.year})")
    elif args.action == "status":
        services.inventory.set_status(args.item_id, InventoryStatus(args.status))
        print(f"Vehicle {args.item_id} is now {args.status}")


def _run_customers(args: argparse.Namespace, services: AppServices) -> None:
    if args.action == "list":
        customers = services.customers.list_customers(args.search)
        _print_rows(
            ["ID", "Name", "Contact", "NIC", "Email"],
            [(c.id, c.name, c.contact, c.nic or "", c.email or "") for c in customers],
        )
    else:
        customer = services.customers.create_customer(vars(args))
        print(f"Customer {customer.id} created: {customer.name}")


def _run_leasing_companies(args: argparse.Namespace, services: AppServices) -> None:
    if args.action == "list":
        companies = services.leasing_companies.list_companies()
        _print_rows(
            ["ID", "Name", "Branch", "Phone"],
            [(c.id, c.name, c.branch or "", c.phone or "") for c in companies],
        )
    else:
        company = services.leasing_companies.create_company(
            args.name,
            branch=args.branch,
            contact_person=args.contact_person,
            phone=args.phone,
            email=args.email,
            address=args.address,
        )
        print(f"Leasing company {company.id} created: {company.name}")


def _parse_named_costs(values: Sequence[str]) -> dict[str, str]:
    costs: dict[str, str] = {}
    for value in values:
        name, separator, amount = value.partition("=")
        if not separator or not name.strip():
            raise ServiceError(f"Invalid expense '{value}', expected NAME=AMOUNT.")
        costs[name.strip()] = amount
    return costs


def _run_orders(args: argparse.Namespace, services: AppServices) -> None:
    if args.action == "list":
        orders = services.orders.list_orders(
            status=OrderStatus(args.status) if args.status else None,
            search=args.search,
        )
        _print_rows(
            ["ID", "Order", "Model", "Status", "Total Cost", "Profit", "Margin", "Stock"],
            [
                (
                    o.id,
                    o.order_number,
                    f"{o.model} ({o.year})",
                    o.status.value,
                    format_currency(o.total_cost, o.currency),
                    format_currency(calculate_profit(o), o.currency),
                    f"{calculate_profit_margin(o):.1f}%",
                    o.inventory_item_id or "",
                )
                for o in orders
            ],
        )
    elif args.action == "add":
        data = {key: value for key, value in vars(args).items() if value is not None}
        data["custom_expenses"] = _parse_named_costs(args.expense)
        order = services.orders.create_order(data)
        print(
            f"Order {order.order_number} created, total cost "
            f"{format_currency(order.total_cost, order.currency)}"
        )
    elif args.action == "status":
        order = services.orders.update_status(args.order_id, args.status)
        print(f"Order {order.order_number} is now {order.status.value}")
    elif args.action == "move":
        item = services.orders.move_to_inventory(args.order_id)
        print(
            f"Vehicle {item.id} added to inventory: {item.brand} {item.model}, "
            f"selling price {format_currency(item.selling_price, item.currency)}"
        )
    elif args.action == "invoice":
        document = services.invoices.generate_order_invoice(args.order_id, args.output_dir)
        print(f"Invoice written to {document.file_path}")


def _run_reserve(args: argparse.Namespace, services: AppServices) -> None:
    leasing_data = None
    if args.mode == PaymentMode.LEASING.value:
        leasing_data = {
            "leasing_company_name": args.leasing_company,
            "lease_reference_no": args.lease_ref,
            "down_payment": args.down_payment,
            "tenure": args.tenure,
            "interest_rate": args.rate,
            "start_date": args.lease_start,
        }
    reserved = services.transactions.create_reservation(
        args.inventory_id,
        {
            "name": args.customer_name,
            "contact": args.contact,
            "title": args.title,
            "email": args.email,
            "address": args.address,
            "nic": args.nic,
        },
        {
            "vehicle_price": args.price,
            "taxes": args.taxes,
            "fees": args.fees,
            "discount": args.discount,
        },
        payment_mode=args.mode,
        leasing_data=leasing_data,
        expected_delivery=args.expected_delivery,
        notes=args.notes,
    )
    print(
        f"Transaction {reserved.id} ({reserved.invoice_number}) created, total "
        f"{format_currency(reserved.pricing.total_amount, reserved.currency)}"
    )
    if reserved.leasing:
        print(
            f"Leasing: {format_currency(reserved.leasing.leasing_amount, reserved.currency)} "
            f"over {reserved.leasing.tenure} months at "
            f"{format_currency(reserved.leasing.monthly_installment, reserved.currency, 0)}"
            " per month"
        )


def _show_transaction(services: AppServices, transaction_id: int) -> None:
    found = services.transactions.get_transaction(transaction_id)
    currency = found.currency
    print(f"Transaction {found.id} ({found.invoice_number})")
    print(f"  Vehicle : {found.vehicle.brand} {found.vehicle.model} ({found.vehicle.year})")
    print(f"  Type    : {humanize(found.type.value)}")
    print(f"  Status  : {humanize(found.status.value)}")
    print(f"  Total   : {format_currency(found.pricing.total_amount, currency)}")
    print(f"  Paid    : {format_currency(found.total_paid, currency)}")
    print(f"  Balance : {format_currency(found.balance_remaining, currency)}")
    for payment in found.payments:
        print(
            f"    - {payment.payment_date} {format_currency(payment.amount, currency)} "
            f"{payment.payment_method.value} by {payment.received_by}"
        )


def _run_transactions(args: argparse.Namespace, services: AppServices) -> None:
    if args.action == "list":
        rows = services.transactions.list_transactions(
            status=TransactionStatus(args.status) if args.status else None,
            transaction_type=TransactionType(args.type) if args.type else None,
            search=args.search,
        )
        _print_rows(
            ["ID", "Invoice", "Vehicle", "Type", "Status", "Total", "Balance"],
            [
                (
                    t.id,
                    t.invoice_number or "",
                    f"{t.vehicle.brand} {t.vehicle.model}",
                    t.type.value,
                    t.status.value,
                    format_currency(t.pricing.total_amount, t.currency),
                    format_currency(t.balance_remaining, t.currency),
                )
                for t in rows
            ],
        )
    elif args.action == "show":
        _show_transaction(services, args.transaction_id)
    elif args.action == "cancel":
        services.transactions.cancel_transaction(args.transaction_id)
        print(f"Transaction {args.transaction_id} cancelled")


def _run_expenses(args: argparse.Namespace, services: AppServices) -> None:
    if args.action == "list":
        expenses = services.expenses.list_expenses(
            category=args.category, start_date=args.start, end_date=args.end
        )
        _print_rows(
            ["ID", "Date", "Category", "Description", "Amount"],
            [
                (e.id, e.date, e.category, e.description or "", format_currency(e.amount, e.currency))
                for e in expenses
            ],
        )
        stats = services.expenses.get_stats(
            category=args.category, start_date=args.start, end_date=args.end
        )
        print(f"Total: {format_currency(stats.total)}  Average: {format_currency(stats.average)}")
    else:
        expense = services.expenses.create_expense(
            args.date,
            args.category,
            args.description,
            args.amount,
            currency=args.currency,
            payment_method=args.payment_method,
            notes=args.notes,
        )
        print(f"Expense {expense.id} recorded")


def _run_report(args: argparse.Namespace, services: AppServices) -> None:
    summary = services.reports.build_summary(args.period, args.start, args.end)
    print(f"Period          : {summary.period.label}")
    print(f"Total revenue   : {format_currency(summary.total_revenue)}")
    print(f"Total expenses  : {format_currency(summary.total_expenses)}")
    print(f"Net profit      : {format_currency(summary.total_profit)}")
    print(
        f"Sales {summary.total_sales} / Reservations {summary.total_reservations} "
        f"/ Leasing {summary.total_leasing}"
    )
    for brand, amount in sorted(summary.sales_by_brand.items()):
        print(f"  {brand}: {format_currency(amount)}")
    for point in services.reports.monthly_trend():
        print(
            f"  {point.month}: revenue {format_currency(point.revenue)}, "
            f"expense {format_currency(point.expense)}, profit {format_currency(point.profit)}"
        )
    if args.pdf:
        document = services.reports.generate_report(args.pdf, args.period, args.start, args.end)
        print(f"Report written to {document.file_path}")


def _run_dashboard(services: AppServices) -> None:
    metrics = services.reports.dashboard_metrics()
    for label, value in (
        ("Total revenue", format_currency(metrics.total_revenue)),
        ("Total expenses", format_currency(metrics.total_expenses)),
        ("Net profit", format_currency(metrics.net_profit)),
        ("Pending payments", format_currency(metrics.pending_payments)),
        ("Deposits received", format_currency(metrics.total_deposits)),
        ("Active reservations", metrics.active_reservations),
        ("Vehicles available", metrics.available_inventory),
        ("Vehicles reserved", metrics.reserved_inventory),
        ("Vehicles sold", metrics.sold_inventory),
        ("Inventory value", format_currency(metrics.inventory_value)),
        ("Import orders", f"{metrics.completed_orders}/{metrics.total_orders} completed"),
        ("Total assets", format_currency(metrics.total_assets)),
    ):
        print(f"{label:<20}: {value}")


def _run_export(args: argparse.Namespace, services: AppServices) -> None:
    period = resolve_period(args.period, args.start, args.end)
    summary = summarize(
        services.transactions.list_transactions(),
        services.expenses.list_expenses(),
        period,
    )
    target = args.output or get_exports_dir() / export_filename(args.dataset)
    if args.dataset == "transactions":
        path = export_transactions_csv(summary.transactions, target)
    else:
        path = export_expenses_csv(summary.expenses, target)
    print(f"Exported to {path}")


def _run_backup(args: argparse.Namespace, db_path: Path) -> None:
    if args.action == "create":
        print(f"Backup written to {export_backup(db_path, get_backup_dir())}")
    elif args.action == "list":
        for path in list_backups(get_backup_dir()):
            print(path)
    elif args.action == "check":
        print("; ".join(run_integrity_check(db_path)))
    elif args.action == "restore":
        if not args.yes:
            raise ServiceError("Restoring overwrites the database; pass --yes to confirm.")
        result = restore_backup(args.file, db_path, get_backup_dir())
        print(f"Restored {args.file}; integrity check: {'; '.join(result.integrity_check_results)}")
    elif args.action == "auto":
        save_backup_settings(get_config_path(), BackupSettings(args.state == "on"))
        print(f"Automatic backup on start is {args.state}")


def _dispatch(args: argparse.Namespace, services: AppServices, db_path: Path) -> None:
    if args.command == "init":
        print(f"Database ready at {db_path} (schema v{get_schema_version(services.connection)})")
    elif args.command == "inventory":
        _run_inventory(args, services)
    elif args.command == "customers":
        _run_customers(args, services)
    elif args.command == "leasing-companies":
        _run_leasing_companies(args, services)
    elif args.command == "orders":
        _run_orders(args, services)
    elif args.command == "reserve":
        _run_reserve(args, services)
    elif args.command == "pay":
        updated = services.payments.add_payment(
            args.transaction_id,
            args.amount,
            args.method,
            args.received_by,
            notes=args.notes,
            payment_date=args.date,
        )
        print(
            f"Payment recorded. Status: {humanize(updated.status.value)}, balance "
            f"{format_currency(updated.balance_remaining, updated.currency)}"
        )
    elif args.command == "transactions":
        _run_transactions(args, services)
    elif args.command == "invoice":
        document = services.invoices.generate_invoice(
            args.transaction_id, args.kind, args.output_dir
        )
        print(f"Invoice written to {document.file_path}")
    elif args.command == "expenses":
        _run_expenses(args, services)
    elif args.command == "report":
        _run_report(args, services)
    elif args.command == "dashboard":
        _run_dashboard(services)
    elif args.command == "export":
        _run_export(args, services)
    elif args.command == "backup":
        _run_backup(args, db_path)
    elif args.command == "mark-overdue":
        marked = services.transactions.mark_overdue_transactions(args.date)
        print(f"{len(marked)} transactions marked overdue")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the DealershipManager command line."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    logger = get_logger(__name__)
    config = AppConfig()
    db_path = args.db or get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    connection = get_connection(db_path)
    try:
        apply_migrations(connection)
        logger.info("Starting %s command=%s", config.app_name, args.command)
        if args.command != "backup" and load_backup_settings(get_config_path()).auto_backup_on_start:
            try:
                backup_path = export_backup(db_path, get_backup_dir())
                logger.info("Automatic backup created at %s", backup_path)
            except OSError:
                logger.exception("Automatic backup failed.")
        services = AppServices.build(connection)
        _dispatch(args, services, db_path)
    except ServiceError as exc:
        logger.info("Command %s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError) as exc:
        logger.info("Command %s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    finally:
        connection.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
