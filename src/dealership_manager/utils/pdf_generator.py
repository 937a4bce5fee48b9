"""PDF generation for invoices and financial reports."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from dealership_manager.config import DEFAULT_CURRENCY, SELLER
from dealership_manager.domain.models import DocumentType
from dealership_manager.utils.formatting import format_amount, format_currency, humanize

if TYPE_CHECKING:
    from dealership_manager.services.invoice_service import InvoiceData
    from dealership_manager.services.report_service import MonthlyPoint, ReportSummary

TAGLINE = "Importers of Brand New &amp; Used Vehicles"
INVOICE_TERMS = (
    "Vehicle ownership transfers upon full payment",
    "All taxes and duties are included",
)


def _styles():
    styles = getSampleStyleSheet()
    styles.add(
        ParagraphStyle(
            name="SectionTitle",
            parent=styles["Heading3"],
            spaceBefore=12,
            spaceAfter=6,
        )
    )
    styles.add(
        ParagraphStyle(
            name="SmallText",
            parent=styles["Normal"],
            fontSize=9,
            leading=12,
        )
    )
    styles.add(
        ParagraphStyle(
            name="Tagline",
            parent=styles["Normal"],
            alignment=1,
            textColor=colors.HexColor("#2c5aa0"),
        )
    )
    return styles


def _document(output_path: Path, title: str) -> SimpleDocTemplate:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        rightMargin=20 * mm,
        leftMargin=20 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=title,
        author=SELLER.name,
    )


def _details_table(rows: Sequence[tuple[str, str]]) -> Table:
    table = Table(
        [[label, f": {value}"] for label, value in rows],
        colWidths=[55 * mm, 105 * mm],
    )
    table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    return table


def _vehicle_rows(data: InvoiceData) -> list[tuple[str, str]]:
    return [
        ("Vehicle Registered No", data.vehicle_registered_no or "UNREGISTER"),
        ("Make", data.make),
        ("Model", data.model),
        ("Year of Manufacture", str(data.year_of_manufacture)),
        ("Chassis No", data.chassis_no),
        ("Engine No", data.engine_no),
        ("Fuel Type", data.fuel_type),
        ("Colour", data.colour),
        ("Country of Origin", data.country_of_origin),
    ]


def _header(data: InvoiceData, styles) -> list[object]:
    return [
        Paragraph(f"<b>{escape(data.seller_name)}</b>", styles["Title"]),
        Paragraph(TAGLINE, styles["Tagline"]),
        Spacer(1, 10),
    ]


def _footer(data: InvoiceData, styles) -> list[object]:
    signature = Table(
        [
            ["_____________________________"],
            [data.seller_name],
            [f"({data.seller_nic})"],
            ["Authorized Signature"],
        ],
        colWidths=[80 * mm],
        hAlign="RIGHT",
    )
    signature.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER")]))
    contact = f"{escape(data.seller_address)} | Tel: {escape(data.seller_contact)}"
    return [
        Spacer(1, 24),
        signature,
        Spacer(1, 12),
        Paragraph(contact, styles["SmallText"]),
        Paragraph(
            f"Generated on {datetime.now().strftime('%d/%m/%Y %H:%M')}",
            styles["SmallText"],
        ),
    ]


def _customer_invoice_elements(data: InvoiceData, styles) -> list[object]:
    elements = _header(data, styles)
    elements.append(Paragraph("SALES INVOICE", styles["Heading2"]))
    elements.append(
        Paragraph(
            f"Invoice #: {escape(data.invoice_number)}<br/>Date: {data.date}",
            styles["Normal"],
        )
    )

    elements.append(Paragraph("Bill To", styles["SectionTitle"]))
    bill_to = [
        f"<b>{escape(data.customer_title)} {escape(data.customer_name)}</b>",
        escape(data.customer_address),
        f"Contact: {escape(data.customer_contact)}",
        f"NIC: {escape(data.customer_nic)}",
    ]
    elements.append(Paragraph("<br/>".join(bill_to), styles["Normal"]))

    elements.append(Paragraph("Vehicle Details", styles["SectionTitle"]))
    elements.append(_details_table(_vehicle_rows(data)))

    amount_rows = [["Vehicle Price", format_currency(data.vehicle_cost, data.currency)]]
    if data.taxes:
        amount_rows.append(["Taxes", format_currency(data.taxes, data.currency)])
    if data.fees:
        amount_rows.append(["Fees", format_currency(data.fees, data.currency)])
    if data.discount:
        amount_rows.append(
            ["Discount", f"({format_currency(data.discount, data.currency)})"]
        )
    amount_rows.extend(
        [
            ["Total Amount", format_currency(data.total_amount, data.currency)],
            [
                "Advance Payment",
                f"({format_currency(data.advance_amount, data.currency)})",
            ],
            ["Balance Due", format_currency(data.balance_amount, data.currency)],
        ]
    )
    total_row = len(amount_rows) - 3
    amounts = Table(amount_rows, colWidths=[100 * mm, 60 * mm])
    amounts.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("FONTNAME", (0, total_row), (-1, total_row), "Helvetica-Bold"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("BACKGROUND", (0, total_row), (-1, total_row), colors.whitesmoke),
            ]
        )
    )
    elements.append(Paragraph("Amount Summary", styles["SectionTitle"]))
    elements.append(amounts)
    elements.append(Spacer(1, 8))
    elements.append(
        _details_table(
            [
                ("Payment Method", data.payment_method),
                ("Payment Status", data.payment_status),
            ]
        )
    )

    elements.append(Paragraph("Terms &amp; Conditions", styles["SectionTitle"]))
    elements.append(
        Paragraph("<br/>".join(f"- {term}" for term in INVOICE_TERMS), styles["SmallText"])
    )
    elements.extend(_footer(data, styles))
    return elements


def _bank_invoice_elements(data: InvoiceData, styles) -> list[object]:
    elements = _header(data, styles)
    addressee = [
        "<b>The Manager,</b>",
        f"<b>{escape(data.bank_name)},</b>",
        f"<b>{escape(data.bank_branch)}.</b>",
    ]
    elements.append(Paragraph("<br/>".join(addressee), styles["Normal"]))
    elements.append(Paragraph(f"<b>Date: {data.date}</b>", styles["Normal"]))
    elements.append(Spacer(1, 8))
    elements.append(Paragraph("<u>INVOICE</u>", styles["Heading2"]))

    rows = _vehicle_rows(data)
    rows.extend(
        (label, f"{format_currency(amount, data.currency)}/-")
        for label, amount in data.cost_breakdown
    )
    rows.extend(
        [
            ("Total Amount", f"{format_currency(data.total_amount, data.currency)}/-"),
            ("Advance Amount", f"{format_currency(data.advance_amount, data.currency)}/-"),
            ("Loan Amount", f"{format_currency(data.loan_amount, data.currency)}/-"),
        ]
    )
    if data.lease_reference_no:
        rows.append(("Lease Reference", data.lease_reference_no))
    if data.monthly_installment:
        rows.append(
            (
                "Monthly Installment",
                f"{format_currency(data.monthly_installment, data.currency, 0)} x {data.tenure}",
            )
        )
    elements.append(_details_table(rows))
    elements.append(Spacer(1, 10))
    deliver_to = [
        f"{data.customer_title} {data.customer_name}",
        f"No:- {data.customer_address}",
        f"NIC NO: {data.customer_nic}",
    ]
    elements.append(
        _details_table([("To be delivered", " / ".join(deliver_to))])
    )
    elements.extend(_footer(data, styles))
    return elements


def generate_invoice_pdf(
    data: InvoiceData,
    output_path: Path,
    *,
    doc_type: DocumentType = DocumentType.CUSTOMER_INVOICE,
) -> Path:
    """Render a customer or bank/leasing invoice to ``output_path``."""
    styles = _styles()
    if doc_type == DocumentType.BANK_INVOICE:
        title = f"Bank Invoice {data.invoice_number}"
        elements = _bank_invoice_elements(data, styles)
    else:
        title = f"Sales Invoice {data.invoice_number}"
        elements = _customer_invoice_elements(data, styles)
    _document(output_path, title).build(elements)
    return output_path


def _breakdown_table(
    header: Sequence[str], rows: Iterable[Sequence[str]], widths: Sequence[float]
) -> Table:
    table = Table([list(header), *[list(row) for row in rows]], colWidths=list(widths))
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    return table


def generate_report_pdf(
    summary: ReportSummary,
    trend: Sequence[MonthlyPoint],
    output_path: Path,
    *,
    currency: str = DEFAULT_CURRENCY,
) -> Path:
    """Render the financial report for a period."""
    styles = _styles()
    elements: list[object] = [
        Paragraph(f"<b>{escape(SELLER.name)}</b>", styles["Title"]),
        Paragraph("Financial Report", styles["Heading2"]),
        Paragraph(f"Period: {escape(summary.period.label)}", styles["Normal"]),
    ]

    elements.append(Paragraph("Summary", styles["SectionTitle"]))
    elements.append(
        _breakdown_table(
            ["Metric", "Value"],
            [
                ["Total Revenue", format_currency(summary.total_revenue, currency)],
                ["Total Expenses", format_currency(summary.total_expenses, currency)],
                ["Net Profit", format_currency(summary.total_profit, currency)],
                ["Sales", str(summary.total_sales)],
                ["Reservations", str(summary.total_reservations)],
                ["Leasing", str(summary.total_leasing)],
            ],
            [90 * mm, 70 * mm],
        )
    )

    if summary.sales_by_brand:
        elements.append(Paragraph("Sales by Brand", styles["SectionTitle"]))
        elements.append(
            _breakdown_table(
                ["Brand", f"Amount ({currency})"],
                [
                    [brand, format_amount(amount)]
                    for brand, amount in sorted(
                        summary.sales_by_brand.items(), key=lambda kv: kv[1], reverse=True
                    )
                ],
                [90 * mm, 70 * mm],
            )
        )

    if summary.expenses_by_category:
        elements.append(Paragraph("Expenses by Category", styles["SectionTitle"]))
        elements.append(
            _breakdown_table(
                ["Category", f"Amount ({currency})"],
                [
                    [category, format_amount(amount)]
                    for category, amount in sorted(
                        summary.expenses_by_category.items(),
                        key=lambda kv: kv[1],
                        reverse=True,
                    )
                ],
                [90 * mm, 70 * mm],
            )
        )

    if trend:
        elements.append(Paragraph("Monthly Trend", styles["SectionTitle"]))
        elements.append(
            _breakdown_table(
                ["Month", "Revenue", "Expenses", "Profit"],
                [
                    [
                        point.month,
                        format_amount(point.revenue),
                        format_amount(point.expense),
                        format_amount(point.profit),
                    ]
                    for point in trend
                ],
                [40 * mm, 40 * mm, 40 * mm, 40 * mm],
            )
        )

    if summary.transactions:
        elements.append(Paragraph("Transactions", styles["SectionTitle"]))
        elements.append(
            _breakdown_table(
                ["Invoice", "Vehicle", "Status", "Total"],
                [
                    [
                        t.invoice_number or str(t.id),
                        f"{t.vehicle.brand} {t.vehicle.model}",
                        humanize(t.status.value),
                        format_amount(t.pricing.total_amount),
                    ]
                    for t in summary.transactions
                ],
                [40 * mm, 60 * mm, 30 * mm, 30 * mm],
            )
        )

    elements.append(Spacer(1, 12))
    elements.append(
        Paragraph(
            f"Generated on {datetime.now().strftime('%d/%m/%Y %H:%M')}",
            styles["SmallText"],
        )
    )
    _document(output_path, "Financial Report").build(elements)
    return output_path
