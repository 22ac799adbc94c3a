"""Editing state for the invoice form.

Each edit returns a new InvoiceForm with derived fields already refreshed;
callers never have to remember to recalculate. The input form is left
untouched.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from backend.invoicer.core.money import round2, to_quantity
from backend.invoicer.core.time import today as utc_today
from backend.invoicer.schemas.invoice import DiscountType, InvoiceCreate, InvoiceForm, normalize_discount_type
from backend.invoicer.schemas.line_item import LineItemCreate
from backend.invoicer.services.totals import compute_amount, compute_totals

DEFAULT_PAYMENT_TERMS = "Net 30"
DEFAULT_DUE_DAYS = 30

PRICING_FIELDS = ("quantity", "rate")
_MONEY_HEADER_FIELDS = ("discount_amount", "tax_rate")


def blank_line_item() -> LineItemCreate:
    return LineItemCreate(description="", quantity=1, rate=Decimal("0.00"), amount=Decimal("0.00"))


def recalculate(form: InvoiceForm) -> InvoiceForm:
    invoice = form.invoice
    totals = compute_totals(form.line_items, invoice.discount_amount, invoice.discount_type, invoice.tax_rate)
    return form.model_copy(
        update={
            "invoice": invoice.model_copy(
                update={
                    "subtotal": totals.subtotal,
                    "tax_total": totals.tax_total,
                    "grand_total": totals.grand_total,
                }
            )
        }
    )


def new_invoice_form(
    invoice_number: Optional[str] = None,
    today: Optional[date] = None,
    due_days: int = DEFAULT_DUE_DAYS,
    payment_terms: str = DEFAULT_PAYMENT_TERMS,
) -> InvoiceForm:
    invoice_date = today or utc_today()
    invoice = InvoiceCreate(
        invoice_number=invoice_number or "",
        invoice_date=invoice_date,
        due_date=invoice_date + timedelta(days=due_days),
        payment_terms=payment_terms,
        client_name="",
        client_address="",
        client_email="",
        client_phone="",
        discount_amount=Decimal("0.00"),
        discount_type=DiscountType.PERCENT,
        tax_rate=Decimal("0.00"),
    )
    return recalculate(InvoiceForm(invoice=invoice, line_items=[blank_line_item()]))


def set_invoice_field(form: InvoiceForm, field: str, value: Any) -> InvoiceForm:
    if field not in InvoiceCreate.model_fields:
        raise KeyError(field)
    if field in _MONEY_HEADER_FIELDS:
        value = round2(value)
    elif field == "discount_type":
        value = normalize_discount_type(value)
    invoice = form.invoice.model_copy(update={field: value})
    return recalculate(form.model_copy(update={"invoice": invoice}))


def set_line_item_field(form: InvoiceForm, index: int, field: str, value: Any) -> InvoiceForm:
    if field not in ("description",) + PRICING_FIELDS:
        raise KeyError(field)
    line_items = list(form.line_items)
    item = line_items[index]

    if field == "quantity":
        item = item.model_copy(update={"quantity": to_quantity(value)})
    elif field == "rate":
        item = item.model_copy(update={"rate": round2(value)})
    else:
        item = item.model_copy(update={"description": "" if value is None else str(value)})

    if field in PRICING_FIELDS:
        item = item.model_copy(update={"amount": compute_amount(item.quantity, item.rate)})

    line_items[index] = item
    return recalculate(form.model_copy(update={"line_items": line_items}))


def add_line_item(form: InvoiceForm) -> InvoiceForm:
    return recalculate(form.model_copy(update={"line_items": [*form.line_items, blank_line_item()]}))


def remove_line_item(form: InvoiceForm, index: int) -> InvoiceForm:
    """Drop one row; the last remaining row is never removed."""
    if len(form.line_items) <= 1:
        return form
    line_items = [item for position, item in enumerate(form.line_items) if position != index]
    return recalculate(form.model_copy(update={"line_items": line_items}))
