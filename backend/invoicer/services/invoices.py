"""Invoice aggregate operations.

An aggregate is an invoice header plus the line items it owns. Derived money
fields are always recomputed here before anything is stored, whatever the
client sent, so stored aggregates satisfy the totals invariant.

Creation and line-item replacement are not transactional: the header is
written first and line items one by one after it.
"""

import logging
import re
from typing import Any, Iterable, Optional

from backend.invoicer.core.exceptions import InvoiceNotFoundError, LineItemNotFoundError
from backend.invoicer.crud.storage import InvoiceStorage
from backend.invoicer.schemas.invoice import (
    InvoiceCreate,
    InvoiceTotals,
    InvoiceUpdate,
    InvoiceWithLineItems,
)
from backend.invoicer.schemas.line_item import LineItemCreate, LineItemRead, LineItemUpdate
from backend.invoicer.services.totals import compute_amount, compute_totals, price_line_items

logger = logging.getLogger(__name__)

INVOICE_NUMBER_PATTERN = re.compile(r"INV-(\d+)")


def next_invoice_number(storage: InvoiceStorage) -> str:
    """Return INV-NNN where NNN is the highest existing number plus one.

    Gaps are not reused: INV-001 and INV-003 give INV-004. Numbers that do
    not follow the pattern count as zero.
    """
    last_number = 0
    for invoice in storage.list_invoices():
        match = INVOICE_NUMBER_PATTERN.search(invoice.invoice_number or "")
        if match:
            last_number = max(last_number, int(match.group(1)))
    return f"INV-{last_number + 1:03d}"


def _totals_fields(totals: InvoiceTotals) -> dict[str, Any]:
    return {
        "subtotal": totals.subtotal,
        "tax_total": totals.tax_total,
        "grand_total": totals.grand_total,
    }


def _create_line_items(storage: InvoiceStorage, invoice_id: int, items: Iterable[LineItemCreate]) -> list[LineItemRead]:
    return [
        storage.create_line_item(invoice_id, item.model_copy(update={"invoice_id": invoice_id}))
        for item in items
    ]


def create_invoice_with_line_items(
    storage: InvoiceStorage,
    invoice_in: InvoiceCreate,
    line_items_in: Iterable[LineItemCreate],
) -> InvoiceWithLineItems:
    priced_items = price_line_items(line_items_in)
    totals = compute_totals(priced_items, invoice_in.discount_amount, invoice_in.discount_type, invoice_in.tax_rate)

    update = _totals_fields(totals)
    if not invoice_in.invoice_number:
        update["invoice_number"] = next_invoice_number(storage)
    invoice = storage.create_invoice(invoice_in.model_copy(update=update))

    line_items = _create_line_items(storage, invoice.id, priced_items)
    logger.info(
        "Created invoice %s (%s) with %d line items, grand total %s",
        invoice.id,
        invoice.invoice_number,
        len(line_items),
        invoice.grand_total,
    )
    return InvoiceWithLineItems(**invoice.model_dump(), line_items=line_items)


def get_invoice(storage: InvoiceStorage, invoice_id: int) -> InvoiceWithLineItems:
    invoice = storage.get_invoice(invoice_id)
    if invoice is None:
        raise InvoiceNotFoundError(invoice_id)
    return invoice


def list_invoices(storage: InvoiceStorage) -> list[InvoiceWithLineItems]:
    return storage.list_invoices()


def update_invoice_with_line_items(
    storage: InvoiceStorage,
    invoice_id: int,
    invoice_in: InvoiceUpdate,
    line_items_in: Optional[Iterable[LineItemCreate]] = None,
) -> InvoiceWithLineItems:
    """Merge header changes and, when given, replace the whole line-item set.

    line_items_in=None keeps the current line items; an empty list removes
    them all. There is no per-item diffing.
    """
    existing = get_invoice(storage, invoice_id)
    changes = invoice_in.model_dump(exclude_unset=True)
    # explicit nulls for required header fields would break the header
    changes = {
        field: value
        for field, value in changes.items()
        if value is not None or field in ("client_email", "client_phone")
    }

    if line_items_in is not None:
        priced_items = price_line_items(line_items_in)
    else:
        priced_items = existing.line_items

    totals = compute_totals(
        priced_items,
        changes.get("discount_amount", existing.discount_amount),
        changes.get("discount_type", existing.discount_type),
        changes.get("tax_rate", existing.tax_rate),
    )
    changes.update(_totals_fields(totals))

    invoice = storage.update_invoice(invoice_id, changes)
    if invoice is None:
        raise InvoiceNotFoundError(invoice_id)

    if line_items_in is not None:
        storage.delete_line_items_by_invoice_id(invoice_id)
        line_items = _create_line_items(storage, invoice_id, priced_items)
    else:
        line_items = storage.get_line_items_by_invoice_id(invoice_id)

    logger.info(
        "Updated invoice %s fields=%s replaced_line_items=%s",
        invoice_id,
        sorted(invoice_in.model_dump(exclude_unset=True)),
        line_items_in is not None,
    )
    return InvoiceWithLineItems(**invoice.model_dump(), line_items=line_items)


def delete_invoice(storage: InvoiceStorage, invoice_id: int) -> None:
    if not storage.delete_invoice(invoice_id):
        raise InvoiceNotFoundError(invoice_id)
    logger.info("Deleted invoice %s and its line items", invoice_id)


def recalculate_invoice_totals(storage: InvoiceStorage, invoice_id: int) -> InvoiceWithLineItems:
    """Recompute and store the header totals from the current line items."""
    invoice = get_invoice(storage, invoice_id)
    totals = compute_totals(invoice.line_items, invoice.discount_amount, invoice.discount_type, invoice.tax_rate)
    header = storage.update_invoice(invoice_id, _totals_fields(totals))
    if header is None:
        raise InvoiceNotFoundError(invoice_id)
    return InvoiceWithLineItems(**header.model_dump(), line_items=invoice.line_items)


def update_line_item(storage: InvoiceStorage, line_item_id: int, line_item_in: LineItemUpdate) -> LineItemRead:
    """Edit one line item in place, re-price it and refresh its invoice totals."""
    changes = {key: value for key, value in line_item_in.model_dump(exclude_unset=True).items() if value is not None}
    item = storage.update_line_item(line_item_id, changes)
    if item is None:
        raise LineItemNotFoundError(line_item_id)
    # description edits never change the amount
    if "quantity" in changes or "rate" in changes:
        item = storage.update_line_item(line_item_id, {"amount": compute_amount(item.quantity, item.rate)})
        recalculate_invoice_totals(storage, item.invoice_id)
    return item


def delete_line_item(storage: InvoiceStorage, line_item_id: int) -> None:
    item = storage.get_line_item(line_item_id)
    if item is None or not storage.delete_line_item(line_item_id):
        raise LineItemNotFoundError(line_item_id)
    recalculate_invoice_totals(storage, item.invoice_id)
