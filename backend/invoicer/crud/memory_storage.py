"""Volatile dict-backed invoice store."""

from decimal import Decimal
from typing import Any, Optional

from backend.invoicer.core.time import utc_now
from backend.invoicer.schemas.invoice import InvoiceCreate, InvoiceRead, InvoiceWithLineItems
from backend.invoicer.schemas.line_item import LineItemCreate, LineItemRead

_INVOICE_WRITE_EXCLUDE = {"id", "created_at", "updated_at"}
_LINE_ITEM_WRITE_EXCLUDE = {"id", "invoice_id"}


def _or_zero(value: Optional[Decimal]) -> Decimal:
    return Decimal("0.00") if value is None else value


class MemInvoiceStorage:
    def __init__(self):
        self._invoices: dict[int, InvoiceRead] = {}
        self._line_items: dict[int, LineItemRead] = {}
        self._next_invoice_id = 1
        self._next_line_item_id = 1

    def create_invoice(self, data: InvoiceCreate) -> InvoiceRead:
        invoice_id = self._next_invoice_id
        self._next_invoice_id += 1
        now = utc_now()
        invoice = InvoiceRead(
            **data.model_dump(exclude={"subtotal", "tax_total", "grand_total"}),
            id=invoice_id,
            subtotal=_or_zero(data.subtotal),
            tax_total=_or_zero(data.tax_total),
            grand_total=_or_zero(data.grand_total),
            created_at=now,
            updated_at=now,
        )
        self._invoices[invoice_id] = invoice
        return invoice.model_copy(deep=True)

    def get_invoice(self, invoice_id: int) -> Optional[InvoiceWithLineItems]:
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            return None
        return InvoiceWithLineItems(
            **invoice.model_dump(),
            line_items=self.get_line_items_by_invoice_id(invoice_id),
        )

    def list_invoices(self) -> list[InvoiceWithLineItems]:
        return [self.get_invoice(invoice_id) for invoice_id in sorted(self._invoices, reverse=True)]

    def update_invoice(self, invoice_id: int, changes: dict[str, Any]) -> Optional[InvoiceRead]:
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            return None
        update = {key: value for key, value in changes.items() if key not in _INVOICE_WRITE_EXCLUDE}
        update["updated_at"] = utc_now()
        # Round-trip through validation so merged values get the same coercion as on create
        updated = InvoiceRead.model_validate({**invoice.model_dump(), **update})
        self._invoices[invoice_id] = updated
        return updated.model_copy(deep=True)

    def delete_invoice(self, invoice_id: int) -> bool:
        if self._invoices.pop(invoice_id, None) is None:
            return False
        self.delete_line_items_by_invoice_id(invoice_id)
        return True

    def get_line_item(self, line_item_id: int) -> Optional[LineItemRead]:
        item = self._line_items.get(line_item_id)
        return item.model_copy(deep=True) if item is not None else None

    def get_line_items_by_invoice_id(self, invoice_id: int) -> list[LineItemRead]:
        return [
            item.model_copy(deep=True)
            for item_id, item in sorted(self._line_items.items())
            if item.invoice_id == invoice_id
        ]

    def create_line_item(self, invoice_id: int, data: LineItemCreate) -> LineItemRead:
        line_item_id = self._next_line_item_id
        self._next_line_item_id += 1
        line_item = LineItemRead(
            **data.model_dump(exclude={"invoice_id", "amount"}),
            id=line_item_id,
            invoice_id=invoice_id,
            amount=_or_zero(data.amount),
        )
        self._line_items[line_item_id] = line_item
        return line_item.model_copy(deep=True)

    def update_line_item(self, line_item_id: int, changes: dict[str, Any]) -> Optional[LineItemRead]:
        line_item = self._line_items.get(line_item_id)
        if line_item is None:
            return None
        update = {key: value for key, value in changes.items() if key not in _LINE_ITEM_WRITE_EXCLUDE}
        updated = LineItemRead.model_validate({**line_item.model_dump(), **update})
        self._line_items[line_item_id] = updated
        return updated.model_copy(deep=True)

    def delete_line_item(self, line_item_id: int) -> bool:
        return self._line_items.pop(line_item_id, None) is not None

    def delete_line_items_by_invoice_id(self, invoice_id: int) -> None:
        owned = [item_id for item_id, item in self._line_items.items() if item.invoice_id == invoice_id]
        for item_id in owned:
            del self._line_items[item_id]
