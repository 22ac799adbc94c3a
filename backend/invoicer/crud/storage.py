"""Storage interface for invoice aggregates."""

from typing import Any, Optional, Protocol

from backend.invoicer.core.settings import Settings
from backend.invoicer.schemas.invoice import InvoiceCreate, InvoiceRead, InvoiceWithLineItems
from backend.invoicer.schemas.line_item import LineItemCreate, LineItemRead


class InvoiceStorage(Protocol):
    """What the invoice services need from a store.

    Absence is signalled with None/False, never with an exception. Objects
    handed out are detached copies.
    """

    def create_invoice(self, data: InvoiceCreate) -> InvoiceRead: ...

    def get_invoice(self, invoice_id: int) -> Optional[InvoiceWithLineItems]: ...

    def list_invoices(self) -> list[InvoiceWithLineItems]: ...

    def update_invoice(self, invoice_id: int, changes: dict[str, Any]) -> Optional[InvoiceRead]: ...

    def delete_invoice(self, invoice_id: int) -> bool: ...

    def get_line_item(self, line_item_id: int) -> Optional[LineItemRead]: ...

    def get_line_items_by_invoice_id(self, invoice_id: int) -> list[LineItemRead]: ...

    def create_line_item(self, invoice_id: int, data: LineItemCreate) -> LineItemRead: ...

    def update_line_item(self, line_item_id: int, changes: dict[str, Any]) -> Optional[LineItemRead]: ...

    def delete_line_item(self, line_item_id: int) -> bool: ...

    def delete_line_items_by_invoice_id(self, invoice_id: int) -> None: ...


def build_storage(settings: Settings) -> InvoiceStorage:
    backend = settings.storage_backend.lower()
    if backend == "memory":
        from backend.invoicer.crud.memory_storage import MemInvoiceStorage

        return MemInvoiceStorage()
    if backend == "sql":
        from backend.invoicer.crud.sql_storage import SqlInvoiceStorage

        return SqlInvoiceStorage.from_url(settings.database_url)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
