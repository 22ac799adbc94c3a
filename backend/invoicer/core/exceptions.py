"""Domain errors raised by the invoice services."""


class InvoiceError(Exception):
    """Base class for invoice domain errors."""


class InvoiceNotFoundError(InvoiceError, LookupError):
    def __init__(self, invoice_id: int):
        super().__init__(f"Invoice {invoice_id} not found")
        self.invoice_id = invoice_id


class LineItemNotFoundError(InvoiceError, LookupError):
    def __init__(self, line_item_id: int):
        super().__init__(f"Line item {line_item_id} not found")
        self.line_item_id = line_item_id
