"""SQLAlchemy-backed invoice store."""

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.orm import Session, selectinload, sessionmaker

from backend.invoicer.core.time import utc_now
from backend.invoicer.db.base import Base
from backend.invoicer.db.session import make_engine, make_session_factory
from backend.invoicer.models.invoice import Invoice
from backend.invoicer.models.line_item import LineItem
from backend.invoicer.schemas.invoice import InvoiceCreate, InvoiceRead, InvoiceWithLineItems
from backend.invoicer.schemas.line_item import LineItemCreate, LineItemRead

_INVOICE_WRITE_EXCLUDE = {"id", "created_at", "updated_at"}
_LINE_ITEM_WRITE_EXCLUDE = {"id", "invoice_id"}


def _column_value(value: Any) -> Any:
    # Enums go in as their plain value, the column is a String
    return getattr(value, "value", value)


class SqlInvoiceStorage:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, database_url: str) -> "SqlInvoiceStorage":
        engine = make_engine(database_url)
        Base.metadata.create_all(bind=engine)
        return cls(make_session_factory(engine))

    def _query_invoices(self, db: Session):
        return db.query(Invoice).options(selectinload(Invoice.line_items))

    def create_invoice(self, data: InvoiceCreate) -> InvoiceRead:
        values = data.model_dump()
        for field in ("subtotal", "tax_total", "grand_total"):
            if values[field] is None:
                values[field] = Decimal("0.00")
        now = utc_now()
        with self._session_factory() as db:
            invoice = Invoice(
                **{key: _column_value(value) for key, value in values.items()},
                created_at=now,
                updated_at=now,
            )
            db.add(invoice)
            db.commit()
            db.refresh(invoice)
            return InvoiceRead.model_validate(invoice)

    def get_invoice(self, invoice_id: int) -> Optional[InvoiceWithLineItems]:
        with self._session_factory() as db:
            invoice = self._query_invoices(db).filter(Invoice.id == invoice_id).first()
            if not invoice:
                return None
            return InvoiceWithLineItems.model_validate(invoice)

    def list_invoices(self) -> list[InvoiceWithLineItems]:
        with self._session_factory() as db:
            invoices = self._query_invoices(db).order_by(Invoice.id.desc()).all()
            return [InvoiceWithLineItems.model_validate(invoice) for invoice in invoices]

    def update_invoice(self, invoice_id: int, changes: dict[str, Any]) -> Optional[InvoiceRead]:
        with self._session_factory() as db:
            invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
            if not invoice:
                return None
            for field, value in changes.items():
                if field in _INVOICE_WRITE_EXCLUDE:
                    continue
                setattr(invoice, field, _column_value(value))
            invoice.updated_at = utc_now()
            db.commit()
            db.refresh(invoice)
            return InvoiceRead.model_validate(invoice)

    def delete_invoice(self, invoice_id: int) -> bool:
        with self._session_factory() as db:
            invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
            if not invoice:
                return False
            # line items go with it through the delete-orphan cascade
            db.delete(invoice)
            db.commit()
            return True

    def get_line_item(self, line_item_id: int) -> Optional[LineItemRead]:
        with self._session_factory() as db:
            item = db.query(LineItem).filter(LineItem.id == line_item_id).first()
            if not item:
                return None
            return LineItemRead.model_validate(item)

    def get_line_items_by_invoice_id(self, invoice_id: int) -> list[LineItemRead]:
        with self._session_factory() as db:
            items = db.query(LineItem).filter(LineItem.invoice_id == invoice_id).order_by(LineItem.id.asc()).all()
            return [LineItemRead.model_validate(item) for item in items]

    def create_line_item(self, invoice_id: int, data: LineItemCreate) -> LineItemRead:
        values = data.model_dump(exclude={"invoice_id"})
        if values["amount"] is None:
            values["amount"] = Decimal("0.00")
        with self._session_factory() as db:
            item = LineItem(invoice_id=invoice_id, **values)
            db.add(item)
            db.commit()
            db.refresh(item)
            return LineItemRead.model_validate(item)

    def update_line_item(self, line_item_id: int, changes: dict[str, Any]) -> Optional[LineItemRead]:
        with self._session_factory() as db:
            item = db.query(LineItem).filter(LineItem.id == line_item_id).first()
            if not item:
                return None
            for field, value in changes.items():
                if field in _LINE_ITEM_WRITE_EXCLUDE:
                    continue
                setattr(item, field, value)
            db.commit()
            db.refresh(item)
            return LineItemRead.model_validate(item)

    def delete_line_item(self, line_item_id: int) -> bool:
        with self._session_factory() as db:
            deleted = db.query(LineItem).filter(LineItem.id == line_item_id).delete()
            db.commit()
            return deleted > 0

    def delete_line_items_by_invoice_id(self, invoice_id: int) -> None:
        with self._session_factory() as db:
            db.query(LineItem).filter(LineItem.invoice_id == invoice_id).delete()
            db.commit()
