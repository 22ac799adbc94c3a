"""Invoice header model."""

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from backend.invoicer.core.time import utc_now
from backend.invoicer.db.base_class import Base


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    # unique by convention only, see next_invoice_number
    invoice_number = Column(String(64), nullable=False, index=True)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    payment_terms = Column(String(64), nullable=False)

    client_name = Column(String(255), nullable=False)
    client_address = Column(String(1024), nullable=False)
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(64), nullable=True)

    subtotal = Column(Numeric(10, 2), default=0.00, nullable=False)
    discount_amount = Column(Numeric(10, 2), default=0.00, nullable=False)
    discount_type = Column(String(16), default="percent", nullable=False)
    tax_rate = Column(Numeric(5, 2), default=0.00, nullable=False)
    tax_total = Column(Numeric(10, 2), default=0.00, nullable=False)
    grand_total = Column(Numeric(10, 2), default=0.00, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    line_items = relationship(
        "LineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="LineItem.id",
    )
