"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from backend.invoicer.core.money import round2
from backend.invoicer.schemas.line_item import (
    DraftLineItem,
    LineItemCreate,
    LineItemRead,
    LooseNumber,
    PricedLineItem,
)


class DiscountType(str, Enum):
    PERCENT = "percent"
    ABSOLUTE = "absolute"


_DISCOUNT_TYPE_SYNONYMS = {
    "%": DiscountType.PERCENT,
    "percent": DiscountType.PERCENT,
    "percentage": DiscountType.PERCENT,
    "$": DiscountType.ABSOLUTE,
    "absolute": DiscountType.ABSOLUTE,
    "fixed": DiscountType.ABSOLUTE,
}


def normalize_discount_type(value: Any) -> Any:
    """Map the UI's "%"/"$" values onto DiscountType; unknown values pass through."""
    if isinstance(value, DiscountType) or value is None:
        return value
    if isinstance(value, str):
        return _DISCOUNT_TYPE_SYNONYMS.get(value.strip().lower(), value)
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InvoiceBase(_CamelModel):
    invoice_number: str
    invoice_date: date
    due_date: date
    payment_terms: str = "Net 30"

    client_name: str
    client_address: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None

    discount_amount: Decimal = Decimal("0.00")
    discount_type: DiscountType = DiscountType.PERCENT
    tax_rate: Decimal = Decimal("0.00")

    @field_validator("discount_type", mode="before")
    @classmethod
    def _normalize_discount_type(cls, value):
        if value is None:
            return DiscountType.PERCENT
        return normalize_discount_type(value)

    @field_validator("discount_amount", "tax_rate")
    @classmethod
    def _round_money(cls, value):
        return round2(value)


class InvoiceCreate(InvoiceBase):
    # Filled from next_invoice_number when left out
    invoice_number: Optional[str] = None

    # Derived fields, recomputed on save
    subtotal: Optional[Decimal] = None
    tax_total: Optional[Decimal] = None
    grand_total: Optional[Decimal] = None


class InvoiceUpdate(_CamelModel):
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_terms: Optional[str] = None

    client_name: Optional[str] = None
    client_address: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None

    discount_amount: Optional[Decimal] = None
    discount_type: Optional[DiscountType] = None
    tax_rate: Optional[Decimal] = None

    @field_validator("discount_type", mode="before")
    @classmethod
    def _normalize_discount_type(cls, value):
        return normalize_discount_type(value)

    @field_validator("discount_amount", "tax_rate")
    @classmethod
    def _round_money(cls, value):
        return None if value is None else round2(value)


class InvoiceRead(InvoiceBase):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    subtotal: Decimal
    tax_total: Decimal
    grand_total: Decimal

    created_at: datetime
    updated_at: datetime


class InvoiceWithLineItems(InvoiceRead):
    line_items: list[LineItemRead] = Field(default_factory=list)


class InvoicePayload(_CamelModel):
    invoice: InvoiceCreate
    line_items: list[LineItemCreate] = Field(default_factory=list)


class InvoiceUpdatePayload(_CamelModel):
    invoice: InvoiceUpdate = Field(default_factory=InvoiceUpdate)
    # None leaves line items alone, [] removes them all
    line_items: Optional[list[LineItemCreate]] = None


class InvoiceForm(_CamelModel):
    invoice: InvoiceCreate
    line_items: list[LineItemCreate] = Field(default_factory=list)


class InvoiceTotals(_CamelModel):
    subtotal: Decimal
    discount_value: Decimal
    taxable_base: Decimal
    tax_total: Decimal
    grand_total: Decimal


class TotalsRequest(_CamelModel):
    line_items: list[DraftLineItem] = Field(default_factory=list)
    discount_amount: LooseNumber = None
    discount_type: Optional[str] = None
    tax_rate: LooseNumber = None


class TotalsResponse(_CamelModel):
    line_items: list[PricedLineItem]
    totals: InvoiceTotals


class NextNumberRead(_CamelModel):
    next_number: str
