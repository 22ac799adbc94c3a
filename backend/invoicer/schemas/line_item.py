"""Line item schemas."""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from backend.invoicer.core.money import round2

# Editing input is coerced by the calculator, not validated
LooseNumber = Optional[Union[int, float, str]]


class LineItemBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    description: str
    quantity: int = Field(default=1, ge=0)
    rate: Decimal = Field(default=Decimal("0.00"), ge=0)

    @field_validator("rate")
    @classmethod
    def _round_rate(cls, value):
        return round2(value)


class LineItemCreate(LineItemBase):
    # Tagged by the server, anything sent by the client is overwritten
    invoice_id: Optional[int] = None
    # Derived from quantity and rate on save
    amount: Optional[Decimal] = None


class LineItemUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    description: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    rate: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("rate")
    @classmethod
    def _round_rate(cls, value):
        return None if value is None else round2(value)


class LineItemRead(LineItemBase):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    invoice_id: int
    amount: Decimal


class DraftLineItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    description: str = ""
    quantity: LooseNumber = 0
    rate: LooseNumber = 0


class PricedLineItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    description: str = ""
    quantity: int
    rate: Decimal
    amount: Decimal
