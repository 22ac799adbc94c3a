"""Line item and invoice totals calculation.

Every derived figure is rounded to cents where it is produced, not only at
the end, so each stored field is off by at most one cent:

    subtotal       = round2(sum of line amounts)
    discount_value = round2(subtotal * discount / 100) or round2(discount)
    taxable_base   = subtotal - discount_value
    tax_total      = round2(taxable_base * tax_rate / 100)
    grand_total    = round2(taxable_base + tax_total)

The discount is not clamped to the subtotal, a larger discount gives a
negative taxable base (and negative tax).
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from backend.invoicer.core.money import ZERO, round2, to_decimal, to_quantity
from backend.invoicer.schemas.invoice import DiscountType, InvoiceTotals, normalize_discount_type
from backend.invoicer.schemas.line_item import LineItemCreate

HUNDRED = Decimal("100")


def compute_amount(quantity: Any, rate: Any) -> Decimal:
    """Return quantity * rate in cents; bad input counts as zero."""
    return round2(to_quantity(quantity) * to_decimal(rate))


def _item_amount(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get("amount")
    return getattr(item, "amount", None)


def is_percent_discount(discount_type: Any) -> bool:
    # Only an explicit absolute type switches off percent; unset means percent
    if discount_type is None:
        return True
    return normalize_discount_type(discount_type) == DiscountType.PERCENT


def compute_totals(
    line_items: Iterable[Any],
    discount_amount: Any = None,
    discount_type: Any = DiscountType.PERCENT,
    tax_rate: Any = None,
) -> InvoiceTotals:
    subtotal = round2(sum((to_decimal(_item_amount(item)) for item in line_items), ZERO))

    discount = to_decimal(discount_amount)
    if is_percent_discount(discount_type):
        discount_value = round2(subtotal * discount / HUNDRED)
    else:
        discount_value = round2(discount)

    taxable_base = subtotal - discount_value
    tax_total = round2(taxable_base * to_decimal(tax_rate) / HUNDRED)
    grand_total = round2(taxable_base + tax_total)

    return InvoiceTotals(
        subtotal=subtotal,
        discount_value=discount_value,
        taxable_base=taxable_base,
        tax_total=tax_total,
        grand_total=grand_total,
    )


def price_line_item(item: LineItemCreate) -> LineItemCreate:
    # amount is derived from the rate as stored, i.e. already in cents
    rate = round2(item.rate)
    return item.model_copy(update={"rate": rate, "amount": compute_amount(item.quantity, rate)})


def price_line_items(items: Iterable[LineItemCreate]) -> list[LineItemCreate]:
    """Return copies of the items with amount recomputed from quantity and rate."""
    return [price_line_item(item) for item in items]
