from datetime import date
from decimal import Decimal

import pytest

from backend.invoicer.core.exceptions import InvoiceNotFoundError, LineItemNotFoundError
from backend.invoicer.crud.memory_storage import MemInvoiceStorage
from backend.invoicer.crud.sql_storage import SqlInvoiceStorage
from backend.invoicer.schemas.invoice import DiscountType, InvoiceCreate, InvoiceUpdate
from backend.invoicer.schemas.line_item import LineItemCreate, LineItemUpdate
from backend.invoicer.services.invoices import (
    create_invoice_with_line_items,
    delete_invoice,
    delete_line_item,
    get_invoice,
    list_invoices,
    next_invoice_number,
    update_invoice_with_line_items,
    update_line_item,
)


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    if request.param == "memory":
        return MemInvoiceStorage()
    return SqlInvoiceStorage.from_url("sqlite://")


def invoice_in(number=None, **overrides) -> InvoiceCreate:
    fields = dict(
        invoice_number=number,
        invoice_date=date(2024, 1, 15),
        due_date=date(2024, 2, 14),
        client_name="Acme Corp",
        client_address="1 Main St",
        discount_amount=Decimal("10"),
        discount_type=DiscountType.PERCENT,
        tax_rate=Decimal("8"),
    )
    fields.update(overrides)
    return InvoiceCreate(**fields)


def scenario_items():
    return [
        LineItemCreate(description="Widget", quantity=2, rate=Decimal("10.00")),
        LineItemCreate(description="Bolt", quantity=1, rate=Decimal("5.50")),
    ]


def test_create_invoice_computes_totals_and_tags_line_items(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    assert created.subtotal == Decimal("25.50")
    assert created.tax_total == Decimal("1.84")
    assert created.grand_total == Decimal("24.79")
    assert [item.amount for item in created.line_items] == [Decimal("20.00"), Decimal("5.50")]
    assert all(item.invoice_id == created.id for item in created.line_items)

    stored = get_invoice(storage, created.id)
    assert stored.grand_total == Decimal("24.79")
    assert len(stored.line_items) == 2


def test_client_supplied_totals_are_ignored(storage):
    bogus = invoice_in("INV-001", subtotal=Decimal("1.00"), tax_total=Decimal("2.00"), grand_total=Decimal("3.00"))
    items = [LineItemCreate(description="Widget", quantity=2, rate=Decimal("10.00"), amount=Decimal("0.01"))]
    created = create_invoice_with_line_items(storage, bogus, items)
    assert created.subtotal == Decimal("20.00")
    assert created.line_items[0].amount == Decimal("20.00")


def test_create_invoice_fills_missing_number(storage):
    create_invoice_with_line_items(storage, invoice_in("INV-009"), [])
    created = create_invoice_with_line_items(storage, invoice_in(None), [])
    assert created.invoice_number == "INV-010"


def test_next_invoice_number_uses_max_not_count(storage):
    assert next_invoice_number(storage) == "INV-001"
    create_invoice_with_line_items(storage, invoice_in("INV-001"), [])
    create_invoice_with_line_items(storage, invoice_in("INV-003"), [])
    assert next_invoice_number(storage) == "INV-004"


def test_next_invoice_number_ignores_foreign_formats(storage):
    create_invoice_with_line_items(storage, invoice_in("2024-Q1-77"), [])
    create_invoice_with_line_items(storage, invoice_in("INV-1203"), [])
    assert next_invoice_number(storage) == "INV-1204"


def test_list_invoices_newest_first(storage):
    create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    create_invoice_with_line_items(storage, invoice_in("INV-002"), [])
    assert [invoice.invoice_number for invoice in list_invoices(storage)] == ["INV-002", "INV-001"]


def test_update_without_line_items_keeps_existing(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    updated = update_invoice_with_line_items(storage, created.id, InvoiceUpdate(client_name="Globex"))
    assert updated.client_name == "Globex"
    assert [item.id for item in updated.line_items] == [item.id for item in created.line_items]
    assert updated.grand_total == Decimal("24.79")


def test_update_discount_recomputes_totals_from_stored_items(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    updated = update_invoice_with_line_items(storage, created.id, InvoiceUpdate(discount_amount=Decimal("0")))
    assert updated.tax_total == Decimal("2.04")
    assert updated.grand_total == Decimal("27.54")


def test_update_with_empty_line_items_removes_them(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    updated = update_invoice_with_line_items(storage, created.id, InvoiceUpdate(), [])
    assert updated.line_items == []
    assert updated.subtotal == Decimal("0.00")
    assert updated.grand_total == Decimal("0.00")
    assert storage.get_line_items_by_invoice_id(created.id) == []


def test_update_replaces_whole_line_item_set(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    replacement = [LineItemCreate(description="Consulting", quantity=3, rate=Decimal("100.00"))]
    updated = update_invoice_with_line_items(storage, created.id, InvoiceUpdate(), replacement)

    assert [item.description for item in updated.line_items] == ["Consulting"]
    assert not {item.id for item in updated.line_items} & {item.id for item in created.line_items}
    assert updated.subtotal == Decimal("300.00")
    # 300 - 30 discount = 270, tax 21.60
    assert updated.grand_total == Decimal("291.60")
    assert len(get_invoice(storage, created.id).line_items) == 1


def test_update_missing_invoice_raises(storage):
    with pytest.raises(InvoiceNotFoundError):
        update_invoice_with_line_items(storage, 404, InvoiceUpdate(client_name="x"), [])
    assert storage.get_line_items_by_invoice_id(404) == []


def test_delete_invoice_cascades(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    delete_invoice(storage, created.id)
    assert storage.get_line_items_by_invoice_id(created.id) == []
    with pytest.raises(InvoiceNotFoundError):
        get_invoice(storage, created.id)


def test_delete_missing_invoice_is_not_silent(storage):
    with pytest.raises(InvoiceNotFoundError):
        delete_invoice(storage, 1)


def test_update_line_item_reprices_and_refreshes_invoice(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    widget = created.line_items[0]

    item = update_line_item(storage, widget.id, LineItemUpdate(quantity=3))
    assert item.amount == Decimal("30.00")

    invoice = get_invoice(storage, created.id)
    assert invoice.subtotal == Decimal("35.50")
    assert invoice.tax_total == Decimal("2.56")
    assert invoice.grand_total == Decimal("34.51")


def test_description_edit_does_not_reprice(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    item = update_line_item(storage, created.line_items[1].id, LineItemUpdate(description="Hex bolt"))
    assert item.description == "Hex bolt"
    assert item.amount == Decimal("5.50")


def test_delete_line_item_refreshes_invoice(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    delete_line_item(storage, created.line_items[0].id)
    invoice = get_invoice(storage, created.id)
    assert [item.description for item in invoice.line_items] == ["Bolt"]
    assert invoice.subtotal == Decimal("5.50")


def test_unknown_line_item_raises(storage):
    with pytest.raises(LineItemNotFoundError):
        update_line_item(storage, 77, LineItemUpdate(quantity=1))
    with pytest.raises(LineItemNotFoundError):
        delete_line_item(storage, 77)


def test_sub_cent_input_is_stored_in_cents_on_every_backend(storage):
    created = create_invoice_with_line_items(
        storage,
        invoice_in("INV-001", discount_amount="0", tax_rate="7.125"),
        [LineItemCreate(description="Bolt", quantity=3, rate="0.335")],
    )
    stored = get_invoice(storage, created.id)
    assert stored.tax_rate == Decimal("7.13")
    item = stored.line_items[0]
    assert item.rate == Decimal("0.34")
    assert item.amount == Decimal("1.02")
    assert stored.subtotal == Decimal("1.02")
    assert stored.tax_total == Decimal("0.07")
    assert stored.grand_total == Decimal("1.09")

    edited = update_line_item(storage, item.id, LineItemUpdate(quantity=4))
    assert edited.amount == Decimal("1.36")


def test_sub_cent_header_update_is_rounded(storage):
    created = create_invoice_with_line_items(storage, invoice_in("INV-001"), scenario_items())
    updated = update_invoice_with_line_items(storage, created.id, InvoiceUpdate(discount_amount="2.555"))
    assert updated.discount_amount == Decimal("2.56")
    assert get_invoice(storage, created.id).discount_amount == Decimal("2.56")
