"""Invoice routes consumed by the invoice editor UI."""

from typing import List

from fastapi import APIRouter, Depends, status

from backend.invoicer.core.money import round2, to_quantity
from backend.invoicer.core.settings import Settings
from backend.invoicer.crud.storage import InvoiceStorage
from backend.invoicer.dependencies.storage import get_app_settings, get_storage
from backend.invoicer.schemas.invoice import (
    InvoiceForm,
    InvoicePayload,
    InvoiceUpdatePayload,
    InvoiceWithLineItems,
    NextNumberRead,
    TotalsRequest,
    TotalsResponse,
)
from backend.invoicer.schemas.line_item import PricedLineItem
from backend.invoicer.services import invoices as invoice_service
from backend.invoicer.services.invoice_form import new_invoice_form
from backend.invoicer.services.totals import compute_amount, compute_totals

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


# Static paths first, "/{invoice_id}" would shadow them otherwise
@router.get("/next-number", response_model=NextNumberRead)
async def get_next_invoice_number(storage: InvoiceStorage = Depends(get_storage)):
    return NextNumberRead(next_number=invoice_service.next_invoice_number(storage))


@router.get("/defaults", response_model=InvoiceForm)
async def get_invoice_defaults(
    storage: InvoiceStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    return new_invoice_form(
        invoice_number=invoice_service.next_invoice_number(storage),
        due_days=settings.default_due_days,
        payment_terms=settings.default_payment_terms,
    )


@router.post("/calculate", response_model=TotalsResponse)
async def calculate_totals(payload: TotalsRequest):
    line_items = []
    for item in payload.line_items:
        rate = round2(item.rate)
        line_items.append(
            PricedLineItem(
                description=item.description,
                quantity=to_quantity(item.quantity),
                rate=rate,
                amount=compute_amount(item.quantity, rate),
            )
        )
    totals = compute_totals(
        line_items, round2(payload.discount_amount), payload.discount_type, round2(payload.tax_rate)
    )
    return TotalsResponse(line_items=line_items, totals=totals)


@router.get("", response_model=List[InvoiceWithLineItems])
async def list_invoices(storage: InvoiceStorage = Depends(get_storage)):
    return invoice_service.list_invoices(storage)


@router.get("/{invoice_id}", response_model=InvoiceWithLineItems)
async def get_invoice(invoice_id: int, storage: InvoiceStorage = Depends(get_storage)):
    return invoice_service.get_invoice(storage, invoice_id)


@router.post("", response_model=InvoiceWithLineItems, status_code=status.HTTP_201_CREATED)
async def create_invoice(payload: InvoicePayload, storage: InvoiceStorage = Depends(get_storage)):
    return invoice_service.create_invoice_with_line_items(storage, payload.invoice, payload.line_items)


@router.put("/{invoice_id}", response_model=InvoiceWithLineItems)
async def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdatePayload,
    storage: InvoiceStorage = Depends(get_storage),
):
    return invoice_service.update_invoice_with_line_items(storage, invoice_id, payload.invoice, payload.line_items)


@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: int, storage: InvoiceStorage = Depends(get_storage)):
    invoice_service.delete_invoice(storage, invoice_id)
    return {"message": "Invoice deleted successfully"}
