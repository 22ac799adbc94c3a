"""Single line-item edits outside a full invoice save."""

from fastapi import APIRouter, Depends

from backend.invoicer.crud.storage import InvoiceStorage
from backend.invoicer.dependencies.storage import get_storage
from backend.invoicer.schemas.line_item import LineItemRead, LineItemUpdate
from backend.invoicer.services import invoices as invoice_service

router = APIRouter(prefix="/api/line-items", tags=["line_items"])


@router.patch("/{line_item_id}", response_model=LineItemRead)
async def update_line_item(
    line_item_id: int,
    payload: LineItemUpdate,
    storage: InvoiceStorage = Depends(get_storage),
):
    return invoice_service.update_line_item(storage, line_item_id, payload)


@router.delete("/{line_item_id}")
async def delete_line_item(line_item_id: int, storage: InvoiceStorage = Depends(get_storage)):
    invoice_service.delete_line_item(storage, line_item_id)
    return {"message": "Line item deleted successfully"}
