from fastapi import Request

from backend.invoicer.core.settings import Settings
from backend.invoicer.crud.storage import InvoiceStorage


def get_storage(request: Request) -> InvoiceStorage:
    """Return the store owned by the running app."""
    return request.app.state.storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
