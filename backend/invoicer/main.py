# Invoice editor backend: FastAPI application.

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.invoicer.api import invoices, line_items
from backend.invoicer.core.exceptions import InvoiceNotFoundError, LineItemNotFoundError
from backend.invoicer.core.logging_config import setup_logging
from backend.invoicer.core.settings import Settings, get_settings
from backend.invoicer.crud.storage import InvoiceStorage, build_storage

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, storage: InvoiceStorage | None = None) -> FastAPI:
    """Build an app with its own store; nothing is shared between instances."""
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(title=settings.app_name, version=settings.api_version)
    app.state.settings = settings
    app.state.storage = storage if storage is not None else build_storage(settings)
    logger.info("Starting %s with %s storage", settings.app_name, settings.storage_backend)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(invoices.router)
    app.include_router(line_items.router)

    @app.get("/")
    def read_root():
        return {"app": settings.app_name, "status": "ok"}

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid data", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(InvoiceNotFoundError)
    async def invoice_not_found_handler(request: Request, exc: InvoiceNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Invoice not found"})

    @app.exception_handler(LineItemNotFoundError)
    async def line_item_not_found_handler(request: Request, exc: LineItemNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Line item not found"})

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    return app


app = create_app()
