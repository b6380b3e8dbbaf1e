"""Translate inventory errors into JSON error responses."""
from datetime import datetime, timezone
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from inventory_service.application.schemas import ErrorResponse
from inventory_service.core.logging_config import get_logger
from inventory_service.domain.exceptions import (
    DuplicateProductError,
    InvalidInventoryError,
    InventoryNotFoundError,
    StoreFailureError,
)

logger = get_logger(__name__)

def error_response(request: Request, status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(
        status=status_code,
        error=error,
        message=message,
        path=request.url.path,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))

def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return ", ".join(parts)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InventoryNotFoundError)
    async def handle_not_found(request: Request, exc: InventoryNotFoundError):
        return error_response(request, status.HTTP_404_NOT_FOUND, "Not Found", str(exc))

    @app.exception_handler(InvalidInventoryError)
    async def handle_invalid(request: Request, exc: InvalidInventoryError):
        return error_response(request, status.HTTP_400_BAD_REQUEST, "Bad Request", str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        return error_response(request, status.HTTP_400_BAD_REQUEST, "Validation Failed", _validation_message(exc))

    @app.exception_handler(DuplicateProductError)
    async def handle_duplicate(request: Request, exc: DuplicateProductError):
        return error_response(request, status.HTTP_409_CONFLICT, "Conflict", str(exc))

    @app.exception_handler(StoreFailureError)
    async def handle_store_failure(request: Request, exc: StoreFailureError):
        logger.error(
            "Inventory store failure",
            extra={"extra_fields": {"path": request.url.path, "cause": repr(exc.original_exception)}},
        )
        return error_response(request, status.HTTP_503_SERVICE_UNAVAILABLE, "Service Unavailable", str(exc))
