"""HTTP translation of the shared exception taxonomy.

Every error body has the shape ``{"error": {field: [messages]}}``, so clients
handle request validation failures and business-rule failures the same way.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.exceptions import (
    DomainError,
    ForbiddenError,
    InsufficientStockError,
    ObjectNotFoundError,
    TransactionFailedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR = {
    ValidationError: 400,
    InsufficientStockError: 400,
    ObjectNotFoundError: 404,
    ForbiddenError: 403,
}


def _field_name(loc) -> str:
    # Drop the leading "body"/"query"/"path" segment
    parts = [str(part) for part in loc[1:]] or [str(part) for part in loc]
    return ".".join(parts)


def request_validation_messages(exc: RequestValidationError) -> dict[str, list[str]]:
    messages: dict[str, list[str]] = {}
    for error in exc.errors():
        messages.setdefault(_field_name(error.get("loc", ())), []).append(error.get("msg", "Invalid value"))
    return messages


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = next(
            (code for error_type, code in _STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
            400,
        )
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": request_validation_messages(exc)})

    @app.exception_handler(TransactionFailedError)
    async def transaction_failed_handler(request: Request, exc: TransactionFailedError):
        logger.error("Transaction failed", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"error": {"transaction": ["The operation could not be completed, please retry"]}},
        )
