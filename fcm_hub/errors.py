"""Exception handlers that shape every failure into a JSON ``{"error": ...}`` envelope."""
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging import get_logger


log = get_logger(__name__)


def database_error_payload(exc: SQLAlchemyError) -> dict:
    """Surface the driver message, SQLSTATE, details and hint like the hosted DB API does."""
    orig = getattr(exc, "orig", None) if isinstance(exc, DBAPIError) else None
    diag = getattr(orig, "diag", None)
    return {
        "error": str(orig) if orig is not None else str(exc),
        "code": getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None) or exc.__class__.__name__,
        "details": getattr(diag, "message_detail", None),
        "hint": getattr(diag, "message_hint", None),
    }


def is_unique_violation(exc: SQLAlchemyError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23505" or getattr(orig, "sqlstate", None) == "23505":
        return True
    message = str(orig or exc).lower()
    return "unique" in message or "duplicate" in message


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    payload = database_error_payload(exc)
    log.error("database_error", method=request.method, path=request.url.path, **payload)
    return JSONResponse(payload, status_code=500)


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    log.warning("rate_limited", path=request.url.path, limit=str(exc.detail))
    return JSONResponse({"error": f"Rate limit exceeded: {exc.detail}"}, status_code=429)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
