"""Grocer FastAPI application.

Usage:
    grocer serve
    uvicorn grocer.infrastructure.api.app:create_app --factory
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from grocer.domain.exceptions import (
    ConflictError,
    DomainException,
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    ReservationUnderflowError,
    ValidationError,
)
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.repository.unit_of_work import UnitOfWorkFactory
from grocer.infrastructure import bootstrap
from grocer.infrastructure.api.routes import (
    cart_router,
    checkout_router,
    inventory_router,
    order_router,
    stock_journal_router,
)
from grocer.infrastructure.api.schemas import failure
from grocer.infrastructure.config import Settings
from grocer.infrastructure.logging import bind_request_context, clear_request_context

logger = structlog.get_logger(__name__)

# First match wins, so subclasses come before their bases.
STATUS_BY_ERROR: tuple[tuple[type[DomainException], int], ...] = (
    (InsufficientStockError, status.HTTP_400_BAD_REQUEST),
    (ReservationUnderflowError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: DomainException) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainException) -> JSONResponse:
    code = status_for(exc)
    if isinstance(exc, PersistenceError):
        return JSONResponse(status_code=code, content=failure("Internal server error"))

    extra = {}
    if isinstance(exc, InsufficientStockError):
        extra = {"available": exc.available, "requested": exc.requested}
    logger.info("request_rejected", path=request.url.path, status=code, error=str(exc))
    return JSONResponse(status_code=code, content=failure(str(exc), **extra))


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=failure(str(exc.detail)))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=failure(f"{field}: {message}" if field else message),
    )


def create_app(
    uow_factory: UnitOfWorkFactory | None = None,
    settings: Settings | None = None,
    clock: Clock = utc_now,
) -> FastAPI:
    app = FastAPI(
        title="Grocer API",
        description="Multi-store inventory, stock ledger and checkout",
    )
    app.state.settings = settings or bootstrap.settings()
    app.state.uow_factory = uow_factory or bootstrap.unit_of_work
    app.state.clock = clock

    app.add_exception_handler(DomainException, domain_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        clear_request_context()
        bind_request_context(
            request_id=request.headers.get("X-Request-Id") or uuid.uuid4().hex,
            path=request.url.path,
        )
        return await call_next(request)

    app.include_router(stock_journal_router)
    app.include_router(inventory_router)
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(order_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "grocer"}

    return app
