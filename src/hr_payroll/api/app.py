"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll import __version__
from hr_payroll.api.routes import (
    employees_router,
    health_router,
    payroll_router,
    references_router,
    settings_router,
)
from hr_payroll.database import create_schema, init_db
from hr_payroll.errors import PayrollCoreError

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

ERROR_STATUS: dict[str, int] = {
    "VALIDATION_FAILED": 422,
    "REFERENCE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DUPLICATE": status.HTTP_409_CONFLICT,
    "PERIOD_LOCKED": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "TRANSACTION_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Bind the configured database unless a session factory was injected."""
    if app.state.session_factory is None:
        engine, session_factory = init_db()
        create_schema(engine)
        app.state.session_factory = session_factory
        logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    yield


async def handle_core_error(request: Request, exc: PayrollCoreError) -> JSONResponse:
    if exc.code == "TRANSACTION_FAILED":
        logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content=exc.to_dict(),
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and paths use the same error shape as core failures."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request is malformed",
            "code": "VALIDATION_FAILED",
            "errors": [
                {
                    "field": ".".join(str(part) for part in error["loc"]),
                    "reason": error["msg"],
                }
                for error in jsonable_encoder(exc.errors())
            ],
        },
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred", "code": "INTERNAL_ERROR"},
    )


def create_app(session_factory: sessionmaker[Session] | None = None) -> FastAPI:
    """Build the API.

    Tests inject their own session factory; otherwise DATABASE_URL is
    opened and its schema created on startup.
    """
    app = FastAPI(
        title="HR Payroll Core API",
        description="Employee provisioning and payroll computation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.session_factory = session_factory

    app.add_exception_handler(PayrollCoreError, handle_core_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected)

    app.include_router(health_router)
    for router in (references_router, employees_router, settings_router, payroll_router):
        app.include_router(router, prefix=API_PREFIX)

    return app


# Default app instance for uvicorn
app = create_app()
