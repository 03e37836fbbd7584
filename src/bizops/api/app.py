"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bizops import __version__
from bizops.api.routes import (
    directory_router,
    health_router,
    orders_router,
    supplier_orders_router,
    time_entries_router,
)
from bizops.config import configure_logging, settings
from bizops.database import create_all, init_db
from bizops.errors import BizOpsError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

# Domain errors not listed here map to 400
ERROR_STATUS: dict[type[BizOpsError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
}


def status_for(exc: BizOpsError) -> int:
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    init_db()
    await create_all()
    logger.info("bizops %s started", __version__)
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level)

    app = FastAPI(
        title="BizOps API",
        description="Time tracking, approvals, orders and supplier orders",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(BizOpsError)
    async def domain_exception_handler(request: Request, exc: BizOpsError) -> JSONResponse:
        """Render domain errors as ``{"error", "code"}``."""
        content = {"error": str(exc), "code": exc.code}
        field = getattr(exc, "field", None)
        if field:
            content["field"] = field
        return JSONResponse(status_code=status_for(exc), content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": f"{location}: {message}" if location else message,
                "code": "VALIDATION_ERROR",
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(time_entries_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(supplier_orders_router, prefix="/api")
    app.include_router(directory_router, prefix="/api")

    return app


# Default app instance for uvicorn
app = create_app()
