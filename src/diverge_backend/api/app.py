"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from diverge_backend.api.admin import router as admin_router
from diverge_backend.api.sessions import router as sessions_router
from diverge_backend.api.stats import router as stats_router
from diverge_backend.app_logging import configure_logging
from diverge_backend.config import explorer_network, missing_ledger_settings
from diverge_backend.containers import AppContainer
from diverge_backend.domain.encoding import explorer_url
from diverge_backend.domain.errors import (
    DivergeError,
    LedgerError,
    TransactionTimeoutError,
    ValidationError,
)

SERVICE_NAME = "DIVERGE Backend API"
SERVICE_VERSION = "1.0.0"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    network = explorer_network(container.settings.network_passphrase)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        missing = missing_ledger_settings(app.state.container.settings)
        if missing:
            logger.warning("Missing ledger settings: %s", ", ".join(missing))
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.middleware("http")
    async def require_ledger_settings(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        state_container: AppContainer = request.app.state.container
        missing = missing_ledger_settings(state_container.settings)
        if missing:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "error": f"Missing environment variables: {', '.join(missing)}",
                    "message": "The server is not configured correctly",
                },
            )
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[container.settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DivergeError)
    async def handle_diverge_error(request: Request, exc: DivergeError) -> JSONResponse:
        content: dict[str, object] = {"success": False, "error": exc.message}
        if isinstance(exc, ValidationError):
            content["field"] = exc.field
        if isinstance(exc, LedgerError) and exc.transaction_hash:
            content["transaction_hash"] = exc.transaction_hash
            content["explorer_url"] = explorer_url(network, exc.transaction_hash)
        if isinstance(exc, TransactionTimeoutError):
            content["last_status"] = exc.last_status
        if exc.http_status >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed: %s",
                exc.message,
                extra={"path": request.url.path, "error_type": type(exc).__name__},
            )
        return JSONResponse(status_code=exc.http_status, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        detail = errors[0] if errors else {}
        parts = [part for part in detail.get("loc", ()) if part != "body"]
        location = ".".join(str(part) for part in parts)
        message = detail.get("msg", "Invalid request body")
        content: dict[str, object] = {
            "success": False,
            "error": f"{location} {message}".strip(),
        }
        if parts and isinstance(parts[0], str):
            content["field"] = parts[0]
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)

    app.include_router(sessions_router)
    app.include_router(stats_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "timestamp": datetime.now(tz=UTC).isoformat(),
        }

    @app.get("/")
    async def index() -> dict[str, object]:
        """Describe the service and its endpoints."""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "endpoints": {
                "health": "/health",
                "recordSession": "POST /api/sessions/record",
                "getMonthlyCount": "POST /api/sessions/monthly-count",
                "getMonthlyStats": "POST /api/stats/monthly",
                "setTherapist": "POST /admin/therapists",
            },
        }

    return app
