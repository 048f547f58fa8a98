import logging
import math
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.responses import failure
from .api.routes import company, contacts, credits, emails, employees, search
from .config import Settings, load_settings
from .errors import GatewayError, NetworkError, RateLimitExceeded, UpstreamError, ValidationError
from .logging_utils import configure_logging, utc_now_iso
from .services.gateway_service import GatewayService

logger = logging.getLogger(__name__)


def _client_message(exc: GatewayError) -> str:
    # Upstream bodies were already logged in full by the client.
    if isinstance(exc, UpstreamError):
        return f"Upstream service error ({exc.status})"
    if isinstance(exc, NetworkError):
        return "Upstream service unreachable"
    return exc.message or type(exc).__name__


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    headers: dict[str, str] = {}
    extra: dict[str, Any] = {}
    if isinstance(exc, ValidationError):
        extra["details"] = exc.details
    if isinstance(exc, RateLimitExceeded) and exc.retry_after is not None:
        extra["retry_after"] = exc.retry_after
        headers["Retry-After"] = str(max(1, math.ceil(exc.retry_after)))
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(_client_message(exc), **extra),
        headers=headers or None,
    )


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        details.append(f"{field}: {error.get('msg', 'invalid value')}")
    return JSONResponse(status_code=400, content=failure("Validation failed", details=details))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=failure("Internal server error"))


def create_app(settings: Settings | None = None, gateway: GatewayService | None = None) -> FastAPI:
    """Build the API. Without explicit settings the environment must provide an API key."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = gateway or GatewayService.from_settings(settings)
        app.state.gateway = service
        logger.info("Gateway started against %s", settings.base_url)
        try:
            yield
        finally:
            await service.close()
            logger.info("Gateway connections closed")

    app = FastAPI(title="Lead generation gateway", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_origin.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    for module in (search, contacts, emails, company, employees, credits):
        app.include_router(module.router)

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        report = await request.app.state.gateway.health()
        status_code = 200 if report["status"] == "healthy" else 503
        return JSONResponse(
            status_code=status_code,
            content={
                "status": report["status"],
                "timestamp": utc_now_iso(),
                "contactout": report["details"],
            },
        )

    return app


def run() -> None:
    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
