import logging
import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from newsletter_service.api.deps import AppContext, build_context
from newsletter_service.api.routes import health, newsletters, subscriptions
from newsletter_service.config import Settings, load_settings
from newsletter_service.telemetry import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    context: AppContext = app.state.context
    logger.info(
        "Newsletter service starting (db=%s, base_url=%s)",
        context.db_path,
        context.settings.application.base_url,
    )

    yield

    close = getattr(context.email_sender, "close", None)
    if callable(close):
        close()
    logger.info("Newsletter service stopped")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed request fields are a client error: 400, not 422."""
    fields = sorted({".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()})
    logger.info("Rejected malformed request to %s (fields=%s)", request.url.path, fields)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Invalid or missing fields: {', '.join(fields) or 'body'}"},
    )


async def request_context_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    request_id = str(uuid4())
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        request_id_var.reset(token)


def create_app(
    settings: Settings | None = None,
    context: AppContext | None = None,
) -> FastAPI:
    """
    Build the application.

    Collaborators (settings, email transport, password hasher) are created
    once here and shared by every request through app.state.
    """
    if context is None:
        context = build_context(settings or load_settings())

    app = FastAPI(
        title="Newsletter Service API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.context = context

    app.add_exception_handler(
        RequestValidationError, request_validation_handler  # type: ignore[arg-type]
    )
    app.middleware("http")(request_context_middleware)

    # --- Routers ---
    app.include_router(health.router, tags=["Health"])
    app.include_router(subscriptions.router, tags=["Subscriptions"])
    app.include_router(newsletters.router, tags=["Newsletters"])

    return app
