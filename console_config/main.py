"""ASGI application for the configuration console."""

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from structlog.contextvars import bound_contextvars

from console_config import __version__
from console_config.api.v1.router import api_router
from console_config.config import Settings, get_settings
from console_config.dependencies import ConfigContainer
from console_config.utils.logging import setup_logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "config-console-service"

REQUEST_ID_HEADER = b"x-request-id"
USER_ID_HEADER = b"x-user-id"


class RequestContextMiddleware:
    """Tags each request with an id and binds it, with the operator id, into the log context.

    Pure ASGI so streaming responses are not buffered.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = {name.lower(): value for name, value in scope.get("headers", [])}
        request_id = incoming.get(REQUEST_ID_HEADER, b"").decode() or uuid.uuid4().hex
        user_id = incoming.get(USER_ID_HEADER, b"").decode() or "anonymous"
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (REQUEST_ID_HEADER, request_id.encode()),
                ]
            await send(message)

        with bound_contextvars(request_id=request_id, user_id=user_id):
            await self.app(scope, receive, send_wrapper)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the configuration container unless one was injected, and close it on exit."""
    settings: Settings = app.state.settings
    container: ConfigContainer | None = getattr(app.state, "container", None)

    if container is None:
        logger.info(
            "Starting %s (environment=%s, storage=%s)",
            SERVICE_NAME,
            settings.environment,
            settings.storage_backend,
        )
        try:
            container = ConfigContainer.from_settings(settings)
            container.start()
        except Exception:
            logger.exception("Configuration engine failed to start")
            raise
        app.state.container = container

    try:
        yield
    finally:
        try:
            container.close()
        except Exception:
            logger.exception("Error while closing storage connection")
        logger.info("%s stopped", SERVICE_NAME)


async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, asyncio.CancelledError):
        raise exc
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_application(
    settings: Settings | None = None,
    container: ConfigContainer | None = None,
) -> FastAPI:
    """Application factory.

    A pre-built *container* is used as-is and skips startup migration.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Configuration Console API",
        description="Global, project and user configuration with validation and backups.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    if container is not None:
        app.state.container = container

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "X-Request-ID", "X-User-Id", "X-User-Role"],
    )
    app.add_exception_handler(Exception, _internal_error)
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}

    return app


def run() -> None:
    """Console-script entry point: serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "console_config.main:create_application",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
