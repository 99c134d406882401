"""
FastAPI Application Factory & Configuration.

This module initializes the timeline service. It is responsible for:
1.  **Middleware Setup**: CORS for browser clients.
2.  **Exception Handling**: Handlers that turn store errors into JSON bodies
    with a `message` field (the field clients show to the user).
3.  **Routing**: Mounting the timeline router and the health check.
4.  **Lifecycle**: Initializing the event store and loading the seed file.

Design Pattern
--------------
An **Application Factory** (`create_app`) so tests can build isolated app
instances and pass a seed file explicitly.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sagascribe import __version__
from sagascribe.api.event_store import EventStore
from sagascribe.api.routers import timeline
from sagascribe.api.schemas import HealthPayload
from sagascribe.core.errors import NotFoundError
from sagascribe.core.settings import get_logger, load_settings

logger = get_logger(__name__)


def create_app(seed_file: Path | None = None) -> FastAPI:
    """
    Construct and configure the Saga Scribe timeline application.

    Parameters
    ----------
    seed_file:
        JSON seed document to load at startup. Defaults to
        `SAGASCRIBE_SEED_FILE` when not given.

    Returns
    -------
    FastAPI
        The configured ASGI application ready to be served by Uvicorn.
    """
    settings = load_settings()
    seed = seed_file if seed_file is not None else settings.seed_file

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Initialize the event store singleton (and seed it) before serving."""
        store = EventStore.get_instance()
        if seed is not None:
            store.load_seed(seed)
            logger.info("Loaded seed file %s", seed)
        logger.info("Saga Scribe timeline service started (%s)", settings.environment)
        yield
        logger.info("Saga Scribe timeline service shutting down")

    app = FastAPI(
        title="Saga Scribe Timeline API",
        description="Series timelines: chronological, narrative and character views",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if not settings.is_prod else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all so unhandled exceptions still return structured JSON."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": str(exc),
                "path": request.url.path,
            },
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": "Not Found", "message": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map Python ValueErrors to HTTP 400 Bad Request."""
        return JSONResponse(
            status_code=400,
            content={"error": "Bad Request", "message": str(exc)},
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(timeline.router)

    @app.get("/health", tags=["System"], response_model=HealthPayload)
    async def health_check() -> HealthPayload:
        """Simple liveness check."""
        return HealthPayload(environment=settings.environment, version=__version__)

    return app


__all__ = ["create_app"]
