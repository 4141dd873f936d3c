"""FastAPI application factory for the pg-crud admin service.

The lifespan owns the connection pool: it is created on startup, handed to
the engine together with the configured whitelist, and closed on shutdown.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pg_crud import __version__
from pg_crud.api.routes import router
from pg_crud.config.settings import Settings, get_settings
from pg_crud.db.pool import close_pool, create_pool
from pg_crud.models.errors import PgCrudError
from pg_crud.observability.metrics import metrics
from pg_crud.observability.tracing import REQUEST_ID_HEADER, request_context
from pg_crud.services.row_operations import RowOperations

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "pg-crud admin API is running"

_metrics_server_started = False


def _start_metrics_server(settings: Settings) -> None:
    global _metrics_server_started
    if not settings.observability.metrics_enabled or _metrics_server_started:
        return
    metrics.start_metrics_server(settings.observability.metrics_port)
    _metrics_server_started = True
    logger.info("Metrics server listening on port %d", settings.observability.metrics_port)


def create_app(settings: Settings | None = None, engine: RowOperations | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Application settings; the global settings when omitted.
        engine: Prebuilt engine. When given, the lifespan does not create a
            pool of its own.

    Returns:
        FastAPI: Configured application.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        pool = None
        if app.state.engine is None:
            pool = await create_pool(settings.database)
            app.state.engine = RowOperations(
                pool,
                settings.admin.allowed_tables,
                schema_name=settings.database.schema_name,
            )
            metrics.set_db_pool_size(settings.database.max_pool_size)
        _start_metrics_server(settings)
        logger.info(
            "Admin API ready",
            extra={"tables": sorted(app.state.engine.allowed_tables)},
        )
        try:
            yield
        finally:
            if pool is not None:
                await close_pool(pool)
                app.state.engine = None

    app = FastAPI(title="pg-crud", version=__version__, lifespan=lifespan)
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def attach_request_id(request: Request, call_next):
        async with request_context(request.headers.get(REQUEST_ID_HEADER)) as request_id:
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(PgCrudError)
    async def handle_engine_error(_: Request, exc: PgCrudError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error."})

    app.include_router(router, prefix=settings.server.api_prefix, tags=["admin"])

    @app.get("/api/health")
    def health() -> dict:
        return {"message": HEALTH_MESSAGE}

    return app
