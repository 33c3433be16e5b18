from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool
from app.core.config import Settings, get_settings
from app.core.middleware_correlation import CorrelationIdMiddleware
from app.core.logging import get_logger, setup_logging
from app.core.errors import register_exception_handlers
from app.db.session import Database, connect

# Routers
from app.api.routes.authors import router as authors_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Connect to the database before serving unless a handle was injected.
    A StartupError raised here aborts startup.
    """
    owned: Database | None = None
    if getattr(app.state, "database", None) is None:
        settings: Settings = app.state.settings
        get_logger(__name__).info(
            "Connecting to postgres at %s:%d",
            settings.postgres.host,
            settings.postgres.port,
        )
        owned = await run_in_threadpool(connect, settings)
        app.state.database = owned
    try:
        yield
    finally:
        if owned is not None:
            owned.dispose()
            app.state.database = None


def create_app(
    database: Database | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, log_sql=settings.log_sql)

    app = FastAPI(
        title=settings.project_name,
        description="Authors API - CRUD over a single author resource.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    # Middlewares
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    # Mount routers
    app.include_router(authors_router)
    return app


app = create_app()
