"""
HTTP entry point for the loan ledger.

``create_app()`` builds the FastAPI application; ``app`` is the instance
uvicorn serves (``uvicorn loanledger.api.main:app``).
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from loanledger import __version__
from loanledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from loanledger.api.middleware.error_handler import setup_exception_handlers
from loanledger.api.routes import (
    auth_router,
    health_router,
    materials_router,
    movements_router,
    users_router,
)
from loanledger.config import Settings, configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Migrate the schema and open the pool before serving; close the pool after."""
    from loanledger.infrastructure.storage.sqlite import close_pool, get_pool
    from loanledger.infrastructure.storage.sqlite.migrations import run_migrations

    storage = get_settings().storage
    log = logger.bind(db_path=str(storage.db_path))

    try:
        applied = await run_migrations(storage.db_path)
        failed = [r.version for r in applied if not r.success]
        if failed:
            raise RuntimeError(f"schema migration failed at v{failed[0]}")
        pool = await get_pool()
    except Exception as e:
        log.error("ledger_startup_failed", error=str(e))
        raise

    log.info(
        "ledger_ready",
        migrations_applied=[r.version for r in applied],
        pool_size=pool.pool_size,
    )
    try:
        yield
    finally:
        await close_pool()
        log.info("ledger_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Assemble the application: logging, middleware, error handlers, routers."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Loans and returns of training materials with atomic stock updates",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Starlette runs the last-added middleware first: logging wraps error handling
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    for router in (health_router, users_router, auth_router, materials_router, movements_router):
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def liveness() -> dict[str, str]:
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    api = get_settings().api
    uvicorn.run("loanledger.api.main:app", host=api.host, port=api.port, reload=api.debug)
