"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from mp_api.core.background import InProcessTaskRunner
from mp_api.core.config import Settings, get_settings
from mp_api.core.database import Database
from mp_api.core.inflight import InFlightRegistry
from mp_api.core.logging import setup_logging
from mp_api.lib.bills import build_classifier
from mp_api.lib.represent import RepresentClient
from mp_api.services.bill_category_service import BillCategoryCache
from mp_api.services.resolver_service import RepresentativeResolver


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Build per-application resources on startup and release them on shutdown."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_dir)

    database = Database(settings.database_url, schema=settings.database_schema, echo=False)
    represent_client = RepresentClient(settings.represent_base_url, timeout=settings.represent_timeout)
    classifier = build_classifier(settings)
    task_runner = InProcessTaskRunner()

    app.state.database = database
    app.state.task_runner = task_runner
    app.state.resolver = RepresentativeResolver(
        represent_client,
        InFlightRegistry("postal_code"),
        cache_ttl_days=settings.postal_code_cache_ttl_days,
        cache_source=settings.postal_code_cache_source,
    )
    app.state.bill_category_cache = BillCategoryCache(classifier, InFlightRegistry("bill_category"))
    logger.info(f"Started mp-api ({settings.environment}) with {classifier.source_name} bill classification")

    yield

    await task_runner.shutdown()
    if task_runner.failure_count:
        logger.warning(f"{task_runner.failure_count} background jobs failed during this run")
    await represent_client.close()
    close_classifier = getattr(classifier, "close", None)
    if close_classifier is not None:
        await close_classifier()
    await database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings; loaded from the environment when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="MP API",
        description="Find Canadian Members of Parliament by postal code or name, with voting statistics",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Register exception handlers
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    # Register middleware and routers
    from mp_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
