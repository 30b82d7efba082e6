"""FastAPI dependency injection for per-application resources.

Every long-lived resource (database handle, upstream client, caches, task
runner) is created by the application lifespan and kept on ``app.state``.
The dependencies below hand them to endpoints; tests replace them through
``app.dependency_overrides``.
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.core.background import BackgroundTaskRunner
from mp_api.core.config import Settings
from mp_api.core.database import Database
from mp_api.services.bill_category_service import BillCategoryCache
from mp_api.services.resolver_service import RepresentativeResolver


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Return the application's database handle."""
    return request.app.state.database


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session


def get_resolver(request: Request) -> RepresentativeResolver:
    """Return the representative resolver."""
    return request.app.state.resolver


def get_bill_category_cache(request: Request) -> BillCategoryCache:
    """Return the bill category cache."""
    return request.app.state.bill_category_cache


def get_task_runner(request: Request) -> BackgroundTaskRunner:
    """Return the background task runner."""
    return request.app.state.task_runner
