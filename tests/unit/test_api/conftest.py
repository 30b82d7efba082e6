"""Fixtures wiring the FastAPI app to the in-memory database and fakes."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.core.background import InProcessTaskRunner
from mp_api.core.config import Settings
from mp_api.core.database import Database
from mp_api.core.dependencies import (
    get_async_session,
    get_bill_category_cache,
    get_database,
    get_resolver,
    get_task_runner,
)
from mp_api.lib.bills import KeywordBillClassifier
from mp_api.lib.represent import UpstreamDistrict
from mp_api.main import create_app
from mp_api.services.bill_category_service import BillCategoryCache
from mp_api.services.resolver_service import RepresentativeResolver


class StaticDistrictLookup:
    """Upstream stand-in answering every postal code from a fixed table."""

    def __init__(self, answers: dict[str, UpstreamDistrict]) -> None:
        self.answers = answers
        self.calls: list[str] = []

    async def lookup(self, postal_code: str) -> UpstreamDistrict | None:
        self.calls.append(postal_code)
        return self.answers.get(postal_code)


@pytest.fixture
def upstream() -> StaticDistrictLookup:
    return StaticDistrictLookup({"K1A0A6": UpstreamDistrict("Ottawa Centre", external_id="35080")})


@pytest.fixture
def task_runner() -> InProcessTaskRunner:
    return InProcessTaskRunner()


def build_app(
    settings: Settings,
    session: AsyncSession,
    database: Database,
    upstream: StaticDistrictLookup,
    task_runner: InProcessTaskRunner,
) -> FastAPI:
    """Create the app with every per-application resource overridden."""
    app = create_app(settings)
    resolver = RepresentativeResolver(upstream)
    cache = BillCategoryCache(KeywordBillClassifier())

    async def _session() -> AsyncGenerator[AsyncSession]:
        yield session

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_resolver] = lambda: resolver
    app.dependency_overrides[get_bill_category_cache] = lambda: cache
    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_task_runner] = lambda: task_runner
    return app


@pytest.fixture
def app_factory(async_session: AsyncSession, database: Database, upstream: StaticDistrictLookup):  # type: ignore[no-untyped-def]
    """Build an app around the shared fixtures with custom settings and task runner."""

    def _factory(settings: Settings, task_runner: InProcessTaskRunner) -> FastAPI:
        return build_app(settings, async_session, database, upstream, task_runner)

    return _factory


@pytest.fixture
def app(
    settings: Settings,
    async_session: AsyncSession,
    database: Database,
    upstream: StaticDistrictLookup,
    task_runner: InProcessTaskRunner,
) -> FastAPI:
    return build_app(settings, async_session, database, upstream, task_runner)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
