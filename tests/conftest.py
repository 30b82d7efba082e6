"""Shared test fixtures for settings, the async database and roster rows."""

from collections.abc import AsyncGenerator
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from mp_api.core.config import Settings
from mp_api.core.database import Database
from mp_api.models.base import Base
from mp_api.models.representative import Representative
from mp_api.models.vote import Vote


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        represent_base_url="https://represent.test",
        represent_timeout=1.0,
        background_categorization_enabled=False,
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine shared by every connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def database(async_engine: AsyncEngine) -> Database:
    """Database handle wrapping the in-memory engine."""
    return Database.from_engine(async_engine)


def _make_representative(**overrides: object) -> Representative:
    """Build an unsaved Representative with sensible defaults."""
    fields: dict[str, object] = {
        "name": "Pam Damoff",
        "first_name": "Pam",
        "last_name": "Damoff",
        "district_name": "Burlington",
        "district_id": "35076",
        "party_name": "Liberal",
    }
    fields.update(overrides)
    return Representative(**fields)


def _make_vote(representative_id: int, vote_id: str, **overrides: object) -> Vote:
    """Build an unsaved Vote with sensible defaults."""
    fields: dict[str, object] = {
        "vote_id": vote_id,
        "representative_id": representative_id,
        "date": date(2024, 3, 1),
        "motion_title": "Motion",
        "vote_type": "Yea",
        "result": "Agreed To",
    }
    fields.update(overrides)
    return Vote(**fields)


@pytest.fixture
async def roster(async_session: AsyncSession) -> dict[str, Representative]:
    """A small roster covering a split riding and an unrelated one."""
    reps = {
        "east": _make_representative(
            name="Anita Anand",
            first_name="Anita",
            last_name="Anand",
            district_name="Oakville East",
            district_id="35075",
            person_id="96081",
        ),
        "west": _make_representative(
            name="Pam Damoff",
            first_name="Pam",
            last_name="Damoff",
            district_name="Oakville West",
            district_id="35076",
            person_id="88600",
        ),
        "ottawa": _make_representative(
            name="Yasir Naqvi",
            first_name="Yasir",
            last_name="Naqvi",
            district_name="Ottawa Centre",
            district_id="35080",
            person_id="110000",
        ),
    }
    async_session.add_all(reps.values())
    await async_session.commit()
    return reps


@pytest.fixture
def representative_factory():  # type: ignore[no-untyped-def]
    """Factory building unsaved Representative rows."""
    return _make_representative


@pytest.fixture
def vote_factory():  # type: ignore[no-untyped-def]
    """Factory building unsaved Vote rows."""
    return _make_vote
