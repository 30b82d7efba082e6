"""Parliament session lookups."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.models.parliament_session import ParliamentSession


async def get_current_session(session: AsyncSession) -> ParliamentSession | None:
    """Return the current session, preferring the latest start date if several are flagged."""
    result = await session.execute(
        select(ParliamentSession)
        .where(ParliamentSession.is_current.is_(True))
        .order_by(ParliamentSession.start_date.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_current_session_start_date(session: AsyncSession) -> date | None:
    """Return the current session's start date.

    None means no session is flagged current; callers then skip session
    filtering and use every vote.
    """
    current = await get_current_session(session)
    return current.start_date if current is not None else None
