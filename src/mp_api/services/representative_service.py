"""Representative service: roster reads, name search and vote history."""

from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.models.representative import Representative
from mp_api.models.vote import Vote

NAME_SEARCH_LIMIT = 50


async def get_representative(session: AsyncSession, representative_id: int) -> Representative | None:
    """Get a representative by primary key."""
    result = await session.execute(select(Representative).where(Representative.id == representative_id))
    return result.scalar_one_or_none()


async def get_by_person_id(session: AsyncSession, person_id: str) -> Representative | None:
    """Find the representative carrying an upstream person identifier.

    The roster stores the House of Commons PersonId in ``person_id`` for
    newer imports and in ``district_id`` for older ones; both are checked.

    Args:
        session: Database session.
        person_id: Upstream person identifier.

    Returns:
        The matching representative, or None.
    """
    result = await session.execute(
        select(Representative)
        .where(or_(Representative.person_id == person_id, Representative.district_id == person_id))
        .order_by(Representative.person_id.is_(None), Representative.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_roster(session: AsyncSession) -> list[Representative]:
    """Return every representative ordered by district name, name and id."""
    result = await session.execute(
        select(Representative).order_by(Representative.district_name, Representative.name, Representative.id)
    )
    return list(result.scalars().all())


async def search_by_name(
    session: AsyncSession, query: str, *, limit: int = NAME_SEARCH_LIMIT
) -> list[Representative]:
    """Case-insensitive substring search over representative names.

    Matches ``name``, ``first_name + " " + last_name``, ``first_name`` or
    ``last_name``.

    Args:
        session: Database session.
        query: Search text; surrounding whitespace is ignored.
        limit: Maximum number of results.

    Returns:
        Matching representatives ordered by name.
    """
    term = query.strip()
    if not term:
        return []
    full_name = func.coalesce(Representative.first_name, "") + " " + func.coalesce(Representative.last_name, "")
    result = await session.execute(
        select(Representative)
        .where(
            or_(
                Representative.name.icontains(term, autoescape=True),
                full_name.icontains(term, autoescape=True),
                Representative.first_name.icontains(term, autoescape=True),
                Representative.last_name.icontains(term, autoescape=True),
            )
        )
        .order_by(Representative.name, Representative.id)
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_by_identifier(session: AsyncSession, identifier: str) -> Representative | None:
    """Look up a representative by district name, then district id, then exact name.

    Args:
        session: Database session.
        identifier: URL-decoded path identifier.

    Returns:
        The representative, or None.
    """
    for column in (Representative.district_name, Representative.district_id, Representative.name):
        result = await session.execute(
            select(Representative).where(column == identifier).order_by(Representative.id).limit(1)
        )
        representative = result.scalar_one_or_none()
        if representative is not None:
            return representative
    return None


async def search_districts(session: AsyncSession, query: str, *, limit: int = 5) -> list[str]:
    """Return distinct district names containing ``query`` (case-insensitive)."""
    term = query.strip()
    if not term:
        return []
    result = await session.execute(
        select(Representative.district_name)
        .where(Representative.district_name.icontains(term, autoescape=True))
        .distinct()
        .order_by(Representative.district_name)
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_voting_record(
    session: AsyncSession,
    representative_id: int,
    *,
    since: date | None = None,
    limit: int = 5000,
) -> list[Vote]:
    """Return a representative's votes, newest first.

    Args:
        session: Database session.
        representative_id: Representative primary key.
        since: Only votes on or after this date; None returns every vote.
        limit: Maximum number of votes.

    Returns:
        Votes ordered by date descending.
    """
    query = select(Vote).where(Vote.representative_id == representative_id)
    if since is not None:
        query = query.where(Vote.date >= since)
    query = query.order_by(Vote.date.desc(), Vote.id.desc()).limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())
