"""Party loyalty stats cache: one snapshot per representative."""

from collections.abc import Sized
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.core.database import dialect_insert
from mp_api.lib.loyalty import PartyLoyaltyStats
from mp_api.models.party_loyalty import PartyLoyaltySnapshot


async def get_snapshot(session: AsyncSession, representative_id: int) -> PartyLoyaltySnapshot | None:
    """Return the stored snapshot regardless of validity."""
    result = await session.execute(
        select(PartyLoyaltySnapshot).where(PartyLoyaltySnapshot.representative_id == representative_id)
    )
    return result.scalar_one_or_none()


async def get(session: AsyncSession, representative_id: int, current_votes: Sized) -> PartyLoyaltySnapshot | None:
    """Return the stored snapshot only if it still describes ``current_votes``.

    A snapshot is valid when its four buckets sum to exactly the number of
    votes now on record; anything else must be recomputed.

    Args:
        session: Database session.
        representative_id: Representative primary key.
        current_votes: The session-filtered vote set.

    Returns:
        The valid snapshot, or None.
    """
    snapshot = await get_snapshot(session, representative_id)
    if snapshot is None:
        return None
    if snapshot.bucket_total != len(current_votes):
        logger.bind(stage="loyalty").info(
            f"Loyalty snapshot for representative {representative_id} is stale "
            f"({snapshot.bucket_total} bucketed vs {len(current_votes)} votes)"
        )
        return None
    return snapshot


async def put(session: AsyncSession, representative_id: int, stats: PartyLoyaltyStats) -> PartyLoyaltySnapshot:
    """Overwrite the snapshot for a representative with freshly computed stats."""
    values = {
        "votes_with_party": stats.votes_with_party,
        "votes_against_party": stats.votes_against_party,
        "free_votes": stats.free_votes,
        "abstained_paired_votes": stats.abstained_paired_votes,
        "loyalty_percentage": stats.loyalty_percentage,
        "opposition_percentage": stats.opposition_percentage,
        "free_vote_percentage": stats.free_vote_percentage,
        "computed_at": datetime.now(UTC),
    }
    stmt = dialect_insert(session, PartyLoyaltySnapshot).values(representative_id=representative_id, **values)
    stmt = stmt.on_conflict_do_update(index_elements=["representative_id"], set_=values)
    await session.execute(stmt)
    await session.commit()

    snapshot = await get_snapshot(session, representative_id)
    if snapshot is None:
        msg = f"Loyalty snapshot for representative {representative_id} missing after upsert"
        raise RuntimeError(msg)
    await session.refresh(snapshot)
    return snapshot


async def clear(session: AsyncSession) -> int:
    """Delete every snapshot and return how many were removed."""
    result = await session.execute(delete(PartyLoyaltySnapshot))
    await session.commit()
    return result.rowcount or 0
