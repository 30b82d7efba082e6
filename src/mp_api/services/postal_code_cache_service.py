"""Postal code cache service: TTL-bounded postal code to district mappings."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.core.database import dialect_insert
from mp_api.models.postal_code import PostalCodeCacheEntry


@dataclass(frozen=True)
class CachedDistrict:
    """An unexpired cache hit."""

    postal_code: str
    district_name: str
    external_id: str | None
    source: str


async def lookup(session: AsyncSession, postal_code: str) -> CachedDistrict | None:
    """Return the unexpired mapping for a normalized postal code.

    Expiry is compared in SQL so that an expired row reads exactly like a
    missing one.

    Args:
        session: Database session.
        postal_code: Normalized postal code (cache key).

    Returns:
        CachedDistrict on a hit, None on a miss or an expired row.
    """
    result = await session.execute(
        select(PostalCodeCacheEntry).where(
            PostalCodeCacheEntry.postal_code == postal_code,
            PostalCodeCacheEntry.expires_at > datetime.now(UTC),
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        logger.bind(stage="cache").debug(f"Postal code cache miss for {postal_code}")
        return None
    logger.bind(stage="cache").debug(f"Postal code cache hit for {postal_code}: {entry.district_name}")
    return CachedDistrict(
        postal_code=entry.postal_code,
        district_name=entry.district_name,
        external_id=entry.external_id,
        source=entry.source,
    )


async def store(
    session: AsyncSession,
    postal_code: str,
    district_name: str,
    external_id: str | None,
    source: str,
    ttl_days: int,
) -> None:
    """Insert or overwrite the mapping for a postal code.

    A single ``INSERT ... ON CONFLICT (postal_code) DO UPDATE`` keeps at most
    one row per code even when concurrent requests store the same code.

    Args:
        session: Database session.
        postal_code: Normalized postal code.
        district_name: District name to cache.
        external_id: Upstream electoral district identifier, if any.
        source: Source tag (e.g. ``"represent"``).
        ttl_days: Days until the mapping expires.
    """
    now = datetime.now(UTC)
    values = {
        "district_name": district_name,
        "external_id": external_id,
        "source": source,
        "fetched_at": now,
        "expires_at": now + timedelta(days=ttl_days),
    }
    stmt = dialect_insert(session, PostalCodeCacheEntry).values(postal_code=postal_code, **values)
    stmt = stmt.on_conflict_do_update(index_elements=["postal_code"], set_=values)
    await session.execute(stmt)
    await session.commit()
    logger.bind(stage="cache").info(f"Cached {postal_code} -> {district_name} ({source}, {ttl_days} days)")


async def purge_expired(session: AsyncSession) -> int:
    """Delete expired mappings and return how many were removed."""
    result = await session.execute(
        delete(PostalCodeCacheEntry).where(PostalCodeCacheEntry.expires_at <= datetime.now(UTC))
    )
    await session.commit()
    return result.rowcount or 0


async def clear(session: AsyncSession) -> int:
    """Delete every mapping and return how many were removed."""
    result = await session.execute(delete(PostalCodeCacheEntry))
    await session.commit()
    return result.rowcount or 0
