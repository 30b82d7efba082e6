"""Manual postal code mapping service: curated overrides for the resolver."""

from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.lib.postal_code import normalize_postal_code, validate_postal_code
from mp_api.models.postal_code import PostalCodeMapping
from mp_api.models.representative import Representative


@dataclass
class MappingRow:
    """One row of a manual mapping import."""

    postal_code: str
    representative_id: int | None = None
    district_name: str | None = None


async def find_by_postal_code(session: AsyncSession, postal_code: str) -> Representative | None:
    """Resolve a postal code through the manual mapping table.

    Mappings pointing at a representative are tried first; mappings holding
    only a district name are then joined against the roster by exact name.

    Args:
        session: Database session.
        postal_code: Normalized postal code.

    Returns:
        The mapped representative, or None.
    """
    result = await session.execute(
        select(Representative)
        .join(PostalCodeMapping, PostalCodeMapping.representative_id == Representative.id)
        .where(PostalCodeMapping.postal_code == postal_code)
        .order_by(PostalCodeMapping.id)
        .limit(1)
    )
    representative = result.scalar_one_or_none()
    if representative is not None:
        return representative

    result = await session.execute(
        select(Representative)
        .join(PostalCodeMapping, PostalCodeMapping.district_name == Representative.district_name)
        .where(PostalCodeMapping.postal_code == postal_code)
        .order_by(PostalCodeMapping.id, Representative.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def import_mappings(session: AsyncSession, rows: Iterable[MappingRow]) -> int:
    """Insert manual mappings that are not already present.

    Rows with an invalid postal code, or with neither a representative nor a
    district name, are skipped with a warning.

    Args:
        session: Database session.
        rows: Mapping rows to import.

    Returns:
        Number of mappings inserted.
    """
    existing = await session.execute(
        select(PostalCodeMapping.postal_code, PostalCodeMapping.representative_id, PostalCodeMapping.district_name)
    )
    seen = {tuple(row) for row in existing.all()}

    inserted = 0
    for row in rows:
        postal_code = normalize_postal_code(row.postal_code)
        if not validate_postal_code(postal_code):
            logger.warning(f"Skipping mapping with invalid postal code {row.postal_code!r}")
            continue
        district_name = (row.district_name or "").strip() or None
        if row.representative_id is None and district_name is None:
            logger.warning(f"Skipping mapping for {postal_code}: no representative or district")
            continue
        key = (postal_code, row.representative_id, district_name)
        if key in seen:
            continue
        session.add(
            PostalCodeMapping(
                postal_code=postal_code,
                representative_id=row.representative_id,
                district_name=district_name,
            )
        )
        seen.add(key)
        inserted += 1

    await session.commit()
    logger.info(f"Imported {inserted} manual postal code mappings")
    return inserted
