"""Representative resolution by postal code or name.

Postal code pipeline:

1. Normalize and validate (malformed input fails before any I/O).
2. Postal code cache.
3. On a miss, the upstream Represent lookup (coalesced per postal code);
   a successful answer is written back to the cache.
4. Upstream person identifier, when present, wins outright.
5. District name reconciliation against the roster.
6. Manual postal code mappings.
7. Not found.

Upstream and cache-write failures are logged and fall through to the next
tier; only validation errors reach the caller.
"""

import enum
from dataclasses import dataclass
from typing import Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.core.inflight import InFlightRegistry
from mp_api.lib.postal_code import parse_postal_code
from mp_api.lib.reconciler import MatchStrategy, reconcile_district
from mp_api.lib.represent import DistrictLookupError, UpstreamDistrict
from mp_api.models.representative import Representative
from mp_api.services import manual_mapping_service, postal_code_cache_service, representative_service


class DistrictLookup(Protocol):
    """Upstream postal code lookup (implemented by ``RepresentClient``)."""

    async def lookup(self, postal_code: str) -> UpstreamDistrict | None: ...


class ResolutionTier(enum.StrEnum):
    """Which pipeline tier produced the representative."""

    PERSON_ID = "person_id"
    RECONCILED = "reconciled"
    MANUAL_MAPPING = "manual_mapping"
    NOT_FOUND = "not_found"


@dataclass
class Resolution:
    """Result of resolving a postal code."""

    postal_code: str
    representative: Representative | None
    tier: ResolutionTier
    district_name: str | None = None
    cached: bool = False
    strategy: MatchStrategy | None = None

    @property
    def found(self) -> bool:
        return self.representative is not None


class RepresentativeResolver:
    """Resolve postal codes and names to roster representatives.

    Args:
        client: Upstream district lookup.
        inflight: Registry coalescing concurrent upstream lookups for the
            same postal code. A private one is created when omitted.
        cache_ttl_days: TTL applied to upstream answers written to the cache.
        cache_source: Source tag written with cached answers.
    """

    def __init__(
        self,
        client: DistrictLookup,
        inflight: InFlightRegistry | None = None,
        *,
        cache_ttl_days: int = 30,
        cache_source: str = "represent",
    ) -> None:
        self._client = client
        self._inflight = inflight or InFlightRegistry("postal_code")
        self._cache_ttl_days = cache_ttl_days
        self._cache_source = cache_source

    async def resolve_by_postal_code(self, session: AsyncSession, raw_postal_code: str) -> Resolution:
        """Resolve a postal code to a representative.

        Args:
            session: Database session.
            raw_postal_code: User input, in any case and spacing.

        Returns:
            Resolution; ``representative`` is None when every tier failed.

        Raises:
            PostalCodeValidationError: If the postal code is malformed.
        """
        postal_code = parse_postal_code(raw_postal_code)
        district_name: str | None = None
        person_id: str | None = None
        cached = False

        hit = await postal_code_cache_service.lookup(session, postal_code)
        if hit is not None:
            district_name = hit.district_name
            cached = True
        else:
            upstream = await self._fetch_upstream(session, postal_code)
            if upstream is not None:
                district_name = upstream.preferred_district_name
                person_id = upstream.person_id
                if upstream.representative_district_name and upstream.representative_district_name != upstream.district_name:
                    logger.bind(stage="upstream").info(
                        f"Using representative district {upstream.representative_district_name!r} "
                        f"over boundary name {upstream.district_name!r} for {postal_code}"
                    )

        if person_id:
            representative = await representative_service.get_by_person_id(session, person_id)
            if representative is not None:
                logger.bind(stage="resolve").info(f"{postal_code} resolved by person id {person_id}")
                return Resolution(postal_code, representative, ResolutionTier.PERSON_ID, district_name, cached)

        if district_name:
            roster = await representative_service.list_roster(session)
            match = reconcile_district(district_name, roster)
            if match.representative is not None:
                logger.bind(stage="resolve").info(
                    f"{postal_code} resolved via district {district_name!r} ({match.strategy})"
                )
                return Resolution(
                    postal_code,
                    match.representative,
                    ResolutionTier.RECONCILED,
                    district_name,
                    cached,
                    match.strategy,
                )
            logger.bind(stage="reconcile").info(f"No roster district matches {district_name!r} for {postal_code}")

        representative = await manual_mapping_service.find_by_postal_code(session, postal_code)
        if representative is not None:
            logger.bind(stage="resolve").info(f"{postal_code} resolved by manual mapping")
            return Resolution(postal_code, representative, ResolutionTier.MANUAL_MAPPING, district_name, cached)

        logger.bind(stage="resolve").info(f"No representative found for {postal_code}")
        return Resolution(postal_code, None, ResolutionTier.NOT_FOUND, district_name, cached)

    async def _fetch_upstream(self, session: AsyncSession, postal_code: str) -> UpstreamDistrict | None:
        try:
            upstream = await self._inflight.run(postal_code, lambda: self._client.lookup(postal_code))
        except DistrictLookupError as e:
            logger.bind(stage="upstream").warning(
                f"Upstream lookup for {postal_code} failed ({e.reason}), falling back: {e.message}"
            )
            return None
        if upstream is None:
            return None

        try:
            await postal_code_cache_service.store(
                session,
                postal_code,
                upstream.preferred_district_name,
                upstream.external_id,
                self._cache_source,
                self._cache_ttl_days,
            )
        except SQLAlchemyError:
            logger.bind(stage="cache").exception(f"Failed to cache district for {postal_code}")
            await session.rollback()
        return upstream

    async def resolve_by_name(self, session: AsyncSession, query: str) -> list[Representative]:
        """Search the roster by name; the caller decides how to present 0, 1 or many matches."""
        return await representative_service.search_by_name(session, query)

    async def get_by_identifier(self, session: AsyncSession, identifier: str) -> Representative | None:
        """Look up a representative by district name, district id or exact name."""
        return await representative_service.get_by_identifier(session, identifier)
