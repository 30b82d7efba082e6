"""Tests for the postal code and name resolution pipeline."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mp_api.lib.postal_code import PostalCodeValidationError
from mp_api.lib.reconciler import MatchStrategy
from mp_api.lib.represent import DistrictLookupError, LookupFailureReason, UpstreamDistrict
from mp_api.models.postal_code import PostalCodeCacheEntry
from mp_api.models.representative import Representative
from mp_api.services import postal_code_cache_service
from mp_api.services.manual_mapping_service import MappingRow, import_mappings
from mp_api.services.resolver_service import RepresentativeResolver, ResolutionTier


class FakeDistrictLookup:
    """Records calls and returns a canned answer or raises a canned error."""

    def __init__(
        self,
        answer: UpstreamDistrict | None = None,
        error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.answer = answer
        self.error = error
        self.gate = gate
        self.calls: list[str] = []

    async def lookup(self, postal_code: str) -> UpstreamDistrict | None:
        self.calls.append(postal_code)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.answer


class TestResolveByPostalCode:
    @pytest.mark.asyncio
    async def test_invalid_postal_code_raises_before_any_io(self, async_session: AsyncSession) -> None:
        client = FakeDistrictLookup(UpstreamDistrict("Ottawa Centre"))
        resolver = RepresentativeResolver(client)

        with pytest.raises(PostalCodeValidationError):
            await resolver.resolve_by_postal_code(async_session, "12345")
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_cache_miss_calls_upstream_once_and_stores(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        client = FakeDistrictLookup(UpstreamDistrict("Ottawa Centre", external_id="35080"))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "k1a 0a6")

        assert client.calls == ["K1A0A6"]
        assert resolution.found
        assert resolution.representative.id == roster["ottawa"].id
        assert resolution.tier == ResolutionTier.RECONCILED
        assert resolution.strategy == MatchStrategy.EXACT
        assert resolution.cached is False
        hit = await postal_code_cache_service.lookup(async_session, "K1A0A6")
        assert hit is not None
        assert hit.district_name == "Ottawa Centre"
        assert hit.external_id == "35080"

    @pytest.mark.asyncio
    async def test_cache_hit_makes_no_upstream_call(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        await postal_code_cache_service.store(async_session, "K1A0A6", "Ottawa Centre", None, "represent", 30)
        client = FakeDistrictLookup(UpstreamDistrict("Somewhere Else"))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "K1A 0A6")

        assert client.calls == []
        assert resolution.cached is True
        assert resolution.representative.id == roster["ottawa"].id

    @pytest.mark.asyncio
    async def test_second_request_is_served_from_cache(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        client = FakeDistrictLookup(UpstreamDistrict("Ottawa Centre"))
        resolver = RepresentativeResolver(client)

        await resolver.resolve_by_postal_code(async_session, "K1A0A6")
        second = await resolver.resolve_by_postal_code(async_session, "K1A0A6")

        assert client.calls == ["K1A0A6"]
        assert second.cached is True

    @pytest.mark.asyncio
    async def test_person_id_takes_precedence_over_district(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        client = FakeDistrictLookup(UpstreamDistrict("Ottawa Centre", person_id="88600"))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "K1A0A6")

        assert resolution.tier == ResolutionTier.PERSON_ID
        assert resolution.representative.id == roster["west"].id

    @pytest.mark.asyncio
    async def test_unknown_person_id_falls_back_to_district(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        client = FakeDistrictLookup(UpstreamDistrict("Ottawa Centre", person_id="999999"))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "K1A0A6")

        assert resolution.tier == ResolutionTier.RECONCILED
        assert resolution.representative.id == roster["ottawa"].id

    @pytest.mark.asyncio
    async def test_redistricted_riding_resolves_deterministically(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        client = FakeDistrictLookup(UpstreamDistrict("Oakville"))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "L6H0A1")

        assert resolution.representative.district_name == "Oakville East"
        assert resolution.strategy == MatchStrategy.FUZZY_PREFIX

    @pytest.mark.asyncio
    async def test_representative_district_name_preferred_and_cached(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        client = FakeDistrictLookup(UpstreamDistrict("Oakville", representative_district_name="Oakville West"))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "L6H0A1")

        assert resolution.representative.district_name == "Oakville West"
        hit = await postal_code_cache_service.lookup(async_session, "L6H0A1")
        assert hit is not None
        assert hit.district_name == "Oakville West"

    @pytest.mark.asyncio
    async def test_upstream_timeout_falls_through_to_manual_mapping(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        await import_mappings(async_session, [MappingRow("X0A0H0", representative_id=roster["ottawa"].id)])
        client = FakeDistrictLookup(error=DistrictLookupError(LookupFailureReason.TIMEOUT, "timed out"))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "X0A 0H0")

        assert resolution.tier == ResolutionTier.MANUAL_MAPPING
        assert resolution.representative.id == roster["ottawa"].id
        assert await postal_code_cache_service.lookup(async_session, "X0A0H0") is None

    @pytest.mark.asyncio
    async def test_unmatched_district_falls_through_to_manual_mapping(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        await import_mappings(async_session, [MappingRow("X0A0H0", district_name="Ottawa Centre")])
        client = FakeDistrictLookup(UpstreamDistrict("Nunavut"))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "X0A0H0")

        assert resolution.tier == ResolutionTier.MANUAL_MAPPING
        assert resolution.district_name == "Nunavut"

    @pytest.mark.asyncio
    async def test_not_found(self, async_session: AsyncSession, roster: dict[str, Representative]) -> None:
        client = FakeDistrictLookup(error=DistrictLookupError(LookupFailureReason.NOT_FOUND, "nope", 404))
        resolver = RepresentativeResolver(client)

        resolution = await resolver.resolve_by_postal_code(async_session, "K1A0A6")

        assert resolution.found is False
        assert resolution.tier == ResolutionTier.NOT_FOUND

    @pytest.mark.asyncio
    async def test_cache_write_failure_still_resolves(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        client = FakeDistrictLookup(UpstreamDistrict("Ottawa Centre"))
        resolver = RepresentativeResolver(client)
        ottawa_id = roster["ottawa"].id
        failing_store = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk full")))

        with patch.object(postal_code_cache_service, "store", failing_store):
            resolution = await resolver.resolve_by_postal_code(async_session, "K1A0A6")

        assert resolution.representative.id == ottawa_id
        count = (await async_session.execute(select(func.count()).select_from(PostalCodeCacheEntry))).scalar_one()
        assert count == 0

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_upstream_call(
        self, async_engine: AsyncEngine, roster: dict[str, Representative]
    ) -> None:
        gate = asyncio.Event()
        client = FakeDistrictLookup(UpstreamDistrict("Ottawa Centre"), gate=gate)
        resolver = RepresentativeResolver(client)
        factory = async_sessionmaker(async_engine, expire_on_commit=False)

        async def resolve() -> int | None:
            async with factory() as session:
                resolution = await resolver.resolve_by_postal_code(session, "K1A0A6")
                return resolution.representative.id if resolution.representative else None

        tasks = [asyncio.create_task(resolve()) for _ in range(3)]
        await asyncio.sleep(0.2)
        gate.set()
        results = await asyncio.gather(*tasks)

        assert client.calls == ["K1A0A6"]
        assert results == [roster["ottawa"].id] * 3


class TestResolveByName:
    @pytest.mark.asyncio
    async def test_returns_every_match(self, async_session: AsyncSession, roster: dict[str, Representative]) -> None:
        resolver = RepresentativeResolver(FakeDistrictLookup())

        matches = await resolver.resolve_by_name(async_session, "oakville")

        assert matches == []
        assert len(await resolver.resolve_by_name(async_session, "a")) == 3

    @pytest.mark.asyncio
    async def test_get_by_identifier(self, async_session: AsyncSession, roster: dict[str, Representative]) -> None:
        resolver = RepresentativeResolver(FakeDistrictLookup())

        rep = await resolver.get_by_identifier(async_session, "Oakville West")

        assert rep is not None
        assert rep.name == "Pam Damoff"
