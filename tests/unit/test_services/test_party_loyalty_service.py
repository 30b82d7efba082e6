"""Tests for the party loyalty snapshot cache."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.lib.loyalty import PartyLoyaltyStats
from mp_api.models.party_loyalty import PartyLoyaltySnapshot
from mp_api.models.representative import Representative
from mp_api.services import party_loyalty_service


class TestPartyLoyaltyService:
    @pytest.mark.asyncio
    async def test_put_then_get_with_matching_vote_count(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        rep_id = roster["east"].id
        stats = PartyLoyaltyStats(votes_with_party=30, votes_against_party=2, free_votes=6, abstained_paired_votes=2)

        stored = await party_loyalty_service.put(async_session, rep_id, stats)
        fetched = await party_loyalty_service.get(async_session, rep_id, [object()] * 40)

        assert stored.bucket_total == 40
        assert stored.loyalty_percentage == pytest.approx(75.0)
        assert fetched is not None
        assert fetched.votes_with_party == 30

    @pytest.mark.asyncio
    async def test_snapshot_is_stale_when_vote_count_differs(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        rep_id = roster["east"].id
        await party_loyalty_service.put(async_session, rep_id, PartyLoyaltyStats(votes_with_party=40))

        assert await party_loyalty_service.get(async_session, rep_id, [object()] * 42) is None
        assert await party_loyalty_service.get_snapshot(async_session, rep_id) is not None

    @pytest.mark.asyncio
    async def test_put_overwrites_single_row(
        self, async_session: AsyncSession, roster: dict[str, Representative]
    ) -> None:
        rep_id = roster["east"].id
        await party_loyalty_service.put(async_session, rep_id, PartyLoyaltyStats(votes_with_party=1))
        updated = await party_loyalty_service.put(async_session, rep_id, PartyLoyaltyStats(free_votes=3))

        count = (await async_session.execute(select(func.count()).select_from(PartyLoyaltySnapshot))).scalar_one()
        assert count == 1
        assert updated.votes_with_party == 0
        assert updated.free_votes == 3
        assert updated.free_vote_percentage == pytest.approx(100.0)

    @pytest.mark.asyncio
    async def test_missing_snapshot(self, async_session: AsyncSession, roster: dict[str, Representative]) -> None:
        assert await party_loyalty_service.get(async_session, roster["east"].id, []) is None

    @pytest.mark.asyncio
    async def test_clear(self, async_session: AsyncSession, roster: dict[str, Representative]) -> None:
        await party_loyalty_service.put(async_session, roster["east"].id, PartyLoyaltyStats(votes_with_party=1))

        assert await party_loyalty_service.clear(async_session) == 1
