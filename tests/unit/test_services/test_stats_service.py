"""Tests for assembling representative statistics."""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.lib.bills import KeywordBillClassifier
from mp_api.models.bill_category import BillCategoryAssignment
from mp_api.models.bill_sponsorship import BillSponsorship
from mp_api.models.parliament_session import ParliamentSession
from mp_api.models.representative import Representative
from mp_api.services import session_service
from mp_api.services.bill_category_service import BillCategoryCache
from mp_api.services.stats_service import build_motion_breakdown, build_representative_stats

SESSION_START = date(2021, 11, 22)


@pytest.fixture
async def current_session(async_session: AsyncSession) -> ParliamentSession:
    async_session.add(ParliamentSession(session_number="43-2", start_date=date(2020, 9, 23), is_current=False))
    parliament = ParliamentSession(session_number="44-1", start_date=SESSION_START, is_current=True)
    async_session.add(parliament)
    await async_session.commit()
    return parliament


@pytest.fixture
def cache() -> BillCategoryCache:
    return BillCategoryCache(KeywordBillClassifier())


class TestSessionService:
    @pytest.mark.asyncio
    async def test_current_session_start_date(self, async_session: AsyncSession, current_session) -> None:
        assert await session_service.get_current_session_start_date(async_session) == SESSION_START

    @pytest.mark.asyncio
    async def test_no_current_session(self, async_session: AsyncSession) -> None:
        assert await session_service.get_current_session_start_date(async_session) is None


class TestBuildRepresentativeStats:
    @pytest.mark.asyncio
    async def test_unbucketed_votes_mark_data_invalid(
        self,
        async_session: AsyncSession,
        roster: dict[str, Representative],
        current_session,
        vote_factory,
        cache: BillCategoryCache,
    ) -> None:
        rep = roster["east"]
        votes = [
            vote_factory(
                rep.id,
                f"own-{n}",
                date=date(2022, 2, 1),
                bill_number="C-10",
                motion_title="Bill C-10, affordable housing and rent",
                sponsor_party="Liberal",
            )
            for n in range(40)
        ]
        votes += [
            vote_factory(
                rep.id,
                f"other-{n}",
                date=date(2022, 2, 2),
                bill_number="C-201",
                motion_title="Bill C-201, carbon emission reporting",
                vote_type="Nay",
                sponsor_party="Conservative",
            )
            for n in range(2)
        ]
        votes.append(vote_factory(rep.id, "old-session", date=date(2021, 1, 1), bill_number="C-1"))
        async_session.add_all(votes)
        await async_session.commit()

        stats = await build_representative_stats(async_session, cache, rep)

        assert stats.voting_record.total_votes == 42
        assert stats.party_loyalty.total_votes == 42
        assert stats.party_loyalty.votes_with_party == 40
        assert stats.party_loyalty.bucket_total == 40
        assert stats.data_valid is False
        assert stats.voting_record.votes[0].id.startswith("other-")
        assert stats.voting_record.votes[0].category == "Environment & Climate"

    @pytest.mark.asyncio
    async def test_valid_snapshot_is_reused(
        self,
        async_session: AsyncSession,
        roster: dict[str, Representative],
        current_session,
        vote_factory,
        cache: BillCategoryCache,
    ) -> None:
        rep = roster["west"]
        async_session.add_all(
            [
                vote_factory(rep.id, "1", date=date(2022, 5, 1), bill_number="C-5", sponsor_party="Liberal"),
                vote_factory(rep.id, "2", date=date(2022, 5, 2), bill_number="C-6", sponsor_party="NDP"),
                vote_factory(
                    rep.id, "3", date=date(2022, 5, 3), bill_number="C-7", sponsor_party="NDP", vote_type="Paired"
                ),
            ]
        )
        await async_session.commit()

        first = await build_representative_stats(async_session, cache, rep)
        second = await build_representative_stats(async_session, cache, rep)

        assert first.data_valid is True
        assert first.party_loyalty.cached is False
        assert second.party_loyalty.cached is True
        assert second.party_loyalty.votes_with_party == 1
        assert second.party_loyalty.free_votes == 1
        assert second.party_loyalty.abstained_paired_votes == 1

    @pytest.mark.asyncio
    async def test_without_current_session_every_vote_counts(
        self,
        async_session: AsyncSession,
        roster: dict[str, Representative],
        vote_factory,
        cache: BillCategoryCache,
    ) -> None:
        rep = roster["east"]
        async_session.add_all(
            [
                vote_factory(rep.id, "1", date=date(2015, 1, 1), bill_number="C-5", sponsor_party="Liberal"),
                vote_factory(rep.id, "2", date=date(2023, 1, 1), bill_number="C-6", sponsor_party="Liberal"),
            ]
        )
        await async_session.commit()

        stats = await build_representative_stats(async_session, cache, rep)

        assert stats.voting_record.total_votes == 2
        assert stats.data_valid is True

    @pytest.mark.asyncio
    async def test_no_votes(
        self, async_session: AsyncSession, roster: dict[str, Representative], cache: BillCategoryCache
    ) -> None:
        stats = await build_representative_stats(async_session, cache, roster["ottawa"])

        assert stats.voting_record.votes == []
        assert stats.party_loyalty.loyalty_percentage == 0.0
        assert stats.data_valid is True


class TestBuildMotionBreakdown:
    @pytest.mark.asyncio
    async def test_counts_current_session_items(
        self,
        async_session: AsyncSession,
        roster: dict[str, Representative],
        cache: BillCategoryCache,
    ) -> None:
        rep = roster["east"]
        in_session = date(2022, 3, 1)
        async_session.add_all(
            [
                BillSponsorship(
                    representative_id=rep.id,
                    number="C-21",
                    title="An Act to amend certain Acts (firearms)",
                    type="Bill",
                    sponsor_type="Sponsor",
                    introduced_date=in_session,
                ),
                BillSponsorship(
                    representative_id=rep.id, title="Co-sponsored bill", type="Bill",
                    sponsor_type="Co-sponsor", introduced_date=in_session,
                ),
                BillSponsorship(
                    representative_id=rep.id, title="M-44", type="Motion",
                    sponsor_type="Sponsor", introduced_date=in_session,
                ),
                BillSponsorship(
                    representative_id=rep.id, title="Seconded motion", type="Motion",
                    sponsor_type="Seconder", introduced_date=in_session,
                ),
                BillSponsorship(
                    representative_id=rep.id, title="Undated petition", type="Petition", sponsor_type="Sponsor"
                ),
                BillSponsorship(
                    representative_id=rep.id, title="Old bill", type="Bill",
                    sponsor_type="Sponsor", introduced_date=date(2019, 1, 1),
                ),
            ]
        )  # fmt: skip
        async_session.add(
            BillCategoryAssignment(bill_number="C-21", category_name="Justice & Public Safety", source="keyword")
        )
        await async_session.commit()

        breakdown = await build_motion_breakdown(async_session, cache, rep, SESSION_START)

        assert breakdown.total_motions == 4
        assert breakdown.bills_sponsored == 1
        assert breakdown.bills_co_sponsored == 1
        assert breakdown.motions_sponsored == 1
        assert breakdown.motions_co_sponsored == 1
        categories = {m.number: m.category for m in breakdown.motions if m.number}
        assert categories == {"C-21": "Justice & Public Safety"}
