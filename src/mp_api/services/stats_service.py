"""Representative statistics: voting record, party loyalty and sponsorships."""

from dataclasses import dataclass, field
from datetime import date

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.lib.loyalty import compute_party_loyalty
from mp_api.models.bill_sponsorship import BillSponsorship, SponsorshipType, SponsorType
from mp_api.models.representative import Representative
from mp_api.services import party_loyalty_service, representative_service, session_service
from mp_api.services.bill_category_service import BillCategoryCache
from mp_api.services.vote_categorizer import categorize_votes

_CO_SPONSOR_TYPES = frozenset({SponsorType.CO_SPONSOR, SponsorType.SECONDER})


@dataclass
class VoteView:
    id: str
    date: date
    motion_title: str
    vote_type: str
    result: str
    bill_number: str | None = None
    bill_title: str | None = None
    party_position: str | None = None
    sponsor_party: str | None = None
    category: str | None = None


@dataclass
class VotingRecord:
    representative_id: int
    representative_name: str
    total_votes: int
    votes: list[VoteView] = field(default_factory=list)


@dataclass
class PartyLoyalty:
    representative_id: int
    representative_name: str
    party_name: str
    total_votes: int
    votes_with_party: int
    votes_against_party: int
    free_votes: int
    abstained_paired_votes: int
    loyalty_percentage: float
    opposition_percentage: float
    free_vote_percentage: float
    cached: bool = False

    @property
    def bucket_total(self) -> int:
        return self.votes_with_party + self.votes_against_party + self.free_votes + self.abstained_paired_votes


@dataclass
class MotionView:
    id: int
    title: str
    type: str
    sponsor_type: str
    number: str | None = None
    status: str | None = None
    introduced_date: date | None = None
    url: str | None = None
    category: str | None = None


@dataclass
class MotionBreakdown:
    representative_id: int
    representative_name: str
    total_motions: int = 0
    bills_sponsored: int = 0
    bills_co_sponsored: int = 0
    motions_sponsored: int = 0
    motions_co_sponsored: int = 0
    motions: list[MotionView] = field(default_factory=list)


@dataclass
class RepresentativeStats:
    voting_record: VotingRecord
    party_loyalty: PartyLoyalty
    motions: MotionBreakdown
    data_valid: bool


async def build_motion_breakdown(
    session: AsyncSession,
    cache: BillCategoryCache,
    representative: Representative,
    since: date | None,
) -> MotionBreakdown:
    """Summarize the bills and motions a representative sponsored in the current session.

    Items without an introduced date are dropped. With no current session,
    every dated item is kept.
    """
    query = select(BillSponsorship).where(
        BillSponsorship.representative_id == representative.id,
        BillSponsorship.introduced_date.is_not(None),
    )
    if since is not None:
        query = query.where(BillSponsorship.introduced_date >= since)
    query = query.order_by(BillSponsorship.introduced_date.desc(), BillSponsorship.id)
    sponsorships = list((await session.execute(query)).scalars().all())

    categories = await cache.get(session, [s.number for s in sponsorships if s.number])
    motions = [
        MotionView(
            id=s.id,
            title=s.title,
            type=s.type,
            sponsor_type=s.sponsor_type,
            number=s.number,
            status=s.status,
            introduced_date=s.introduced_date,
            url=s.url,
            category=categories.get(s.number) if s.number else None,
        )
        for s in sponsorships
    ]

    def _count(item_type: SponsorshipType, sponsor_types: frozenset[str]) -> int:
        return sum(1 for m in motions if m.type == item_type and m.sponsor_type in sponsor_types)

    return MotionBreakdown(
        representative_id=representative.id,
        representative_name=representative.name,
        total_motions=len(motions),
        bills_sponsored=_count(SponsorshipType.BILL, frozenset({SponsorType.SPONSOR})),
        bills_co_sponsored=_count(SponsorshipType.BILL, _CO_SPONSOR_TYPES),
        motions_sponsored=_count(SponsorshipType.MOTION, frozenset({SponsorType.SPONSOR})),
        motions_co_sponsored=_count(SponsorshipType.MOTION, _CO_SPONSOR_TYPES),
        motions=motions,
    )


async def build_party_loyalty(
    session: AsyncSession,
    representative: Representative,
    votes: list,
) -> PartyLoyalty:
    """Return the loyalty aggregate for ``votes``, reusing a still-valid snapshot."""
    party_name = representative.party_name or "Unknown"
    snapshot = await party_loyalty_service.get(session, representative.id, votes)
    cached = snapshot is not None
    if snapshot is None:
        stats = compute_party_loyalty(votes, representative.party_name)
        snapshot = await party_loyalty_service.put(session, representative.id, stats)
    else:
        logger.bind(stage="loyalty").debug(f"Using cached party loyalty for {representative.name}")

    return PartyLoyalty(
        representative_id=representative.id,
        representative_name=representative.name,
        party_name=party_name,
        total_votes=len(votes),
        votes_with_party=snapshot.votes_with_party,
        votes_against_party=snapshot.votes_against_party,
        free_votes=snapshot.free_votes,
        abstained_paired_votes=snapshot.abstained_paired_votes,
        loyalty_percentage=snapshot.loyalty_percentage,
        opposition_percentage=snapshot.opposition_percentage,
        free_vote_percentage=snapshot.free_vote_percentage,
        cached=cached,
    )


async def build_representative_stats(
    session: AsyncSession,
    cache: BillCategoryCache,
    representative: Representative,
    *,
    display_limit: int = 20,
    voting_record_limit: int = 5000,
) -> RepresentativeStats:
    """Assemble the statistics payload for one representative.

    Args:
        session: Database session.
        cache: Bill category cache.
        representative: The representative.
        display_limit: Leading votes whose bills are categorized before returning.
        voting_record_limit: Maximum number of votes loaded.

    Returns:
        RepresentativeStats. ``data_valid`` is False when the loyalty buckets
        do not add up to the session-filtered vote count; that is reported,
        never raised.
    """
    since = await session_service.get_current_session_start_date(session)
    if since is None:
        logger.bind(stage="stats").info("No current parliament session, statistics use every vote")

    votes = await representative_service.get_voting_record(
        session, representative.id, since=since, limit=voting_record_limit
    )
    categorized = await categorize_votes(session, cache, votes, display_limit=display_limit)
    voting_record = VotingRecord(
        representative_id=representative.id,
        representative_name=representative.name,
        total_votes=len(votes),
        votes=[
            VoteView(
                id=item.vote.vote_id,
                date=item.vote.date,
                motion_title=item.vote.motion_title,
                vote_type=item.vote.vote_type,
                result=item.vote.result,
                bill_number=item.vote.bill_number or item.bill_number,
                bill_title=item.vote.bill_title,
                party_position=item.vote.party_position,
                sponsor_party=item.vote.sponsor_party,
                category=item.category,
            )
            for item in categorized
        ],
    )

    party_loyalty = await build_party_loyalty(session, representative, votes)
    motions = await build_motion_breakdown(session, cache, representative, since)

    data_valid = party_loyalty.bucket_total == len(votes)
    if not data_valid:
        logger.bind(stage="stats").warning(
            f"Loyalty buckets for {representative.name} cover {party_loyalty.bucket_total} of {len(votes)} votes"
        )
    return RepresentativeStats(
        voting_record=voting_record,
        party_loyalty=party_loyalty,
        motions=motions,
        data_valid=data_valid,
    )
