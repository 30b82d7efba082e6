"""Vote categorizer: stamp votes with the policy category of their bill."""

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.lib.bills import extract_bill_number
from mp_api.models.vote import Vote
from mp_api.services.bill_category_service import BillCategoryCache, EnsureItem


@dataclass
class CategorizedVote:
    """A vote together with its derived bill number and category."""

    vote: Vote
    bill_number: str | None
    category: str | None = None


def derive_bill_number(vote: Vote) -> str | None:
    """Return the vote's bill number, falling back to one parsed from the motion title."""
    if vote.bill_number:
        return vote.bill_number.upper()
    return extract_bill_number(vote.motion_title)


async def categorize_votes(
    session: AsyncSession,
    cache: BillCategoryCache,
    votes: Sequence[Vote],
    display_limit: int = 20,
) -> list[CategorizedVote]:
    """Attach a category to every vote whose bill has one.

    Stored categories are fetched in one batch. Bills among the first
    ``display_limit`` votes that have no category yet are categorized before
    returning; categories for older votes are left to background work.

    Args:
        session: Database session.
        cache: Bill category cache.
        votes: Votes, newest first.
        display_limit: Number of leading votes whose bills must be categorized.

    Returns:
        One CategorizedVote per input vote, in input order.
    """
    categorized = [CategorizedVote(vote, derive_bill_number(vote)) for vote in votes]
    bill_numbers = {item.bill_number for item in categorized if item.bill_number}
    if not bill_numbers:
        return categorized

    log = logger.bind(stage="categorize")
    categories = await cache.get(session, bill_numbers)
    log.debug(f"Found {len(categories)} stored categories for {len(bill_numbers)} bills")

    pending = [
        EnsureItem(item.bill_number, item.vote.motion_title or item.vote.bill_title or item.bill_number)
        for item in categorized[:display_limit]
        if item.bill_number and item.bill_number not in categories
    ]
    if pending:
        report = await cache.ensure_many(session, pending)
        categories.update(report.categories)
        if report.failures:
            log.warning(f"{report.failed} displayed bills could not be categorized")
        # Pick up categories written concurrently by other requests.
        categories.update(await cache.get(session, bill_numbers))

    for item in categorized:
        if item.bill_number:
            item.category = categories.get(item.bill_number)
    return categorized
