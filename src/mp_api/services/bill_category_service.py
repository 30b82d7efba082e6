"""Bill category cache: write-once policy categories keyed by bill number."""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.core.database import Database, dialect_insert
from mp_api.core.inflight import InFlightRegistry
from mp_api.lib.bills import BillClassifier, extract_bill_number
from mp_api.models.bill_category import BillCategoryAssignment
from mp_api.models.vote import Vote


class PerItemCategorizationError(Exception):
    """Raised (and recorded) when one bill in a batch cannot be categorized.

    Args:
        bill_number: The bill that failed.
        message: Human-readable error description.
    """

    def __init__(self, bill_number: str, message: str) -> None:
        self.bill_number = bill_number
        self.message = message
        super().__init__(f"{bill_number}: {message}")


@dataclass(frozen=True)
class EnsureItem:
    """A bill to categorize and the text used to classify it."""

    bill_number: str
    title_hint: str


@dataclass
class EnsureReport:
    """Outcome of a batch ensure."""

    categories: dict[str, str] = field(default_factory=dict)
    already_categorized: int = 0
    newly_categorized: int = 0
    unclassified: list[str] = field(default_factory=list)
    failures: list[PerItemCategorizationError] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.already_categorized + self.newly_categorized + len(self.unclassified) + len(self.failures)

    @property
    def failed(self) -> int:
        return len(self.failures)


class BillCategoryCache:
    """Read-through cache in front of a bill classifier.

    A stored category is never replaced. When two writers race on the same
    bill number the first insert wins and both callers get the stored value.

    Args:
        classifier: Classifier consulted for bills without a stored category.
        inflight: Registry coalescing concurrent classifications of the same bill.
    """

    def __init__(self, classifier: BillClassifier, inflight: InFlightRegistry | None = None) -> None:
        self._classifier = classifier
        self._inflight = inflight or InFlightRegistry("bill_category")

    async def get(self, session: AsyncSession, bill_numbers: Iterable[str]) -> dict[str, str]:
        """Return stored categories for the given bill numbers (missing ones omitted)."""
        wanted = sorted(set(bill_numbers))
        if not wanted:
            return {}
        result = await session.execute(
            select(BillCategoryAssignment.bill_number, BillCategoryAssignment.category_name).where(
                BillCategoryAssignment.bill_number.in_(wanted)
            )
        )
        return {bill_number: category for bill_number, category in result.all()}

    async def _classify(self, item: EnsureItem) -> str | None:
        return await self._inflight.run(
            item.bill_number,
            lambda: self._classifier.classify(item.title_hint, item.bill_number),
        )

    async def _insert_if_absent(self, session: AsyncSession, bill_number: str, category: str, title_hint: str) -> None:
        stmt = (
            dialect_insert(session, BillCategoryAssignment)
            .values(
                bill_number=bill_number,
                category_name=category,
                title_hint=title_hint,
                source=self._classifier.source_name,
            )
            .on_conflict_do_nothing(index_elements=["bill_number"])
        )
        await session.execute(stmt)

    async def ensure(self, session: AsyncSession, bill_number: str, title_hint: str) -> str | None:
        """Return the category for a bill, classifying and storing it if absent.

        Args:
            session: Database session.
            bill_number: Normalized bill number (e.g. ``"C-69"``).
            title_hint: Text handed to the classifier.

        Returns:
            The stored category, or None when the classifier found none
            (in which case nothing is stored).
        """
        existing = await self.get(session, [bill_number])
        if bill_number in existing:
            return existing[bill_number]

        category = await self._classify(EnsureItem(bill_number, title_hint))
        if category is None:
            logger.bind(stage="categorize").info(f"No category found for {bill_number}")
            return None

        await self._insert_if_absent(session, bill_number, category, title_hint)
        await session.commit()
        stored = await self.get(session, [bill_number])
        return stored.get(bill_number)

    async def ensure_many(self, session: AsyncSession, items: Iterable[EnsureItem]) -> EnsureReport:
        """Ensure categories for a batch of bills.

        Stored categories are read once. Missing bills are classified
        concurrently, then written one at a time, each inside its own
        savepoint. A failure on one bill is recorded on the report and
        never aborts the rest of the batch.

        Args:
            session: Database session.
            items: Bills to categorize; the first hint seen per bill is used.

        Returns:
            EnsureReport with the final category of every categorized bill.
        """
        unique: dict[str, EnsureItem] = {}
        for item in items:
            unique.setdefault(item.bill_number, item)
        report = EnsureReport()
        if not unique:
            return report

        log = logger.bind(stage="categorize")
        existing = await self.get(session, unique)
        report.already_categorized = len(existing)
        report.categories.update(existing)
        missing = [item for bill_number, item in unique.items() if bill_number not in existing]
        if not missing:
            return report

        outcomes = await asyncio.gather(*(self._classify(item) for item in missing), return_exceptions=True)

        written: list[str] = []
        for item, outcome in zip(missing, outcomes, strict=True):
            if isinstance(outcome, Exception):
                error = PerItemCategorizationError(item.bill_number, f"classification failed: {outcome}")
                report.failures.append(error)
                log.opt(exception=outcome).warning(f"Categorization of {item.bill_number} failed: {outcome}")
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            if outcome is None:
                report.unclassified.append(item.bill_number)
                continue
            try:
                async with session.begin_nested():
                    await self._insert_if_absent(session, item.bill_number, outcome, item.title_hint)
            except SQLAlchemyError as e:
                error = PerItemCategorizationError(item.bill_number, f"write failed: {e}")
                report.failures.append(error)
                log.warning(f"Storing category for {item.bill_number} failed: {e}")
                continue
            written.append(item.bill_number)

        await session.commit()
        stored = await self.get(session, written)
        report.categories.update(stored)
        report.newly_categorized = len(stored)
        log.info(
            f"Categorized {len(unique)} bills: {report.already_categorized} existing, "
            f"{report.newly_categorized} new, {len(report.unclassified)} unclassified, {report.failed} failed"
        )
        return report


async def collect_bills_from_votes(session: AsyncSession, representative_id: int) -> list[EnsureItem]:
    """Return one EnsureItem per distinct bill a representative voted on.

    Bill numbers come from the vote's ``bill_number`` or, when missing, from
    its motion title.
    """
    result = await session.execute(
        select(Vote.bill_number, Vote.bill_title, Vote.motion_title)
        .where(Vote.representative_id == representative_id)
        .order_by(Vote.date.desc(), Vote.id.desc())
    )
    items: dict[str, EnsureItem] = {}
    for bill_number, bill_title, motion_title in result.all():
        number = (bill_number or "").upper() or extract_bill_number(motion_title)
        if number and number not in items:
            items[number] = EnsureItem(number, motion_title or bill_title or number)
    return list(items.values())


async def categorize_representative_bills(
    database: Database,
    cache: BillCategoryCache,
    representative_id: int,
) -> EnsureReport:
    """Categorize every bill a representative voted on.

    Runs outside any request, so it opens its own session.

    Args:
        database: Database handle.
        cache: Bill category cache.
        representative_id: Representative primary key.

    Returns:
        EnsureReport for the whole batch.
    """
    async with database.session() as session:
        items = await collect_bills_from_votes(session, representative_id)
        report = await cache.ensure_many(session, items)
    logger.bind(stage="categorize").info(
        f"Bill categorization for representative {representative_id}: total={report.total}, "
        f"already={report.already_categorized}, new={report.newly_categorized}, failed={report.failed}"
    )
    return report
