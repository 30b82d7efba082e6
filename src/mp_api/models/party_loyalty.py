"""PartyLoyaltySnapshot model: last computed loyalty aggregate per representative."""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from mp_api.models.base import Base, IdMixin


class PartyLoyaltySnapshot(Base, IdMixin):
    """Four vote buckets plus derived percentages.

    A snapshot is only trusted while its buckets sum to the number of votes
    currently on record for the representative; it is overwritten wholesale.
    """

    __tablename__ = "party_loyalty_snapshots"

    representative_id: Mapped[int] = mapped_column(
        ForeignKey("representatives.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    votes_with_party: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    votes_against_party: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    free_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    abstained_paired_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    loyalty_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    opposition_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    free_vote_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    computed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    @property
    def bucket_total(self) -> int:
        return self.votes_with_party + self.votes_against_party + self.free_votes + self.abstained_paired_votes
