"""Vote model: one recorded division vote cast by a representative."""

import datetime
import enum

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mp_api.models.base import Base, IdMixin


class VoteType(enum.StrEnum):
    """How the representative voted."""

    YEA = "Yea"
    NAY = "Nay"
    PAIRED = "Paired"
    ABSTAINED = "Abstained"
    NOT_VOTING = "Not Voting"


class VoteResult(enum.StrEnum):
    """Outcome of the division."""

    AGREED_TO = "Agreed To"
    NEGATIVED = "Negatived"
    TIE = "Tie"


class Vote(Base, IdMixin):
    """A representative's vote on one division."""

    __tablename__ = "votes"

    vote_id: Mapped[str] = mapped_column(String(100), nullable=False)
    representative_id: Mapped[int] = mapped_column(
        ForeignKey("representatives.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    bill_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    bill_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    motion_title: Mapped[str] = mapped_column(Text, nullable=False)

    vote_type: Mapped[str] = mapped_column(String(20), nullable=False)
    result: Mapped[str] = mapped_column(String(20), nullable=False)
    party_position: Mapped[str | None] = mapped_column(String(20), nullable=True)
    sponsor_party: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "vote_type IN ('Yea', 'Nay', 'Paired', 'Abstained', 'Not Voting')",
            name="ck_vote_type",
        ),
        CheckConstraint("result IN ('Agreed To', 'Negatived', 'Tie')", name="ck_vote_result"),
        UniqueConstraint("representative_id", "vote_id", name="uq_vote_representative"),
        Index("ix_votes_representative_date", "representative_id", "date"),
    )
