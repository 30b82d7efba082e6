"""BillSponsorship model: bills and motions a representative sponsored or seconded."""

import enum
from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mp_api.models.base import Base, IdMixin


class SponsorshipType(enum.StrEnum):
    BILL = "Bill"
    MOTION = "Motion"
    PETITION = "Petition"
    QUESTION = "Question"


class SponsorType(enum.StrEnum):
    SPONSOR = "Sponsor"
    CO_SPONSOR = "Co-sponsor"
    SECONDER = "Seconder"


class BillSponsorship(Base, IdMixin):
    """One sponsored item linked to a representative."""

    __tablename__ = "bill_sponsorships"

    representative_id: Mapped[int] = mapped_column(
        ForeignKey("representatives.id", ondelete="CASCADE"), nullable=False, index=True
    )
    number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    introduced_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    sponsor_type: Mapped[str] = mapped_column(String(20), nullable=False, default=SponsorType.SPONSOR)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
