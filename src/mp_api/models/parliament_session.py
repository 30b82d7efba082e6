"""ParliamentSession model."""

from datetime import date

from sqlalchemy import Boolean, Date, String
from sqlalchemy.orm import Mapped, mapped_column

from mp_api.models.base import Base, IdMixin


class ParliamentSession(Base, IdMixin):
    """A session of Parliament (e.g. ``45-1``)."""

    __tablename__ = "parliament_sessions"

    session_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
