"""Representative model: the local roster of Members of Parliament.

The roster is owned by the import process; the lookup and statistics code
only reads it. ``district_name`` is the roster's own spelling of the riding,
which may drift from the upstream geographic service after redistricting.
"""

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mp_api.models.base import Base, IdMixin, TimestampMixin


class Representative(Base, IdMixin, TimestampMixin):
    """One elected representative and the district they hold."""

    __tablename__ = "representatives"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # District
    district_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    district_id: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    elected_office: Mapped[str] = mapped_column(String(50), nullable=False, default="MP")

    # Upstream person identifier
    person_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    party_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Contact
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    personal_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_representatives_name", "name"),)

    def __repr__(self) -> str:
        return f"<Representative(id={self.id}, name='{self.name}', district='{self.district_name}')>"
