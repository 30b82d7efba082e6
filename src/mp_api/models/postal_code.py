"""Postal code models: the TTL cache of upstream lookups and manual overrides."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from mp_api.models.base import Base, IdMixin, TimestampMixin


class PostalCodeCacheEntry(Base, IdMixin):
    """Cached postal code to district mapping.

    At most one row per normalized postal code. A row whose ``expires_at``
    has passed is treated as a miss and overwritten on the next store.
    """

    __tablename__ = "postal_code_cache"

    postal_code: Mapped[str] = mapped_column(String(6), nullable=False, unique=True)
    district_name: Mapped[str] = mapped_column(String(200), nullable=False)
    external_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<PostalCodeCacheEntry(postal_code='{self.postal_code}', district='{self.district_name}')>"


class PostalCodeMapping(Base, IdMixin, TimestampMixin):
    """Manually curated postal code override.

    Points either at a representative directly or at a district name that
    is joined against the roster.
    """

    __tablename__ = "postal_code_mappings"

    postal_code: Mapped[str] = mapped_column(String(6), nullable=False, index=True)
    representative_id: Mapped[int | None] = mapped_column(
        ForeignKey("representatives.id", ondelete="CASCADE"), nullable=True
    )
    district_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
