"""BillCategoryAssignment model: write-once policy category per bill number."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from mp_api.models.base import Base, IdMixin


class BillCategoryAssignment(Base, IdMixin):
    """Category assigned to a bill number.

    Rows are inserted once and never updated; concurrent writers race on the
    unique ``bill_number`` and the first insert wins.
    """

    __tablename__ = "bill_categories"

    bill_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    category_name: Mapped[str] = mapped_column(String(100), nullable=False)
    title_hint: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="keyword")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
