"""create roster, cache and statistics tables

Revision ID: 001
Revises:
Create Date: 2026-10-19

Introduces:
  - representatives: roster of sitting MPs (owned by the import process)
  - postal_code_cache: TTL cache of upstream postal code lookups
  - postal_code_mappings: manual postal code overrides
  - votes, parliament_sessions, bill_sponsorships: statistics inputs
  - bill_categories: write-once category per bill number
  - party_loyalty_snapshots: one loyalty aggregate per representative
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "representatives",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        # District
        sa.Column("district_name", sa.String(200), nullable=False),
        sa.Column("district_id", sa.String(50), nullable=True),
        sa.Column("elected_office", sa.String(50), nullable=False, server_default="MP"),
        sa.Column("person_id", sa.String(100), nullable=True),
        sa.Column("party_name", sa.String(100), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        # Contact
        sa.Column("email", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("photo_url", sa.Text, nullable=True),
        sa.Column("url", sa.Text, nullable=True),
        sa.Column("source_url", sa.Text, nullable=True),
        sa.Column("personal_url", sa.Text, nullable=True),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_representatives_district_name", "representatives", ["district_name"])
    op.create_index("ix_representatives_district_id", "representatives", ["district_id"])
    op.create_index("ix_representatives_person_id", "representatives", ["person_id"])
    op.create_index("ix_representatives_name", "representatives", ["name"])

    op.create_table(
        "postal_code_cache",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("postal_code", sa.String(6), nullable=False, unique=True),
        sa.Column("district_name", sa.String(200), nullable=False),
        sa.Column("external_id", sa.String(100), nullable=True),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("fetched_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_postal_code_cache_expires_at", "postal_code_cache", ["expires_at"])

    op.create_table(
        "postal_code_mappings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("postal_code", sa.String(6), nullable=False),
        sa.Column(
            "representative_id",
            sa.Integer,
            sa.ForeignKey("representatives.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("district_name", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_postal_code_mappings_postal_code", "postal_code_mappings", ["postal_code"])

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("vote_id", sa.String(100), nullable=False),
        sa.Column(
            "representative_id",
            sa.Integer,
            sa.ForeignKey("representatives.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("bill_number", sa.String(20), nullable=True),
        sa.Column("bill_title", sa.Text, nullable=True),
        sa.Column("motion_title", sa.Text, nullable=False),
        sa.Column("vote_type", sa.String(20), nullable=False),
        sa.Column("result", sa.String(20), nullable=False),
        sa.Column("party_position", sa.String(20), nullable=True),
        sa.Column("sponsor_party", sa.String(100), nullable=True),
        sa.CheckConstraint(
            "vote_type IN ('Yea', 'Nay', 'Paired', 'Abstained', 'Not Voting')",
            name="ck_vote_type",
        ),
        sa.CheckConstraint("result IN ('Agreed To', 'Negatived', 'Tie')", name="ck_vote_result"),
        sa.UniqueConstraint("representative_id", "vote_id", name="uq_vote_representative"),
    )
    op.create_index("ix_votes_representative_date", "votes", ["representative_id", "date"])

    op.create_table(
        "bill_categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("bill_number", sa.String(20), nullable=False, unique=True),
        sa.Column("category_name", sa.String(100), nullable=False),
        sa.Column("title_hint", sa.Text, nullable=True),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "party_loyalty_snapshots",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "representative_id",
            sa.Integer,
            sa.ForeignKey("representatives.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("votes_with_party", sa.Integer, nullable=False, server_default="0"),
        sa.Column("votes_against_party", sa.Integer, nullable=False, server_default="0"),
        sa.Column("free_votes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("abstained_paired_votes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("loyalty_percentage", sa.Float, nullable=False, server_default="0"),
        sa.Column("opposition_percentage", sa.Float, nullable=False, server_default="0"),
        sa.Column("free_vote_percentage", sa.Float, nullable=False, server_default="0"),
        sa.Column("computed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "parliament_sessions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("session_number", sa.String(20), nullable=False, unique=True),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column("is_current", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "bill_sponsorships",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "representative_id",
            sa.Integer,
            sa.ForeignKey("representatives.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("number", sa.String(20), nullable=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(100), nullable=True),
        sa.Column("introduced_date", sa.Date, nullable=True),
        sa.Column("sponsor_type", sa.String(20), nullable=False, server_default="Sponsor"),
        sa.Column("url", sa.Text, nullable=True),
    )
    op.create_index("ix_bill_sponsorships_representative_id", "bill_sponsorships", ["representative_id"])


def downgrade() -> None:
    op.drop_table("bill_sponsorships")
    op.drop_table("parliament_sessions")
    op.drop_table("party_loyalty_snapshots")
    op.drop_table("bill_categories")
    op.drop_index("ix_votes_representative_date", table_name="votes")
    op.drop_table("votes")
    op.drop_index("ix_postal_code_mappings_postal_code", table_name="postal_code_mappings")
    op.drop_table("postal_code_mappings")
    op.drop_index("ix_postal_code_cache_expires_at", table_name="postal_code_cache")
    op.drop_table("postal_code_cache")
    op.drop_index("ix_representatives_name", table_name="representatives")
    op.drop_index("ix_representatives_person_id", table_name="representatives")
    op.drop_index("ix_representatives_district_id", table_name="representatives")
    op.drop_index("ix_representatives_district_name", table_name="representatives")
    op.drop_table("representatives")
