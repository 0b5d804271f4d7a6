"""Create donations table with lifecycle columns and listing indexes.

Revision ID: 001_create_donations
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_create_donations"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "donations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("donor_id", sa.Integer, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("weight", sa.Float, nullable=True),
        sa.Column("donation_reason", sa.Text, nullable=True),
        sa.Column("contact_info", sa.String(200), nullable=True),
        sa.Column("expiry_date", sa.String(32), nullable=True),
        sa.Column("pickup_address", sa.Text, nullable=True),
        sa.Column("pickup_latitude", sa.Float, nullable=True),
        sa.Column("pickup_longitude", sa.Float, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("reserved_by", sa.Integer, nullable=True),
        sa.Column("reserved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pickup_time", sa.String(64), nullable=True),
        sa.Column("pickup_person_name", sa.String(120), nullable=True),
        sa.Column("pickup_person_id", sa.String(20), nullable=True),
        sa.Column("verification_code", sa.String(6), nullable=True),
        sa.Column("business_confirmed", sa.Boolean, nullable=True),
        sa.Column("business_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("donor_confirmed", sa.Boolean, nullable=True),
        sa.Column("donor_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("recipient_confirmed", sa.Boolean, nullable=True),
        sa.Column("recipient_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('available', 'reserved', 'completed')",
            name="ck_donations_status",
        ),
    )
    op.create_index("ix_donations_status", "donations", ["status"])
    op.create_index("ix_donations_donor_id", "donations", ["donor_id"])
    op.create_index("ix_donations_reserved_by", "donations", ["reserved_by"])
    op.create_index("ix_donations_created_at", "donations", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_donations_created_at", table_name="donations")
    op.drop_index("ix_donations_reserved_by", table_name="donations")
    op.drop_index("ix_donations_donor_id", table_name="donations")
    op.drop_index("ix_donations_status", table_name="donations")
    op.drop_table("donations")
