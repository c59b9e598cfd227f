"""Roster schema: shifts, officers, recurring and exception rows, staffing rules.

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "shifttype",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
    )
    op.create_index("ix_shifttype_id", "shifttype", ["id"], unique=False)

    op.create_table(
        "officerprofile",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("full_name", sa.String(length=120), nullable=False),
        sa.Column("badge_number", sa.String(length=20), nullable=True),
        sa.Column("rank", sa.String(length=40), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("promotion_date_sergeant", sa.Date(), nullable=True),
        sa.Column("promotion_date_lieutenant", sa.Date(), nullable=True),
        sa.Column("service_credit_override", sa.Numeric(5, 2), nullable=True),
    )
    op.create_index("ix_officerprofile_id", "officerprofile", ["id"], unique=False)

    op.create_table(
        "recurringassignment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "officer_id",
            sa.Integer(),
            sa.ForeignKey("officerprofile.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "shift_type_id",
            sa.Integer(),
            sa.ForeignKey("shifttype.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("position_name", sa.String(length=120), nullable=True),
        sa.Column("unit_number", sa.String(length=20), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_partnership", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "partner_officer_id",
            sa.Integer(),
            sa.ForeignKey("officerprofile.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )
    op.create_index("ix_recurringassignment_id", "recurringassignment", ["id"], unique=False)
    op.create_index(
        "ix_recurringassignment_officer_id", "recurringassignment", ["officer_id"], unique=False
    )
    op.create_index(
        "ix_recurringassignment_shift_type_id", "recurringassignment", ["shift_type_id"], unique=False
    )

    op.create_table(
        "scheduleexception",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "officer_id",
            sa.Integer(),
            sa.ForeignKey("officerprofile.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "shift_type_id",
            sa.Integer(),
            sa.ForeignKey("shifttype.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_off", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("reason", sa.String(length=120), nullable=True),
        sa.Column("position_name", sa.String(length=120), nullable=True),
        sa.Column("unit_number", sa.String(length=20), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("custom_start_time", sa.String(length=5), nullable=True),
        sa.Column("custom_end_time", sa.String(length=5), nullable=True),
        sa.Column("is_partnership", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "partner_officer_id",
            sa.Integer(),
            sa.ForeignKey("officerprofile.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "partnership_suspended", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("partnership_suspension_reason", sa.String(length=120), nullable=True),
        sa.Column(
            "schedule_type", sa.String(length=40), nullable=False, server_default=sa.text("'manual'")
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("officer_id", "date", "shift_type_id", "is_off", name="uq_exception_slot"),
    )
    op.create_index("ix_scheduleexception_id", "scheduleexception", ["id"], unique=False)
    op.create_index("ix_scheduleexception_date", "scheduleexception", ["date"], unique=False)
    op.create_index(
        "ix_scheduleexception_officer_id", "scheduleexception", ["officer_id"], unique=False
    )
    op.create_index(
        "ix_scheduleexception_shift_type_id", "scheduleexception", ["shift_type_id"], unique=False
    )

    op.create_table(
        "defaultassignment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "officer_id",
            sa.Integer(),
            sa.ForeignKey("officerprofile.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position_name", sa.String(length=120), nullable=True),
        sa.Column("unit_number", sa.String(length=20), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
    )
    op.create_index("ix_defaultassignment_id", "defaultassignment", ["id"], unique=False)
    op.create_index(
        "ix_defaultassignment_officer_id", "defaultassignment", ["officer_id"], unique=False
    )

    op.create_table(
        "minimumstaffing",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column(
            "shift_type_id",
            sa.Integer(),
            sa.ForeignKey("shifttype.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("minimum_officers", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("minimum_supervisors", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.UniqueConstraint("day_of_week", "shift_type_id", name="uq_minimum_slot"),
    )
    op.create_index(
        "ix_minimumstaffing_shift_type_id", "minimumstaffing", ["shift_type_id"], unique=False
    )

    op.create_table(
        "partnershipaudit",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "officer_id",
            sa.Integer(),
            sa.ForeignKey("officerprofile.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "partner_officer_id",
            sa.Integer(),
            sa.ForeignKey("officerprofile.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "shift_type_id",
            sa.Integer(),
            sa.ForeignKey("shifttype.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("exception_type", sa.String(length=40), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_partnershipaudit_date", "partnershipaudit", ["date"], unique=False)
    op.create_index(
        "ix_partnershipaudit_officer_id", "partnershipaudit", ["officer_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_partnershipaudit_officer_id", table_name="partnershipaudit")
    op.drop_index("ix_partnershipaudit_date", table_name="partnershipaudit")
    op.drop_table("partnershipaudit")

    op.drop_index("ix_minimumstaffing_shift_type_id", table_name="minimumstaffing")
    op.drop_table("minimumstaffing")

    op.drop_index("ix_defaultassignment_officer_id", table_name="defaultassignment")
    op.drop_index("ix_defaultassignment_id", table_name="defaultassignment")
    op.drop_table("defaultassignment")

    op.drop_index("ix_scheduleexception_shift_type_id", table_name="scheduleexception")
    op.drop_index("ix_scheduleexception_officer_id", table_name="scheduleexception")
    op.drop_index("ix_scheduleexception_date", table_name="scheduleexception")
    op.drop_index("ix_scheduleexception_id", table_name="scheduleexception")
    op.drop_table("scheduleexception")

    op.drop_index("ix_recurringassignment_shift_type_id", table_name="recurringassignment")
    op.drop_index("ix_recurringassignment_officer_id", table_name="recurringassignment")
    op.drop_index("ix_recurringassignment_id", table_name="recurringassignment")
    op.drop_table("recurringassignment")

    op.drop_index("ix_officerprofile_id", table_name="officerprofile")
    op.drop_table("officerprofile")

    op.drop_index("ix_shifttype_id", table_name="shifttype")
    op.drop_table("shifttype")
