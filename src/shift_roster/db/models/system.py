from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from shift_roster.db.base import Base


class MinimumStaffing(Base):
    __table_args__ = (UniqueConstraint("day_of_week", "shift_type_id", name="uq_minimum_slot"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    shift_type_id: Mapped[int] = mapped_column(ForeignKey("shifttype.id", ondelete="CASCADE"), index=True)
    minimum_officers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    minimum_supervisors: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class PartnershipAudit(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    officer_id: Mapped[int] = mapped_column(ForeignKey("officerprofile.id", ondelete="CASCADE"), index=True)
    partner_officer_id: Mapped[int | None] = mapped_column(
        ForeignKey("officerprofile.id", ondelete="SET NULL")
    )
    date: Mapped[date] = mapped_column(Date, index=True)
    shift_type_id: Mapped[int] = mapped_column(ForeignKey("shifttype.id", ondelete="CASCADE"))
    exception_type: Mapped[str] = mapped_column(String(40), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime)
