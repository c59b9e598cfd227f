from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from shift_roster.db.base import Base


class RecurringAssignment(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    officer_id: Mapped[int] = mapped_column(ForeignKey("officerprofile.id", ondelete="CASCADE"), index=True)
    shift_type_id: Mapped[int] = mapped_column(ForeignKey("shifttype.id", ondelete="CASCADE"), index=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 = Sunday
    position_name: Mapped[str | None] = mapped_column(String(120))
    unit_number: Mapped[str | None] = mapped_column(String(20))
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date)
    is_partnership: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    partner_officer_id: Mapped[int | None] = mapped_column(
        ForeignKey("officerprofile.id", ondelete="SET NULL")
    )


class ScheduleException(Base):
    __table_args__ = (
        UniqueConstraint("officer_id", "date", "shift_type_id", "is_off", name="uq_exception_slot"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    officer_id: Mapped[int] = mapped_column(ForeignKey("officerprofile.id", ondelete="CASCADE"), index=True)
    date: Mapped[date] = mapped_column(Date, index=True)
    shift_type_id: Mapped[int] = mapped_column(ForeignKey("shifttype.id", ondelete="CASCADE"), index=True)
    is_off: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(120))
    position_name: Mapped[str | None] = mapped_column(String(120))
    unit_number: Mapped[str | None] = mapped_column(String(20))
    notes: Mapped[str | None] = mapped_column(Text)
    custom_start_time: Mapped[str | None] = mapped_column(String(5))
    custom_end_time: Mapped[str | None] = mapped_column(String(5))
    is_partnership: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    partner_officer_id: Mapped[int | None] = mapped_column(
        ForeignKey("officerprofile.id", ondelete="SET NULL")
    )
    partnership_suspended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    partnership_suspension_reason: Mapped[str | None] = mapped_column(String(120))
    schedule_type: Mapped[str] = mapped_column(String(40), default="manual", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )


class DefaultAssignment(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    officer_id: Mapped[int] = mapped_column(ForeignKey("officerprofile.id", ondelete="CASCADE"), index=True)
    position_name: Mapped[str | None] = mapped_column(String(120))
    unit_number: Mapped[str | None] = mapped_column(String(20))
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date)
