from __future__ import annotations

from datetime import date

from sqlalchemy import Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from shift_roster.db.base import Base


class ShiftType(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM, may be past midnight


class OfficerProfile(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    full_name: Mapped[str] = mapped_column(String(120), nullable=False)
    badge_number: Mapped[str | None] = mapped_column(String(20))
    rank: Mapped[str | None] = mapped_column(String(40), default="Officer")
    hire_date: Mapped[date | None] = mapped_column(Date)
    promotion_date_sergeant: Mapped[date | None] = mapped_column(Date)
    promotion_date_lieutenant: Mapped[date | None] = mapped_column(Date)
    service_credit_override: Mapped[float | None] = mapped_column(Numeric(5, 2))
