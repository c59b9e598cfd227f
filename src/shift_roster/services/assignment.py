from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Literal

from shift_roster.services.pto import LeaveAnnotation

LEADING_DIGITS = re.compile(r"\s*(\d+)")


@dataclass
class ResolvedDayAssignment:
    """Merged view of one officer on one date and shift."""

    officer_id: int
    date: date
    shift_id: int
    name: str
    badge_number: str | None = None
    rank: str | None = None
    service_credit: float = 0.0
    position_name: str | None = None
    unit_number: str | None = None
    notes: str | None = None
    custom_start_time: str | None = None
    custom_end_time: str | None = None
    source: Literal["recurring", "exception", "leave"] = "recurring"
    schedule_type: str | None = None
    recurring_id: int | None = None
    working_exception_id: int | None = None
    leave_exception_id: int | None = None
    is_regular_recurring_day: bool = False
    leave: LeaveAnnotation | None = None
    is_partnership: bool = False
    partner_officer_id: int | None = None
    partner_name: str | None = None
    partnership_suspended: bool = False
    partnership_suspension_reason: str | None = None
    partnership_broken: bool = False

    @property
    def is_full_day_leave(self) -> bool:
        return self.leave is not None and self.leave.is_full_day

    @property
    def is_off_duty(self) -> bool:
        """On full-day leave, or present only through a leave row with no shift to work."""
        return self.is_full_day_leave or self.source == "leave"

    @property
    def is_partial_leave(self) -> bool:
        return self.leave is not None and not self.leave.is_full_day

    @property
    def is_extra_shift(self) -> bool:
        return (
            self.source == "exception"
            and self.working_exception_id is not None
            and not self.is_full_day_leave
            and not self.is_regular_recurring_day
        )

    @property
    def last_name(self) -> str:
        parts = self.name.split()
        return parts[-1] if parts else ""

    @property
    def badge_sort_key(self) -> int:
        match = LEADING_DIGITS.match(self.badge_number or "")
        return int(match.group(1)) if match else 9999
