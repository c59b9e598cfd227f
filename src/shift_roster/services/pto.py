from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from shift_roster.schemas.officer import ShiftTypeRead
from shift_roster.schemas.schedule import ScheduleExceptionRead
from shift_roster.services.calendar import format_time, parse_time

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
REVIEW_LABEL = "Check PTO"


class LeaveType(str, Enum):
    VACATION = "Vacation"
    HOLIDAY = "Holiday"
    SICK = "Sick"
    COMPENSATORY = "Compensatory"
    PTO = "PTO"


LEAVE_TYPE_ALIASES: dict[str, LeaveType] = {
    "vacation": LeaveType.VACATION,
    "vacation time": LeaveType.VACATION,
    "vac": LeaveType.VACATION,
    "holiday": LeaveType.HOLIDAY,
    "holiday time": LeaveType.HOLIDAY,
    "hol": LeaveType.HOLIDAY,
    "sick": LeaveType.SICK,
    "sick leave": LeaveType.SICK,
    "sick time": LeaveType.SICK,
    "sick day": LeaveType.SICK,
    "comp": LeaveType.COMPENSATORY,
    "comp time": LeaveType.COMPENSATORY,
    "comp_time": LeaveType.COMPENSATORY,
    "compensatory": LeaveType.COMPENSATORY,
    "compensatory time": LeaveType.COMPENSATORY,
    "pto": LeaveType.PTO,
    "paid time off": LeaveType.PTO,
}


def normalize_leave_type(reason: str | None) -> tuple[LeaveType, str]:
    """Return the leave type used for staffing and the text to display.

    Unrecognised reasons keep their original wording for display and count
    as generic PTO.
    """
    text = (reason or "").strip()
    if not text:
        return LeaveType.PTO, LeaveType.PTO.value

    leave_type = LEAVE_TYPE_ALIASES.get(" ".join(text.casefold().split()))
    if leave_type is None:
        return LeaveType.PTO, text
    return leave_type, leave_type.value


@dataclass(frozen=True)
class WorkingWindow:
    segments: tuple[tuple[str, str], ...] = ()
    needs_review: bool = False

    @property
    def label(self) -> str:
        if self.needs_review:
            return REVIEW_LABEL
        return " & ".join(f"{start}-{end}" for start, end in self.segments)


@dataclass
class LeaveAnnotation:
    exception_id: int
    leave_type: LeaveType
    display_reason: str
    is_full_day: bool
    start_time: str | None = None
    end_time: str | None = None
    working_window: WorkingWindow = field(default_factory=WorkingWindow)

    @property
    def is_partial(self) -> bool:
        return not self.is_full_day


class PTOResolver:
    """Classifies a leave exception against its shift."""

    def is_full_day(self, leave: ScheduleExceptionRead | None) -> bool:
        return leave is not None and not leave.has_custom_window

    def is_partial(self, leave: ScheduleExceptionRead | None) -> bool:
        return leave is not None and leave.has_custom_window

    def annotate(
        self, leave: ScheduleExceptionRead | None, shift: ShiftTypeRead
    ) -> LeaveAnnotation | None:
        if leave is None:
            return None

        leave_type, display = normalize_leave_type(leave.reason)
        if not leave.has_custom_window:
            return LeaveAnnotation(
                exception_id=leave.id,
                leave_type=leave_type,
                display_reason=display,
                is_full_day=True,
            )

        return LeaveAnnotation(
            exception_id=leave.id,
            leave_type=leave_type,
            display_reason=display,
            is_full_day=False,
            start_time=leave.custom_start_time or shift.start_time,
            end_time=leave.custom_end_time or shift.end_time,
            working_window=self.working_window(leave, shift),
        )

    def working_window(self, leave: ScheduleExceptionRead, shift: ShiftTypeRead) -> WorkingWindow:
        """Portion of the shift the officer still works around a partial leave.

        Times are compared as minutes after shift start so windows that cross
        midnight behave like any other. A window that is empty, falls outside
        the shift, or covers the whole shift is flagged for review.
        """
        shift_start = parse_time(shift.start_time)
        shift_length = (parse_time(shift.end_time) - shift_start) % MINUTES_PER_DAY or MINUTES_PER_DAY

        leave_start = leave.custom_start_time or shift.start_time
        leave_end = leave.custom_end_time or shift.end_time
        offset_start = (parse_time(leave_start) - shift_start) % MINUTES_PER_DAY
        offset_end = (parse_time(leave_end) - shift_start) % MINUTES_PER_DAY or MINUTES_PER_DAY

        if not 0 <= offset_start < offset_end <= shift_length:
            logger.warning(
                "Leave window %s-%s does not fit shift %s (%s-%s) for officer %s",
                leave_start,
                leave_end,
                shift.name,
                shift.start_time,
                shift.end_time,
                leave.officer_id,
            )
            return WorkingWindow(needs_review=True)

        def _clock(offset: int) -> str:
            return format_time(shift_start + offset)

        if offset_start == 0 and offset_end == shift_length:
            return WorkingWindow(needs_review=True)
        if offset_start == 0:
            return WorkingWindow(segments=((_clock(offset_end), _clock(shift_length)),))
        if offset_end == shift_length:
            return WorkingWindow(segments=((_clock(0), _clock(offset_start)),))
        return WorkingWindow(
            segments=(
                (_clock(0), _clock(offset_start)),
                (_clock(offset_end), _clock(shift_length)),
            )
        )
