import logging

import pytest

from shift_roster.schemas.officer import ShiftTypeRead
from shift_roster.schemas.schedule import ScheduleExceptionRead
from shift_roster.services.pto import LeaveType, PTOResolver, WorkingWindow, normalize_leave_type

from .factories import MONDAY

DAY = ShiftTypeRead(id=1, name="Day", start_time="07:00", end_time="15:00")
NIGHT = ShiftTypeRead(id=2, name="Night", start_time="23:00", end_time="07:00")


def _leave(start: str | None = None, end: str | None = None, reason: str = "Vacation") -> ScheduleExceptionRead:
    return ScheduleExceptionRead(
        id=10,
        officer_id=1,
        date=MONDAY,
        shift_type_id=1,
        is_off=True,
        reason=reason,
        custom_start_time=start,
        custom_end_time=end,
    )


@pytest.mark.parametrize(
    ("reason", "expected"),
    [
        ("vacation", (LeaveType.VACATION, "Vacation")),
        ("  SICK   Leave ", (LeaveType.SICK, "Sick")),
        ("Comp Time", (LeaveType.COMPENSATORY, "Compensatory")),
        ("Holiday", (LeaveType.HOLIDAY, "Holiday")),
        ("HOL", (LeaveType.HOLIDAY, "Holiday")),
        ("Jury Duty", (LeaveType.PTO, "Jury Duty")),
        (None, (LeaveType.PTO, "PTO")),
    ],
)
def test_normalize_leave_type(reason, expected) -> None:
    assert normalize_leave_type(reason) == expected


def test_full_day_leave_has_no_window() -> None:
    resolver = PTOResolver()
    leave = _leave()

    annotation = resolver.annotate(leave, DAY)

    assert resolver.is_full_day(leave)
    assert not resolver.is_partial(leave)
    assert annotation.is_full_day
    assert annotation.working_window == WorkingWindow()
    assert resolver.annotate(None, DAY) is None


def test_leave_at_shift_start_leaves_the_end() -> None:
    window = PTOResolver().working_window(_leave("07:00", "11:00"), DAY)
    assert window.label == "11:00-15:00"


def test_leave_at_shift_end_leaves_the_start() -> None:
    window = PTOResolver().working_window(_leave("12:00", "15:00"), DAY)
    assert window.label == "07:00-12:00"


def test_interior_leave_splits_the_shift() -> None:
    annotation = PTOResolver().annotate(_leave("10:00", "12:00", reason="Sick"), DAY)

    assert annotation.is_partial
    assert annotation.leave_type is LeaveType.SICK
    assert annotation.working_window.segments == (("07:00", "10:00"), ("12:00", "15:00"))
    assert annotation.working_window.label == "07:00-10:00 & 12:00-15:00"


def test_missing_end_defaults_to_shift_end() -> None:
    annotation = PTOResolver().annotate(_leave(start="13:00"), DAY)

    assert annotation.end_time == "15:00"
    assert annotation.working_window.label == "07:00-13:00"


def test_overnight_shift_windows() -> None:
    window = PTOResolver().working_window(_leave("01:00", "07:00"), NIGHT)
    assert window.label == "23:00-01:00"


def test_malformed_window_needs_review(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="shift_roster.services.pto"):
        window = PTOResolver().working_window(_leave("16:00", "18:00"), DAY)

    assert window.needs_review
    assert window.label == "Check PTO"
    assert "does not fit shift" in caplog.text


def test_window_covering_whole_shift_needs_review() -> None:
    window = PTOResolver().working_window(_leave("07:00", "15:00"), DAY)
    assert window.needs_review
