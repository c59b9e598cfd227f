from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from shift_roster.core.config import Settings, get_settings
from shift_roster.core.exceptions import NotFoundError, ValidationError
from shift_roster.repositories.store import RosterStore
from shift_roster.services.assignment import LEADING_DIGITS
from shift_roster.services.categorizer import SUPERVISOR_RANKS, OfficerCategorizer, View
from shift_roster.services.pto import LeaveType, normalize_leave_type
from shift_roster.services.service_credit import ServiceCreditCalculator

logger = logging.getLogger(__name__)

VACATION_TYPES = (LeaveType.VACATION, LeaveType.HOLIDAY)


@dataclass
class VacationBlock:
    leave_type: LeaveType
    dates: list[date]

    @property
    def start_date(self) -> date:
        return self.dates[0]

    @property
    def end_date(self) -> date:
        return self.dates[-1]

    @property
    def days_count(self) -> int:
        return len(self.dates)


@dataclass
class OfficerVacation:
    officer_id: int
    name: str
    badge_number: str | None = None
    rank: str | None = None
    service_credit: float = 0.0
    blocks: list[VacationBlock] = field(default_factory=list)

    @property
    def total_days(self) -> int:
        return sum(block.days_count for block in self.blocks)

    @property
    def last_name(self) -> str:
        parts = self.name.split()
        return parts[-1] if parts else ""

    @property
    def badge_sort_key(self) -> int:
        match = LEADING_DIGITS.match(self.badge_number or "")
        return int(match.group(1)) if match else 9999

    @property
    def is_supervisor(self) -> bool:
        rank = (self.rank or "").strip().lower()
        return any(marker in rank for marker in SUPERVISOR_RANKS)

    @property
    def is_probationary(self) -> bool:
        return (self.rank or "").strip().lower() == "probationary"


@dataclass
class VacationList:
    shift_id: int
    start: date
    end: date
    officers: list[OfficerVacation] = field(default_factory=list)

    @property
    def total_days(self) -> int:
        return sum(officer.total_days for officer in self.officers)

    @property
    def average_days(self) -> float:
        if not self.officers:
            return 0.0
        return self.total_days / len(self.officers)


def split_blocks(days: list[tuple[date, LeaveType]]) -> list[VacationBlock]:
    """Group dated leave into runs of consecutive days with the same leave type."""
    blocks: list[VacationBlock] = []
    for day, leave_type in sorted(days, key=lambda item: item[0]):
        current = blocks[-1] if blocks else None
        if current is not None and current.leave_type is leave_type and day - current.end_date == timedelta(days=1):
            current.dates.append(day)
        else:
            blocks.append(VacationBlock(leave_type=leave_type, dates=[day]))
    return blocks


class VacationListBuilder:
    """Vacation and holiday leave per officer for one shift, grouped into blocks.

    Officers are listed supervisors first (command ranks, then sergeants),
    then regular officers, then PPOs. Each group runs most senior first with
    the lower badge number winning ties.
    """

    def __init__(
        self,
        store: RosterStore,
        settings: Settings | None = None,
        *,
        categorizer: OfficerCategorizer | None = None,
        service_credit: ServiceCreditCalculator | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.categorizer = categorizer or OfficerCategorizer(self.settings)
        self.service_credit = service_credit or ServiceCreditCalculator()

    async def build(
        self,
        shift_id: int,
        start: date,
        end: date,
        *,
        remaining_after: date | None = None,
    ) -> VacationList:
        if start > end:
            raise ValidationError(f"Range start {start} is after end {end}", field="start")
        if await self.store.get_shift(shift_id) is None:
            raise NotFoundError("ShiftType", shift_id)

        days_by_officer: dict[int, list[tuple[date, LeaveType]]] = {}
        for row in await self.store.list_exceptions(start, shift_id, end=end):
            if not row.is_off:
                continue
            leave_type, _ = normalize_leave_type(row.reason)
            if leave_type in VACATION_TYPES:
                days_by_officer.setdefault(row.officer_id, []).append((row.date, leave_type))

        profiles = {p.id: p for p in await self.store.list_profiles(sorted(days_by_officer))}
        entries = []
        for officer_id, days in days_by_officer.items():
            blocks = split_blocks(days)
            if remaining_after is not None:
                blocks = [block for block in blocks if block.end_date > remaining_after]
            if not blocks:
                continue
            profile = profiles.get(officer_id)
            entries.append(
                OfficerVacation(
                    officer_id=officer_id,
                    name=profile.full_name if profile else self.settings.unknown_officer_name,
                    badge_number=profile.badge_number if profile else None,
                    rank=profile.rank if profile else None,
                    service_credit=self.service_credit.calculate(profile) if profile else 0.0,
                    blocks=blocks,
                )
            )

        vacation_list = VacationList(shift_id=shift_id, start=start, end=end, officers=self._order(entries))
        logger.debug(
            "Vacation list for shift %s from %s to %s: %d officer(s), %d day(s)",
            shift_id,
            start,
            end,
            len(vacation_list.officers),
            vacation_list.total_days,
        )
        return vacation_list

    def _order(self, entries: list[OfficerVacation]) -> list[OfficerVacation]:
        supervisors = [e for e in entries if e.is_supervisor]
        ppos = [e for e in entries if not e.is_supervisor and e.is_probationary]
        officers = [e for e in entries if not e.is_supervisor and not e.is_probationary]
        return [
            *self.categorizer.sort_supervisors(supervisors),
            *self.categorizer.sort_officers(officers, View.VACATION_LIST),
            *self.categorizer.sort_officers(ppos, View.VACATION_LIST),
        ]
