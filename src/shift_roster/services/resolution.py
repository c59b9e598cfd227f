from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Sequence

from shift_roster.core.config import Settings, get_settings
from shift_roster.core.exceptions import NotFoundError, ValidationError
from shift_roster.repositories.store import RosterStore
from shift_roster.schemas.officer import OfficerProfileRead, ShiftTypeRead
from shift_roster.schemas.schedule import (
    DefaultAssignmentRead,
    RecurringAssignmentRead,
    ScheduleExceptionRead,
)
from shift_roster.services.assignment import ResolvedDayAssignment
from shift_roster.services.calendar import day_of_week, iter_dates
from shift_roster.services.categorizer import Category, CategorizedRoster, OfficerCategorizer, View
from shift_roster.services.partnership import PartnershipRecord
from shift_roster.services.pto import PTOResolver
from shift_roster.services.service_credit import ServiceCreditCalculator
from shift_roster.services.staffing import StaffingCalculator, StaffingMinimums, StaffingSummary

logger = logging.getLogger(__name__)


@dataclass
class PartnershipLink:
    officer_id: int
    partner_officer_id: int | None
    active: bool
    suspended: bool = False
    broken: bool = False
    suspension_reason: str | None = None


@dataclass
class ShiftRoster:
    shift: ShiftTypeRead
    assignments: list[ResolvedDayAssignment]
    categories: CategorizedRoster
    staffing: StaffingSummary
    leave_records: list[ResolvedDayAssignment] = field(default_factory=list)
    partnerships: list[PartnershipLink] = field(default_factory=list)


@dataclass
class DaySchedule:
    date: date
    day_of_week: int
    shifts: list[ShiftRoster] = field(default_factory=list)

    @property
    def is_understaffed(self) -> bool:
        return any(roster.staffing.is_understaffed for roster in self.shifts)

    def for_shift(self, shift_id: int) -> ShiftRoster | None:
        return next((roster for roster in self.shifts if roster.shift.id == shift_id), None)


@dataclass
class _Snapshot:
    recurring: Sequence[RecurringAssignmentRead]
    exceptions: Sequence[ScheduleExceptionRead]
    profiles: dict[int, OfficerProfileRead]
    defaults: Sequence[DefaultAssignmentRead]


def _effective(start: date, end: date | None, day: date) -> bool:
    return start <= day and (end is None or end >= day)


class ScheduleResolutionEngine:
    """Merges recurring rows with date exceptions into a categorized, staffing-checked roster.

    One store read per entity covers a whole range; nothing is kept between
    calls.
    """

    def __init__(
        self,
        store: RosterStore,
        settings: Settings | None = None,
        *,
        pto: PTOResolver | None = None,
        categorizer: OfficerCategorizer | None = None,
        staffing: StaffingCalculator | None = None,
        service_credit: ServiceCreditCalculator | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.pto = pto or PTOResolver()
        self.categorizer = categorizer or OfficerCategorizer(self.settings)
        self.staffing = staffing or StaffingCalculator(self.settings, self.categorizer)
        self.service_credit = service_credit or ServiceCreditCalculator()

    async def resolve_day(self, day: date, shift_id: int) -> list[ResolvedDayAssignment]:
        shift = await self._require_shift(shift_id)
        snapshot = await self._load(day, day, shift_id)
        return self._merge(day, shift, snapshot)

    async def resolve_range(
        self,
        start: date,
        end: date,
        shift_id: int | None = None,
        *,
        view: View = View.DAILY,
        force_counts: Mapping[int, int] | None = None,
    ) -> list[DaySchedule]:
        if start > end:
            raise ValidationError(f"Range start {start} is after end {end}", field="start")

        if shift_id is not None:
            shifts = [await self._require_shift(shift_id)]
        else:
            shifts = sorted(await self.store.list_shifts(), key=lambda s: (s.start_time, s.id))

        snapshot = await self._load(start, end, shift_id)
        minimums: dict[tuple[int, int], StaffingMinimums] = {}

        days: list[DaySchedule] = []
        for day in iter_dates(start, end):
            weekday = day_of_week(day)
            schedule = DaySchedule(date=day, day_of_week=weekday)
            for shift in shifts:
                key = (weekday, shift.id)
                if key not in minimums:
                    rule = await self.store.get_minimum_staffing(weekday, shift.id)
                    minimums[key] = self.staffing.minimums_for(rule)

                assignments = self._merge(day, shift, snapshot)
                schedule.shifts.append(
                    ShiftRoster(
                        shift=shift,
                        assignments=assignments,
                        categories=self.categorizer.categorize(assignments, view, force_counts),
                        staffing=self.staffing.evaluate(assignments, minimums[key]),
                        leave_records=[a for a in assignments if a.leave is not None],
                        partnerships=self._partnership_links(assignments),
                    )
                )
            days.append(schedule)
        logger.debug("Resolved %d day(s) from %s to %s for %d shift(s)", len(days), start, end, len(shifts))
        return days

    async def is_understaffed(self, shift_id: int, day: date) -> bool:
        (schedule,) = await self.resolve_range(day, day, shift_id)
        return schedule.shifts[0].staffing.is_understaffed

    async def available_partners(self, day: date, shift_id: int) -> list[ResolvedDayAssignment]:
        """Working regular officers with no active partnership, most senior first."""
        assignments = await self.resolve_day(day, shift_id)
        candidates = [
            a
            for a in assignments
            if self.categorizer.category(a) is Category.OFFICER and not a.is_partnership
        ]
        return self.categorizer.sort_officers(candidates)

    async def _require_shift(self, shift_id: int) -> ShiftTypeRead:
        shift = await self.store.get_shift(shift_id)
        if shift is None:
            raise NotFoundError("ShiftType", shift_id)
        return shift

    async def _load(self, start: date, end: date, shift_id: int | None) -> _Snapshot:
        recurring = await self.store.list_recurring(shift_id, start=start, end=end)
        exceptions = await self.store.list_exceptions(start, shift_id, end=end)

        officer_ids: set[int] = set()
        for row in [*recurring, *exceptions]:
            officer_ids.add(row.officer_id)
            if row.partner_officer_id:
                officer_ids.add(row.partner_officer_id)

        profiles = {profile.id: profile for profile in await self.store.list_profiles(sorted(officer_ids))}
        defaults = await self.store.list_default_assignments(sorted(officer_ids), start=start, end=end)
        return _Snapshot(recurring=recurring, exceptions=exceptions, profiles=profiles, defaults=defaults)

    def _merge(self, day: date, shift: ShiftTypeRead, snapshot: _Snapshot) -> list[ResolvedDayAssignment]:
        weekday = day_of_week(day)
        recurring: dict[int, RecurringAssignmentRead] = {}
        for row in snapshot.recurring:
            if (
                row.shift_type_id == shift.id
                and row.day_of_week == weekday
                and _effective(row.start_date, row.end_date, day)
            ):
                recurring.setdefault(row.officer_id, row)

        working: dict[int, ScheduleExceptionRead] = {}
        leave: dict[int, ScheduleExceptionRead] = {}
        for row in snapshot.exceptions:
            if row.date == day and row.shift_type_id == shift.id:
                (leave if row.is_off else working).setdefault(row.officer_id, row)

        # one entry per officer; exception rows are folded into the recurring entry
        officer_ids = list(dict.fromkeys([*recurring, *working, *leave]))
        assignments = [
            self._build(
                day,
                shift,
                PartnershipRecord(
                    officer_id=officer_id,
                    working=working.get(officer_id),
                    leave=leave.get(officer_id),
                    recurring=recurring.get(officer_id),
                ),
                snapshot,
            )
            for officer_id in officer_ids
        ]
        self._degrade_broken_partnerships(day, shift, assignments)
        return assignments

    def _build(
        self,
        day: date,
        shift: ShiftTypeRead,
        record: PartnershipRecord,
        snapshot: _Snapshot,
    ) -> ResolvedDayAssignment:
        officer_id = record.officer_id
        work, off, regular = record.working, record.leave, record.recurring
        profile = snapshot.profiles.get(officer_id)

        position = (work.position_name if work else None) or (regular.position_name if regular else None)
        unit = (work.unit_number if work else None) or (regular.unit_number if regular else None)
        if not position or not unit:
            fallback = self._default_assignment(officer_id, day, snapshot)
            if fallback is not None:
                position = position or fallback.position_name
                unit = unit or fallback.unit_number

        if work is not None:
            source = "exception"
        elif regular is not None:
            source = "recurring"
        else:
            source = "leave"

        partnership_source = record.source
        suspended = isinstance(partnership_source, ScheduleExceptionRead) and partnership_source.partnership_suspended
        partner_id = record.partner_officer_id if record.is_partnership or suspended else None
        partner = snapshot.profiles.get(partner_id) if partner_id else None

        return ResolvedDayAssignment(
            officer_id=officer_id,
            date=day,
            shift_id=shift.id,
            name=profile.full_name if profile else self.settings.unknown_officer_name,
            badge_number=profile.badge_number if profile else None,
            rank=profile.rank if profile else None,
            service_credit=self.service_credit.calculate(profile) if profile else 0.0,
            position_name=position,
            unit_number=unit,
            notes=work.notes if work else (off.notes if off and regular is None else None),
            custom_start_time=work.custom_start_time if work else None,
            custom_end_time=work.custom_end_time if work else None,
            source=source,
            schedule_type=(work or off).schedule_type if (work or off) else None,
            recurring_id=regular.id if regular else None,
            working_exception_id=work.id if work else None,
            leave_exception_id=off.id if off else None,
            is_regular_recurring_day=regular is not None,
            leave=self.pto.annotate(off, shift),
            is_partnership=record.is_partnership and not suspended,
            partner_officer_id=partner_id,
            partner_name=(partner.full_name if partner else self.settings.unknown_officer_name) if partner_id else None,
            partnership_suspended=suspended,
            partnership_suspension_reason=(
                partnership_source.partnership_suspension_reason if suspended else None
            ),
        )

    @staticmethod
    def _default_assignment(officer_id: int, day: date, snapshot: _Snapshot) -> DefaultAssignmentRead | None:
        for row in snapshot.defaults:
            if row.officer_id == officer_id and _effective(row.start_date, row.end_date, day):
                return row
        return None

    def _degrade_broken_partnerships(
        self, day: date, shift: ShiftTypeRead, assignments: list[ResolvedDayAssignment]
    ) -> None:
        by_officer = {a.officer_id: a for a in assignments}
        broken = []
        for assignment in assignments:
            if not assignment.is_partnership:
                continue
            partner = by_officer.get(assignment.partner_officer_id)
            if (
                partner is None
                or not partner.is_partnership
                or partner.partner_officer_id != assignment.officer_id
                or assignment.is_full_day_leave
                or partner.is_full_day_leave
            ):
                broken.append(assignment)

        for assignment in broken:
            logger.warning(
                "Treating officer %s as unpartnered on %s shift %s: partner %s does not confirm the partnership",
                assignment.officer_id,
                day,
                shift.name,
                assignment.partner_officer_id,
            )
            assignment.is_partnership = False
            assignment.partnership_broken = True

    @staticmethod
    def _partnership_links(assignments: list[ResolvedDayAssignment]) -> list[PartnershipLink]:
        links = []
        seen: set[frozenset[int]] = set()
        for a in assignments:
            if not (a.is_partnership or a.partnership_suspended or a.partnership_broken):
                continue
            if a.is_partnership:
                pair = frozenset((a.officer_id, a.partner_officer_id))
                if pair in seen:
                    continue
                seen.add(pair)
            links.append(
                PartnershipLink(
                    officer_id=a.officer_id,
                    partner_officer_id=a.partner_officer_id,
                    active=a.is_partnership,
                    suspended=a.partnership_suspended,
                    broken=a.partnership_broken,
                    suspension_reason=a.partnership_suspension_reason,
                )
            )
        return links
