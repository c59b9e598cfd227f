"""Read/write surface the roster services depend on.

Services only see ``RosterStore``; ``SqlAlchemyRosterStore`` adapts the
async repository functions and hands back pydantic read models so no ORM
instance leaks past this module. The caller owns the session and decides
when to commit or roll back.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from shift_roster.core.exceptions import NotFoundError
from shift_roster.repositories import officer as officer_repo
from shift_roster.repositories import schedule as schedule_repo
from shift_roster.repositories import system as system_repo
from shift_roster.schemas.officer import OfficerProfileRead, ShiftTypeRead
from shift_roster.schemas.schedule import (
    DefaultAssignmentRead,
    RecurringAssignmentRead,
    RecurringAssignmentUpdate,
    ScheduleExceptionCreate,
    ScheduleExceptionRead,
)
from shift_roster.schemas.system import (
    MinimumStaffingRead,
    PartnershipAuditCreate,
    PartnershipAuditRead,
)


class RosterStore(Protocol):
    async def get_shift(self, shift_id: int) -> ShiftTypeRead | None:
        raise NotImplementedError

    async def list_shifts(self) -> Sequence[ShiftTypeRead]:
        raise NotImplementedError

    async def list_recurring(
        self, shift_id: int | None, *, start: date, end: date
    ) -> Sequence[RecurringAssignmentRead]:
        """Recurring rows for the shift (all shifts when None) effective inside the range."""

        raise NotImplementedError

    async def list_exceptions(
        self, day: date, shift_id: int | None = None, *, end: date | None = None
    ) -> Sequence[ScheduleExceptionRead]:
        """Exceptions on ``day``, or on ``day``..``end`` inclusive when ``end`` is given."""

        raise NotImplementedError

    async def get_exception(self, exception_id: int) -> ScheduleExceptionRead | None:
        raise NotImplementedError

    async def find_exception(
        self, *, officer_id: int, day: date, shift_id: int, is_off: bool
    ) -> ScheduleExceptionRead | None:
        raise NotImplementedError

    async def get_profile(self, officer_id: int) -> OfficerProfileRead | None:
        raise NotImplementedError

    async def list_profiles(self, officer_ids: Iterable[int]) -> Sequence[OfficerProfileRead]:
        raise NotImplementedError

    async def get_minimum_staffing(self, day_of_week: int, shift_id: int) -> MinimumStaffingRead | None:
        raise NotImplementedError

    async def list_default_assignments(
        self, officer_ids: Iterable[int], *, start: date, end: date
    ) -> Sequence[DefaultAssignmentRead]:
        raise NotImplementedError

    async def upsert_exception(self, payload: ScheduleExceptionCreate) -> ScheduleExceptionRead:
        """Create or fully replace the exception in the payload's (officer, date, shift, is_off) slot."""

        raise NotImplementedError

    async def delete_exception(self, exception_id: int) -> None:
        raise NotImplementedError

    async def update_recurring(
        self, recurring_id: int, fields: RecurringAssignmentUpdate
    ) -> RecurringAssignmentRead:
        raise NotImplementedError

    async def add_partnership_audit(self, payload: PartnershipAuditCreate) -> PartnershipAuditRead:
        raise NotImplementedError

    async def resolve_partnership_audits(
        self, *, officer_id: int, day: date, shift_id: int, exception_type: str
    ) -> int:
        raise NotImplementedError


class SqlAlchemyRosterStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_shift(self, shift_id: int) -> ShiftTypeRead | None:
        shift = await officer_repo.get_shift_type(self.session, shift_id)
        return ShiftTypeRead.model_validate(shift) if shift else None

    async def list_shifts(self) -> list[ShiftTypeRead]:
        shifts = await officer_repo.list_shift_types(self.session)
        return [ShiftTypeRead.model_validate(shift) for shift in shifts]

    async def list_recurring(
        self, shift_id: int | None, *, start: date, end: date
    ) -> list[RecurringAssignmentRead]:
        rows = await schedule_repo.list_recurring(self.session, start=start, end=end, shift_id=shift_id)
        return [RecurringAssignmentRead.model_validate(row) for row in rows]

    async def list_exceptions(
        self, day: date, shift_id: int | None = None, *, end: date | None = None
    ) -> list[ScheduleExceptionRead]:
        rows = await schedule_repo.list_exceptions(self.session, start=day, end=end, shift_id=shift_id)
        return [ScheduleExceptionRead.model_validate(row) for row in rows]

    async def get_exception(self, exception_id: int) -> ScheduleExceptionRead | None:
        row = await schedule_repo.get_exception(self.session, exception_id)
        return ScheduleExceptionRead.model_validate(row) if row else None

    async def find_exception(
        self, *, officer_id: int, day: date, shift_id: int, is_off: bool
    ) -> ScheduleExceptionRead | None:
        row = await schedule_repo.find_exception(
            self.session, officer_id=officer_id, day=day, shift_id=shift_id, is_off=is_off
        )
        return ScheduleExceptionRead.model_validate(row) if row else None

    async def get_profile(self, officer_id: int) -> OfficerProfileRead | None:
        profile = await officer_repo.get_profile(self.session, officer_id)
        return OfficerProfileRead.model_validate(profile) if profile else None

    async def list_profiles(self, officer_ids: Iterable[int]) -> list[OfficerProfileRead]:
        profiles = await officer_repo.list_profiles(self.session, officer_ids)
        return [OfficerProfileRead.model_validate(profile) for profile in profiles]

    async def get_minimum_staffing(self, day_of_week: int, shift_id: int) -> MinimumStaffingRead | None:
        rule = await system_repo.get_minimum_staffing(self.session, day_of_week, shift_id)
        return MinimumStaffingRead.model_validate(rule) if rule else None

    async def list_default_assignments(
        self, officer_ids: Iterable[int], *, start: date, end: date
    ) -> list[DefaultAssignmentRead]:
        rows = await schedule_repo.list_default_assignments(
            self.session, start=start, end=end, officer_ids=officer_ids
        )
        return [DefaultAssignmentRead.model_validate(row) for row in rows]

    async def upsert_exception(self, payload: ScheduleExceptionCreate) -> ScheduleExceptionRead:
        row = await schedule_repo.upsert_exception(self.session, payload)
        return ScheduleExceptionRead.model_validate(row)

    async def delete_exception(self, exception_id: int) -> None:
        row = await schedule_repo.get_exception(self.session, exception_id)
        if row is None:
            raise NotFoundError("ScheduleException", exception_id)
        await schedule_repo.delete_exception(self.session, row)

    async def update_recurring(
        self, recurring_id: int, fields: RecurringAssignmentUpdate
    ) -> RecurringAssignmentRead:
        row = await schedule_repo.get_recurring(self.session, recurring_id)
        if row is None:
            raise NotFoundError("RecurringAssignment", recurring_id)
        row = await schedule_repo.update_recurring(self.session, row, fields)
        return RecurringAssignmentRead.model_validate(row)

    async def add_partnership_audit(self, payload: PartnershipAuditCreate) -> PartnershipAuditRead:
        entry = await system_repo.create_partnership_audit(self.session, payload)
        return PartnershipAuditRead.model_validate(entry)

    async def resolve_partnership_audits(
        self, *, officer_id: int, day: date, shift_id: int, exception_type: str
    ) -> int:
        return await system_repo.resolve_partnership_audits(
            self.session,
            officer_id=officer_id,
            day=day,
            shift_id=shift_id,
            exception_type=exception_type,
        )
