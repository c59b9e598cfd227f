"""Symmetric partner pairings for a date and shift.

A partnership lives on both officers' rows: each names the other in
``partner_officer_id`` with ``is_partnership`` set. Every mutation here writes
both sides through ``_write_both_sides``, which verifies each write by reading
it back and reverts the first side when the second cannot be completed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Awaitable, Callable

from shift_roster.core.config import Settings, get_settings
from shift_roster.core.exceptions import (
    MissingPartnerReferenceError,
    NotFoundError,
    OfficerOnLeaveError,
    PartialWriteError,
    PartnershipConflictError,
    PartnershipStateError,
    ValidationError,
)
from shift_roster.repositories.store import RosterStore
from shift_roster.schemas.officer import OfficerProfileRead
from shift_roster.schemas.schedule import (
    ExceptionProvenance,
    RecurringAssignmentRead,
    RecurringAssignmentUpdate,
    ScheduleExceptionCreate,
    ScheduleExceptionRead,
)
from shift_roster.schemas.system import PartnershipAuditCreate, PartnershipAuditType
from shift_roster.services.calendar import day_of_week

logger = logging.getLogger(__name__)

VERIFIED_FIELDS = (
    "is_off",
    "reason",
    "position_name",
    "unit_number",
    "custom_start_time",
    "custom_end_time",
    "is_partnership",
    "partner_officer_id",
    "partnership_suspended",
    "partnership_suspension_reason",
)
EMERGENCY_NOTE = "EMERGENCY partner reassignment"


def _carries_partnership(row: ScheduleExceptionRead | None) -> bool:
    return row is not None and bool(
        row.is_partnership or row.partnership_suspended or row.partner_officer_id
    )


def is_probationary(profile: OfficerProfileRead | None) -> bool:
    return profile is not None and (profile.rank or "").strip().lower() == "probationary"


@dataclass
class PartnershipRecord:
    """What the store says about one officer's partnership on a date and shift.

    The working exception is authoritative, then a leave exception that
    carries partnership data, then the recurring row.
    """

    officer_id: int
    working: ScheduleExceptionRead | None = None
    leave: ScheduleExceptionRead | None = None
    recurring: RecurringAssignmentRead | None = None

    @property
    def source(self) -> ScheduleExceptionRead | RecurringAssignmentRead | None:
        if self.working is not None:
            return self.working
        if _carries_partnership(self.leave):
            return self.leave
        return self.recurring

    @property
    def is_partnership(self) -> bool:
        source = self.source
        return bool(source is not None and source.is_partnership and source.partner_officer_id)

    @property
    def partner_officer_id(self) -> int | None:
        source = self.source
        return source.partner_officer_id if source is not None else None

    @property
    def is_suspended(self) -> bool:
        source = self.source
        return isinstance(source, ScheduleExceptionRead) and source.partnership_suspended

    @property
    def is_full_day_leave(self) -> bool:
        return self.leave is not None and not self.leave.has_custom_window

    def suspended_rows(self) -> list[ScheduleExceptionRead]:
        return [row for row in (self.leave, self.working) if row is not None and row.partnership_suspended]


@dataclass
class PartnershipChange:
    officer_id: int
    partner_id: int | None
    rows: list[ScheduleExceptionRead | RecurringAssignmentRead] = field(default_factory=list)
    symmetric: bool = True


@dataclass
class RestoreOutcome:
    officer_id: int
    partner_id: int | None
    restored: bool
    partner_reassigned: bool = False


@dataclass
class _SideWrite:
    officer_id: int
    description: str
    apply: Callable[[], Awaitable[Any]]
    verify: Callable[[], Awaitable[bool]]
    revert: Callable[[], Awaitable[None]]
    snapshot: dict[str, Any] | None = None


class _VerificationFailed(Exception):
    pass


class PartnershipResolver:
    def __init__(self, store: RosterStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    # -- reads -----------------------------------------------------------

    async def load_record(self, officer_id: int, day: date, shift_id: int) -> PartnershipRecord:
        working = await self.store.find_exception(officer_id=officer_id, day=day, shift_id=shift_id, is_off=False)
        leave = await self.store.find_exception(officer_id=officer_id, day=day, shift_id=shift_id, is_off=True)
        return PartnershipRecord(
            officer_id=officer_id,
            working=working,
            leave=leave,
            recurring=await self._recurring_for(officer_id, day, shift_id),
        )

    async def _recurring_for(self, officer_id: int, day: date, shift_id: int) -> RecurringAssignmentRead | None:
        weekday = day_of_week(day)
        for row in await self.store.list_recurring(shift_id, start=day, end=day):
            if row.officer_id == officer_id and row.day_of_week == weekday:
                return row
        return None

    async def check_symmetry(self, day: date, shift_id: int, officer_id: int, partner_id: int) -> bool:
        """Both sides must name each other whenever either claims an active partnership."""
        first = await self.load_record(officer_id, day, shift_id)
        second = await self.load_record(partner_id, day, shift_id)
        claims = [
            record
            for record in (first, second)
            if record.is_partnership and record.partner_officer_id in (officer_id, partner_id)
        ]
        if not claims:
            return True

        symmetric = (
            first.is_partnership
            and second.is_partnership
            and first.partner_officer_id == partner_id
            and second.partner_officer_id == officer_id
        )
        if not symmetric:
            logger.error(
                "Partnership asymmetry on %s shift %s: officer %s -> %s (active=%s), officer %s -> %s (active=%s)",
                day,
                shift_id,
                officer_id,
                first.partner_officer_id,
                first.is_partnership,
                partner_id,
                second.partner_officer_id,
                second.is_partnership,
            )
        return symmetric

    # -- mutations -------------------------------------------------------

    async def create(
        self,
        officer_id: int,
        partner_id: int,
        day: date,
        shift_id: int,
        *,
        provenance: ExceptionProvenance = ExceptionProvenance.MANUAL_PARTNERSHIP,
        reason: str | None = None,
        audit: bool = True,
    ) -> PartnershipChange:
        self._validate_pair(officer_id, partner_id)
        await self._require_shift(shift_id)

        first = await self.load_record(officer_id, day, shift_id)
        second = await self.load_record(partner_id, day, shift_id)
        for record, other in ((first, partner_id), (second, officer_id)):
            if record.is_full_day_leave:
                raise OfficerOnLeaveError(
                    f"Officer {record.officer_id} is on leave on {day}", officer_id=record.officer_id
                )
            if record.is_partnership and record.partner_officer_id != other:
                raise PartnershipConflictError(
                    f"Officer {record.officer_id} is already partnered with {record.partner_officer_id}",
                    officer_id=record.officer_id,
                )

        profiles = await self._profiles(officer_id, partner_id)
        writes = []
        for record, other in ((first, partner_id), (second, officer_id)):
            payload = self._partnered_payload(record, other, day, shift_id, profiles.get(record.officer_id), provenance)
            writes.append([self._upsert_write(payload, record.working)])

        rows = await self._write_both_sides("create", writes[0], writes[1])
        if audit:
            await self._audit(
                officer_id,
                partner_id,
                day,
                shift_id,
                PartnershipAuditType.CREATED,
                reason or "Partnership created",
            )
        logger.info("Partnered officers %s and %s on %s shift %s", officer_id, partner_id, day, shift_id)
        symmetric = await self.check_symmetry(day, shift_id, officer_id, partner_id)
        return PartnershipChange(officer_id, partner_id, rows=rows, symmetric=symmetric)

    async def remove(
        self,
        officer_id: int,
        day: date,
        shift_id: int,
        *,
        partner_hint: int | None = None,
        reason: str | None = None,
    ) -> PartnershipChange:
        if not officer_id:
            raise ValidationError("An officer is required", field="officer_id")

        first = await self.load_record(officer_id, day, shift_id)
        partner_id = first.partner_officer_id or partner_hint
        if not partner_id:
            raise MissingPartnerReferenceError(
                f"No partner recorded for officer {officer_id} on {day}", officer_id=officer_id
            )
        second = await self.load_record(partner_id, day, shift_id)

        rows = await self._write_both_sides(
            "remove",
            self._unpartner_writes(first, day, shift_id),
            self._unpartner_writes(second, day, shift_id),
        )
        await self._audit(
            officer_id, partner_id, day, shift_id, PartnershipAuditType.REMOVED, reason or "Partnership removed"
        )
        logger.info("Removed partnership of officers %s and %s on %s shift %s", officer_id, partner_id, day, shift_id)
        symmetric = await self.check_symmetry(day, shift_id, officer_id, partner_id)
        return PartnershipChange(officer_id, partner_id, rows=rows, symmetric=symmetric)

    async def suspend(
        self,
        officer_id: int,
        day: date,
        shift_id: int,
        reason: str,
        *,
        notes: str | None = None,
    ) -> PartnershipChange:
        """Put a partnered officer on full-day leave and free the partner for reassignment."""
        if not reason or not reason.strip():
            raise ValidationError("A leave reason is required", field="reason")

        first = await self.load_record(officer_id, day, shift_id)
        if not first.is_partnership:
            raise PartnershipStateError(
                f"Officer {officer_id} has no active partnership on {day}", officer_id=officer_id
            )
        partner_id = first.partner_officer_id
        if not partner_id:
            raise MissingPartnerReferenceError(
                f"No partner recorded for officer {officer_id} on {day}", officer_id=officer_id
            )
        second = await self.load_record(partner_id, day, shift_id)

        suspension = {
            "is_partnership": False,
            "partnership_suspended": True,
            "partnership_suspension_reason": reason,
        }
        if first.leave is not None:
            leave = first.leave.to_create(
                reason=reason,
                custom_start_time=None,
                custom_end_time=None,
                partner_officer_id=partner_id,
                notes=notes if notes is not None else first.leave.notes,
                **suspension,
            )
        else:
            leave = ScheduleExceptionCreate(
                officer_id=officer_id,
                date=day,
                shift_type_id=shift_id,
                is_off=True,
                reason=reason,
                notes=notes,
                partner_officer_id=partner_id,
                schedule_type=ExceptionProvenance.LEAVE,
                **suspension,
            )
        officer_writes = [self._upsert_write(leave, first.leave)]
        if first.working is not None:
            officer_writes.append(
                self._upsert_write(first.working.to_create(partner_officer_id=partner_id, **suspension), first.working)
            )

        if second.working is not None:
            partner_payload = second.working.to_create(partner_officer_id=officer_id, **suspension)
        else:
            recurring = second.recurring
            partner_payload = ScheduleExceptionCreate(
                officer_id=partner_id,
                date=day,
                shift_type_id=shift_id,
                is_off=False,
                position_name=(recurring.position_name if recurring else None)
                or self.settings.reassignment_position,
                unit_number=recurring.unit_number if recurring else None,
                partner_officer_id=officer_id,
                schedule_type=ExceptionProvenance.LEAVE_PARTNER_SUSPENSION,
                **suspension,
            )

        rows = await self._write_both_sides(
            "suspend", officer_writes, [self._upsert_write(partner_payload, second.working)]
        )
        await self._audit(officer_id, partner_id, day, shift_id, PartnershipAuditType.PTO_SUSPENSION, reason)
        logger.info(
            "Suspended partnership of officers %s and %s on %s shift %s (%s)",
            officer_id,
            partner_id,
            day,
            shift_id,
            reason,
        )
        symmetric = await self.check_symmetry(day, shift_id, officer_id, partner_id)
        return PartnershipChange(officer_id, partner_id, rows=rows, symmetric=symmetric)

    async def restore(self, officer_id: int, day: date, shift_id: int) -> RestoreOutcome:
        """Undo a leave suspension once the officer's leave is gone.

        If the partner has been given someone else in the meantime, only the
        officer's own rows are cleared and the partner is left alone.
        """
        first = await self.load_record(officer_id, day, shift_id)
        if not first.suspended_rows():
            counterpart = await self._suspended_counterpart(officer_id, day, shift_id)
            if counterpart is None:
                return RestoreOutcome(officer_id, None, restored=False)
            first = await self.load_record(counterpart, day, shift_id)
            officer_id = counterpart

        suspended = first.suspended_rows()
        partner_id = next((row.partner_officer_id for row in suspended if row.partner_officer_id), None)
        if not partner_id:
            raise MissingPartnerReferenceError(
                f"Suspended partnership of officer {officer_id} on {day} has no partner", officer_id=officer_id
            )
        second = await self.load_record(partner_id, day, shift_id)

        if second.is_partnership and second.partner_officer_id != officer_id:
            writes = [self._upsert_write(self._cleared(row), row) for row in suspended]
            await self._write_both_sides("restore", writes, [])
            await self._resolve_suspension(officer_id, day, shift_id)
            logger.info(
                "Partner %s of officer %s was reassigned on %s shift %s; partnership not restored",
                partner_id,
                officer_id,
                day,
                shift_id,
            )
            return RestoreOutcome(officer_id, partner_id, restored=False, partner_reassigned=True)

        officer_writes = []
        for row in suspended:
            if row.is_off:
                officer_writes.append(self._upsert_write(self._cleared(row), row))
            else:
                officer_writes.append(self._upsert_write(self._restored(row, partner_id), row))

        partner_writes = []
        partner_row = second.working
        if partner_row is not None and partner_row.partnership_suspended:
            if partner_row.schedule_type == ExceptionProvenance.LEAVE_PARTNER_SUSPENSION:
                partner_writes.append(self._delete_write(partner_row))
            else:
                partner_writes.append(self._upsert_write(self._restored(partner_row, officer_id), partner_row))

        await self._write_both_sides("restore", officer_writes, partner_writes)
        await self._resolve_suspension(officer_id, day, shift_id)
        logger.info("Restored partnership of officers %s and %s on %s shift %s", officer_id, partner_id, day, shift_id)
        await self.check_symmetry(day, shift_id, officer_id, partner_id)
        return RestoreOutcome(officer_id, partner_id, restored=True)

    async def emergency_reassign(
        self,
        ppo_id: int,
        partner_id: int,
        day: date,
        shift_id: int,
        *,
        reason: str | None = None,
    ) -> PartnershipChange:
        """Pair a probationary officer whose partner is on leave with an available officer."""
        self._validate_pair(ppo_id, partner_id)
        await self._require_shift(shift_id)

        profiles = await self._profiles(ppo_id, partner_id)
        if not is_probationary(profiles.get(ppo_id)):
            raise PartnershipStateError(f"Officer {ppo_id} is not probationary", officer_id=ppo_id)
        if is_probationary(profiles.get(partner_id)):
            raise PartnershipStateError(
                f"Officer {partner_id} is probationary and cannot ride as emergency partner",
                officer_id=partner_id,
            )

        ppo = await self.load_record(ppo_id, day, shift_id)
        if ppo.is_full_day_leave:
            raise OfficerOnLeaveError(f"Officer {ppo_id} is on leave on {day}", officer_id=ppo_id)
        if not ppo.is_suspended:
            raise PartnershipStateError(
                f"Officer {ppo_id} has no suspended partnership on {day}", officer_id=ppo_id
            )
        partner = await self.load_record(partner_id, day, shift_id)
        if partner.is_full_day_leave:
            raise OfficerOnLeaveError(f"Officer {partner_id} is on leave on {day}", officer_id=partner_id)
        if partner.is_partnership:
            raise PartnershipConflictError(
                f"Officer {partner_id} is already partnered on {day}", officer_id=partner_id
            )

        provenance = ExceptionProvenance.EMERGENCY_PARTNERSHIP
        writes = []
        for record, other in ((ppo, partner_id), (partner, ppo_id)):
            payload = self._partnered_payload(record, other, day, shift_id, profiles.get(record.officer_id), provenance)
            payload.notes = f"{payload.notes}\n{EMERGENCY_NOTE}" if payload.notes else EMERGENCY_NOTE
            writes.append([self._upsert_write(payload, record.working)])

        rows = await self._write_both_sides("emergency_reassign", writes[0], writes[1])
        await self._audit(
            ppo_id,
            partner_id,
            day,
            shift_id,
            PartnershipAuditType.EMERGENCY_REASSIGNMENT,
            reason or "Emergency reassignment",
        )
        logger.info("Emergency partner %s assigned to officer %s on %s shift %s", partner_id, ppo_id, day, shift_id)
        symmetric = await self.check_symmetry(day, shift_id, ppo_id, partner_id)
        return PartnershipChange(ppo_id, partner_id, rows=rows, symmetric=symmetric)

    async def materialize_recurring(self, day: date, shift_id: int) -> list[tuple[int, int]]:
        """Write date-specific partnership rows for the standing pairs working on ``day``.

        Pairs where either officer is on leave, or already has a partnership
        exception for the date, are skipped.
        """
        await self._require_shift(shift_id)
        weekday = day_of_week(day)
        recurring = [
            row
            for row in await self.store.list_recurring(shift_id, start=day, end=day)
            if row.day_of_week == weekday and row.is_partnership and row.partner_officer_id
        ]
        exceptions = await self.store.list_exceptions(day, shift_id)
        on_leave = {row.officer_id for row in exceptions if row.is_off}
        partnered = {row.officer_id for row in exceptions if not row.is_off and row.is_partnership}

        created: list[tuple[int, int]] = []
        seen: set[tuple[int, int]] = set()
        for row in recurring:
            pair = tuple(sorted((row.officer_id, row.partner_officer_id)))
            if pair in seen:
                continue
            seen.add(pair)
            if on_leave.intersection(pair) or partnered.intersection(pair):
                continue
            try:
                await self.create(
                    row.officer_id,
                    row.partner_officer_id,
                    day,
                    shift_id,
                    provenance=ExceptionProvenance.RECURRING_PARTNERSHIP,
                    audit=False,
                )
            except (OfficerOnLeaveError, PartnershipConflictError) as exc:
                logger.warning("Skipped standing partnership %s on %s: %s", pair, day, exc)
                continue
            created.append((row.officer_id, row.partner_officer_id))
        return created

    async def pair_recurring(
        self,
        officer_id: int,
        partner_id: int,
        shift_id: int,
        weekday: int,
        *,
        as_of: date,
    ) -> PartnershipChange:
        """Make two officers standing partners on their recurring rows for a weekday."""
        self._validate_pair(officer_id, partner_id)
        first = await self._recurring_on(officer_id, shift_id, weekday, as_of)
        second = await self._recurring_on(partner_id, shift_id, weekday, as_of)
        for row, other in ((first, partner_id), (second, officer_id)):
            if row.is_partnership and row.partner_officer_id not in (None, other):
                raise PartnershipConflictError(
                    f"Officer {row.officer_id} already has standing partner {row.partner_officer_id}",
                    officer_id=row.officer_id,
                )
        rows = await self._write_both_sides(
            "pair_recurring",
            [self._recurring_write(first, RecurringAssignmentUpdate(is_partnership=True, partner_officer_id=partner_id))],
            [self._recurring_write(second, RecurringAssignmentUpdate(is_partnership=True, partner_officer_id=officer_id))],
        )
        logger.info("Officers %s and %s are standing partners on weekday %s", officer_id, partner_id, weekday)
        return PartnershipChange(officer_id, partner_id, rows=rows)

    async def unpair_recurring(
        self,
        officer_id: int,
        shift_id: int,
        weekday: int,
        *,
        as_of: date,
    ) -> PartnershipChange:
        first = await self._recurring_on(officer_id, shift_id, weekday, as_of)
        partner_id = first.partner_officer_id
        if not partner_id:
            raise MissingPartnerReferenceError(
                f"Recurring row {first.id} has no partner", officer_id=officer_id
            )
        cleared = RecurringAssignmentUpdate(is_partnership=False, partner_officer_id=None)
        partner_writes = []
        try:
            second = await self._recurring_on(partner_id, shift_id, weekday, as_of)
        except NotFoundError:
            logger.warning("Standing partner %s of officer %s has no recurring row", partner_id, officer_id)
        else:
            partner_writes.append(self._recurring_write(second, cleared))

        rows = await self._write_both_sides(
            "unpair_recurring", [self._recurring_write(first, cleared)], partner_writes
        )
        logger.info("Officers %s and %s are no longer standing partners on weekday %s", officer_id, partner_id, weekday)
        return PartnershipChange(officer_id, partner_id, rows=rows)

    # -- helpers ---------------------------------------------------------

    @staticmethod
    def _validate_pair(officer_id: int | None, partner_id: int | None) -> None:
        if not officer_id:
            raise ValidationError("An officer is required", field="officer_id")
        if not partner_id:
            raise ValidationError("A partner officer is required", field="partner_officer_id")
        if officer_id == partner_id:
            raise ValidationError("An officer cannot be partnered with themselves", field="partner_officer_id")

    async def _require_shift(self, shift_id: int) -> None:
        if await self.store.get_shift(shift_id) is None:
            raise NotFoundError("ShiftType", shift_id)

    async def _profiles(self, *officer_ids: int) -> dict[int, OfficerProfileRead]:
        return {profile.id: profile for profile in await self.store.list_profiles(officer_ids)}

    async def _recurring_on(
        self, officer_id: int, shift_id: int, weekday: int, as_of: date
    ) -> RecurringAssignmentRead:
        for row in await self.store.list_recurring(shift_id, start=as_of, end=as_of):
            if row.officer_id == officer_id and row.day_of_week == weekday:
                return row
        raise NotFoundError("RecurringAssignment", (officer_id, shift_id, weekday))

    async def _suspended_counterpart(self, officer_id: int, day: date, shift_id: int) -> int | None:
        for row in await self.store.list_exceptions(day, shift_id):
            if row.partnership_suspended and row.is_off and row.partner_officer_id == officer_id:
                return row.officer_id
        return None

    def _partnered_payload(
        self,
        record: PartnershipRecord,
        partner_id: int,
        day: date,
        shift_id: int,
        profile: OfficerProfileRead | None,
        provenance: ExceptionProvenance,
    ) -> ScheduleExceptionCreate:
        partnered = {
            "is_partnership": True,
            "partner_officer_id": partner_id,
            "partnership_suspended": False,
            "partnership_suspension_reason": None,
            "schedule_type": provenance,
        }
        default_position = (
            self.settings.probationary_partner_position
            if is_probationary(profile)
            else self.settings.riding_partner_position
        )
        if record.working is not None:
            position = record.working.position_name
            if not position or position == self.settings.reassignment_position:
                position = default_position
            return record.working.to_create(position_name=position, **partnered)

        return ScheduleExceptionCreate(
            officer_id=record.officer_id,
            date=day,
            shift_type_id=shift_id,
            is_off=False,
            position_name=default_position,
            unit_number=record.recurring.unit_number if record.recurring else None,
            **partnered,
        )

    def _unpartner_writes(self, record: PartnershipRecord, day: date, shift_id: int) -> list[_SideWrite]:
        writes = [
            self._upsert_write(self._cleared(row), row)
            for row in (record.working, record.leave)
            if _carries_partnership(row)
        ]
        # a working row already overrides the recurring partnership for the date
        if not writes and record.working is None and record.recurring is not None and record.recurring.is_partnership:
            payload = ScheduleExceptionCreate(
                officer_id=record.officer_id,
                date=day,
                shift_type_id=shift_id,
                is_off=False,
                position_name=record.recurring.position_name,
                unit_number=record.recurring.unit_number,
                schedule_type=ExceptionProvenance.MANUAL_PARTNERSHIP,
            )
            writes.append(self._upsert_write(payload, record.working))
        return writes

    @staticmethod
    def _cleared(row: ScheduleExceptionRead) -> ScheduleExceptionCreate:
        return row.to_create(
            is_partnership=False,
            partner_officer_id=None,
            partnership_suspended=False,
            partnership_suspension_reason=None,
        )

    @staticmethod
    def _restored(row: ScheduleExceptionRead, partner_id: int) -> ScheduleExceptionCreate:
        return row.to_create(
            is_partnership=True,
            partner_officer_id=partner_id,
            partnership_suspended=False,
            partnership_suspension_reason=None,
        )

    async def _audit(
        self,
        officer_id: int,
        partner_id: int | None,
        day: date,
        shift_id: int,
        exception_type: PartnershipAuditType,
        reason: str | None,
    ) -> None:
        await self.store.add_partnership_audit(
            PartnershipAuditCreate(
                officer_id=officer_id,
                partner_officer_id=partner_id,
                date=day,
                shift_type_id=shift_id,
                exception_type=exception_type,
                reason=reason,
            )
        )

    async def _resolve_suspension(self, officer_id: int, day: date, shift_id: int) -> None:
        await self.store.resolve_partnership_audits(
            officer_id=officer_id,
            day=day,
            shift_id=shift_id,
            exception_type=PartnershipAuditType.PTO_SUSPENSION.value,
        )

    # -- compensating writes ---------------------------------------------

    def _upsert_write(
        self, payload: ScheduleExceptionCreate, previous: ScheduleExceptionRead | None
    ) -> _SideWrite:
        store = self.store
        expected = payload.model_dump(include=set(VERIFIED_FIELDS))

        async def _current() -> ScheduleExceptionRead | None:
            return await store.find_exception(
                officer_id=payload.officer_id,
                day=payload.date,
                shift_id=payload.shift_type_id,
                is_off=payload.is_off,
            )

        async def apply() -> ScheduleExceptionRead:
            return await store.upsert_exception(payload)

        async def verify() -> bool:
            current = await _current()
            return current is not None and current.model_dump(include=set(VERIFIED_FIELDS)) == expected

        async def revert() -> None:
            if previous is not None:
                await store.upsert_exception(previous.to_create())
                return
            current = await _current()
            if current is not None:
                await store.delete_exception(current.id)

        return _SideWrite(
            officer_id=payload.officer_id,
            description=f"upsert exception officer={payload.officer_id} is_off={payload.is_off}",
            apply=apply,
            verify=verify,
            revert=revert,
            snapshot=previous.model_dump(mode="json") if previous is not None else None,
        )

    def _delete_write(self, row: ScheduleExceptionRead) -> _SideWrite:
        store = self.store

        async def apply() -> None:
            await store.delete_exception(row.id)

        async def verify() -> bool:
            return await store.get_exception(row.id) is None

        async def revert() -> None:
            await store.upsert_exception(row.to_create())

        return _SideWrite(
            officer_id=row.officer_id,
            description=f"delete exception {row.id}",
            apply=apply,
            verify=verify,
            revert=revert,
            snapshot=row.model_dump(mode="json"),
        )

    def _recurring_write(self, row: RecurringAssignmentRead, fields: RecurringAssignmentUpdate) -> _SideWrite:
        store = self.store
        expected = fields.model_dump(exclude_unset=True)
        previous = RecurringAssignmentUpdate(
            is_partnership=row.is_partnership, partner_officer_id=row.partner_officer_id
        )

        async def apply() -> RecurringAssignmentRead:
            return await store.update_recurring(row.id, fields)

        async def verify() -> bool:
            current = await self._recurring_on(row.officer_id, row.shift_type_id, row.day_of_week, row.start_date)
            return all(getattr(current, key) == value for key, value in expected.items())

        async def revert() -> None:
            await store.update_recurring(row.id, previous)

        return _SideWrite(
            officer_id=row.officer_id,
            description=f"update recurring {row.id}",
            apply=apply,
            verify=verify,
            revert=revert,
            snapshot=row.model_dump(mode="json"),
        )

    async def _write_both_sides(
        self, operation: str, first: list[_SideWrite], second: list[_SideWrite]
    ) -> list[Any]:
        """Apply and verify ``first`` then ``second``; revert everything applied on failure.

        A failure before anything was written propagates unchanged. Once a
        write has landed, failures surface as ``PartialWriteError``.
        """
        applied: list[_SideWrite] = []
        results: list[Any] = []
        for write in [*first, *second]:
            try:
                result = await write.apply()
                if not await write.verify():
                    raise _VerificationFailed(write.description)
            except Exception as exc:
                if not applied and not isinstance(exc, _VerificationFailed):
                    raise
                if isinstance(exc, _VerificationFailed):
                    applied.append(write)
                raise await self._compensate(operation, applied, write, exc) from exc
            applied.append(write)
            if result is not None:
                results.append(result)
        return results

    async def _compensate(
        self,
        operation: str,
        applied: list[_SideWrite],
        failed: _SideWrite,
        cause: BaseException,
    ) -> PartialWriteError:
        logger.warning("%s failed at %s (%s); reverting %d write(s)", operation, failed.description, cause, len(applied))
        compensated = True
        unreverted: list[dict[str, Any]] = []
        for write in reversed(applied):
            try:
                await write.revert()
            except Exception:
                compensated = False
                unreverted.append({"officer_id": write.officer_id, "write": write.description, "snapshot": write.snapshot})
                logger.exception("Could not revert %s during %s", write.description, operation)

        if not compensated:
            logger.error("%s left officers %s inconsistent; manual reconciliation needed", operation, unreverted)
        return PartialWriteError(
            operation,
            written=sorted({write.officer_id for write in applied}),
            failed_officer_id=failed.officer_id,
            compensated=compensated,
            detail={"failed_write": failed.description, "unreverted": unreverted},
            cause=cause,
        )
