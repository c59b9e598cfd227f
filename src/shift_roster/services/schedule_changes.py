from __future__ import annotations

import logging
from datetime import date
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from shift_roster.core.config import Settings, get_settings
from shift_roster.core.exceptions import NotFoundError, OfficerOnLeaveError, ValidationError
from shift_roster.repositories.store import RosterStore
from shift_roster.schemas.schedule import (
    ExceptionProvenance,
    ScheduleExceptionCreate,
    ScheduleExceptionRead,
)
from shift_roster.services.partnership import PartnershipResolver, RestoreOutcome

logger = logging.getLogger(__name__)


class ScheduleChangeService:
    """Staff actions that write schedule exceptions.

    Leave for a partnered officer goes through the partnership resolver so
    both officers' rows change together.
    """

    def __init__(
        self,
        store: RosterStore,
        settings: Settings | None = None,
        partnerships: PartnershipResolver | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.partnerships = partnerships or PartnershipResolver(store, self.settings)

    async def assign_leave(
        self,
        officer_id: int,
        day: date,
        shift_id: int,
        reason: str,
        *,
        start_time: str | None = None,
        end_time: str | None = None,
        notes: str | None = None,
    ) -> ScheduleExceptionRead:
        if not reason or not reason.strip():
            raise ValidationError("A leave reason is required", field="reason")
        await self._require_shift(shift_id)

        is_full_day = not (start_time or end_time)
        if is_full_day:
            record = await self.partnerships.load_record(officer_id, day, shift_id)
            if record.is_partnership:
                await self.partnerships.suspend(officer_id, day, shift_id, reason, notes=notes)
                return await self._find(officer_id, day, shift_id, is_off=True)

        existing = await self.store.find_exception(officer_id=officer_id, day=day, shift_id=shift_id, is_off=True)
        changes: dict[str, Any] = {
            "reason": reason,
            "custom_start_time": start_time,
            "custom_end_time": end_time,
            "schedule_type": ExceptionProvenance.LEAVE,
        }
        if notes is not None:
            changes["notes"] = notes
        payload = self._payload(officer_id, day, shift_id, existing, is_off=True, **changes)
        leave = await self.store.upsert_exception(payload)
        logger.info(
            "Leave '%s' assigned to officer %s on %s shift %s (%s)",
            reason,
            officer_id,
            day,
            shift_id,
            "full day" if is_full_day else f"{start_time or ''}-{end_time or ''}",
        )
        return leave

    async def remove_leave(self, officer_id: int, day: date, shift_id: int) -> RestoreOutcome | None:
        """Delete the officer's leave, restoring any partnership it suspended first."""
        leave = await self.store.find_exception(officer_id=officer_id, day=day, shift_id=shift_id, is_off=True)
        if leave is None:
            raise NotFoundError("ScheduleException", (officer_id, day, shift_id, "leave"))

        outcome = None
        if leave.partnership_suspended:
            outcome = await self.partnerships.restore(officer_id, day, shift_id)

        await self.store.delete_exception(leave.id)
        logger.info("Leave removed for officer %s on %s shift %s", officer_id, day, shift_id)
        return outcome

    async def add_extra_shift(
        self,
        officer_id: int,
        day: date,
        shift_id: int,
        position: str,
        *,
        unit_number: str | None = None,
        notes: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
    ) -> ScheduleExceptionRead:
        self._require_position(position)
        await self._require_shift(shift_id)
        leave = await self.store.find_exception(officer_id=officer_id, day=day, shift_id=shift_id, is_off=True)
        if leave is not None and not leave.has_custom_window:
            raise OfficerOnLeaveError(f"Officer {officer_id} is on leave on {day}", officer_id=officer_id)

        existing = await self.store.find_exception(officer_id=officer_id, day=day, shift_id=shift_id, is_off=False)
        payload = self._payload(
            officer_id,
            day,
            shift_id,
            existing,
            is_off=False,
            position_name=position.strip(),
            unit_number=unit_number,
            notes=notes,
            custom_start_time=start_time,
            custom_end_time=end_time,
            schedule_type=ExceptionProvenance.EXTRA_SHIFT,
        )
        return await self.store.upsert_exception(payload)

    async def edit_assignment(
        self,
        officer_id: int,
        day: date,
        shift_id: int,
        position: str,
        *,
        unit_number: str | None = None,
        notes: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
    ) -> ScheduleExceptionRead:
        """Override position and unit for one date, keeping the officer's partnership."""
        self._require_position(position)
        await self._require_shift(shift_id)
        record = await self.partnerships.load_record(officer_id, day, shift_id)

        changes: dict[str, Any] = {
            "position_name": position.strip(),
            "unit_number": unit_number,
            "custom_start_time": start_time,
            "custom_end_time": end_time,
        }
        if notes is not None:
            changes["notes"] = notes
        if record.working is None and record.recurring is not None:
            changes["is_partnership"] = record.recurring.is_partnership
            changes["partner_officer_id"] = record.recurring.partner_officer_id
        payload = self._payload(officer_id, day, shift_id, record.working, is_off=False, **changes)
        return await self.store.upsert_exception(payload)

    async def remove_officer(self, officer_id: int, day: date, shift_id: int) -> None:
        """Drop the officer's working exception for the date.

        A partnership that exists only through exceptions is removed on both
        sides first; a standing partnership from the recurring rows is kept.
        """
        record = await self.partnerships.load_record(officer_id, day, shift_id)
        if record.working is None:
            raise NotFoundError("ScheduleException", (officer_id, day, shift_id, "working"))

        partner_id = record.partner_officer_id
        recurring = record.recurring
        standing = (
            recurring is not None
            and recurring.is_partnership
            and recurring.partner_officer_id == partner_id
        )
        if record.is_partnership and not standing:
            await self.partnerships.remove(officer_id, day, shift_id)

        working = await self._find(officer_id, day, shift_id, is_off=False)
        await self.store.delete_exception(working.id)
        logger.info("Removed officer %s from %s shift %s", officer_id, day, shift_id)
        if partner_id:
            await self.partnerships.check_symmetry(day, shift_id, officer_id, partner_id)

    async def _require_shift(self, shift_id: int) -> None:
        if await self.store.get_shift(shift_id) is None:
            raise NotFoundError("ShiftType", shift_id)

    @staticmethod
    def _require_position(position: str | None) -> None:
        if not position or not position.strip():
            raise ValidationError("A position is required", field="position_name")

    async def _find(self, officer_id: int, day: date, shift_id: int, *, is_off: bool) -> ScheduleExceptionRead:
        row = await self.store.find_exception(officer_id=officer_id, day=day, shift_id=shift_id, is_off=is_off)
        if row is None:
            raise NotFoundError("ScheduleException", (officer_id, day, shift_id, "leave" if is_off else "working"))
        return row

    @staticmethod
    def _payload(
        officer_id: int,
        day: date,
        shift_id: int,
        existing: ScheduleExceptionRead | None,
        *,
        is_off: bool,
        **changes: Any,
    ) -> ScheduleExceptionCreate:
        try:
            if existing is not None:
                return existing.to_create(**changes)
            return ScheduleExceptionCreate(
                officer_id=officer_id, date=day, shift_type_id=shift_id, is_off=is_off, **changes
            )
        except SchemaValidationError as exc:
            raise ValidationError(str(exc)) from exc
