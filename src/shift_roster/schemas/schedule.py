from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from shift_roster.schemas.officer import TIME_PATTERN


class ExceptionProvenance(str, Enum):
    """Why a schedule exception row exists."""

    MANUAL = "manual"
    EXTRA_SHIFT = "extra_shift"
    LEAVE = "leave"
    MANUAL_PARTNERSHIP = "manual_partnership"
    RECURRING_PARTNERSHIP = "recurring_partnership"
    EMERGENCY_PARTNERSHIP = "emergency_partnership"
    LEAVE_PARTNER_SUSPENSION = "leave_partner_suspension"


class RecurringAssignmentBase(BaseModel):
    officer_id: int
    shift_type_id: int
    day_of_week: int = Field(ge=0, le=6)
    position_name: str | None = None
    unit_number: str | None = None
    start_date: date
    end_date: date | None = None
    is_partnership: bool = False
    partner_officer_id: int | None = None


class RecurringAssignmentCreate(RecurringAssignmentBase):
    pass


class RecurringAssignmentRead(RecurringAssignmentBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class RecurringAssignmentUpdate(BaseModel):
    position_name: str | None = None
    unit_number: str | None = None
    end_date: date | None = None
    is_partnership: bool | None = None
    partner_officer_id: int | None = None


class ScheduleExceptionBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    officer_id: int
    date: date
    shift_type_id: int
    is_off: bool = False
    reason: str | None = None
    position_name: str | None = None
    unit_number: str | None = None
    notes: str | None = None
    custom_start_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    custom_end_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    is_partnership: bool = False
    partner_officer_id: int | None = None
    partnership_suspended: bool = False
    partnership_suspension_reason: str | None = None
    schedule_type: ExceptionProvenance = ExceptionProvenance.MANUAL


class ScheduleExceptionCreate(ScheduleExceptionBase):
    pass


class ScheduleExceptionRead(ScheduleExceptionBase):
    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    @property
    def has_custom_window(self) -> bool:
        return bool(self.custom_start_time or self.custom_end_time)

    def to_create(self, **changes) -> ScheduleExceptionCreate:
        data = self.model_dump(exclude={"id", "created_at", "updated_at"})
        data.update(changes)
        return ScheduleExceptionCreate(**data)


class DefaultAssignmentBase(BaseModel):
    officer_id: int
    position_name: str | None = None
    unit_number: str | None = None
    start_date: date
    end_date: date | None = None


class DefaultAssignmentCreate(DefaultAssignmentBase):
    pass


class DefaultAssignmentRead(DefaultAssignmentBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
