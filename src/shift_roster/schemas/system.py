from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PartnershipAuditType(str, Enum):
    CREATED = "created"
    REMOVED = "removed"
    EMERGENCY_REASSIGNMENT = "emergency_reassignment"
    PTO_SUSPENSION = "pto_suspension"


class MinimumStaffingBase(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    shift_type_id: int
    minimum_officers: int = Field(default=0, ge=0)
    minimum_supervisors: int = Field(default=1, ge=0)


class MinimumStaffingCreate(MinimumStaffingBase):
    pass


class MinimumStaffingRead(MinimumStaffingBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class MinimumStaffingUpdate(BaseModel):
    minimum_officers: int | None = Field(default=None, ge=0)
    minimum_supervisors: int | None = Field(default=None, ge=0)


class PartnershipAuditBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    officer_id: int
    partner_officer_id: int | None = None
    date: date
    shift_type_id: int
    exception_type: PartnershipAuditType
    reason: str | None = None


class PartnershipAuditCreate(PartnershipAuditBase):
    pass


class PartnershipAuditRead(PartnershipAuditBase):
    id: int
    created_at: datetime | None = None
    resolved_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
