from datetime import date

from pydantic import BaseModel, ConfigDict, Field

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ShiftTypeBase(BaseModel):
    name: str
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)


class ShiftTypeCreate(ShiftTypeBase):
    id: int | None = None


class ShiftTypeRead(ShiftTypeBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class ShiftTypeUpdate(BaseModel):
    name: str | None = None
    start_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    end_time: str | None = Field(default=None, pattern=TIME_PATTERN)


class OfficerProfileBase(BaseModel):
    full_name: str
    badge_number: str | None = None
    rank: str | None = "Officer"
    hire_date: date | None = None
    promotion_date_sergeant: date | None = None
    promotion_date_lieutenant: date | None = None
    service_credit_override: float | None = None


class OfficerProfileCreate(OfficerProfileBase):
    id: int | None = None


class OfficerProfileRead(OfficerProfileBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class OfficerProfileUpdate(BaseModel):
    full_name: str | None = None
    badge_number: str | None = None
    rank: str | None = None
    hire_date: date | None = None
    promotion_date_sergeant: date | None = None
    promotion_date_lieutenant: date | None = None
    service_credit_override: float | None = None
