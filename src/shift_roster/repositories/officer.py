from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shift_roster.db.models.officer import OfficerProfile, ShiftType
from shift_roster.schemas.officer import (
    OfficerProfileCreate,
    OfficerProfileUpdate,
    ShiftTypeCreate,
    ShiftTypeUpdate,
)


async def list_shift_types(session: AsyncSession) -> list[ShiftType]:
    result = await session.execute(select(ShiftType).order_by(ShiftType.start_time.asc()))
    return list(result.scalars().all())


async def get_shift_type(session: AsyncSession, shift_id: int) -> ShiftType | None:
    return await session.get(ShiftType, shift_id)


async def create_shift_type(session: AsyncSession, payload: ShiftTypeCreate) -> ShiftType:
    shift = ShiftType(**payload.model_dump(exclude_none=True))
    session.add(shift)
    await session.flush()
    await session.refresh(shift)
    return shift


async def update_shift_type(session: AsyncSession, shift: ShiftType, payload: ShiftTypeUpdate) -> ShiftType:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(shift, field, value)
    await session.flush()
    await session.refresh(shift)
    return shift


async def delete_shift_type(session: AsyncSession, shift: ShiftType) -> None:
    await session.delete(shift)


async def list_profiles(
    session: AsyncSession, officer_ids: Iterable[int] | None = None
) -> list[OfficerProfile]:
    query = select(OfficerProfile)
    if officer_ids is not None:
        ids = list(officer_ids)
        if not ids:
            return []
        query = query.where(OfficerProfile.id.in_(ids))
    result = await session.execute(query.order_by(OfficerProfile.full_name.asc()))
    return list(result.scalars().all())


async def get_profile(session: AsyncSession, officer_id: int) -> OfficerProfile | None:
    return await session.get(OfficerProfile, officer_id)


async def create_profile(session: AsyncSession, payload: OfficerProfileCreate) -> OfficerProfile:
    profile = OfficerProfile(**payload.model_dump(exclude_none=True))
    session.add(profile)
    await session.flush()
    await session.refresh(profile)
    return profile


async def update_profile(
    session: AsyncSession, profile: OfficerProfile, payload: OfficerProfileUpdate
) -> OfficerProfile:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(profile, field, value)
    await session.flush()
    await session.refresh(profile)
    return profile


async def delete_profile(session: AsyncSession, profile: OfficerProfile) -> None:
    await session.delete(profile)
