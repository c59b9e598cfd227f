from collections.abc import Iterable
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from shift_roster.db.models.schedule import DefaultAssignment, RecurringAssignment, ScheduleException
from shift_roster.schemas.schedule import (
    DefaultAssignmentCreate,
    RecurringAssignmentCreate,
    RecurringAssignmentUpdate,
    ScheduleExceptionCreate,
)


async def list_recurring(
    session: AsyncSession,
    *,
    start: date,
    end: date,
    shift_id: int | None = None,
    day_of_week: int | None = None,
) -> list[RecurringAssignment]:
    """Recurring rows whose effective range overlaps ``start``..``end``."""
    query = select(RecurringAssignment).where(
        RecurringAssignment.start_date <= end,
        or_(RecurringAssignment.end_date.is_(None), RecurringAssignment.end_date >= start),
    )
    if shift_id is not None:
        query = query.where(RecurringAssignment.shift_type_id == shift_id)
    if day_of_week is not None:
        query = query.where(RecurringAssignment.day_of_week == day_of_week)
    result = await session.execute(query.order_by(RecurringAssignment.id.asc()))
    return list(result.scalars().all())


async def get_recurring(session: AsyncSession, recurring_id: int) -> RecurringAssignment | None:
    return await session.get(RecurringAssignment, recurring_id)


async def create_recurring(session: AsyncSession, payload: RecurringAssignmentCreate) -> RecurringAssignment:
    recurring = RecurringAssignment(**payload.model_dump())
    session.add(recurring)
    await session.flush()
    await session.refresh(recurring)
    return recurring


async def update_recurring(
    session: AsyncSession, recurring: RecurringAssignment, payload: RecurringAssignmentUpdate
) -> RecurringAssignment:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(recurring, field, value)
    await session.flush()
    await session.refresh(recurring)
    return recurring


async def delete_recurring(session: AsyncSession, recurring: RecurringAssignment) -> None:
    await session.delete(recurring)


async def list_exceptions(
    session: AsyncSession,
    *,
    start: date,
    end: date | None = None,
    shift_id: int | None = None,
) -> list[ScheduleException]:
    end = end or start
    query = select(ScheduleException).where(
        ScheduleException.date >= start, ScheduleException.date <= end
    )
    if shift_id is not None:
        query = query.where(ScheduleException.shift_type_id == shift_id)
    result = await session.execute(
        query.order_by(ScheduleException.date.asc(), ScheduleException.id.asc())
    )
    return list(result.scalars().all())


async def get_exception(session: AsyncSession, exception_id: int) -> ScheduleException | None:
    return await session.get(ScheduleException, exception_id)


async def find_exception(
    session: AsyncSession,
    *,
    officer_id: int,
    day: date,
    shift_id: int,
    is_off: bool,
) -> ScheduleException | None:
    result = await session.execute(
        select(ScheduleException).where(
            ScheduleException.officer_id == officer_id,
            ScheduleException.date == day,
            ScheduleException.shift_type_id == shift_id,
            ScheduleException.is_off == is_off,
        )
    )
    return result.scalars().first()


async def create_exception(session: AsyncSession, payload: ScheduleExceptionCreate) -> ScheduleException:
    exception = ScheduleException(**payload.model_dump())
    session.add(exception)
    await session.flush()
    await session.refresh(exception)
    return exception


async def upsert_exception(session: AsyncSession, payload: ScheduleExceptionCreate) -> ScheduleException:
    """Insert or fully replace the exception for the payload's (officer, date, shift, is_off) slot."""
    existing = await find_exception(
        session,
        officer_id=payload.officer_id,
        day=payload.date,
        shift_id=payload.shift_type_id,
        is_off=payload.is_off,
    )
    if existing is None:
        return await create_exception(session, payload)

    for field, value in payload.model_dump().items():
        setattr(existing, field, value)
    await session.flush()
    await session.refresh(existing)
    return existing


async def delete_exception(session: AsyncSession, exception: ScheduleException) -> None:
    await session.delete(exception)
    await session.flush()


async def list_default_assignments(
    session: AsyncSession,
    *,
    start: date,
    end: date,
    officer_ids: Iterable[int] | None = None,
) -> list[DefaultAssignment]:
    query = select(DefaultAssignment).where(
        DefaultAssignment.start_date <= end,
        or_(DefaultAssignment.end_date.is_(None), DefaultAssignment.end_date >= start),
    )
    if officer_ids is not None:
        query = query.where(DefaultAssignment.officer_id.in_(list(officer_ids)))
    result = await session.execute(query.order_by(DefaultAssignment.start_date.desc()))
    return list(result.scalars().all())


async def create_default_assignment(
    session: AsyncSession, payload: DefaultAssignmentCreate
) -> DefaultAssignment:
    assignment = DefaultAssignment(**payload.model_dump())
    session.add(assignment)
    await session.flush()
    await session.refresh(assignment)
    return assignment
