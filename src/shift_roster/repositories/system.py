from datetime import date, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shift_roster.db.models.system import MinimumStaffing, PartnershipAudit
from shift_roster.schemas.system import (
    MinimumStaffingCreate,
    MinimumStaffingUpdate,
    PartnershipAuditCreate,
)


async def list_minimum_staffing(session: AsyncSession) -> list[MinimumStaffing]:
    result = await session.execute(
        select(MinimumStaffing).order_by(MinimumStaffing.day_of_week.asc(), MinimumStaffing.shift_type_id.asc())
    )
    return list(result.scalars().all())


async def get_minimum_staffing(
    session: AsyncSession, day_of_week: int, shift_id: int
) -> MinimumStaffing | None:
    result = await session.execute(
        select(MinimumStaffing).where(
            MinimumStaffing.day_of_week == day_of_week,
            MinimumStaffing.shift_type_id == shift_id,
        )
    )
    return result.scalars().first()


async def create_minimum_staffing(session: AsyncSession, payload: MinimumStaffingCreate) -> MinimumStaffing:
    rule = MinimumStaffing(**payload.model_dump())
    session.add(rule)
    await session.flush()
    await session.refresh(rule)
    return rule


async def update_minimum_staffing(
    session: AsyncSession, rule: MinimumStaffing, payload: MinimumStaffingUpdate
) -> MinimumStaffing:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(rule, field, value)
    await session.flush()
    await session.refresh(rule)
    return rule


async def delete_minimum_staffing(session: AsyncSession, rule: MinimumStaffing) -> None:
    await session.delete(rule)


async def create_partnership_audit(
    session: AsyncSession, payload: PartnershipAuditCreate
) -> PartnershipAudit:
    entry = PartnershipAudit(**payload.model_dump())
    session.add(entry)
    await session.flush()
    await session.refresh(entry)
    return entry


async def list_partnership_audits(
    session: AsyncSession,
    *,
    day: date | None = None,
    shift_id: int | None = None,
    officer_id: int | None = None,
    open_only: bool = False,
) -> list[PartnershipAudit]:
    query = select(PartnershipAudit)
    if day is not None:
        query = query.where(PartnershipAudit.date == day)
    if shift_id is not None:
        query = query.where(PartnershipAudit.shift_type_id == shift_id)
    if officer_id is not None:
        query = query.where(PartnershipAudit.officer_id == officer_id)
    if open_only:
        query = query.where(PartnershipAudit.resolved_at.is_(None))
    result = await session.execute(query.order_by(PartnershipAudit.id.asc()))
    return list(result.scalars().all())


async def resolve_partnership_audits(
    session: AsyncSession,
    *,
    officer_id: int,
    day: date,
    shift_id: int,
    exception_type: str,
) -> int:
    """Stamp ``resolved_at`` on matching open audit entries and return how many changed."""
    result = await session.execute(
        update(PartnershipAudit)
        .where(
            PartnershipAudit.officer_id == officer_id,
            PartnershipAudit.date == day,
            PartnershipAudit.shift_type_id == shift_id,
            PartnershipAudit.exception_type == exception_type,
            PartnershipAudit.resolved_at.is_(None),
        )
        .values(resolved_at=datetime.utcnow())
    )
    await session.flush()
    return result.rowcount or 0
