import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shift_roster.core.exceptions import NotFoundError
from shift_roster.repositories.store import SqlAlchemyRosterStore
from shift_roster.schemas.schedule import (
    RecurringAssignmentUpdate,
    ScheduleExceptionRead,
)
from shift_roster.schemas.system import PartnershipAuditCreate

from .factories import (
    MONDAY,
    TUESDAY,
    build_exception_create,
    create_default_assignment,
    create_minimum_staffing,
    create_officer,
    create_recurring,
    create_shift,
)


@pytest.mark.anyio("asyncio")
async def test_store_returns_read_models(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        await _exercise_store_returns_read_models(session)


async def _exercise_store_returns_read_models(session: AsyncSession) -> None:
    await create_shift(session)
    await create_shift(session, id=2, name="Evening", start_time="15:00", end_time="23:00")
    officer = await create_officer(session)
    await create_recurring(session, officer_id=officer.id)
    await create_minimum_staffing(session)
    await create_default_assignment(session, officer_id=officer.id)
    await session.commit()

    store = SqlAlchemyRosterStore(session)

    shift = await store.get_shift(1)
    assert shift is not None and shift.name == "Day"
    assert await store.get_shift(99) is None
    assert [s.id for s in await store.list_shifts()] == [1, 2]

    recurring = await store.list_recurring(1, start=MONDAY, end=MONDAY)
    assert [row.officer_id for row in recurring] == [officer.id]
    assert await store.list_recurring(2, start=MONDAY, end=MONDAY) == []

    profiles = await store.list_profiles([officer.id])
    assert profiles[0].full_name == "Factory Officer"

    rule = await store.get_minimum_staffing(1, 1)
    assert rule is not None and rule.minimum_officers == 2

    defaults = await store.list_default_assignments([officer.id], start=MONDAY, end=TUESDAY)
    assert [row.position_name for row in defaults] == ["Traffic"]


@pytest.mark.anyio("asyncio")
async def test_store_exception_writes(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        await _exercise_store_exception_writes(session)


async def _exercise_store_exception_writes(session: AsyncSession) -> None:
    await create_shift(session)
    officer = await create_officer(session)
    await session.commit()
    store = SqlAlchemyRosterStore(session)

    row = await store.upsert_exception(build_exception_create(officer_id=officer.id))
    assert isinstance(row, ScheduleExceptionRead)
    assert row.schedule_type == "manual"

    tuesday = await store.upsert_exception(build_exception_create(officer_id=officer.id, date=TUESDAY))
    assert [r.id for r in await store.list_exceptions(MONDAY)] == [row.id]
    assert [r.id for r in await store.list_exceptions(MONDAY, 1, end=TUESDAY)] == [row.id, tuesday.id]

    found = await store.find_exception(officer_id=officer.id, day=MONDAY, shift_id=1, is_off=False)
    assert found == await store.get_exception(row.id)

    await store.delete_exception(row.id)
    assert await store.get_exception(row.id) is None
    with pytest.raises(NotFoundError):
        await store.delete_exception(row.id)


@pytest.mark.anyio("asyncio")
async def test_store_recurring_and_audit_writes(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        await _exercise_store_recurring_and_audit_writes(session)


async def _exercise_store_recurring_and_audit_writes(session: AsyncSession) -> None:
    await create_shift(session)
    first = await create_officer(session)
    second = await create_officer(session, full_name="Other Officer", badge_number="200")
    recurring = await create_recurring(session, officer_id=first.id)
    await session.commit()
    store = SqlAlchemyRosterStore(session)

    updated = await store.update_recurring(
        recurring.id, RecurringAssignmentUpdate(is_partnership=True, partner_officer_id=second.id)
    )
    assert updated.is_partnership is True
    assert updated.partner_officer_id == second.id
    assert updated.position_name == "District 1"

    with pytest.raises(NotFoundError):
        await store.update_recurring(999, RecurringAssignmentUpdate(is_partnership=False))

    audit = await store.add_partnership_audit(
        PartnershipAuditCreate(
            officer_id=first.id,
            partner_officer_id=second.id,
            date=MONDAY,
            shift_type_id=1,
            exception_type="pto_suspension",
        )
    )
    assert audit.resolved_at is None
    assert (
        await store.resolve_partnership_audits(
            officer_id=first.id, day=MONDAY, shift_id=1, exception_type="pto_suspension"
        )
        == 1
    )
