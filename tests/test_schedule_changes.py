import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shift_roster.core.config import Settings
from shift_roster.core.exceptions import NotFoundError, OfficerOnLeaveError, ValidationError
from shift_roster.repositories.store import SqlAlchemyRosterStore
from shift_roster.services.schedule_changes import ScheduleChangeService

from .factories import TUESDAY, create_recurring, seed_patrol


async def _standing_pair(session: AsyncSession, ids: dict[str, int]) -> None:
    await create_recurring(
        session, officer_id=ids["yara"], day_of_week=2, is_partnership=True, partner_officer_id=ids["zed"]
    )
    await create_recurring(
        session,
        officer_id=ids["zed"],
        day_of_week=2,
        position_name="District 5",
        unit_number="505",
        is_partnership=True,
        partner_officer_id=ids["yara"],
    )


async def _row(store, officer_id: int, *, is_off: bool = False):
    return await store.find_exception(officer_id=officer_id, day=TUESDAY, shift_id=1, is_off=is_off)


@pytest.mark.anyio("asyncio")
async def test_full_day_leave_suspends_and_restores_partnership(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    async with session_factory() as session:
        await _exercise_full_day_leave_suspends_and_restores_partnership(session, settings)


async def _exercise_full_day_leave_suspends_and_restores_partnership(
    session: AsyncSession, settings: Settings
) -> None:
    ids = await seed_patrol(session)
    await _standing_pair(session, ids)
    store = SqlAlchemyRosterStore(session)
    service = ScheduleChangeService(store, settings)

    leave = await service.assign_leave(ids["yara"], TUESDAY, 1, "Sick")
    await session.commit()

    assert leave.is_off
    assert leave.partnership_suspended
    assert leave.partnership_suspension_reason == "Sick"
    zed = await _row(store, ids["zed"])
    assert zed.position_name == "District 5"
    assert zed.unit_number == "505"
    assert zed.schedule_type == "leave_partner_suspension"
    assert zed.partnership_suspended and not zed.is_partnership

    outcome = await service.remove_leave(ids["yara"], TUESDAY, 1)
    await session.commit()

    assert outcome is not None and outcome.restored
    assert await _row(store, ids["yara"], is_off=True) is None
    assert await _row(store, ids["zed"]) is None
    for officer_id in (ids["yara"], ids["zed"]):
        record = await service.partnerships.load_record(officer_id, TUESDAY, 1)
        assert record.is_partnership


@pytest.mark.anyio("asyncio")
async def test_partial_leave_keeps_partnership(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    async with session_factory() as session:
        await _exercise_partial_leave_keeps_partnership(session, settings)


async def _exercise_partial_leave_keeps_partnership(session: AsyncSession, settings: Settings) -> None:
    ids = await seed_patrol(session)
    await _standing_pair(session, ids)
    store = SqlAlchemyRosterStore(session)
    service = ScheduleChangeService(store, settings)

    leave = await service.assign_leave(
        ids["yara"], TUESDAY, 1, "Comp Time", start_time="07:00", end_time="11:00", notes="dentist"
    )

    assert leave.custom_start_time == "07:00"
    assert leave.schedule_type == "leave"
    assert not leave.partnership_suspended
    assert await _row(store, ids["zed"]) is None

    assert await service.remove_leave(ids["yara"], TUESDAY, 1) is None
    assert await _row(store, ids["yara"], is_off=True) is None


@pytest.mark.anyio("asyncio")
async def test_leave_input_is_validated(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    async with session_factory() as session:
        await _exercise_leave_input_is_validated(session, settings)


async def _exercise_leave_input_is_validated(session: AsyncSession, settings: Settings) -> None:
    ids = await seed_patrol(session)
    service = ScheduleChangeService(SqlAlchemyRosterStore(session), settings)

    with pytest.raises(ValidationError):
        await service.assign_leave(ids["wes"], TUESDAY, 1, "")
    with pytest.raises(ValidationError):
        await service.assign_leave(ids["wes"], TUESDAY, 1, "Vacation", start_time="7am")
    with pytest.raises(NotFoundError):
        await service.assign_leave(ids["wes"], TUESDAY, 9, "Vacation")
    with pytest.raises(NotFoundError):
        await service.remove_leave(ids["wes"], TUESDAY, 1)


@pytest.mark.anyio("asyncio")
async def test_extra_shift(session_factory: async_sessionmaker[AsyncSession], settings: Settings) -> None:
    async with session_factory() as session:
        await _exercise_extra_shift(session, settings)


async def _exercise_extra_shift(session: AsyncSession, settings: Settings) -> None:
    ids = await seed_patrol(session)
    service = ScheduleChangeService(SqlAlchemyRosterStore(session), settings)

    row = await service.add_extra_shift(ids["wes"], TUESDAY, 1, " Traffic ", unit_number="T9")
    assert row.position_name == "Traffic"
    assert row.schedule_type == "extra_shift"
    assert not row.is_off

    with pytest.raises(ValidationError):
        await service.add_extra_shift(ids["zed"], TUESDAY, 1, "  ")

    await service.assign_leave(ids["zed"], TUESDAY, 1, "Vacation")
    with pytest.raises(OfficerOnLeaveError):
        await service.add_extra_shift(ids["zed"], TUESDAY, 1, "Traffic")


@pytest.mark.anyio("asyncio")
async def test_edit_assignment_keeps_standing_partnership(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    async with session_factory() as session:
        await _exercise_edit_assignment_keeps_standing_partnership(session, settings)


async def _exercise_edit_assignment_keeps_standing_partnership(session: AsyncSession, settings: Settings) -> None:
    ids = await seed_patrol(session)
    await _standing_pair(session, ids)
    store = SqlAlchemyRosterStore(session)
    service = ScheduleChangeService(store, settings)

    row = await service.edit_assignment(ids["yara"], TUESDAY, 1, "District 3", unit_number="303")

    assert row.position_name == "District 3"
    assert row.is_partnership
    assert row.partner_officer_id == ids["zed"]
    assert await service.partnerships.check_symmetry(TUESDAY, 1, ids["yara"], ids["zed"])

    await service.remove_officer(ids["yara"], TUESDAY, 1)

    assert await _row(store, ids["yara"]) is None
    record = await service.partnerships.load_record(ids["yara"], TUESDAY, 1)
    assert record.is_partnership and record.partner_officer_id == ids["zed"]


@pytest.mark.anyio("asyncio")
async def test_remove_officer_clears_exception_partnership(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    async with session_factory() as session:
        await _exercise_remove_officer_clears_exception_partnership(session, settings)


async def _exercise_remove_officer_clears_exception_partnership(session: AsyncSession, settings: Settings) -> None:
    ids = await seed_patrol(session)
    store = SqlAlchemyRosterStore(session)
    service = ScheduleChangeService(store, settings)
    await service.partnerships.create(ids["wes"], ids["pip"], TUESDAY, 1)

    await service.remove_officer(ids["wes"], TUESDAY, 1)

    assert await _row(store, ids["wes"]) is None
    pip = await _row(store, ids["pip"])
    assert not pip.is_partnership
    assert pip.partner_officer_id is None

    with pytest.raises(NotFoundError):
        await service.remove_officer(ids["wes"], TUESDAY, 1)
