"""Seed a small patrol roster for local development and print one resolved week.

Run this after applying Alembic migrations:

    python -m alembic upgrade head
    python scripts/seed_demo.py
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from shift_roster.core.config import get_settings
from shift_roster.core.logging import configure_logging
from shift_roster.db.models.officer import OfficerProfile, ShiftType
from shift_roster.db.models.schedule import RecurringAssignment
from shift_roster.db.models.system import MinimumStaffing
from shift_roster.repositories.store import SqlAlchemyRosterStore
from shift_roster.services.calendar import DAY_NAMES
from shift_roster.services.resolution import ScheduleResolutionEngine
from shift_roster.services.schedule_changes import ScheduleChangeService

logger = logging.getLogger("seed_demo")

SHIFTS = [
    ShiftType(id=1, name="Day", start_time="07:00", end_time="15:00"),
    ShiftType(id=2, name="Evening", start_time="15:00", end_time="23:00"),
    ShiftType(id=3, name="Night", start_time="23:00", end_time="07:00"),
]

# (name, badge, rank, hired, shift, position)
OFFICERS = [
    ("Morgan Hale", "3", "Lieutenant", date(2003, 4, 14), 1, "Supervisor"),
    ("Casey Reed", "12", "Sergeant", date(2009, 9, 1), 1, "Supervisor"),
    ("Jordan Pike", "27", "Officer", date(2012, 2, 6), 1, "District 1"),
    ("Riley Banks", "31", "Officer", date(2015, 7, 20), 1, "District 2"),
    ("Taylor Voss", "44", "Officer", date(2018, 3, 12), 1, "District 3"),
    ("Avery Cole", "58", "Probationary", date(2024, 1, 8), 1, "Riding Partner (PPO)"),
    ("Quinn Ortiz", "61", "Officer", date(2011, 5, 2), 1, "Court Liaison"),
    ("Drew Nash", "15", "Sergeant", date(2010, 1, 11), 2, "Supervisor"),
    ("Sky Landry", "36", "Officer", date(2016, 8, 29), 2, "City-Wide"),
    ("Rowan Price", "40", "Officer", date(2017, 10, 2), 2, "Traffic"),
    ("Emery Shaw", "19", "Sergeant", date(2008, 6, 16), 3, "Supervisor"),
    ("Parker Lane", "52", "Officer", date(2020, 11, 9), 3, "District 4"),
]


async def seed() -> None:
    settings = get_settings()
    configure_logging(settings)
    engine = create_async_engine(settings.database_url, future=True)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as session:
        existing = await session.scalar(select(func.count(OfficerProfile.id)))
        if existing:
            logger.info("Roster already seeded with %d officer(s); skipping inserts", existing)
        else:
            await _insert_roster(session)
            await session.commit()

        monday = date.today() - timedelta(days=date.today().weekday())
        store = SqlAlchemyRosterStore(session)
        changes = ScheduleChangeService(store, settings)
        await changes.assign_leave(_officer_id("Riley Banks"), monday + timedelta(days=1), 1, "Vacation")
        await changes.assign_leave(
            _officer_id("Jordan Pike"), monday + timedelta(days=2), 1, "Sick", start_time="07:00", end_time="11:00"
        )
        await session.commit()

        resolver = ScheduleResolutionEngine(store, settings)
        for day in await resolver.resolve_range(monday, monday + timedelta(days=6)):
            for roster in day.shifts:
                staffing = roster.staffing
                logger.info(
                    "%s %s %s: %d supervisor(s), %d officer(s), %d PPO(s), %d on leave [%s]",
                    DAY_NAMES[day.day_of_week],
                    day.date,
                    roster.shift.name,
                    staffing.supervisors,
                    staffing.officers,
                    staffing.ppos,
                    len(roster.categories.on_leave),
                    staffing.severity,
                )

    await engine.dispose()


def _officer_id(name: str) -> int:
    return next(index for index, officer in enumerate(OFFICERS, start=1) if officer[0] == name)


async def _insert_roster(session) -> None:
    session.add_all(SHIFTS)
    session.add_all(
        OfficerProfile(id=index, full_name=name, badge_number=badge, rank=rank, hire_date=hired)
        for index, (name, badge, rank, hired, _, _) in enumerate(OFFICERS, start=1)
    )
    await session.flush()

    partner_of = {_officer_id("Taylor Voss"): _officer_id("Avery Cole"), _officer_id("Avery Cole"): _officer_id("Taylor Voss")}
    start = date.today().replace(month=1, day=1)
    for index, (_, _, _, _, shift_id, position) in enumerate(OFFICERS, start=1):
        # Monday through Friday
        for weekday in range(1, 6):
            session.add(
                RecurringAssignment(
                    officer_id=index,
                    shift_type_id=shift_id,
                    day_of_week=weekday,
                    position_name=position,
                    unit_number=f"{shift_id}{index:02d}",
                    start_date=start,
                    is_partnership=index in partner_of,
                    partner_officer_id=partner_of.get(index),
                )
            )

    for shift in SHIFTS:
        for weekday in range(7):
            session.add(
                MinimumStaffing(
                    day_of_week=weekday,
                    shift_type_id=shift.id,
                    minimum_officers=3 if shift.id == 1 else 2,
                    minimum_supervisors=1,
                )
            )
    logger.info("Inserted %d shifts and %d officers", len(SHIFTS), len(OFFICERS))


if __name__ == "__main__":
    asyncio.run(seed())
