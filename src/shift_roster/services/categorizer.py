from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping

from shift_roster.core.config import Settings, get_settings
from shift_roster.services.assignment import ResolvedDayAssignment

SUPERVISOR_RANKS = ("sergeant", "lieutenant", "captain", "chief", "commander")
COMMAND_RANKS = ("lieutenant", "captain", "commander", "chief")
RIDING_PARTNER_MARKERS = ("riding with", "riding partner", "emergency partner")
DISTRICT_PATTERN = re.compile(r"district\s*(\d+)", re.IGNORECASE)


class View(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    FORCE_LIST = "force_list"
    VACATION_LIST = "vacation_list"


class Category(str, Enum):
    ON_LEAVE = "on_leave"
    SPECIAL_ASSIGNMENT = "special_assignment"
    SUPERVISOR = "supervisor"
    PPO = "ppo"
    OFFICER = "officer"


@dataclass
class CategorizedRoster:
    supervisors: list[ResolvedDayAssignment] = field(default_factory=list)
    officers: list[ResolvedDayAssignment] = field(default_factory=list)
    ppos: list[ResolvedDayAssignment] = field(default_factory=list)
    special_assignments: list[ResolvedDayAssignment] = field(default_factory=list)
    on_leave: list[ResolvedDayAssignment] = field(default_factory=list)
    available_for_reassignment: list[ResolvedDayAssignment] = field(default_factory=list)

    def ordered(self) -> list[ResolvedDayAssignment]:
        """Working officers in display order: supervisors, officers, then PPOs."""
        return [*self.supervisors, *self.officers, *self.ppos]


def _rank(assignment: ResolvedDayAssignment) -> str:
    return (assignment.rank or "").strip().lower()


def district_number(position: str | None) -> int | None:
    match = DISTRICT_PATTERN.search(position or "")
    return int(match.group(1)) if match else None


class OfficerCategorizer:
    """Buckets a day's resolved assignments and orders each bucket.

    Special assignment wins over every other working category. Supervisors
    are detected by rank or by a position containing "supervisor". Regular
    officers and PPOs are ranked least senior first on the force list and
    most senior first everywhere else.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._predefined = {position.strip().lower() for position in self.settings.predefined_positions}

    def is_special_assignment(self, assignment: ResolvedDayAssignment) -> bool:
        position = (assignment.position_name or "").strip().lower()
        if not position:
            return False
        if any(marker in position for marker in RIDING_PARTNER_MARKERS):
            return False
        return "other" in position or position not in self._predefined

    def is_supervisor(self, assignment: ResolvedDayAssignment) -> bool:
        rank = _rank(assignment)
        if any(marker in rank for marker in SUPERVISOR_RANKS):
            return True
        return "supervisor" in (assignment.position_name or "").lower()

    def is_probationary(self, assignment: ResolvedDayAssignment) -> bool:
        return _rank(assignment) == "probationary"

    def category(self, assignment: ResolvedDayAssignment) -> Category:
        if assignment.is_off_duty:
            return Category.ON_LEAVE
        if self.is_special_assignment(assignment):
            return Category.SPECIAL_ASSIGNMENT
        if self.is_supervisor(assignment):
            return Category.SUPERVISOR
        if self.is_probationary(assignment):
            return Category.PPO
        return Category.OFFICER

    def categorize(
        self,
        assignments: Iterable[ResolvedDayAssignment],
        view: View = View.DAILY,
        force_counts: Mapping[int, int] | None = None,
    ) -> CategorizedRoster:
        view = View(view)
        roster = CategorizedRoster()
        buckets = {
            Category.ON_LEAVE: roster.on_leave,
            Category.SPECIAL_ASSIGNMENT: roster.special_assignments,
            Category.SUPERVISOR: roster.supervisors,
            Category.PPO: roster.ppos,
            Category.OFFICER: roster.officers,
        }
        for assignment in assignments:
            category = self.category(assignment)
            buckets[category].append(assignment)
            if category is not Category.ON_LEAVE and assignment.partnership_suspended:
                roster.available_for_reassignment.append(assignment)

        roster.supervisors = self.sort_supervisors(roster.supervisors)
        roster.officers = self.sort_officers(roster.officers, view, force_counts)
        roster.ppos = self.sort_officers(roster.ppos, view, force_counts)
        roster.special_assignments.sort(key=lambda a: (a.last_name, a.name))
        roster.on_leave.sort(key=lambda a: (a.last_name, a.name))
        roster.available_for_reassignment.sort(key=lambda a: (a.last_name, a.name))
        return roster

    def supervisor_group(self, assignment: ResolvedDayAssignment) -> int:
        rank = _rank(assignment)
        if any(marker in rank for marker in COMMAND_RANKS):
            return 0
        if "sergeant" in rank:
            return 1
        return 2

    def sort_supervisors(self, supervisors: Iterable[ResolvedDayAssignment]) -> list[ResolvedDayAssignment]:
        return sorted(
            supervisors,
            key=lambda a: (
                self.supervisor_group(a),
                -a.service_credit,
                a.badge_sort_key,
                a.last_name,
            ),
        )

    def sort_officers(
        self,
        officers: Iterable[ResolvedDayAssignment],
        view: View = View.DAILY,
        force_counts: Mapping[int, int] | None = None,
    ) -> list[ResolvedDayAssignment]:
        view = View(view)
        if view is View.FORCE_LIST:
            counts = force_counts or {}
            return sorted(
                officers,
                key=lambda a: (a.service_credit, counts.get(a.officer_id, 0), a.last_name),
            )

        if view is View.VACATION_LIST:
            return sorted(officers, key=lambda a: (-a.service_credit, a.badge_sort_key, a.last_name))

        ordered = sorted(officers, key=lambda a: (-a.service_credit, a.last_name))
        if view is View.WEEKLY:
            # stable sort keeps seniority order within a position
            ordered.sort(key=self._position_key)
        return ordered

    @staticmethod
    def _position_key(assignment: ResolvedDayAssignment) -> tuple[int, int, str]:
        number = district_number(assignment.position_name)
        if number is not None:
            return (0, number, "")
        return (1, 0, (assignment.position_name or "").lower())

    def force_list(
        self,
        assignments: Iterable[ResolvedDayAssignment],
        force_counts: Mapping[int, int] | None = None,
    ) -> CategorizedRoster:
        """Force list buckets: only sergeants count as supervisors, command ranks are left off."""
        roster = CategorizedRoster()
        for assignment in assignments:
            if assignment.is_off_duty:
                roster.on_leave.append(assignment)
                continue
            rank = _rank(assignment)
            if self.is_probationary(assignment):
                roster.ppos.append(assignment)
            elif "sergeant" in rank:
                roster.supervisors.append(assignment)
            elif not any(marker in rank for marker in COMMAND_RANKS):
                roster.officers.append(assignment)

        roster.supervisors = self.sort_officers(roster.supervisors, View.FORCE_LIST, force_counts)
        roster.officers = self.sort_officers(roster.officers, View.FORCE_LIST, force_counts)
        roster.ppos = self.sort_officers(roster.ppos, View.FORCE_LIST, force_counts)
        roster.on_leave.sort(key=lambda a: (a.last_name, a.name))
        return roster
