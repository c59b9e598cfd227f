from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Literal

from shift_roster.core.config import Settings, get_settings
from shift_roster.schemas.system import MinimumStaffingRead
from shift_roster.services.assignment import ResolvedDayAssignment
from shift_roster.services.categorizer import Category, OfficerCategorizer

DANGER_DEFICIT = 3


class StaffingRole(str, Enum):
    SUPERVISOR = "supervisor"
    OFFICER = "officer"


@dataclass(frozen=True)
class StaffingMinimums:
    officers: int
    supervisors: int


@dataclass
class StaffingSummary:
    supervisors: int
    officers: int
    ppos: int
    minimums: StaffingMinimums
    supervisors_needed: int
    officers_needed: int
    severity: Literal["none", "warning", "danger"]

    @property
    def is_supervisors_understaffed(self) -> bool:
        return self.supervisors < self.minimums.supervisors

    @property
    def is_officers_understaffed(self) -> bool:
        return self.officers < self.minimums.officers

    @property
    def is_understaffed(self) -> bool:
        return self.is_supervisors_understaffed or self.is_officers_understaffed

    @property
    def total_deficit(self) -> int:
        return self.supervisors_needed + self.officers_needed


class StaffingCalculator:
    def __init__(
        self,
        settings: Settings | None = None,
        categorizer: OfficerCategorizer | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.categorizer = categorizer or OfficerCategorizer(self.settings)

    def minimums_for(self, rule: MinimumStaffingRead | None) -> StaffingMinimums:
        if rule is None:
            return StaffingMinimums(
                officers=self.settings.default_minimum_officers,
                supervisors=self.settings.default_minimum_supervisors,
            )
        return StaffingMinimums(officers=rule.minimum_officers, supervisors=rule.minimum_supervisors)

    def count_effective(self, officers: Iterable[ResolvedDayAssignment], role: StaffingRole) -> int:
        """Officers in ``role`` that count toward the minimum.

        Off-duty rows and special assignments never count, and probationary
        officers are left out of the officer count.
        """
        wanted = Category.SUPERVISOR if StaffingRole(role) is StaffingRole.SUPERVISOR else Category.OFFICER
        return sum(1 for officer in officers if self.categorizer.category(officer) is wanted)

    def is_understaffed(
        self,
        officers: Iterable[ResolvedDayAssignment],
        minimums: StaffingMinimums,
    ) -> bool:
        officers = list(officers)
        return (
            self.count_effective(officers, StaffingRole.SUPERVISOR) < minimums.supervisors
            or self.count_effective(officers, StaffingRole.OFFICER) < minimums.officers
        )

    def evaluate(
        self,
        officers: Iterable[ResolvedDayAssignment],
        minimums: StaffingMinimums,
    ) -> StaffingSummary:
        officers = list(officers)
        supervisors = self.count_effective(officers, StaffingRole.SUPERVISOR)
        regular = self.count_effective(officers, StaffingRole.OFFICER)
        ppos = sum(1 for officer in officers if self.categorizer.category(officer) is Category.PPO)

        supervisors_needed = max(0, minimums.supervisors - supervisors)
        officers_needed = max(0, minimums.officers - regular)
        deficit = supervisors_needed + officers_needed
        if deficit >= DANGER_DEFICIT:
            severity = "danger"
        elif deficit > 0:
            severity = "warning"
        else:
            severity = "none"

        return StaffingSummary(
            supervisors=supervisors,
            officers=regular,
            ppos=ppos,
            minimums=minimums,
            supervisors_needed=supervisors_needed,
            officers_needed=officers_needed,
            severity=severity,
        )
