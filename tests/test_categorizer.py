from shift_roster.core.config import Settings
from shift_roster.services.categorizer import Category, OfficerCategorizer, View, district_number
from shift_roster.services.pto import LeaveAnnotation, LeaveType

from .factories import build_assignment


def _names(assignments) -> list[str]:
    return [a.name for a in assignments]


def test_supervisors_sort_by_group_credit_badge_then_last_name(settings: Settings) -> None:
    categorizer = OfficerCategorizer(settings)
    supervisors = [
        build_assignment(officer_id=1, name="Dana Young", rank="Sergeant", badge_number="20", service_credit=10.0),
        build_assignment(officer_id=2, name="Lee Adams", rank="Sergeant", badge_number="5", service_credit=10.0),
        build_assignment(officer_id=3, name="Kim Brown", rank="Sergeant", badge_number="5", service_credit=10.0),
        build_assignment(officer_id=4, name="Max Stone", rank="Lieutenant", badge_number="90", service_credit=1.0),
        build_assignment(officer_id=5, name="Ray Cole", rank="Sergeant", badge_number="99", service_credit=12.0),
    ]

    ordered = categorizer.sort_supervisors(supervisors)

    assert _names(ordered) == ["Max Stone", "Ray Cole", "Lee Adams", "Kim Brown", "Dana Young"]


def test_force_list_sorts_least_senior_first(settings: Settings) -> None:
    categorizer = OfficerCategorizer(settings)
    officers = [
        build_assignment(officer_id=1, name="Ann Senior", service_credit=15.0),
        build_assignment(officer_id=2, name="Bo Junior", service_credit=2.0),
        build_assignment(officer_id=3, name="Cy Junior", service_credit=2.0),
    ]

    daily = categorizer.sort_officers(officers, View.DAILY)
    forced = categorizer.sort_officers(officers, "force_list", force_counts={2: 3})

    assert _names(daily) == ["Ann Senior", "Bo Junior", "Cy Junior"]
    assert _names(forced) == ["Cy Junior", "Bo Junior", "Ann Senior"]


def test_weekly_view_groups_by_district_then_position(settings: Settings) -> None:
    categorizer = OfficerCategorizer(settings)
    officers = [
        build_assignment(officer_id=1, name="Al Traffic", position_name="Traffic", service_credit=9.0),
        build_assignment(officer_id=2, name="Bea Ten", position_name="District 10", service_credit=8.0),
        build_assignment(officer_id=3, name="Cal Two", position_name="District 2", service_credit=1.0),
        build_assignment(officer_id=4, name="Dee Two", position_name="District 2", service_credit=7.0),
        build_assignment(officer_id=5, name="Eve City", position_name="City-Wide", service_credit=3.0),
    ]

    ordered = categorizer.sort_officers(officers, View.WEEKLY)

    assert _names(ordered) == ["Dee Two", "Cal Two", "Bea Ten", "Eve City", "Al Traffic"]
    assert district_number("district 4") == 4
    assert district_number("Traffic") is None


def test_categorize_buckets(settings: Settings) -> None:
    categorizer = OfficerCategorizer(settings)
    sick = LeaveAnnotation(exception_id=1, leave_type=LeaveType.SICK, display_reason="Sick", is_full_day=True)
    partial = LeaveAnnotation(exception_id=2, leave_type=LeaveType.PTO, display_reason="PTO", is_full_day=False)
    assignments = [
        build_assignment(officer_id=1, name="Ona Leave", leave=sick),
        build_assignment(officer_id=2, name="Pia Special", position_name="Court Liaison"),
        build_assignment(officer_id=3, name="Quinn Custom", position_name="Other (Custom)"),
        build_assignment(officer_id=4, name="Rae Desk", position_name="Supervisor"),
        build_assignment(officer_id=5, name="Sol Rookie", rank="Probationary", position_name="Riding Partner (PPO)"),
        build_assignment(officer_id=6, name="Tam Rider", position_name="riding partner"),
        build_assignment(officer_id=7, name="Uma Half", leave=partial),
        build_assignment(
            officer_id=8,
            name="Vic Spare",
            position_name="Available for Reassignment",
            partnership_suspended=True,
        ),
    ]

    roster = categorizer.categorize(assignments)

    assert _names(roster.on_leave) == ["Ona Leave"]
    assert _names(roster.special_assignments) == ["Quinn Custom", "Pia Special"]
    assert _names(roster.supervisors) == ["Rae Desk"]
    assert _names(roster.ppos) == ["Sol Rookie"]
    assert sorted(_names(roster.officers)) == ["Tam Rider", "Uma Half", "Vic Spare"]
    assert _names(roster.available_for_reassignment) == ["Vic Spare"]
    assert roster.ordered()[0].name == "Rae Desk"
    assert roster.ordered()[-1].name == "Sol Rookie"


def test_special_assignment_wins_over_supervisor_rank(settings: Settings) -> None:
    categorizer = OfficerCategorizer(settings)
    assignment = build_assignment(rank="Sergeant", position_name="Detective Bureau")

    assert categorizer.category(assignment) is Category.SPECIAL_ASSIGNMENT


def test_force_list_keeps_sergeants_and_drops_command_ranks(settings: Settings) -> None:
    categorizer = OfficerCategorizer(settings)
    assignments = [
        build_assignment(officer_id=1, name="Lt Major", rank="Lieutenant"),
        build_assignment(officer_id=2, name="Sgt High", rank="Sergeant", service_credit=20.0),
        build_assignment(officer_id=3, name="Sgt Low", rank="Sergeant", service_credit=3.0),
        build_assignment(officer_id=4, name="Officer Plain", service_credit=4.0),
        build_assignment(officer_id=5, name="New Rookie", rank="Probationary", service_credit=0.5),
    ]

    roster = categorizer.force_list(assignments)

    assert _names(roster.supervisors) == ["Sgt Low", "Sgt High"]
    assert _names(roster.officers) == ["Officer Plain"]
    assert _names(roster.ppos) == ["New Rookie"]


def test_patrol_is_a_regular_position(settings: Settings) -> None:
    categorizer = OfficerCategorizer(settings)

    assert categorizer.category(build_assignment(position_name="Patrol")) is Category.OFFICER
    assert categorizer.category(build_assignment(position_name="patrol ")) is Category.OFFICER


def test_vacation_list_breaks_credit_ties_by_badge(settings: Settings) -> None:
    categorizer = OfficerCategorizer(settings)
    officers = [
        build_assignment(officer_id=1, name="Ada Zane", badge_number="12", service_credit=6.0),
        build_assignment(officer_id=2, name="Bo Young", badge_number="40", service_credit=6.0),
        build_assignment(officer_id=3, name="Cy Xu", badge_number="n/a", service_credit=9.0),
    ]

    assert _names(categorizer.sort_officers(officers, View.VACATION_LIST)) == ["Cy Xu", "Ada Zane", "Bo Young"]
    assert _names(categorizer.sort_officers(officers, View.MONTHLY)) == ["Cy Xu", "Bo Young", "Ada Zane"]
