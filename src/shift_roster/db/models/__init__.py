from .officer import OfficerProfile, ShiftType
from .schedule import DefaultAssignment, RecurringAssignment, ScheduleException
from .system import MinimumStaffing, PartnershipAudit

__all__ = [
    "ShiftType",
    "OfficerProfile",
    "RecurringAssignment",
    "ScheduleException",
    "DefaultAssignment",
    "MinimumStaffing",
    "PartnershipAudit",
]
