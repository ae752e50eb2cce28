"""Domain models and business rules for scheduling."""

from staffplanner.domain.availability import AvailabilityIndex
from staffplanner.domain.demand import (
    CoverageRequirement,
    CoverageWarning,
    PeakHourRule,
)
from staffplanner.domain.models import (
    Availability,
    Business,
    ConstraintOverrides,
    Role,
    Schedule,
    ScheduleSource,
    ScheduleStatus,
    Shift,
    ShiftStatus,
    Staff,
    StaffConstraints,
    TimeOffInterval,
    TimeOffStatus,
    TimeWindow,
    normalize_week_start,
)
from staffplanner.domain.policies import PreferredShiftPolicy, ShiftPolicy

__all__ = [
    # Models
    "Availability",
    "Business",
    "ConstraintOverrides",
    "Role",
    "Schedule",
    "ScheduleSource",
    "ScheduleStatus",
    "Shift",
    "ShiftStatus",
    "Staff",
    "StaffConstraints",
    "TimeOffInterval",
    "TimeOffStatus",
    "TimeWindow",
    "normalize_week_start",
    # Availability
    "AvailabilityIndex",
    # Demand
    "CoverageRequirement",
    "CoverageWarning",
    "PeakHourRule",
    # Policies
    "PreferredShiftPolicy",
    "ShiftPolicy",
]
