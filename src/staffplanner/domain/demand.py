"""Demand models for role coverage requirements.

This module provides the data structures that describe how many staff a
business needs: peak-hour rules that scale the base role requirement, the
per-(date, role) coverage requirements the planner produces, and the
warnings recorded when a requirement cannot be met.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from staffplanner.domain.models import TimeWindow, WEEKDAY_NAMES, validate_weekday


@dataclass(frozen=True)
class PeakHourRule:
    """A high-demand period that scales required staff.

    Attributes:
        weekday: Day of week the rule applies to (Monday = 0).
        window: Time of day the peak covers.
        multiplier: Scale factor for the role's base requirement.
        role_ids: Roles the rule applies to. None means every role.
    """

    weekday: int
    window: TimeWindow
    multiplier: float
    role_ids: Optional[frozenset[str]] = None

    def __post_init__(self) -> None:
        validate_weekday(self.weekday)
        if self.multiplier <= 0:
            raise ValueError(f"Peak multiplier must be > 0, got {self.multiplier}")
        if self.role_ids is not None:
            object.__setattr__(self, "role_ids", frozenset(self.role_ids))

    def applies_to(self, d: date, role_id: str, open_window: Optional[TimeWindow]) -> bool:
        """Check if this rule affects the requirement for ``role_id`` on ``d``."""
        if d.weekday() != self.weekday or open_window is None:
            return False
        if self.role_ids is not None and role_id not in self.role_ids:
            return False
        return self.window.overlaps(open_window)


@dataclass(frozen=True)
class CoverageRequirement:
    """A single (date, role, required count) staffing target.

    Attributes:
        requirement_date: Date to staff.
        role_id: Role to staff.
        required_count: Number of distinct staff needed.
        priority: Role priority, copied for ordering.
        peak_multiplier: Multiplier applied to the base requirement (1.0 if none).
    """

    requirement_date: date
    role_id: str
    required_count: int
    priority: int = 1
    peak_multiplier: float = 1.0

    def __post_init__(self) -> None:
        if self.required_count < 0:
            raise ValueError(f"required_count must be >= 0, got {self.required_count}")

    @property
    def sort_key(self) -> tuple:
        """Processing order: priority desc, count desc, date asc, role id asc."""
        return (-self.priority, -self.required_count, self.requirement_date, self.role_id)

    def __str__(self) -> str:
        return (
            f"{self.role_id} x{self.required_count} on "
            f"{WEEKDAY_NAMES[self.requirement_date.weekday()]} {self.requirement_date.isoformat()}"
        )


@dataclass(frozen=True)
class CoverageWarning:
    """A requirement that could not be fully staffed.

    Attributes:
        warning_date: Date of the unmet requirement.
        role_id: Role that is short.
        required: Staff required.
        assigned: Distinct staff actually assigned.
        role_name: Display name of the role, if known.
    """

    warning_date: date
    role_id: str
    required: int
    assigned: int
    role_name: str = ""

    @property
    def shortfall(self) -> int:
        return max(0, self.required - self.assigned)

    def __str__(self) -> str:
        label = self.role_name or self.role_id
        return (
            f"Insufficient staff for {label} on "
            f"{self.warning_date.strftime('%A, %b %d')}: need {self.required}, "
            f"have {self.assigned} (short {self.shortfall})"
        )
