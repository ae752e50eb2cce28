"""Domain models for the scheduling system.

This module contains the core data structures used throughout the planner:
businesses and their roles, staff with availability and personal
constraints, approved time off, and the shifts and schedules the optimizer
produces.

Time of day is always expressed as minutes since midnight. Days of week use
``date.weekday()`` numbering (Monday = 0).
"""

import copy
from dataclasses import dataclass, field, replace
from datetime import date, time, timedelta
from enum import Enum
from typing import Optional

MINUTES_PER_DAY = 1440
DAYS_PER_WEEK = 7

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def normalize_week_start(d: date) -> date:
    """Return the Monday on or before ``d``."""
    return d - timedelta(days=d.weekday())


def hours_to_minutes(hours: float) -> int:
    """Convert an hour quantity to whole minutes."""
    return int(round(hours * 60))


def minutes_to_time(minutes: int) -> time:
    """Convert minutes since midnight to a time object (1440 wraps to 00:00)."""
    hours, mins = divmod(minutes % MINUTES_PER_DAY, 60)
    return time(hour=hours, minute=mins)


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as HH:MM (1440 renders as 24:00)."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


class ShiftStatus(Enum):
    """Lifecycle status of a single shift."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ScheduleStatus(Enum):
    """Publication status of a schedule. Transitions only move forward."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


_STATUS_ORDER = {
    ScheduleStatus.DRAFT: 0,
    ScheduleStatus.PUBLISHED: 1,
    ScheduleStatus.ARCHIVED: 2,
}


class ScheduleSource(Enum):
    """Who produced a schedule."""

    MANUAL = "manual"
    OPTIMIZER = "optimizer"


class TimeOffStatus(Enum):
    """Review state of a time-off request. Only APPROVED affects planning."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True, order=True)
class TimeWindow:
    """A half-open interval ``[start, end)`` within a single day.

    Attributes:
        start_minutes: Minutes from midnight when the window opens.
        end_minutes: Minutes from midnight when the window closes (exclusive).
    """

    start_minutes: int
    end_minutes: int

    def __post_init__(self) -> None:
        if not 0 <= self.start_minutes < MINUTES_PER_DAY:
            raise ValueError(
                f"start_minutes must be in [0, {MINUTES_PER_DAY}), got {self.start_minutes}"
            )
        if not 0 < self.end_minutes <= MINUTES_PER_DAY:
            raise ValueError(
                f"end_minutes must be in (0, {MINUTES_PER_DAY}], got {self.end_minutes}"
            )
        if self.start_minutes >= self.end_minutes:
            raise ValueError(
                f"Window start {format_minutes(self.start_minutes)} must be before "
                f"end {format_minutes(self.end_minutes)}"
            )

    @classmethod
    def from_times(cls, start: time, end: time) -> "TimeWindow":
        """Create a window from time objects.

        An ``end`` of midnight (00:00) is read as the end of the day.
        """
        start_mins = start.hour * 60 + start.minute
        end_mins = end.hour * 60 + end.minute
        if end_mins == 0:
            end_mins = MINUTES_PER_DAY
        return cls(start_mins, end_mins)

    @classmethod
    def from_hours(cls, start_hour: float, end_hour: float) -> "TimeWindow":
        """Create a window from fractional hours, e.g. ``(9, 17.5)``."""
        return cls(hours_to_minutes(start_hour), hours_to_minutes(end_hour))

    @property
    def duration_minutes(self) -> int:
        """Length of the window in minutes."""
        return self.end_minutes - self.start_minutes

    @property
    def duration_hours(self) -> float:
        """Length of the window in hours."""
        return self.duration_minutes / 60.0

    @property
    def start_time(self) -> time:
        return minutes_to_time(self.start_minutes)

    @property
    def end_time(self) -> time:
        return minutes_to_time(self.end_minutes)

    def contains(self, other: "TimeWindow") -> bool:
        """Check if ``other`` lies entirely within this window."""
        return self.start_minutes <= other.start_minutes and other.end_minutes <= self.end_minutes

    def overlaps(self, other: "TimeWindow") -> bool:
        """Check if this window shares any time with another."""
        return self.start_minutes < other.end_minutes and other.start_minutes < self.end_minutes

    def intersect(self, other: "TimeWindow") -> Optional["TimeWindow"]:
        """Return the overlapping part of two windows, or None."""
        start = max(self.start_minutes, other.start_minutes)
        end = min(self.end_minutes, other.end_minutes)
        if start >= end:
            return None
        return TimeWindow(start, end)

    def subtract(self, other: "TimeWindow") -> list["TimeWindow"]:
        """Remove ``other`` from this window.

        Returns:
            The remaining pieces in order: zero, one, or two windows.
        """
        if not self.overlaps(other):
            return [self]

        remaining = []
        if self.start_minutes < other.start_minutes:
            remaining.append(TimeWindow(self.start_minutes, other.start_minutes))
        if other.end_minutes < self.end_minutes:
            remaining.append(TimeWindow(other.end_minutes, self.end_minutes))
        return remaining

    def __repr__(self) -> str:
        return f"TimeWindow({format_minutes(self.start_minutes)}-{format_minutes(self.end_minutes)})"


def validate_weekday(weekday: int) -> None:
    if not 0 <= weekday < DAYS_PER_WEEK:
        raise ValueError(f"weekday must be in 0..6 (Monday=0), got {weekday}")


@dataclass(frozen=True)
class Role:
    """A job role a business needs staffed.

    Attributes:
        id: Unique identifier for the role.
        name: Display name.
        hourly_rate: Pay rate for the role. When set it overrides the staff rate.
        min_staff_required: Staff required concurrently on each open day.
        max_staff_allowed: Maximum staff allowed concurrently.
        priority: Relative importance (higher is scheduled first).
    """

    id: str
    name: str
    hourly_rate: Optional[float] = None
    min_staff_required: int = 0
    max_staff_allowed: int = 1
    priority: int = 1

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Role id must not be empty")
        if self.hourly_rate is not None and self.hourly_rate < 0:
            raise ValueError(f"Role {self.id}: hourly_rate must be >= 0, got {self.hourly_rate}")
        if self.min_staff_required < 0:
            raise ValueError(
                f"Role {self.id}: min_staff_required must be >= 0, got {self.min_staff_required}"
            )
        if self.min_staff_required > self.max_staff_allowed:
            raise ValueError(
                f"Role {self.id}: min_staff_required ({self.min_staff_required}) exceeds "
                f"max_staff_allowed ({self.max_staff_allowed})"
            )


@dataclass(frozen=True)
class Business:
    """A business with weekly operating hours and the roles it staffs.

    Attributes:
        id: Unique identifier for the business.
        name: Display name.
        operating_hours: Weekday (0-6) to open window. Missing days are closed.
        roles: Roles the business schedules.
    """

    id: str
    name: str
    operating_hours: dict[int, TimeWindow] = field(default_factory=dict)
    roles: tuple[Role, ...] = ()

    def __post_init__(self) -> None:
        for weekday in self.operating_hours:
            validate_weekday(weekday)
        object.__setattr__(self, "roles", tuple(self.roles))
        seen = set()
        for role in self.roles:
            if role.id in seen:
                raise ValueError(f"Business {self.id}: duplicate role id {role.id!r}")
            seen.add(role.id)

    def hours_on(self, d: date) -> Optional[TimeWindow]:
        """Get the open window for a date, or None if closed."""
        return self.operating_hours.get(d.weekday())

    def is_open_on(self, d: date) -> bool:
        return d.weekday() in self.operating_hours

    def get_role(self, role_id: str) -> Optional[Role]:
        for role in self.roles:
            if role.id == role_id:
                return role
        return None

    @property
    def role_map(self) -> dict[str, Role]:
        return {role.id: role for role in self.roles}


@dataclass(frozen=True)
class Availability:
    """Weekly recurring availability of a staff member.

    Attributes:
        windows: Weekday (0-6) to an ordered tuple of disjoint windows.
            Missing weekdays mean the staff member is unavailable.
    """

    windows: dict[int, tuple[TimeWindow, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized = {}
        for weekday, day_windows in self.windows.items():
            validate_weekday(weekday)
            ordered = tuple(sorted(day_windows))
            for earlier, later in zip(ordered, ordered[1:]):
                if earlier.overlaps(later):
                    raise ValueError(
                        f"Availability windows overlap on {WEEKDAY_NAMES[weekday]}: "
                        f"{earlier!r} and {later!r}"
                    )
            normalized[weekday] = ordered
        object.__setattr__(self, "windows", normalized)

    @classmethod
    def for_days(cls, weekdays, window: TimeWindow) -> "Availability":
        """Create availability with the same single window on each given weekday."""
        return cls({weekday: (window,) for weekday in weekdays})

    def windows_on(self, weekday: int) -> tuple[TimeWindow, ...]:
        """Get the raw windows for a weekday."""
        return self.windows.get(weekday, ())


@dataclass(frozen=True)
class StaffConstraints:
    """Personal labor limits for a staff member.

    Attributes:
        max_hours_per_day: Maximum scheduled hours on one date.
        max_hours_per_week: Maximum scheduled hours in the planning week.
        min_hours_between_shifts: Minimum rest between two shifts.
        max_consecutive_working_days: Longest allowed run of worked dates.
    """

    max_hours_per_day: float = 8.0
    max_hours_per_week: float = 40.0
    min_hours_between_shifts: float = 8.0
    max_consecutive_working_days: int = 6

    def __post_init__(self) -> None:
        if self.max_hours_per_day <= 0:
            raise ValueError(f"max_hours_per_day must be > 0, got {self.max_hours_per_day}")
        if self.max_hours_per_week <= 0:
            raise ValueError(f"max_hours_per_week must be > 0, got {self.max_hours_per_week}")
        if self.max_hours_per_week < self.max_hours_per_day:
            raise ValueError(
                f"max_hours_per_week ({self.max_hours_per_week}) must be >= "
                f"max_hours_per_day ({self.max_hours_per_day})"
            )
        if self.min_hours_between_shifts < 0:
            raise ValueError(
                f"min_hours_between_shifts must be >= 0, got {self.min_hours_between_shifts}"
            )
        if self.max_consecutive_working_days < 1:
            raise ValueError(
                "max_consecutive_working_days must be >= 1, "
                f"got {self.max_consecutive_working_days}"
            )

    @property
    def max_minutes_per_day(self) -> int:
        return hours_to_minutes(self.max_hours_per_day)

    @property
    def max_minutes_per_week(self) -> int:
        return hours_to_minutes(self.max_hours_per_week)

    @property
    def min_minutes_between_shifts(self) -> int:
        return hours_to_minutes(self.min_hours_between_shifts)


@dataclass(frozen=True)
class ConstraintOverrides:
    """Run-wide replacements for fields of every staff member's constraints.

    Fields left as None keep each staff member's own value.
    """

    max_hours_per_day: Optional[float] = None
    max_hours_per_week: Optional[float] = None
    min_hours_between_shifts: Optional[float] = None
    max_consecutive_working_days: Optional[int] = None

    def apply(self, constraints: StaffConstraints) -> StaffConstraints:
        """Return a copy of ``constraints`` with the overridden fields replaced."""
        changes = {
            name: value
            for name, value in (
                ("max_hours_per_day", self.max_hours_per_day),
                ("max_hours_per_week", self.max_hours_per_week),
                ("min_hours_between_shifts", self.min_hours_between_shifts),
                ("max_consecutive_working_days", self.max_consecutive_working_days),
            )
            if value is not None
        }
        if not changes:
            return constraints
        return replace(constraints, **changes)


@dataclass(frozen=True)
class Staff:
    """A staff member who can be scheduled.

    Attributes:
        id: Unique identifier.
        name: Display name.
        hourly_rate: Personal pay rate, used when the role has no rate.
        role_ids: Roles this staff member is eligible for.
        availability: Weekly recurring availability.
        constraints: Personal labor limits.
        is_active: Inactive staff are excluded from all planning.
    """

    id: str
    name: str
    hourly_rate: float = 15.0
    role_ids: frozenset[str] = frozenset()
    availability: Availability = field(default_factory=Availability)
    constraints: StaffConstraints = field(default_factory=StaffConstraints)
    is_active: bool = True

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Staff id must not be empty")
        if self.hourly_rate < 0:
            raise ValueError(f"Staff {self.id}: hourly_rate must be >= 0, got {self.hourly_rate}")
        object.__setattr__(self, "role_ids", frozenset(self.role_ids))

    def can_do_role(self, role_id: str) -> bool:
        return role_id in self.role_ids

    def pay_rate_for(self, role: Optional[Role]) -> float:
        """Pay rate snapshot for working ``role`` (role rate wins when present)."""
        if role is not None and role.hourly_rate is not None:
            return role.hourly_rate
        return self.hourly_rate


@dataclass(frozen=True)
class TimeOffInterval:
    """Time off for a staff member over an inclusive date range.

    Attributes:
        staff_id: Staff member taking time off.
        start_date: First date off (inclusive).
        end_date: Last date off (inclusive).
        window: Partial-day window off on each date. None means full days.
        status: Review state; only APPROVED entries affect planning.
        reason: Free-form note.
    """

    staff_id: str
    start_date: date
    end_date: date
    window: Optional[TimeWindow] = None
    status: TimeOffStatus = TimeOffStatus.APPROVED
    reason: str = ""

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(
                f"Time off for {self.staff_id}: end_date {self.end_date} "
                f"is before start_date {self.start_date}"
            )

    @property
    def is_approved(self) -> bool:
        return self.status == TimeOffStatus.APPROVED

    @property
    def is_partial_day(self) -> bool:
        return self.window is not None

    def covers(self, d: date) -> bool:
        """Check if ``d`` falls within the date range."""
        return self.start_date <= d <= self.end_date


@dataclass(frozen=True)
class Shift:
    """A single staff member working one role for one window on one date.

    Attributes:
        staff_id: Staff member working the shift.
        role_id: Role worked.
        shift_date: Calendar date.
        window: Start/end within the day.
        pay_rate: Hourly rate snapshot at generation time.
        status: Shift lifecycle status.
    """

    staff_id: str
    role_id: str
    shift_date: date
    window: TimeWindow
    pay_rate: float
    status: ShiftStatus = ShiftStatus.SCHEDULED

    def __post_init__(self) -> None:
        if self.pay_rate < 0:
            raise ValueError(f"Shift pay_rate must be >= 0, got {self.pay_rate}")

    @property
    def start_minutes(self) -> int:
        return self.window.start_minutes

    @property
    def end_minutes(self) -> int:
        return self.window.end_minutes

    @property
    def duration_minutes(self) -> int:
        return self.window.duration_minutes

    @property
    def duration_hours(self) -> float:
        return self.window.duration_hours

    @property
    def cost(self) -> float:
        """Labor cost of the shift (duration x pay rate)."""
        return self.duration_hours * self.pay_rate

    @property
    def is_cancelled(self) -> bool:
        return self.status == ShiftStatus.CANCELLED

    def __repr__(self) -> str:
        return (
            f"Shift({self.staff_id} as {self.role_id} on {self.shift_date.isoformat()} "
            f"{format_minutes(self.start_minutes)}-{format_minutes(self.end_minutes)})"
        )


@dataclass
class Schedule:
    """A week of shifts for one business.

    Attributes:
        business_id: Business the schedule belongs to.
        week_start: First day of the planning week (normalized to Monday).
        shifts: Shifts in the schedule.
        source: Who produced the schedule.
        status: Publication status.
    """

    business_id: str
    week_start: date
    shifts: list[Shift] = field(default_factory=list)
    source: ScheduleSource = ScheduleSource.OPTIMIZER
    status: ScheduleStatus = ScheduleStatus.DRAFT

    def __post_init__(self) -> None:
        self.week_start = normalize_week_start(self.week_start)

    @property
    def week_end(self) -> date:
        """Last day of the planning week (inclusive)."""
        return self.week_start + timedelta(days=DAYS_PER_WEEK - 1)

    @property
    def week_dates(self) -> list[date]:
        return [self.week_start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]

    @property
    def active_shifts(self) -> list[Shift]:
        """Shifts that count toward coverage, hours and cost."""
        return [s for s in self.shifts if not s.is_cancelled]

    def in_week(self, d: date) -> bool:
        return self.week_start <= d <= self.week_end

    def add_shift(self, shift: Shift) -> None:
        self.shifts.append(shift)

    def replace_shift(self, old: Shift, new: Shift) -> None:
        """Swap ``old`` for ``new`` in place, keeping its position."""
        index = self.shifts.index(old)
        self.shifts[index] = new

    def shifts_for_staff(self, staff_id: str) -> list[Shift]:
        return [s for s in self.active_shifts if s.staff_id == staff_id]

    def shifts_on(self, d: date) -> list[Shift]:
        return [s for s in self.active_shifts if s.shift_date == d]

    def staff_for_role_on(self, d: date, role_id: str) -> set[str]:
        """Distinct staff working ``role_id`` on ``d``."""
        return {
            s.staff_id
            for s in self.active_shifts
            if s.shift_date == d and s.role_id == role_id
        }

    def minutes_by_staff(self) -> dict[str, int]:
        """Total scheduled minutes per staff member with at least one shift."""
        totals: dict[str, int] = {}
        for shift in self.active_shifts:
            totals[shift.staff_id] = totals.get(shift.staff_id, 0) + shift.duration_minutes
        return totals

    def hours_by_staff(self) -> dict[str, float]:
        return {sid: mins / 60.0 for sid, mins in self.minutes_by_staff().items()}

    @property
    def total_hours(self) -> float:
        return sum(s.duration_hours for s in self.active_shifts)

    @property
    def total_cost(self) -> float:
        return sum(s.cost for s in self.active_shifts)

    def can_transition_to(self, status: ScheduleStatus) -> bool:
        return _STATUS_ORDER[status] > _STATUS_ORDER[self.status]

    def transition_to(self, status: ScheduleStatus) -> None:
        """Move the schedule forward along DRAFT -> PUBLISHED -> ARCHIVED."""
        if not self.can_transition_to(status):
            raise ValueError(
                f"Cannot move schedule from {self.status.value} to {status.value}"
            )
        self.status = status

    def copy(self) -> "Schedule":
        """Copy with an independent shift list (shifts themselves are immutable)."""
        duplicate = copy.copy(self)
        duplicate.shifts = list(self.shifts)
        return duplicate
