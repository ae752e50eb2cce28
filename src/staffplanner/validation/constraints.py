"""Constraint checking for individual shift assignments.

The checker answers one question: can this staff member take this shift,
given the shifts they already hold? Rules are evaluated in a fixed order and
the first failure is reported. Checks never mutate their inputs; callers
commit a shift only after a passing result.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

from staffplanner.domain.availability import AvailabilityIndex
from staffplanner.domain.models import (
    DAYS_PER_WEEK,
    MINUTES_PER_DAY,
    Business,
    Shift,
    Staff,
    format_minutes,
    normalize_week_start,
)


class ConstraintRule(Enum):
    """Rules a shift assignment must satisfy, in evaluation order."""

    INACTIVE_STAFF = "inactive_staff"
    ROLE_ELIGIBILITY = "role_eligibility"
    AVAILABILITY = "availability"
    BUSINESS_HOURS = "business_hours"
    OVERLAP = "overlap"
    REST_PERIOD = "rest_period"
    DAILY_HOURS = "daily_hours"
    WEEKLY_HOURS = "weekly_hours"
    CONSECUTIVE_DAYS = "consecutive_days"
    # Only reported by whole-schedule validation.
    UNKNOWN_STAFF = "unknown_staff"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of checking one proposed shift.

    Attributes:
        ok: True if every rule passed.
        rule: The first rule that failed, if any.
        message: Human-readable explanation of the failure.
    """

    ok: bool
    rule: Optional[ConstraintRule] = None
    message: str = ""

    @classmethod
    def passed(cls) -> "CheckResult":
        return cls(ok=True)

    @classmethod
    def failed(cls, rule: ConstraintRule, message: str) -> "CheckResult":
        return cls(ok=False, rule=rule, message=message)

    def __bool__(self) -> bool:
        return self.ok


class ConstraintChecker:
    """Checks proposed shifts against business and staff constraints.

    The checker is bound to one business, one availability index and one
    planning week; it holds no state that changes between calls.

    Example:
        >>> checker = ConstraintChecker(business, index, week_start)
        >>> result = checker.can_assign(alice, proposed, alice_shifts)
        >>> if not result.ok:
        ...     print(result.rule, result.message)
    """

    def __init__(
        self,
        business: Business,
        availability_index: AvailabilityIndex,
        week_start: date,
    ):
        self.business = business
        self.availability_index = availability_index
        self.week_start = normalize_week_start(week_start)

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=DAYS_PER_WEEK - 1)

    def can_assign(
        self,
        staff: Staff,
        proposed: Shift,
        existing: Iterable[Shift],
    ) -> CheckResult:
        """Check whether ``staff`` may take ``proposed``.

        Args:
            staff: Staff member who would work the shift.
            proposed: Shift under consideration.
            existing: Shifts the staff member already holds. Shifts belonging
                to other staff and cancelled shifts are ignored.

        Returns:
            CheckResult naming the first rule that failed, or a passing result.
        """
        held = [
            s
            for s in existing
            if s.staff_id == staff.id and not s.is_cancelled
        ]

        for check in (
            self._check_active,
            self._check_role,
            self._check_availability,
            self._check_business_hours,
            self._check_overlap,
            self._check_rest,
            self._check_daily_hours,
            self._check_weekly_hours,
            self._check_consecutive_days,
        ):
            result = check(staff, proposed, held)
            if not result.ok:
                return result

        return CheckResult.passed()

    def _check_active(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        if not staff.is_active:
            return CheckResult.failed(
                ConstraintRule.INACTIVE_STAFF,
                f"{staff.name} is not active",
            )
        return CheckResult.passed()

    def _check_role(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        if self.business.get_role(proposed.role_id) is None:
            return CheckResult.failed(
                ConstraintRule.ROLE_ELIGIBILITY,
                f"Role {proposed.role_id} does not exist at {self.business.name}",
            )
        if not staff.can_do_role(proposed.role_id):
            return CheckResult.failed(
                ConstraintRule.ROLE_ELIGIBILITY,
                f"{staff.name} is not eligible for role {proposed.role_id}",
            )
        return CheckResult.passed()

    def _check_availability(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        windows = self.availability_index.effective_windows(staff.id, proposed.shift_date)
        if any(window.contains(proposed.window) for window in windows):
            return CheckResult.passed()
        return CheckResult.failed(
            ConstraintRule.AVAILABILITY,
            f"{_describe(proposed)} is outside {staff.name}'s availability "
            f"({', '.join(repr(w) for w in windows) or 'none'})",
        )

    def _check_business_hours(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        open_window = self.business.hours_on(proposed.shift_date)
        if open_window is None:
            return CheckResult.failed(
                ConstraintRule.BUSINESS_HOURS,
                f"{self.business.name} is closed on {proposed.shift_date.isoformat()}",
            )
        if not open_window.contains(proposed.window):
            return CheckResult.failed(
                ConstraintRule.BUSINESS_HOURS,
                f"{_describe(proposed)} is outside business hours {open_window!r}",
            )
        return CheckResult.passed()

    def _check_overlap(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        for shift in held:
            if shift.shift_date == proposed.shift_date and shift.window.overlaps(proposed.window):
                return CheckResult.failed(
                    ConstraintRule.OVERLAP,
                    f"{_describe(proposed)} overlaps existing shift {_describe(shift)}",
                )
        return CheckResult.passed()

    def _check_rest(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        min_rest = staff.constraints.min_minutes_between_shifts
        if min_rest <= 0:
            return CheckResult.passed()

        start, end = _absolute_span(proposed, proposed.shift_date)
        for shift in held:
            if abs((shift.shift_date - proposed.shift_date).days) > 1:
                continue
            other_start, other_end = _absolute_span(shift, proposed.shift_date)
            if other_end <= start:
                gap = start - other_end
            elif end <= other_start:
                gap = other_start - end
            else:
                gap = 0
            if gap < min_rest:
                return CheckResult.failed(
                    ConstraintRule.REST_PERIOD,
                    f"Only {gap / 60:.1f}h rest between {_describe(shift)} and "
                    f"{_describe(proposed)}, need {min_rest / 60:.1f}h",
                )
        return CheckResult.passed()

    def _check_daily_hours(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        total = proposed.duration_minutes + sum(
            s.duration_minutes for s in held if s.shift_date == proposed.shift_date
        )
        limit = staff.constraints.max_minutes_per_day
        if total > limit:
            return CheckResult.failed(
                ConstraintRule.DAILY_HOURS,
                f"{staff.name} would work {total / 60:.1f}h on "
                f"{proposed.shift_date.isoformat()}, max {limit / 60:.1f}h",
            )
        return CheckResult.passed()

    def _check_weekly_hours(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        total = proposed.duration_minutes + sum(
            s.duration_minutes
            for s in held
            if self.week_start <= s.shift_date <= self.week_end
        )
        limit = staff.constraints.max_minutes_per_week
        if total > limit:
            return CheckResult.failed(
                ConstraintRule.WEEKLY_HOURS,
                f"{staff.name} would work {total / 60:.1f}h this week, max {limit / 60:.1f}h",
            )
        return CheckResult.passed()

    def _check_consecutive_days(self, staff: Staff, proposed: Shift, held: list[Shift]) -> CheckResult:
        worked = {s.shift_date for s in held}
        worked.add(proposed.shift_date)

        run = 1
        day = proposed.shift_date - timedelta(days=1)
        while day in worked:
            run += 1
            day -= timedelta(days=1)
        day = proposed.shift_date + timedelta(days=1)
        while day in worked:
            run += 1
            day += timedelta(days=1)

        limit = staff.constraints.max_consecutive_working_days
        if run > limit:
            return CheckResult.failed(
                ConstraintRule.CONSECUTIVE_DAYS,
                f"{staff.name} would work {run} consecutive days, max {limit}",
            )
        return CheckResult.passed()


def _absolute_span(shift: Shift, anchor: date) -> tuple[int, int]:
    """Shift start/end in minutes relative to midnight of ``anchor``."""
    offset = (shift.shift_date - anchor).days * MINUTES_PER_DAY
    return offset + shift.start_minutes, offset + shift.end_minutes


def _describe(shift: Shift) -> str:
    return (
        f"{shift.shift_date.isoformat()} "
        f"{format_minutes(shift.start_minutes)}-{format_minutes(shift.end_minutes)}"
    )
