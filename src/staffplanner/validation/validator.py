"""Validation module for verifying schedule correctness.

Every shift in a schedule is re-checked against all of its staff member's
other shifts using the same ConstraintChecker the scheduler uses, so the
rules are defined in exactly one place. Role caps are checked across the
whole schedule and reported as warnings.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from staffplanner.domain.availability import AvailabilityIndex
from staffplanner.domain.models import (
    Business,
    Schedule,
    Shift,
    Staff,
    TimeOffInterval,
)
from staffplanner.validation.constraints import ConstraintChecker, ConstraintRule


@dataclass
class ValidationError:
    """A single validation error."""

    rule: ConstraintRule
    message: str
    staff_id: Optional[str] = None
    shift: Optional[Shift] = None

    def __str__(self) -> str:
        parts = [f"[{self.rule.value}]"]
        if self.staff_id:
            parts.append(f"Staff {self.staff_id}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def errors_for_staff(self, staff_id: str) -> list[ValidationError]:
        return [e for e in self.errors if e.staff_id == staff_id]


class ScheduleValidator:
    """Validates schedules against all constraints.

    Example:
        >>> validator = ScheduleValidator(business, staff, time_off)
        >>> result = validator.validate(schedule)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(
        self,
        business: Business,
        staff: Iterable[Staff],
        time_off: Iterable[TimeOffInterval] = (),
        availability_index: Optional[AvailabilityIndex] = None,
    ):
        self.business = business
        self.staff_map = {member.id: member for member in staff}
        self.availability_index = availability_index or AvailabilityIndex(
            self.staff_map.values(), time_off
        )

    def validate(self, schedule: Schedule) -> ValidationResult:
        """Validate a complete schedule.

        Args:
            schedule: The schedule to validate. Cancelled shifts are skipped.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)
        checker = ConstraintChecker(self.business, self.availability_index, schedule.week_start)

        shifts = schedule.active_shifts
        for index, shift in enumerate(shifts):
            member = self.staff_map.get(shift.staff_id)
            if member is None:
                result.add_error(
                    ValidationError(
                        rule=ConstraintRule.UNKNOWN_STAFF,
                        message=f"Unknown staff ID: {shift.staff_id}",
                        staff_id=shift.staff_id,
                        shift=shift,
                    )
                )
                continue

            others = [
                other
                for other_index, other in enumerate(shifts)
                if other_index != index and other.staff_id == shift.staff_id
            ]
            check = checker.can_assign(member, shift, others)
            if not check.ok:
                result.add_error(
                    ValidationError(
                        rule=check.rule,
                        message=check.message,
                        staff_id=shift.staff_id,
                        shift=shift,
                    )
                )

        self._validate_role_caps(schedule, result)

        return result

    def _validate_role_caps(self, schedule: Schedule, result: ValidationResult) -> None:
        """Warn about any (date, role) staffed above its maximum."""
        for d in schedule.week_dates:
            for role in self.business.roles:
                assigned = len(schedule.staff_for_role_on(d, role.id))
                if assigned > role.max_staff_allowed:
                    result.add_warning(
                        f"Overstaffed {role.name} on {d.strftime('%A, %b %d')}: "
                        f"{assigned} assigned, max {role.max_staff_allowed}"
                    )
