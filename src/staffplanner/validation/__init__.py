"""Validation module for verifying schedule correctness."""

from staffplanner.validation.constraints import (
    CheckResult,
    ConstraintChecker,
    ConstraintRule,
)
from staffplanner.validation.validator import (
    ScheduleValidator,
    ValidationError,
    ValidationResult,
)

__all__ = [
    "CheckResult",
    "ConstraintChecker",
    "ConstraintRule",
    "ScheduleValidator",
    "ValidationError",
    "ValidationResult",
]
