"""Main optimizer interface.

This module provides the high-level ScheduleOptimizer class and the
``generate_schedule`` / ``repair_schedule`` entry points that wire the
coverage planner, greedy scheduler, repair pass and scorer together for one
planning run.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Optional

from staffplanner.domain.availability import AvailabilityIndex
from staffplanner.domain.demand import PeakHourRule
from staffplanner.domain.models import (
    Business,
    ConstraintOverrides,
    Schedule,
    Staff,
    TimeOffInterval,
)
from staffplanner.domain.policies import PreferredShiftPolicy, ShiftPolicy
from staffplanner.scheduling.greedy_scheduler import GreedyScheduler
from staffplanner.scheduling.repair import ScheduleRepairer
from staffplanner.scheduling.scorer import QualityScorer, ScheduleReport, ScoringWeights

logger = logging.getLogger(__name__)


@dataclass
class OptimizerConfig:
    """Configuration for a planning run.

    Attributes:
        shift_policy: Shift length policy.
        peak_hour_rules: Rules that scale role minimums on busy days.
        scoring_weights: Weights for the total score.
        labor_budget: Weekly labor budget used by the cost score, if any.
        max_rebalance_iterations: Cap on shifts moved by the repair pass.
    """

    shift_policy: ShiftPolicy = field(default_factory=PreferredShiftPolicy)
    peak_hour_rules: list[PeakHourRule] = field(default_factory=list)
    scoring_weights: ScoringWeights = field(default_factory=ScoringWeights)
    labor_budget: Optional[float] = None
    max_rebalance_iterations: int = 25

    def __post_init__(self) -> None:
        if self.labor_budget is not None and self.labor_budget <= 0:
            raise ValueError(f"labor_budget must be > 0, got {self.labor_budget}")
        if self.max_rebalance_iterations < 0:
            raise ValueError(
                f"max_rebalance_iterations must be >= 0, got {self.max_rebalance_iterations}"
            )


@dataclass
class PlanningResult:
    """A schedule together with its quality report."""

    schedule: Schedule
    report: ScheduleReport


class ScheduleOptimizer:
    """High-level optimizer for one business.

    Inputs are treated as read-only: constraint overrides are applied to
    copies of the staff records.

    Example:
        >>> optimizer = ScheduleOptimizer(business, staff, time_off)
        >>> result = optimizer.generate(date(2024, 1, 15))
        >>> print(result.report.coverage_score)
    """

    def __init__(
        self,
        business: Business,
        staff: Iterable[Staff],
        time_off: Iterable[TimeOffInterval] = (),
        constraints_overrides: Optional[ConstraintOverrides] = None,
        config: Optional[OptimizerConfig] = None,
    ):
        """Initialize optimizer.

        Args:
            business: Business to schedule.
            staff: Staff pool.
            time_off: Time off requests; only approved ones are applied.
            constraints_overrides: Replacements for every staff member's
                constraints during this run.
            config: Optimizer configuration.
        """
        self.business = business
        self.config = config or OptimizerConfig()
        self.staff = _apply_overrides(staff, constraints_overrides)
        self.time_off = list(time_off)
        self.availability_index = AvailabilityIndex(self.staff, self.time_off)

        self.scheduler = GreedyScheduler(
            business,
            self.staff,
            shift_policy=self.config.shift_policy,
            peak_rules=self.config.peak_hour_rules,
            availability_index=self.availability_index,
        )
        self.scorer = QualityScorer(
            business,
            self.staff,
            weights=self.config.scoring_weights,
            labor_budget=self.config.labor_budget,
            peak_rules=self.config.peak_hour_rules,
            availability_index=self.availability_index,
        )
        self.repairer = ScheduleRepairer(
            self.scheduler,
            self.scorer,
            max_rebalance_iterations=self.config.max_rebalance_iterations,
        )

    def generate(self, week_start: date) -> PlanningResult:
        """Generate and score a new schedule for the week containing ``week_start``."""
        logger.info(
            "Generating schedule for %s, week of %s (%d staff)",
            self.business.name,
            week_start.isoformat(),
            len(self.staff),
        )
        schedule, _ = self.scheduler.generate_schedule(week_start)
        report = self.scorer.score(schedule)
        _log_finished("Generated", schedule, report)
        return PlanningResult(schedule=schedule, report=report)

    def repair(self, existing_schedule: Schedule) -> PlanningResult:
        """Repair and score an existing schedule. The input is not modified."""
        if existing_schedule.business_id != self.business.id:
            raise ValueError(
                f"Schedule belongs to business {existing_schedule.business_id!r}, "
                f"not {self.business.id!r}"
            )
        logger.info(
            "Repairing schedule for %s, week of %s (%d shifts)",
            self.business.name,
            existing_schedule.week_start.isoformat(),
            len(existing_schedule.active_shifts),
        )
        schedule = self.repairer.repair(existing_schedule)
        report = self.scorer.score(schedule)
        _log_finished("Repaired", schedule, report)
        return PlanningResult(schedule=schedule, report=report)

    def score(self, schedule: Schedule) -> ScheduleReport:
        return self.scorer.score(schedule)


def generate_schedule(
    business: Business,
    staff: Iterable[Staff],
    time_off: Iterable[TimeOffInterval],
    week_start: date,
    constraints_overrides: Optional[ConstraintOverrides] = None,
    config: Optional[OptimizerConfig] = None,
) -> PlanningResult:
    """Generate a schedule for one week and score it.

    Args:
        business: Business to schedule.
        staff: Staff pool.
        time_off: Time off requests.
        week_start: Any date in the week to plan.
        constraints_overrides: Run-wide constraint replacements.
        config: Optimizer configuration.

    Returns:
        PlanningResult with a DRAFT, OPTIMIZER-sourced schedule and its report.
    """
    optimizer = ScheduleOptimizer(business, staff, time_off, constraints_overrides, config)
    return optimizer.generate(week_start)


def repair_schedule(
    business: Business,
    staff: Iterable[Staff],
    time_off: Iterable[TimeOffInterval],
    existing_schedule: Schedule,
    constraints_overrides: Optional[ConstraintOverrides] = None,
    config: Optional[OptimizerConfig] = None,
) -> PlanningResult:
    """Fill gaps in and rebalance an existing schedule, then score it.

    Args:
        business: Business the schedule belongs to.
        staff: Staff pool.
        time_off: Time off requests.
        existing_schedule: Schedule to improve; not modified.
        constraints_overrides: Run-wide constraint replacements.
        config: Optimizer configuration.

    Returns:
        PlanningResult with the repaired copy and its report.
    """
    optimizer = ScheduleOptimizer(business, staff, time_off, constraints_overrides, config)
    return optimizer.repair(existing_schedule)


def _apply_overrides(
    staff: Iterable[Staff],
    overrides: Optional[ConstraintOverrides],
) -> list[Staff]:
    if overrides is None:
        return list(staff)
    return [replace(member, constraints=overrides.apply(member.constraints)) for member in staff]


def _log_finished(action: str, schedule: Schedule, report: ScheduleReport) -> None:
    logger.info(
        "%s %d shifts: coverage=%.1f fairness=%.1f cost=%.2f total=%.2f "
        "(%d warnings, %d violations)",
        action,
        len(schedule.active_shifts),
        report.coverage_score,
        report.fairness_score,
        report.total_cost,
        report.total_score,
        len(report.warnings),
        len(report.violations),
    )
