"""Schedule quality scoring.

Scores any schedule, whether generated, repaired or edited by hand, on
coverage, fairness and cost, and re-validates every shift so violations show
up in the report.
"""

import statistics
from dataclasses import dataclass, field
from typing import Iterable, Optional

from staffplanner.domain.availability import AvailabilityIndex
from staffplanner.domain.demand import CoverageRequirement, CoverageWarning, PeakHourRule
from staffplanner.domain.models import Business, Schedule, Staff, TimeOffInterval
from staffplanner.scheduling.coverage import CoveragePlanner
from staffplanner.validation.validator import ScheduleValidator, ValidationError

COVERAGE_TARGET = 80.0
FAIRNESS_TARGET = 70.0
COST_TARGET = 60.0


@dataclass
class ScoringWeights:
    """Weights combining the component scores into a total.

    Attributes:
        coverage: Weight of the coverage score.
        fairness: Weight of the fairness score.
        cost: Weight of the cost score.
        violation_penalty: Points subtracted per constraint violation.
        fairness_weight: Business preference for fairness, 0-1.
        cost_weight: Business preference for cost, 0-1.
    """

    coverage: float = 0.4
    fairness: float = 0.3
    cost: float = 0.2
    violation_penalty: float = 0.1
    fairness_weight: float = 1.0
    cost_weight: float = 1.0

    def __post_init__(self) -> None:
        for name in ("coverage", "fairness", "cost", "violation_penalty"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} weight must be >= 0, got {getattr(self, name)}")
        for name in ("fairness_weight", "cost_weight"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be in [0, 1], got {value}")


@dataclass
class ScheduleReport:
    """Quality report for a schedule.

    Attributes:
        coverage_score: Percent of required staffing filled (0-100).
        fairness_score: Evenness of hours across scheduled staff (0-100).
        cost_score: Advisory cost rating (0-100, higher is cheaper).
        total_cost: Labor cost of all active shifts.
        total_hours: Hours across all active shifts.
        total_score: Weighted combination of the scores minus violation penalty.
        warnings: Requirements left short.
        violations: Shifts that fail a constraint.
        coverage_by_role: Role id to coverage percent for roles with requirements.
        notices: Advisory messages that do not affect scores.
        recommendations: Suggested actions.
    """

    coverage_score: float
    fairness_score: float
    cost_score: float
    total_cost: float
    total_hours: float
    total_score: float
    warnings: list[CoverageWarning] = field(default_factory=list)
    violations: list[ValidationError] = field(default_factory=list)
    coverage_by_role: dict[str, float] = field(default_factory=dict)
    notices: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def total_shortfall(self) -> int:
        return sum(w.shortfall for w in self.warnings)

    def to_dict(self) -> dict:
        """Plain summary suitable for logging or serialization."""
        return {
            "coverage_score": round(self.coverage_score, 2),
            "fairness_score": round(self.fairness_score, 2),
            "cost_score": round(self.cost_score, 2),
            "total_cost": round(self.total_cost, 2),
            "total_hours": round(self.total_hours, 2),
            "total_score": round(self.total_score, 2),
            "warnings": [str(w) for w in self.warnings],
            "violations": [str(v) for v in self.violations],
            "coverage_by_role": {k: round(v, 2) for k, v in self.coverage_by_role.items()},
            "notices": list(self.notices),
            "recommendations": list(self.recommendations),
        }


def fairness_from_hours(hours: Iterable[float]) -> float:
    """Fairness score from per-staff hours: ``max(0, 100 - 10 * stdev)``.

    Uses the population standard deviation. No hours at all scores 100.
    """
    values = list(hours)
    if not values:
        return 100.0
    return max(0.0, 100.0 - 10.0 * statistics.pstdev(values))


def cost_score_for(cost: float, labor_budget: Optional[float] = None) -> float:
    """Advisory cost score.

    With a budget: ``max(0, 100 - 50 * cost / budget)``. Without one the
    score drops one point per 1000 of cost, clamped to 0-100.
    """
    if labor_budget:
        return max(0.0, 100.0 - 50.0 * cost / labor_budget)
    return min(100.0, max(0.0, 100.0 - cost / 1000.0))


class QualityScorer:
    """Computes a ScheduleReport for a schedule.

    Example:
        >>> scorer = QualityScorer(business, staff, time_off)
        >>> report = scorer.score(schedule)
        >>> print(report.total_score)
    """

    def __init__(
        self,
        business: Business,
        staff: Iterable[Staff],
        time_off: Iterable[TimeOffInterval] = (),
        weights: Optional[ScoringWeights] = None,
        labor_budget: Optional[float] = None,
        peak_rules: Iterable[PeakHourRule] = (),
        availability_index: Optional[AvailabilityIndex] = None,
    ):
        if labor_budget is not None and labor_budget <= 0:
            raise ValueError(f"labor_budget must be > 0, got {labor_budget}")
        self.business = business
        self.staff = list(staff)
        self.weights = weights or ScoringWeights()
        self.labor_budget = labor_budget
        self.planner = CoveragePlanner(business, peak_rules)
        self.validator = ScheduleValidator(
            business,
            self.staff,
            time_off,
            availability_index=availability_index,
        )

    def score(self, schedule: Schedule) -> ScheduleReport:
        """Score a schedule.

        Args:
            schedule: Schedule to evaluate. It is not modified.

        Returns:
            Complete quality report.
        """
        requirements = self.planner.plan(schedule.week_start)
        validation = self.validator.validate(schedule)

        coverage = self.coverage_score(schedule, requirements)
        fairness = self.fairness_score(schedule)
        total_cost = schedule.total_cost
        cost = cost_score_for(total_cost, self.labor_budget)

        w = self.weights
        total = (
            w.coverage * coverage
            + w.fairness * w.fairness_weight * fairness
            + w.cost * w.cost_weight * cost
            - w.violation_penalty * len(validation.errors)
        )

        report = ScheduleReport(
            coverage_score=coverage,
            fairness_score=fairness,
            cost_score=cost,
            total_cost=total_cost,
            total_hours=schedule.total_hours,
            total_score=total,
            warnings=self.planner.find_gaps(schedule, requirements),
            violations=list(validation.errors),
            coverage_by_role=self.coverage_by_role(schedule, requirements),
            notices=list(validation.warnings),
        )
        report.recommendations = self.recommendations(schedule, report)
        return report

    def coverage_score(
        self,
        schedule: Schedule,
        requirements: Optional[list[CoverageRequirement]] = None,
    ) -> float:
        """Percent of required staffing filled; 100 when nothing is required."""
        if requirements is None:
            requirements = self.planner.plan(schedule.week_start)
        return self._coverage_percent(schedule, requirements)

    def fairness_score(self, schedule: Schedule) -> float:
        """Fairness over staff with at least one active shift."""
        return fairness_from_hours(schedule.hours_by_staff().values())

    def coverage_by_role(
        self,
        schedule: Schedule,
        requirements: list[CoverageRequirement],
    ) -> dict[str, float]:
        by_role: dict[str, list[CoverageRequirement]] = {}
        for requirement in requirements:
            by_role.setdefault(requirement.role_id, []).append(requirement)
        return {
            role_id: self._coverage_percent(schedule, role_requirements)
            for role_id, role_requirements in sorted(by_role.items())
        }

    def recommendations(self, schedule: Schedule, report: ScheduleReport) -> list[str]:
        """Advisory suggestions based on the report's scores and gaps."""
        suggestions = []

        if not schedule.active_shifts and report.warnings:
            suggestions.append(
                "No shifts could be generated. Please check staff availability "
                "and business hours."
            )
        if report.coverage_score < COVERAGE_TARGET:
            suggestions.append("Consider hiring more staff or adjusting role requirements")
        if report.fairness_score < FAIRNESS_TARGET:
            suggestions.append("Work distribution is uneven - consider balancing shifts")
        if report.cost_score < COST_TARGET:
            suggestions.append("Schedule exceeds cost targets - consider optimizing shift lengths")

        shortfall_by_role: dict[str, int] = {}
        for warning in report.warnings:
            shortfall_by_role[warning.role_id] = (
                shortfall_by_role.get(warning.role_id, 0) + warning.shortfall
            )
        for role_id, shortfall in sorted(shortfall_by_role.items()):
            role = self.business.get_role(role_id)
            name = role.name if role else role_id
            suggestions.append(
                f"{name} is short {shortfall} staff-day(s) this week - "
                f"consider adding eligible staff or widening availability"
            )

        return suggestions

    def _coverage_percent(
        self,
        schedule: Schedule,
        requirements: list[CoverageRequirement],
    ) -> float:
        required = sum(r.required_count for r in requirements)
        if required == 0:
            return 100.0
        filled = sum(
            min(self.planner.assigned_count(schedule, r), r.required_count)
            for r in requirements
        )
        return 100.0 * filled / required
