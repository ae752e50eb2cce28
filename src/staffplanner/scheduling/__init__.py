"""Scheduling engine: coverage planning, greedy assignment, scoring and repair."""

from staffplanner.scheduling.coverage import CoveragePlanner
from staffplanner.scheduling.greedy_scheduler import GreedyScheduler
from staffplanner.scheduling.optimizer import (
    OptimizerConfig,
    PlanningResult,
    ScheduleOptimizer,
    generate_schedule,
    repair_schedule,
)
from staffplanner.scheduling.payroll import PayrollSummary, summarize_payroll
from staffplanner.scheduling.repair import ScheduleRepairer
from staffplanner.scheduling.scorer import QualityScorer, ScheduleReport, ScoringWeights

__all__ = [
    "CoveragePlanner",
    "GreedyScheduler",
    "OptimizerConfig",
    "PayrollSummary",
    "PlanningResult",
    "QualityScorer",
    "ScheduleOptimizer",
    "ScheduleReport",
    "ScheduleRepairer",
    "ScoringWeights",
    "generate_schedule",
    "repair_schedule",
    "summarize_payroll",
]
