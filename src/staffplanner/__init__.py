"""Constraint-based weekly shift scheduling for small businesses."""

from staffplanner.scheduling.optimizer import (
    OptimizerConfig,
    PlanningResult,
    generate_schedule,
    repair_schedule,
)

__version__ = "0.1.0"

__all__ = [
    "OptimizerConfig",
    "PlanningResult",
    "generate_schedule",
    "repair_schedule",
]
