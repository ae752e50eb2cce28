"""Repair pass for existing schedules.

Improves a schedule without discarding any of its shifts:
- Gap fill: runs the greedy assignment for each requirement left short
- Rebalance: moves single shifts from the most-scheduled staff member to the
  least-scheduled one while that strictly improves fairness and keeps
  coverage
"""

import logging
from dataclasses import replace
from typing import Optional

from staffplanner.domain.models import Schedule, Shift, ShiftStatus
from staffplanner.scheduling.greedy_scheduler import GreedyScheduler
from staffplanner.scheduling.scorer import QualityScorer
from staffplanner.validation.constraints import ConstraintChecker

logger = logging.getLogger(__name__)


class ScheduleRepairer:
    """Bounded local improvement of a schedule.

    Every added or moved shift passes the ConstraintChecker before it is
    committed. Shifts already in the schedule are kept even if they violate
    a constraint; the scorer reports them.

    Example:
        >>> repairer = ScheduleRepairer(scheduler, scorer)
        >>> improved = repairer.repair(edited_schedule)
    """

    def __init__(
        self,
        scheduler: GreedyScheduler,
        scorer: QualityScorer,
        max_rebalance_iterations: int = 25,
    ):
        if max_rebalance_iterations < 0:
            raise ValueError(
                f"max_rebalance_iterations must be >= 0, got {max_rebalance_iterations}"
            )
        self.scheduler = scheduler
        self.scorer = scorer
        self.max_rebalance_iterations = max_rebalance_iterations
        self.staff_map = {member.id: member for member in scheduler.staff}

    def repair(self, schedule: Schedule) -> Schedule:
        """Fill coverage gaps, then rebalance hours.

        Args:
            schedule: Schedule to improve. It is not modified.

        Returns:
            A new schedule with the same source, status and week.
        """
        repaired = schedule.copy()
        self.fill_gaps(repaired)
        self.rebalance(repaired)
        return repaired

    def fill_gaps(self, schedule: Schedule) -> int:
        """Run the greedy assignment for every short requirement, in place.

        Returns:
            Number of shifts added.
        """
        added = 0
        for requirement in self.scheduler.planner.plan(schedule.week_start):
            before = len(schedule.shifts)
            self.scheduler.fill_requirement(requirement, schedule)
            new_shifts = len(schedule.shifts) - before
            if new_shifts:
                logger.info("Gap fill added %d shift(s) for %s", new_shifts, requirement)
                added += new_shifts
        return added

    def rebalance(self, schedule: Schedule) -> int:
        """Move shifts from the most- to the least-scheduled staff, in place.

        Stops when no move strictly improves fairness or the iteration cap
        is reached.

        Returns:
            Number of shifts moved.
        """
        moves = 0
        for _ in range(self.max_rebalance_iterations):
            move = self._find_improving_move(schedule)
            if move is None:
                break
            old, new = move
            schedule.replace_shift(old, new)
            moves += 1
            logger.info("Rebalanced %r to %s", old, new.staff_id)
        return moves

    def _find_improving_move(self, schedule: Schedule) -> Optional[tuple[Shift, Shift]]:
        minutes = {
            staff_id: total
            for staff_id, total in schedule.minutes_by_staff().items()
            if staff_id in self.staff_map
        }
        if len(minutes) < 2:
            return None

        ranked = sorted(minutes.items(), key=lambda item: (item[1], item[0]))
        under_id, under_minutes = ranked[0]
        over_id, over_minutes = ranked[-1]
        if over_minutes <= under_minutes:
            return None

        under = self.staff_map[under_id]
        requirements = self.scheduler.planner.plan(schedule.week_start)
        base_coverage = self.scorer.coverage_score(schedule, requirements)
        base_fairness = self.scorer.fairness_score(schedule)
        checker = ConstraintChecker(
            self.scheduler.business,
            self.scheduler.availability_index,
            schedule.week_start,
        )

        over_shifts = sorted(
            schedule.shifts_for_staff(over_id),
            key=lambda s: (s.shift_date, s.start_minutes, s.role_id),
        )
        for shift in over_shifts:
            role = self.scheduler.business.get_role(shift.role_id)
            moved = replace(
                shift,
                staff_id=under.id,
                pay_rate=under.pay_rate_for(role),
                status=ShiftStatus.SCHEDULED,
            )
            if not checker.can_assign(under, moved, schedule.shifts_for_staff(under.id)).ok:
                continue

            trial = schedule.copy()
            trial.replace_shift(shift, moved)
            if self.scorer.fairness_score(trial) <= base_fairness:
                continue
            if self.scorer.coverage_score(trial, requirements) < base_coverage:
                continue
            return shift, moved

        return None
