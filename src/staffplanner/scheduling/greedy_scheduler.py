"""Greedy assignment engine for weekly schedules.

This module provides the GreedyScheduler class which fills coverage
requirements one at a time, in a fixed order, with the least-scheduled
eligible staff. It makes a single deterministic pass:

1. Plan the week's coverage requirements (priority, count, date order)
2. For each requirement, rank eligible candidates by hours already assigned
3. Build the longest preferred shift that passes every constraint
4. Record a coverage warning for anything left short

Shifts are never retracted once committed; the repair pass is the only
place committed shifts are revisited.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from staffplanner.domain.availability import AvailabilityIndex, clip_windows
from staffplanner.domain.demand import CoverageRequirement, CoverageWarning, PeakHourRule
from staffplanner.domain.models import (
    Business,
    Schedule,
    ScheduleSource,
    ScheduleStatus,
    Shift,
    Staff,
    TimeOffInterval,
    TimeWindow,
    normalize_week_start,
)
from staffplanner.domain.policies import PreferredShiftPolicy, ShiftPolicy
from staffplanner.scheduling.coverage import CoveragePlanner
from staffplanner.validation.constraints import ConstraintChecker

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    """A staff member who could take a requirement, with ranking data.

    Attributes:
        staff: The staff member.
        assigned_minutes: Minutes already assigned this week.
        free_windows: Free time on the date (availability clipped to business
            hours, minus shifts already held).
    """

    staff: Staff
    assigned_minutes: int
    free_windows: list[TimeWindow]

    @property
    def largest_window_minutes(self) -> int:
        return max((w.duration_minutes for w in self.free_windows), default=0)

    @property
    def rank_key(self) -> tuple:
        """Fewest hours first, then longest free window, then staff id."""
        return (self.assigned_minutes, -self.largest_window_minutes, self.staff.id)


class GreedyScheduler:
    """Deterministic greedy scheduler for one business.

    Running totals live in the schedule being built, never on the scheduler,
    so one instance can plan any number of weeks.

    Example:
        >>> scheduler = GreedyScheduler(business, staff, time_off)
        >>> schedule, warnings = scheduler.generate_schedule(date(2024, 1, 15))
    """

    def __init__(
        self,
        business: Business,
        staff: Iterable[Staff],
        time_off: Iterable[TimeOffInterval] = (),
        shift_policy: Optional[ShiftPolicy] = None,
        peak_rules: Iterable[PeakHourRule] = (),
        availability_index: Optional[AvailabilityIndex] = None,
    ):
        """Initialize scheduler.

        Args:
            business: Business being scheduled.
            staff: Staff pool. Order does not affect results.
            time_off: Time off requests; only approved ones are applied.
            shift_policy: Policy for shift lengths.
            peak_rules: Rules that scale role minimums on busy days.
            availability_index: Prebuilt index to share with other components.
        """
        self.business = business
        self.staff = sorted(staff, key=lambda s: s.id)
        self.shift_policy = shift_policy or PreferredShiftPolicy()
        self.availability_index = availability_index or AvailabilityIndex(
            self.staff, time_off
        )
        self.planner = CoveragePlanner(business, peak_rules)

    def generate_schedule(self, week_start: date) -> tuple[Schedule, list[CoverageWarning]]:
        """Generate a complete schedule for one week.

        Args:
            week_start: Any date in the week to plan.

        Returns:
            Tuple of (draft schedule, coverage warnings).
        """
        schedule = Schedule(
            business_id=self.business.id,
            week_start=normalize_week_start(week_start),
            source=ScheduleSource.OPTIMIZER,
            status=ScheduleStatus.DRAFT,
        )
        requirements = self.planner.plan(schedule.week_start)
        warnings = []

        for requirement in requirements:
            shortfall = self.fill_requirement(requirement, schedule)
            if shortfall > 0:
                warning = self.planner.make_warning(
                    requirement, requirement.required_count - shortfall
                )
                warnings.append(warning)
                logger.debug("Coverage shortfall: %s", warning)

        logger.info(
            "Scheduled week of %s for %s: %d shifts, %d requirements, %d warnings",
            schedule.week_start.isoformat(),
            self.business.name,
            len(schedule.shifts),
            len(requirements),
            len(warnings),
        )
        return schedule, warnings

    def fill_requirement(self, requirement: CoverageRequirement, schedule: Schedule) -> int:
        """Assign staff to one requirement, adding shifts to ``schedule``.

        Staff already working the role on that date count toward the
        requirement.

        Args:
            requirement: The (date, role, count) target.
            schedule: Schedule to extend in place.

        Returns:
            Number of staff still missing (0 when fully covered).
        """
        d = requirement.requirement_date
        role = self.business.get_role(requirement.role_id)
        remaining = requirement.required_count - len(
            schedule.staff_for_role_on(d, requirement.role_id)
        )
        logger.debug("Filling %s: %d needed", requirement, max(remaining, 0))
        if remaining <= 0 or role is None:
            return max(remaining, 0)

        checker = ConstraintChecker(self.business, self.availability_index, schedule.week_start)
        for candidate in self.rank_candidates(requirement, schedule):
            if remaining <= 0:
                break
            shift = self._build_shift(candidate, requirement, schedule, checker)
            if shift is None:
                continue
            schedule.add_shift(shift)
            remaining -= 1
            logger.debug("Assigned %r", shift)

        return max(remaining, 0)

    def rank_candidates(
        self,
        requirement: CoverageRequirement,
        schedule: Schedule,
    ) -> list[Candidate]:
        """Build and order the candidate pool for a requirement.

        The pool holds active staff eligible for the role, not already
        working it that date, with a free window of at least the minimum
        shift length.
        """
        d = requirement.requirement_date
        already_working = schedule.staff_for_role_on(d, requirement.role_id)
        minutes_by_staff = schedule.minutes_by_staff()
        min_minutes = self.shift_policy.min_shift_minutes()

        pool = []
        for member in self.staff:
            if not member.is_active or not member.can_do_role(requirement.role_id):
                continue
            if member.id in already_working:
                continue
            free = self.free_windows(member, d, schedule)
            if not any(w.duration_minutes >= min_minutes for w in free):
                continue
            pool.append(
                Candidate(
                    staff=member,
                    assigned_minutes=minutes_by_staff.get(member.id, 0),
                    free_windows=free,
                )
            )

        pool.sort(key=lambda c: c.rank_key)
        return pool

    def free_windows(self, staff: Staff, d: date, schedule: Schedule) -> list[TimeWindow]:
        """Availability on ``d`` inside business hours, minus shifts already held."""
        windows = clip_windows(
            self.availability_index.effective_windows(staff.id, d),
            self.business.hours_on(d),
        )
        for shift in schedule.shifts_for_staff(staff.id):
            if shift.shift_date != d:
                continue
            remaining = []
            for window in windows:
                remaining.extend(window.subtract(shift.window))
            windows = remaining
        return windows

    def _build_shift(
        self,
        candidate: Candidate,
        requirement: CoverageRequirement,
        schedule: Schedule,
        checker: ConstraintChecker,
    ) -> Optional[Shift]:
        """Find the best shift for a candidate that passes every constraint."""
        member = candidate.staff
        role = self.business.get_role(requirement.role_id)
        held = schedule.shifts_for_staff(member.id)
        windows = sorted(
            candidate.free_windows,
            key=lambda w: (-w.duration_minutes, w.start_minutes),
        )

        for free in windows:
            for window in self.shift_policy.candidate_windows(free):
                shift = Shift(
                    staff_id=member.id,
                    role_id=requirement.role_id,
                    shift_date=requirement.requirement_date,
                    window=window,
                    pay_rate=member.pay_rate_for(role),
                )
                result = checker.can_assign(member, shift, held)
                if result.ok:
                    return shift
                logger.debug(
                    "Rejected %s for %r: [%s] %s",
                    member.id,
                    window,
                    result.rule.value,
                    result.message,
                )

        return None
