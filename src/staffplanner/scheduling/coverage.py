"""Coverage planning.

Turns a business's role minimums and peak-hour rules into the ordered list of
(date, role, required count) requirements the scheduler works through, and
measures a schedule against them.
"""

import math
from datetime import date, timedelta
from typing import Iterable, Optional

from staffplanner.domain.demand import CoverageRequirement, CoverageWarning, PeakHourRule
from staffplanner.domain.models import (
    DAYS_PER_WEEK,
    Business,
    Role,
    Schedule,
    normalize_week_start,
)


class CoveragePlanner:
    """Builds coverage requirements for a business week.

    Example:
        >>> planner = CoveragePlanner(business, peak_rules)
        >>> for requirement in planner.plan(date(2024, 1, 15)):
        ...     print(requirement)
    """

    def __init__(
        self,
        business: Business,
        peak_rules: Iterable[PeakHourRule] = (),
    ):
        self.business = business
        self.peak_rules = list(peak_rules)

    def plan(self, week_start: date) -> list[CoverageRequirement]:
        """Produce the requirements for the week in processing order.

        One requirement is produced per open day per role with a positive
        minimum. Order is priority (desc), required count (desc), date (asc),
        then role id.

        Args:
            week_start: Any date in the week; normalized to its Monday.

        Returns:
            Ordered list of coverage requirements.
        """
        monday = normalize_week_start(week_start)
        requirements = []

        for offset in range(DAYS_PER_WEEK):
            d = monday + timedelta(days=offset)
            open_window = self.business.hours_on(d)
            if open_window is None:
                continue

            for role in self.business.roles:
                if role.min_staff_required <= 0:
                    continue
                multiplier = self.peak_multiplier(d, role, open_window)
                requirements.append(
                    CoverageRequirement(
                        requirement_date=d,
                        role_id=role.id,
                        required_count=self.required_count(role, multiplier),
                        priority=role.priority,
                        peak_multiplier=multiplier,
                    )
                )

        requirements.sort(key=lambda r: r.sort_key)
        return requirements

    def peak_multiplier(self, d: date, role: Role, open_window=None) -> float:
        """Largest multiplier of the rules that apply, never below 1."""
        if open_window is None:
            open_window = self.business.hours_on(d)
        multiplier = 1.0
        for rule in self.peak_rules:
            if rule.applies_to(d, role.id, open_window):
                multiplier = max(multiplier, rule.multiplier)
        return multiplier

    @staticmethod
    def required_count(role: Role, multiplier: float) -> int:
        """Scale the role minimum, rounding up and capping at the role maximum."""
        # Rounded first so 10 * 1.1 stays 11.
        scaled = math.ceil(round(role.min_staff_required * multiplier, 6))
        return min(scaled, role.max_staff_allowed)

    def assigned_count(self, schedule: Schedule, requirement: CoverageRequirement) -> int:
        """Distinct staff working the requirement's role on its date."""
        return len(schedule.staff_for_role_on(requirement.requirement_date, requirement.role_id))

    def find_gaps(
        self,
        schedule: Schedule,
        requirements: Optional[list[CoverageRequirement]] = None,
    ) -> list[CoverageWarning]:
        """List every requirement the schedule leaves short.

        Args:
            schedule: Schedule to measure.
            requirements: Requirements to check. Defaults to planning the
                schedule's own week.

        Returns:
            One warning per short requirement, in requirement order.
        """
        if requirements is None:
            requirements = self.plan(schedule.week_start)

        gaps = []
        for requirement in requirements:
            assigned = self.assigned_count(schedule, requirement)
            if assigned < requirement.required_count:
                gaps.append(self.make_warning(requirement, assigned))
        return gaps

    def make_warning(self, requirement: CoverageRequirement, assigned: int) -> CoverageWarning:
        role = self.business.get_role(requirement.role_id)
        return CoverageWarning(
            warning_date=requirement.requirement_date,
            role_id=requirement.role_id,
            required=requirement.required_count,
            assigned=assigned,
            role_name=role.name if role else "",
        )
