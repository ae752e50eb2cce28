"""Tests for coverage planning and peak-hour scaling."""

import pytest
from datetime import date, timedelta

from staffplanner.domain.demand import CoverageRequirement, PeakHourRule
from staffplanner.domain.models import (
    Business,
    Role,
    Schedule,
    Shift,
    TimeWindow,
)
from staffplanner.scheduling.coverage import CoveragePlanner

MONDAY = date(2024, 1, 15)
SATURDAY = MONDAY + timedelta(days=5)


def create_business(roles, open_days=range(7), hours=(9, 17)) -> Business:
    return Business(
        id="B001",
        name="Corner Cafe",
        operating_hours={d: TimeWindow.from_hours(*hours) for d in open_days},
        roles=tuple(roles),
    )


@pytest.fixture
def barista():
    return Role(id="barista", name="Barista", min_staff_required=2, max_staff_allowed=4)


class TestPlan:
    """Tests for requirement generation and ordering."""

    def test_one_requirement_per_open_day_and_role(self, barista):
        cook = Role(id="cook", name="Cook", min_staff_required=1, max_staff_allowed=1)
        business = create_business([barista, cook], open_days=range(5))
        requirements = CoveragePlanner(business).plan(MONDAY)

        assert len(requirements) == 10
        assert {r.requirement_date.weekday() for r in requirements} == set(range(5))

    def test_zero_minimum_roles_skipped(self, barista):
        optional = Role(id="host", name="Host", min_staff_required=0, max_staff_allowed=1)
        business = create_business([barista, optional])
        requirements = CoveragePlanner(business).plan(MONDAY)
        assert {r.role_id for r in requirements} == {"barista"}

    def test_closed_all_week(self, barista):
        business = create_business([barista], open_days=[])
        assert CoveragePlanner(business).plan(MONDAY) == []

    def test_week_start_normalized(self, barista):
        business = create_business([barista])
        requirements = CoveragePlanner(business).plan(MONDAY + timedelta(days=3))
        assert min(r.requirement_date for r in requirements) == MONDAY

    def test_ordering(self):
        """Priority desc, then required count desc, then date asc."""
        manager = Role(id="manager", name="Manager", min_staff_required=1, max_staff_allowed=1, priority=3)
        barista = Role(id="barista", name="Barista", min_staff_required=2, max_staff_allowed=2)
        cashier = Role(id="cashier", name="Cashier", min_staff_required=1, max_staff_allowed=1)
        business = create_business([cashier, barista, manager], open_days=[0, 1])

        requirements = CoveragePlanner(business).plan(MONDAY)
        order = [(r.role_id, r.requirement_date.weekday()) for r in requirements]

        assert order == [
            ("manager", 0),
            ("manager", 1),
            ("barista", 0),
            ("barista", 1),
            ("cashier", 0),
            ("cashier", 1),
        ]

    def test_sort_key_role_id_tie_break(self):
        a = CoverageRequirement(MONDAY, "a", 1)
        b = CoverageRequirement(MONDAY, "b", 1)
        assert sorted([b, a], key=lambda r: r.sort_key) == [a, b]


class TestPeakScaling:
    """Tests for peak-hour multipliers."""

    def test_multiplier_rounds_up(self, barista):
        business = create_business([barista])
        rule = PeakHourRule(weekday=5, window=TimeWindow.from_hours(11, 14), multiplier=1.5)
        requirements = CoveragePlanner(business, [rule]).plan(MONDAY)

        by_day = {r.requirement_date: r for r in requirements}
        assert by_day[SATURDAY].required_count == 3
        assert by_day[SATURDAY].peak_multiplier == 1.5
        assert by_day[MONDAY].required_count == 2

    def test_capped_at_max(self, barista):
        business = create_business([barista])
        rule = PeakHourRule(weekday=5, window=TimeWindow.from_hours(11, 14), multiplier=3.0)
        requirements = CoveragePlanner(business, [rule]).plan(MONDAY)
        by_day = {r.requirement_date: r for r in requirements}
        assert by_day[SATURDAY].required_count == 4

    def test_largest_multiplier_wins(self, barista):
        business = create_business([barista])
        rules = [
            PeakHourRule(weekday=5, window=TimeWindow.from_hours(11, 14), multiplier=1.2),
            PeakHourRule(weekday=5, window=TimeWindow.from_hours(16, 18), multiplier=1.5),
        ]
        planner = CoveragePlanner(business, rules)
        assert planner.peak_multiplier(SATURDAY, barista) == 1.5

    def test_multiplier_below_one_ignored(self, barista):
        business = create_business([barista])
        rule = PeakHourRule(weekday=5, window=TimeWindow.from_hours(11, 14), multiplier=0.5)
        requirements = CoveragePlanner(business, [rule]).plan(MONDAY)
        by_day = {r.requirement_date: r for r in requirements}
        assert by_day[SATURDAY].required_count == 2

    def test_rule_outside_open_hours(self, barista):
        business = create_business([barista])
        rule = PeakHourRule(weekday=5, window=TimeWindow.from_hours(18, 20), multiplier=2.0)
        assert CoveragePlanner(business, [rule]).peak_multiplier(SATURDAY, barista) == 1.0

    def test_rule_limited_to_roles(self, barista):
        cook = Role(id="cook", name="Cook", min_staff_required=1, max_staff_allowed=3)
        business = create_business([barista, cook])
        rule = PeakHourRule(
            weekday=5,
            window=TimeWindow.from_hours(11, 14),
            multiplier=2.0,
            role_ids={"cook"},
        )
        planner = CoveragePlanner(business, [rule])
        assert planner.peak_multiplier(SATURDAY, cook) == 2.0
        assert planner.peak_multiplier(SATURDAY, barista) == 1.0

    def test_no_float_overshoot(self):
        role = Role(id="r", name="R", min_staff_required=10, max_staff_allowed=20)
        assert CoveragePlanner.required_count(role, 1.1) == 11

    def test_invalid_rules(self):
        with pytest.raises(ValueError):
            PeakHourRule(weekday=5, window=TimeWindow.from_hours(11, 14), multiplier=0)
        with pytest.raises(ValueError):
            PeakHourRule(weekday=9, window=TimeWindow.from_hours(11, 14), multiplier=2)


class TestGaps:
    """Tests for measuring a schedule against requirements."""

    def test_find_gaps_counts_distinct_staff(self, barista):
        business = create_business([barista], open_days=[0])
        planner = CoveragePlanner(business)
        window = TimeWindow.from_hours(9, 13)
        schedule = Schedule(
            business_id="B001",
            week_start=MONDAY,
            shifts=[
                Shift("S001", "barista", MONDAY, window, 15.0),
                Shift("S001", "barista", MONDAY, TimeWindow.from_hours(14, 17), 15.0),
            ],
        )

        gaps = planner.find_gaps(schedule)

        assert len(gaps) == 1
        assert gaps[0].required == 2
        assert gaps[0].assigned == 1
        assert gaps[0].shortfall == 1
        assert gaps[0].role_name == "Barista"
        assert "Barista" in str(gaps[0])

    def test_no_gaps_when_covered(self, barista):
        business = create_business([barista], open_days=[0])
        window = TimeWindow.from_hours(9, 13)
        schedule = Schedule(
            business_id="B001",
            week_start=MONDAY,
            shifts=[
                Shift("S001", "barista", MONDAY, window, 15.0),
                Shift("S002", "barista", MONDAY, window, 15.0),
            ],
        )
        assert CoveragePlanner(business).find_gaps(schedule) == []
