"""Tests for the greedy assignment engine."""

import pytest
from datetime import date, timedelta

from staffplanner.domain.demand import CoverageRequirement
from staffplanner.domain.models import (
    Availability,
    Business,
    Role,
    Schedule,
    ScheduleSource,
    ScheduleStatus,
    Shift,
    Staff,
    StaffConstraints,
    TimeOffInterval,
    TimeWindow,
)
from staffplanner.scheduling.greedy_scheduler import GreedyScheduler
from staffplanner.validation.constraints import ConstraintChecker

MONDAY = date(2024, 1, 15)
WEEKDAYS = range(5)


def create_business(min_staff=1, max_staff=2, open_days=WEEKDAYS, hours=(9, 17)) -> Business:
    return Business(
        id="B001",
        name="Corner Cafe",
        operating_hours={d: TimeWindow.from_hours(*hours) for d in open_days},
        roles=(
            Role(
                id="barista",
                name="Barista",
                hourly_rate=16.0,
                min_staff_required=min_staff,
                max_staff_allowed=max_staff,
            ),
        ),
    )


def create_test_staff(
    id: str,
    name: str,
    hours=(9, 17),
    days=WEEKDAYS,
    constraints: StaffConstraints = None,
    is_active: bool = True,
) -> Staff:
    """Helper to create test staff."""
    return Staff(
        id=id,
        name=name,
        hourly_rate=15.0,
        role_ids={"barista"},
        availability=Availability.for_days(days, TimeWindow.from_hours(*hours)),
        constraints=constraints or StaffConstraints(),
        is_active=is_active,
    )


@pytest.fixture
def alice():
    return create_test_staff("S001", "Alice", hours=(9, 15))


class TestAliceScenario:
    """One barista available Mon-Fri 09:00-15:00 at a cafe open 09:00-17:00."""

    def test_five_six_hour_shifts(self, alice):
        scheduler = GreedyScheduler(create_business(), [alice])
        schedule, warnings = scheduler.generate_schedule(MONDAY)

        assert warnings == []
        assert len(schedule.shifts) == 5
        assert sorted(s.shift_date for s in schedule.shifts) == [
            MONDAY + timedelta(days=i) for i in range(5)
        ]
        for shift in schedule.shifts:
            assert shift.staff_id == "S001"
            assert shift.window == TimeWindow.from_hours(9, 15)
            assert shift.duration_hours == 6
            assert shift.pay_rate == 16.0
        assert schedule.total_cost == pytest.approx(480.0)

    def test_schedule_metadata(self, alice):
        scheduler = GreedyScheduler(create_business(), [alice])
        schedule, _ = scheduler.generate_schedule(MONDAY + timedelta(days=2))

        assert schedule.week_start == MONDAY
        assert schedule.status == ScheduleStatus.DRAFT
        assert schedule.source == ScheduleSource.OPTIMIZER
        assert schedule.business_id == "B001"


class TestCandidateRanking:
    """Tests for fairness-first candidate ranking."""

    def test_least_scheduled_staff_preferred(self):
        """Staff with 30h already loses to staff with none, despite sorting first by id."""
        business = create_business(open_days=range(7))
        busy = create_test_staff("S001", "Busy", days=range(7))
        fresh = create_test_staff("S002", "Fresh", days=range(7))
        saturday = MONDAY + timedelta(days=5)

        schedule = Schedule(business_id="B001", week_start=MONDAY)
        for i in range(5):
            schedule.add_shift(
                Shift("S001", "barista", MONDAY + timedelta(days=i), TimeWindow.from_hours(9, 15), 16.0)
            )

        scheduler = GreedyScheduler(business, [busy, fresh])
        shortfall = scheduler.fill_requirement(
            CoverageRequirement(saturday, "barista", 1), schedule
        )

        assert shortfall == 0
        assert [s.staff_id for s in schedule.shifts_on(saturday)] == ["S002"]

    def test_larger_window_preferred(self):
        short = create_test_staff("S001", "Short", hours=(9, 13))
        long = create_test_staff("S002", "Long", hours=(9, 17))
        scheduler = GreedyScheduler(create_business(), [short, long])

        ranked = scheduler.rank_candidates(
            CoverageRequirement(MONDAY, "barista", 1), Schedule("B001", MONDAY)
        )

        assert [c.staff.id for c in ranked] == ["S002", "S001"]

    def test_staff_id_tie_break(self):
        first = create_test_staff("S001", "Zed")
        second = create_test_staff("S002", "Amy")
        scheduler = GreedyScheduler(create_business(), [second, first])

        ranked = scheduler.rank_candidates(
            CoverageRequirement(MONDAY, "barista", 1), Schedule("B001", MONDAY)
        )

        assert [c.staff.id for c in ranked] == ["S001", "S002"]

    def test_pool_excludes_ineligible_and_inactive(self):
        inactive = create_test_staff("S001", "Gone", is_active=False)
        cook = Staff(
            id="S002",
            name="Cook",
            role_ids={"cook"},
            availability=Availability.for_days(WEEKDAYS, TimeWindow.from_hours(9, 17)),
        )
        unavailable = create_test_staff("S003", "Weekend", days=[5, 6])
        too_short = create_test_staff("S004", "Brief", hours=(9, 9.5))
        ok = create_test_staff("S005", "Ready")
        scheduler = GreedyScheduler(create_business(), [inactive, cook, unavailable, too_short, ok])

        ranked = scheduler.rank_candidates(
            CoverageRequirement(MONDAY, "barista", 1), Schedule("B001", MONDAY)
        )

        assert [c.staff.id for c in ranked] == ["S005"]


class TestShiftBuilding:
    """Tests for choosing shift windows."""

    def test_longest_preferred_length(self):
        staff = create_test_staff("S001", "Full")
        schedule, _ = GreedyScheduler(create_business(), [staff]).generate_schedule(MONDAY)
        assert {s.window for s in schedule.shifts} == {TimeWindow.from_hours(9, 17)}

    def test_clipped_to_business_hours(self):
        staff = create_test_staff("S001", "Early", hours=(7, 20))
        schedule, _ = GreedyScheduler(create_business(), [staff]).generate_schedule(MONDAY)
        assert {s.window for s in schedule.shifts} == {TimeWindow.from_hours(9, 17)}

    def test_daily_cap_picks_shorter_length(self):
        staff = create_test_staff(
            "S001", "Part", constraints=StaffConstraints(max_hours_per_day=6)
        )
        schedule, _ = GreedyScheduler(create_business(), [staff]).generate_schedule(MONDAY)
        assert {s.window for s in schedule.shifts} == {TimeWindow.from_hours(9, 15)}

    def test_full_window_fallback(self):
        staff = create_test_staff("S001", "Brief", hours=(9, 11.5))
        schedule, _ = GreedyScheduler(create_business(), [staff]).generate_schedule(MONDAY)
        assert {s.window for s in schedule.shifts} == {TimeWindow.from_hours(9, 11.5)}

    def test_staff_rate_without_role_rate(self):
        business = Business(
            id="B001",
            name="Corner Cafe",
            operating_hours={0: TimeWindow.from_hours(9, 17)},
            roles=(Role(id="barista", name="Barista", min_staff_required=1),),
        )
        staff = create_test_staff("S001", "Alice")
        schedule, _ = GreedyScheduler(business, [staff]).generate_schedule(MONDAY)
        assert [s.pay_rate for s in schedule.shifts] == [15.0]

    def test_weekly_cap_limits_days(self):
        staff = create_test_staff(
            "S001",
            "Capped",
            constraints=StaffConstraints(max_hours_per_day=8, max_hours_per_week=16),
        )
        schedule, warnings = GreedyScheduler(create_business(), [staff]).generate_schedule(MONDAY)

        assert schedule.total_hours == 16
        assert len(warnings) == 3
        assert all(w.shortfall == 1 for w in warnings)


class TestShortfalls:
    """Tests for coverage warnings."""

    def test_not_enough_staff(self, alice):
        scheduler = GreedyScheduler(create_business(min_staff=2), [alice])
        schedule, warnings = scheduler.generate_schedule(MONDAY)

        assert len(schedule.shifts) == 5
        assert len(warnings) == 5
        for warning in warnings:
            assert warning.required == 2
            assert warning.assigned == 1
            assert warning.shortfall == 1

    def test_distinct_staff_per_requirement(self):
        staff = [create_test_staff("S001", "Alice"), create_test_staff("S002", "Bob")]
        schedule, warnings = GreedyScheduler(create_business(min_staff=2), staff).generate_schedule(MONDAY)

        assert warnings == []
        for offset in range(5):
            d = MONDAY + timedelta(days=offset)
            assert schedule.staff_for_role_on(d, "barista") == {"S001", "S002"}

    def test_time_off_day_left_short(self, alice):
        wednesday = MONDAY + timedelta(days=2)
        scheduler = GreedyScheduler(
            create_business(), [alice], [TimeOffInterval("S001", wednesday, wednesday)]
        )
        schedule, warnings = scheduler.generate_schedule(MONDAY)

        assert schedule.shifts_on(wednesday) == []
        assert [w.warning_date for w in warnings] == [wednesday]

    def test_zero_staff(self):
        schedule, warnings = GreedyScheduler(create_business(), []).generate_schedule(MONDAY)
        assert schedule.shifts == []
        assert len(warnings) == 5


class TestDeterminism:
    """Identical inputs must produce identical schedules."""

    def test_input_order_irrelevant(self):
        staff = [
            create_test_staff("S001", "Alice", hours=(9, 15)),
            create_test_staff("S002", "Bob", hours=(11, 17)),
            create_test_staff("S003", "Cara"),
        ]
        business = create_business(min_staff=2, max_staff=3)

        first, _ = GreedyScheduler(business, staff).generate_schedule(MONDAY)
        second, _ = GreedyScheduler(business, list(reversed(staff))).generate_schedule(MONDAY)

        assert first.shifts == second.shifts

    def test_output_passes_constraints(self):
        staff = [
            create_test_staff("S001", "Alice", hours=(9, 15), days=range(7)),
            create_test_staff("S002", "Bob", hours=(11, 17), days=range(7)),
            create_test_staff(
                "S003",
                "Cara",
                days=range(7),
                constraints=StaffConstraints(max_consecutive_working_days=3),
            ),
        ]
        business = create_business(min_staff=2, max_staff=3, open_days=range(7))
        scheduler = GreedyScheduler(business, staff)
        schedule, _ = scheduler.generate_schedule(MONDAY)

        checker = ConstraintChecker(business, scheduler.availability_index, MONDAY)
        staff_map = {s.id: s for s in staff}
        for i, shift in enumerate(schedule.shifts):
            others = [s for j, s in enumerate(schedule.shifts) if j != i]
            assert checker.can_assign(staff_map[shift.staff_id], shift, others).ok
