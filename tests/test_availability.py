"""Tests for the availability index and time off handling."""

import pytest
from datetime import date, timedelta

from staffplanner.domain.availability import AvailabilityIndex, clip_windows
from staffplanner.domain.models import (
    Availability,
    Staff,
    TimeOffInterval,
    TimeOffStatus,
    TimeWindow,
)


@pytest.fixture
def monday():
    return date(2024, 1, 15)


@pytest.fixture
def alice():
    """Available every weekday 09:00-17:00."""
    return Staff(
        id="S001",
        name="Alice",
        role_ids={"barista"},
        availability=Availability.for_days(range(5), TimeWindow.from_hours(9, 17)),
    )


class TestEffectiveWindows:
    """Tests for AvailabilityIndex.effective_windows."""

    def test_raw_availability(self, alice, monday):
        index = AvailabilityIndex([alice])
        assert index.effective_windows("S001", monday) == [TimeWindow.from_hours(9, 17)]

    def test_unavailable_weekday(self, alice, monday):
        index = AvailabilityIndex([alice])
        saturday = monday + timedelta(days=5)
        assert index.effective_windows("S001", saturday) == []

    def test_unknown_staff(self, alice, monday):
        index = AvailabilityIndex([alice])
        assert index.effective_windows("nobody", monday) == []

    def test_full_day_time_off(self, alice, monday):
        index = AvailabilityIndex([alice], [TimeOffInterval("S001", monday, monday)])
        assert index.effective_windows("S001", monday) == []
        assert index.effective_windows("S001", monday + timedelta(days=1)) == [
            TimeWindow.from_hours(9, 17)
        ]

    def test_time_off_range_inclusive(self, alice, monday):
        wednesday = monday + timedelta(days=2)
        index = AvailabilityIndex([alice], [TimeOffInterval("S001", monday, wednesday)])
        assert index.effective_windows("S001", monday) == []
        assert index.effective_windows("S001", wednesday) == []
        assert index.effective_windows("S001", wednesday + timedelta(days=1)) != []

    def test_partial_day_splits_window(self, alice, monday):
        time_off = TimeOffInterval(
            "S001", monday, monday, window=TimeWindow.from_hours(12, 13)
        )
        index = AvailabilityIndex([alice], [time_off])
        assert index.effective_windows("S001", monday) == [
            TimeWindow.from_hours(9, 12),
            TimeWindow.from_hours(13, 17),
        ]

    def test_partial_day_trims_edge(self, alice, monday):
        time_off = TimeOffInterval(
            "S001", monday, monday, window=TimeWindow.from_hours(15, 18)
        )
        index = AvailabilityIndex([alice], [time_off])
        assert index.effective_windows("S001", monday) == [TimeWindow.from_hours(9, 15)]

    def test_partial_day_applies_each_date(self, alice, monday):
        time_off = TimeOffInterval(
            "S001",
            monday,
            monday + timedelta(days=1),
            window=TimeWindow.from_hours(9, 11),
        )
        index = AvailabilityIndex([alice], [time_off])
        for offset in range(2):
            assert index.effective_windows("S001", monday + timedelta(days=offset)) == [
                TimeWindow.from_hours(11, 17)
            ]

    @pytest.mark.parametrize("status", [TimeOffStatus.PENDING, TimeOffStatus.REJECTED])
    def test_unapproved_time_off_ignored(self, alice, monday, status):
        index = AvailabilityIndex(
            [alice], [TimeOffInterval("S001", monday, monday, status=status)]
        )
        assert index.effective_windows("S001", monday) == [TimeWindow.from_hours(9, 17)]

    def test_repeated_lookups_agree(self, alice, monday):
        index = AvailabilityIndex([alice])
        first = index.effective_windows("S001", monday)
        first.clear()
        assert index.effective_windows("S001", monday) == [TimeWindow.from_hours(9, 17)]

    def test_largest_window(self, monday):
        staff = Staff(
            id="S002",
            name="Bob",
            availability=Availability(
                {0: (TimeWindow.from_hours(6, 8), TimeWindow.from_hours(12, 18))}
            ),
        )
        index = AvailabilityIndex([staff])
        assert index.largest_window("S002", monday) == TimeWindow.from_hours(12, 18)
        assert index.largest_window("S002", monday + timedelta(days=1)) is None


class TestClipWindows:
    """Tests for clipping availability to business hours."""

    def test_clip(self):
        windows = [TimeWindow.from_hours(7, 10), TimeWindow.from_hours(16, 20)]
        assert clip_windows(windows, TimeWindow.from_hours(9, 17)) == [
            TimeWindow.from_hours(9, 10),
            TimeWindow.from_hours(16, 17),
        ]

    def test_closed_clips_everything(self):
        assert clip_windows([TimeWindow.from_hours(9, 17)], None) == []
