"""Effective availability lookups.

The index combines each staff member's weekly availability with approved
time off to answer "when can this person work on this date?". Lookups are
memoized per (staff, date); an index is meant to live for a single planning
run.
"""

from datetime import date
from typing import Iterable, Optional

from staffplanner.domain.models import Staff, TimeOffInterval, TimeWindow


def subtract_window(windows: Iterable[TimeWindow], removed: TimeWindow) -> list[TimeWindow]:
    """Remove ``removed`` from every window, keeping order."""
    remaining = []
    for window in windows:
        remaining.extend(window.subtract(removed))
    return remaining


def clip_windows(windows: Iterable[TimeWindow], bounds: Optional[TimeWindow]) -> list[TimeWindow]:
    """Intersect every window with ``bounds``; None bounds clip everything away."""
    if bounds is None:
        return []
    clipped = []
    for window in windows:
        part = window.intersect(bounds)
        if part is not None:
            clipped.append(part)
    return clipped


class AvailabilityIndex:
    """Per-date effective availability for a set of staff.

    Only APPROVED time off is applied. Full-day time off removes every
    window on the dates it covers; partial-day time off subtracts its window
    from each covered date, splitting windows where needed.

    Example:
        >>> index = AvailabilityIndex(staff, time_off)
        >>> index.effective_windows("S001", date(2024, 1, 15))
        [TimeWindow(09:00-12:00), TimeWindow(13:00-17:00)]
    """

    def __init__(
        self,
        staff: Iterable[Staff],
        time_off: Iterable[TimeOffInterval] = (),
    ):
        self._staff = {member.id: member for member in staff}
        self._time_off: dict[str, list[TimeOffInterval]] = {}
        for interval in time_off:
            if interval.is_approved:
                self._time_off.setdefault(interval.staff_id, []).append(interval)
        self._cache: dict[tuple[str, date], tuple[TimeWindow, ...]] = {}

    def effective_windows(self, staff_id: str, d: date) -> list[TimeWindow]:
        """Get the ordered, disjoint windows a staff member can work on ``d``.

        Args:
            staff_id: Staff member to look up. Unknown ids have no availability.
            d: Calendar date.

        Returns:
            Possibly empty list of windows.
        """
        key = (staff_id, d)
        if key not in self._cache:
            self._cache[key] = tuple(self._compute(staff_id, d))
        return list(self._cache[key])

    def time_off_on(self, staff_id: str, d: date) -> list[TimeOffInterval]:
        """Approved time off for a staff member touching ``d``."""
        return [t for t in self._time_off.get(staff_id, []) if t.covers(d)]

    def largest_window(self, staff_id: str, d: date) -> Optional[TimeWindow]:
        windows = self.effective_windows(staff_id, d)
        if not windows:
            return None
        return max(windows, key=lambda w: (w.duration_minutes, -w.start_minutes))

    def _compute(self, staff_id: str, d: date) -> list[TimeWindow]:
        member = self._staff.get(staff_id)
        if member is None:
            return []

        windows = list(member.availability.windows_on(d.weekday()))
        for interval in self.time_off_on(staff_id, d):
            if interval.window is None:
                return []
            windows = subtract_window(windows, interval.window)

        return windows
