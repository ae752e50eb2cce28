"""Policy definitions for shift building rules.

This module contains configurable policies that decide how long the shifts
the optimizer builds should be. Policies are kept separate from the
scheduling engine to allow independent testing and easy modification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from staffplanner.domain.models import TimeWindow, hours_to_minutes


class ShiftPolicy(ABC):
    """Abstract base class for shift length policies."""

    @abstractmethod
    def preferred_lengths_minutes(self) -> list[int]:
        """Preferred shift lengths in minutes, longest first."""
        pass

    @abstractmethod
    def min_shift_minutes(self) -> int:
        """Shortest shift worth scheduling, in minutes."""
        pass

    def candidate_windows(self, window: TimeWindow) -> list[TimeWindow]:
        """Shift windows to try inside a free window, best first.

        Each preferred length that fits is anchored at the start of the
        window. The full window is appended as a fallback when it is at
        least the minimum length and not already listed.

        Args:
            window: Free time (availability clipped to business hours).

        Returns:
            Ordered list of shift windows; empty if nothing acceptable fits.
        """
        candidates = []
        for length in self.preferred_lengths_minutes():
            if 0 < length <= window.duration_minutes:
                candidates.append(
                    TimeWindow(window.start_minutes, window.start_minutes + length)
                )

        if window.duration_minutes >= self.min_shift_minutes() and window not in candidates:
            candidates.append(window)

        return candidates


@dataclass
class PreferredShiftPolicy(ShiftPolicy):
    """Default shift length policy.

    Shift lengths:
    - Preferred: 8, 6 or 4 hours, longest that fits and passes constraints
    - Fallback: the whole free window, if at least 1 hour long
    """

    preferred_hours: tuple[float, ...] = (8.0, 6.0, 4.0)
    min_shift_hours: float = 1.0

    def __post_init__(self) -> None:
        if any(h <= 0 for h in self.preferred_hours):
            raise ValueError(f"Preferred shift lengths must be > 0, got {self.preferred_hours}")
        if self.min_shift_hours <= 0:
            raise ValueError(f"min_shift_hours must be > 0, got {self.min_shift_hours}")

    def preferred_lengths_minutes(self) -> list[int]:
        return sorted({hours_to_minutes(h) for h in self.preferred_hours}, reverse=True)

    def min_shift_minutes(self) -> int:
        return hours_to_minutes(self.min_shift_hours)
