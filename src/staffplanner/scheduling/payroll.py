"""Payroll summaries for a scheduled week.

Hours beyond the overtime threshold are paid at the shift's rate times the
overtime multiplier. Shifts are consumed in chronological order, so the
shifts that push a staff member past the threshold are the ones paid at the
overtime rate. Taxes and deductions are not computed.
"""

from dataclasses import dataclass
from typing import Iterable

from staffplanner.domain.models import Schedule, Staff, hours_to_minutes


@dataclass
class PayrollSummary:
    """Pay for one staff member over a schedule.

    Attributes:
        staff_id: Staff member.
        staff_name: Display name (the id if the staff member is unknown).
        shift_count: Number of active shifts.
        total_hours: All scheduled hours.
        regular_hours: Hours up to the overtime threshold.
        overtime_hours: Hours beyond the threshold.
        base_pay: Pay for all hours at their shift rates.
        overtime_premium: Extra pay for overtime hours.
    """

    staff_id: str
    staff_name: str
    shift_count: int = 0
    total_hours: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    base_pay: float = 0.0
    overtime_premium: float = 0.0

    @property
    def gross_pay(self) -> float:
        return self.base_pay + self.overtime_premium


def summarize_payroll(
    schedule: Schedule,
    staff: Iterable[Staff],
    overtime_threshold_hours: float = 40.0,
    overtime_multiplier: float = 1.5,
) -> list[PayrollSummary]:
    """Summarize pay per staff member with at least one active shift.

    Args:
        schedule: Schedule to summarize.
        staff: Staff used to resolve names.
        overtime_threshold_hours: Weekly hours paid at the regular rate.
        overtime_multiplier: Rate multiplier for hours past the threshold.

    Returns:
        Summaries sorted by staff id.
    """
    if overtime_threshold_hours < 0:
        raise ValueError(
            f"overtime_threshold_hours must be >= 0, got {overtime_threshold_hours}"
        )
    if overtime_multiplier < 1:
        raise ValueError(f"overtime_multiplier must be >= 1, got {overtime_multiplier}")

    names = {member.id: member.name for member in staff}
    threshold = hours_to_minutes(overtime_threshold_hours)

    summaries = []
    for staff_id in sorted({s.staff_id for s in schedule.active_shifts}):
        shifts = sorted(
            schedule.shifts_for_staff(staff_id),
            key=lambda s: (s.shift_date, s.start_minutes),
        )
        summary = PayrollSummary(staff_id=staff_id, staff_name=names.get(staff_id, staff_id))
        worked = 0
        regular_minutes = 0
        overtime_minutes = 0

        for shift in shifts:
            regular_part = max(0, min(shift.duration_minutes, threshold - worked))
            overtime_part = shift.duration_minutes - regular_part
            worked += shift.duration_minutes
            regular_minutes += regular_part
            overtime_minutes += overtime_part

            summary.shift_count += 1
            summary.base_pay += shift.cost
            summary.overtime_premium += (
                overtime_part / 60.0 * shift.pay_rate * (overtime_multiplier - 1)
            )

        summary.total_hours = worked / 60.0
        summary.regular_hours = regular_minutes / 60.0
        summary.overtime_hours = overtime_minutes / 60.0
        summaries.append(summary)

    return summaries
