"""Plain-text schedule reports.

This module creates human-readable text output showing:
- The weekly roster, day by day
- Hours per staff member
- Quality scores, coverage warnings, violations and recommendations
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from staffplanner.domain.models import WEEKDAY_NAMES, Business, Schedule, Staff, format_minutes
from staffplanner.scheduling.scorer import ScheduleReport


class TextReportGenerator:
    """Generates text reports for a weekly schedule.

    Example:
        >>> generator = TextReportGenerator()
        >>> print(generator.generate_to_string(schedule, report, business, staff))
    """

    def __init__(self, width: int = 80):
        self.width = width

    def generate(
        self,
        schedule: Schedule,
        report: ScheduleReport,
        business: Business,
        staff: Iterable[Staff],
        output_path: Union[str, Path],
    ) -> str:
        """Generate the report and save it to a file.

        Args:
            schedule: The schedule to render.
            report: Quality report for the schedule.
            business: Business the schedule belongs to.
            staff: Staff used to resolve names.
            output_path: Path to save the text file.

        Returns:
            The generated text content.
        """
        content = self._generate_content(schedule, report, business, staff)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        schedule: Schedule,
        report: ScheduleReport,
        business: Business,
        staff: Iterable[Staff],
    ) -> str:
        """Generate the report and return it as a string."""
        return self._generate_content(schedule, report, business, staff)

    def _generate_content(
        self,
        schedule: Schedule,
        report: ScheduleReport,
        business: Business,
        staff: Iterable[Staff],
    ) -> str:
        names = {member.id: member.name for member in staff}
        roles = business.role_map
        lines = []

        # Header
        lines.append("=" * self.width)
        lines.append(
            f"WEEKLY SCHEDULE - {business.name} - week of "
            f"{schedule.week_start.strftime('%B %d, %Y')}"
        )
        lines.append("=" * self.width)
        lines.append(f"Status: {schedule.status.value}   Source: {schedule.source.value}")
        lines.append(f"Shifts: {len(schedule.active_shifts)}   Hours: {report.total_hours:.1f}")
        lines.append("")

        # Roster
        for d in schedule.week_dates:
            day_shifts = sorted(
                schedule.shifts_on(d),
                key=lambda s: (s.start_minutes, names.get(s.staff_id, s.staff_id), s.role_id),
            )
            open_window = business.hours_on(d)
            hours = (
                f"{format_minutes(open_window.start_minutes)}-{format_minutes(open_window.end_minutes)}"
                if open_window
                else "closed"
            )
            lines.append("-" * self.width)
            lines.append(f"{WEEKDAY_NAMES[d.weekday()]} {d.isoformat()} ({hours})")
            lines.append("-" * self.width)

            if not day_shifts:
                lines.append("  (no shifts)")
                continue

            for shift in day_shifts:
                role = roles.get(shift.role_id)
                lines.append(
                    f"  {format_minutes(shift.start_minutes)}-{format_minutes(shift.end_minutes)}  "
                    f"{names.get(shift.staff_id, shift.staff_id)[:20]:<20} "
                    f"{(role.name if role else shift.role_id)[:16]:<16} "
                    f"{shift.duration_hours:>5.1f}h  ${shift.cost:>8.2f}"
                )
        lines.append("")

        # Hours per staff
        lines.append("-" * self.width)
        lines.append("HOURS BY STAFF")
        lines.append("-" * self.width)
        hours_by_staff = schedule.hours_by_staff()
        for staff_id in sorted(hours_by_staff, key=lambda sid: (-hours_by_staff[sid], sid)):
            lines.append(f"  {names.get(staff_id, staff_id)[:30]:<30} {hours_by_staff[staff_id]:>6.1f}h")
        if not hours_by_staff:
            lines.append("  (none)")
        lines.append("")

        lines.extend(self._report_section(report, roles))

        return "\n".join(lines) + "\n"

    def _report_section(self, report: ScheduleReport, roles: dict) -> list[str]:
        lines = []
        lines.append("=" * self.width)
        lines.append("QUALITY REPORT")
        lines.append("=" * self.width)
        lines.append(f"  Coverage score:  {report.coverage_score:6.1f}")
        lines.append(f"  Fairness score:  {report.fairness_score:6.1f}")
        lines.append(f"  Cost score:      {report.cost_score:6.1f}")
        lines.append(f"  Total cost:      ${report.total_cost:,.2f}")
        lines.append(f"  Total score:     {report.total_score:6.2f}")
        lines.append("")

        if report.coverage_by_role:
            lines.append("Coverage by role:")
            for role_id, percent in report.coverage_by_role.items():
                role = roles.get(role_id)
                lines.append(f"  {(role.name if role else role_id):<20} {percent:6.1f}%")
            lines.append("")

        lines.extend(self._list_block("Warnings", [str(w) for w in report.warnings]))
        lines.extend(self._list_block("Violations", [str(v) for v in report.violations]))
        lines.extend(self._list_block("Notices", report.notices))
        lines.extend(self._list_block("Recommendations", report.recommendations))
        return lines

    @staticmethod
    def _list_block(title: str, items: list[str], empty: Optional[str] = "none") -> list[str]:
        lines = [f"{title} ({len(items)}):"]
        if items:
            lines.extend(f"  - {item}" for item in items)
        elif empty:
            lines.append(f"  {empty}")
        lines.append("")
        return lines
