"""PDF generation for schedule output.

This module creates printable PDF schedules showing:
- A weekly roster grid with one row per staff member and one column per day
- A summary page with scores, role coverage, warnings and payroll
"""

from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional, Union

from staffplanner.domain.models import (
    WEEKDAY_NAMES,
    Business,
    Schedule,
    Shift,
    Staff,
    format_minutes,
)
from staffplanner.scheduling.payroll import summarize_payroll
from staffplanner.scheduling.scorer import ScheduleReport

# Role colors are assigned in business role order (RGB tuples, 0-1 scale)
ROLE_PALETTE = [
    (0.4, 0.7, 0.4),  # Green
    (0.4, 0.4, 0.8),  # Blue
    (0.8, 0.6, 0.2),  # Orange
    (0.7, 0.4, 0.7),  # Purple
    (0.3, 0.7, 0.7),  # Teal
    (0.6, 0.6, 0.6),  # Gray
]
CLOSED_COLOR = (0.9, 0.9, 0.9)
GRID_COLOR = (0.7, 0.7, 0.7)


def _require_reportlab():
    try:
        from reportlab.lib.pagesizes import landscape, letter
        from reportlab.pdfgen import canvas
    except ImportError:
        raise ImportError(
            "reportlab is required for PDF generation. "
            "Install with: pip install reportlab"
        )
    return canvas, landscape(letter)


class PDFGenerator:
    """Generates printable weekly roster PDFs.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(schedule, report, business, staff, "roster.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        schedule: Schedule,
        report: ScheduleReport,
        business: Business,
        staff: Iterable[Staff],
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate the roster PDF and save it to a file.

        Args:
            schedule: The schedule to render.
            report: Quality report for the schedule.
            business: Business the schedule belongs to.
            staff: Staff used to resolve names and payroll.
            output_path: Path to save the PDF.
            include_summary: Whether to include the summary page.
        """
        canvas, pagesize = _require_reportlab()

        c = canvas.Canvas(str(output_path), pagesize=pagesize)
        self._draw(c, schedule, report, business, list(staff), include_summary)
        c.save()

    def generate_to_buffer(
        self,
        schedule: Schedule,
        report: ScheduleReport,
        business: Business,
        staff: Iterable[Staff],
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate the roster PDF and return it as a bytes buffer."""
        canvas, pagesize = _require_reportlab()

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=pagesize)
        self._draw(c, schedule, report, business, list(staff), include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(
        self,
        c,
        schedule: Schedule,
        report: ScheduleReport,
        business: Business,
        staff: list[Staff],
        include_summary: bool,
    ) -> None:
        colors = {
            role.id: ROLE_PALETTE[i % len(ROLE_PALETTE)]
            for i, role in enumerate(business.roles)
        }
        self._draw_roster_pages(c, schedule, business, staff, colors)
        if include_summary:
            self._draw_summary_page(c, schedule, report, business, staff)

    def _roster_rows(self, schedule: Schedule, staff: list[Staff]) -> list[tuple[str, str]]:
        """(staff id, display name) for everyone with shifts, sorted by name."""
        names = {member.id: member.name for member in staff}
        scheduled = {s.staff_id for s in schedule.active_shifts}
        return sorted(
            ((sid, names.get(sid, sid)) for sid in scheduled),
            key=lambda row: (row[1], row[0]),
        )

    def _draw_roster_pages(
        self,
        c,
        schedule: Schedule,
        business: Business,
        staff: list[Staff],
        colors: dict[str, tuple],
    ) -> None:
        """Draw the roster grid, paginating by staff row."""
        rows = self._roster_rows(schedule, staff)

        row_height = 36
        header_height = 80
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        name_width = 120
        grid_left = self.margin + name_width
        column_width = (self.page_width - self.margin - grid_left) / len(schedule.week_dates)

        total_pages = max(1, (len(rows) + rows_per_page - 1) // rows_per_page)
        for page_index in range(total_pages):
            page_rows = rows[page_index * rows_per_page : (page_index + 1) * rows_per_page]

            self._draw_header(c, schedule, business)

            # Day headers
            y = self.page_height - self.margin - header_height + 10
            c.setFont("Helvetica-Bold", 9)
            c.setFillColorRGB(0, 0, 0)
            for i, d in enumerate(schedule.week_dates):
                x = grid_left + i * column_width
                c.drawCentredString(
                    x + column_width / 2,
                    y,
                    f"{WEEKDAY_NAMES[d.weekday()][:3]} {d.strftime('%m/%d')}",
                )

            if not page_rows:
                c.setFont("Helvetica-Oblique", 10)
                c.drawString(self.margin, y - 30, "No shifts scheduled.")

            for row_index, (staff_id, name) in enumerate(page_rows):
                top = y - 8 - row_index * row_height
                self._draw_staff_row(
                    c,
                    schedule,
                    business,
                    staff_id,
                    name,
                    colors,
                    grid_left,
                    column_width,
                    top,
                    row_height,
                )

            self._draw_legend(c, business, colors, self.margin, self.margin + 10)

            c.setFont("Helvetica", 9)
            c.setFillColorRGB(0, 0, 0)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page_index + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_header(self, c, schedule: Schedule, business: Business) -> None:
        """Draw page header with business, week and status."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"{business.name} - Week of {schedule.week_start.strftime('%B %d, %Y')}",
        )

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Status: {schedule.status.value}   Shifts: {len(schedule.active_shifts)}   "
            f"Hours: {schedule.total_hours:.1f}",
        )

    def _draw_staff_row(
        self,
        c,
        schedule: Schedule,
        business: Business,
        staff_id: str,
        name: str,
        colors: dict[str, tuple],
        grid_left: float,
        column_width: float,
        top: float,
        row_height: float,
    ) -> None:
        """Draw one staff member's week."""
        bottom = top - row_height
        shifts = schedule.shifts_for_staff(staff_id)
        hours = sum(s.duration_hours for s in shifts)

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 9)
        c.drawString(self.margin, bottom + row_height / 2, name[:20])
        c.setFont("Helvetica", 7)
        c.drawString(self.margin, bottom + row_height / 2 - 10, f"{hours:.1f}h")

        for i, d in enumerate(schedule.week_dates):
            x = grid_left + i * column_width
            if not business.is_open_on(d):
                c.setFillColorRGB(*CLOSED_COLOR)
                c.rect(x, bottom, column_width, row_height, fill=1, stroke=0)

            c.setStrokeColorRGB(*GRID_COLOR)
            c.setLineWidth(0.5)
            c.rect(x, bottom, column_width, row_height, fill=0, stroke=1)

            day_shifts = sorted(
                (s for s in shifts if s.shift_date == d),
                key=lambda s: s.start_minutes,
            )
            for j, shift in enumerate(day_shifts[:2]):
                self._draw_shift_cell(
                    c,
                    shift,
                    colors,
                    x + 2,
                    top - 2 - (j + 1) * (row_height - 4) / 2,
                    column_width - 4,
                    (row_height - 4) / 2 - 1,
                )

    def _draw_shift_cell(
        self,
        c,
        shift: Shift,
        colors: dict[str, tuple],
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        c.setFillColorRGB(*colors.get(shift.role_id, (0.5, 0.5, 0.5)))
        c.rect(x, y, width, height, fill=1, stroke=0)
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 7)
        c.drawCentredString(
            x + width / 2,
            y + height / 2 - 2,
            f"{format_minutes(shift.start_minutes)}-{format_minutes(shift.end_minutes)}",
        )

    def _draw_legend(
        self,
        c,
        business: Business,
        colors: dict[str, tuple],
        x: float,
        y: float,
    ) -> None:
        """Draw legend for role colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for role in business.roles:
            c.setFillColorRGB(*colors[role.id])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, role.name[:14])
            current_x += 80

        c.setFillColorRGB(*CLOSED_COLOR)
        c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
        c.setFillColorRGB(0, 0, 0)
        c.drawString(current_x + 15, y, "Closed")

    def _draw_summary_page(
        self,
        c,
        schedule: Schedule,
        report: ScheduleReport,
        business: Business,
        staff: list[Staff],
    ) -> None:
        """Draw summary page with scores, coverage, warnings and payroll."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Schedule Summary - Week of {schedule.week_start.strftime('%B %d, %Y')}",
        )

        y = self.page_height - self.margin - 60
        left = self.margin
        right = self.page_width / 2 + 10

        c.setFont("Helvetica-Bold", 12)
        c.drawString(left, y, "Scores")
        y -= 20
        c.setFont("Helvetica", 10)
        for stat in [
            f"Coverage: {report.coverage_score:.1f}",
            f"Fairness: {report.fairness_score:.1f}",
            f"Cost score: {report.cost_score:.1f}",
            f"Total cost: ${report.total_cost:,.2f}",
            f"Total hours: {report.total_hours:.1f}",
            f"Total score: {report.total_score:.2f}",
        ]:
            c.drawString(left + 20, y, stat)
            y -= 15

        y -= 10
        c.setFont("Helvetica-Bold", 12)
        c.drawString(left, y, "Coverage by Role")
        y -= 15
        y = self._draw_coverage_bars(c, report, business, left + 20, y, 200)

        y -= 10
        y = self._draw_text_list(c, "Warnings", [str(w) for w in report.warnings], left, y)
        self._draw_text_list(c, "Recommendations", report.recommendations, left, y)

        self._draw_payroll_table(c, schedule, staff, right, self.page_height - self.margin - 60)

        c.showPage()

    def _draw_coverage_bars(
        self,
        c,
        report: ScheduleReport,
        business: Business,
        x: float,
        y: float,
        width: float,
    ) -> float:
        """Draw one horizontal bar per role; returns the next free y."""
        roles = business.role_map
        c.setFont("Helvetica", 9)
        for role_id, percent in report.coverage_by_role.items():
            role = roles.get(role_id)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(x, y, (role.name if role else role_id)[:16])
            c.setFillColorRGB(0.9, 0.9, 0.9)
            c.rect(x + 90, y - 2, width, 10, fill=1, stroke=0)
            c.setFillColorRGB(0.4, 0.6, 0.8)
            c.rect(x + 90, y - 2, width * percent / 100.0, 10, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(x + 95 + width, y, f"{percent:.0f}%")
            y -= 15
        return y

    def _draw_text_list(
        self,
        c,
        title: str,
        items: list[str],
        x: float,
        y: float,
        max_items: int = 8,
    ) -> float:
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(x, y, f"{title} ({len(items)})")
        y -= 15
        c.setFont("Helvetica", 8)
        for item in items[:max_items]:
            c.drawString(x + 20, y, item[:70])
            y -= 12
        if len(items) > max_items:
            c.drawString(x + 20, y, f"... and {len(items) - max_items} more")
            y -= 12
        return y - 8

    def _draw_payroll_table(
        self,
        c,
        schedule: Schedule,
        staff: list[Staff],
        x: float,
        y: float,
        max_rows: Optional[int] = 25,
    ) -> None:
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(x, y, "Payroll")
        y -= 18

        c.setFont("Helvetica-Bold", 8)
        columns = [("Staff", 0), ("Hours", 120), ("OT", 165), ("Gross", 205)]
        for label, offset in columns:
            c.drawString(x + offset, y, label)
        y -= 12

        c.setFont("Helvetica", 8)
        summaries = summarize_payroll(schedule, staff)
        for summary in summaries[:max_rows]:
            c.drawString(x, y, summary.staff_name[:22])
            c.drawString(x + 120, y, f"{summary.total_hours:.1f}")
            c.drawString(x + 165, y, f"{summary.overtime_hours:.1f}")
            c.drawString(x + 205, y, f"${summary.gross_pay:,.2f}")
            y -= 12
