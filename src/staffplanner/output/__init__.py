"""Output generation for schedules (text, PDF)."""

from staffplanner.output.pdf_generator import PDFGenerator
from staffplanner.output.text_report import TextReportGenerator

__all__ = [
    "PDFGenerator",
    "TextReportGenerator",
]
