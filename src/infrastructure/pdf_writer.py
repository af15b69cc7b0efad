"""
PDF Writer Module

Generates PDF attendance summary reports using fpdf2.
Mirrors the Excel summary sheet with rating color coding.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from fpdf import FPDF

from domain.entities import EmployeeSummary, RatingTier
from domain.statistics import DepartmentStats, OverallStats
from infrastructure.logger import get_logger

logger = get_logger("PdfWriter")

FALLBACK_FONT = "Helvetica"

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]


# ==============================================================================
# AttendancePdf Class (A4 Landscape)
# ==============================================================================
class AttendancePdf(FPDF):
    """
    Custom FPDF class for A4 landscape attendance reports.

    An optional TrueType font can be supplied for names outside Latin-1.
    """

    _font_family: str = FALLBACK_FONT
    _font_loaded: bool = False

    def __init__(self, title: str = "", custom_font_path: Optional[str] = None):
        # A4 Landscape: 297mm x 210mm
        super().__init__(orientation='L', unit='mm', format='A4')
        self.title_text = title
        self._setup_font(custom_font_path)

    def _setup_font(self, custom_font_path: Optional[str] = None) -> None:
        """Load a custom font if available."""
        if not custom_font_path:
            return

        font_path = Path(custom_font_path)
        if not font_path.exists():
            logger.warning(f"Custom font not found: {font_path}")
            return

        try:
            self.add_font("ReportFont", "", str(font_path))
            self._font_family = "ReportFont"
            self._font_loaded = True
            logger.info(f"Loaded custom font: {font_path.name}")
        except (OSError, RuntimeError, ValueError) as e:
            logger.warning(f"Could not load font {font_path}: {e}")
            self._font_family = FALLBACK_FONT
            self._font_loaded = False

    @property
    def font_family_name(self) -> str:
        return self._font_family

    @property
    def has_custom_font(self) -> bool:
        return self._font_loaded

    def safe_text(self, text: str) -> str:
        """Replace characters the core fonts cannot encode."""
        if self._font_loaded:
            return text
        return text.encode('latin-1', 'replace').decode('latin-1')

    def header(self) -> None:
        """Draw page header with centered title."""
        self.set_font(self._font_family, '', 14)
        self.cell(0, 10, self.safe_text(self.title_text), align='C', new_x='LMARGIN', new_y='NEXT')
        self.ln(2)

    def footer(self) -> None:
        """Draw page footer with page number."""
        self.set_y(-12)
        self.set_font(self._font_family, '', 8)
        self.cell(0, 10, f'Page {self.page_no()}/{{nb}}', align='C')


# ==============================================================================
# PdfWriter Class
# ==============================================================================
class PdfWriter:
    """
    Generates PDF summary reports.

    Features:
    - A4 landscape, repeating table header on each page
    - Rating color on the attendance percentage column
    - Overall and department totals section
    """

    COLORS: Dict[str, Tuple[int, int, int]] = {
        'green': (144, 238, 144),
        'red': (255, 107, 107),
        'yellow': (255, 215, 0),
        'header': (68, 114, 196),
        'white': (255, 255, 255),
    }

    RATING_COLORS = {
        RatingTier.GOOD: 'green',
        RatingTier.AVERAGE: 'yellow',
        RatingTier.POOR: 'red',
    }

    # (header, width mm)
    COLUMNS: List[Tuple[str, float]] = [
        ("Name", 55), ("CFMS ID", 28), ("Department", 42), ("Work", 16),
        ("P", 14), ("HD", 14), ("A", 14), ("L", 14), ("Late", 16),
        ("Hours", 20), ("%", 18), ("Rating", 22),
    ]

    ROW_HEIGHT = 7
    BOTTOM_LIMIT = 190

    def __init__(self, custom_font_path: Optional[str] = None):
        self._custom_font_path = custom_font_path

    def create_report(
        self,
        summaries: Sequence[EmployeeSummary],
        year: int,
        month: int,
        output_path: Path,
        overall: Optional[OverallStats] = None,
        departments: Sequence[DepartmentStats] = ()
    ) -> None:
        """
        Create the PDF summary report.

        Returns early without writing a file when there are no summaries.
        """
        if not summaries:
            return

        title = f"Attendance Report - {MONTH_NAMES[month - 1]} {year}"
        pdf = AttendancePdf(title=title, custom_font_path=self._custom_font_path)
        pdf.alias_nb_pages()
        pdf.set_auto_page_break(auto=False)
        pdf.add_page()

        if overall is not None:
            self._draw_overview(pdf, overall)

        self._draw_table_header(pdf)
        for summary in summaries:
            if pdf.get_y() + self.ROW_HEIGHT > self.BOTTOM_LIMIT:
                pdf.add_page()
                self._draw_table_header(pdf)
            self._draw_row(pdf, summary)

        if departments:
            self._draw_departments(pdf, departments)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"PDF report saved: {output_path}")

    def _draw_overview(self, pdf: AttendancePdf, overall: OverallStats) -> None:
        pdf.set_font(pdf.font_family_name, '', 10)
        pdf.set_text_color(0, 0, 0)
        line = (
            f"Employees: {overall.total_employees}    "
            f"Working days: {overall.working_days}    "
            f"Holidays/weekends: {overall.holidays}    "
            f"Average attendance: {overall.average_attendance:.1f}%    "
            f"Total hours: {overall.total_hours:.1f}"
        )
        pdf.cell(0, 8, line, new_x='LMARGIN', new_y='NEXT')
        pdf.ln(2)

    def _draw_table_header(self, pdf: AttendancePdf) -> None:
        pdf.set_font(pdf.font_family_name, '' if pdf.has_custom_font else 'B', 9)
        pdf.set_fill_color(*self.COLORS['header'])
        pdf.set_text_color(255, 255, 255)
        for text, width in self.COLUMNS:
            pdf.cell(width, self.ROW_HEIGHT, text, border=1, align='C', fill=True)
        pdf.ln(self.ROW_HEIGHT)
        pdf.set_text_color(0, 0, 0)

    def _draw_row(self, pdf: AttendancePdf, summary: EmployeeSummary) -> None:
        pdf.set_font(pdf.font_family_name, '', 9)
        values = [
            summary.name,
            summary.cfms_id,
            summary.department,
            str(summary.working_days),
            str(summary.present_days),
            str(summary.half_days),
            str(summary.absent_days),
            str(summary.leave_days),
            str(summary.late_count),
            f"{summary.total_worked_hours:.1f}",
            f"{summary.attendance_percentage:.1f}",
            summary.rating.name.title(),
        ]
        rate_index = len(values) - 2
        for idx, (value, (_, width)) in enumerate(zip(values, self.COLUMNS)):
            fill = idx == rate_index
            if fill:
                pdf.set_fill_color(*self.COLORS[self.RATING_COLORS[summary.rating]])
            align = 'L' if idx < 3 else 'C'
            pdf.cell(width, self.ROW_HEIGHT, pdf.safe_text(value), border=1, align=align, fill=fill)
        pdf.ln(self.ROW_HEIGHT)

    def _draw_departments(self, pdf: AttendancePdf, departments: Sequence[DepartmentStats]) -> None:
        needed = (len(departments) + 3) * self.ROW_HEIGHT
        if pdf.get_y() + needed > self.BOTTOM_LIMIT:
            pdf.add_page()
        pdf.ln(4)
        pdf.set_font(pdf.font_family_name, '', 11)
        pdf.cell(0, 8, "Departments", new_x='LMARGIN', new_y='NEXT')
        pdf.set_font(pdf.font_family_name, '', 9)
        for dept in departments:
            if pdf.get_y() + self.ROW_HEIGHT > self.BOTTOM_LIMIT:
                pdf.add_page()
            pdf.cell(80, self.ROW_HEIGHT, pdf.safe_text(dept.department), border=1)
            pdf.cell(30, self.ROW_HEIGHT, f"{dept.employee_count} staff", border=1, align='C')
            pdf.cell(40, self.ROW_HEIGHT, f"{dept.average_attendance:.1f}%", border=1, align='C')
            pdf.ln(self.ROW_HEIGHT)


# ==============================================================================
# Utility Functions
# ==============================================================================
def format_filename(pattern: str, year: int, month: int) -> str:
    """Format filename pattern with placeholders."""
    return pattern.format(
        year=year,
        month=f"{month:02d}"
    )
