"""
Excel Writer Module

Generates formatted Excel attendance reports with styling.
Applies color formatting based on status and rating.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from domain.entities import (
    AggregationResult, AttendanceStatus, EmployeeSummary, RatingTier
)
from domain.statistics import DailyStats, DepartmentStats
from infrastructure.logger import get_logger

logger = get_logger("ExcelWriter")


class ExcelWriter:
    """
    Generates formatted Excel attendance reports.

    Sheets:
    - Summary: one row per employee with counts, hours, percentage, rating
    - Daily: employee x day grid of display status codes
    - Departments: department totals and averages
    - Warnings: skipped rows and failed employees
    """

    COLORS = {
        'green': PatternFill(start_color='90EE90', end_color='90EE90', fill_type='solid'),
        'red': PatternFill(start_color='FF6B6B', end_color='FF6B6B', fill_type='solid'),
        'yellow': PatternFill(start_color='FFD700', end_color='FFD700', fill_type='solid'),
        'orange': PatternFill(start_color='FFA500', end_color='FFA500', fill_type='solid'),
        'blue': PatternFill(start_color='6B8CFF', end_color='6B8CFF', fill_type='solid'),
        'purple': PatternFill(start_color='DDA0DD', end_color='DDA0DD', fill_type='solid'),
        'gray': PatternFill(start_color='D3D3D3', end_color='D3D3D3', fill_type='solid'),
        'header': PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid'),
    }

    STATUS_COLORS = {
        AttendanceStatus.PRESENT: 'green',
        AttendanceStatus.ABSENT: 'red',
        AttendanceStatus.LEAVE: 'blue',
        AttendanceStatus.HOLIDAY: 'gray',
        AttendanceStatus.HALF_DAY: 'yellow',
        AttendanceStatus.LATE: 'orange',
    }

    RATING_COLORS = {
        RatingTier.GOOD: 'green',
        RatingTier.AVERAGE: 'yellow',
        RatingTier.POOR: 'red',
    }

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    SUMMARY_HEADERS = [
        "Name", "CFMS ID", "Department", "Working Days", "Present", "Half Day",
        "Absent", "Leave", "Holiday", "Late", "Early Departure", "Hours",
        "Attendance %", "Rating",
    ]

    def __init__(self):
        self.wb: Optional[Workbook] = None

    def create_report(
        self,
        result: AggregationResult,
        summaries: Sequence[EmployeeSummary],
        year: int,
        month: int,
        output_path: Path,
        departments: Sequence[DepartmentStats] = (),
        days: Sequence[DailyStats] = ()
    ) -> Path:
        """
        Create a complete attendance report workbook.

        Args:
            result: Aggregation result (used for failures and warnings)
            summaries: Employee summaries in output order
            year: Report year
            month: Report month
            output_path: Path to save the Excel file
            departments: Department statistics
            days: Daily statistics

        Returns:
            Path to the created file
        """
        self.wb = Workbook()

        # Remove default sheet
        self.wb.remove(self.wb.active)

        self._write_summary_sheet(self.wb.create_sheet("Summary"), summaries)
        self._write_daily_sheet(self.wb.create_sheet("Daily"), summaries, days, year, month)
        self._write_department_sheet(self.wb.create_sheet("Departments"), departments)
        self._write_warning_sheet(self.wb.create_sheet("Warnings"), result)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(output_path)
        logger.info(f"Excel report saved: {output_path}")
        return output_path

    def _write_header(self, ws, headers: List[str]) -> None:
        for col, text in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = self.COLORS['header']
            cell.font = Font(bold=True, color='FFFFFF')
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            cell.border = self.BORDER
        ws.freeze_panes = 'B2'

    def _write_summary_sheet(self, ws, summaries: Sequence[EmployeeSummary]) -> None:
        self._write_header(ws, self.SUMMARY_HEADERS)

        for row, summary in enumerate(summaries, start=2):
            values = [
                summary.name,
                summary.cfms_id,
                summary.department,
                summary.working_days,
                summary.present_days,
                summary.half_days,
                summary.absent_days,
                summary.leave_days,
                summary.holiday_days,
                summary.late_count,
                summary.early_departure_count,
                summary.total_worked_hours,
                summary.attendance_percentage,
                summary.rating.name.title(),
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.BORDER

            rate_cell = ws.cell(row=row, column=len(values) - 1)
            rate_cell.number_format = '0.00'
            rate_cell.fill = self.COLORS[self.RATING_COLORS[summary.rating]]

        self._autosize(ws, {1: 24, 2: 14, 3: 18})

    def _write_daily_sheet(
        self,
        ws,
        summaries: Sequence[EmployeeSummary],
        days: Sequence[DailyStats],
        year: int,
        month: int
    ) -> None:
        if days:
            day_numbers = [d.day for d in days]
        else:
            day_numbers = sorted({c.day for s in summaries for c in s.daily})
        weekday_by_day: Dict[int, str] = {d.day: d.weekday for d in days}

        headers = ["Name"] + [
            f"{day:02d}\n{weekday_by_day.get(day, '')}".strip() for day in day_numbers
        ]
        self._write_header(ws, headers)
        ws.row_dimensions[1].height = 30

        col_by_day = {day: idx for idx, day in enumerate(day_numbers, start=2)}
        for row, summary in enumerate(summaries, start=2):
            ws.cell(row=row, column=1, value=summary.name).border = self.BORDER
            for classified in summary.daily:
                col = col_by_day.get(classified.day)
                if col is None:
                    continue
                cell = ws.cell(row=row, column=col, value=classified.status.value)
                cell.fill = self.COLORS[self.STATUS_COLORS[classified.status]]
                cell.alignment = Alignment(horizontal='center')
                cell.border = self.BORDER

        # Totals row from daily statistics
        if days:
            total_row = len(summaries) + 2
            ws.cell(row=total_row, column=1, value="Attendance %").font = Font(bold=True)
            for stats in days:
                cell = ws.cell(row=total_row, column=col_by_day[stats.day])
                if stats.is_working_day:
                    cell.value = stats.attendance_rate
                    cell.number_format = '0.0'
                cell.border = self.BORDER

        ws.column_dimensions['A'].width = 24
        for col in col_by_day.values():
            ws.column_dimensions[get_column_letter(col)].width = 6

    def _write_department_sheet(self, ws, departments: Sequence[DepartmentStats]) -> None:
        headers = [
            "Department", "Employees", "Present", "Half Day", "Absent",
            "Leave", "Hours", "Average Attendance %",
        ]
        self._write_header(ws, headers)
        for row, dept in enumerate(departments, start=2):
            values = [
                dept.department,
                dept.employee_count,
                dept.total_present,
                dept.total_half_days,
                dept.total_absent,
                dept.total_leave,
                dept.total_hours,
                dept.average_attendance,
            ]
            for col, value in enumerate(values, start=1):
                ws.cell(row=row, column=col, value=value).border = self.BORDER
        self._autosize(ws, {1: 24})

    def _write_warning_sheet(self, ws, result: AggregationResult) -> None:
        self._write_header(ws, ["Name", "CFMS ID", "Day", "Problem"])
        row = 2
        for failure in result.failures:
            values = [failure.name, failure.cfms_id, "", failure.message]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.fill = self.COLORS['red']
                cell.border = self.BORDER
            row += 1
        for summary in result.summaries:
            for warning in summary.warnings:
                values = [summary.name, summary.cfms_id, warning.day, warning.message]
                for col, value in enumerate(values, start=1):
                    ws.cell(row=row, column=col, value=value).border = self.BORDER
                row += 1
        self._autosize(ws, {1: 24, 2: 14, 3: 6, 4: 60})

    def _autosize(self, ws, widths: Dict[int, int]) -> None:
        for col in range(1, ws.max_column + 1):
            letter = get_column_letter(col)
            ws.column_dimensions[letter].width = widths.get(col, 12)
