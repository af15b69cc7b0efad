"""
Report Service Module

Application layer service that orchestrates attendance report generation.
Separates the pure attendance engine from file I/O.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from config.config_manager import AppConfig, AttendanceConfig
from domain.aggregator import AttendanceAggregator
from domain.entities import (
    AggregationResult, CalendarMonth, EmployeeRecords, EmployeeSummary
)
from domain.statistics import (
    DailyStats, DepartmentStats, OverallStats, WeeklyStats, attendance_issues,
    daily_stats, department_stats, overall_stats, sort_summaries, weekly_stats
)
from infrastructure.logger import get_logger

logger = get_logger("ReportService")


@dataclass
class ReportGenerationParams:
    """
    Parameters for report generation.

    This dataclass encapsulates all parameters needed for report generation,
    decoupling the service from the persisted AppConfig.
    """
    source_path: Path
    output_path: Path

    # Report month; detected from the filename when not given
    year: Optional[int] = None
    month: Optional[int] = None

    sort_by: str = "attendance_percentage"

    # PDF generation
    generate_pdf: bool = True
    pdf_output_path: Optional[Path] = None
    custom_font_path: Optional[str] = None


@dataclass
class AttendanceReport:
    """Everything the presentation layer needs for one month."""
    calendar: CalendarMonth
    result: AggregationResult
    summaries: List[EmployeeSummary]
    departments: List[DepartmentStats]
    days: List[DailyStats]
    weeks: List[WeeklyStats]
    overall: OverallStats
    issues: List[EmployeeSummary]


@dataclass
class ReportResult:
    """Result of report generation."""
    success: bool
    output_path: Path
    year: int = 0
    month: int = 0
    employee_count: int = 0
    failed_names: List[str] = field(default_factory=list)
    warning_count: int = 0
    pdf_path: Optional[Path] = None


class AttendanceReportService:
    """
    Application service for generating attendance reports.

    This service:
    - Orchestrates parse -> aggregate -> statistics -> write
    - Depends only on domain entities and infrastructure adapters
    - Provides logging for key operations
    """

    def __init__(self, config: Optional[AttendanceConfig] = None):
        self.config = config or AttendanceConfig()
        self.aggregator = AttendanceAggregator(self.config)

    def build_report(
        self,
        employees: Sequence[EmployeeRecords],
        calendar: CalendarMonth,
        sort_by: str = "attendance_percentage"
    ) -> AttendanceReport:
        """
        Aggregate already-parsed employees and compute report statistics.

        Raises:
            ConfigError: If the calendar lookup fails
        """
        result = self.aggregator.aggregate_many(employees, calendar)
        summaries = sort_summaries(result.summaries, sort_by)
        provider = self.aggregator.calendar_provider

        days = daily_stats(summaries, calendar, provider)
        return AttendanceReport(
            calendar=calendar,
            result=result,
            summaries=summaries,
            departments=department_stats(summaries),
            days=days,
            weeks=weekly_stats(days, calendar),
            overall=overall_stats(summaries, calendar, provider),
            issues=attendance_issues(summaries, self.config.average_threshold),
        )

    def generate_report(self, params: ReportGenerationParams) -> ReportResult:
        """
        Generate the attendance report files.

        Args:
            params: ReportGenerationParams containing all necessary configuration

        Returns:
            ReportResult with the outcome of report generation

        Raises:
            ValueError: If no data found or the month cannot be determined
            ConfigError: If the month/year or holiday table is invalid
            ExcelFormatError: If the source sheet is unreadable
            PermissionError: If files cannot be written
        """
        from infrastructure.excel_parser import ExcelParser
        from infrastructure.excel_writer import ExcelWriter
        from infrastructure.filename_parser import FilenameParser

        logger.info(f"Parsing source file: {params.source_path}")

        employees = ExcelParser().parse_file(params.source_path)
        if not employees:
            raise ValueError("No employee rows found in the source file")

        year, month = params.year, params.month
        if month is None:
            detected = FilenameParser.try_parse_report_month(params.source_path.name)
            if detected is None:
                raise ValueError(
                    f"Cannot detect the report month from '{params.source_path.name}'; "
                    f"pass it explicitly"
                )
            detected_year, month = detected
            year = year or detected_year
        if year is None:
            raise ValueError("Report year is required")

        calendar = CalendarMonth(year=year, month=month)
        report = self.build_report(employees, calendar, params.sort_by)

        if not report.summaries:
            raise ValueError(
                f"All {len(report.result.failures)} employees failed validation; "
                f"no report produced"
            )

        logger.info(
            f"Processed {len(report.summaries)} employees, "
            f"{len(report.result.failures)} failed, "
            f"{report.result.warning_count} row warnings"
        )

        logger.info(f"Writing Excel: {params.output_path}")
        ExcelWriter().create_report(
            report.result,
            report.summaries,
            year, month,
            params.output_path,
            departments=report.departments,
            days=report.days
        )

        pdf_path = None
        if params.generate_pdf:
            pdf_path = self._generate_pdf_report(params, report)

        return ReportResult(
            success=True,
            output_path=params.output_path,
            year=year,
            month=month,
            employee_count=len(report.summaries),
            failed_names=[f.name or f.cfms_id for f in report.result.failures],
            warning_count=report.result.warning_count,
            pdf_path=pdf_path
        )

    def _generate_pdf_report(
        self,
        params: ReportGenerationParams,
        report: AttendanceReport
    ) -> Optional[Path]:
        """Generate the PDF summary; a PDF failure does not fail the report."""
        from infrastructure.pdf_writer import PdfWriter

        pdf_path = params.pdf_output_path or params.output_path.with_suffix(".pdf")
        try:
            PdfWriter(custom_font_path=params.custom_font_path).create_report(
                report.summaries,
                report.calendar.year,
                report.calendar.month,
                pdf_path,
                overall=report.overall,
                departments=report.departments
            )
        except (OSError, RuntimeError, ValueError) as e:
            logger.error(f"PDF generation failed: {e}")
            return None
        return pdf_path

    @staticmethod
    def build_params_from_config(
        config: AppConfig,
        source_path: Path,
        output_path: Optional[Path] = None,
        year: Optional[int] = None,
        month: Optional[int] = None
    ) -> ReportGenerationParams:
        """
        Build ReportGenerationParams from AppConfig.

        This is a convenience method that bridges the config object to
        the params dataclass.
        """
        from infrastructure.pdf_writer import format_filename

        settings = config.output_settings
        output_dir = Path(settings.output_dir) if settings.output_dir else source_path.parent

        pdf_output_path = None
        if output_path is None:
            if year is None or month is None:
                # Placeholder name until the month is known
                output_path = output_dir / f"{source_path.stem}_report.xlsx"
            else:
                output_path = output_dir / format_filename(
                    settings.filename_pattern, year, month
                )
                pdf_output_path = output_dir / format_filename(
                    settings.pdf_filename_pattern, year, month
                )

        return ReportGenerationParams(
            source_path=source_path,
            output_path=output_path,
            year=year,
            month=month,
            sort_by=settings.sort_by,
            generate_pdf=settings.generate_pdf,
            pdf_output_path=pdf_output_path,
        )
