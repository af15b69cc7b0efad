"""
Attendance Aggregator Module

Turns one employee's daily records into an EmployeeSummary, and fans
out over many employees.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from types import MappingProxyType
from typing import Dict, List, Optional, Sequence, Tuple

from config.config_manager import AttendanceConfig
from infrastructure.logger import get_logger

from .calendar_provider import CalendarProvider
from .entities import (
    COUNTED_STATUSES, PRESENT_WEIGHTS, AggregationResult, AttendanceStatus,
    CalendarMonth, ClassifiedDay, DailyRecord, EmployeeFailure, EmployeeRecords,
    EmployeeSummary, RatingTier, RecordWarning
)
from .exceptions import DataError
from .status_classifier import WORKED_STATUSES, StatusClassifier
from .time_utils import parse_duration_minutes, parse_time_of_day

logger = get_logger("AttendanceAggregator")


def calculate_rating(
    percentage: float,
    good_threshold: float = 75,
    average_threshold: float = 50
) -> RatingTier:
    """
    Calculate the rating tier for an attendance percentage.

    Args:
        percentage: Attendance percentage (0-100)
        good_threshold: Lower bound of GOOD (default 75%)
        average_threshold: Lower bound of AVERAGE (default 50%)
    """
    if percentage >= good_threshold:
        return RatingTier.GOOD
    elif percentage >= average_threshold:
        return RatingTier.AVERAGE
    else:
        return RatingTier.POOR


def calculate_percentage(present_equivalent: float, working_days: int) -> float:
    """100 * present_equivalent / working_days; 0 when there are no working days."""
    if working_days <= 0:
        return 0.0
    return round(100 * present_equivalent / working_days, 2)


class AttendanceAggregator:
    """
    Aggregates daily attendance per employee.

    Provides:
    - Per-day normalization and classification
    - Status counts, worked hours and attendance percentage
    - Partial-failure tolerance: bad rows become warnings
    - Fan-out over employees with independent results
    """

    def __init__(
        self,
        config: Optional[AttendanceConfig] = None,
        calendar_provider: Optional[CalendarProvider] = None,
        classifier: Optional[StatusClassifier] = None
    ):
        self.config = config or AttendanceConfig()
        self.calendar_provider = calendar_provider or CalendarProvider(
            self.config.holidays, self.config.weekend
        )
        self.classifier = classifier or StatusClassifier(
            self.config.thresholds, self.config.leave_codes
        )

    def aggregate(
        self,
        employee_name: str,
        cfms_id: str,
        department: str,
        records: Sequence[DailyRecord],
        calendar: CalendarMonth
    ) -> EmployeeSummary:
        """
        Aggregate one employee's records for a month.

        Args:
            employee_name: Employee name (must not be blank)
            cfms_id: CFMS employee identifier
            department: Department name
            records: Daily records, any order
            calendar: Report month

        Returns:
            EmployeeSummary

        Raises:
            DataError: If the name is blank or there are no records
            ConfigError: If the calendar lookup fails
        """
        name = (employee_name or "").strip()
        if not name:
            raise DataError("Employee name is blank", employee_name=employee_name or "")
        if not records:
            raise DataError(f"No attendance records for '{name}'", employee_name=name)

        year, month = calendar.year, calendar.month
        num_days = self.calendar_provider.get_days_in_month(year, month)
        holidays = self.calendar_provider.get_holidays(year, month)
        working_days = self.calendar_provider.get_working_days(year, month)

        warnings: List[RecordWarning] = []
        daily: List[ClassifiedDay] = []
        seen_days = set()

        for record in sorted(records, key=self._day_sort_key):
            day = record.day
            if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= num_days:
                warnings.append(RecordWarning(
                    day=day if isinstance(day, int) else 0,
                    message=f"day {day!r} is outside {year}-{month:02d}, skipped"
                ))
                continue
            if day in seen_days:
                warnings.append(RecordWarning(day, "duplicate record, skipped"))
                continue
            seen_days.add(day)

            normalized, problem = self._normalize(record)
            if problem:
                warnings.append(RecordWarning(day, f"{problem}; treated as no punch data"))

            classified = self.classifier.classify(
                normalized,
                is_holiday=day in holidays,
                is_working_day=day in working_days
            )
            if classified.counted_status == AttendanceStatus.HOLIDAY:
                label = self.calendar_provider.day_label(year, month, day)
                classified = replace(classified, label=label or "Holiday")
            daily.append(classified)

        counts: Dict[AttendanceStatus, int] = {status: 0 for status in COUNTED_STATUSES}
        present_equivalent = 0.0
        total_minutes = 0.0
        late_count = 0
        early_count = 0

        for classified in daily:
            status = classified.counted_status
            counts[status] += 1
            present_equivalent += PRESENT_WEIGHTS.get(status, 0.0)
            total_minutes += classified.worked_minutes
            if classified.status in WORKED_STATUSES:
                late_count += classified.is_late
                early_count += classified.is_early_departure

        percentage = calculate_percentage(present_equivalent, len(working_days))

        if warnings:
            logger.warning(f"{name}: {len(warnings)} record(s) with problems")
        logger.debug(
            f"{name}: {len(daily)} days, {len(working_days)} working, "
            f"{present_equivalent} present-equivalent, {percentage}%"
        )

        return EmployeeSummary(
            name=name,
            cfms_id=(cfms_id or "").strip(),
            department=(department or "").strip() or "N/A",
            year=year,
            month=month,
            daily=tuple(daily),
            counts=MappingProxyType(counts),
            working_days=len(working_days),
            present_equivalent=present_equivalent,
            total_worked_hours=round(total_minutes / 60, 2),
            attendance_percentage=percentage,
            late_count=late_count,
            early_departure_count=early_count,
            rating=calculate_rating(
                percentage,
                self.config.good_threshold,
                self.config.average_threshold
            ),
            warnings=tuple(warnings),
        )

    def aggregate_employee(
        self,
        employee: EmployeeRecords,
        calendar: CalendarMonth
    ) -> EmployeeSummary:
        """Aggregate an EmployeeRecords bundle."""
        return self.aggregate(
            employee.name,
            employee.cfms_id,
            employee.department,
            employee.records,
            calendar
        )

    def aggregate_many(
        self,
        employees: Sequence[EmployeeRecords],
        calendar: CalendarMonth,
        max_workers: Optional[int] = None
    ) -> AggregationResult:
        """
        Aggregate many employees concurrently (one task per employee).

        A DataError for one employee is recorded as an EmployeeFailure and
        does not affect the others. Summaries keep the input order.

        Raises:
            ConfigError: If the calendar lookup fails
        """
        # Resolve the calendar once up front so a bad month fails fast
        self.calendar_provider.get_working_days(calendar.year, calendar.month)

        workers = max(1, max_workers or self.config.max_workers)
        logger.info(
            f"Aggregating {len(employees)} employees for "
            f"{calendar.year}-{calendar.month:02d} ({workers} workers)"
        )

        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(lambda e: self._safe_aggregate(e, calendar), employees))

        summaries = tuple(o for o in outcomes if isinstance(o, EmployeeSummary))
        failures = tuple(o for o in outcomes if isinstance(o, EmployeeFailure))

        logger.info(
            f"Aggregation finished: {len(summaries)} summaries, {len(failures)} failures"
        )
        return AggregationResult(summaries=summaries, failures=failures)

    def _safe_aggregate(self, employee: EmployeeRecords, calendar: CalendarMonth):
        try:
            return self.aggregate_employee(employee, calendar)
        except DataError as e:
            logger.warning(f"Skipping employee '{employee.name}' ({employee.cfms_id}): {e}")
            return EmployeeFailure(
                name=employee.name or "",
                cfms_id=employee.cfms_id or "",
                message=e.message
            )

    @staticmethod
    def _day_sort_key(record: DailyRecord) -> Tuple[int, int]:
        day = record.day
        if isinstance(day, int) and not isinstance(day, bool):
            return (0, day)
        return (1, 0)

    @staticmethod
    def _normalize(record: DailyRecord) -> Tuple[DailyRecord, str]:
        """
        Convert raw cell values to typed values.

        Returns:
            (record, problem). On a malformed value the record is replaced
            by an empty one for the same day and problem describes why.
        """
        try:
            in_time = parse_time_of_day(record.in_time)
            out_time = parse_time_of_day(record.out_time)
            duration = parse_duration_minutes(record.duration_minutes)
        except ValueError as e:
            return DailyRecord(day=record.day), str(e)

        raw_status = "" if record.raw_status is None else str(record.raw_status).strip()
        return DailyRecord(
            day=record.day,
            in_time=in_time,
            out_time=out_time,
            raw_status=raw_status,
            duration_minutes=duration,
        ), ""
