"""
Report Statistics Module

Department, daily, weekly and overall statistics over employee summaries,
plus sorting for output.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Sequence

from .calendar_provider import CalendarProvider
from .entities import AttendanceStatus, CalendarMonth, EmployeeSummary


@dataclass
class DepartmentStats:
    """Attendance totals for one department."""
    department: str
    employees: List[str] = field(default_factory=list)
    total_present: int = 0
    total_absent: int = 0
    total_leave: int = 0
    total_half_days: int = 0
    total_hours: float = 0.0
    present_equivalent: float = 0.0
    working_days: int = 0

    @property
    def employee_count(self) -> int:
        return len(self.employees)

    @property
    def average_attendance(self) -> float:
        if self.working_days <= 0:
            return 0.0
        return round(100 * self.present_equivalent / self.working_days, 1)


@dataclass
class DailyStats:
    """Per-day counts across all employees."""
    day: int
    weekday: str
    is_working_day: bool
    counts: Dict[AttendanceStatus, int] = field(
        default_factory=lambda: {status: 0 for status in AttendanceStatus}
    )
    present_equivalent: float = 0.0
    expected: int = 0  # Employees expected in; every employee on a working day

    @property
    def attendance_rate(self) -> float:
        if self.expected <= 0:
            return 0.0
        return round(100 * self.present_equivalent / self.expected, 1)


@dataclass
class WeeklyStats:
    """Monday-to-Sunday week clipped to the report month."""
    week: int
    start_day: int
    end_day: int
    present_equivalent: float = 0.0
    expected: int = 0
    late: int = 0
    absent: int = 0

    @property
    def attendance_rate(self) -> float:
        if self.expected <= 0:
            return 0.0
        return round(100 * self.present_equivalent / self.expected, 1)


@dataclass
class OverallStats:
    """Totals across all employees."""
    year: int
    month: int
    total_employees: int = 0
    working_days: int = 0
    holidays: int = 0
    total_present: int = 0
    total_absent: int = 0
    total_leave: int = 0
    total_half_days: int = 0
    total_late: int = 0
    total_hours: float = 0.0
    average_attendance: float = 0.0


def department_stats(summaries: Sequence[EmployeeSummary]) -> List[DepartmentStats]:
    """Group summaries by department, in order of first appearance."""
    departments = []
    for dept, members in group_by_department(summaries).items():
        stats = DepartmentStats(department=dept)
        for summary in members:
            stats.employees.append(summary.name)
            stats.total_present += summary.present_days
            stats.total_absent += summary.absent_days
            stats.total_leave += summary.leave_days
            stats.total_half_days += summary.half_days
            stats.total_hours = round(stats.total_hours + summary.total_worked_hours, 2)
            stats.present_equivalent += summary.present_equivalent
            stats.working_days += summary.working_days
        departments.append(stats)
    return departments


def daily_stats(
    summaries: Sequence[EmployeeSummary],
    calendar: CalendarMonth,
    calendar_provider: CalendarProvider
) -> List[DailyStats]:
    """Per-day status counts for every day of the month."""
    year, month = calendar.year, calendar.month
    num_days = calendar_provider.get_days_in_month(year, month)
    working_days = calendar_provider.get_working_days(year, month)

    days = [
        DailyStats(
            day=day,
            weekday=date(year, month, day).strftime('%a'),
            is_working_day=day in working_days,
            expected=len(summaries) if day in working_days else 0
        )
        for day in range(1, num_days + 1)
    ]

    for summary in summaries:
        for classified in summary.daily:
            stats = days[classified.day - 1]
            stats.counts[classified.status] += 1
            if classified.counted_status == AttendanceStatus.PRESENT:
                stats.present_equivalent += 1
            elif classified.counted_status == AttendanceStatus.HALF_DAY:
                stats.present_equivalent += 0.5

    return days


def weekly_stats(
    days: Sequence[DailyStats],
    calendar: CalendarMonth
) -> List[WeeklyStats]:
    """Roll daily stats up into Monday-to-Sunday weeks."""
    weeks: List[WeeklyStats] = []
    first = date(calendar.year, calendar.month, 1)
    for stats in days:
        d = first + timedelta(days=stats.day - 1)
        if not weeks or d.weekday() == 0:
            weeks.append(WeeklyStats(week=len(weeks) + 1, start_day=stats.day, end_day=stats.day))
        week = weeks[-1]
        week.end_day = stats.day
        week.present_equivalent += stats.present_equivalent
        week.expected += stats.expected
        week.late += stats.counts[AttendanceStatus.LATE]
        week.absent += stats.counts[AttendanceStatus.ABSENT]
    return weeks


def overall_stats(
    summaries: Sequence[EmployeeSummary],
    calendar: CalendarMonth,
    calendar_provider: CalendarProvider
) -> OverallStats:
    year, month = calendar.year, calendar.month
    num_days = calendar_provider.get_days_in_month(year, month)
    working = len(calendar_provider.get_working_days(year, month))

    stats = OverallStats(
        year=year,
        month=month,
        total_employees=len(summaries),
        working_days=working,
        holidays=num_days - working,
    )
    for summary in summaries:
        stats.total_present += summary.present_days
        stats.total_absent += summary.absent_days
        stats.total_leave += summary.leave_days
        stats.total_half_days += summary.half_days
        stats.total_late += summary.late_count
        stats.total_hours += summary.total_worked_hours

    stats.total_hours = round(stats.total_hours, 2)
    if summaries:
        stats.average_attendance = round(
            sum(s.attendance_percentage for s in summaries) / len(summaries), 1
        )
    return stats


def attendance_issues(
    summaries: Sequence[EmployeeSummary],
    threshold: float = 50
) -> List[EmployeeSummary]:
    """Employees below the threshold, lowest percentage first."""
    flagged = [s for s in summaries if s.attendance_percentage < threshold]
    return sorted(flagged, key=lambda s: (s.attendance_percentage, s.name))


def sort_summaries(
    summaries: Sequence[EmployeeSummary],
    sort_by: str = "attendance_percentage"
) -> List[EmployeeSummary]:
    """
    Sort summaries for output.

    Args:
        summaries: Employee summaries
        sort_by: "attendance_percentage" (descending) or "name"

    Returns:
        Sorted list (new list, does not modify original)
    """
    if sort_by == "name":
        return sorted(summaries, key=lambda s: (s.name.lower(), s.cfms_id))
    # Default: higher percentage first, ties by name for stable output
    return sorted(summaries, key=lambda s: (-s.attendance_percentage, s.name.lower()))


def group_by_department(
    summaries: Sequence[EmployeeSummary]
) -> Dict[str, List[EmployeeSummary]]:
    groups: Dict[str, List[EmployeeSummary]] = defaultdict(list)
    for summary in summaries:
        groups[summary.department or "Unknown"].append(summary)
    return dict(groups)
