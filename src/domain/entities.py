"""
Domain Entities Module

Core domain entities using dataclasses for the attendance engine.
These entities represent the core business concepts independent of infrastructure.
"""

from dataclasses import dataclass, field
from datetime import time
from enum import Enum, auto
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .exceptions import ConfigError


class AttendanceStatus(Enum):
    """Normalized status of attendance for a given day (value = display code)."""
    PRESENT = "P"
    ABSENT = "A"
    LEAVE = "L"
    HOLIDAY = "H"
    HALF_DAY = "HD"
    LATE = "Late"  # Display only, counted as PRESENT


# Statuses that appear in EmployeeSummary.counts (LATE folds into PRESENT)
COUNTED_STATUSES: Tuple[AttendanceStatus, ...] = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.ABSENT,
    AttendanceStatus.LEAVE,
    AttendanceStatus.HOLIDAY,
    AttendanceStatus.HALF_DAY,
)

# Contribution of each counted status to the present-equivalent total
PRESENT_WEIGHTS: Dict[AttendanceStatus, float] = {
    AttendanceStatus.PRESENT: 1.0,
    AttendanceStatus.HALF_DAY: 0.5,
}


class RatingTier(Enum):
    """Rating tier for attendance percentage display."""
    GOOD = auto()     # >= good threshold (default 75%)
    AVERAGE = auto()  # >= average threshold (default 50%)
    POOR = auto()


@dataclass(frozen=True)
class CalendarMonth:
    """
    A report period.

    Attributes:
        year: Four-digit year
        month: Month (1-12)
    """
    year: int
    month: int

    def __post_init__(self):
        if not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise ConfigError(f"Invalid month: {self.month!r} (expected 1-12)")
        if not isinstance(self.year, int) or not 1 <= self.year <= 9999:
            raise ConfigError(f"Invalid year: {self.year!r}")


# Raw cell values are passed through untouched by the ingestion layer and
# normalized by the aggregator.
TimeValue = Union[time, str, float, int, None]
DurationValue = Union[float, int, str, None]


@dataclass(frozen=True)
class DailyRecord:
    """
    One day's raw punch data for an employee.

    Attributes:
        day: Day of month
        in_time: Check-in time (None if not recorded)
        out_time: Check-out time (None if not recorded)
        raw_status: Status code as exported (e.g. 'P', 'A', 'CL')
        duration_minutes: Worked duration in minutes (None if not recorded)
    """
    day: int
    in_time: TimeValue = None
    out_time: TimeValue = None
    raw_status: str = ""
    duration_minutes: DurationValue = None


@dataclass(frozen=True)
class ClassifiedDay:
    """
    Normalized result for one day.

    Attributes:
        day: Day of month
        status: Display status (LATE overrides PRESENT)
        is_late: Check-in after shift start + late threshold
        is_early_departure: Check-out before shift end - early threshold
        worked_minutes: Minutes credited as worked
        label: Holiday/weekend label for display, empty otherwise
    """
    day: int
    status: AttendanceStatus
    is_late: bool = False
    is_early_departure: bool = False
    worked_minutes: float = 0.0
    label: str = ""

    @property
    def counted_status(self) -> AttendanceStatus:
        """Status used for counts and percentage math."""
        if self.status == AttendanceStatus.LATE:
            return AttendanceStatus.PRESENT
        return self.status


@dataclass(frozen=True)
class RecordWarning:
    """A non-fatal problem with a single day's record."""
    day: int
    message: str

    def __str__(self) -> str:
        return f"day {self.day}: {self.message}"


@dataclass
class EmployeeRecords:
    """
    Identity plus raw daily records for one employee, as handed over
    by the ingestion layer.
    """
    name: str
    cfms_id: str
    department: str
    records: List[DailyRecord] = field(default_factory=list)
    designation: str = ""
    emp_type: str = ""


@dataclass(frozen=True)
class EmployeeSummary:
    """
    Aggregated attendance for one employee over one period.

    Attributes:
        name: Employee name
        cfms_id: CFMS employee identifier
        department: Department name
        year: Report year
        month: Report month
        daily: Classified days in ascending day order
        counts: Counted status -> number of days (read-only)
        working_days: Working days in the month per the calendar
        present_equivalent: Present days + 0.5 per half-day
        total_worked_hours: Sum of worked minutes / 60
        attendance_percentage: 100 * present_equivalent / working_days
        late_count: Worked days with a late check-in
        early_departure_count: Worked days with an early check-out
        rating: Rating tier for display
        warnings: Non-fatal per-day problems
    """
    name: str
    cfms_id: str
    department: str
    year: int
    month: int
    daily: Tuple[ClassifiedDay, ...]
    counts: Mapping[AttendanceStatus, int]
    working_days: int
    present_equivalent: float
    total_worked_hours: float
    attendance_percentage: float
    late_count: int = 0
    early_departure_count: int = 0
    rating: RatingTier = RatingTier.POOR
    warnings: Tuple[RecordWarning, ...] = ()

    @property
    def present_days(self) -> int:
        return self.counts.get(AttendanceStatus.PRESENT, 0)

    @property
    def absent_days(self) -> int:
        return self.counts.get(AttendanceStatus.ABSENT, 0)

    @property
    def leave_days(self) -> int:
        return self.counts.get(AttendanceStatus.LEAVE, 0)

    @property
    def holiday_days(self) -> int:
        return self.counts.get(AttendanceStatus.HOLIDAY, 0)

    @property
    def half_days(self) -> int:
        return self.counts.get(AttendanceStatus.HALF_DAY, 0)

    def day(self, day: int) -> Optional[ClassifiedDay]:
        """Get the classified day for a day of month, if considered."""
        for classified in self.daily:
            if classified.day == day:
                return classified
        return None


@dataclass(frozen=True)
class EmployeeFailure:
    """One employee whose aggregation failed with a DataError."""
    name: str
    cfms_id: str
    message: str


@dataclass(frozen=True)
class AggregationResult:
    """Fan-in of a multi-employee aggregation."""
    summaries: Tuple[EmployeeSummary, ...]
    failures: Tuple[EmployeeFailure, ...] = ()

    @property
    def warning_count(self) -> int:
        return sum(len(s.warnings) for s in self.summaries)
