"""
Status Classifier Module

Determines the normalized attendance status of a single day
from its raw punch data and the calendar.
"""

from datetime import time
from typing import Iterable, Optional

from config.config_manager import Thresholds

from .entities import AttendanceStatus, ClassifiedDay, DailyRecord
from .exceptions import ConfigError
from .time_utils import add_minutes, minutes_between, parse_time


DEFAULT_LEAVE_CODES = ("L", "CL", "EL", "SL", "ML", "OD")

WORKED_STATUSES = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.LATE,
    AttendanceStatus.HALF_DAY,
)


class StatusClassifier:
    """
    Classifies one day's record.

    Rules (first match wins):
    - Holiday if the calendar says so, regardless of punches
    - Leave if the raw status is a leave code
    - Holiday if the day is not a working day (weekend display)
    - Absent if neither in-time nor out-time was punched
    - Half day if the duration is under half the working day
    - Present otherwise, shown as Late when the check-in was late

    Records are expected to hold typed values (time / minutes);
    the aggregator normalizes raw cells before calling classify().
    """

    def __init__(
        self,
        thresholds: Optional[Thresholds] = None,
        leave_codes: Optional[Iterable[str]] = None
    ):
        """
        Initialize classifier.

        Raises:
            ConfigError: If shift times are not HH:MM
        """
        self.thresholds = thresholds or Thresholds()
        codes = DEFAULT_LEAVE_CODES if leave_codes is None else leave_codes
        self.leave_codes = frozenset(code.strip().upper() for code in codes)

        try:
            shift_start = parse_time(self.thresholds.shift_start)
            shift_end = parse_time(self.thresholds.shift_end)
        except ValueError as e:
            raise ConfigError(str(e))

        self._late_after = add_minutes(shift_start, self.thresholds.late_threshold_minutes)
        self._early_before = add_minutes(shift_end, -self.thresholds.early_departure_minutes)
        self._half_day_minutes = self.thresholds.default_working_hours * 60 / 2

    def classify(
        self,
        record: DailyRecord,
        is_holiday: bool,
        is_working_day: bool
    ) -> ClassifiedDay:
        """
        Classify a single day.

        Args:
            record: The day's record with typed in/out times and duration
            is_holiday: Day is in the holiday table
            is_working_day: Day is a working day

        Returns:
            ClassifiedDay with display status, flags and worked minutes
        """
        status = self.determine_status(record, is_holiday, is_working_day)
        is_late = self.is_late(record)

        if status == AttendanceStatus.PRESENT and is_late:
            status = AttendanceStatus.LATE

        return ClassifiedDay(
            day=record.day,
            status=status,
            is_late=is_late,
            is_early_departure=self.is_early_departure(record),
            worked_minutes=self.worked_minutes(record, status),
        )

    def determine_status(
        self,
        record: DailyRecord,
        is_holiday: bool,
        is_working_day: bool
    ) -> AttendanceStatus:
        """Determine the counted status (never LATE)."""
        if is_holiday:
            return AttendanceStatus.HOLIDAY

        if self.is_leave_code(record.raw_status):
            return AttendanceStatus.LEAVE

        if not is_working_day:
            return AttendanceStatus.HOLIDAY

        if record.in_time is None and record.out_time is None:
            return AttendanceStatus.ABSENT

        if (
            record.duration_minutes is not None
            and record.duration_minutes < self._half_day_minutes
        ):
            return AttendanceStatus.HALF_DAY

        return AttendanceStatus.PRESENT

    def is_leave_code(self, raw_status: Optional[str]) -> bool:
        if not raw_status:
            return False
        return str(raw_status).strip().upper() in self.leave_codes

    def is_late(self, record: DailyRecord) -> bool:
        return isinstance(record.in_time, time) and record.in_time > self._late_after

    def is_early_departure(self, record: DailyRecord) -> bool:
        return isinstance(record.out_time, time) and record.out_time < self._early_before

    def worked_minutes(self, record: DailyRecord, status: AttendanceStatus) -> float:
        """
        Minutes credited for a day.

        Only worked statuses earn minutes. A single punch is credited
        with the default working day.
        """
        if status not in WORKED_STATUSES:
            return 0.0
        if record.duration_minutes is not None:
            return float(record.duration_minutes)
        if record.in_time is not None and record.out_time is not None:
            return minutes_between(record.in_time, record.out_time)
        if record.in_time is not None or record.out_time is not None:
            return float(self.thresholds.default_working_hours * 60)
        return 0.0
