"""
Calendar Provider Module

Resolves days-in-month, holidays, weekends and working days for a report month.
This is the single place where weekends are computed.
"""

from datetime import date
from typing import Dict, Optional, Set

from config.config_manager import HolidayCalendar, WeekendPolicy, validate_holiday_table
from infrastructure.logger import get_logger

from .exceptions import ConfigError

logger = get_logger("CalendarProvider")

SATURDAY = 5

DAYS_IN_MONTH = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]

ORDINALS = {1: "First", 2: "Second", 3: "Third", 4: "Fourth", 5: "Fifth"}


def is_leap_year(year: int) -> bool:
    """Gregorian rule: divisible by 4, not by 100 unless by 400."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _check_month(year: int, month: int) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ConfigError(f"Invalid month: {month!r} (expected 1-12)")
    if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
        raise ConfigError(f"Invalid year: {year!r}")


def get_days_in_month(year: int, month: int) -> int:
    """
    Get the number of days in a month.

    Raises:
        ConfigError: If month is outside 1-12
    """
    _check_month(year, month)
    if month == 2:
        return 29 if is_leap_year(year) else 28
    return DAYS_IN_MONTH[month - 1]


class CalendarProvider:
    """
    Provides the holiday and working-day sets for a month.

    Pure function of (year, month, holiday table, weekend policy);
    holds no mutable state after construction.
    """

    def __init__(
        self,
        holidays: Optional[HolidayCalendar] = None,
        weekend: Optional[WeekendPolicy] = None
    ):
        """
        Initialize provider.

        Args:
            holidays: Static holiday tables (default: bundled tables)
            weekend: Weekend policy (default: Saturday and Sunday)

        Raises:
            ConfigError: If the holiday table or weekend policy is malformed
        """
        holidays = holidays or HolidayCalendar()
        self._tables = validate_holiday_table(holidays.tables)
        self._weekend = weekend or WeekendPolicy()
        self._weekend_weekdays = frozenset(self._weekend.weekday_numbers())
        self._nth_saturdays = frozenset(int(n) for n in self._weekend.nth_saturdays_off)

    def get_days_in_month(self, year: int, month: int) -> int:
        return get_days_in_month(year, month)

    def _holiday_labels(self, year: int, month: int) -> Dict[int, str]:
        _check_month(year, month)
        labels: Dict[int, str] = {}
        for entry in self._tables.get(year, {}).get(month, []):
            # First entry wins when a day is listed twice
            labels.setdefault(entry.day, entry.label)
        return labels

    def get_holidays(self, year: int, month: int) -> Set[int]:
        """
        Get holiday days of month from the static table.

        Returns:
            Set of day numbers, empty if the year/month has no entries

        Raises:
            ConfigError: If month is outside 1-12
        """
        holidays = set(self._holiday_labels(year, month))
        logger.debug(f"{year}-{month:02d}: {len(holidays)} holidays")
        return holidays

    def get_weekend_days(self, year: int, month: int) -> Set[int]:
        """Get weekend days of month according to the weekend policy."""
        num_days = get_days_in_month(year, month)
        weekend = set()
        saturday_count = 0
        for day in range(1, num_days + 1):
            weekday = date(year, month, day).weekday()
            if weekday == SATURDAY:
                saturday_count += 1
                if saturday_count in self._nth_saturdays:
                    weekend.add(day)
                    continue
            if weekday in self._weekend_weekdays:
                weekend.add(day)
        return weekend

    def get_working_days(self, year: int, month: int) -> Set[int]:
        """
        Get working days: all days of the month minus weekends minus holidays.

        Raises:
            ConfigError: If month is outside 1-12
        """
        num_days = get_days_in_month(year, month)
        excluded = self.get_weekend_days(year, month) | self.get_holidays(year, month)
        working = {day for day in range(1, num_days + 1) if day not in excluded}
        logger.debug(f"{year}-{month:02d}: {len(working)} working days of {num_days}")
        return working

    def is_holiday(self, year: int, month: int, day: int) -> bool:
        return day in self._holiday_labels(year, month)

    def is_working_day(self, year: int, month: int, day: int) -> bool:
        return day in self.get_working_days(year, month)

    def day_label(self, year: int, month: int, day: int) -> str:
        """
        Get a display label for a non-working day.

        Holiday labels take precedence over weekend labels.
        Returns an empty string for working days.
        """
        labels = self._holiday_labels(year, month)
        if day in labels:
            return labels[day]
        if day not in self.get_weekend_days(year, month):
            return ""
        d = date(year, month, day)
        if d.weekday() == SATURDAY and SATURDAY not in self._weekend_weekdays:
            nth = (day - 1) // 7 + 1
            return f"{ORDINALS.get(nth, '')} Saturday".strip()
        return "Weekend"
