"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between configuration objects and JSON persistence.
"""

import json
from calendar import monthrange
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from domain.exceptions import ConfigError
from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")


WEEKDAY_NAMES = [
    "monday", "tuesday", "wednesday", "thursday",
    "friday", "saturday", "sunday",
]


@dataclass
class Thresholds:
    """Shift times and tolerance thresholds used by the status classifier."""
    default_working_hours: float = 8
    late_threshold_minutes: int = 15
    early_departure_minutes: int = 15
    shift_start: str = "09:00"
    shift_end: str = "17:00"


@dataclass
class WeekendPolicy:
    """
    Weekly off days.

    weekend_days holds weekday names; nth_saturdays_off lists Saturdays that
    are off even when Saturday is a working day (e.g. [2] = second Saturday).
    """
    weekend_days: List[str] = field(default_factory=lambda: ["saturday", "sunday"])
    nth_saturdays_off: List[int] = field(default_factory=list)

    def weekday_numbers(self) -> List[int]:
        """Weekend days as date.weekday() numbers (0=Mon, 6=Sun)."""
        numbers = []
        for name in self.weekend_days:
            key = str(name).strip().lower()
            if key not in WEEKDAY_NAMES:
                raise ConfigError(f"Unknown weekday in weekend policy: {name!r}")
            numbers.append(WEEKDAY_NAMES.index(key))
        return numbers


@dataclass
class HolidayEntry:
    """A single configured holiday."""
    day: int
    label: str = "Holiday"
    type: str = "general"


def _entries(*rows) -> List[HolidayEntry]:
    return [HolidayEntry(day, label, kind) for day, label, kind in rows]


# Andhra Pradesh general + optional holidays (G.O. Rt. No.2276 GAD).
# Weekly offs are not listed; they come from WeekendPolicy.
DEFAULT_HOLIDAY_TABLES: Dict[int, Dict[int, List[HolidayEntry]]] = {
    2026: {
        1: _entries(
            (1, "New Year's Day", "optional"),
            (14, "Bhogi", "general"),
            (15, "Makara Sankranti", "general"),
            (16, "Kanuma", "general"),
            (26, "Republic Day", "general"),
        ),
        2: _entries(
            (3, "Shab-E-Barath", "optional"),
            (15, "Maha Sivarathri", "general"),
        ),
        3: _entries(
            (3, "Holi", "general"),
            (11, "Shahadat of Hazrath Ali (R.A.)", "optional"),
            (13, "Jamatul Veda", "optional"),
            (15, "Shab-E-Qadar", "optional"),
            (19, "Ugadi", "general"),
            (20, "Eid-ul-Fitr (Ramzan)", "general"),
            (27, "Sri Rama Navami", "general"),
        ),
        4: _entries(
            (3, "Good Friday", "general"),
            (5, "Babu Jagjivan Ram Birthday", "general"),
            (14, "Dr. B.R. Ambedkar Jayanti", "general"),
            (20, "Basava Jayanti", "optional"),
        ),
        5: _entries(
            (1, "Buddha Purnima", "optional"),
            (27, "Eid-ul-Adha (Bakrid)", "general"),
        ),
        6: _entries(
            (3, "Eid-E-Gadeer", "optional"),
            (16, "Moharram (Optional)", "optional"),
            (25, "Moharram (General)", "general"),
        ),
        7: _entries(
            (16, "Ratha Yatra", "optional"),
        ),
        8: _entries(
            (4, "Arbayein (Chahallum)", "optional"),
            (15, "Independence Day", "general"),
            (21, "Vara Lakshmi Vratham", "general"),
            (25, "Milad-un-Nabi", "general"),
        ),
        9: _entries(
            (4, "Sri Krishna Ashtami", "general"),
            (14, "Vinayaka Chavithi", "general"),
        ),
        10: _entries(
            (2, "Gandhi Jayanti", "general"),
            (10, "Mahalaya Amavasya", "optional"),
            (18, "Durgashtami", "general"),
            (20, "Vijaya Dasami", "general"),
        ),
        11: _entries(
            (8, "Deepavali", "general"),
            (24, "Guru Nanak Jayanti", "optional"),
        ),
        12: _entries(
            (24, "Christmas Eve", "optional"),
            (25, "Christmas", "general"),
            (26, "Boxing Day", "optional"),
        ),
    }
}


@dataclass
class HolidayCalendar:
    """Static holiday tables: year -> month -> entries."""
    tables: Dict[int, Dict[int, List[HolidayEntry]]] = field(
        default_factory=lambda: {
            year: {month: list(entries) for month, entries in months.items()}
            for year, months in DEFAULT_HOLIDAY_TABLES.items()
        }
    )

    def entries_for(self, year: int, month: int) -> List[HolidayEntry]:
        return self.tables.get(year, {}).get(month, [])

    @property
    def available_years(self) -> List[int]:
        return sorted(self.tables.keys(), reverse=True)


@dataclass
class AttendanceConfig:
    """Everything the attendance engine consumes, passed explicitly."""
    thresholds: Thresholds = field(default_factory=Thresholds)
    weekend: WeekendPolicy = field(default_factory=WeekendPolicy)
    holidays: HolidayCalendar = field(default_factory=HolidayCalendar)
    leave_codes: List[str] = field(
        default_factory=lambda: ["L", "CL", "EL", "SL", "ML", "OD"]
    )
    good_threshold: float = 75
    average_threshold: float = 50
    max_workers: int = 4


@dataclass
class OutputSettings:
    """Output settings for generated reports."""
    output_dir: str = ""  # Default empty = next to the source file
    filename_pattern: str = "Attendance_{year}_{month}.xlsx"
    generate_pdf: bool = True
    pdf_filename_pattern: str = "Attendance_{year}_{month}.pdf"
    sort_by: str = "attendance_percentage"  # or "name"


@dataclass
class AppConfig:
    """Main application configuration container."""
    attendance: AttendanceConfig = field(default_factory=AttendanceConfig)
    output_settings: OutputSettings = field(default_factory=OutputSettings)


def validate_holiday_table(tables: Dict) -> Dict[int, Dict[int, List[HolidayEntry]]]:
    """
    Validate and normalize a raw holiday table.

    Accepts string keys (as read from JSON) and entries given either as
    HolidayEntry, dicts with a 'day' key, or bare day numbers.

    Raises:
        ConfigError: If a year/month/day is not an integer or is out of range
    """
    if not isinstance(tables, dict):
        raise ConfigError("Holiday table must be a mapping of year -> month -> days")

    result: Dict[int, Dict[int, List[HolidayEntry]]] = {}
    for year_key, months in tables.items():
        year = _to_int(year_key, "year")
        if not 1 <= year <= 9999:
            raise ConfigError(f"Invalid holiday table year: {year_key!r}")
        if not isinstance(months, dict):
            raise ConfigError(f"Holiday table for {year} must map month -> days")

        result[year] = {}
        for month_key, entries in months.items():
            month = _to_int(month_key, "month")
            if not 1 <= month <= 12:
                raise ConfigError(f"Invalid holiday table month: {month_key!r} ({year})")
            _, num_days = monthrange(year, month)

            normalized = []
            for entry in entries or []:
                holiday = _to_entry(entry)
                if not 1 <= holiday.day <= num_days:
                    raise ConfigError(
                        f"Holiday day {holiday.day} out of range for {year}-{month:02d}"
                    )
                normalized.append(holiday)
            result[year][month] = normalized

    return result


def _to_int(value, what: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid holiday table {what}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid holiday table {what}: {value!r}")


def _to_entry(entry) -> HolidayEntry:
    if isinstance(entry, HolidayEntry):
        return HolidayEntry(_to_int(entry.day, "day"), entry.label, entry.type)
    if isinstance(entry, dict):
        if "day" not in entry:
            raise ConfigError(f"Holiday entry without 'day': {entry!r}")
        return HolidayEntry(
            day=_to_int(entry["day"], "day"),
            label=str(entry.get("label", "Holiday")),
            type=str(entry.get("type", "general")),
        )
    return HolidayEntry(day=_to_int(entry, "day"))


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def load(self) -> AppConfig:
        """
        Load configuration from JSON file.

        Raises:
            ConfigError: If the file is valid JSON but holds a malformed holiday table
        """
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning(f"Failed to load config, using defaults. Error: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.debug(f"Config saved: {self.config_path}")

    def update(self, **kwargs) -> None:
        """Update specific configuration values."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        self.save()

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        attendance = config.attendance
        return {
            "attendance": {
                "thresholds": {
                    "default_working_hours": attendance.thresholds.default_working_hours,
                    "late_threshold_minutes": attendance.thresholds.late_threshold_minutes,
                    "early_departure_minutes": attendance.thresholds.early_departure_minutes,
                    "shift_start": attendance.thresholds.shift_start,
                    "shift_end": attendance.thresholds.shift_end
                },
                "weekend": {
                    "weekend_days": list(attendance.weekend.weekend_days),
                    "nth_saturdays_off": list(attendance.weekend.nth_saturdays_off)
                },
                # JSON object keys must be strings
                "holidays": {
                    str(year): {
                        str(month): [
                            {"day": e.day, "label": e.label, "type": e.type}
                            for e in entries
                        ]
                        for month, entries in months.items()
                    }
                    for year, months in attendance.holidays.tables.items()
                },
                "leave_codes": list(attendance.leave_codes),
                "good_threshold": attendance.good_threshold,
                "average_threshold": attendance.average_threshold,
                "max_workers": attendance.max_workers
            },
            "output_settings": {
                "output_dir": config.output_settings.output_dir,
                "filename_pattern": config.output_settings.filename_pattern,
                "generate_pdf": config.output_settings.generate_pdf,
                "pdf_filename_pattern": config.output_settings.pdf_filename_pattern,
                "sort_by": config.output_settings.sort_by
            }
        }

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        attendance_data = data.get("attendance", {})
        thresholds_data = attendance_data.get("thresholds", {})
        weekend_data = attendance_data.get("weekend", {})
        defaults = AttendanceConfig()

        # Build Thresholds
        thresholds = Thresholds(
            default_working_hours=thresholds_data.get("default_working_hours", 8),
            late_threshold_minutes=thresholds_data.get("late_threshold_minutes", 15),
            early_departure_minutes=thresholds_data.get("early_departure_minutes", 15),
            shift_start=thresholds_data.get("shift_start", "09:00"),
            shift_end=thresholds_data.get("shift_end", "17:00")
        )

        # Build WeekendPolicy
        weekend = WeekendPolicy(
            weekend_days=weekend_data.get("weekend_days", ["saturday", "sunday"]),
            nth_saturdays_off=weekend_data.get("nth_saturdays_off", [])
        )

        # Build HolidayCalendar
        if "holidays" in attendance_data:
            holidays = HolidayCalendar(tables=validate_holiday_table(attendance_data["holidays"]))
        else:
            holidays = defaults.holidays

        attendance = AttendanceConfig(
            thresholds=thresholds,
            weekend=weekend,
            holidays=holidays,
            leave_codes=attendance_data.get("leave_codes", defaults.leave_codes),
            good_threshold=attendance_data.get("good_threshold", 75),
            average_threshold=attendance_data.get("average_threshold", 50),
            max_workers=attendance_data.get("max_workers", 4)
        )

        # Build OutputSettings
        output_settings_data = data.get("output_settings", {})
        output_settings = OutputSettings(
            output_dir=output_settings_data.get("output_dir", ""),
            filename_pattern=output_settings_data.get("filename_pattern", "Attendance_{year}_{month}.xlsx"),
            generate_pdf=output_settings_data.get("generate_pdf", True),
            pdf_filename_pattern=output_settings_data.get("pdf_filename_pattern", "Attendance_{year}_{month}.pdf"),
            sort_by=output_settings_data.get("sort_by", "attendance_percentage")
        )

        return AppConfig(
            attendance=attendance,
            output_settings=output_settings
        )
