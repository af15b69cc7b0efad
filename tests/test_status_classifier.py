"""
Unit tests for StatusClassifier.
"""

import pytest
from datetime import time
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.config_manager import Thresholds
from domain.entities import AttendanceStatus, DailyRecord
from domain.exceptions import ConfigError
from domain.status_classifier import StatusClassifier


@pytest.fixture
def classifier():
    """Default shift 09:00-17:00, 15 minute tolerances, 8 hour day."""
    return StatusClassifier()


def record(day=2, in_time=None, out_time=None, raw_status="", duration=None):
    return DailyRecord(
        day=day,
        in_time=in_time,
        out_time=out_time,
        raw_status=raw_status,
        duration_minutes=duration,
    )


class TestDetermineStatus:
    """Tests for the status precedence rules."""

    def test_holiday_wins_over_punches(self, classifier):
        r = record(in_time=time(9, 0), out_time=time(17, 0), raw_status="P", duration=480)
        assert classifier.determine_status(r, is_holiday=True, is_working_day=False) == AttendanceStatus.HOLIDAY

    def test_holiday_wins_over_leave(self, classifier):
        r = record(raw_status="CL")
        assert classifier.determine_status(r, True, False) == AttendanceStatus.HOLIDAY

    def test_leave_code(self, classifier):
        r = record(raw_status="CL")
        assert classifier.determine_status(r, False, True) == AttendanceStatus.LEAVE

    def test_leave_code_case_insensitive(self, classifier):
        r = record(raw_status=" sl ")
        assert classifier.determine_status(r, False, True) == AttendanceStatus.LEAVE

    def test_leave_on_weekend(self, classifier):
        """An explicit leave code applies even on a non-working day."""
        r = record(raw_status="L")
        assert classifier.determine_status(r, False, False) == AttendanceStatus.LEAVE

    def test_weekend_defaults_to_holiday(self, classifier):
        r = record(in_time=time(9, 0), out_time=time(13, 0))
        assert classifier.determine_status(r, False, False) == AttendanceStatus.HOLIDAY

    def test_no_punches_is_absent(self, classifier):
        assert classifier.determine_status(record(), False, True) == AttendanceStatus.ABSENT

    def test_absent_code_without_punches(self, classifier):
        assert classifier.determine_status(record(raw_status="A"), False, True) == AttendanceStatus.ABSENT

    def test_short_duration_is_half_day(self, classifier):
        r = record(in_time=time(9, 0), out_time=time(12, 20), duration=200)
        assert classifier.determine_status(r, False, True) == AttendanceStatus.HALF_DAY

    def test_duration_at_half_threshold_is_present(self, classifier):
        """Exactly half the working day (240 minutes) is not a half day."""
        r = record(in_time=time(9, 0), out_time=time(13, 0), duration=240)
        assert classifier.determine_status(r, False, True) == AttendanceStatus.PRESENT

    def test_punch_without_duration_is_present(self, classifier):
        r = record(in_time=time(9, 0))
        assert classifier.determine_status(r, False, True) == AttendanceStatus.PRESENT

    def test_custom_leave_codes(self):
        classifier = StatusClassifier(leave_codes=["WFH"])
        assert classifier.determine_status(record(raw_status="wfh"), False, True) == AttendanceStatus.LEAVE
        assert classifier.determine_status(record(raw_status="CL"), False, True) == AttendanceStatus.ABSENT


class TestClassify:
    """Tests for late/early flags and worked minutes."""

    def test_on_time_present(self, classifier):
        day = classifier.classify(record(in_time=time(9, 0), out_time=time(17, 0)), False, True)

        assert day.status == AttendanceStatus.PRESENT
        assert day.is_late is False
        assert day.is_early_departure is False
        assert day.worked_minutes == 480

    def test_late_overrides_present_for_display(self, classifier):
        day = classifier.classify(record(in_time=time(9, 30), out_time=time(17, 30)), False, True)

        assert day.status == AttendanceStatus.LATE
        assert day.counted_status == AttendanceStatus.PRESENT
        assert day.is_late is True

    def test_late_threshold_is_exclusive(self, classifier):
        day = classifier.classify(record(in_time=time(9, 15), out_time=time(17, 0)), False, True)
        assert day.status == AttendanceStatus.PRESENT
        assert day.is_late is False

    def test_half_day_stays_half_day_when_late(self, classifier):
        day = classifier.classify(
            record(in_time=time(13, 0), out_time=time(16, 0), duration=180), False, True
        )
        assert day.status == AttendanceStatus.HALF_DAY
        assert day.is_late is True

    def test_early_departure(self, classifier):
        day = classifier.classify(record(in_time=time(9, 0), out_time=time(16, 30)), False, True)
        assert day.status == AttendanceStatus.PRESENT
        assert day.is_early_departure is True

    def test_duration_preferred_over_span(self, classifier):
        day = classifier.classify(
            record(in_time=time(9, 0), out_time=time(17, 0), duration=450), False, True
        )
        assert day.worked_minutes == 450

    def test_single_punch_credits_default_day(self, classifier):
        day = classifier.classify(record(in_time=time(9, 0)), False, True)
        assert day.worked_minutes == 480

    def test_non_worked_statuses_earn_nothing(self, classifier):
        punched = record(in_time=time(9, 0), out_time=time(17, 0), duration=480)
        assert classifier.classify(punched, True, False).worked_minutes == 0
        assert classifier.classify(record(raw_status="CL"), False, True).worked_minutes == 0
        assert classifier.classify(record(), False, True).worked_minutes == 0

    def test_custom_thresholds(self):
        classifier = StatusClassifier(Thresholds(
            default_working_hours=6,
            late_threshold_minutes=0,
            shift_start="08:00",
            shift_end="14:00"
        ))
        day = classifier.classify(
            record(in_time=time(8, 1), out_time=time(14, 0), duration=170), False, True
        )
        assert day.status == AttendanceStatus.HALF_DAY
        assert day.is_late is True


class TestConfiguration:
    """Tests for classifier construction."""

    def test_invalid_shift_time(self):
        with pytest.raises(ConfigError):
            StatusClassifier(Thresholds(shift_start="9am"))

    def test_is_leave_code_blank(self, classifier):
        assert classifier.is_leave_code("") is False
        assert classifier.is_leave_code(None) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
