"""
Unit tests for PdfWriter.
"""

import pytest
from datetime import time
from pathlib import Path
import tempfile

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.config_manager import AttendanceConfig, HolidayCalendar
from domain.aggregator import AttendanceAggregator
from domain.entities import CalendarMonth, DailyRecord
from domain.statistics import department_stats, overall_stats
from infrastructure.pdf_writer import PdfWriter, format_filename, AttendancePdf


class TestFormatFilename:
    """Tests for format_filename utility function."""

    def test_basic_formatting(self):
        """Test basic year/month formatting."""
        result = format_filename("Report_{year}_{month}.pdf", 2025, 12)
        assert result == "Report_2025_12.pdf"

    def test_month_padding(self):
        """Test that month is zero-padded."""
        result = format_filename("Report_{year}_{month}.pdf", 2025, 1)
        assert result == "Report_2025_01.pdf"


class TestAttendancePdf:
    """Tests for AttendancePdf class."""

    def test_initialization(self):
        """Test AttendancePdf initialization."""
        pdf = AttendancePdf(title="Test Report")
        assert pdf.title_text == "Test Report"
        assert pdf.font_family_name == "Helvetica"
        assert pdf.has_custom_font is False

    def test_missing_custom_font_falls_back(self):
        pdf = AttendancePdf(title="Test", custom_font_path="/nonexistent/font.ttf")
        assert pdf.font_family_name == "Helvetica"

    def test_safe_text_replaces_unencodable(self):
        pdf = AttendancePdf(title="Test")
        assert pdf.safe_text("Asha") == "Asha"
        assert pdf.safe_text("రవి") == "???"


class TestPdfWriter:
    """Tests for PdfWriter class."""

    @pytest.fixture
    def summaries(self):
        aggregator = AttendanceAggregator(AttendanceConfig(holidays=HolidayCalendar(tables={})))
        calendar = CalendarMonth(2025, 2)
        present = [
            DailyRecord(day=d, in_time=time(9, 0), out_time=time(17, 0), duration_minutes=480)
            for d in (3, 4, 5)
        ]
        return [
            aggregator.aggregate("Asha", "C001", "Physics", present, calendar),
            aggregator.aggregate("రవి", "C002", "Maths", [DailyRecord(day=3)], calendar),
        ]

    def test_create_report_empty_list(self):
        """Test that an empty summary list returns early."""
        writer = PdfWriter()

        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "test.pdf"

            # Should not raise, should return early
            writer.create_report([], 2025, 2, output_path)

            # File should not exist
            assert not output_path.exists()

    def test_create_report_generates_file(self, summaries):
        """Test that create_report generates a PDF file."""
        writer = PdfWriter()
        provider = AttendanceAggregator(
            AttendanceConfig(holidays=HolidayCalendar(tables={}))
        ).calendar_provider

        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "output" / "test.pdf"

            writer.create_report(
                summaries, 2025, 2, output_path,
                overall=overall_stats(summaries, CalendarMonth(2025, 2), provider),
                departments=department_stats(summaries)
            )

            assert output_path.exists()
            assert output_path.stat().st_size > 0

    def test_many_rows_paginate(self, summaries):
        writer = PdfWriter()

        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "long.pdf"
            writer.create_report(summaries * 40, 2025, 2, output_path)

            assert output_path.exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
