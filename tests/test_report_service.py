"""
End-to-end tests for the report service, Excel writer and CLI.
"""

import pytest
from pathlib import Path

from openpyxl import Workbook, load_workbook

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.cli import main
from application.report_service import AttendanceReportService, ReportGenerationParams
from config.config_manager import AppConfig, AttendanceConfig
from domain.entities import CalendarMonth, DailyRecord, EmployeeRecords
from domain.exceptions import ConfigError


def day_headers(days):
    headers = []
    for day in days:
        headers += [f"{day:02d} In", f"{day:02d} Out", f"{day:02d} Status", f"{day:02d} Duration"]
    return headers


def day_cells(kind):
    """Cells for one day of January 2026 (Jan 5-9 are working days)."""
    return {
        "present": ["09:00", "17:00", "P", 8],
        "late": ["09:40", "17:00", "P", 7.3],
        "half": ["09:00", "12:00", "P", 3],
        "leave": [None, None, "CL", None],
        "absent": [None, None, "A", None],
    }[kind]


@pytest.fixture
def source_file(tmp_path):
    """January 2026 punch export for three employees, one without a name."""
    days = [5, 6, 7, 8, 9]
    wb = Workbook()
    ws = wb.active
    ws.append(["Name", "Designation", "CFMS ID", "Emp Type", "Department"] + day_headers(days))

    asha = ["present", "late", "present", "present", "half"]
    ravi = ["absent", "leave", "present", "absent", "absent"]
    for name, cfms, dept, kinds in (
        ("Asha", "C001", "Physics", asha),
        ("Ravi", "C002", "Office", ravi),
    ):
        row = [name, "Lecturer", cfms, "Regular", dept]
        for kind in kinds:
            row += day_cells(kind)
        ws.append(row)
    # Identity present but no name: rejected at aggregation
    ws.append(["", "Clerk", "C003", "Regular", "Office"] + day_cells("present") * 5)

    path = tmp_path / "Attendance_January_2026.xlsx"
    wb.save(path)
    return path


class TestBuildReport:
    """Tests for building a report from parsed employees."""

    def test_build_report(self):
        service = AttendanceReportService(AttendanceConfig())
        calendar = CalendarMonth(2026, 1)
        employees = [
            EmployeeRecords("Asha", "C001", "Physics", [DailyRecord(5, "09:00", "17:00", "P", 480)]),
            EmployeeRecords("Ravi", "C002", "Physics", [DailyRecord(5)]),
            EmployeeRecords("Ghost", "C003", "Physics", []),
        ]

        report = service.build_report(employees, calendar)

        assert [s.name for s in report.summaries] == ["Asha", "Ravi"]
        assert len(report.result.failures) == 1
        assert len(report.days) == 31
        assert report.overall.working_days == 17
        # One present day out of 17 working days is still below the threshold
        assert [s.name for s in report.issues] == ["Ravi", "Asha"]
        assert report.summaries[0].attendance_percentage == 5.88


class TestGenerateReport:
    """Tests for the full parse -> aggregate -> write pipeline."""

    def test_generate_report(self, source_file, tmp_path):
        output_path = tmp_path / "out" / "report.xlsx"
        params = ReportGenerationParams(source_path=source_file, output_path=output_path)

        result = AttendanceReportService().generate_report(params)

        assert result.success
        assert (result.year, result.month) == (2026, 1)
        assert result.employee_count == 2
        assert result.failed_names == ["C003"]
        assert output_path.exists()
        assert result.pdf_path == output_path.with_suffix(".pdf")
        assert result.pdf_path.exists()

        wb = load_workbook(output_path)
        assert wb.sheetnames == ["Summary", "Daily", "Departments", "Warnings"]

        summary = wb["Summary"]
        headers = [c.value for c in summary[1]]
        pct_col = headers.index("Attendance %")
        rows = {row[0].value: row for row in summary.iter_rows(min_row=2)}
        # January 2026 has 17 working days; Asha has 4 present (one late) + 1 half day
        assert rows["Asha"][pct_col].value == 26.47
        assert rows["Ravi"][pct_col].value == 5.88
        assert summary.cell(row=2, column=1).value == "Asha"

        warnings = wb["Warnings"]
        assert warnings.cell(row=2, column=2).value == "C003"

    def test_explicit_month_without_pdf(self, source_file, tmp_path):
        output_path = tmp_path / "report.xlsx"
        params = ReportGenerationParams(
            source_path=source_file,
            output_path=output_path,
            year=2025,
            month=12,
            generate_pdf=False,
            sort_by="name"
        )

        result = AttendanceReportService().generate_report(params)

        assert (result.year, result.month) == (2025, 12)
        assert result.pdf_path is None
        assert not output_path.with_suffix(".pdf").exists()

    def test_month_not_detected(self, source_file, tmp_path):
        renamed = source_file.rename(tmp_path / "punches.xlsx")
        params = ReportGenerationParams(source_path=renamed, output_path=tmp_path / "r.xlsx")

        with pytest.raises(ValueError):
            AttendanceReportService().generate_report(params)

    def test_invalid_month(self, source_file, tmp_path):
        params = ReportGenerationParams(
            source_path=source_file, output_path=tmp_path / "r.xlsx", year=2026, month=13
        )
        with pytest.raises(ConfigError):
            AttendanceReportService().generate_report(params)

    def test_params_from_config(self, source_file):
        params = AttendanceReportService.build_params_from_config(
            AppConfig(), source_file, year=2026, month=1
        )
        assert params.output_path == source_file.parent / "Attendance_2026_01.xlsx"
        assert params.pdf_output_path == source_file.parent / "Attendance_2026_01.pdf"


class TestCli:
    """Tests for the command line entry point."""

    def test_main_success(self, source_file, tmp_path, capsys):
        output_path = tmp_path / "cli.xlsx"
        code = main([str(source_file), "-o", str(output_path), "--no-pdf",
                     "-c", str(tmp_path / "config.json")])

        assert code == 0
        assert output_path.exists()
        assert "Failed employees: C003" in capsys.readouterr().out

    def test_main_missing_file(self, tmp_path):
        code = main([str(tmp_path / "missing_2026-01.xlsx"), "-c", str(tmp_path / "config.json")])
        assert code == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
