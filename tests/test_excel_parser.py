"""
Unit tests for ExcelParser using workbooks built with openpyxl.
"""

import pytest
from pathlib import Path

from openpyxl import Workbook

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.exceptions import ExcelFormatError
from infrastructure.excel_parser import ExcelParser


def day_headers(days):
    headers = []
    for day in days:
        headers += [f"{day:02d} In", f"{day:02d} Out", f"{day:02d} Status", f"{day:02d} Duration"]
    return headers


def save_workbook(path: Path, rows, title="Sheet1"):
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


class TestParseRows:
    """Tests for header detection and row mapping."""

    def test_labeled_day_columns(self):
        rows = [
            ["Name", "Designation", "CFMS ID", "Emp Type", "Department"] + day_headers([1, 2]),
            ["Asha", "Lecturer", "C001", "Regular", "Physics",
             "09:00", "17:00", "P", 8, None, None, "CL", None],
        ]
        employees = ExcelParser().parse_rows(rows)

        assert len(employees) == 1
        emp = employees[0]
        assert emp.name == "Asha"
        assert emp.cfms_id == "C001"
        assert emp.designation == "Lecturer"
        assert emp.department == "Physics"
        assert [r.day for r in emp.records] == [1, 2]
        assert emp.records[0].in_time == "09:00"
        assert emp.records[0].raw_status == "P"
        assert emp.records[0].duration_minutes == 480
        assert emp.records[1].in_time is None
        assert emp.records[1].raw_status == "CL"

    def test_bare_day_headers(self):
        """A bare "01" header is followed by its in/out/status/duration cells."""
        rows = [
            ["Name", "Designation", "CFMS ID", "Emp Type", "01", None, None, None, "02", None, None, None],
            ["Ravi", "Clerk", "C002", "Contract", "09:30", "17:00", "P", "7.5", "", "", "A", ""],
        ]
        employees = ExcelParser().parse_rows(rows)

        emp = employees[0]
        assert emp.department == "N/A"
        assert emp.records[0].out_time == "17:00"
        assert emp.records[0].duration_minutes == 450
        assert emp.records[1].in_time is None
        assert emp.records[1].raw_status == "A"

    def test_header_after_title_rows(self):
        rows = [
            ["Attendance Report November 2025"],
            [],
            ["Name", "Designation", "CFMS ID", "Emp Type"] + day_headers([1]),
            ["Asha", "Lecturer", "C001", "Regular", "09:00", "17:00", "P", 8],
        ]
        employees = ExcelParser().parse_rows(rows)
        assert [e.name for e in employees] == ["Asha"]

    def test_blank_rows_skipped(self):
        rows = [
            ["Name", "Designation", "CFMS ID", "Emp Type"] + day_headers([1]),
            [None, None, None, None, None, None, None, None],
            ["", "Lecturer", "C005", "", "09:00", "17:00", "P", 8],
        ]
        employees = ExcelParser().parse_rows(rows)

        assert len(employees) == 1
        assert employees[0].name == ""
        assert employees[0].cfms_id == "C005"

    def test_no_day_columns(self):
        with pytest.raises(ExcelFormatError):
            ExcelParser().parse_rows([["Name", "CFMS ID"], ["Asha", "C001"]], "Sheet1")

    def test_unreadable_duration_kept_raw(self):
        rows = [
            ["Name", "Designation", "CFMS ID", "Emp Type"] + day_headers([1]),
            ["Asha", "Lecturer", "C001", "Regular", "09:00", "17:00", "P", "8:00"],
        ]
        employees = ExcelParser().parse_rows(rows)
        assert employees[0].records[0].duration_minutes == "8:00"


class TestParseFile:
    """Tests for reading workbooks from disk."""

    def test_parse_file(self, tmp_path):
        path = save_workbook(tmp_path / "Attendance_January_2026.xlsx", [
            ["Name", "Designation", "CFMS ID", "Emp Type", "Department"] + day_headers([1, 2, 3]),
            ["Asha", "Lecturer", "C001", "Regular", "Physics",
             None, None, "", None, "09:00", "17:00", "P", 8, "09:30", "17:00", "P", 7.5],
            ["Ravi", "Clerk", "C002", "Contract", "Office",
             None, None, "", None, None, None, "CL", None, "09:00", "13:00", "P", 4],
        ])
        parser = ExcelParser()
        employees = parser.parse_file(path)

        assert [e.cfms_id for e in employees] == ["C001", "C002"]
        assert parser.days_in_sheet == 3
        assert employees[1].records[1].raw_status == "CL"
        assert employees[1].records[2].duration_minutes == 240

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ExcelParser().parse_file(tmp_path / "missing.xlsx")

    def test_file_without_day_columns(self, tmp_path):
        path = save_workbook(tmp_path / "bad.xlsx", [["Name", "CFMS ID"], ["Asha", "C001"]])
        with pytest.raises(ExcelFormatError):
            ExcelParser().parse_file(path)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
