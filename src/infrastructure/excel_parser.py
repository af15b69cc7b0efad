"""
Excel Parser Module

Handles parsing raw attendance punch exports into EmployeeRecords.
Cell values are passed through mostly untouched; the aggregator
normalizes and validates times and durations.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from domain.entities import DailyRecord, EmployeeRecords
from domain.exceptions import ExcelFormatError
from infrastructure.logger import get_logger

logger = get_logger("ExcelParser")


# Day header like "01 In", "1-Out", "01Status", "07 Duration" or bare "01"
DAY_HEADER_PATTERN = re.compile(
    r'^(\d{1,2})\s*[-_ ]?\s*(in|out|status|duration)?(?:\s*time)?$',
    re.IGNORECASE
)

DAY_FIELDS = ("in", "out", "status", "duration")


class ExcelParser:
    """
    Parses monthly punch sheets.

    Expected format (one row per employee):
    - Name, Designation, CFMS ID, Emp Type (first four columns by default)
    - Optional Department column anywhere
    - Four columns per day: DD In, DD Out, DD Status, DD Duration
    """

    # Maximum rows to search for header
    MAX_HEADER_SEARCH_ROWS = 15

    IDENTITY_KEYWORDS = {
        "cfms_id": ["cfms", "emp id", "employee id"],
        "name": ["name"],
        "designation": ["designation"],
        "emp_type": ["emp type", "emptype", "employee type"],
        "department": ["department", "dept"],
    }

    # Positional fallback matching the punch export layout
    DEFAULT_IDENTITY_COLUMNS = {"name": 0, "designation": 1, "cfms_id": 2, "emp_type": 3}

    def __init__(self):
        self._employees: List[EmployeeRecords] = []
        self._days_in_sheet = 0

    @property
    def days_in_sheet(self) -> int:
        """Highest day number found in the last parsed file."""
        return self._days_in_sheet

    def parse_file(self, file_path: Path) -> List[EmployeeRecords]:
        """
        Parse an Excel file and extract employees with daily records.

        Args:
            file_path: Path to the Excel file

        Returns:
            List of EmployeeRecords in sheet order

        Raises:
            FileNotFoundError: If the file does not exist
            ExcelFormatError: If no worksheet has recognizable day columns
        """
        self._employees = []
        self._days_in_sheet = 0

        if not file_path.exists():
            raise FileNotFoundError(f"Source file not found: {file_path}")

        logger.info(f"Parsing Excel file: {file_path.name}")

        wb = load_workbook(file_path, data_only=True)
        try:
            format_errors = []
            for ws in wb.worksheets:
                try:
                    self._employees.extend(self._parse_worksheet(ws))
                except ExcelFormatError as e:
                    format_errors.append(str(e))
                    logger.warning(f"Skipping worksheet '{ws.title}': {e}")
        finally:
            wb.close()

        if not self._employees and format_errors:
            raise ExcelFormatError("; ".join(format_errors))

        logger.info(
            f"Parsed {len(self._employees)} employees, "
            f"{self._days_in_sheet} day columns"
        )
        return self._employees

    def _parse_worksheet(self, ws: Worksheet) -> List[EmployeeRecords]:
        """Parse one worksheet."""
        rows = [list(row) for row in ws.iter_rows(values_only=True)]
        return self.parse_rows(rows, sheet_name=ws.title)

    def parse_rows(self, rows: Sequence[Sequence], sheet_name: str = "") -> List[EmployeeRecords]:
        """
        Parse already-read rows (header row first).

        Raises:
            ExcelFormatError: If no day columns are found
        """
        header_idx = self._find_header_row(rows)
        if header_idx is None:
            raise ExcelFormatError(
                f"No day columns (e.g. '01 In') found in the first "
                f"{self.MAX_HEADER_SEARCH_ROWS} rows of '{sheet_name}'"
            )

        header = [self._cell_text(v) for v in rows[header_idx]]
        day_columns = self._map_day_columns(header)
        identity = self._map_identity_columns(header, day_columns)
        self._days_in_sheet = max(self._days_in_sheet, max(day_columns))

        logger.debug(
            f"Worksheet '{sheet_name}': header row={header_idx + 1}, "
            f"{len(day_columns)} days, identity columns={identity}"
        )

        employees = []
        for row_idx in range(header_idx + 1, len(rows)):
            row = rows[row_idx]
            name = self._get(row, identity.get("name"))
            cfms_id = self._get(row, identity.get("cfms_id"))
            if not name and not cfms_id:
                continue

            records = []
            for day in sorted(day_columns):
                cols = day_columns[day]
                records.append(DailyRecord(
                    day=day,
                    in_time=self._raw(row, cols.get("in")),
                    out_time=self._raw(row, cols.get("out")),
                    raw_status=self._get(row, cols.get("status")),
                    duration_minutes=self._duration(self._raw(row, cols.get("duration"))),
                ))

            employees.append(EmployeeRecords(
                name=name,
                cfms_id=cfms_id,
                department=self._get(row, identity.get("department")) or "N/A",
                records=records,
                designation=self._get(row, identity.get("designation")),
                emp_type=self._get(row, identity.get("emp_type")),
            ))

        return employees

    def _find_header_row(self, rows: Sequence[Sequence]) -> Optional[int]:
        for idx, row in enumerate(rows[:self.MAX_HEADER_SEARCH_ROWS]):
            if any(DAY_HEADER_PATTERN.match(self._cell_text(v)) for v in row):
                texts = [self._cell_text(v).lower() for v in row]
                if any("name" in t for t in texts) or idx == 0:
                    return idx
        return None

    def _map_day_columns(self, header: List[str]) -> Dict[int, Dict[str, int]]:
        """Map day number -> {'in': col, 'out': col, 'status': col, 'duration': col}."""
        day_columns: Dict[int, Dict[str, int]] = {}
        for col, text in enumerate(header):
            match = DAY_HEADER_PATTERN.match(text)
            if not match:
                continue
            day = int(match.group(1))
            if not 1 <= day <= 31:
                continue
            kind = (match.group(2) or "").lower()
            cols = day_columns.setdefault(day, {})
            if kind:
                cols.setdefault(kind, col)
            elif not cols:
                # Bare day header: the four fields follow in order
                for offset, field_name in enumerate(DAY_FIELDS):
                    cols[field_name] = col + offset
        return day_columns

    def _map_identity_columns(
        self,
        header: List[str],
        day_columns: Dict[int, Dict[str, int]]
    ) -> Dict[str, int]:
        used = {c for cols in day_columns.values() for c in cols.values()}
        identity: Dict[str, int] = {}
        for col, text in enumerate(header):
            if col in used:
                continue
            lower = text.lower()
            for key, keywords in self.IDENTITY_KEYWORDS.items():
                if key not in identity and any(k in lower for k in keywords):
                    identity[key] = col
                    break
        for key, col in self.DEFAULT_IDENTITY_COLUMNS.items():
            if key not in identity and col not in used and col not in identity.values():
                identity[key] = col
        return identity

    @staticmethod
    def _cell_text(value) -> str:
        return "" if value is None else str(value).strip()

    @staticmethod
    def _raw(row: Sequence, col: Optional[int]):
        if col is None or col >= len(row):
            return None
        value = row[col]
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def _get(self, row: Sequence, col: Optional[int]) -> str:
        return self._cell_text(self._raw(row, col))

    @staticmethod
    def _duration(value):
        """Duration cells in the export hold hours; convert plain numbers to minutes."""
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value * 60
        if isinstance(value, str):
            try:
                return float(value.strip()) * 60
            except ValueError:
                return value
        return value
