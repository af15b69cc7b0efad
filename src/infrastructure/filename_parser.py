"""
Filename Parser Module

Detects the report year and month from an uploaded file name.
"""

import re
from typing import Optional, Tuple

MONTH_NAMES = [
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december'
]


class FilenameParser:
    """
    Parses attendance export filenames.

    Recognized forms (case-insensitive):
    - Month names or abbreviations: "Attendance_November_2025.xlsx", "jan-26.xlsx"
    - Numeric: "2025-11", "2025_11", "11-2025"
    """

    # Longest names first so "june" is not matched as "jun" + "e"
    MONTH_PATTERN = re.compile(
        r'(?<![a-z])(' + '|'.join(
            sorted(MONTH_NAMES + [m[:3] for m in MONTH_NAMES] + ['sept'], key=len, reverse=True)
        ) + r')(?![a-z])',
        re.IGNORECASE
    )
    YEAR_PATTERN = re.compile(r'(?<!\d)(20\d{2})(?!\d)')
    YEAR_MONTH_PATTERN = re.compile(r'(?<!\d)(20\d{2})[-_.](\d{1,2})(?!\d)')
    MONTH_YEAR_PATTERN = re.compile(r'(?<!\d)(\d{1,2})[-_.](20\d{2})(?!\d)')
    SHORT_YEAR_PATTERN = re.compile(r'[-_ ](\d{2})(?!\d)')

    @classmethod
    def parse_report_month(cls, filename: str) -> Tuple[Optional[int], int]:
        """
        Parse (year, month) from a filename.

        Args:
            filename: The filename to parse

        Returns:
            Tuple of (year or None, month)

        Raises:
            ValueError: If no month can be detected
        """
        match = cls.YEAR_MONTH_PATTERN.search(filename)
        if match and 1 <= int(match.group(2)) <= 12:
            return int(match.group(1)), int(match.group(2))

        match = cls.MONTH_YEAR_PATTERN.search(filename)
        if match and 1 <= int(match.group(1)) <= 12:
            return int(match.group(2)), int(match.group(1))

        match = cls.MONTH_PATTERN.search(filename)
        if not match:
            raise ValueError(f"No month found in filename: {filename}")

        name = match.group(1).lower()
        month = next(i for i, m in enumerate(MONTH_NAMES, start=1) if m.startswith(name[:3]))

        year = None
        year_match = cls.YEAR_PATTERN.search(filename)
        if year_match:
            year = int(year_match.group(1))
        else:
            rest = filename[match.end():]
            short = cls.SHORT_YEAR_PATTERN.match(rest)
            if short:
                year = 2000 + int(short.group(1))

        return year, month

    @classmethod
    def try_parse_report_month(cls, filename: str) -> Optional[Tuple[Optional[int], int]]:
        """
        Try to parse (year, month) from filename, returning None on failure.
        """
        try:
            return cls.parse_report_month(filename)
        except ValueError:
            return None
