"""
Domain Exceptions Module

Error taxonomy for the attendance engine.
Per-row problems are not exceptions; they are collected as RecordWarning values.
"""


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class AttendanceError(Exception):
    """Base exception for attendance-related errors."""
    pass


class ConfigError(AttendanceError):
    """Raised for an invalid month/year or a malformed holiday table."""
    pass


class DataError(AttendanceError):
    """
    Raised when one employee's input is structurally invalid.

    The fan-out collects these per employee so that other employees
    are still processed.
    """
    def __init__(self, message: str, employee_name: str = ""):
        self.employee_name = employee_name
        self.message = message
        super().__init__(message)


class ExcelFormatError(AttendanceError):
    """Raised when the Excel file format is unrecognized or invalid."""
    pass
