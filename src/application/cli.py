"""
Command Line Entry Module

Runs the report pipeline on one punch export.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from application.report_service import AttendanceReportService
from config.config_manager import ConfigManager
from domain.exceptions import AttendanceError
from infrastructure.logger import get_logger

logger = get_logger("CLI")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attendance-report",
        description="Build monthly attendance reports from a punch export."
    )
    parser.add_argument("source", type=Path, help="Excel punch export (.xlsx)")
    parser.add_argument("-o", "--output", type=Path, help="Output Excel path")
    parser.add_argument("-y", "--year", type=int, help="Report year (default: from filename)")
    parser.add_argument("-m", "--month", type=int, help="Report month 1-12 (default: from filename)")
    parser.add_argument("-c", "--config", type=Path, help="Config JSON path")
    parser.add_argument("--no-pdf", action="store_true", help="Skip the PDF summary")
    parser.add_argument(
        "--sort-by",
        choices=["attendance_percentage", "name"],
        help="Row order in the report"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)

    manager = ConfigManager(args.config) if args.config else ConfigManager()
    try:
        config = manager.load()
        params = AttendanceReportService.build_params_from_config(
            config, args.source, args.output, year=args.year, month=args.month
        )
        if args.no_pdf:
            params.generate_pdf = False
        if args.sort_by:
            params.sort_by = args.sort_by

        result = AttendanceReportService(config.attendance).generate_report(params)
    except (AttendanceError, ValueError, OSError) as e:
        logger.error(f"Report generation failed: {e}")
        return 1

    print(f"Report for {result.year}-{result.month:02d}: {result.output_path}")
    if result.pdf_path:
        print(f"PDF summary: {result.pdf_path}")
    print(f"Employees: {result.employee_count}, row warnings: {result.warning_count}")
    if result.failed_names:
        print(f"Failed employees: {', '.join(result.failed_names)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
