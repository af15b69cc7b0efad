"""
Attendance Report Engine

Converts raw monthly punch exports into attendance summary reports.
"""

import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from application.cli import main


if __name__ == "__main__":
    sys.exit(main())
