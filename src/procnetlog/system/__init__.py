"""
System interaction utilities.

- Command execution with proper error handling and logging
- Environment preflight checks run before a sampling run
"""

from .commands import check_logger_installed, run_command
from .preflight import CheckResult, PreflightChecker, PreflightReport, read_distribution

__all__ = [
    # Commands
    "check_logger_installed",
    "run_command",
    # Preflight
    "CheckResult",
    "PreflightChecker",
    "PreflightReport",
    "read_distribution",
]
