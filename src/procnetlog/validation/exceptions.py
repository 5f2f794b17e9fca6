"""
Exception types and error handling helpers.

This module provides the small set of error handling functions used across
procnetlog: consistent logging of handled errors, CLI error exits, and the
exception classes raised by validation and by the syslog transports.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when validation of arguments or configuration fails.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class TransportError(Exception):
    """
    Raised by a syslog transport when a transmission could not be delivered.

    The forwarder catches it and drops the tick's submission.
    """

    def __init__(self, message: str, transport: Optional[str] = None):
        super().__init__(message)
        self.transport = transport


# Log level per severity; DEBUG and CRITICAL entries also carry the traceback.
_SEVERITY_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}
_TRACEBACK_SEVERITIES = (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log a handled error in one consistent format and optionally re-raise it.

    Args:
        error: The exception that occurred
        context: Where it occurred, e.g. "config loading conf/config.toml"
        severity: ErrorSeverity or its string value ("warning", ...)
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())

    detail = str(error)
    if isinstance(error, TransportError) and error.transport:
        detail = f"{detail} (transport: {error.transport})"

    (logger or globals()['logger']).log(
        _SEVERITY_LEVELS[severity],
        f"Error in {context}: {detail}",
        exc_info=severity in _TRACEBACK_SEVERITIES,
    )

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """
    Log an error that ends the command-line run and exit.

    Accepts ``exit_code`` (default 1) and ``severity`` on top of the
    handle_error keywords.
    """
    exit_code = kwargs.pop('exit_code', 1)
    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)
    sys.exit(exit_code)
