"""
Syslog transports.

A transport takes the lines of one transmission and delivers them to the
system log under a fixed tag, raising TransportError when delivery fails.

- SocketTransport talks to the syslog socket directly through
  logging.handlers.SysLogHandler, one syslog message per line (split when a
  line exceeds the configured message size).
- LoggerCommandTransport pipes the lines into the logger(1) utility, which
  also logs one message per input line.
"""

import logging
import logging.handlers
import sys
from abc import ABC, abstractmethod
from typing import List

from ..system.commands import run_command
from ..validation import TransportError
from .address import parse_syslog_address

logger = logging.getLogger(__name__)

LOGGER_COMMAND_TIMEOUT = 10.0
DEFAULT_MAX_MESSAGE_SIZE = 8192


def split_message(text: str, limit: int) -> List[str]:
    """
    Split text into pieces of at most ``limit`` UTF-8 bytes.

    Cuts never fall inside a multi-byte character, and joining the pieces
    gives back the original text.
    """
    data = text.encode("utf-8")
    if len(data) <= limit:
        return [text]

    pieces = []
    start = 0
    while start < len(data):
        end = min(start + limit, len(data))
        # Back off to the first byte of a character
        while end < len(data) and end > start + 1 and (data[end] & 0xC0) == 0x80:
            end -= 1
        pieces.append(data[start:end].decode("utf-8"))
        start = end
    return pieces


class _StrictSysLogHandler(logging.handlers.SysLogHandler):
    """SysLogHandler that reports delivery failures instead of printing them."""

    def handleError(self, record: logging.LogRecord) -> None:
        error = sys.exc_info()[1]
        raise TransportError(
            f"syslog delivery to {self.address} failed: {error}", transport="socket"
        ) from error


class SyslogTransport(ABC):
    """Delivers the lines of one transmission to the system log."""

    name = "abstract"

    def __init__(self, tag: str, facility: str = "user"):
        self.tag = tag
        self.facility = facility

    @abstractmethod
    def send(self, lines: List[str]) -> None:
        """
        Submit one transmission.

        Raises:
            TransportError: If the log sink could not be reached
        """


class SocketTransport(SyslogTransport):
    """
    Sends through the syslog socket, reconnecting for every transmission.

    Each datagram is kept within ``max_message_size`` bytes, header included.
    A line that does not fit is sent as consecutive messages instead of
    failing with EMSGSIZE.
    """

    name = "socket"

    def __init__(
        self,
        tag: str,
        address: str = "/dev/log",
        facility: str = "user",
        max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
    ):
        super().__init__(tag, facility)
        if facility not in logging.handlers.SysLogHandler.facility_names:
            raise ValueError(f"Unknown syslog facility '{facility}'")
        self.address = parse_syslog_address(address)
        self.max_message_size = max_message_size
        if self.payload_limit < 4:
            raise ValueError(
                f"max_message_size {max_message_size} leaves no room for a message after the '{tag}' header"
            )

    @property
    def payload_limit(self) -> int:
        """Bytes available for the text of one message."""
        priority = (
            logging.handlers.SysLogHandler.facility_names[self.facility] << 3
        ) | logging.handlers.SysLogHandler.LOG_INFO
        # "<PRI>" + "TAG: " + trailing NUL
        header = len(f"<{priority}>{self.tag}: ".encode("utf-8")) + 1
        return self.max_message_size - header

    def _open_handler(self) -> logging.handlers.SysLogHandler:
        try:
            handler = _StrictSysLogHandler(
                address=self.address,
                facility=logging.handlers.SysLogHandler.facility_names[self.facility],
            )
        except OSError as e:
            raise TransportError(f"cannot open syslog at {self.address}: {e}", transport=self.name) from e
        handler.ident = f"{self.tag}: "
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler

    def send(self, lines: List[str]) -> None:
        limit = self.payload_limit
        handler = self._open_handler()
        try:
            for line in lines:
                for piece in split_message(line, limit):
                    record = logging.LogRecord(
                        name=self.tag,
                        level=logging.INFO,
                        pathname=__file__,
                        lineno=0,
                        msg=piece,
                        args=None,
                        exc_info=None,
                    )
                    handler.emit(record)
        finally:
            handler.close()


class LoggerCommandTransport(SyslogTransport):
    """Runs ``logger -t TAG -p FACILITY.info`` with the lines on stdin."""

    name = "logger"

    def __init__(self, tag: str, facility: str = "user", executable: str = "logger"):
        super().__init__(tag, facility)
        self.executable = executable

    def build_command(self) -> List[str]:
        return [self.executable, "-t", self.tag, "-p", f"{self.facility}.info"]

    def send(self, lines: List[str]) -> None:
        return_code, _, stderr = run_command(
            self.build_command(),
            input_text="\n".join(lines) + "\n",
            timeout=LOGGER_COMMAND_TIMEOUT,
        )
        if return_code != 0:
            raise TransportError(
                f"{self.executable} exited with {return_code}: {stderr.strip()}",
                transport=self.name,
            )


def create_transport(
    transport: str,
    tag: str,
    address: str = "/dev/log",
    facility: str = "user",
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
) -> SyslogTransport:
    """Build the transport named in the configuration."""
    if transport == "socket":
        return SocketTransport(tag=tag, address=address, facility=facility, max_message_size=max_message_size)
    if transport == "logger":
        return LoggerCommandTransport(tag=tag, facility=facility)
    raise ValueError(f"Unknown transport type: {transport}")
