"""
Forwarder: hands the accumulated text of a tick to the system log.

Forwarding is best effort. A transmission that cannot be delivered is dropped
for that tick and never retried; the pending content is retired either way so
the next tick only carries its own sample.
"""

import logging
from enum import Enum

from ..sampling.buffer import AccumulationBuffer
from ..validation import TransportError
from .transports import SyslogTransport

logger = logging.getLogger(__name__)


class ForwardResult(Enum):
    """What happened to one tick's transmission."""

    SENT = "sent"
    DROPPED = "dropped"
    EMPTY = "empty"


class Forwarder:
    """Submits the buffer's pending content through a syslog transport."""

    def __init__(self, transport: SyslogTransport, delimiter: str = "\n"):
        self.transport = transport
        self.delimiter = delimiter

    def split_lines(self, text: str) -> list:
        return [line for line in text.split(self.delimiter) if line.strip()]

    def forward(self, buffer: AccumulationBuffer) -> ForwardResult:
        """
        Transmit everything pending in the buffer as one transmission.

        Returns:
            SENT, DROPPED (log sink unavailable) or EMPTY (nothing to send)
        """
        lines = self.split_lines(buffer.pending())
        if not lines:
            buffer.mark_sent()
            logger.debug("Nothing sampled this tick, skipping transmission")
            return ForwardResult.EMPTY

        try:
            self.transport.send(lines)
        except TransportError as e:
            logger.warning(f"Dropping transmission of {len(lines)} lines: {e}")
            result = ForwardResult.DROPPED
        else:
            logger.debug(f"Sent {len(lines)} lines tagged {self.transport.tag} via {self.transport.name}")
            result = ForwardResult.SENT
        finally:
            buffer.mark_sent()
        return result
