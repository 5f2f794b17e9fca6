"""
Forwarding of sampled text to the system log.
"""

from .forwarder import Forwarder, ForwardResult
from .address import parse_syslog_address
from .transports import (
    LoggerCommandTransport,
    SocketTransport,
    SyslogTransport,
    create_transport,
    split_message,
)

__all__ = [
    "Forwarder",
    "ForwardResult",
    "LoggerCommandTransport",
    "SocketTransport",
    "SyslogTransport",
    "create_transport",
    "parse_syslog_address",
    "split_message",
]
