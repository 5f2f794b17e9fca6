"""
Syslog address parsing shared by the socket transport and the preflight probe.
"""

from typing import Tuple, Union


def parse_syslog_address(address: str) -> Union[str, Tuple[str, int]]:
    """
    Turn a configured address into what SysLogHandler expects.

    "/dev/log" stays a unix socket path; "host:port" becomes a UDP tuple.
    """
    if not address.startswith("/") and ":" in address:
        host, _, port = address.rpartition(":")
        try:
            return host, int(port)
        except ValueError:
            raise ValueError(f"Invalid syslog port in address '{address}'")
    return address
