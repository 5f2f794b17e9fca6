"""
Configuration data models.

This module contains the configuration structures loaded from `config.toml`
and the per-invocation run configuration built from the command line.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class SamplingConfig:
    """
    Where and how the statistics pseudo-files are sampled, from `[sampling]`.
    """

    # Root of the kernel statistics tree.
    stats_dir: Path = Path("/proc/net")
    # Levels of subdirectory nesting below stats_dir that are enumerated.
    max_depth: int = 1
    # Separator placed between the flattened lines of two files.
    record_delimiter: str = "\n"
    # Prefix each flattened line with the path it was read from.
    include_paths: bool = True


@dataclass
class ForwardingConfig:
    """
    Syslog submission settings, from `[forwarding]`.
    """

    tag: str = "SAVE_PROC_NET"
    # "socket" (SysLogHandler) or "logger" (the logger(1) utility).
    transport: str = "socket"
    # Unix socket path, or "host:port" for UDP syslog.
    address: str = "/dev/log"
    facility: str = "user"
    # Largest syslog datagram the socket transport sends; longer lines are
    # split across several messages.
    max_message_size: int = 8192
    # "truncate" empties the buffer after each transmission, "offset" keeps
    # the history and only transmits content past the last-sent offset.
    buffer_policy: str = "truncate"


@dataclass
class LifetimeConfig:
    """
    Lifetime enforcement and temporary artifact settings, from `[lifetime]`.
    """

    # Seconds between the graceful stop signal and the kill signal.
    grace_period: float = 2.0
    work_dir: Path = Path(".")
    control_prefix: str = "p1log"
    buffer_prefix: str = "p2log"


@dataclass
class PreflightConfig:
    """
    Environment capability probe settings, from `[preflight]`.
    """

    enabled: bool = True
    require_daemon: bool = True
    daemon_names: List[str] = field(
        default_factory=lambda: ["rsyslogd", "syslog-ng", "systemd-journald"]
    )
    tested_distributions: List[str] = field(default_factory=lambda: ["Ubuntu 18"])


@dataclass
class LoggingConfig:
    """
    Operational logging of the tool itself, from `[logging]`.
    """

    level: str = "INFO"


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    forwarding: ForwardingConfig = field(default_factory=ForwardingConfig)
    lifetime: LifetimeConfig = field(default_factory=LifetimeConfig)
    preflight: PreflightConfig = field(default_factory=PreflightConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass
class RunConfig:
    """
    The two required parameters of one invocation.
    """

    # Seconds between samples.
    interval: int
    # Seconds before the loop is asked to stop.
    total_runtime: int
