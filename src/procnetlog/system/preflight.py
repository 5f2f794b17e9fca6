"""
Environment preflight checks.

The preflight probe verifies that the host can actually serve a run before
any sampling begins: a Linux kernel exposing the statistics directory, a
reachable syslog transport and a running syslog daemon. It also warns when
the distribution is not one the tool has been tested on. None of these
checks is consulted by the tick loop itself; they only decide whether the
CLI starts a run.
"""

import logging
import os
import platform
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

import psutil

from ..forwarding.address import parse_syslog_address
from ..models.config import AppConfig
from ..validation import ErrorSeverity
from .commands import check_logger_installed

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Outcome of one preflight check."""

    name: str
    passed: bool
    message: str
    # ERROR results make the report fail, WARNING results are only logged.
    severity: ErrorSeverity = ErrorSeverity.ERROR


@dataclass
class PreflightReport:
    """All check results of one preflight run."""

    results: List[CheckResult] = field(default_factory=list)

    @property
    def failures(self) -> List[CheckResult]:
        return [r for r in self.results if not r.passed and r.severity == ErrorSeverity.ERROR]

    @property
    def warnings(self) -> List[CheckResult]:
        return [r for r in self.results if not r.passed and r.severity == ErrorSeverity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.failures

    def log(self, log: Optional[logging.Logger] = None) -> None:
        log = log or logger
        for result in self.results:
            if result.passed:
                log.debug(f"Preflight {result.name}: {result.message}")
            elif result.severity == ErrorSeverity.WARNING:
                log.warning(f"Preflight {result.name}: {result.message}")
            else:
                log.error(f"Preflight {result.name}: {result.message}")


def read_distribution() -> Optional[str]:
    """
    Return "<NAME> <MAJOR_VERSION>" from os-release, e.g. "Ubuntu 18".

    Returns None when os-release is unavailable.
    """
    try:
        info = platform.freedesktop_os_release()
    except OSError:
        return None
    name = info.get("NAME", "").split(" ")[0]
    version = info.get("VERSION_ID", "").split(".")[0]
    if not name:
        return None
    return f"{name} {version}".strip()


class PreflightChecker:
    """Runs the capability probe for a given configuration."""

    def __init__(self, app_config: AppConfig):
        self.app_config = app_config

    def run(self) -> PreflightReport:
        checks: List[Callable[[], CheckResult]] = [
            self.check_platform,
            self.check_stats_dir,
            self.check_syslog_transport,
            self.check_syslog_daemon,
            self.check_distribution,
        ]
        report = PreflightReport()
        for check in checks:
            try:
                report.results.append(check())
            except Exception as e:
                report.results.append(
                    CheckResult(check.__name__.removeprefix("check_"), False, f"check raised {type(e).__name__}: {e}")
                )
        return report

    def check_platform(self) -> CheckResult:
        if sys.platform.startswith("linux"):
            return CheckResult("platform", True, f"running on {sys.platform}")
        return CheckResult("platform", False, f"unsupported platform {sys.platform}, a Linux kernel is required")

    def check_stats_dir(self) -> CheckResult:
        stats_dir = self.app_config.sampling.stats_dir
        if not stats_dir.is_dir():
            return CheckResult("stats_dir", False, f"{stats_dir} does not exist or is not a directory")
        if not os.access(stats_dir, os.R_OK | os.X_OK):
            return CheckResult("stats_dir", False, f"{stats_dir} is not readable")
        return CheckResult("stats_dir", True, f"{stats_dir} is readable")

    def check_syslog_transport(self) -> CheckResult:
        forwarding = self.app_config.forwarding
        if forwarding.transport == "logger":
            if check_logger_installed():
                return CheckResult("syslog_transport", True, "logger utility found")
            return CheckResult(
                "syslog_transport", False,
                "transport is 'logger' but the logger utility is not installed "
                "(e.g., 'sudo apt-get install bsdutils')",
            )

        address = parse_syslog_address(forwarding.address)
        if isinstance(address, tuple):
            return CheckResult("syslog_transport", True, f"using UDP syslog at {address[0]}:{address[1]}")
        if Path(address).exists():
            return CheckResult("syslog_transport", True, f"syslog socket {address} present")
        return CheckResult("syslog_transport", False, f"syslog socket {address} does not exist")

    def check_syslog_daemon(self) -> CheckResult:
        preflight = self.app_config.preflight
        wanted = set(preflight.daemon_names)
        for proc in psutil.process_iter(["name"]):
            try:
                if proc.info["name"] in wanted:
                    return CheckResult("syslog_daemon", True, f"{proc.info['name']} is running (PID {proc.pid})")
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue

        severity = ErrorSeverity.ERROR if preflight.require_daemon else ErrorSeverity.WARNING
        return CheckResult(
            "syslog_daemon", False,
            f"none of {sorted(wanted)} is running",
            severity=severity,
        )

    def check_distribution(self) -> CheckResult:
        tested = self.app_config.preflight.tested_distributions
        distribution = read_distribution()
        if distribution is None:
            return CheckResult(
                "distribution", False, "cannot read OS name/version from os-release",
                severity=ErrorSeverity.WARNING,
            )
        if not tested or distribution in tested:
            return CheckResult("distribution", True, f"{distribution}")
        return CheckResult(
            "distribution", False,
            f"distribution not tested: {distribution} (tested: {', '.join(tested)})",
            severity=ErrorSeverity.WARNING,
        )
