"""
Pytest configuration and shared fixtures for the procnetlog test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the procnetlog project.
"""

import errno
import shutil
import socket
import sys
import tempfile
import threading
from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    # mkdtemp keeps the path short enough for AF_UNIX socket names.
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fake_stats_dir(temp_dir):
    """
    A small stand-in for /proc/net.

    Layout (max_depth=1 sees the first four files only)::

        net/dev
        net/snmp
        net/stat/arp_cache
        net/stat/rt_cache
        net/stat/deeper/ignored
    """
    root = temp_dir / "net"
    (root / "stat" / "deeper").mkdir(parents=True)
    (root / "dev").write_text(
        "Inter-|   Receive\n"
        " face |bytes    packets\n"
        "    lo: 1234 10\n"
    )
    (root / "snmp").write_text("Ip: Forwarding DefaultTTL\nIp: 1 64\n")
    (root / "stat" / "arp_cache").write_text("entries allocs\n00000002 00000005\n")
    (root / "stat" / "rt_cache").write_text("entries\n00000000\n")
    (root / "stat" / "deeper" / "ignored").write_text("too deep\n")
    return root


@pytest.fixture
def sample_config_data(fake_stats_dir, temp_dir):
    """Sample configuration data for testing."""
    return {
        "sampling": {
            "stats_dir": str(fake_stats_dir),
            "max_depth": 1,
            "record_delimiter": "\n",
            "include_paths": True,
        },
        "forwarding": {
            "tag": "SAVE_PROC_NET",
            "transport": "socket",
            "address": str(temp_dir / "syslog.sock"),
            "facility": "user",
            "buffer_policy": "truncate",
        },
        "lifetime": {
            "grace_period": 2,
            "work_dir": str(temp_dir),
            "control_prefix": "p1log",
            "buffer_prefix": "p2log",
        },
        "preflight": {
            "enabled": True,
            "require_daemon": True,
            "daemon_names": ["rsyslogd"],
            "tested_distributions": ["Ubuntu 18"],
        },
        "logging": {"level": "DEBUG"},
    }


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {"config": config_file, "dir": temp_dir}


# ============================================================================
# Syslog Fixtures
# ============================================================================


class SyslogSink:
    """
    A unix datagram socket standing in for /dev/log.

    A background thread drains the socket continuously, since senders block
    once the kernel's datagram queue for the socket is full.
    """

    def __init__(self, path: Path):
        self.path = path
        self.messages: List[str] = []
        self._lock = threading.Lock()
        self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
        self._sock.bind(str(path))
        self._sock.settimeout(0.1)
        self._closed = threading.Event()
        self._thread = threading.Thread(target=self._drain, name="SyslogSink", daemon=True)
        self._thread.start()

    def _drain(self) -> None:
        while not self._closed.is_set():
            try:
                data = self._sock.recv(1 << 20)
            except socket.timeout:
                continue
            except OSError:
                return
            with self._lock:
                self.messages.append(data.decode("utf-8", errors="replace"))

    def received(self, settle: float = 0.3) -> List[str]:
        """Messages received so far, after giving in-flight ones time to land."""
        self._closed.wait(settle)
        with self._lock:
            return list(self.messages)

    def close(self) -> None:
        self._closed.set()
        self._thread.join(timeout=2)
        self._sock.close()


@pytest.fixture
def syslog_sink(temp_dir):
    """A bound unix datagram socket that records every syslog message."""
    sink = SyslogSink(temp_dir / "syslog.sock")
    yield sink
    sink.close()


# ============================================================================
# Test Utilities
# ============================================================================


class FakeClock:
    """Manually advanced clock whose sleep() moves time forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Provide a manually advanced clock."""
    return FakeClock()


class DiskFullFile:
    """
    File wrapper whose first write lands only half its data and whose next
    write fails with ENOSPC, like a filesystem filling up mid-append.
    """

    def __init__(self, raw):
        self.raw = raw
        self.writes = 0

    def write(self, data):
        self.writes += 1
        if self.writes == 1:
            return self.raw.write(bytes(data[: len(data) // 2]))
        raise OSError(errno.ENOSPC, "No space left on device")

    def __getattr__(self, name):
        return getattr(self.raw, name)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.raw.close()


@pytest.fixture
def disk_full():
    """Patch the buffer's file opening so appends fail partway through."""
    real_open = open

    def failing_open(*args, **kwargs):
        return DiskFullFile(real_open(*args, **kwargs))

    return patch("procnetlog.sampling.buffer.open", failing_open, create=True)


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    yield  # Run the test

    from procnetlog.config import clear_config_cache, manager

    clear_config_cache()
    # Always reset to original config path
    manager._CONFIG_FILE_PATH = manager._DEFAULT_CONFIG_FILE_PATH
