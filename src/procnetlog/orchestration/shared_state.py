"""
Shared data structures for the orchestration module.

This module defines the runtime state and the timing constants used across
the lifetime controller, the process handle and the signal handler.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional

from ..models.runtime import LifetimeState, RunOutcome


@dataclass
class RuntimeState:
    """
    Runtime state of one run, shared by the orchestration components.
    """

    lifetime_state: LifetimeState = LifetimeState.NOT_STARTED
    outcome: Optional[RunOutcome] = None
    # Set by the parent's signal handler to cut the run short.
    shutdown_requested: threading.Event = field(default_factory=threading.Event)
    # time.monotonic() when the loop process was started.
    started_at: Optional[float] = None
    # time.monotonic() when the graceful stop signal was sent.
    stop_sent_at: Optional[float] = None
    loop_pid: Optional[int] = None
    # Exit status of a voluntary or graceful exit; None after a forced kill.
    exit_code: Optional[int] = None


class TimeoutConstants:
    """
    Centralized timeout configuration.
    """

    # Fixed gap between the soft and the hard limit.
    DEFAULT_GRACE_PERIOD = 2.0
    # Longest single wait on the loop process, so shutdown requests are seen.
    WAIT_SLICE = 0.25
    # Time allowed for the kernel to reap the loop process after SIGKILL.
    TERMINATION_FORCE_TIMEOUT = 2.0
    # Longest single sleep inside the tick loop between stop checks.
    LOOP_POLL_INTERVAL = 0.2
