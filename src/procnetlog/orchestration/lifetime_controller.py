"""
Lifetime enforcement for the tick loop process.

The controller runs the loop as a child process under two limits measured
from the moment it was started:

- soft limit (``total_runtime``): the loop is sent SIGTERM and enters the
  grace window;
- hard limit (``total_runtime + grace_period``): if it is still alive it is
  killed together with its descendants, and its exit status is discarded.

State machine::

    NOT_STARTED --start()--> RUNNING
    RUNNING --loop exits--> TERMINATED            (COMPLETED)
    RUNNING --soft limit / shutdown request--> GRACE_KILL_WINDOW
    GRACE_KILL_WINDOW --loop exits--> TERMINATED  (STOPPED)
    GRACE_KILL_WINDOW --hard limit--> TERMINATED  (KILLED)

A shutdown request (SIGINT/SIGTERM to the controller) enters the grace
window early; the kill then follows ``grace_period`` seconds later at most.
"""

import logging
import time
from typing import Callable, Optional

from ..models.runtime import LifetimeState, RunOutcome
from ..validation import validate_positive_float
from .process_handle import LoopProcess
from .shared_state import RuntimeState, TimeoutConstants

logger = logging.getLogger(__name__)


class LifetimeController:
    """
    Drives one LoopProcess through its lifetime state machine.
    """

    def __init__(
        self,
        process: LoopProcess,
        total_runtime: float,
        grace_period: float = TimeoutConstants.DEFAULT_GRACE_PERIOD,
        state: Optional[RuntimeState] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.process = process
        self.total_runtime = validate_positive_float(
            total_runtime, min_value=0.001, field_name="total_runtime"
        )
        self.grace_period = validate_positive_float(
            grace_period, min_value=0.0, field_name="grace_period"
        )
        self.state = state or RuntimeState()
        self._clock = clock

    @property
    def soft_limit(self) -> float:
        return self.total_runtime

    @property
    def hard_limit(self) -> float:
        return self.total_runtime + self.grace_period

    def elapsed(self) -> float:
        if self.state.started_at is None:
            return 0.0
        return self._clock() - self.state.started_at

    def _transition(self, new_state: LifetimeState) -> None:
        logger.debug(f"Lifetime state {self.state.lifetime_state.value} -> {new_state.value}")
        self.state.lifetime_state = new_state

    def start(self) -> None:
        """
        Spawn the loop process.

        Raises:
            RuntimeError: If called more than once
        """
        if self.state.lifetime_state != LifetimeState.NOT_STARTED:
            raise RuntimeError(f"Cannot start from state {self.state.lifetime_state.value}")
        self.state.loop_pid = self.process.start()
        self.state.started_at = self._clock()
        self._transition(LifetimeState.RUNNING)
        logger.info(
            f"Tick loop running; stop requested after {self.soft_limit:g}s, "
            f"forced kill after {self.hard_limit:g}s"
        )

    def _kill_deadline(self) -> float:
        """Elapsed time at which a loop still in the grace window is killed."""
        deadline = self.hard_limit
        if self.state.stop_sent_at is not None and self.state.started_at is not None:
            early = (self.state.stop_sent_at - self.state.started_at) + self.grace_period
            deadline = min(deadline, early)
        return deadline

    def _enter_grace_window(self, reason: str) -> None:
        logger.info(f"{reason}; sending SIGTERM to the tick loop (PID {self.process.pid})")
        self.state.stop_sent_at = self._clock()
        self._transition(LifetimeState.GRACE_KILL_WINDOW)
        self.process.terminate()

    def _finish(self, outcome: RunOutcome, exit_code: Optional[int]) -> RunOutcome:
        self.state.outcome = outcome
        self.state.exit_code = exit_code
        self._transition(LifetimeState.TERMINATED)
        logger.info(f"Tick loop {outcome.value} after {self.elapsed():.1f}s")
        return outcome

    def step(self) -> Optional[RunOutcome]:
        """
        Advance the state machine by at most one wait slice.

        Returns:
            The outcome once the loop has terminated, else None
        """
        current = self.state.lifetime_state

        if current == LifetimeState.NOT_STARTED:
            self.start()
            return None

        if current == LifetimeState.RUNNING:
            if self.state.shutdown_requested.is_set():
                self._enter_grace_window("Shutdown requested")
                return None
            remaining = self.soft_limit - self.elapsed()
            if remaining <= 0:
                self._enter_grace_window(f"Runtime of {self.total_runtime:g}s reached")
                return None
            exit_code = self.process.wait(timeout=min(TimeoutConstants.WAIT_SLICE, remaining))
            if exit_code is not None:
                return self._finish(RunOutcome.COMPLETED, exit_code)
            return None

        if current == LifetimeState.GRACE_KILL_WINDOW:
            remaining = self._kill_deadline() - self.elapsed()
            if remaining <= 0:
                logger.warning(f"Tick loop (PID {self.process.pid}) still alive after grace period, killing it")
                self.process.kill()
                return self._finish(RunOutcome.KILLED, None)
            exit_code = self.process.wait(timeout=min(TimeoutConstants.WAIT_SLICE, remaining))
            if exit_code is not None:
                return self._finish(RunOutcome.STOPPED, exit_code)
            return None

        return self.state.outcome

    def run(self) -> RunOutcome:
        """
        Start the loop and block until it has terminated.

        If anything goes wrong while supervising, a still running loop is
        killed before the error propagates.
        """
        try:
            while True:
                outcome = self.step()
                if outcome is not None:
                    return outcome
        except BaseException:
            if self.process.started and self.state.lifetime_state != LifetimeState.TERMINATED:
                logger.error("Supervision failed, killing the tick loop")
                self.process.kill()
                self._transition(LifetimeState.TERMINATED)
            raise
