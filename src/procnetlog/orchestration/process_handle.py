"""
Explicit handle on the tick loop process.

LoopProcess owns the child process running the tick loop and exposes the
typed operations the lifetime controller needs: start, terminate (graceful),
kill (forced, including any helpers the loop spawned), wait with a timeout
and a liveness check.
"""

import logging
import subprocess
from typing import Dict, List, Optional, Sequence

import psutil

from .shared_state import TimeoutConstants

logger = logging.getLogger(__name__)


class LoopProcess:
    """
    Handle for one child process, built on psutil.Popen.
    """

    def __init__(self, command: Sequence[str], name: str = "tick loop", env: Optional[Dict[str, str]] = None):
        if not command:
            raise ValueError("command must not be empty")
        self.command = list(command)
        self.name = name
        self.env = env
        self._popen: Optional[psutil.Popen] = None

    @property
    def pid(self) -> Optional[int]:
        return self._popen.pid if self._popen else None

    @property
    def started(self) -> bool:
        return self._popen is not None

    def start(self) -> int:
        """
        Spawn the process.

        Returns:
            The PID of the new process

        Raises:
            RuntimeError: If the process was already started
        """
        if self._popen is not None:
            raise RuntimeError(f"{self.name} already started (PID {self._popen.pid})")
        self._popen = psutil.Popen(self.command, stdin=subprocess.DEVNULL, env=self.env)
        logger.info(f"Started {self.name} with PID: {self._popen.pid}")
        return self._popen.pid

    def _require_started(self) -> psutil.Popen:
        if self._popen is None:
            raise RuntimeError(f"{self.name} has not been started")
        return self._popen

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Wait for the process to exit.

        Returns:
            The exit code, or None if it is still running after ``timeout``
        """
        popen = self._require_started()
        try:
            return popen.wait(timeout=timeout)
        except psutil.TimeoutExpired:
            return None

    def is_running(self) -> bool:
        """True while the process exists and is not a zombie."""
        if self._popen is None:
            return False
        return self._is_process_alive(self._popen)

    def terminate(self) -> None:
        """Send SIGTERM to the loop process only; it stops at its next check."""
        popen = self._require_started()
        try:
            popen.terminate()
            logger.debug(f"Sent SIGTERM to {self.name} (PID {popen.pid})")
        except psutil.NoSuchProcess:
            logger.debug(f"{self.name} (PID {popen.pid}) already gone before SIGTERM")

    def kill(self) -> None:
        """
        Send SIGKILL to the loop process and every descendant.

        Descendants are collected first so that they are not orphaned by the
        parent's death. The exit status is reaped and discarded.
        """
        popen = self._require_started()
        victims = self._get_process_children(popen) + [popen]
        for process in victims:
            try:
                process.kill()
                logger.debug(f"Sent SIGKILL to PID {process.pid}")
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning(f"Access denied sending SIGKILL to PID {process.pid}")

        _, still_alive = psutil.wait_procs(victims, timeout=TimeoutConstants.TERMINATION_FORCE_TIMEOUT)
        stubborn = [p for p in still_alive if self._is_process_alive(p)]
        if stubborn:
            logger.error(f"{len(stubborn)} processes of {self.name} survived SIGKILL: {[p.pid for p in stubborn]}")
        # Reap the direct child so it does not linger as a zombie.
        self.wait(timeout=0)

    def _is_process_alive(self, process: psutil.Process) -> bool:
        """Safely check if a process is still alive and not a zombie."""
        try:
            if not process.is_running():
                return False
            return process.status() not in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False

    def _get_process_children(self, parent: psutil.Process) -> List[psutil.Process]:
        """Safely get all descendants of a process, handling race conditions."""
        try:
            return [child for child in parent.children(recursive=True) if self._is_process_alive(child)]
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return []
