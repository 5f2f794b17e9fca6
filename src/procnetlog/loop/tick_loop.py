"""
The tick loop: sample, forward, repeat.

This module is the entry point of the child process started by the lifetime
controller::

    python -m procnetlog.loop.tick_loop <control_file>

The control file holds the serialized LoopSettings. Ticks are scheduled
against an anchor epoch chosen by the controller (tick n is due at
``anchor + n * interval``), so sleeping never accumulates drift. The loop is
single-threaded; its only suspension point is the sleep between ticks, which
is taken in short slices so a stop request is noticed promptly.

SIGTERM and SIGINT request a graceful stop. A tick that is already due when
the stop is noticed is still carried out, then the loop exits. The loop also
stops by itself if the controlling process disappears.
"""

import logging
import os
import signal
import sys
import time
from typing import Any, Callable, List, Optional

from ..forwarding import Forwarder, ForwardResult, create_transport
from ..models.runtime import LoopSettings, TickStats
from ..orchestration.shared_state import TimeoutConstants
from ..sampling import AccumulationBuffer, ProcNetSampler

logger = logging.getLogger(__name__)


class TickLoop:
    """
    Runs ticks at a fixed interval until stopped.
    """

    def __init__(
        self,
        settings: LoopSettings,
        sampler: ProcNetSampler,
        forwarder: Forwarder,
        buffer: AccumulationBuffer,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if settings.interval <= 0:
            raise ValueError(f"interval must be > 0, got {settings.interval}")
        self.settings = settings
        self.sampler = sampler
        self.forwarder = forwarder
        self.buffer = buffer
        self.stats = TickStats()
        self._clock = clock
        self._sleep = sleep
        self._stop_requested = False
        self._anchor = settings.anchor_epoch or clock()

    @classmethod
    def from_settings(cls, settings: LoopSettings) -> "TickLoop":
        """Wire up sampler, buffer and forwarder from the control file settings."""
        sampler = ProcNetSampler(
            stats_dir=settings.stats_dir,
            max_depth=settings.max_depth,
            record_delimiter=settings.record_delimiter,
            include_paths=settings.include_paths,
        )
        transport = create_transport(
            settings.transport,
            tag=settings.tag,
            address=settings.address,
            facility=settings.facility,
            max_message_size=settings.max_message_size,
        )
        forwarder = Forwarder(transport, delimiter=settings.record_delimiter)
        buffer = AccumulationBuffer(settings.buffer_file, policy=settings.buffer_policy)
        return cls(settings, sampler, forwarder, buffer)

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def request_stop(self, signum: Optional[int] = None, frame: Any = None) -> None:
        """Ask the loop to exit; usable directly as a signal handler."""
        self._stop_requested = True

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGTERM, self.request_stop)
        signal.signal(signal.SIGINT, self.request_stop)

    def due_time(self, tick_number: int) -> float:
        """Wall-clock epoch at which the given (1-based) tick is due."""
        return self._anchor + tick_number * self.settings.interval

    def _parent_gone(self) -> bool:
        return bool(self.settings.parent_pid) and os.getppid() != self.settings.parent_pid

    def run_tick(self) -> ForwardResult:
        """
        Sample then forward, strictly in that order.

        Read and transport failures are absorbed by the sampler and the
        forwarder; this method does not raise for them.
        """
        record = self.sampler.sample_into(self.buffer)
        self.stats.files_read += len(record.entries)
        self.stats.files_skipped += len(record.skipped)

        result = self.forwarder.forward(self.buffer)
        self.stats.ticks += 1
        if result == ForwardResult.SENT:
            self.stats.transmissions_sent += 1
        elif result == ForwardResult.DROPPED:
            self.stats.transmissions_dropped += 1
        else:
            self.stats.empty_ticks += 1
        logger.debug(f"Tick {self.stats.ticks}: {len(record.entries)} files, transmission {result.value}")
        return result

    def _wait_until(self, deadline: float) -> bool:
        """
        Sleep until ``deadline`` in short slices.

        Returns:
            True if the deadline was reached, False if a stop came first
        """
        while True:
            if self._stop_requested:
                return False
            if self._parent_gone():
                logger.warning("Controlling process is gone, stopping")
                self._stop_requested = True
                return False
            remaining = deadline - self._clock()
            if remaining <= 0:
                return True
            self._sleep(min(remaining, TimeoutConstants.LOOP_POLL_INTERVAL))

    def run(self, max_ticks: Optional[int] = None) -> TickStats:
        """
        Loop until stopped (or until ``max_ticks`` ticks have run).

        Unexpected errors inside a tick are logged and the loop carries on.
        """
        tick_number = 1
        while max_ticks is None or self.stats.ticks < max_ticks:
            reached = self._wait_until(self.due_time(tick_number))
            if not reached and self._clock() < self.due_time(tick_number):
                break
            try:
                self.run_tick()
            except Exception as e:
                logger.error(f"Tick {tick_number} failed: {type(e).__name__}: {e}", exc_info=True)
            # Skip ticks that were missed while this one overran.
            tick_number = max(tick_number + 1, int((self._clock() - self._anchor) // self.settings.interval) + 1)
            if self._stop_requested:
                break
        return self.stats


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the tick loop process."""
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: python -m procnetlog.loop.tick_loop <control_file>", file=sys.stderr)
        return 1

    settings = LoopSettings.read(argv[0])

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    loop = TickLoop.from_settings(settings)
    loop.install_signal_handlers()
    logger.info(
        f"Sampling {settings.stats_dir} every {settings.interval:g}s, "
        f"forwarding as {settings.tag} via {settings.transport}"
    )
    stats = loop.run()
    logger.info(
        f"Tick loop finished: {stats.ticks} ticks, {stats.transmissions_sent} sent, "
        f"{stats.transmissions_dropped} dropped, {stats.empty_ticks} empty, "
        f"{stats.files_skipped} unreadable files skipped"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
