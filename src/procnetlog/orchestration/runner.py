"""
One complete run: workspace, loop process and lifetime enforcement.

ProcNetLogRunner is the high-level coordinator used by the CLI. It owns the
run's temporary files, writes the loop settings for the child, hands the
child to the lifetime controller and makes sure every exit path removes the
temporary files again.
"""

import logging
import os
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from ..models.config import AppConfig, RunConfig
from ..models.runtime import LoopSettings, RunOutcome, RunPaths
from .lifetime_controller import LifetimeController
from .process_handle import LoopProcess
from .shared_state import RuntimeState
from .signal_handler import SignalHandler
from .workspace import RunWorkspace

logger = logging.getLogger(__name__)

LOOP_MODULE = "procnetlog.loop.tick_loop"


class ProcNetLogRunner:
    """
    Coordinates a single bounded sampling run.
    """

    def __init__(
        self,
        run_config: RunConfig,
        app_config: AppConfig,
        python_executable: Optional[str] = None,
    ):
        self.run_config = run_config
        self.app_config = app_config
        self.python_executable = python_executable or sys.executable
        self.state = RuntimeState()
        self.signal_handler = SignalHandler(self.state)
        self.workspace = RunWorkspace(
            work_dir=app_config.lifetime.work_dir,
            control_prefix=app_config.lifetime.control_prefix,
            buffer_prefix=app_config.lifetime.buffer_prefix,
        )
        self.controller: Optional[LifetimeController] = None

    def build_loop_settings(self, paths: RunPaths, anchor_epoch: float) -> LoopSettings:
        sampling = self.app_config.sampling
        forwarding = self.app_config.forwarding
        return LoopSettings(
            interval=float(self.run_config.interval),
            buffer_file=str(paths.buffer_file),
            stats_dir=str(sampling.stats_dir),
            max_depth=sampling.max_depth,
            record_delimiter=sampling.record_delimiter,
            include_paths=sampling.include_paths,
            tag=forwarding.tag,
            transport=forwarding.transport,
            address=forwarding.address,
            facility=forwarding.facility,
            max_message_size=forwarding.max_message_size,
            buffer_policy=forwarding.buffer_policy,
            anchor_epoch=anchor_epoch,
            parent_pid=os.getpid(),
            log_level=self.app_config.logging.level,
        )

    def build_command(self, control_file: Path) -> List[str]:
        return [self.python_executable, "-m", LOOP_MODULE, str(control_file)]

    def build_environment(self) -> Dict[str, str]:
        """Child environment with this package importable even from a source checkout."""
        env = dict(os.environ)
        package_root = str(Path(__file__).resolve().parent.parent.parent)
        existing = env.get("PYTHONPATH")
        env["PYTHONPATH"] = package_root if not existing else f"{package_root}{os.pathsep}{existing}"
        return env

    def request_shutdown(self) -> None:
        """Cut the run short; the loop gets the usual grace period."""
        self.state.shutdown_requested.set()

    def run(self) -> RunOutcome:
        """
        Execute the run and block until the loop has terminated.

        Returns:
            How the loop ended. The CLI treats every outcome as success.
        """
        self.signal_handler.setup_signal_handlers()
        try:
            with self.workspace as paths:
                settings = self.build_loop_settings(paths, anchor_epoch=time.time())
                settings.write(paths.control_file)
                logger.info(f"Run files: control={paths.control_file.name}, buffer={paths.buffer_file.name}")

                self.controller = LifetimeController(
                    LoopProcess(
                        self.build_command(paths.control_file),
                        env=self.build_environment(),
                    ),
                    total_runtime=self.run_config.total_runtime,
                    grace_period=self.app_config.lifetime.grace_period,
                    state=self.state,
                )
                outcome = self.controller.run()
        finally:
            self.signal_handler.cleanup_signal_handlers()

        if outcome == RunOutcome.KILLED:
            logger.info("Tick loop had to be killed; its exit status is discarded")
        return outcome
