"""
Orchestration of a bounded sampling run.

Components:
- ProcNetLogRunner: coordinates one run
- LifetimeController: soft/hard limit enforcement over the loop process
- LoopProcess: explicit handle on the loop process
- RunWorkspace: unique temporary files with guaranteed removal
- SignalHandler: turns SIGINT/SIGTERM into a shutdown request
"""

from .lifetime_controller import LifetimeController
from .process_handle import LoopProcess
from .runner import ProcNetLogRunner
from .shared_state import RuntimeState, TimeoutConstants
from .signal_handler import SignalHandler
from .workspace import RunWorkspace

__all__ = [
    "LifetimeController",
    "LoopProcess",
    "ProcNetLogRunner",
    "RunWorkspace",
    "RuntimeState",
    "SignalHandler",
    "TimeoutConstants",
]
