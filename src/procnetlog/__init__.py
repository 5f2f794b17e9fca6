"""
procnetlog: periodic /proc/net snapshots forwarded to syslog.

The package samples the kernel network statistics pseudo-files at a fixed
interval and relays their text, unparsed, to the system log under the
SAVE_PROC_NET tag, for a bounded total runtime.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- sampling: Statistics sampler and accumulation buffer
- forwarding: Syslog transports and the forwarder
- loop: The tick loop run in the child process
- orchestration: Lifetime enforcement, process handle, temporary files
- system: Command execution and environment preflight checks
- cli: Command-line interface

Usage:
    From command line:
        procnetlog 15 35

    Programmatically:
        from procnetlog import ProcNetLogRunner, RunConfig, get_config
        outcome = ProcNetLogRunner(RunConfig(15, 35), get_config()).run()
"""

from .config import clear_config_cache, get_config, set_config_path
from .models import AppConfig, LifetimeState, RunConfig, RunOutcome
from .orchestration import LifetimeController, LoopProcess, ProcNetLogRunner, RunWorkspace
from .sampling import AccumulationBuffer, ProcNetSampler
from .forwarding import Forwarder, ForwardResult, create_transport
from .system import PreflightChecker
from .validation import TransportError, ValidationError

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "get_config",
    "clear_config_cache",
    "set_config_path",
    # Models
    "AppConfig",
    "LifetimeState",
    "RunConfig",
    "RunOutcome",
    # Orchestration
    "LifetimeController",
    "LoopProcess",
    "ProcNetLogRunner",
    "RunWorkspace",
    # Sampling and forwarding
    "AccumulationBuffer",
    "ProcNetSampler",
    "Forwarder",
    "ForwardResult",
    "create_transport",
    # System
    "PreflightChecker",
    # Errors
    "TransportError",
    "ValidationError",
]
