"""
Data models for procnetlog.

Configuration Models:
- Tool configuration loaded from TOML (sampling, forwarding, lifetime,
  preflight and logging sections)
- The run configuration given on the command line

Runtime Models:
- Lifetime state machine values and run outcomes
- Tick records and tick counters
- Temporary artifact paths and the settings passed to the tick loop process
"""

from .config import (
    AppConfig,
    ForwardingConfig,
    LifetimeConfig,
    LoggingConfig,
    PreflightConfig,
    RunConfig,
    SamplingConfig,
)
from .runtime import (
    LifetimeState,
    LoopSettings,
    RunOutcome,
    RunPaths,
    TickRecord,
    TickStats,
)

__all__ = [
    # Configuration
    "AppConfig",
    "ForwardingConfig",
    "LifetimeConfig",
    "LoggingConfig",
    "PreflightConfig",
    "RunConfig",
    "SamplingConfig",
    # Runtime
    "LifetimeState",
    "LoopSettings",
    "RunOutcome",
    "RunPaths",
    "TickRecord",
    "TickStats",
]
