"""
Runtime data models.

This module contains the data structures used while a run is in progress:
the lifetime state machine values, per-tick records and counters, the
temporary artifact paths and the settings handed to the tick loop process.
"""

import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Tuple


class LifetimeState(Enum):
    """States of the tick loop process as seen by the lifetime controller."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    GRACE_KILL_WINDOW = "grace_kill_window"
    TERMINATED = "terminated"


class RunOutcome(Enum):
    """
    How the tick loop process ended.

    The CLI exit code is 0 for every outcome; the value is only surfaced to
    programmatic callers and in the log.
    """

    COMPLETED = "completed"
    STOPPED = "stopped"
    KILLED = "killed"


@dataclass
class TickRecord:
    """
    The (path, content) pairs collected during one sampling pass, in
    enumeration order.
    """

    entries: List[Tuple[Path, str]] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def is_empty(self) -> bool:
        return not self.entries

    def render(self, delimiter: str = "\n", include_paths: bool = True) -> str:
        """
        Flatten the record into text, one logical line per source file.

        Newlines inside a file's content become spaces and trailing
        whitespace is dropped. The result ends with ``delimiter`` unless the
        record is empty, so successive ticks can be appended to one buffer.
        """
        if not self.entries:
            return ""
        lines = []
        for path, content in self.entries:
            flat = content.replace("\n", " ").rstrip()
            if include_paths:
                flat = f"{path} {flat}".rstrip()
            lines.append(flat)
        return delimiter.join(lines) + delimiter


@dataclass
class TickStats:
    """Counters kept by the tick loop for the end-of-run summary."""

    ticks: int = 0
    transmissions_sent: int = 0
    transmissions_dropped: int = 0
    empty_ticks: int = 0
    files_read: int = 0
    files_skipped: int = 0


@dataclass
class RunPaths:
    """
    The two temporary artifacts of a run.
    """

    # Serialized LoopSettings read by the tick loop process.
    control_file: Path
    # Accumulation buffer the sampler appends to and the forwarder drains.
    buffer_file: Path


@dataclass
class LoopSettings:
    """
    Everything the tick loop process needs, written to the control file.
    """

    interval: float
    buffer_file: str
    stats_dir: str = "/proc/net"
    max_depth: int = 1
    record_delimiter: str = "\n"
    include_paths: bool = True
    tag: str = "SAVE_PROC_NET"
    transport: str = "socket"
    address: str = "/dev/log"
    facility: str = "user"
    max_message_size: int = 8192
    buffer_policy: str = "truncate"
    # Wall-clock epoch the tick schedule is anchored to; tick n is due at
    # anchor_epoch + n * interval.
    anchor_epoch: float = 0.0
    # PID of the controlling process, 0 disables the orphan check.
    parent_pid: int = 0
    log_level: str = "INFO"

    def to_json(self) -> str:
        return json.dumps(dataclasses.asdict(self), indent=2, sort_keys=True)

    @classmethod
    def from_json(cls, text: str) -> "LoopSettings":
        data = json.loads(text)
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def write(self, path: Path) -> None:
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def read(cls, path: Path) -> "LoopSettings":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))
