"""
The per-run accumulation buffer.

The sampler appends each tick's flattened text to a file; the forwarder reads
what has not been transmitted yet and then marks it sent. How "sent" content
is retired depends on the buffer policy:

- ``truncate``: the file is emptied after every transmission, so it only ever
  holds the current tick.
- ``offset``: the file keeps the whole run's history and a byte offset tracks
  what has already been transmitted.

Either way a transmission never repeats content from an earlier tick.
"""

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

BUFFER_POLICIES = ("truncate", "offset")


class AccumulationBuffer:
    """File-backed text buffer with an explicit send policy."""

    def __init__(self, path: Union[str, Path], policy: str = "truncate"):
        if policy not in BUFFER_POLICIES:
            raise ValueError(f"Unknown buffer policy '{policy}', expected one of {BUFFER_POLICIES}")
        self.path = Path(path)
        self.policy = policy
        self._sent_offset = 0
        self._pending_end = 0

    def append(self, text: str) -> None:
        """
        Append text in a single write; empty text is a no-op.

        The append is all or nothing: if the write fails partway (for
        instance ENOSPC), the file is cut back to its previous length before
        the error propagates, so no fragment is left for the next pending().

        Raises:
            OSError: If the text could not be written
        """
        if not text:
            return
        data = memoryview(text.encode("utf-8"))
        # Unbuffered, so nothing is left queued to be flushed after a rollback
        with open(self.path, "ab", buffering=0) as f:
            start = f.seek(0, os.SEEK_END)
            try:
                while data:
                    written = f.write(data)
                    data = data[written:]
            except OSError as e:
                logger.warning(f"Append to {self.path} failed, discarding partial write: {e}")
                f.truncate(start)
                raise

    def pending(self) -> str:
        """
        Return the content that has not been marked sent yet.

        The end of the returned region is remembered, so anything appended
        after this call survives the next mark_sent().
        """
        start = self._sent_offset if self.policy == "offset" else 0
        try:
            with open(self.path, "rb") as f:
                f.seek(start)
                data = f.read()
        except FileNotFoundError:
            logger.debug(f"Buffer file {self.path} is missing, nothing pending")
            self._pending_end = start
            return ""
        self._pending_end = start + len(data)
        return data.decode("utf-8", errors="replace")

    def mark_sent(self) -> None:
        """Retire the region returned by the last pending() call."""
        if self.policy == "offset":
            self._sent_offset = self._pending_end
            return
        try:
            with open(self.path, "rb+") as f:
                f.seek(self._pending_end)
                remainder = f.read()
                f.seek(0)
                f.write(remainder)
                f.truncate()
        except FileNotFoundError:
            pass
        self._pending_end = 0

    def size(self) -> int:
        """Current size of the buffer file in bytes (0 if missing)."""
        try:
            return os.path.getsize(self.path)
        except OSError:
            return 0
