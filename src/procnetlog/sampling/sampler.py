"""
Sampler for the kernel network statistics tree.

Each tick the sampler enumerates the regular files below the statistics
directory (the root plus a bounded number of subdirectory levels), reads them
and turns the result into a TickRecord. Files that vanish or cannot be read
between enumeration and read are skipped; a missing or unreadable directory
simply contributes nothing.
"""

import logging
import os
from pathlib import Path
from typing import List, Union

from ..models.runtime import TickRecord
from .buffer import AccumulationBuffer

logger = logging.getLogger(__name__)


class ProcNetSampler:
    """
    Reads every statistics file once per tick.

    The content is treated as opaque text; nothing is parsed.
    """

    def __init__(
        self,
        stats_dir: Union[str, Path] = "/proc/net",
        max_depth: int = 1,
        record_delimiter: str = "\n",
        include_paths: bool = True,
    ):
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.stats_dir = Path(stats_dir)
        self.max_depth = max_depth
        self.record_delimiter = record_delimiter
        self.include_paths = include_paths

    def enumerate_files(self) -> List[Path]:
        """
        List regular files under the statistics directory.

        Symlinked entries below the root are not followed, the root itself
        may be a symlink (/proc/net -> self/net). The result is sorted by
        path, which only serves readability: the set of files differs
        between kernels.
        """
        files: List[Path] = []
        self._walk(self.stats_dir, 0, files)
        files.sort()
        return files

    def _walk(self, directory: Path, depth: int, files: List[Path]) -> None:
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            files.append(Path(entry.path))
                        elif depth < self.max_depth and entry.is_dir(follow_symlinks=False):
                            self._walk(Path(entry.path), depth + 1, files)
                    except OSError as e:
                        logger.debug(f"Skipping {entry.path}: {e}")
        except OSError as e:
            logger.debug(f"Cannot list {directory}: {e}")

    def sample(self) -> TickRecord:
        """Perform one sampling pass."""
        record = TickRecord()
        for path in self.enumerate_files():
            try:
                with open(path, "rb") as f:
                    data = f.read()
            except OSError as e:
                logger.debug(f"Skipping unreadable file {path}: {e}")
                record.skipped.append(path)
                continue
            record.entries.append((path, data.decode("utf-8", errors="replace")))

        logger.debug(
            f"Sampled {len(record.entries)} files from {self.stats_dir} "
            f"({len(record.skipped)} skipped)"
        )
        return record

    def render(self, record: TickRecord) -> str:
        return record.render(self.record_delimiter, self.include_paths)

    def sample_into(self, buffer: AccumulationBuffer) -> TickRecord:
        """Sample once and append the whole tick to the buffer in one write."""
        record = self.sample()
        buffer.append(self.render(record))
        return record
