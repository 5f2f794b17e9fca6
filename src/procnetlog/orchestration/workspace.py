"""
Temporary artifacts of a run.

A run owns two files in its work directory: the control file holding the
serialized loop settings and the data buffer the sampler accumulates into.
Both are created with unique names so concurrent runs never share them, and
both are removed when the run ends, whichever way it ends: the context
manager exit covers normal flow and exceptions, an atexit hook covers
interpreter shutdown paths that skip it.
"""

import atexit
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from ..models.runtime import RunPaths

logger = logging.getLogger(__name__)


class RunWorkspace:
    """Creates the control and buffer files and guarantees their removal."""

    def __init__(
        self,
        work_dir: Union[str, Path] = ".",
        control_prefix: str = "p1log",
        buffer_prefix: str = "p2log",
    ):
        self.work_dir = Path(work_dir)
        self.control_prefix = control_prefix
        self.buffer_prefix = buffer_prefix
        self.paths: Optional[RunPaths] = None
        self._atexit_registered = False

    def create(self) -> RunPaths:
        """
        Create both files.

        Raises:
            RuntimeError: If the workspace already holds files
            OSError: If the work directory is not writable
        """
        if self.paths is not None:
            raise RuntimeError("Workspace files already created")

        created: Dict[str, Path] = {}
        try:
            for name, prefix in (("control", self.control_prefix), ("buffer", self.buffer_prefix)):
                fd, path = tempfile.mkstemp(prefix=prefix, dir=self.work_dir)
                os.close(fd)
                created[name] = Path(path).resolve()
                logger.debug(f"Created {name} file {created[name]}")
        except OSError:
            self._safe_remove(created.values())
            raise

        self.paths = RunPaths(control_file=created["control"], buffer_file=created["buffer"])
        atexit.register(self.cleanup)
        self._atexit_registered = True
        return self.paths

    def cleanup(self) -> None:
        """Remove both files; safe to call repeatedly."""
        if self._atexit_registered:
            atexit.unregister(self.cleanup)
            self._atexit_registered = False
        if self.paths is None:
            return
        self._safe_remove([self.paths.control_file, self.paths.buffer_file])
        self.paths = None

    def _safe_remove(self, paths) -> None:
        for path in paths:
            try:
                os.remove(path)
                logger.debug(f"Removed {path}")
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Failed to remove temporary file {path}: {e}")

    def __enter__(self) -> RunPaths:
        return self.create()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
