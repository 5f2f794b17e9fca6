"""
Command execution utilities.

This module provides the function used to run external tools (logger(1)) and
to check whether they are installed.
"""

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)


def run_command(
    command: Union[str, Sequence[str]],
    cwd: Optional[Path] = None,
    input_text: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Tuple[int, str, str]:
    """Execute a command and capture its output with robust error handling.

    Args:
        command: The command to execute, either a string (split with shlex)
            or an argument sequence. No shell is involved.
        cwd: Working directory for command execution.
        input_text: Optional text written to the command's stdin.
        timeout: Optional limit in seconds.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 for execution errors (missing binary, timeout).
    """
    argv = shlex.split(command) if isinstance(command, str) else list(command)
    logger.debug(f"Executing command: {argv} in '{cwd or '.'}'")
    try:
        process = subprocess.run(
            argv,
            cwd=cwd,
            input=input_text,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        logger.error(f"Command not found: {argv[0]}: {type(e).__name__}: {e}")
        return -1, "", f"Error: Command not found '{argv[0]}'"
    except subprocess.TimeoutExpired:
        logger.warning(f"Command {argv[0]} timed out after {timeout}s")
        return -1, "", f"Error: Command '{argv[0]}' timed out"
    except Exception as e:
        logger.error(f"Unexpected error while running command '{argv[0]}': {type(e).__name__}: {e}", exc_info=True)
        return -1, "", f"An unexpected error occurred: {e}"


def check_logger_installed() -> bool:
    """Check if the 'logger' command (util-linux / bsdutils) is available.

    Returns:
        True if logger is found in the system PATH, False otherwise.
    """
    return shutil.which("logger") is not None
