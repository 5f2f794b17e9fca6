"""
Configuration file loading utilities.

This module reads config.toml into a plain dictionary. Validation into the
configuration dataclasses happens in config.validators.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Read and parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.error(f"{description} not found: {file_path}")
        raise
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description} {file_path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise

    logger.info(f"Loaded {description} from {file_path} (sections: {', '.join(sorted(data)) or 'none'})")
    return data


def load_main_config(config_path: Path, required: bool = True) -> Dict[str, Any]:
    """
    Load config.toml.

    Args:
        config_path: Path to the file
        required: If False, a missing file yields an empty mapping so that
            every setting takes its built-in default

    Returns:
        Parsed configuration data
    """
    if not required and not config_path.exists():
        logger.info(f"No configuration file at {config_path}, using built-in defaults")
        return {}
    return load_toml_file(config_path, "main configuration file")
