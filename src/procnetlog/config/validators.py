"""
Configuration validation utilities.

This module turns the raw TOML sections into validated configuration
dataclasses. Missing keys fall back to the dataclass defaults; present keys
must have the right type and range.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import (
    AppConfig,
    ForwardingConfig,
    LifetimeConfig,
    LoggingConfig,
    PreflightConfig,
    SamplingConfig,
)
from ..validation import (
    ValidationError,
    validate_bool,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
    validate_string_list,
)

logger = logging.getLogger(__name__)

TRANSPORT_CHOICES = ["socket", "logger"]
BUFFER_POLICY_CHOICES = ["truncate", "offset"]
LOG_LEVEL_CHOICES = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
# Names accepted by logging.handlers.SysLogHandler.facility_names
FACILITY_CHOICES = [
    "auth", "authpriv", "cron", "daemon", "ftp", "kern", "lpr", "mail",
    "news", "security", "syslog", "user", "uucp",
    "local0", "local1", "local2", "local3", "local4", "local5", "local6", "local7",
]
# Smallest message every syslog receiver must accept (RFC 5424) and the
# largest UDP payload.
MIN_MESSAGE_SIZE = 480
MAX_MESSAGE_SIZE = 65507


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValidationError(f"[{name}] must be a table", field_name=name, value=section)
    return section


def validate_sampling_config(sampling_data: Dict[str, Any]) -> SamplingConfig:
    """
    Validate the `[sampling]` section.

    Raises:
        ValidationError: If validation fails
    """
    defaults = SamplingConfig()

    stats_dir = validate_non_empty_string(
        sampling_data.get("stats_dir", str(defaults.stats_dir)),
        field_name="sampling.stats_dir",
    )
    max_depth = validate_positive_integer(
        sampling_data.get("max_depth", defaults.max_depth),
        min_value=0,
        max_value=8,
        field_name="sampling.max_depth",
    )
    record_delimiter = sampling_data.get("record_delimiter", defaults.record_delimiter)
    if not isinstance(record_delimiter, str) or record_delimiter == "":
        raise ValidationError(
            "sampling.record_delimiter must be a non-empty string",
            field_name="sampling.record_delimiter",
            value=record_delimiter,
        )
    include_paths = validate_bool(
        sampling_data.get("include_paths", defaults.include_paths),
        field_name="sampling.include_paths",
    )

    return SamplingConfig(
        stats_dir=Path(stats_dir),
        max_depth=max_depth,
        record_delimiter=record_delimiter,
        include_paths=include_paths,
    )


def validate_forwarding_config(forwarding_data: Dict[str, Any]) -> ForwardingConfig:
    """
    Validate the `[forwarding]` section.

    Raises:
        ValidationError: If validation fails
    """
    defaults = ForwardingConfig()

    tag = validate_non_empty_string(
        forwarding_data.get("tag", defaults.tag), field_name="forwarding.tag"
    )
    if any(ch.isspace() for ch in tag):
        raise ValidationError(
            "forwarding.tag must not contain whitespace",
            field_name="forwarding.tag",
            value=tag,
        )

    return ForwardingConfig(
        tag=tag,
        transport=validate_enum_choice(
            forwarding_data.get("transport", defaults.transport),
            valid_choices=TRANSPORT_CHOICES,
            field_name="forwarding.transport",
        ),
        address=validate_non_empty_string(
            forwarding_data.get("address", defaults.address),
            field_name="forwarding.address",
        ),
        facility=validate_enum_choice(
            forwarding_data.get("facility", defaults.facility),
            valid_choices=FACILITY_CHOICES,
            field_name="forwarding.facility",
            case_sensitive=False,
        ),
        max_message_size=validate_positive_integer(
            forwarding_data.get("max_message_size", defaults.max_message_size),
            min_value=MIN_MESSAGE_SIZE,
            max_value=MAX_MESSAGE_SIZE,
            field_name="forwarding.max_message_size",
        ),
        buffer_policy=validate_enum_choice(
            forwarding_data.get("buffer_policy", defaults.buffer_policy),
            valid_choices=BUFFER_POLICY_CHOICES,
            field_name="forwarding.buffer_policy",
        ),
    )


def validate_lifetime_config(lifetime_data: Dict[str, Any]) -> LifetimeConfig:
    """
    Validate the `[lifetime]` section.

    Raises:
        ValidationError: If validation fails
    """
    defaults = LifetimeConfig()

    grace_period = validate_positive_float(
        lifetime_data.get("grace_period", defaults.grace_period),
        min_value=0.1,
        max_value=300.0,
        field_name="lifetime.grace_period",
    )
    work_dir = validate_non_empty_string(
        lifetime_data.get("work_dir", str(defaults.work_dir)),
        field_name="lifetime.work_dir",
    )
    control_prefix = validate_non_empty_string(
        lifetime_data.get("control_prefix", defaults.control_prefix),
        field_name="lifetime.control_prefix",
    )
    buffer_prefix = validate_non_empty_string(
        lifetime_data.get("buffer_prefix", defaults.buffer_prefix),
        field_name="lifetime.buffer_prefix",
    )
    for name, prefix in (("control_prefix", control_prefix), ("buffer_prefix", buffer_prefix)):
        if "/" in prefix:
            raise ValidationError(
                f"lifetime.{name} must not contain a path separator",
                field_name=f"lifetime.{name}",
                value=prefix,
            )

    return LifetimeConfig(
        grace_period=grace_period,
        work_dir=Path(work_dir),
        control_prefix=control_prefix,
        buffer_prefix=buffer_prefix,
    )


def validate_preflight_config(preflight_data: Dict[str, Any]) -> PreflightConfig:
    """
    Validate the `[preflight]` section.

    Raises:
        ValidationError: If validation fails
    """
    defaults = PreflightConfig()

    return PreflightConfig(
        enabled=validate_bool(
            preflight_data.get("enabled", defaults.enabled),
            field_name="preflight.enabled",
        ),
        require_daemon=validate_bool(
            preflight_data.get("require_daemon", defaults.require_daemon),
            field_name="preflight.require_daemon",
        ),
        daemon_names=validate_string_list(
            preflight_data.get("daemon_names", defaults.daemon_names),
            field_name="preflight.daemon_names",
        ),
        tested_distributions=validate_string_list(
            preflight_data.get("tested_distributions", defaults.tested_distributions),
            field_name="preflight.tested_distributions",
        ),
    )


def validate_logging_config(logging_data: Dict[str, Any]) -> LoggingConfig:
    """Validate the `[logging]` section."""
    return LoggingConfig(
        level=validate_enum_choice(
            logging_data.get("level", LoggingConfig().level),
            valid_choices=LOG_LEVEL_CHOICES,
            field_name="logging.level",
            case_sensitive=False,
        )
    )


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate a complete parsed configuration file.

    Args:
        config_data: Raw configuration from TOML

    Returns:
        Validated AppConfig instance

    Raises:
        ValidationError: If any section fails validation
    """
    app_config = AppConfig(
        sampling=validate_sampling_config(_section(config_data, "sampling")),
        forwarding=validate_forwarding_config(_section(config_data, "forwarding")),
        lifetime=validate_lifetime_config(_section(config_data, "lifetime")),
        preflight=validate_preflight_config(_section(config_data, "preflight")),
        logging=validate_logging_config(_section(config_data, "logging")),
    )
    logger.debug(f"Validated configuration: {app_config}")
    return app_config
