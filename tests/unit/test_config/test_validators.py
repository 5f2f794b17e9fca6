"""
Unit tests for configuration validation functionality.

Tests the validation of every config.toml section and of the generic
argument validators the CLI relies on.
"""

from pathlib import Path

import pytest

from procnetlog.config.validators import (
    validate_app_config,
    validate_forwarding_config,
    validate_lifetime_config,
    validate_logging_config,
    validate_preflight_config,
    validate_sampling_config,
)
from procnetlog.models.config import AppConfig
from procnetlog.validation import (
    ValidationError,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)


@pytest.mark.unit
class TestAppConfigValidation:
    """Test cases for whole-file validation."""

    def test_validate_app_config_success(self, sample_config_data, fake_stats_dir, temp_dir):
        """Test successful validation of a complete configuration."""
        config = validate_app_config(sample_config_data)

        assert config.sampling.stats_dir == fake_stats_dir
        assert config.sampling.max_depth == 1
        assert config.forwarding.tag == "SAVE_PROC_NET"
        assert config.forwarding.address == str(temp_dir / "syslog.sock")
        assert config.lifetime.grace_period == 2.0
        assert config.lifetime.work_dir == temp_dir
        assert config.preflight.daemon_names == ["rsyslogd"]
        assert config.logging.level == "DEBUG"

    def test_validate_app_config_empty_uses_defaults(self):
        """Test that missing sections fall back to the defaults."""
        config = validate_app_config({})
        assert config == AppConfig()
        assert config.sampling.stats_dir == Path("/proc/net")
        assert config.forwarding.tag == "SAVE_PROC_NET"
        assert config.lifetime.grace_period == 2.0
        assert config.lifetime.control_prefix == "p1log"
        assert config.lifetime.buffer_prefix == "p2log"

    def test_validate_app_config_section_not_table(self):
        """Test validation failure when a section is not a table."""
        with pytest.raises(ValidationError) as exc_info:
            validate_app_config({"sampling": "nope"})
        assert "[sampling]" in str(exc_info.value)


@pytest.mark.unit
class TestSectionValidation:
    """Test cases for individual sections."""

    def test_sampling_max_depth_bounds(self):
        assert validate_sampling_config({"max_depth": 0}).max_depth == 0
        with pytest.raises(ValidationError) as exc_info:
            validate_sampling_config({"max_depth": -1})
        assert "sampling.max_depth" in str(exc_info.value)

    def test_sampling_empty_delimiter_rejected(self):
        with pytest.raises(ValidationError):
            validate_sampling_config({"record_delimiter": ""})

    def test_sampling_include_paths_must_be_bool(self):
        with pytest.raises(ValidationError):
            validate_sampling_config({"include_paths": "yes"})

    def test_forwarding_invalid_transport(self):
        """Test validation failure with an unknown transport."""
        with pytest.raises(ValidationError) as exc_info:
            validate_forwarding_config({"transport": "carrier-pigeon"})
        assert "forwarding.transport" in str(exc_info.value)

    def test_forwarding_tag_with_whitespace(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_forwarding_config({"tag": "SAVE PROC NET"})
        assert "whitespace" in str(exc_info.value)

    def test_forwarding_facility_is_case_insensitive(self):
        assert validate_forwarding_config({"facility": "LOCAL0"}).facility == "local0"

    def test_forwarding_unknown_buffer_policy(self):
        with pytest.raises(ValidationError):
            validate_forwarding_config({"buffer_policy": "cumulative"})

    def test_forwarding_max_message_size_bounds(self):
        assert validate_forwarding_config({}).max_message_size == 8192
        assert validate_forwarding_config({"max_message_size": 2048}).max_message_size == 2048
        for size in (100, 70000, "big"):
            with pytest.raises(ValidationError):
                validate_forwarding_config({"max_message_size": size})

    def test_lifetime_grace_period_range(self):
        assert validate_lifetime_config({"grace_period": 0.5}).grace_period == 0.5
        with pytest.raises(ValidationError):
            validate_lifetime_config({"grace_period": 0})
        with pytest.raises(ValidationError):
            validate_lifetime_config({"grace_period": 1000})

    def test_lifetime_prefix_with_separator(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_lifetime_config({"buffer_prefix": "../p2log"})
        assert "lifetime.buffer_prefix" in str(exc_info.value)

    def test_preflight_lists(self):
        config = validate_preflight_config({"daemon_names": [], "tested_distributions": ["Ubuntu 22"]})
        assert config.daemon_names == []
        assert config.tested_distributions == ["Ubuntu 22"]
        with pytest.raises(ValidationError):
            validate_preflight_config({"daemon_names": "rsyslogd"})

    def test_logging_level_normalized(self):
        assert validate_logging_config({"level": "debug"}).level == "DEBUG"
        with pytest.raises(ValidationError):
            validate_logging_config({"level": "chatty"})


@pytest.mark.unit
class TestArgumentValidators:
    """Test cases for the generic validators."""

    @pytest.mark.parametrize("value, expected", [("15", 15), (" 35 ", 35), (7, 7), (3.0, 3)])
    def test_positive_integer_accepts(self, value, expected):
        assert validate_positive_integer(value, field_name="interval") == expected

    @pytest.mark.parametrize("value", ["0", "-5", "abc", "1.5", "", None, True, 2.5])
    def test_positive_integer_rejects(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_positive_integer(value, field_name="interval")
        assert exc_info.value.field_name == "interval"

    def test_positive_integer_max_value(self):
        with pytest.raises(ValidationError):
            validate_positive_integer(10, max_value=5)

    def test_positive_float(self):
        assert validate_positive_float("2.5") == 2.5
        with pytest.raises(ValidationError):
            validate_positive_float(-0.1)
        with pytest.raises(ValidationError):
            validate_positive_float(False)

    def test_enum_choice_returns_canonical_spelling(self):
        assert validate_enum_choice("Info", ["DEBUG", "INFO"], case_sensitive=False) == "INFO"
        with pytest.raises(ValidationError):
            validate_enum_choice("Info", ["DEBUG", "INFO"])
