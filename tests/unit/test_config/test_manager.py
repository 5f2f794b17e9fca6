"""
Unit tests for configuration loading and caching.
"""

import pytest

from procnetlog.config import clear_config_cache, get_config, manager, set_config_path
from procnetlog.models.config import AppConfig
from procnetlog.validation import ValidationError


@pytest.mark.unit
class TestConfigManager:
    """Test cases for the configuration singleton."""

    def test_load_from_custom_path(self, config_files, fake_stats_dir):
        """Test loading a config file set with set_config_path."""
        set_config_path(config_files["config"])
        config = get_config()

        assert config.sampling.stats_dir == fake_stats_dir
        assert config.logging.level == "DEBUG"
        assert manager.is_config_loaded()

    def test_config_is_cached(self, config_files):
        set_config_path(config_files["config"])
        assert get_config() is get_config()

        clear_config_cache()
        assert not manager.is_config_loaded()

    def test_explicit_missing_file_is_an_error(self, temp_dir):
        set_config_path(temp_dir / "missing.toml")
        with pytest.raises(FileNotFoundError):
            get_config()

    def test_missing_default_file_uses_builtin_defaults(self, temp_dir, monkeypatch):
        missing = temp_dir / "conf" / "config.toml"
        monkeypatch.setattr(manager, "_DEFAULT_CONFIG_FILE_PATH", missing)
        monkeypatch.setattr(manager, "_CONFIG_FILE_PATH", missing)

        assert get_config() == AppConfig()

    def test_malformed_file(self, temp_dir):
        bad = temp_dir / "bad.toml"
        bad.write_text("[sampling\nmax_depth = ")
        set_config_path(bad)
        with pytest.raises(ValueError):
            get_config()

    def test_invalid_values(self, temp_dir):
        bad = temp_dir / "bad.toml"
        bad.write_text('[forwarding]\ntransport = "carrier-pigeon"\n')
        set_config_path(bad)
        with pytest.raises(ValidationError):
            get_config()

    def test_shipped_config_matches_defaults(self):
        """The checked-in conf/config.toml documents the built-in defaults."""
        if not manager._DEFAULT_CONFIG_FILE_PATH.exists():
            pytest.skip("not running from a source checkout")
        assert get_config() == AppConfig()

    def test_get_config_info(self, config_files):
        set_config_path(config_files["config"])
        info = manager.get_config_info()
        assert info["config_path"] == str(config_files["config"])
        assert info["using_default_path"] is False
        assert info["config_loaded"] is False
