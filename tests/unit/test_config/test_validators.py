"""
Unit tests for configuration validation functionality.

Tests the validation of the `[monitor]` sections, the low-level validators
and loading through the configuration manager.
"""

from pathlib import Path

import pytest

from iomonitor.config import (
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
    validate_disk_settings,
    validate_emmc_settings,
    validate_monitor_config,
    validate_task_settings,
)
from iomonitor.validation import (
    ValidationError,
    validate_block_device_name,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
)


@pytest.mark.unit
class TestMonitorConfigValidation:
    """Test cases for monitor configuration validation."""

    def test_validate_monitor_config_success(self, sample_config_data):
        """Test successful validation of a complete configuration."""
        config = validate_monitor_config(sample_config_data)

        assert config.log_level == "DEBUG"
        assert config.graceful_shutdown_timeout == 2.0
        assert config.disk.device == "sda"
        assert config.disk.window_size == 5
        assert config.disk.sigma == 1.0
        assert config.disk.max_stall_episodes == 10
        assert config.tasks.process_pattern == ".*"
        assert config.emmc.enabled is False
        assert config.storage.format == "parquet"
        assert config.log_root_dir.exists()

    def test_validate_monitor_config_defaults(self, temp_dir):
        """Missing sections fall back to defaults."""
        config = validate_monitor_config({"general": {"log_root_dir": str(temp_dir / "logs")}})

        assert config.log_level == "INFO"
        assert config.disk.device == "auto"
        assert config.disk.window_size == 5
        assert config.disk.sigma == 1.0
        assert config.disk.publish_interval_seconds == 3600.0
        assert config.tasks.interval_seconds == 60.0
        assert config.emmc.interval_seconds == 86400.0
        assert config.storage.compression == "snappy"

    def test_log_level_case_insensitive(self, sample_config_data):
        """Log levels are normalized to upper case."""
        sample_config_data["general"]["log_level"] = "warning"
        assert validate_monitor_config(sample_config_data).log_level == "WARNING"

    def test_invalid_log_level(self, sample_config_data):
        """Unknown log levels are rejected."""
        sample_config_data["general"]["log_level"] = "CHATTY"
        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config(sample_config_data)
        assert "log_level" in str(exc_info.value)

    def test_invalid_storage(self, sample_config_data):
        """Storage errors surface as ValidationError."""
        sample_config_data["storage"]["format"] = "xml"
        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config(sample_config_data)
        assert "monitor.storage" in str(exc_info.value)


@pytest.mark.unit
class TestSectionValidation:
    """Test cases for the per-section validators."""

    def test_window_size_minimum(self):
        """A window of one sample has no spread and is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_disk_settings({"window_size": 1})
        assert exc_info.value.field_name == "monitor.disk.window_size"

    def test_negative_sigma(self):
        """Sigma must be non-negative."""
        with pytest.raises(ValidationError):
            validate_disk_settings({"sigma": -1})

    def test_zero_sigma_allowed(self):
        """Zero sigma means zero tolerance."""
        assert validate_disk_settings({"sigma": 0}).sigma == 0.0

    def test_device_with_path_rejected(self):
        """Devices are names, not paths."""
        with pytest.raises(ValidationError):
            validate_disk_settings({"device": "/dev/sda"})

    def test_invalid_interval(self):
        """Non-positive intervals are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_task_settings({"interval_seconds": -1.0})
        assert "interval_seconds" in str(exc_info.value)

    def test_invalid_process_pattern(self):
        """The process pattern must compile."""
        with pytest.raises(ValidationError):
            validate_task_settings({"process_pattern": "(unclosed"})

    def test_emmc_enabled_must_be_bool(self):
        """TOML strings are not booleans."""
        with pytest.raises(ValidationError):
            validate_emmc_settings({"enabled": "yes"})

    def test_emmc_path(self):
        """The EXT_CSD path becomes a Path."""
        emmc = validate_emmc_settings({"enabled": True, "ext_csd_path": "/tmp/ext_csd"})
        assert emmc.enabled is True
        assert emmc.ext_csd_path == Path("/tmp/ext_csd")


@pytest.mark.unit
class TestValidators:
    """Test cases for the low-level validators."""

    def test_positive_integer(self):
        assert validate_positive_integer("7", min_value=2) == 7
        with pytest.raises(ValidationError):
            validate_positive_integer(1, min_value=2)
        with pytest.raises(ValidationError):
            validate_positive_integer(11, max_value=10)
        with pytest.raises(ValidationError):
            validate_positive_integer(True)
        with pytest.raises(ValidationError):
            validate_positive_integer("many")

    def test_positive_float(self):
        assert validate_positive_float(2, min_value=0.0) == 2.0
        with pytest.raises(ValidationError):
            validate_positive_float(float("nan"))
        with pytest.raises(ValidationError):
            validate_positive_float(None)

    def test_enum_choice(self):
        assert validate_enum_choice("json", ["parquet", "json"]) == "json"
        assert validate_enum_choice("Json", ["parquet", "json"], case_sensitive=False) == "json"
        with pytest.raises(ValidationError):
            validate_enum_choice("Json", ["parquet", "json"])

    def test_regex_pattern(self):
        assert validate_regex_pattern("^cc1$") == "^cc1$"
        with pytest.raises(ValidationError):
            validate_regex_pattern("")

    def test_block_device_name(self):
        assert validate_block_device_name(" sda ") == "sda"
        with pytest.raises(ValidationError):
            validate_block_device_name("")


@pytest.mark.unit
class TestConfigManager:
    """Loading through the singleton manager."""

    def test_load_from_file(self, config_files):
        """The manager loads, validates and caches the file."""
        set_config_path(config_files["config"])
        assert not is_config_loaded()

        config = get_config()
        assert config.source_path == config_files["config"]
        assert config.monitor.disk.device == "sda"
        assert get_config() is config
        assert get_config_info()["device"] == "sda"

    def test_missing_file(self, temp_dir):
        """A missing file raises FileNotFoundError."""
        set_config_path(temp_dir / "missing.toml")
        with pytest.raises(FileNotFoundError):
            get_config()

    def test_invalid_file(self, config_files, sample_config_data):
        """Validation errors propagate from get_config."""
        import toml

        sample_config_data["disk"]["window_size"] = 0
        with open(config_files["config"], "w") as f:
            toml.dump({"monitor": sample_config_data}, f)

        set_config_path(config_files["config"])
        with pytest.raises(ValidationError):
            get_config()
