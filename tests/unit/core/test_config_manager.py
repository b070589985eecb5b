"""
Tests for ConfigManager.
"""

import json

import pytest
import yaml
from pydantic import ValidationError

from localcosmos.core.config_manager import (
    ConfigManager,
    LocalCosmosConfig,
    LogLevel,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure no LOCALCOSMOS_* variables leak into tests."""
    for name in (
        "LOCALCOSMOS_LOG_LEVEL",
        "LOCALCOSMOS_LOG_FORMAT",
        "LOCALCOSMOS_LOG_FILE",
        "LOCALCOSMOS_ENDPOINT",
        "LOCALCOSMOS_KEY",
        "LOCALCOSMOS_REQUEST_CHARGE",
    ):
        monkeypatch.delenv(name, raising=False)


class TestConfigManager:
    """Test suite for ConfigManager."""

    def test_load_defaults(self):
        """Test loading default configuration."""
        config = ConfigManager().load()

        assert config.version == "0.1.0"
        assert config.logging.level == LogLevel.INFO
        assert config.logging.format == "json"
        assert config.emulator.endpoint == "https://localhost:8081"
        assert config.emulator.request_charge == 1.0

    def test_load_from_yaml_file(self, tmp_path):
        """Test loading configuration from YAML file."""
        config_file = tmp_path / "localcosmos.yaml"
        config_file.write_text(yaml.dump({
            "version": "1.0.0",
            "logging": {"level": "DEBUG", "format": "text"},
            "emulator": {"request_charge": 2.5},
        }))

        config = ConfigManager().load(config_file=str(config_file))

        assert config.version == "1.0.0"
        assert config.logging.level == LogLevel.DEBUG
        assert config.logging.format == "text"
        assert config.emulator.request_charge == 2.5

    def test_load_from_json_file(self, tmp_path):
        """Test loading configuration from JSON file."""
        config_file = tmp_path / "localcosmos.json"
        config_file.write_text(json.dumps({"emulator": {"endpoint": "https://example:443"}}))

        config = ConfigManager().load(config_file=str(config_file))

        assert config.emulator.endpoint == "https://example:443"

    def test_missing_file(self):
        """Test a missing config file raises."""
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(config_file="/nonexistent/localcosmos.yaml")

    def test_unsupported_format(self, tmp_path):
        """Test unsupported file suffix raises."""
        config_file = tmp_path / "localcosmos.toml"
        config_file.write_text("x = 1")

        with pytest.raises(ValueError, match="Unsupported config file format"):
            ConfigManager().load(config_file=str(config_file))

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test environment variables take precedence over file values."""
        config_file = tmp_path / "localcosmos.yaml"
        config_file.write_text(yaml.dump({"logging": {"level": "DEBUG"}}))
        monkeypatch.setenv("LOCALCOSMOS_LOG_LEVEL", "warning")
        monkeypatch.setenv("LOCALCOSMOS_REQUEST_CHARGE", "3")

        config = ConfigManager().load(config_file=str(config_file))

        assert config.logging.level == LogLevel.WARNING
        assert config.emulator.request_charge == 3.0

    def test_cli_overrides_env(self, monkeypatch):
        """Test CLI overrides take precedence over environment variables."""
        monkeypatch.setenv("LOCALCOSMOS_LOG_LEVEL", "ERROR")

        config = ConfigManager().load(cli_overrides={"logging": {"level": "DEBUG"}})

        assert config.logging.level == LogLevel.DEBUG

    def test_invalid_version(self):
        """Test invalid version format is rejected."""
        with pytest.raises(ValidationError):
            ConfigManager().load(cli_overrides={"version": "1.0"})

    def test_invalid_log_format(self):
        """Test unknown log format is rejected."""
        with pytest.raises(ValidationError):
            LocalCosmosConfig(logging={"format": "xml"})

    def test_negative_request_charge(self):
        """Test request charge must not be negative."""
        with pytest.raises(ValidationError):
            LocalCosmosConfig(emulator={"request_charge": -1})

    def test_get_config_before_load(self):
        """Test get_config raises before load."""
        with pytest.raises(RuntimeError):
            ConfigManager().get_config()

    def test_redacted_masks_key(self, monkeypatch):
        """Test the account key never appears in the redacted view."""
        monkeypatch.setenv("LOCALCOSMOS_KEY", "supersecret")
        manager = ConfigManager()
        config = manager.load()

        assert config.emulator.key == "supersecret"
        assert manager.redacted()["emulator"]["key"] == "***REDACTED***"

    def test_reload(self, tmp_path):
        """Test reload re-reads the same file."""
        config_file = tmp_path / "localcosmos.yaml"
        config_file.write_text(yaml.dump({"emulator": {"request_charge": 1.5}}))
        manager = ConfigManager()
        manager.load(config_file=str(config_file))

        config_file.write_text(yaml.dump({"emulator": {"request_charge": 4.0}}))
        config = manager.reload()

        assert config.emulator.request_charge == 4.0
