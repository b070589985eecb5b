"""
Configuration management for LocalCosmos.

Handles loading, validation, and access to configuration settings.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

import yaml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    format: str = "json"
    file: Optional[str] = None
    rotation_size: str = "10MB"
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'localcosmos.emulator.store': 'DEBUG'}"
    )

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError(f"Log format must be 'json' or 'text': {v}")
        return v


class EmulatorConfig(BaseModel):
    """Emulated account configuration."""
    endpoint: str = "https://localhost:8081"
    key: str = ""
    request_charge: float = Field(
        default=1.0,
        ge=0.0,
        description="Constant request charge reported on every response"
    )


class LocalCosmosConfig(BaseModel):
    """Main LocalCosmos configuration schema."""

    version: str = Field(default="0.1.0", description="Configuration version")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    emulator: EmulatorConfig = Field(default_factory=EmulatorConfig)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version format."""
        parts = v.split(".")
        if len(parts) != 3:
            raise ValueError("Version must be in format x.y.z")
        for part in parts:
            if not part.isdigit():
                raise ValueError("Version components must be numeric")
        return v

    model_config = ConfigDict(use_enum_values=True)


class ConfigManager:
    """
    Manages LocalCosmos configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables (LOCALCOSMOS_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[LocalCosmosConfig] = None
        self._config_file: Optional[Path] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> LocalCosmosConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            cli_overrides: Dictionary of CLI argument overrides

        Returns:
            Validated LocalCosmosConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        logger.info("Loading LocalCosmos configuration")

        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            self._config_file = Path(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.info(f"Applied {len(env_config)} environment variable overrides")

        if cli_overrides:
            config_dict = self._merge_configs(config_dict, cli_overrides)
            logger.info(f"Applied {len(cli_overrides)} CLI argument overrides")

        try:
            self._config = LocalCosmosConfig(**config_dict)
            logger.info("Configuration validated successfully")
            self._log_configuration()
            return self._config
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if log_level := os.getenv("LOCALCOSMOS_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_format := os.getenv("LOCALCOSMOS_LOG_FORMAT"):
            config.setdefault("logging", {})["format"] = log_format.lower()
        if log_file := os.getenv("LOCALCOSMOS_LOG_FILE"):
            config.setdefault("logging", {})["file"] = log_file

        if endpoint := os.getenv("LOCALCOSMOS_ENDPOINT"):
            config.setdefault("emulator", {})["endpoint"] = endpoint
        if key := os.getenv("LOCALCOSMOS_KEY"):
            config.setdefault("emulator", {})["key"] = key
        if charge := os.getenv("LOCALCOSMOS_REQUEST_CHARGE"):
            config.setdefault("emulator", {})["request_charge"] = float(charge)

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _log_configuration(self) -> None:
        """Log the loaded configuration with the account key redacted."""
        if not self._config:
            return

        config_dict = self.redacted()
        logger.info(f"Active configuration: {json.dumps(config_dict, indent=2)}")

    def redacted(self) -> Dict[str, Any]:
        """Loaded configuration as a dict with the account key masked."""
        config_dict = self.get_config().model_dump()
        if config_dict["emulator"]["key"]:
            config_dict["emulator"]["key"] = "***REDACTED***"
        return config_dict

    def get_config(self) -> LocalCosmosConfig:
        """
        Get the loaded configuration.

        Returns:
            LocalCosmosConfig instance

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def reload(self) -> LocalCosmosConfig:
        """
        Reload configuration from the same sources.

        Returns:
            Reloaded LocalCosmosConfig instance
        """
        config_file = str(self._config_file) if self._config_file else None
        return self.load(config_file=config_file)
