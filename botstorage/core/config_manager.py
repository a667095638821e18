"""
Configuration management for botstorage.

Handles loading, validation, and access to storage configuration.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
from enum import Enum

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator, ValidationError, ConfigDict

from botstorage.core.logging_config import SensitiveDataFilter
from botstorage.storage.exceptions import ConfigurationError
from botstorage.storage.models import TableNameValidator

logger = logging.getLogger(__name__)


# Logical collection name -> table name suffix
DEFAULT_COLLECTIONS: Dict[str, str] = {
    "teams": "Teams",
    "users": "Users",
    "channels": "Channels",
}


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
    format: str = "text"
    file: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class StorageConfig(BaseModel):
    """Storage configuration schema."""

    model_config = ConfigDict(populate_by_name=True)

    storage_connection_string: str = Field(
        ...,
        alias="storageConnectionString",
        description="Azure Storage connection string",
    )

    table_prefix: str = Field(
        ...,
        alias="tablePrefix",
        description="Prefix prepended to every collection's table name",
    )

    collections: Dict[str, str] = Field(
        default_factory=dict,
        description="Additional collections, e.g. {'workspaces': 'Workspaces'}",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("storage_connection_string", "table_prefix")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only values."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_table_names(self) -> "StorageConfig":
        """Every resulting table name must be a legal Azure table name."""
        for name, suffix in self.all_collections().items():
            table_name = f"{self.table_prefix}{suffix}"
            is_valid, error = TableNameValidator.validate(table_name)
            if not is_valid:
                raise ValueError(f"Collection '{name}' maps to invalid table name '{table_name}': {error}")
        return self

    def all_collections(self) -> Dict[str, str]:
        """Default collections merged with configured extras."""
        merged = dict(DEFAULT_COLLECTIONS)
        merged.update(self.collections)
        return merged

    def table_name(self, suffix: str) -> str:
        return f"{self.table_prefix}{suffix}"

    def redacted(self) -> Dict[str, Any]:
        """Configuration as a dict with credentials redacted."""
        config_dict = self.model_dump()
        config_dict["storage_connection_string"] = SensitiveDataFilter.redact(
            config_dict["storage_connection_string"]
        )
        return config_dict

    @classmethod
    def coerce(cls, config: Union["StorageConfig", Mapping[str, Any], None]) -> "StorageConfig":
        """
        Build a validated config from a StorageConfig, a mapping, or None.

        Raises:
            ConfigurationError: If the configuration is missing or invalid
        """
        if isinstance(config, StorageConfig):
            return config
        if not config:
            raise ConfigurationError(
                "You must provide storageConnectionString and tablePrefix in config"
            )
        try:
            return cls.model_validate(dict(config))
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(e)) from e


def _format_validation_error(error: ValidationError) -> str:
    details = [
        f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
        for err in error.errors()
    ]
    return f"Invalid storage configuration: {'; '.join(details)}"


class ConfigManager:
    """
    Manages botstorage configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. Explicit overrides (e.g. CLI arguments)
    2. Environment variables (BOTSTORAGE_*)
    3. Configuration file (YAML/JSON)
    """

    def __init__(self):
        self._config: Optional[StorageConfig] = None
        self._config_file: Optional[Path] = None

    def load(
        self,
        config_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> StorageConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            overrides: Dictionary of explicit overrides

        Returns:
            Validated StorageConfig instance

        Raises:
            ConfigurationError: If configuration is missing or invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        logger.debug("Loading storage configuration")

        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            self._config_file = Path(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.debug(f"Applied {len(env_config)} environment variable overrides")

        if overrides:
            config_dict = self._merge_configs(
                config_dict, {k: v for k, v in overrides.items() if v is not None}
            )

        self._config = StorageConfig.coerce(config_dict)
        logger.debug(f"Active configuration: {json.dumps(self._config.redacted(), indent=2)}")
        return self._config

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
                raise ConfigurationError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if connection_string := os.getenv("BOTSTORAGE_CONNECTION_STRING"):
            config["storage_connection_string"] = connection_string
        if table_prefix := os.getenv("BOTSTORAGE_TABLE_PREFIX"):
            config["table_prefix"] = table_prefix

        if log_level := os.getenv("BOTSTORAGE_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_format := os.getenv("BOTSTORAGE_LOG_FORMAT"):
            config.setdefault("logging", {})["format"] = log_format.lower()

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = _normalize_keys(base)

        for key, value in _normalize_keys(override).items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def get_config(self) -> StorageConfig:
        """
        Get the loaded configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config


_ALIASES = {
    "storageConnectionString": "storage_connection_string",
    "tablePrefix": "table_prefix",
}


def _normalize_keys(config: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase aliases to field names so sources merge on one key."""
    return {_ALIASES.get(key, key): value for key, value in config.items()}
