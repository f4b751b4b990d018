"""
Configuration management for sqlmigrate.
"""

from copy import deepcopy
import json
import logging
import os
from pathlib import Path
import re
from typing import Any, Dict, Optional, Union

import yaml

from ..database.migrations.base import DEFAULT_OPTIONS, MigrationOptions
from .exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from .settings import Settings

# Table and column names are interpolated into SQL
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigValidator:
    """
    Validator for configuration data.

    Checks the ``database``, ``migrations`` and ``logging`` sections. Every
    section is optional; missing values fall back to defaults.
    """

    def __init__(self) -> None:
        """Initialize the validator."""
        self.known_sections = ["database", "migrations", "logging"]
        self.valid_log_levels = list(VALID_LOG_LEVELS)

    def validate(self, config: Dict[str, Any]) -> None:
        """
        Validate configuration data.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ConfigValidationError: If validation fails
        """
        if not isinstance(config, dict):
            raise ConfigValidationError("configuration must be a dictionary")

        for section in self.known_sections:
            if section in config and not isinstance(config[section], dict):
                raise ConfigValidationError(
                    f"{section} configuration must be a dictionary",
                    config_key=section,
                )

        self._validate_database(config.get("database", {}))
        self._validate_migrations(config.get("migrations", {}))
        self._validate_logging(config.get("logging", {}))

    def _validate_database(self, config: Dict[str, Any]) -> None:
        """Validate database configuration."""
        if "url" in config:
            if not isinstance(config["url"], str) or not config["url"]:
                raise ConfigValidationError("database url must be a non-empty string", config_key="database.url")

        if "echo" in config and not isinstance(config["echo"], bool):
            raise ConfigValidationError("database echo must be a boolean", config_key="database.echo")

    def _validate_migrations(self, config: Dict[str, Any]) -> None:
        """Validate migration table configuration."""
        for key in ("table_name", "id_column_name"):
            if key not in config or config[key] in (None, ""):
                continue

            value = config[key]
            if not isinstance(value, str) or not IDENTIFIER_PATTERN.match(value):
                raise ConfigValidationError(
                    f"migrations {key} must be a valid SQL identifier",
                    context={"provided_value": value},
                    config_key=f"migrations.{key}",
                )

        if "id_column_size" in config:
            size = config["id_column_size"]
            if isinstance(size, bool) or not isinstance(size, int) or size < 0:
                raise ConfigValidationError(
                    "migrations id_column_size must be a non-negative integer",
                    context={"provided_value": size},
                    config_key="migrations.id_column_size",
                )

    def _validate_logging(self, config: Dict[str, Any]) -> None:
        """Validate logging configuration."""
        if "level" in config:
            if not isinstance(config["level"], str) or config["level"].upper() not in self.valid_log_levels:
                raise ConfigValidationError(
                    f"logging level must be one of: {self.valid_log_levels}",
                    context={"provided_level": config.get("level"), "valid_levels": self.valid_log_levels},
                    config_key="logging.level",
                )

        if "format" in config and not isinstance(config["format"], str):
            raise ConfigValidationError("logging format must be a string", config_key="logging.format")


class ConfigLoader:
    """
    Configuration loader supporting multiple formats.

    Provides loading from files, dictionaries, and environment variables
    with support for JSON and YAML formats.
    """

    def __init__(self) -> None:
        """Initialize the configuration loader."""
        self.supported_formats = ['.json', '.yaml', '.yml']

    def load_from_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            file_path: Path to the configuration file

        Returns:
            Configuration dictionary

        Raises:
            ConfigNotFoundError: If file is not found
            ConfigError: If file format is unsupported or parsing fails
        """
        path = Path(file_path)

        if not path.exists():
            raise ConfigNotFoundError(
                f"Configuration file not found: {file_path}",
                context={"file_path": str(file_path)}
            )

        if path.suffix not in self.supported_formats:
            raise ConfigError(
                f"Unsupported file format: {path.suffix}. Supported formats: {self.supported_formats}",
                context={"file_path": str(file_path), "suffix": path.suffix}
            )

        try:
            with open(path, encoding='utf-8') as f:
                if path.suffix == '.json':
                    return json.load(f)
                return yaml.safe_load(f) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to parse configuration file: {e}", cause=e)
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}", cause=e)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from a dictionary (deep copy)."""
        return deepcopy(config_dict)

    def load_from_environment(self, prefix: str = "SQLMIGRATE_") -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Args:
            prefix: Prefix for environment variable names

        Returns:
            Configuration dictionary built from environment variables
        """
        config: Dict[str, Any] = {}

        env_mapping = {
            f"{prefix}DATABASE_URL": ("database", "url", str),
            f"{prefix}TABLE_NAME": ("migrations", "table_name", str),
            f"{prefix}ID_COLUMN_NAME": ("migrations", "id_column_name", str),
            f"{prefix}ID_COLUMN_SIZE": ("migrations", "id_column_size", int),
            f"{prefix}LOG_LEVEL": ("logging", "level", str),
        }

        for env_var, (section, key, value_type) in env_mapping.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            try:
                config.setdefault(section, {})[key] = value_type(value)
            except (ValueError, TypeError) as e:
                raise ConfigError(f"Invalid value for {env_var}: {value}", cause=e)

        return config

    def merge_configs(self, base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge two configuration dictionaries.

        Args:
            base_config: Base configuration
            override_config: Configuration to merge (takes precedence)

        Returns:
            Merged configuration dictionary
        """
        merged = deepcopy(base_config)
        self._deep_merge(merged, override_config)
        return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge two dictionaries."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = deepcopy(value)


class ConfigManager:
    """
    Centralized configuration management.

    Loads and validates configuration files and turns them into
    ``MigrationOptions`` and ``Settings`` for the migration manager.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the configuration manager.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.loader = ConfigLoader()
        self.validator = ConfigValidator()
        self.config: Optional[Dict[str, Any]] = None
        self.config_file_path: Optional[Path] = None

    def load_config(self, source: Union[str, Path, Dict[str, Any]]) -> None:
        """
        Load configuration from a file path or dictionary.

        Raises:
            ConfigError: If loading or validation fails
        """
        try:
            if isinstance(source, (str, Path)):
                self.config_file_path = Path(source)
                config = self.loader.load_from_file(source)
                self.logger.info(f"Loaded configuration from file: {source}")
            elif isinstance(source, dict):
                config = self.loader.load_from_dict(source)
                self.logger.info("Loaded configuration from dictionary")
            else:
                raise ConfigError(f"Unsupported configuration source type: {type(source)}")

            self.validator.validate(config)
            self.config = config
            self.logger.info("Configuration validation passed")

        except ConfigError as e:
            self.logger.error(f"Failed to load configuration: {e}")
            raise

    def reload_config(self) -> None:
        """Reload configuration from the original file."""
        if self.config_file_path is None:
            raise ConfigError("No configuration file path set for reload")

        self.load_config(self.config_file_path)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "migrations.table_name")
            default: Default value if key is not found
        """
        if self.config is None:
            return default

        value: Any = self.config
        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value using dot notation."""
        if self.config is None:
            self.config = {}

        keys = key.split('.')
        current = self.config

        for k in keys[:-1]:
            if k not in current:
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value
        self.logger.debug(f"Set configuration {key} = {value}")

    def apply_environment_overrides(self, prefix: str = "SQLMIGRATE_") -> None:
        """Apply environment variable overrides to current configuration."""
        env_config = self.loader.load_from_environment(prefix)
        merged = self.loader.merge_configs(self.config or {}, env_config)

        self.validator.validate(merged)
        self.config = merged
        self.logger.info("Applied environment variable overrides")

    def get_migration_options(self) -> MigrationOptions:
        """Migration options from the ``migrations`` section."""
        return MigrationOptions(
            table_name=self.get("migrations.table_name") or DEFAULT_OPTIONS.table_name,
            id_column_name=self.get("migrations.id_column_name") or DEFAULT_OPTIONS.id_column_name,
            id_column_size=self.get("migrations.id_column_size") or DEFAULT_OPTIONS.id_column_size,
        )

    def get_settings(self) -> Settings:
        """Build ``Settings`` with values from the loaded configuration taking precedence."""
        overrides: Dict[str, Any] = {}

        mapping = {
            "database.url": "database_url",
            "database.echo": "echo_sql",
            "migrations.table_name": "table_name",
            "migrations.id_column_name": "id_column_name",
            "migrations.id_column_size": "id_column_size",
            "logging.level": "log_level",
        }
        for key, field_name in mapping.items():
            value = self.get(key)
            if value is not None:
                overrides[field_name] = value

        return Settings(**overrides)
