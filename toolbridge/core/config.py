"""
Configuration Management for toolbridge
========================================

- ConfigLoader: Handles loading from files and environment
- BridgeConfig: Aggregated configuration dataclasses
- load_config: Merges defaults, file and environment
"""

from __future__ import annotations

import json
import logging
import os
from copy import deepcopy
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigLoadError, ConfigurationError

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class TransportConfig:
    """
    Transport configuration.

    ``command`` starts a stdio server; ``url`` points at an HTTP endpoint.
    ``http_mode`` is "auto", "streamable" or "sse".
    """

    command: str = ""
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    cwd: str = ""
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    http_mode: str = "auto"
    timeout: float = 30.0
    protocol_version: str = "2024-11-05"
    client_name: str = "toolbridge"
    client_version: str = "1.0.0"


@dataclass
class CollectionConfig:
    """Namespace assigned to imported tools"""

    namespace: str = ""
    namespace_description: str = ""


@dataclass
class LoggingConfig:
    """Logging configuration"""

    level: str = "INFO"
    json_format: bool = False


@dataclass
class BridgeConfig:
    """Main toolbridge configuration"""

    transport: TransportConfig = field(default_factory=TransportConfig)
    collection: CollectionConfig = field(default_factory=CollectionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BridgeConfig:
        """Build from a nested dict, ignoring unknown keys"""

        def build(section_cls: type, values: Any) -> Any:
            if not isinstance(values, dict):
                return section_cls()
            known = set(section_cls.__dataclass_fields__)
            return section_cls(**{k: v for k, v in values.items() if k in known})

        return cls(
            transport=build(TransportConfig, data.get("transport")),
            collection=build(CollectionConfig, data.get("collection")),
            logging=build(LoggingConfig, data.get("logging")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# ConfigLoader - Handles loading configuration from various sources
# =============================================================================

_NUMERIC_KEYS = {("transport", "timeout"): float}
_BOOLEAN_KEYS = {("logging", "json_format")}


class ConfigLoader:
    """
    Loads configuration from files (YAML/JSON) and environment variables.

    Responsibilities:
    - File I/O operations
    - Environment variable parsing
    - Deep merging of configuration sources
    """

    def __init__(self, env_prefix: str = "TOOLBRIDGE_"):
        self.env_prefix = env_prefix
        self._logger = logging.getLogger("toolbridge.config.loader")

    def load_from_file(self, path: str) -> dict[str, Any]:
        """Load configuration from a YAML or JSON file"""
        file_path = Path(path)

        if not file_path.exists():
            raise ConfigLoadError(config_path=path, reason="File does not exist")

        try:
            with open(file_path, encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise ConfigLoadError(config_path=path, reason=str(e))

        suffix = file_path.suffix.lower()
        try:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif suffix == ".json":
                data = json.loads(content)
            else:
                raise ConfigLoadError(config_path=path, reason=f"Unsupported file format: {suffix}")
        except yaml.YAMLError as e:
            raise ConfigLoadError(config_path=path, reason=f"YAML error: {e}")
        except json.JSONDecodeError as e:
            raise ConfigLoadError(config_path=path, reason=f"JSON error: {e}")

        if not isinstance(data, dict):
            raise ConfigLoadError(config_path=path, reason="Top level must be a mapping")

        self._logger.debug(f"Loaded configuration from {path}")
        return data

    def load_from_env(self) -> dict[str, Any]:
        """Load configuration from environment variables"""
        config: dict[str, Any] = {}

        env_mappings = {
            f"{self.env_prefix}COMMAND": ("transport", "command"),
            f"{self.env_prefix}URL": ("transport", "url"),
            f"{self.env_prefix}TIMEOUT": ("transport", "timeout"),
            f"{self.env_prefix}NAMESPACE": ("collection", "namespace"),
            f"{self.env_prefix}NAMESPACE_DESCRIPTION": ("collection", "namespace_description"),
            f"{self.env_prefix}LOG_LEVEL": ("logging", "level"),
            f"{self.env_prefix}LOG_FORMAT": ("logging", "json_format"),
        }

        for env_var, config_path in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                self._set_nested(config, config_path, self._convert(env_var, config_path, value))

        return config

    def _convert(self, env_var: str, path: tuple[str, str], value: str) -> Any:
        if path in _NUMERIC_KEYS:
            try:
                return _NUMERIC_KEYS[path](value)
            except ValueError:
                raise ConfigurationError(
                    message=f"Environment variable {env_var} must be numeric",
                    details={"variable": env_var, "value": value},
                )
        if path in _BOOLEAN_KEYS:
            return value.strip().lower() == "json"
        return value

    def _set_nested(self, config: dict[str, Any], path: tuple, value: Any) -> None:
        """Set a value in a nested dictionary path"""
        current = config
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries"""
        result = deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self.deep_merge(result[key], value)
            else:
                result[key] = deepcopy(value)

        return result


# =============================================================================
# Convenience Functions
# =============================================================================


def get_default_config() -> BridgeConfig:
    """Get default configuration"""
    return BridgeConfig()


def load_config(config_path: str | None = None, env_prefix: str = "TOOLBRIDGE_") -> BridgeConfig:
    """
    Load configuration from available sources.

    Priority (lowest first): defaults, file, environment.

    Args:
        config_path: Path to configuration file (optional)
        env_prefix: Environment variable prefix

    Returns:
        Configuration object
    """
    loader = ConfigLoader(env_prefix=env_prefix)
    merged = get_default_config().to_dict()

    if config_path:
        merged = loader.deep_merge(merged, loader.load_from_file(config_path))

    merged = loader.deep_merge(merged, loader.load_from_env())
    return BridgeConfig.from_dict(merged)
