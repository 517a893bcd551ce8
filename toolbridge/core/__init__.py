"""
toolbridge core: configuration, exceptions and logging.
"""

from toolbridge.core.config import BridgeConfig, load_config
from toolbridge.core.exceptions import (
    ConfigLoadError,
    ConfigurationError,
    HttpStatusError,
    ResultParseError,
    ToolBridgeError,
    ToolConstructionError,
    ToolError,
    ToolInvocationError,
    TransportError,
)
from toolbridge.core.logging import configure_logging, get_standard_logger

__all__ = [
    "BridgeConfig",
    "ConfigLoadError",
    "ConfigurationError",
    "HttpStatusError",
    "ResultParseError",
    "ToolBridgeError",
    "ToolConstructionError",
    "ToolError",
    "ToolInvocationError",
    "TransportError",
    "configure_logging",
    "get_standard_logger",
    "load_config",
]
