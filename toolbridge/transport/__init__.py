"""
Transports to remote tool hosts.
"""

from toolbridge.transport.base import ToolDefinition, ToolTransport
from toolbridge.transport.http import HttpMode, HttpTransport
from toolbridge.transport.jsonrpc import ConnectionState, JsonRpcTransport
from toolbridge.transport.stdio import StdioTransport

__all__ = [
    "ConnectionState",
    "HttpMode",
    "HttpTransport",
    "JsonRpcTransport",
    "StdioTransport",
    "ToolDefinition",
    "ToolTransport",
]
