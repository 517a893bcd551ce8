"""
toolbridge
==========

Exposes remotely defined, JSON-schema described tools (MCP) as local async
callables:

    - McpTool: one remote tool with typed parameters and ``invoke``
    - McpToolsClient / ToolCollection: import a server's tools under a namespace
    - StdioTransport: JSON-RPC over a server process's stdin/stdout
    - HttpTransport: JSON-RPC over Streamable HTTP or HTTP+SSE

Usage:
    from toolbridge import McpToolsClient, TransportConfig

    client = await McpToolsClient.connect_stdio(TransportConfig(command="my-server"))
    # or, for a server reachable over HTTP:
    client = await McpToolsClient.connect_url("http://localhost:8000/mcp")
    result = await client.tools["search"].invoke({"q": "status"})
"""

from toolbridge.binding import BoundArguments, bind_arguments, coerce_value
from toolbridge.collection import McpToolsClient, ToolCollection
from toolbridge.core.config import BridgeConfig, TransportConfig, load_config
from toolbridge.core.exceptions import (
    ResultParseError,
    ToolBridgeError,
    ToolConstructionError,
    ToolInvocationError,
    TransportError,
)
from toolbridge.invocation import Invocation, InvocationState, normalize_result
from toolbridge.prompts import PromptLibrary
from toolbridge.schema import MISSING, ParameterDescriptor, SemanticType
from toolbridge.tool import McpTool
from toolbridge.transport import HttpTransport, StdioTransport, ToolDefinition, ToolTransport

__version__ = "1.0.0"

__all__ = [
    "MISSING",
    "BoundArguments",
    "BridgeConfig",
    "HttpTransport",
    "Invocation",
    "InvocationState",
    "McpTool",
    "McpToolsClient",
    "ParameterDescriptor",
    "PromptLibrary",
    "ResultParseError",
    "SemanticType",
    "StdioTransport",
    "ToolBridgeError",
    "ToolCollection",
    "ToolConstructionError",
    "ToolDefinition",
    "ToolInvocationError",
    "ToolTransport",
    "TransportConfig",
    "TransportError",
    "bind_arguments",
    "coerce_value",
    "load_config",
    "normalize_result",
]
