"""
JSON-RPC MCP client base
========================

The MCP session shared by every wire: the ``initialize`` handshake, paginated
``tools/list`` and ``tools/call``. Subclasses only move JSON-RPC messages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from toolbridge.core.config import TransportConfig
from toolbridge.core.exceptions import ToolInvocationError, TransportError
from toolbridge.core.logging import get_standard_logger
from toolbridge.schema.types import is_missing
from toolbridge.transport.base import ToolDefinition

logger = get_standard_logger("toolbridge.transport")


class ConnectionState(Enum):
    """State of the transport"""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


def unwrap_response(response: dict[str, Any], method: str, tool: str = "") -> Any:
    """``result`` of a JSON-RPC response; an ``error`` member raises"""
    if "error" in response:
        error = response["error"]
        message = error.get("message", error) if isinstance(error, dict) else error
        raise ToolInvocationError(tool or method, f"MCP error: {message}")
    return response.get("result")


class JsonRpcTransport(ABC):
    """
    MCP client session over an abstract message channel.

    Subclasses implement:
    - _open: acquire the channel (process, HTTP session)
    - _request / _notify: one JSON-RPC exchange
    - _shutdown: release the channel
    """

    def __init__(self, config: TransportConfig, name: str = ""):
        self.config = config
        self.name = name
        self.state = ConnectionState.DISCONNECTED
        self.server_info: dict[str, Any] = {}
        self.protocol_version = ""
        self.error = ""
        self._request_id = 0

    async def __aenter__(self) -> JsonRpcTransport:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    async def connect(self) -> None:
        """
        Open the channel and run the initialize handshake.

        Raises:
            TransportError: the channel could not be opened or the handshake failed
        """
        if self.connected:
            return

        self.state = ConnectionState.CONNECTING
        try:
            await self._open()
        except TransportError as e:
            self.state = ConnectionState.ERROR
            self.error = str(e)
            logger.error(f"Failed to open MCP server '{self.name}': {e.message}")
            raise

        try:
            await self._handshake()
        except (ToolInvocationError, TransportError) as e:
            self.state = ConnectionState.ERROR
            self.error = str(e)
            await self._shutdown()
            raise TransportError(self.name, f"handshake failed: {e.message}", cause=e)

        self.state = ConnectionState.CONNECTED
        logger.info(f"Connected to MCP server '{self.name}'")

    async def close(self) -> None:
        """Release the channel"""
        await self._shutdown()
        if self.state != ConnectionState.ERROR:
            self.state = ConnectionState.DISCONNECTED
        logger.info(f"Disconnected from MCP server '{self.name}'")

    async def list_tools(self) -> list[ToolDefinition]:
        """All tools of the server, following ``nextCursor`` pagination"""
        self._ensure_connected()

        tools: list[ToolDefinition] = []
        cursor: str | None = None
        while True:
            params = {"cursor": cursor} if cursor else {}
            result = await self._request("tools/list", params) or {}
            for data in result.get("tools", []):
                if isinstance(data, dict):
                    tools.append(ToolDefinition.from_mcp(data, server_name=self.name))
            cursor = result.get("nextCursor")
            if not cursor:
                break

        logger.debug(f"Server '{self.name}' lists {len(tools)} tools")
        return tools

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """
        Call a tool and return the raw ``tools/call`` result.

        Arguments bound to MISSING are left out of the request so the server
        reports them through its own validation.

        Raises:
            ToolInvocationError: JSON-RPC error or timeout
            TransportError: not connected, or the channel failed
        """
        self._ensure_connected()
        wire = {key: value for key, value in arguments.items() if not is_missing(value)}
        return await self._request("tools/call", {"name": name, "arguments": wire}, tool=name)

    # =========================================================================
    # Channel
    # =========================================================================

    async def _handshake(self) -> Any:
        result = await self._request(
            "initialize",
            {
                "protocolVersion": self.config.protocol_version,
                "capabilities": {},
                "clientInfo": {
                    "name": self.config.client_name,
                    "version": self.config.client_version,
                },
            },
        )
        if isinstance(result, dict):
            self.server_info = result.get("serverInfo") or {}
            self.protocol_version = result.get("protocolVersion") or ""
        await self._notify("notifications/initialized", {})
        return result

    def _ensure_connected(self) -> None:
        if not self.connected:
            raise TransportError(self.name, f"not connected (state: {self.state.value})")

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def _timeout_error(self, method: str, tool: str = "") -> ToolInvocationError:
        return ToolInvocationError(tool or method, f"request timed out after {self.config.timeout}s")

    @abstractmethod
    async def _open(self) -> None: ...

    @abstractmethod
    async def _request(self, method: str, params: dict[str, Any], tool: str = "") -> Any: ...

    @abstractmethod
    async def _notify(self, method: str, params: dict[str, Any]) -> None: ...

    @abstractmethod
    async def _shutdown(self) -> None: ...
