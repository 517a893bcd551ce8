"""
Transport collaborators: the remote tool definition and the call interface.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass
class ToolDefinition:
    """A tool as listed by the remote host"""

    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=dict)
    server_name: str = ""

    @classmethod
    def from_mcp(cls, data: dict[str, Any], server_name: str = "") -> ToolDefinition:
        """Parse one entry of a ``tools/list`` result"""
        schema = data.get("inputSchema")
        return cls(
            name=data.get("name", ""),
            description=data.get("description") or "",
            input_schema=schema if isinstance(schema, dict) else {},
            server_name=server_name,
        )


@runtime_checkable
class ToolTransport(Protocol):
    """Anything that can list remote tools and call one of them."""

    async def list_tools(self) -> list[ToolDefinition]: ...

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any: ...
