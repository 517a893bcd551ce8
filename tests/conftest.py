"""
Shared pytest fixtures for toolbridge tests

Includes:
    - Sample tool schemas and definitions
    - FakeTransport: scripted in-memory transport
    - Path to the fake stdio MCP server used by transport tests
"""

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest

from toolbridge.tool import McpTool
from toolbridge.transport.base import ToolDefinition

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =============================================================================
# Fake Transport
# =============================================================================


class FakeTransport:
    """In-memory transport that records calls and returns scripted results"""

    def __init__(
        self,
        tools: list[ToolDefinition] | None = None,
        result: Any = '{"ok": true}',
        error: BaseException | None = None,
        delay: float = 0.0,
    ):
        self.tools = tools or []
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def list_tools(self) -> list[ToolDefinition]:
        return list(self.tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        self.calls.append((name, arguments))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if callable(self.result):
            return self.result(name, arguments)
        return self.result

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# Schema Fixtures
# =============================================================================


@pytest.fixture
def search_schema() -> dict[str, Any]:
    """Schema with one required string and one defaulted number"""
    return {
        "type": "object",
        "properties": {
            "q": {"type": "string", "description": "Query text"},
            "limit": {"type": "number", "default": 10},
        },
        "required": ["q"],
    }


@pytest.fixture
def search_definition(search_schema) -> ToolDefinition:
    return ToolDefinition(
        name="search",
        description="Search the index",
        input_schema=search_schema,
        server_name="index",
    )


@pytest.fixture
def transport_factory() -> type[FakeTransport]:
    """FakeTransport class, for tests that script their own results"""
    return FakeTransport


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def search_tool(search_definition, fake_transport) -> McpTool:
    return McpTool(search_definition, fake_transport, namespace="index")


# =============================================================================
# Stdio Server Fixtures
# =============================================================================


@pytest.fixture
def fake_server_command() -> tuple[str, list[str]]:
    """Command line of the scripted MCP server"""
    return sys.executable, [str(FIXTURES_DIR / "fake_mcp_server.py")]
