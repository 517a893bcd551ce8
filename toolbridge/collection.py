"""
Tool Collection and MCP Tools Client
====================================

``ToolCollection`` stores tools under their qualified names.
``McpToolsClient`` imports every tool a transport lists into a collection,
under one namespace.

Usage:
    async with await McpToolsClient.connect_stdio(
        TransportConfig(command="npx", args=["-y", "@modelcontextprotocol/server-github"]),
        name="github",
        description="[github]",
        prompt_resolver=PromptLibrary(prompts_dir=Path("prompts")),
    ) as client:
        tool = client.tools["github_search_repositories"]
        result = await tool.invoke({"query": "mcp"})
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from toolbridge.core.config import TransportConfig
from toolbridge.core.exceptions import ToolConstructionError
from toolbridge.core.logging import get_standard_logger
from toolbridge.prompts import PromptResolver, identity_resolver
from toolbridge.tool import McpTool
from toolbridge.transport.base import ToolTransport
from toolbridge.transport.http import HttpTransport
from toolbridge.transport.jsonrpc import JsonRpcTransport
from toolbridge.transport.stdio import StdioTransport

logger = get_standard_logger("toolbridge.collection")


class ToolCollection:
    """Ordered mapping from qualified name to tool."""

    def __init__(self) -> None:
        self._tools: dict[str, McpTool] = {}

    def add(self, key: str, tool: McpTool) -> None:
        if key in self._tools:
            logger.warning(f"Replacing tool already registered as '{key}'")
        self._tools[key] = tool
        logger.debug(f"Registered tool: {key}")

    def get(self, key: str) -> McpTool | None:
        return self._tools.get(key)

    def remove(self, key: str) -> bool:
        if key in self._tools:
            del self._tools[key]
            return True
        return False

    def names(self) -> list[str]:
        return list(self._tools)

    def __getitem__(self, key: str) -> McpTool:
        return self._tools[key]

    def __contains__(self, key: object) -> bool:
        return key in self._tools

    def __iter__(self) -> Iterator[McpTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def to_openai_tools(self) -> list[dict[str, Any]]:
        """Export all tools in OpenAI format."""
        return [tool.to_openai_schema() for tool in self]

    def to_anthropic_tools(self) -> list[dict[str, Any]]:
        """Export all tools in Anthropic format."""
        return [tool.to_anthropic_schema() for tool in self]

    def get_tool_instructions(self) -> str:
        """Plain-text catalogue of the tools, for prompt building"""
        if not self._tools:
            return ""

        lines = []
        namespaces: dict[str, str] = {}
        for tool in self:
            if tool.namespace and tool.namespace_description:
                namespaces.setdefault(tool.namespace, tool.namespace_description)

        for namespace, description in namespaces.items():
            lines.append(f"### {namespace}: {description}")

        for key, tool in self._tools.items():
            lines.append(f"- {key}: {tool.description}")
            if tool.parameters:
                params = ", ".join(
                    f"{p.name}{'' if p.required else '?'}: {p.semantic_type.value}"
                    for p in tool.parameters
                )
                lines.append(f"  Parameters: {params}")

        return "\n".join(lines) + "\n"


class McpToolsClient:
    """
    Imports the tools of one MCP server into a ToolCollection.

    The namespace description is resolved once, at import time, through the
    injected prompt resolver.
    """

    def __init__(
        self,
        transport: ToolTransport,
        name: str = "",
        description: str = "",
        prompt_resolver: PromptResolver | None = None,
    ):
        if transport is None:
            raise ToolConstructionError("transport is required")
        self.transport = transport
        self.name = name or ""
        self.description = description or ""
        self._resolve = prompt_resolver or identity_resolver
        self._tools = ToolCollection()

    @classmethod
    async def connect_stdio(
        cls,
        config: TransportConfig,
        name: str = "",
        description: str = "",
        prompt_resolver: PromptResolver | None = None,
    ) -> McpToolsClient:
        """Start a stdio server, connect and import its tools"""
        transport = StdioTransport(config, name=name)
        return await cls._connect(transport, name, description, prompt_resolver)

    @classmethod
    async def connect_url(
        cls,
        url: str | TransportConfig,
        name: str = "",
        description: str = "",
        prompt_resolver: PromptResolver | None = None,
    ) -> McpToolsClient:
        """
        Connect to an HTTP MCP endpoint and import its tools.

        ``url`` is the endpoint address, or a TransportConfig carrying it with
        headers, timeout and HTTP mode.
        """
        config = url if isinstance(url, TransportConfig) else TransportConfig(url=url)
        transport = HttpTransport(config, name=name)
        return await cls._connect(transport, name, description, prompt_resolver)

    @classmethod
    async def _connect(
        cls,
        transport: JsonRpcTransport,
        name: str,
        description: str,
        prompt_resolver: PromptResolver | None,
    ) -> McpToolsClient:
        await transport.connect()
        client = cls(transport, name=name, description=description, prompt_resolver=prompt_resolver)
        try:
            await client.load()
        except BaseException:
            await transport.close()
            raise
        return client

    async def __aenter__(self) -> McpToolsClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def tools(self) -> ToolCollection:
        return self._tools

    @property
    def has_tools(self) -> bool:
        return len(self._tools) > 0

    async def load(self) -> ToolCollection:
        """List the server's tools and rebuild the collection from them"""
        definitions = await self.transport.list_tools()
        namespace_description = self._resolve(self.description)

        tools = ToolCollection()
        for definition in definitions:
            tool = McpTool(
                definition,
                self.transport,
                namespace=self.name,
                namespace_description=namespace_description,
            )
            tools.add(tool.full_name, tool)

        self._tools = tools
        logger.info(f"Imported {len(tools)} tools from '{self.name or 'default'}' namespace")
        return tools

    async def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            await close()
