"""
Tool Facade
===========

``McpTool`` wraps one remote tool definition as a named, described,
invokable unit. Parameters and the schema snapshot are derived once, at
construction, and never change afterwards.

Usage:
    tool = McpTool(definition, transport, namespace="github")
    result = await tool.invoke({"query": "mcp"})
    schema = tool.describe_schema()
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

from toolbridge.core.exceptions import ToolConstructionError
from toolbridge.core.logging import get_standard_logger
from toolbridge.invocation import CallFunction, Invocation, InvocationBridge, InvocationState
from toolbridge.schema.extractor import build_schema_snapshot, extract_parameters
from toolbridge.schema.types import ParameterDescriptor
from toolbridge.transport.base import ToolDefinition, ToolTransport

logger = get_standard_logger("toolbridge.tool")


class McpTool:
    """A remote tool exposed as a local async callable."""

    def __init__(
        self,
        definition: ToolDefinition | None,
        transport: ToolTransport | CallFunction | None,
        namespace: str = "",
        namespace_description: str = "",
    ):
        if definition is None:
            raise ToolConstructionError("tool definition is missing")
        if transport is None:
            raise ToolConstructionError(f"no transport for tool '{definition.name}'")
        if not definition.name:
            raise ToolConstructionError("tool definition has no name")

        call = transport.call_tool if isinstance(transport, ToolTransport) else transport

        self._name = definition.name
        self._description = definition.description or ""
        self._namespace = namespace or ""
        self._namespace_description = namespace_description or ""
        self._parameters = extract_parameters(definition.input_schema, tool_name=definition.name)
        self._schema = build_schema_snapshot(definition.input_schema)
        self._bridge = InvocationBridge(definition.name, call)

        logger.debug(f"Built tool '{self.full_name}' with {len(self._parameters)} parameters")

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def namespace_description(self) -> str:
        return self._namespace_description

    @property
    def full_name(self) -> str:
        """Qualified name: ``<namespace>_<name>``, or just the name"""
        if self._namespace:
            return f"{self._namespace}_{self._name}"
        return self._name

    @property
    def parameters(self) -> tuple[ParameterDescriptor, ...]:
        return self._parameters

    def describe_schema(self) -> dict[str, Any]:
        """Normalized parameter schema; a copy the caller may modify"""
        return deepcopy(self._schema)

    async def invoke_detailed(self, arguments: Mapping[str, Any] | None = None) -> Invocation:
        """Run one invocation and return its terminal record"""
        return await self._bridge.run(self._parameters, arguments)

    async def invoke(self, arguments: Mapping[str, Any] | None = None) -> Any:
        """
        Invoke the remote tool.

        Args:
            arguments: Caller values by parameter name

        Returns:
            The normalized result (plain JSON data)

        Raises:
            ToolInvocationError: the remote call or the transport failed
            ResultParseError: the result is not JSON
        """
        invocation = await self.invoke_detailed(arguments)
        if invocation.state is InvocationState.FAILED and invocation.error is not None:
            raise invocation.error
        return invocation.result

    # =========================================================================
    # Planner formats
    # =========================================================================

    def to_openai_schema(self) -> dict[str, Any]:
        """OpenAI ``tools`` entry"""
        return {
            "type": "function",
            "function": {
                "name": self.full_name,
                "description": self._description,
                "parameters": self._planner_parameters(),
            },
        }

    def to_anthropic_schema(self) -> dict[str, Any]:
        """Anthropic ``tools`` entry"""
        return {
            "name": self.full_name,
            "description": self._description,
            "input_schema": self._planner_parameters(),
        }

    def _planner_parameters(self) -> dict[str, Any]:
        schema = self.describe_schema()
        required = [p.name for p in self._parameters if p.required]
        if required:
            schema["required"] = required
        return schema

    def __repr__(self) -> str:
        return f"McpTool({self.full_name!r}, parameters={[p.name for p in self._parameters]})"
