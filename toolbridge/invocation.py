"""
Invocation Bridge
=================

Runs one call of a remote tool:

    BINDING -> INVOKING -> COMPLETED
                        -> FAILED

Binding is synchronous; the only suspension point is the awaited transport
call. Every run builds its own ``Invocation`` and ``BoundArguments``, so
concurrent runs of the same tool share nothing mutable. There is no retry.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from toolbridge.binding import BoundArguments, bind_arguments
from toolbridge.core.exceptions import ResultParseError, ToolBridgeError, ToolInvocationError
from toolbridge.core.logging import get_standard_logger
from toolbridge.schema.types import ParameterDescriptor

logger = get_standard_logger("toolbridge.invocation")

CallFunction = Callable[[str, dict[str, Any]], Awaitable[Any]]


class InvocationState(Enum):
    BINDING = "binding"
    INVOKING = "invoking"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS = {
    InvocationState.BINDING: {InvocationState.INVOKING},
    InvocationState.INVOKING: {InvocationState.COMPLETED, InvocationState.FAILED},
    InvocationState.COMPLETED: set(),
    InvocationState.FAILED: set(),
}


@dataclass
class Invocation:
    """Record of a single tool call"""

    tool_name: str
    state: InvocationState = InvocationState.BINDING
    arguments: BoundArguments | None = None
    result: Any = None
    error: BaseException | None = None
    started_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None

    @property
    def done(self) -> bool:
        return self.state in (InvocationState.COMPLETED, InvocationState.FAILED)

    @property
    def duration_ms(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at) * 1000

    def transition(self, state: InvocationState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid invocation transition {self.state.value} -> {state.value}")
        logger.debug(f"Tool '{self.tool_name}': {self.state.value} -> {state.value}")
        self.state = state
        if self.done:
            self.finished_at = time.monotonic()


# =============================================================================
# Result normalization
# =============================================================================


def _to_json_tree(value: Any, tool_name: str, raw: Any) -> Any:
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Mapping):
        tree = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ResultParseError(tool_name, raw, f"non-string key {key!r}")
            tree[key] = _to_json_tree(item, tool_name, raw)
        return tree
    if isinstance(value, (list, tuple)):
        return [_to_json_tree(item, tool_name, raw) for item in value]
    if hasattr(value, "model_dump"):
        return _to_json_tree(
            value.model_dump(mode="json", by_alias=True, exclude_none=True), tool_name, raw
        )
    raise ResultParseError(tool_name, raw, f"unsupported value of type {type(value).__name__}")


def normalize_result(raw: Any, tool_name: str = "") -> Any:
    """
    Parse a raw tool result into plain JSON data.

    Text (str/bytes) is decoded as JSON. Structured results are copied into
    fresh dicts/lists; pydantic models are dumped first.

    Raises:
        ResultParseError: text is not JSON, or the structure holds non-JSON values
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ResultParseError(tool_name, raw, f"invalid UTF-8: {e}", cause=e)

    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ResultParseError(tool_name, raw, f"invalid JSON: {e}", cause=e)

    return _to_json_tree(raw, tool_name, raw)


def content_text(result: Any) -> str:
    """
    Join the text items of an MCP ``content`` list.

    Falls back to the JSON text of the whole result when it carries no text
    content.
    """
    if isinstance(result, dict) and isinstance(result.get("content"), list):
        texts = [
            item["text"]
            for item in result["content"]
            if isinstance(item, dict) and isinstance(item.get("text"), str)
        ]
        if texts:
            return "\n".join(texts)
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, ensure_ascii=False)


# =============================================================================
# Bridge
# =============================================================================


class InvocationBridge:
    """Binds, calls and normalizes for one tool."""

    def __init__(self, tool_name: str, call: CallFunction):
        self.tool_name = tool_name
        self._call = call

    async def run(
        self,
        parameters: Sequence[ParameterDescriptor],
        arguments: Mapping[str, Any] | None,
    ) -> Invocation:
        """
        Perform one invocation and return its terminal record.

        Invocation failures are recorded on the returned ``Invocation``
        (state FAILED, ``error`` set), never raised. Cancellation is recorded
        and then re-raised.
        """
        invocation = Invocation(tool_name=self.tool_name)
        invocation.arguments = bind_arguments(parameters, arguments)
        if invocation.arguments.missing:
            logger.debug(
                f"Tool '{self.tool_name}' invoked without required {invocation.arguments.missing}"
            )

        invocation.transition(InvocationState.INVOKING)
        try:
            raw = await self._call(self.tool_name, invocation.arguments.to_dict())
            invocation.result = normalize_result(raw, self.tool_name)
        except asyncio.CancelledError as e:
            invocation.error = e
            invocation.transition(InvocationState.FAILED)
            logger.error(f"Tool '{self.tool_name}' invocation cancelled")
            raise
        except ToolBridgeError as e:
            invocation.error = e
            invocation.transition(InvocationState.FAILED)
            logger.error(f"Tool '{self.tool_name}' failed: {e.message}")
            return invocation
        except Exception as e:
            invocation.error = ToolInvocationError(
                self.tool_name, str(e) or type(e).__name__, cause=e
            )
            invocation.transition(InvocationState.FAILED)
            logger.error(f"Tool '{self.tool_name}' failed: {e!r}")
            return invocation

        invocation.transition(InvocationState.COMPLETED)
        return invocation
