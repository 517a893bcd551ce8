"""Tests for the Invocation Bridge"""

import asyncio

import pytest

from toolbridge.core.exceptions import ResultParseError, ToolInvocationError, TransportError
from toolbridge.invocation import (
    Invocation,
    InvocationBridge,
    InvocationState,
    content_text,
    normalize_result,
)
from toolbridge.schema.extractor import extract_parameters
from toolbridge.schema.types import MISSING


class TestNormalizeResult:
    """Tests for normalize_result"""

    def test_json_text(self):
        assert normalize_result('{"ok":true}') == {"ok": True}

    def test_json_bytes(self):
        assert normalize_result(b'[1, "a", null]') == [1, "a", None]

    @pytest.mark.parametrize("text", ["42", '"hi"', "true", "null"])
    def test_json_scalar_text(self, text):
        normalize_result(text)

    def test_structured_result_is_copied(self):
        raw = {"content": [{"type": "text", "text": "x"}], "meta": ("a", 1)}
        result = normalize_result(raw)
        assert result == {"content": [{"type": "text", "text": "x"}], "meta": ["a", 1]}
        assert result is not raw
        assert result["content"] is not raw["content"]

    @pytest.mark.parametrize("raw", ["not json", "", "{", b"\xff\xfe"])
    def test_unparseable_text(self, raw):
        with pytest.raises(ResultParseError):
            normalize_result(raw, "t")

    def test_non_json_structure(self):
        with pytest.raises(ResultParseError, match="unsupported value"):
            normalize_result({"when": object()}, "t")

    def test_non_string_key(self):
        with pytest.raises(ResultParseError, match="non-string key"):
            normalize_result({1: "a"}, "t")

    def test_model_dump_objects(self):
        class Model:
            def model_dump(self, **kwargs):
                return {"isError": False, "content": []}

        assert normalize_result(Model()) == {"isError": False, "content": []}


class TestContentText:
    """Tests for content_text"""

    def test_joins_text_items(self):
        result = {
            "content": [
                {"type": "text", "text": "line 1"},
                {"type": "image", "data": "..."},
                {"type": "text", "text": "line 2"},
            ]
        }
        assert content_text(result) == "line 1\nline 2"

    def test_falls_back_to_json(self):
        assert content_text({"ok": True}) == '{\n  "ok": true\n}'

    def test_plain_string(self):
        assert content_text("done") == "done"


class TestInvocation:
    """Tests for the invocation state machine"""

    def test_initial_state(self):
        invocation = Invocation(tool_name="t")
        assert invocation.state is InvocationState.BINDING
        assert not invocation.done
        assert invocation.duration_ms is None

    def test_happy_path(self):
        invocation = Invocation(tool_name="t")
        invocation.transition(InvocationState.INVOKING)
        invocation.transition(InvocationState.COMPLETED)
        assert invocation.done
        assert invocation.duration_ms >= 0

    def test_binding_cannot_complete_directly(self):
        invocation = Invocation(tool_name="t")
        with pytest.raises(RuntimeError):
            invocation.transition(InvocationState.COMPLETED)

    def test_terminal_states_have_no_exit(self):
        invocation = Invocation(tool_name="t")
        invocation.transition(InvocationState.INVOKING)
        invocation.transition(InvocationState.FAILED)
        with pytest.raises(RuntimeError):
            invocation.transition(InvocationState.INVOKING)


class TestInvocationBridge:
    """Tests for InvocationBridge.run"""

    @pytest.fixture
    def params(self, search_schema):
        return extract_parameters(search_schema)

    @pytest.mark.asyncio
    async def test_completed(self, params):
        calls = []

        async def call(name, arguments):
            calls.append((name, arguments))
            return '{"ok":true}'

        bridge = InvocationBridge("search", call)
        invocation = await bridge.run(params, {"q": "status"})

        assert invocation.state is InvocationState.COMPLETED
        assert invocation.result == {"ok": True}
        assert invocation.error is None
        assert calls == [("search", {"q": "status", "limit": 10.0})]

    @pytest.mark.asyncio
    async def test_missing_marker_reaches_the_call(self, params):
        seen = {}

        async def call(name, arguments):
            seen.update(arguments)
            return "{}"

        invocation = await InvocationBridge("search", call).run(params, {"limit": 5})

        assert invocation.state is InvocationState.COMPLETED
        assert seen["q"] is MISSING
        assert seen["limit"] == 5.0

    @pytest.mark.asyncio
    async def test_transport_exception_is_wrapped(self, params):
        async def call(name, arguments):
            raise ConnectionError("socket closed")

        invocation = await InvocationBridge("search", call).run(params, {"q": "x"})

        assert invocation.state is InvocationState.FAILED
        assert isinstance(invocation.error, ToolInvocationError)
        assert isinstance(invocation.error.cause, ConnectionError)
        assert "socket closed" in invocation.error.message

    @pytest.mark.asyncio
    async def test_toolbridge_errors_kept(self, params):
        error = TransportError("srv", "gone")

        async def call(name, arguments):
            raise error

        invocation = await InvocationBridge("search", call).run(params, {"q": "x"})
        assert invocation.error is error

    @pytest.mark.asyncio
    async def test_timeout_fails(self, params):
        async def call(name, arguments):
            raise asyncio.TimeoutError()

        invocation = await InvocationBridge("search", call).run(params, {"q": "x"})
        assert invocation.state is InvocationState.FAILED
        assert "TimeoutError" in invocation.error.message

    @pytest.mark.asyncio
    async def test_parse_failure_fails(self, params):
        async def call(name, arguments):
            return "<html>"

        invocation = await InvocationBridge("search", call).run(params, {"q": "x"})
        assert invocation.state is InvocationState.FAILED
        assert isinstance(invocation.error, ResultParseError)

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, params):
        started = asyncio.Event()

        async def call(name, arguments):
            started.set()
            await asyncio.sleep(10)

        bridge = InvocationBridge("search", call)
        task = asyncio.create_task(bridge.run(params, {"q": "x"}))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_no_retry(self, params):
        attempts = 0

        async def call(name, arguments):
            nonlocal attempts
            attempts += 1
            raise RuntimeError("boom")

        await InvocationBridge("search", call).run(params, {"q": "x"})
        assert attempts == 1
