"""
HTTP MCP Transport
==================

Talks to an MCP server at a URL over either of the protocol's HTTP wires:

- Streamable HTTP: each JSON-RPC message is POSTed to the endpoint and the
  answer comes back as a JSON body or as an event stream.
- HTTP+SSE: a long-lived GET event stream first announces a message
  endpoint. Messages are POSTed there and answers arrive on the stream.

In "auto" mode the transport tries Streamable HTTP and falls back to HTTP+SSE
when the initialize POST is rejected with 400, 404 or 405.

Usage:
    config = TransportConfig(url="http://localhost:8000/mcp")
    async with HttpTransport(config, name="docs") as transport:
        tools = await transport.list_tools()
"""

from __future__ import annotations

import asyncio
import contextlib
import json
from enum import Enum
from typing import Any
from urllib.parse import urljoin

import aiohttp

from toolbridge.core.config import TransportConfig
from toolbridge.core.exceptions import ConfigurationError, HttpStatusError, TransportError
from toolbridge.core.logging import get_standard_logger
from toolbridge.transport.jsonrpc import JsonRpcTransport, unwrap_response
from toolbridge.transport.sse import SseEvent, iter_sse_events

logger = get_standard_logger("toolbridge.transport.http")

SESSION_HEADER = "Mcp-Session-Id"
PROTOCOL_HEADER = "MCP-Protocol-Version"

_FALLBACK_STATUSES = frozenset({400, 404, 405})


class HttpMode(Enum):
    """Which HTTP wire to speak"""

    AUTO = "auto"
    STREAMABLE = "streamable"
    SSE = "sse"


class HttpTransport(JsonRpcTransport):
    """JSON-RPC client for a single MCP server over HTTP."""

    def __init__(self, config: TransportConfig, name: str = ""):
        super().__init__(config, name=name or config.url)
        try:
            self.mode = HttpMode(config.http_mode or HttpMode.AUTO.value)
        except ValueError:
            raise ConfigurationError(
                message=f"Unknown HTTP mode '{config.http_mode}'",
                details={"http_mode": config.http_mode},
                suggestions=["Use one of: auto, streamable, sse"],
            )

        self._session: aiohttp.ClientSession | None = None
        self._session_id: str | None = None
        self._active_mode: HttpMode | None = None

        # HTTP+SSE
        self._stream: aiohttp.ClientResponse | None = None
        self._reader: asyncio.Task[None] | None = None
        self._endpoint: str | None = None
        self._pending: dict[int, asyncio.Future[dict[str, Any]]] = {}

    @property
    def active_mode(self) -> HttpMode | None:
        """The wire in use once connected: STREAMABLE or SSE"""
        return self._active_mode

    # =========================================================================
    # Channel
    # =========================================================================

    async def _open(self) -> None:
        if not self.config.url:
            raise TransportError(self.name or "http", "no endpoint URL configured")

        headers = {
            "User-Agent": f"{self.config.client_name}/{self.config.client_version}",
            **self.config.headers,
        }
        self._session = aiohttp.ClientSession(
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=None, sock_connect=self.config.timeout),
        )

        if self.mode is HttpMode.SSE:
            try:
                await self._open_stream()
            except BaseException:
                await self._shutdown()
                raise
        else:
            self._active_mode = HttpMode.STREAMABLE

    async def _handshake(self) -> Any:
        try:
            return await super()._handshake()
        except HttpStatusError as e:
            if self.mode is not HttpMode.AUTO or e.status not in _FALLBACK_STATUSES:
                raise
            logger.info(f"'{self.name}' rejected Streamable HTTP (HTTP {e.status}), trying HTTP+SSE")

        self._session_id = None
        await self._open_stream()
        return await super()._handshake()

    async def _request(self, method: str, params: dict[str, Any], tool: str = "") -> Any:
        message = {"jsonrpc": "2.0", "id": self._next_id(), "method": method, "params": params}
        try:
            if self._active_mode is HttpMode.SSE:
                response = await asyncio.wait_for(
                    self._exchange_over_stream(message), timeout=self.config.timeout
                )
            else:
                response = await asyncio.wait_for(self._post(message), timeout=self.config.timeout)
        except asyncio.TimeoutError:
            raise self._timeout_error(method, tool)

        if response is None:
            raise TransportError(self.name, f"no response to '{method}'")
        return unwrap_response(response, method, tool)

    async def _notify(self, method: str, params: dict[str, Any]) -> None:
        message = {"jsonrpc": "2.0", "method": method, "params": params}
        try:
            if self._active_mode is HttpMode.SSE:
                await asyncio.wait_for(self._post_to_endpoint(message), timeout=self.config.timeout)
            else:
                await asyncio.wait_for(self._post(message), timeout=self.config.timeout)
        except asyncio.TimeoutError:
            raise self._timeout_error(method)

    async def _shutdown(self) -> None:
        reader, self._reader = self._reader, None
        if reader is not None:
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader

        for future in self._pending.values():
            future.cancel()
        self._pending.clear()

        if self._stream is not None:
            self._stream.close()
            self._stream = None

        session, self._session = self._session, None
        if session is not None:
            if self._session_id and self._active_mode is HttpMode.STREAMABLE:
                await self._end_session(session)
            await session.close()

        self._session_id = None
        self._endpoint = None
        self._active_mode = None

    # =========================================================================
    # Streamable HTTP
    # =========================================================================

    def _request_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json, text/event-stream"}
        if self._session_id:
            headers[SESSION_HEADER] = self._session_id
        if self.protocol_version:
            headers[PROTOCOL_HEADER] = self.protocol_version
        return headers

    def _require_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            raise TransportError(self.name, "HTTP session not open")
        return self._session

    async def _post(self, message: dict[str, Any]) -> dict[str, Any] | None:
        """POST one message; the matching response, or None for notifications"""
        session = self._require_session()
        try:
            async with session.post(
                self.config.url, json=message, headers=self._request_headers()
            ) as response:
                session_id = response.headers.get(SESSION_HEADER)
                if session_id:
                    self._session_id = session_id

                if response.status == 202:
                    return None
                if response.status != 200:
                    raise HttpStatusError(self.name, response.status, await response.text())
                if "id" not in message:
                    return None

                content_type = response.headers.get("Content-Type", "")
                if content_type.startswith("text/event-stream"):
                    return await self._response_from_events(response, message["id"])
                try:
                    body = await response.json(content_type=None)
                except json.JSONDecodeError as e:
                    raise TransportError(self.name, f"invalid JSON response: {e}", cause=e)
                return self._match_response(body, message["id"])

        except aiohttp.ClientError as e:
            raise TransportError(self.name, f"request failed: {e}", cause=e)

    async def _response_from_events(
        self, response: aiohttp.ClientResponse, request_id: int
    ) -> dict[str, Any]:
        async for event in iter_sse_events(response.content.iter_any()):
            message = self._decode_event(event)
            if message is None:
                continue
            if message.get("id") == request_id and ("result" in message or "error" in message):
                return message
            logger.debug(f"Skipping unrelated message from '{self.name}': {message!r:.120}")

        raise TransportError(self.name, "event stream ended without a response")

    def _match_response(self, body: Any, request_id: int) -> dict[str, Any]:
        messages = body if isinstance(body, list) else [body]
        for message in messages:
            if isinstance(message, dict) and message.get("id") == request_id:
                return message
        raise TransportError(self.name, f"response does not answer request {request_id}")

    async def _end_session(self, session: aiohttp.ClientSession) -> None:
        try:
            async with session.delete(
                self.config.url,
                headers=self._request_headers(),
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
            ):
                pass
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"Ending session on '{self.name}' failed: {e!r}")

    # =========================================================================
    # HTTP+SSE
    # =========================================================================

    async def _open_stream(self) -> None:
        """Open the GET event stream and wait for its ``endpoint`` event"""
        session = self._require_session()
        try:
            response = await asyncio.wait_for(
                session.get(self.config.url, headers={"Accept": "text/event-stream"}),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError:
            raise TransportError(self.name, "event stream did not open in time")
        except aiohttp.ClientError as e:
            raise TransportError(self.name, f"event stream failed: {e}", cause=e)

        if response.status != 200:
            body = await response.text()
            response.release()
            raise HttpStatusError(self.name, response.status, body)

        endpoint: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._stream = response
        self._active_mode = HttpMode.SSE
        self._reader = asyncio.create_task(self._read_stream(response, endpoint))

        try:
            self._endpoint = await asyncio.wait_for(endpoint, timeout=self.config.timeout)
        except asyncio.TimeoutError:
            raise TransportError(self.name, "no endpoint event on the event stream")
        logger.debug(f"'{self.name}' posts messages to {self._endpoint}")

    async def _read_stream(
        self, response: aiohttp.ClientResponse, endpoint: asyncio.Future[str]
    ) -> None:
        try:
            async for event in iter_sse_events(response.content.iter_any()):
                if event.event == "endpoint":
                    if not endpoint.done():
                        endpoint.set_result(urljoin(self.config.url, event.data.strip()))
                    continue

                message = self._decode_event(event)
                if message is None:
                    continue
                request_id = message.get("id")
                future = self._pending.get(request_id) if isinstance(request_id, int) else None
                if future is not None and not future.done():
                    future.set_result(message)
                else:
                    logger.debug(f"Skipping unrelated message from '{self.name}': {message!r:.120}")
            reason = "event stream closed"
        except aiohttp.ClientError as e:
            reason = f"event stream failed: {e}"

        error = TransportError(self.name, reason)
        if not endpoint.done():
            endpoint.set_exception(error)
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)

    async def _exchange_over_stream(self, message: dict[str, Any]) -> dict[str, Any]:
        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[message["id"]] = future
        try:
            await self._post_to_endpoint(message)
            return await future
        finally:
            self._pending.pop(message["id"], None)

    async def _post_to_endpoint(self, message: dict[str, Any]) -> None:
        session = self._require_session()
        if self._endpoint is None:
            raise TransportError(self.name, "no message endpoint announced")
        try:
            async with session.post(
                self._endpoint, json=message, headers=self._request_headers()
            ) as response:
                if response.status not in (200, 202):
                    raise HttpStatusError(self.name, response.status, await response.text())
        except aiohttp.ClientError as e:
            raise TransportError(self.name, f"request failed: {e}", cause=e)

    def _decode_event(self, event: SseEvent) -> dict[str, Any] | None:
        if event.event != "message":
            return None
        try:
            message = json.loads(event.data)
        except json.JSONDecodeError:
            logger.debug(f"Skipping non-JSON event from '{self.name}': {event.data[:120]!r}")
            return None
        return message if isinstance(message, dict) else None
