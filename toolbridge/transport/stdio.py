"""
Stdio MCP Transport
===================

Spawns an MCP server process and talks JSON-RPC 2.0 over its stdin/stdout,
one message per line.

Usage:
    async with StdioTransport(TransportConfig(command="npx", args=[...])) as transport:
        tools = await transport.list_tools()
        result = await transport.call_tool("search_repos", {"query": "mcp"})
"""

from __future__ import annotations

import asyncio
import json
import os
import shutil
from typing import Any

from toolbridge.core.config import TransportConfig
from toolbridge.core.exceptions import TransportError
from toolbridge.core.logging import get_standard_logger
from toolbridge.transport.jsonrpc import ConnectionState, JsonRpcTransport, unwrap_response

logger = get_standard_logger("toolbridge.transport.stdio")

__all__ = ["ConnectionState", "StdioTransport"]


class StdioTransport(JsonRpcTransport):
    """
    JSON-RPC client for a single MCP server over stdio.

    Requests are serialized with a lock: the server answers on one pipe, so a
    response is read before the next request is written.
    """

    def __init__(self, config: TransportConfig, name: str = ""):
        super().__init__(config, name=name or config.command)
        self._process: asyncio.subprocess.Process | None = None
        self._lock = asyncio.Lock()

    async def _open(self) -> None:
        command = shutil.which(self.config.command) or self.config.command
        try:
            self._process = await asyncio.create_subprocess_exec(
                command,
                *self.config.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                env={**dict(os.environ), **self.config.env},
                cwd=self.config.cwd or None,
            )
        except OSError as e:
            raise TransportError(self.name, f"cannot start '{self.config.command}': {e}", cause=e)

    async def _write(self, message: dict[str, Any]) -> None:
        process = self._process
        if process is None or process.stdin is None or process.returncode is not None:
            raise TransportError(self.name, "process not available")
        try:
            process.stdin.write((json.dumps(message) + "\n").encode())
            await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise TransportError(self.name, f"write failed: {e}", cause=e)

    async def _notify(self, method: str, params: dict[str, Any]) -> None:
        await self._write({"jsonrpc": "2.0", "method": method, "params": params})

    async def _request(self, method: str, params: dict[str, Any], tool: str = "") -> Any:
        """Send a request and wait for the response with the same id"""
        async with self._lock:
            request_id = self._next_id()
            await self._write(
                {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
            )
            try:
                response = await asyncio.wait_for(
                    self._read_response(request_id), timeout=self.config.timeout
                )
            except asyncio.TimeoutError:
                raise self._timeout_error(method, tool)

        return unwrap_response(response, method, tool)

    async def _read_response(self, request_id: int) -> dict[str, Any]:
        process = self._process
        if process is None or process.stdout is None:
            raise TransportError(self.name, "process not available")

        while True:
            line = await process.stdout.readline()
            if not line:
                raise TransportError(self.name, "server closed the connection")
            try:
                message = json.loads(line.decode())
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.debug(f"Skipping non-JSON line from '{self.name}': {line[:120]!r}")
                continue
            if isinstance(message, dict) and message.get("id") == request_id:
                return message
            logger.debug(f"Skipping unrelated message from '{self.name}': {message!r:.120}")

    async def _shutdown(self) -> None:
        process = self._process
        self._process = None
        if process is None or process.returncode is not None:
            return
        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=5)
        except (ProcessLookupError, asyncio.TimeoutError) as e:
            logger.debug(f"Force killing MCP process: {e!r}")
            try:
                process.kill()
            except ProcessLookupError:
                pass
