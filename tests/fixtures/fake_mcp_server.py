"""Scripted MCP server speaking line-delimited JSON-RPC on stdin/stdout."""

import json
import sys
import time

TOOLS = [
    {
        "name": "echo",
        "description": "Echo the arguments back",
        "inputSchema": {
            "type": "object",
            "properties": {
                "text": {"type": "string"},
                "times": {"type": "number", "default": 1},
            },
            "required": ["text"],
        },
    },
    {
        "name": "fail",
        "description": "Always fails",
        "inputSchema": {"type": "object"},
    },
    {
        "name": "slow",
        "description": "Answers after two seconds",
        "inputSchema": {"type": "object", "properties": {}},
    },
]


def send(message):
    sys.stdout.write(json.dumps(message) + "\n")
    sys.stdout.flush()


def handle(request):
    method = request.get("method")
    params = request.get("params") or {}

    if method == "initialize":
        return {
            "protocolVersion": params.get("protocolVersion"),
            "capabilities": {"tools": {}},
            "serverInfo": {"name": "fake", "version": "0.1"},
        }

    if method == "tools/list":
        if params.get("cursor") == "page2":
            return {"tools": TOOLS[1:]}
        return {"tools": TOOLS[:1], "nextCursor": "page2"}

    if method == "tools/call":
        name = params.get("name")
        arguments = params.get("arguments", {})
        if name == "fail":
            raise ValueError("tool exploded")
        if name == "slow":
            time.sleep(2)
        send({"jsonrpc": "2.0", "method": "notifications/message", "params": {"data": "working"}})
        return {
            "content": [{"type": "text", "text": json.dumps(arguments, sort_keys=True)}],
            "isError": False,
        }

    raise LookupError(f"unknown method {method}")


def main():
    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        request = json.loads(line)
        if "id" not in request:
            continue
        try:
            send({"jsonrpc": "2.0", "id": request["id"], "result": handle(request)})
        except (ValueError, LookupError) as e:
            send({"jsonrpc": "2.0", "id": request["id"], "error": {"code": -32000, "message": str(e)}})


if __name__ == "__main__":
    main()
