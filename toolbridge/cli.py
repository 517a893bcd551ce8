# CLI Main
import argparse
import asyncio
import json
import logging
import shlex
import sys
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from toolbridge.collection import McpToolsClient
from toolbridge.core.config import BridgeConfig, load_config
from toolbridge.core.exceptions import ConfigurationError, ToolBridgeError
from toolbridge.core.logging import configure_logging, parse_level
from toolbridge.invocation import content_text
from toolbridge.transport.http import HttpMode


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        prog="toolbridge",
        description="Inspect and call the tools of an MCP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="YAML/JSON configuration file")
    server = parser.add_mutually_exclusive_group()
    server.add_argument("--server", help='Server command line, e.g. "npx -y my-mcp-server"')
    server.add_argument("--url", help="HTTP endpoint of the server, e.g. http://localhost:8000/mcp")
    parser.add_argument(
        "--http-mode",
        choices=[mode.value for mode in HttpMode],
        help="HTTP wire for --url (default: auto)",
    )
    parser.add_argument("--namespace", help="Namespace for imported tools")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List the server's tools")

    schema_p = subparsers.add_parser("schema", help="Show a tool's parameter schema")
    schema_p.add_argument("tool", help="Qualified tool name")

    call_p = subparsers.add_parser("call", help="Invoke a tool")
    call_p.add_argument("tool", help="Qualified tool name")
    call_p.add_argument(
        "--arg",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Argument; VALUE is read as JSON when possible",
    )
    call_p.add_argument("--json", dest="json_args", help="All arguments as a JSON object")
    call_p.add_argument("--text", action="store_true", help="Print only the text content")

    return parser


def parse_arguments(pairs: list[str], json_args: str | None = None) -> dict[str, Any]:
    """Merge --json and --arg KEY=VALUE pairs; --arg wins"""
    arguments: dict[str, Any] = {}
    if json_args:
        loaded = json.loads(json_args)
        if not isinstance(loaded, dict):
            raise ValueError("--json must be a JSON object")
        arguments.update(loaded)

    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid argument '{pair}', expected KEY=VALUE")
        key, value = pair.split("=", 1)
        try:
            arguments[key.strip()] = json.loads(value)
        except json.JSONDecodeError:
            arguments[key.strip()] = value

    return arguments


def build_config(args: argparse.Namespace) -> BridgeConfig:
    config = load_config(args.config)
    if args.server is not None:
        try:
            parts = shlex.split(args.server)
        except ValueError as e:
            raise ConfigurationError(message=f"Invalid --server command: {e}", cause=e)
        if not parts:
            raise ConfigurationError(
                message="Empty --server command",
                suggestions=['Pass the server command line, e.g. --server "npx -y my-server"'],
            )
        command, *server_args = parts
        config.transport.command = command
        config.transport.args = server_args
        config.transport.url = ""
    if args.url is not None:
        if not args.url.strip():
            raise ConfigurationError(message="Empty --url")
        config.transport.url = args.url.strip()
        config.transport.command = ""
    if args.http_mode is not None:
        config.transport.http_mode = args.http_mode
    if args.namespace is not None:
        config.collection.namespace = args.namespace
    if args.timeout is not None:
        config.transport.timeout = args.timeout
    return config


def _list_tools(client: McpToolsClient, console: Console) -> int:
    if not client.has_tools:
        console.print("No tools available")
        return 0

    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Params", justify="right")
    table.add_column("Required")
    table.add_column("Description")

    for key in client.tools.names():
        tool = client.tools[key]
        required = ", ".join(p.name for p in tool.parameters if p.required)
        table.add_row(Text(key), str(len(tool.parameters)), Text(required), Text(tool.description))

    console.print(table)
    return 0


async def run_command(args: argparse.Namespace, client: McpToolsClient, console: Console) -> int:
    """Execute one subcommand against a loaded client"""
    if args.command == "list":
        return _list_tools(client, console)

    tool = client.tools.get(args.tool)
    if tool is None:
        console.print(f"Unknown tool '{args.tool}'", style="red", markup=False)
        return 1

    if args.command == "schema":
        console.print_json(json.dumps(tool.describe_schema()))
        return 0

    try:
        arguments = parse_arguments(args.arg, args.json_args)
    except ValueError as e:
        console.print(str(e), style="red", markup=False)
        return 2

    result = await tool.invoke(arguments)
    if args.text:
        console.print(content_text(result), markup=False, highlight=False)
    else:
        console.print_json(json.dumps(result))
    return 0


async def _main(args: argparse.Namespace, config: BridgeConfig, console: Console) -> int:
    connect_options = {
        "name": config.collection.namespace,
        "description": config.collection.namespace_description,
    }
    if config.transport.url:
        client = await McpToolsClient.connect_url(config.transport, **connect_options)
    elif config.transport.command:
        client = await McpToolsClient.connect_stdio(config.transport, **connect_options)
    else:
        console.print(
            "[red]No server; use --server, --url, TOOLBRIDGE_COMMAND or TOOLBRIDGE_URL[/red]"
        )
        return 2

    async with client:
        return await run_command(args, client, console)


def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    console = Console()

    try:
        config = build_config(args)
        configure_logging(
            level=logging.DEBUG if args.verbose else parse_level(config.logging.level),
            json_format=config.logging.json_format,
        )
        return asyncio.run(_main(args, config, console))
    except ToolBridgeError as e:
        console.print(str(e), style="red", markup=False, highlight=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())
