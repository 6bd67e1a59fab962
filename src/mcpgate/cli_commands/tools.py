"""``mcpgate tools`` — list and invoke registered tools."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click

from mcpgate.cli_commands._output import (
    console,
    print_execution_result,
    print_tools_json,
    print_tools_table,
)

_config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Settings YAML file.",
)


@click.group()
def tools() -> None:
    """List and invoke tools."""


@tools.command("list")
@_config_option
@click.option("--json", "as_json", is_flag=True, help="Print tool metadata as JSON.")
def list_cmd(config_path: str | None, as_json: bool) -> None:
    """List the tools the gateway exposes."""
    from mcpgate.sdk.gateway import Gateway

    try:
        gateway = Gateway.from_yaml(config_path)
    except Exception as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    tool_list = gateway.registry.list_tools()
    asyncio.run(gateway.aclose())

    if as_json:
        print_tools_json(tool_list)
    else:
        print_tools_table(tool_list)


@tools.command("call")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object.")
@_config_option
def call(name: str, raw_args: str, config_path: str | None) -> None:
    """Invoke tool NAME once through the resilience pipeline."""
    from mcpgate.sdk.gateway import Gateway

    try:
        arguments: Any = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid --args:[/red] {exc}")
        sys.exit(2)
    if not isinstance(arguments, dict):
        console.print("[red]Invalid --args:[/red] expected a JSON object")
        sys.exit(2)

    try:
        gateway = Gateway.from_yaml(config_path)
    except Exception as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    async def _call() -> Any:
        async with gateway:
            return await gateway.executor.execute_one(name, arguments)

    result = asyncio.run(_call())
    print_execution_result(result)
    if not result.success:
        sys.exit(1)
