"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from mcpgate.protocols.models import Tool, ToolExecutionResult  # noqa: TC001

console = Console()


def print_tools_table(tools: list[Tool]) -> None:
    """Pretty-print registered tools as a table."""
    table = Table(title="Registered Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Required")

    for tool in tools:
        required = ", ".join(tool.input_schema.get("required", [])) or "-"
        table.add_row(tool.name, _truncate(tool.description), required)

    console.print(table)


def print_tools_json(tools: list[Tool]) -> None:
    console.print_json(json.dumps([tool.to_dict() for tool in tools]))


def print_execution_result(result: ToolExecutionResult) -> None:
    """Print a tool result as JSON with a coloured status line."""
    if result.success:
        console.print(f"[green]{result.tool_name} succeeded[/green]")
    else:
        console.print(f"[red]{result.tool_name} failed ({result.error_type}):[/red] {result.error}")
    console.print_json(json.dumps(result.to_dict()))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
