"""``mcpgate serve`` — run the gateway over HTTP or stdio."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from mcpgate.cli_commands._output import console


@click.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Settings YAML file.",
)
@click.option("--host", default=None, help="Bind host (overrides settings).")
@click.option("--port", type=int, default=None, help="Bind port (overrides settings).")
@click.option("--stdio", is_flag=True, help="Serve MCP over stdin/stdout instead of HTTP.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="info",
    help="Logging verbosity.",
)
def serve(
    config_path: str | None,
    host: str | None,
    port: int | None,
    stdio: bool,
    log_level: str,
) -> None:
    """Start the gateway."""
    from mcpgate.sdk.gateway import Gateway

    logging.basicConfig(
        level=log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        gateway = Gateway.from_yaml(config_path)
    except Exception as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    if stdio:
        from mcpgate.protocols.mcp.transport import StdioServer

        async def _serve_stdio() -> None:
            async with gateway:
                await StdioServer(gateway.handler).serve()

        asyncio.run(_serve_stdio())
        return

    from mcpgate.server.app import start_server

    start_server(gateway, host=host, port=port, log_level=log_level)
