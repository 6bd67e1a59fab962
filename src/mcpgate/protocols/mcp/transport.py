"""MCP stdio transport — serves an :class:`MCPHandler` over stdin/stdout.

Messages are newline-delimited JSON.  Each non-blank input line yields at
most one output line; notifications produce no output.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

if TYPE_CHECKING:
    from mcpgate.protocols.mcp.handler import MCPHandler

logger = logging.getLogger(__name__)


@runtime_checkable
class LineTransport(Protocol):
    """A bidirectional line-oriented stream."""

    async def read_line(self) -> str | None: ...
    async def write_line(self, line: str) -> None: ...


class StdioTransport:
    """Reads request lines from *stdin* and writes response lines to *stdout*.

    Blocking reads run in the default executor so the event loop stays free
    for in-flight tool calls.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

    async def read_line(self) -> str | None:
        """Return the next line, or ``None`` at end of input."""
        loop = asyncio.get_running_loop()
        line = await loop.run_in_executor(None, self._stdin.readline)
        if not line:
            return None
        return line

    async def write_line(self, line: str) -> None:
        self._stdout.write(line + "\n")
        self._stdout.flush()


class StdioServer:
    """Serve one MCP session over a :class:`LineTransport` until EOF.

    Usage::

        server = StdioServer(handler)
        await server.serve()
    """

    def __init__(self, handler: MCPHandler, transport: LineTransport | None = None) -> None:
        self._handler = handler
        self._transport = transport or StdioTransport()

    async def serve(self) -> int:
        """Process lines until end of input. Returns the number of responses written."""
        written = 0
        logger.info("Serving MCP over stdio")
        while True:
            line = await self._transport.read_line()
            if line is None:
                break
            if not line.strip():
                continue
            response = await self._handler.handle(line)
            if response is None:
                continue
            await self._transport.write_line(json.dumps(response.to_dict()))
            written += 1
        logger.info("Stdio input closed after %d response(s)", written)
        return written
