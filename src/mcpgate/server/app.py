"""FastAPI application for the gateway.

Exposes:
- ``POST /mcp``: one JSON-RPC message per request
- ``GET /tools``: tool metadata
- ``POST /tools/{name}/execute``: run one tool, the body is its arguments
- ``POST /tools/batch``: run several tools concurrently
- ``GET /health``: liveness plus circuit states

JSON-RPC errors travel in the response body, so ``/mcp`` answers 200 for
every request and 204 for notifications.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import uvicorn
from fastapi import Body, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from mcpgate.protocols.models import ToolCallRequest
from mcpgate.sdk.gateway import Gateway

logger = logging.getLogger(__name__)


class BatchRequest(BaseModel):
    """Body of ``POST /tools/batch``."""

    tools: list[ToolCallRequest] = Field(default_factory=list)


def create_app(gateway: Gateway) -> FastAPI:
    """Build the FastAPI app around an assembled :class:`Gateway`.

    The gateway's API client is closed when the app shuts down.
    """

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await gateway.aclose()

    settings = gateway.settings
    app = FastAPI(
        title=settings.name,
        description="MCP gateway with resilient tool execution",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.gateway = gateway

    @app.post("/mcp")
    async def mcp(request: Request) -> Response:
        payload = await request.body()
        response = await gateway.handler.handle(payload)
        if response is None:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        return JSONResponse(response.to_dict())

    @app.get("/tools")
    async def list_tools() -> dict[str, Any]:
        return {"tools": [tool.to_dict() for tool in gateway.registry.list_tools()]}

    @app.post("/tools/batch")
    async def execute_batch(body: BatchRequest) -> dict[str, Any]:
        logger.info("Executing batch of %d tool(s)", len(body.tools))
        batch = await gateway.executor.execute_batch(body.tools)
        return batch.to_dict()

    @app.post("/tools/{name}/execute")
    async def execute_tool(
        name: str,
        arguments: dict[str, Any] | None = Body(default=None),
    ) -> dict[str, Any]:
        result = await gateway.executor.execute_one(name, arguments or {})
        return result.to_dict()

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "Healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.version,
            "service": settings.name,
            "circuits": gateway.pipelines.circuits(),
        }

    return app


def start_server(
    gateway: Gateway,
    *,
    host: str | None = None,
    port: int | None = None,
    log_level: str = "info",
) -> None:
    """Serve *gateway* over HTTP with uvicorn until interrupted."""
    host = host or gateway.settings.server.host
    port = port or gateway.settings.server.port
    logger.info("Starting HTTP server on %s:%s", host, port)
    uvicorn.run(create_app(gateway), host=host, port=port, log_level=log_level)
