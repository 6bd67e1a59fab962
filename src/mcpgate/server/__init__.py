"""HTTP surface — FastAPI app exposing the MCP endpoint and tool routes."""

from mcpgate.server.app import create_app, start_server

__all__ = ["create_app", "start_server"]
