"""ToolRegistry — name-to-handler map for every invocable tool."""

from __future__ import annotations

import logging
import threading
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, NamedTuple, TypeVar, Union

from mcpgate.protocols.errors import ToolNotFoundError
from mcpgate.protocols.models import Tool

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Mapping[str, Any]], Union[Awaitable[Any], Any]]
"""A tool handler receives the call arguments; it may be sync or async."""

H = TypeVar("H", bound=ToolHandler)


class _Entry(NamedTuple):
    tool: Tool
    handler: ToolHandler


class ToolRegistry:
    """Holds tool metadata and handlers, keyed by tool name.

    Registration order is preserved; re-registering a name replaces the
    entry in place (last write wins).  Reads and writes are guarded by a
    lock so dynamic registration is safe alongside ``list_tools``/``resolve``.

    Usage::

        registry = ToolRegistry()

        @registry.tool("get_customer", "Fetch a customer by id", {...})
        async def get_customer(arguments):
            ...

        registry.list_tools()            # [Tool(name="get_customer", ...)]
        handler = registry.resolve("get_customer")
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def register(self, tool: Tool, handler: ToolHandler) -> None:
        """Add or replace the entry for ``tool.name``."""
        with self._lock:
            replaced = tool.name in self._entries
            self._entries[tool.name] = _Entry(tool, handler)
        if replaced:
            logger.debug("Replaced handler for tool %s", tool.name)

    def tool(
        self,
        name: str,
        description: str = "",
        input_schema: dict[str, Any] | None = None,
    ) -> Callable[[H], H]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: H) -> H:
            meta = Tool(name=name, description=description or (handler.__doc__ or "").strip())
            if input_schema is not None:
                meta = meta.model_copy(update={"input_schema": input_schema})
            self.register(meta, handler)
            return handler

        return decorator

    def list_tools(self) -> list[Tool]:
        """Return tool metadata (no handlers) in registration order."""
        with self._lock:
            return [entry.tool for entry in self._entries.values()]

    def resolve(self, name: str) -> ToolHandler:
        """Return the handler for *name*.

        Raises:
            ToolNotFoundError: If no tool named *name* is registered.
        """
        with self._lock:
            entry = self._entries.get(name)
        if entry is None:
            raise ToolNotFoundError(name)
        return entry.handler

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
