"""ToolExecutor — runs registered tools through the resilience pipeline.

Every outcome, including unknown tools, open circuits, timeouts and handler
exceptions, is normalized into a :class:`ToolExecutionResult`; the executor
never raises to its caller.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from mcpgate.protocols.errors import ToolExecutionError, ToolNotFoundError
from mcpgate.protocols.models import BatchResult, ErrorType, ToolCallRequest, ToolExecutionResult
from mcpgate.protocols.registry import ToolHandler, ToolRegistry
from mcpgate.runtime.errors import AttemptTimeoutError, CircuitOpenError, RetriesExhaustedError
from mcpgate.runtime.resilience.pipeline import PipelineRegistry
from mcpgate.utils.telemetry import (
    ATTR_BATCH_FAILED,
    ATTR_BATCH_SIZE,
    ATTR_TOOL_NAME,
    ATTR_TOOL_SUCCESS,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class ToolExecutor:
    """Invoke single tools or batches with per-item failure isolation.

    Each tool name gets its own pipeline from the :class:`PipelineRegistry`,
    so a failing tool opens only its own circuit.

    Usage::

        executor = ToolExecutor(registry, PipelineRegistry(config))
        result = await executor.execute_one("get_customer", {"customerId": "1"})
        batch = await executor.execute_batch([ToolCallRequest(name="a"), ...])
    """

    def __init__(
        self,
        registry: ToolRegistry,
        pipelines: PipelineRegistry | None = None,
        *,
        max_concurrency: int | None = None,
    ) -> None:
        self._registry = registry
        self._pipelines = pipelines or PipelineRegistry()
        self._max_concurrency = max_concurrency

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def pipelines(self) -> PipelineRegistry:
        return self._pipelines

    async def execute_one(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
    ) -> ToolExecutionResult:
        """Run tool *name* and return its normalized result."""
        with _tracer.start_as_current_span("tool.execute") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            result = await self._execute(name, dict(arguments or {}))
            span.set_attribute(ATTR_TOOL_SUCCESS, result.success)
            return result

    async def execute_batch(self, requests: Sequence[ToolCallRequest]) -> BatchResult:
        """Run every request concurrently; results keep the input order."""
        with _tracer.start_as_current_span("tool.batch") as span:
            span.set_attribute(ATTR_BATCH_SIZE, len(requests))
            semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None

            async def run(request: ToolCallRequest) -> ToolExecutionResult:
                if semaphore is None:
                    return await self.execute_one(request.name, request.arguments)
                async with semaphore:
                    return await self.execute_one(request.name, request.arguments)

            results = await asyncio.gather(*(run(r) for r in requests))
            batch = BatchResult.from_results(list(results))
            span.set_attribute(ATTR_BATCH_FAILED, batch.total_failed)
            return batch

    async def _execute(self, name: str, arguments: dict[str, Any]) -> ToolExecutionResult:
        try:
            handler = self._registry.resolve(name)
        except ToolNotFoundError as exc:
            logger.warning("Tool call rejected: %s", exc)
            return ToolExecutionResult.fail(name, str(exc), "tool_not_found")

        pipeline = self._pipelines.get(name)
        try:
            value = await pipeline.execute(lambda: _invoke(handler, arguments))
        except CircuitOpenError as exc:
            logger.warning("Tool %s rejected: %s", name, exc)
            return ToolExecutionResult.fail(name, str(exc), "circuit_open")
        except RetriesExhaustedError as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            error_type: ErrorType = (
                "timeout" if isinstance(exc.last_error, AttemptTimeoutError) else "retries_exhausted"
            )
            return ToolExecutionResult.fail(name, str(exc), error_type)
        except AttemptTimeoutError as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return ToolExecutionResult.fail(name, str(exc), "timeout")
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.warning("Tool %s was cancelled", name)
            return ToolExecutionResult.fail(name, str(ToolExecutionError(name, "cancelled")))
        except Exception as exc:
            logger.warning("Tool %s failed: %s", name, exc, exc_info=True)
            detail = str(exc) or type(exc).__name__
            return ToolExecutionResult.fail(name, str(ToolExecutionError(name, detail)))

        try:
            return ToolExecutionResult.ok(name, value)
        except ValidationError:
            logger.warning("Tool %s returned a non-JSON result of type %s", name, type(value).__name__)
            detail = f"result of type {type(value).__name__} is not JSON-serializable"
            return ToolExecutionResult.fail(name, str(ToolExecutionError(name, detail)))


async def _invoke(handler: ToolHandler, arguments: dict[str, Any]) -> Any:
    """Await async handlers; run sync handlers in a worker thread."""
    if inspect.iscoroutinefunction(handler):
        return await handler(arguments)
    result = await asyncio.to_thread(handler, arguments)
    if inspect.isawaitable(result):
        return await result
    return result
