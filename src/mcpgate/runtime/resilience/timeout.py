"""TimeoutPolicy — bounds a single attempt."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from mcpgate.runtime.errors import AttemptTimeoutError

T = TypeVar("T")


class TimeoutPolicy:
    """Cancel an attempt that runs longer than *seconds*.

    The in-flight operation is cancelled and abandoned; work that ignores
    cancellation (e.g. a handler running in a worker thread) is not halted.
    A ``TimeoutError`` raised by the operation itself is not an attempt
    timeout and propagates unchanged.
    """

    def __init__(self, seconds: float = 30.0) -> None:
        self.seconds = seconds

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        scope = asyncio.timeout(self.seconds)
        try:
            async with scope:
                return await operation()
        except TimeoutError:
            if not scope.expired():
                raise
            raise AttemptTimeoutError(self.seconds) from None
