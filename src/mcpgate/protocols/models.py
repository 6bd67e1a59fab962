"""Tool metadata, call requests and normalized execution results."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator, model_validator

ErrorType = Literal[
    "tool_not_found",
    "circuit_open",
    "timeout",
    "retries_exhausted",
    "execution_failed",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tool(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema",
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ToolCallRequest(BaseModel):
    """A request to run one tool, as carried by ``tools/call`` and batch bodies."""

    name: str = Field(..., min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def _null_arguments(cls, value: Any) -> Any:
        return {} if value is None else value


class ToolExecutionResult(BaseModel):
    """Uniform outcome of one tool invocation.

    Exactly one of ``result`` (on success) or ``error`` (on failure) is
    serialized.
    """

    model_config = ConfigDict(populate_by_name=True)

    tool_name: str = Field(..., alias="toolName")
    success: bool
    result: JsonValue = None
    error: str | None = None
    error_type: ErrorType | None = Field(default=None, alias="errorType")
    executed_at: datetime = Field(default_factory=_utcnow, alias="executedAt")

    @model_validator(mode="after")
    def _check_outcome(self) -> ToolExecutionResult:
        if self.success and self.error is not None:
            msg = "a successful result cannot carry an error"
            raise ValueError(msg)
        if not self.success and (self.error is None or self.result is not None):
            msg = "a failed result must carry an error and no result"
            raise ValueError(msg)
        return self

    @classmethod
    def ok(cls, tool_name: str, result: Any) -> ToolExecutionResult:
        return cls(tool_name=tool_name, success=True, result=result)

    @classmethod
    def fail(
        cls,
        tool_name: str,
        error: str,
        error_type: ErrorType = "execution_failed",
    ) -> ToolExecutionResult:
        return cls(tool_name=tool_name, success=False, error=error, error_type=error_type)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready camelCase mapping with only the relevant outcome keys."""
        exclude = {"error", "error_type"} if self.success else {"result"}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class BatchResult(BaseModel):
    """Ordered results of a batch plus aggregate counts."""

    model_config = ConfigDict(populate_by_name=True)

    results: list[ToolExecutionResult] = Field(default_factory=list)
    total_requested: int = Field(default=0, alias="totalRequested")
    total_succeeded: int = Field(default=0, alias="totalSucceeded")
    total_failed: int = Field(default=0, alias="totalFailed")

    @classmethod
    def from_results(cls, results: list[ToolExecutionResult]) -> BatchResult:
        succeeded = sum(1 for r in results if r.success)
        return cls(
            results=results,
            total_requested=len(results),
            total_succeeded=succeeded,
            total_failed=len(results) - succeeded,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "totalRequested": self.total_requested,
            "totalSucceeded": self.total_succeeded,
            "totalFailed": self.total_failed,
        }
