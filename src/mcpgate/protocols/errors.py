"""Shared error types for the protocol layer."""


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class ToolNotFoundError(ProtocolError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"tool not found: {name}")


class ToolExecutionError(ProtocolError):
    """A tool handler failed while executing."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"tool execution failed: {name}" + (f": {detail}" if detail else ""))


class InvalidParamsError(ProtocolError):
    """Method parameters are missing or malformed."""

    def __init__(self, method: str, errors: list[dict[str, str]] | None = None) -> None:
        self.method = method
        self.errors = errors or []
        super().__init__(f"Invalid params for method: {method}")
