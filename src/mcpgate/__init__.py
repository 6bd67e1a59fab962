"""mcpgate — MCP JSON-RPC gateway with resilient tool execution."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from mcpgate.sdk.gateway import Gateway as Gateway
    from mcpgate.sdk.gateway import SettingsLoader as SettingsLoader

_SDK_EXPORTS = {
    "Gateway": "mcpgate.sdk.gateway",
    "SettingsLoader": "mcpgate.sdk.gateway",
}


def __getattr__(name: str) -> object:
    module_path = _SDK_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'mcpgate' has no attribute {name!r}")
