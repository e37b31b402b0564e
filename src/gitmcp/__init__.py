"""Git Tools MCP — a Model Context Protocol server for read-only git inspection."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from gitmcp.server.server import McpServer as McpServer

_SERVER_EXPORTS = {
    "McpServer": "gitmcp.server.server",
}


def __getattr__(name: str) -> object:
    module_path = _SERVER_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'gitmcp' has no attribute {name!r}")
