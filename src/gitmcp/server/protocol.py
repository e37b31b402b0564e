"""JSON-RPC 2.0 envelopes and MCP method names.

Implements the message format used by the Model Context Protocol for tool
discovery (``tools/list``), execution (``tools/call``) and server-sent
notifications.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")

# ---------------------------------------------------------------------------
# Method names
# ---------------------------------------------------------------------------

METHOD_INITIALIZE = "initialize"
METHOD_PING = "ping"
METHOD_TOOLS_LIST = "tools/list"
METHOD_TOOLS_CALL = "tools/call"
METHOD_LOGGING_SET_LEVEL = "logging/setLevel"

NOTIFICATION_INITIALIZED = "notifications/initialized"
NOTIFICATION_TOOLS_LIST_CHANGED = "notifications/tools/list_changed"
NOTIFICATION_MESSAGE = "notifications/message"

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Syslog severities, as used by ``logging/setLevel`` and ``notifications/message``.
LOG_LEVELS = (
    "debug",
    "info",
    "notice",
    "warning",
    "error",
    "critical",
    "alert",
    "emergency",
)


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request, or a notification when ``id`` is absent."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: str = "2.0"
    method: str
    id: int | str | None = None
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize with exactly one of ``result``/``error``."""
        message: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            message["error"] = self.error.model_dump(exclude_none=True)
        else:
            message["result"] = self.result if self.result is not None else {}
        return message


class JsonRpcNotification(BaseModel):
    """A server-to-client JSON-RPC 2.0 notification."""

    jsonrpc: str = "2.0"
    method: str
    params: dict[str, Any] | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def success(request_id: int | str | None, result: dict[str, Any]) -> dict[str, Any]:
    """Build a success response envelope."""
    return JsonRpcResponse(id=request_id, result=result).to_wire()


def failure(
    request_id: int | str | None,
    code: int,
    message: str,
    data: Any = None,
) -> dict[str, Any]:
    """Build an error response envelope."""
    error = JsonRpcError(code=code, message=message, data=data)
    return JsonRpcResponse(id=request_id, error=error).to_wire()
