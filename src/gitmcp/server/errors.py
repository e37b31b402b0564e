"""Error taxonomy for the capability registry and dispatch layer.

Every error carries a stable :class:`ErrorKind` discriminant so that the
protocol layer (and client tooling) can branch on it without parsing text.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Discriminant reported to clients in ``error.data.kind``."""

    SCHEMA = "SchemaError"
    NOT_FOUND = "NotFound"
    VALIDATION = "ValidationError"
    TOOL_EXECUTION = "ToolExecutionError"


class CapabilityError(Exception):
    """Base error for all registry and dispatch failures."""

    kind: ErrorKind

    def to_data(self) -> dict[str, Any]:
        """Structured payload embedded in protocol error objects."""
        return {"kind": self.kind.value, "message": str(self)}


class SchemaError(CapabilityError):
    """A tool definition or handler is malformed (fatal at startup)."""

    kind = ErrorKind.SCHEMA

    def __init__(self, detail: str, *, tool_name: str = "") -> None:
        self.tool_name = tool_name
        self.detail = detail
        prefix = f"Invalid tool {tool_name!r}" if tool_name else "Invalid tool"
        super().__init__(f"{prefix}: {detail}")


class ToolNotFoundError(CapabilityError):
    """Requested tool is unknown or hidden by the toolset policy."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")

    def to_data(self) -> dict[str, Any]:
        return {**super().to_data(), "tool": self.name}


class ToolValidationError(CapabilityError):
    """Tool arguments do not match the tool's input schema."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        name: str,
        path: str,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.name = name
        self.path = path
        self.detail = detail
        self.errors = errors or []
        where = f" at '{path}'" if path else ""
        super().__init__(f"Invalid arguments for tool {name}{where}: {detail}")

    def to_data(self) -> dict[str, Any]:
        return {
            **super().to_data(),
            "tool": self.name,
            "path": self.path,
            "errors": self.errors,
        }


class ToolExecutionError(CapabilityError):
    """A tool handler raised while executing."""

    kind = ErrorKind.TOOL_EXECUTION

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Tool execution failed: {name}" + (f": {detail}" if detail else ""))

    def to_data(self) -> dict[str, Any]:
        return {**super().to_data(), "tool": self.name}
