"""ToolDispatcher — validates tool calls and routes them to their handlers.

Failures are reported in priority order:

1. :class:`ToolNotFoundError` — unknown or policy-hidden tool (raised).
2. :class:`ToolValidationError` — arguments do not match the input schema
   (raised; the handler is never called).
3. :class:`ToolExecutionError` — the handler raised.  This one is *returned*
   as an error result, never raised, so one failing tool cannot take down
   the session that called it.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from gitmcp.server.errors import ToolExecutionError, ToolNotFoundError, ToolValidationError
from gitmcp.server.models import (
    CallToolResult,
    ContentBlock,
    ErrorInfo,
    ListToolsResult,
    TextContent,
)
from gitmcp.utils.telemetry import ATTR_TOOL_NAME, ATTR_TOOL_OUTCOME, get_tracer

if TYPE_CHECKING:
    from gitmcp.server.models import ToolCapability
    from gitmcp.server.registry import CapabilityRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_CONTENT_ADAPTER: TypeAdapter[list[ContentBlock]] = TypeAdapter(list[ContentBlock])


class ToolDispatcher:
    """Serve ``tools/list`` and ``tools/call`` from a :class:`CapabilityRegistry`.

    Holds no per-call state, so any number of calls may be in flight at once.

    Usage::

        dispatcher = ToolDispatcher(registry, instructions="...")
        listing = dispatcher.list_tools()
        result = await dispatcher.call_tool("get_git_log", {"path": "."})
    """

    def __init__(self, registry: CapabilityRegistry, *, instructions: str | None = None) -> None:
        self._registry = registry
        self._instructions = instructions

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def list_tools(self) -> ListToolsResult:
        """Return the visible tool definitions plus the server instructions."""
        return ListToolsResult(tools=self._registry.list(), instructions=self._instructions)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> CallToolResult:
        """Resolve, validate and invoke the tool called *name*.

        Raises:
            ToolNotFoundError: If the tool is unknown or hidden.
            ToolValidationError: If *arguments* fail the input schema.
        """
        with _tracer.start_as_current_span("mcp.tools.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            try:
                capability = self._registry.resolve(name)
                validated = self.validate(capability, arguments)
            except (ToolNotFoundError, ToolValidationError) as exc:
                span.set_attribute(ATTR_TOOL_OUTCOME, exc.kind.value)
                raise

            try:
                content = await self._invoke(capability, validated)
            except Exception as exc:
                error = ToolExecutionError(name, _describe(exc))
                logger.exception("Tool %s failed", name)
                span.set_attribute(ATTR_TOOL_OUTCOME, error.kind.value)
                return CallToolResult(
                    content=[TextContent(text=str(error))],
                    is_error=True,
                    error=ErrorInfo(kind=error.kind, message=str(error)),
                )

            span.set_attribute(ATTR_TOOL_OUTCOME, "ok")
            return CallToolResult(content=content)

    @staticmethod
    def validate(capability: ToolCapability, arguments: Any) -> BaseModel:
        """Validate *arguments* against the capability's input schema."""
        name = capability.name
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ToolValidationError(name, "", "arguments must be an object")

        try:
            return capability.definition.input_schema.model_validate(arguments, strict=True)
        except ValidationError as exc:
            errors = [
                {
                    "path": _format_loc(err["loc"]),
                    "type": err["type"],
                    "message": err["msg"],
                }
                for err in exc.errors(include_url=False)
            ]
            first = errors[0]
            raise ToolValidationError(name, first["path"], first["message"], errors) from exc

    @staticmethod
    async def _invoke(capability: ToolCapability, validated: BaseModel) -> list[ContentBlock]:
        result = capability.handler(validated)
        if inspect.isawaitable(result):
            result = await result
        try:
            return _CONTENT_ADAPTER.validate_python(result)
        except ValidationError as exc:
            msg = f"handler returned invalid content: {exc.error_count()} error(s)"
            raise TypeError(msg) from exc


def _format_loc(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _describe(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or type(exc).__name__
