"""Construction helpers for tool definitions and capabilities.

Both helpers fail fast with :class:`SchemaError` so that a malformed tool
aborts server construction instead of surfacing on the first call.
"""

from __future__ import annotations

import inspect
import typing
from typing import TYPE_CHECKING, Any

from gitmcp.server.errors import SchemaError
from gitmcp.server.models import ToolAnnotations, ToolCapability, ToolDefinition, ToolHandler

if TYPE_CHECKING:
    from pydantic import BaseModel


def create_tool_definition(
    *,
    name: str,
    input_schema: type[BaseModel],
    description: str = "",
    annotations: ToolAnnotations | dict[str, Any] | None = None,
) -> ToolDefinition:
    """Build an immutable :class:`ToolDefinition`.

    Raises:
        SchemaError: If *name* is empty or *input_schema* is not a pydantic
            model class describing an object.
    """
    if isinstance(annotations, dict):
        annotations = ToolAnnotations.model_validate(annotations)
    return ToolDefinition(
        name=name,
        description=description,
        input_schema=input_schema,
        annotations=annotations or ToolAnnotations(),
    )


def create_tool(definition: ToolDefinition, handler: ToolHandler) -> ToolCapability:
    """Bind *handler* to *definition*.

    The handler must accept exactly one positional argument, the validated
    input model instance.

    Raises:
        SchemaError: If the handler cannot be called with the validated input.
    """
    _check_handler(definition, handler)
    return ToolCapability(definition=definition, handler=handler)


def _check_handler(definition: ToolDefinition, handler: Any) -> None:
    if not callable(handler):
        raise SchemaError("handler is not callable", tool_name=definition.name)

    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures are accepted as-is.
        return

    try:
        bound = sig.bind(object())
    except TypeError as exc:
        raise SchemaError(
            f"handler must accept exactly one positional argument ({exc})",
            tool_name=definition.name,
        ) from exc

    first = next(iter(bound.arguments))
    expected = _resolve_annotation(handler, first)
    if expected is Any or not isinstance(expected, type):
        return
    if not issubclass(definition.input_schema, expected):
        raise SchemaError(
            f"handler expects {expected.__name__}, "
            f"but the input schema is {definition.input_schema.__name__}",
            tool_name=definition.name,
        )


def _resolve_annotation(handler: Any, param: str) -> Any:
    """Return the resolved type hint of *param*, or ``None`` if unavailable."""
    target = handler if inspect.isfunction(handler) or inspect.ismethod(handler) else None
    if target is None:
        target = getattr(handler, "__call__", None)
    try:
        hints = typing.get_type_hints(target)
    except (NameError, TypeError):
        return None
    return hints.get(param)
