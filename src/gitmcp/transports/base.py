"""Server-side transport protocol.

One transport instance carries exactly one client session.  Each transport
satisfies :class:`ServerTransport`, providing ``start``, ``send``,
``receive`` and ``close``.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


class TransportError(Exception):
    """Base error for all transport failures."""


class TransportClosedError(TransportError):
    """The transport reached end of stream or was closed."""


class MessageDecodeError(TransportError):
    """An inbound frame was not a valid JSON message."""

    def __init__(self, raw: str | bytes, detail: str = "") -> None:
        self.raw = raw
        self.detail = detail
        super().__init__("Invalid JSON message" + (f": {detail}" if detail else ""))


@runtime_checkable
class ServerTransport(Protocol):
    """Abstract transport for one MCP client session."""

    @property
    def session_id(self) -> str: ...

    async def start(self) -> None: ...
    async def send(self, message: dict[str, Any]) -> None: ...
    async def receive(self) -> Any: ...
    async def close(self) -> None: ...
