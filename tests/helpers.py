"""Shared helpers for server tests: an in-memory transport and sample tools."""

from __future__ import annotations

import asyncio
import shutil
from typing import Any
from uuid import uuid4

import pytest
from pydantic import BaseModel, ConfigDict, Field

from gitmcp.server.models import TextContent, ToolAnnotations, ToolCapability
from gitmcp.server.tools import create_tool, create_tool_definition
from gitmcp.transports.base import TransportClosedError

_CLOSE = object()

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not found")


class MemoryTransport:
    """Queue-backed transport driven directly by a test acting as the client."""

    def __init__(self, session_id: str | None = None) -> None:
        self._session_id = session_id or uuid4().hex
        self.inbound: asyncio.Queue[Any] = asyncio.Queue()
        self.outbound: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.started = False
        self.closed = False
        self._next_id = 1
        self._pending: dict[Any, dict[str, Any]] = {}
        self.notifications: list[dict[str, Any]] = []

    @property
    def session_id(self) -> str:
        return self._session_id

    # -- server side ---------------------------------------------------

    async def start(self) -> None:
        self.started = True

    async def send(self, message: dict[str, Any]) -> None:
        if self.closed:
            raise TransportClosedError("closed")
        await self.outbound.put(message)

    async def receive(self) -> Any:
        item = await self.inbound.get()
        if item is _CLOSE:
            raise TransportClosedError("closed")
        return item

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.inbound.put_nowait(_CLOSE)

    # -- client side ---------------------------------------------------

    def push(self, message: Any) -> None:
        self.inbound.put_nowait(message)

    def disconnect(self) -> None:
        self.inbound.put_nowait(_CLOSE)

    def request(self, method: str, params: dict[str, Any] | None = None) -> int:
        request_id = self._next_id
        self._next_id += 1
        message: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
        if params is not None:
            message["params"] = params
        self.push(message)
        return request_id

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            message["params"] = params
        self.push(message)

    async def next_message(self, timeout: float = 2.0) -> dict[str, Any]:
        return await asyncio.wait_for(self.outbound.get(), timeout)

    async def response(self, request_id: Any, timeout: float = 2.0) -> dict[str, Any]:
        """Wait for the response to *request_id*, stashing anything else."""
        while request_id not in self._pending:
            message = await self.next_message(timeout)
            if "id" in message:
                self._pending[message["id"]] = message
            else:
                self.notifications.append(message)
        return self._pending.pop(request_id)

    async def call(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.response(self.request(method, params))

    async def initialize(self) -> dict[str, Any]:
        response = await self.call(
            "initialize",
            {
                "protocolVersion": "2025-06-18",
                "capabilities": {},
                "clientInfo": {"name": "test-client", "version": "1.0"},
            },
        )
        self.notify("notifications/initialized")
        return response


class EchoInput(BaseModel):
    text: str = Field(..., description="Text to echo")
    repeat: int | None = Field(default=None, ge=1)


class ClosedInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    value: str


READ_ONLY = ToolAnnotations(read_only_hint=True, destructive_hint=False, idempotent_hint=True)
DESTRUCTIVE = ToolAnnotations(destructive_hint=True)


def make_tool(
    name: str,
    *,
    destructive: bool = False,
    handler: Any = None,
    input_schema: type[BaseModel] = EchoInput,
) -> ToolCapability:
    """Build a capability that echoes its ``text`` argument by default."""

    async def echo(args: Any) -> list[TextContent]:
        return [TextContent(text=args.text * (args.repeat or 1))]

    return create_tool(
        create_tool_definition(
            name=name,
            description=f"{name} test tool",
            input_schema=input_schema,
            annotations=DESTRUCTIVE if destructive else READ_ONLY,
        ),
        handler or echo,
    )
