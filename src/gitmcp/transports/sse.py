"""SSE transport — a server-push event stream paired with a POST endpoint.

Each ``GET /sse`` opens a new session with its own
:class:`SseServerTransport`.  The first event (``endpoint``) tells the
client where to POST its messages; the URL carries the session id, which is
how the POST handler finds the right session among all attached ones.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from gitmcp.transports.base import TransportClosedError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from gitmcp.server.server import McpServer

logger = logging.getLogger(__name__)

_CLOSE = object()


def format_event(event: str, data: str) -> str:
    """Encode one server-sent event frame."""
    lines = "".join(f"data: {line}\n" for line in data.splitlines() or [""])
    return f"event: {event}\n{lines}\n"


class SseServerTransport:
    """Queue-backed transport for one SSE session.

    Outbound messages are queued until the event stream picks them up;
    inbound messages arrive through :meth:`handle_post_message`.
    """

    def __init__(self, endpoint: str = "/messages", *, session_id: str | None = None) -> None:
        self._session_id = session_id or uuid4().hex
        self._endpoint = endpoint
        self._inbound: asyncio.Queue[Any] = asyncio.Queue()
        self._outbound: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def endpoint_url(self) -> str:
        """Where the client must POST messages for this session."""
        return f"{self._endpoint}?sessionId={self._session_id}"

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Nothing to open; the HTTP layer owns the connection."""

    async def send(self, message: dict[str, Any]) -> None:
        """Queue *message* for the event stream."""
        if self._closed:
            msg = "Transport closed"
            raise TransportClosedError(msg)
        await self._outbound.put(message)

    async def receive(self) -> Any:
        """Wait for the next POSTed message."""
        item = await self._inbound.get()
        if item is _CLOSE:
            msg = "SSE stream closed"
            raise TransportClosedError(msg)
        return item

    async def handle_post_message(self, message: Any) -> None:
        """Deliver a message POSTed by the client."""
        if self._closed:
            msg = "Transport closed"
            raise TransportClosedError(msg)
        await self._inbound.put(message)

    async def events(self) -> AsyncIterator[str]:
        """Yield SSE frames: the endpoint first, then outbound messages."""
        yield format_event("endpoint", self.endpoint_url)
        while True:
            item = await self._outbound.get()
            if item is _CLOSE:
                return
            yield format_event("message", json.dumps(item, separators=(",", ":")))

    async def close(self) -> None:
        """End both directions.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._inbound.put_nowait(_CLOSE)
        self._outbound.put_nowait(_CLOSE)


def create_sse_app(
    server: McpServer,
    *,
    sse_path: str = "/sse",
    message_path: str = "/messages",
) -> FastAPI:
    """Build a FastAPI app serving *server* over SSE.

    Every stream gets its own session; sessions are looked up by id on each
    POST, so any number of clients can be connected at once.
    """
    app = FastAPI(title=server.config.name, version=server.config.version)
    app.state.server = server
    app.state.session_tasks = set()

    @app.get(sse_path)
    async def open_stream() -> StreamingResponse:
        transport = SseServerTransport(message_path)
        session = server.connect(transport)
        task = asyncio.create_task(session.run())
        app.state.session_tasks.add(task)
        task.add_done_callback(app.state.session_tasks.discard)
        logger.info("SSE stream opened for session %s", transport.session_id)

        async def stream() -> AsyncIterator[str]:
            try:
                async for frame in transport.events():
                    yield frame
            finally:
                await transport.close()
                logger.info("SSE stream closed for session %s", transport.session_id)

        return StreamingResponse(
            stream(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    @app.post(message_path)
    async def post_message(
        request: Request,
        session_id: str | None = Query(default=None, alias="sessionId"),
    ) -> PlainTextResponse:
        if not session_id:
            raise HTTPException(status_code=400, detail="Missing sessionId")
        session = server.sessions.get(session_id)
        if session is None or not isinstance(session.transport, SseServerTransport):
            raise HTTPException(status_code=404, detail="Session not found")

        body = await request.body()
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid JSON: {exc}") from exc

        try:
            await session.transport.handle_post_message(payload)
        except TransportClosedError as exc:
            raise HTTPException(status_code=404, detail="Session closed") from exc
        return PlainTextResponse("Accepted", status_code=202)

    return app
