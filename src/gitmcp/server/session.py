"""Per-connection sessions and the collection that tracks them.

Each client connection owns one :class:`ServerSession` wrapping one
transport.  Sessions are kept in a :class:`SessionManager` keyed by session
id, so any number of clients can be attached at once and each is
addressable on its own.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from gitmcp.server.protocol import (
    LOG_LEVELS,
    NOTIFICATION_MESSAGE,
    PARSE_ERROR,
    JsonRpcNotification,
    failure,
)
from gitmcp.transports.base import MessageDecodeError, TransportClosedError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gitmcp.server.server import McpServer
    from gitmcp.transports.base import ServerTransport

logger = logging.getLogger(__name__)


class ServerSession:
    """One client connection: a receive loop plus its in-flight requests.

    Every inbound request is handled in its own task, so a slow tool call
    never delays other requests on the same connection.  Responses are
    correlated by their JSON-RPC ``id`` and may complete out of order.
    """

    def __init__(self, server: McpServer, transport: ServerTransport) -> None:
        self._server = server
        self._transport = transport
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False
        self.initialized = False
        self.protocol_version: str | None = None
        self.client_info: dict[str, Any] = {}
        self.log_level = "info"

    @property
    def session_id(self) -> str:
        return self._transport.session_id

    @property
    def transport(self) -> ServerTransport:
        return self._transport

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        """Number of requests currently being handled."""
        return len(self._tasks)

    async def run(self) -> None:
        """Read messages until the transport closes, then drain and close."""
        await self._transport.start()
        logger.info("Session %s started", self.session_id)
        try:
            while True:
                try:
                    message = await self._transport.receive()
                except MessageDecodeError as exc:
                    logger.warning("Session %s: %s", self.session_id, exc)
                    await self.send(failure(None, PARSE_ERROR, "Parse error", exc.detail or None))
                    continue
                except TransportClosedError:
                    break
                self._spawn(message)

            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
        finally:
            await self.close()

    async def send(self, message: dict[str, Any]) -> None:
        """Send *message*, dropping it if the connection has gone away."""
        if self._closed:
            logger.debug("Session %s closed, dropping outbound message", self.session_id)
            return
        try:
            await self._transport.send(message)
        except (TransportClosedError, OSError) as exc:
            logger.debug("Session %s: send failed (%s), message dropped", self.session_id, exc)

    async def send_notification(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a server-to-client notification."""
        await self.send(JsonRpcNotification(method=method, params=params).to_wire())

    async def send_log_message(
        self,
        level: str,
        data: Any,
        logger_name: str | None = None,
    ) -> bool:
        """Send ``notifications/message`` if *level* passes this session's threshold.

        Returns whether the message was sent.
        """
        if LOG_LEVELS.index(level) < LOG_LEVELS.index(self.log_level):
            return False
        params: dict[str, Any] = {"level": level, "data": data}
        if logger_name:
            params["logger"] = logger_name
        await self.send_notification(NOTIFICATION_MESSAGE, params)
        return True

    async def close(self) -> None:
        """Close the transport and detach from the server.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._transport.close()
        finally:
            self._server.sessions.remove(self.session_id)
            logger.info("Session %s closed", self.session_id)

    def _spawn(self, message: Any) -> None:
        task = asyncio.create_task(self._handle(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle(self, message: Any) -> None:
        try:
            response = await self._server.handle_message(self, message)
            if response is not None:
                await self.send(response)
        except Exception:
            logger.exception("Session %s: unhandled error while processing a message", self.session_id)


class SessionManager:
    """Live sessions keyed by session id."""

    def __init__(self) -> None:
        self._sessions: dict[str, ServerSession] = {}

    def add(self, session: ServerSession) -> None:
        if session.session_id in self._sessions:
            msg = f"Session already attached: {session.session_id}"
            raise ValueError(msg)
        self._sessions[session.session_id] = session

    def remove(self, session_id: str) -> ServerSession | None:
        return self._sessions.pop(session_id, None)

    def get(self, session_id: str) -> ServerSession | None:
        return self._sessions.get(session_id)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[ServerSession]:
        # Snapshot, so sessions may detach while callers iterate.
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)
