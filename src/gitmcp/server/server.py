"""McpServer — wires registry, dispatcher, notifier and sessions together.

Implements the server side of the MCP handshake (``initialize``), tool
discovery (``tools/list``) and execution (``tools/call``) over any
:class:`~gitmcp.transports.base.ServerTransport`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from gitmcp.server.dispatcher import ToolDispatcher
from gitmcp.server.errors import ToolNotFoundError, ToolValidationError
from gitmcp.server.models import ServerConfig
from gitmcp.server.notifier import DiscoveryNotifier
from gitmcp.server.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    LOG_LEVELS,
    METHOD_INITIALIZE,
    METHOD_LOGGING_SET_LEVEL,
    METHOD_NOT_FOUND,
    METHOD_PING,
    METHOD_TOOLS_CALL,
    METHOD_TOOLS_LIST,
    NOTIFICATION_INITIALIZED,
    PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    JsonRpcRequest,
    failure,
    success,
)
from gitmcp.server.registry import CapabilityRegistry
from gitmcp.server.session import ServerSession, SessionManager
from gitmcp.utils.telemetry import ATTR_RPC_METHOD, ATTR_SESSION_ID, get_tracer

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from gitmcp.server.models import ToolCapability, ToolsetConfig
    from gitmcp.transports.base import ServerTransport

    RequestHandler = Callable[[ServerSession, dict[str, Any]], Awaitable[dict[str, Any]]]

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class InvalidParamsError(Exception):
    """Request parameters are malformed at the protocol level."""


class McpServer:
    """An MCP server exposing a fixed list of tool capabilities.

    Construction validates the capability list (duplicate names raise
    :class:`~gitmcp.server.errors.SchemaError`).  After that, no error
    raised while serving terminates a session or the process.

    Usage::

        server = McpServer(ServerConfig(), GIT_TOOLS)
        await server.serve(StdioServerTransport())
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        capabilities: Iterable[ToolCapability] = (),
    ) -> None:
        self.config = config or ServerConfig()
        self.registry = CapabilityRegistry(capabilities, self.config.toolset)
        self.dispatcher = ToolDispatcher(self.registry, instructions=self.config.instructions)
        self.sessions = SessionManager()
        self.notifier = DiscoveryNotifier(
            self.sessions,
            enabled=self.config.dynamic_tool_discovery.enabled,
        )
        self._handlers: dict[str, RequestHandler] = {
            METHOD_INITIALIZE: self._initialize,
            METHOD_PING: self._ping,
            METHOD_TOOLS_LIST: self._list_tools,
            METHOD_TOOLS_CALL: self._call_tool,
            METHOD_LOGGING_SET_LEVEL: self._set_log_level,
        }

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def connect(self, transport: ServerTransport) -> ServerSession:
        """Attach *transport* as a new session (not yet running)."""
        session = ServerSession(self, transport)
        self.sessions.add(session)
        return session

    async def serve(self, transport: ServerTransport) -> None:
        """Attach *transport* and run its session until it closes."""
        await self.connect(transport).run()

    def capabilities(self) -> dict[str, Any]:
        """Server capabilities advertised in the ``initialize`` result."""
        return {
            "tools": {"listChanged": self.notifier.enabled},
            "logging": {},
        }

    # ------------------------------------------------------------------
    # Runtime operations
    # ------------------------------------------------------------------

    async def update_toolset(self, config: ToolsetConfig) -> bool:
        """Re-filter the tool list under *config* and notify clients on change.

        Returns whether the visible tool set changed.
        """
        previous = self.registry.names()
        changed = self.registry.reconfigure(config)
        await self.notifier.tools_changed(previous, self.registry.names())
        return changed

    async def send_log_message(
        self,
        level: str,
        data: Any,
        logger_name: str | None = None,
    ) -> int:
        """Broadcast an MCP log message; returns the number of sessions reached."""
        if level not in LOG_LEVELS:
            msg = f"Unknown log level: {level}"
            raise ValueError(msg)
        sent = 0
        for session in self.sessions:
            if await session.send_log_message(level, data, logger_name):
                sent += 1
        return sent

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    async def handle_message(self, session: ServerSession, message: Any) -> dict[str, Any] | None:
        """Process one inbound message; return the response, if any."""
        if not isinstance(message, dict):
            return failure(None, INVALID_REQUEST, "Invalid request: expected a JSON object")

        if "method" not in message and ("result" in message or "error" in message):
            # A response to a server-initiated request; none are issued.
            logger.debug("Session %s: ignoring client response %s", session.session_id, message.get("id"))
            return None

        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError:
            request_id = message.get("id")
            if not isinstance(request_id, (int, str)):
                request_id = None
            return failure(request_id, INVALID_REQUEST, "Invalid request")

        if request.is_notification:
            await self._handle_notification(session, request)
            return None

        handler = self._handlers.get(request.method)
        if handler is None:
            return failure(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

        with _tracer.start_as_current_span("mcp.rpc") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            span.set_attribute(ATTR_SESSION_ID, session.session_id)
            try:
                result = await handler(session, request.params or {})
            except (ToolNotFoundError, ToolValidationError) as exc:
                return failure(request.id, INVALID_PARAMS, str(exc), exc.to_data())
            except InvalidParamsError as exc:
                return failure(request.id, INVALID_PARAMS, str(exc))
            except Exception as exc:
                logger.exception("Request %s (%s) failed", request.id, request.method)
                return failure(request.id, INTERNAL_ERROR, "Internal error", {"message": str(exc)})
        return success(request.id, result)

    async def _handle_notification(self, session: ServerSession, request: JsonRpcRequest) -> None:
        if request.method == NOTIFICATION_INITIALIZED:
            session.initialized = True
            logger.info(
                "Session %s initialized by %s",
                session.session_id,
                session.client_info.get("name", "unknown client"),
            )
            await session.send_log_message(
                "info",
                f"{self.config.name} {self.config.version} started",
                logger_name=self.config.name,
            )
        else:
            logger.debug("Session %s: ignoring notification %s", session.session_id, request.method)

    # ------------------------------------------------------------------
    # Request handlers
    # ------------------------------------------------------------------

    async def _initialize(self, session: ServerSession, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else PROTOCOL_VERSION
        client_info = params.get("clientInfo")
        session.protocol_version = version
        session.client_info = client_info if isinstance(client_info, dict) else {}

        result: dict[str, Any] = {
            "protocolVersion": version,
            "capabilities": self.capabilities(),
            "serverInfo": {"name": self.config.name, "version": self.config.version},
        }
        if self.config.instructions:
            result["instructions"] = self.config.instructions
        return result

    async def _ping(self, session: ServerSession, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _list_tools(self, session: ServerSession, params: dict[str, Any]) -> dict[str, Any]:
        return self.dispatcher.list_tools().to_wire()

    async def _call_tool(self, session: ServerSession, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("tools/call requires a tool 'name'")
        result = await self.dispatcher.call_tool(name, params.get("arguments"))
        return result.to_wire()

    async def _set_log_level(self, session: ServerSession, params: dict[str, Any]) -> dict[str, Any]:
        level = params.get("level")
        if level not in LOG_LEVELS:
            raise InvalidParamsError(f"Unknown log level: {level}")
        session.log_level = level
        return {}
