"""Transports — carry JSON-RPC messages between the server and one client."""

from gitmcp.transports.base import (
    MessageDecodeError,
    ServerTransport,
    TransportClosedError,
    TransportError,
)
from gitmcp.transports.sse import SseServerTransport, create_sse_app
from gitmcp.transports.stdio import StdioServerTransport

__all__ = [
    "MessageDecodeError",
    "ServerTransport",
    "SseServerTransport",
    "StdioServerTransport",
    "TransportClosedError",
    "TransportError",
    "create_sse_app",
]
