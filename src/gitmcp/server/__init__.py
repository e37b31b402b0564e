"""Server core — tool capabilities, toolset policy, registry and dispatch."""

from gitmcp.server.dispatcher import ToolDispatcher
from gitmcp.server.errors import (
    CapabilityError,
    ErrorKind,
    SchemaError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
)
from gitmcp.server.models import (
    CallToolResult,
    ContentBlock,
    DynamicDiscoveryConfig,
    ImageContent,
    ListToolsResult,
    ServerConfig,
    TextContent,
    ToolAnnotations,
    ToolCapability,
    ToolDefinition,
    ToolsetConfig,
    ToolsetMode,
)
from gitmcp.server.notifier import DiscoveryNotifier
from gitmcp.server.policy import ToolsetPolicy, is_visible
from gitmcp.server.registry import CapabilityRegistry
from gitmcp.server.server import McpServer
from gitmcp.server.session import ServerSession, SessionManager
from gitmcp.server.tools import create_tool, create_tool_definition

__all__ = [
    "CallToolResult",
    "CapabilityError",
    "CapabilityRegistry",
    "ContentBlock",
    "DiscoveryNotifier",
    "DynamicDiscoveryConfig",
    "ErrorKind",
    "ImageContent",
    "ListToolsResult",
    "McpServer",
    "SchemaError",
    "ServerConfig",
    "ServerSession",
    "SessionManager",
    "TextContent",
    "ToolAnnotations",
    "ToolCapability",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolValidationError",
    "ToolsetConfig",
    "ToolsetMode",
    "ToolsetPolicy",
    "create_tool",
    "create_tool_definition",
    "is_visible",
]
