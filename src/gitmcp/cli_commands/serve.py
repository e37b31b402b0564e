"""``git-tools-mcp stdio`` / ``git-tools-mcp sse`` — run the server."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import click

from gitmcp.cli_commands._options import with_bootstrap

if TYPE_CHECKING:
    from gitmcp.server.models import ServerConfig

logger = logging.getLogger(__name__)


@click.command()
@with_bootstrap()
def stdio(config: ServerConfig) -> None:
    """Serve MCP over standard input/output."""
    from gitmcp.git.tools import GIT_TOOLS
    from gitmcp.server.server import McpServer
    from gitmcp.transports.stdio import StdioServerTransport

    server = McpServer(config, GIT_TOOLS)
    logger.info(
        "%s %s running on stdio (%d tool(s) visible)",
        config.name,
        config.version,
        len(server.registry),
    )
    try:
        asyncio.run(server.serve(StdioServerTransport()))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=3000, show_default=True, type=int, help="Port to listen on.")
@with_bootstrap(console_spans=True)
def sse(config: ServerConfig, host: str, port: int) -> None:
    """Serve MCP over HTTP with server-sent events."""
    import uvicorn

    from gitmcp.git.tools import GIT_TOOLS
    from gitmcp.server.server import McpServer
    from gitmcp.transports.sse import create_sse_app

    server = McpServer(config, GIT_TOOLS)
    app = create_sse_app(server)
    logger.info("%s %s listening on http://%s:%d/sse", config.name, config.version, host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)
