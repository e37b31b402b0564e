"""``git-tools-mcp tools`` — show which tools the configuration exposes."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import click

from gitmcp.cli_commands._options import with_bootstrap
from gitmcp.cli_commands._output import console, print_tools_table

if TYPE_CHECKING:
    from gitmcp.server.models import ServerConfig


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list payload as JSON.")
@with_bootstrap()
def tools(config: ServerConfig, as_json: bool) -> None:
    """List the tools visible under the effective configuration."""
    from gitmcp.git.tools import GIT_TOOLS
    from gitmcp.server.dispatcher import ToolDispatcher
    from gitmcp.server.registry import CapabilityRegistry

    registry = CapabilityRegistry(GIT_TOOLS, config.toolset)

    if as_json:
        listing = ToolDispatcher(registry, instructions=config.instructions).list_tools()
        click.echo(json.dumps(listing.to_wire(), indent=2))
        return

    if not len(registry):
        console.print("[yellow]No tools visible under this configuration.[/yellow]")
        return

    print_tools_table(list(registry.base), set(registry.names()))
