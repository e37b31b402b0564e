"""git-tools-mcp CLI entrypoint."""

from __future__ import annotations

import click

from gitmcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="git-tools-mcp")
def main() -> None:
    """git-tools-mcp — MCP server for read-only git inspection."""


# Register subcommands
from gitmcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
