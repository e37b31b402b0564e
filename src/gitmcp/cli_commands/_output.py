"""Shared CLI output formatters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from gitmcp.utils.console import console

if TYPE_CHECKING:
    from gitmcp.server.models import ToolCapability


def print_tools_table(capabilities: list[ToolCapability], visible: set[str]) -> None:
    """Pretty-print registered tools and whether each is exposed."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Visible")
    table.add_column("Destructive")
    table.add_column("Description")

    for capability in capabilities:
        definition = capability.definition
        table.add_row(
            definition.name,
            "[green]yes[/green]" if definition.name in visible else "[dim]no[/dim]",
            "yes" if definition.annotations.destructive_hint else "no",
            _truncate(definition.description),
        )

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
