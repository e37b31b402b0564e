"""Read-only git inspection tools.

Each tool is one git subcommand wrapped as a :class:`ToolCapability`.  All
of them are annotated non-destructive, so they stay visible in the
``readOnly`` toolset mode.
"""

from __future__ import annotations

import asyncio
import json
import stat
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from gitmcp.git.runner import GitRunner
from gitmcp.server.models import ContentBlock, TextContent, ToolAnnotations, ToolCapability
from gitmcp.server.tools import create_tool, create_tool_definition

# ---------------------------------------------------------------------------
# Input schemas
# ---------------------------------------------------------------------------


class RepoPathInput(BaseModel):
    """Arguments for tools operating on one repository."""

    path: str = Field(..., description="Path to the git repository")


class SearchPathInput(BaseModel):
    """Arguments for the repository search."""

    path: str = Field(
        ...,
        description="Absolute or relative path to start searching for git repositories",
    )


class GitLogInput(RepoPathInput):
    """Arguments for ``get_git_log``."""

    model_config = ConfigDict(populate_by_name=True)

    max_count: int | None = Field(
        default=None,
        ge=0,
        alias="maxCount",
        description="Maximum number of log entries to return",
    )


_READ_ONLY = ToolAnnotations(
    read_only_hint=True,
    destructive_hint=False,
    idempotent_hint=True,
    open_world_hint=False,
)


def _text(text: str) -> list[ContentBlock]:
    return [TextContent(text=text)]


def _has_git_dir(directory: Path) -> bool:
    try:
        return stat.S_ISDIR((directory / ".git").stat().st_mode)
    except (FileNotFoundError, NotADirectoryError):
        return False


# ---------------------------------------------------------------------------
# Tool factory
# ---------------------------------------------------------------------------


def build_git_tools(runner: GitRunner | None = None) -> list[ToolCapability]:
    """Return the git tools, all bound to *runner*."""
    git = runner or GitRunner()

    async def get_git_repos_from_path(args: SearchPathInput) -> list[ContentBlock]:
        # Nearest repository first, walking up to the filesystem root.
        current = Path(args.path).expanduser().resolve()
        found: list[str] = []
        while True:
            if await asyncio.to_thread(_has_git_dir, current):
                found.append(str(current))
            parent = current.parent
            if parent == current:
                break
            current = parent
        return _text(json.dumps(found))

    async def get_current_branch(args: RepoPathInput) -> list[ContentBlock]:
        stdout = await git.run(args.path, "rev-parse", "--abbrev-ref", "HEAD")
        return _text(stdout.strip())

    async def get_git_status(args: RepoPathInput) -> list[ContentBlock]:
        return _text(await git.run(args.path, "status", "--porcelain=v1", "--branch"))

    async def get_git_log(args: GitLogInput) -> list[ContentBlock]:
        count = ["-n", str(args.max_count)] if args.max_count else []
        stdout = await git.run(args.path, "log", *count, "--pretty=oneline")
        return _text(stdout.rstrip("\n"))

    async def get_git_remotes(args: RepoPathInput) -> list[ContentBlock]:
        return _text(await git.run(args.path, "remote", "-v"))

    async def get_git_config(args: RepoPathInput) -> list[ContentBlock]:
        return _text(await git.run(args.path, "config", "--list"))

    return [
        create_tool(
            create_tool_definition(
                name="get_git_repos_from_path",
                description=(
                    "Get all parent git repositories from a given path "
                    "(searches up the directory tree)"
                ),
                input_schema=SearchPathInput,
                annotations=_READ_ONLY.model_copy(update={"title": "Get Git Repos From Path"}),
            ),
            get_git_repos_from_path,
        ),
        create_tool(
            create_tool_definition(
                name="get_current_branch",
                description="Get the current git branch for a given repository path",
                input_schema=RepoPathInput,
                annotations=_READ_ONLY.model_copy(update={"title": "Get Current Branch"}),
            ),
            get_current_branch,
        ),
        create_tool(
            create_tool_definition(
                name="get_git_status",
                description="Get the git status for a given repository path",
                input_schema=RepoPathInput,
                annotations=_READ_ONLY.model_copy(update={"title": "Get Git Status"}),
            ),
            get_git_status,
        ),
        create_tool(
            create_tool_definition(
                name="get_git_log",
                description="Get the git log for a given repository path",
                input_schema=GitLogInput,
                annotations=_READ_ONLY.model_copy(update={"title": "Get Git Log"}),
            ),
            get_git_log,
        ),
        create_tool(
            create_tool_definition(
                name="get_git_remotes",
                description="Get the git remotes for a given repository path",
                input_schema=RepoPathInput,
                annotations=_READ_ONLY.model_copy(update={"title": "Get Git Remotes"}),
            ),
            get_git_remotes,
        ),
        create_tool(
            create_tool_definition(
                name="get_git_config",
                description="Get the git config for a given repository path",
                input_schema=RepoPathInput,
                annotations=_READ_ONLY.model_copy(update={"title": "Get Git Config"}),
            ),
            get_git_config,
        ),
    ]


GIT_TOOLS: list[ToolCapability] = build_git_tools()
