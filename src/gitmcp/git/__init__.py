"""Git tools — read-only repository inspection exposed as MCP tools."""

from gitmcp.git.runner import GitCommandError, GitRunner
from gitmcp.git.tools import GIT_TOOLS, build_git_tools

__all__ = [
    "GIT_TOOLS",
    "GitCommandError",
    "GitRunner",
    "build_git_tools",
]
