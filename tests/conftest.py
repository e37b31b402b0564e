"""Shared fixtures."""

from __future__ import annotations

import shutil
import subprocess
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c",
            "user.name=Test User",
            "-c",
            "user.email=test@example.com",
            "-c",
            "commit.gpgsign=false",
            "-C",
            str(repo),
            *args,
        ],
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A repository checked out at ``main`` with three commits."""
    if shutil.which("git") is None:
        pytest.skip("git executable not found")
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    for i in range(3):
        (repo / f"file{i}.txt").write_text(f"content {i}\n")
        _git(repo, "add", f"file{i}.txt")
        _git(repo, "commit", "-q", "-m", f"commit {i}")
    _git(repo, "remote", "add", "origin", "https://example.com/repo.git")
    return repo
