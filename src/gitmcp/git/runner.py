"""GitRunner — runs git subcommands as async subprocesses.

Commands are executed without a shell (argument vectors only), so paths
supplied by clients are never interpreted by ``sh``.
"""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """git exited non-zero or could not be started."""

    def __init__(self, args: list[str], returncode: int | None, stderr: str = "") -> None:
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr.strip()
        command = " ".join(args)
        if returncode is None:
            msg = f"Could not run `{command}`"
        else:
            msg = f"`{command}` exited with status {returncode}"
        super().__init__(msg + (f": {self.stderr}" if self.stderr else ""))


class GitRunner:
    """Executes ``git -C <path> <args>`` and returns stdout."""

    def __init__(self, executable: str = "git", *, env: dict[str, str] | None = None) -> None:
        self._executable = executable
        self._env = env

    @property
    def executable(self) -> str:
        return self._executable

    async def run(self, path: str, *args: str) -> str:
        """Run a git subcommand against the repository at *path*.

        Raises:
            GitCommandError: If git cannot be started or exits non-zero.
        """
        argv = [self._executable, "-C", path, *args]
        logger.debug("Running %s", argv)
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._env,
            )
        except OSError as exc:
            raise GitCommandError(argv, None, str(exc)) from exc

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise GitCommandError(argv, proc.returncode, stderr.decode(errors="replace"))
        return stdout.decode(errors="replace")
