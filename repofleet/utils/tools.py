"""External tool invocation — the pinning tool, the go toolchain and the GitHub CLI.

Commands that users commonly alias (``ghat``, ``gh``) are run through the
user's interactive shell so the aliases resolve. Output is passed through
to the terminal uninterpreted; only the exit status matters.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class ToolError(Exception):
    """An external tool exited non-zero or could not be started."""

    def __init__(self, command: str, returncode: int | None = None, detail: str = ""):
        message = f"`{command}`"
        if returncode is not None:
            message += f" exited with status {returncode}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode


def user_shell() -> str:
    return os.environ.get("SHELL") or "bash"


class ToolRunner:
    """Runs the external collaborators of the update engine.

    Tests substitute an object with the same methods.
    """

    def command_exists(self, name: str) -> bool:
        """True if ``name`` resolves in the user's shell (aliases included)."""
        proc = subprocess.run(
            [user_shell(), "-ic", f"command -v {shlex.quote(name)}"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return proc.returncode == 0

    def shell(self, repo_dir: str | Path, command: str) -> None:
        """Run ``command`` through the user's shell inside ``repo_dir``."""
        self._run([user_shell(), "-ic", command], repo_dir, display=command)

    def go(self, repo_dir: str | Path, *args: str) -> None:
        self._run(["go", *args], repo_dir)

    def create_pull_request(self, repo_dir: str | Path, title: str, body: str) -> None:
        """Open a pull request for the currently pushed branch."""
        command = f"gh pr create --title {shlex.quote(title)} --body {shlex.quote(body)}"
        self.shell(repo_dir, command)

    def _run(self, argv: list[str], cwd: str | Path, display: str = "") -> None:
        display = display or " ".join(argv)
        logger.debug("running %s (in %s)", display, cwd)
        try:
            proc = subprocess.run(argv, cwd=cwd)
        except OSError as e:
            raise ToolError(display, detail=str(e)) from e
        if proc.returncode != 0:
            raise ToolError(display, proc.returncode)
