"""Git operations — status, branches, commits and remotes for a working copy."""

from __future__ import annotations

import logging
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from repofleet.errors import VersionControlError

logger = logging.getLogger(__name__)

REMOTE = "origin"


class GitClient:
    """Thin wrapper around a GitPython ``Repo`` for one working copy.

    Every method maps to one git command. Failures of commands whose result
    matters are raised as ``VersionControlError``; probes that only answer
    yes/no return False instead.
    """

    def __init__(self, repo_dir: str | Path):
        self.repo_dir = Path(repo_dir)
        try:
            self.repo = Repo(self.repo_dir)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise VersionControlError(f"not a git repository: {self.repo_dir}") from e

    def _git(self, command: str, *args: str) -> str:
        logger.debug("git %s %s (in %s)", command, " ".join(args), self.repo_dir)
        try:
            return getattr(self.repo.git, command.replace("-", "_"))(*args)
        except GitCommandError as e:
            stderr = (e.stderr or "").strip()
            raise VersionControlError(
                f"git {command} {' '.join(args)} failed: {stderr or e.status}"
            ) from e

    def _probe(self, command: str, *args: str) -> str | None:
        """Run a query command, returning None instead of raising on failure."""
        try:
            return self._git(command, *args)
        except VersionControlError:
            return None

    # ── Queries ─────────────────────────────────────────────────────

    def status_porcelain(self, *paths: str) -> str:
        """Short status of the working tree, optionally limited to ``paths``."""
        args = ["--porcelain"]
        if paths:
            args += ["--", *paths]
        return self._git("status", *args)

    def remote_head(self) -> str | None:
        """The branch ``origin/HEAD`` points at, or None if it is not recorded."""
        output = self._probe("symbolic-ref", f"refs/remotes/{REMOTE}/HEAD")
        if not output:
            return None
        return output.strip().removeprefix(f"refs/remotes/{REMOTE}/")

    def ref_exists(self, ref: str) -> bool:
        return self._probe("rev-parse", "--verify", "--quiet", ref) is not None

    def current_branch(self) -> str:
        return self._git("rev-parse", "--abbrev-ref", "HEAD").strip()

    def remote_branch_exists(self, branch: str) -> bool:
        """True if ``origin`` has a head named ``branch``.

        Unreachable remotes count as "does not exist".
        """
        output = self._probe("ls-remote", "--heads", REMOTE, branch)
        return bool(output and output.strip())

    # ── Commands ────────────────────────────────────────────────────

    def checkout(self, branch: str) -> None:
        self._git("checkout", branch)

    def create_branch(self, branch: str) -> None:
        self._git("checkout", "-b", branch)

    def pull(self) -> None:
        self._git("pull")

    def revert_working_tree(self) -> None:
        """Discard all modifications, and remove untracked files and directories.

        Only called on a tree that was clean before this run touched it, so
        every untracked file was created by the run itself.
        """
        self._git("checkout", "--", ".")
        self._git("clean", "-fd")

    def add_all(self) -> None:
        self._git("add", "-A")

    def commit(self, message: str) -> None:
        self._git("commit", "-m", message)

    def push(self, branch: str) -> None:
        self._git("push", "-u", REMOTE, branch)
