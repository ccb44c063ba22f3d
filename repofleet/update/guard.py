"""Workspace guard — refuse to mutate a repository with local modifications."""

from __future__ import annotations

from dataclasses import dataclass

from repofleet.errors import DirtyWorkingTreeError
from repofleet.utils.git_ops import GitClient


@dataclass(frozen=True)
class WorkingTreeState:
    """Point-in-time classification of a working tree. Never cached."""

    clean: bool
    status: str = ""


def working_tree_state(git: GitClient) -> WorkingTreeState:
    status = git.status_porcelain()
    return WorkingTreeState(clean=not status.strip(), status=status)


def assert_clean(git: GitClient, repo: str | None = None) -> WorkingTreeState:
    """Return the clean state, or raise with the status report if dirty.

    Raises:
        DirtyWorkingTreeError: If there are tracked or untracked modifications.
    """
    state = working_tree_state(git)
    if not state.clean:
        raise DirtyWorkingTreeError(state.status, repo=repo)
    return state
