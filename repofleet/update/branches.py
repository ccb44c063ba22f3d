"""Default/current branch resolution."""

from __future__ import annotations

import logging

from repofleet.utils.git_ops import GitClient

logger = logging.getLogger(__name__)

FALLBACK_BRANCHES = ("main", "master")


def default_branch(git: GitClient) -> str:
    """Resolve the repository's default branch.

    First success wins: the remote's recorded HEAD, a local ``main``, a
    local ``master``, and finally ``main`` unverified.
    """
    branch = git.remote_head()
    if branch:
        return branch

    for candidate in FALLBACK_BRANCHES:
        if git.ref_exists(candidate):
            return candidate

    return FALLBACK_BRANCHES[0]


def current_branch(git: GitClient) -> str:
    return git.current_branch()


def ensure_default_branch(git: GitClient) -> str:
    """Check out the default branch if it is not already checked out; return its name."""
    branch = default_branch(git)
    if current_branch(git) != branch:
        logger.info("Switching to %s...", branch)
        git.checkout(branch)
    return branch
