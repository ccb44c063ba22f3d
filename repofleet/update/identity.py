"""Proposal identity — a content-addressed branch name for an update.

The token is a 64-bit xxHash over the bytes of every changed candidate
file, fed in a fixed order. It depends only on the final file contents, so
the same update always maps to the same branch regardless of which steps
produced it, on any machine. A remote branch with that name means the
update has already been proposed.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import xxhash

from repofleet.config import MANIFEST_FILE, UpdateConfig
from repofleet.update.changes import changed
from repofleet.update.steps import GO_SUM_FILE
from repofleet.utils.git_ops import GitClient


@dataclass(frozen=True)
class IdentityCandidate:
    """A file that contributes to the identity if any of ``watch`` changed."""

    path: str
    watch: tuple[str, ...]


def identity_candidates(config: UpdateConfig) -> tuple[IdentityCandidate, ...]:
    return (
        IdentityCandidate(config.ci_file, (config.ci_file,)),
        IdentityCandidate(MANIFEST_FILE, (MANIFEST_FILE, GO_SUM_FILE)),
    )


def fingerprint(chunks) -> str:
    """Hex token of the xxh64 digest of ``chunks`` fed in order (no zero padding)."""
    h = xxhash.xxh64()
    for chunk in chunks:
        h.update(chunk)
    return format(h.intdigest(), "x")


def branch_name(namespace: str, token: str) -> str:
    return f"{namespace}/update-{token}"


def identity_token(git: GitClient, config: UpdateConfig) -> str:
    """Fingerprint of the current bytes of every changed candidate file."""
    repo_dir = Path(git.repo_dir)

    def contents():
        for candidate in identity_candidates(config):
            path = repo_dir / candidate.path
            if path.is_file() and changed(git, *candidate.watch):
                yield path.read_bytes()

    return fingerprint(contents())


def identity(git: GitClient, config: UpdateConfig) -> str:
    """The proposal branch name for the working tree's current changes."""
    return branch_name(config.namespace, identity_token(git, config))
