"""Error taxonomy for fleet updates.

Every error raised by the update engine derives from ``RepofleetError`` and
carries the repository and pipeline stage it happened in, so the CLI can
print one actionable line and exit non-zero.
"""

from __future__ import annotations


class RepofleetError(Exception):
    """Base class for all fatal repofleet errors."""

    def __init__(self, message: str, repo: str | None = None, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.repo = repo
        self.stage = stage

    def with_context(self, repo: str | None = None, stage: str | None = None) -> "RepofleetError":
        """Fill in repository/stage context if not already set, and return self."""
        if repo and not self.repo:
            self.repo = repo
        if stage and not self.stage:
            self.stage = stage
        return self

    def __str__(self) -> str:
        parts = [p for p in (self.repo, self.stage) if p]
        parts.append(self.message)
        return ": ".join(parts)


class ConfigError(RepofleetError):
    """The run configuration could not be loaded."""


class PreconditionError(RepofleetError):
    """A repository is not in a state that allows the update to proceed.

    Never resolved automatically: resolving it could discard local work.
    """


class DirtyWorkingTreeError(PreconditionError):
    """The working tree has uncommitted changes."""

    def __init__(self, status: str, repo: str | None = None):
        super().__init__(
            f"has uncommitted changes:\n{status}\nPlease commit or stash your changes",
            repo=repo,
            stage="guard",
        )
        self.status = status


class MalformedRepoPathError(PreconditionError):
    """A listing entry is not of the form ``owner/name``."""

    def __init__(self, line: str, source: str = "", lineno: int = 0):
        where = f"{source}:{lineno}: " if source else ""
        super().__init__(f"{where}malformed repository path {line!r} (expected owner/name)")
        self.line = line
        self.source = source
        self.lineno = lineno


class CollaboratorMissingError(RepofleetError):
    """A required external tool is not installed."""

    def __init__(self, tool: str, install_hint: str = ""):
        message = f"{tool} is required but not installed."
        if install_hint:
            message += f"\nInstall: {install_hint}"
        super().__init__(message, stage="startup")
        self.tool = tool
        self.install_hint = install_hint


class VersionControlError(RepofleetError):
    """A version-control query or command failed."""


class StepFailure(RepofleetError):
    """A mutation step failed; remaining steps for the repository are aborted."""

    def __init__(self, step: str, message: str, repo: str | None = None):
        super().__init__(f"{step} failed: {message}", repo=repo, stage="mutate")
        self.step = step


class PublishFailure(RepofleetError):
    """Branch, commit, push or review-request creation failed."""
