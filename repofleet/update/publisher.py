"""Proposal publisher — turn a mutated working tree into a pull request, or revert it.

States, in order::

    MUTATED -> GATED -> DEDUP_CHECKED -> BRANCHED -> COMMITTED
            -> PUSHED -> REQUEST_OPENED -> RESTORED

Terminal outcomes:

- ``NOOP``: no step left a diff; nothing to do, nothing touched.
- ``BELOW_THRESHOLD``: fewer updates than required; changes reverted.
- ``SKIPPED``: the same update was already proposed; changes reverted.
- ``PUBLISHED``: branch pushed, pull request opened, default branch restored.

A failure after branching is fatal and is not rolled back. The next run's
workspace guard catches the leftover state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from repofleet.config import UpdateConfig
from repofleet.errors import PublishFailure, RepofleetError
from repofleet.update.changes import MutationOutcome
from repofleet.update.identity import identity
from repofleet.utils.git_ops import GitClient
from repofleet.utils.tools import ToolError, ToolRunner

logger = logging.getLogger(__name__)


class ProposalState(Enum):
    MUTATED = "mutated"
    GATED = "gated"
    DEDUP_CHECKED = "dedup-checked"
    BRANCHED = "branched"
    COMMITTED = "committed"
    PUSHED = "pushed"
    REQUEST_OPENED = "request-opened"
    RESTORED = "restored"


class Outcome(Enum):
    NOOP = "noop"
    BELOW_THRESHOLD = "below-threshold"
    SKIPPED = "skipped"
    PUBLISHED = "published"


@dataclass(frozen=True)
class Proposal:
    """The branch / commit / pull request triple that was created."""

    branch: str
    title: str
    body: str


@dataclass
class PublishResult:
    outcome: Outcome
    labels: list[str] = field(default_factory=list)
    branch: str = ""
    proposal: Proposal | None = None


def commit_message(labels: list[str]) -> str:
    return "Update " + ", ".join(labels)


def pull_request_body(labels: list[str], footer: str) -> str:
    return "Updates: " + ", ".join(labels) + "\n\n---\n" + footer


class ProposalPublisher:
    """Drives one repository's mutated working tree to a terminal outcome."""

    def __init__(
        self,
        git: GitClient,
        config: UpdateConfig,
        tools: ToolRunner,
        default_branch: str,
        repo: str | None = None,
    ):
        self.git = git
        self.config = config
        self.tools = tools
        self.default_branch = default_branch
        self.repo = repo
        self.state = ProposalState.MUTATED
        self.history: list[ProposalState] = [self.state]

    def _advance(self, state: ProposalState) -> None:
        self.state = state
        self.history.append(state)

    def _revert(self) -> None:
        try:
            self.git.revert_working_tree()
        except RepofleetError as e:
            raise e.with_context(repo=self.repo, stage="revert")

    def publish(self, outcome: MutationOutcome) -> PublishResult:
        labels = list(outcome.labels)

        # Gate
        if not labels:
            logger.info("No changes to commit")
            # Steps may touch files that carry no label (other workflows).
            if self.git.status_porcelain().strip():
                self._revert()
            return PublishResult(Outcome.NOOP)
        self._advance(ProposalState.GATED)

        if len(labels) < self.config.min_updates and not self.config.force:
            logger.info(
                "Only %d update(s), skipping PR (use --force to override)", len(labels)
            )
            self._revert()
            return PublishResult(Outcome.BELOW_THRESHOLD, labels=labels)

        # Dedup
        branch = identity(self.git, self.config)
        if self.git.remote_branch_exists(branch):
            logger.info("Branch %s already exists, skipping", branch)
            self._revert()
            return PublishResult(Outcome.SKIPPED, labels=labels, branch=branch)
        self._advance(ProposalState.DEDUP_CHECKED)

        proposal = Proposal(
            branch=branch,
            title=commit_message(labels),
            body=pull_request_body(labels, self.config.pr_footer),
        )
        self._create(proposal)
        return PublishResult(Outcome.PUBLISHED, labels=labels, branch=branch, proposal=proposal)

    def _create(self, proposal: Proposal) -> None:
        try:
            self.git.create_branch(proposal.branch)
            self._advance(ProposalState.BRANCHED)

            self.git.add_all()
            self.git.commit(proposal.title)
            self._advance(ProposalState.COMMITTED)

            logger.info("Pushing branch %s...", proposal.branch)
            self.git.push(proposal.branch)
            self._advance(ProposalState.PUSHED)

            logger.info("Creating PR...")
            self.tools.create_pull_request(self.git.repo_dir, proposal.title, proposal.body)
            self._advance(ProposalState.REQUEST_OPENED)

            self.git.checkout(self.default_branch)
            self._advance(ProposalState.RESTORED)
        except (RepofleetError, ToolError) as e:
            raise PublishFailure(
                f"failed after {self.state.value}: {e}",
                repo=self.repo,
                stage="publish",
            ) from e
