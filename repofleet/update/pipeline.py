"""Update pipeline — run the reconciliation for one repository, then for a fleet.

Per repository: guard -> default branch -> pull -> mutation steps ->
change detection -> identity -> skip-and-revert or publish. Repositories
are processed one after another; the first fatal error aborts the run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from repofleet.config import UpdateConfig
from repofleet.errors import CollaboratorMissingError, RepofleetError
from repofleet.fleet.locator import RepositoryDescriptor, find_repos
from repofleet.update.branches import ensure_default_branch
from repofleet.update.changes import MutationOutcome, collect_outcome
from repofleet.update.guard import assert_clean
from repofleet.update.publisher import Outcome, ProposalPublisher, PublishResult
from repofleet.update.steps import DEFAULT_STEPS, MutationStep, StepContext, run_steps
from repofleet.utils.git_ops import GitClient
from repofleet.utils.tools import ToolRunner

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = {
    "ghat": "go install github.com/JamesWoolfenden/ghat@latest",
    "gh": "https://cli.github.com/",
}


@dataclass
class RepoUpdateResult:
    """What happened to one repository."""

    repo: RepositoryDescriptor
    default_branch: str
    outcome: Outcome
    mutation: MutationOutcome = field(default_factory=MutationOutcome)
    branch: str = ""
    labels: list[str] = field(default_factory=list)


def check_collaborators(tools: ToolRunner, required: dict[str, str] = REQUIRED_TOOLS) -> None:
    """Fail before touching any repository if a required tool is missing."""
    for tool, hint in required.items():
        if not tools.command_exists(tool):
            raise CollaboratorMissingError(tool, hint)


class RepoUpdater:
    """Runs the full update pipeline for a single repository."""

    def __init__(
        self,
        config: UpdateConfig,
        tools: ToolRunner | None = None,
        steps: tuple[MutationStep, ...] = DEFAULT_STEPS,
    ):
        self.config = config
        self.tools = tools or ToolRunner()
        self.steps = steps

    def update(self, repo: RepositoryDescriptor) -> RepoUpdateResult:
        logger.info("=== Updating %s ===", repo.path)
        try:
            return self._update(repo)
        except RepofleetError as e:
            raise e.with_context(repo=repo.path)

    def _update(self, repo: RepositoryDescriptor) -> RepoUpdateResult:
        git = GitClient(repo.dir)

        assert_clean(git, repo=repo.path)

        try:
            default_branch = ensure_default_branch(git)
            git.pull()
        except RepofleetError as e:
            raise e.with_context(stage="branch")

        ctx = StepContext(config=self.config, repo_dir=repo.dir, tools=self.tools)
        ran = run_steps(ctx, self.steps)
        mutation = collect_outcome(git, self.config, ran)

        publisher = ProposalPublisher(
            git, self.config, self.tools, default_branch, repo=repo.path
        )
        result: PublishResult = publisher.publish(mutation)

        return RepoUpdateResult(
            repo=repo,
            default_branch=default_branch,
            outcome=result.outcome,
            mutation=mutation,
            branch=result.branch,
            labels=result.labels,
        )


def update_fleet(
    config: UpdateConfig,
    repos: Iterable[RepositoryDescriptor] | None = None,
    tools: ToolRunner | None = None,
) -> Iterator[RepoUpdateResult]:
    """Update every repository in turn, yielding each result as it completes.

    Raises:
        RepofleetError: The first fatal error; later repositories are not touched.
    """
    updater = RepoUpdater(config, tools=tools)
    if repos is None:
        repos = find_repos(config.base_dir, config.listing_file)
    for repo in repos:
        yield updater.update(repo)
