"""Change detection — which tracked files differ from the last commit."""

from __future__ import annotations

from dataclasses import dataclass, field

from repofleet.config import UpdateConfig
from repofleet.update.steps import MutationStep
from repofleet.utils.git_ops import GitClient


def changed(git: GitClient, *paths: str) -> bool:
    """True if a short-status query limited to ``paths`` reports any entry."""
    return bool(git.status_porcelain(*paths).strip())


@dataclass
class MutationOutcome:
    """Which steps left an observable diff.

    A step that ran but changed nothing does not appear in ``fired``.

    Steps are judged by their tracked files, not by their own edits. The
    matrix rewrite and the pinning tool both track the CI file, so either
    one changing it fires both and adds both labels toward ``min_updates``.
    """

    ran: list[str] = field(default_factory=list)
    fired: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.fired)


def collect_outcome(git: GitClient, config: UpdateConfig, ran: list[MutationStep]) -> MutationOutcome:
    """Build the outcome of a mutation pass from the working tree's diff."""
    outcome = MutationOutcome(ran=[s.name for s in ran])
    for step in ran:
        tracked = step.tracked_files(config)
        if not tracked or not changed(git, *tracked):
            continue
        outcome.fired.append(step.name)
        label = step.label(config)
        if label and label not in outcome.labels:
            outcome.labels.append(label)
    return outcome
