"""Mutation steps — the ordered transformations applied to a repository.

Each step is gated by a precondition (a file or directory existing, and
for some a toolchain version being known). Steps whose precondition holds
run in a fixed order; a later step may depend on the files an earlier one
left behind (the go.mod version edit precedes the dependency refresh).

Whether a step *ran* says nothing about whether it changed anything: see
``repofleet.update.changes.collect_outcome`` for the diff-based view.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from repofleet.config import MANIFEST_FILE, UpdateConfig
from repofleet.errors import StepFailure
from repofleet.utils.tools import ToolError, ToolRunner

logger = logging.getLogger(__name__)

GO_VERSION_MATRIX_RE = re.compile(rb"(go-version:\s*)\[([^\]]*)\]", re.MULTILINE)
GO_SUM_FILE = "go.sum"


@dataclass
class StepContext:
    """What a step needs: the run config, the working copy and the tool runner."""

    config: UpdateConfig
    repo_dir: Path
    tools: ToolRunner


class MutationStep:
    """Base class for a single gated mutation."""

    name = ""

    def applies(self, ctx: StepContext) -> bool:
        raise NotImplementedError

    def run(self, ctx: StepContext) -> None:
        raise NotImplementedError

    def tracked_files(self, config: UpdateConfig) -> tuple[str, ...]:
        """Files whose diff tells whether this step had an effect."""
        return ()

    def label(self, config: UpdateConfig) -> str | None:
        """Human-readable description used in the commit message, if any."""
        return None


def rewrite_go_versions(content: bytes, prev_version: str, go_version: str) -> bytes:
    """Replace every ``go-version: [...]`` list with the previous and current versions.

    Works on raw bytes so line endings and encoding are left untouched.
    """
    versions = f"[{prev_version}.x, {go_version}.x]".encode()
    return GO_VERSION_MATRIX_RE.sub(lambda m: m.group(1) + versions, content)


class CiMatrixStep(MutationStep):
    """Rewrite the Go version matrix of the CI workflow."""

    name = "ci-matrix"

    def applies(self, ctx: StepContext) -> bool:
        return ctx.config.has_version_context and (ctx.repo_dir / ctx.config.ci_file).is_file()

    def run(self, ctx: StepContext) -> None:
        logger.info("Updating %s...", ctx.config.ci_file)
        path = ctx.repo_dir / ctx.config.ci_file
        try:
            original = path.read_bytes()
            updated = rewrite_go_versions(original, ctx.config.prev_version, ctx.config.go_version)
            if updated != original:
                path.write_bytes(updated)
        except OSError as e:
            raise StepFailure(self.name, f"failed to update {ctx.config.ci_file}: {e}") from e

    def tracked_files(self, config: UpdateConfig) -> tuple[str, ...]:
        return (config.ci_file,)

    def label(self, config: UpdateConfig) -> str | None:
        return f"Go {config.prev_version}.x/{config.go_version}.x"


class PinActionsStep(MutationStep):
    """Run the action pinning tool over the workflows directory."""

    name = "pin-actions"

    def applies(self, ctx: StepContext) -> bool:
        return (ctx.repo_dir / ctx.config.workflows_dir).is_dir()

    def run(self, ctx: StepContext) -> None:
        logger.info("Running %s...", ctx.config.pinning_command)
        try:
            ctx.tools.shell(ctx.repo_dir, ctx.config.pinning_command)
        except ToolError as e:
            raise StepFailure(self.name, str(e)) from e

    def tracked_files(self, config: UpdateConfig) -> tuple[str, ...]:
        return (config.ci_file,)

    def label(self, config: UpdateConfig) -> str | None:
        return "GitHub Actions"


class _GoModStep(MutationStep):
    def applies(self, ctx: StepContext) -> bool:
        return ctx.config.has_version_context and (ctx.repo_dir / MANIFEST_FILE).is_file()

    def tracked_files(self, config: UpdateConfig) -> tuple[str, ...]:
        return (MANIFEST_FILE, GO_SUM_FILE)

    def _go(self, ctx: StepContext, *args: str) -> None:
        try:
            ctx.tools.go(ctx.repo_dir, *args)
        except ToolError as e:
            raise StepFailure(self.name, str(e)) from e


class ManifestVersionStep(_GoModStep):
    """Set the go.mod language version to the previous minor release."""

    name = "manifest-version"

    def run(self, ctx: StepContext) -> None:
        logger.info("Setting go.mod version to %s...", ctx.config.prev_version)
        self._go(ctx, "mod", "edit", "-go", ctx.config.prev_version)

    def label(self, config: UpdateConfig) -> str | None:
        return f"go.mod Go {config.prev_version}, dependencies"


class RefreshDependenciesStep(_GoModStep):
    """Update all dependencies, test dependencies included."""

    name = "refresh-deps"

    def run(self, ctx: StepContext) -> None:
        logger.info("Updating dependencies...")
        self._go(ctx, "get", "-t", "-u", "./...")


DEFAULT_STEPS: tuple[MutationStep, ...] = (
    CiMatrixStep(),
    PinActionsStep(),
    ManifestVersionStep(),
    RefreshDependenciesStep(),
)


def run_steps(ctx: StepContext, steps: tuple[MutationStep, ...] = DEFAULT_STEPS) -> list[MutationStep]:
    """Run every applicable step in order and return the ones that ran.

    Raises:
        StepFailure: From the first failing step; later steps do not run and
            earlier steps' effects are left in place.
    """
    ran = []
    for step in steps:
        if not step.applies(ctx):
            logger.debug("step %s skipped: precondition not met", step.name)
            continue
        step.run(ctx)
        ran.append(step)
    return ran
