"""repofleet CLI — the main entry point."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from repofleet import __version__

console = Console()

OUTCOME_STYLES = {
    "published": "green",
    "skipped": "yellow",
    "below-threshold": "yellow",
    "noop": "dim",
}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )
    # GitPython's own command tracing is noisy; ours is enough.
    logging.getLogger("git").setLevel(logging.WARNING)


@click.group()
@click.version_option(version=__version__)
def main():
    """repofleet — keep a fleet of Go repositories up to date.

    Walks the directory tree for listing files (gitjoin.txt), and for each
    cloned repository updates the CI Go version matrix, pins GitHub
    Actions, bumps go.mod and refreshes dependencies, then opens a pull
    request unless the same update was already proposed.
    """


# ── Update ───────────────────────────────────────────────────────────


@main.command()
@click.option("--force", is_flag=True, help="Create a PR even below the minimum number of updates")
@click.option(
    "--base-dir",
    "-d",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Directory to search for listing files",
)
@click.option("--namespace", default=None, help="Branch name prefix for proposals")
@click.option("--min-updates", default=None, type=click.IntRange(min=1), help="Updates required for a PR")
@click.option("--verbose", "-v", is_flag=True, help="Log git and tool commands")
def update(force: bool, base_dir: str, namespace: str | None, min_updates: int | None, verbose: bool):
    """Update all repos found in listing files under the base directory."""
    from repofleet.config import load_config
    from repofleet.errors import RepofleetError
    from repofleet.fleet.locator import find_repos
    from repofleet.update.pipeline import check_collaborators, update_fleet
    from repofleet.utils.tools import ToolRunner

    _setup_logging(verbose)
    tools = ToolRunner()

    try:
        config = load_config(
            base_dir, force=force or None, namespace=namespace, min_updates=min_updates
        )
        check_collaborators(tools)

        if config.has_version_context:
            console.print(
                f"Using Go versions: {config.go_version}.x (current), "
                f"{config.prev_version}.x (previous)"
            )
        else:
            console.print("No go.mod found in base directory, skipping Go version updates")

        repos = list(find_repos(config.base_dir, config.listing_file))
        if not repos:
            console.print(f"[yellow]No repos found in {config.listing_file} files[/]")
            return
        console.print(f"Found {len(repos)} repos in {config.listing_file} files")

        results = []
        for result in update_fleet(config, repos=repos, tools=tools):
            results.append(result)
    except RepofleetError as e:
        raise click.ClickException(str(e)) from e

    table = Table(title=f"Update Results ({len(results)} repos)")
    table.add_column("Repository", style="cyan")
    table.add_column("Outcome")
    table.add_column("Updates")
    table.add_column("Branch", style="dim")

    for result in results:
        style = OUTCOME_STYLES.get(result.outcome.value, "")
        table.add_row(
            result.repo.path,
            f"[{style}]{result.outcome.value}[/]" if style else result.outcome.value,
            ", ".join(result.labels),
            result.branch,
        )

    console.print(table)


if __name__ == "__main__":
    main()
