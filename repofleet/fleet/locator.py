"""Repository locator — find managed repositories from listing files.

A listing file (``gitjoin.txt`` by default) names one repository per line::

    # comments and blank lines are ignored
    github.com/bep/firstupdotenv
    gohugoio/hugo

Each repository is expected to be cloned next to the listing file, in a
directory named after the repository.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from repofleet.errors import ConfigError, MalformedRepoPathError

logger = logging.getLogger(__name__)

HOST_PREFIX = "github.com/"
SKIP_DIRS = {".git"}


@dataclass(frozen=True)
class RepositoryDescriptor:
    """One managed repository."""

    path: str
    """Remote path, e.g. ``bep/firstupdotenv``."""

    name: str
    """Short name, the last segment of ``path``."""

    dir: Path
    """Working copy on disk."""


def repo_path_from_line(line: str) -> str:
    """Normalize a listing line to ``owner/name``.

    Raises:
        MalformedRepoPathError: If the path does not have exactly two segments.
    """
    path = line.strip().removeprefix(HOST_PREFIX)
    parts = path.split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedRepoPathError(line)
    return path


def repo_name_from_path(repo_path: str) -> str:
    return repo_path_from_line(repo_path).split("/")[1]


def read_listing(path: str | Path) -> Iterator[tuple[int, str]]:
    """Yield ``(line number, text)`` for every meaningful line of a listing file.

    Raises:
        ConfigError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to read {path}: {e}") from e

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield lineno, line


def iter_listing_files(base_dir: str | Path, listing_file: str) -> Iterator[Path]:
    """Walk ``base_dir`` (skipping ``.git``) and yield every listing file, in sorted order."""

    def fail(e: OSError) -> None:
        raise ConfigError(f"failed to read {e.filename}: {e.strerror}") from e

    for root, dirs, files in os.walk(base_dir, onerror=fail):
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
        if listing_file in files:
            yield Path(root) / listing_file


def find_repos(base_dir: str | Path, listing_file: str = "gitjoin.txt") -> Iterator[RepositoryDescriptor]:
    """Lazily yield a descriptor for every cloned repository named in a listing file.

    Entries whose directory does not exist are skipped with a notice.

    Raises:
        MalformedRepoPathError: On the first malformed listing entry.
        ConfigError: If a directory or listing file cannot be read.
    """
    for listing in iter_listing_files(base_dir, listing_file):
        for lineno, line in read_listing(listing):
            try:
                repo_path = repo_path_from_line(line)
            except MalformedRepoPathError as e:
                raise MalformedRepoPathError(line, source=str(listing), lineno=lineno) from e

            name = repo_name_from_path(repo_path)
            repo_dir = listing.parent / name
            if not repo_dir.is_dir():
                logger.info("Skipping %s: not cloned at %s", repo_path, repo_dir)
                continue

            yield RepositoryDescriptor(path=repo_path, name=name, dir=repo_dir)
