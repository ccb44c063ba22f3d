"""Shared fixtures: throwaway git repositories and a fake tool runner."""

from __future__ import annotations

import re
from pathlib import Path

import pytest
from git import Repo

from repofleet.config import UpdateConfig
from repofleet.utils.tools import ToolError

TEST_YML = """name: Test
on: [push]
jobs:
  test:
    strategy:
      matrix:
        go-version: [1.20.x, 1.21.x]
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - uses: actions/setup-go@v5
"""

GO_MOD = """module example.com/widget

go 1.20

require github.com/stretchr/testify v1.8.0
"""


def configure(repo: Repo) -> None:
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Fleet Tester")
        cw.set_value("user", "email", "tester@example.com")
        cw.set_value("commit", "gpgsign", "false")


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def init_repo(path: Path, files: dict[str, str], branch: str = "main") -> Repo:
    """Create a repository with one commit containing ``files``."""
    repo = Repo.init(path, initial_branch=branch)
    configure(repo)
    write_files(path, files)
    repo.git.add("-A")
    repo.git.commit("-m", "initial")
    return repo


def make_clone(tmp_path: Path, files: dict[str, str], name: str = "widget") -> Path:
    """Create a bare origin seeded with ``files`` and return a fresh clone of it."""
    origin = tmp_path / "remotes" / f"{name}.git"
    Repo.init(origin, bare=True, initial_branch="main")

    seed = init_repo(tmp_path / "seeds" / name, files)
    seed.git.remote("add", "origin", str(origin))
    seed.git.push("origin", "main")

    clone_dir = tmp_path / "fleet" / name
    clone = Repo.clone_from(str(origin), clone_dir)
    configure(clone)
    return clone_dir


def remote_heads(clone_dir: Path) -> list[str]:
    origin = Repo(clone_dir).remotes.origin.url
    return sorted(h.name for h in Repo(origin).heads)


def pin_checkout(repo_dir: Path) -> None:
    """Stand-in for the pinning tool: pin actions/checkout to a commit."""
    path = repo_dir / ".github" / "workflows" / "test.yml"
    text = path.read_text()
    path.write_text(
        text.replace("actions/checkout@v4", "actions/checkout@b4ffde65f46336ab88eb53be808477a3936bae11 # v4")
    )


class FakeTools:
    """Records calls and emulates the external tools on the working copy."""

    def __init__(self, missing=(), fail=(), pin=pin_checkout, go_get=None):
        self.missing = set(missing)
        self.fail = set(fail)
        self.pin = pin
        self.go_get = go_get
        self.calls: list[tuple] = []
        self.pull_requests: list[tuple[str, str]] = []

    def command_exists(self, name: str) -> bool:
        self.calls.append(("exists", name))
        return name not in self.missing

    def shell(self, repo_dir, command: str) -> None:
        self.calls.append(("shell", command))
        if "shell" in self.fail:
            raise ToolError(command, 1)
        if self.pin:
            self.pin(Path(repo_dir))

    def go(self, repo_dir, *args: str) -> None:
        self.calls.append(("go", *args))
        if "go" in self.fail:
            raise ToolError("go " + " ".join(args), 1)
        repo_dir = Path(repo_dir)
        if args[:3] == ("mod", "edit", "-go"):
            path = repo_dir / "go.mod"
            path.write_text(re.sub(r"(?m)^go\s+\S+", f"go {args[3]}", path.read_text()))
        elif args[:1] == ("get",) and self.go_get:
            self.go_get(repo_dir)

    def create_pull_request(self, repo_dir, title: str, body: str) -> None:
        self.calls.append(("pr", title))
        if "pr" in self.fail:
            raise ToolError("gh pr create", 1)
        self.pull_requests.append((title, body))


@pytest.fixture
def tools():
    return FakeTools()


@pytest.fixture
def config(tmp_path):
    return UpdateConfig(base_dir=tmp_path, go_version="1.22", prev_version="1.21")


@pytest.fixture
def go_repo(tmp_path):
    """A clone with a CI workflow and a go.mod, both out of date."""
    return make_clone(tmp_path, {".github/workflows/test.yml": TEST_YML, "go.mod": GO_MOD})
