"""Run configuration — built once per run and passed to every component."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from repofleet.errors import ConfigError

CONFIG_FILE = ".repofleet.yaml"
MANIFEST_FILE = "go.mod"

_GO_VERSION_RE = re.compile(r"^go\s+(\d+\.\d+)", re.MULTILINE)


@dataclass(frozen=True)
class UpdateConfig:
    """Everything the update engine needs to know about the current run."""

    base_dir: Path
    go_version: str = ""
    """Toolchain version read from the base directory's go.mod (e.g. ``1.22``)."""

    prev_version: str = ""
    """The minor version before ``go_version`` (e.g. ``1.21``)."""

    force: bool = False
    namespace: str = "repofleet"
    listing_file: str = "gitjoin.txt"
    min_updates: int = 2
    ci_file: str = ".github/workflows/test.yml"
    workflows_dir: str = ".github/workflows"
    pinning_command: str = "ghat swot -d ."
    pr_footer: str = "Created by repofleet"

    @property
    def has_version_context(self) -> bool:
        return bool(self.go_version)


# Keys that may be set from the YAML overrides file.
_FILE_KEYS = {
    f.name for f in fields(UpdateConfig)
} - {"base_dir", "go_version", "prev_version", "force"}


def parse_go_version(repo_dir: str | Path) -> str | None:
    """Return the ``major.minor`` version declared in ``repo_dir/go.mod``.

    Returns None if there is no go.mod or it declares no version.
    """
    path = Path(repo_dir) / MANIFEST_FILE
    if not path.is_file():
        return None
    match = _GO_VERSION_RE.search(path.read_text(encoding="utf-8"))
    if not match:
        return None
    return match.group(1)


def prev_go_version(version: str) -> str:
    """Return the previous minor version, e.g. ``1.22`` -> ``1.21``.

    Anything that is not a two-component version with a positive minor
    number is returned unchanged.
    """
    parts = version.split(".")
    if len(parts) != 2:
        return version
    try:
        minor = int(parts[1])
    except ValueError:
        return version
    if minor <= 0:
        return version
    return f"{parts[0]}.{minor - 1}"


def load_overrides(base_dir: str | Path) -> dict:
    """Load ``.repofleet.yaml`` from the base directory, if present."""
    path = Path(base_dir) / CONFIG_FILE
    if not path.is_file():
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    unknown = sorted(set(data) - _FILE_KEYS)
    if unknown:
        raise ConfigError(f"{path}: unknown keys: {', '.join(unknown)}")

    if data.get("min_updates") is not None and not isinstance(data["min_updates"], int):
        raise ConfigError(f"{path}: min_updates must be an integer")

    return data


def load_config(base_dir: str | Path, **overrides) -> UpdateConfig:
    """Build the run configuration for ``base_dir``.

    Precedence: keyword overrides (CLI flags, ``None`` meaning unset) >
    ``.repofleet.yaml`` (``null`` meaning unset) > defaults. The toolchain
    version is discovered from the base directory's own go.mod.
    """
    base = Path(base_dir).resolve()
    config = UpdateConfig(base_dir=base)

    file_values = {k: v for k, v in load_overrides(base).items() if v is not None}
    if file_values:
        config = replace(config, **file_values)

    cli_values = {k: v for k, v in overrides.items() if v is not None}
    if cli_values:
        config = replace(config, **cli_values)

    go_version = parse_go_version(base)
    if go_version:
        config = replace(config, go_version=go_version, prev_version=prev_go_version(go_version))

    return config
