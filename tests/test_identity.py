"""Tests for proposal identity."""

from dataclasses import replace

from repofleet.update.identity import branch_name, fingerprint, identity, identity_token
from repofleet.update.steps import rewrite_go_versions
from repofleet.utils.git_ops import GitClient

from conftest import GO_MOD, TEST_YML, make_clone, pin_checkout

CI = ".github/workflows/test.yml"


def test_fingerprint_is_xxh64_hex():
    # XXH64 of the empty input with seed 0.
    assert fingerprint([]) == "ef46db3751d8e999"


def test_fingerprint_streams():
    assert fingerprint([b"go-version", b": [1.21.x]"]) == fingerprint([b"go-version: [1.21.x]"])
    assert fingerprint([b"a", b"b"]) != fingerprint([b"b", b"a"])


def test_branch_name_format():
    assert branch_name("repofleet", "abc123") == "repofleet/update-abc123"


def test_identity_of_clean_tree_hashes_nothing(go_repo, config):
    assert identity_token(GitClient(go_repo), config) == fingerprint([])


def test_identity_uses_changed_file_bytes(go_repo, config):
    path = go_repo / CI
    path.write_bytes(rewrite_go_versions(path.read_bytes(), "1.21", "1.22"))

    expected = fingerprint([path.read_bytes()])
    assert identity(GitClient(go_repo), config) == f"repofleet/update-{expected}"


def test_identity_orders_ci_before_go_mod(go_repo, config):
    ci = go_repo / CI
    ci.write_text(ci.read_text() + "# touched\n")
    mod = go_repo / "go.mod"
    mod.write_text(mod.read_text().replace("go 1.20", "go 1.21"))

    assert identity_token(GitClient(go_repo), config) == fingerprint([ci.read_bytes(), mod.read_bytes()])


def test_identity_includes_go_mod_when_only_go_sum_changed(go_repo, config):
    (go_repo / "go.sum").write_text("example.com/dep v1.0.0 h1:xyz=\n")
    expected = fingerprint([(go_repo / "go.mod").read_bytes()])
    assert identity_token(GitClient(go_repo), config) == expected


def test_identity_independent_of_mutation_order(tmp_path, config):
    first = make_clone(tmp_path, {CI: TEST_YML, "go.mod": GO_MOD}, name="first")
    second = make_clone(tmp_path, {CI: TEST_YML, "go.mod": GO_MOD}, name="second")

    # rewrite, then pin
    path = first / CI
    path.write_bytes(rewrite_go_versions(path.read_bytes(), "1.21", "1.22"))
    pin_checkout(first)

    # pin, then rewrite
    pin_checkout(second)
    path = second / CI
    path.write_bytes(rewrite_go_versions(path.read_bytes(), "1.21", "1.22"))

    assert identity(GitClient(first), config) == identity(GitClient(second), config)


def test_identity_namespace_is_configurable(go_repo, config):
    (go_repo / "go.mod").write_text(GO_MOD.replace("go 1.20", "go 1.21"))
    name = identity(GitClient(go_repo), replace(config, namespace="bot"))
    assert name.startswith("bot/update-")
