"""Update reconciliation — propose CI and dependency updates, idempotently.

This package provides, for a single repository:
- Guard: refuse to touch a working tree with uncommitted changes
- Branches: resolve and enforce the default branch
- Steps: the ordered, individually-gated mutations
- Changes / identity: diff-based outcomes and a content-addressed branch name
- Publisher: commit, push and open a pull request, or revert
"""
