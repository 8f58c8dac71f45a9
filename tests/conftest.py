"""Shared test fixtures.

No test touches a real git binary or the network: restore tests use
:class:`FakeCloner`, which lays out directories the way a successful clone
would.  Trees are rooted under pytest's ``tmp_path``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from devworkspaces.engine.git import BARE_DIR, CloneFailedError, GitCommand
from devworkspaces.engine.resolver import EffectiveGitConfig
from devworkspaces.engine.tree import ConfigTree, build_tree
from devworkspaces.models.enums import CloneStrategy
from devworkspaces.settings import get_settings


class FakeCloner:
    """In-memory stand-in for ``GitCloner``.

    Records every clone request.  Repos listed in ``failing`` raise
    ``CloneFailedError`` without creating anything.
    """

    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[tuple[EffectiveGitConfig, Path]] = []

    def clone(self, config: EffectiveGitConfig, target_path: Path) -> None:
        self.calls.append((config, target_path))
        if config.repo in self.failing:
            raise CloneFailedError(GitCommand(("clone", config.clone_url)), f"fatal: repository '{config.repo}' not found")
        if config.clone_strategy == CloneStrategy.WORKTREE:
            (target_path / BARE_DIR).mkdir(parents=True)
            (target_path / "main").mkdir()
        else:
            (target_path / ".git").mkdir(parents=True)


@pytest.fixture
def fake_cloner() -> FakeCloner:
    return FakeCloner()


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., ConfigTree]:
    """Build a tree from a document dict, rooted at ``tmp_path / 'ws'`` unless given."""

    def _make(workspaces: dict[str, Any] | None = None, *, git: dict | None = None, root: str | None = None) -> ConfigTree:
        document: dict[str, Any] = {"root": root or str(tmp_path / "ws"), "workspaces": workspaces or {}}
        if git is not None:
            document["git"] = git
        return build_tree(document)

    return _make


@pytest.fixture
def scenario_workspaces() -> dict[str, Any]:
    """Workspace ``a`` with a path-only project ``p1`` and a cloneable ``p2``."""
    return {
        "a": {
            "projects": {
                "p1": None,
                "p2": {"git": {"repo": "o/r"}},
            },
        },
    }


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate every test from WORKSPACES_* variables in the caller's shell."""
    for key in ("WORKSPACES_CONFIG_PATH", "WORKSPACES_LOG_LEVEL", "WORKSPACES_GIT_BINARY"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
