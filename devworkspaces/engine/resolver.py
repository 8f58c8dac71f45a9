"""Git config resolver -- merges global, workspace-chain and project overrides
into a single EffectiveGitConfig ready for cloning.

Resolution order, most specific first, applied independently per field:

1. Project ``git`` block.
2. Owning workspace ``git`` block.
3. Each ancestor workspace, innermost to outermost.
4. Global ``git`` block.
5. Hard-coded defaults (github / branch / https).

A child that only sets ``host`` therefore keeps whatever ``clone_strategy``
and ``protocol`` the next more general level produces.  Nodes never share or
mutate overrides; resolution is a pure function of the chain.

The resolver never touches the filesystem.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from pydantic import BaseModel, computed_field

from devworkspaces.engine.tree import ProjectNode, WorkspaceNode
from devworkspaces.models.config import GitOverride
from devworkspaces.models.enums import CloneProtocol, CloneStrategy, GitHost

DEFAULT_HOST = GitHost.GITHUB
DEFAULT_CLONE_STRATEGY = CloneStrategy.BRANCH
DEFAULT_PROTOCOL = CloneProtocol.HTTPS

T = TypeVar("T")


class EffectiveGitConfig(BaseModel):
    """Fully resolved git settings for one project."""

    host: GitHost
    protocol: CloneProtocol
    clone_strategy: CloneStrategy
    repo: str

    @computed_field
    @property
    def clone_url(self) -> str:
        return clone_url(self.host, self.protocol, self.repo)


def clone_url(host: GitHost, protocol: CloneProtocol, repo: str) -> str:
    """Build the remote URL, e.g. ``git@github.com:owner/repo.git``."""
    if protocol == CloneProtocol.SSH:
        return f"git@{host.domain}:{repo}.git"
    return f"https://{host.domain}/{repo}.git"


def resolve_git_config(
    project: ProjectNode,
    ancestors: Sequence[WorkspaceNode],
    global_git: GitOverride | None = None,
) -> EffectiveGitConfig | None:
    """Resolve the effective git config for *project*.

    Parameters
    ----------
    project:
        The project node; only its own override is consulted for ``repo``.
    ancestors:
        Workspace chain from the outermost workspace down to (and including)
        the project's owning workspace.
    global_git:
        Top-level ``git`` block of the document.

    Returns ``None`` when the project has no repo, i.e. it is path-only.
    """
    if project.git is None or project.git.repo is None:
        return None

    layers = _layers(project.git, ancestors, global_git)
    return EffectiveGitConfig(
        host=_first([layer.host for layer in layers], DEFAULT_HOST),
        protocol=_first([layer.protocol for layer in layers], DEFAULT_PROTOCOL),
        clone_strategy=_first([layer.clone_strategy for layer in layers], DEFAULT_CLONE_STRATEGY),
        repo=project.git.repo,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _layers(
    project_git: GitOverride,
    ancestors: Sequence[WorkspaceNode],
    global_git: GitOverride | None,
) -> list[GitOverride]:
    """Overrides ordered most specific first, skipping levels without one."""
    layers = [project_git]
    layers.extend(ws.git for ws in reversed(ancestors) if ws.git is not None)
    if global_git is not None:
        layers.append(global_git)
    return layers


def _first(candidates: Sequence[T | None], default: T) -> T:
    """Return the first candidate that is not None, otherwise the default."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return default
