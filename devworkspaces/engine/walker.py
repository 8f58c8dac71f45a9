"""Lazy, deterministic enumeration of a config tree.

All walkers are generators: calling one again re-walks the tree from the
start, and abandoning one half-way leaves nothing behind.  Order is
pre-order by declaration order; a workspace's own projects come before the
projects of its nested workspaces.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from devworkspaces.engine.tree import ConfigTree, ProjectNode, WorkspaceNode


@dataclass(frozen=True)
class ProjectEntry:
    """A project together with everything needed to resolve its git config."""

    path: Path
    project: ProjectNode
    workspace: WorkspaceNode
    ancestors: tuple[WorkspaceNode, ...]
    """Ancestors of ``workspace``, outermost first (``workspace`` excluded)."""

    @property
    def chain(self) -> tuple[WorkspaceNode, ...]:
        """Full workspace chain down to the owning workspace, outermost first."""
        return (*self.ancestors, self.workspace)


def iter_workspaces(tree: ConfigTree) -> Iterator[tuple[WorkspaceNode, tuple[WorkspaceNode, ...]]]:
    """Yield ``(workspace, ancestors)`` pairs in pre-order."""
    stack: list[tuple[WorkspaceNode, tuple[WorkspaceNode, ...]]] = [
        (node, ()) for node in reversed(tree.workspaces.values())
    ]
    while stack:
        node, ancestors = stack.pop()
        yield node, ancestors
        chain = (*ancestors, node)
        stack.extend((child, chain) for child in reversed(node.workspaces.values()))


def walk_workspaces(tree: ConfigTree) -> Iterator[Path]:
    for node, _ancestors in iter_workspaces(tree):
        yield node.path


def walk_projects(tree: ConfigTree) -> Iterator[ProjectEntry]:
    for workspace, ancestors in iter_workspaces(tree):
        yield from projects_of(workspace, ancestors)


def projects_of(workspace: WorkspaceNode, ancestors: tuple[WorkspaceNode, ...]) -> Iterator[ProjectEntry]:
    """Projects directly owned by *workspace* (nested workspaces excluded)."""
    for project in workspace.projects.values():
        yield ProjectEntry(path=project.path, project=project, workspace=workspace, ancestors=ancestors)
