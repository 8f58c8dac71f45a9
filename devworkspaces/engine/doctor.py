"""Doctor -- report declared workspaces and projects missing on disk."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from devworkspaces.engine.tree import ConfigTree
from devworkspaces.engine.walker import walk_projects, walk_workspaces


class Diagnosis(BaseModel):
    missing_workspaces: list[Path] = Field(default_factory=list)
    missing_projects: list[Path] = Field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return not self.missing_workspaces and not self.missing_projects


def diagnose(tree: ConfigTree) -> Diagnosis:
    """Collect missing paths in walk order.  Read-only."""
    return Diagnosis(
        missing_workspaces=[path for path in walk_workspaces(tree) if not path.exists()],
        missing_projects=[entry.path for entry in walk_projects(tree) if not entry.path.exists()],
    )
