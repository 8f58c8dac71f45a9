"""Data models for config documents and restore reports."""

from devworkspaces.models.config import (
    GitOverride,
    ProjectGitOverride,
    ProjectSpec,
    WorkspacesDocument,
    WorkspaceSpec,
)
from devworkspaces.models.enums import (
    CloneProtocol,
    CloneStrategy,
    GitHost,
    OutcomeStatus,
    PathKind,
    SkipReason,
)
from devworkspaces.models.report import RestoreOutcome, RestoreReport

__all__ = [
    # Enums
    "CloneProtocol",
    "CloneStrategy",
    "GitHost",
    # Config document
    "GitOverride",
    "OutcomeStatus",
    "PathKind",
    "ProjectGitOverride",
    "ProjectSpec",
    # Report
    "RestoreOutcome",
    "RestoreReport",
    "SkipReason",
    "WorkspaceSpec",
    "WorkspacesDocument",
]
