"""Shared enumerations used across the config tree and restore engine."""

from __future__ import annotations

from enum import StrEnum

# -- Git ---------------------------------------------------------------------


class GitHost(StrEnum):
    GITHUB = "github"
    GITLAB = "gitlab"

    @property
    def domain(self) -> str:
        """Hostname used when building clone URLs."""
        return f"{self.value}.com"


class CloneStrategy(StrEnum):
    """How a project repository is laid out on disk."""

    BRANCH = "branch"
    WORKTREE = "worktree"


class CloneProtocol(StrEnum):
    SSH = "ssh"
    HTTPS = "https"


# -- Restore -----------------------------------------------------------------


class PathKind(StrEnum):
    WORKSPACE = "workspace"
    PROJECT = "project"


class OutcomeStatus(StrEnum):
    """Result recorded for one path during a restore run."""

    CREATED = "created"
    CLONED = "cloned"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(StrEnum):
    NO_REPO = "no-repo"
    ALREADY_EXISTS = "already-exists"
