"""Config document models.

Pure Pydantic models mirroring the YAML layout of ``workspaces.yaml``.  They
only describe the *shape* of the document; path derivation, repo id checks
and duplicate detection happen when the tree is built
(:mod:`devworkspaces.engine.tree`).

Unknown keys are ignored everywhere so older binaries keep reading newer
files.  YAML ``null`` (e.g. an empty ``projects:`` block, or a project
declared as ``p0:`` with no body) is accepted wherever a mapping is expected.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from devworkspaces.models.enums import CloneProtocol, CloneStrategy, GitHost

# -- Git overrides -----------------------------------------------------------


class GitOverride(BaseModel):
    """Partial git settings.  ``None`` means "inherit from the next level"."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    host: GitHost | None = None
    clone_strategy: CloneStrategy | None = None
    protocol: CloneProtocol | None = None


class ProjectGitOverride(GitOverride):
    """Project-level git settings.  ``repo`` makes the project cloneable."""

    repo: str | None = Field(default=None, description="Repository id, e.g. 'owner/repo'")


# -- Nodes -------------------------------------------------------------------


class ProjectSpec(BaseModel):
    model_config = ConfigDict(extra="ignore")

    git: ProjectGitOverride | None = None


class WorkspaceSpec(BaseModel):
    """One entry under a ``workspaces`` mapping."""

    model_config = ConfigDict(extra="ignore")

    git: GitOverride | None = None
    workspaces: dict[str, WorkspaceSpec] = Field(default_factory=dict)
    projects: dict[str, ProjectSpec] = Field(default_factory=dict)

    @field_validator("workspaces", "projects", mode="before")
    @classmethod
    def _null_mapping(cls, value: Any) -> Any:
        return _coerce_null_mapping(value)


class WorkspacesDocument(BaseModel):
    """Top-level config document."""

    model_config = ConfigDict(extra="ignore")

    root: str
    git: GitOverride | None = None
    workspaces: dict[str, WorkspaceSpec] = Field(default_factory=dict)

    @field_validator("root", mode="before")
    @classmethod
    def _bare_tilde(cls, value: Any) -> Any:
        # YAML reads an unquoted `~` as null.
        if value is None:
            msg = "root is null; quote it (root: '~') to mean the home directory"
            raise ValueError(msg)
        return value

    @field_validator("workspaces", mode="before")
    @classmethod
    def _null_mapping(cls, value: Any) -> Any:
        return _coerce_null_mapping(value)


def _coerce_null_mapping(value: Any) -> Any:
    """Turn ``None`` (and ``None`` entries) into empty mappings.

    Numeric keys such as ``2024:`` arrive from YAML as ``int`` or ``float``
    and are turned back into directory names.  Booleans stay invalid.
    """
    if value is None:
        return {}
    if isinstance(value, dict):
        return {_name_key(key): {} if item is None else item for key, item in value.items()}
    return value


def _name_key(key: Any) -> Any:
    if isinstance(key, int | float) and not isinstance(key, bool):
        return str(key)
    return key
