"""Config tree -- turns a decoded config document into a resolved node tree.

Build steps:

1. Validate the document shape with Pydantic (:mod:`devworkspaces.models.config`).
2. Expand ``root`` into an absolute path.
3. Single pre-order pass over the ``workspaces`` mappings: every node gets its
   absolute path from its parent before its children are visited.  Keys such
   as ``src/nested`` are split into segments; undeclared intermediate
   segments become *implicit* workspaces so both spellings produce the same
   tree shape.
4. Validate while walking: unique paths, well-formed repo ids, sane names.

The resulting :class:`ConfigTree` is read-only by convention.  Each node
only stores its *own* partial git override; effective settings are computed
by :mod:`devworkspaces.engine.resolver` from the ancestor chain.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path, PurePosixPath
from typing import Any

from loguru import logger
from pydantic import ValidationError

from devworkspaces.engine.paths import expand_root
from devworkspaces.models.config import (
    GitOverride,
    ProjectGitOverride,
    ProjectSpec,
    WorkspacesDocument,
    WorkspaceSpec,
)
from devworkspaces.models.enums import CloneProtocol, CloneStrategy, GitHost

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """The config document is invalid.  Raised before any filesystem action."""


class MalformedRepoIdError(ConfigError):
    def __init__(self, repo: str, location: str) -> None:
        self.repo = repo
        self.location = location
        super().__init__(f"{location}: repo {repo!r} is not of the form 'owner/repo'")


class UnknownEnumValueError(ConfigError):
    def __init__(self, field_name: str, location: str, value: Any, allowed: list[str]) -> None:
        self.field_name = field_name
        self.location = location
        self.value = value
        super().__init__(f"{location}: unknown {field_name} {value!r} (expected one of: {', '.join(allowed)})")


class DuplicatePathError(ConfigError):
    def __init__(self, path: Path, first: str, second: str) -> None:
        self.path = path
        super().__init__(f"{second}: path {path} is already declared by {first}")


class InvalidNodeNameError(ConfigError):
    def __init__(self, name: str, location: str, detail: str) -> None:
        self.name = name
        self.location = location
        super().__init__(f"{location}: invalid name {name!r} ({detail})")


class UnknownPathError(LookupError):
    """A restore target is not declared in the config tree."""

    def __init__(self, path: str | Path, kind: str = "path") -> None:
        self.path = path
        super().__init__(f"No {kind} declared at '{path}'")


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass
class ProjectNode:
    name: str
    path: Path
    git: ProjectGitOverride | None = None

    @property
    def repo(self) -> str | None:
        return self.git.repo if self.git else None


@dataclass
class WorkspaceNode:
    """A declared (or implicit intermediate) workspace directory."""

    name: str
    relative_path: PurePosixPath
    path: Path
    git: GitOverride | None = None
    workspaces: dict[str, WorkspaceNode] = field(default_factory=dict)
    projects: dict[str, ProjectNode] = field(default_factory=dict)
    implicit: bool = False
    """True for segments that only exist because of a multi-segment key."""


@dataclass
class ConfigTree:
    root: Path
    git: GitOverride = field(default_factory=GitOverride)
    workspaces: dict[str, WorkspaceNode] = field(default_factory=dict)

    # -- Lookup ----------------------------------------------------------------

    def relative(self, path: str | Path) -> PurePosixPath:
        """Normalise a user-supplied path to a path relative to ``root``.

        Accepts paths relative to root or absolute paths below root.
        Raises ``UnknownPathError`` for anything else.
        """
        candidate = Path(path)
        if candidate.is_absolute():
            try:
                candidate = candidate.relative_to(self.root)
            except ValueError:
                raise UnknownPathError(path) from None
        relative = PurePosixPath(candidate.as_posix())
        if not relative.parts or relative.parts == (".",) or ".." in relative.parts:
            raise UnknownPathError(path)
        return relative

    def find_workspace(self, path: str | Path) -> tuple[WorkspaceNode, tuple[WorkspaceNode, ...]]:
        """Return the workspace at *path* and its ancestors (outermost first)."""
        relative = self.relative(path)
        ancestors: list[WorkspaceNode] = []
        children = self.workspaces
        node: WorkspaceNode | None = None
        for segment in relative.parts:
            if node is not None:
                ancestors.append(node)
            node = children.get(segment)
            if node is None:
                raise UnknownPathError(path, "workspace")
            children = node.workspaces
        assert node is not None
        return node, tuple(ancestors)

    def find_project(self, path: str | Path) -> tuple[ProjectNode, WorkspaceNode, tuple[WorkspaceNode, ...]]:
        """Return the project at *path*, its owning workspace and that workspace's ancestors."""
        relative = self.relative(path)
        if len(relative.parts) < 2:
            raise UnknownPathError(path, "project")
        try:
            workspace, ancestors = self.find_workspace(relative.parent)
        except UnknownPathError:
            raise UnknownPathError(path, "project") from None
        project = workspace.projects.get(relative.name)
        if project is None:
            raise UnknownPathError(path, "project")
        return project, workspace, ancestors


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_tree(document: Mapping[str, Any]) -> ConfigTree:
    """Validate a decoded config document and build the node tree.

    Raises
    ------
    ConfigError:
        The document is malformed (schema, enum values, repo ids, names,
        duplicate paths).
    InvalidRootError:
        ``root`` cannot be expanded to an absolute path.
    """
    try:
        spec = WorkspacesDocument.model_validate(document)
    except ValidationError as exc:
        raise _translate_validation_error(exc) from None

    root = expand_root(spec.root)
    builder = _TreeBuilder()
    for key, ws_spec in spec.workspaces.items():
        builder.attach(builder.workspaces, key, ws_spec, PurePosixPath(), root, ("workspaces", key))

    logger.debug("Config tree built: root={} paths={}", root, len(builder.claims))
    return ConfigTree(root=root, git=spec.git or GitOverride(), workspaces=builder.workspaces)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

# owner/repo, plus GitLab sub-groups (group/sub/repo).
_REPO_ID = re.compile(r"[A-Za-z0-9_.-]+(/[A-Za-z0-9_.-]+)+")

_ENUM_FIELDS: dict[str, type[StrEnum]] = {
    "host": GitHost,
    "clone_strategy": CloneStrategy,
    "protocol": CloneProtocol,
}


@dataclass
class _Claim:
    location: str
    is_workspace: bool
    implicit: bool


class _TreeBuilder:
    def __init__(self) -> None:
        self.workspaces: dict[str, WorkspaceNode] = {}
        self.claims: dict[Path, _Claim] = {}

    def attach(
        self,
        siblings: dict[str, WorkspaceNode],
        key: str,
        spec: WorkspaceSpec,
        parent_rel: PurePosixPath,
        parent_path: Path,
        loc: tuple[str, ...],
    ) -> None:
        location = _render_loc(loc)
        segments = _split_workspace_key(key, location)

        container = siblings
        rel, path = parent_rel, parent_path
        for segment in segments[:-1]:
            rel, path = rel / segment, path / segment
            node = container.get(segment)
            if node is None:
                self._claim(path, location, is_workspace=True, implicit=True)
                node = WorkspaceNode(name=segment, relative_path=rel, path=path, implicit=True)
                container[segment] = node
            container = node.workspaces

        name = segments[-1]
        rel, path = rel / name, path / name
        self._claim(path, location, is_workspace=True, implicit=False)
        node = container.get(name)
        if node is None:
            node = WorkspaceNode(name=name, relative_path=rel, path=path, git=spec.git)
            container[name] = node
        else:
            # Implicit node created by an earlier multi-segment key.
            node.git = spec.git
            node.implicit = False

        for project_name, project_spec in spec.projects.items():
            self._add_project(node, project_name, project_spec, (*loc, "projects", project_name))

        for child_key, child_spec in spec.workspaces.items():
            self.attach(node.workspaces, child_key, child_spec, rel, path, (*loc, "workspaces", child_key))

    def _add_project(self, workspace: WorkspaceNode, name: str, spec: ProjectSpec, loc: tuple[str, ...]) -> None:
        location = _render_loc(loc)
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise InvalidNodeNameError(name, location, "project names must be a single directory name")

        if spec.git is not None and spec.git.repo is not None and not _REPO_ID.fullmatch(spec.git.repo):
            raise MalformedRepoIdError(spec.git.repo, f"{location}.git.repo")

        path = workspace.path / name
        self._claim(path, location, is_workspace=False, implicit=False)
        workspace.projects[name] = ProjectNode(name=name, path=path, git=spec.git)

    def _claim(self, path: Path, location: str, *, is_workspace: bool, implicit: bool) -> None:
        """Register *path* as taken, enforcing uniqueness across the tree.

        An implicit workspace may share its path with another workspace
        (implicit or explicit); two explicit declarations, or any overlap with
        a project, is a duplicate.
        """
        existing = self.claims.get(path)
        if existing is None:
            self.claims[path] = _Claim(location, is_workspace, implicit)
            return
        if is_workspace and existing.is_workspace and (implicit or existing.implicit):
            if not implicit:
                self.claims[path] = _Claim(location, is_workspace, implicit)
            return
        raise DuplicatePathError(path, existing.location, location)


def _split_workspace_key(key: str, location: str) -> list[str]:
    if not key or key.startswith("/") or "\\" in key:
        raise InvalidNodeNameError(key, location, "workspace keys must be relative paths")
    segments = key.rstrip("/").split("/")
    if any(segment in ("", ".", "..") for segment in segments):
        raise InvalidNodeNameError(key, location, "empty, '.' and '..' segments are not allowed")
    return segments


def _render_loc(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "<document>"


def _translate_validation_error(exc: ValidationError) -> ConfigError:
    """Map the first Pydantic error onto the config error taxonomy."""
    error = exc.errors()[0]
    loc = tuple(error["loc"])
    if error["type"] == "enum":
        field_name = str(loc[-1])
        allowed = [member.value for member in _ENUM_FIELDS.get(field_name, ())]
        return UnknownEnumValueError(field_name, _render_loc(loc[:-1]), error["input"], allowed)
    return ConfigError(f"{_render_loc(loc)}: {error['msg']}")
