"""Restore engine -- recreate missing workspace and project directories.

Every action is idempotent: existing directories are never touched, so a
restore can be interrupted and re-run and will converge on the same layout.

Failures are per path.  A broken repository (or a directory that cannot be
created) is recorded as a ``failed`` outcome and the run continues; callers
always get the full :class:`RestoreReport`.  The only errors raised out of
the engine are ``UnknownPathError`` for undeclared targets, and those are
raised before anything on disk changes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger

from devworkspaces.engine.git import CloneFailedError, Cloner
from devworkspaces.engine.resolver import resolve_git_config
from devworkspaces.engine.tree import ConfigTree, WorkspaceNode
from devworkspaces.engine.walker import ProjectEntry, iter_workspaces, projects_of
from devworkspaces.models.enums import OutcomeStatus, PathKind, SkipReason
from devworkspaces.models.report import RestoreOutcome, RestoreReport


class RestoreEngine:
    """Restore operations over one config tree.

    ``announce`` receives one line per clone before git starts, so callers can
    show progress while a slow clone runs.
    """

    def __init__(self, tree: ConfigTree, cloner: Cloner, announce: Callable[[str], None] | None = None) -> None:
        self.tree = tree
        self.cloner = cloner
        self.announce = announce

    # -- Operations ------------------------------------------------------------

    def restore_workspace(self, path: str | Path, *, include_projects: bool = False) -> RestoreReport:
        """Restore one workspace and, optionally, the projects it directly owns."""
        workspace, ancestors = self.tree.find_workspace(path)
        report = RestoreReport()
        self._restore_workspace(report, workspace, ancestors, include_projects=include_projects)
        return report

    def restore_all_workspaces(self, *, include_projects: bool = False) -> RestoreReport:
        """Restore every declared workspace (and every project, if asked)."""
        report = RestoreReport()
        for workspace, ancestors in iter_workspaces(self.tree):
            self._restore_workspace(report, workspace, ancestors, include_projects=include_projects)
        return report

    def restore_project(self, path: str | Path) -> RestoreReport:
        """Restore a single project, creating its workspace first if needed."""
        project, workspace, ancestors = self.tree.find_project(path)
        report = RestoreReport()
        ws_outcome = self._ensure_directory(report, workspace.path, PathKind.WORKSPACE)
        entry = ProjectEntry(path=project.path, project=project, workspace=workspace, ancestors=ancestors)
        if ws_outcome.status == OutcomeStatus.FAILED:
            self._fail_projects(report, [entry], workspace)
        else:
            self._restore_project(report, entry)
        return report

    # -- Internal --------------------------------------------------------------

    def _restore_workspace(
        self,
        report: RestoreReport,
        workspace: WorkspaceNode,
        ancestors: tuple[WorkspaceNode, ...],
        *,
        include_projects: bool,
    ) -> None:
        outcome = self._ensure_directory(report, workspace.path, PathKind.WORKSPACE)
        if not include_projects:
            return

        entries = projects_of(workspace, ancestors)
        if outcome.status == OutcomeStatus.FAILED:
            self._fail_projects(report, entries, workspace)
            return
        for entry in entries:
            self._restore_project(report, entry)

    def _restore_project(self, report: RestoreReport, entry: ProjectEntry) -> RestoreOutcome:
        config = resolve_git_config(entry.project, entry.chain, self.tree.git)
        if config is None:
            outcome = self._ensure_directory(report, entry.path, PathKind.PROJECT, record=False)
            if outcome.status == OutcomeStatus.FAILED:
                return report.add(outcome)
            return report.add(RestoreOutcome.skipped(entry.path, PathKind.PROJECT, SkipReason.NO_REPO))

        if entry.path.exists():
            logger.debug("Project {} already exists, not cloning", entry.path)
            return report.add(RestoreOutcome.skipped(entry.path, PathKind.PROJECT, SkipReason.ALREADY_EXISTS))

        if self.announce is not None:
            self.announce(f"Cloning {config.clone_url} into {entry.path}...")
        try:
            self.cloner.clone(config, entry.path)
        except CloneFailedError as exc:
            logger.warning("Clone of {} into {} failed: {}", config.clone_url, entry.path, exc)
            return report.add(RestoreOutcome.failed(entry.path, PathKind.PROJECT, str(exc)))
        logger.info("Cloned {} into {}", config.repo, entry.path)
        return report.add(RestoreOutcome.cloned(entry.path))

    def _ensure_directory(
        self,
        report: RestoreReport,
        path: Path,
        kind: PathKind,
        *,
        record: bool = True,
    ) -> RestoreOutcome:
        if path.exists():
            outcome = RestoreOutcome.skipped(path, kind, SkipReason.ALREADY_EXISTS)
        else:
            try:
                path.mkdir(parents=True)
            except OSError as exc:
                logger.warning("Cannot create {} {}: {}", kind, path, exc)
                outcome = RestoreOutcome.failed(path, kind, str(exc))
            else:
                logger.info("Created {} {}", kind, path)
                outcome = RestoreOutcome.created(path, kind)
        if record:
            report.add(outcome)
        return outcome

    def _fail_projects(self, report: RestoreReport, entries: Iterable[ProjectEntry], workspace: WorkspaceNode) -> None:
        reason = f"workspace {workspace.path} could not be created"
        for entry in entries:
            report.add(RestoreOutcome.failed(entry.path, PathKind.PROJECT, reason))
