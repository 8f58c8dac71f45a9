from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import click

from devworkspaces.engine.git import Cloner, GitCloner
from devworkspaces.engine.paths import InvalidRootError
from devworkspaces.engine.tree import ConfigError, ConfigTree, UnknownPathError
from devworkspaces.log import setup_logging, shift_level
from devworkspaces.models.report import RestoreReport
from devworkspaces.settings import get_settings

if TYPE_CHECKING:
    from devworkspaces.engine.restore import RestoreEngine


@dataclass
class CliState:
    """Per-invocation state shared by subcommands via ``ctx.obj``."""

    config_path: Path | None = None
    git_binary: str = "git"
    cloner: Cloner | None = None
    quiet: bool = False

    def load_tree(self) -> ConfigTree:
        from devworkspaces.loader import load_tree

        if self.config_path is None:
            raise click.UsageError("No config file given; use --config or WORKSPACES_CONFIG_PATH.")
        try:
            return load_tree(self.config_path)
        except (ConfigError, InvalidRootError) as exc:
            raise click.ClickException(str(exc)) from None

    def restore_engine(self, tree: ConfigTree) -> RestoreEngine:
        from devworkspaces.engine.restore import RestoreEngine

        cloner = self.cloner or GitCloner(git_binary=self.git_binary)
        return RestoreEngine(tree, cloner, announce=None if self.quiet else _announce)


pass_state = click.make_pass_decorator(CliState)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: from WORKSPACES_CONFIG_PATH or ~/.config/workspaces/workspaces.yaml).",
)
@click.option("-v", "--verbose", count=True, help="More log output; repeat for debug.")
@click.option("-q", "--quiet", is_flag=True, default=False, help="Only log errors.")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: int, quiet: bool) -> None:
    """Workspaces - declare your development directory layout and restore it."""
    settings = get_settings()
    setup_logging(shift_level(settings.log_level, verbose, quiet))

    state = ctx.ensure_object(CliState)
    state.config_path = config_path or settings.config_path
    state.git_binary = settings.git_binary
    state.quiet = quiet


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@main.group("list")
def list_() -> None:
    """List declared workspaces or projects."""


@list_.command("workspaces")
@pass_state
def list_workspaces(state: CliState) -> None:
    """Print every workspace path, one per line."""
    from devworkspaces.engine.walker import walk_workspaces

    for path in walk_workspaces(state.load_tree()):
        click.echo(str(path))


@list_.command("projects")
@pass_state
def list_projects(state: CliState) -> None:
    """Print every project path, one per line."""
    from devworkspaces.engine.walker import walk_projects

    for entry in walk_projects(state.load_tree()):
        click.echo(str(entry.path))


# ---------------------------------------------------------------------------
# Restore
# ---------------------------------------------------------------------------


@main.group()
def restore() -> None:
    """Recreate missing workspaces and clone missing projects."""


@restore.command("workspace")
@click.argument("path", required=False)
@click.option("--include-projects", is_flag=True, default=False, help="Also restore the workspace's projects.")
@click.option("--all", "all_", is_flag=True, default=False, help="Restore every declared workspace.")
@pass_state
def restore_workspace(state: CliState, path: str | None, include_projects: bool, all_: bool) -> None:
    """Restore the workspace at PATH (relative to root), or all with --all."""
    if (path is None) == (not all_):
        raise click.UsageError("Specify exactly one of PATH or --all.")

    engine = state.restore_engine(state.load_tree())
    if all_:
        report = engine.restore_all_workspaces(include_projects=include_projects)
    else:
        try:
            report = engine.restore_workspace(path, include_projects=include_projects)
        except UnknownPathError as exc:
            raise click.ClickException(str(exc)) from None
    _print_report(report)


@restore.command("project")
@click.argument("path")
@pass_state
def restore_project(state: CliState, path: str) -> None:
    """Restore the project at PATH (relative to root)."""
    engine = state.restore_engine(state.load_tree())
    try:
        report = engine.restore_project(path)
    except UnknownPathError as exc:
        raise click.ClickException(str(exc)) from None
    _print_report(report)


def _announce(message: str) -> None:
    click.echo(message, err=True)


def _print_report(report: RestoreReport) -> None:
    for outcome in report.outcomes:
        click.echo(outcome.describe())
    click.echo(report.summary())


# ---------------------------------------------------------------------------
# Diagnosis
# ---------------------------------------------------------------------------


@main.command()
@pass_state
def doctor(state: CliState) -> None:
    """Show declared workspaces and projects missing on disk."""
    from devworkspaces.engine.doctor import diagnose

    diagnosis = diagnose(state.load_tree())
    if diagnosis.healthy:
        click.echo("All declared workspaces and projects are present.")
        return

    for title, paths in (
        ("Missing workspaces", diagnosis.missing_workspaces),
        ("Missing projects", diagnosis.missing_projects),
    ):
        if not paths:
            continue
        click.echo(f"{title}:")
        for path in paths:
            click.echo(f"  {path}")


if __name__ == "__main__":
    main()
