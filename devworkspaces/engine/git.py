"""Git command construction and execution.

Two clone strategies are supported:

- **branch**: a regular clone straight into the project directory::

      git clone <url> <project>

- **worktree**: a bare clone kept in ``<project>/.bare`` plus one linked
  worktree for the default branch next to it::

      git clone --bare <url> <project>/.bare
      git -C <project>/.bare config remote.origin.fetch "+refs/heads/*:refs/remotes/origin/*"
      git -C <project>/.bare worktree add <project>/<branch> <branch>

  More worktrees can later be added beside the first one.

The actual process invocation sits behind :data:`CommandRunner` so the
restore engine and its tests never need a real git binary.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from loguru import logger

from devworkspaces.engine.resolver import EffectiveGitConfig
from devworkspaces.models.enums import CloneStrategy

BARE_DIR = ".bare"

# `clone --bare` leaves no fetch refspec, so later fetches would not track origin.
ORIGIN_FETCH_REFSPEC = "+refs/heads/*:refs/remotes/origin/*"

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CloneFailedError(RuntimeError):
    """A git invocation exited non-zero (or could not be started)."""

    def __init__(self, command: GitCommand, stderr: str, returncode: int | None = None) -> None:
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
        super().__init__(f"git {command.args[0]} failed: {detail}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GitCommand:
    """One git invocation, without the binary name."""

    args: tuple[str, ...]

    def argv(self, git_binary: str = "git") -> list[str]:
        return [git_binary, *self.args]

    def __str__(self) -> str:
        return " ".join(("git", *self.args))


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""


CommandRunner = Callable[[list[str]], CommandResult]
"""Runs an argv list to completion and reports its exit status and output."""


def commands_for(
    strategy: CloneStrategy,
    clone_url: str,
    target_path: Path,
    default_branch: str | None = None,
) -> list[GitCommand]:
    """Return the ordered git commands that materialise *target_path*.

    ``default_branch`` is required for the worktree strategy; it names both
    the branch to check out and (with ``/`` flattened) the checkout directory.
    """
    if strategy == CloneStrategy.BRANCH:
        return [GitCommand(("clone", clone_url, str(target_path)))]

    if not default_branch:
        msg = "worktree strategy needs the remote's default branch"
        raise ValueError(msg)
    bare = target_path / BARE_DIR
    return [
        GitCommand(("clone", "--bare", clone_url, str(bare))),
        GitCommand(("-C", str(bare), "config", "remote.origin.fetch", ORIGIN_FETCH_REFSPEC)),
        GitCommand(("-C", str(bare), "worktree", "add", str(worktree_path(target_path, default_branch)), default_branch)),
    ]


def worktree_path(target_path: Path, branch: str) -> Path:
    """Checkout directory for *branch* inside a worktree-strategy project."""
    return target_path / branch.replace("/", "-")


def default_branch_command(clone_url: str) -> GitCommand:
    return GitCommand(("ls-remote", "--symref", clone_url, "HEAD"))


def parse_default_branch(ls_remote_output: str) -> str | None:
    """Extract the branch from ``ref: refs/heads/<branch>\\tHEAD``."""
    for line in ls_remote_output.splitlines():
        if line.startswith("ref: refs/heads/") and line.rstrip().endswith("HEAD"):
            ref = line[len("ref: ") :].split("\t", 1)[0].strip()
            return ref.removeprefix("refs/heads/")
    return None


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class Cloner(Protocol):
    """Capability used by the restore engine to materialise one project."""

    def clone(self, config: EffectiveGitConfig, target_path: Path) -> None:
        """Clone into *target_path*.  Raises ``CloneFailedError`` on failure."""
        ...


def run_command(argv: list[str]) -> CommandResult:
    """Default :data:`CommandRunner`: blocking subprocess, output captured."""
    completed = subprocess.run(argv, capture_output=True, text=True, check=False)  # noqa: S603
    return CommandResult(completed.returncode, completed.stdout, completed.stderr)


class GitCloner:
    """Clone projects by shelling out to git.

    ``target_path`` must not exist yet; on failure anything created under it
    is removed again so that a later restore retries the clone instead of
    treating the leftovers as an existing project.
    """

    def __init__(self, runner: CommandRunner | None = None, git_binary: str = "git") -> None:
        self._runner = runner or run_command
        self._git_binary = git_binary

    def clone(self, config: EffectiveGitConfig, target_path: Path) -> None:
        logger.info("Cloning {} into {} ({})", config.clone_url, target_path, config.clone_strategy)

        default_branch = None
        if config.clone_strategy == CloneStrategy.WORKTREE:
            default_branch = self.default_branch(config.clone_url)

        try:
            self.run_all(commands_for(config.clone_strategy, config.clone_url, target_path, default_branch))
        except CloneFailedError:
            _discard(target_path)
            raise

    def default_branch(self, clone_url: str) -> str:
        command = default_branch_command(clone_url)
        result = self.run(command)
        branch = parse_default_branch(result.stdout)
        if branch is None:
            raise CloneFailedError(command, f"could not determine default branch of {clone_url}")
        logger.debug("Default branch of {} is {}", clone_url, branch)
        return branch

    def run_all(self, commands: Sequence[GitCommand]) -> None:
        for command in commands:
            self.run(command)

    def run(self, command: GitCommand) -> CommandResult:
        logger.debug("Running: {}", command)
        try:
            result = self._runner(command.argv(self._git_binary))
        except OSError as exc:
            raise CloneFailedError(command, f"cannot run {self._git_binary}: {exc}") from exc
        if result.returncode != 0:
            raise CloneFailedError(command, result.stderr, result.returncode)
        return result


def _discard(target_path: Path) -> None:
    if target_path.exists():
        logger.debug("Removing partial clone at {}", target_path)
        shutil.rmtree(target_path, ignore_errors=True)
