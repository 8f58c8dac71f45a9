"""CLI tests via click's CliRunner.  The cloner is replaced through ``obj``."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import click
import pytest
from click.testing import CliRunner
from loguru import logger

from devworkspaces.cli import CliState, main

SCENARIO = """\
root: {root}
git:
  clone_strategy: {strategy}
workspaces:
  a:
    projects:
      p1:
      p2:
        git:
          repo: o/r
"""


@pytest.fixture(autouse=True)
def _detach_loguru() -> Iterator[None]:
    """``setup_logging`` binds loguru to CliRunner's stderr; drop it afterwards."""
    yield
    logger.remove()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _write_config(tmp_path: Path, root: str | Path, strategy: str = "branch") -> Path:
    path = tmp_path / "workspaces.yaml"
    path.write_text(SCENARIO.format(root=root, strategy=strategy), encoding="utf-8")
    return path


def _invoke(runner: CliRunner, config: Path, *args: str, cloner=None):
    return runner.invoke(main, ["--config", str(config), *args], obj=CliState(cloner=cloner))


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


def test_list_workspaces(runner: CliRunner, tmp_path: Path) -> None:
    config = _write_config(tmp_path, "/tmp/ws")

    result = _invoke(runner, config, "list", "workspaces")

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["/tmp/ws/a"]


def test_list_projects(runner: CliRunner, tmp_path: Path) -> None:
    config = _write_config(tmp_path, "/tmp/ws")

    result = _invoke(runner, config, "list", "projects")

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["/tmp/ws/a/p1", "/tmp/ws/a/p2"]


def test_config_from_environment(runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = _write_config(tmp_path, "/tmp/ws")
    monkeypatch.setenv("WORKSPACES_CONFIG_PATH", str(config))

    result = runner.invoke(main, ["list", "workspaces"], obj=CliState())

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["/tmp/ws/a"]


def test_missing_config_is_preflight_error(runner: CliRunner, tmp_path: Path) -> None:
    result = _invoke(runner, tmp_path / "absent.yaml", "list", "workspaces")

    assert result.exit_code == 1
    assert "Cannot read config file" in result.output


def test_invalid_config_is_preflight_error(runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "workspaces.yaml"
    config.write_text("root: /tmp/ws\nworkspaces:\n  a:\n    projects:\n      p:\n        git:\n          repo: nope\n")

    result = _invoke(runner, config, "list", "projects")

    assert result.exit_code == 1
    assert "owner/repo" in result.output


# ---------------------------------------------------------------------------
# restore
# ---------------------------------------------------------------------------


def test_restore_workspace_include_projects(runner: CliRunner, tmp_path: Path, fake_cloner) -> None:
    root = tmp_path / "ws"
    config = _write_config(tmp_path, root)

    result = _invoke(runner, config, "restore", "workspace", "a", "--include-projects", cloner=fake_cloner)

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[0] == f"created  {root / 'a'}"
    assert lines[1] == f"skipped  {root / 'a' / 'p1'} (no-repo)"
    assert lines[2] == f"cloned   {root / 'a' / 'p2'}"
    assert lines[-1].startswith("Restore finished:")
    assert (root / "a" / "p1").is_dir()
    assert [cfg.clone_url for cfg, _ in fake_cloner.calls] == ["https://github.com/o/r.git"]


def test_restore_announces_each_clone(runner: CliRunner, tmp_path: Path, fake_cloner) -> None:
    root = tmp_path / "ws"
    config = _write_config(tmp_path, root)

    result = _invoke(runner, config, "restore", "workspace", "--all", "--include-projects", cloner=fake_cloner)

    assert result.exit_code == 0, result.output
    assert f"Cloning https://github.com/o/r.git into {root / 'a' / 'p2'}..." in result.stderr
    assert "Cloning" not in result.stdout


def test_quiet_restore_has_no_clone_lines(runner: CliRunner, tmp_path: Path, fake_cloner) -> None:
    config = _write_config(tmp_path, tmp_path / "ws")

    result = _invoke(runner, config, "-q", "restore", "workspace", "a", "--include-projects", cloner=fake_cloner)

    assert result.exit_code == 0, result.output
    assert "Cloning" not in result.output


def test_state_without_config_path_is_usage_error() -> None:
    with pytest.raises(click.UsageError, match="No config file"):
        CliState().load_tree()


def test_restore_all_twice(runner: CliRunner, tmp_path: Path, fake_cloner) -> None:
    root = tmp_path / "ws"
    config = _write_config(tmp_path, root, strategy="worktree")

    first = _invoke(runner, config, "restore", "workspace", "--all", "--include-projects", cloner=fake_cloner)
    second = _invoke(runner, config, "restore", "workspace", "--all", "--include-projects", cloner=fake_cloner)

    assert first.exit_code == second.exit_code == 0
    assert "1 cloned" in first.stdout
    assert "0 cloned" in second.stdout
    assert (root / "a" / "p2" / ".bare").is_dir()
    assert len(fake_cloner.calls) == 1


@pytest.mark.parametrize("args", [[], ["a", "--all"]])
def test_restore_workspace_needs_exactly_one_target(runner: CliRunner, tmp_path: Path, args: list[str]) -> None:
    config = _write_config(tmp_path, tmp_path / "ws")

    result = _invoke(runner, config, "restore", "workspace", *args)

    assert result.exit_code == 2
    assert "exactly one of PATH or --all" in result.output
    assert not (tmp_path / "ws").exists()


def test_restore_project(runner: CliRunner, tmp_path: Path, fake_cloner) -> None:
    root = tmp_path / "ws"
    config = _write_config(tmp_path, root)

    result = _invoke(runner, config, "restore", "project", "a/p2", cloner=fake_cloner)

    assert result.exit_code == 0, result.output
    assert (root / "a" / "p2" / ".git").is_dir()
    assert not (root / "a" / "p1").exists()


def test_restore_unknown_project(runner: CliRunner, tmp_path: Path, fake_cloner) -> None:
    root = tmp_path / "ws"
    config = _write_config(tmp_path, root)

    result = _invoke(runner, config, "restore", "project", "unknown/path", cloner=fake_cloner)

    assert result.exit_code == 1
    assert "unknown/path" in result.output
    assert not root.exists()


def test_restore_unknown_workspace(runner: CliRunner, tmp_path: Path, fake_cloner) -> None:
    config = _write_config(tmp_path, tmp_path / "ws")

    result = _invoke(runner, config, "restore", "workspace", "zzz", cloner=fake_cloner)

    assert result.exit_code == 1
    assert "zzz" in result.output


def test_failed_clone_still_exits_zero(runner: CliRunner, tmp_path: Path, fake_cloner) -> None:
    fake_cloner.failing = {"o/r"}
    config = _write_config(tmp_path, tmp_path / "ws")

    result = _invoke(runner, config, "-q", "restore", "workspace", "a", "--include-projects", cloner=fake_cloner)

    assert result.exit_code == 0
    assert any(line.startswith("failed") for line in result.stdout.splitlines())
    assert "1 failed" in result.stdout


# ---------------------------------------------------------------------------
# doctor
# ---------------------------------------------------------------------------


def test_doctor_reports_missing(runner: CliRunner, tmp_path: Path) -> None:
    root = tmp_path / "ws"
    config = _write_config(tmp_path, root)
    (root / "a" / "p1").mkdir(parents=True)

    result = _invoke(runner, config, "doctor")

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["Missing projects:", f"  {root / 'a' / 'p2'}"]


def test_doctor_healthy(runner: CliRunner, tmp_path: Path) -> None:
    root = tmp_path / "ws"
    config = _write_config(tmp_path, root)
    for name in ("p1", "p2"):
        (root / "a" / name).mkdir(parents=True)

    result = _invoke(runner, config, "doctor")

    assert result.exit_code == 0
    assert "All declared workspaces and projects are present." in result.stdout
