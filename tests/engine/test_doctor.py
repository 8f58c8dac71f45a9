"""Unit tests for missing-path diagnosis."""

from __future__ import annotations

from devworkspaces.engine.doctor import diagnose


def test_everything_missing(make_tree, scenario_workspaces) -> None:
    tree = make_tree(scenario_workspaces)

    diagnosis = diagnose(tree)

    assert diagnosis.missing_workspaces == [tree.root / "a"]
    assert diagnosis.missing_projects == [tree.root / "a" / "p1", tree.root / "a" / "p2"]
    assert diagnosis.healthy is False
    assert not tree.root.exists()


def test_partially_present(make_tree, scenario_workspaces) -> None:
    tree = make_tree(scenario_workspaces)
    (tree.root / "a" / "p2").mkdir(parents=True)

    diagnosis = diagnose(tree)

    assert diagnosis.missing_workspaces == []
    assert diagnosis.missing_projects == [tree.root / "a" / "p1"]


def test_healthy(make_tree, scenario_workspaces) -> None:
    tree = make_tree(scenario_workspaces)
    for name in ("p1", "p2"):
        (tree.root / "a" / name).mkdir(parents=True)

    assert diagnose(tree).healthy is True
