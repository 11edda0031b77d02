"""CLI tests for applying change plans."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from component_txn.cli.apply import app

runner = CliRunner()


def _write_plan(path: Path, ops: list[dict]) -> Path:
    path.write_text(json.dumps({"component": "comp", "ops": ops}))
    return path


def test_apply_commits(install_root: Path, tmp_path: Path) -> None:
    plan = _write_plan(
        tmp_path / "plan.json",
        [{"op": "write", "path": "bin/tool", "content": "tool"}],
    )

    result = runner.invoke(
        app,
        [
            str(plan),
            "--root",
            str(install_root),
            "--temp-dir",
            str(tmp_path / "backups"),
        ],
    )

    assert result.exit_code == 0
    assert "COMMITTED" in result.stdout
    assert (install_root / "bin" / "tool").read_text() == "tool"


def test_apply_rolls_back_on_failure(install_root: Path, tmp_path: Path) -> None:
    plan = _write_plan(
        tmp_path / "plan.json",
        [
            {"op": "write", "path": "a", "content": "a"},
            {"op": "remove_dir", "path": "missing"},
        ],
    )

    result = runner.invoke(
        app,
        [
            str(plan),
            "--root",
            str(install_root),
            "--temp-dir",
            str(tmp_path / "backups"),
        ],
    )

    assert result.exit_code == 1
    assert "ROLLED BACK" in result.stdout
    assert "Rolling back" in result.stdout
    assert not (install_root / "a").exists()


def test_apply_json_report(install_root: Path, tmp_path: Path) -> None:
    plan = _write_plan(
        tmp_path / "plan.json",
        [{"op": "write", "path": "a", "content": "a"}],
    )

    result = runner.invoke(
        app,
        [
            str(plan),
            "--root",
            str(install_root),
            "--temp-dir",
            str(tmp_path / "backups"),
            "--json",
        ],
    )

    assert result.exit_code == 0
    report = json.loads(result.stdout)
    assert report["committed"] is True
    assert report["applied_count"] == 1


def test_apply_dry_run(install_root: Path, tmp_path: Path) -> None:
    plan = _write_plan(
        tmp_path / "plan.json",
        [{"op": "write", "path": "a", "content": "a"}],
    )

    result = runner.invoke(
        app, [str(plan), "--root", str(install_root), "--dry-run"]
    )

    assert result.exit_code == 0
    assert "DRY RUN" in result.stdout
    assert not (install_root / "a").exists()


def test_apply_invalid_plan(install_root: Path, tmp_path: Path) -> None:
    plan = tmp_path / "plan.json"
    plan.write_text(json.dumps({"component": "comp", "ops": [{"op": "chmod"}]}))

    result = runner.invoke(app, [str(plan), "--root", str(install_root)])

    assert result.exit_code == 2
