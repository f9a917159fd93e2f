from __future__ import annotations

import json
from pathlib import Path

import pytest

from stack_tabs.main import run


def _snapshot(tmp_path: Path) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({
        "workspaceFolders": ["/w/proj"],
        "tabs": [
            {"label": "A", "resource": "/w/proj/A"},
            {"label": "B", "resource": "/w/proj/B", "pinned": True},
            {"label": "C", "resource": "/w/proj/C"},
            {"label": "D", "resource": "/w/proj/D", "active": True},
            {"label": "E", "resource": "/w/proj/E"},
        ],
    }), encoding="utf-8")
    return path


def _args(tmp_path: Path, *extra: str) -> list[str]:
    return [
        str(_snapshot(tmp_path)),
        "--config", str(tmp_path / "settings.toml"),
        "--log-dir", str(tmp_path / "logs"),
        *extra,
    ]


def test_reports_decision(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(_args(tmp_path, "--apply")) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["active_index"] == 3
    assert report["direction"] == "left"
    assert report["filters"] == ["pinned"]
    assert report["blocking_indexes"] == [1]
    assert report["distance"] == 1
    assert report["moved"] is True
    assert report["tabs"] == ["A", "B", "D", "C", "E"]


def test_uses_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "settings.toml").write_text('direction = "right"\npadding = 1\n', encoding="utf-8")
    assert run(_args(tmp_path)) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["direction"] == "right"
    assert report["padding"] == 1
    assert report["distance"] is None
    assert report["moved"] is False
    assert "tabs" not in report


def test_missing_snapshot_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = run([
        str(tmp_path / "missing.json"),
        "--config", str(tmp_path / "settings.toml"),
        "--log-dir", str(tmp_path / "logs"),
    ])
    assert code == 1
    assert capsys.readouterr().out == ""


def test_broken_config_is_flagged_in_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "settings.toml").write_text("padding = [\n", encoding="utf-8")
    assert run(_args(tmp_path)) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["config_ok"] is False
    assert report["distance"] == 1


def test_missing_config_is_not_an_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run(_args(tmp_path)) == 0
    assert json.loads(capsys.readouterr().out)["config_ok"] is True


def test_snapshot_path_with_braces_fails_cleanly(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = run([
        str(tmp_path / "{missing}.json"),
        "--config", str(tmp_path / "settings.toml"),
        "--log-dir", str(tmp_path / "logs"),
    ])
    assert code == 1
    assert capsys.readouterr().out == ""
