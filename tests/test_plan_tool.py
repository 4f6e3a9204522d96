"""Tests for the plan_tool command line."""

from __future__ import annotations

import json

import pytest

from core.db import reset_caches
from scripts.plan_tool import main


@pytest.fixture()
def plan_file(tmp_path):
    path = tmp_path / "plan.json"
    path.write_text(
        json.dumps(
            {
                "name": "Sprint Tri",
                "duration_weeks": 1,
                "sessions_by_week": {
                    "1": [
                        {"day": "Monday", "discipline": "swim", "main": "aerobic(4x100)"},
                        {"day": "Wednesday", "discipline": "ride", "duration": 90},
                        {"day": "Thursday", "discipline": "run", "duration": 40},
                        {"day": "Friday", "discipline": "strength", "duration": 30},
                    ]
                },
            }
        ),
        encoding="utf-8",
    )
    return path


def test_validate_writes_normalized_json(plan_file, tmp_path, capsys):
    out = tmp_path / "out.json"
    assert main(["validate", str(plan_file), "-o", str(out)]) == 0
    plan = json.loads(out.read_text(encoding="utf-8"))
    assert plan["sessions_by_week"]["1"][0]["steps_preset"]
    assert "discipline=hybrid" in capsys.readouterr().err


def test_remap_without_strength(plan_file, capsys):
    assert main(["remap", str(plan_file), "--long-ride-day", "Sunday", "--long-run-day", "Thursday", "--no-strength"]) == 0
    plan = json.loads(capsys.readouterr().out)
    week = plan["sessions_by_week"]["1"]
    assert [s["day"] for s in week] == ["Monday", "Sunday", "Thursday"]


def test_export_markdown(plan_file, capsys):
    assert main(["export", str(plan_file)]) == 0
    assert capsys.readouterr().out.startswith("# Sprint Tri")


def test_publish_to_catalog(plan_file, monkeypatch, capsys):
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    reset_caches()
    try:
        assert main(["publish", str(plan_file), "--tag", "sprint", "--status", "draft"]) == 0
    finally:
        reset_caches()
    assert "discipline=hybrid" in capsys.readouterr().out


def test_invalid_plan_reports_error(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"name": "x", "duration_weeks": 1, "sessions_by_week": {}}), encoding="utf-8")
    assert main(["validate", str(path)]) == 1
    assert capsys.readouterr().err.startswith("error: ")


def test_missing_file_reports_error(tmp_path, capsys):
    assert main(["export", str(tmp_path / "nope.json")]) == 1
    assert "Cannot read plan file" in capsys.readouterr().err


def test_publish_invalid_catalog_metadata_reports_error(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    path = tmp_path / "blueprint.json"
    path.write_text(
        json.dumps({"name": "Ultra", "min_weeks": 8, "max_weeks": 200, "phase_blueprint": {"order": ["base"]}}),
        encoding="utf-8",
    )
    reset_caches()
    try:
        assert main(["publish", str(path)]) == 1
    finally:
        reset_caches()
    assert capsys.readouterr().err.startswith("error: duration_weeks:")


def test_remap_strength_default_comes_from_settings(plan_file, monkeypatch, capsys):
    monkeypatch.setenv("DEFAULT_INCLUDE_STRENGTH", "false")
    assert main(["remap", str(plan_file)]) == 0
    week = json.loads(capsys.readouterr().out)["sessions_by_week"]["1"]
    assert "strength" not in [s["discipline"] for s in week]

    assert main(["remap", str(plan_file), "--strength"]) == 0
    week = json.loads(capsys.readouterr().out)["sessions_by_week"]["1"]
    assert "strength" in [s["discipline"] for s in week]
