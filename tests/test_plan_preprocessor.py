"""Tests for schema preprocessing of authored plans."""

from __future__ import annotations

from copy import deepcopy

from core.services.plan_preprocessor import preprocess_for_schema, raw_discipline


def _plan(**overrides):
    plan = {
        "name": "Sprint Tri Base",
        "description": "Four weeks of base",
        "duration_weeks": 4,
        "sessions_by_week": {
            "1": [
                {"day": "Monday", "discipline": "swim", "macro": "@SWIM_TECH_1200_DEFAULT"},
                {"day": "Wednesday", "type": "Swim", "main": "drills(fist,scull); pull4x50", "extra": "kick4x50"},
                {"day": "Saturday", "discipline": "ride", "duration": 180, "description": "@BK_THR_4x8_R5"},
                {"day": "Sunday", "discipline": "run", "duration": 60, "macro": "@DOES_NOT_EXIST"},
            ],
        },
    }
    plan.update(overrides)
    return plan


def test_macro_expands_into_steps_preset():
    out = preprocess_for_schema(_plan())
    swim = out["sessions_by_week"]["1"][0]
    assert swim["steps_preset"] == [
        "swim_warmup_200yd_easy",
        "swim_drills_4x50yd_catchup",
        "swim_drills_4x50yd_singlearm",
        "swim_pull_2x100yd",
        "swim_kick_2x100yd",
        "swim_cooldown_200yd_easy",
    ]


def test_description_macro_expands():
    ride = preprocess_for_schema(_plan())["sessions_by_week"]["1"][2]
    assert ride["steps_preset"][1] == "bike_thr_4x8min_R5min"
    assert ride["description"] == "@BK_THR_4x8_R5"


def test_unknown_macro_leaves_steps_empty():
    run = preprocess_for_schema(_plan())["sessions_by_week"]["1"][3]
    assert "steps_preset" not in run
    assert "macro" not in run


def test_swim_dsl_expansion_reads_legacy_type():
    swim = preprocess_for_schema(_plan())["sessions_by_week"]["1"][1]
    assert swim["steps_preset"] == [
        "swim_warmup_200yd_easy",
        "swim_drills_4x50yd_fist",
        "swim_drills_4x50yd_scull",
        "swim_pull_4x50yd",
        "swim_kick_4x50yd",
        "swim_cooldown_200yd_easy",
    ]


def test_macro_wins_over_dsl():
    plan = _plan(sessions_by_week={"1": [{"day": "Monday", "discipline": "swim", "macro": "@SWIM_TECH_1200_DEFAULT", "main": "pull300"}]})
    swim = preprocess_for_schema(plan)["sessions_by_week"]["1"][0]
    assert "swim_pull_300yd_steady" not in swim["steps_preset"]
    assert len(swim["steps_preset"]) == 6


def test_existing_steps_preset_never_overwritten():
    plan = _plan(sessions_by_week={"1": [{"day": "Monday", "discipline": "swim", "steps_preset": ["custom"], "macro": "@SWIM_TECH_1200_DEFAULT", "main": "pull300"}]})
    assert preprocess_for_schema(plan)["sessions_by_week"]["1"][0]["steps_preset"] == ["custom"]


def test_dsl_failure_is_not_fatal():
    plan = _plan(sessions_by_week={"1": [{"day": "Monday", "discipline": "swim", "main": "drills(butterfly)"}]})
    swim = preprocess_for_schema(plan)["sessions_by_week"]["1"][0]
    assert "steps_preset" not in swim
    assert "main" not in swim


def test_plan_defaults_drive_dsl_and_are_stripped():
    plan = _plan(
        defaults={"swim": {"wu": "swim_warmup_300yd_easy", "cd": "swim_cooldown_200yd_easy"}},
        sessions_by_week={"1": [{"day": "Monday", "discipline": "swim", "main": "pull2x100"}]},
    )
    out = preprocess_for_schema(plan)
    assert out["sessions_by_week"]["1"][0]["steps_preset"][0] == "swim_warmup_300yd_easy"
    assert "defaults" not in out


def test_authoring_fields_stripped():
    plan = _plan(
        sessions_by_week={
            "1": [
                {"day": "Monday", "discipline": "swim", "steps_preset": ["a"], "main": "x", "extra": "y", "override_wu": "w", "override_cd": "c"},
                {"day": "Tuesday", "discipline": "run", "macro": "@RUN_INT_6x400_5k_R2"},
            ]
        }
    )
    out = preprocess_for_schema(plan)
    for session in out["sessions_by_week"]["1"]:
        assert "macro" not in session
        if raw_discipline(session) == "swim":
            for key in ("main", "extra", "override_wu", "override_cd"):
                assert key not in session


def test_export_hints_filtered_to_allow_list():
    out = preprocess_for_schema(_plan(export_hints={"pace_tolerance_quality": 0.04, "hr_zone_drift": 3}))
    assert out["export_hints"] == {"pace_tolerance_quality": 0.04}


def test_export_hints_removed_when_nothing_survives():
    out = preprocess_for_schema(_plan(export_hints={"hr_zone_drift": 3}))
    assert "export_hints" not in out


def test_optional_header_prepended_once_per_week():
    plan = _plan(
        ui_text={"optional_header": "Optional: swap any session for rest"},
        notes_by_week={"1": ["Keep it easy"]},
        sessions_by_week={"1": [], "2": []},
    )
    out = preprocess_for_schema(plan)
    assert out["notes_by_week"]["1"] == ["Optional: swap any session for rest", "Keep it easy"]
    assert out["notes_by_week"]["2"] == ["Optional: swap any session for rest"]
    assert "ui_text" not in out

    again = preprocess_for_schema({**out, "ui_text": plan["ui_text"]})
    assert again["notes_by_week"] == out["notes_by_week"]


def test_blank_header_ignored():
    out = preprocess_for_schema(_plan(ui_text={"optional_header": "   "}))
    assert "notes_by_week" not in out


def test_window_fields_stripped():
    out = preprocess_for_schema(_plan(min_weeks=8, max_weeks=16))
    assert "min_weeks" not in out
    assert "max_weeks" not in out


def test_input_is_not_mutated():
    plan = _plan(export_hints={"foo": 1}, ui_text={"optional_header": "Hi"}, min_weeks=2)
    snapshot = deepcopy(plan)
    preprocess_for_schema(plan)
    assert plan == snapshot


def test_missing_sessions_by_week_becomes_empty_mapping():
    out = preprocess_for_schema({"name": "x", "duration_weeks": 1})
    assert out["sessions_by_week"] == {}


def test_malformed_weeks_pass_through():
    out = preprocess_for_schema({"name": "x", "sessions_by_week": {"1": "not-a-list", "2": ["oops"]}})
    assert out["sessions_by_week"] == {"1": "not-a-list", "2": ["oops"]}
