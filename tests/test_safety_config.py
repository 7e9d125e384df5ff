"""Tests for safety threshold loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from config.controller import ConfigController
from config.safety import SafetyThresholds, load_safety_thresholds


def _reset_singletons() -> None:
    ConfigController._instance = None


def _write_config(tmp_path: Path, default: str, override: str | None = None) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "default.yaml").write_text(default, encoding="utf-8")
    if override is not None:
        (config_dir / "override.yaml").write_text(override, encoding="utf-8")


def test_defaults_match_policy_table() -> None:
    thresholds = SafetyThresholds()

    assert thresholds.min_detr_score == 0.35
    assert thresholds.center_lane_band == 0.34
    assert thresholds.near_area_ratio == 0.12
    assert thresholds.mid_area_ratio == 0.04
    assert thresholds.min_item_cosine == 0.78
    assert thresholds.topk_item_candidates == 5
    assert thresholds.target_frame_ms == 120
    assert thresholds.max_concurrent_infer == 1
    assert thresholds.max_silent_frames_warn == 90


def test_config_controller_normalizes_safety_keys(tmp_path: Path, monkeypatch) -> None:
    _write_config(
        tmp_path,
        "safety:\n  MIN_DETR_SCORE: 0.5\n  TOPK_ITEM_CANDIDATES: 3\n  UNRELATED: 1\n",
    )
    monkeypatch.chdir(tmp_path)
    _reset_singletons()

    config = ConfigController.get_instance().get_config()

    assert config["safety"] == {"min_detr_score": 0.5, "topk_item_candidates": 3}
    assert config["perception"]["embed_input_size"] == 384
    assert config["perception"]["box_format"] == "percent"
    assert config["perception"]["deadline_s"] is None
    assert config["perception"]["metrics_cap"] == 128
    _reset_singletons()


def test_override_file_wins(tmp_path: Path, monkeypatch) -> None:
    _write_config(
        tmp_path,
        "safety:\n  MIN_ITEM_COSINE: 0.78\n  TARGET_FRAME_MS: 120\n",
        "safety:\n  MIN_ITEM_COSINE: 0.9\n",
    )
    monkeypatch.chdir(tmp_path)
    _reset_singletons()

    thresholds = load_safety_thresholds()

    assert thresholds.min_item_cosine == 0.9
    assert thresholds.target_frame_ms == 120
    _reset_singletons()


def test_missing_config_file_falls_back_to_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _reset_singletons()

    assert load_safety_thresholds() == SafetyThresholds()
    _reset_singletons()


def test_from_mapping_accepts_either_case() -> None:
    thresholds = SafetyThresholds.from_mapping(
        {"NEAR_AREA_RATIO": "0.2", "mid_area_ratio": 0.05, "MAX_CONCURRENT_INFER": 2}
    )

    assert thresholds.near_area_ratio == 0.2
    assert thresholds.mid_area_ratio == 0.05
    assert thresholds.max_concurrent_infer == 2


@pytest.mark.parametrize(
    "values",
    [
        {"near_area_ratio": 0.03, "mid_area_ratio": 0.04},
        {"min_detr_score": 1.5},
        {"min_item_cosine": -0.1},
        {"topk_item_candidates": 0},
        {"max_concurrent_infer": 0},
        {"target_frame_ms": 0},
        {"center_lane_band": "wide"},
        {"TOPK_ITEM_CANDIDATES": 2.9},
        {"MAX_CONCURRENT_INFER": True},
        {"MIN_ITEM_COSINE": True},
        {"max_silent_frames_warn": "12.5"},
    ],
)
def test_invalid_thresholds_raise(values: dict) -> None:
    with pytest.raises(ValueError):
        SafetyThresholds.from_mapping(values)


def test_save_config_archives_previous_override(tmp_path: Path, monkeypatch) -> None:
    _write_config(tmp_path, "safety: {}\n", "safety:\n  MIN_DETR_SCORE: 0.4\n")
    monkeypatch.chdir(tmp_path)
    _reset_singletons()

    controller = ConfigController.get_instance()
    controller.set_config({"safety": {"MIN_DETR_SCORE": 0.6}})

    assert (tmp_path / "config" / "override_0001.yaml").exists()
    _reset_singletons()
    assert load_safety_thresholds().min_detr_score == 0.6
    _reset_singletons()


def test_integral_values_cast_to_int_fields() -> None:
    thresholds = SafetyThresholds.from_mapping({"TOPK_ITEM_CANDIDATES": 3.0, "MAX_SILENT_FRAMES_WARN": "45"})

    assert thresholds.topk_item_candidates == 3
    assert isinstance(thresholds.topk_item_candidates, int)
    assert thresholds.max_silent_frames_warn == 45


def test_unknown_safety_keys_are_logged(tmp_path: Path, monkeypatch) -> None:
    _write_config(tmp_path, "safety:\n  MIN_ITEM_COSIN: 0.9\n  MIN_DETR_SCORE: 0.5\n")
    monkeypatch.chdir(tmp_path)
    _reset_singletons()

    warnings: list[str] = []
    monkeypatch.setattr(
        "config.controller.logger.warning",
        lambda message, *args: warnings.append(message % args),
    )

    config = ConfigController.get_instance().get_config()
    _reset_singletons()

    assert config["safety"] == {"min_detr_score": 0.5}
    assert warnings == ["[SAFETY] Ignoring unknown safety key 'MIN_ITEM_COSIN'"]
