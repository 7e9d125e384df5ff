"""Tests for hazard, lane and distance classification."""

from __future__ import annotations

import pytest

from config.safety import SafetyThresholds
from vision.detections import Detection, Distance, HazardType, Lane
from vision.hazards import classify, coco_to_hazard, distance_of, lane_of


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("car", HazardType.VEHICLE),
        ("TRUCK", HazardType.VEHICLE),
        ("bicycle", HazardType.BIKE),
        ("Dog", HazardType.DOG),
        ("chair", HazardType.BENCH),
        ("fire hydrant", HazardType.POLE),
        ("potted plant", HazardType.POLE),
        ("suitcase", HazardType.DROPOFF_LIKE),
        (" person ", HazardType.PERSON),
        ("microwave", HazardType.UNKNOWN),
        ("zebra", HazardType.UNKNOWN),
        ("", HazardType.UNKNOWN),
    ],
)
def test_coco_to_hazard_table(label: str, expected: HazardType) -> None:
    assert coco_to_hazard(label) is expected


def test_coco_to_hazard_is_total_for_non_strings() -> None:
    for value in (None, 42, 3.5, ["car"]):
        assert coco_to_hazard(value) is HazardType.UNKNOWN


@pytest.mark.parametrize("band", [0.01, 0.2, 0.34, 0.5, 0.99])
def test_lane_of_center_and_extremes(band: float) -> None:
    width = 640
    assert lane_of(width / 2, width, band) is Lane.CENTER
    assert lane_of(0, width, band) is Lane.LEFT
    assert lane_of(width, width, band) is Lane.RIGHT


def test_lane_of_edges_fall_to_center() -> None:
    assert lane_of(25, 100, band=0.5) is Lane.CENTER
    assert lane_of(75, 100, band=0.5) is Lane.CENTER
    assert lane_of(24.9, 100, band=0.5) is Lane.LEFT
    assert lane_of(75.1, 100, band=0.5) is Lane.RIGHT


def test_distance_of_boundaries_favor_closer_band() -> None:
    assert distance_of(12, 100) is Distance.NEAR
    assert distance_of(4, 100) is Distance.MID
    assert distance_of(3.99, 100) is Distance.FAR


def test_distance_of_is_monotonic_in_area() -> None:
    order = {Distance.FAR: 0, Distance.MID: 1, Distance.NEAR: 2}
    frame_area = 640 * 480
    previous = Distance.FAR
    for area in range(0, frame_area, 997):
        current = distance_of(area, frame_area)
        assert order[current] >= order[previous]
        previous = current


def test_classify_car_scenario() -> None:
    detection = Detection(bbox=(100, 100, 200, 150), score=0.9, label="car")

    hazard = classify(detection, 640, 480, SafetyThresholds())

    assert hazard.hazard_type is HazardType.VEHICLE
    assert hazard.lane is Lane.LEFT
    assert hazard.distance is Distance.MID
    assert hazard.bbox == (100, 100, 200, 150)
    assert hazard.score == 0.9
