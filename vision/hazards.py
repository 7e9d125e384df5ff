"""COCO label to hazard mapping, lane and distance banding from bounding boxes.

All functions here are pure and safe to call from any thread.
"""

from __future__ import annotations

from typing import Any

from config.safety import SafetyThresholds
from vision.detections import Detection, Distance, Hazard, HazardType, Lane

_HAZARD_TABLE: dict[str, HazardType] = {
    "car": HazardType.VEHICLE,
    "bus": HazardType.VEHICLE,
    "truck": HazardType.VEHICLE,
    "train": HazardType.VEHICLE,
    "bicycle": HazardType.BIKE,
    "motorcycle": HazardType.BIKE,
    "dog": HazardType.DOG,
    "bench": HazardType.BENCH,
    "chair": HazardType.BENCH,
    "traffic light": HazardType.POLE,
    "stop sign": HazardType.POLE,
    "fire hydrant": HazardType.POLE,
    "parking meter": HazardType.POLE,
    # vertical-ish obstacle
    "potted plant": HazardType.POLE,
    # trip hazard proxy
    "backpack": HazardType.DROPOFF_LIKE,
    "handbag": HazardType.DROPOFF_LIKE,
    "suitcase": HazardType.DROPOFF_LIKE,
    "person": HazardType.PERSON,
}


def coco_to_hazard(label: Any) -> HazardType:
    """Map a detector label to a hazard type; unmatched labels are ``UNKNOWN``."""

    if not isinstance(label, str):
        return HazardType.UNKNOWN
    return _HAZARD_TABLE.get(label.strip().lower(), HazardType.UNKNOWN)


def lane_of(x_center: float, width: float, band: float = 0.34) -> Lane:
    """Return the lane for a horizontal center; points on an edge are ``CENTER``."""

    nx = x_center / width
    left_edge = 0.5 - band / 2
    right_edge = 0.5 + band / 2
    if nx < left_edge:
        return Lane.LEFT
    if nx > right_edge:
        return Lane.RIGHT
    return Lane.CENTER


def distance_of(
    area: float, frame_area: float, near: float = 0.12, mid: float = 0.04
) -> Distance:
    """Band the area ratio; a ratio equal to a cutoff takes the closer band."""

    ratio = area / frame_area
    if ratio >= near:
        return Distance.NEAR
    if ratio >= mid:
        return Distance.MID
    return Distance.FAR


def classify(
    detection: Detection,
    frame_width: int,
    frame_height: int,
    thresholds: SafetyThresholds,
) -> Hazard:
    """Attach hazard type, lane and distance to a pixel-space detection."""

    return Hazard(
        bbox=detection.bbox,
        score=detection.score,
        label=detection.label,
        hazard_type=coco_to_hazard(detection.label),
        lane=lane_of(detection.x_center, frame_width, thresholds.center_lane_band),
        distance=distance_of(
            detection.area,
            frame_width * frame_height,
            thresholds.near_area_ratio,
            thresholds.mid_area_ratio,
        ),
    )
