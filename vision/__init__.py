"""Vision package exports."""

from vision.capabilities import CapabilityHandle, Detector, Embedder
from vision.detections import (
    BackpressureReject,
    Detection,
    Distance,
    Hazard,
    HazardType,
    ItemHit,
    Lane,
    NoMatch,
)
from vision.frames import Frame
from vision.hazards import coco_to_hazard, distance_of, lane_of
from vision.pipeline import PerceptionCore

__all__ = [
    "BackpressureReject",
    "CapabilityHandle",
    "Detection",
    "Detector",
    "Distance",
    "Embedder",
    "Frame",
    "Hazard",
    "HazardType",
    "ItemHit",
    "Lane",
    "NoMatch",
    "PerceptionCore",
    "coco_to_hazard",
    "distance_of",
    "lane_of",
]
