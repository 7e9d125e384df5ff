"""Stable detection, hazard and search-result schemas for the perception core.

Bounding boxes are integer pixel rectangles in the source frame, represented
as ``(x, y, width, height)`` with the origin at the top-left corner.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class HazardType(str, Enum):
    """Danger category announced to the user."""

    VEHICLE = "vehicle"
    BIKE = "bike"
    DOG = "dog"
    POLE = "pole"
    BENCH = "bench"
    CONE = "cone"
    WALL = "wall"
    PERSON = "person"
    STAIR_LIKE = "stair_like"
    DROPOFF_LIKE = "dropoff_like"
    UNKNOWN = "unknown"


class Lane(str, Enum):
    """Horizontal zone relative to the direction of travel."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class Distance(str, Enum):
    """Coarse distance band derived from the bbox/frame area ratio."""

    NEAR = "near"
    MID = "mid"
    FAR = "far"


@dataclass(frozen=True)
class Detection:
    """Single object detection in pixel space."""

    bbox: tuple[int, int, int, int]
    score: float
    label: str

    def __post_init__(self) -> None:
        if not (0.0 <= self.score <= 1.0):
            raise ValueError(f"score must be in [0, 1], got {self.score}")
        if len(self.bbox) != 4:
            raise ValueError(f"bbox must have 4 values, got {self.bbox!r}")
        if self.bbox[2] < 0 or self.bbox[3] < 0:
            raise ValueError(f"bbox width/height must be >= 0, got {self.bbox!r}")

    @property
    def x_center(self) -> float:
        return self.bbox[0] + self.bbox[2] / 2

    @property
    def area(self) -> int:
        return self.bbox[2] * self.bbox[3]


@dataclass(frozen=True)
class Hazard(Detection):
    """Detection classified into a hazard type, lane and distance band."""

    hazard_type: HazardType = HazardType.UNKNOWN
    lane: Lane = Lane.CENTER
    distance: Distance = Distance.FAR


@dataclass(frozen=True)
class ItemHit(Hazard):
    """Best candidate region matching a reference embedding."""

    similarity: float = 0.0
    reference_index: int = 0

    def __post_init__(self) -> None:
        super().__post_init__()
        # float32 dot products can overshoot 1.0 by a rounding step
        if not (-1.0 <= self.similarity <= 1.0 + 1e-6):
            raise ValueError(f"similarity must be in [-1, 1], got {self.similarity}")

    @classmethod
    def from_hazard(
        cls, hazard: Hazard, similarity: float, reference_index: int = 0
    ) -> "ItemHit":
        return cls(
            bbox=hazard.bbox,
            score=hazard.score,
            label=hazard.label,
            hazard_type=hazard.hazard_type,
            lane=hazard.lane,
            distance=hazard.distance,
            similarity=float(similarity),
            reference_index=reference_index,
        )


@dataclass(frozen=True)
class NoMatch:
    """Search completed but nothing cleared the similarity bar."""

    reason: str = "below_threshold"
    candidates_checked: int = 0

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class BackpressureReject:
    """Search skipped because the concurrency governor had no free slot."""

    governor: str = ""
    in_flight: int = 0

    def __bool__(self) -> bool:
        return False


SearchResult = Union[ItemHit, NoMatch, BackpressureReject]
