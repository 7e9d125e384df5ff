"""Process-wide safety thresholds and performance targets."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from core.logging import logger


@dataclass(frozen=True)
class SafetyThresholds:
    """Read-mostly numeric policy consumed by every perception component."""

    # Object detection
    min_detr_score: float = 0.35
    center_lane_band: float = 0.34
    near_area_ratio: float = 0.12
    mid_area_ratio: float = 0.04

    # Embedding search
    min_item_cosine: float = 0.78
    topk_item_candidates: int = 5

    # Loop & performance
    target_frame_ms: float = 120.0
    max_concurrent_infer: int = 1

    # Advisory for the caller's miss-streak heuristic (~10s at 9fps)
    max_silent_frames_warn: int = 90

    def __post_init__(self) -> None:
        for name in ("min_detr_score", "center_lane_band", "min_item_cosine"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if not (0.0 < self.mid_area_ratio < self.near_area_ratio <= 1.0):
            raise ValueError(
                "area ratios must satisfy 0 < mid_area_ratio < near_area_ratio <= 1, "
                f"got mid={self.mid_area_ratio} near={self.near_area_ratio}"
            )
        for name in ("topk_item_candidates", "max_concurrent_infer"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.target_frame_ms <= 0:
            raise ValueError(f"target_frame_ms must be positive, got {self.target_frame_ms}")
        if self.max_silent_frames_warn < 0:
            raise ValueError(
                f"max_silent_frames_warn must be >= 0, got {self.max_silent_frames_warn}"
            )

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> "SafetyThresholds":
        """Build thresholds from a mapping; keys are matched case-insensitively."""

        lowered = {str(key).lower(): value for key, value in values.items()}
        kwargs: dict[str, Any] = {}
        for field_info in fields(cls):
            if field_info.name not in lowered:
                continue
            raw = lowered[field_info.name]
            if isinstance(raw, bool):
                raise ValueError(f"{field_info.name} must be a number, got {raw!r}")
            try:
                number = float(raw)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{field_info.name} is not numeric: {raw!r}") from exc
            if field_info.type in (int, "int"):
                if not number.is_integer():
                    raise ValueError(f"{field_info.name} must be an integer, got {raw!r}")
                kwargs[field_info.name] = int(number)
            else:
                kwargs[field_info.name] = number
        return cls(**kwargs)

    def as_dict(self) -> dict[str, Any]:
        return {field_info.name: getattr(self, field_info.name) for field_info in fields(self)}


def load_safety_thresholds(config: dict[str, Any] | None = None) -> SafetyThresholds:
    """Load thresholds from the ``safety`` config section.

    When ``config`` is omitted the shared ConfigController is consulted; a
    missing config file yields the built-in defaults.
    """

    if config is None:
        try:
            from config import ConfigController

            config = ConfigController.get_instance().get_config()
        except FileNotFoundError:
            logger.warning("[SAFETY] No config file found; using default thresholds")
            config = {}

    thresholds = SafetyThresholds.from_mapping(dict(config.get("safety") or {}))
    logger.debug("[SAFETY] Loaded thresholds %s", thresholds.as_dict())
    return thresholds
