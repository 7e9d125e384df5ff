"""Detection orchestration: detector call, pixel conversion and hazard classification."""

from __future__ import annotations

import asyncio
import math
from typing import Any, Mapping, Sequence

from config.safety import SafetyThresholds
from core.errors import InferenceFailure, PerceptionError
from core.logging import logger
from core.metrics import MetricsRegistry
from vision.capabilities import CapabilityHandle, Detector
from vision.detections import Detection, Hazard
from vision.frames import Frame, to_image
from vision.hazards import classify

BOX_FORMATS = ("percent", "normalized", "pixels")
_BOX_SCALE = {"percent": 100.0, "normalized": 1.0, "pixels": None}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class DetectionOrchestrator:
    """Run the detector on a frame and return classified hazards."""

    def __init__(
        self,
        detector: CapabilityHandle[Detector],
        metrics: MetricsRegistry,
        thresholds: SafetyThresholds,
        *,
        box_format: str = "percent",
        deadline_s: float | None = None,
    ) -> None:
        if box_format not in BOX_FORMATS:
            raise ValueError(f"box_format must be one of {BOX_FORMATS}, got {box_format!r}")
        self.detector = detector
        self.metrics = metrics
        self.thresholds = thresholds
        self.box_format = box_format
        self.deadline_s = deadline_s

    async def detect_objects(self, frame: Frame) -> list[Hazard]:
        """Detect and classify objects in ``frame``.

        Raises:
            ModelNotReady: the detector has not been initialized.
            InferenceFailure: the detector raised, timed out or returned
                malformed output.
        """

        detector = self.detector.require()
        thresholds = self.thresholds

        with self.metrics.timer("detect_ms") as timing:
            raw = await self._call_detector(detector, frame, thresholds.min_detr_score)
            hazards = [
                classify(detection, frame.width, frame.height, thresholds)
                for detection in self._convert_raw_detections(raw, frame, thresholds.min_detr_score)
            ]

        logger.debug("[DETECT] %s objects (%.1fms)", len(hazards), timing.elapsed_ms)
        return hazards

    async def _call_detector(
        self, detector: Detector, frame: Frame, threshold: float
    ) -> Sequence[Any]:
        image = to_image(frame)
        try:
            call = detector(image, threshold=threshold)
            if self.deadline_s is not None:
                raw = await asyncio.wait_for(call, timeout=self.deadline_s)
            else:
                raw = await call
        except PerceptionError:
            raise
        except asyncio.TimeoutError as exc:
            logger.error("[DETECT] Detector timed out (deadline=%ss)", self.deadline_s)
            raise InferenceFailure(
                self.detector.name, f"deadline exceeded (deadline={self.deadline_s}s)"
            ) from exc
        except Exception as exc:
            logger.error("[DETECT] Detection failed: %s", exc)
            raise InferenceFailure(self.detector.name, str(exc) or type(exc).__name__) from exc

        if raw is None or isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
            raise InferenceFailure(
                self.detector.name, f"expected a list of detections, got {type(raw).__name__}"
            )
        return raw

    def _convert_raw_detections(
        self, raw: Sequence[Any], frame: Frame, min_score: float
    ) -> list[Detection]:
        scale = _BOX_SCALE[self.box_format]
        detections: list[Detection] = []
        for item in raw:
            try:
                box = item["box"]
                score = float(item["score"])
                label = str(item["label"])
                xmin, ymin, xmax, ymax = (
                    float(box[key]) for key in ("xmin", "ymin", "xmax", "ymax")
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise InferenceFailure(
                    self.detector.name, f"malformed detection payload: {item!r}"
                ) from exc

            if not (0.0 <= score <= 1.0) or not all(
                math.isfinite(v) for v in (xmin, ymin, xmax, ymax)
            ):
                raise InferenceFailure(
                    self.detector.name, f"detection values out of range: {item!r}"
                )
            if score < min_score:
                continue

            detections.append(
                Detection(
                    bbox=self._to_pixel_bbox(xmin, ymin, xmax, ymax, frame, scale),
                    score=score,
                    label=label,
                )
            )
        return detections

    @staticmethod
    def _to_pixel_bbox(
        xmin: float,
        ymin: float,
        xmax: float,
        ymax: float,
        frame: Frame,
        scale: float | None,
    ) -> tuple[int, int, int, int]:
        if scale is not None:
            xmin, xmax = xmin * frame.width / scale, xmax * frame.width / scale
            ymin, ymax = ymin * frame.height / scale, ymax * frame.height / scale
        x0 = min(max(_round_half_up(min(xmin, xmax)), 0), frame.width)
        y0 = min(max(_round_half_up(min(ymin, ymax)), 0), frame.height)
        x1 = min(max(_round_half_up(max(xmin, xmax)), 0), frame.width)
        y1 = min(max(_round_half_up(max(ymin, ymax)), 0), frame.height)
        return (x0, y0, x1 - x0, y1 - y0)


def raw_detection(label: str, score: float, bbox: Sequence[float]) -> Mapping[str, Any]:
    """Build a pixel-space detector payload from an ``(x, y, w, h)`` box.

    Used by offline capabilities and tests that speak the detector contract.
    """

    x, y, w, h = (float(v) for v in bbox)
    return {
        "box": {"xmin": x, "ymin": y, "xmax": x + w, "ymax": y + h},
        "score": float(score),
        "label": label,
    }
