"""Perception core facade wiring detection, embedding and search together."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from config.controller import normalize_perception_config
from config.safety import SafetyThresholds, load_safety_thresholds
from core.governor import ConcurrencyGovernor
from core.logging import logger
from core.metrics import MetricSummary, MetricsRegistry
from vision.capabilities import CapabilityHandle, Detector, Embedder
from vision.detections import Hazard, SearchResult
from vision.detector import DetectionOrchestrator
from vision.embedding import DEFAULT_INPUT_SIZE, EmbeddingGenerator
from vision.frames import Frame, Region
from vision.search import ProximitySearchEngine


class PerceptionCore:
    """Owns the metrics registry, governor and thresholds for one session."""

    def __init__(
        self,
        detector: CapabilityHandle[Detector],
        embedder: CapabilityHandle[Embedder],
        *,
        thresholds: SafetyThresholds | None = None,
        metrics: MetricsRegistry | None = None,
        embed_input_size: int = DEFAULT_INPUT_SIZE,
        box_format: str = "percent",
        deadline_s: float | None = None,
    ) -> None:
        self.thresholds = thresholds if thresholds is not None else SafetyThresholds()
        self.metrics = metrics if metrics is not None else MetricsRegistry()
        self.governor = ConcurrencyGovernor(self.thresholds.max_concurrent_infer, name="search")
        self.detection = DetectionOrchestrator(
            detector,
            self.metrics,
            self.thresholds,
            box_format=box_format,
            deadline_s=deadline_s,
        )
        self.embeddings = EmbeddingGenerator(
            embedder,
            self.metrics,
            input_size=embed_input_size,
            deadline_s=deadline_s,
        )
        self.search = ProximitySearchEngine(
            self.detection,
            self.embeddings,
            self.governor,
            self.metrics,
            self.thresholds,
        )

    @classmethod
    def from_config(
        cls,
        detector: CapabilityHandle[Detector],
        embedder: CapabilityHandle[Embedder],
        config: dict[str, Any] | None = None,
    ) -> "PerceptionCore":
        """Build a core from the ``safety`` and ``perception`` config sections."""

        if config is None:
            from config import ConfigController

            config = ConfigController.get_instance().get_config()
        perception_cfg = normalize_perception_config(config.get("perception"))
        return cls(
            detector,
            embedder,
            thresholds=load_safety_thresholds(config),
            metrics=MetricsRegistry(perception_cfg["metrics_cap"]),
            embed_input_size=perception_cfg["embed_input_size"],
            box_format=perception_cfg["box_format"],
            deadline_s=perception_cfg["deadline_s"],
        )

    @property
    def detector(self) -> CapabilityHandle[Detector]:
        return self.detection.detector

    @property
    def embedder(self) -> CapabilityHandle[Embedder]:
        return self.embeddings.embedder

    def attach_models(
        self,
        detector: CapabilityHandle[Detector] | None = None,
        embedder: CapabilityHandle[Embedder] | None = None,
    ) -> None:
        """Swap capability handles, e.g. once a collaborator finishes loading them."""

        if detector is not None:
            self.detection.detector = detector
        if embedder is not None:
            self.embeddings.embedder = embedder

    async def detect_objects(self, frame: Frame) -> list[Hazard]:
        return await self.detection.detect_objects(frame)

    async def generate_embedding(self, region: Region) -> np.ndarray:
        return await self.embeddings.generate_embedding(region)

    async def search_for_item(
        self, frame: Frame, target_embedding: Sequence[float]
    ) -> SearchResult:
        return await self.search.search_for_item(frame, target_embedding)

    async def search_for_any(
        self, frame: Frame, reference_embeddings: Sequence[Sequence[float]]
    ) -> SearchResult:
        return await self.search.search_for_any(frame, reference_embeddings)

    def summary(self, name: str) -> MetricSummary:
        return self.metrics.summary(name)

    def reload_thresholds(self, thresholds: SafetyThresholds) -> None:
        """Swap the policy between calls; refuses while a search is in flight."""

        if self.governor.in_flight:
            raise RuntimeError("cannot reload thresholds while a search is in flight")
        if thresholds.max_concurrent_infer != self.governor.limit:
            self.governor = ConcurrencyGovernor(thresholds.max_concurrent_infer, name="search")
            self.search.governor = self.governor
        self.thresholds = thresholds
        self.detection.thresholds = thresholds
        self.search.thresholds = thresholds
        logger.info("[SAFETY] Thresholds reloaded")
