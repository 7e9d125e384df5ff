"""Proximity search: find the detected region closest to a taught item."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from config.safety import SafetyThresholds
from core.governor import ConcurrencyGovernor
from core.logging import logger
from core.metrics import MetricsRegistry
from vision.detections import BackpressureReject, ItemHit, NoMatch, SearchResult
from vision.detector import DetectionOrchestrator
from vision.embedding import EmbeddingGenerator, cosine_sim
from vision.frames import Frame, crop

MIN_CROP_PX = 8


class ProximitySearchEngine:
    """Re-rank detector proposals by embedding similarity to a reference."""

    def __init__(
        self,
        detection: DetectionOrchestrator,
        embeddings: EmbeddingGenerator,
        governor: ConcurrencyGovernor,
        metrics: MetricsRegistry,
        thresholds: SafetyThresholds,
    ) -> None:
        self.detection = detection
        self.embeddings = embeddings
        self.governor = governor
        self.metrics = metrics
        self.thresholds = thresholds

    async def search_for_item(
        self, frame: Frame, target_embedding: Sequence[float]
    ) -> SearchResult:
        """Return the best match for ``target_embedding`` in ``frame``.

        Returns ``BackpressureReject`` without doing any work when another
        search holds the governor slot, and ``NoMatch`` when no candidate
        clears ``min_item_cosine``. Detector and embedder failures propagate.
        """

        return await self._search(frame, [target_embedding])

    async def search_for_any(
        self, frame: Frame, reference_embeddings: Sequence[Sequence[float]]
    ) -> SearchResult:
        """Search against several references of one item (one per teach photo).

        Each candidate scores the maximum similarity over the references.
        """

        if len(reference_embeddings) == 0:
            raise ValueError("reference_embeddings must not be empty")
        return await self._search(frame, reference_embeddings)

    async def _search(
        self, frame: Frame, references: Sequence[Sequence[float]]
    ) -> SearchResult:
        with self.governor.slot() as acquired:
            if not acquired:
                return BackpressureReject(
                    governor=self.governor.name, in_flight=self.governor.in_flight
                )

            with self.metrics.timer("search_ms") as timing:
                best, checked = await self._scan(frame, references)

            if best is not None:
                logger.info(
                    "[SEARCH] Item found: %s (%.1f%% match, %.1fms)",
                    best.label,
                    best.similarity * 100,
                    timing.elapsed_ms,
                )
                return best

            reason = "below_threshold" if checked else "no_candidates"
            logger.debug("[SEARCH] No match (%s, %s checked)", reason, checked)
            return NoMatch(reason=reason, candidates_checked=checked)

    async def _scan(
        self, frame: Frame, references: Sequence[Sequence[float]]
    ) -> tuple[ItemHit | None, int]:
        thresholds = self.thresholds
        hazards = await self.detection.detect_objects(frame)
        candidates = sorted(hazards, key=lambda hazard: hazard.score, reverse=True)
        candidates = candidates[: thresholds.topk_item_candidates]

        best: ItemHit | None = None
        checked = 0
        for candidate in candidates:
            _, _, w, h = candidate.bbox
            if w < MIN_CROP_PX or h < MIN_CROP_PX:
                continue

            embedding = await self.embeddings.generate_embedding(crop(frame, candidate.bbox))
            checked += 1
            similarity, reference_index = self._best_reference(embedding, references)

            if similarity >= thresholds.min_item_cosine:
                # ties keep the earlier, higher-confidence candidate
                if best is None or similarity > best.similarity:
                    best = ItemHit.from_hazard(candidate, similarity, reference_index)
        return best, checked

    @staticmethod
    def _best_reference(
        embedding: np.ndarray, references: Sequence[Sequence[float]]
    ) -> tuple[float, int]:
        best_similarity = -np.inf
        best_index = 0
        for index, reference in enumerate(references):
            similarity = cosine_sim(reference, embedding)
            if similarity > best_similarity:
                best_similarity = similarity
                best_index = index
        return float(best_similarity), best_index
