"""Embedding generation for image regions and vector similarity."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import numpy as np

from core.errors import InferenceFailure, PerceptionError
from core.logging import logger
from core.metrics import MetricsRegistry
from vision.capabilities import CapabilityHandle, Embedder
from vision.frames import Region, resize

DEFAULT_INPUT_SIZE = 384


def cosine_sim(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity over the shared prefix of ``a`` and ``b``."""

    va = np.asarray(a, dtype=np.float64).ravel()
    vb = np.asarray(b, dtype=np.float64).ravel()
    n = min(va.size, vb.size)
    va, vb = va[:n], vb[:n]
    denom = float(np.sqrt(np.dot(va, va)) * np.sqrt(np.dot(vb, vb))) + 1e-8
    return float(np.dot(va, vb)) / denom


def l2_normalize(vector: Sequence[float]) -> np.ndarray:
    array = np.asarray(vector, dtype=np.float32).ravel()
    norm = float(np.linalg.norm(array))
    if norm == 0.0:
        return array
    return array / norm


class EmbeddingGenerator:
    """Resize a region and run the embedder with mean pooling."""

    def __init__(
        self,
        embedder: CapabilityHandle[Embedder],
        metrics: MetricsRegistry,
        *,
        input_size: int = DEFAULT_INPUT_SIZE,
        deadline_s: float | None = None,
    ) -> None:
        if input_size <= 0:
            raise ValueError(f"input_size must be positive, got {input_size}")
        self.embedder = embedder
        self.metrics = metrics
        self.input_size = input_size
        self.deadline_s = deadline_s

    async def generate_embedding(self, region: Region) -> np.ndarray:
        """Return the L2-normalized embedding for ``region``.

        Raises:
            ModelNotReady: the embedder has not been initialized.
            InferenceFailure: the embedder raised, timed out or returned an
                empty or non-finite vector.
        """

        embedder = self.embedder.require()

        with self.metrics.timer("embed_ms") as timing:
            image = resize(region, self.input_size)
            result = await self._call_embedder(embedder, image)
            embedding = self._coerce(result)

        logger.debug("[EMBED] %sD embedding (%.1fms)", embedding.size, timing.elapsed_ms)
        return embedding

    async def _call_embedder(self, embedder: Embedder, image: Any) -> Any:
        try:
            call = embedder(image, pooling="mean", normalize=True)
            if self.deadline_s is not None:
                return await asyncio.wait_for(call, timeout=self.deadline_s)
            return await call
        except PerceptionError:
            raise
        except asyncio.TimeoutError as exc:
            logger.error("[EMBED] Embedder timed out (deadline=%ss)", self.deadline_s)
            raise InferenceFailure(
                self.embedder.name, f"deadline exceeded (deadline={self.deadline_s}s)"
            ) from exc
        except Exception as exc:
            logger.error("[EMBED] Embedding failed: %s", exc)
            raise InferenceFailure(self.embedder.name, str(exc) or type(exc).__name__) from exc

    def _coerce(self, result: Any) -> np.ndarray:
        # feature-extraction pipelines wrap the vector in a tensor with ``.data``
        if isinstance(result, (np.ndarray, list, tuple)):
            data = result
        else:
            data = getattr(result, "data", result)
        try:
            embedding = np.asarray(data, dtype=np.float32).ravel()
        except (TypeError, ValueError) as exc:
            raise InferenceFailure(
                self.embedder.name, f"embedding is not numeric: {type(result).__name__}"
            ) from exc
        if embedding.size == 0 or not np.all(np.isfinite(embedding)):
            raise InferenceFailure(self.embedder.name, "embedding is empty or non-finite")
        return embedding
