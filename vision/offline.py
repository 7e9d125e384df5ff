"""Offline detector and embedder backends for diagnostics and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from vision.embedding import l2_normalize


def _image_features(image: Any) -> np.ndarray:
    pixels = np.asarray(image, dtype=np.float32) / 255.0
    channels = pixels.reshape(-1, pixels.shape[-1]) if pixels.ndim == 3 else pixels.reshape(-1, 1)
    return np.concatenate([channels.mean(axis=0), channels.std(axis=0), [1.0]])


@dataclass
class FakeDetector:
    """Return canned detector payloads, honouring the confidence threshold."""

    detections: list[dict[str, Any]] = field(default_factory=list)
    error: Exception | None = None
    calls: int = 0
    last_threshold: float | None = None

    async def __call__(self, image: Any, *, threshold: float) -> list[dict[str, Any]]:
        self.calls += 1
        self.last_threshold = threshold
        if self.error is not None:
            raise self.error
        return [item for item in self.detections if float(item["score"]) >= threshold]


@dataclass
class FakeEmbedder:
    """Return queued vectors in call order, or colour statistics of the image."""

    vectors: list[list[float]] = field(default_factory=list)
    error: Exception | None = None
    calls: int = 0
    image_sizes: list[tuple[int, int]] = field(default_factory=list)

    async def __call__(self, image: Any, *, pooling: str, normalize: bool) -> list[float]:
        self.calls += 1
        self.image_sizes.append(tuple(getattr(image, "size", (0, 0))))
        if self.error is not None:
            raise self.error
        if self.vectors:
            vector = np.asarray(self.vectors[(self.calls - 1) % len(self.vectors)], np.float32)
        else:
            vector = _image_features(image)
        if normalize:
            vector = l2_normalize(vector)
        return vector.tolist()
