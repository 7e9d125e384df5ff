"""Call contracts for the externally provided detector and embedder models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Protocol, Sequence, TypeVar

from core.errors import ModelNotReady


class Detector(Protocol):
    """Object detector honouring a confidence threshold.

    Returns a list of ``{"box": {"xmin", "ymin", "xmax", "ymax"}, "score",
    "label"}`` mappings.
    """

    def __call__(self, image: Any, *, threshold: float) -> Awaitable[Sequence[dict[str, Any]]]:
        ...


class Embedder(Protocol):
    """Feature extractor returning a fixed-length vector for an image."""

    def __call__(
        self, image: Any, *, pooling: str, normalize: bool
    ) -> Awaitable[Sequence[float]]:
        ...


CapabilityT = TypeVar("CapabilityT")


@dataclass(frozen=True)
class CapabilityHandle(Generic[CapabilityT]):
    """Ready/not-ready wrapper so call sites never check for ``None``."""

    name: str
    capability: CapabilityT | None = None
    reason: str = ""

    @classmethod
    def ready(cls, name: str, capability: CapabilityT) -> "CapabilityHandle[CapabilityT]":
        if capability is None:
            raise ValueError(f"{name} capability must not be None when ready")
        return cls(name=name, capability=capability)

    @classmethod
    def not_ready(cls, name: str, reason: str = "not loaded") -> "CapabilityHandle[CapabilityT]":
        return cls(name=name, capability=None, reason=reason)

    @property
    def is_ready(self) -> bool:
        return self.capability is not None

    def require(self) -> CapabilityT:
        """Return the capability or raise ``ModelNotReady``."""

        if self.capability is None:
            raise ModelNotReady(self.name, self.reason)
        return self.capability
