"""Error taxonomy for the perception core."""

from __future__ import annotations


class PerceptionError(Exception):
    """Base class for failures raised by perception components."""


class ModelNotReady(PerceptionError):
    """Raised when a capability is called before it has been initialized."""

    def __init__(self, capability: str, reason: str = "") -> None:
        self.capability = capability
        self.reason = reason
        message = f"{capability} is not ready"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InferenceFailure(PerceptionError):
    """Raised when a capability call throws or returns malformed output.

    The original exception, when there is one, is attached as ``__cause__``.
    """

    def __init__(self, capability: str, message: str) -> None:
        self.capability = capability
        super().__init__(f"{capability} inference failed: {message}")
