"""Configuration package utilities."""

__all__ = ["ConfigController", "SafetyThresholds", "load_safety_thresholds"]


def __getattr__(name: str):
    if name == "ConfigController":
        from config.controller import ConfigController

        return ConfigController
    if name in ("SafetyThresholds", "load_safety_thresholds"):
        from config import safety

        return getattr(safety, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
