"""Configuration controller for YAML-based settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.logging import logger

SAFETY_KEYS = (
    "min_detr_score",
    "center_lane_band",
    "near_area_ratio",
    "mid_area_ratio",
    "min_item_cosine",
    "topk_item_candidates",
    "target_frame_ms",
    "max_concurrent_infer",
    "max_silent_frames_warn",
)


@dataclass(frozen=True)
class ConfigPaths:
    """Filesystem paths for configuration files."""

    config_dir: Path
    config_file: Path
    override_file: Path


class ConfigController:
    """Singleton controller for loading and updating configuration."""

    _instance: "ConfigController | None" = None

    def __init__(self, config_file: str = "default.yaml") -> None:
        if ConfigController._instance is not None:
            raise RuntimeError("You cannot create another ConfigController class")

        config_dir = Path("config")
        self.paths = ConfigPaths(
            config_dir=config_dir,
            config_file=config_dir / config_file,
            override_file=config_dir / "override.yaml",
        )
        self.config: dict[str, Any] = {}
        self.load_config()

    @classmethod
    def get_instance(cls) -> "ConfigController":
        """Return the singleton instance of the controller."""

        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def load_config(self) -> None:
        """Load configuration from default and override YAML files."""

        with self.paths.config_file.open("r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}

        if self.paths.override_file.exists():
            with self.paths.override_file.open("r", encoding="utf-8") as file:
                override_config = yaml.safe_load(file) or {}
            if override_config:
                config = self._deep_merge(config, override_config)

        self.config = self._normalize_config(config)

    def save_config(self, config: dict[str, Any]) -> None:
        """Persist configuration to override.yaml, archiving previous overrides."""

        if self.paths.override_file.exists():
            archive_index = 1
            archive_file = self._archive_path(archive_index)
            while archive_file.exists():
                archive_index += 1
                archive_file = self._archive_path(archive_index)
            self.paths.override_file.rename(archive_file)

        with self.paths.override_file.open("w", encoding="utf-8") as file:
            yaml.safe_dump(config, file)

    def get_config(self) -> dict[str, Any]:
        """Return the currently loaded configuration."""

        return dict(self.config)

    def set_config(self, config: dict[str, Any]) -> None:
        """Set and persist configuration values."""

        self.config = self._normalize_config(dict(config))
        self.save_config(self.config)

    def _archive_path(self, index: int) -> Path:
        """Return the archive path for a given override index."""

        filename = f"override_{index:04d}.yaml"
        return self.paths.config_dir / filename

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge dictionaries, overriding base values with override values."""

        merged = dict(base)
        for key, value in override.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _normalize_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Lower-case safety keys and fill perception runtime defaults."""

        normalized = dict(config)

        safety_cfg: dict[str, Any] = {}
        for key, value in dict(normalized.get("safety") or {}).items():
            lowered = str(key).lower()
            if lowered in SAFETY_KEYS:
                safety_cfg[lowered] = value
            else:
                logger.warning("[SAFETY] Ignoring unknown safety key %r", key)
        normalized["safety"] = safety_cfg

        normalized["perception"] = normalize_perception_config(normalized.get("perception"))
        return normalized


def normalize_perception_config(section: dict[str, Any] | None) -> dict[str, Any]:
    """Return the ``perception`` section with defaults filled and values cast."""

    perception_cfg = dict(section or {})
    perception_cfg["embed_input_size"] = int(perception_cfg.get("embed_input_size", 384))
    perception_cfg["box_format"] = str(perception_cfg.get("box_format", "percent")).lower()
    deadline = perception_cfg.get("deadline_s")
    perception_cfg["deadline_s"] = float(deadline) if deadline is not None else None
    perception_cfg["metrics_cap"] = int(perception_cfg.get("metrics_cap", 128))
    return perception_cfg
