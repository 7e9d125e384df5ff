"""Command-line entry point for running diagnostics."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
import tempfile

import numpy as np

from config.diagnostics import probe as config_probe
from core.diagnostics import probe as core_probe
from core.logging import enable_file_logging
from diagnostics.models import DiagnosticStatus
from diagnostics.runner import format_results, run_diagnostics, worst_status
from vision.capabilities import CapabilityHandle
from vision.detector import raw_detection
from vision.diagnostics import probe as vision_probe
from vision.frames import Frame
from vision.offline import FakeDetector, FakeEmbedder
from vision.pipeline import PerceptionCore

OFFLINE_CONFIG = """\
safety:
  MIN_DETR_SCORE: 0.35
  TOPK_ITEM_CANDIDATES: 5
  MAX_CONCURRENT_INFER: 1
"""


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = argparse.ArgumentParser(description="Run perception diagnostics probes.")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Run probes against a temporary directory and offline models.",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        help="Optional base directory holding config/default.yaml.",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=3,
        help="Synthetic frames pushed through the offline core.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path for a background file log.",
    )
    return parser.parse_args(argv)


def build_offline_core() -> PerceptionCore:
    """Return a core wired to offline models with one synthetic detection."""

    detector = FakeDetector(detections=[raw_detection("backpack", 0.9, (100, 100, 200, 150))])
    return PerceptionCore(
        CapabilityHandle.ready("detector", detector),
        CapabilityHandle.ready("embedder", FakeEmbedder()),
        box_format="pixels",
    )


async def exercise_core(core: PerceptionCore, frames: int) -> None:
    """Push synthetic frames through detection and search to populate telemetry."""

    pixels = np.zeros((480, 640, 4), dtype=np.uint8)
    pixels[100:250, 100:300] = (180, 40, 40, 255)
    frame = Frame.from_array(pixels)
    reference = await core.generate_embedding(frame.pixels[100:250, 100:300])
    core.metrics.reset("embed_ms")
    for _ in range(max(frames, 0)):
        await core.detect_objects(frame)
        await core.search_for_item(frame, reference)


def main(argv: list[str] | None = None) -> int:
    """Run diagnostics and return an exit code."""

    args = parse_args(argv)
    base_dir = args.base_dir
    if args.log_file is not None:
        enable_file_logging(args.log_file)

    if args.offline and base_dir is None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp_base = Path(tmp_dir)

            config_dir = tmp_base / "config"
            config_dir.mkdir(parents=True, exist_ok=True)
            (config_dir / "default.yaml").write_text(OFFLINE_CONFIG, encoding="utf-8")

            core = build_offline_core()
            asyncio.run(exercise_core(core, args.frames))

            def config_probe_offline():
                return config_probe(base_dir=tmp_base)

            def core_probe_offline():
                return core_probe()

            def vision_probe_offline():
                return vision_probe(core)

            results = run_diagnostics(
                [
                    config_probe_offline,
                    core_probe_offline,
                    vision_probe_offline,
                ]
            )
    else:
        def config_probe_with_base():
            return config_probe(base_dir=base_dir)

        def core_probe_live():
            return core_probe()

        results = run_diagnostics(
            [
                config_probe_with_base,
                core_probe_live,
            ]
        )

    print(format_results(results))

    return 1 if worst_status(results) is DiagnosticStatus.FAIL else 0


if __name__ == "__main__":
    raise SystemExit(main())
