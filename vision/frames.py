"""Frame buffers and the crop/resize helpers used before inference."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class Frame:
    """Caller-owned camera frame; ``pixels`` is an ``H x W x C`` uint8 array."""

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"frame size must be positive, got {self.width}x{self.height}")
        shape = getattr(self.pixels, "shape", None)
        if shape is None or len(shape) != 3 or shape[0] != self.height or shape[1] != self.width:
            raise ValueError(
                f"pixel buffer shape {shape} does not match {self.width}x{self.height}"
            )
        if shape[2] not in (3, 4):
            raise ValueError(f"expected RGB or RGBA channels, got {shape[2]}")

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "Frame":
        array = np.asarray(pixels, dtype=np.uint8)
        return cls(width=int(array.shape[1]), height=int(array.shape[0]), pixels=array)

    @classmethod
    def blank(cls, width: int, height: int, channels: int = 4) -> "Frame":
        return cls(width=width, height=height, pixels=np.zeros((height, width, channels), np.uint8))

    @property
    def area(self) -> int:
        return self.width * self.height


Region = Union[Frame, np.ndarray, Image.Image]


def to_image(region: Region) -> Image.Image:
    """Convert a frame, array or image into an RGB Pillow image."""

    if isinstance(region, Image.Image):
        image = region
    else:
        array = region.pixels if isinstance(region, Frame) else np.asarray(region)
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)
        image = Image.fromarray(array)
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image


def crop(frame: Frame, bbox: tuple[int, int, int, int]) -> np.ndarray:
    """Return a copy of the bbox region, clipped to the frame."""

    x, y, w, h = (int(v) for v in bbox)
    x0 = min(max(x, 0), frame.width)
    y0 = min(max(y, 0), frame.height)
    x1 = min(max(x + w, x0), frame.width)
    y1 = min(max(y + h, y0), frame.height)
    return frame.pixels[y0:y1, x0:x1].copy()


def resize(region: Region, size: int | tuple[int, int]) -> Image.Image:
    """Resize a region to the embedder's fixed input size."""

    target: Any = (size, size) if isinstance(size, int) else tuple(size)
    return to_image(region).resize(target, Image.Resampling.BILINEAR)
