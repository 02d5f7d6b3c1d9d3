"""
PixelBuffer: RGBA samples of one rendered page or decoded image.
Dimensions are fixed at construction; enhancement stages build new buffers instead of mutating.
"""
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class PixelBuffer:
    width: int
    height: int
    samples: np.ndarray  # (height, width, 4) uint8, RGBA

    def __post_init__(self) -> None:
        if self.samples.shape != (self.height, self.width, 4):
            raise ValueError(
                f"samples shape {self.samples.shape} does not match {self.height}x{self.width}x4"
            )
        if self.samples.dtype != np.uint8:
            raise ValueError(f"samples must be uint8, got {self.samples.dtype}")

    @classmethod
    def from_array(cls, samples: np.ndarray) -> "PixelBuffer":
        """Wrap an (h, w, 3|4) array; RGB gets an opaque alpha channel. Always copies."""
        arr = np.asarray(samples)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"expected (h, w, 3|4) array, got shape {arr.shape}")
        arr = arr.astype(np.uint8, copy=True)
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        height, width = arr.shape[:2]
        return cls(width=width, height=height, samples=arr)

    @property
    def rgb(self) -> np.ndarray:
        return self.samples[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.samples[:, :, 3]

    def with_rgb(self, rgb: np.ndarray) -> "PixelBuffer":
        """New buffer with the given RGB values (rounded, clamped to 0..255) and this buffer's alpha."""
        rgb = np.clip(np.rint(np.asarray(rgb, dtype=np.float64)), 0, 255).astype(np.uint8)
        if rgb.shape != (self.height, self.width, 3):
            raise ValueError(f"rgb shape {rgb.shape} does not match {self.height}x{self.width}x3")
        out = np.empty_like(self.samples)
        out[:, :, :3] = rgb
        out[:, :, 3] = self.alpha
        return PixelBuffer(width=self.width, height=self.height, samples=out)
