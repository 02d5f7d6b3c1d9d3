"""
Pixel enhancement before vision OCR. Three ordered stages on one PixelBuffer:

A. Luminance normalization: BT.709 grayscale, then histogram stretch to 0..255 using
   the buffer's own min/max gray (flat image → all 0).
B. Adaptive clipping: stretched gray > clip_high → 255, < clip_low → 0, in-between unchanged.
C. Convolution sharpen: 3x3 high-pass kernel on R, G, B; clamp to 0..255; alpha untouched.
   Out-of-bounds taps are skipped without renormalizing, so border pixels are not balanced
   like interior ones (a flat field gets 2c on edges and 3c in corners before clamping).

A and B are computed in float and quantized once, so clipping sees the exact stretched value.
"""
import logging
from dataclasses import dataclass

import numpy as np

from docintake.config import DEFAULT_SHARPEN_KERNEL
from docintake.services.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

# ITU-R BT.709 luma weights (R, G, B)
LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)


@dataclass(frozen=True)
class EnhancementConfig:
    clip_low: int = 50
    clip_high: int = 200
    sharpen_kernel: tuple[float, ...] = DEFAULT_SHARPEN_KERNEL

    @classmethod
    def from_settings(cls, s) -> "EnhancementConfig":
        return cls(
            clip_low=s.clip_low,
            clip_high=s.clip_high,
            sharpen_kernel=tuple(s.sharpen_kernel),
        )


def luminance(buffer: PixelBuffer) -> np.ndarray:
    """Per-pixel BT.709 gray as float64 (height, width)."""
    rgb = buffer.rgb.astype(np.float64)
    r, g, b = LUMA_WEIGHTS
    return r * rgb[:, :, 0] + g * rgb[:, :, 1] + b * rgb[:, :, 2]


def stretch_histogram(gray: np.ndarray) -> np.ndarray:
    """(gray - min) / (max - min or 1) * 255. Flat input maps to all zeros."""
    gray = np.asarray(gray, dtype=np.float64)
    if gray.size == 0:
        return gray.copy()
    lo = float(gray.min())
    hi = float(gray.max())
    span = (hi - lo) or 1.0
    return (gray - lo) / span * 255.0


def clip_levels(gray: np.ndarray, low: int = 50, high: int = 200) -> np.ndarray:
    """Push > high to pure white and < low to pure black; [low, high] passes through."""
    out = np.array(gray, dtype=np.float64, copy=True)
    out[out > high] = 255.0
    out[out < low] = 0.0
    return out


def _normalized_gray(buffer: PixelBuffer, config: EnhancementConfig | None) -> np.ndarray:
    """Stages A (+ B) as one quantized 0..255 gray plane."""
    gray = stretch_histogram(luminance(buffer))
    if config is not None:
        gray = clip_levels(gray, config.clip_low, config.clip_high)
    return np.clip(np.rint(gray), 0, 255)


def _gray_to_rgb(gray: np.ndarray) -> np.ndarray:
    return np.broadcast_to(gray[:, :, None], gray.shape + (3,))


def normalize_luminance(buffer: PixelBuffer, config: EnhancementConfig | None = None) -> PixelBuffer:
    """Stages A (+ B when config is given): gray written to R, G and B; alpha kept."""
    return buffer.with_rgb(_gray_to_rgb(_normalized_gray(buffer, config)))


def convolve(plane: np.ndarray, kernel: tuple[float, ...] | list[float]) -> np.ndarray:
    """
    Unclamped convolution of an (h, w) plane or each channel of an (h, w, c) array with a square
    kernel (row-major weights). Taps that fall outside the image contribute nothing.
    """
    weights = np.asarray(kernel, dtype=np.float64)
    side = int(round(weights.size ** 0.5))
    if side * side != weights.size or side % 2 == 0:
        raise ValueError(f"kernel must be an odd square, got {weights.size} weights")
    weights = weights.reshape(side, side)
    half = side // 2
    src = np.asarray(plane, dtype=np.float64)
    height, width = src.shape[:2]
    pad = ((half, half), (half, half)) + ((0, 0),) * (src.ndim - 2)
    padded = np.pad(src, pad, mode="constant", constant_values=0.0)
    acc = np.zeros_like(src)
    for ky in range(side):
        for kx in range(side):
            wt = weights[ky, kx]
            if wt == 0:
                continue
            acc += wt * padded[ky:ky + height, kx:kx + width]
    return acc


def sharpen(buffer: PixelBuffer, kernel: tuple[float, ...] = DEFAULT_SHARPEN_KERNEL) -> PixelBuffer:
    """Stage C: high-pass sharpen, clamped to 0..255; alpha passes through."""
    return buffer.with_rgb(convolve(buffer.rgb, kernel))


def enhance_for_ocr(buffer: PixelBuffer, config: EnhancementConfig | None = None) -> PixelBuffer:
    """Full pipeline A → B → C. Returns a new buffer with the same dimensions."""
    config = config or EnhancementConfig()
    # R, G and B are equal after stage A, so the kernel runs once on the gray plane.
    sharp = convolve(_normalized_gray(buffer, config), config.sharpen_kernel)
    enhanced = buffer.with_rgb(_gray_to_rgb(sharp))
    logger.debug("enhance_for_ocr: %sx%s px", buffer.width, buffer.height)
    return enhanced
