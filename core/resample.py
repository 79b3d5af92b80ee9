"""
Holomorph — Bilinear Resampler
Samples an (H, W, 3) uint8 image at continuous coordinates.

Neighbors are x0 = floor(x), x1 = min(x0 + 1, W - 1) (same for y), so reads
never leave the image. Blending is horizontal first, then vertical, and each
lerp truncates to uint8 rather than rounding.
"""

import numpy as np

from core.mapper import FALLBACK_COLOR, map_coordinates


def _lerp(a: np.ndarray, b: np.ndarray, w: np.ndarray) -> np.ndarray:
    """(1 - w) * a + w * b, truncated to the 8-bit channel range."""
    value = (1.0 - w) * a.astype(np.float64) + w * b.astype(np.float64)
    return np.clip(np.trunc(value), 0, 255).astype(np.uint8)


def bilinear_remap(image: np.ndarray, map_x: np.ndarray, map_y: np.ndarray) -> np.ndarray:
    """Sample image at every (map_x, map_y).

    Args:
        image: (H, W, 3) uint8 source.
        map_x: Float source x per output pixel, any shape S, values in [0, W-1].
        map_y: Float source y per output pixel, same shape S.

    Returns:
        (*S, 3) uint8 array.
    """
    h, w = image.shape[:2]
    map_x = np.clip(np.asarray(map_x, dtype=np.float64), 0.0, w - 1.0)
    map_y = np.clip(np.asarray(map_y, dtype=np.float64), 0.0, h - 1.0)

    x0 = np.floor(map_x).astype(np.intp)
    y0 = np.floor(map_y).astype(np.intp)
    x1 = np.minimum(x0 + 1, w - 1)
    y1 = np.minimum(y0 + 1, h - 1)

    wx = (map_x - x0)[..., np.newaxis]
    wy = (map_y - y0)[..., np.newaxis]

    top = _lerp(image[y0, x0], image[y0, x1], wx)
    bottom = _lerp(image[y1, x0], image[y1, x1], wx)
    return _lerp(top, bottom, wy)


def bilinear_sample(image: np.ndarray, x: float, y: float) -> tuple[int, int, int]:
    """Sample a single continuous coordinate. Returns an (r, g, b) tuple."""
    pixel = bilinear_remap(image, np.array([x]), np.array([y]))[0]
    return tuple(int(c) for c in pixel)


def remap_image(image: np.ndarray, tree) -> np.ndarray:
    """Direct path: map every pixel through the expression and sample bilinearly.

    Args:
        image: (H, W, 3) uint8 source.
        tree: Parsed expression.

    Returns:
        (H, W, 3) uint8 output; singular pixels are FALLBACK_COLOR.
    """
    h, w = image.shape[:2]
    map_x, map_y, fallback = map_coordinates(tree, w, h)
    result = bilinear_remap(image, map_x, map_y)
    result[fallback] = FALLBACK_COLOR
    return result
