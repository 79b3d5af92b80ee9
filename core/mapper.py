"""
Holomorph — Coordinate Mapper
Inverse mapping: for every output pixel, find the source coordinate it samples.

Per pixel:
    1. Center the pixel on the complex plane: pixel (W // 2, H // 2) is 0+0i
       for every size, and the edges sit at roughly +/-1 on each axis.
    2. Evaluate the expression there.
    3. Results beyond SINGULARITY_THRESHOLD (or inf/NaN) are marked fallback.
    4. Scale the result back to pixel space.
    5. Fold out-of-range coordinates back in with the quadrant wrap:
       tile to [0, 2W), then reflect the upper half, so the border shows a
       mirrored copy instead of a clamped edge.
"""

import numpy as np

from core.evaluator import evaluate

SINGULARITY_THRESHOLD = 1e6
FALLBACK_COLOR = (0, 0, 0)


def half_extent(size: int) -> tuple[int, int]:
    """(center, scale) along one axis. Pixel size // 2 maps to exactly 0.

    Both are integers so odd sizes keep a true center pixel; the scale is
    at least 1 for single-pixel axes.
    """
    center = size // 2
    return center, max(center, 1)


def complex_grid(width: int, height: int) -> np.ndarray:
    """Centered complex coordinate of every pixel, shape (H, W) complex128."""
    cx, sx = half_extent(width)
    cy, sy = half_extent(height)
    xs = (np.arange(width, dtype=np.float64) - cx) / sx
    ys = (np.arange(height, dtype=np.float64) - cy) / sy
    return xs[np.newaxis, :] + 1j * ys[:, np.newaxis]


def singular_mask(values: np.ndarray) -> np.ndarray:
    """True where a mapped value is a singularity (too large, inf, or NaN)."""
    re = np.real(values)
    im = np.imag(values)
    finite = np.isfinite(re) & np.isfinite(im)
    with np.errstate(invalid="ignore"):
        too_big = (np.abs(re) > SINGULARITY_THRESHOLD) | (np.abs(im) > SINGULARITY_THRESHOLD)
    return too_big | ~finite


def wrap_coordinate(values: np.ndarray, size: int) -> np.ndarray:
    """Quadrant wrap along one axis.

    Extends into [0, 2*size) by modulo, reflects anything >= size back with
    size - (v mod size), then clips to [0, size - 1].
    """
    values = np.asarray(values, dtype=np.float64)
    extended = np.mod(values, 2.0 * size)
    folded = np.where(extended >= size, size - np.mod(extended, size), extended)
    return np.clip(folded, 0.0, size - 1.0)


def map_coordinates(tree, width: int, height: int):
    """Compute the source coordinate of every output pixel.

    Args:
        tree: Parsed expression.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        (map_x, map_y, fallback): float64 (H, W) source coordinates and a
        bool (H, W) mask of pixels to render with FALLBACK_COLOR. Fallback
        pixels hold 0.0 in both maps.
    """
    grid = complex_grid(width, height)
    result = evaluate(tree, grid)

    fallback = singular_mask(result)
    result = np.where(fallback, 0.0 + 0.0j, result)

    cx, sx = half_extent(width)
    cy, sy = half_extent(height)
    orig_x = np.real(result) * sx + cx
    orig_y = np.imag(result) * sy + cy

    map_x = wrap_coordinate(orig_x, width)
    map_y = wrap_coordinate(orig_y, height)
    map_x[fallback] = 0.0
    map_y[fallback] = 0.0
    return map_x, map_y, fallback


def map_point(tree, x: int, y: int, width: int, height: int):
    """Source coordinate for a single output pixel, or None for fallback."""
    cx, sx = half_extent(width)
    cy, sy = half_extent(height)
    value = evaluate(tree, complex((x - cx) / sx, (y - cy) / sy))
    if singular_mask(np.asarray(value)):
        return None
    src_x = wrap_coordinate(value.real * sx + cx, width)
    src_y = wrap_coordinate(value.imag * sy + cy, height)
    return float(src_x), float(src_y)
