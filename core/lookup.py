"""
Holomorph — Lookup Table
Precomputes the pixel mapping once per (expression, width, height) so video
frames reuse it without re-evaluating the expression.

Each output pixel stores the row-major index (y * W + x) of its nearest
source pixel, or FALLBACK_INDEX for singular pixels. Applying the table is a
pure gather. Nearest-neighbor trades the bilinear smoothness of the direct
path for an integer table that can be cached.
"""

import numpy as np

from core.mapper import FALLBACK_COLOR, map_coordinates
from core.safety import DimensionMismatch, validate_dimensions

FALLBACK_INDEX = -1


class LookupTable:
    """Immutable per-pixel source-index table.

    Attributes:
        width, height: Frame dimensions this table was built for.
        indices: Read-only int64 array of width * height source indices.
    """

    def __init__(self, indices: np.ndarray, width: int, height: int):
        indices = np.array(indices, dtype=np.int64).reshape(-1)
        if indices.size != width * height:
            raise DimensionMismatch(
                f"Lookup table has {indices.size} entries, expected {width}x{height}"
            )
        indices.flags.writeable = False
        self.indices = indices
        self.width = width
        self.height = height

    @classmethod
    def build(cls, tree, width: int, height: int) -> "LookupTable":
        """Run the coordinate mapper once and snap every pixel to its nearest source."""
        validate_dimensions(width, height)
        map_x, map_y, fallback = map_coordinates(tree, width, height)
        sx = np.clip(np.floor(map_x + 0.5), 0, width - 1).astype(np.int64)
        sy = np.clip(np.floor(map_y + 0.5), 0, height - 1).astype(np.int64)
        indices = sy * width + sx
        indices[fallback] = FALLBACK_INDEX
        return cls(indices, width, height)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)

    def get(self, x: int, y: int):
        """Mapped source index for output pixel (x, y), or None outside the table."""
        if 0 <= x < self.width and 0 <= y < self.height:
            return int(self.indices[y * self.width + x])
        return None

    def fallback_fraction(self) -> float:
        """Share of output pixels rendered with the fallback color."""
        return float(np.count_nonzero(self.indices == FALLBACK_INDEX)) / self.indices.size

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Gather a new frame through the table.

        Args:
            frame: (H, W, 3) uint8 source, same size the table was built for.

        Returns:
            New (H, W, 3) uint8 frame.

        Raises:
            DimensionMismatch: If the frame size differs from the table.
        """
        if frame.ndim != 3 or frame.shape[:2] != self.shape or frame.shape[2] != 3:
            raise DimensionMismatch(
                f"Frame shape {frame.shape} does not match lookup table "
                f"({self.height}, {self.width}, 3)"
            )
        flat = frame.reshape(-1, 3)
        valid = self.indices != FALLBACK_INDEX
        out = np.empty_like(flat)
        out[valid] = flat[self.indices[valid]]
        out[~valid] = FALLBACK_COLOR
        return out.reshape(self.height, self.width, 3)


class LookupCache:
    """Holds the current table and rebuilds it only when the expression or
    resolution changes. Used by the video and webcam loops."""

    def __init__(self):
        self._key = None
        self._table = None
        self.builds = 0

    def get(self, tree, width: int, height: int) -> LookupTable:
        key = (tree, width, height)
        if self._table is None or self._key != key:
            self._table = LookupTable.build(tree, width, height)
            self._key = key
            self.builds += 1
        return self._table

    def clear(self):
        self._key = None
        self._table = None
