"""
Holomorph — Transform Boundary
Raw-buffer entry points for callers that only hold bytes: the CLI, the HTTP
API, and benchmark harnesses.

Buffers are width * height * 3 bytes, row-major, R,G,B per pixel, no padding.
"""

import numpy as np

from core.expression import parse, ParseError
from core.lookup import LookupTable
from core.resample import remap_image
from core.safety import DimensionMismatch, validate_buffer, validate_dimensions

__all__ = [
    "parse",
    "ParseError",
    "DimensionMismatch",
    "apply_transform",
    "transform_frame",
    "build_lookup",
    "apply_lookup",
    "pixels_to_frame",
    "frame_to_pixels",
]


def pixels_to_frame(pixels, width: int, height: int) -> np.ndarray:
    """View a raw RGB buffer as an (H, W, 3) uint8 frame.

    Raises:
        DimensionMismatch: If the buffer length is not width * height * 3.
    """
    validate_buffer(pixels, width, height)
    return np.frombuffer(bytes(pixels), dtype=np.uint8).reshape(height, width, 3)


def frame_to_pixels(frame: np.ndarray) -> bytes:
    """Flatten an (H, W, 3) uint8 frame back into raw RGB bytes."""
    return np.ascontiguousarray(frame, dtype=np.uint8).tobytes()


def transform_frame(frame: np.ndarray, expression) -> np.ndarray:
    """Direct bilinear transform of an (H, W, 3) frame.

    Args:
        frame: Source frame.
        expression: Expression string or an already parsed tree.
    """
    tree = parse(expression) if isinstance(expression, str) else expression
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise DimensionMismatch(f"Expected an (H, W, 3) RGB frame, got shape {frame.shape}")
    validate_dimensions(frame.shape[1], frame.shape[0])
    return remap_image(frame, tree)


def apply_transform(pixels, width: int, height: int, expression: str) -> bytes:
    """Transform a raw RGB buffer through an expression (bilinear path).

    Args:
        pixels: width * height * 3 bytes.
        width: Image width.
        height: Image height.
        expression: Expression over z, e.g. "z^2 + sin(z)".

    Returns:
        New buffer of exactly width * height * 3 bytes.

    Raises:
        ParseError: If the expression is malformed.
        DimensionMismatch: If the buffer does not match the dimensions.
    """
    tree = parse(expression)
    frame = pixels_to_frame(pixels, width, height)
    return frame_to_pixels(remap_image(frame, tree))


def build_lookup(tree, width: int, height: int) -> LookupTable:
    """Precompute a nearest-neighbor lookup table for repeated frames."""
    if isinstance(tree, str):
        tree = parse(tree)
    return LookupTable.build(tree, width, height)


def apply_lookup(table: LookupTable, pixels) -> bytes:
    """Gather a raw RGB buffer through a prebuilt lookup table.

    Raises:
        DimensionMismatch: If the buffer does not match the table's size.
    """
    frame = pixels_to_frame(pixels, table.width, table.height)
    return frame_to_pixels(table.apply(frame))
