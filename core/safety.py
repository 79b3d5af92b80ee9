"""
Holomorph — Safety & Resource Guards
Centralized preflight checks run before any file or buffer processing.
Prevents oversized inputs, mis-sized pixel buffers, and runaway renders.
"""

import os
import signal
from numbers import Integral
from pathlib import Path

# --- Configurable Limits ---
MAX_FILE_MB = 500          # Maximum input file size
TIMEOUT_SEC = 300          # 5 minute processing timeout
MAX_PIXELS = 7680 * 4320   # 8K frame
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tif", ".tiff", ".webp"}
VIDEO_EXTENSIONS = {".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v"}
ALLOWED_EXTENSIONS = IMAGE_EXTENSIONS | VIDEO_EXTENSIONS


class SafetyError(Exception):
    """Raised when a preflight check fails."""
    pass


class DimensionMismatch(ValueError):
    """Pixel buffer or frame does not match the declared width x height."""
    pass


def preflight(input_path: str, allowed: set[str] | None = None) -> dict:
    """Run all safety checks before processing a file.

    Args:
        input_path: Path to the input file.
        allowed: Accepted extensions (defaults to ALLOWED_EXTENSIONS).

    Returns:
        dict with file metadata (path, size_mb, extension)

    Raises:
        SafetyError: If any check fails.
        FileNotFoundError: If input doesn't exist.
    """
    input_path = str(input_path)
    real_path = os.path.realpath(input_path)
    allowed = allowed or ALLOWED_EXTENSIONS

    # 1. File exists
    if not os.path.isfile(real_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    # 2. File size check
    size_bytes = os.path.getsize(real_path)
    size_mb = size_bytes / (1024 * 1024)
    if size_mb > MAX_FILE_MB:
        raise SafetyError(
            f"Input file is {size_mb:.0f}MB, exceeds {MAX_FILE_MB}MB limit. "
            f"Use a smaller file or lower resolution."
        )

    # 3. File extension check
    ext = Path(real_path).suffix.lower()
    if ext not in allowed:
        raise SafetyError(
            f"File type '{ext}' not allowed. "
            f"Supported: {', '.join(sorted(allowed))}"
        )

    return {
        "path": real_path,
        "size_mb": size_mb,
        "extension": ext,
    }


def validate_dimensions(width: int, height: int) -> None:
    """Check that a frame size is positive and within MAX_PIXELS.

    Raises:
        DimensionMismatch: If either side is not a positive integer.
        SafetyError: If the frame is larger than MAX_PIXELS.
    """
    if not all(isinstance(v, Integral) and not isinstance(v, bool) for v in (width, height)):
        raise DimensionMismatch(f"Dimensions must be integers. Got {width!r}x{height!r}")
    if width <= 0 or height <= 0:
        raise DimensionMismatch(f"Dimensions must be positive. Got {width}x{height}")
    if width * height > MAX_PIXELS:
        raise SafetyError(
            f"Frame is {width}x{height} ({width * height} pixels), "
            f"max is {MAX_PIXELS}. Use a lower resolution."
        )


def validate_buffer(pixels, width: int, height: int) -> None:
    """Check that a raw RGB buffer holds exactly width * height * 3 bytes.

    Raises:
        DimensionMismatch: On a size mismatch.
    """
    validate_dimensions(width, height)
    expected = width * height * 3
    if len(pixels) != expected:
        raise DimensionMismatch(
            f"Pixel buffer is {len(pixels)} bytes, expected {expected} "
            f"for {width}x{height} RGB"
        )


def set_processing_timeout(seconds: int = TIMEOUT_SEC) -> None:
    """Set an alarm-based timeout for processing. Unix only.

    Call this before starting a long operation.
    The alarm will raise TimeoutError if processing exceeds the limit.
    """
    if not hasattr(signal, "SIGALRM"):
        return  # Windows — no SIGALRM support

    def _timeout_handler(signum, frame):
        raise TimeoutError(
            f"Processing exceeded {seconds}s timeout. "
            f"Try a shorter clip or lower resolution."
        )

    signal.signal(signal.SIGALRM, _timeout_handler)
    signal.alarm(seconds)


def clear_processing_timeout() -> None:
    """Clear a previously set processing timeout."""
    if hasattr(signal, "SIGALRM"):
        signal.alarm(0)
