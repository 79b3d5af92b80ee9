"""
Holomorph — Live Webcam Mode
Captures camera frames with OpenCV, gathers each through a cached lookup
table, and shows the result in a window until Esc or q is pressed.

The table is rebuilt only if the camera delivers a different resolution
than the one it was built for.
"""

import cv2
import numpy as np

from core.expression import parse
from core.lookup import LookupCache
from core.safety import validate_dimensions

WINDOW_TITLE = "Holomorphic Webcam"
QUIT_KEYS = {27, ord("q")}  # Esc, q


def open_camera(index: int, width: int, height: int):
    """Open a capture device and request a frame size.

    Raises:
        RuntimeError: If the device cannot be opened.
    """
    cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open camera {index}")
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    return cap


def capture_frame(cap) -> np.ndarray | None:
    """Read one frame as (H, W, 3) uint8 RGB, or None if nothing was delivered."""
    ok, bgr = cap.read()
    if not ok or bgr is None or bgr.size == 0:
        return None
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def process_frame(cache: LookupCache, tree, frame: np.ndarray) -> np.ndarray:
    """Transform one RGB frame through the cached table for its size."""
    h, w = frame.shape[:2]
    return cache.get(tree, w, h).apply(frame)


def run_webcam(expression: str, width: int = 640, height: int = 480,
               camera: int = 0, max_frames: int | None = None) -> int:
    """Run the live loop.

    Args:
        expression: Expression over z.
        width, height: Requested capture size.
        camera: Capture device index.
        max_frames: Stop after this many frames (None = until a quit key).

    Returns:
        Number of frames displayed.
    """
    tree = parse(expression)
    validate_dimensions(width, height)
    cache = LookupCache()
    cap = open_camera(camera, width, height)
    shown = 0
    try:
        cv2.namedWindow(WINDOW_TITLE, cv2.WINDOW_AUTOSIZE)
        while max_frames is None or shown < max_frames:
            frame = capture_frame(cap)
            if frame is not None:
                out = process_frame(cache, tree, frame)
                cv2.imshow(WINDOW_TITLE, cv2.cvtColor(out, cv2.COLOR_RGB2BGR))
                shown += 1
            key = cv2.waitKey(1) & 0xFF
            if key in QUIT_KEYS:
                break
    finally:
        cap.release()
        cv2.destroyAllWindows()
    return shown
