"""
Conftest: shared fixtures for all Holomorph test modules.

1. Synthetic frames — gradients with known pixel values, sized so the
   centered coordinate math is exact (power-of-two half widths).
2. Mock video info — eliminates the ffmpeg dependency for render tests.
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

MOCK_VIDEO_INFO = {
    "width": 16,
    "height": 8,
    "fps": 24.0,
    "duration": 0.125,
    "has_audio": False,
    "codec": "h264",
    "total_frames": 3,
}


def _make_test_frame(width=64, height=64):
    """Generate a synthetic test frame (gradient, not blank)."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)  # R gradient
    frame[:, :, 1] = 128  # constant G
    frame[:, :, 2] = np.linspace(255, 0, width, dtype=np.uint8)  # B inverse
    return frame


def _make_ramp_frame(width=64, height=64):
    """Unit-slope ramps: R = x, G = y, B = 128. Neighbors differ by exactly 1."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :, 0] = np.arange(width, dtype=np.uint8)[np.newaxis, :]
    frame[:, :, 1] = np.arange(height, dtype=np.uint8)[:, np.newaxis]
    frame[:, :, 2] = 128
    return frame


@pytest.fixture
def gradient_frame():
    return _make_test_frame()


@pytest.fixture
def ramp_frame():
    return _make_ramp_frame()


@pytest.fixture
def random_frame():
    """64x64 random RGB frame, fixed seed."""
    rng = np.random.RandomState(1234)
    return rng.randint(0, 256, (64, 64, 3), dtype=np.uint8)
