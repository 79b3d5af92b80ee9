"""
Holomorph — Trigonometric Functions
Circular functions, their reciprocals, and the principal inverses.
"""

import numpy as np


def sin(z: np.ndarray) -> np.ndarray:
    return np.sin(z)


def cos(z: np.ndarray) -> np.ndarray:
    return np.cos(z)


def tan(z: np.ndarray) -> np.ndarray:
    return np.tan(z)


# Reciprocals blow up at the zeros of the base function; the mapper
# treats the resulting inf/NaN as a singularity.

def sec(z: np.ndarray) -> np.ndarray:
    return 1.0 / np.cos(z)


def csc(z: np.ndarray) -> np.ndarray:
    return 1.0 / np.sin(z)


def cot(z: np.ndarray) -> np.ndarray:
    return 1.0 / np.tan(z)


def asin(z: np.ndarray) -> np.ndarray:
    return np.arcsin(z)


def acos(z: np.ndarray) -> np.ndarray:
    return np.arccos(z)


def atan(z: np.ndarray) -> np.ndarray:
    return np.arctan(z)
