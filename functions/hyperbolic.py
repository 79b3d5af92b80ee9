"""
Holomorph — Hyperbolic Functions
"""

import numpy as np


def sinh(z: np.ndarray) -> np.ndarray:
    return np.sinh(z)


def cosh(z: np.ndarray) -> np.ndarray:
    return np.cosh(z)


def tanh(z: np.ndarray) -> np.ndarray:
    return np.tanh(z)


def asinh(z: np.ndarray) -> np.ndarray:
    return np.arcsinh(z)


def acosh(z: np.ndarray) -> np.ndarray:
    return np.arccosh(z)


def atanh(z: np.ndarray) -> np.ndarray:
    return np.arctanh(z)
