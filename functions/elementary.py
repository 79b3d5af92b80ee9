"""
Holomorph — Elementary Functions
Exponential, logarithm, root, and the real-valued projections (abs, re, im, arg).

Every function takes a complex128 array and returns a complex128 array of the
same shape. Undefined inputs (log(0), 1/0) give inf/NaN, never an exception.
"""

import numpy as np


def exp(z: np.ndarray) -> np.ndarray:
    return np.exp(z)


def log(z: np.ndarray) -> np.ndarray:
    """Principal natural logarithm. log(0) is -inf + 0j."""
    return np.log(z)


def sqrt(z: np.ndarray) -> np.ndarray:
    """Principal square root (branch cut on the negative real axis)."""
    return np.sqrt(z)


def magnitude(z: np.ndarray) -> np.ndarray:
    """|z| as a complex value with zero imaginary part."""
    return np.abs(z).astype(np.complex128)


def conjugate(z: np.ndarray) -> np.ndarray:
    return np.conj(z)


def real_part(z: np.ndarray) -> np.ndarray:
    return np.real(z).astype(np.complex128)


def imag_part(z: np.ndarray) -> np.ndarray:
    return np.imag(z).astype(np.complex128)


def argument(z: np.ndarray) -> np.ndarray:
    """Phase angle in (-pi, pi], zero imaginary part."""
    return np.angle(z).astype(np.complex128)
