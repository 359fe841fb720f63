#!/usr/bin/env python3
"""
Analog low-pass prototypes (cutoff 1 rad/s), returned as complex s-plane
poles and zeros ready for the mappers in ``iir_design.py``.
"""

import math

import numpy as np
from scipy import signal
from scipy.special import factorial

from .exceptions import InvalidSpecificationError


def _check_order(order: int) -> None:
    if order < 1:
        raise InvalidSpecificationError(f"Prototype order must be >= 1, got {order}")


def _angles(order: int) -> np.ndarray:
    return np.pi * (2 * np.arange(order) + 1) / (2 * order)


def butterworth_poles(order: int) -> np.ndarray:
    """Poles evenly spaced on the left half of the unit circle."""
    _check_order(order)
    theta = _angles(order)
    return -np.sin(theta) + 1j * np.cos(theta)


def chebyshev1_poles(order: int, ripple_db: float = 0.1) -> np.ndarray:
    """Type I poles on an ellipse; ``ripple_db`` is the passband ripple."""
    _check_order(order)
    if ripple_db <= 0:
        raise InvalidSpecificationError(f"ripple_db must be positive, got {ripple_db}")

    eps = math.sqrt(10 ** (ripple_db / 10) - 1)
    mu = math.asinh(1 / eps) / order
    theta = _angles(order)
    return -math.sinh(mu) * np.sin(theta) + 1j * math.cosh(mu) * np.cos(theta)


def chebyshev2_poles(order: int, attenuation_db: float = 40.0) -> np.ndarray:
    """Type II (inverse Chebyshev) poles; ``attenuation_db`` is the stopband level."""
    _check_order(order)
    if attenuation_db <= 0:
        raise InvalidSpecificationError(f"attenuation_db must be positive, got {attenuation_db}")

    eps = 1 / math.sqrt(10 ** (attenuation_db / 10) - 1)
    mu = math.asinh(1 / eps) / order
    theta = _angles(order)
    return 1 / (-math.sinh(mu) * np.sin(theta) + 1j * math.cosh(mu) * np.cos(theta))


def chebyshev2_zeros(order: int) -> np.ndarray:
    """Finite type II zeros on the imaginary axis (odd orders have one fewer)."""
    _check_order(order)
    c = np.cos(_angles(order))
    c = c[np.abs(c) > 1e-12]
    return 1j / c


def bessel_poles(order: int) -> np.ndarray:
    """
    Roots of the reverse Bessel polynomial, scaled by the n-th root of its
    s^1 coefficient. That coefficient equals the constant term, so the
    product of the poles has unit magnitude (phase-matched normalization).
    """
    _check_order(order)
    k = np.arange(order + 1)
    # coefficients of s^k; reversed for np.roots
    a = factorial(2 * order - k) / (2.0 ** (order - k) * factorial(k) * factorial(order - k))
    poles = np.roots(a[::-1])
    return poles * a[1] ** (-1 / order)


def elliptic_zeros_poles(order: int, ripple_db: float = 0.1,
                         attenuation_db: float = 40.0):
    """Cauer prototype from ``scipy.signal.ellipap``; returns ``(zeros, poles)``."""
    _check_order(order)
    if ripple_db <= 0 or attenuation_db <= ripple_db:
        raise InvalidSpecificationError(
            f"Need 0 < ripple_db < attenuation_db, got {ripple_db}, {attenuation_db}")
    z, p, _ = signal.ellipap(order, ripple_db, attenuation_db)
    return np.asarray(z, dtype=np.complex128), np.asarray(p, dtype=np.complex128)
