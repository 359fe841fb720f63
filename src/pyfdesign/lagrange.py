#!/usr/bin/env python3
"""
Barycentric Lagrange interpolation in the cosine domain.

The amplitude response of a linear-phase FIR filter is a polynomial in
``x = cos(2*pi*f)``; the exchange loop evaluates it through K nodes with
the second barycentric form, O(K) per point.
"""

import numpy as np

from .config import LAGRANGE_TOLERANCE


def to_cosine(frequencies) -> np.ndarray:
    """Map normalized frequencies in [0, 0.5] to x = cos(2*pi*f)."""
    return np.cos(2 * np.pi * np.asarray(frequencies, dtype=np.float64))


def _clamp(d: np.ndarray, tol: float) -> np.ndarray:
    """Push differences smaller than ``tol`` out to ``±tol``."""
    return np.where(np.abs(d) < tol, np.where(d < 0, -tol, tol), d)


def compute_gammas(x: np.ndarray, tol: float = LAGRANGE_TOLERANCE) -> np.ndarray:
    """
    Barycentric weights ``gamma_k = 1 / prod_{i != k} (x_k - x_i)``.

    Each factor is doubled, which rescales all weights by the same constant
    and keeps the product in floating-point range for long filters.
    """
    x = np.asarray(x, dtype=np.float64)
    diff = _clamp(x[:, None] - x[None, :], tol)
    np.fill_diagonal(diff, 0.5)
    return 1.0 / np.prod(2.0 * diff, axis=1)


class BarycentricInterpolator:
    """
    Polynomial through ``(x_k, values_k)`` evaluated via barycentric weights.

    Parameters
    ----------
    x : np.ndarray
        Node cosines, pairwise distinct.
    values : np.ndarray
        Interpolation targets at the nodes.
    gammas : np.ndarray, optional
        Precomputed weights; computed from ``x`` when omitted.
    tol : float
        Coincidence tolerance in the cosine domain.
    """

    def __init__(self, x, values, gammas=None, tol: float = LAGRANGE_TOLERANCE):
        self.x = np.array(x, dtype=np.float64)
        self.values = np.array(values, dtype=np.float64)
        self.gammas = (compute_gammas(self.x, tol) if gammas is None
                       else np.array(gammas, dtype=np.float64))
        self.tol = tol

        if not (len(self.x) == len(self.values) == len(self.gammas)):
            raise ValueError("x, values and gammas must have the same length")

        for arr in (self.x, self.values, self.gammas):
            arr.setflags(write=False)

    def __len__(self) -> int:
        return len(self.x)

    def evaluate_cosine(self, xq) -> np.ndarray:
        """Evaluate at cosine-domain points ``xq``."""
        xq = np.atleast_1d(np.asarray(xq, dtype=np.float64))

        diff = xq[:, None] - self.x[None, :]
        hit = np.abs(diff) < self.tol

        safe = np.where(hit, 1.0, diff)
        c = self.gammas[None, :] / safe
        result = (c @ self.values) / c.sum(axis=1)

        # exact node hits return the node value, avoiding 0/0
        rows = hit.any(axis=1)
        if rows.any():
            result[rows] = self.values[np.argmax(hit[rows], axis=1)]
        return result

    def __call__(self, frequencies) -> np.ndarray:
        """Evaluate at normalized frequencies in [0, 0.5]."""
        return self.evaluate_cosine(to_cosine(frequencies))
