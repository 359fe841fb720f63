#!/usr/bin/env python3
"""
Parks-McClellan Equiripple FIR Designer – Remez Exchange
=========================================================

Designs odd-length, linear-phase (type I) FIR kernels that minimize the
maximum weighted error over a set of bands.

Algorithm
---------
1. Sample every band on a dense grid (see ``grid.py``).
2. Start from K = order//2 + 2 extremal frequencies spread uniformly over
   the grid indices.
3. Repeat until the extremal errors are equal or the iteration cap is hit:
   - solve for the common ripple ``delta`` through the current extrema,
   - interpolate the amplitude response over the grid (barycentric form),
   - compute the weighted error and pick its K largest alternating peaks.
4. Sample the final amplitude response at ``i/order`` and synthesize the
   symmetric impulse response by a cosine sum.

Reaching the iteration cap is not an error: the last state is returned and
``RemezResult.converged`` is False.

Example
-------
>>> designer = RemezDesigner(57, [0, 0.15, 0.17, 0.5], [1, 0], [0.01, 0.1])
>>> result = designer.design()
>>> result.kernel.shape
(57,)
"""

from __future__ import annotations
import logging
import math
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .config import (BandSpec, RemezOptions, DEFAULT_GRID_DENSITY,
                     DEFAULT_MAX_ITERATIONS, CONVERGENCE_TOLERANCE)
from .exceptions import InvalidSpecificationError
from .grid import FrequencyGrid, build_grid
from .lagrange import BarycentricInterpolator, compute_gammas, to_cosine


# ───────────────────────── Data structures ────────────────────────── #

@dataclass(frozen=True)
class RemezResult:
    """Outcome of one ``RemezDesigner.design()`` call."""
    kernel: np.ndarray
    iterations: int
    converged: bool
    delta: float
    extremal_indices: np.ndarray
    grid: np.ndarray
    desired: np.ndarray
    weights: np.ndarray
    error: np.ndarray
    response: np.ndarray
    band_index: np.ndarray

    @property
    def order(self) -> int:
        return len(self.kernel)

    @property
    def extremal_frequencies(self) -> np.ndarray:
        return self.grid[self.extremal_indices]

    @property
    def ripple_spread(self) -> float:
        """Relative spread (max - min) / min of |error| at the extrema."""
        return _spread(np.abs(self.error[self.extremal_indices]))

    @property
    def band_errors(self) -> np.ndarray:
        """Largest weighted error magnitude in every band."""
        peaks = np.zeros(int(self.band_index.max()) + 1)
        np.maximum.at(peaks, self.band_index, np.abs(self.error))
        return peaks


# ─────────────────────── exchange helpers ─────────────────────── #

def _spread(mags: np.ndarray) -> float:
    lo = float(np.min(mags))
    if lo <= 0:
        return math.inf
    return (float(np.max(mags)) - lo) / lo


def initial_extrema(grid_size: int, k: int) -> np.ndarray:
    """K indices spread uniformly over ``0 .. grid_size - 1``."""
    return np.round(np.linspace(0, grid_size - 1, k)).astype(np.int64)


def find_extrema(error: np.ndarray) -> np.ndarray:
    """
    Indices of sign-consistent local peaks of the error curve.

    A positive peak is >= its left and > its right neighbour, a negative
    peak the mirror image. The first and last grid points only compare
    against their single neighbour.
    """
    e = np.asarray(error, dtype=np.float64)
    if len(e) == 1:
        return np.array([0], dtype=np.int64)

    pos = (e > 0) & (e >= np.r_[-np.inf, e[:-1]]) & (e > np.r_[e[1:], -np.inf])
    neg = (e < 0) & (e <= np.r_[np.inf, e[:-1]]) & (e < np.r_[e[1:], np.inf])
    return np.flatnonzero(pos | neg)


def alternate(indices: np.ndarray, error: np.ndarray) -> np.ndarray:
    """Collapse runs of same-sign peaks to the largest one of each run."""
    kept = []
    for i in indices:
        if kept and np.sign(error[i]) == np.sign(error[kept[-1]]):
            if abs(error[i]) > abs(error[kept[-1]]):
                kept[-1] = i
        else:
            kept.append(i)
    return np.array(kept, dtype=np.int64)


def reduce_extrema(indices: np.ndarray, error: np.ndarray, k: int) -> np.ndarray:
    """
    Drop the weakest candidates until exactly ``k`` alternating peaks remain.

    This is not a plain "remove the smallest |error|, one at a time" rule,
    which would leave two same-sign neighbours behind an interior peak.
    An interior minimum is removed together with the smaller of its two
    neighbours, an end-point minimum on its own. With a single candidate
    in excess only an end point can go, so the weaker end is dropped.
    ``indices`` must already alternate in sign (see ``alternate``).
    """
    idx = list(indices)
    while len(idx) > k:
        mags = np.abs(error[idx])
        j = int(np.argmin(mags))
        last = len(idx) - 1

        if j == 0 or j == last:
            del idx[j]
        elif len(idx) - k == 1:
            del idx[0 if mags[0] <= mags[last] else last]
        else:
            del idx[j]
            del idx[j - 1 if abs(error[idx[j - 1]]) < abs(error[idx[j]]) else j]

    return np.array(idx, dtype=np.int64)


def reconstruct_kernel(interpolator: BarycentricInterpolator, order: int) -> np.ndarray:
    """
    Impulse response from the amplitude response sampled at ``i/order``.

    ``h[k] = (A[0] + 2 * sum_i A[i] * cos(2*pi*i*(k - mid)/order)) / order``
    with ``mid = order // 2``; the result is symmetric about ``mid``.
    """
    mid = order // 2
    i = np.arange(mid + 1)
    lagr = interpolator(i / order)

    taps = np.arange(order) - mid
    basis = np.cos(2 * np.pi * np.outer(taps, i[1:]) / order)
    return (lagr[0] + 2 * basis @ lagr[1:]) / order


# ─────────────────────── design routine ─────────────────────── #

class RemezDesigner:
    """
    Optimal equiripple FIR designer (Parks-McClellan).

    Parameters
    ----------
    order : int
        Kernel length; must be odd and >= 3.
    freqs : sequence of float
        Band edges in [0, 0.5], two per band, strictly increasing.
    desired : sequence of float
        Desired gain of every band.
    weights : sequence of float, optional
        Error weight of every band (all ones by default).
    grid_density : int
        Grid density factor (default 16).
    """

    def __init__(self, order: int, freqs: Sequence[float], desired: Sequence[float],
                 weights: Optional[Sequence[float]] = None,
                 grid_density: int = DEFAULT_GRID_DENSITY,
                 log: Optional[logging.Logger] = None):
        if order < 3 or order % 2 == 0:
            raise InvalidSpecificationError(
                f"The order of the filter must be an odd number >= 3, got {order}")

        self.order = order
        self.spec = BandSpec.from_sequences(freqs, desired, weights)
        self.k = order // 2 + 2
        self.grid: FrequencyGrid = build_grid(self.spec, self.k, grid_density)
        self.max_iterations = DEFAULT_MAX_ITERATIONS
        self.tolerance = CONVERGENCE_TOLERANCE
        self.log = log or logging.getLogger(__name__)

    @classmethod
    def from_spec(cls, order: int, spec: BandSpec,
                  options: RemezOptions = RemezOptions(),
                  log: Optional[logging.Logger] = None) -> 'RemezDesigner':
        designer = cls(order, spec.edges, spec.desired, spec.weights, options.grid_density, log)
        designer.max_iterations = options.max_iterations
        designer.tolerance = options.convergence_tolerance
        return designer

    def _interpolate(self, x: np.ndarray, ext: np.ndarray) -> Tuple[BarycentricInterpolator, float]:
        """Barycentric weights, common ripple and targets through the current extrema."""
        xe = x[ext]
        gammas = compute_gammas(xe)
        d = self.grid.desired[ext]
        w = self.grid.weights[ext]
        signs = np.where(np.arange(len(ext)) % 2 == 0, 1.0, -1.0)

        delta = np.sum(gammas * d) / np.sum(signs * gammas / w)
        values = d - signs * delta / w

        return BarycentricInterpolator(xe, values, gammas), float(delta)

    def design(self, max_iterations: Optional[int] = None,
               tolerance: Optional[float] = None) -> RemezResult:
        """
        Run the exchange loop and reconstruct the kernel.

        ``max_iterations`` and ``tolerance`` default to the designer's
        settings (100 and 1e-6 unless built with ``from_spec``).

        Returns
        -------
        RemezResult
            Kernel plus the final iteration state.
        """
        max_iterations = self.max_iterations if max_iterations is None else max_iterations
        tolerance = self.tolerance if tolerance is None else tolerance
        if max_iterations < 1:
            raise InvalidSpecificationError(f"max_iterations must be >= 1, got {max_iterations}")

        t0 = time.perf_counter()
        grid = self.grid
        k = self.k
        x = to_cosine(grid.frequencies)

        ext = initial_extrema(len(grid), k)
        converged = False
        iterations = 0

        for iterations in range(1, max_iterations + 1):
            interpolator, delta = self._interpolate(x, ext)

            response = interpolator.evaluate_cosine(x)
            error = grid.weights * (grid.desired - response)

            candidates = alternate(find_extrema(error), error)
            if len(candidates) < k:
                self.log.debug("Iteration %d: %d candidates < K=%d, stopping",
                               iterations, len(candidates), k)
                converged = True
                break

            ext = reduce_extrema(candidates, error, k)

            spread = _spread(np.abs(error[ext]))
            self.log.debug("Iteration %d: delta=%.6e spread=%.3e", iterations, abs(delta), spread)

            if spread < tolerance:
                converged = True
                break

        if not converged:
            self.log.warning("Remez did not converge in %d iterations (spread %.3e)",
                             max_iterations, _spread(np.abs(error[ext])))

        kernel = reconstruct_kernel(interpolator, self.order)

        self.log.info("Remez: order=%d K=%d grid=%d iterations=%d delta=%.3e converged=%s (%.3f s)",
                      self.order, k, len(grid), iterations, abs(delta), converged,
                      time.perf_counter() - t0)

        result = RemezResult(
            kernel=kernel,
            iterations=iterations,
            converged=converged,
            delta=abs(delta),
            extremal_indices=np.array(ext),
            grid=np.array(grid.frequencies),
            desired=np.array(grid.desired),
            weights=np.array(grid.weights),
            error=error,
            response=response,
            band_index=np.array(grid.band_index),
        )
        for arr in (result.kernel, result.extremal_indices, result.grid,
                    result.desired, result.weights, result.error, result.response, result.band_index):
            arr.setflags(write=False)
        return result


def remez(order: int, freqs: Sequence[float], desired: Sequence[float],
          weights: Optional[Sequence[float]] = None,
          grid_density: int = DEFAULT_GRID_DENSITY,
          max_iterations: int = DEFAULT_MAX_ITERATIONS) -> np.ndarray:
    """Design an equiripple kernel and return only its taps."""
    return RemezDesigner(order, freqs, desired, weights, grid_density).design(max_iterations).kernel


# ─────────────────────── order estimation ─────────────────────── #

def passband_delta_from_db(db: float) -> float:
    """Passband ripple (dB, peak-to-peak) to linear deviation."""
    g = 10 ** (db / 20)
    return (g - 1) / (g + 1)


def stopband_delta_from_db(db: float) -> float:
    """Stopband attenuation (dB) to linear deviation."""
    return 10 ** (-db / 20)


def db_from_passband_delta(delta: float) -> float:
    return 20 * math.log10((1 + delta) / (1 - delta))


def db_from_stopband_delta(delta: float) -> float:
    return -20 * math.log10(delta)


def estimate_order(fp: float, fa: float, ripple_pass: float, ripple_stop: float) -> int:
    """
    Estimate the kernel length for a low-pass design (Herrmann et al., 1973).

    Parameters
    ----------
    fp, fa : float
        Passband and stopband edges, normalized (0 < fp < fa < 0.5).
    ripple_pass : float
        Passband ripple in dB.
    ripple_stop : float
        Stopband attenuation in dB.

    Returns
    -------
    int
        Odd kernel length.
    """
    if not 0 < fp < fa < 0.5:
        raise InvalidSpecificationError(f"Need 0 < fp < fa < 0.5, got fp={fp}, fa={fa}")

    return order_for_transition(fa - fp, ripple_pass, ripple_stop)


def order_for_transition(width: float, ripple_pass: float, ripple_stop: float) -> int:
    """Herrmann estimate from the transition width alone (odd, >= 3)."""
    if not 0 < width < 0.5:
        raise InvalidSpecificationError(f"Transition width must lie in (0, 0.5), got {width}")

    rp = passband_delta_from_db(ripple_pass)
    rs = stopband_delta_from_db(ripple_stop)
    if rp < rs:
        rp, rs = rs, rp

    lp = math.log10(rp)
    ls = math.log10(rs)
    bw = width

    d = (0.005309 * lp * lp + 0.07114 * lp - 0.4761) * ls - (0.00266 * lp * lp + 0.5941 * lp + 0.4278)
    f = 0.51244 * (lp - ls) + 11.012

    n = int((d - f * bw * bw) / bw + 1.5)
    n = max(n, 3)
    return n if n % 2 == 1 else n + 1
