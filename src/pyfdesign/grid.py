#!/usr/bin/env python3
"""
Dense frequency grid for the Remez exchange.

Each band is sampled uniformly with step ``0.5 / (density * (K - 1))`` and
every grid point carries the desired gain and weight of its band.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .config import BandSpec, DEFAULT_GRID_DENSITY
from .exceptions import InvalidSpecificationError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrequencyGrid:
    """Grid frequencies with per-point desired gain and weight."""
    frequencies: np.ndarray
    desired: np.ndarray
    weights: np.ndarray
    band_index: np.ndarray

    def __len__(self) -> int:
        return len(self.frequencies)


def grid_step(density: int, k: int) -> float:
    return 0.5 / (density * (k - 1))


def build_grid(spec: BandSpec, k: int, density: int = DEFAULT_GRID_DENSITY) -> FrequencyGrid:
    """
    Discretize a band specification.

    Parameters
    ----------
    spec : BandSpec
        Validated band edges, gains and weights.
    k : int
        Number of extremal frequencies the grid has to support.
    density : int
        Grid density factor.

    Returns
    -------
    FrequencyGrid
        Monotonic grid; the last point of every band equals its right edge.
    """
    if k < 2:
        raise InvalidSpecificationError(f"Number of extremal frequencies must be >= 2, got {k}")
    if density < 1:
        raise InvalidSpecificationError(f"Grid density must be >= 1, got {density}")

    step = grid_step(density, k)

    freqs, desired, weights, bands = [], [], [], []
    for b in range(spec.band_count):
        left, right = spec.band(b)
        count = max(int(round((right - left) / step)), 1)

        points = left + step * np.arange(count, dtype=np.float64)
        points[-1] = right

        freqs.append(points)
        desired.append(np.full(count, spec.desired[b]))
        weights.append(np.full(count, spec.weights[b]))
        bands.append(np.full(count, b, dtype=np.int64))

    grid = FrequencyGrid(
        frequencies=np.concatenate(freqs),
        desired=np.concatenate(desired),
        weights=np.concatenate(weights),
        band_index=np.concatenate(bands),
    )
    for arr in (grid.frequencies, grid.desired, grid.weights, grid.band_index):
        arr.setflags(write=False)

    log.debug("Grid: %d points over %d bands (step %.3e)", len(grid), spec.band_count, step)

    if len(grid) < k:
        raise InvalidSpecificationError(
            f"Grid has {len(grid)} points but {k} extremal frequencies are needed; "
            "increase grid density or widen the bands")

    return grid
