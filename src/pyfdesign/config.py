#!/usr/bin/env python3
"""
Design parameters and numeric tolerances.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Dict, Any, Sequence, Tuple

import numpy as np

from .exceptions import InvalidSpecificationError


# ───────────────────────── tolerances ────────────────────────── #

LAGRANGE_TOLERANCE = 1e-7      # cosine distance treated as coincident
CONJUGATE_TOLERANCE = 1e-10    # |imag| below this counts as real
CONVERGENCE_TOLERANCE = 1e-6   # relative spread of extremal errors

DEFAULT_GRID_DENSITY = 16
DEFAULT_MAX_ITERATIONS = 100


# ───────────────────────── Data structures ────────────────────────── #

@dataclass(frozen=True)
class BandSpec:
    """Band edges (normalized to the sampling rate), gains and weights.

    ``edges`` holds two entries per band, ``desired`` and ``weights`` one.
    """
    edges: Tuple[float, ...]
    desired: Tuple[float, ...]
    weights: Tuple[float, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, 'edges', tuple(float(f) for f in self.edges))
        object.__setattr__(self, 'desired', tuple(float(d) for d in self.desired))
        weights = self.weights if len(self.weights) else (1.0,) * (len(self.edges) // 2)
        object.__setattr__(self, 'weights', tuple(float(w) for w in weights))
        self.validate()

    @property
    def band_count(self) -> int:
        return len(self.edges) // 2

    def band(self, i: int) -> Tuple[float, float]:
        return self.edges[2 * i], self.edges[2 * i + 1]

    def validate(self) -> None:
        """Reject malformed specifications before any numeric work."""
        edges = np.asarray(self.edges)

        if len(edges) < 2 or len(edges) % 2:
            raise InvalidSpecificationError(
                f"freqs must hold an even number (>= 2) of band edges, got {len(edges)}")

        if np.any(edges < 0) or np.any(edges > 0.5):
            raise InvalidSpecificationError(
                f"Band edges must lie in [0, 0.5], got {list(self.edges)}")

        if np.any(np.diff(edges) <= 0):
            raise InvalidSpecificationError(
                f"Band edges must be strictly increasing, got {list(self.edges)}")

        bands = len(edges) // 2
        if len(self.desired) != bands:
            raise InvalidSpecificationError(
                f"desired has {len(self.desired)} values for {bands} bands")
        if len(self.weights) != bands:
            raise InvalidSpecificationError(
                f"weights has {len(self.weights)} values for {bands} bands")
        if any(w <= 0 for w in self.weights):
            raise InvalidSpecificationError(
                f"weights must be positive, got {list(self.weights)}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'BandSpec':
        return cls(**d)

    @classmethod
    def from_sequences(cls, edges: Sequence[float], desired: Sequence[float],
                       weights: Sequence[float] = None) -> 'BandSpec':
        return cls(tuple(edges), tuple(desired), tuple(weights) if weights is not None else ())


@dataclass(frozen=True)
class RemezOptions:
    """Iteration controls for the exchange loop."""
    grid_density: int = DEFAULT_GRID_DENSITY
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    convergence_tolerance: float = CONVERGENCE_TOLERANCE

    def __post_init__(self):
        if self.grid_density < 1:
            raise InvalidSpecificationError(
                f"grid_density must be >= 1, got {self.grid_density}")
        if self.max_iterations < 1:
            raise InvalidSpecificationError(
                f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.convergence_tolerance <= 0:
            raise InvalidSpecificationError(
                f"convergence_tolerance must be positive, got {self.convergence_tolerance}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'RemezOptions':
        return cls(**d)
