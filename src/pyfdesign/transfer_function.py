#!/usr/bin/env python3
"""
Transfer functions in zero/pole/gain form.

    H(z) = gain * prod(1 - z_k z^-1) / prod(1 - p_k z^-1)

Zeros and poles are kept as complex arrays; polynomial coefficients are
only expanded on demand, which keeps high-order designs well conditioned.
Every operation returns a new ``TransferFunction``.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Sequence

import numpy as np

from .exceptions import FilterDesignError, InvalidSpecificationError

log = logging.getLogger(__name__)


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=np.complex128).ravel()
    arr.setflags(write=False)
    return arr


def _expand(roots: np.ndarray) -> np.ndarray:
    """Polynomial coefficients (in z^-1) with the given roots."""
    coeffs = np.poly(roots) if len(roots) else np.array([1.0])
    if np.allclose(np.imag(coeffs), 0, atol=1e-9):
        return np.real(coeffs)
    return coeffs


@dataclass(frozen=True, eq=False)
class TransferFunction:
    """Rational transfer function defined by its zeros, poles and gain."""
    zeros: np.ndarray = field(default_factory=lambda: _frozen([]))
    poles: np.ndarray = field(default_factory=lambda: _frozen([]))
    gain: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, 'zeros', _frozen(self.zeros))
        object.__setattr__(self, 'poles', _frozen(self.poles))
        object.__setattr__(self, 'gain', float(np.real(self.gain)))

    # ───────────────────────── construction ────────────────────────── #

    @classmethod
    def from_coefficients(cls, numerator: Sequence[float],
                          denominator: Sequence[float]) -> 'TransferFunction':
        """
        Build from polynomial coefficients in powers of z^-1.

        Parameters
        ----------
        numerator : sequence of float
            b[0] + b[1] z^-1 + ...
        denominator : sequence of float
            a[0] + a[1] z^-1 + ...; ``a[0]`` must be non-zero.
        """
        b = np.atleast_1d(np.asarray(numerator, dtype=np.float64))
        a = np.atleast_1d(np.asarray(denominator, dtype=np.float64))

        if len(a) == 0 or a[0] == 0:
            raise InvalidSpecificationError("denominator[0] must be non-zero")

        nz = np.flatnonzero(b)
        if len(nz) == 0:
            raise InvalidSpecificationError("numerator must have a non-zero coefficient")
        if nz[0] > 0:
            log.debug("Dropping %d leading zero numerator coefficients", nz[0])
            b = b[nz[0]:]

        return cls(zeros=np.roots(b), poles=np.roots(a), gain=b[0] / a[0])

    # ───────────────────────── properties ────────────────────────── #

    @property
    def numerator(self) -> np.ndarray:
        return self.gain * _expand(self.zeros)

    @property
    def denominator(self) -> np.ndarray:
        return _expand(self.poles)

    @property
    def order(self) -> int:
        return max(len(self.zeros), len(self.poles))

    @property
    def is_stable(self) -> bool:
        return bool(np.all(np.abs(self.poles) < 1)) if len(self.poles) else True

    # ───────────────────────── evaluation ────────────────────────── #

    def evaluate(self, z):
        """Value of H at arbitrary complex point(s) ``z``."""
        z = np.asarray(z, dtype=np.complex128)
        zinv = 1.0 / z
        num = np.ones_like(z)
        for r in self.zeros:
            num = num * (1 - r * zinv)
        den = np.ones_like(z)
        for p in self.poles:
            den = den * (1 - p * zinv)
        return self.gain * num / den

    def frequency_response(self, frequencies) -> np.ndarray:
        """Complex response at normalized frequencies (cycles per sample)."""
        f = np.asarray(frequencies, dtype=np.float64)
        return self.evaluate(np.exp(2j * np.pi * f))

    def normalize_at(self, omega: float) -> 'TransferFunction':
        """
        Rescale the gain so that ``|H(e^{j*omega})| == 1``.

        ``omega`` is in radians per sample (0 is DC, pi is Nyquist).
        """
        value = abs(self.evaluate(np.exp(1j * omega)))
        if value == 0 or not np.isfinite(value):
            raise FilterDesignError(f"Cannot normalize at omega={omega}: |H| = {value}")
        return TransferFunction(self.zeros, self.poles, self.gain / value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'zeros': [complex(z) for z in self.zeros],
            'poles': [complex(p) for p in self.poles],
            'gain': self.gain,
        }

    def __repr__(self) -> str:
        return (f"TransferFunction(zeros={len(self.zeros)}, poles={len(self.poles)}, "
                f"gain={self.gain:.6g})")


# ─────────────────────── algebra ─────────────────────── #

def multiply(tf1: TransferFunction, tf2: TransferFunction) -> TransferFunction:
    """Cascade of two filters."""
    return TransferFunction(
        zeros=np.concatenate([tf1.zeros, tf2.zeros]),
        poles=np.concatenate([tf1.poles, tf2.poles]),
        gain=tf1.gain * tf2.gain,
    )


def add(tf1: TransferFunction, tf2: TransferFunction) -> TransferFunction:
    """Parallel connection: ``H1 + H2 = (N1*D2 + N2*D1) / (D1*D2)``."""
    left = np.convolve(tf1.numerator, tf2.denominator)
    right = np.convolve(tf2.numerator, tf1.denominator)

    n = max(len(left), len(right))
    num = np.pad(left, (0, n - len(left))) + np.pad(right, (0, n - len(right)))

    nz = np.flatnonzero(np.abs(num) > 0)
    if len(nz) == 0:
        return TransferFunction(poles=np.concatenate([tf1.poles, tf2.poles]), gain=0.0)
    num = num[nz[0]:]

    return TransferFunction(
        zeros=np.roots(num),
        poles=np.concatenate([tf1.poles, tf2.poles]),
        gain=np.real(num[0]),
    )
