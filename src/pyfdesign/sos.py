#!/usr/bin/env python3
"""
Second-order sections.

``tf_to_sos`` splits a real-coefficient transfer function into a cascade of
biquads by nearest-neighbour pairing: the pole closest to the unit circle
is taken first and matched with the closest zero, so the sections with the
sharpest resonances end up last in the cascade. The overall gain is put in
the first section.

``sos_to_tf`` multiplies the sections back together.
"""

from __future__ import annotations
import logging
from enum import Enum
from functools import reduce
from typing import List, Sequence

import numpy as np

from .config import CONJUGATE_TOLERANCE
from .exceptions import SosPairingError
from .transfer_function import TransferFunction, multiply

log = logging.getLogger(__name__)


class Match(Enum):
    """Which roots a search may return."""
    ANY = 'any'
    REAL = 'real'
    COMPLEX = 'complex'


def _mask(values: np.ndarray, match: Match, tol: float = CONJUGATE_TOLERANCE) -> np.ndarray:
    if match is Match.REAL:
        return np.abs(values.imag) < tol
    if match is Match.COMPLEX:
        return np.abs(values.imag) > tol
    return np.ones(len(values), dtype=bool)


def is_real(c: complex, tol: float = CONJUGATE_TOLERANCE) -> bool:
    return abs(c.imag) < tol


def remove_conjugates(values, tol: float = CONJUGATE_TOLERANCE) -> np.ndarray:
    """
    Keep one representative of every conjugate pair; real values pass through.

    Raises
    ------
    SosPairingError
        If a non-real value has no conjugate partner.
    """
    values = np.asarray(values, dtype=np.complex128)
    keep = np.ones(len(values), dtype=bool)

    for i, c in enumerate(values):
        if not keep[i] or is_real(c, tol):
            continue
        partners = np.flatnonzero(keep[i + 1:]
                                  & (np.abs(values[i + 1:].real - c.real) < tol)
                                  & (np.abs(values[i + 1:].imag + c.imag) < tol))
        if len(partners) == 0:
            raise SosPairingError(f"No conjugate pair for {c}; the transfer function is not real")
        keep[i + 1 + partners[0]] = False

    return values[keep]


class RootSet:
    """
    Fixed-size array of roots with a consumed marker per entry.

    Searches skip consumed entries; when no live entry satisfies the match
    the first live entry is returned.
    """

    def __init__(self, values):
        self.values = np.array(values, dtype=np.complex128)
        self.alive = np.ones(len(self.values), dtype=bool)
        self.remaining = len(self.values)

    def __len__(self) -> int:
        return self.remaining

    def take(self, i: int) -> complex:
        if not self.alive[i]:
            raise SosPairingError(f"Root #{i} was already paired")
        self.alive[i] = False
        self.remaining -= 1
        return complex(self.values[i])

    def count(self, match: Match) -> int:
        return int(np.count_nonzero(self.alive & _mask(self.values, match)))

    def all(self, match: Match) -> bool:
        return self.count(match) == self.remaining

    def _pick(self, distance: np.ndarray, match: Match) -> int:
        if self.remaining == 0:
            raise SosPairingError("No roots left to pair")
        candidates = self.alive & _mask(self.values, match)
        if not candidates.any():
            return int(np.argmax(self.alive))
        return int(np.argmin(np.where(candidates, distance, np.inf)))

    def closest_to_unit_circle(self, match: Match = Match.ANY) -> int:
        return self._pick(np.abs(np.abs(self.values) - 1.0), match)

    def closest_to_value(self, value: complex, match: Match = Match.ANY) -> int:
        return self._pick(np.abs(self.values - value), match)


def tf_to_sos(tf: TransferFunction) -> List[TransferFunction]:
    """
    Factor a transfer function into second-order sections.

    Parameters
    ----------
    tf : TransferFunction
        Must have real coefficients (non-real roots in conjugate pairs).

    Returns
    -------
    list of TransferFunction
        ``ceil(max(#zeros, #poles) / 2)`` sections with two zeros and two
        poles each; the gain of ``tf`` sits in section 0.
    """
    zeros = list(tf.zeros)
    poles = list(tf.poles)

    # origin placeholders are neutral factors
    if len(zeros) < len(poles):
        zeros += [0j] * (len(poles) - len(zeros))
    elif len(poles) < len(zeros):
        poles += [0j] * (len(zeros) - len(poles))

    count = (len(poles) + 1) // 2
    if count == 0:
        return [TransferFunction([0j, 0j], [0j, 0j], tf.gain)]
    if len(poles) % 2:
        zeros.append(0j)
        poles.append(0j)

    zs = RootSet(remove_conjugates(zeros))
    ps = RootSet(remove_conjugates(poles))

    sections: List[TransferFunction] = [None] * count

    for i in range(count - 1, -1, -1):
        p1 = ps.take(ps.closest_to_unit_circle())

        if is_real(p1) and ps.all(Match.COMPLEX):
            z1 = zs.take(zs.closest_to_value(p1, Match.REAL))
            p2 = z2 = 0j
        else:
            match = Match.COMPLEX if not is_real(p1) and zs.count(Match.REAL) == 1 else Match.ANY
            z1 = zs.take(zs.closest_to_value(p1, match))

            if not is_real(p1):
                p2 = p1.conjugate()
                if not is_real(z1):
                    z2 = z1.conjugate()
                else:
                    z2 = zs.take(zs.closest_to_value(p1, Match.REAL))
            elif not is_real(z1):
                z2 = z1.conjugate()
                p2 = ps.take(ps.closest_to_value(z1, Match.REAL))
            else:
                p2 = ps.take(ps.closest_to_unit_circle(Match.REAL))
                z2 = zs.take(zs.closest_to_value(p2, Match.REAL))

        log.debug("Section %d: poles (%s, %s) zeros (%s, %s)", i, p1, p2, z1, z2)
        sections[i] = TransferFunction([z1, z2], [p1, p2], tf.gain if i == 0 else 1.0)

    return sections


def sos_to_tf(sections: Sequence[TransferFunction]) -> TransferFunction:
    """Cascade of all sections as one transfer function."""
    if not sections:
        return TransferFunction()
    return reduce(multiply, sections)


def sos_to_array(sections: Sequence[TransferFunction]) -> np.ndarray:
    """
    Sections as an ``(n, 6)`` array of ``[b0, b1, b2, a0, a1, a2]`` rows,
    the layout used by ``scipy.signal.sosfilt``.
    """
    rows = []
    for s in sections:
        b = np.real(s.numerator)
        a = np.real(s.denominator)
        rows.append(np.concatenate([np.pad(b, (0, 3 - len(b))), np.pad(a, (0, 3 - len(a)))]))
    return np.array(rows).reshape(-1, 6)
