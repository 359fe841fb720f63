#!/usr/bin/env python3
"""
IIR Filter Design – Analog Prototype to Digital Transfer Function
=================================================================

Maps analog prototype poles/zeros (cutoff 1 rad/s) to a digital
``TransferFunction`` for the four classic band forms:

    1. pre-warp the cutoff(s): ``w = tan(pi * freq)``
    2. scale the prototype to the requested band form
    3. bilinear transform ``z = (1 + s) / (1 - s)``
    4. normalize the gain to 1 in the passband

Also provides second-order notch/peak and comb designs, and a dispatcher
that chains a named prototype with a band form.

Frequencies are normalized to the sampling rate and must lie in (0, 0.5).
"""

from __future__ import annotations
import logging
import math
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import InvalidSpecificationError
from .prototypes import (bessel_poles, butterworth_poles, chebyshev1_poles,
                         chebyshev2_poles, chebyshev2_zeros, elliptic_zeros_poles)
from .transfer_function import TransferFunction

log = logging.getLogger(__name__)


# ───────────────────────── helpers ────────────────────────── #

def _check_freq(freq: float, name: str = "freq") -> None:
    if not 0 < freq < 0.5:
        raise InvalidSpecificationError(f"{name} must lie in (0, 0.5), got {freq}")


def _check_band(freq1: float, freq2: float) -> None:
    _check_freq(freq1, "freq1")
    _check_freq(freq2, "freq2")
    if freq1 >= freq2:
        raise InvalidSpecificationError(f"freq1 must be < freq2, got {freq1} >= {freq2}")


def _as_roots(values) -> np.ndarray:
    if values is None:
        return np.zeros(0, dtype=np.complex128)
    return np.atleast_1d(np.asarray(values, dtype=np.complex128))


def bilinear_transform(s: np.ndarray) -> np.ndarray:
    """Map s-plane points to the z-plane: ``z = (1 + s) / (1 - s)``."""
    s = np.asarray(s, dtype=np.complex128)
    return (1 + s) / (1 - s)


def _band_split(alpha: np.ndarray, f0: float) -> np.ndarray:
    """Quadratic band substitution: every scaled root gives ``alpha * (1 +- beta)``."""
    beta = np.sqrt(1 - (f0 / alpha) ** 2 + 0j)
    return np.concatenate([alpha * (1 + beta), alpha * (1 - beta)])


def _pad_zeros(zeros: np.ndarray, count: int, fill: Sequence[complex]) -> np.ndarray:
    """Append default zeros (cycled from ``fill``) until ``count`` is reached."""
    missing = count - len(zeros)
    if missing <= 0:
        return zeros
    extra = np.resize(np.asarray(fill, dtype=np.complex128), missing)
    return np.concatenate([zeros, extra])


# ───────────────────────── band forms ────────────────────────── #

def iir_lp_tf(freq: float, poles, zeros=None) -> TransferFunction:
    """
    Low-pass digital transfer function from an analog prototype.

    Parameters
    ----------
    freq : float
        Cutoff frequency, normalized (0 < freq < 0.5).
    poles : array_like of complex
        Analog prototype poles.
    zeros : array_like of complex, optional
        Analog prototype zeros; missing ones are placed at z = -1.

    Returns
    -------
    TransferFunction
        Unity gain at DC.
    """
    _check_freq(freq)
    poles, zeros = _as_roots(poles), _as_roots(zeros)
    w = math.tan(math.pi * freq)

    zp = bilinear_transform(w * poles)
    zz = _pad_zeros(bilinear_transform(w * zeros), len(zp), [-1])

    log.debug("LP: freq=%.4f warped=%.6f poles=%d zeros=%d", freq, w, len(zp), len(zz))
    return TransferFunction(zz, zp).normalize_at(0)


def iir_hp_tf(freq: float, poles, zeros=None) -> TransferFunction:
    """High-pass version of ``iir_lp_tf``; unity gain at Nyquist, default zeros at +1."""
    _check_freq(freq)
    poles, zeros = _as_roots(poles), _as_roots(zeros)
    w = math.tan(math.pi * freq)

    zp = bilinear_transform(w / poles)
    zz = _pad_zeros(bilinear_transform(w / zeros), len(zp), [1])

    log.debug("HP: freq=%.4f warped=%.6f poles=%d zeros=%d", freq, w, len(zp), len(zz))
    return TransferFunction(zz, zp).normalize_at(math.pi)


def iir_bp_tf(freq1: float, freq2: float, poles, zeros=None) -> TransferFunction:
    """
    Band-pass digital transfer function; each analog root yields two.

    Unity gain at the (warped) geometric center frequency. Default zeros are
    split between z = -1 and z = +1.
    """
    _check_band(freq1, freq2)
    poles, zeros = _as_roots(poles), _as_roots(zeros)

    w1 = math.tan(math.pi * freq1)
    w2 = math.tan(math.pi * freq2)
    f0 = math.sqrt(w1 * w2)
    bw = w2 - w1

    zp = bilinear_transform(_band_split(bw / 2 * poles, f0))
    zz = bilinear_transform(_band_split(bw / 2 * zeros, f0))
    zz = _pad_zeros(zz, len(zp), [-1, 1])

    center = 2 * math.atan(f0)
    log.debug("BP: band=[%.4f, %.4f] center=%.4f rad", freq1, freq2, center)
    return TransferFunction(zz, zp).normalize_at(center)


def iir_bs_tf(freq1: float, freq2: float, poles, zeros=None) -> TransferFunction:
    """
    Band-stop digital transfer function; unity gain at DC.

    Default zeros sit on the unit circle at the geometric center frequency.
    """
    _check_band(freq1, freq2)
    poles, zeros = _as_roots(poles), _as_roots(zeros)

    w1 = math.tan(math.pi * freq1)
    w2 = math.tan(math.pi * freq2)
    f0 = math.sqrt(w1 * w2)
    bw = w2 - w1

    zp = bilinear_transform(_band_split(bw / 2 / poles, f0))
    zz = bilinear_transform(_band_split(bw / 2 / zeros, f0))

    center = 2 * math.atan(f0)
    zz = _pad_zeros(zz, len(zp), [np.exp(1j * center), np.exp(-1j * center)])

    log.debug("BS: band=[%.4f, %.4f] notch=%.4f rad", freq1, freq2, center)
    return TransferFunction(zz, zp).normalize_at(0)


# ───────────────────────── biquads ────────────────────────── #

_GB = 1 / math.sqrt(2)  # -3 dB bandwidth edge


def iir_notch(freq: float, q: float = 20.0) -> TransferFunction:
    """Second-order notch at ``freq`` with quality factor ``q``."""
    _check_freq(freq)
    w0 = 2 * math.pi * freq
    bw = w0 / q
    beta = math.sqrt(1 - _GB * _GB) / _GB * math.tan(bw / 2)
    g = 1 / (1 + beta)

    return TransferFunction.from_coefficients([g, -2 * math.cos(w0) * g, g],
                                              [1, -2 * math.cos(w0) * g, 2 * g - 1])


def iir_peak(freq: float, q: float = 20.0) -> TransferFunction:
    """Second-order resonator peaking at ``freq``."""
    _check_freq(freq)
    w0 = 2 * math.pi * freq
    bw = w0 / q
    beta = _GB / math.sqrt(1 - _GB * _GB) * math.tan(bw / 2)
    g = 1 / (1 + beta)

    return TransferFunction.from_coefficients([1 - g, 0, g - 1],
                                              [1, -2 * math.cos(w0) * g, 2 * g - 1])


def _comb_length(freq: float) -> int:
    return int(1 / freq)


def iir_comb_notch(freq: float, q: float = 20.0) -> TransferFunction:
    """Comb notching ``freq`` and its harmonics (including DC)."""
    _check_freq(freq)
    w0 = 2 * math.pi * freq
    bw = w0 / q
    n = _comb_length(freq)
    beta = math.sqrt((1 - _GB * _GB) / (_GB * _GB)) * math.tan(n * bw / 4)

    num = np.zeros(n + 1)
    den = np.zeros(n + 1)
    num[0], num[-1] = 1 / (1 + beta), -1 / (1 + beta)
    den[0], den[-1] = 1, -(1 - beta) / (1 + beta)
    return TransferFunction.from_coefficients(num, den)


def iir_comb_peak(freq: float, q: float = 20.0) -> TransferFunction:
    """Comb resonating midway between the harmonics of ``freq`` (zeros on the harmonics)."""
    _check_freq(freq)
    w0 = 2 * math.pi * freq
    bw = w0 / q
    n = _comb_length(freq)
    beta = math.sqrt(_GB * _GB / (1 - _GB * _GB)) * math.tan(n * bw / 4)

    num = np.zeros(n + 1)
    den = np.zeros(n + 1)
    num[0], num[-1] = beta / (1 + beta), -beta / (1 + beta)
    den[0], den[-1] = 1, (1 - beta) / (1 + beta)
    return TransferFunction.from_coefficients(num, den)


# ───────────────────────── dispatcher ────────────────────────── #

Prototype = Callable[..., Tuple[np.ndarray, np.ndarray]]

PROTOTYPES: Dict[str, Prototype] = {
    'butterworth': lambda order, **kw: (butterworth_poles(order), None),
    'chebyshev1': lambda order, ripple_db=0.1, **kw: (chebyshev1_poles(order, ripple_db), None),
    'chebyshev2': lambda order, attenuation_db=40.0, **kw: (chebyshev2_poles(order, attenuation_db),
                                                             chebyshev2_zeros(order)),
    'bessel': lambda order, **kw: (bessel_poles(order), None),
    'elliptic': lambda order, ripple_db=0.1, attenuation_db=40.0, **kw:
        elliptic_zeros_poles(order, ripple_db, attenuation_db)[::-1],
}

BAND_FORMS = ('lowpass', 'highpass', 'bandpass', 'bandstop')


def design_iir(kind: str, order: int, freq: Union[float, Sequence[float]],
               btype: str = 'lowpass', ripple_db: float = 0.1,
               attenuation_db: float = 40.0,
               log: Optional[logging.Logger] = None) -> TransferFunction:
    """
    Design a classic IIR filter.

    Parameters
    ----------
    kind : str
        One of ``butterworth``, ``chebyshev1``, ``chebyshev2``, ``bessel``,
        ``elliptic``.
    order : int
        Prototype order (band-pass/band-stop results have twice as many poles).
    freq : float or pair of float
        Cutoff (low/high-pass) or ``(freq1, freq2)`` (band-pass/band-stop).
    btype : str
        One of ``lowpass``, ``highpass``, ``bandpass``, ``bandstop``.
    ripple_db, attenuation_db : float
        Passband ripple and stopband attenuation, where the prototype uses them.
    """
    log = log or logging.getLogger(__name__)

    if kind not in PROTOTYPES:
        raise InvalidSpecificationError(
            f"Unknown prototype '{kind}', expected one of {sorted(PROTOTYPES)}")
    if btype not in BAND_FORMS:
        raise InvalidSpecificationError(
            f"Unknown band form '{btype}', expected one of {list(BAND_FORMS)}")

    poles, zeros = PROTOTYPES[kind](order, ripple_db=ripple_db, attenuation_db=attenuation_db)

    if btype in ('lowpass', 'highpass'):
        if np.ndim(freq) != 0:
            raise InvalidSpecificationError(f"{btype} needs a single cutoff, got {freq}")
        mapper = iir_lp_tf if btype == 'lowpass' else iir_hp_tf
        tf = mapper(float(freq), poles, zeros)
    else:
        if np.ndim(freq) != 1 or len(freq) != 2:
            raise InvalidSpecificationError(f"{btype} needs (freq1, freq2), got {freq}")
        mapper = iir_bp_tf if btype == 'bandpass' else iir_bs_tf
        tf = mapper(float(freq[0]), float(freq[1]), poles, zeros)

    log.info("Designed %s %s IIR: order=%d poles=%d stable=%s",
             kind, btype, order, len(tf.poles), tf.is_stable)
    return tf
