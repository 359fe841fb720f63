#!/usr/bin/env python3
"""
FIR Designers – equiripple, windowed-sinc and frequency sampling
=================================================================

Convenience entry points for low-pass, high-pass, band-pass and band-stop
equiripple kernels, a ripple-driven designer that picks the kernel length
itself, and the spectral-inversion conversions between complementary band
forms.

Windowed-sinc kernels come from ``scipy.signal.firwin``; the fractional-delay
variants shift the ideal response off the integer center before windowing.
``fir`` designs from sampled magnitudes.

Example
-------
>>> spec = FirSpec('lowpass', edges=(0.15, 0.17), pb_ripple=0.5, sb_atten=60)
>>> kernel, result = design_fir(spec, logging.getLogger("fir"))
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Tuple, Dict, Any, Sequence

import numpy as np
from scipy import signal

from .exceptions import InvalidSpecificationError
from .remez import (RemezDesigner, RemezResult, order_for_transition,
                    passband_delta_from_db, stopband_delta_from_db)


# ───────────────────────── Data structures ────────────────────────── #

@dataclass
class FirSpec:
    """Ripple-driven specification of an equiripple FIR design."""
    btype: str  # 'lowpass', 'highpass', 'bandpass' or 'bandstop'
    edges: Tuple[float, ...]  # inner band edges, increasing, without 0 and 0.5
    pb_ripple: float  # passband ripple, dB
    sb_atten: float  # stopband attenuation, dB
    order: Optional[int] = None  # estimated when None
    grid_density: int = 16
    max_iterations: int = 100

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'FirSpec':
        d = dict(d)
        d['edges'] = tuple(d['edges'])
        return cls(**d)


# ───────────────────────── helpers ────────────────────────── #

_BAND_LAYOUT = {
    # btype: (edge count, desired per band, passband flags)
    'lowpass': (2, (1.0, 0.0), (True, False)),
    'highpass': (2, (0.0, 1.0), (False, True)),
    'bandpass': (4, (0.0, 1.0, 0.0), (False, True, False)),
    'bandstop': (4, (1.0, 0.0, 1.0), (True, False, True)),
}


def _design(order: int, freqs: Sequence[float], desired: Sequence[float],
            weights: Sequence[float]) -> np.ndarray:
    return RemezDesigner(order, freqs, desired, weights).design().kernel


# ─────────────────────── design routines ─────────────────────── #

def fir_equiripple_lp(order: int, fp: float, fa: float,
                      wp: float = 1.0, wa: float = 1.0) -> np.ndarray:
    """Low-pass: passband [0, fp], stopband [fa, 0.5]."""
    return _design(order, [0, fp, fa, 0.5], [1, 0], [wp, wa])


def fir_equiripple_hp(order: int, fa: float, fp: float,
                      wa: float = 1.0, wp: float = 1.0) -> np.ndarray:
    """High-pass: stopband [0, fa], passband [fp, 0.5]."""
    return _design(order, [0, fa, fp, 0.5], [0, 1], [wa, wp])


def fir_equiripple_bp(order: int, fa1: float, fp1: float, fp2: float, fa2: float,
                      wa1: float = 1.0, wp: float = 1.0, wa2: float = 1.0) -> np.ndarray:
    """Band-pass: passband [fp1, fp2] between two stopbands."""
    return _design(order, [0, fa1, fp1, fp2, fa2, 0.5], [0, 1, 0], [wa1, wp, wa2])


def fir_equiripple_bs(order: int, fp1: float, fa1: float, fa2: float, fp2: float,
                      wp1: float = 1.0, wa: float = 1.0, wp2: float = 1.0) -> np.ndarray:
    """Band-stop: stopband [fa1, fa2] between two passbands."""
    return _design(order, [0, fp1, fa1, fa2, fp2, 0.5], [1, 0, 1], [wp1, wa, wp2])


def design_fir(spec: FirSpec, log: Optional[logging.Logger] = None) -> Tuple[np.ndarray, RemezResult]:
    """
    Design an equiripple kernel from ripple/attenuation targets.

    Band weights are inversely proportional to the allowed deviations, so
    the weighted minimax error treats both targets alike. When
    ``spec.order`` is None the length comes from the Herrmann estimate for
    the narrowest transition band.

    Returns
    -------
    kernel : np.ndarray
    result : RemezResult
    """
    log = log or logging.getLogger(__name__)

    if spec.btype not in _BAND_LAYOUT:
        raise InvalidSpecificationError(
            f"Unknown band form '{spec.btype}', expected one of {sorted(_BAND_LAYOUT)}")
    if spec.pb_ripple <= 0 or spec.sb_atten <= 0:
        raise InvalidSpecificationError("pb_ripple and sb_atten must be positive")

    n_edges, desired, passbands = _BAND_LAYOUT[spec.btype]
    edges = tuple(float(e) for e in spec.edges)
    if len(edges) != n_edges:
        raise InvalidSpecificationError(
            f"{spec.btype} needs {n_edges} inner band edges, got {len(edges)}")

    freqs = (0.0,) + edges + (0.5,)
    dp = passband_delta_from_db(spec.pb_ripple)
    ds = stopband_delta_from_db(spec.sb_atten)
    weights = [1.0 if is_pass else dp / ds for is_pass in passbands]

    order = spec.order
    if order is None:
        width = min(edges[i + 1] - edges[i] for i in range(0, len(edges), 2))
        order = order_for_transition(width, spec.pb_ripple, spec.sb_atten)
        log.info("Estimated kernel length: %d taps", order)

    designer = RemezDesigner(order, freqs, desired, weights, spec.grid_density, log=log)
    result = designer.design(spec.max_iterations)

    log.info("%s kernel: %d taps, passband deviation %.3e (target %.3e)",
             spec.btype, order, result.delta, dp)
    return result.kernel, result


# ─────────────────────── band conversions ─────────────────────── #

def fir_lp_to_hp(kernel) -> np.ndarray:
    """Spectral inversion: ``delta[n - mid] - h[n]``; odd lengths only."""
    kernel = np.asarray(kernel, dtype=np.float64)
    if len(kernel) % 2 == 0:
        raise InvalidSpecificationError(
            f"Kernel length must be odd for spectral inversion, got {len(kernel)}")

    inverted = -kernel
    inverted[len(kernel) // 2] += 1.0
    return inverted


fir_hp_to_lp = fir_lp_to_hp
fir_bp_to_bs = fir_lp_to_hp
fir_bs_to_bp = fir_lp_to_hp


def normalize_kernel(kernel, freq: float = 0.0) -> np.ndarray:
    """Scale to unit magnitude at angular frequency ``freq`` (radians per sample)."""
    kernel = np.asarray(kernel, dtype=np.float64)
    value = abs(np.polyval(kernel[::-1], np.exp(1j * freq)))
    if value == 0:
        raise InvalidSpecificationError(f"Kernel response vanishes at {freq} rad")
    return kernel / value


# ─────────────────────── windowed-sinc designs ─────────────────────── #

DEFAULT_WINDOW = 'blackman'


def _check_length(order: int) -> None:
    if order < 1:
        raise InvalidSpecificationError(f"Kernel length must be >= 1, got {order}")


def _check_cutoff(freq: float, name: str = "freq") -> None:
    if not 0 < freq < 0.5:
        raise InvalidSpecificationError(f"{name} must lie in (0, 0.5), got {freq}")


def _check_cutoffs(freq1: float, freq2: float) -> None:
    _check_cutoff(freq1, "freq1")
    _check_cutoff(freq2, "freq2")
    if freq1 >= freq2:
        raise InvalidSpecificationError(f"freq1 must be < freq2, got {freq1} >= {freq2}")


def _check_odd(order: int, btype: str) -> None:
    # an even-length symmetric kernel always has a zero at Nyquist
    if order % 2 == 0:
        raise InvalidSpecificationError(
            f"{btype} kernels need an odd length, got {order}")


def fir_win_lp(order: int, freq: float, window=DEFAULT_WINDOW) -> np.ndarray:
    """
    Windowed-sinc low-pass kernel of length ``order``.

    Parameters
    ----------
    order : int
        Number of taps.
    freq : float
        Cutoff (-6 dB point), normalized (0 < freq < 0.5).
    window : str or tuple
        Any window ``scipy.signal.get_window`` accepts, e.g. ``('kaiser', 8.6)``.

    Returns
    -------
    np.ndarray
        Symmetric kernel with unity gain at DC.
    """
    _check_length(order)
    _check_cutoff(freq)
    return signal.firwin(order, freq, window=window, scale=True, fs=1.0)


def fir_win_hp(order: int, freq: float, window=DEFAULT_WINDOW) -> np.ndarray:
    """Windowed-sinc high-pass; odd ``order`` only, unity gain at Nyquist."""
    _check_length(order)
    _check_cutoff(freq)
    _check_odd(order, 'highpass')
    return signal.firwin(order, freq, window=window, pass_zero=False, scale=True, fs=1.0)


def fir_win_bp(order: int, freq1: float, freq2: float, window=DEFAULT_WINDOW) -> np.ndarray:
    """Windowed-sinc band-pass; unity gain at the band center."""
    _check_length(order)
    _check_cutoffs(freq1, freq2)
    return signal.firwin(order, [freq1, freq2], window=window, pass_zero=False,
                         scale=True, fs=1.0)


def fir_win_bs(order: int, freq1: float, freq2: float, window=DEFAULT_WINDOW) -> np.ndarray:
    """Windowed-sinc band-stop; odd ``order`` only, unity gain at DC."""
    _check_length(order)
    _check_cutoffs(freq1, freq2)
    _check_odd(order, 'bandstop')
    return signal.firwin(order, [freq1, freq2], window=window, pass_zero=True,
                         scale=True, fs=1.0)


# ─────────────────────── fractional delay ─────────────────────── #

def _offsets(order: int, delay: float) -> np.ndarray:
    """Tap positions relative to the delayed center ``(order - 1) // 2 + delay``."""
    return np.arange(order) - (order - 1) // 2 - delay


def _lowpass_sinc(d: np.ndarray, freq: float) -> np.ndarray:
    return 2 * freq * np.sinc(2 * freq * d)


def _windowed(ideal: np.ndarray, window, freq: float = 0.0) -> np.ndarray:
    kernel = ideal * signal.get_window(window, len(ideal), fftbins=False)
    return normalize_kernel(kernel, freq)


def fir_win_fd_lp(order: int, freq: float, delay: float,
                  window=DEFAULT_WINDOW) -> np.ndarray:
    """
    Low-pass kernel whose center is shifted by a fractional ``delay``.

    The ideal response is sampled at ``n - (order - 1) // 2 - delay``, so the
    low-frequency group delay is ``(order - 1) // 2 + delay`` samples.
    """
    _check_length(order)
    _check_cutoff(freq)
    return _windowed(_lowpass_sinc(_offsets(order, delay), freq), window)


def fir_win_fd_hp(order: int, freq: float, delay: float,
                  window=DEFAULT_WINDOW) -> np.ndarray:
    """Fractional-delay high-pass (all-pass minus low-pass); unity gain at Nyquist."""
    _check_length(order)
    _check_cutoff(freq)
    d = _offsets(order, delay)
    return _windowed(np.sinc(d) - _lowpass_sinc(d, freq), window, np.pi)


def fir_win_fd_bp(order: int, freq1: float, freq2: float, delay: float,
                  window=DEFAULT_WINDOW) -> np.ndarray:
    """Fractional-delay band-pass; unity gain at ``(freq1 + freq2) / 2``."""
    _check_length(order)
    _check_cutoffs(freq1, freq2)
    d = _offsets(order, delay)
    ideal = _lowpass_sinc(d, freq2) - _lowpass_sinc(d, freq1)
    return _windowed(ideal, window, np.pi * (freq1 + freq2))


def fir_win_fd_bs(order: int, freq1: float, freq2: float, delay: float,
                  window=DEFAULT_WINDOW) -> np.ndarray:
    """Fractional-delay band-stop; unity gain at DC."""
    _check_length(order)
    _check_cutoffs(freq1, freq2)
    d = _offsets(order, delay)
    ideal = np.sinc(d) - _lowpass_sinc(d, freq2) + _lowpass_sinc(d, freq1)
    return _windowed(ideal, window)


def fir_win_fd_ap(order: int, delay: float, window=DEFAULT_WINDOW) -> np.ndarray:
    """Fractional-delay all-pass (windowed, shifted sinc); unity gain at DC."""
    _check_length(order)
    return _windowed(np.sinc(_offsets(order, delay)), window)


# ─────────────────────── frequency sampling ─────────────────────── #

def fir(order: int, magnitude_response, window=DEFAULT_WINDOW) -> np.ndarray:
    """
    Frequency-sampling design from uniformly spaced magnitude samples.

    ``magnitude_response[i]`` is the gain at normalized frequency
    ``i / fft_size``, where ``fft_size`` is twice the next power of two
    >= ``len(magnitude_response)``; bins past the given samples are zero.
    No interpolation is done, so the samples must already be dense enough.

    The samples get the linear phase of a ``(order - 1) / 2`` delay, are
    inverted with a real inverse FFT, truncated to ``order`` taps and
    windowed.
    """
    magnitudes = np.asarray(magnitude_response, dtype=np.float64)
    if magnitudes.ndim != 1 or len(magnitudes) == 0:
        raise InvalidSpecificationError("magnitude_response must be a non-empty 1-D sequence")
    _check_length(order)

    fft_size = 2 * (1 << (len(magnitudes) - 1).bit_length())
    if order > fft_size:
        raise InvalidSpecificationError(
            f"Kernel length {order} exceeds the FFT size {fft_size}; supply more magnitude samples")

    half = np.zeros(fft_size // 2 + 1, dtype=np.complex128)
    bins = np.arange(len(magnitudes))
    half[:len(magnitudes)] = magnitudes * np.exp(-1j * np.pi * (order - 1) * bins / fft_size)

    kernel = np.fft.irfft(half, fft_size)[:order]
    return kernel * signal.get_window(window, order, fftbins=False)
