#!/usr/bin/env python3
"""
Verification tools for designed filters.
"""

import logging
from typing import Dict, Any, Optional

import numpy as np
from scipy import signal

from .config import BandSpec, DEFAULT_GRID_DENSITY
from .transfer_function import TransferFunction

log = logging.getLogger(__name__)


def verify_fir_response(
    kernel: np.ndarray,
    spec: BandSpec,
    n_points: int = 8192
) -> Dict[str, Any]:
    """
    Measure how well a kernel meets a band specification.

    Parameters
    ----------
    kernel : np.ndarray
        FIR taps
    spec : BandSpec
        Band edges, desired gains and weights the kernel was designed for
    n_points : int
        Number of frequencies evaluated over [0, 0.5]

    Returns
    -------
    dict
        Verification results
    """
    kernel = np.asarray(kernel, dtype=np.float64)

    # Compute frequency response
    w, h = signal.freqz(kernel, worN=n_points, include_nyquist=True)
    freq = w / (2 * np.pi)
    mag = np.abs(h)

    deviations, weighted = [], []
    for b in range(spec.band_count):
        left, right = spec.band(b)
        band = (freq >= left) & (freq <= right)
        dev = float(np.max(np.abs(mag[band] - spec.desired[b]))) if band.any() else 0.0
        deviations.append(dev)
        weighted.append(dev * spec.weights[b])

    # Group delay over the passbands only
    passband = np.zeros(len(freq), dtype=bool)
    for b in range(spec.band_count):
        if spec.desired[b] > 0:
            left, right = spec.band(b)
            passband |= (freq >= left) & (freq <= right)
    if passband.any():
        _, gd = signal.group_delay((kernel, 1), w=w[passband])
        gd_variation = float(np.ptp(gd))
    else:
        gd_variation = 0.0

    symmetry_error = float(np.max(np.abs(kernel - kernel[::-1]))) if len(kernel) else 0.0
    stop = [d for d, g in zip(deviations, spec.desired) if g == 0]

    results = {
        'band_deviation': deviations,
        'weighted_deviation': weighted,
        'max_weighted_error': max(weighted),
        'equiripple_ratio': max(weighted) / min(weighted) if min(weighted) > 0 else np.inf,
        'stopband_atten_db': -20 * np.log10(max(stop) + 1e-300) if stop else None,
        'symmetry_error': symmetry_error,
        'is_symmetric': symmetry_error < 1e-12 * max(1.0, float(np.max(np.abs(kernel)))),
        'group_delay_var': gd_variation,
    }

    log.debug("FIR verification: %s", results)
    return results


def compare_with_scipy(
    kernel: np.ndarray,
    spec: BandSpec,
    grid_density: int = DEFAULT_GRID_DENSITY
) -> Dict[str, Any]:
    """
    Compare a kernel with ``scipy.signal.remez`` for the same specification.

    Parameters
    ----------
    kernel : np.ndarray
        Our filter coefficients
    spec : BandSpec
        Specification both designs use
    grid_density : int
        Grid density passed to SciPy

    Returns
    -------
    dict
        Comparison results
    """
    results = {}

    reference = signal.remez(len(kernel), list(spec.edges), list(spec.desired),
                             weight=list(spec.weights), fs=1.0, grid_density=grid_density)

    ours = verify_fir_response(kernel, spec)
    theirs = verify_fir_response(reference, spec)
    results['our_specs'] = ours
    results['scipy_specs'] = theirs
    results['scipy_kernel'] = reference

    # Compare
    results['max_tap_difference'] = float(np.max(np.abs(np.asarray(kernel) - reference)))
    results['weighted_error_ratio'] = (
        ours['max_weighted_error'] / theirs['max_weighted_error']
        if theirs['max_weighted_error'] > 0 else np.inf
    )
    if ours['stopband_atten_db'] is not None:
        results['stopband_improvement_db'] = (
            ours['stopband_atten_db'] - theirs['stopband_atten_db']
        )

    return results


def verify_transfer_function(
    tf: TransferFunction,
    frequencies: Optional[np.ndarray] = None
) -> Dict[str, Any]:
    """
    Cross-check the zero/pole evaluation of ``tf`` against ``scipy.signal.freqz``
    on its expanded coefficients.
    """
    if frequencies is None:
        frequencies = np.linspace(0, 0.5, 512)
    frequencies = np.asarray(frequencies, dtype=np.float64)

    ours = tf.frequency_response(frequencies)
    _, reference = signal.freqz(tf.numerator, tf.denominator, worN=2 * np.pi * frequencies)

    max_radius = float(np.max(np.abs(tf.poles))) if len(tf.poles) else 0.0

    return {
        'max_discrepancy': float(np.max(np.abs(ours - reference))),
        'max_pole_radius': max_radius,
        'is_stable': max_radius < 1,
        'peak_gain_db': float(20 * np.log10(np.max(np.abs(ours)) + 1e-300)),
    }
