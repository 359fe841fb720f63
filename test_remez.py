#!/usr/bin/env python3
"""
Tests for the Parks-McClellan (Remez exchange) designer.
"""

import os
import sys

import numpy as np
import pytest
from scipy import signal

# Add the src directory to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from pyfdesign import InvalidSpecificationError, RemezDesigner, remez
from pyfdesign.config import BandSpec, RemezOptions
from pyfdesign.remez import (alternate, db_from_passband_delta, db_from_stopband_delta,
                             estimate_order, find_extrema, initial_extrema,
                             passband_delta_from_db, reconstruct_kernel, reduce_extrema,
                             stopband_delta_from_db)
from pyfdesign.lagrange import BarycentricInterpolator, to_cosine


SCENARIO = dict(order=57, freqs=[0, 0.15, 0.17, 0.5], desired=[1, 0], weights=[0.01, 0.1])


def amplitude(kernel, freqs):
    """Zero-phase amplitude of a symmetric odd-length kernel."""
    mid = len(kernel) // 2
    k = np.arange(1, mid + 1)
    return kernel[mid] + 2 * np.cos(2 * np.pi * np.outer(freqs, k)) @ kernel[mid + 1:]


def weighted_band_error(kernel, freqs, desired, weights, n=8192):
    w, h = signal.freqz(kernel, worN=n, include_nyquist=True)
    f = w / (2 * np.pi)
    worst = 0.0
    for b in range(len(desired)):
        band = (f >= freqs[2 * b]) & (f <= freqs[2 * b + 1])
        worst = max(worst, weights[b] * np.max(np.abs(np.abs(h[band]) - desired[b])))
    return worst


@pytest.fixture(scope="module")
def scenario_result():
    designer = RemezDesigner(SCENARIO['order'], SCENARIO['freqs'],
                             SCENARIO['desired'], SCENARIO['weights'])
    return designer.design()


# ───────────────────────── scenario ────────────────────────── #

def test_scenario_kernel_length_and_symmetry(scenario_result):
    kernel = scenario_result.kernel
    assert kernel.shape == (57,)
    np.testing.assert_allclose(kernel, kernel[::-1], atol=1e-12)


def test_scenario_converges(scenario_result):
    assert scenario_result.converged
    assert scenario_result.iterations <= 100
    assert scenario_result.delta > 0


def test_scenario_passband_within_weighted_ripple(scenario_result):
    kernel = scenario_result.kernel
    f = np.linspace(0, 0.15, 2000)
    passband_error = np.max(np.abs(amplitude(kernel, f) - 1))

    # weighted errors are equal, so the passband deviation is delta / 0.01
    assert passband_error <= 1.05 * scenario_result.delta / 0.01

    f = np.linspace(0.17, 0.5, 2000)
    stopband_error = np.max(np.abs(amplitude(kernel, f)))
    assert stopband_error <= 1.05 * scenario_result.delta / 0.1
    assert passband_error > stopband_error


def test_scenario_matches_scipy_minimax(scenario_result):
    ref = signal.remez(57, SCENARIO['freqs'], SCENARIO['desired'],
                       weight=SCENARIO['weights'], fs=1.0)
    ours = weighted_band_error(scenario_result.kernel, SCENARIO['freqs'],
                               SCENARIO['desired'], SCENARIO['weights'])
    theirs = weighted_band_error(ref, SCENARIO['freqs'],
                                 SCENARIO['desired'], SCENARIO['weights'])
    assert ours <= 1.1 * theirs


def test_result_arrays_are_read_only(scenario_result):
    with pytest.raises(ValueError):
        scenario_result.kernel[0] = 1.0
    with pytest.raises(ValueError):
        scenario_result.error[0] = 1.0


# ───────────────────────── properties ────────────────────────── #

def test_equiripple_at_extremal_frequencies(scenario_result):
    r = scenario_result
    f = r.extremal_frequencies
    error = r.weights[r.extremal_indices] * (r.desired[r.extremal_indices]
                                             - amplitude(r.kernel, f))
    mags = np.abs(error)
    assert (mags.max() - mags.min()) / mags.min() < 1e-4

    # alternating signs
    assert np.all(np.sign(error[1:]) == -np.sign(error[:-1]))


def test_extremal_set_size_and_order(scenario_result):
    ext = scenario_result.extremal_indices
    assert len(ext) == 57 // 2 + 2
    assert np.all(np.diff(ext) > 0)


def test_band_errors_match_ripple_at_convergence(scenario_result):
    r = scenario_result
    assert r.band_errors.shape == (2,)
    np.testing.assert_allclose(r.band_errors, r.delta, rtol=1e-3)


def test_higher_order_does_not_increase_error():
    deltas = [RemezDesigner(order, [0, 0.2, 0.3, 0.5], [1, 0]).design().delta
              for order in (21, 31, 41)]
    assert deltas[1] <= deltas[0] * (1 + 1e-6)
    assert deltas[2] <= deltas[1] * (1 + 1e-6)
    assert deltas[2] < deltas[0]


def test_bandpass_design_is_symmetric_and_converges():
    result = RemezDesigner(63, [0, 0.1, 0.15, 0.3, 0.35, 0.5], [0, 1, 0]).design()
    assert result.converged
    np.testing.assert_allclose(result.kernel, result.kernel[::-1], atol=1e-12)
    assert abs(amplitude(result.kernel, [0.225])[0] - 1) <= 1.05 * result.delta


def test_iteration_cap_returns_last_state():
    result = RemezDesigner(**SCENARIO).design(max_iterations=1)
    assert result.iterations == 1
    assert not result.converged
    assert len(result.kernel) == 57


def test_design_is_repeatable():
    designer = RemezDesigner(31, [0, 0.2, 0.3, 0.5], [1, 0])
    first = designer.design()
    second = designer.design()
    np.testing.assert_array_equal(first.kernel, second.kernel)
    assert first.kernel is not second.kernel


def test_remez_shortcut_and_from_spec_agree():
    spec = BandSpec.from_sequences([0, 0.2, 0.3, 0.5], [1, 0])
    a = remez(31, spec.edges, spec.desired)
    b = RemezDesigner.from_spec(31, spec, RemezOptions()).design().kernel
    np.testing.assert_allclose(a, b)


# ───────────────────────── invalid specs ────────────────────────── #

@pytest.mark.parametrize("kwargs", [
    dict(order=56, freqs=[0, 0.15, 0.17, 0.5], desired=[1, 0]),
    dict(order=1, freqs=[0, 0.15, 0.17, 0.5], desired=[1, 0]),
    dict(order=57, freqs=[0, 0.17, 0.15, 0.5], desired=[1, 0]),
    dict(order=57, freqs=[0, 0.15, 0.17, 0.6], desired=[1, 0]),
    dict(order=57, freqs=[0, 0.15, 0.17], desired=[1, 0]),
    dict(order=57, freqs=[0, 0.15, 0.17, 0.5], desired=[1]),
    dict(order=57, freqs=[0, 0.15, 0.17, 0.5], desired=[1, 0], weights=[1]),
    dict(order=57, freqs=[0, 0.15, 0.17, 0.5], desired=[1, 0], weights=[1, 0]),
])
def test_invalid_specification_rejected(kwargs):
    with pytest.raises(InvalidSpecificationError):
        RemezDesigner(**kwargs)


def test_invalid_specification_is_value_error():
    with pytest.raises(ValueError):
        RemezDesigner(56, [0, 0.15, 0.17, 0.5], [1, 0])


def test_max_iterations_must_be_positive():
    with pytest.raises(InvalidSpecificationError):
        RemezDesigner(31, [0, 0.2, 0.3, 0.5], [1, 0]).design(max_iterations=0)


# ───────────────────────── exchange steps ────────────────────────── #

def test_initial_extrema_span_grid():
    ext = initial_extrema(100, 7)
    assert ext[0] == 0 and ext[-1] == 99
    assert len(ext) == 7
    assert np.all(np.diff(ext) > 0)


def test_find_extrema_includes_boundaries():
    error = np.array([0.5, -1.0, 2.0, -0.5, 0.1])
    np.testing.assert_array_equal(find_extrema(error), [0, 1, 2, 3, 4])


def test_find_extrema_skips_monotonic_runs():
    error = np.array([1.0, 0.5, 0.2, -0.3, -0.8, -0.4])
    np.testing.assert_array_equal(find_extrema(error), [0, 4])


def test_alternate_keeps_largest_of_same_sign_run():
    error = np.array([1.0, 2.0, -1.0, -3.0, 0.5])
    np.testing.assert_array_equal(alternate(np.arange(5), error), [1, 3, 4])


def test_reduce_drops_interior_minimum_and_neighbour():
    error = np.array([1.0, -0.1, 2.0, -2.0, 1.5, -1.2])
    np.testing.assert_array_equal(reduce_extrema(np.arange(6), error, 4), [2, 3, 4, 5])


def test_reduce_keeps_alternation_over_several_rounds():
    error = np.array([1.0, -1.5, 0.2, -1.8, 1.6, -0.3, 1.4, -1.1])
    kept = reduce_extrema(np.arange(8), error, 4)
    np.testing.assert_array_equal(kept, [0, 3, 4, 7])
    assert np.all(np.sign(error[kept][1:]) == -np.sign(error[kept][:-1]))


def test_reduce_single_excess_drops_smaller_end():
    error = np.array([1.0, -0.1, 2.0, -2.0, 1.5])
    np.testing.assert_array_equal(reduce_extrema(np.arange(5), error, 4), [1, 2, 3, 4])


def test_reduce_drops_end_point_minimum():
    error = np.array([0.1, -1.0, 2.0, -2.0, 1.5, -1.2])
    np.testing.assert_array_equal(reduce_extrema(np.arange(6), error, 4), [2, 3, 4, 5])


def test_reconstruct_kernel_from_cosine_polynomial():
    # A(f) = 0.4 + 0.6 cos(2 pi f)  ->  taps [0.3, 0.4, 0.3] around the centre
    x = to_cosine(np.linspace(0, 0.5, 5))
    interp = BarycentricInterpolator(x, 0.4 + 0.6 * x)
    kernel = reconstruct_kernel(interp, 5)
    np.testing.assert_allclose(kernel, [0, 0.3, 0.4, 0.3, 0], atol=1e-12)


# ───────────────────────── order estimation ────────────────────────── #

def test_db_helpers():
    assert stopband_delta_from_db(60) == pytest.approx(1e-3)
    assert db_from_stopband_delta(1e-3) == pytest.approx(60)
    assert db_from_passband_delta(passband_delta_from_db(0.5)) == pytest.approx(0.5)


def test_estimate_order_is_odd_and_grows_with_narrower_transition():
    wide = estimate_order(0.1, 0.2, 1.0, 60)
    narrow = estimate_order(0.1, 0.12, 1.0, 60)
    assert wide % 2 == 1 and narrow % 2 == 1
    assert narrow > wide


def test_estimate_order_rejects_bad_edges():
    with pytest.raises(InvalidSpecificationError):
        estimate_order(0.2, 0.1, 1.0, 60)
