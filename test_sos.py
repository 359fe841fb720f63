#!/usr/bin/env python3
"""
Tests for second-order section factoring.
"""

import os
import sys

import numpy as np
import pytest
from scipy import signal

# Add the src directory to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from pyfdesign import (SosPairingError, TransferFunction, design_iir, sos_to_array,
                       sos_to_tf, tf_to_sos)
from pyfdesign.sos import Match, RootSet, remove_conjugates


FREQS = np.linspace(0.0, 0.5, 100)


def random_real_roots(rng, pairs, reals, r_min=0.2, r_max=0.95):
    radius = rng.uniform(r_min, r_max, pairs)
    angle = rng.uniform(0.1, np.pi - 0.1, pairs)
    c = radius * np.exp(1j * angle)
    real = rng.uniform(-r_max, r_max, reals)
    return np.concatenate([c, c.conj(), real])


@pytest.mark.parametrize("seed, pairs, reals", [
    (0, 2, 0),
    (1, 2, 1),
    (2, 3, 0),
    (3, 3, 1),
    (4, 3, 2),
    (5, 4, 0),
])
def test_sos_round_trip_reproduces_response(seed, pairs, reals):
    rng = np.random.default_rng(seed)
    tf = TransferFunction(zeros=random_real_roots(rng, pairs, reals, 0.5, 1.0),
                          poles=random_real_roots(rng, pairs, reals),
                          gain=rng.uniform(0.5, 2.0))

    sections = tf_to_sos(tf)
    assert len(sections) == (2 * pairs + reals + 1) // 2

    restored = sos_to_tf(sections)
    np.testing.assert_allclose(restored.frequency_response(FREQS),
                               tf.frequency_response(FREQS), atol=1e-6)


def test_sections_have_two_roots_and_gain_in_first():
    tf = design_iir('butterworth', 5, 0.15)
    sections = tf_to_sos(tf)

    assert len(sections) == 3
    for s in sections:
        assert len(s.zeros) == 2 and len(s.poles) == 2
    assert sections[0].gain == pytest.approx(tf.gain)
    assert all(s.gain == 1.0 for s in sections[1:])


def test_sharpest_poles_end_up_last():
    tf = design_iir('chebyshev1', 6, 0.2, ripple_db=1.0)
    radii = [np.max(np.abs(s.poles)) for s in tf_to_sos(tf)]
    assert radii[-1] == pytest.approx(max(radii))


def test_sections_are_real_biquads():
    tf = design_iir('elliptic', 6, (0.1, 0.2), 'bandpass', ripple_db=0.5, attenuation_db=50)
    sections = tf_to_sos(tf)
    for s in sections:
        assert np.max(np.abs(np.imag(s.numerator))) < 1e-9
        assert np.max(np.abs(np.imag(s.denominator))) < 1e-9


def test_sos_array_matches_scipy_sosfreqz():
    tf = design_iir('butterworth', 6, (0.1, 0.3), 'bandstop')
    sos = sos_to_array(tf_to_sos(tf))
    assert sos.shape == (6, 6)
    np.testing.assert_allclose(sos[:, 3], 1.0)

    _, h = signal.sosfreqz(sos, worN=2 * np.pi * FREQS)
    np.testing.assert_allclose(h, tf.frequency_response(FREQS), atol=1e-6)


def test_unequal_root_counts_are_padded():
    tf = TransferFunction(zeros=[-1.0], poles=[0.5 + 0.3j, 0.5 - 0.3j, 0.2])
    sections = tf_to_sos(tf)
    assert len(sections) == 2
    np.testing.assert_allclose(sos_to_tf(sections).frequency_response(FREQS),
                               tf.frequency_response(FREQS), atol=1e-9)


def test_gain_only_transfer_function():
    sections = tf_to_sos(TransferFunction(gain=3.0))
    assert len(sections) == 1
    assert sos_to_tf(sections).evaluate(1.0) == pytest.approx(3.0)


def test_missing_conjugate_fails():
    tf = TransferFunction(zeros=[0.5 + 0.5j, -1.0], poles=[0.1, 0.2])
    with pytest.raises(SosPairingError):
        tf_to_sos(tf)


def test_missing_conjugate_is_value_error():
    with pytest.raises(ValueError):
        remove_conjugates([0.3 + 0.4j])


# ───────────────────────── working set ────────────────────────── #

def test_remove_conjugates_keeps_first_of_each_pair():
    kept = remove_conjugates([1 + 1j, 2.0, 1 - 1j, -3.0, 0.5 - 0.2j, 0.5 + 0.2j])
    np.testing.assert_array_equal(kept, [1 + 1j, 2.0, -3.0, 0.5 - 0.2j])


def test_root_set_skips_consumed_entries():
    roots = RootSet([0.99, 0.5 + 0.5j, 0.1])
    assert roots.closest_to_unit_circle() == 0
    roots.take(0)
    assert len(roots) == 2
    assert roots.closest_to_unit_circle() == 1
    assert roots.closest_to_value(0.0, Match.REAL) == 2


def test_root_set_falls_back_to_first_live_entry():
    roots = RootSet([0.9, 0.3 + 0.3j, 0.2 + 0.1j])
    roots.take(0)
    assert roots.closest_to_value(0.0, Match.REAL) == 1
    assert roots.all(Match.COMPLEX)
    assert roots.count(Match.REAL) == 0


def test_root_set_exhaustion():
    roots = RootSet([0.5])
    roots.take(0)
    with pytest.raises(SosPairingError):
        roots.closest_to_unit_circle()
    with pytest.raises(SosPairingError):
        roots.take(0)
