#!/usr/bin/env python3
"""
Example: design an equiripple low-pass FIR and an elliptic band-stop IIR,
then factor the IIR into second-order sections.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pyfdesign import (BandSpec, RemezDesigner, design_iir, tf_to_sos, sos_to_array,
                       verify_fir_response, verify_transfer_function, compare_with_scipy)
import numpy as np
import logging


def main():
    # Setup logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s'
    )

    print("Equiripple low-pass, 57 taps")
    print("-" * 50)

    spec = BandSpec.from_sequences([0, 0.15, 0.17, 0.5], [1, 0], [0.01, 0.1])
    result = RemezDesigner.from_spec(57, spec).design()

    print(f"Iterations: {result.iterations} (converged: {result.converged})")
    print(f"Weighted ripple: {result.delta:.3e}")

    report = verify_fir_response(result.kernel, spec)
    print(f"Passband deviation: {report['band_deviation'][0]:.4f}")
    print(f"Stopband attenuation: {report['stopband_atten_db']:.1f} dB")
    print(f"Symmetric: {report['is_symmetric']}")

    comparison = compare_with_scipy(result.kernel, spec)
    print(f"Max tap difference vs scipy.signal.remez: {comparison['max_tap_difference']:.2e}")

    print("\nElliptic band-stop, order 4, [0.2, 0.3]")
    print("-" * 50)

    tf = design_iir('elliptic', 4, (0.2, 0.3), 'bandstop', ripple_db=0.5, attenuation_db=60)
    check = verify_transfer_function(tf)
    print(f"Stable: {check['is_stable']} (max pole radius {check['max_pole_radius']:.4f})")

    sos = sos_to_array(tf_to_sos(tf))
    np.set_printoptions(precision=6, suppress=True)
    print(f"Second-order sections ({len(sos)}):")
    print(sos)


if __name__ == "__main__":
    main()
