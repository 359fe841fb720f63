"""
pyfdesign - Digital filter design: equiripple FIR (Parks-McClellan) and
IIR filters from analog prototypes, with second-order section factoring.
"""

from .exceptions import FilterDesignError, InvalidSpecificationError, SosPairingError
from .config import BandSpec, RemezOptions
from .grid import FrequencyGrid, build_grid
from .lagrange import BarycentricInterpolator
from .remez import (RemezDesigner, RemezResult, remez, estimate_order,
                    passband_delta_from_db, stopband_delta_from_db)
from .transfer_function import TransferFunction, multiply, add
from .iir_design import (bilinear_transform, iir_lp_tf, iir_hp_tf, iir_bp_tf, iir_bs_tf,
                         iir_notch, iir_peak, iir_comb_notch, iir_comb_peak, design_iir)
from .sos import tf_to_sos, sos_to_tf, sos_to_array
from .fir_design import (FirSpec, design_fir, fir_equiripple_lp, fir_equiripple_hp,
                         fir_equiripple_bp, fir_equiripple_bs, fir_lp_to_hp, normalize_kernel,
                         fir_win_lp, fir_win_hp, fir_win_bp, fir_win_bs, fir_win_fd_lp,
                         fir_win_fd_hp, fir_win_fd_bp, fir_win_fd_bs, fir_win_fd_ap, fir)
from .verification import verify_fir_response, compare_with_scipy, verify_transfer_function

__version__ = "0.1.0"
__all__ = [
    "FilterDesignError",
    "InvalidSpecificationError",
    "SosPairingError",
    "BandSpec",
    "RemezOptions",
    "FrequencyGrid",
    "build_grid",
    "BarycentricInterpolator",
    "RemezDesigner",
    "RemezResult",
    "remez",
    "estimate_order",
    "passband_delta_from_db",
    "stopband_delta_from_db",
    "TransferFunction",
    "multiply",
    "add",
    "bilinear_transform",
    "iir_lp_tf",
    "iir_hp_tf",
    "iir_bp_tf",
    "iir_bs_tf",
    "iir_notch",
    "iir_peak",
    "iir_comb_notch",
    "iir_comb_peak",
    "design_iir",
    "tf_to_sos",
    "sos_to_tf",
    "sos_to_array",
    "FirSpec",
    "design_fir",
    "fir_equiripple_lp",
    "fir_equiripple_hp",
    "fir_equiripple_bp",
    "fir_equiripple_bs",
    "fir_lp_to_hp",
    "normalize_kernel",
    "fir_win_lp",
    "fir_win_hp",
    "fir_win_bp",
    "fir_win_bs",
    "fir_win_fd_lp",
    "fir_win_fd_hp",
    "fir_win_fd_bp",
    "fir_win_fd_bs",
    "fir_win_fd_ap",
    "fir",
    "verify_fir_response",
    "compare_with_scipy",
    "verify_transfer_function",
]
