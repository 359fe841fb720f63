"""
Filter design exceptions.
"""


class FilterDesignError(ValueError):
    """Base class for every error raised by the design engine."""
    pass


class InvalidSpecificationError(FilterDesignError):
    """Raised when a design request is rejected before any numeric work.

    Covers even filter orders, band edges that are out of [0, 0.5] or not
    strictly increasing, mismatched array lengths, non-positive weights,
    cutoff frequencies outside (0, 0.5) and ``freq1 >= freq2``.
    """
    pass


class SosPairingError(FilterDesignError):
    """Raised when a transfer function cannot be split into second-order sections.

    This happens when a non-real zero or pole has no conjugate partner, i.e.
    the transfer function does not have real coefficients.
    """
    pass
