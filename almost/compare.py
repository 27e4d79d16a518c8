"""
Relative-tolerance comparison of two floats of the same width.

Finite operands are compared against a threshold scaled by the larger
magnitude, floored at the smallest normal value so that subnormals are
judged at the precision they actually round to. Comparisons involving an
infinity are turned into an equivalent finite comparison by moving both
operands one binade down, so no infinite subtraction is ever computed.
"""

from __future__ import annotations

import numpy as np
from beartype import beartype

from almost.layout import BitLayout, FloatClass


@beartype
def equal_with_tolerance(layout: BitLayout, lhs: np.floating, rhs: np.floating, tol: np.floating) -> bool:
    """
    Compare `lhs` and `rhs` using `tol` as a relative tolerance.

    All three scalars must already be of `layout.float_type`.

    Returns:
        True iff `|lhs - rhs| < tol * max(|lhs|, |rhs|, MIN_POSITIVE)`, with
        NaN never equal to anything and infinities handled by rescaling.
    """
    left_mag = layout.magnitude(lhs)
    right_mag = layout.magnitude(rhs)
    infinity = layout.infinity
    if not (left_mag < infinity and right_mag < infinity):
        return compare_non_finite(layout, lhs, rhs, tol)
    return _compare_finite(layout, lhs, rhs, tol)


def _compare_finite(layout: BitLayout, lhs: np.floating, rhs: np.floating, tol: np.floating) -> bool:
    scale = max(layout.magnitude(lhs), layout.magnitude(rhs))
    min_positive = layout.min_positive
    if scale <= min_positive:
        scale = min_positive

    # lhs - rhs may overflow to infinity, which correctly compares as not equal.
    with np.errstate(over="ignore"):
        abs_tol = tol * scale
        return bool(layout.magnitude(lhs - rhs) < abs_tol)


@beartype
def compare_non_finite(layout: BitLayout, lhs: np.floating, rhs: np.floating, tol: np.floating) -> bool:
    """Resolve a comparison where at least one operand is infinite or NaN."""
    lhs_class = layout.classify(lhs)
    rhs_class = layout.classify(rhs)
    if lhs_class is FloatClass.NAN or rhs_class is FloatClass.NAN:
        return False
    if lhs_class is FloatClass.INFINITE and rhs_class is FloatClass.INFINITE:
        return bool(lhs == rhs)

    if lhs_class is not FloatClass.INFINITE:
        lhs, rhs = rhs, lhs
    rescaled = rescale_infinite(layout, lhs, rhs)
    if rescaled is None:
        return False
    return _compare_finite(layout, rescaled[0], rescaled[1], tol)


@beartype
def rescale_infinite(
    layout: BitLayout, infinite: np.floating, finite: np.floating
) -> tuple[np.floating, np.floating] | None:
    """
    Map an (infinite, finite) pair onto a finite pair with the same comparison outcome.

    The infinity is replaced by the lowest value of the top finite binade,
    carrying the infinity's sign, and the finite operand is halved. Infinity
    thereby behaves like the next power of two past the largest finite value.

    Returns:
        The rescaled `(infinite, finite)` pair, or None when `finite` is zero
        or subnormal and therefore can never be close to infinity.
    """
    finite_bits = layout.to_bits(finite)
    if finite_bits & layout.exponent_mask == 0:
        return None

    top_binade_bits = layout.to_bits(layout.max_finite) & layout.exponent_mask
    new_infinite = layout.from_bits(top_binade_bits | (layout.to_bits(infinite) & layout.sign_bit_mask))

    half = layout.from_bits((layout.exponent_bias - 1) << layout.significand_bits)
    return new_infinite, finite * half
