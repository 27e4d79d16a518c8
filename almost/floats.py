from __future__ import annotations

from beartype import beartype

from almost.widths import FloatLike, comparator_for


@beartype
def equal(lhs: FloatLike, rhs: FloatLike) -> bool:
    """Compare two floats with the default relative tolerance of their width."""
    return comparator_for(lhs, rhs).almost_equals(lhs, rhs)


@beartype
def zero(value: FloatLike) -> bool:
    """Check if a float is within the default tolerance of zero, used as an absolute bound."""
    return comparator_for(value).almost_zero(value)


@beartype
def zero_with(value: FloatLike, tol: FloatLike) -> bool:
    """Check if `|value| < tol`."""
    return comparator_for(value).almost_zero_with(value, tol)


@beartype
def equal_with(lhs: FloatLike, rhs: FloatLike, tol: FloatLike) -> bool:
    """
    Compare two floats using `tol` as a relative tolerance.

    `tol` should lie in `[machine_epsilon, 1.0)` for the operands' width.
    The width is taken from the operands; `tol` is converted to it.
    """
    return comparator_for(lhs, rhs).almost_equals_with(lhs, rhs, tol)
