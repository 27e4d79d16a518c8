"""
Exception hierarchy for almost.

Comparisons themselves never fail; these are raised for contract violations
(checked only in debug mode) and for unsupported operand types.
"""

from __future__ import annotations


class AlmostError(Exception):
    """Base exception for all almost errors."""

    pass


class ToleranceError(AlmostError, ValueError):
    """Raised when a tolerance falls outside the range its comparison accepts."""

    def __init__(self, tolerance: float, reason: str) -> None:
        self.tolerance = tolerance
        self.reason = reason
        super().__init__(f"Invalid tolerance {tolerance!r}: {reason}")


class UnsupportedFloatTypeError(AlmostError, TypeError):
    """Raised when operands resolve to a floating-point width with no comparator."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"No almost-equal comparator for floating-point type {type_name}")
