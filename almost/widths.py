"""
Per-width comparators and the capability surface they share.

`FLOAT32` and `FLOAT64` run the same comparison over different bit layouts.
`comparator_for` picks one from the operand types, following numpy's
promotion rule that Python floats adopt the width of any numpy operand.
"""

from __future__ import annotations

from typing import Final, NoReturn, Protocol, runtime_checkable

import numpy as np
from beartype import beartype

from almost.compare import equal_with_tolerance
from almost.config import get_config
from almost.exceptions import ToleranceError, UnsupportedFloatTypeError
from almost.layout import FLOAT32_LAYOUT, FLOAT64_LAYOUT, BitLayout
from almost.logs.structlog import logger

FloatLike = float | np.floating

F64_EPSILON: Final[float] = float(np.finfo(np.float64).eps)
F32_EPSILON: Final[np.float32] = np.finfo(np.float32).eps

# sqrt(epsilon): assume about half the significand bits of an arbitrary
# computation have been lost to rounding.
F64_TOLERANCE: Final[float] = 0.000000014901161193847656
F32_TOLERANCE: Final[np.float32] = np.float32(0.00034526698)


@runtime_checkable
class AlmostEqual(Protocol):
    """Capability every width-specific comparator provides."""

    @property
    def machine_epsilon(self) -> FloatLike: ...

    @property
    def default_tolerance(self) -> FloatLike: ...

    def almost_equals_with(self, lhs: FloatLike, rhs: FloatLike, tol: FloatLike) -> bool: ...

    def almost_zero_with(self, value: FloatLike, tol: FloatLike) -> bool: ...

    def almost_equals(self, lhs: FloatLike, rhs: FloatLike) -> bool: ...

    def almost_zero(self, value: FloatLike) -> bool: ...


class FloatComparator:
    """Relative/absolute tolerance comparisons for one floating-point width."""

    @beartype
    def __init__(self, layout: BitLayout, default_tolerance: FloatLike) -> None:
        self.layout = layout
        self._machine_epsilon = layout.machine_epsilon
        self._default_tolerance = layout.float_type(default_tolerance)

    def __repr__(self) -> str:
        return f"FloatComparator({self.layout.float_type.__name__})"

    @property
    def machine_epsilon(self) -> np.floating:
        """
        Gap between 1.0 and the next representable value.

        Usually too strict to use as a tolerance directly.
        """
        return self._machine_epsilon

    @property
    def default_tolerance(self) -> np.floating:
        return self._default_tolerance

    def _cast(self, value: FloatLike) -> np.floating:
        # Python floats beyond float32 range become infinities.
        with np.errstate(over="ignore"):
            return self.layout.float_type(value)

    @beartype
    def almost_equals_with(self, lhs: FloatLike, rhs: FloatLike, tol: FloatLike) -> bool:
        """
        Compare `lhs` with `rhs` using `tol` as a relative tolerance.

        `tol` must satisfy `machine_epsilon <= tol < 1.0`; this is only
        checked in debug mode with contract checks enabled.
        """
        tol = self._cast(tol)
        if __debug__ and get_config().check_contracts:
            if not tol < 1.0:
                self._violation(tol, "relative tolerance must be less than 1.0")
            if not tol >= self._machine_epsilon:
                self._violation(tol, f"relative tolerance must be at least machine epsilon {self._machine_epsilon}")
        return equal_with_tolerance(self.layout, self._cast(lhs), self._cast(rhs), tol)

    @beartype
    def almost_zero_with(self, value: FloatLike, tol: FloatLike) -> bool:
        """
        Compare `value` with zero using `tol` as an absolute tolerance.

        Rarely what you want for anything but zero; prefer
        `almost_equals_with` when comparing two arbitrary values.
        """
        tol = self._cast(tol)
        if __debug__ and get_config().check_contracts:
            if not tol > 0.0:
                self._violation(tol, "absolute tolerance must be positive")
        return bool(self.layout.magnitude(self._cast(value)) < tol)

    @beartype
    def almost_equals(self, lhs: FloatLike, rhs: FloatLike) -> bool:
        return self.almost_equals_with(lhs, rhs, self._default_tolerance)

    @beartype
    def almost_zero(self, value: FloatLike) -> bool:
        return self.almost_zero_with(value, self._default_tolerance)

    def _violation(self, tol: np.floating, reason: str) -> NoReturn:
        logger.error(
            "Tolerance contract violated",
            width=self.layout.total_bits,
            tolerance=float(tol),
            reason=reason,
        )
        raise ToleranceError(float(tol), reason)


FLOAT32: Final[FloatComparator] = FloatComparator(FLOAT32_LAYOUT, F32_TOLERANCE)
FLOAT64: Final[FloatComparator] = FloatComparator(FLOAT64_LAYOUT, F64_TOLERANCE)

COMPARATORS: Final[dict[int, FloatComparator]] = {
    FLOAT32_LAYOUT.total_bits: FLOAT32,
    FLOAT64_LAYOUT.total_bits: FLOAT64,
}


@beartype
def comparator_for(*values: FloatLike) -> FloatComparator:
    """
    Select the comparator matching the widest numpy operand.

    Python floats carry no width of their own; with no numpy operand the
    64-bit comparator is used.

    Raises:
        UnsupportedFloatTypeError: If the widest numpy operand is neither
            float32 nor float64.
    """
    widest: np.floating | None = None
    width = 0
    for value in values:
        if isinstance(value, np.floating):
            bits = value.dtype.itemsize * 8
            if bits > width:
                widest, width = value, bits
    if widest is None:
        return FLOAT64
    try:
        return COMPARATORS[width]
    except KeyError:
        raise UnsupportedFloatTypeError(type(widest).__name__) from None
