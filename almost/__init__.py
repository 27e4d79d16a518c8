"""
Approximate equality for floating-point values.

Arbitrary values are compared with a relative tolerance, zero with an
absolute one. The default tolerance is the square root of the machine
epsilon of the operands' width, and infinities, NaN and subnormals are
handled explicitly.
"""

from almost import floats
from almost.exceptions import AlmostError, ToleranceError, UnsupportedFloatTypeError
from almost.floats import equal, equal_with, zero, zero_with
from almost.widths import (
    F32_EPSILON,
    F32_TOLERANCE,
    F64_EPSILON,
    F64_TOLERANCE,
    FLOAT32,
    FLOAT64,
    AlmostEqual,
    FloatComparator,
)

__all__ = [
    "AlmostEqual",
    "AlmostError",
    "F32_EPSILON",
    "F32_TOLERANCE",
    "F64_EPSILON",
    "F64_TOLERANCE",
    "FLOAT32",
    "FLOAT64",
    "FloatComparator",
    "ToleranceError",
    "UnsupportedFloatTypeError",
    "equal",
    "equal_with",
    "floats",
    "zero",
    "zero_with",
]
