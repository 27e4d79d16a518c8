from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from beartype import beartype


class FloatClass(str, Enum):
    FINITE = "finite"
    INFINITE = "infinite"
    NAN = "nan"


@beartype
@dataclass(frozen=True)
class BitLayout:
    """
    Bit-level description of one IEEE-754 binary floating-point width.

    Every mask and bias is derived once from the total width of `float_type`
    and the number of explicitly stored significand bits. The integers are
    plain Python ints; numeric values (`min_positive`, `max_finite`, ...) are
    scalars of `float_type` so arithmetic stays in the layout's own width.
    """

    float_type: type[np.floating]
    uint_type: type[np.unsignedinteger]
    significand_bits: int

    total_bits: int = field(init=False)
    exponent_bits: int = field(init=False)
    exponent_mask: int = field(init=False)
    exponent_bias: int = field(init=False)
    sign_bit_mask: int = field(init=False)

    def __post_init__(self) -> None:
        total_bits = np.dtype(self.float_type).itemsize * 8
        if np.dtype(self.uint_type).itemsize * 8 != total_bits:
            raise ValueError(f"{self.uint_type.__name__} does not match the width of {self.float_type.__name__}")

        exponent_bits = total_bits - self.significand_bits - 1
        object.__setattr__(self, "total_bits", total_bits)
        object.__setattr__(self, "exponent_bits", exponent_bits)
        object.__setattr__(self, "exponent_mask", ((1 << exponent_bits) - 1) << self.significand_bits)
        object.__setattr__(self, "exponent_bias", (1 << (exponent_bits - 1)) - 1)
        object.__setattr__(self, "sign_bit_mask", 1 << (total_bits - 1))

    @property
    def significand_mask(self) -> int:
        return (1 << self.significand_bits) - 1

    @property
    def min_positive(self) -> np.floating:
        """Smallest positive normal value."""
        return self.from_bits(1 << self.significand_bits)

    @property
    def max_finite(self) -> np.floating:
        return self.from_bits((self.exponent_mask - (1 << self.significand_bits)) | self.significand_mask)

    @property
    def infinity(self) -> np.floating:
        return self.from_bits(self.exponent_mask)

    @property
    def machine_epsilon(self) -> np.floating:
        return self.from_bits((self.exponent_bias - self.significand_bits) << self.significand_bits)

    def to_bits(self, value: float | np.floating) -> int:
        """Reinterpret the bit pattern of `value` as an unsigned integer."""
        return int(self.float_type(value).view(self.uint_type))

    def from_bits(self, bits: int) -> np.floating:
        """Reinterpret an unsigned bit pattern as a float of this width."""
        return self.uint_type(bits).view(self.float_type)

    def magnitude(self, value: float | np.floating) -> np.floating:
        """Absolute value computed by clearing the sign bit, never by negation."""
        return self.from_bits(self.to_bits(value) & ~self.sign_bit_mask)

    def classify(self, value: float | np.floating) -> FloatClass:
        bits = self.to_bits(value)
        if bits & self.exponent_mask != self.exponent_mask:
            return FloatClass.FINITE
        if bits & self.significand_mask:
            return FloatClass.NAN
        return FloatClass.INFINITE


FLOAT32_LAYOUT: BitLayout = BitLayout(np.float32, np.uint32, significand_bits=23)
FLOAT64_LAYOUT: BitLayout = BitLayout(np.float64, np.uint64, significand_bits=52)
