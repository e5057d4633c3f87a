# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Fixed-point format definition and literal conversion helpers."""

import math
from dataclasses import dataclass
from numbers import Rational, Real
from typing import Self

import torch

from fpsim.errors import InvalidFormatError

from .dtype import get_compute_integer_dtype, get_storage_integer_dtype, get_word_bits


@dataclass(frozen=True)
class FixedFormat:
    """Fixed-point format definition.

    The represented bit positions run from `int_bits - 1` (MSB) down to
    `-frac_bits` (LSB). Either field may be negative as long as at least one
    bit remains.

    Attributes:
        int_bits: Number of bits above the binary point.
        frac_bits: Number of bits below the binary point.

    Raises:
        TypeError: If a field is not an integer.
        InvalidFormatError: If `int_bits + frac_bits < 1`.

    """

    int_bits: int
    frac_bits: int

    def __post_init__(self) -> None:
        if not isinstance(self.int_bits, int) or not isinstance(self.frac_bits, int):
            raise TypeError(f"Format fields must be int, got ({self.int_bits!r}, {self.frac_bits!r})")
        if self.int_bits + self.frac_bits < 1:
            raise InvalidFormatError(
                f"Format ({self.int_bits}, {self.frac_bits}) has {self.int_bits + self.frac_bits} total bits, need >= 1"
            )

    @classmethod
    def from_tuple(cls, fmt: tuple[int, int]) -> Self:
        """Build a format from an `(int_bits, frac_bits)` tuple."""
        if not isinstance(fmt, tuple) or len(fmt) != 2:
            raise TypeError(f"Format must be an (int_bits, frac_bits) tuple, got {fmt!r}")
        return cls(fmt[0], fmt[1])

    def as_tuple(self) -> tuple[int, int]:
        """Return the `(int_bits, frac_bits)` tuple."""
        return (self.int_bits, self.frac_bits)

    # --- Bit positions ---

    @property
    def total_bits(self) -> int:
        """Get total number of bits."""
        return self.int_bits + self.frac_bits

    @property
    def msb_pos(self) -> int:
        """Get bit position of the most significant bit."""
        return self.int_bits - 1

    @property
    def lsb_pos(self) -> int:
        """Get bit position of the least significant bit."""
        return -self.frac_bits

    @property
    def field_mask(self) -> int:
        """Get mask covering the whole bit field."""
        return (1 << self.total_bits) - 1

    def union(self, other: "FixedFormat") -> "FixedFormat":
        """Return the componentwise maximum of two formats."""
        return FixedFormat(max(self.int_bits, other.int_bits), max(self.frac_bits, other.frac_bits))

    # --- Field limits ---

    def max_field(self, is_signed: bool) -> int:
        """Get the largest bit field value."""
        if is_signed:
            return (1 << (self.total_bits - 1)) - 1
        return (1 << self.total_bits) - 1

    def min_field(self, is_signed: bool) -> int:
        """Get the smallest bit field value."""
        if is_signed:
            return -(1 << (self.total_bits - 1))
        return 0

    # --- Dtype helpers ---

    def word_bits(self, is_signed: bool) -> int:
        """Get signed word width needed to hold the field."""
        return get_word_bits(self.total_bits, is_signed)

    def storage_dtype(self, is_signed: bool) -> torch.dtype:
        """Get storage dtype for the field."""
        return get_storage_integer_dtype(self.word_bits(is_signed))

    def compute_dtype(self, is_signed: bool) -> torch.dtype:
        """Get compute dtype for the field."""
        return get_compute_integer_dtype(self.word_bits(is_signed))

    def __str__(self) -> str:
        return f"({self.int_bits}, {self.frac_bits})"


def to_ratio(value: Real) -> tuple[int, int]:
    """Return `value` as an exact `(numerator, denominator)` pair.

    Raises:
        TypeError: If `value` is not a real number.
        ValueError: If `value` is infinite or NaN.

    """
    if isinstance(value, Rational):
        return value.numerator, value.denominator
    if isinstance(value, Real):
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Cannot convert {value} to fixed point")
        return value.as_integer_ratio()
    raise TypeError(f"Cannot convert {type(value).__name__} to fixed point")


def to_dyadic(value: Real) -> tuple[int, int]:
    """Return `(mantissa, frac_bits)` with `value == mantissa * 2**-frac_bits`.

    Raises:
        ValueError: If the denominator of `value` is not a power of two.

    """
    numerator, denominator = to_ratio(value)
    if denominator & (denominator - 1):
        raise ValueError(f"{value} has no exact binary representation")
    return numerator, denominator.bit_length() - 1


def infer_format(value: Real) -> FixedFormat:
    """Return the smallest signed format that holds `value` exactly.

    Integers take their bit length plus a sign bit. Fractions take one bit
    more than their binary exponent and as many fraction bits as they need.
    """
    mantissa, frac_bits = to_dyadic(value)
    exponent = abs(mantissa).bit_length() - frac_bits
    return FixedFormat(max(exponent, 0) + 1, frac_bits)
