# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Fixed-point representation backed by an arbitrary-precision integer."""

from dataclasses import dataclass
from typing import Self

from fpsim.errors import FixedPointZeroDivisionError
from fpsim.type import (
    FixedFormat,
    OverflowMode,
    RoundingMode,
    bit_mask,
    overflow_int,
    round_offset_int,
    wrap_int,
)

from .promotion import add_format, div_format, mul_format, negate_format, signed_format


@dataclass
class LargeFixed:
    """Fixed-point value stored in a Python integer.

    Mirrors `SmallFixed` operation by operation, without any width limit.

    Attributes:
        payload: Field value, negative only when signed.
        fmt: Fixed-point format.
        is_signed: Whether the field is two's complement.

    """

    payload: int
    fmt: FixedFormat
    is_signed: bool

    @classmethod
    def from_field(cls, field: int, fmt: FixedFormat, is_signed: bool) -> Self:
        """Wrap an in-range field value."""
        return cls(field, fmt, is_signed)

    @property
    def field(self) -> int:
        return self.payload

    def is_zero(self) -> bool:
        return self.payload == 0

    def is_negative(self) -> bool:
        return self.payload < 0

    def copy(self) -> Self:
        return self.__class__(self.payload, self.fmt, self.is_signed)

    def to_signed(self) -> Self:
        if self.is_signed:
            return self.copy()
        return self.__class__(self.payload, signed_format(self.fmt), True)

    # --- Arithmetic ---

    def _align(self, frac_bits: int) -> int:
        return self.payload << (frac_bits - self.fmt.frac_bits)

    def add(self, other: Self) -> Self:
        fmt = add_format(self.fmt, other.fmt)
        return self.__class__(self._align(fmt.frac_bits) + other._align(fmt.frac_bits), fmt, self.is_signed)

    def sub(self, other: Self) -> Self:
        fmt = add_format(self.fmt, other.fmt)
        return self.__class__(self._align(fmt.frac_bits) - other._align(fmt.frac_bits), fmt, True)

    def mul(self, other: Self) -> Self:
        fmt = mul_format(self.fmt, other.fmt)
        return self.__class__(self.payload * other.payload, fmt, self.is_signed)

    def div(self, other: Self) -> Self:
        """Divide, truncating the quotient towards zero.

        Raises:
            FixedPointZeroDivisionError: If `other` is zero.

        """
        if other.is_zero():
            raise FixedPointZeroDivisionError("Fixed point divide by zero.")

        fmt = div_format(self.fmt, other.fmt, self.is_signed)

        # Floor division of magnitudes is truncation towards zero.
        quotient = (abs(self.payload) << other.fmt.total_bits) // abs(other.payload)
        if (self.payload < 0) != (other.payload < 0):
            quotient = -quotient
        return self.__class__(quotient, fmt, self.is_signed)

    def negate(self) -> Self:
        return self.__class__(-self.payload, negate_format(self.fmt), True)

    def abs(self) -> Self:
        if not self.is_signed:
            return self.copy()
        return self.__class__(abs(self.payload), negate_format(self.fmt), True)

    def compare(self, other: Self) -> int:
        """Return -1, 0 or 1 as `self` is below, equal to or above `other`."""
        frac_bits = max(self.fmt.frac_bits, other.fmt.frac_bits)
        lhs = self._align(frac_bits)
        rhs = other._align(frac_bits)
        return (lhs > rhs) - (lhs < rhs)

    # --- Shifts ---

    def shift_left(self, shift: int) -> Self:
        """Shift bits left inside the field, discarding bits above the MSB."""
        if shift < 0:
            raise ValueError(f"Negative shift count: {shift}")
        return self.__class__(wrap_int(self.payload << shift, self.fmt.total_bits, self.is_signed), self.fmt, self.is_signed)

    def shift_right(self, shift: int) -> Self:
        """Arithmetic shift right inside the field, discarding bits below the LSB."""
        if shift < 0:
            raise ValueError(f"Negative shift count: {shift}")
        return self.__class__(self.payload >> shift, self.fmt, self.is_signed)

    # --- Bit access ---

    def bit_at(self, pos: int) -> bool:
        return bool((self.payload >> pos) & 1)

    def slice(self, hi: int, lo: int) -> int:
        """Return bits `hi` down to `lo` (inclusive) as an unsigned integer."""
        return (self.payload >> lo) & bit_mask(hi - lo + 1)

    def to_unsigned_int(self) -> int:
        return self.payload & self.fmt.field_mask

    def to_signed_int(self) -> int:
        return wrap_int(self.payload, self.fmt.total_bits, True)

    def to_float(self) -> float:
        """Convert to the nearest float.

        Raises:
            OverflowError: If the value is beyond the float range.

        """
        if self.fmt.frac_bits >= 0:
            # int / int is correctly rounded, even past the float range of either operand.
            return self.payload / (1 << self.fmt.frac_bits)
        return float(self.payload << -self.fmt.frac_bits)

    # --- Resize ---

    def resize(self, fmt: FixedFormat, overflow_mode: OverflowMode, rounding_mode: RoundingMode) -> Self:
        """Round to `fmt.frac_bits`, then fit the integer part to `fmt`, in place."""
        data = self.payload

        # --- 1. Align fraction bits, rounding dropped bits ---

        if fmt.frac_bits < self.fmt.frac_bits:
            drop_shift = self.fmt.frac_bits - fmt.frac_bits
            data = (data >> drop_shift) + round_offset_int(data, drop_shift, rounding_mode)
        elif fmt.frac_bits > self.fmt.frac_bits:
            data = data << (fmt.frac_bits - self.fmt.frac_bits)

        # --- 2. Fit integer bits, including any rounding carry ---

        self.payload = overflow_int(data, fmt, self.is_signed, overflow_mode)
        self.fmt = fmt
        return self
