# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Fixed-point representation backed by a native integer word."""

import math
import sys
from dataclasses import dataclass
from typing import Self

import torch
from torch import Tensor

from fpsim.errors import FixedPointZeroDivisionError
from fpsim.type import (
    NATIVE_WORD_BITS,
    FixedFormat,
    OverflowMode,
    RoundingMode,
    arithmetic_right_shift,
    bit_mask,
    get_compute_integer_dtype,
    overflow_complement,
    round_offset_complement,
    wrap_complement,
)

from .promotion import add_format, div_format, mul_format, negate_format, resize_word_bits, signed_format

_WORD_DTYPE = torch.int64


@dataclass
class SmallFixed:
    """Fixed-point value stored in a 0-dim integer tensor.

    The caller guarantees that every intermediate word of an operation fits the
    native word, see `fpsim.core.promotion`.

    Attributes:
        payload: 0-dim integer tensor holding the field, sign-extended if signed.
        fmt: Fixed-point format.
        is_signed: Whether the field is two's complement.

    """

    payload: Tensor
    fmt: FixedFormat
    is_signed: bool

    @classmethod
    def from_field(cls, field: int, fmt: FixedFormat, is_signed: bool) -> Self:
        """Wrap an in-range field value."""
        return cls(torch.tensor(field, dtype=fmt.storage_dtype(is_signed)), fmt, is_signed)

    @classmethod
    def _from_compute(cls, data: Tensor, fmt: FixedFormat, is_signed: bool) -> Self:
        return cls(data.to(fmt.storage_dtype(is_signed)), fmt, is_signed)

    @property
    def field(self) -> int:
        """Get the field as a Python integer."""
        return int(self.payload.item())

    def is_zero(self) -> bool:
        return bool(self.payload == 0)

    def is_negative(self) -> bool:
        return bool(self.payload < 0)

    def copy(self) -> Self:
        return self.__class__(self.payload.clone(), self.fmt, self.is_signed)

    def to_signed(self) -> Self:
        """Convert an unsigned value to signed with one extra integer bit."""
        if self.is_signed:
            return self.copy()
        fmt = signed_format(self.fmt)
        return self._from_compute(self.payload, fmt, True)

    # --- Arithmetic ---

    def _align(self, frac_bits: int, dtype: torch.dtype) -> Tensor:
        return self.payload.to(dtype) << (frac_bits - self.fmt.frac_bits)

    def add(self, other: Self) -> Self:
        fmt = add_format(self.fmt, other.fmt)
        dtype = fmt.compute_dtype(self.is_signed)

        data = self._align(fmt.frac_bits, dtype) + other._align(fmt.frac_bits, dtype)
        return self._from_compute(data, fmt, self.is_signed)

    def sub(self, other: Self) -> Self:
        # The difference of two unsigned values may be negative, so the result is always signed.
        fmt = add_format(self.fmt, other.fmt)
        dtype = fmt.compute_dtype(True)

        data = self._align(fmt.frac_bits, dtype) - other._align(fmt.frac_bits, dtype)
        return self._from_compute(data, fmt, True)

    def mul(self, other: Self) -> Self:
        fmt = mul_format(self.fmt, other.fmt)
        dtype = fmt.compute_dtype(self.is_signed)

        data = self.payload.to(dtype) * other.payload.to(dtype)
        return self._from_compute(data, fmt, self.is_signed)

    def div(self, other: Self) -> Self:
        """Divide, truncating the quotient towards zero.

        Raises:
            FixedPointZeroDivisionError: If `other` is zero.

        """
        if other.is_zero():
            raise FixedPointZeroDivisionError("Fixed point divide by zero.")

        fmt = div_format(self.fmt, other.fmt, self.is_signed)
        dtype = fmt.compute_dtype(self.is_signed)

        num = self.payload.to(dtype) << other.fmt.total_bits
        den = other.payload.to(dtype)
        data = torch.div(num, den, rounding_mode="trunc")
        return self._from_compute(data, fmt, self.is_signed)

    def negate(self) -> Self:
        fmt = negate_format(self.fmt)
        data = -self.payload.to(fmt.compute_dtype(True))
        return self._from_compute(data, fmt, True)

    def abs(self) -> Self:
        if not self.is_signed:
            return self.copy()
        fmt = negate_format(self.fmt)
        data = torch.abs(self.payload.to(fmt.compute_dtype(True)))
        return self._from_compute(data, fmt, True)

    def compare(self, other: Self) -> int:
        """Return -1, 0 or 1 as `self` is below, equal to or above `other`."""
        union = self.fmt.union(other.fmt)

        if union.word_bits(self.is_signed and other.is_signed) <= NATIVE_WORD_BITS:
            lhs = self._align(union.frac_bits, _WORD_DTYPE)
            rhs = other._align(union.frac_bits, _WORD_DTYPE)
            return int(lhs > rhs) - int(lhs < rhs)

        # Formats too far apart to share one word: compare the exact integers.
        lhs = self.field << (union.frac_bits - self.fmt.frac_bits)
        rhs = other.field << (union.frac_bits - other.fmt.frac_bits)
        return (lhs > rhs) - (lhs < rhs)

    # --- Shifts ---

    def shift_left(self, shift: int) -> Self:
        """Shift bits left inside the field, discarding bits above the MSB."""
        if shift < 0:
            raise ValueError(f"Negative shift count: {shift}")
        if shift >= self.fmt.total_bits:
            return self.from_field(0, self.fmt, self.is_signed)

        kept = wrap_complement(self.payload.to(_WORD_DTYPE), self.fmt.total_bits - shift, self.is_signed)
        return self._from_compute(kept << shift, self.fmt, self.is_signed)

    def shift_right(self, shift: int) -> Self:
        """Arithmetic shift right inside the field, discarding bits below the LSB."""
        data = arithmetic_right_shift(self.payload.to(_WORD_DTYPE), shift, NATIVE_WORD_BITS)
        return self._from_compute(data, self.fmt, self.is_signed)

    # --- Bit access ---

    def bit_at(self, pos: int) -> bool:
        return bool((self.payload.to(_WORD_DTYPE) >> pos) & 1)

    def slice(self, hi: int, lo: int) -> int:
        """Return bits `hi` down to `lo` (inclusive) as an unsigned integer."""
        width = hi - lo + 1
        shifted = self.payload.to(_WORD_DTYPE) >> lo
        if width < NATIVE_WORD_BITS:
            return int(shifted & bit_mask(width))
        return int(shifted) & bit_mask(width)

    def to_unsigned_int(self) -> int:
        return self.slice(self.fmt.total_bits - 1, 0)

    def to_signed_int(self) -> int:
        return int(wrap_complement(self.payload.to(_WORD_DTYPE), self.fmt.total_bits, True))

    def to_float(self) -> float:
        """Convert to the nearest float.

        Raises:
            OverflowError: If the value is beyond the float range.

        """
        scale = torch.tensor(-self.fmt.frac_bits)
        result = float(torch.ldexp(self.payload.to(torch.float64), scale))
        if math.isinf(result):
            raise OverflowError(f"{self.fmt} value is too large to convert to float")
        if self.field and abs(result) < sys.float_info.min:
            # Subnormal results would be rounded twice, divide exactly instead.
            return self.field / (1 << self.fmt.frac_bits)
        return result

    # --- Resize ---

    def resize(self, fmt: FixedFormat, overflow_mode: OverflowMode, rounding_mode: RoundingMode) -> Self:
        """Round to `fmt.frac_bits`, then fit the integer part to `fmt`, in place."""
        dtype = get_compute_integer_dtype(resize_word_bits(self.fmt, fmt, self.is_signed))
        data = self.payload.to(dtype)

        # --- 1. Align fraction bits, rounding dropped bits ---

        if fmt.frac_bits < self.fmt.frac_bits:
            drop_shift = self.fmt.frac_bits - fmt.frac_bits
            data = (data >> drop_shift) + round_offset_complement(data, drop_shift, rounding_mode)
        elif fmt.frac_bits > self.fmt.frac_bits:
            data = data << (fmt.frac_bits - self.fmt.frac_bits)

        # --- 2. Fit integer bits, including any rounding carry ---

        data = overflow_complement(data, fmt, self.is_signed, overflow_mode)

        self.payload = data.to(fmt.storage_dtype(self.is_signed))
        self.fmt = fmt
        return self
