# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Tensor utils."""

from torch import Tensor

from .dtype import get_dtype_bits


def arithmetic_right_shift(t: Tensor, shifts: int, width: int) -> Tensor:
    """Arithmetic right shift for tensors holding `width`-bit signed values."""
    if shifts < 0:
        raise ValueError(f"Negative shift count: {shifts}")
    # Shifting past the sign bit leaves 0 or -1, same as shifting by width - 1.
    return t >> min(shifts, width - 1)


def wrap_complement(t: Tensor, width: int, is_signed: bool) -> Tensor:
    """Keep the low `width` bits of `t`, sign-extended if signed."""
    dtype_bits = get_dtype_bits(t.dtype)

    if is_signed and width >= dtype_bits:
        return t
    if width >= dtype_bits:
        raise ValueError(f"Unsigned width {width} does not fit {t.dtype}")

    low = t & ((1 << width) - 1)
    if not is_signed:
        return low

    # (x ^ s) - s moves the sign bit at position width - 1 to the top of the word
    sign_bit = 1 << (width - 1)
    return (low ^ sign_bit) - sign_bit


def bit_mask(width: int) -> int:
    """Return a mask with the low `width` bits set."""
    return (1 << width) - 1
