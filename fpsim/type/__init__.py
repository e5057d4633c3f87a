# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Formats, rounding and overflow policies, and dtype helpers."""

from .dtype import NATIVE_WORD_BITS, get_compute_integer_dtype, get_storage_integer_dtype, get_word_bits
from .fixed_format import FixedFormat, infer_format, to_dyadic, to_ratio
from .overflow import OverflowMode, check_overflow, overflow_complement, overflow_int, wrap_int
from .rounding import RoundingMode, round_offset_complement, round_offset_int, select_round_offset
from .utils import arithmetic_right_shift, bit_mask, wrap_complement

__all__ = [
    # dtype
    "NATIVE_WORD_BITS",
    "get_compute_integer_dtype",
    "get_storage_integer_dtype",
    "get_word_bits",
    # data format
    "FixedFormat",
    "infer_format",
    "to_dyadic",
    "to_ratio",
    # overflow
    "OverflowMode",
    "check_overflow",
    "overflow_complement",
    "overflow_int",
    "wrap_int",
    # rounding
    "RoundingMode",
    "round_offset_complement",
    "round_offset_int",
    "select_round_offset",
    # utils
    "arithmetic_right_shift",
    "bit_mask",
    "wrap_complement",
]
