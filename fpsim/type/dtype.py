# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Helpers for mapping machine-word widths to torch dtypes."""

import torch

# Width of the widest native integer the small representation can use.
NATIVE_WORD_BITS = 64


def get_word_bits(total_bits: int, is_signed: bool) -> int:
    """Return the signed word width needed to hold a `total_bits` field.

    Unsigned fields are held in signed words, so they need one extra bit.
    """
    return total_bits if is_signed else total_bits + 1


def get_storage_integer_dtype(word_bits: int) -> torch.dtype:
    """Return the smallest signed dtype that stores a `word_bits` word."""
    if 0 < word_bits <= 8:
        return torch.int8
    if word_bits <= 16:
        return torch.int16
    if word_bits <= 32:
        return torch.int32
    if word_bits <= NATIVE_WORD_BITS:
        return torch.int64
    raise ValueError(f"Word width {word_bits} exceeds the native word ({NATIVE_WORD_BITS} bits)")


def get_compute_integer_dtype(word_bits: int) -> torch.dtype:
    """Return the dtype that intermediate arithmetic on `word_bits` runs in."""
    if 0 < word_bits <= 32:
        return torch.int32
    if word_bits <= NATIVE_WORD_BITS:
        return torch.int64
    raise ValueError(f"Word width {word_bits} exceeds the native word ({NATIVE_WORD_BITS} bits)")


def get_dtype_bits(dtype: torch.dtype) -> int:
    """Return the number of bits in an integer dtype."""
    return torch.iinfo(dtype).bits
