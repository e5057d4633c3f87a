# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Small and large fixed-point representations and format promotion."""

from .large import LargeFixed
from .promotion import (
    add_format,
    div_format,
    fits_small,
    mul_format,
    negate_format,
    resize_word_bits,
    signed_format,
)
from .small import SmallFixed

__all__ = [
    # representations
    "LargeFixed",
    "SmallFixed",
    # promotion
    "add_format",
    "div_format",
    "fits_small",
    "mul_format",
    "negate_format",
    "resize_word_bits",
    "signed_format",
]
