# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Result formats of arithmetic operators and representation width checks."""

from fpsim.config import get_backend_config
from fpsim.type import FixedFormat


def add_format(fmt1: FixedFormat, fmt2: FixedFormat) -> FixedFormat:
    """Format of a sum or difference: the union plus one carry bit."""
    union = fmt1.union(fmt2)
    return FixedFormat(union.int_bits + 1, union.frac_bits)


def mul_format(fmt1: FixedFormat, fmt2: FixedFormat) -> FixedFormat:
    """Format of a product: integer and fraction bits add up."""
    return FixedFormat(fmt1.int_bits + fmt2.int_bits, fmt1.frac_bits + fmt2.frac_bits)


def div_format(num: FixedFormat, den: FixedFormat, is_signed: bool) -> FixedFormat:
    """Format of a quotient.

    The smallest denominator magnitude is one LSB, so the quotient may grow by
    `den.frac_bits` integer bits (plus one for `min / -lsb` when signed). The
    numerator is pre-shifted by the whole denominator width, which leaves
    `num.frac_bits + den.int_bits` fraction bits.
    """
    int_bits = num.int_bits + den.frac_bits + (1 if is_signed else 0)
    return FixedFormat(int_bits, num.frac_bits + den.int_bits)


def negate_format(fmt: FixedFormat) -> FixedFormat:
    """Format of a negation: one extra integer bit for `-min`."""
    return FixedFormat(fmt.int_bits + 1, fmt.frac_bits)


def signed_format(fmt: FixedFormat) -> FixedFormat:
    """Format of an unsigned field converted to signed without loss."""
    return FixedFormat(fmt.int_bits + 1, fmt.frac_bits)


def resize_word_bits(old: FixedFormat, new: FixedFormat, is_signed: bool) -> int:
    """Signed word width needed by the intermediate steps of a resize.

    Covers both formats aligned to the finer LSB plus the rounding carry.
    """
    work = FixedFormat(max(old.int_bits, new.int_bits) + 1, max(old.frac_bits, new.frac_bits))
    return work.word_bits(is_signed)


def fits_small(word_bits: int) -> bool:
    """Whether a signed word of `word_bits` fits the small representation."""
    return word_bits <= get_backend_config().small_max_bits
