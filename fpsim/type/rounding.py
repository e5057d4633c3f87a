# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Rounding utils."""

from enum import StrEnum, auto

import torch
from torch import Tensor


class RoundingMode(StrEnum):
    """Rounding modes applied when fraction bits are dropped.

    Each mode also accepts a descriptive alias, e.g. `RoundingMode("floor")`.

    Attributes:
        DIRECT_NEG_INF: Round towards -inf (floor).
        DIRECT_ZERO: Round towards zero (truncate).
        NEAR_POS_INF: Round to nearest, ties to +inf.
        NEAR_ZERO: Round to nearest, ties to zero.
        NEAR_EVEN: Round to nearest, ties to even.

    """

    DIRECT_NEG_INF = auto()
    DIRECT_ZERO = auto()
    NEAR_POS_INF = auto()
    NEAR_ZERO = auto()
    NEAR_EVEN = auto()

    @classmethod
    def _missing_(cls, value: object) -> "RoundingMode | None":
        aliases = {
            "floor": cls.DIRECT_NEG_INF,
            "toward_zero": cls.DIRECT_ZERO,
            "nearest_up": cls.NEAR_POS_INF,
            "nearest_toward_zero": cls.NEAR_ZERO,
            "nearest_even": cls.NEAR_EVEN,
        }
        if isinstance(value, str):
            return aliases.get(value.lower())
        return None


def select_round_offset(sign, lsb_is_odd, has_drop, has_guard, has_sticky, mode: RoundingMode):
    """Pick the rounding offset from the dropped-bit predicates.

    Works on Python bools and on bool tensors alike, since only `&` and `|`
    are applied.

    Args:
        sign: Whether the value is negative.
        lsb_is_odd: Whether the retained LSB is set.
        has_drop: Whether any dropped bit is set.
        has_guard: Whether the most significant dropped bit is set.
        has_sticky: Whether any dropped bit below the guard bit is set.
        mode: Rounding mode.

    Returns:
        Offset to add to the floor-shifted value.

    Raises:
        ValueError: If `mode` is not supported.

    """
    # truth table for DIRECT_*
    #
    # | value | integer | S | D | neg_inf | zero |
    # | >+a.0 |  +a     | 0 | 1 |   +0    |  +0  |
    # |  +a.0 |  +a     | 0 | 0 |   +0    |  +0  |
    # |  -a.0 |  -a     | 1 | 0 |   +0    |  +0  |
    # | <-a.0 |  -a-1   | 1 | 1 |   +0    |  +1  |

    # truth table for NEAR_*
    #
    # | value | integer | S | G | T | pos_inf | zero |  even  |
    # | >+a.5 |  +a     | 0 | 1 | 1 |   +1    |  +1  |   +1   |
    # |  +a.5 |  +a     | 0 | 1 | 0 |   +1    |  +0  | +lsb/o |
    # | <+a.5 |  +a     | 0 | 0 | 1 |   +0    |  +0  |   +0   |
    # |  +a.0 |  +a     | 0 | 0 | 0 |   +0    |  +0  |   +0   |
    # |  -a.0 |  -a     | 1 | 0 | 0 |   +0    |  +0  |   +0   |
    # | >-a.5 |  -a-1   | 1 | 1 | 1 |   +1    |  +1  |   +1   |
    # |  -a.5 |  -a-1   | 1 | 1 | 0 |   +1    |  +1  | +lsb/o |
    # | <-a.5 |  -a-1   | 1 | 0 | 1 |   +0    |  +0  |   +0   |

    match mode:
        case RoundingMode.DIRECT_NEG_INF:  # round towards -inf
            return has_drop & False

        case RoundingMode.DIRECT_ZERO:  # round towards zero
            return has_drop & sign

        case RoundingMode.NEAR_POS_INF:  # round to nearest, ties to +inf
            return has_guard

        case RoundingMode.NEAR_ZERO:  # round to nearest, ties to zero
            return has_guard & (has_sticky | sign)

        case RoundingMode.NEAR_EVEN:  # round to nearest, ties to even
            return has_guard & (has_sticky | lsb_is_odd)

        case _:
            raise ValueError(f"Unsupported rounding mode: {mode}")


def round_offset_complement(
    complement: Tensor,
    drop_shift: int,
    mode: RoundingMode,
) -> Tensor:
    """Compute rounding offset for two's-complement tensor inputs."""
    # --- 1. Build bit masks and boolean predicates ---

    lsb_mask = 1 << drop_shift  # LSB of integer part (?x.????)
    drop_mask = lsb_mask - 1  # All drop part (??.xxxx)
    guard_mask = lsb_mask >> 1  # Guard bit, (??.x???)
    sticky_mask = guard_mask - 1  # Below guard, (??.?xxx)

    sign = complement < 0
    lsb_is_odd = (complement & lsb_mask) != 0
    has_drop = (complement & drop_mask) != 0
    has_guard = (complement & guard_mask) != 0
    has_sticky = (complement & sticky_mask) != 0

    # --- 2. Resolve mode-specific rounding offset ---

    offset = select_round_offset(sign, lsb_is_odd, has_drop, has_guard, has_sticky, mode)
    return torch.as_tensor(offset).to(complement.dtype)


def round_offset_int(value: int, drop_shift: int, mode: RoundingMode) -> int:
    """Compute rounding offset for an arbitrary-precision integer."""
    lsb_mask = 1 << drop_shift
    guard_mask = lsb_mask >> 1

    offset = select_round_offset(
        value < 0,
        (value & lsb_mask) != 0,
        (value & (lsb_mask - 1)) != 0,
        (value & guard_mask) != 0,
        (value & (guard_mask - 1)) != 0,
        mode,
    )
    return int(offset)
