# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Overflow utils."""

from enum import StrEnum, auto

import torch
from torch import Tensor

from fpsim.errors import FixedPointOverflowError

from .fixed_format import FixedFormat
from .utils import wrap_complement


class OverflowMode(StrEnum):
    """Overflow modes applied when integer bits are dropped.

    Each mode also accepts a descriptive alias, e.g. `OverflowMode("saturate")`.

    Attributes:
        WRAP: Keep the low bits and reinterpret them (two's-complement truncation).
        SAT: Clamp to the nearest representable value.
        EXCEP: Raise `FixedPointOverflowError`.

    """

    WRAP = auto()
    SAT = auto()
    EXCEP = auto()

    @classmethod
    def _missing_(cls, value: object) -> "OverflowMode | None":
        aliases = {
            "saturate": cls.SAT,
            "raise": cls.EXCEP,
        }
        if isinstance(value, str):
            return aliases.get(value.lower())
        return None


def check_overflow(data: Tensor, fmt: FixedFormat, is_signed: bool) -> Tensor:
    """Check whether values overflow the field of `fmt`."""
    return (data > fmt.max_field(is_signed)) | (data < fmt.min_field(is_signed))


def overflow_complement(
    data: Tensor,
    fmt: FixedFormat,
    is_signed: bool,
    mode: OverflowMode,
) -> Tensor:
    """Fit two's-complement tensor values into the field of `fmt`.

    Args:
        data: Integer tensor, already scaled to `fmt.frac_bits`.
        fmt: Target format.
        is_signed: Whether the target field is signed.
        mode: Overflow mode.

    Returns:
        Values inside the target field range.

    Raises:
        FixedPointOverflowError: If `mode` is EXCEP and a value does not fit.

    """
    match mode:
        case OverflowMode.WRAP:
            return wrap_complement(data, fmt.total_bits, is_signed)

        case OverflowMode.SAT:
            return torch.clamp(data, fmt.min_field(is_signed), fmt.max_field(is_signed))

        case OverflowMode.EXCEP:
            if bool(check_overflow(data, fmt, is_signed).any()):
                raise FixedPointOverflowError("Fixed point resize overflow.")
            return data

        case _:
            raise ValueError(f"Unsupported overflow mode: {mode}")


def wrap_int(value: int, width: int, is_signed: bool) -> int:
    """Keep the low `width` bits of `value`, sign-extended if signed."""
    value &= (1 << width) - 1
    if is_signed and value >> (width - 1):
        value -= 1 << width
    return value


def overflow_int(value: int, fmt: FixedFormat, is_signed: bool, mode: OverflowMode) -> int:
    """Fit an arbitrary-precision integer into the field of `fmt`."""
    max_field = fmt.max_field(is_signed)
    min_field = fmt.min_field(is_signed)

    if min_field <= value <= max_field:
        return value

    match mode:
        case OverflowMode.WRAP:
            return wrap_int(value, fmt.total_bits, is_signed)

        case OverflowMode.SAT:
            return max_field if value > max_field else min_field

        case OverflowMode.EXCEP:
            raise FixedPointOverflowError("Fixed point resize overflow.")

        case _:
            raise ValueError(f"Unsupported overflow mode: {mode}")
