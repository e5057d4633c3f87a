# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Overflow and rounding policy configuration for resize."""

from typing import NamedTuple

from fpsim.type import OverflowMode, RoundingMode


class ResizeConfig(NamedTuple):
    """Policy applied when a value is resized.

    Attributes:
        overflow_mode: How integer bits that do not fit are handled.
        rounding_mode: How dropped fraction bits are handled.

    """

    overflow_mode: OverflowMode = OverflowMode.WRAP
    rounding_mode: RoundingMode = RoundingMode.DIRECT_NEG_INF


# Policy of an explicit `resize` call without modes.
DEFAULT_RESIZE_CONFIG = ResizeConfig()

# Policy used to fit literals at construction, which never raises for magnitude.
CONSTRUCT_RESIZE_CONFIG = ResizeConfig(OverflowMode.SAT, RoundingMode.NEAR_POS_INF)
