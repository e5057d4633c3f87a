# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Fixed-point scalar, complex pair and switchable scalar value types."""

from .complex_pair import FixedPointComplex
from .fixed_point import FixedPoint
from .switchable import FixedPointSwitchable

__all__ = [
    "FixedPoint",
    "FixedPointComplex",
    "FixedPointSwitchable",
]
