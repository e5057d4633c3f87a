# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""FpSim package for bit-accurate fixed-point arithmetic simulation."""

from .config import (
    CONSTRUCT_RESIZE_CONFIG,
    DEFAULT_RESIZE_CONFIG,
    BackendConfig,
    ResizeConfig,
    backend_config,
    get_backend_config,
    set_backend_config,
)
from .errors import FixedPointError, FixedPointOverflowError, FixedPointZeroDivisionError, InvalidFormatError
from .scalar import FixedPoint, FixedPointComplex, FixedPointSwitchable
from .type import FixedFormat, OverflowMode, RoundingMode

__all__ = [
    # backend config
    "BackendConfig",
    "backend_config",
    "get_backend_config",
    "set_backend_config",
    # resize config
    "ResizeConfig",
    "DEFAULT_RESIZE_CONFIG",
    "CONSTRUCT_RESIZE_CONFIG",
    # errors
    "FixedPointError",
    "FixedPointOverflowError",
    "FixedPointZeroDivisionError",
    "InvalidFormatError",
    # data format
    "FixedFormat",
    "OverflowMode",
    "RoundingMode",
    # scalars
    "FixedPoint",
    "FixedPointComplex",
    "FixedPointSwitchable",
]
