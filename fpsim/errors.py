# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Exception types raised by fixed-point values."""


class FixedPointError(Exception):
    """Base class for errors raised by fixed-point values."""


class InvalidFormatError(FixedPointError, ValueError):
    """Raised when a format has fewer than one total bit."""


class FixedPointOverflowError(FixedPointError, OverflowError):
    """Raised by a resize with `OverflowMode.EXCEP` when the value does not fit."""


class FixedPointZeroDivisionError(FixedPointError, ZeroDivisionError):
    """Raised when dividing by a zero-valued fixed-point denominator."""
