# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Scalar that runs either as fixed point or as a native float."""

import operator
from collections.abc import Callable
from numbers import Real
from typing import Any, Self

from fpsim.type import FixedFormat, OverflowMode, RoundingMode

from .fixed_point import FixedPoint


def _is_fixed(value: Any) -> bool:
    return isinstance(value, FixedPointSwitchable) and value.fp_mode


def _fixed_operand(value: Any) -> Any:
    """Unwrap a switchable operand for the fixed-point path."""
    if isinstance(value, FixedPointSwitchable):
        return value._fp_value if value.fp_mode else value._dbl_value
    return value


def _is_operand(value: Any) -> bool:
    return isinstance(value, (FixedPointSwitchable, FixedPoint, Real))


class FixedPointSwitchable:
    """Either a `FixedPoint` or a float, selected once at construction.

    Lets one piece of model code run in fixed-point mode for bit accuracy and
    in float mode for fast range exploration. In both modes every assigned
    value updates `min_value` and `max_value`, which show the range a
    fixed-point format has to cover.

    When operands are mixed, fixed point takes precedence: the result is in
    fixed mode as soon as one operand is a fixed-mode switchable. Results are
    always switchables.

    Args:
        fp_mode: True for fixed-point mode, False for float mode.
        fp_value: Value in fixed-point mode.
        float_value: Value in float mode.

    Raises:
        TypeError: If `fp_mode` is not a bool, or the value for the selected
            mode has the wrong type.

    """

    def __init__(self, fp_mode: bool, fp_value: FixedPoint | None = None, float_value: Real = 0.0) -> None:
        if not isinstance(fp_mode, bool):
            raise TypeError("fp_mode must be True or False.")
        self._fp_mode = fp_mode
        self._fp_value: FixedPoint | None = None
        self._dbl_value = 0.0

        if fp_mode:
            if not isinstance(fp_value, FixedPoint):
                raise TypeError("fp_value must be a FixedPoint in fixed point mode.")
            self._fp_value = fp_value.__copy__()
            observed = float(fp_value)
        else:
            if not isinstance(float_value, (Real, FixedPoint)):
                raise TypeError("float_value must be convertible to float.")
            self._dbl_value = observed = float(float_value)

        self._min_value = self._max_value = observed

    @classmethod
    def _from_result(cls, result: Any) -> Self:
        if isinstance(result, FixedPoint):
            return cls(True, fp_value=result)
        return cls(False, float_value=result)

    # --- Properties ---

    @property
    def fp_mode(self) -> bool:
        return self._fp_mode

    @property
    def format(self) -> tuple[int, int]:
        """Get the fixed-point format, or `(1, 0)` in float mode."""
        if self._fp_mode:
            return self._fp_value.format
        return (1, 0)

    @property
    def value(self) -> "FixedPoint | float":
        """Get or set the held value.

        In fixed mode the new value must be a `FixedPoint` or a fixed-mode
        switchable. In float mode it must be convertible to float.
        """
        return self._fp_value if self._fp_mode else self._dbl_value

    @value.setter
    def value(self, new_value: Any) -> None:
        if self._fp_mode:
            if _is_fixed(new_value):
                new_value = new_value._fp_value
            if not isinstance(new_value, FixedPoint):
                raise TypeError("In fixed point mode, value must be a FixedPoint or FixedPointSwitchable.")
            self._fp_value = new_value.__copy__()
            observed = float(new_value)
        else:
            if isinstance(new_value, FixedPointSwitchable):
                new_value = new_value.value
            if not isinstance(new_value, (Real, FixedPoint)):
                raise TypeError("In float mode, value must be convertible to float.")
            self._dbl_value = observed = float(new_value)

        self._min_value = min(self._min_value, observed)
        self._max_value = max(self._max_value, observed)

    @property
    def min_value(self) -> float:
        """Get the smallest value assigned so far."""
        return self._min_value

    @property
    def max_value(self) -> float:
        """Get the largest value assigned so far."""
        return self._max_value

    def resize(
        self,
        fmt: "FixedFormat | tuple[int, int] | FixedPoint",
        overflow_mode: OverflowMode | str = OverflowMode.WRAP,
        round_mode: RoundingMode | str = RoundingMode.DIRECT_NEG_INF,
    ) -> Self:
        """Resize the fixed-point value in place. Does nothing in float mode."""
        if self._fp_mode:
            self._fp_value.resize(fmt, overflow_mode, round_mode)
        return self

    # --- Arithmetic ---

    @staticmethod
    def _binary_op(lhs: Any, rhs: Any, op: Callable[[Any, Any], Any]) -> "FixedPointSwitchable":
        if not (_is_operand(lhs) and _is_operand(rhs)):
            return NotImplemented
        if _is_fixed(lhs) or _is_fixed(rhs):
            return FixedPointSwitchable._from_result(op(_fixed_operand(lhs), _fixed_operand(rhs)))
        return FixedPointSwitchable(False, float_value=op(float(lhs), float(rhs)))

    def __add__(self, other: Any) -> "FixedPointSwitchable":
        return FixedPointSwitchable._binary_op(self, other, operator.add)

    def __radd__(self, other: Any) -> "FixedPointSwitchable":
        return FixedPointSwitchable._binary_op(other, self, operator.add)

    def __sub__(self, other: Any) -> "FixedPointSwitchable":
        return FixedPointSwitchable._binary_op(self, other, operator.sub)

    def __rsub__(self, other: Any) -> "FixedPointSwitchable":
        return FixedPointSwitchable._binary_op(other, self, operator.sub)

    def __mul__(self, other: Any) -> "FixedPointSwitchable":
        return FixedPointSwitchable._binary_op(self, other, operator.mul)

    def __rmul__(self, other: Any) -> "FixedPointSwitchable":
        return FixedPointSwitchable._binary_op(other, self, operator.mul)

    def __truediv__(self, other: Any) -> "FixedPointSwitchable":
        return FixedPointSwitchable._binary_op(self, other, operator.truediv)

    def __rtruediv__(self, other: Any) -> "FixedPointSwitchable":
        return FixedPointSwitchable._binary_op(other, self, operator.truediv)

    def __pow__(self, exponent: Any, modulo: Any = None) -> "FixedPointSwitchable":
        if modulo is not None:
            return NotImplemented
        if self._fp_mode:
            return FixedPointSwitchable(True, fp_value=self._fp_value ** _fixed_operand(exponent))
        if not _is_operand(exponent):
            return NotImplemented
        return FixedPointSwitchable(False, float_value=self._dbl_value ** float(exponent))

    def __rpow__(self, base: Any) -> Any:
        if isinstance(base, (int, float)) and not isinstance(base, bool):
            return base ** float(self)
        return NotImplemented

    def __neg__(self) -> "FixedPointSwitchable":
        return FixedPointSwitchable._from_result(-self.value)

    def __abs__(self) -> "FixedPointSwitchable":
        return FixedPointSwitchable._from_result(abs(self.value))

    def __pos__(self) -> "FixedPointSwitchable":
        return self.__copy__()

    # --- Shifts ---

    def __lshift__(self, shift: Any) -> "FixedPointSwitchable":
        try:
            shift = operator.index(shift)
        except TypeError:
            return NotImplemented
        if self._fp_mode:
            return FixedPointSwitchable(True, fp_value=self._fp_value << shift)
        return FixedPointSwitchable(False, float_value=self._dbl_value * 2.0**shift)

    def __rshift__(self, shift: Any) -> "FixedPointSwitchable":
        try:
            shift = operator.index(shift)
        except TypeError:
            return NotImplemented
        if self._fp_mode:
            return FixedPointSwitchable(True, fp_value=self._fp_value >> shift)
        return FixedPointSwitchable(False, float_value=self._dbl_value / 2.0**shift)

    # --- Comparison ---

    def _rich_compare(self, other: Any, op: Callable[[Any, Any], bool]) -> bool:
        if not _is_operand(other):
            return NotImplemented
        if _is_fixed(self) or _is_fixed(other):
            return op(_fixed_operand(self), _fixed_operand(other))
        return op(float(self), float(other))

    def __eq__(self, other: object) -> bool:
        return self._rich_compare(other, operator.eq)

    def __ne__(self, other: object) -> bool:
        return self._rich_compare(other, operator.ne)

    def __lt__(self, other: Any) -> bool:
        return self._rich_compare(other, operator.lt)

    def __le__(self, other: Any) -> bool:
        return self._rich_compare(other, operator.le)

    def __gt__(self, other: Any) -> bool:
        return self._rich_compare(other, operator.gt)

    def __ge__(self, other: Any) -> bool:
        return self._rich_compare(other, operator.ge)

    __hash__ = None

    # --- Conversion ---

    def __int__(self) -> int:
        return int(self.value)

    def __float__(self) -> float:
        return float(self.value)

    def __bool__(self) -> bool:
        return bool(self.value)

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        mode = "fixed" if self._fp_mode else "float"
        return f"FixedPointSwitchable({self.value!r}, mode={mode})"

    # --- Copy and serialization ---

    def __copy__(self) -> "FixedPointSwitchable":
        obj = FixedPointSwitchable.__new__(FixedPointSwitchable)
        obj.__setstate__(self.__getstate__())
        return obj

    def __deepcopy__(self, memo: dict) -> "FixedPointSwitchable":
        return self.__copy__()

    def __getstate__(self) -> dict[str, Any]:
        return {
            "fpm": self._fp_mode,
            "fpv": self._fp_value.__getstate__() if self._fp_mode else None,
            "dv": self._dbl_value,
            "dmin": self._min_value,
            "dmax": self._max_value,
        }

    def __setstate__(self, state: dict[str, Any]) -> None:
        self._fp_mode = state["fpm"]
        self._fp_value = None
        if self._fp_mode:
            self._fp_value = FixedPoint.__new__(FixedPoint)
            self._fp_value.__setstate__(state["fpv"])
        self._dbl_value = state["dv"]
        self._min_value = state["dmin"]
        self._max_value = state["dmax"]
