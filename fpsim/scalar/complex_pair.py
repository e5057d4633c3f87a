# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Complex number built from a pair of fixed-point scalars."""

import math
import operator
from numbers import Complex, Real
from typing import Any, Self

from fpsim.type import FixedFormat, OverflowMode, RoundingMode

from .fixed_point import FixedPoint


def _align_parts(real: FixedPoint, imag: FixedPoint) -> tuple[FixedPoint, FixedPoint]:
    """Bring both parts to one signedness and one format without changing their values."""
    if real.is_signed != imag.is_signed:
        real, imag = real.to_signed(), imag.to_signed()
    fmt = real.fmt.union(imag.fmt)
    if real.fmt != fmt:
        real = real.__copy__().resize(fmt, OverflowMode.WRAP, RoundingMode.DIRECT_NEG_INF)
    if imag.fmt != fmt:
        imag = imag.__copy__().resize(fmt, OverflowMode.WRAP, RoundingMode.DIRECT_NEG_INF)
    return real, imag


def _zero_like(value: FixedPoint) -> FixedPoint:
    return FixedPoint(signed=value.is_signed, value=0, format_inst=value)


def _coerce(value: Any) -> "FixedPointComplex | None":
    """Convert an operand to a complex pair, or None if it is not numeric.

    Real operands get a zero imaginary part in the format of their real part.
    """
    if isinstance(value, FixedPointComplex):
        return value
    if isinstance(value, FixedPoint):
        return FixedPointComplex._from_parts(value, _zero_like(value))
    try:
        if isinstance(value, Real):
            real = FixedPoint.from_value(value)
            return FixedPointComplex._from_parts(real, _zero_like(real))
        if isinstance(value, Complex):
            return FixedPointComplex(value=complex(value))
    except ValueError:
        # No exact fixed-point form: infinite, NaN or non-dyadic.
        return None
    return None


class FixedPointComplex:
    """Complex value whose real and imaginary parts are fixed-point scalars.

    Both parts always share one format and one signedness. Arithmetic is built
    from scalar operations, so results grow the same way scalar results do.

    Args:
        int_bits: Number of integer bits of each part.
        frac_bits: Number of fraction bits of each part.
        value: Initial value, used when no parts or bit fields are given.
        real_fp: Real part to copy. Must be given together with `imag_fp`.
        imag_fp: Imaginary part to copy.
        real_bit_field: Raw real field. Must be given together with
            `imag_bit_field` and a format.
        imag_bit_field: Raw imaginary field.
        format_inst: A `FixedPoint` or `FixedPointComplex` whose format is used.
        signed: Whether the fields are two's complement.

    Raises:
        TypeError: If an argument has the wrong type or a required partner
            argument is missing.
        ValueError: If `real_fp` and `imag_fp` differ in signedness.

    """

    def __init__(
        self,
        int_bits: int | None = None,
        frac_bits: int | None = None,
        value: complex = 0j,
        real_fp: FixedPoint | None = None,
        imag_fp: FixedPoint | None = None,
        real_bit_field: int | None = None,
        imag_bit_field: int | None = None,
        format_inst: "FixedPoint | FixedPointComplex | None" = None,
        signed: bool = True,
    ) -> None:
        if isinstance(format_inst, FixedPointComplex):
            format_inst = format_inst.real
        elif format_inst is not None and not isinstance(format_inst, FixedPoint):
            raise TypeError(f"format_inst must be a FixedPoint or FixedPointComplex, got {type(format_inst).__name__}")

        if (real_bit_field is None) != (imag_bit_field is None):
            raise TypeError("real_bit_field and imag_bit_field must be given together")
        has_format = int_bits is not None or format_inst is not None
        if real_bit_field is not None and not has_format:
            raise TypeError("int_bits/frac_bits or format_inst is required with bit fields")

        if int_bits is not None and frac_bits is None:
            frac_bits = 0

        # --- 1. Copy explicit parts ---

        if real_fp is not None or imag_fp is not None:
            if not isinstance(real_fp, FixedPoint) or not isinstance(imag_fp, FixedPoint):
                raise TypeError("real_fp and imag_fp must both be FixedPoint instances")
            if real_fp.is_signed != imag_fp.is_signed:
                raise ValueError("real_fp and imag_fp must have the same signedness")

            if format_inst is not None:
                fmt = format_inst.fmt
            elif int_bits is not None:
                fmt = FixedFormat(int_bits, frac_bits)
            else:
                fmt = real_fp.fmt.union(imag_fp.fmt)

            self._real = real_fp.__copy__().resize(fmt, OverflowMode.SAT, RoundingMode.NEAR_POS_INF)
            self._imag = imag_fp.__copy__().resize(fmt, OverflowMode.SAT, RoundingMode.NEAR_POS_INF)
            return

        if not isinstance(value, Complex):
            raise TypeError(f"value must be a complex number, got {type(value).__name__}")
        value = complex(value)

        # --- 2. Build each part in the requested format ---

        if has_format:
            fmt_bits = {"int_bits": int_bits, "frac_bits": frac_bits} if int_bits is not None else {}
            self._real = FixedPoint(
                **fmt_bits, signed=signed, value=value.real, bit_field=real_bit_field, format_inst=format_inst
            )
            self._imag = FixedPoint(
                **fmt_bits, signed=signed, value=value.imag, bit_field=imag_bit_field, format_inst=format_inst
            )
            return

        # --- 3. Infer the smallest common format ---

        self._real, self._imag = _align_parts(FixedPoint.from_value(value.real), FixedPoint.from_value(value.imag))

    @classmethod
    def _from_parts(cls, real: FixedPoint, imag: FixedPoint) -> Self:
        obj = cls.__new__(cls)
        obj._real, obj._imag = _align_parts(real, imag)
        return obj

    # --- Properties ---

    @property
    def real(self) -> FixedPoint:
        return self._real

    @property
    def imag(self) -> FixedPoint:
        return self._imag

    @property
    def fmt(self) -> FixedFormat:
        return self._real.fmt

    @property
    def format(self) -> tuple[int, int]:
        """Get the `(int_bits, frac_bits)` tuple shared by both parts."""
        return self._real.format

    @property
    def is_signed(self) -> bool:
        return self._real.is_signed

    def resize(
        self,
        fmt: "FixedFormat | tuple[int, int] | FixedPoint | FixedPointComplex",
        overflow_mode: OverflowMode | str = OverflowMode.WRAP,
        round_mode: RoundingMode | str = RoundingMode.DIRECT_NEG_INF,
    ) -> Self:
        """Resize both parts in place and return `self`.

        Raises:
            FixedPointOverflowError: If `overflow_mode` is EXCEP and either part
                does not fit. Neither part is changed.

        """
        if isinstance(fmt, FixedPointComplex):
            fmt = fmt.fmt
        real = self._real.__copy__().resize(fmt, overflow_mode, round_mode)
        imag = self._imag.__copy__().resize(fmt, overflow_mode, round_mode)
        self._real, self._imag = real, imag
        return self

    # --- Arithmetic ---

    def __add__(self, other: Any) -> "FixedPointComplex":
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        return FixedPointComplex._from_parts(self._real + rhs._real, self._imag + rhs._imag)

    def __radd__(self, other: Any) -> "FixedPointComplex":
        lhs = _coerce(other)
        return NotImplemented if lhs is None else lhs + self

    def __sub__(self, other: Any) -> "FixedPointComplex":
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        return FixedPointComplex._from_parts(self._real - rhs._real, self._imag - rhs._imag)

    def __rsub__(self, other: Any) -> "FixedPointComplex":
        lhs = _coerce(other)
        return NotImplemented if lhs is None else lhs - self

    def __mul__(self, other: Any) -> "FixedPointComplex":
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        a, b, c, d = self._real, self._imag, rhs._real, rhs._imag
        return FixedPointComplex._from_parts(a * c - b * d, a * d + b * c)

    def __rmul__(self, other: Any) -> "FixedPointComplex":
        lhs = _coerce(other)
        return NotImplemented if lhs is None else lhs * self

    def __truediv__(self, other: Any) -> "FixedPointComplex":
        """Multiply by the conjugate of `other`, then divide by its energy.

        Raises:
            FixedPointZeroDivisionError: If `other` is zero.

        """
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        product = self * rhs.conjugate()
        energy = rhs.energy()
        return FixedPointComplex._from_parts(product._real / energy, product._imag / energy)

    def __rtruediv__(self, other: Any) -> "FixedPointComplex":
        lhs = _coerce(other)
        return NotImplemented if lhs is None else lhs / self

    def __neg__(self) -> "FixedPointComplex":
        return FixedPointComplex._from_parts(-self._real, -self._imag)

    def __pos__(self) -> "FixedPointComplex":
        return self.__copy__()

    def __abs__(self) -> FixedPoint:
        """Magnitude, computed in float and returned in the format of the energy."""
        energy = self.energy()
        return FixedPoint(signed=energy.is_signed, value=math.sqrt(float(energy)), format_inst=energy)

    def __pow__(self, exponent: Any, modulo: Any = None) -> "FixedPointComplex":
        if modulo is None and isinstance(exponent, (Real, FixedPoint)) and exponent == 2:
            return self * self
        return NotImplemented

    def __rpow__(self, base: Any) -> Any:
        if isinstance(base, (int, float, complex)) and not isinstance(base, bool):
            return base ** complex(self)
        return NotImplemented

    def conjugate(self) -> "FixedPointComplex":
        """Negate the imaginary part. The real part takes the widened format unchanged."""
        imag = -self._imag
        real = self._real.__copy__().resize(imag.fmt, OverflowMode.WRAP, RoundingMode.DIRECT_NEG_INF)
        return FixedPointComplex._from_parts(real, imag)

    def energy(self) -> FixedPoint:
        """Return `real**2 + imag**2` at full precision."""
        return self._real * self._real + self._imag * self._imag

    # --- Shifts ---

    def __lshift__(self, shift: Any) -> "FixedPointComplex":
        try:
            shift = operator.index(shift)
        except TypeError:
            return NotImplemented
        return FixedPointComplex._from_parts(self._real << shift, self._imag << shift)

    def __rshift__(self, shift: Any) -> "FixedPointComplex":
        try:
            shift = operator.index(shift)
        except TypeError:
            return NotImplemented
        return FixedPointComplex._from_parts(self._real >> shift, self._imag >> shift)

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        rhs = _coerce(other)
        if rhs is None:
            return NotImplemented
        return self._real == rhs._real and self._imag == rhs._imag

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = None

    # --- Conversion ---

    def __complex__(self) -> complex:
        return complex(float(self._real), float(self._imag))

    def __bool__(self) -> bool:
        return bool(self._real) or bool(self._imag)

    def _render(self, real: str, imag: str) -> str:
        sign = "" if imag.startswith("-") else "+"
        return f"({real}{sign}{imag}j)"

    def __str__(self) -> str:
        return self._render(str(self._real), str(self._imag))

    def __repr__(self) -> str:
        return f"FixedPointComplex({self.str_ex()}, fmt={self.fmt}, signed={self.is_signed})"

    def str_ex(self) -> str:
        """Render both parts exactly."""
        return self._render(self._real.str_ex(), self._imag.str_ex())

    # --- Copy and serialization ---

    def __copy__(self) -> "FixedPointComplex":
        obj = FixedPointComplex.__new__(FixedPointComplex)
        obj._real, obj._imag = self._real.__copy__(), self._imag.__copy__()
        return obj

    def __deepcopy__(self, memo: dict) -> "FixedPointComplex":
        return self.__copy__()

    def __getstate__(self) -> dict[str, Any]:
        return {"real": self._real.__getstate__(), "imag": self._imag.__getstate__()}

    def __setstate__(self, state: dict[str, Any]) -> None:
        self._real = FixedPoint.__new__(FixedPoint)
        self._real.__setstate__(state["real"])
        self._imag = FixedPoint.__new__(FixedPoint)
        self._imag.__setstate__(state["imag"])
