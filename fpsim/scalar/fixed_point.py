# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Fixed-point scalar facade over the small and large representations."""

import logging
import math
import operator
from collections.abc import Callable
from enum import StrEnum, auto
from numbers import Rational, Real
from typing import Any, Self

from fpsim.config import CONSTRUCT_RESIZE_CONFIG, DEFAULT_RESIZE_CONFIG, get_backend_config
from fpsim.core import (
    LargeFixed,
    SmallFixed,
    add_format,
    div_format,
    fits_small,
    mul_format,
    negate_format,
    resize_word_bits,
)
from fpsim.type import FixedFormat, OverflowMode, RoundingMode, infer_format, to_dyadic, wrap_int

logger = logging.getLogger(__name__)

FixedRepr = SmallFixed | LargeFixed


class _BinaryOp(StrEnum):
    """Arithmetic operators shared by both representations."""

    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()


# --- Representation selection ---


def _select_repr(field: int, fmt: FixedFormat, is_signed: bool) -> FixedRepr:
    if fits_small(fmt.word_bits(is_signed)):
        return SmallFixed.from_field(field, fmt, is_signed)
    return LargeFixed.from_field(field, fmt, is_signed)


def _to_large(rep: FixedRepr) -> LargeFixed:
    if isinstance(rep, LargeFixed):
        return rep
    logger.debug("Promoting %s value to large representation", rep.fmt)
    return LargeFixed.from_field(rep.field, rep.fmt, rep.is_signed)


def _normalize(rep: FixedRepr) -> FixedRepr:
    """Move `rep` to the representation its format calls for."""
    small = fits_small(rep.fmt.word_bits(rep.is_signed))

    if small and isinstance(rep, LargeFixed):
        logger.debug("Demoting %s value to small representation", rep.fmt)
        return SmallFixed.from_field(rep.field, rep.fmt, rep.is_signed)

    if not small:
        return _to_large(rep)

    return rep


def _parse_format(fmt: "FixedFormat | tuple[int, int] | FixedPoint") -> FixedFormat:
    if isinstance(fmt, FixedFormat):
        return fmt
    if isinstance(fmt, FixedPoint):
        return fmt.fmt
    return FixedFormat.from_tuple(fmt)


def _coerce(value: Any) -> "FixedPoint | None":
    """Convert an operand to a fixed-point value.

    Returns None if the operand is not numeric, or has no exact fixed-point
    form (infinite, NaN or a non-dyadic fraction).
    """
    if isinstance(value, FixedPoint):
        return value
    if isinstance(value, Real):
        try:
            return FixedPoint.from_value(value)
        except ValueError:
            return None
    return None


class FixedPoint:
    """Bit-accurate binary fixed-point number.

    Arithmetic operators never overflow: each result takes a format wide
    enough for the exact result. `resize` is the only operation that applies
    an overflow and rounding policy.

    Values whose working width fits the native word are kept in a
    `SmallFixed`; wider values move to a `LargeFixed`. The two produce the
    same results bit for bit.

    Args:
        int_bits: Number of integer bits. May be negative.
        frac_bits: Number of fraction bits. May be negative.
        signed: Whether the field is two's complement.
        value: Initial value. Rounded to nearest (ties up) and saturated.
        bit_field: Raw field, masked to the total width. Overrides `value`.
        format_inst: Another `FixedPoint` whose format is used instead of
            `int_bits` and `frac_bits`.

    Raises:
        TypeError: If an argument has the wrong type.
        InvalidFormatError: If `int_bits + frac_bits < 1`.

    """

    def __init__(
        self,
        int_bits: int = 1,
        frac_bits: int = 0,
        signed: bool = True,
        value: Real = 0.0,
        bit_field: int | None = None,
        format_inst: "FixedPoint | None" = None,
    ) -> None:
        if not isinstance(signed, bool):
            raise TypeError(f"signed must be a bool, got {type(signed).__name__}")

        if format_inst is not None:
            if not isinstance(format_inst, FixedPoint):
                raise TypeError(f"format_inst must be a FixedPoint, got {type(format_inst).__name__}")
            fmt = format_inst.fmt
        else:
            fmt = FixedFormat(int_bits, frac_bits)

        if bit_field is not None:
            if not isinstance(bit_field, int):
                raise TypeError(f"bit_field must be an int, got {type(bit_field).__name__}")
            self._repr = _select_repr(wrap_int(bit_field, fmt.total_bits, signed), fmt, signed)
            return

        # Infinities saturate like any other out-of-range literal.
        if isinstance(value, Real) and not isinstance(value, Rational) and math.isinf(value):
            field = fmt.max_field(signed) if value > 0 else fmt.min_field(signed)
            self._repr = _select_repr(field, fmt, signed)
            return

        # Hold the literal exactly, then fit it with the construction policy.
        mantissa, _ = to_dyadic(value)
        rep = LargeFixed(mantissa, infer_format(value), signed)
        rep.resize(fmt, *CONSTRUCT_RESIZE_CONFIG)
        self._repr = _select_repr(rep.field, fmt, signed)

    @classmethod
    def from_value(cls, value: Real) -> Self:
        """Build a signed value in the smallest format that holds `value` exactly."""
        fmt = infer_format(value)
        return cls(fmt.int_bits, fmt.frac_bits, signed=True, value=value)

    @classmethod
    def get_max_bits(cls) -> int:
        """Get the widest word, in bits, held by the native-word representation."""
        return get_backend_config().small_max_bits

    @classmethod
    def _from_repr(cls, rep: FixedRepr) -> Self:
        obj = cls.__new__(cls)
        obj._repr = rep
        return obj

    # --- Properties ---

    @property
    def fmt(self) -> FixedFormat:
        """Get the format."""
        return self._repr.fmt

    @property
    def format(self) -> tuple[int, int]:
        """Get the `(int_bits, frac_bits)` tuple."""
        return self._repr.fmt.as_tuple()

    @property
    def int_bits(self) -> int:
        return self._repr.fmt.int_bits

    @property
    def frac_bits(self) -> int:
        return self._repr.fmt.frac_bits

    @property
    def is_signed(self) -> bool:
        return self._repr.is_signed

    @property
    def bit_field(self) -> int:
        """Get the field as an integer, negative only when signed."""
        return self._repr.field

    @property
    def is_large(self) -> bool:
        """Whether the value is held by the arbitrary-precision representation."""
        return isinstance(self._repr, LargeFixed)

    # --- Resize ---

    def resize(
        self,
        fmt: "FixedFormat | tuple[int, int] | FixedPoint",
        overflow_mode: OverflowMode | str = DEFAULT_RESIZE_CONFIG.overflow_mode,
        round_mode: RoundingMode | str = DEFAULT_RESIZE_CONFIG.rounding_mode,
    ) -> Self:
        """Change the format in place, rounding first and then handling overflow.

        Args:
            fmt: Target format, as a format, an `(int_bits, frac_bits)` tuple
                or another `FixedPoint`.
            overflow_mode: How integer bits that do not fit are handled.
            round_mode: How dropped fraction bits are handled.

        Returns:
            `self`.

        Raises:
            TypeError: If `fmt` is not a format.
            InvalidFormatError: If `fmt` has fewer than one bit.
            FixedPointOverflowError: If `overflow_mode` is EXCEP and the value
                does not fit. The value is left unchanged.

        """
        new_fmt = _parse_format(fmt)
        overflow_mode = OverflowMode(overflow_mode)
        round_mode = RoundingMode(round_mode)

        rep = self._repr
        if not (isinstance(rep, SmallFixed) and fits_small(resize_word_bits(rep.fmt, new_fmt, rep.is_signed))):
            rep = _to_large(rep)

        self._repr = _normalize(rep.resize(new_fmt, overflow_mode, round_mode))
        return self

    def to_signed(self) -> "FixedPoint":
        """Return a signed copy of the same value, one integer bit wider if unsigned."""
        rep = self._repr.to_signed()
        return FixedPoint._from_repr(_normalize(rep))

    # --- Arithmetic ---

    def _binary_op(self, other: "FixedPoint", op: _BinaryOp) -> "FixedPoint":
        lhs, rhs = self._repr, other._repr

        # Mixed signedness: lift the unsigned operand to signed without loss.
        if lhs.is_signed != rhs.is_signed:
            lhs, rhs = lhs.to_signed(), rhs.to_signed()

        match op:
            case _BinaryOp.ADD:
                fmt, is_signed = add_format(lhs.fmt, rhs.fmt), lhs.is_signed
            case _BinaryOp.SUB:
                fmt, is_signed = add_format(lhs.fmt, rhs.fmt), True
            case _BinaryOp.MUL:
                fmt, is_signed = mul_format(lhs.fmt, rhs.fmt), lhs.is_signed
            case _BinaryOp.DIV:
                fmt, is_signed = div_format(lhs.fmt, rhs.fmt, lhs.is_signed), lhs.is_signed
            case _:
                raise ValueError(f"Unsupported operator: {op}")

        both_small = isinstance(lhs, SmallFixed) and isinstance(rhs, SmallFixed)
        if not (both_small and fits_small(fmt.word_bits(is_signed))):
            lhs, rhs = _to_large(lhs), _to_large(rhs)

        result = getattr(lhs, op.value)(rhs)
        return FixedPoint._from_repr(_normalize(result))

    def _unary_op(self, op: Callable[[FixedRepr], FixedRepr], fmt: FixedFormat) -> "FixedPoint":
        rep = self._repr
        if not fits_small(fmt.word_bits(True)):
            rep = _to_large(rep)
        return FixedPoint._from_repr(_normalize(op(rep)))

    def __add__(self, other: Any) -> "FixedPoint":
        rhs = _coerce(other)
        return NotImplemented if rhs is None else self._binary_op(rhs, _BinaryOp.ADD)

    def __radd__(self, other: Any) -> "FixedPoint":
        lhs = _coerce(other)
        return NotImplemented if lhs is None else lhs._binary_op(self, _BinaryOp.ADD)

    def __sub__(self, other: Any) -> "FixedPoint":
        rhs = _coerce(other)
        return NotImplemented if rhs is None else self._binary_op(rhs, _BinaryOp.SUB)

    def __rsub__(self, other: Any) -> "FixedPoint":
        lhs = _coerce(other)
        return NotImplemented if lhs is None else lhs._binary_op(self, _BinaryOp.SUB)

    def __mul__(self, other: Any) -> "FixedPoint":
        rhs = _coerce(other)
        return NotImplemented if rhs is None else self._binary_op(rhs, _BinaryOp.MUL)

    def __rmul__(self, other: Any) -> "FixedPoint":
        lhs = _coerce(other)
        return NotImplemented if lhs is None else lhs._binary_op(self, _BinaryOp.MUL)

    def __truediv__(self, other: Any) -> "FixedPoint":
        rhs = _coerce(other)
        return NotImplemented if rhs is None else self._binary_op(rhs, _BinaryOp.DIV)

    def __rtruediv__(self, other: Any) -> "FixedPoint":
        lhs = _coerce(other)
        return NotImplemented if lhs is None else lhs._binary_op(self, _BinaryOp.DIV)

    def __neg__(self) -> "FixedPoint":
        return self._unary_op(lambda rep: rep.negate(), negate_format(self.fmt))

    def __abs__(self) -> "FixedPoint":
        if not self.is_signed:
            return self.__copy__()
        return self._unary_op(lambda rep: rep.abs(), negate_format(self.fmt))

    def __pos__(self) -> "FixedPoint":
        return self.__copy__()

    def __pow__(self, exponent: Any, modulo: Any = None) -> "FixedPoint":
        # Only squaring keeps a bounded result format.
        if modulo is None and isinstance(exponent, (Real, FixedPoint)) and exponent == 2:
            return self * self
        return NotImplemented

    def __rpow__(self, base: Any) -> Any:
        if isinstance(base, (int, float, complex)) and not isinstance(base, bool):
            return base ** float(self)
        return NotImplemented

    # --- Shifts ---

    def __lshift__(self, shift: Any) -> "FixedPoint":
        """Shift bits left, wrapping within the current format."""
        try:
            shift = operator.index(shift)
        except TypeError:
            return NotImplemented
        return FixedPoint._from_repr(self._repr.shift_left(shift))

    def __rshift__(self, shift: Any) -> "FixedPoint":
        """Shift bits right (floor), keeping the current format."""
        try:
            shift = operator.index(shift)
        except TypeError:
            return NotImplemented
        return FixedPoint._from_repr(self._repr.shift_right(shift))

    # --- Comparison ---

    def _compare_ratio(self, numerator: int, denominator: int) -> int:
        """Compare exactly against `numerator / denominator`, with a positive denominator."""
        field, frac_bits = self.bit_field, self.frac_bits
        if frac_bits >= 0:
            diff = field * denominator - (numerator << frac_bits)
        else:
            diff = (field << -frac_bits) * denominator - numerator
        return (diff > 0) - (diff < 0)

    def _compare(self, other: Any) -> int | None:
        if isinstance(other, Rational) and other.denominator & (other.denominator - 1):
            return self._compare_ratio(other.numerator, other.denominator)

        rhs = _coerce(other)
        if rhs is None:
            return None

        lhs_rep, rhs_rep = self._repr, rhs._repr
        if isinstance(lhs_rep, SmallFixed) and isinstance(rhs_rep, SmallFixed):
            return lhs_rep.compare(rhs_rep)
        return _to_large(lhs_rep).compare(_to_large(rhs_rep))

    def _rich_compare(self, other: Any, op: Callable[[Any, Any], bool]) -> bool:
        # Every fixed-point value is finite and unordered against nan.
        if isinstance(other, float) and not math.isfinite(other):
            if math.isnan(other):
                return op is operator.ne
            return op(-1 if other > 0 else 1, 0)
        result = self._compare(other)
        return NotImplemented if result is None else op(result, 0)

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

    __hash__ = None  # mutable through resize

    # --- Bit access ---

    def __len__(self) -> int:
        return self.fmt.total_bits

    def __getitem__(self, key: int | slice) -> "bool | FixedPoint":
        """Index bits, with 0 as the LSB of the field.

        A single index returns that bit as a bool. A slice `[a:b]` selects
        bits `a` to `b` inclusive in either order and returns them as an
        unsigned `(width, 0)` value. Missing bounds default to the LSB and
        MSB.

        Raises:
            IndexError: If a bit position is outside the field.
            TypeError: If a slice has a step.

        """
        total_bits = self.fmt.total_bits

        if isinstance(key, slice):
            if key.step is not None:
                raise TypeError("Bit slices do not support a step")
            start = 0 if key.start is None else operator.index(key.start)
            stop = total_bits - 1 if key.stop is None else operator.index(key.stop)
            hi, lo = max(start, stop), min(start, stop)
            if lo < 0 or hi >= total_bits:
                raise IndexError(f"Bit slice [{start}:{stop}] out of range for {total_bits}-bit value")
            return FixedPoint(hi - lo + 1, 0, signed=False, bit_field=self._repr.slice(hi, lo))

        index = operator.index(key)
        if not 0 <= index < total_bits:
            raise IndexError(f"Bit index {index} out of range for {total_bits}-bit value")
        return self._repr.bit_at(index)

    def bits_to_signed(self) -> int:
        """Reinterpret the whole field as a two's-complement integer."""
        return self._repr.to_signed_int()

    def bits_to_unsigned(self) -> int:
        """Reinterpret the whole field as an unsigned integer."""
        return self._repr.to_unsigned_int()

    __index__ = bits_to_unsigned

    # --- Conversion ---

    def __int__(self) -> int:
        """Truncate towards zero."""
        field, frac_bits = self.bit_field, self.frac_bits
        if frac_bits <= 0:
            return field << -frac_bits
        magnitude = abs(field) >> frac_bits
        return -magnitude if field < 0 else magnitude

    def __float__(self) -> float:
        return self._repr.to_float()

    def __bool__(self) -> bool:
        return not self._repr.is_zero()

    def __str__(self) -> str:
        try:
            return str(float(self))
        except OverflowError:
            return self.str_ex()

    def __repr__(self) -> str:
        return f"FixedPoint({self.str_ex()}, fmt={self.fmt}, signed={self.is_signed})"

    def str_ex(self) -> str:
        """Render the exact decimal value.

        Every binary fraction has a finite decimal expansion, so no digits are
        lost.
        """
        field, frac_bits = self.bit_field, self.frac_bits
        sign = "-" if field < 0 else ""
        magnitude = abs(field)

        if frac_bits <= 0:
            return f"{sign}{magnitude << -frac_bits}.0"

        int_part = magnitude >> frac_bits
        # k / 2^f == k * 5^f / 10^f
        frac_digits = str((magnitude & ((1 << frac_bits) - 1)) * 5**frac_bits).rjust(frac_bits, "0")
        return f"{sign}{int_part}.{frac_digits.rstrip('0') or '0'}"

    # --- Copy and serialization ---

    def __copy__(self) -> "FixedPoint":
        return FixedPoint._from_repr(self._repr.copy())

    def __deepcopy__(self, memo: dict) -> "FixedPoint":
        return self.__copy__()

    def __getstate__(self) -> dict[str, Any]:
        """Export the lossless state: field, format and signedness."""
        return {
            "ib": self.int_bits,
            "fb": self.frac_bits,
            "sv": self.bit_field,
            "sgn": self.is_signed,
        }

    def __setstate__(self, state: dict[str, Any]) -> None:
        fmt = FixedFormat(state["ib"], state["fb"])
        self._repr = _select_repr(wrap_int(state["sv"], fmt.total_bits, state["sgn"]), fmt, state["sgn"])
