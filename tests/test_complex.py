"""Unit tests for the fixed-point complex pair."""

import copy
import pickle
from fractions import Fraction

import pytest

from fpsim import FixedPoint, FixedPointComplex, FixedPointZeroDivisionError, OverflowMode, RoundingMode


@pytest.mark.usefixtures("representation")
class TestConstruction:
    """Complex pair construction"""

    def test_value_with_format(self):
        c = FixedPointComplex(5, 6, value=6.5 - 3.125j)

        assert c.format == (5, 6)
        assert c.real == 6.5
        assert c.imag == -3.125
        assert c.real.format == c.imag.format

    def test_inferred_format(self):
        c = FixedPointComplex(value=1.5 - 0.25j)

        assert c.format == (2, 2)
        assert complex(c) == 1.5 - 0.25j

    def test_default(self):
        c = FixedPointComplex()

        assert c == 0
        assert c.format == (1, 0)

    def test_from_parts_union(self):
        c = FixedPointComplex(real_fp=FixedPoint(4, 2, value=1.5), imag_fp=FixedPoint(2, 4, value=0.25))

        assert c.format == (4, 4)
        assert complex(c) == 1.5 + 0.25j

    def test_from_parts_with_format(self):
        real = FixedPoint(4, 2, value=7.75)
        c = FixedPointComplex(3, 1, real_fp=real, imag_fp=FixedPoint(4, 2, value=-0.25))

        assert c.format == (3, 1)
        assert c.real == 3.5  # saturated
        assert c.imag == 0.0  # rounded to nearest, ties up
        assert real.format == (4, 2)

    def test_from_parts_with_format_inst(self):
        c = FixedPointComplex(
            real_fp=FixedPoint(4, 2, value=1.5),
            imag_fp=FixedPoint(4, 2, value=1.0),
            format_inst=FixedPointComplex(6, 3),
        )
        assert c.format == (6, 3)

    def test_bit_fields(self):
        c = FixedPointComplex(4, 0, real_bit_field=3, imag_bit_field=-2)
        assert complex(c) == 3 - 2j

        c = FixedPointComplex(real_bit_field=3, imag_bit_field=-2, format_inst=FixedPoint(4, 1))
        assert complex(c) == 1.5 - 1j

    def test_unsigned(self):
        c = FixedPointComplex(4, 2, value=3.25 + 1.5j, signed=False)

        assert not c.is_signed
        assert complex(c) == 3.25 + 1.5j

    def test_invalid_arguments(self):
        with pytest.raises(TypeError):
            FixedPointComplex(4, 0, real_bit_field=3)
        with pytest.raises(TypeError):
            FixedPointComplex(real_bit_field=3, imag_bit_field=1)
        with pytest.raises(TypeError):
            FixedPointComplex(real_fp=FixedPoint(4, 2))
        with pytest.raises(ValueError):
            FixedPointComplex(real_fp=FixedPoint(4, 2), imag_fp=FixedPoint(4, 2, signed=False))
        with pytest.raises(TypeError):
            FixedPointComplex(format_inst=(4, 2))
        with pytest.raises(TypeError):
            FixedPointComplex(4, 2, value="1+1j")


@pytest.mark.usefixtures("representation")
class TestArithmetic:
    """Complex arithmetic built from scalar operations"""

    def test_add_sub(self):
        a = FixedPointComplex(4, 4, value=1.5 + 2j)
        b = FixedPointComplex(4, 4, value=0.25 - 1j)

        assert complex(a + b) == 1.75 + 1j
        assert (a + b).format == (5, 4)
        assert complex(a - b) == 1.25 + 3j

    def test_mul(self):
        result = FixedPointComplex(4, 4, value=1 + 2j) * FixedPointComplex(4, 4, value=3 - 1j)

        assert complex(result) == 5 + 5j
        assert result.format == (9, 8)

    def test_unsigned_mul_keeps_parts_aligned(self):
        c = FixedPointComplex(4, 0, value=2 + 1j, signed=False)
        result = c * c

        assert complex(result) == 3 + 4j
        assert result.real.is_signed and result.imag.is_signed
        assert result.real.format == result.imag.format

    def test_div(self):
        result = FixedPointComplex(4, 4, value=5 + 5j) / FixedPointComplex(4, 4, value=1 + 2j)
        assert complex(result) == 3 - 1j

    def test_div_by_zero(self):
        with pytest.raises(FixedPointZeroDivisionError):
            FixedPointComplex(4, 4, value=1 + 1j) / FixedPointComplex(4, 4)

    def test_conjugate(self):
        c = FixedPointComplex(5, 6, value=6.5 - 3.125j)
        conj = c.conjugate()

        assert conj == FixedPointComplex(5, 6, value=6.5 + 3.125j)
        assert conj.format == (6, 6)

    def test_conjugate_real_unchanged(self):
        conj = FixedPointComplex(5, 6, value=2.25 + 0j).conjugate()

        assert conj.real == 2.25
        assert conj.imag == 0

    def test_energy_and_abs(self):
        c = FixedPointComplex(4, 0, value=3 + 4j)

        assert c.energy() == 25
        assert abs(c) == 5.0
        assert abs(c).format == c.energy().format

    def test_neg_and_square(self):
        c = FixedPointComplex(4, 2, value=1.5 - 0.25j)

        assert complex(-c) == -1.5 + 0.25j
        assert c**2 == c * c
        with pytest.raises(TypeError):
            c**3
        assert 2**c == pytest.approx(2 ** (1.5 - 0.25j))

    def test_shifts(self):
        c = FixedPointComplex(4, 2, value=1.5 + 0.25j)

        assert complex(c << 1) == 3 + 0.5j
        assert complex(c >> 1) == 0.75 + 0j

    def test_mixed_operands(self):
        c = FixedPointComplex(4, 2, value=1.5 - 0.25j)

        assert complex(c + 1) == 2.5 - 0.25j
        assert complex(1 - c) == -0.5 + 0.25j
        assert complex(2 * c) == 3 - 0.5j
        assert complex(c * FixedPoint(3, 0, value=-2)) == -3 + 0.5j
        assert complex(c + (0.5 + 1j)) == 2 + 0.75j
        assert complex(c / 2) == 0.75 - 0.125j

    def test_operands_unchanged(self):
        a = FixedPointComplex(4, 4, value=1 + 2j)
        b = FixedPointComplex(4, 4, value=3 - 1j)
        _ = a * b, a / b, a.conjugate()

        assert complex(a) == 1 + 2j and a.format == (4, 4)
        assert complex(b) == 3 - 1j and b.format == (4, 4)


@pytest.mark.usefixtures("representation")
class TestResize:
    """Resize applies to both parts"""

    def test_resize_both_parts(self):
        c = FixedPointComplex(5, 2, value=15.75 - 3.25j)
        result = c.resize((4, 1), OverflowMode.SAT, RoundingMode.DIRECT_NEG_INF)

        assert result is c
        assert c.format == (4, 1)
        assert complex(c) == 7.5 - 3.5j

    def test_resize_to_complex_format(self):
        c = FixedPointComplex(5, 2, value=1.5 - 3.25j)
        c.resize(FixedPointComplex(6, 4))
        assert c.format == (6, 4)


@pytest.mark.usefixtures("representation")
class TestComparisonAndConversion:
    """Equality, strings and state"""

    def test_equality(self):
        c = FixedPointComplex(4, 2, value=1.5 - 0.25j)

        assert c == 1.5 - 0.25j
        assert c != 1.5 + 0.25j
        assert FixedPointComplex(4, 2, value=2 + 0j) == 2
        assert FixedPointComplex(4, 2, value=2 + 0j) == FixedPoint(4, 0, value=2)

    def test_inexact_operands(self):
        c = FixedPointComplex(4, 2, value=0.25 + 0j)

        assert c != Fraction(1, 3)
        assert not c == float("inf")
        with pytest.raises(TypeError):
            c + Fraction(1, 3)

    def test_no_ordering(self):
        with pytest.raises(TypeError):
            FixedPointComplex(4, 2) < FixedPointComplex(4, 2)

    def test_bool(self):
        assert not FixedPointComplex(4, 2)
        assert FixedPointComplex(4, 2, value=0.25j)

    def test_str(self):
        assert str(FixedPointComplex(4, 2, value=1.5 - 0.25j)) == "(1.5-0.25j)"
        assert str(FixedPointComplex(4, 2, value=1.5 + 0.25j)) == "(1.5+0.25j)"
        assert FixedPointComplex(4, 2, value=-1.5 + 0j).str_ex() == "(-1.5+0.0j)"

    def test_copy_is_independent(self):
        c = FixedPointComplex(5, 2, value=15.75 - 3.25j)
        clone = copy.copy(c)
        clone.resize((4, 1), OverflowMode.SAT)

        assert c.format == (5, 2)
        assert complex(c) == 15.75 - 3.25j

    def test_pickle(self):
        c = FixedPointComplex(100, 20, value=1.5 - 3.25j)
        restored = pickle.loads(pickle.dumps(c))

        assert restored == c
        assert restored.format == (100, 20)
