"""Unit tests for the rounding and overflow policies."""

import pytest
import torch

from fpsim import FixedFormat, FixedPointOverflowError, OverflowMode, RoundingMode
from fpsim.type import (
    overflow_complement,
    overflow_int,
    round_offset_complement,
    round_offset_int,
    wrap_complement,
    wrap_int,
)


def _round_int(value: int, drop_shift: int, mode: RoundingMode) -> int:
    return (value >> drop_shift) + round_offset_int(value, drop_shift, mode)


def _round_tensor(value: int, drop_shift: int, mode: RoundingMode) -> int:
    data = torch.tensor(value, dtype=torch.int64)
    return int((data >> drop_shift) + round_offset_complement(data, drop_shift, mode))


# Fields with two fraction bits rounded to integers.
ROUNDING_CASES = [
    # value, neg_inf, zero, pos_inf, near_zero, even
    (0b10110, 5, 5, 6, 5, 6),  # +5.5
    (0b11010, 6, 6, 7, 6, 6),  # +6.5
    (0b10111, 5, 5, 6, 6, 6),  # +5.75
    (0b10101, 5, 5, 5, 5, 5),  # +5.25
    (0b10100, 5, 5, 5, 5, 5),  # +5.0
    (-0b10110, -6, -5, -5, -5, -6),  # -5.5
    (-0b11010, -7, -6, -6, -6, -6),  # -6.5
    (-0b10111, -6, -5, -6, -6, -6),  # -5.75
    (-0b10101, -6, -5, -5, -5, -5),  # -5.25
]

MODES = [
    RoundingMode.DIRECT_NEG_INF,
    RoundingMode.DIRECT_ZERO,
    RoundingMode.NEAR_POS_INF,
    RoundingMode.NEAR_ZERO,
    RoundingMode.NEAR_EVEN,
]


class TestRounding:
    """Rounding offset tests"""

    @pytest.mark.parametrize("case", ROUNDING_CASES)
    def test_int_rounding(self, case):
        value, *expected = case
        assert [_round_int(value, 2, mode) for mode in MODES] == expected

    @pytest.mark.parametrize("case", ROUNDING_CASES)
    def test_tensor_rounding_matches_int(self, case):
        """Native-word rounding agrees with the arbitrary-precision path."""
        value, *expected = case
        assert [_round_tensor(value, 2, mode) for mode in MODES] == expected

    def test_single_drop_bit(self):
        """With one dropped bit there are no sticky bits, every set bit is a tie."""
        assert _round_int(0b101, 1, RoundingMode.NEAR_EVEN) == 0b10
        assert _round_int(0b111, 1, RoundingMode.NEAR_EVEN) == 0b100
        assert _round_int(0b101, 1, RoundingMode.NEAR_ZERO) == 0b10
        assert _round_int(0b101, 1, RoundingMode.NEAR_POS_INF) == 0b11

    def test_large_values(self):
        value = (1 << 200) + (1 << 99)  # exact tie at drop_shift 100
        assert _round_int(value, 100, RoundingMode.NEAR_EVEN) == 1 << 100
        assert _round_int(value, 100, RoundingMode.NEAR_POS_INF) == (1 << 100) + 1

    @pytest.mark.parametrize(
        "alias, mode",
        [
            ("floor", RoundingMode.DIRECT_NEG_INF),
            ("toward_zero", RoundingMode.DIRECT_ZERO),
            ("nearest_up", RoundingMode.NEAR_POS_INF),
            ("nearest_toward_zero", RoundingMode.NEAR_ZERO),
            ("nearest_even", RoundingMode.NEAR_EVEN),
            ("near_even", RoundingMode.NEAR_EVEN),
        ],
    )
    def test_aliases(self, alias, mode):
        assert RoundingMode(alias) is mode

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            RoundingMode("stochastic")


class TestOverflow:
    """Overflow policy tests"""

    def test_wrap_int(self):
        assert wrap_int(63, 6, True) == -1
        assert wrap_int(63, 6, False) == 63
        assert wrap_int(-1, 4, False) == 15
        assert wrap_int(1 << 100, 8, True) == 0

    def test_overflow_int(self):
        fmt = FixedFormat(4, 2)

        assert overflow_int(63, fmt, True, OverflowMode.WRAP) == -1
        assert overflow_int(63, fmt, True, OverflowMode.SAT) == 31
        assert overflow_int(-100, fmt, True, OverflowMode.SAT) == -32
        assert overflow_int(-1, fmt, False, OverflowMode.SAT) == 0
        assert overflow_int(20, fmt, True, OverflowMode.EXCEP) == 20

        with pytest.raises(FixedPointOverflowError):
            overflow_int(32, fmt, True, OverflowMode.EXCEP)

    def test_overflow_complement_matches_int(self):
        fmt = FixedFormat(4, 2)
        values = [-100, -33, -32, -1, 0, 31, 32, 63, 100]
        data = torch.tensor(values, dtype=torch.int32)

        for mode in (OverflowMode.WRAP, OverflowMode.SAT):
            for is_signed in (True, False):
                result = overflow_complement(data, fmt, is_signed, mode).tolist()
                assert result == [overflow_int(v, fmt, is_signed, mode) for v in values]

    def test_overflow_complement_raise(self):
        fmt = FixedFormat(4, 2)

        with pytest.raises(FixedPointOverflowError):
            overflow_complement(torch.tensor([0, 40]), fmt, True, OverflowMode.EXCEP)

    def test_overflow_error_is_overflow_error(self):
        with pytest.raises(OverflowError):
            overflow_int(32, FixedFormat(4, 2), True, OverflowMode.EXCEP)

    def test_wrap_complement_full_width(self):
        data = torch.tensor([-5, 7], dtype=torch.int8)
        assert torch.equal(wrap_complement(data, 8, True), data)
        with pytest.raises(ValueError):
            wrap_complement(data, 8, False)

    @pytest.mark.parametrize(
        "alias, mode",
        [("saturate", OverflowMode.SAT), ("raise", OverflowMode.EXCEP), ("wrap", OverflowMode.WRAP)],
    )
    def test_aliases(self, alias, mode):
        assert OverflowMode(alias) is mode
