# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""FIR filter model run in float mode for range profiling and in fixed mode for bit accuracy."""

import logging
import math

import torch
from torch import Tensor

from fpsim import FixedFormat, FixedPoint, FixedPointSwitchable, OverflowMode, RoundingMode

logger = logging.getLogger(__name__)

# --- architecture specific parameters ---


_input_fmt = FixedFormat(1, 15)
_coef_fmt = FixedFormat(2, 16)
_output_frac_bits = 15

_acc_overflow_mode = OverflowMode.SAT
_output_rounding_mode = RoundingMode.NEAR_EVEN


# --- architecture specific API ---


def design_lowpass(num_taps: int, cutoff: float) -> Tensor:
    """Windowed-sinc lowpass coefficients with unit DC gain.

    Args:
        num_taps: Filter length.
        cutoff: Cutoff frequency as a fraction of the sample rate, in `(0, 0.5)`.

    """
    n = torch.arange(num_taps, dtype=torch.float64) - (num_taps - 1) / 2
    taps = 2 * cutoff * torch.sinc(2 * cutoff * n) * torch.hamming_window(num_taps, periodic=False, dtype=torch.float64)
    return taps / taps.sum()


def _wrap_values(values: Tensor, fmt: FixedFormat, fp_mode: bool) -> list[FixedPointSwitchable]:
    result = []
    for value in values.tolist():
        if fp_mode:
            fp = FixedPoint(fmt.int_bits, fmt.frac_bits, value=value)
            result.append(FixedPointSwitchable(True, fp_value=fp))
        else:
            result.append(FixedPointSwitchable(False, float_value=value))
    return result


def fir_filter(
    samples: Tensor,
    coefficients: Tensor,
    *,
    fp_mode: bool,
    acc_fmt: FixedFormat | None = None,
) -> tuple[Tensor, FixedPointSwitchable]:
    """Filter `samples` with a direct-form FIR.

    The same code runs in both modes. In float mode `resize` does nothing, so
    the accumulator's observed range shows which `acc_fmt` fixed mode needs.

    Args:
        samples: 1-D input signal.
        coefficients: 1-D filter taps.
        fp_mode: Run the bit-accurate fixed-point model.
        acc_fmt: Accumulator format in fixed mode. Defaults to wide enough
            for the exact sum.

    Returns:
        The filtered signal, and the accumulator whose `min_value` and
        `max_value` cover every partial sum.

    """
    taps = _wrap_values(coefficients, _coef_fmt, fp_mode)
    inputs = _wrap_values(samples, _input_fmt, fp_mode)

    if acc_fmt is None:
        guard_bits = math.ceil(math.log2(len(taps)))
        acc_fmt = FixedFormat(
            _input_fmt.int_bits + _coef_fmt.int_bits + guard_bits,
            _input_fmt.frac_bits + _coef_fmt.frac_bits,
        )

    zero = FixedPoint(acc_fmt.int_bits, acc_fmt.frac_bits) if fp_mode else 0.0
    accumulator = FixedPointSwitchable(fp_mode, fp_value=zero if fp_mode else None, float_value=0.0)

    output = []
    for i in range(len(inputs)):
        acc = FixedPointSwitchable(fp_mode, fp_value=zero if fp_mode else None, float_value=0.0)
        for k, tap in enumerate(taps):
            if i - k < 0:
                break
            acc = (acc + tap * inputs[i - k]).resize(acc_fmt, _acc_overflow_mode)
            accumulator.value = acc

        out = acc.resize((acc_fmt.int_bits, _output_frac_bits), _acc_overflow_mode, _output_rounding_mode)
        output.append(float(out))

    return torch.tensor(output, dtype=torch.float64), accumulator


def profile_and_run(samples: Tensor, coefficients: Tensor) -> tuple[Tensor, Tensor, FixedFormat]:
    """Profile the accumulator range in float mode, then run fixed mode with a fitted format.

    Returns:
        The float output, the fixed-point output and the chosen accumulator format.

    """
    float_out, accumulator = fir_filter(samples, coefficients, fp_mode=False)

    peak = max(abs(accumulator.min_value), abs(accumulator.max_value), 2.0**-_output_frac_bits)
    int_bits = max(math.ceil(math.log2(peak)) + 1, 1) + 1
    acc_fmt = FixedFormat(int_bits, _input_fmt.frac_bits + _coef_fmt.frac_bits)
    logger.info("Accumulator range [%g, %g] -> format %s", accumulator.min_value, accumulator.max_value, acc_fmt)

    fixed_out, _ = fir_filter(samples, coefficients, fp_mode=True, acc_fmt=acc_fmt)
    return float_out, fixed_out, acc_fmt


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    t = torch.arange(256, dtype=torch.float64)
    signal = 0.5 * torch.sin(2 * math.pi * 0.02 * t) + 0.25 * torch.sin(2 * math.pi * 0.3 * t)
    coefficients = design_lowpass(num_taps=15, cutoff=0.1)

    float_out, fixed_out, acc_fmt = profile_and_run(signal, coefficients)
    error = (float_out - fixed_out).abs().max().item()
    print(f"accumulator format: {acc_fmt}")
    print(f"max abs error vs float model: {error:.3e}")
