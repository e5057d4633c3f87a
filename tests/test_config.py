"""Unit tests for backend and resize configuration."""

import logging

import pytest

from fpsim import (
    CONSTRUCT_RESIZE_CONFIG,
    DEFAULT_RESIZE_CONFIG,
    BackendConfig,
    FixedPoint,
    OverflowMode,
    RoundingMode,
    backend_config,
    get_backend_config,
    set_backend_config,
)


class TestBackendConfig:
    """Backend configuration"""

    def test_default(self):
        assert get_backend_config() == BackendConfig(small_max_bits=64)

    def test_set_returns_previous(self):
        previous = set_backend_config(BackendConfig(small_max_bits=16))
        try:
            assert get_backend_config().small_max_bits == 16
            assert FixedPoint(8, 8).is_large is False
            assert FixedPoint(8, 9).is_large is True
        finally:
            set_backend_config(previous)

        assert get_backend_config() == previous

    def test_context_restores(self):
        with backend_config(BackendConfig(small_max_bits=0)) as config:
            assert config.small_max_bits == 0
            assert get_backend_config() is config

        assert get_backend_config() == BackendConfig()

    def test_context_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with backend_config(BackendConfig(small_max_bits=8)):
                raise RuntimeError("boom")

        assert get_backend_config() == BackendConfig()

    @pytest.mark.parametrize("small_max_bits", [-1, 65, 128])
    def test_out_of_range(self, small_max_bits):
        with pytest.raises(ValueError):
            set_backend_config(BackendConfig(small_max_bits=small_max_bits))

    def test_narrow_word_matches_default(self):
        """Narrow native words only change where values live, not their bits."""
        a = FixedPoint(8, 8, value=-3.7)
        b = FixedPoint(6, 10, value=1.3)
        expected = [(a * b).__getstate__(), (a / b).__getstate__(), (a - b).__getstate__()]

        with backend_config(BackendConfig(small_max_bits=12)):
            a = FixedPoint(8, 8, value=-3.7)
            b = FixedPoint(6, 10, value=1.3)
            result = [(a * b).__getstate__(), (a / b).__getstate__(), (a - b).__getstate__()]

        assert result == expected

    def test_max_bits_follows_config(self):
        assert FixedPoint.get_max_bits() == 64
        with backend_config(BackendConfig(small_max_bits=16)):
            assert FixedPoint.get_max_bits() == 16

    def test_logs_change(self, caplog):
        caplog.set_level(logging.DEBUG, logger="fpsim")
        with backend_config(BackendConfig(small_max_bits=32)):
            pass

        assert any("Backend config changed" in record.getMessage() for record in caplog.records)


class TestResizeConfig:
    """Resize policy defaults"""

    def test_default_resize(self):
        assert DEFAULT_RESIZE_CONFIG.overflow_mode is OverflowMode.WRAP
        assert DEFAULT_RESIZE_CONFIG.rounding_mode is RoundingMode.DIRECT_NEG_INF

        fp = FixedPoint(5, 3, value=-14.875).resize((4, 1))
        assert fp == 1.0

    def test_construct_resize(self):
        assert CONSTRUCT_RESIZE_CONFIG.overflow_mode is OverflowMode.SAT
        assert CONSTRUCT_RESIZE_CONFIG.rounding_mode is RoundingMode.NEAR_POS_INF

    def test_unpack(self):
        overflow_mode, rounding_mode = CONSTRUCT_RESIZE_CONFIG
        fp = FixedPoint(5, 3, value=-14.875).resize((4, 1), overflow_mode, rounding_mode)
        assert fp == -8.0
