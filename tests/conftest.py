"""Shared fixtures for fpsim tests."""

import pytest

from fpsim import BackendConfig, backend_config


@pytest.fixture(params=["small", "large"])
def representation(request):
    """Run a test once with the default backend and once with every value in the large representation."""
    small_max_bits = BackendConfig().small_max_bits if request.param == "small" else 0
    with backend_config(BackendConfig(small_max_bits=small_max_bits)):
        yield request.param
