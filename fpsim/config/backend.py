# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Representation selection configuration."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NamedTuple

from fpsim.type import NATIVE_WORD_BITS

logger = logging.getLogger(__name__)


class BackendConfig(NamedTuple):
    """Configuration for choosing between the small and large representations.

    Attributes:
        small_max_bits: Widest signed word the small representation may use,
            including any bits needed for intermediate results. Zero forces
            every value into the large representation.

    """

    small_max_bits: int = NATIVE_WORD_BITS


_backend_config = BackendConfig()


def get_backend_config() -> BackendConfig:
    """Return the active backend configuration."""
    return _backend_config


def set_backend_config(config: BackendConfig) -> BackendConfig:
    """Replace the active backend configuration.

    Values already constructed keep their representation until their next
    operation.

    Args:
        config: New configuration.

    Returns:
        The previous configuration.

    Raises:
        ValueError: If `small_max_bits` is outside `[0, NATIVE_WORD_BITS]`.

    """
    global _backend_config

    if not 0 <= config.small_max_bits <= NATIVE_WORD_BITS:
        raise ValueError(f"small_max_bits ({config.small_max_bits}) must be in [0, {NATIVE_WORD_BITS}]")

    previous, _backend_config = _backend_config, config
    logger.debug("Backend config changed from %s to %s", previous, config)
    return previous


@contextmanager
def backend_config(config: BackendConfig) -> Iterator[BackendConfig]:
    """Temporarily apply a backend configuration."""
    previous = set_backend_config(config)
    try:
        yield config
    finally:
        set_backend_config(previous)
