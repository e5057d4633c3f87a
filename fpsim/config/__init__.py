# Copyright (c) 2024 The FpSim Authors
# SPDX-License-Identifier: MIT

"""Configuration types for representation selection and resize policy."""

from .backend import BackendConfig, backend_config, get_backend_config, set_backend_config
from .resize import CONSTRUCT_RESIZE_CONFIG, DEFAULT_RESIZE_CONFIG, ResizeConfig

__all__ = (
    # backend
    "BackendConfig",
    "backend_config",
    "get_backend_config",
    "set_backend_config",
    # resize
    "ResizeConfig",
    "DEFAULT_RESIZE_CONFIG",
    "CONSTRUCT_RESIZE_CONFIG",
)
