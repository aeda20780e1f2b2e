"""
Runtime Configuration Module

Provides configuration loading and management for the empanelment engine.
"""

from .runtime import (
    DeviceTypeConfig,
    EvaluationConfig,
    FeeConfig,
    RuntimeConfig,
    ServiceConfig,
    get_default_config,
    load_runtime_config,
    set_default_config,
)

__all__ = [
    "DeviceTypeConfig",
    "EvaluationConfig",
    "FeeConfig",
    "RuntimeConfig",
    "ServiceConfig",
    "get_default_config",
    "load_runtime_config",
    "set_default_config",
]
