"""
Configuration для RWA Epoch: defaults + per-pool YAML overrides.
"""

from rwa_epoch.config.defaults import (
    ConstraintDefaults,
    DefaultConfig,
    EpochDefaults,
    get_default_config,
)
from rwa_epoch.config.loader import ConfigLoader

__all__ = [
    "ConfigLoader",
    "ConstraintDefaults",
    "DefaultConfig",
    "EpochDefaults",
    "get_default_config",
]
