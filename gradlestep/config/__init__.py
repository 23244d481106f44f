"""
Configuration loading and validation for gradlestep.
"""

from .parser import (
    CachingConfig,
    StepConfig,
    apply_overrides,
    load_config,
    log_config,
    validate_config,
)

__all__ = [
    "CachingConfig",
    "StepConfig",
    "apply_overrides",
    "load_config",
    "log_config",
    "validate_config",
]
