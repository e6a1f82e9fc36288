"""
Contracts Module: Configured limits the derivation rules are held to.

- thresholds.py: Attention rule thresholds with justifications
"""

from .thresholds import (
    DEFAULT_THRESHOLDS,
    ENVIRONMENT_OVERRIDES,
    AttentionThresholds,
    ThresholdConfig,
    ThresholdViolation,
    get_thresholds_for_environment,
    load_thresholds,
    validate_thresholds,
)

__all__ = [
    "DEFAULT_THRESHOLDS",
    "ENVIRONMENT_OVERRIDES",
    "AttentionThresholds",
    "ThresholdConfig",
    "ThresholdViolation",
    "get_thresholds_for_environment",
    "load_thresholds",
    "validate_thresholds",
]
