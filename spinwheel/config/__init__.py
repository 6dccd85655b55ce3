"""Configuration loading and validation package."""

from .loader import load_wheel_config, resolve_config_path
from .models import (
    IdentityConfig,
    PrizeConfig,
    SpinConfig,
    StorageConfig,
    TelemetryConfig,
    VerificationConfig,
    WheelConfig,
)

__all__ = [
    "IdentityConfig",
    "PrizeConfig",
    "SpinConfig",
    "StorageConfig",
    "TelemetryConfig",
    "VerificationConfig",
    "WheelConfig",
    "load_wheel_config",
    "resolve_config_path",
]
