"""Machine configuration loading and validation."""

from pnp_control.configs.loader import (
    ActuatorsConfig,
    ConfigError,
    DispenseConfig,
    HeightsConfig,
    MachineConfig,
    RotationConfig,
    SpeedsConfig,
    load_config,
    parse_config,
)

__all__ = [
    "ActuatorsConfig",
    "ConfigError",
    "DispenseConfig",
    "HeightsConfig",
    "MachineConfig",
    "RotationConfig",
    "SpeedsConfig",
    "load_config",
    "parse_config",
]
