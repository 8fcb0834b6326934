"""Synthetic test data generation for bleachfinder."""

from .synthetic import (
    SyntheticBleachConfig,
    create_bleach_stack,
    create_shifted_stack,
    generate_synthetic_dataset,
    get_preset_config,
)

__all__ = [
    "SyntheticBleachConfig",
    "create_bleach_stack",
    "create_shifted_stack",
    "generate_synthetic_dataset",
    "get_preset_config",
]
