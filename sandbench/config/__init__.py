"""Configuration loading and validation for SandBench sweeps."""

from sandbench.config.loader import load_config, sweep_from_config
from sandbench.config.validator import validate_config

__all__ = ["load_config", "sweep_from_config", "validate_config"]
