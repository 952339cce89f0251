"""Sweep configuration loader for SandBench.

A sweep configuration is a single YAML document of kind ``SweepConfig``.
Missing fields fall back to DEFAULT_CONFIG, which reproduces the full
benchmark grid.
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from sandbench.simulation.engine import SweepConfig

API_VERSION = "sandbench.io/v1"
CONFIG_KIND = "SweepConfig"

DEFAULT_CONFIG: Dict[str, Any] = {
    "apiVersion": API_VERSION,
    "kind": CONFIG_KIND,
    "metadata": {"name": "full-benchmark"},
    "spec": {
        "ratios": [1.0, 10.0, 100.0],
        "podSizes": [50, 100, 200, 500, 1000, 5000, 10000],
        "nodeSizes": [10, 20, 50, 100, 200],
        "executions": 5,
        "slots": 20,
        "seed": 42,
        "podDemand": 5,
        "randomStream": "shared",
        "output": {"format": "csv"},
    },
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load a sweep configuration and merge it over the defaults.

    Args:
        config_path: Path to a YAML file. None returns a copy of the defaults.

    Returns:
        The merged configuration dictionary.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If the file is not a single YAML mapping.
    """
    if config_path is None:
        return deepcopy(DEFAULT_CONFIG)

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if not path.is_file():
        raise ValueError(f"Invalid config path: {config_path}")

    try:
        doc = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")

    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise ValueError(
            f"Expected a mapping in {config_path}, got {type(doc).__name__}"
        )

    return merge_configs(DEFAULT_CONFIG, doc)


def sweep_from_config(config: Dict[str, Any]) -> SweepConfig:
    """Build the simulation's SweepConfig from a (validated) config dict."""
    spec = config.get("spec", {})
    defaults = DEFAULT_CONFIG["spec"]

    def get(key: str) -> Any:
        return spec.get(key, defaults[key])

    return SweepConfig(
        ratios=tuple(float(r) for r in get("ratios")),
        pod_sizes=tuple(int(p) for p in get("podSizes")),
        node_sizes=tuple(int(n) for n in get("nodeSizes")),
        executions=int(get("executions")),
        slots=int(get("slots")),
        seed=int(get("seed")),
        pod_demand=int(get("podDemand")),
        random_stream=str(get("randomStream")),
    )


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge multiple configuration dictionaries.

    Later configs override earlier ones for conflicting keys.
    """
    result: Dict[str, Any] = {}
    for config in configs:
        result = _deep_merge(result, config)
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries."""
    result = deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)
    return result
