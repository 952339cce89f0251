"""Schema validation for SandBench sweep configurations."""

from typing import Any, Dict, List

import jsonschema

from sandbench.cluster.model import node_capacity

_POSITIVE_INT_LIST = {
    "type": "array",
    "items": {"type": "integer", "minimum": 1},
    "minItems": 1,
}

# JSON Schema for sweep configuration
CONFIG_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["apiVersion", "kind", "spec"],
    "properties": {
        "apiVersion": {
            "type": "string",
            "pattern": "^sandbench\\.io/v\\d+.*$"
        },
        "kind": {
            "type": "string",
            "enum": ["SweepConfig"]
        },
        "metadata": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "description": {"type": "string"}
            }
        },
        "spec": {
            "type": "object",
            "required": ["ratios", "podSizes", "nodeSizes", "executions", "slots", "seed"],
            "properties": {
                "ratios": {
                    "type": "array",
                    "items": {"type": "number", "exclusiveMinimum": 0},
                    "minItems": 1
                },
                "podSizes": _POSITIVE_INT_LIST,
                "nodeSizes": _POSITIVE_INT_LIST,
                "executions": {"type": "integer", "minimum": 1},
                "slots": {"type": "integer", "minimum": 1},
                "seed": {"type": "integer"},
                "podDemand": {"type": "integer", "minimum": 1},
                "randomStream": {
                    "type": "string",
                    "enum": ["shared", "per-execution"]
                },
                "output": {"$ref": "#/$defs/outputConfig"}
            }
        }
    },
    "$defs": {
        "outputConfig": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "minLength": 1},
                "format": {"type": "string", "enum": ["csv", "json"]}
            }
        }
    }
}


class ValidationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, errors: List[str] = None):
        super().__init__(message)
        self.errors = errors or []


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate a sweep configuration against the schema.

    Args:
        config: The configuration dictionary.

    Returns:
        True if validation passes.

    Raises:
        ValidationError: If validation fails.
    """
    try:
        jsonschema.validate(instance=config, schema=CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValidationError(f"Schema validation failed: {e.message}", [str(e)])

    errors = _semantic_validation(config)
    if errors:
        raise ValidationError("Semantic validation failed", errors)

    return True


def _semantic_validation(config: Dict[str, Any]) -> List[str]:
    """Checks the schema cannot express.

    Args:
        config: The configuration dictionary.

    Returns:
        List of validation error messages.
    """
    errors = []
    spec = config.get("spec", {})

    for key in ("ratios", "podSizes", "nodeSizes"):
        values = spec.get(key, [])
        duplicates = sorted({v for v in values if values.count(v) > 1})
        if duplicates:
            errors.append(f"'{key}' contains duplicate values: {duplicates}")

    # A pod larger than a node can never be placed
    pod_demand = spec.get("podDemand")
    if pod_demand is not None:
        for pod_size in spec.get("podSizes", []):
            for node_size in spec.get("nodeSizes", []):
                capacity = node_capacity(pod_size, node_size)
                if pod_demand > capacity:
                    errors.append(
                        f"podDemand {pod_demand} exceeds node capacity {capacity} "
                        f"for podSize={pod_size}, nodeSize={node_size}"
                    )

    return errors
