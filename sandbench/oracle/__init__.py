"""Exact MIP oracle for validating placement heuristics on small instances."""

from sandbench.oracle.temporal_mip import (
    OracleInstance,
    OracleResult,
    OracleStatus,
    generate_instance,
    run_battery,
    solve,
)

__all__ = [
    "OracleInstance",
    "OracleResult",
    "OracleStatus",
    "generate_instance",
    "run_battery",
    "solve",
]
