"""Simulation orchestration for SandBench."""

from sandbench.simulation.engine import (
    RECORD_FIELDS,
    SlotRecord,
    SweepConfig,
    run_execution,
    run_sweep,
)

__all__ = ["RECORD_FIELDS", "SlotRecord", "SweepConfig", "run_execution", "run_sweep"]
