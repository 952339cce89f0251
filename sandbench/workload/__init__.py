"""Workload generation for SandBench."""

from sandbench.workload.generator import WorkloadGenerator

__all__ = ["WorkloadGenerator"]
