"""Output generation for SandBench results."""

from sandbench.output.generator import OutputGenerator, read_csv, write_csv
from sandbench.output.comparison import compare_policies

__all__ = ["OutputGenerator", "compare_policies", "read_csv", "write_csv"]
