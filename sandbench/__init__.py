"""SandBench - switching-cost aware placement benchmark for elastic clusters."""

__version__ = "0.1.0"
