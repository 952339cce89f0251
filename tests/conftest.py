"""Pytest configuration and fixtures."""

import pytest

from sandbench.cluster.model import ClusterState, NodeParams, build_node_params
from sandbench.simulation.engine import SlotRecord, SweepConfig


class FixedRandom:
    """Stand-in for random.Random whose random() returns scripted values."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


@pytest.fixture
def fixed_random():
    """Factory for scripted random streams."""
    return FixedRandom


@pytest.fixture
def small_params():
    """Four nodes: two cheap/slow (0, 1) and two expensive/fast (2, 3)."""
    return (
        NodeParams(node_id=0, capacity=100, alpha=20.0, delta=100.0, theta=10.0),
        NodeParams(node_id=1, capacity=100, alpha=20.0, delta=100.0, theta=10.0),
        NodeParams(node_id=2, capacity=100, alpha=250.0, delta=10.0, theta=1.0),
        NodeParams(node_id=3, capacity=100, alpha=250.0, delta=10.0, theta=1.0),
    )


@pytest.fixture
def small_state(small_params):
    """A fresh track built from small_params."""
    return ClusterState.from_params(small_params)


@pytest.fixture
def benchmark_params():
    """R=1.0, 50 pods, 10 nodes: the smallest configuration of the full grid."""
    return build_node_params(1.0, 50, 10)


@pytest.fixture
def quick_sweep():
    """A sweep small enough to run in a test."""
    return SweepConfig(
        ratios=(1.0, 10.0),
        pod_sizes=(50, 100),
        node_sizes=(10,),
        executions=2,
        slots=5,
        seed=7,
    )


@pytest.fixture
def sample_config():
    """A valid SweepConfig document."""
    return {
        "apiVersion": "sandbench.io/v1",
        "kind": "SweepConfig",
        "metadata": {
            "name": "sample-sweep",
            "description": "A sample sweep for testing",
        },
        "spec": {
            "ratios": [1.0, 10.0],
            "podSizes": [50, 100],
            "nodeSizes": [10],
            "executions": 2,
            "slots": 5,
            "seed": 7,
            "podDemand": 5,
            "randomStream": "shared",
            "output": {"format": "csv"},
        },
    }


@pytest.fixture
def sample_records():
    """Records for two configurations; temporal is cheaper in the second."""
    return [
        SlotRecord(1.0, 50, 10, 1, 1, 45, 472.5, 472.5),
        SlotRecord(1.0, 50, 10, 1, 2, 50, 185.0, 185.0),
        SlotRecord(10.0, 50, 10, 1, 1, 45, 3172.5, 3172.5),
        SlotRecord(10.0, 50, 10, 1, 2, 60, 1210.0, 960.0),
        SlotRecord(10.0, 50, 10, 1, 3, 40, 900.0, 1000.0),
    ]
