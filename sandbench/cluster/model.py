"""Node and pod model for the switching-cost cluster simulation.

A node's parameters never change during an execution, so they live in an
immutable NodeParams record. Each policy track builds its own mutable Node
objects from the shared parameters, which keeps the two tracks isolated.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

MIN_NODE_CAPACITY = 100
CAPACITY_FACTOR = 10

CHEAP_ALPHA = 20.0
EXPENSIVE_ALPHA = 250.0
FAST_DELTA = 10.0
SLOW_DELTA_FACTOR = 5.0
THETA_FACTOR = 0.1


class CostClass(str, Enum):
    """Cost regime a node belongs to, derived from its roster position."""

    CHEAP_SLOW = "cheap-slow"
    EXPENSIVE_FAST = "expensive-fast"

    def describe(self) -> str:
        """Human-readable description of the cost class."""
        descriptions = {
            self.CHEAP_SLOW: (
                "Low recurring cost, high activation penalty that scales "
                "with the switching ratio."
            ),
            self.EXPENSIVE_FAST: (
                "High recurring cost, small fixed activation penalty."
            ),
        }
        return descriptions[self]


@dataclass(frozen=True)
class Pod:
    """A unit of demand for a single slot."""

    id: int
    size: int


@dataclass(frozen=True)
class NodeParams:
    """Capacity and cost parameters of a node, fixed for a whole execution."""

    node_id: int
    capacity: int
    alpha: float
    delta: float
    theta: float


@dataclass
class Node:
    """A node inside one policy track, with its assignment for the current slot."""

    id: int
    capacity: int
    alpha: float
    delta: float
    theta: float
    pods: Dict[int, Pod] = field(default_factory=dict)

    @classmethod
    def from_params(cls, params: NodeParams) -> "Node":
        return cls(
            id=params.node_id,
            capacity=params.capacity,
            alpha=params.alpha,
            delta=params.delta,
            theta=params.theta,
        )

    @property
    def used(self) -> int:
        return sum(p.size for p in self.pods.values())

    @property
    def remaining_capacity(self) -> int:
        return self.capacity - self.used

    @property
    def is_active(self) -> bool:
        return bool(self.pods)

    def can_fit(self, pod: Pod) -> bool:
        return self.remaining_capacity >= pod.size

    def assign(self, pod: Pod) -> None:
        """Place a pod on this node.

        Raises:
            ValueError: If the pod does not fit in the remaining capacity.
        """
        if not self.can_fit(pod):
            raise ValueError(
                f"Pod {pod.id} (size {pod.size}) does not fit on node {self.id} "
                f"({self.remaining_capacity} of {self.capacity} remaining)"
            )
        self.pods[pod.id] = pod

    def reset(self) -> None:
        self.pods.clear()


@dataclass
class ClusterState:
    """Ordered nodes of one policy track plus the previous slot's active set.

    ``previous_active`` is None before the first slot has been accounted.
    An empty set means the previous slot ran with no active node.
    """

    nodes: List[Node]
    previous_active: Optional[FrozenSet[int]] = None

    @classmethod
    def from_params(cls, params: Iterable[NodeParams]) -> "ClusterState":
        """Build an independently owned state with no activity history."""
        return cls(nodes=[Node.from_params(p) for p in params])

    def reset(self) -> None:
        for node in self.nodes:
            node.reset()


def node_capacity(pod_size: int, node_size: int) -> int:
    """Per-node capacity for a configuration, never below MIN_NODE_CAPACITY."""
    return max(MIN_NODE_CAPACITY, (CAPACITY_FACTOR * pod_size) // node_size)


def cost_class(index: int, total: int) -> CostClass:
    """The first half of the roster is cheap/slow, the rest expensive/fast."""
    if index < total // 2:
        return CostClass.CHEAP_SLOW
    return CostClass.EXPENSIVE_FAST


def build_node_params(ratio: float, pod_size: int, node_size: int) -> Tuple[NodeParams, ...]:
    """Deterministic node roster for one (ratio, pod size, node count) configuration.

    Args:
        ratio: Switching ratio R; scales the activation penalty of cheap nodes.
        pod_size: Baseline pod count per slot.
        node_size: Number of nodes in the roster.

    Returns:
        NodeParams for node ids 0..node_size-1, in roster order.
    """
    capacity = node_capacity(pod_size, node_size)
    params = []
    for i in range(node_size):
        if cost_class(i, node_size) == CostClass.CHEAP_SLOW:
            alpha = CHEAP_ALPHA
            delta = alpha * ratio * SLOW_DELTA_FACTOR
        else:
            alpha = EXPENSIVE_ALPHA
            delta = FAST_DELTA
        params.append(
            NodeParams(
                node_id=i,
                capacity=capacity,
                alpha=alpha,
                delta=delta,
                theta=delta * THETA_FACTOR,
            )
        )
    return tuple(params)
