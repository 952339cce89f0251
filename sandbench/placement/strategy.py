"""Placement strategy definitions and first-fit node assignment.

Provides two strategies for ranking nodes before first-fit packing:
- static:   Order nodes by recurring cost alone (history-oblivious)
- temporal: Order nodes by recurring cost plus the activation penalty they
            would incur this slot (nodes active last slot pay none)

Both strategies then assign pods in input order to the first node with
enough remaining capacity. Pods that fit nowhere are dropped.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Callable, Dict, List, Optional, Sequence

from sandbench.cluster.model import ClusterState, Node, Pod

RankingKey = Callable[[Node, Optional[AbstractSet[int]]], float]


class PlacementStrategy(str, Enum):
    """Node ranking strategy used before first-fit assignment."""

    STATIC = "static"
    TEMPORAL = "temporal"

    def describe(self) -> str:
        """Human-readable description of the strategy."""
        descriptions = {
            self.STATIC: (
                "Rank nodes by ascending recurring cost (alpha), ignoring "
                "which nodes were active in the previous slot."
            ),
            self.TEMPORAL: (
                "Rank nodes by alpha plus delta, waiving delta for nodes that "
                "were active in the previous slot so warm nodes are reused."
            ),
        }
        return descriptions[self]

    @property
    def ranking_key(self) -> RankingKey:
        return _RANKING_KEYS[self]


def static_key(node: Node, previous_active: Optional[AbstractSet[int]]) -> float:
    return node.alpha


def temporal_key(node: Node, previous_active: Optional[AbstractSet[int]]) -> float:
    """alpha, plus delta unless the node was active in the previous slot.

    Without any history (first slot of an execution) there is nothing to
    favour, so the key reduces to the static one.
    """
    if previous_active is None:
        return node.alpha
    return node.alpha + (0.0 if node.id in previous_active else node.delta)


_RANKING_KEYS: Dict[PlacementStrategy, RankingKey] = {
    PlacementStrategy.STATIC: static_key,
    PlacementStrategy.TEMPORAL: temporal_key,
}


@dataclass
class PlacementResult:
    """Outcome of one first-fit pass: pod id -> node id, plus dropped pod ids."""

    placed: Dict[int, int] = field(default_factory=dict)
    dropped: List[int] = field(default_factory=list)

    @property
    def fully_placed(self) -> bool:
        return not self.dropped

    def to_dict(self) -> Dict[str, object]:
        """Serialise to a dictionary."""
        return {
            "placed": dict(self.placed),
            "dropped": list(self.dropped),
        }


def rank_nodes(state: ClusterState, strategy: PlacementStrategy) -> None:
    """Re-order ``state.nodes`` in place by the strategy's ranking key.

    The sort is stable, so nodes with equal keys keep their previous order.
    """
    key = strategy.ranking_key
    previous = state.previous_active
    state.nodes.sort(key=lambda n: key(n, previous))


def first_fit(nodes: Sequence[Node], pods: Sequence[Pod]) -> PlacementResult:
    """Assign each pod to the first node in ``nodes`` that can hold it.

    No backtracking. A pod that fits on no node is recorded as dropped and
    otherwise ignored.
    """
    result = PlacementResult()
    for pod in pods:
        for node in nodes:
            if node.can_fit(pod):
                node.assign(pod)
                result.placed[pod.id] = node.id
                break
        else:
            result.dropped.append(pod.id)
    return result


def place(
    state: ClusterState,
    pods: Sequence[Pod],
    strategy: PlacementStrategy,
) -> PlacementResult:
    """Clear the track, rank its nodes and first-fit the slot's pods.

    Args:
        state: The policy track to place into. Mutated in place.
        pods: The slot's workload, in placement order.
        strategy: The ranking strategy to apply.

    Returns:
        A PlacementResult describing where each pod went.
    """
    state.reset()
    rank_nodes(state, strategy)
    return first_fit(state.nodes, pods)
