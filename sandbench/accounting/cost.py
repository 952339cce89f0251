"""Per-slot cost accounting and activity snapshots.

A node's contribution to a slot depends on whether it is active now and
whether it was active in the previous slot:

    active now, active before      alpha + POD_COST * pods
    active now, inactive before    alpha + delta + POD_COST * pods
    inactive now, active before    theta
    inactive now, inactive before  0
"""

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, FrozenSet, Iterable, List, Optional

from sandbench.cluster.model import Node

POD_COST = 2.5


class Transition(str, Enum):
    """Activity transition of a node between two consecutive slots."""

    STAYED_ACTIVE = "stayed-active"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    STAYED_IDLE = "stayed-idle"


@dataclass(frozen=True)
class NodeCost:
    """One node's contribution to a slot and the transition that produced it."""

    node_id: int
    transition: Transition
    pod_count: int
    cost: float


def transition_of(node: Node, previous_active: Optional[AbstractSet[int]]) -> Transition:
    was_active = previous_active is not None and node.id in previous_active
    if node.is_active:
        return Transition.STAYED_ACTIVE if was_active else Transition.ACTIVATED
    return Transition.DEACTIVATED if was_active else Transition.STAYED_IDLE


def node_cost(node: Node, previous_active: Optional[AbstractSet[int]]) -> NodeCost:
    transition = transition_of(node, previous_active)
    pod_count = len(node.pods)
    if transition == Transition.STAYED_ACTIVE:
        cost = node.alpha + pod_count * POD_COST
    elif transition == Transition.ACTIVATED:
        cost = node.alpha + node.delta + pod_count * POD_COST
    elif transition == Transition.DEACTIVATED:
        cost = node.theta
    else:
        cost = 0.0
    return NodeCost(node_id=node.id, transition=transition, pod_count=pod_count, cost=cost)


def cost_breakdown(nodes: Iterable[Node], previous_active: Optional[AbstractSet[int]]) -> List[NodeCost]:
    """Per-node cost contributions for a slot, in node order. Does not mutate."""
    return [node_cost(n, previous_active) for n in nodes]


def slot_cost(nodes: Iterable[Node], previous_active: Optional[AbstractSet[int]]) -> float:
    """Total cost of a slot given its assignment and the previous active set.

    A ``previous_active`` of None means no history: every active node pays
    its activation penalty and no node pays a deactivation penalty.
    """
    total = 0.0
    for entry in cost_breakdown(nodes, previous_active):
        total += entry.cost
    return total


def snapshot_active(nodes: Iterable[Node]) -> FrozenSet[int]:
    """Ids of the nodes that are active after this slot's assignment."""
    return frozenset(n.id for n in nodes if n.is_active)
