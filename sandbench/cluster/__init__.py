"""Cluster model: nodes, pods and per-track cluster state."""

from sandbench.cluster.model import (
    ClusterState,
    CostClass,
    Node,
    NodeParams,
    Pod,
    build_node_params,
    cost_class,
    node_capacity,
)

__all__ = [
    "ClusterState",
    "CostClass",
    "Node",
    "NodeParams",
    "Pod",
    "build_node_params",
    "cost_class",
    "node_capacity",
]
