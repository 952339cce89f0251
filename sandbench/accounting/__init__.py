"""Cost accounting for SandBench."""

from sandbench.accounting.cost import (
    POD_COST,
    NodeCost,
    Transition,
    cost_breakdown,
    slot_cost,
    snapshot_active,
)

__all__ = [
    "POD_COST",
    "NodeCost",
    "Transition",
    "cost_breakdown",
    "slot_cost",
    "snapshot_active",
]
