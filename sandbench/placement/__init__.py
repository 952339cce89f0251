"""Pod placement for SandBench.

Ranks the nodes of a policy track and packs a slot's pods onto them
first-fit, either ignoring activity history (static) or favouring nodes
that are already warm (temporal).
"""

from sandbench.placement.strategy import PlacementResult, PlacementStrategy, place

__all__ = ["PlacementStrategy", "PlacementResult", "place"]
