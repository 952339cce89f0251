"""Per-slot workload generation from an explicit random stream."""

import random
from typing import List, Tuple

from sandbench.cluster.model import Pod

DEFAULT_POD_DEMAND = 5
VARIATION_LOW = 0.7
VARIATION_SPAN = 0.6


class WorkloadGenerator:
    """Draws each slot's pod target from a seeded random stream.

    The generator never touches module-level random state. Both policy tracks
    of an execution consume the same draw, so one call happens per slot.
    """

    def __init__(self, rng: random.Random):
        self.rng = rng

    @classmethod
    def seeded(cls, seed) -> "WorkloadGenerator":
        return cls(random.Random(seed))

    def next_variation(self) -> float:
        """Uniform draw on [0.7, 1.3)."""
        return VARIATION_LOW + self.rng.random() * VARIATION_SPAN

    def next_target(self, baseline: int) -> int:
        return round(baseline * self.next_variation())

    def next_pods(self, baseline: int, pod_demand: int = DEFAULT_POD_DEMAND) -> Tuple[int, List[Pod]]:
        """Draw a target and build that many equally sized pods.

        Returns:
            (target, pods) where pods are numbered 0..target-1.
        """
        target = self.next_target(baseline)
        return target, [Pod(id=i, size=pod_demand) for i in range(target)]
