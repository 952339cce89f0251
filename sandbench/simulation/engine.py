"""Slot, execution and sweep orchestration.

Each execution owns two policy tracks built from the same node parameters.
Every slot draws one shared workload which both tracks place independently,
so any cost divergence between them comes from the ranking strategy alone.
"""

import logging
import random
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from sandbench.accounting.cost import slot_cost, snapshot_active
from sandbench.cluster.model import ClusterState, Pod, build_node_params
from sandbench.placement.strategy import PlacementResult, PlacementStrategy, place
from sandbench.workload.generator import DEFAULT_POD_DEMAND, WorkloadGenerator

log = logging.getLogger(__name__)

DEFAULT_POLICIES: Tuple[PlacementStrategy, PlacementStrategy] = (
    PlacementStrategy.STATIC,
    PlacementStrategy.TEMPORAL,
)

RANDOM_STREAM_SHARED = "shared"
RANDOM_STREAM_PER_EXECUTION = "per-execution"
RANDOM_STREAM_MODES = (RANDOM_STREAM_SHARED, RANDOM_STREAM_PER_EXECUTION)

RECORD_FIELDS = (
    "ratio",
    "pod_size",
    "node_size",
    "execution",
    "slot",
    "pods",
    "cost_static",
    "cost_temporal",
)


@dataclass(frozen=True)
class SlotRecord:
    """One output row: a slot of one execution of one configuration."""

    ratio: float
    pod_size: int
    node_size: int
    execution: int
    slot: int
    pods: int
    cost_static: float
    cost_temporal: float

    def to_row(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, name) for name in RECORD_FIELDS)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Sequence[str]) -> "SlotRecord":
        """Parse a row of strings in RECORD_FIELDS order."""
        return cls(
            ratio=float(row[0]),
            pod_size=int(row[1]),
            node_size=int(row[2]),
            execution=int(row[3]),
            slot=int(row[4]),
            pods=int(row[5]),
            cost_static=float(row[6]),
            cost_temporal=float(row[7]),
        )


@dataclass(frozen=True)
class TrackOutcome:
    """What one policy track did in one slot."""

    strategy: PlacementStrategy
    placement: PlacementResult
    cost: float
    active: FrozenSet[int]


@dataclass(frozen=True)
class SweepConfig:
    """Parameters of a full benchmark sweep."""

    ratios: Tuple[float, ...] = (1.0, 10.0, 100.0)
    pod_sizes: Tuple[int, ...] = (50, 100, 200, 500, 1000, 5000, 10000)
    node_sizes: Tuple[int, ...] = (10, 20, 50, 100, 200)
    executions: int = 5
    slots: int = 20
    seed: int = 42
    pod_demand: int = DEFAULT_POD_DEMAND
    random_stream: str = RANDOM_STREAM_SHARED

    @property
    def configuration_count(self) -> int:
        return len(self.ratios) * len(self.pod_sizes) * len(self.node_sizes)

    @property
    def record_count(self) -> int:
        return self.configuration_count * self.executions * self.slots


def run_track(state: ClusterState, pods: Sequence[Pod], strategy: PlacementStrategy) -> TrackOutcome:
    """Place, account and snapshot one track for one slot.

    The cost uses the track's own previous active set; the snapshot replaces
    that set only after the cost has been computed.
    """
    placement = place(state, pods, strategy)
    cost = slot_cost(state.nodes, state.previous_active)
    active = snapshot_active(state.nodes)
    state.previous_active = active
    return TrackOutcome(strategy=strategy, placement=placement, cost=cost, active=active)


def run_slot(
    tracks: Sequence[ClusterState],
    pods: Sequence[Pod],
    policies: Sequence[PlacementStrategy] = DEFAULT_POLICIES,
) -> List[TrackOutcome]:
    """Run one slot on every track with the same workload."""
    return [run_track(state, pods, strategy) for state, strategy in zip(tracks, policies)]


def run_execution(
    ratio: float,
    pod_size: int,
    node_size: int,
    execution: int,
    slots: int,
    generator: WorkloadGenerator,
    pod_demand: int = DEFAULT_POD_DEMAND,
    policies: Sequence[PlacementStrategy] = DEFAULT_POLICIES,
) -> Iterator[SlotRecord]:
    """Simulate one execution of a configuration, yielding a record per slot.

    Args:
        ratio: Switching ratio R.
        pod_size: Baseline pod count per slot.
        node_size: Number of nodes.
        execution: 1-based execution index, copied into the records.
        slots: Number of slots to simulate.
        generator: Workload source; advanced exactly once per slot.
        pod_demand: Size of every generated pod.
        policies: Strategies of the first and second track. Records report
            the first as ``cost_static`` and the second as ``cost_temporal``.

    Yields:
        SlotRecord for slots 1..slots.
    """
    if len(policies) != 2:
        raise ValueError(f"Expected exactly two policies, got {len(policies)}")

    params = build_node_params(ratio, pod_size, node_size)
    tracks = [ClusterState.from_params(params), ClusterState.from_params(params)]

    for slot in range(1, slots + 1):
        for state in tracks:
            state.reset()
        target, pods = generator.next_pods(pod_size, pod_demand)
        first, second = run_slot(tracks, pods, policies)
        if first.placement.dropped or second.placement.dropped:
            log.debug(
                "R=%s pods=%d nodes=%d exec=%d slot=%d dropped %d/%d pods",
                ratio, pod_size, node_size, execution, slot,
                len(first.placement.dropped), len(second.placement.dropped),
            )
        yield SlotRecord(
            ratio=ratio,
            pod_size=pod_size,
            node_size=node_size,
            execution=execution,
            slot=slot,
            pods=target,
            cost_static=first.cost,
            cost_temporal=second.cost,
        )


def execution_generator(
    config: SweepConfig,
    shared: Optional[WorkloadGenerator],
    ratio: float,
    pod_size: int,
    node_size: int,
    execution: int,
) -> WorkloadGenerator:
    """Workload generator for one execution under the configured stream mode."""
    if config.random_stream == RANDOM_STREAM_SHARED:
        if shared is None:
            raise ValueError("Shared random stream requested without a generator")
        return shared
    if config.random_stream == RANDOM_STREAM_PER_EXECUTION:
        return WorkloadGenerator(
            random.Random(f"{config.seed}:{ratio!r}:{pod_size}:{node_size}:{execution}")
        )
    raise ValueError(f"Unknown random stream mode: {config.random_stream}")


def iter_configurations(config: SweepConfig) -> Iterator[Tuple[float, int, int]]:
    for ratio in config.ratios:
        for pod_size in config.pod_sizes:
            for node_size in config.node_sizes:
                yield ratio, pod_size, node_size


def run_configuration(
    config: SweepConfig,
    ratio: float,
    pod_size: int,
    node_size: int,
    shared: Optional[WorkloadGenerator] = None,
) -> Iterator[SlotRecord]:
    """All executions of one (ratio, pod size, node count) configuration."""
    for execution in range(1, config.executions + 1):
        generator = execution_generator(config, shared, ratio, pod_size, node_size, execution)
        yield from run_execution(
            ratio,
            pod_size,
            node_size,
            execution,
            config.slots,
            generator,
            pod_demand=config.pod_demand,
        )


def run_sweep(
    config: SweepConfig,
    on_configuration: Optional[Callable[[float, int, int], None]] = None,
) -> Iterator[SlotRecord]:
    """Run the full sweep lazily, in ratio/pod size/node count/execution/slot order.

    In shared mode a single generator seeded with ``config.seed`` is advanced
    across the whole sweep, so the records depend on the sweep's shape as
    well as the seed.

    Args:
        config: The sweep to run.
        on_configuration: Called with (ratio, pod_size, node_size) before the
            first record of each configuration.
    """
    shared = None
    if config.random_stream == RANDOM_STREAM_SHARED:
        shared = WorkloadGenerator.seeded(config.seed)

    log.info(
        "Starting sweep: %d configurations, %d records, seed=%d, stream=%s",
        config.configuration_count, config.record_count, config.seed, config.random_stream,
    )
    for ratio, pod_size, node_size in iter_configurations(config):
        log.debug("R=%.1f | Pods=%d | Nodes=%d", ratio, pod_size, node_size)
        if on_configuration is not None:
            on_configuration(ratio, pod_size, node_size)
        yield from run_configuration(config, ratio, pod_size, node_size, shared)
