"""Exact temporal placement model, used to validate the heuristics on small instances.

Variables per node i and slot t:
    x[i,t]  node active
    z[i,t]  node activates between t and t+1
    w[i,t]  node deactivates between t and t+1
    y[i,j,t] pod j runs on node i

The oracle never feeds back into the simulation. Solver problems are
reported through OracleStatus rather than raised.
"""

import csv
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, TextIO

import pulp

log = logging.getLogger(__name__)

DEFAULT_DELTA = 50.0
DEFAULT_THETA = 20.0
DEFAULT_GAP = 0.01

ORACLE_CSV_HEADER = ("N", "P", "Iteration", "Status", "Time_s", "Optimal_Cost")


class OracleStatus(str, Enum):
    """Outcome of an oracle solve.

    OPTIMAL means proven optimal within the requested gap. A run stopped by
    its time limit with an unproven incumbent is OTHER.
    """

    OPTIMAL = "OPTIMAL"
    INFEASIBLE = "INFEASIBLE"
    OTHER = "OTHER"
    ERROR = "ERROR"


def classify_status(status: int, sol_status: int) -> OracleStatus:
    """Map PuLP's problem and solution status codes to an OracleStatus."""
    if status == pulp.LpStatusOptimal and sol_status == pulp.LpSolutionOptimal:
        return OracleStatus.OPTIMAL
    if status == pulp.LpStatusInfeasible:
        return OracleStatus.INFEASIBLE
    return OracleStatus.OTHER


@dataclass(frozen=True)
class OracleInstance:
    """A multi-slot placement problem with inertia penalties.

    Node arrays (capacities, alpha, beta, gamma) share one length, as do the
    pod arrays (demands, errors). Every slot places the same pod set.
    """

    capacities: Sequence[float]
    alpha: Sequence[float]
    beta: Sequence[float]
    gamma: Sequence[float]
    demands: Sequence[float]
    errors: Sequence[float]
    slots: int
    delta: float = DEFAULT_DELTA
    theta: float = DEFAULT_THETA

    def __post_init__(self):
        n = len(self.capacities)
        if not (len(self.alpha) == len(self.beta) == len(self.gamma) == n):
            raise ValueError("Node arrays must all have the same length")
        if len(self.errors) != len(self.demands):
            raise ValueError("Pod arrays must all have the same length")
        if self.slots < 1:
            raise ValueError(f"slots must be positive, got {self.slots}")

    @property
    def node_count(self) -> int:
        return len(self.capacities)

    @property
    def pod_count(self) -> int:
        return len(self.demands)


@dataclass(frozen=True)
class OracleResult:
    """Status, proven cost (None unless OPTIMAL) and wall-clock seconds of a solve."""

    status: OracleStatus
    cost: Optional[float]
    solve_time: float


@dataclass(frozen=True)
class OracleRecord:
    """One row of an oracle battery."""

    node_count: int
    pod_count: int
    iteration: int
    result: OracleResult

    def to_row(self) -> List[str]:
        cost = self.result.cost if self.result.cost is not None else -1.0
        return [
            str(self.node_count),
            str(self.pod_count),
            str(self.iteration),
            self.result.status.value,
            f"{self.result.solve_time:.3f}",
            f"{cost:.2f}",
        ]


def generate_instance(
    node_count: int,
    pod_count: int,
    slots: int,
    rng: random.Random,
    delta: float = DEFAULT_DELTA,
    theta: float = DEFAULT_THETA,
) -> OracleInstance:
    """Draw a random instance.

    Node parameters are drawn node by node (capacity, alpha, beta, gamma),
    then pod parameters pod by pod (demand, errors).
    """
    capacity_min = pod_count // node_count + 1
    capacity_max = pod_count * 2
    cost_max = 4 * node_count

    capacities, alpha, beta, gamma = [], [], [], []
    for _ in range(node_count):
        capacities.append(float(rng.randint(capacity_min, capacity_max)))
        alpha.append(float(rng.randint(1, cost_max)))
        beta.append(float(rng.randint(1, cost_max)))
        gamma.append(float(rng.randint(1, 10)))

    demands, errors = [], []
    for _ in range(pod_count):
        demands.append(float(rng.randint(1, 10)))
        errors.append(float(rng.randint(1, 20)))

    return OracleInstance(
        capacities=capacities,
        alpha=alpha,
        beta=beta,
        gamma=gamma,
        demands=demands,
        errors=errors,
        slots=slots,
        delta=delta,
        theta=theta,
    )


def build_model(instance: OracleInstance) -> pulp.LpProblem:
    """Build the temporal placement MIP for an instance."""
    nodes = range(instance.node_count)
    pods = range(instance.pod_count)
    slots = range(instance.slots)
    last = instance.slots - 1

    prob = pulp.LpProblem("temporal_placement", pulp.LpMinimize)

    x = {(i, t): pulp.LpVariable(f"x_{i}_{t}", cat="Binary") for i in nodes for t in slots}
    z = {(i, t): pulp.LpVariable(f"z_{i}_{t}", cat="Binary") for i in nodes for t in slots if t < last}
    w = {(i, t): pulp.LpVariable(f"w_{i}_{t}", cat="Binary") for i in nodes for t in slots if t < last}
    y = {
        (i, j, t): pulp.LpVariable(f"y_{i}_{j}_{t}", cat="Binary")
        for i in nodes for j in pods for t in slots
    }

    prob += (
        pulp.lpSum(instance.alpha[i] * x[i, t] for i in nodes for t in slots)
        + pulp.lpSum(instance.delta * z[k] + instance.theta * w[k] for k in z)
        + pulp.lpSum(
            (instance.beta[i] + instance.gamma[i] * instance.errors[j]) * y[i, j, t]
            for i in nodes for j in pods for t in slots
        )
    )

    for t in slots:
        prob += pulp.lpSum(x[i, t] for i in nodes) >= 1, f"MinNodes_{t}"

        for j in pods:
            prob += pulp.lpSum(y[i, j, t] for i in nodes) == 1, f"Alloc_{j}_{t}"

        for i in nodes:
            for j in pods:
                prob += y[i, j, t] <= x[i, t], f"ValidPlace_{i}_{j}_{t}"

            # A node that switches state at the end of t offers no capacity in t
            capacity = instance.capacities[i] * x[i, t]
            if t < last:
                capacity = capacity - instance.capacities[i] * z[i, t] - instance.capacities[i] * w[i, t]
            load = pulp.lpSum(instance.demands[j] * y[i, j, t] for j in pods)
            prob += load <= capacity, f"Cap_{i}_{t}"

            if t < last:
                prob += x[i, t + 1] - x[i, t] - z[i, t] + w[i, t] == 0, f"Cont_{i}_{t}"
                prob += z[i, t] - x[i, t + 1] + x[i, t] >= 0, f"Act_{i}_{t}"
                prob += w[i, t] - x[i, t] + x[i, t + 1] >= 0, f"Deact_{i}_{t}"

    return prob


def solve(
    instance: OracleInstance,
    gap: float = DEFAULT_GAP,
    time_limit: Optional[float] = None,
) -> OracleResult:
    """Solve an instance with CBC.

    Args:
        instance: The problem to solve.
        gap: Relative MIP gap accepted as optimal.
        time_limit: Wall-clock limit in seconds, None for no limit.

    Returns:
        OracleResult; cost is None unless the status is OPTIMAL.
    """
    prob = build_model(instance)
    solver = pulp.PULP_CBC_CMD(msg=False, gapRel=gap, timeLimit=time_limit)

    start = time.perf_counter()
    try:
        prob.solve(solver)
    except pulp.PulpSolverError as e:
        elapsed = time.perf_counter() - start
        log.warning(
            "Oracle failed for N=%d P=%d T=%d: %s",
            instance.node_count, instance.pod_count, instance.slots, e,
        )
        return OracleResult(status=OracleStatus.ERROR, cost=None, solve_time=elapsed)
    elapsed = time.perf_counter() - start

    status = classify_status(prob.status, prob.sol_status)
    cost = pulp.value(prob.objective) if status == OracleStatus.OPTIMAL else None
    if prob.sol_status == pulp.LpSolutionIntegerFeasible:
        log.info(
            "Oracle N=%d P=%d T=%d stopped with an unproven incumbent (cost=%s)",
            instance.node_count, instance.pod_count, instance.slots,
            pulp.value(prob.objective),
        )

    log.info(
        "Oracle N=%d P=%d T=%d: %s in %.3fs (cost=%s)",
        instance.node_count, instance.pod_count, instance.slots,
        status.value, elapsed, cost,
    )
    return OracleResult(
        status=status,
        cost=float(cost) if cost is not None else None,
        solve_time=elapsed,
    )


def run_battery(
    node_counts: Iterable[int],
    pod_counts: Iterable[int],
    slots: int,
    iterations: int,
    seed: int = 42,
    delta: float = DEFAULT_DELTA,
    theta: float = DEFAULT_THETA,
    gap: float = DEFAULT_GAP,
    time_limit: Optional[float] = None,
) -> Iterator[OracleRecord]:
    """Solve random instances for every (N, P) pair with P >= N.

    Each iteration draws from its own generator seeded with
    ``seed + N + P + iteration``.
    """
    pod_counts = list(pod_counts)
    for n in node_counts:
        for p in pod_counts:
            if p < n:
                continue
            for it in range(1, iterations + 1):
                rng = random.Random(seed + n + p + it)
                instance = generate_instance(n, p, slots, rng, delta=delta, theta=theta)
                result = solve(instance, gap=gap, time_limit=time_limit)
                yield OracleRecord(node_count=n, pod_count=p, iteration=it, result=result)


def write_oracle_csv(records: Iterable[OracleRecord], stream: TextIO) -> int:
    """Write oracle records as comma-separated rows with a header."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(ORACLE_CSV_HEADER)
    count = 0
    for record in records:
        writer.writerow(record.to_row())
        count += 1
    return count
