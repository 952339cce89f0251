"""Static vs temporal policy comparison for SandBench results.

Groups per-slot records by configuration and reports how much the
temporal policy saved (or lost) against the static baseline.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sandbench.output.generator import summarize_records
from sandbench.simulation.engine import SlotRecord

ConfigKey = Tuple[float, int, int]


def compare_policies(
    records: Iterable[SlotRecord],
    min_savings_percentage: Optional[float] = None,
) -> Dict[str, Any]:
    """Compare the two policy tracks across all configurations.

    Args:
        records: Per-slot records from one or more sweeps.
        min_savings_percentage: Overall savings the temporal policy must reach
            to be declared better. Defaults to 0 (any saving counts).

    Returns:
        Comparison output dictionary.
    """
    if min_savings_percentage is None:
        min_savings_percentage = 0.0

    now = datetime.now(timezone.utc)
    comparison_id = (
        f"compare-{now.strftime('%Y-%m-%d-%H%M%S')}-"
        f"{uuid.uuid4().hex[:6]}"
    )

    records = list(records)
    grouped = _group_by_configuration(records)
    configurations = [
        _compare_configuration(key, group) for key, group in grouped.items()
    ]
    overall = summarize_records(records)

    temporal_better = (
        overall["totalSlots"] > 0
        and overall["savings"] > 0
        and overall["savingsPercentage"] >= min_savings_percentage
    )

    return {
        "schemaVersion": "1.0.0",
        "comparisonId": comparison_id,
        "timestamp": now.isoformat(),
        "configurations": configurations,
        "overall": overall,
        "conclusion": {
            "temporalBetter": temporal_better,
            "requiredSavingsPercentage": min_savings_percentage,
            "bestConfiguration": _best_configuration(configurations),
            "worstConfiguration": _worst_configuration(configurations),
            "summary": _generate_summary_text(temporal_better, overall),
        },
    }


# ── Grouping ──────────────────────────────────────────────────


def _group_by_configuration(records: List[SlotRecord]) -> Dict[ConfigKey, List[SlotRecord]]:
    """Group records by (ratio, pod size, node size), keeping first-seen order."""
    grouped: Dict[ConfigKey, List[SlotRecord]] = {}
    for r in records:
        grouped.setdefault((r.ratio, r.pod_size, r.node_size), []).append(r)
    return grouped


def _compare_configuration(key: ConfigKey, records: List[SlotRecord]) -> Dict[str, Any]:
    ratio, pod_size, node_size = key
    executions = {r.execution for r in records}
    return {
        "ratio": ratio,
        "podSize": pod_size,
        "nodeSize": node_size,
        "executions": len(executions),
        **summarize_records(records),
    }


# ── Helpers ───────────────────────────────────────────────────


def _best_configuration(configurations: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not configurations:
        return None
    best = max(configurations, key=lambda c: c["savingsPercentage"])
    return _configuration_ref(best)


def _worst_configuration(configurations: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not configurations:
        return None
    worst = min(configurations, key=lambda c: c["savingsPercentage"])
    return _configuration_ref(worst)


def _configuration_ref(configuration: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "ratio": configuration["ratio"],
        "podSize": configuration["podSize"],
        "nodeSize": configuration["nodeSize"],
        "savingsPercentage": configuration["savingsPercentage"],
    }


def _generate_summary_text(temporal_better: bool, overall: Dict[str, Any]) -> str:
    """Generate a human-readable summary of the comparison."""
    if overall["totalSlots"] == 0:
        return "No records to compare."
    if temporal_better:
        return (
            f"The temporal policy reduced total cost by "
            f"{overall['savingsPercentage']:.2f}% "
            f"({overall['totalCostStatic']:.1f} → {overall['totalCostTemporal']:.1f}), "
            f"winning {overall['temporalWins']} of {overall['totalSlots']} slots."
        )
    return (
        f"The temporal policy did not beat the static baseline. "
        f"Total cost {overall['totalCostStatic']:.1f} → {overall['totalCostTemporal']:.1f} "
        f"({overall['savingsPercentage']:+.2f}% savings)."
    )
