"""Result sinks for SandBench sweeps: semicolon CSV and structured JSON."""

import csv
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO, Union

from sandbench.simulation.engine import RECORD_FIELDS, SlotRecord, SweepConfig

CSV_DELIMITER = ";"


def write_csv(records: Iterable[SlotRecord], stream: TextIO) -> int:
    """Stream records to ``stream`` as semicolon-separated rows with a header.

    Returns:
        Number of records written.
    """
    writer = csv.writer(stream, delimiter=CSV_DELIMITER, lineterminator="\n")
    writer.writerow(RECORD_FIELDS)
    count = 0
    for record in records:
        writer.writerow(record.to_row())
        count += 1
    return count


def iter_csv(stream: TextIO) -> Iterator[SlotRecord]:
    """Parse records written by write_csv.

    Raises:
        ValueError: If the header does not match RECORD_FIELDS.
    """
    reader = csv.reader(stream, delimiter=CSV_DELIMITER)
    header = next(reader, None)
    if header is None:
        return
    if tuple(header) != RECORD_FIELDS:
        raise ValueError(
            f"Unexpected CSV header {header}; expected {list(RECORD_FIELDS)}"
        )
    for row in reader:
        if not row:
            continue
        yield SlotRecord.from_row(row)


def read_csv(path: Union[str, Path]) -> List[SlotRecord]:
    with open(path, newline="") as f:
        return list(iter_csv(f))


class OutputGenerator:
    """Generates the structured JSON document for a sweep."""

    SCHEMA_VERSION = "1.0.0"

    def __init__(
        self,
        config: SweepConfig,
        records: List[SlotRecord],
        name: Optional[str] = None,
    ):
        """Initialize the output generator.

        Args:
            config: The sweep that produced the records.
            records: Per-slot records, in sweep order.
            name: Configuration name from the sweep file's metadata.
        """
        self.config = config
        self.records = records
        self.name = name or "unnamed"

    def generate(self) -> Dict[str, Any]:
        """Generate the complete output structure.

        Returns:
            Structured output dictionary.
        """
        now = datetime.now(timezone.utc)
        run_id = f"run-{now.strftime('%Y-%m-%d-%H%M%S')}-{uuid.uuid4().hex[:6]}"

        return {
            "schemaVersion": self.SCHEMA_VERSION,
            "runId": run_id,
            "timestamp": now.isoformat(),
            "config": self._generate_config_section(),
            "summary": self._generate_summary(),
            "records": [r.to_dict() for r in self.records],
        }

    def _generate_config_section(self) -> Dict[str, Any]:
        """Generate config section."""
        return {
            "name": self.name,
            "ratios": list(self.config.ratios),
            "podSizes": list(self.config.pod_sizes),
            "nodeSizes": list(self.config.node_sizes),
            "executions": self.config.executions,
            "slots": self.config.slots,
            "seed": self.config.seed,
            "podDemand": self.config.pod_demand,
            "randomStream": self.config.random_stream,
        }

    def _generate_summary(self) -> Dict[str, Any]:
        """Generate summary section."""
        return summarize_records(self.records)


def summarize_records(records: Iterable[SlotRecord]) -> Dict[str, Any]:
    """Totals over a set of records, comparing the two policy tracks."""
    total = 0
    total_static = 0.0
    total_temporal = 0.0
    temporal_wins = 0
    static_wins = 0

    for r in records:
        total += 1
        total_static += r.cost_static
        total_temporal += r.cost_temporal
        if r.cost_temporal < r.cost_static:
            temporal_wins += 1
        elif r.cost_static < r.cost_temporal:
            static_wins += 1

    savings = total_static - total_temporal
    savings_pct = (savings / total_static * 100) if total_static > 0 else 0.0

    return {
        "totalSlots": total,
        "totalCostStatic": total_static,
        "totalCostTemporal": total_temporal,
        "savings": savings,
        "savingsPercentage": round(savings_pct, 2),
        "temporalWins": temporal_wins,
        "staticWins": static_wins,
        "ties": total - temporal_wins - static_wins,
    }
