"""SandBench CLI - Main entry point for the switching-cost placement benchmark."""

import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, TextIO, Tuple

import click

from sandbench.config.loader import load_config, merge_configs, sweep_from_config
from sandbench.config.validator import ValidationError, validate_config
from sandbench.oracle.temporal_mip import (
    DEFAULT_DELTA,
    DEFAULT_GAP,
    DEFAULT_THETA,
    run_battery,
    write_oracle_csv,
)
from sandbench.output.comparison import compare_policies
from sandbench.output.generator import OutputGenerator, read_csv, summarize_records, write_csv
from sandbench.placement.strategy import PlacementStrategy
from sandbench.simulation.engine import RANDOM_STREAM_MODES, SlotRecord, SweepConfig, run_sweep


def _load_validated(config_path: Optional[str], overrides: dict) -> dict:
    """Load a config, apply CLI overrides and validate, exiting on failure."""
    try:
        config = merge_configs(load_config(config_path), overrides)
        validate_config(config)
    except ValidationError as e:
        click.echo(f"Error validating config: {e}", err=True)
        for error in e.errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"Error loading config: {e}", err=True)
        sys.exit(1)
    return config


@contextmanager
def _open_sink(output: Optional[str]) -> Iterator[TextIO]:
    if output:
        with open(output, "w", newline="") as f:
            yield f
    else:
        yield sys.stdout


def _echo_configuration(ratio: float, pod_size: int, node_size: int) -> None:
    click.echo(f"R={ratio:.1f} | Pods={pod_size} | Nodes={node_size}", err=True)


def _sweep_with_progress(config: SweepConfig) -> Iterator[SlotRecord]:
    return run_sweep(config, on_configuration=_echo_configuration)


@click.group()
@click.version_option(package_name="sandbench")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """SandBench - switching-cost aware placement benchmark.

    Simulates an elastic cluster slot by slot and compares a static,
    cost-ranked first-fit policy with a temporal policy that avoids
    re-paying activation penalties on nodes that are already warm.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("config_path", required=False, type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Path(), help="Output file (default: from config, else stdout)")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["csv", "json"]),
    default=None,
    help="Output format (default: from config)",
)
@click.option("--seed", type=int, default=None, help="Override the random seed")
@click.option("--executions", "-e", type=int, default=None, help="Override executions per configuration")
@click.option("--slots", "-s", type=int, default=None, help="Override slots per execution")
@click.option(
    "--random-stream",
    type=click.Choice(list(RANDOM_STREAM_MODES)),
    default=None,
    help="One stream for the whole sweep, or one seeded stream per execution",
)
def run(
    config_path: Optional[str],
    output: Optional[str],
    output_format: Optional[str],
    seed: Optional[int],
    executions: Optional[int],
    slots: Optional[int],
    random_stream: Optional[str],
):
    """Run the benchmark sweep and write per-slot costs.

    CONFIG_PATH is a SweepConfig YAML file. Without it the full default
    grid is used (3 ratios x 7 pod sizes x 5 node sizes, 5 executions
    of 20 slots, seed 42).

    \b
    Example config:
      apiVersion: sandbench.io/v1
      kind: SweepConfig
      metadata:
        name: quick
      spec:
        ratios: [1.0, 10.0]
        podSizes: [50, 100]
        nodeSizes: [10]
        executions: 2
        slots: 10
        seed: 7
    """
    spec_overrides = {}
    if seed is not None:
        spec_overrides["seed"] = seed
    if executions is not None:
        spec_overrides["executions"] = executions
    if slots is not None:
        spec_overrides["slots"] = slots
    if random_stream is not None:
        spec_overrides["randomStream"] = random_stream
    output_overrides = {}
    if output:
        output_overrides["path"] = output
    if output_format:
        output_overrides["format"] = output_format
    if output_overrides:
        spec_overrides["output"] = output_overrides

    config = _load_validated(config_path, {"spec": spec_overrides})
    sweep = sweep_from_config(config)
    output_config = config["spec"].get("output", {})
    output_path = output_config.get("path")
    fmt = output_config.get("format", "csv")
    name = config.get("metadata", {}).get("name")

    click.echo(f"Running sweep '{name or 'unnamed'}'...", err=True)
    click.echo(f"  Configurations: {sweep.configuration_count}", err=True)
    click.echo(f"  Executions: {sweep.executions} x {sweep.slots} slots", err=True)
    click.echo(f"  Seed: {sweep.seed} ({sweep.random_stream} stream)", err=True)

    records: List[SlotRecord] = []

    def collect(source: Iterator[SlotRecord]) -> Iterator[SlotRecord]:
        for record in source:
            records.append(record)
            yield record

    try:
        with _open_sink(output_path) as sink:
            if fmt == "json":
                records.extend(_sweep_with_progress(sweep))
                document = OutputGenerator(sweep, records, name=name).generate()
                sink.write(json.dumps(document, indent=2))
                sink.write("\n")
            else:
                write_csv(collect(_sweep_with_progress(sweep)), sink)
    except OSError as e:
        click.echo(f"Error writing results: {e}", err=True)
        sys.exit(1)

    summary = summarize_records(records)
    click.echo(f"\n{'=' * 50}", err=True)
    click.echo("Summary:", err=True)
    click.echo(f"  Slots: {summary['totalSlots']}", err=True)
    click.echo(f"  Static cost: {summary['totalCostStatic']:.1f}", err=True)
    click.echo(f"  Temporal cost: {summary['totalCostTemporal']:.1f}", err=True)
    click.echo(f"  Savings: {summary['savingsPercentage']:+.2f}%", err=True)
    if output_path:
        click.echo(f"\n  Output: {output_path}", err=True)


@main.command()
@click.argument("config_path", type=click.Path(exists=True))
def validate(config_path: str):
    """Validate a SweepConfig YAML file without running it."""
    config = _load_validated(config_path, {})
    sweep = sweep_from_config(config)
    click.echo(f"Config '{config_path}' is valid")
    click.echo(f"  Configurations: {sweep.configuration_count}")
    click.echo(f"  Records: {sweep.record_count}")


@main.command()
@click.argument("results_file", type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Path(), help="Output file for comparison JSON")
@click.option(
    "--min-savings",
    type=float,
    default=None,
    help="Savings percentage the temporal policy must reach to count as better",
)
def compare(results_file: str, output: Optional[str], min_savings: Optional[float]):
    """Compare static and temporal costs in a results CSV.

    RESULTS_FILE: CSV written by 'sandbench run'.
    """
    click.echo(f"Comparing policies in {results_file}...", err=True)

    try:
        records = read_csv(results_file)
    except (OSError, ValueError, IndexError) as e:
        click.echo(f"Error loading results file: {e}", err=True)
        sys.exit(1)

    comparison = compare_policies(records, min_savings_percentage=min_savings)

    if output:
        Path(output).write_text(json.dumps(comparison, indent=2))
        click.echo(f"Comparison written to {output}", err=True)
    else:
        click.echo(json.dumps(comparison, indent=2))

    conclusion = comparison["conclusion"]
    click.echo(f"\n{'=' * 50}", err=True)
    click.echo("Comparison Summary:", err=True)
    click.echo(f"  Temporal Better: {conclusion['temporalBetter']}", err=True)
    click.echo(f"  Savings: {comparison['overall']['savingsPercentage']:+.2f}%", err=True)
    click.echo(f"  {conclusion['summary']}", err=True)


def _parse_int_list(ctx, param, value: Optional[str]) -> Optional[Tuple[int, ...]]:
    if value is None:
        return None
    try:
        values = tuple(int(v) for v in value.split(",") if v.strip())
    except ValueError:
        raise click.BadParameter("expected a comma-separated list of integers") from None
    if not values or any(v < 1 for v in values):
        raise click.BadParameter("values must be positive integers")
    return values


@main.command()
@click.option("--nodes", default="10,20", callback=_parse_int_list, help="Comma-separated node counts")
@click.option("--pods", default="50,100", callback=_parse_int_list, help="Comma-separated pod counts")
@click.option("--slots", "-s", type=click.IntRange(min=1), default=20, help="Slots per instance")
@click.option("--iterations", "-i", type=click.IntRange(min=1), default=10, help="Instances per (N, P) pair")
@click.option("--seed", type=int, default=42, help="Base seed")
@click.option("--delta", type=float, default=DEFAULT_DELTA, help="Activation penalty")
@click.option("--theta", type=float, default=DEFAULT_THETA, help="Deactivation penalty")
@click.option("--gap", type=float, default=DEFAULT_GAP, help="Relative MIP gap")
@click.option("--time-limit", type=float, default=None, help="Solver time limit in seconds")
@click.option("--output", "-o", type=click.Path(), help="Output CSV (default: stdout)")
def oracle(
    nodes: Tuple[int, ...],
    pods: Tuple[int, ...],
    slots: int,
    iterations: int,
    seed: int,
    delta: float,
    theta: float,
    gap: float,
    time_limit: Optional[float],
    output: Optional[str],
):
    """Solve random small instances exactly with the MIP oracle.

    Pairs with fewer pods than nodes are skipped. Keep instances small:
    the model has nodes x pods x slots binary variables.
    """
    click.echo(f"Oracle battery: nodes={list(nodes)} pods={list(pods)} slots={slots}", err=True)
    click.echo(f"{'N':<4} | {'P':<5} | {'Iter':<4} | {'Status':<10} | {'Time(s)':<10} | Cost", err=True)

    def echo_rows(records):
        for record in records:
            result = record.result
            cost = f"{result.cost:.2f}" if result.cost is not None else "-"
            click.echo(
                f"{record.node_count:<4} | {record.pod_count:<5} | {record.iteration:<4} | "
                f"{result.status.value:<10} | {result.solve_time:<10.3f} | {cost}",
                err=True,
            )
            yield record

    battery = run_battery(
        nodes, pods, slots, iterations,
        seed=seed, delta=delta, theta=theta, gap=gap, time_limit=time_limit,
    )
    with _open_sink(output) as sink:
        count = write_oracle_csv(echo_rows(battery), sink)

    click.echo(f"\nSolved {count} instance(s)", err=True)
    if output:
        click.echo(f"  Output: {output}", err=True)


@main.command()
def policies():
    """List the placement strategies being compared."""
    for strategy in PlacementStrategy:
        click.echo(f"{strategy.value}")
        click.echo(f"  {strategy.describe()}")
