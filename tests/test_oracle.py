"""Tests for the exact temporal placement oracle."""

import io
import random

import pulp
import pytest

from sandbench.oracle.temporal_mip import (
    ORACLE_CSV_HEADER,
    OracleInstance,
    OracleRecord,
    OracleResult,
    OracleStatus,
    build_model,
    classify_status,
    generate_instance,
    run_battery,
    solve,
    write_oracle_csv,
)


def _instance(**overrides):
    fields = dict(
        capacities=[10.0],
        alpha=[5.0],
        beta=[1.0],
        gamma=[2.0],
        demands=[3.0],
        errors=[1.0],
        slots=2,
    )
    fields.update(overrides)
    return OracleInstance(**fields)


class TestOracleInstance:
    """Tests for instance construction."""

    def test_counts(self):
        instance = _instance()
        assert instance.node_count == 1
        assert instance.pod_count == 1

    def test_mismatched_node_arrays(self):
        with pytest.raises(ValueError, match="Node arrays"):
            _instance(alpha=[5.0, 6.0])

    def test_mismatched_pod_arrays(self):
        with pytest.raises(ValueError, match="Pod arrays"):
            _instance(errors=[1.0, 2.0])

    def test_slots_must_be_positive(self):
        with pytest.raises(ValueError, match="slots"):
            _instance(slots=0)


class TestGenerateInstance:
    """Tests for random instance generation."""

    def test_value_ranges(self):
        instance = generate_instance(5, 20, 3, random.Random(1))

        assert instance.node_count == 5
        assert instance.pod_count == 20
        assert all(5 <= c <= 40 for c in instance.capacities)
        assert all(1 <= a <= 20 for a in instance.alpha)
        assert all(1 <= b <= 20 for b in instance.beta)
        assert all(1 <= g <= 10 for g in instance.gamma)
        assert all(1 <= d <= 10 for d in instance.demands)
        assert all(1 <= e <= 20 for e in instance.errors)

    def test_same_seed_same_instance(self):
        a = generate_instance(3, 6, 2, random.Random(7))
        b = generate_instance(3, 6, 2, random.Random(7))
        assert a == b

    def test_penalties_passed_through(self):
        instance = generate_instance(2, 2, 2, random.Random(1), delta=5.0, theta=1.0)
        assert instance.delta == 5.0
        assert instance.theta == 1.0


class TestBuildModel:
    """Tests for the MIP structure."""

    def test_single_slot_has_no_transition_variables(self):
        prob = build_model(_instance(slots=1))
        names = {v.name for v in prob.variables()}

        assert names == {"x_0_0", "y_0_0_0"}

    def test_transition_variables_between_slots(self):
        prob = build_model(_instance(slots=3))
        names = {v.name for v in prob.variables()}

        assert {"z_0_0", "z_0_1", "w_0_0", "w_0_1"} <= names
        assert "z_0_2" not in names

    def test_constraint_names(self):
        prob = build_model(_instance(slots=2))
        names = set(prob.constraints)

        assert {"MinNodes_0", "Alloc_0_0", "ValidPlace_0_0_0", "Cap_0_0"} <= names
        assert {"Cont_0_0", "Act_0_0", "Deact_0_0"} <= names


class TestSolve:
    """Tests for solving instances with CBC."""

    def test_hand_checked_optimum(self):
        """One node kept on for two slots: 2 * 5 + 2 * (1 + 2 * 1)."""
        result = solve(_instance())

        assert result.status == OracleStatus.OPTIMAL
        assert result.cost == pytest.approx(16.0)
        assert result.solve_time >= 0

    def test_cheapest_node_chosen(self):
        instance = _instance(
            capacities=[10.0, 10.0],
            alpha=[5.0, 1.0],
            beta=[1.0, 1.0],
            gamma=[2.0, 2.0],
            slots=1,
        )
        result = solve(instance)

        assert result.status == OracleStatus.OPTIMAL
        assert result.cost == pytest.approx(4.0)

    def test_infeasible_instance(self):
        result = solve(_instance(demands=[20.0]))

        assert result.status != OracleStatus.OPTIMAL
        assert result.cost is None


class TestBattery:
    """Tests for running and writing oracle batteries."""

    def test_skips_fewer_pods_than_nodes(self):
        records = list(run_battery([2, 5], [3], slots=1, iterations=2))

        assert [(r.node_count, r.pod_count, r.iteration) for r in records] == [
            (2, 3, 1),
            (2, 3, 2),
        ]

    def test_to_row_formats_missing_cost(self):
        record = OracleRecord(2, 4, 1, OracleResult(OracleStatus.INFEASIBLE, None, 0.1234))

        assert record.to_row() == ["2", "4", "1", "INFEASIBLE", "0.123", "-1.00"]

    def test_to_row_formats_cost(self):
        record = OracleRecord(1, 1, 3, OracleResult(OracleStatus.OPTIMAL, 16.0, 0.5))

        assert record.to_row() == ["1", "1", "3", "OPTIMAL", "0.500", "16.00"]

    def test_write_oracle_csv(self):
        records = [OracleRecord(1, 1, 1, OracleResult(OracleStatus.OPTIMAL, 16.0, 0.5))]
        stream = io.StringIO()

        assert write_oracle_csv(records, stream) == 1
        lines = stream.getvalue().splitlines()
        assert lines[0] == ",".join(ORACLE_CSV_HEADER)
        assert lines[1] == "1,1,1,OPTIMAL,0.500,16.00"


class TestStatusClassification:
    """Tests for mapping solver outcomes to oracle statuses."""

    @pytest.mark.parametrize(
        "status, sol_status, expected",
        [
            (pulp.LpStatusOptimal, pulp.LpSolutionOptimal, OracleStatus.OPTIMAL),
            (pulp.LpStatusOptimal, pulp.LpSolutionIntegerFeasible, OracleStatus.OTHER),
            (pulp.LpStatusInfeasible, pulp.LpSolutionInfeasible, OracleStatus.INFEASIBLE),
            (pulp.LpStatusNotSolved, pulp.LpSolutionNoSolutionFound, OracleStatus.OTHER),
        ],
    )
    def test_classify_status(self, status, sol_status, expected):
        assert classify_status(status, sol_status) == expected

    def test_unproven_incumbent_is_not_optimal(self, monkeypatch):
        """A solver stopped by its time limit with a feasible solution reports OTHER."""

        def stopped_on_time(prob, solver=None, **kwargs):
            prob.status = pulp.LpStatusOptimal
            prob.sol_status = pulp.LpSolutionIntegerFeasible
            return prob.status

        monkeypatch.setattr(pulp.LpProblem, "solve", stopped_on_time)
        result = solve(_instance(), time_limit=1)

        assert result.status == OracleStatus.OTHER
        assert result.cost is None

    def test_time_limited_hard_instance_not_optimal(self):
        """A large instance cut off after a second is not reported as proven optimal."""
        instance = generate_instance(10, 50, 5, random.Random(42 + 10 + 50 + 1))
        result = solve(instance, gap=0.0, time_limit=1)

        assert result.status != OracleStatus.OPTIMAL
        assert result.cost is None
