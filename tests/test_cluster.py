"""Tests for the node/pod model and the deterministic roster."""

import pytest

from sandbench.cluster.model import (
    ClusterState,
    CostClass,
    Node,
    Pod,
    build_node_params,
    cost_class,
    node_capacity,
)


class TestNode:
    """Tests for capacity bookkeeping on a single node."""

    def test_empty_node_is_inactive(self, small_params):
        node = Node.from_params(small_params[0])
        assert node.is_active is False
        assert node.remaining_capacity == 100

    def test_assign_reduces_remaining_capacity(self, small_params):
        node = Node.from_params(small_params[0])
        node.assign(Pod(id=0, size=5))
        node.assign(Pod(id=1, size=7))
        assert node.used == 12
        assert node.remaining_capacity == 88
        assert node.is_active is True

    def test_can_fit_exact_remaining(self, small_params):
        node = Node.from_params(small_params[0])
        node.assign(Pod(id=0, size=95))
        assert node.can_fit(Pod(id=1, size=5)) is True
        assert node.can_fit(Pod(id=1, size=6)) is False

    def test_assign_over_capacity_raises(self, small_params):
        node = Node.from_params(small_params[0])
        node.assign(Pod(id=0, size=100))
        with pytest.raises(ValueError, match="does not fit"):
            node.assign(Pod(id=1, size=1))

    def test_reset_clears_assignment(self, small_params):
        node = Node.from_params(small_params[0])
        node.assign(Pod(id=0, size=5))
        node.reset()
        assert node.pods == {}
        assert node.is_active is False


class TestClusterState:
    """Tests for per-track state construction."""

    def test_from_params_has_no_history(self, small_params):
        state = ClusterState.from_params(small_params)
        assert state.previous_active is None
        assert [n.id for n in state.nodes] == [0, 1, 2, 3]

    def test_tracks_do_not_share_nodes(self, small_params):
        a = ClusterState.from_params(small_params)
        b = ClusterState.from_params(small_params)
        a.nodes[0].assign(Pod(id=0, size=5))
        assert b.nodes[0].is_active is False
        assert all(x is not y for x, y in zip(a.nodes, b.nodes))

    def test_reset_clears_every_node(self, small_state):
        for i, node in enumerate(small_state.nodes):
            node.assign(Pod(id=i, size=5))
        small_state.reset()
        assert not any(n.is_active for n in small_state.nodes)


class TestRoster:
    """Tests for the capacity rule and cost-class partition."""

    def test_capacity_has_floor_of_100(self):
        assert node_capacity(50, 10) == 100
        assert node_capacity(100, 200) == 100

    def test_capacity_scales_with_pods_per_node(self):
        assert node_capacity(10000, 10) == 10000
        assert node_capacity(5000, 20) == 2500

    def test_capacity_uses_integer_division(self):
        assert node_capacity(1001, 10) == 1001
        assert node_capacity(1005, 20) == 502

    def test_cost_class_first_half_cheap(self):
        classes = [cost_class(i, 10) for i in range(10)]
        assert classes[:5] == [CostClass.CHEAP_SLOW] * 5
        assert classes[5:] == [CostClass.EXPENSIVE_FAST] * 5

    def test_cost_class_odd_roster(self):
        classes = [cost_class(i, 5) for i in range(5)]
        assert classes.count(CostClass.CHEAP_SLOW) == 2
        assert classes.count(CostClass.EXPENSIVE_FAST) == 3

    def test_build_node_params_values(self):
        params = build_node_params(10.0, 50, 10)
        cheap, expensive = params[0], params[9]

        assert cheap.alpha == 20.0
        assert cheap.delta == 1000.0
        assert cheap.theta == pytest.approx(100.0)

        assert expensive.alpha == 250.0
        assert expensive.delta == 10.0
        assert expensive.theta == pytest.approx(1.0)

    def test_build_node_params_ids_and_capacity(self):
        params = build_node_params(1.0, 500, 20)
        assert [p.node_id for p in params] == list(range(20))
        assert {p.capacity for p in params} == {250}

    def test_build_node_params_is_deterministic(self):
        assert build_node_params(100.0, 200, 50) == build_node_params(100.0, 200, 50)

    def test_describe_every_cost_class(self):
        for cc in CostClass:
            assert cc.describe()
