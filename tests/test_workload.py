"""Tests for per-slot workload generation."""

import random

from sandbench.workload.generator import WorkloadGenerator


class TestWorkloadGenerator:
    """Tests for target draws and pod construction."""

    def test_target_rounds_scaled_baseline(self, fixed_random):
        # 0.7 + 0.6 / 3 == 0.9 up to float error
        generator = WorkloadGenerator(fixed_random(1 / 3))
        assert generator.next_target(50) == 45

    def test_lower_bound_of_variation(self, fixed_random):
        generator = WorkloadGenerator(fixed_random(0.0))
        assert generator.next_target(100) == 70

    def test_targets_stay_within_range(self):
        generator = WorkloadGenerator.seeded(42)
        targets = [generator.next_target(1000) for _ in range(500)]
        assert min(targets) >= 700
        assert max(targets) <= 1300

    def test_one_draw_per_target(self, fixed_random):
        rng = fixed_random(0.5)
        generator = WorkloadGenerator(rng)
        generator.next_target(50)
        generator.next_pods(50)
        assert rng.calls == 2

    def test_next_pods_builds_numbered_pods(self, fixed_random):
        generator = WorkloadGenerator(fixed_random(0.5))
        target, pods = generator.next_pods(10, pod_demand=7)
        assert target == 10
        assert [p.id for p in pods] == list(range(10))
        assert {p.size for p in pods} == {7}

    def test_same_seed_same_sequence(self):
        a = WorkloadGenerator.seeded(42)
        b = WorkloadGenerator.seeded(42)
        assert [a.next_target(500) for _ in range(50)] == [b.next_target(500) for _ in range(50)]

    def test_does_not_touch_global_random_state(self):
        random.seed(123)
        expected = random.random()

        random.seed(123)
        generator = WorkloadGenerator.seeded(1)
        for _ in range(10):
            generator.next_target(100)
        assert random.random() == expected
