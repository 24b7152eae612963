"""Unit tests for Simulation."""

import numpy as np
import pytest

from loadsim.core import (
    ConfigurationError,
    DegradationCurve,
    Segment,
    Session,
    Simulation,
    SimulationConfig,
)


def run_snapshot(simulation):
    """Comparable summary of every counter the simulation exposes."""
    return (
        simulation.ids.issued,
        simulation.active_sessions,
        simulation.total_outstanding_work,
        tuple((s.running_count, s.queued_count, s.total_remaining_work) for s in simulation.segments),
        tuple((s.busy, s.completed_query_count, s.next_arrival_time) for s in simulation.sessions),
    )


class TestSimulationCreation:
    """Construction and validation."""

    def test_default_config(self, rng):
        simulation = Simulation(rng=rng)
        assert len(simulation.segments) == 32
        assert simulation.segments[0].cores == 10
        assert simulation.segments[0].max_capacity == 1000.0
        assert simulation.config.curve is DegradationCurve.LINEAR

    def test_segments_indexed_in_order(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        assert [s.index for s in simulation.segments] == [0, 1, 2, 3]
        assert all(isinstance(s, Segment) for s in simulation.segments)

    def test_default_generator(self, small_config):
        simulation = Simulation(small_config)
        assert isinstance(simulation.rng, np.random.Generator)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"segments": 0},
            {"segments": -1},
            {"cores": 0},
            {"core_capacity": 0.0},
            {"core_capacity": -5.0},
            {"quantum": 0.0},
            {"slice_spread": -0.1},
            {"slice_delay": -1.0},
            {"core_capacity": float("nan")},
            {"core_capacity": float("inf")},
            {"slice_spread": float("nan")},
            {"slice_spread": float("inf")},
            {"slice_delay": float("nan")},
            {"quantum": float("nan")},
        ],
    )
    def test_rejects_bad_config(self, overrides, rng):
        with pytest.raises(ConfigurationError):
            Simulation(SimulationConfig(**overrides), rng=rng)

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("exponential", DegradationCurve.EXPONENTIAL),
            ("hardExponential", DegradationCurve.HARD_EXPONENTIAL),
            ("bogus", DegradationCurve.LINEAR),
        ],
    )
    def test_curve_given_by_name(self, name, expected, rng):
        simulation = Simulation(SimulationConfig(segments=2, curve=name), rng=rng)
        assert simulation.config.curve is expected
        assert all(s.curve is expected for s in simulation.segments)

    def test_segment_sequence_is_read_only(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        assert isinstance(simulation.segments, tuple)
        assert isinstance(simulation.sessions, tuple)


class TestSessionRegistration:
    """add_session validation."""

    def test_add_session(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        session = simulation.add_session("service-0", 100, 50, 40, 8)
        assert isinstance(session, Session)
        assert simulation.sessions == (session,)

    def test_duplicate_label_rejected(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        simulation.add_session("a", 100, 50, 40, 8)
        with pytest.raises(ConfigurationError):
            simulation.add_session("a", 10, 5, 4, 1)

    @pytest.mark.parametrize("index", range(4))
    def test_negative_parameters_rejected(self, index, small_config, rng):
        params = [100, 50, 40, 8]
        params[index] = -1
        simulation = Simulation(small_config, rng=rng)
        with pytest.raises(ConfigurationError):
            simulation.add_session("a", *params)

    @pytest.mark.parametrize("index", range(4))
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_parameters_rejected(self, index, value, small_config, rng):
        params = [100, 50, 40, 8]
        params[index] = value
        simulation = Simulation(small_config, rng=rng)
        with pytest.raises(ConfigurationError):
            simulation.add_session("a", *params)
        assert simulation.sessions == ()

    def test_degenerate_parameters_tolerated(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        session = simulation.add_session("a", 0, 10, 0, 10)
        simulation.run(20)
        assert session.completed_query_count >= 1


class TestTick:
    """Tick ordering and invariants."""

    def test_tick_advances_time(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        simulation.tick(7.0)
        assert simulation.current_time == 7.0
        assert simulation.tick_count == 1

    def test_noop_tick_leaves_counters_unchanged(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        simulation.add_session("a", 50, 0, 1000, 0)
        before = run_snapshot(simulation)

        simulation.tick(0.0)
        simulation.tick(0.5)

        assert run_snapshot(simulation) == before

    def test_segments_advance_before_sessions(self, small_config, rng):
        """A query finishing in the segment phase frees its session the same tick."""
        simulation = Simulation(small_config, rng=rng)
        session = simulation.add_session("a", 10, 0, 1, 0)

        simulation.tick(1)          # issue query 1
        first = session.current_query
        simulation.tick(2)          # segments retire it, session issues query 2

        assert first.done
        assert session.current_query is not first
        assert session.completed_query_count == 2

    def test_query_ids_are_per_simulation(self, small_config):
        a = Simulation(small_config, rng=np.random.default_rng(1))
        b = Simulation(small_config, rng=np.random.default_rng(2))
        assert a.create_query(10, 0.0).id == 1
        assert a.create_query(10, 0.0).id == 2
        assert b.create_query(10, 0.0).id == 1

    def test_create_query_fans_out(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        query = simulation.create_query(30, 0.0)
        assert len(query.slices) == len(simulation.segments)
        assert all(s.queued_count == 1 for s in simulation.segments)

    def test_invariants_hold_under_load(self, busy_config, rng):
        simulation = Simulation(busy_config, rng=rng)
        for i in range(6):
            simulation.add_session(f"s{i}", 400, 200, 20, 10)

        for now in range(1, 300):
            simulation.tick(float(now))

            total = 0.0
            for segment in simulation.segments:
                assert segment.running_count >= 0
                assert segment.queued_count >= 0
                running_sum = sum(p.remaining_work for p in segment.running_slices)
                assert segment.total_remaining_work == pytest.approx(running_sum)
                total += running_sum

                # A slice is in exactly one collection of exactly one segment
                ids = [id(p) for p in segment.running_slices + segment.queued_slices]
                assert len(ids) == len(set(ids))
                assert all(p.segment is segment for p in segment.running_slices)
                assert all(not p.done for p in segment.running_slices)

            assert simulation.total_outstanding_work == pytest.approx(total)
            assert simulation.active_sessions <= len(simulation.sessions)

    def test_seeded_runs_reproduce(self, busy_config):
        def build():
            simulation = Simulation(busy_config, rng=np.random.default_rng(123))
            for i in range(4):
                simulation.add_session(f"s{i}", 300, 100, 15, 5)
            simulation.run(200)
            return run_snapshot(simulation)

        assert build() == build()

    def test_overload_degrades_throughput(self, rng):
        """The same backlog drains slower under a harsher curve."""
        def ticks_to_drain(curve):
            config = SimulationConfig(
                segments=1, cores=2, core_capacity=50.0,
                slice_spread=0.0, slice_delay=0.0, curve=curve,
            )
            simulation = Simulation(config, rng=np.random.default_rng(0))
            queries = [simulation.create_query(500, 0.0) for _ in range(12)]
            ticks = 0
            while not all(q.done for q in queries):
                ticks += 1
                simulation.tick(float(ticks))
            return ticks

        zero = ticks_to_drain(DegradationCurve.ZERO)
        linear = ticks_to_drain(DegradationCurve.LINEAR)
        hard = ticks_to_drain(DegradationCurve.HARD_EXPONENTIAL)
        assert zero < linear
        assert zero < hard


class TestRun:
    """The run() driver."""

    def test_run_steps_from_current_time(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng, start_time=100.0)
        stats = simulation.run(5, step=10.0)

        assert simulation.current_time == 150.0
        assert stats["n_ticks"] == 5
        assert stats["tick_count"] == 5
        assert stats["current_time"] == 150.0

    def test_run_reports_work(self, small_config, rng):
        simulation = Simulation(small_config, rng=rng)
        simulation.add_session("a", 1000, 0, 10_000, 0)
        stats = simulation.run(3)

        assert stats["queries_issued"] == 1
        assert stats["active_sessions"] == 1
        assert stats["total_work"] == simulation.total_outstanding_work
        assert stats["overloaded_segments"] == 0
