"""Tests for the solver loop and snapshot consumers."""

import threading

import numpy as np
import pytest

from mimetica.errors import DimensionMismatch, InvalidParameter
from mimetica.integrators import Scheme, cfl_time_step
from mimetica.snapshots import BackgroundConsumer, HistoryRecorder
from mimetica.solver import WaveSolver


@pytest.fixture
def short_string(string_config):
    """20-cell second-order string running exactly 10 steps."""
    dt = cfl_time_step(3.0 / 20, 100.0)
    return string_config.with_overrides(order=2, cells=(20,), total_time=10 * dt)


class TestVibratingString:
    def test_step_count_from_cfl(self, string_config):
        solver = WaveSolver(string_config)
        assert solver.dt == pytest.approx(0.5 * (3.0 / 101) / 100.0)
        assert solver.num_steps == 404

    def test_initial_state(self, string_config):
        solver = WaveSolver(string_config)
        x = solver.grid.x.nodes()
        assert solver.u.shape == (103,)
        assert not solver.v.any()
        inside = (x > 2.0) & (x < 3.0)
        np.testing.assert_allclose(solver.u[inside], np.sin(np.pi * x[inside]))
        assert not solver.u[~inside].any()

    def test_single_step_is_small_and_keeps_boundary_fixed(self, string_config):
        solver = WaveSolver(string_config)
        u0 = solver.u.copy()
        solver.advance(1)

        change = np.abs(solver.u - u0).max()
        # The bump's kinks at x = 2 and x = 3 dominate the first step.
        assert 0.0 < change < 5e-2
        assert solver.u[0] == 0.0
        assert solver.u[102] == 0.0
        assert solver.v[0] == 0.0
        assert solver.v[102] == 0.0
        assert solver.step_index == 1
        assert solver.time == pytest.approx(solver.dt)

    def test_far_above_cfl_bound_blows_up(self, string_config):
        dt = 50 * cfl_time_step(3.0 / 101, 100.0)
        config = string_config.with_overrides(time_step=dt, total_time=50 * dt)
        solver = WaveSolver(config)
        assert solver.num_steps == 50
        norm0 = np.linalg.norm(solver.u)

        with np.errstate(all="ignore"):
            solver.advance(solver.num_steps)
            norm = np.linalg.norm(solver.u)
        assert not np.isfinite(norm) or norm > 1e3 * norm0

    @pytest.mark.parametrize("scheme", list(Scheme))
    def test_full_run_stays_bounded(self, string_config, scheme):
        solver = WaveSolver(string_config.with_overrides(scheme=scheme))
        summary = solver.run(keep_history=False)
        assert summary.steps_completed == summary.num_steps == 404
        assert not summary.cancelled
        assert np.all(np.isfinite(solver.u))
        assert np.abs(solver.u).max() < 5.0
        assert summary.final_time == pytest.approx(404 * solver.dt)

    def test_custom_initial_displacement(self, short_string):
        u0 = np.linspace(0.0, 1.0, 22)
        solver = WaveSolver(short_string, initial_displacement=u0)
        np.testing.assert_array_equal(solver.u, u0)
        assert solver.u is not u0

    def test_initial_displacement_of_wrong_length(self, short_string):
        with pytest.raises(DimensionMismatch):
            WaveSolver(short_string, initial_displacement=np.zeros(21))

    def test_unknown_initial_condition(self, short_string):
        with pytest.raises(ValueError, match="Unknown initial condition"):
            WaveSolver(short_string.with_overrides(initial_condition="gaussian"))

    def test_invalid_order(self, short_string):
        with pytest.raises(InvalidParameter):
            WaveSolver(short_string.with_overrides(order=3))

    def test_interpolated_1d_velocity_lives_on_faces(self, short_string):
        solver = WaveSolver(short_string.with_overrides(use_interpolation=True))
        assert solver.v.shape == (21,)
        solver.run(keep_history=False)
        assert np.all(np.isfinite(solver.u))


class TestRunLoop:
    def test_emits_one_snapshot_per_step(self, short_string):
        solver = WaveSolver(short_string)
        received = []
        solver.run(consumers=[received.append])

        assert [s.step for s in received] == list(range(11))
        np.testing.assert_allclose([s.time for s in received], np.arange(11) * solver.dt)
        np.testing.assert_array_equal(received[-1].field, solver.u)

    def test_snapshots_are_read_only_copies(self, short_string):
        solver = WaveSolver(short_string)
        u0 = solver.u.copy()
        received = []
        solver.run(consumers=[received.append])

        first = received[0]
        np.testing.assert_array_equal(first.field, u0)
        with pytest.raises(ValueError):
            first.field[0] = 1.0
        with pytest.raises(ValueError):
            first.coordinates[0][0] = 1.0
        assert received[0].coordinates[0] is received[-1].coordinates[0]

    def test_history(self, short_string):
        solver = WaveSolver(short_string)
        solver.run()
        assert len(solver.history) == 11
        assert solver.history.fields().shape == (11, 22)
        np.testing.assert_allclose(solver.history.times(), np.arange(11) * solver.dt)

    def test_history_stride_keeps_final_snapshot(self, short_string):
        solver = WaveSolver(short_string)
        solver.run(history_stride=3)
        assert [s.step for s in solver.history.snapshots] == [0, 3, 6, 9, 10]

    def test_no_history_when_disabled(self, short_string):
        solver = WaveSolver(short_string)
        solver.run(keep_history=False)
        assert solver.history is None

    def test_cancellation_stops_after_current_step(self, short_string):
        solver = WaveSolver(short_string)
        stop = threading.Event()

        def stop_at_three(snapshot):
            if snapshot.step == 3:
                stop.set()

        summary = solver.run(consumers=[stop_at_three], stop_event=stop)
        assert summary.cancelled
        assert summary.steps_completed == 3
        assert solver.step_index == 3
        assert [s.step for s in solver.history.snapshots] == [0, 1, 2, 3]

        resumed = solver.run()
        assert not resumed.cancelled
        assert resumed.steps_completed == resumed.num_steps == 10

    def test_preset_stop_still_completes_one_step(self, short_string):
        solver = WaveSolver(short_string)
        stop = threading.Event()
        stop.set()
        summary = solver.run(stop_event=stop)
        assert summary.cancelled
        assert summary.steps_completed == 1

    def test_zero_duration(self, short_string):
        solver = WaveSolver(short_string.with_overrides(total_time=0.0))
        summary = solver.run()
        assert summary.num_steps == 0
        assert len(solver.history) == 1
        assert not summary.cancelled

    def test_summary_energy_is_finite(self, short_string):
        summary = WaveSolver(short_string).run(keep_history=False)
        assert np.isfinite(summary.initial_energy)
        assert np.isfinite(summary.final_energy)
        assert summary.field_min <= summary.field_max


class TestMembrane:
    def test_staggered_velocity_and_shapes(self, small_membrane_config):
        solver = WaveSolver(small_membrane_config)
        assert solver.operators.interpolated
        assert solver.u.shape == (12 * 14,)
        assert solver.v.shape == (11 * 12 + 10 * 13,)

        summary = solver.run()
        assert summary.steps_completed == solver.num_steps == 12
        assert solver.history.fields().shape == (13, 14, 12)
        assert np.all(np.isfinite(solver.u))
        assert np.abs(solver.u).max() < 10.0

    def test_snapshot_coordinates_are_meshes(self, small_membrane_config):
        solver = WaveSolver(small_membrane_config)
        snapshot = solver.snapshot()
        X, Y = snapshot.coordinates
        assert X.shape == Y.shape == snapshot.field.shape == (14, 12)
        np.testing.assert_allclose(X[0], solver.grid.x.nodes())
        np.testing.assert_allclose(Y[:, 0], solver.grid.y.nodes())

    def test_direct_update_when_interpolation_disabled(self, small_membrane_config):
        solver = WaveSolver(small_membrane_config.with_overrides(use_interpolation=False))
        assert not solver.operators.interpolated
        assert solver.v.shape == solver.u.shape
        solver.run(keep_history=False)
        assert np.all(np.isfinite(solver.u))

    def test_forest_ruth_membrane(self, small_membrane_config):
        solver = WaveSolver(small_membrane_config.with_overrides(scheme=Scheme.FOREST_RUTH))
        solver.run(keep_history=False)
        assert np.all(np.isfinite(solver.u))


class TestConsumers:
    def test_background_consumer_preserves_order(self, short_string):
        solver = WaveSolver(short_string)
        received = []
        with BackgroundConsumer(received.append) as background:
            solver.run(consumers=[background], keep_history=False)
        assert [s.step for s in received] == list(range(11))

    def test_background_consumer_error_surfaces_on_close(self, short_string):
        def failing(snapshot):
            if snapshot.step == 2:
                raise RuntimeError("disk full")

        solver = WaveSolver(short_string)
        background = BackgroundConsumer(failing)
        solver.run(consumers=[background], keep_history=False)
        with pytest.raises(RuntimeError, match="disk full"):
            background.close()

    def test_background_consumer_rejects_snapshots_after_close(self, short_string):
        solver = WaveSolver(short_string)
        background = BackgroundConsumer(lambda snapshot: None)
        background.close()
        with pytest.raises(RuntimeError):
            background(solver.snapshot())

    def test_history_recorder_rejects_bad_stride(self):
        with pytest.raises(ValueError):
            HistoryRecorder(stride=0)
