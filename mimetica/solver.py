"""
Wave equation solver loop.

WaveSolver turns a SimulationConfig into a grid, the combined spatial
operator and an integrator, then drives the integrator for a fixed number
of steps while handing read-only snapshots to consumers.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Iterable, Optional

import numpy as np

from mimetica.config import SimulationConfig
from mimetica.grid import Grid, build_grid
from mimetica.initial_conditions import evaluate_initial_condition
from mimetica.integrators import Integrator, cfl_time_step, discrete_energy
from mimetica.operators import (
    InterpolationVariant,
    UpdateOperators,
    combine,
    interpolation,
    laplacian,
    prepare_update,
    robin_bc,
)
from mimetica.snapshots import (
    HistoryRecorder,
    Snapshot,
    SnapshotConsumer,
    freeze_coordinates,
    make_snapshot,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunSummary:
    """Outcome of WaveSolver.run()."""
    steps_completed: int
    num_steps: int
    dt: float
    final_time: float
    cancelled: bool
    field_min: float
    field_max: float
    initial_energy: float
    final_energy: float


def build_update_operators(config: SimulationConfig, grid: Grid, dt: float) -> UpdateOperators:
    """Laplacian + Robin operator, optionally with the dt-scaled interpolation pair."""
    axis_args = {}
    if grid.dimension == 2:
        axis_args = {"cells_y": grid.y.cells, "spacing_y": grid.y.spacing}

    L = laplacian(config.order, grid.x.cells, grid.x.spacing, **axis_args)
    BC = robin_bc(
        config.order, grid.x.cells, grid.x.spacing, config.robin_alpha, config.robin_beta, **axis_args
    )
    combined = combine(L, BC)

    if not config.interpolated:
        return prepare_update(combined, config.wave_speed, dt)

    cells_y = grid.y.cells if grid.dimension == 2 else None
    I = interpolation(
        grid.x.cells, config.weight_a, config.weight_b, InterpolationVariant.NODES_TO_FACES, cells_y
    )
    I2 = interpolation(
        grid.x.cells, config.weight_a, config.weight_b, InterpolationVariant.FACES_TO_NODES, cells_y
    )
    return prepare_update(combined, config.wave_speed, dt, I, I2)


class WaveSolver:
    """
    Owns the simulation parameters and the evolving state (u, v).

    The operators are built once in the constructor and shared read-only by
    every step. u and v are only mutated by this object's integrator.
    """

    def __init__(self, config: SimulationConfig, initial_displacement: Optional[np.ndarray] = None):
        """
        Args:
            config: Run configuration
            initial_displacement: Node values overriding config.initial_condition,
                flat or in the grid's logical shape

        Raises:
            InvalidParameter: On bad grid or operator parameters
            DimensionMismatch: If operators or the initial field do not fit together
        """
        self.config = config
        self.grid = build_grid(config.dimension, config.bounds, config.cells)

        if config.time_step is not None:
            self.dt = float(config.time_step)
        else:
            self.dt = cfl_time_step(self.grid.spacings, config.wave_speed, config.cfl_factor)
        self.num_steps = int(round(config.total_time / self.dt))

        self.operators = build_update_operators(config, self.grid, self.dt)
        self.integrator = Integrator(self.operators, config.scheme)
        self.coordinates = freeze_coordinates(self.grid.coordinates())

        if initial_displacement is None:
            u0 = evaluate_initial_condition(config.initial_condition, self.grid)
        else:
            u0 = np.array(initial_displacement, dtype=np.float64).ravel()
        self.u = u0
        self.v = np.zeros(self.operators.velocity_size, dtype=np.float64)
        self.integrator.check_state(self.u, self.v)

        self.step_index = 0
        self.history: Optional[HistoryRecorder] = None

        logger.debug(
            "WaveSolver dimension=%d order=%d cells=%s dt=%.6g steps=%d scheme=%s interpolated=%s",
            config.dimension, config.order, self.grid.cells, self.dt, self.num_steps,
            config.scheme.value, config.interpolated,
        )

    @property
    def time(self) -> float:
        return self.step_index * self.dt

    def energy(self) -> float:
        return discrete_energy(self.u, self.v, self.operators.combined, self.operators.c_squared)

    def snapshot(self) -> Snapshot:
        """Read-only copy of the current displacement."""
        return make_snapshot(self.coordinates, self.u, self.grid.shape, self.step_index, self.time)

    def advance(self, n: int = 1) -> None:
        """Take n steps without emitting snapshots."""
        for _ in range(n):
            self.integrator.step(self.u, self.v)
            self.step_index += 1

    def run(
        self,
        consumers: Iterable[SnapshotConsumer] = (),
        stop_event: Optional[threading.Event] = None,
        keep_history: bool = True,
        history_stride: int = 1,
    ) -> RunSummary:
        """
        Run the remaining steps up to num_steps.

        A snapshot is emitted for the current state and after every completed
        step. The stop flag is checked once per completed step; when it is set
        the loop ends cleanly after that step.

        Args:
            consumers: Callables receiving each Snapshot
            stop_event: Cooperative cancellation flag
            keep_history: Record snapshots in self.history
            history_stride: Keep every n-th snapshot (the last one is always kept)

        Returns:
            RunSummary of the run
        """
        consumers = list(consumers)
        if keep_history:
            self.history = HistoryRecorder(history_stride)
            consumers.insert(0, self.history)

        logger.info(
            "Running %d steps of %s (dt=%.6g, T=%.6g)",
            self.num_steps - self.step_index, self.config.scheme.value, self.dt, self.config.total_time,
        )
        initial_energy = self.energy()

        last = self.snapshot()
        self._emit(consumers, last)

        cancelled = False
        while self.step_index < self.num_steps:
            self.advance(1)
            last = self.snapshot()
            self._emit(consumers, last)
            if stop_event is not None and stop_event.is_set():
                cancelled = self.step_index < self.num_steps
                break

        if keep_history and (not self.history.snapshots or self.history.snapshots[-1] is not last):
            self.history.snapshots.append(last)

        if cancelled:
            logger.warning("Run cancelled after %d of %d steps", self.step_index, self.num_steps)

        summary = RunSummary(
            steps_completed=self.step_index,
            num_steps=self.num_steps,
            dt=self.dt,
            final_time=self.time,
            cancelled=cancelled,
            field_min=float(self.u.min()),
            field_max=float(self.u.max()),
            initial_energy=initial_energy,
            final_energy=self.energy(),
        )
        logger.info(
            "Finished at t=%.6g after %d steps, u in [%.6g, %.6g]",
            summary.final_time, summary.steps_completed, summary.field_min, summary.field_max,
        )
        return summary

    @staticmethod
    def _emit(consumers: list[SnapshotConsumer], snapshot: Snapshot) -> None:
        for consumer in consumers:
            consumer(snapshot)
