"""
Snapshots of the displacement field and the consumers that receive them.

The solver copies u into a read-only Snapshot before handing it out, so
consumers (recorders, writers, renderers) may keep or process snapshots on
any thread without touching the live state.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
import logging
from typing import Callable, Optional

import numpy as np

from mimetica import defaults

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Read-only copy of the displacement at one time level.

    Attributes:
        coordinates: Node coordinates, (x,) in 1D or (X, Y) meshes in 2D
        field: Displacement in the grid's logical shape
        step: Number of completed steps
        time: Elapsed simulation time (step * dt)
    """
    coordinates: tuple[np.ndarray, ...]
    field: np.ndarray
    step: int
    time: float


SnapshotConsumer = Callable[[Snapshot], None]


def make_snapshot(
    coordinates: tuple[np.ndarray, ...],
    u: np.ndarray,
    shape: tuple[int, ...],
    step: int,
    time: float,
) -> Snapshot:
    """Copy u into a read-only field of the given logical shape."""
    field = np.array(u, dtype=np.float64, copy=True).reshape(shape)
    field.setflags(write=False)
    return Snapshot(coordinates=coordinates, field=field, step=step, time=time)


def freeze_coordinates(coordinates: tuple[np.ndarray, ...]) -> tuple[np.ndarray, ...]:
    """Read-only copies of coordinate arrays, shared by every snapshot of a run."""
    frozen = []
    for c in coordinates:
        c = np.array(c, copy=True)
        c.setflags(write=False)
        frozen.append(c)
    return tuple(frozen)


class HistoryRecorder:
    """Keeps every ``stride``-th snapshot in memory (the final one is always kept by the solver)."""

    def __init__(self, stride: int = defaults.DEFAULT_HISTORY_STRIDE):
        if stride < 1:
            raise ValueError(f"stride must be >= 1, got {stride}")
        self.stride = stride
        self.snapshots: list[Snapshot] = []

    def __call__(self, snapshot: Snapshot) -> None:
        if snapshot.step % self.stride == 0:
            self.snapshots.append(snapshot)

    def __len__(self) -> int:
        return len(self.snapshots)

    def fields(self) -> np.ndarray:
        """Stacked fields, shape (n_snapshots, *grid_shape)."""
        return np.stack([s.field for s in self.snapshots])

    def times(self) -> np.ndarray:
        return np.array([s.time for s in self.snapshots])


class BackgroundConsumer:
    """
    Run a slow consumer (file writer, renderer) on a single worker thread.

    Snapshots are submitted in order and processed in order. Errors raised by
    the wrapped consumer surface on close().
    """

    def __init__(self, consumer: SnapshotConsumer):
        self.consumer = consumer
        self.executor: ThreadPoolExecutor = ThreadPoolExecutor(max_workers=1)
        self._futures: list[Future] = []
        self._closed = False

    def __call__(self, snapshot: Snapshot) -> None:
        if self._closed:
            raise RuntimeError("BackgroundConsumer is closed")
        self._futures = [f for f in self._futures if not f.done() or f.exception() is not None]
        self._futures.append(self.executor.submit(self.consumer, snapshot))

    def close(self) -> None:
        """Wait for pending snapshots, shut the worker down and re-raise the first error."""
        if self._closed:
            return
        self._closed = True
        self.executor.shutdown(wait=True)
        error: Optional[BaseException] = None
        for future in self._futures:
            exc = future.exception()
            if exc is not None and error is None:
                error = exc
        self._futures.clear()
        if error is not None:
            logger.warning("Background snapshot consumer failed: %s", error)
            raise error

    def __enter__(self) -> BackgroundConsumer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
