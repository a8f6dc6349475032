"""
Uniform staggered grids in one and two dimensions.

Each axis with ``m`` cells carries ``m + 2`` coordinates: the two boundary
nodes plus the ``m`` cell centers between them. Faces (cell edges) are the
``m + 1`` equally spaced points from the lower to the upper bound.
"""

from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np

from mimetica.errors import InvalidParameter


@dataclass(frozen=True)
class Axis:
    """One axis of a staggered grid.

    Attributes:
        lower: Lower domain bound
        upper: Upper domain bound
        cells: Number of cells (>= 1)
    """
    lower: float
    upper: float
    cells: int

    def __post_init__(self) -> None:
        if not _is_count(self.cells) or self.cells < 1:
            raise InvalidParameter(f"Axis requires integer cells >= 1, got {self.cells!r}")
        object.__setattr__(self, "cells", int(self.cells))
        try:
            object.__setattr__(self, "lower", float(self.lower))
            object.__setattr__(self, "upper", float(self.upper))
        except (TypeError, ValueError):
            raise InvalidParameter(f"Axis bounds must be real numbers, got ({self.lower!r}, {self.upper!r})")
        if not (math.isfinite(self.lower) and math.isfinite(self.upper)):
            raise InvalidParameter(f"Axis bounds must be finite, got ({self.lower}, {self.upper})")
        if not self.upper > self.lower:
            raise InvalidParameter(
                f"Axis requires upper > lower, got ({self.lower}, {self.upper})"
            )

    @property
    def spacing(self) -> float:
        return (self.upper - self.lower) / self.cells

    @property
    def size(self) -> int:
        """Number of node values along this axis (cells + 2)."""
        return self.cells + 2

    def nodes(self) -> np.ndarray:
        """Boundary nodes and cell centers, strictly increasing."""
        centers = self.lower + (np.arange(self.cells, dtype=np.float64) + 0.5) * self.spacing
        return np.concatenate(([self.lower], centers, [self.upper]))

    def faces(self) -> np.ndarray:
        """Cell edges, including both bounds."""
        return np.linspace(self.lower, self.upper, self.cells + 1)


@dataclass(frozen=True)
class Grid:
    """Uniform staggered grid of dimension 1 or 2.

    Fields on the grid are stored flattened with the x index varying fastest,
    i.e. row-major over the logical shape ``(ny + 2, nx + 2)`` in 2D.
    """
    axes: tuple[Axis, ...]

    def __post_init__(self) -> None:
        if len(self.axes) not in (1, 2):
            raise InvalidParameter(f"Grid dimension must be 1 or 2, got {len(self.axes)}")

    @property
    def dimension(self) -> int:
        return len(self.axes)

    @property
    def x(self) -> Axis:
        return self.axes[0]

    @property
    def y(self) -> Axis | None:
        return self.axes[1] if self.dimension == 2 else None

    @property
    def cells(self) -> tuple[int, ...]:
        return tuple(axis.cells for axis in self.axes)

    @property
    def spacings(self) -> tuple[float, ...]:
        return tuple(axis.spacing for axis in self.axes)

    @property
    def shape(self) -> tuple[int, ...]:
        """Logical shape of a node field (y first in 2D)."""
        return tuple(axis.size for axis in reversed(self.axes))

    @property
    def num_nodes(self) -> int:
        return int(np.prod(self.shape))

    def coordinates(self) -> tuple[np.ndarray, ...]:
        """Node coordinates.

        Returns:
            ``(x,)`` in 1D; ``(X, Y)`` meshes of shape ``self.shape`` in 2D,
            built by broadcasting the two axis sequences against each other.
        """
        if self.dimension == 1:
            return (self.x.nodes(),)
        x = self.x.nodes()
        y = self.y.nodes()
        X = np.broadcast_to(x[np.newaxis, :], self.shape).copy()
        Y = np.broadcast_to(y[:, np.newaxis], self.shape).copy()
        return X, Y

    def reshape(self, values: np.ndarray) -> np.ndarray:
        """View a flattened node field in the grid's logical shape."""
        return np.asarray(values).reshape(self.shape)


def build_grid(
    dimension: int,
    bounds: tuple[float, float] | tuple[tuple[float, float], ...],
    cells: int | tuple[int, ...],
) -> Grid:
    """
    Build a staggered grid.

    Args:
        dimension: 1 or 2
        bounds: ``(lower, upper)`` shared by every axis, or one pair per axis
        cells: Cell count shared by every axis, or one count per axis

    Returns:
        Grid with one Axis per dimension

    Raises:
        InvalidParameter: On a bad dimension, degenerate bounds or cells < 1
    """
    if dimension not in (1, 2):
        raise InvalidParameter(f"Grid dimension must be 1 or 2, got {dimension!r}")

    if np.ndim(bounds) == 1:
        bounds = (tuple(bounds),) * dimension
    if np.ndim(cells) == 0:
        cells = (cells,) * dimension

    if len(bounds) != dimension or len(cells) != dimension:
        raise InvalidParameter(
            f"Expected {dimension} bounds and cell counts, got {len(bounds)} and {len(cells)}"
        )

    axes = tuple(
        Axis(lower=lo, upper=hi, cells=n)
        for (lo, hi), n in zip(bounds, cells)
    )
    return Grid(axes=axes)


def _is_count(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)
