"""
Closed-form initial displacements, looked up by name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from mimetica import defaults
from mimetica.grid import Grid


@dataclass(frozen=True)
class InitialCondition:
    """A named initial displacement.

    Attributes:
        name: Registry key
        description: One-line summary
        evaluate: Maps a Grid to node values in the grid's logical shape
    """
    name: str
    description: str
    evaluate: Callable[[Grid], np.ndarray]


class InitialConditionRegistry:
    """
    Global registry of initial conditions.

    The built-in conditions are registered on import; more can be added at runtime.
    """
    _conditions: dict[str, InitialCondition] = {}

    @classmethod
    def register(cls, condition: InitialCondition) -> None:
        if condition.name in cls._conditions:
            raise ValueError(f"Initial condition '{condition.name}' is already registered")
        cls._conditions[condition.name] = condition

    @classmethod
    def get(cls, name: str) -> InitialCondition:
        if name not in cls._conditions:
            raise ValueError(
                f"Unknown initial condition: {name}. Available: {list(cls._conditions.keys())}"
            )
        return cls._conditions[name]

    @classmethod
    def list_available(cls) -> list[str]:
        return list(cls._conditions.keys())

    @classmethod
    def unregister(cls, name: str) -> None:
        """Remove a condition (mainly for testing)."""
        cls._conditions.pop(name, None)


def _sine_bump(grid: Grid) -> np.ndarray:
    lo, hi = defaults.SINE_BUMP_SUPPORT
    coords = grid.coordinates()
    u = np.ones(grid.shape)
    for c in coords:
        u = u * np.where((c > lo) & (c < hi), np.sin(np.pi * c), 0.0)
    return u


def _sine_product(grid: Grid) -> np.ndarray:
    u = np.ones(grid.shape)
    for c in grid.coordinates():
        u = u * np.sin(np.pi * c)
    return u


def _zero(grid: Grid) -> np.ndarray:
    return np.zeros(grid.shape)


SINE_BUMP = InitialCondition(
    name="sine_bump",
    description="sin(pi x) (times sin(pi y) in 2D) on the open box (2, 3), zero elsewhere",
    evaluate=_sine_bump,
)

SINE_PRODUCT = InitialCondition(
    name="sine_product",
    description="sin(pi x) (times sin(pi y) in 2D) over the whole domain",
    evaluate=_sine_product,
)

ZERO = InitialCondition(
    name="zero",
    description="Field at rest",
    evaluate=_zero,
)

for _condition in (SINE_BUMP, SINE_PRODUCT, ZERO):
    InitialConditionRegistry.register(_condition)


def evaluate_initial_condition(name: str, grid: Grid) -> np.ndarray:
    """Evaluate a registered condition and flatten it to a node vector (x fastest)."""
    values = np.asarray(InitialConditionRegistry.get(name).evaluate(grid), dtype=np.float64)
    if values.shape != grid.shape:
        raise ValueError(
            f"Initial condition '{name}' returned shape {values.shape}, expected {grid.shape}"
        )
    return values.ravel().copy()
