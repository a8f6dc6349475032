"""
Coefficient tables for the mimetic operator families.

Each family is described by a boundary closure block (rows applied at the
left boundary; the right boundary uses the negated mirror image) and an
interior stencil shared by all rows away from the boundary. Values are the
published mimetic coefficients for orders 2 and 4; higher orders need their
own closure tables and are rejected.
"""

from dataclasses import dataclass
import math

import numpy as np

from mimetica.errors import InvalidParameter


@dataclass(frozen=True)
class StencilFamily:
    """Closure block plus interior stencil for one operator at one order.

    Attributes:
        closure: (p, w) array of left-boundary rows, unscaled by spacing
        interior: Interior stencil weights, unscaled by spacing
        interior_offset: Column of the first interior weight relative to the row index
    """
    closure: np.ndarray
    interior: np.ndarray
    interior_offset: int


_INTERIOR_2 = np.array([-1.0, 1.0])
_INTERIOR_4 = np.array([1.0 / 24.0, -9.0 / 8.0, 9.0 / 8.0, -1.0 / 24.0])

GRADIENT: dict[int, StencilFamily] = {
    2: StencilFamily(
        closure=np.array([[-8.0 / 3.0, 3.0, -1.0 / 3.0]]),
        interior=_INTERIOR_2,
        interior_offset=0,
    ),
    4: StencilFamily(
        closure=np.array([
            [-352.0 / 105.0, 35.0 / 8.0, -35.0 / 24.0, 21.0 / 40.0, -5.0 / 56.0],
            [16.0 / 105.0, -31.0 / 24.0, 29.0 / 24.0, -3.0 / 40.0, 1.0 / 168.0],
        ]),
        interior=_INTERIOR_4,
        interior_offset=-1,
    ),
}

DIVERGENCE: dict[int, StencilFamily] = {
    2: StencilFamily(
        closure=np.zeros((0, 1)),
        interior=_INTERIOR_2,
        interior_offset=-1,
    ),
    4: StencilFamily(
        closure=np.array([[-11.0 / 12.0, 17.0 / 24.0, 3.0 / 8.0, -5.0 / 24.0, 1.0 / 24.0]]),
        interior=_INTERIOR_4,
        interior_offset=-2,
    ),
}

SUPPORTED_ORDERS: tuple[int, ...] = tuple(sorted(GRADIENT))


def check_order(order) -> int:
    """Validate an accuracy order against the coefficient tables."""
    if isinstance(order, bool) or not isinstance(order, (int, np.integer)):
        raise InvalidParameter(f"Accuracy order must be an integer, got {order!r}")
    if order not in GRADIENT:
        raise InvalidParameter(
            f"Unsupported accuracy order {order}. Available: {list(SUPPORTED_ORDERS)}"
        )
    return int(order)


def min_cells(order: int) -> int:
    """Smallest cell count whose interior fits both boundary closures."""
    return 2 * order + 1


def check_cells(cells, minimum: int = 1, name: str = "cells") -> int:
    if isinstance(cells, bool) or not isinstance(cells, (int, np.integer)):
        raise InvalidParameter(f"{name} must be an integer, got {cells!r}")
    if cells < minimum:
        raise InvalidParameter(f"{name} must be >= {minimum}, got {cells}")
    return int(cells)


def check_spacing(spacing, name: str = "spacing") -> float:
    try:
        value = float(spacing)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a real number, got {spacing!r}")
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidParameter(f"{name} must be positive and finite, got {spacing!r}")
    return value


def check_axis(order: int, cells, spacing, suffix: str = "") -> tuple[int, float]:
    """Validate one axis of a mimetic operator (order already checked)."""
    m = check_cells(cells, minimum=1, name=f"cells{suffix}")
    if m < min_cells(order):
        raise InvalidParameter(
            f"Order {order} operators need cells{suffix} >= {min_cells(order)}, got {m}"
        )
    return m, check_spacing(spacing, name=f"spacing{suffix}")
