"""
Explicit symplectic time integrators for the semi-discrete wave equation.

    du/dt = v,   dv/dt = c^2 * (L + BC) u

Both schemes are compositions of drifts (position updates from the
velocity) and kicks (velocity updates from the force at the current
position). They are time-reversible and preserve phase-space volume.
The time step is never checked against the CFL bound.
"""

from __future__ import annotations

import enum
import math

import numpy as np
from scipy.sparse import csr_matrix

from mimetica import defaults
from mimetica.errors import DimensionMismatch, InvalidParameter
from mimetica.operators.combine import UpdateOperators


class Scheme(enum.Enum):
    """Available integrators."""

    POSITION_VERLET = "position_verlet"  # second order
    FOREST_RUTH = "forest_ruth"          # fourth order


_THETA = defaults.FOREST_RUTH_THETA

# Substeps as (kind, coefficient). A drift advances u by coefficient * dt/2,
# a kick advances v by coefficient * dt.
_SUBSTEPS: dict[Scheme, tuple[tuple[str, float], ...]] = {
    Scheme.POSITION_VERLET: (
        ("drift", 1.0),
        ("kick", 1.0),
        ("drift", 1.0),
    ),
    Scheme.FOREST_RUTH: (
        ("drift", _THETA),
        ("kick", _THETA),
        ("drift", 1.0 - _THETA),
        ("kick", 1.0 - 2.0 * _THETA),
        ("drift", 1.0 - _THETA),
        ("kick", _THETA),
        ("drift", _THETA),
    ),
}


def compute_force(combined: csr_matrix, u: np.ndarray, c_squared: float) -> np.ndarray:
    """Force term c^2 * combined @ u."""
    return c_squared * (combined @ u)


def cfl_time_step(
    spacings: float | tuple[float, ...],
    wave_speed: float,
    factor: float = defaults.CFL_FACTOR,
) -> float:
    """
    Time step from the CFL-type bound dt = factor * min(spacing) / c.

    Raises:
        InvalidParameter: Non-positive spacing or wave speed
    """
    spacing = float(np.min(spacings))
    if not (math.isfinite(spacing) and spacing > 0.0):
        raise InvalidParameter(f"spacing must be positive, got {spacings!r}")
    if not (math.isfinite(wave_speed) and wave_speed > 0.0):
        raise InvalidParameter(f"wave_speed must be positive, got {wave_speed!r}")
    return factor * spacing / wave_speed


def discrete_energy(u: np.ndarray, v: np.ndarray, combined: csr_matrix, c_squared: float) -> float:
    """Energy-like quantity 1/2 |v|^2 - 1/2 c^2 u . (combined @ u)."""
    return 0.5 * float(v @ v) - 0.5 * c_squared * float(u @ (combined @ u))


class Integrator:
    """
    Advance the state pair (u, v) in place.

    The integrator holds no state besides the operators; each call to step()
    advances exactly one time step and recomputes the force after every drift.
    """

    def __init__(self, operators: UpdateOperators, scheme: Scheme = Scheme.POSITION_VERLET):
        if not isinstance(scheme, Scheme):
            raise InvalidParameter(f"Unknown integration scheme: {scheme!r}")
        self.operators = operators
        self.scheme = scheme
        self._substeps = _SUBSTEPS[scheme]

    @property
    def dt(self) -> float:
        return self.operators.dt

    def force(self, u: np.ndarray) -> np.ndarray:
        ops = self.operators
        return compute_force(ops.combined, u, ops.c_squared)

    def check_state(self, u: np.ndarray, v: np.ndarray) -> None:
        """
        Raises:
            DimensionMismatch: If u or v does not fit the operators
        """
        ops = self.operators
        if u.shape != (ops.num_nodes,):
            raise DimensionMismatch("Displacement does not match the spatial operator", u.shape, ops.combined.shape)
        if v.shape != (ops.velocity_size,):
            expected = ops.kick.shape if ops.kick is not None else ops.combined.shape
            raise DimensionMismatch("Velocity does not match the update operator", v.shape, expected)

    def step(self, u: np.ndarray, v: np.ndarray) -> None:
        """Advance (u, v) by one time step, in place."""
        self.check_state(u, v)
        for kind, coefficient in self._substeps:
            if kind == "drift":
                self._drift(u, v, coefficient)
            else:
                self._kick(u, v, coefficient)

    def _drift(self, u: np.ndarray, v: np.ndarray, coefficient: float) -> None:
        ops = self.operators
        if ops.drift is None:
            u += (coefficient * 0.5 * ops.dt) * v
        else:
            u += coefficient * (ops.drift @ v)

    def _kick(self, u: np.ndarray, v: np.ndarray, coefficient: float) -> None:
        ops = self.operators
        F = self.force(u)
        if ops.kick is None:
            v += (coefficient * ops.dt) * F
        else:
            v += coefficient * (ops.kick @ F)


def position_verlet_step(operators: UpdateOperators, u: np.ndarray, v: np.ndarray) -> None:
    """One Position Verlet step, in place."""
    Integrator(operators, Scheme.POSITION_VERLET).step(u, v)


def forest_ruth_step(operators: UpdateOperators, u: np.ndarray, v: np.ndarray) -> None:
    """One Forest-Ruth step, in place."""
    Integrator(operators, Scheme.FOREST_RUTH).step(u, v)
