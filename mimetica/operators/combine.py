"""
Combination and scaling of operators into ready-to-apply update matrices.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from scipy.sparse import csr_matrix, issparse

from mimetica.errors import DimensionMismatch, InvalidParameter

logger = logging.getLogger(__name__)


def _as_csr(op, name: str) -> csr_matrix:
    if not issparse(op):
        raise InvalidParameter(f"{name} must be a scipy sparse matrix, got {type(op).__name__}")
    return op.tocsr()


def combine(laplacian: csr_matrix, robin: csr_matrix) -> csr_matrix:
    """
    Sum the Laplacian and the boundary operator into the spatial operator.

    Raises:
        DimensionMismatch: If the two operators have different shapes
    """
    laplacian = _as_csr(laplacian, "laplacian")
    robin = _as_csr(robin, "robin")
    if laplacian.shape != robin.shape:
        raise DimensionMismatch("Cannot combine operators of different shapes", laplacian.shape, robin.shape)
    combined = (laplacian + robin).tocsr()
    logger.debug("combined operator shape=%s nnz=%d", combined.shape, combined.nnz)
    return combined


def scale(op: csr_matrix, factor: float) -> csr_matrix:
    """Multiply every stored entry by factor; shape and sparsity are kept."""
    op = _as_csr(op, "operator")
    return (op * float(factor)).tocsr()


def check_composable(
    combined: csr_matrix,
    interp: csr_matrix,
    interp_back: csr_matrix,
) -> None:
    """
    Check that interp @ (combined @ u) and interp_back @ v are well formed.

    combined acts on the node space, interp carries its output to the face
    space and interp_back brings face values back to nodes.

    Raises:
        DimensionMismatch: Naming the two operator shapes that disagree
    """
    if combined.shape[0] != combined.shape[1]:
        raise DimensionMismatch("Spatial operator must be square", combined.shape, combined.shape[::-1])
    if interp.shape[1] != combined.shape[0]:
        raise DimensionMismatch("Interpolation does not accept the spatial operator output", interp.shape, combined.shape)
    if interp_back.shape[0] != combined.shape[1]:
        raise DimensionMismatch("Back-interpolation does not produce node values", interp_back.shape, combined.shape)
    if interp_back.shape[1] != interp.shape[0]:
        raise DimensionMismatch("Interpolation pair does not share a face space", interp.shape, interp_back.shape)


@dataclass(frozen=True)
class UpdateOperators:
    """Everything an integrator step needs, fixed for a whole run.

    Attributes:
        combined: Spatial operator (Laplacian + Robin) on the node space
        c_squared: Square of the wave speed
        dt: Time step
        kick: dt * interpolation (nodes -> faces), or None for a direct update
        drift: dt/2 * back-interpolation (faces -> nodes), or None
    """
    combined: csr_matrix
    c_squared: float
    dt: float
    kick: csr_matrix | None = None
    drift: csr_matrix | None = None

    @property
    def interpolated(self) -> bool:
        return self.kick is not None

    @property
    def num_nodes(self) -> int:
        return self.combined.shape[1]

    @property
    def velocity_size(self) -> int:
        """Length of the velocity vector: faces when interpolated, nodes otherwise."""
        if self.kick is not None:
            return self.kick.shape[0]
        return self.combined.shape[1]

    def reversed(self) -> UpdateOperators:
        """Same operators stepping backwards in time (dt -> -dt)."""
        return UpdateOperators(
            combined=self.combined,
            c_squared=self.c_squared,
            dt=-self.dt,
            kick=None if self.kick is None else scale(self.kick, -1.0),
            drift=None if self.drift is None else scale(self.drift, -1.0),
        )


def prepare_update(
    combined: csr_matrix,
    wave_speed: float,
    dt: float,
    interp: csr_matrix | None = None,
    interp_back: csr_matrix | None = None,
) -> UpdateOperators:
    """
    Scale the interpolation pair by the time step and bundle it with the spatial operator.

    Args:
        combined: Laplacian + Robin operator
        wave_speed: Wave speed c (the force is c^2 * combined @ u)
        dt: Time step, not checked against the CFL bound
        interp: NODES_TO_FACES interpolation, or None for a direct update
        interp_back: FACES_TO_NODES interpolation, required together with interp

    Raises:
        DimensionMismatch: If the operators cannot be composed
        InvalidParameter: If only one of the interpolation pair is given
    """
    combined = _as_csr(combined, "combined")
    if combined.shape[0] != combined.shape[1]:
        raise DimensionMismatch("Spatial operator must be square", combined.shape, combined.shape[::-1])
    if (interp is None) != (interp_back is None):
        raise InvalidParameter("interp and interp_back must be given together")

    kick = drift = None
    if interp is not None:
        interp = _as_csr(interp, "interp")
        interp_back = _as_csr(interp_back, "interp_back")
        check_composable(combined, interp, interp_back)
        kick = scale(interp, dt)
        drift = scale(interp_back, 0.5 * dt)

    return UpdateOperators(
        combined=combined,
        c_squared=float(wave_speed) ** 2,
        dt=float(dt),
        kick=kick,
        drift=drift,
    )
