"""
Interpolation between the node space and the face space of a staggered grid.
"""

import enum
import logging
import math

import numpy as np
from scipy.sparse import csr_matrix, hstack, kron, vstack

from mimetica import defaults
from mimetica.errors import InvalidParameter
from mimetica.operators.assembly import banded_operator, padded_identity
from mimetica.operators.stencils import check_cells

logger = logging.getLogger(__name__)


class InterpolationVariant(enum.Enum):
    """Direction of an interpolation operator."""

    # (m+1) x (m+2): boundary nodes and cell centers -> faces
    NODES_TO_FACES = "nodes_to_faces"
    # (m+2) x (m+1): faces -> boundary nodes and cell centers
    FACES_TO_NODES = "faces_to_nodes"


def _check_weight(value, name: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a real number, got {value!r}")
    if not math.isfinite(value) or value < 0.0 or value > 1.0:
        raise InvalidParameter(f"{name} must lie in [0, 1], got {value}")
    return value


def _interpolation_1d(variant: InterpolationVariant, m: int, weight_a: float, weight_b: float) -> csr_matrix:
    # Boundary values pass through unchanged; interior rows average the two
    # neighbours, weight_a on the lower one.
    closure = np.array([[1.0]])
    interior = np.array([weight_a, weight_b])
    if variant is InterpolationVariant.NODES_TO_FACES:
        return banded_operator((m + 1, m + 2), closure, interior, 0, mirror_sign=1.0)
    return banded_operator((m + 2, m + 1), closure, interior, -1, mirror_sign=1.0)


def interpolation(
    cells: int,
    weight_a: float = defaults.DEFAULT_WEIGHT_A,
    weight_b: float = defaults.DEFAULT_WEIGHT_B,
    variant: InterpolationVariant = InterpolationVariant.NODES_TO_FACES,
    cells_y: int | None = None,
) -> csr_matrix:
    """
    Build a second-order interpolation operator.

    Args:
        cells: Cells along x (>= 4)
        weight_a: Weight of the lower neighbour, in [0, 1]
        weight_b: Weight of the upper neighbour, in [0, 1]
        variant: NODES_TO_FACES or FACES_TO_NODES
        cells_y: Cells along y (2D only, >= 4)

    Returns:
        NODES_TO_FACES: (m+1) x (m+2) in 1D; in 2D rows are the x-faces then the
            y-faces, matching gradient_2d.
        FACES_TO_NODES: the transposed layout, matching divergence_2d.

    Raises:
        InvalidParameter: Too few cells, weights outside [0, 1] or an unknown variant
    """
    if not isinstance(variant, InterpolationVariant):
        raise InvalidParameter(f"Unknown interpolation variant: {variant!r}")
    m = check_cells(cells, minimum=defaults.MIN_INTERPOLATION_CELLS, name="cells")
    weight_a = _check_weight(weight_a, "weight_a")
    weight_b = _check_weight(weight_b, "weight_b")

    Ix = _interpolation_1d(variant, m, weight_a, weight_b)
    if cells_y is None:
        logger.debug("interpolation 1D %s shape=%s", variant.value, Ix.shape)
        return Ix

    n = check_cells(cells_y, minimum=defaults.MIN_INTERPOLATION_CELLS, name="cells_y")
    Iy = _interpolation_1d(variant, n, weight_a, weight_b)
    Em = padded_identity(m)
    En = padded_identity(n)

    if variant is InterpolationVariant.NODES_TO_FACES:
        I = vstack([kron(En.T, Ix), kron(Iy, Em.T)], format="csr")
    else:
        I = hstack([kron(En, Ix), kron(Iy, Em)], format="csr")
    logger.debug("interpolation 2D %s shape=%s", variant.value, I.shape)
    return I
