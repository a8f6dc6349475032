"""
Robin boundary operator: alpha * u + beta * du/dn = 0 on the domain boundary.

Added to the Laplacian, it fills the otherwise empty boundary rows so that
each boundary node carries the Robin condition. Only the homogeneous case
is built here; a nonzero right-hand side would enter as a separate source
vector.
"""

import logging
import math

from scipy.sparse import coo_matrix, csr_matrix, identity, kron

from mimetica.errors import InvalidParameter
from mimetica.operators.assembly import PRECISION
from mimetica.operators.mimetic import gradient
from mimetica.operators.stencils import check_axis, check_order

logger = logging.getLogger(__name__)


def _check_coefficient(value, name: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"Robin coefficient {name} must be a real number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidParameter(f"Robin coefficient {name} must be finite, got {value}")
    return value


def _robin_1d(order: int, m: int, dx: float, alpha: float, beta: float) -> csr_matrix:
    # A holds alpha on both boundary diagonals, B picks the outward normal
    # derivative from the first and last faces of the gradient.
    A = coo_matrix(
        ([alpha, alpha], ([0, m + 1], [0, m + 1])), shape=(m + 2, m + 2), dtype=PRECISION
    )
    B = coo_matrix(
        ([-beta, beta], ([0, m + 1], [0, m])), shape=(m + 2, m + 1), dtype=PRECISION
    )
    BC = (A.tocsr() + B.tocsr() @ gradient(order, m, dx)).tocsr()
    BC.eliminate_zeros()
    return BC


def robin_bc(
    order: int,
    cells: int,
    spacing: float,
    alpha: float,
    beta: float,
    cells_y: int | None = None,
    spacing_y: float | None = None,
) -> csr_matrix:
    """
    Build the Robin boundary operator.

    Args:
        order: Accuracy order (2 or 4), selects the gradient used for du/dn
        cells: Cells along x
        spacing: Cell width along x
        alpha: Coefficient of u
        beta: Coefficient of the outward normal derivative
        cells_y: Cells along y (2D only)
        spacing_y: Cell width along y (2D only)

    Returns:
        Sparse operator with the same shape as laplacian() for the same grid.
        Interior rows are empty.

    Raises:
        InvalidParameter: Unsupported order, too few cells, bad spacing or
            non-finite coefficients
    """
    order = check_order(order)
    alpha = _check_coefficient(alpha, "alpha")
    beta = _check_coefficient(beta, "beta")
    m, dx = check_axis(order, cells, spacing, "_x" if cells_y is not None else "")

    Bm = _robin_1d(order, m, dx, alpha, beta)
    if cells_y is None and spacing_y is None:
        logger.debug("robin_bc 1D order=%d alpha=%g beta=%g shape=%s", order, alpha, beta, Bm.shape)
        return Bm

    n, dy = check_axis(order, cells_y, spacing_y, "_y")
    Bn = _robin_1d(order, n, dy, alpha, beta)

    # Corners are owned by the y-boundary rows, so the x-boundary rows skip j = 0 and j = n+1.
    In = identity(n + 2, dtype=PRECISION, format="lil")
    In[0, 0] = 0.0
    In[n + 1, n + 1] = 0.0
    Im = identity(m + 2, dtype=PRECISION, format="csr")

    BC = (kron(In.tocsr(), Bm) + kron(Bn, Im)).tocsr()
    BC.eliminate_zeros()
    logger.debug("robin_bc 2D order=%d alpha=%g beta=%g shape=%s", order, alpha, beta, BC.shape)
    return BC
