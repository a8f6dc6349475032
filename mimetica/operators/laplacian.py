"""
High-order mimetic Laplacian.
"""

import logging

from scipy.sparse import csr_matrix, kron

from mimetica.operators.assembly import interior_identity
from mimetica.operators.mimetic import divergence, gradient
from mimetica.operators.stencils import check_axis, check_order

logger = logging.getLogger(__name__)


def laplacian(
    order: int,
    cells: int,
    spacing: float,
    cells_y: int | None = None,
    spacing_y: float | None = None,
) -> csr_matrix:
    """
    Build the discrete Laplacian on a staggered grid.

    In 1D this is divergence @ gradient. In 2D it is the Kronecker sum

        L = Iy ⊗ Lx + Ly ⊗ Ix

    where Ix, Iy are identities with the boundary diagonal entries removed,
    which is exactly divergence_2d @ gradient_2d. Rows belonging to boundary
    nodes are empty; those nodes are governed by the boundary operator.

    Args:
        order: Accuracy order (2 or 4)
        cells: Cells along x
        spacing: Cell width along x
        cells_y: Cells along y (2D only)
        spacing_y: Cell width along y (2D only)

    Returns:
        Square sparse operator on the node space, (m+2) or (m+2)(n+2) wide

    Raises:
        InvalidParameter: Unsupported order, too few cells or bad spacing
    """
    order = check_order(order)
    m, dx = check_axis(order, cells, spacing, "_x" if cells_y is not None else "")

    Lx = (divergence(order, m, dx) @ gradient(order, m, dx)).tocsr()
    Lx.eliminate_zeros()
    if cells_y is None and spacing_y is None:
        logger.debug("laplacian 1D order=%d shape=%s nnz=%d", order, Lx.shape, Lx.nnz)
        return Lx

    n, dy = check_axis(order, cells_y, spacing_y, "_y")
    Ly = (divergence(order, n, dy) @ gradient(order, n, dy)).tocsr()

    L = (kron(interior_identity(n), Lx) + kron(Ly, interior_identity(m))).tocsr()
    L.eliminate_zeros()
    logger.debug("laplacian 2D order=%d shape=%s nnz=%d", order, L.shape, L.nnz)
    return L
