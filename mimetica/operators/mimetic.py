"""
Mimetic gradient and divergence on staggered grids.

The gradient maps node values (boundary nodes + cell centers, m+2 values)
to faces (m+1 values); the divergence maps faces back to nodes. Their
product is the Laplacian, and the gradient also supplies the normal
derivative used by the Robin boundary operator.
"""

import logging

from scipy.sparse import csr_matrix, hstack, kron, vstack

from mimetica.operators.assembly import banded_operator, padded_identity
from mimetica.operators.stencils import DIVERGENCE, GRADIENT, check_axis, check_order

logger = logging.getLogger(__name__)


def gradient(order: int, cells: int, spacing: float) -> csr_matrix:
    """
    One-dimensional mimetic gradient.

    Args:
        order: Accuracy order (2 or 4)
        cells: Number of cells m
        spacing: Cell width

    Returns:
        (m+1) x (m+2) sparse operator, nodes -> faces
    """
    order = check_order(order)
    m, dx = check_axis(order, cells, spacing)
    family = GRADIENT[order]
    G = banded_operator(
        (m + 1, m + 2),
        family.closure,
        family.interior,
        family.interior_offset,
        scale=1.0 / dx,
    )
    logger.debug("gradient order=%d cells=%d shape=%s nnz=%d", order, m, G.shape, G.nnz)
    return G


def divergence(order: int, cells: int, spacing: float) -> csr_matrix:
    """
    One-dimensional mimetic divergence.

    The first and last rows are empty: boundary nodes carry no divergence.

    Returns:
        (m+2) x (m+1) sparse operator, faces -> nodes
    """
    order = check_order(order)
    m, dx = check_axis(order, cells, spacing)
    family = DIVERGENCE[order]
    D = banded_operator(
        (m + 2, m + 1),
        family.closure,
        family.interior,
        family.interior_offset,
        scale=1.0 / dx,
        row_start=1,
        row_stop=m + 1,
    )
    logger.debug("divergence order=%d cells=%d shape=%s nnz=%d", order, m, D.shape, D.nnz)
    return D


def gradient_2d(order: int, cells_x: int, spacing_x: float, cells_y: int, spacing_y: float) -> csr_matrix:
    """
    Two-dimensional mimetic gradient.

    Rows hold the x-faces (n(m+1) values) followed by the y-faces
    ((n+1)m values); columns are the (m+2)(n+2) nodes, x fastest.
    """
    order = check_order(order)
    m, dx = check_axis(order, cells_x, spacing_x, "_x")
    n, dy = check_axis(order, cells_y, spacing_y, "_y")

    Gx = gradient(order, m, dx)
    Gy = gradient(order, n, dy)
    Em = padded_identity(m)
    En = padded_identity(n)

    Sx = kron(En.T, Gx)
    Sy = kron(Gy, Em.T)
    return vstack([Sx, Sy], format="csr")


def divergence_2d(order: int, cells_x: int, spacing_x: float, cells_y: int, spacing_y: float) -> csr_matrix:
    """Two-dimensional mimetic divergence, faces -> nodes (transpose layout of gradient_2d)."""
    order = check_order(order)
    m, dx = check_axis(order, cells_x, spacing_x, "_x")
    n, dy = check_axis(order, cells_y, spacing_y, "_y")

    Dx = divergence(order, m, dx)
    Dy = divergence(order, n, dy)
    Em = padded_identity(m)
    En = padded_identity(n)

    Sx = kron(En, Dx)
    Sy = kron(Dy, Em)
    return hstack([Sx, Sy], format="csr")
