"""
Sparse assembly of banded operators with boundary closures.

Triplets are filled by a JIT-compiled loop and handed to scipy as a COO
matrix, which is converted to CSR for fast matrix-vector products.
"""

import numba
import numpy as np
from scipy.sparse import coo_matrix, csr_matrix

PRECISION = np.float64


@numba.jit(nopython=True, cache=True)
def _build_banded_triplets(
    n_rows,
    n_cols,
    row_start,
    row_stop,
    closure,
    interior,
    interior_offset,
    mirror_sign,
):
    """
    Fill COO triplets for a banded operator.

    Rows [row_start, row_stop) are active, all others stay empty.
    closure[r, :] is written at row_start + r, columns 0..w-1.
    The right boundary row row_stop - 1 - r gets mirror_sign * closure[r, ::-1]
    in the last w columns.
    Remaining active rows get the interior stencil starting at column
    row + interior_offset.
    """
    p = closure.shape[0]
    w = closure.shape[1]
    q = interior.shape[0]
    n_interior = row_stop - row_start - 2 * p
    total_nonzero = 2 * p * w + n_interior * q

    row_index = np.empty(total_nonzero, dtype=np.int64)
    col_index = np.empty(total_nonzero, dtype=np.int64)
    values = np.empty(total_nonzero, dtype=PRECISION)

    n_nonzero = 0
    for r in range(p):
        for t in range(w):
            row_index[n_nonzero] = row_start + r
            col_index[n_nonzero] = t
            values[n_nonzero] = closure[r, t]
            n_nonzero += 1

            row_index[n_nonzero] = row_stop - 1 - r
            col_index[n_nonzero] = n_cols - 1 - t
            values[n_nonzero] = mirror_sign * closure[r, t]
            n_nonzero += 1

    for i in range(row_start + p, row_stop - p):
        for t in range(q):
            row_index[n_nonzero] = i
            col_index[n_nonzero] = i + interior_offset + t
            values[n_nonzero] = interior[t]
            n_nonzero += 1

    return row_index[:n_nonzero], col_index[:n_nonzero], values[:n_nonzero]


def banded_operator(
    shape: tuple[int, int],
    closure: np.ndarray,
    interior: np.ndarray,
    interior_offset: int,
    scale: float = 1.0,
    row_start: int = 0,
    row_stop: int | None = None,
    mirror_sign: float = -1.0,
) -> csr_matrix:
    """
    Assemble a banded sparse operator.

    Args:
        shape: (rows, cols) of the result
        closure: (p, w) left-boundary rows
        interior: Interior stencil weights
        interior_offset: Column of the first interior weight relative to the row
        scale: Factor applied to every entry (e.g. 1/spacing)
        row_start: First active row; earlier rows are empty
        row_stop: One past the last active row; defaults to shape[0]
        mirror_sign: -1 for derivative closures, +1 for averaging closures

    Returns:
        CSR matrix of the requested shape
    """
    n_rows, n_cols = shape
    if row_stop is None:
        row_stop = n_rows

    closure = np.ascontiguousarray(closure, dtype=PRECISION).reshape(-1, np.shape(closure)[-1])
    interior = np.ascontiguousarray(interior, dtype=PRECISION)

    row_index, col_index, values = _build_banded_triplets(
        n_rows,
        n_cols,
        row_start,
        row_stop,
        closure,
        interior,
        interior_offset,
        mirror_sign,
    )
    A = coo_matrix((values * scale, (row_index, col_index)), shape=(n_rows, n_cols), dtype=PRECISION)
    return A.tocsr()


def padded_identity(cells: int) -> csr_matrix:
    """(cells+2) x cells identity that embeds cell values between two boundary zeros."""
    rows = np.arange(1, cells + 1)
    cols = np.arange(cells)
    data = np.ones(cells, dtype=PRECISION)
    return coo_matrix((data, (rows, cols)), shape=(cells + 2, cells), dtype=PRECISION).tocsr()


def interior_identity(cells: int) -> csr_matrix:
    """(cells+2) square identity with both boundary diagonal entries removed."""
    E = padded_identity(cells)
    return (E @ E.T).tocsr()
