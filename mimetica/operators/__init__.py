"""
Sparse mimetic operators on staggered grids.
"""

from .combine import UpdateOperators, check_composable, combine, prepare_update, scale
from .interpolation import InterpolationVariant, interpolation
from .laplacian import laplacian
from .mimetic import divergence, divergence_2d, gradient, gradient_2d
from .robin import robin_bc
from .stencils import SUPPORTED_ORDERS, min_cells

__all__ = [
    'SUPPORTED_ORDERS',
    'min_cells',
    'gradient',
    'divergence',
    'gradient_2d',
    'divergence_2d',
    'laplacian',
    'robin_bc',
    'interpolation',
    'InterpolationVariant',
    'combine',
    'scale',
    'check_composable',
    'prepare_update',
    'UpdateOperators',
]
