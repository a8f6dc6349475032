"""Mimetic finite differences and symplectic integrators for 1D/2D wave equations.

Example:
    from mimetica import WaveSolver, preset_1d

    solver = WaveSolver(preset_1d())
    summary = solver.run()
    fields = solver.history.fields()
"""

from .config import SimulationConfig, load_config, preset_1d, preset_2d, save_config
from .errors import ConfigLoadError, DimensionMismatch, InvalidParameter, MimeticError
from .grid import Axis, Grid, build_grid
from .integrators import (
    Integrator,
    Scheme,
    cfl_time_step,
    compute_force,
    discrete_energy,
    forest_ruth_step,
    position_verlet_step,
)
from .operators import (
    InterpolationVariant,
    UpdateOperators,
    combine,
    interpolation,
    laplacian,
    prepare_update,
    robin_bc,
    scale,
)
from .snapshots import BackgroundConsumer, HistoryRecorder, Snapshot
from .solver import RunSummary, WaveSolver

__all__ = [
    # Grid
    'Axis',
    'Grid',
    'build_grid',
    # Operators
    'laplacian',
    'robin_bc',
    'interpolation',
    'InterpolationVariant',
    'combine',
    'scale',
    'prepare_update',
    'UpdateOperators',
    # Integrators
    'Integrator',
    'Scheme',
    'cfl_time_step',
    'compute_force',
    'discrete_energy',
    'position_verlet_step',
    'forest_ruth_step',
    # Solver loop
    'WaveSolver',
    'RunSummary',
    'Snapshot',
    'HistoryRecorder',
    'BackgroundConsumer',
    # Configuration
    'SimulationConfig',
    'preset_1d',
    'preset_2d',
    'save_config',
    'load_config',
    # Errors
    'MimeticError',
    'InvalidParameter',
    'DimensionMismatch',
    'ConfigLoadError',
]
