"""Shared fixtures for mimetica tests."""

import numpy as np
import pytest
from scipy.sparse import csr_matrix

from mimetica.config import SimulationConfig
from mimetica.integrators import Scheme
from mimetica.operators import prepare_update


@pytest.fixture
def string_config():
    """The 1D vibrating string demo: [1, 4], 101 cells, order 4, c = 100."""
    return SimulationConfig(
        dimension=1,
        order=4,
        cells=(101,),
        bounds=((1.0, 4.0),),
        wave_speed=100.0,
        total_time=0.06,
        scheme=Scheme.POSITION_VERLET,
        initial_condition="sine_bump",
    )


@pytest.fixture
def small_membrane_config():
    """Small 2D membrane with staggered velocity, cheap enough for many steps."""
    return SimulationConfig(
        dimension=2,
        order=2,
        cells=(10, 12),
        bounds=((0.0, 1.0), (0.0, 1.0)),
        wave_speed=1.0,
        total_time=0.5,
        initial_condition="sine_product",
    )


@pytest.fixture
def oscillator():
    """Factory for a one-node harmonic oscillator u'' = -omega^2 u."""

    def make(dt, omega=1.0):
        combined = csr_matrix(np.array([[-omega ** 2]]))
        return prepare_update(combined, wave_speed=1.0, dt=dt)

    return make
