"""Tests for staggered grids and initial conditions."""

import numpy as np
import pytest

from mimetica.errors import InvalidParameter
from mimetica.grid import Axis, build_grid
from mimetica.initial_conditions import (
    InitialCondition,
    InitialConditionRegistry,
    evaluate_initial_condition,
)


class TestAxis:
    def test_nodes_are_bounds_and_cell_centers(self):
        axis = Axis(1.0, 4.0, 101)
        x = axis.nodes()
        assert x.shape == (103,)
        assert x[0] == 1.0
        assert x[-1] == 4.0
        assert x[1] == pytest.approx(1.0 + 0.5 * 3.0 / 101)
        assert np.all(np.diff(x) > 0)

    def test_faces(self):
        axis = Axis(0.0, 1.0, 4)
        np.testing.assert_allclose(axis.faces(), [0.0, 0.25, 0.5, 0.75, 1.0])
        assert axis.spacing == 0.25
        assert axis.size == 6

    def test_numpy_integer_cells(self):
        assert Axis(0.0, 1.0, np.int64(5)).cells == 5

    @pytest.mark.parametrize("lower, upper, cells", [
        (0.0, 1.0, 0),
        (0.0, 1.0, -3),
        (0.0, 1.0, 2.5),
        (0.0, 1.0, True),
        (1.0, 1.0, 10),
        (2.0, 1.0, 10),
        (0.0, np.inf, 10),
        ("zero", 1.0, 10),
        (None, 1.0, 10),
        (0.0, [1.0], 10),
    ])
    def test_rejects_degenerate_axes(self, lower, upper, cells):
        with pytest.raises(InvalidParameter):
            Axis(lower, upper, cells)


class TestGrid:
    def test_1d(self):
        grid = build_grid(1, (1.0, 4.0), 101)
        assert grid.dimension == 1
        assert grid.shape == (103,)
        assert grid.num_nodes == 103
        assert grid.y is None
        (x,) = grid.coordinates()
        np.testing.assert_array_equal(x, grid.x.nodes())

    def test_2d_layout_is_x_fastest(self):
        grid = build_grid(2, ((0.0, 1.0), (0.0, 2.0)), (5, 7))
        assert grid.shape == (9, 7)
        assert grid.num_nodes == 63
        assert grid.cells == (5, 7)
        X, Y = grid.coordinates()
        assert X.shape == Y.shape == (9, 7)
        np.testing.assert_array_equal(X.ravel()[:7], grid.x.nodes())
        np.testing.assert_array_equal(Y.ravel()[::7], grid.y.nodes())

    def test_shared_bounds_and_cells(self):
        grid = build_grid(2, (-5.0, 10.0), 20)
        assert grid.x == grid.y
        assert grid.spacings == (0.75, 0.75)

    def test_reshape(self):
        grid = build_grid(2, (0.0, 1.0), (4, 5))
        values = np.arange(grid.num_nodes)
        assert grid.reshape(values)[1, 0] == 6

    @pytest.mark.parametrize("dimension, bounds, cells", [
        (3, (0.0, 1.0), 10),
        (0, (0.0, 1.0), 10),
        (2, ((0.0, 1.0),), (10, 10)),
        (1, (0.0, 1.0), (10, 10)),
        (1, ("zero", "one"), 10),
    ])
    def test_rejects_bad_arguments(self, dimension, bounds, cells):
        with pytest.raises(InvalidParameter):
            build_grid(dimension, bounds, cells)


class TestInitialConditions:
    def test_builtins_registered(self):
        available = InitialConditionRegistry.list_available()
        for name in ("sine_bump", "sine_product", "zero"):
            assert name in available

    def test_sine_bump_1d(self):
        grid = build_grid(1, (1.0, 4.0), 101)
        u = evaluate_initial_condition("sine_bump", grid)
        x = grid.x.nodes()
        inside = (x > 2.0) & (x < 3.0)
        np.testing.assert_allclose(u[inside], np.sin(np.pi * x[inside]))
        assert not u[~inside].any()
        assert u.max() > 0.99

    def test_sine_bump_2d_is_product(self):
        grid = build_grid(2, (-5.0, 10.0), 30)
        u = grid.reshape(evaluate_initial_condition("sine_bump", grid))
        X, Y = grid.coordinates()
        expected = np.where((X > 2) & (X < 3), np.sin(np.pi * X), 0.0) * np.where(
            (Y > 2) & (Y < 3), np.sin(np.pi * Y), 0.0
        )
        np.testing.assert_allclose(u, expected)

    def test_values_are_flat_copies(self):
        grid = build_grid(2, (0.0, 1.0), (4, 6))
        u = evaluate_initial_condition("sine_product", grid)
        assert u.shape == (grid.num_nodes,)
        assert u.dtype == np.float64
        assert u.flags.writeable

    def test_unknown_name(self):
        grid = build_grid(1, (0.0, 1.0), 10)
        with pytest.raises(ValueError, match="Unknown initial condition"):
            evaluate_initial_condition("gaussian", grid)

    def test_register_custom_condition(self):
        condition = InitialCondition(
            name="ramp",
            description="Linear in x",
            evaluate=lambda grid: grid.coordinates()[0],
        )
        InitialConditionRegistry.register(condition)
        try:
            grid = build_grid(1, (0.0, 1.0), 10)
            np.testing.assert_array_equal(evaluate_initial_condition("ramp", grid), grid.x.nodes())
            with pytest.raises(ValueError):
                InitialConditionRegistry.register(condition)
        finally:
            InitialConditionRegistry.unregister("ramp")
        assert "ramp" not in InitialConditionRegistry.list_available()

    def test_wrong_shape_rejected(self):
        condition = InitialCondition(
            name="too_short",
            description="Broken",
            evaluate=lambda grid: np.zeros(3),
        )
        InitialConditionRegistry.register(condition)
        try:
            with pytest.raises(ValueError, match="shape"):
                evaluate_initial_condition("too_short", build_grid(1, (0.0, 1.0), 10))
        finally:
            InitialConditionRegistry.unregister("too_short")
