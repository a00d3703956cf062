"""Tests for edge conditions."""

import numpy as np
import pytest

from flowbox import (BoundaryEnforcer, BoundaryParameters, GridIndex, InletEdge, OutletEdge,
                     SCALAR, NORMAL_X, NORMAL_Y)


def _random(index, seed=0):
    return np.random.default_rng(seed).normal(size=index.cell_count)


class TestReflectiveBoundary:
    """Default solid box."""

    def test_scalar_copies_neighbour(self, index, boundary):
        field = _random(index)
        boundary.apply(SCALAR, field)
        g = index.view(field)

        np.testing.assert_array_equal(g[0, 1:-1], g[1, 1:-1])
        np.testing.assert_array_equal(g[-1, 1:-1], g[-2, 1:-1])
        np.testing.assert_array_equal(g[1:-1, 0], g[1:-1, 1])
        np.testing.assert_array_equal(g[1:-1, -1], g[1:-1, -2])

    def test_normal_x_negates_left_right(self, index, boundary):
        field = _random(index)
        boundary.apply(NORMAL_X, field)
        g = index.view(field)

        np.testing.assert_array_equal(g[1:-1, 0], -g[1:-1, 1])
        np.testing.assert_array_equal(g[1:-1, -1], -g[1:-1, -2])
        # Tangential edges are not negated
        np.testing.assert_array_equal(g[0, 1:-1], g[1, 1:-1])

    def test_normal_y_negates_top_bottom(self, index, boundary):
        field = _random(index)
        boundary.apply(NORMAL_Y, field)
        g = index.view(field)

        np.testing.assert_array_equal(g[0, 1:-1], -g[1, 1:-1])
        np.testing.assert_array_equal(g[-1, 1:-1], -g[-2, 1:-1])
        np.testing.assert_array_equal(g[1:-1, 0], g[1:-1, 1])

    def test_corners_average_neighbours(self, index, boundary):
        field = _random(index)
        boundary.apply(NORMAL_X, field)
        g = index.view(field)

        assert g[0, 0] == pytest.approx(0.5 * (g[0, 1] + g[1, 0]))
        assert g[0, -1] == pytest.approx(0.5 * (g[0, -2] + g[1, -1]))
        assert g[-1, 0] == pytest.approx(0.5 * (g[-1, 1] + g[-2, 0]))
        assert g[-1, -1] == pytest.approx(0.5 * (g[-1, -2] + g[-2, -1]))

    def test_interior_untouched(self, index, boundary):
        field = _random(index)
        before = index.view(field)[1:-1, 1:-1].copy()
        boundary.apply(NORMAL_Y, field)
        np.testing.assert_array_equal(index.view(field)[1:-1, 1:-1], before)

    def test_multichannel(self, index, boundary):
        field = np.random.default_rng(3).normal(size=(index.cell_count, 3))
        boundary.apply(SCALAR, field)
        g = index.view(field)
        np.testing.assert_array_equal(g[1:-1, 0, :], g[1:-1, 1, :])

    def test_unknown_kind(self, index, boundary):
        with pytest.raises(ValueError):
            boundary.apply("DIAGONAL", index.allocate())


class TestOpenEdges:
    """Inlet and outlet edges."""

    def test_inlet_forces_inflow(self, index):
        params = BoundaryParameters(left=InletEdge(speed=2.0), right=InletEdge(speed=2.0))
        boundary = BoundaryEnforcer(index, params)
        field = _random(index)

        boundary.apply(NORMAL_X, field, dt=0.5)
        g = index.view(field)

        np.testing.assert_allclose(g[1:-1, 1], 1.0)
        np.testing.assert_allclose(g[1:-1, -2], -1.0)
        # Open edge: ghost copies without negation
        np.testing.assert_allclose(g[1:-1, 0], 1.0)

    def test_inlet_top_bottom(self, index):
        params = BoundaryParameters(top=InletEdge(speed=1.0), bottom=InletEdge(speed=3.0))
        boundary = BoundaryEnforcer(index, params)
        field = _random(index)

        boundary.apply(NORMAL_Y, field, dt=0.1)
        g = index.view(field)

        np.testing.assert_allclose(g[1, 1:-1], 0.1)
        np.testing.assert_allclose(g[-2, 1:-1], -0.3)

    def test_inlet_ignores_tangential_component(self, index):
        params = BoundaryParameters(left=InletEdge(speed=2.0))
        boundary = BoundaryEnforcer(index, params)
        field = _random(index)
        before = index.view(field)[1:-1, 1:-1].copy()

        boundary.apply(NORMAL_Y, field, dt=0.5)
        np.testing.assert_array_equal(index.view(field)[1:-1, 1:-1], before)

    def test_outlet_zero_gradient(self, index):
        boundary = BoundaryEnforcer(index, BoundaryParameters(right=OutletEdge()))
        field = _random(index)

        boundary.apply(NORMAL_X, field)
        g = index.view(field)

        np.testing.assert_array_equal(g[1:-1, -2], g[1:-1, -3])
        np.testing.assert_array_equal(g[1:-1, -1], g[1:-1, -2])
        # Left edge is still a solid wall
        np.testing.assert_array_equal(g[1:-1, 0], -g[1:-1, 1])

    def test_inject_inlet_at_centre(self):
        index = GridIndex(7, 6)
        params = BoundaryParameters(top=InletEdge(speed=1.0, injects_quantity=True, amount=2.0))
        quantity = index.allocate()

        BoundaryEnforcer(index, params).inject_inlets(quantity)

        assert quantity[index.index(3, 1)] == 2.0
        assert quantity.sum() == 2.0

    def test_inject_inlet_at_offset(self):
        index = GridIndex(7, 6)
        params = BoundaryParameters(right=InletEdge(speed=1.0, injects_quantity=True, offset=2))
        quantity = index.allocate()

        BoundaryEnforcer(index, params).inject_inlets(quantity)

        assert quantity[index.index(5, 2)] == 1.0

    def test_non_seeding_inlet_injects_nothing(self, index):
        params = BoundaryParameters(left=InletEdge(speed=1.0))
        quantity = index.allocate()
        BoundaryEnforcer(index, params).inject_inlets(quantity)
        assert not quantity.any()

    def test_invalid_edge_tag(self):
        with pytest.raises(ValueError):
            BoundaryParameters(left="open")
