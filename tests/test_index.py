"""Tests for flat grid indexing."""

import numpy as np
import pytest

from flowbox import GridIndex


class TestGridIndex:
    """Offset ↔ coordinate mapping."""

    def test_round_trip(self, index):
        """position(index(x, y)) == (x, y) for every cell."""
        for y in range(index.height):
            for x in range(index.width):
                assert index.position(index.index(x, y)) == (x, y)

    def test_row_major_layout(self, index):
        assert index.index(0, 0) == 0
        assert index.index(1, 0) == 1
        assert index.index(0, 1) == index.width

    def test_out_of_range_clamps(self, index):
        """Offsets past either end clamp instead of raising."""
        assert index.index(-1, 0) == 0
        assert index.index(index.width, index.height - 1) == index.cell_count - 1
        assert index.index(3, 100) == index.cell_count - 1

    def test_array_input(self, index):
        xs = np.array([0, 1, index.width])
        ys = np.array([0, 1, index.height])
        out = index.index(xs, ys)
        assert isinstance(out, np.ndarray)
        assert out.tolist() == [0, 1 + index.width, index.cell_count - 1]

    def test_clamp_interior(self, index):
        assert index.clamp_interior(-4, 2) == (1, 2)
        assert index.clamp_interior(50, 50) == (index.width - 2, index.height - 2)

    def test_view_shares_memory(self, index):
        field = index.allocate()
        index.view(field)[2, 3] = 5.0
        assert field[index.index(3, 2)] == 5.0


class TestGridScale:
    """Scaling constants used by diffusion, projection and advection."""

    def test_derived_from_interior_size(self):
        index = GridIndex(12, 7)
        assert index.scale_x == 10.0
        assert index.scale_y == 5.0
        assert index.diffusion_scale == 50.0

    def test_fixed_scale(self):
        index = GridIndex(12, 7, grid_scale=100.0)
        assert index.scale_x == index.scale_y == 100.0
        assert index.diffusion_scale == 10000.0

    @pytest.mark.parametrize("w, h", [(2, 5), (5, 2), (0, 0)])
    def test_degenerate_dimensions(self, w, h):
        with pytest.raises(ValueError):
            GridIndex(w, h)

    def test_invalid_scale(self):
        with pytest.raises(ValueError):
            GridIndex(5, 5, grid_scale=-1.0)
