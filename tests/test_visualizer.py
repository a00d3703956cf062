"""Tests for the renderer-side image mapping."""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from flowbox import FluidGrid
from visualizer import (DisplayConfig, DENSITY_COLOR, DENSITY_GRAY, VELOCITY_GRAY,
                        FluidVisualizer, frame_image, speed_colors)


class TestFrameImage:

    def test_color_channels_pass_through(self):
        grid = FluidGrid(8, 6, channels=3)
        grid.quantity[grid.index.index(2, 3)] = (0.2, 0.4, 2.0)

        img = frame_image(grid, DisplayConfig(mode=DENSITY_COLOR))

        assert img.shape == (6, 8, 3)
        np.testing.assert_allclose(img[3, 2], [0.2, 0.4, 1.0])

    def test_single_channel_color_uses_colormap(self):
        grid = FluidGrid(8, 6)
        grid.quantity[:] = 1.0

        img = frame_image(grid, DisplayConfig(mode=DENSITY_COLOR))

        assert img.shape == (6, 8, 3)
        np.testing.assert_allclose(img[0, 0], [1.0, 1.0, 1.0])

    def test_gray_averages_channels(self):
        grid = FluidGrid(8, 6, channels=3)
        grid.quantity[grid.index.index(4, 1)] = (0.3, 0.6, 0.9)

        img = frame_image(grid, DisplayConfig(mode=DENSITY_GRAY))

        np.testing.assert_allclose(img[1, 4], [0.6, 0.6, 0.6])

    def test_velocity_gray_is_squared_speed(self):
        grid = FluidGrid(8, 6)
        grid.vel_x[grid.index.index(1, 1)] = 0.5
        grid.vel_y[grid.index.index(1, 1)] = 0.5
        grid.vel_x[grid.index.index(2, 2)] = 500.0

        img = frame_image(grid, DisplayConfig(mode=VELOCITY_GRAY))

        np.testing.assert_allclose(img[1, 1], [0.5, 0.5, 0.5])
        np.testing.assert_allclose(img[2, 2], [1.0, 1.0, 1.0])

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            DisplayConfig(mode="HEATMAP")


class TestSpeedColors:

    def test_buckets(self):
        config = DisplayConfig()
        colors = speed_colors(np.array([0.0, 0.5, 1.0]), config)
        assert colors.shape == (3, 3)
        np.testing.assert_allclose(colors[0], matplotlib.colors.to_rgb(config.speed_colors[0]))
        np.testing.assert_allclose(colors[2], matplotlib.colors.to_rgb(config.speed_colors[2]))

    def test_still_fluid(self):
        colors = speed_colors(np.zeros(4), DisplayConfig())
        assert colors.shape == (4, 3)


class TestFluidVisualizer:

    def test_update_steps_simulation(self):
        from flowbox import FluidSimulation

        sim = FluidSimulation(16, 12)
        sim.add_source(8, 6, amount=1.0, velocity=(1.0, 0.0))
        viz = FluidVisualizer(sim, DisplayConfig(show_vectors=True, vector_stride=2))

        artists = viz.update(0)

        assert sim.frame == 1
        assert viz.quiver in artists
        assert "Frame 1" in viz.title_text.get_text()

    def test_fill_screen_stretches_cells(self):
        from flowbox import FluidSimulation

        viz = FluidVisualizer(FluidSimulation(16, 8), DisplayConfig(fill_screen=True))
        assert viz.ax.get_aspect() == "auto"

        viz = FluidVisualizer(FluidSimulation(16, 8), DisplayConfig())
        assert viz.ax.get_aspect() == 1.0
