"""Pytest configuration and fixtures for the fluid solver tests."""

import numpy as np
import pytest

from flowbox import BoundaryEnforcer, GridIndex, SCALAR


@pytest.fixture
def index():
    """Small non-square grid: 7 wide, 6 tall (5x4 interior)."""
    return GridIndex(7, 6)


@pytest.fixture
def boundary(index):
    """Solid-box boundary for the small grid."""
    return BoundaryEnforcer(index)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_scalar(index, boundary, rng):
    """Random positive scalar field with a consistent ghost ring."""
    field = rng.uniform(0.1, 1.0, index.cell_count)
    boundary.apply(SCALAR, field)
    return field


@pytest.fixture
def grid_params():
    """Parameters for a 10x10 grid with strong diffusion."""
    return {
        "viscosity": 0.001,
        "diffusion": 0.5,
        "diffuse_iterations": 4,
        "project_iterations": 20,
    }
