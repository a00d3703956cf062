"""
flowbox/ — 2-D Stable-Fluids Solver
====================================
Exports the interfaces the renderer and the command line use.

Renderer reads:    FluidGrid → vel_x, vel_y, quantity
Frame loop drives: FluidSimulation → add_source(), step()
"""

from .config import (BoundaryParameters, FluidParameters, InletEdge, OutletEdge, SolidEdge,
                     SCALAR, NORMAL_X, NORMAL_Y, MODE_JACOBI, MODE_RED_BLACK)
from .boundary import BoundaryEnforcer
from .grid import FluidGrid
from .index import GridIndex
from .simulation import FluidSimulation

__all__ = [
    "FluidGrid", "FluidSimulation", "GridIndex", "BoundaryEnforcer",
    "FluidParameters", "BoundaryParameters", "SolidEdge", "InletEdge", "OutletEdge",
    "SCALAR", "NORMAL_X", "NORMAL_Y", "MODE_JACOBI", "MODE_RED_BLACK",
]
