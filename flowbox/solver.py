"""
solver.py — Relaxation Solver & Pressure Projection
=====================================================
Two pieces live here:

1. lin_solve — the iterative solver shared by diffusion and projection.
   Every implicit step in the pipeline reduces to the same 5-point system:

       c * x[i,j] = x0[i,j] + a * (x[i-1,j] + x[i+1,j] + x[i,j-1] + x[i,j+1])

   Default mode is JACOBI: each sweep reads only the previous sweep's
   values, so every cell update is independent and the whole sweep is one
   vectorised NumPy expression. It converges slower per sweep than
   in-place Gauss-Seidel; raise the iteration count to compensate.

   RED_BLACK mode is Gauss-Seidel on a checkerboard: update the even cells,
   then the odd cells from the fresh even values. Each half stays
   vectorised.

   The solver never checks convergence. It runs exactly `iterations`
   sweeps and returns.

2. project — make the velocity field (approximately) divergence-free:
     1. Compute the divergence of the current velocity field
     2. Solve the Poisson equation for pressure
     3. Subtract the pressure gradient from velocity

   The result is divergence-free only up to the residual of the fixed
   number of sweeps. More project_iterations → smaller residual, never 0.
"""

import numpy as np

from .boundary import BoundaryEnforcer
from .config import (MODE_JACOBI, MODE_RED_BLACK, SCALAR, NORMAL_X, NORMAL_Y,
                     PRESSURE_COEFFICIENT, PRESSURE_DIAGONAL)
from .index import GridIndex


def _neighbour_sum(g: np.ndarray) -> np.ndarray:
    """Sum of the 4 face neighbours for every interior cell."""
    return (
        g[1:-1, :-2] +   # x-1
        g[1:-1, 2:]  +   # x+1
        g[:-2, 1:-1] +   # y-1
        g[2:,  1:-1]     # y+1
    )


def _checkerboard(index: GridIndex) -> tuple:
    """(red, black) boolean masks over the interior block."""
    jj, ii = np.indices((index.height - 2, index.width - 2))
    red = (ii + jj) % 2 == 0
    return red, ~red


def lin_solve(kind: str, x: np.ndarray, x0: np.ndarray, a: float, c: float,
              iterations: int, boundary: BoundaryEnforcer, dt: float = 0.0,
              mode: str = MODE_JACOBI):
    """
    Relax `x` towards the solution of the 5-point system, in place.

    Args:
        kind       : Boundary kind applied after every sweep
        x          : Field being solved (its current contents are the initial guess)
        x0         : Right-hand side
        a          : Neighbour coefficient
        c          : Diagonal term
        iterations : Exact number of sweeps
        boundary   : BoundaryEnforcer of the owning grid
        dt         : Timestep, forwarded to inlet forcing
        mode       : MODE_JACOBI or MODE_RED_BLACK
    """
    if mode not in (MODE_JACOBI, MODE_RED_BLACK):
        raise ValueError(f"Unknown relaxation mode: {mode}. Use 'JACOBI' or 'RED_BLACK'.")

    index = boundary.index
    g = index.view(x)
    b = index.view(x0)[1:-1, 1:-1]
    c_recip = 1.0 / c

    if mode == MODE_JACOBI:
        for _ in range(iterations):
            # RHS is fully evaluated before assignment → every cell reads
            # the previous sweep, never a sibling updated in this sweep
            g[1:-1, 1:-1] = (b + a * _neighbour_sum(g)) * c_recip
            boundary.apply(kind, x, dt)
        return

    colours = _checkerboard(index)
    for _ in range(iterations):
        for mask in colours:
            updated = (b + a * _neighbour_sum(g)) * c_recip
            interior = g[1:-1, 1:-1]
            interior[mask] = updated[mask]
        boundary.apply(kind, x, dt)


def project(vel_x: np.ndarray, vel_y: np.ndarray, pressure: np.ndarray,
            divergence: np.ndarray, iterations: int, boundary: BoundaryEnforcer,
            dt: float = 0.0, mode: str = MODE_JACOBI):
    """
    Pressure projection: remove the divergent part of (vel_x, vel_y) in place.

    `pressure` and `divergence` are scratch buffers; on return they hold the
    solved pressure and the divergence it was solved against.
    """
    index = boundary.index
    sx, sy = index.scale_x, index.scale_y

    u = index.view(vel_x)
    v = index.view(vel_y)
    p = index.view(pressure)
    div = index.view(divergence)

    # Step 1: divergence (central differences), pressure starts at zero
    div[1:-1, 1:-1] = -0.5 * (
        (u[1:-1, 2:] - u[1:-1, :-2]) / sx +
        (v[2:, 1:-1] - v[:-2, 1:-1]) / sy
    )
    p[1:-1, 1:-1] = 0.0

    boundary.apply(SCALAR, divergence)
    boundary.apply(SCALAR, pressure)

    # Step 2: Poisson solve
    lin_solve(SCALAR, pressure, divergence, PRESSURE_COEFFICIENT, PRESSURE_DIAGONAL,
              iterations, boundary, mode=mode)

    # Step 3: subtract the pressure gradient
    u[1:-1, 1:-1] -= 0.5 * (p[1:-1, 2:] - p[1:-1, :-2]) * sx
    v[1:-1, 1:-1] -= 0.5 * (p[2:, 1:-1] - p[:-2, 1:-1]) * sy

    boundary.apply(NORMAL_X, vel_x, dt)
    boundary.apply(NORMAL_Y, vel_y, dt)


def divergence_of(vel_x: np.ndarray, vel_y: np.ndarray, index: GridIndex) -> np.ndarray:
    """
    Interior divergence du/dx + dv/dy in grid units (h = 1/scale).

    Returns a (height-2, width-2) array. High values = broken projection.
    """
    u = index.view(vel_x)
    v = index.view(vel_y)
    return 0.5 * (
        (u[1:-1, 2:] - u[1:-1, :-2]) * index.scale_x +
        (v[2:, 1:-1] - v[:-2, 1:-1]) * index.scale_y
    )
