"""
diffuse.py — Implicit Diffusion
================================
Diffusion makes fields spread out over time.
  - High diffusion  → density spreads fast (watercolor bleed)
  - Low diffusion   → density stays tight
  - High viscosity  → thick fluid (honey)
  - Low viscosity   → thin fluid (air, water)

The math: solve the implicit heat equation

  (I - a·∇²) x_new = x_old,    a = dt * rate * scale_x * scale_y

which on the 5-point stencil becomes

  (1 + 4a) x[i,j] = x_old[i,j] + a * (sum of 4 neighbours)

Implicit diffusion is unconditionally stable, so large dt won't blow up.
The system is relaxed with solver.lin_solve.
"""

import numpy as np

from .boundary import BoundaryEnforcer
from .config import MODE_JACOBI
from .solver import lin_solve


def diffuse(kind: str, x: np.ndarray, x0: np.ndarray, rate: float, dt: float,
            iterations: int, boundary: BoundaryEnforcer, mode: str = MODE_JACOBI):
    """
    Diffuse x0 into x.

    The initial guess is x0 itself with its ghost ring refreshed. With
    reflective edges a Jacobi sweep then keeps the interior total exactly,
    whatever the iteration count.

    Args:
        kind       : Boundary kind of the field (SCALAR / NORMAL_X / NORMAL_Y)
        x          : Output field (overwritten)
        x0         : Field before diffusion
        rate       : Viscosity or diffusion rate
        dt         : Timestep
        iterations : Relaxation sweeps
        boundary   : BoundaryEnforcer of the owning grid
        mode       : Relaxation mode
    """
    np.copyto(x, x0)
    boundary.apply(kind, x, dt)

    if rate == 0.0:
        return  # nothing to spread

    a = dt * rate * boundary.index.diffusion_scale
    lin_solve(kind, x, x0, a, 1.0 + 4.0 * a, iterations, boundary, dt, mode)
