"""
advect.py — Semi-Lagrangian Advection
======================================
This is what makes the fluid look like it's *actually flowing*.

The algorithm (per interior cell):
  1. Start at the cell position (i, j).
  2. Trace BACKWARD along the velocity field by one timestep:
       pos = (i, j) - dt * scale * (vx, vy)
     → "Where did the stuff in this cell come FROM?"
  3. Clamp pos to [0.5, N + 0.5] on each axis (N = interior cells) so the
     2×2 stencil never reaches past the ghost ring.
  4. Bilinearly sample the PREVIOUS buffer at pos; that becomes the new value.

Bilinear weights around the lower-left sample cell (i0, j0), with
s, t = fractional offsets:
    (1-s)(1-t)  (1-s)t  s(1-t)  st

With zero velocity s = t = 0, so every cell samples itself exactly.

Key reference: Jos Stam, "Stable Fluids" (SIGGRAPH 1999)
"""

import numpy as np

from .boundary import BoundaryEnforcer


def _broadcast(weights: np.ndarray, ndim: int) -> np.ndarray:
    """Add trailing axes so (h, w) weights multiply (h, w, channels) samples."""
    return weights.reshape(weights.shape + (1,) * (ndim - 1))


def advect(kind: str, d: np.ndarray, d0: np.ndarray, vel_x: np.ndarray,
           vel_y: np.ndarray, dt: float, boundary: BoundaryEnforcer):
    """
    Transport d0 along (vel_x, vel_y) into d.

    Args:
        kind         : Boundary kind of d
        d            : Output field (interior overwritten, ring re-enforced)
        d0           : Field sampled (previous buffer, never written)
        vel_x, vel_y : Velocity used for the back-trace
        dt           : Timestep
        boundary     : BoundaryEnforcer of the owning grid
    """
    index = boundary.index
    w, h = index.width, index.height

    u = index.view(vel_x)[1:-1, 1:-1]
    v = index.view(vel_y)[1:-1, 1:-1]

    # Interior cell coordinates, rows = y, columns = x
    j, i = np.mgrid[1:h - 1, 1:w - 1].astype(np.float64)

    # Back-trace in grid-index space
    x = np.clip(i - dt * index.scale_x * u, 0.5, w - 1.5)
    y = np.clip(j - dt * index.scale_y * v, 0.5, h - 1.5)

    i0 = np.floor(x).astype(np.int64)
    j0 = np.floor(y).astype(np.int64)
    i1 = i0 + 1
    j1 = j0 + 1

    s1 = x - i0
    s0 = 1.0 - s1
    t1 = y - j0
    t0 = 1.0 - t1

    ndim = d0.ndim
    s0, s1, t0, t1 = (_broadcast(wt, ndim) for wt in (s0, s1, t0, t1))

    # Sample the 4 corners through the clamped flat index
    c00 = d0[index.index(i0, j0)]
    c01 = d0[index.index(i0, j1)]
    c10 = d0[index.index(i1, j0)]
    c11 = d0[index.index(i1, j1)]

    index.view(d)[1:-1, 1:-1] = s0 * (t0 * c00 + t1 * c01) + s1 * (t0 * c10 + t1 * c11)

    boundary.apply(kind, d, dt)
