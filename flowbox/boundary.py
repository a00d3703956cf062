"""
boundary.py — Edge Conditions
==============================
Keeps fluid inside the box.

The outer ring of every field is a layer of "ghost" cells. After each
relaxation sweep, advection or projection we rewrite that ring from the
interior cell next to it:

  - SCALAR fields (density, pressure) copy the neighbour → no flux (Neumann)
  - NORMAL_X (x-velocity) is negated at the left/right walls
  - NORMAL_Y (y-velocity) is negated at the top/bottom walls
    → the velocity through a solid wall averages to zero

Corners are the average of their two edge neighbours.

The ring must be refreshed after EVERY sweep, not once per step: the
5-point stencil reads it, so stale ghost values leak into the interior.

Inlet / outlet edges force the first interior row or column first, then
the ghost ring copies it without negation (an open edge is not a wall).
"""

import numpy as np

from .config import (BoundaryParameters, InletEdge, OutletEdge, SolidEdge,
                     NORMAL_X, NORMAL_Y, FIELD_KINDS)
from .index import GridIndex


class BoundaryEnforcer:
    """Applies the edge rules of one grid to its fields."""

    def __init__(self, index: GridIndex, params: BoundaryParameters = None):
        self.index = index
        self.params = params if params is not None else BoundaryParameters()

    def apply(self, kind: str, field: np.ndarray, dt: float = 0.0):
        """
        Rewrite the ghost ring of `field` in place.

        Args:
            kind  : SCALAR, NORMAL_X or NORMAL_Y
            field : flat field (cells,) or (cells, channels)
            dt    : timestep, only used to scale inlet speeds
        """
        if kind not in FIELD_KINDS:
            raise ValueError(f"Unknown field kind: {kind}")

        g = self.index.view(field)
        p = self.params

        # ── Inlet / outlet forcing on the first interior row/column ────────
        if kind == NORMAL_X:
            self._force(g[1:-1, 1], g[1:-1, 2], p.left, +1.0, dt)
            self._force(g[1:-1, -2], g[1:-1, -3], p.right, -1.0, dt)
        elif kind == NORMAL_Y:
            self._force(g[1, 1:-1], g[2, 1:-1], p.top, +1.0, dt)
            self._force(g[-2, 1:-1], g[-3, 1:-1], p.bottom, -1.0, dt)

        # ── Reflective pass ────────────────────────────────────────────────
        top    = self._sign(kind == NORMAL_Y, p.top)
        bottom = self._sign(kind == NORMAL_Y, p.bottom)
        left   = self._sign(kind == NORMAL_X, p.left)
        right  = self._sign(kind == NORMAL_X, p.right)

        g[0,  1:-1] = top    * g[1,  1:-1]
        g[-1, 1:-1] = bottom * g[-2, 1:-1]
        g[1:-1, 0]  = left   * g[1:-1, 1]
        g[1:-1, -1] = right  * g[1:-1, -2]

        # ── Corners ────────────────────────────────────────────────────────
        g[0,  0]  = 0.5 * (g[0,  1]  + g[1,  0])
        g[0,  -1] = 0.5 * (g[0,  -2] + g[1,  -1])
        g[-1, 0]  = 0.5 * (g[-1, 1]  + g[-2, 0])
        g[-1, -1] = 0.5 * (g[-1, -2] + g[-2, -1])

    def inject_inlets(self, quantity: np.ndarray):
        """
        Splat inlet quantity into the cell just inside each seeding inlet.
        Called once per step (not per sweep).
        """
        w, h = self.index.width, self.index.height
        for name, edge in self.params.edges():
            if not (isinstance(edge, InletEdge) and edge.injects_quantity):
                continue

            if name in ("top", "bottom"):
                along = w // 2 if edge.offset is None else edge.offset
                x, y = along, (1 if name == "top" else h - 2)
            else:
                along = h // 2 if edge.offset is None else edge.offset
                x, y = (1 if name == "left" else w - 2), along

            x, y = self.index.clamp_interior(x, y)
            quantity[self.index.index(x, y)] += edge.amount

    @staticmethod
    def _sign(normal: bool, edge) -> float:
        # Only a solid wall reverses the component normal to it
        return -1.0 if normal and isinstance(edge, SolidEdge) else 1.0

    @staticmethod
    def _force(row: np.ndarray, inner: np.ndarray, edge, direction: float, dt: float):
        if isinstance(edge, InletEdge):
            row[...] = direction * edge.speed * dt
        elif isinstance(edge, OutletEdge):
            row[...] = inner
