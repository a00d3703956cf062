"""
config.py — Solver Parameters & Boundary Tags
==============================================
All tuning knobs in one place.

FluidParameters is swapped as a whole (FluidGrid.set_parameters), never
patched field-by-field mid-step, so it is a frozen dataclass.

Boundary edges carry one of three tags:
  SolidEdge   → reflective wall, no flow through it (default)
  InletEdge   → forced inflow at a fixed speed, optional quantity seeding
  OutletEdge  → free outflow, zero velocity gradient across the edge
"""

import math
import numbers
from dataclasses import dataclass, field
from typing import Optional, Union


# ── Field kinds (which boundary sign rule applies) ─────────────────────────
SCALAR   = "SCALAR"     # never negated at walls
NORMAL_X = "NORMAL_X"   # x-velocity: negated at left/right walls
NORMAL_Y = "NORMAL_Y"   # y-velocity: negated at top/bottom walls

FIELD_KINDS = (SCALAR, NORMAL_X, NORMAL_Y)

# ── Relaxation modes ───────────────────────────────────────────────────────
MODE_JACOBI    = "JACOBI"
MODE_RED_BLACK = "RED_BLACK"

RELAXATION_MODES = (MODE_JACOBI, MODE_RED_BLACK)

# ── Pressure Poisson coefficients (fixed, independent of dt and grid size) ─
PRESSURE_COEFFICIENT = 1.0
PRESSURE_DIAGONAL    = 6.0

# ── Defaults ───────────────────────────────────────────────────────────────
DEFAULT_VISCOSITY          = 0.00001
DEFAULT_DIFFUSION          = 0.0001
DEFAULT_DIFFUSE_ITERATIONS = 4
DEFAULT_PROJECT_ITERATIONS = 20


@dataclass(frozen=True)
class FluidParameters:
    """
    Physical and numerical parameters of a FluidGrid.

    Args:
        viscosity          : Velocity diffusion rate (0 = inviscid)
        diffusion          : Quantity diffusion rate (0 = no spreading)
        diffuse_iterations : Relaxation sweeps per diffusion solve
        project_iterations : Relaxation sweeps per pressure solve
        grid_scale         : Fixed grid-scale constant; None derives it from the grid size
        relaxation         : MODE_JACOBI or MODE_RED_BLACK
    """
    viscosity: float = DEFAULT_VISCOSITY
    diffusion: float = DEFAULT_DIFFUSION
    diffuse_iterations: int = DEFAULT_DIFFUSE_ITERATIONS
    project_iterations: int = DEFAULT_PROJECT_ITERATIONS
    grid_scale: Optional[float] = None
    relaxation: str = MODE_JACOBI

    def __post_init__(self):
        for name in ("viscosity", "diffusion"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be finite and non-negative, got {value}")
        for name in ("diffuse_iterations", "project_iterations"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Integral) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value}")
        if self.grid_scale is not None and not (math.isfinite(self.grid_scale) and self.grid_scale > 0):
            raise ValueError(f"grid_scale must be positive and finite, got {self.grid_scale}")
        if self.relaxation not in RELAXATION_MODES:
            raise ValueError(f"Unknown relaxation mode: {self.relaxation}. Use one of {RELAXATION_MODES}.")


@dataclass(frozen=True)
class SolidEdge:
    """Reflective wall."""


@dataclass(frozen=True)
class InletEdge:
    """
    Forced inflow.

    Args:
        speed            : Inflow speed along the inward normal
        injects_quantity : Seed quantity next to the edge every step
        amount           : Quantity added per step when seeding
        offset           : Cell index along the edge; None = edge centre
    """
    speed: float
    injects_quantity: bool = False
    amount: float = 1.0
    offset: Optional[int] = None

    def __post_init__(self):
        if not math.isfinite(self.speed):
            raise ValueError(f"Inlet speed must be finite, got {self.speed}")
        if not math.isfinite(self.amount):
            raise ValueError(f"Inlet amount must be finite, got {self.amount}")


@dataclass(frozen=True)
class OutletEdge:
    """Free outflow (zero normal-velocity gradient)."""


Edge = Union[SolidEdge, InletEdge, OutletEdge]


@dataclass(frozen=True)
class BoundaryParameters:
    """Per-edge tags. y grows downward, so `top` is the y=0 row."""
    top: Edge = field(default_factory=SolidEdge)
    bottom: Edge = field(default_factory=SolidEdge)
    left: Edge = field(default_factory=SolidEdge)
    right: Edge = field(default_factory=SolidEdge)

    def __post_init__(self):
        for name in ("top", "bottom", "left", "right"):
            edge = getattr(self, name)
            if not isinstance(edge, (SolidEdge, InletEdge, OutletEdge)):
                raise ValueError(f"{name} edge must be SolidEdge, InletEdge or OutletEdge, got {edge!r}")

    def edges(self):
        return (("top", self.top), ("bottom", self.bottom),
                ("left", self.left), ("right", self.right))
