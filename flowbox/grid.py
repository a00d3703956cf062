"""
grid.py — The Fluid Grid
=========================
The single source of truth for the simulation: owns every buffer and the
fixed step pipeline.

Buffers (all flat, length width*height, same offset = same cell):
  vel_x,  vel_y     → velocity the renderer reads
  vel_x0, vel_y0    → scratch: source accumulator between ticks, solve
                      target during a tick
  quantity          → transported dye; (cells,) grayscale or (cells, C) colour
  quantity0         → its scratch twin
  pressure          → last pressure solve
  divergence        → divergence the last pressure solve removed

One tick, as driven by the outer loop:

    grid.add_velocity(...)   # any number of times
    grid.add_quantity(...)
    grid.step(dt)
    draw(grid.quantity)      # re-fetch after every step

Pipeline inside step(dt), following Stam's "Stable Fluids":
  0. Fold accumulated sources into the live fields
  1. Diffuse velocity X, then Y                 (viscosity)
  2. Project                                    (incompressibility)
  3. Advect velocity X and Y                    (self-advection)
  4. Project again                              (clean up post-advection divergence)
  5. Diffuse quantity                           (dye spreading)
  6. Advect quantity                            (dye movement)

Both projections are required. A single projection with twice the sweeps
is not equivalent.
"""

import math
import time

import numpy as np

from .advect import advect
from .boundary import BoundaryEnforcer
from .config import (BoundaryParameters, FluidParameters, SCALAR, NORMAL_X, NORMAL_Y,
                     DEFAULT_VISCOSITY, DEFAULT_DIFFUSION,
                     DEFAULT_DIFFUSE_ITERATIONS, DEFAULT_PROJECT_ITERATIONS, MODE_JACOBI)
from .diffuse import diffuse
from .index import GridIndex
from .solver import project, divergence_of


class FluidGrid:
    """
    2-D Stable-Fluids grid.

    Usage:
        grid = FluidGrid(64, 64)
        grid.add_quantity(32, 32, 1.0)
        grid.add_velocity(32, 32, 0.0, -5.0)
        grid.step(1 / 30)
        dye = grid.quantity
    """

    _BUFFERS = ("vel_x", "vel_y", "vel_x0", "vel_y0",
                "quantity", "quantity0", "pressure", "divergence")

    def __init__(self, width: int, height: int,
                 viscosity: float = DEFAULT_VISCOSITY,
                 diffusion: float = DEFAULT_DIFFUSION,
                 diffuse_iterations: int = DEFAULT_DIFFUSE_ITERATIONS,
                 project_iterations: int = DEFAULT_PROJECT_ITERATIONS,
                 boundary: BoundaryParameters = None,
                 channels: int = 1,
                 grid_scale: float = None,
                 relaxation: str = MODE_JACOBI):
        """
        Args:
            width, height      : Grid size in cells, ghost ring included (≥ 3)
            viscosity          : Fluid thickness (0 = inviscid like air, high = honey)
            diffusion          : How fast the quantity spreads (0 = no spreading)
            diffuse_iterations : Relaxation sweeps per diffusion solve
            project_iterations : Relaxation sweeps per pressure solve
            boundary           : Per-edge tags; None = solid box
            channels           : 1 = grayscale density, 3 = RGB colour, ...
            grid_scale         : Fixed scale constant; None = derived from grid size
            relaxation         : MODE_JACOBI or MODE_RED_BLACK
        """
        if int(channels) != channels or channels < 1:
            raise ValueError(f"channels must be a positive integer, got {channels}")
        if boundary is not None and not isinstance(boundary, BoundaryParameters):
            raise ValueError(f"boundary must be BoundaryParameters, got {type(boundary).__name__}")

        self.params = FluidParameters(
            viscosity=viscosity,
            diffusion=diffusion,
            diffuse_iterations=diffuse_iterations,
            project_iterations=project_iterations,
            grid_scale=grid_scale,
            relaxation=relaxation,
        )
        self.index = GridIndex(width, height, grid_scale)
        self.boundary = BoundaryEnforcer(self.index, boundary)
        self.channels = int(channels)

        # ── Velocity ───────────────────────────────────────────────────────
        self.vel_x  = self.index.allocate()
        self.vel_y  = self.index.allocate()
        self.vel_x0 = self.index.allocate()
        self.vel_y0 = self.index.allocate()

        # ── Transported quantity ───────────────────────────────────────────
        dye_channels = self.channels if self.channels > 1 else 0
        self.quantity  = self.index.allocate(dye_channels)
        self.quantity0 = self.index.allocate(dye_channels)

        # ── Projection scratch ─────────────────────────────────────────────
        self.pressure   = self.index.allocate()
        self.divergence = self.index.allocate()

        self.timings = {}

    @property
    def width(self) -> int:
        return self.index.width

    @property
    def height(self) -> int:
        return self.index.height

    # ── Parameters ────────────────────────────────────────────────────────

    def set_parameters(self, params: FluidParameters):
        """Swap the whole parameter set. grid_scale is fixed at construction."""
        if not isinstance(params, FluidParameters):
            raise ValueError(f"Expected FluidParameters, got {type(params).__name__}")
        if params.grid_scale != self.params.grid_scale:
            raise ValueError("grid_scale cannot change after construction")
        self.params = params

    # ── Sources ───────────────────────────────────────────────────────────

    def add_velocity(self, x: int, y: int, vx: float, vy: float):
        """
        Apply a velocity impulse at cell (x, y).
        Out-of-range coordinates clamp onto the nearest interior cell.
        """
        i = self.index.index(*self.index.clamp_interior(x, y))
        self.vel_x0[i] += vx
        self.vel_y0[i] += vy

    def add_velocity_polar(self, x: int, y: int, angle: float, magnitude: float):
        """Velocity impulse given as a direction (radians) and a speed."""
        self.add_velocity(x, y, math.cos(angle) * magnitude, math.sin(angle) * magnitude)

    def add_quantity(self, x: int, y: int, amount):
        """
        Inject quantity (dye) at cell (x, y).

        Args:
            x, y   : Cell indices (clamped onto the interior)
            amount : Scalar (added to every channel) or one value per channel
        """
        amount = np.asarray(amount, dtype=np.float64)
        if self.channels == 1 and amount.shape == (1,):
            amount = amount.reshape(())
        if amount.ndim != 0 and amount.shape != self.quantity0.shape[1:]:
            raise ValueError(
                f"amount must be a scalar or have shape {self.quantity0.shape[1:]}, got {amount.shape}"
            )
        i = self.index.index(*self.index.clamp_interior(x, y))
        self.quantity0[i] += amount

    def scale_quantity(self, factor: float):
        """Multiply every quantity cell by factor (decay < 1, boost > 1)."""
        self.quantity *= factor

    def scale_velocity(self, factor: float):
        """Multiply the whole velocity field by factor (damping)."""
        self.vel_x *= factor
        self.vel_y *= factor

    # ── Time stepping ─────────────────────────────────────────────────────

    def step(self, dt: float):
        """Advance the fluid by dt seconds. See module docstring for the pipeline."""
        if not (math.isfinite(dt) and dt > 0):
            raise ValueError(f"dt must be positive and finite, got {dt}")

        prm = self.params
        bnd = self.boundary
        mode = prm.relaxation
        timings = {}

        # ── Step 0: fold sources into the live fields ──────────────────────
        t0 = time.perf_counter()
        bnd.inject_inlets(self.quantity0)
        self.vel_x += self.vel_x0
        self.vel_y += self.vel_y0
        self.quantity += self.quantity0
        timings["sources_ms"] = (time.perf_counter() - t0) * 1000

        # ── Step 1: diffuse velocity (viscosity) ───────────────────────────
        t0 = time.perf_counter()
        diffuse(NORMAL_X, self.vel_x0, self.vel_x, prm.viscosity, dt,
                prm.diffuse_iterations, bnd, mode)
        diffuse(NORMAL_Y, self.vel_y0, self.vel_y, prm.viscosity, dt,
                prm.diffuse_iterations, bnd, mode)
        timings["diffuse_vel_ms"] = (time.perf_counter() - t0) * 1000

        # ── Step 2: project ────────────────────────────────────────────────
        t0 = time.perf_counter()
        project(self.vel_x0, self.vel_y0, self.pressure, self.divergence,
                prm.project_iterations, bnd, dt, mode)
        timings["project1_ms"] = (time.perf_counter() - t0) * 1000

        # ── Step 3: advect velocity (self-advection) ───────────────────────
        t0 = time.perf_counter()
        advect(NORMAL_X, self.vel_x, self.vel_x0, self.vel_x0, self.vel_y0, dt, bnd)
        advect(NORMAL_Y, self.vel_y, self.vel_y0, self.vel_x0, self.vel_y0, dt, bnd)
        timings["advect_vel_ms"] = (time.perf_counter() - t0) * 1000

        # ── Step 4: project again ──────────────────────────────────────────
        t0 = time.perf_counter()
        project(self.vel_x, self.vel_y, self.pressure, self.divergence,
                prm.project_iterations, bnd, dt, mode)
        timings["project2_ms"] = (time.perf_counter() - t0) * 1000

        # ── Step 5: diffuse quantity ───────────────────────────────────────
        t0 = time.perf_counter()
        diffuse(SCALAR, self.quantity0, self.quantity, prm.diffusion, dt,
                prm.diffuse_iterations, bnd, mode)
        timings["diffuse_qty_ms"] = (time.perf_counter() - t0) * 1000

        # ── Step 6: advect quantity through the projected velocity ─────────
        t0 = time.perf_counter()
        advect(SCALAR, self.quantity, self.quantity0, self.vel_x, self.vel_y, dt, bnd)
        timings["advect_qty_ms"] = (time.perf_counter() - t0) * 1000

        # Scratch buffers start the next tick empty, ready to collect sources
        self.vel_x0.fill(0.0)
        self.vel_y0.fill(0.0)
        self.quantity0.fill(0.0)

        self.timings = timings

    # ── Read access & diagnostics ─────────────────────────────────────────

    def velocity(self) -> tuple:
        """Live (vel_x, vel_y) buffers. Re-fetch after every step."""
        return self.vel_x, self.vel_y

    def interior(self, field: np.ndarray) -> np.ndarray:
        """(height-2, width-2, ...) view of the solved cells of a field."""
        return self.index.view(field)[1:-1, 1:-1]

    def compute_divergence(self) -> np.ndarray:
        """
        Divergence of the velocity field at interior cells.
        For an incompressible fluid this should be ~0 everywhere.
        """
        return divergence_of(self.vel_x, self.vel_y, self.index)

    def total_quantity(self):
        """Interior quantity sum (float, or one float per channel)."""
        total = self.interior(self.quantity).sum(axis=(0, 1))
        return float(total) if np.ndim(total) == 0 else total

    def save_state(self) -> dict:
        """Snapshot every buffer as independent copies."""
        return {name: getattr(self, name).copy() for name in self._BUFFERS}

    def load_state(self, state: dict):
        """
        Write buffers back from a snapshot (e.g. save_state() of a same-sized grid).
        Missing keys are left alone; a mismatched shape raises before anything is written.
        """
        unknown = set(state) - set(self._BUFFERS)
        if unknown:
            raise ValueError(f"Unknown buffers in state: {sorted(unknown)}")

        arrays = {}
        for name, value in state.items():
            arr = np.asarray(value, dtype=np.float64)
            expected = getattr(self, name).shape
            if arr.shape != expected:
                raise ValueError(f"{name}: expected shape {expected}, got {arr.shape}")
            arrays[name] = arr

        for name, arr in arrays.items():
            np.copyto(getattr(self, name), arr)

    def reset(self):
        """Zero out all fields."""
        for name in self._BUFFERS:
            getattr(self, name).fill(0.0)

    def __repr__(self):
        div = np.abs(self.compute_divergence()).max()
        speed = np.sqrt(self.vel_x ** 2 + self.vel_y ** 2).max()
        return (
            f"FluidGrid({self.width}x{self.height}, channels={self.channels})\n"
            f"  quantity  : max={self.quantity.max():.4f}, sum={np.sum(self.total_quantity()):.2f}\n"
            f"  velocity  : max_magnitude={speed:.4f}\n"
            f"  divergence: max={div:.6f} (target: ~0)"
        )
