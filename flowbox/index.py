"""
index.py — Flat Grid Indexing
==============================
Every field in the solver is a flat 1-D array of length width*height.
Cell (x, y) lives at offset x + y*width, row by row:

    y=0  : 0 1 2 ... w-1
    y=1  : w w+1 ...
    ...

The outer ring of cells (x=0, x=w-1, y=0, y=h-1) is the boundary layer.
Only the interior 1..w-2 × 1..h-2 is solved; the ring is rewritten by
boundary.py after every pass.
"""

import numpy as np


class GridIndex:
    """Maps (x, y) ↔ flat offset for a fixed width × height grid."""

    def __init__(self, width: int, height: int, grid_scale: float = None):
        if width < 3 or height < 3:
            raise ValueError(
                f"Grid must be at least 3x3 so an interior exists, got {width}x{height}"
            )
        if grid_scale is not None and not (np.isfinite(grid_scale) and grid_scale > 0):
            raise ValueError(f"grid_scale must be a positive finite number, got {grid_scale}")

        self.width = int(width)
        self.height = int(height)
        self.cell_count = self.width * self.height

        # Grid-space scaling: how many interior cells span one unit of length.
        # A fixed grid_scale replaces the size-derived value on both axes.
        self.scale_x = float(grid_scale) if grid_scale is not None else float(self.width - 2)
        self.scale_y = float(grid_scale) if grid_scale is not None else float(self.height - 2)

    @property
    def diffusion_scale(self) -> float:
        """Area factor applied to viscosity / diffusion rates."""
        return self.scale_x * self.scale_y

    def index(self, x, y):
        """
        Flat offset of cell (x, y), clamped into [0, cell_count-1].

        Works on plain ints and on integer numpy arrays (used by the
        advection stencil, which may land one cell past the edge).
        """
        i = np.clip(x + y * self.width, 0, self.cell_count - 1)
        if np.ndim(i) == 0:
            return int(i)
        return i

    def position(self, i: int) -> tuple:
        return i % self.width, i // self.width

    def clamp_interior(self, x: int, y: int) -> tuple:
        """Clamp a caller coordinate onto the nearest interior cell."""
        x = min(max(int(x), 1), self.width - 2)
        y = min(max(int(y), 1), self.height - 2)
        return x, y

    def view(self, field: np.ndarray) -> np.ndarray:
        """2-D (height, width, ...) view of a flat field. No copy."""
        return field.reshape((self.height, self.width) + field.shape[1:])

    def allocate(self, channels: int = 0) -> np.ndarray:
        """Zeroed field; channels=0 → flat scalar array, else (cells, channels)."""
        if channels:
            return np.zeros((self.cell_count, channels), dtype=np.float64)
        return np.zeros(self.cell_count, dtype=np.float64)

    def __repr__(self):
        return f"GridIndex({self.width}x{self.height}, scale=({self.scale_x}, {self.scale_y}))"
