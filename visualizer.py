"""
visualizer.py — 2-D Fluid Viewer
=================================
Renders a FluidGrid with matplotlib:
  - DENSITY_COLOR  → dye as colour (RGB channels, or a colormap for 1 channel)
  - DENSITY_GRAY   → dye averaged over channels as grayscale
  - VELOCITY_GRAY  → squared speed as grayscale

Optional overlay: velocity arrows coloured by speed (slow → fast).

All display settings live in a DisplayConfig value owned by the viewer;
the solver never sees them.
"""

from dataclasses import dataclass, field

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.colors import LinearSegmentedColormap, to_rgb

# Display modes
DENSITY_COLOR = "DENSITY_COLOR"
DENSITY_GRAY  = "DENSITY_GRAY"
VELOCITY_GRAY = "VELOCITY_GRAY"

DISPLAY_MODES = (DENSITY_COLOR, DENSITY_GRAY, VELOCITY_GRAY)

# Smoke colormap: black → orange → white
SMOKE_COLORS = ["#000000", "#1a0a00", "#ff6a00", "#ffffff"]


@dataclass(frozen=True)
class DisplayConfig:
    """
    Args:
        mode          : One of DISPLAY_MODES
        show_vectors  : Overlay velocity arrows
        show_fps      : Put FPS in the title
        fill_screen   : Stretch cells to the window instead of keeping them square
        vector_stride : Draw one arrow every N cells
        speed_colors  : Arrow colours for slow / medium / fast cells
        velocity_clip : Velocity components are clamped to ±this before VELOCITY_GRAY
    """
    mode: str = DENSITY_COLOR
    show_vectors: bool = False
    show_fps: bool = True
    fill_screen: bool = False
    vector_stride: int = 4
    speed_colors: tuple = ("#80ff2b", "#ffd429", "#ff3729")
    velocity_clip: float = 100.0
    colormap: LinearSegmentedColormap = field(
        default_factory=lambda: LinearSegmentedColormap.from_list("smoke", SMOKE_COLORS)
    )

    def __post_init__(self):
        if self.mode not in DISPLAY_MODES:
            raise ValueError(f"Unknown display mode: {self.mode}. Use one of {DISPLAY_MODES}.")


def frame_image(grid, config: DisplayConfig) -> np.ndarray:
    """
    Map the grid's buffers to an RGB image.

    Returns: (height, width, 3) float array in [0, 1]; row = y, column = x.
    """
    index = grid.index

    if config.mode == VELOCITY_GRAY:
        vx = np.clip(grid.vel_x, -config.velocity_clip, config.velocity_clip)
        vy = np.clip(grid.vel_y, -config.velocity_clip, config.velocity_clip)
        gray = np.clip(index.view(vx * vx + vy * vy), 0.0, 1.0)
        return np.repeat(gray[:, :, np.newaxis], 3, axis=2)

    dye = index.view(grid.quantity)

    if config.mode == DENSITY_GRAY:
        gray = dye.mean(axis=2) if dye.ndim == 3 else dye
        return np.repeat(np.clip(gray, 0.0, 1.0)[:, :, np.newaxis], 3, axis=2)

    # DENSITY_COLOR
    if dye.ndim == 3 and dye.shape[2] >= 3:
        return np.clip(dye[:, :, :3], 0.0, 1.0)
    gray = dye.mean(axis=2) if dye.ndim == 3 else dye
    return config.colormap(np.clip(gray, 0.0, 1.0))[:, :, :3]


def speed_colors(speed: np.ndarray, config: DisplayConfig) -> np.ndarray:
    """
    Colour per arrow: thirds of the current max speed map to slow/medium/fast.
    Returns (n, 3) RGB.
    """
    palette = np.array([to_rgb(c) for c in config.speed_colors])
    top = speed.max()
    if top <= 0:
        return np.repeat(palette[:1], speed.size, axis=0)
    bucket = np.minimum((speed / top * len(palette)).astype(int), len(palette) - 1)
    return palette[bucket.ravel()]


class FluidVisualizer:
    """
    Real-time viewer of a FluidSimulation.

    Usage (standalone):
        from flowbox import FluidSimulation
        from visualizer import FluidVisualizer

        sim = FluidSimulation(96, 64)
        sim.add_spinning_source(48, 32)
        viz = FluidVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation, config: DisplayConfig = None, dt: float = 1 / 30):
        self.sim = simulation
        self.config = config if config is not None else DisplayConfig()
        self.dt = dt
        self.quiver = None

        self._setup_figure()

    def _setup_figure(self):
        g = self.sim.grid
        self.fig, self.ax = plt.subplots(figsize=(10, 10 * g.height / g.width))
        self.fig.patch.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])

        self.img = self.ax.imshow(
            frame_image(g, self.config),
            interpolation='bilinear',
            origin='upper',
            aspect='auto' if self.config.fill_screen else 'equal',
        )

        if self.config.show_vectors:
            s = self.config.vector_stride
            ys, xs = np.mgrid[1:g.height - 1:s, 1:g.width - 1:s]
            self._arrow_cells = g.index.index(xs, ys).ravel()
            self.quiver = self.ax.quiver(xs.ravel(), ys.ravel(),
                                         np.zeros(xs.size), np.zeros(xs.size),
                                         angles='xy', scale_units='xy', scale=None)

        self.title_text = self.ax.set_title("Frame 0", color='#cccccc',
                                            fontsize=10, fontfamily='monospace')

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and redraws."""
        metrics = self.sim.step(self.dt)
        g = self.sim.grid

        self.img.set_data(frame_image(g, self.config))
        artists = [self.img, self.title_text]

        if self.quiver is not None:
            u = g.vel_x[self._arrow_cells]
            # angles='xy' follows the image's inverted y axis, so +v points down
            v = g.vel_y[self._arrow_cells]
            self.quiver.set_UVC(u, v)
            self.quiver.set_color(speed_colors(np.hypot(u, v), self.config))
            artists.append(self.quiver)

        title = f"Frame {metrics['frame']} | {metrics['mode']}"
        if self.config.show_fps:
            title += f" | {metrics['fps']:.1f} FPS"
        title += f" | div_max={metrics['divergence_max']:.5f}"
        self.title_text.set_text(title)

        return artists

    def run(self, fps: int = 30, frames: int = 1000):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render
        """
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=1000 // fps,
            blit=False,
        )
        plt.show()
