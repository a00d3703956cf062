"""
main.py — Entry Point
======================
Runs the 2-D fluid solver in one of three modes.

Usage:
    python main.py                    # Headless run, prints stats (default)
    python main.py --mode live        # Live matplotlib window
    python main.py --mode benchmark   # Per-stage timing breakdown
"""

import argparse

import numpy as np

from flowbox import FluidSimulation, MODE_JACOBI, MODE_RED_BLACK

DT = 1 / 30


def _make_simulation(args) -> FluidSimulation:
    sim = FluidSimulation(
        args.width, args.height,
        viscosity=args.viscosity,
        diffusion=args.diffusion,
        project_iterations=args.iterations,
        channels=args.channels,
        relaxation=args.relaxation,
    )
    amount = 0.5 if args.channels == 1 else [0.5] + [0.2] * (args.channels - 1)
    sim.add_spinning_source(args.width // 2, args.height // 2,
                            amount=amount, magnitude=args.force)
    return sim


def run_live(args):
    """Live interactive visualization."""
    from visualizer import DisplayConfig, FluidVisualizer

    print(f"Starting live simulation ({args.width}x{args.height})...")
    print("Close the window to exit.\n")

    sim = _make_simulation(args)
    viz = FluidVisualizer(sim, DisplayConfig(mode=args.display, show_vectors=args.vectors,
                                             fill_screen=args.fill), dt=DT)
    viz.run(fps=30, frames=args.frames)


def run_headless(args):
    """Run simulation without display — prints stats every 10 frames."""
    print(f"\nHeadless simulation | {args.width}x{args.height} | {args.frames} frames")
    print(f"{'─'*60}")

    sim = _make_simulation(args)
    total_times = []

    for f in range(args.frames):
        metrics = sim.step(DT)
        sim.grid.scale_quantity(args.fade)
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"quantity={metrics['quantity_total']:.1f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    sim.print_status()


def run_benchmark(args):
    """Per-stage timing breakdown of the step pipeline."""
    print(f"\n{'='*60}")
    print(f"  SOLVER BENCHMARK | {args.width}x{args.height} | {args.frames} frames | {args.relaxation}")
    print(f"{'='*60}")

    sim = _make_simulation(args)

    # Warm up
    for _ in range(5):
        sim.step(DT)

    logs = [sim.step(DT) for _ in range(args.frames)]

    keys = ["sources_ms", "diffuse_vel_ms", "project1_ms", "advect_vel_ms",
            "project2_ms", "diffuse_qty_ms", "advect_qty_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.2f}ms {np.min(vals):>7.2f}ms {np.max(vals):>7.2f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (solver only): {1000/np.mean(total_vals):.1f}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="2D Stable-Fluids solver")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--width",      type=int,   default=150,  help="Grid width in cells (default: 150)")
    parser.add_argument("--height",     type=int,   default=75,   help="Grid height in cells (default: 75)")
    parser.add_argument("--frames",     type=int,   default=100,  help="Number of frames")
    parser.add_argument("--iterations", type=int,   default=20,   help="Pressure relaxation sweeps")
    parser.add_argument("--channels",   type=int,   default=3,    help="Dye channels (1 = gray, 3 = RGB)")
    parser.add_argument("--viscosity",  type=float, default=0.00001)
    parser.add_argument("--diffusion",  type=float, default=0.0001)
    parser.add_argument("--force",      type=float, default=5.0, help="Emitter jet speed")
    parser.add_argument("--fade",       type=float, default=0.99, help="Dye decay per frame (headless)")
    parser.add_argument("--relaxation", choices=[MODE_JACOBI, MODE_RED_BLACK], default=MODE_JACOBI)
    parser.add_argument("--display",    choices=["DENSITY_COLOR", "DENSITY_GRAY", "VELOCITY_GRAY"],
                        default="DENSITY_COLOR", help="Live view mode")
    parser.add_argument("--vectors",    action="store_true", help="Overlay velocity arrows (live)")
    parser.add_argument("--fill",       action="store_true", help="Stretch cells to fill the window (live)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.mode == "live":
        run_live(args)
    elif args.mode == "headless":
        run_headless(args)
    elif args.mode == "benchmark":
        run_benchmark(args)


if __name__ == "__main__":
    main()
