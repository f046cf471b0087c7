"""
main.py — Headless Driver
==========================
Runs the simulation the way an embedding application would: once per
frame, update sources, then step.

Usage:
    python main.py                      # Headless run, prints stats (default)
    python main.py --mode benchmark     # Per-stage timing breakdown
    python main.py --log-level DEBUG    # Per-frame log lines from the library
"""

import argparse
import logging

import numpy as np


def build_scene(N: int, iterations: int):
    """A hot gas plume at the bottom with a gentle cross wind."""
    from plume import Shape, SimParams, Simulation, SourceManager

    params = SimParams(length_scale=1.0, viscosity=1e-5, density_decay_rate=0.05,
                       temperature_decay_rate=0.1, relaxation_iterations=iterations)
    sim = Simulation(N, params)
    sources = SourceManager(sim)
    sources.create_gas_source(Shape.CIRCLE, flow_rate=3.0, temperature=400.0,
                              x_center=0.5, y_center=0.1, radius=0.05)
    sources.create_wind_source(Shape.SQUARE, angle=0.0, speed=0.5,
                               x_center=0.1, y_center=0.5, radius=0.05)
    return sim, sources


def run_headless(N: int = 64, frames: int = 100, dt: float = 0.1, iterations: int = 20):
    """Run simulation without display — prints stats each frame."""
    print(f"\nHeadless simulation | N={N} | {frames} frames")
    print(f"{'─'*60}")

    sim, sources = build_scene(N, iterations)
    total_times = []

    for f in range(frames):
        sources.update_sources()
        metrics = sim.step(dt)
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"density={metrics['density_total']:.2f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    sim.print_status()


def run_benchmark(N: int = 64, frames: int = 50, dt: float = 0.1, iterations: int = 20):
    """
    Detailed performance breakdown.
    Shows how long each physics stage takes.
    """
    print(f"\n{'='*60}")
    print(f"  PHYSICS BENCHMARK | N={N} | {frames} frames | {iterations} sweeps")
    print(f"{'='*60}")

    sim, sources = build_scene(N, iterations)

    # Warm up
    for _ in range(5):
        sources.update_sources()
        sim.step(dt)

    logs = []
    for _ in range(frames):
        sources.update_sources()
        logs.append(sim.step(dt))

    keys = ["forces_ms", "diffuse_vel_ms", "project1_ms",
            "advect_vel_ms", "project2_ms", "diffuse_den_ms",
            "advect_den_ms", "diffuse_temp_ms", "advect_temp_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (physics only): {1000/np.mean(total_vals):.1f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="2D Smoke and Gas Simulation")
    parser.add_argument(
        "--mode", choices=["headless", "benchmark"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--N",          type=int,   default=64,  help="Grid resolution (default: 64)")
    parser.add_argument("--frames",     type=int,   default=100, help="Number of frames")
    parser.add_argument("--dt",         type=float, default=0.1, help="Timestep in seconds")
    parser.add_argument("--iterations", type=int,   default=20,  help="Relaxation sweeps per solve")
    parser.add_argument("--log-level",  default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    if args.mode == "headless":
        run_headless(N=args.N, frames=args.frames, dt=args.dt, iterations=args.iterations)
    elif args.mode == "benchmark":
        run_benchmark(N=args.N, frames=args.frames, dt=args.dt, iterations=args.iterations)
