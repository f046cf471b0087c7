"""
simulation.py — Master Physics Loop
====================================
The complete simulation step that ties everything together.
One call to `step(dt)` advances the fluid by dt seconds.

Physics pipeline per frame:
  1. Velocity: add wind sources + buoyancy, diffuse (viscosity),
     project, self-advect, project again
  2. Density: add gas sources, diffuse, advect, dissipate
  3. Temperature (optional): add energy sources, assign held source
     temperatures, diffuse, advect, dissipate
  4. Clear the staged source buffers

This is the ordering of Jos Stam's "Stable Fluids": diffuse → project →
advect → project for velocity, and dissipation after advection for the
scalars.
"""

import logging
import time

import numpy as np

from .advect import advect, dissipate
from .diffuse import diffuse
from .forces import add_source, apply_buoyancy
from .grid import BOUNDARY_SCALAR, BOUNDARY_X, BOUNDARY_Y, Channel, FieldStore, compute_divergence
from .mixture import Coefficient
from .params import SimParams
from .solver import project

log = logging.getLogger(__name__)


class Simulation:
    """
    The complete 2-D smoke/gas simulation.

    Usage:
        sim = Simulation(64)
        sources = SourceManager(sim)
        sources.create_gas_source(Shape.CIRCLE, 1.0, 400.0, 32.0, 6.0, 3.0)
        for frame in range(100):
            sources.update_sources()
            sim.step(0.1)
            density = sim.get_density()     # hand to a renderer
    """

    def __init__(self, N: int, params: SimParams = None):
        """
        Args:
            N      : Interior grid resolution (N x N cells plus a boundary ring)
            params : Physical constants and solver options (default preset if None)
        """
        self.params = params if params is not None else SimParams()
        self.fields = FieldStore(N)
        self.frame = 0
        self.perf_log = []   # stores timing data per frame

        log.info("Simulation created: N=%d, size=%d, iterations=%d",
                 N, self.fields.size, self.params.relaxation_iterations)

    # ── Grid geometry ─────────────────────────────────────────────────────

    @property
    def N(self) -> int:
        return self.fields.N

    @property
    def size(self) -> int:
        return self.fields.size

    @property
    def length_scale(self) -> float:
        """Side length of the box (N in grid units)."""
        return self.params.box_size(self.fields.N)

    @property
    def cell_size(self) -> float:
        """Physical width of one cell."""
        return self.length_scale / self.fields.N

    def IX(self, i: int, j: int) -> int:
        return self.fields.IX(i, j)

    # ── Field accessors ───────────────────────────────────────────────────

    def _read_only(self, channel: Channel) -> np.ndarray:
        view = self.fields.current[channel].view()
        view.flags.writeable = False
        return view

    def get_density(self) -> np.ndarray:
        """Read-only view of the current density; valid until the next step."""
        return self._read_only(Channel.DENSITY)

    def get_x_velocity(self) -> np.ndarray:
        return self._read_only(Channel.X_VELOCITY)

    def get_y_velocity(self) -> np.ndarray:
        return self._read_only(Channel.Y_VELOCITY)

    def get_temperature(self) -> np.ndarray:
        """Temperature excess over params.air_temperature (K)."""
        return self._read_only(Channel.TEMPERATURE)

    def divergence(self) -> np.ndarray:
        """Divergence of the current velocity on the interior, shape (N, N)."""
        F = self.fields
        return compute_divergence(F.view(F.current[Channel.X_VELOCITY]),
                                  F.view(F.current[Channel.Y_VELOCITY]),
                                  self.cell_size)

    # ── Source staging ────────────────────────────────────────────────────

    def set_sources(self, density, x_velocity, y_velocity, temperature):
        """
        Stage four full-grid rate arrays, each of length size (or shaped
        (N+2, N+2)). They are added to whatever is already staged.
        """
        staged = {
            Channel.DENSITY: density,
            Channel.X_VELOCITY: x_velocity,
            Channel.Y_VELOCITY: y_velocity,
            Channel.TEMPERATURE: temperature,
        }
        arrays = {}
        for channel, values in staged.items():
            arr = np.asarray(values, dtype=np.float64).reshape(-1)
            if arr.size != self.size:
                raise ValueError(
                    f"{channel.value} source has {arr.size} cells, expected {self.size}")
            arrays[channel] = arr

        for channel, arr in arrays.items():
            self.fields.source[channel] += arr

    def inject_source(self, channel, index, amount):
        """
        Add `amount` to the staged source of one channel at one or many
        linear indices. Repeated indices accumulate.
        """
        channel = Channel(channel)
        idx = self.fields.check_index(index)
        np.add.at(self.fields.source[channel], idx, amount)

    def hold_temperature(self, index, temperature):
        """
        Stage an absolute temperature that the next step assigns to the
        given cells, after the additive heat rates. Where several targets
        land on one cell the hottest wins.
        """
        idx = self.fields.check_index(index)
        excess = temperature - self.params.air_temperature
        np.fmax.at(self.fields.held, idx, excess)

    # ── Stepping ──────────────────────────────────────────────────────────

    def step(self, dt: float) -> dict:
        """
        Advance simulation by one timestep (dt seconds).

        dt is not clamped: large values stay stable but lose accuracy.

        Returns performance metrics dict for benchmarking.
        """
        t_total_start = time.perf_counter()
        p = self.params
        F = self.fields
        V = F.view
        iterations = p.relaxation_iterations
        L = self.length_scale

        u, v = V(F.current[Channel.X_VELOCITY]), V(F.current[Channel.Y_VELOCITY])
        u0, v0 = V(F.previous[Channel.X_VELOCITY]), V(F.previous[Channel.Y_VELOCITY])
        dens, dens0 = V(F.current[Channel.DENSITY]), V(F.previous[Channel.DENSITY])
        temp, temp0 = V(F.current[Channel.TEMPERATURE]), V(F.previous[Channel.TEMPERATURE])

        # ── Step 1: Forces (wind sources + buoyancy) ───────────────────────
        t0 = time.perf_counter()
        np.copyto(u0, u)
        np.copyto(v0, v)
        add_source(u0, V(F.source[Channel.X_VELOCITY]), dt)
        add_source(v0, V(F.source[Channel.Y_VELOCITY]), dt)
        if p.gravity_enabled:
            apply_buoyancy(v0, dens, temp, p, dt)
        t_forces = (time.perf_counter() - t0) * 1000

        # ── Step 2: Diffuse velocity (viscosity) ───────────────────────────
        t0 = time.perf_counter()
        diffuse(BOUNDARY_X, u, u0, Coefficient.VISCOSITY, p, dens, temp, dt)
        diffuse(BOUNDARY_Y, v, v0, Coefficient.VISCOSITY, p, dens, temp, dt)
        t_diffuse_vel = (time.perf_counter() - t0) * 1000

        # ── Step 3: Project (previous buffers double as p / div scratch) ───
        t0 = time.perf_counter()
        project(u, v, u0, v0, iterations, L)
        t_project1 = (time.perf_counter() - t0) * 1000

        # ── Step 4: Self-advect velocity ───────────────────────────────────
        t0 = time.perf_counter()
        np.copyto(u0, u)
        np.copyto(v0, v)
        advect(BOUNDARY_X, u, u0, u0, v0, dt, L)
        advect(BOUNDARY_Y, v, v0, u0, v0, dt, L)
        t_advect_vel = (time.perf_counter() - t0) * 1000

        # ── Step 5: Project again (clean up post-advection divergence) ─────
        t0 = time.perf_counter()
        proj_metrics = project(u, v, u0, v0, iterations, L)
        np.copyto(u0, u)
        np.copyto(v0, v)
        t_project2 = (time.perf_counter() - t0) * 1000

        # ── Step 6: Diffuse density (smoke spreading) ──────────────────────
        t0 = time.perf_counter()
        np.copyto(dens0, dens)
        add_source(dens0, V(F.source[Channel.DENSITY]), dt)
        diffuse(BOUNDARY_SCALAR, dens, dens0, Coefficient.MASS_DIFFUSIVITY, p, dens0, temp, dt)
        t_diffuse_den = (time.perf_counter() - t0) * 1000

        # ── Step 7: Advect + dissipate density ─────────────────────────────
        t0 = time.perf_counter()
        np.copyto(dens0, dens)
        advect(BOUNDARY_SCALAR, dens, dens0, u, v, dt, L)
        dissipate(dens, p.density_decay_rate, dt)
        t_advect_den = (time.perf_counter() - t0) * 1000

        # ── Step 8: Temperature (optional) ─────────────────────────────────
        t_diffuse_temp = t_advect_temp = 0.0
        if p.temperature_enabled:
            t0 = time.perf_counter()
            np.copyto(temp0, temp)
            add_source(temp0, V(F.source[Channel.TEMPERATURE]), dt)
            held = ~np.isnan(F.held)
            F.previous[Channel.TEMPERATURE][held] = F.held[held]
            diffuse(BOUNDARY_SCALAR, temp, temp0, Coefficient.THERMAL_DIFFUSIVITY,
                    p, dens, temp0, dt)
            t_diffuse_temp = (time.perf_counter() - t0) * 1000

            t0 = time.perf_counter()
            np.copyto(temp0, temp)
            advect(BOUNDARY_SCALAR, temp, temp0, u, v, dt, L)
            dissipate(temp, p.temperature_decay_rate, dt)
            t_advect_temp = (time.perf_counter() - t0) * 1000

        # Staged sources are consumed by this step
        F.clear_sources()

        # ── Frame bookkeeping ──────────────────────────────────────────────
        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000

        metrics = {
            "frame"            : self.frame,
            "total_ms"         : t_total,
            "fps"              : 1000.0 / t_total if t_total > 0 else 0,
            "forces_ms"        : t_forces,
            "diffuse_vel_ms"   : t_diffuse_vel,
            "project1_ms"      : t_project1,
            "advect_vel_ms"    : t_advect_vel,
            "project2_ms"      : t_project2,
            "diffuse_den_ms"   : t_diffuse_den,
            "advect_den_ms"    : t_advect_den,
            "diffuse_temp_ms"  : t_diffuse_temp,
            "advect_temp_ms"   : t_advect_temp,
            "divergence_max"   : proj_metrics["divergence_after_max"],
            "divergence_mean"  : proj_metrics["divergence_after_mean"],
            "density_total"    : float(dens[1:-1, 1:-1].sum()),
        }
        self.perf_log.append(metrics)
        log.debug("Frame %d: %.1fms, div_max=%.2e, density=%.3f",
                  self.frame, t_total, metrics["divergence_max"], metrics["density_total"])
        return metrics

    def reset(self):
        """Zero all fields and restart the frame counter."""
        self.fields.reset()
        self.frame = 0
        self.perf_log = []

    def print_status(self):
        """Pretty-print current simulation state."""
        F = self.fields
        dens = F.view(F.current[Channel.DENSITY])[1:-1, 1:-1]
        temp = F.view(F.current[Channel.TEMPERATURE])[1:-1, 1:-1]
        u = F.view(F.current[Channel.X_VELOCITY])[1:-1, 1:-1]
        v = F.view(F.current[Channel.Y_VELOCITY])[1:-1, 1:-1]
        div = self.divergence()
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  N: {self.N}")
        print(f"  Density    : max={dens.max():.4f}, total={dens.sum():.2f}")
        print(f"  Temperature: max={temp.max():.2f}K above ambient")
        print(f"  Velocity   : max_u={np.abs(u).max():.4f}, max_v={np.abs(v).max():.4f}")
        print(f"  Divergence : max={np.abs(div).max():.6f}, mean={np.abs(div).mean():.8f}")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf       : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")

    def __repr__(self):
        return f"Simulation(N={self.N}, frame={self.frame})"
