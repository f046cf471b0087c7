"""Tests for the diffusion, advection and projection primitives."""

import numpy as np
import pytest

from plume import SimParams
from plume.advect import advect, dissipate
from plume.diffuse import diffuse, relax
from plume.grid import BOUNDARY_SCALAR, BOUNDARY_X, BOUNDARY_Y, compute_divergence, set_boundary
from plume.mixture import Coefficient
from plume.solver import project


def _blob(N, value=1.0):
    x = np.zeros((N + 2, N + 2))
    c = (N + 2) // 2
    x[c, c] = value
    return x


class TestDiffusion:
    """Implicit diffusion through the relaxation primitive."""

    def test_zero_diffusivity_copies(self):
        N = 8
        x0 = _blob(N, 5.0)
        x = np.zeros_like(x0)
        zeros = np.zeros_like(x0)
        diffuse(BOUNDARY_SCALAR, x, x0, Coefficient.MASS_DIFFUSIVITY,
                SimParams(length_scale=1.0, diffusion=0.0), zeros, zeros, dt=0.1)
        np.testing.assert_array_equal(x[1:-1, 1:-1], x0[1:-1, 1:-1])

    def test_spreads_to_neighbours(self):
        N = 8
        x0 = _blob(N, 5.0)
        x = np.zeros_like(x0)
        zeros = np.zeros_like(x0)
        diffuse(BOUNDARY_SCALAR, x, x0, Coefficient.MASS_DIFFUSIVITY,
                SimParams(length_scale=1.0, diffusion=0.01), zeros, zeros, dt=0.1)
        c = (N + 2) // 2
        assert x[c, c] < 5.0
        assert x[c, c + 1] > 0.0
        assert x[c + 1, c] > 0.0
        assert (x >= 0.0).all()

    def test_conserves_total_with_closed_walls(self):
        N = 8
        x0 = _blob(N, 5.0)
        x = np.zeros_like(x0)
        zeros = np.zeros_like(x0)
        params = SimParams(length_scale=1.0, diffusion=0.01, relaxation_iterations=60)
        diffuse(BOUNDARY_SCALAR, x, x0, Coefficient.MASS_DIFFUSIVITY,
                params, zeros, zeros, dt=0.1)
        assert x[1:-1, 1:-1].sum() == pytest.approx(5.0, rel=1e-8)

    def test_grid_units_match_box_of_side_N(self):
        N = 8
        x0 = _blob(N, 5.0)
        zeros = np.zeros_like(x0)
        grid_units, explicit = np.zeros_like(x0), np.zeros_like(x0)
        diffuse(BOUNDARY_SCALAR, grid_units, x0, Coefficient.MASS_DIFFUSIVITY,
                SimParams(diffusion=0.5), zeros, zeros, dt=0.1)
        diffuse(BOUNDARY_SCALAR, explicit, x0, Coefficient.MASS_DIFFUSIVITY,
                SimParams(length_scale=8.0, diffusion=0.5), zeros, zeros, dt=0.1)
        np.testing.assert_array_equal(grid_units, explicit)
        assert grid_units[(N + 2) // 2, (N + 2) // 2] < 5.0

    def test_relax_solves_poisson_system(self):
        # 4x - sum(neighbours) = rhs with zero-gradient walls: residual shrinks
        N = 6
        rhs = np.zeros((N + 2, N + 2))
        rhs[2, 2], rhs[5, 5] = 1.0, -1.0
        x = np.zeros_like(rhs)
        relax(x, rhs, 1.0, 4.0, BOUNDARY_SCALAR, 400)
        residual = (4.0 * x[1:-1, 1:-1]
                    - x[1:-1, :-2] - x[1:-1, 2:] - x[:-2, 1:-1] - x[2:, 1:-1]
                    - rhs[1:-1, 1:-1])
        assert np.abs(residual).max() < 1e-6


class TestAdvection:
    """Semi-Lagrangian transport."""

    def test_zero_velocity_is_identity(self):
        N = 8
        rng = np.random.default_rng(1)
        d0 = rng.uniform(size=(N + 2, N + 2))
        d = np.zeros_like(d0)
        zeros = np.zeros_like(d0)
        advect(BOUNDARY_SCALAR, d, d0, zeros, zeros, dt=0.5)
        np.testing.assert_array_equal(d[1:-1, 1:-1], d0[1:-1, 1:-1])

    def test_uniform_flow_shifts_by_one_cell(self):
        # dt · N · u = 1 cell per step
        N = 10
        rng = np.random.default_rng(2)
        d0 = rng.uniform(size=(N + 2, N + 2))
        d = np.zeros_like(d0)
        u = np.ones_like(d0)
        v = np.zeros_like(d0)
        advect(BOUNDARY_SCALAR, d, d0, u, v, dt=0.1)
        np.testing.assert_allclose(d[1:-1, 2:-1], d0[1:-1, 1:-2])

    def test_huge_timestep_stays_bounded(self):
        N = 8
        rng = np.random.default_rng(3)
        d0 = rng.uniform(size=(N + 2, N + 2))
        d = np.zeros_like(d0)
        u = rng.normal(size=d0.shape)
        v = rng.normal(size=d0.shape)
        advect(BOUNDARY_SCALAR, d, d0, u, v, dt=1000.0)
        assert d.min() >= d0.min() - 1e-12
        assert d.max() <= d0.max() + 1e-12

    def test_dissipation_is_exponential(self):
        x = np.full((4, 4), 2.0)
        dissipate(x, 0.5, 2.0)
        np.testing.assert_allclose(x, 2.0 * np.exp(-1.0))

    def test_zero_rate_leaves_field_alone(self):
        x = np.full((4, 4), 2.0)
        dissipate(x, 0.0, 2.0)
        np.testing.assert_array_equal(x, 2.0)


class TestProjection:
    """Hodge projection removes the gradient part of a velocity field."""

    N = 16

    @pytest.fixture
    def gradient_field(self, cell_centers):
        # u = ∇φ with φ = cos(πx)·cos(πy): pure gradient, wall-compatible
        x, y = cell_centers(self.N)
        u = -np.pi * np.sin(np.pi * x) * np.cos(np.pi * y)
        v = -np.pi * np.cos(np.pi * x) * np.sin(np.pi * y)
        set_boundary(BOUNDARY_X, u)
        set_boundary(BOUNDARY_Y, v)
        return u, v

    def _projected_divergence(self, u, v, iterations):
        u, v = u.copy(), v.copy()
        p, div = np.zeros_like(u), np.zeros_like(u)
        project(u, v, p, div, iterations)
        return np.abs(compute_divergence(u, v, 1.0 / self.N)).mean()

    def test_divergence_decreases_with_iterations(self, gradient_field):
        u, v = gradient_field
        before = np.abs(compute_divergence(u, v, 1.0 / self.N)).mean()
        few = self._projected_divergence(u, v, 5)
        many = self._projected_divergence(u, v, 80)
        assert many < few < before
        assert many < 0.2 * before

    def test_divergence_free_field_is_kept(self, cell_centers):
        # Stream function ψ = sin(πx)·sin(πy) gives a closed vortex
        x, y = cell_centers(self.N)
        u = np.pi * np.sin(np.pi * x) * np.cos(np.pi * y)
        v = -np.pi * np.cos(np.pi * x) * np.sin(np.pi * y)
        set_boundary(BOUNDARY_X, u)
        set_boundary(BOUNDARY_Y, v)
        u_before = u.copy()
        project(u, v, np.zeros_like(u), np.zeros_like(u), 40)
        np.testing.assert_allclose(u[1:-1, 1:-1], u_before[1:-1, 1:-1], atol=0.05)

    def test_returns_metrics(self, gradient_field):
        u, v = (a.copy() for a in gradient_field)
        metrics = project(u, v, np.zeros_like(u), np.zeros_like(u), 20)
        assert metrics["iterations"] == 20
        assert metrics["divergence_after_max"] < metrics["divergence_before_max"]
