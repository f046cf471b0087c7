"""
solver.py — Pressure Projection
================================
The pressure projection step enforces INCOMPRESSIBILITY:
  div(v) = 0 everywhere

Diffusion and advection leave the velocity field with some divergence
(fluid "piles up" in some cells). We fix this by:
  1. Computing divergence of the current velocity field
  2. Solving the Poisson equation for a potential: ∇²p = div(v)
  3. Subtracting the potential gradient from velocity: v = v - ∇p

This is the Helmholtz-Hodge decomposition: any vector field splits into a
divergence-free part + a curl-free part (gradient). We keep the first one.

The Poisson solve reuses the relaxation sweep from diffuse.py.
"""

import numpy as np

from .diffuse import relax
from .grid import BOUNDARY_SCALAR, BOUNDARY_X, BOUNDARY_Y, compute_divergence, set_boundary


def project(u: np.ndarray, v: np.ndarray, p: np.ndarray, div: np.ndarray,
            iterations: int, length_scale: float = 1.0) -> dict:
    """
    Make (u, v) divergence-free in-place.

    Args:
        u, v         : 2-D [j, i] velocity components (modified in-place)
        p, div       : Scratch fields of the same shape (overwritten)
        iterations   : Relaxation sweeps for the Poisson solve
        length_scale : Physical side length of the box

    Returns:
        dict with divergence metrics before and after (for benchmarking)
    """
    N = u.shape[0] - 2
    h = length_scale / N

    div_before = compute_divergence(u, v, h)

    div[1:-1, 1:-1] = -h * h * div_before
    p[:] = 0.0
    set_boundary(BOUNDARY_SCALAR, div)
    set_boundary(BOUNDARY_SCALAR, p)

    relax(p, div, 1.0, 4.0, BOUNDARY_SCALAR, iterations)

    # Subtract ∇p (central differences)
    u[1:-1, 1:-1] -= 0.5 * (p[1:-1, 2:] - p[1:-1, :-2]) / h
    v[1:-1, 1:-1] -= 0.5 * (p[2:, 1:-1] - p[:-2, 1:-1]) / h
    set_boundary(BOUNDARY_X, u)
    set_boundary(BOUNDARY_Y, v)

    div_after = compute_divergence(u, v, h)

    return {
        "iterations"            : iterations,
        "divergence_before_max" : float(np.abs(div_before).max()),
        "divergence_after_max"  : float(np.abs(div_after).max()),
        "divergence_after_mean" : float(np.abs(div_after).mean()),
    }
