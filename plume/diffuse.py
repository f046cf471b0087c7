"""
diffuse.py — Implicit Diffusion via Red-Black Gauss-Seidel
===========================================================
Diffusion makes fluids spread out over time.
  - High diffusion  → density spreads fast (watercolor bleed)
  - Low diffusion   → density stays tight (laser-focused smoke column)
  - High viscosity  → thick fluid (honey)
  - Low viscosity   → thin fluid (air)

The math: solve the implicit heat equation
  (I - a·∇²) x_new = x_old

with a = dt · D · N² / L²  (D may vary per cell, L = length scale).

Implicit diffusion is unconditionally stable, so large dt never blows up.

We relax the system with Gauss-Seidel sweeps in red-black (checkerboard)
order: all "red" cells are updated from their black neighbours, then all
"black" cells from the freshly updated red ones. Each half-sweep is a plain
NumPy slice expression, and the result matches ordinary Gauss-Seidel
convergence. Boundaries are reapplied after every sweep.

The same relaxation solves the pressure Poisson equation in solver.py.
"""

import numpy as np

from .grid import set_boundary
from .mixture import Coefficient, coefficient
from .params import SimParams


def _checkerboard(n: int) -> np.ndarray:
    jj, ii = np.indices((n, n))
    return (ii + jj) % 2 == 0


def relax(x: np.ndarray, x0: np.ndarray, a, c, b: int, iterations: int):
    """
    Gauss-Seidel relaxation for:  c·x - a·(sum of 4 neighbours) = x0

    Args:
        x          : 2-D [j, i] field, refined in-place (initial guess)
        x0         : Right-hand side, same shape
        a, c       : Scalars or (N, N) interior arrays
        b          : Boundary kind passed to set_boundary
        iterations : Number of full (red + black) sweeps
    """
    red = _checkerboard(x.shape[0] - 2)
    interior = x[1:-1, 1:-1]

    for _ in range(iterations):
        for mask in (red, ~red):
            neighbors = (
                x[1:-1, :-2] +   # i-1
                x[1:-1, 2:] +    # i+1
                x[:-2, 1:-1] +   # j-1
                x[2:, 1:-1]      # j+1
            )
            updated = (x0[1:-1, 1:-1] + a * neighbors) / c
            interior[mask] = updated[mask]

        set_boundary(b, x)


def diffuse(b: int, x: np.ndarray, x0: np.ndarray, kind: Coefficient,
            params: SimParams, density: np.ndarray, temperature: np.ndarray,
            dt: float):
    """
    Diffuse x0 into x with the diffusivity selected by `kind`.

    `density` and `temperature` are the 2-D fields the mixture model reads
    when advanced coefficients are enabled.

    Modifies: x (in-place)
    """
    N = x.shape[0] - 2
    D = coefficient(kind, params, density, temperature)
    if np.ndim(D):
        D = D[1:-1, 1:-1]

    L = params.box_size(N)
    a = dt * D * N * N / (L * L)

    if not np.any(a):
        # Nothing to spread: the solve reduces to a copy
        np.copyto(x, x0)
        set_boundary(b, x)
        return

    relax(x, x0, a, 1.0 + 4.0 * a, b, params.relaxation_iterations)
