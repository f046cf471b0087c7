"""
grid.py — Field Store on a Collocated Grid with a Ghost Ring
=============================================================
The foundation of the entire simulation.

Layout:
  - N interior cells per axis plus a one-cell boundary ring → (N+2)² cells
  - Every field is one flat contiguous array of length (N+2)²
  - Linear index of cell (i, j) is  i + (N+2)·j   (i along x, j along y, y up)
  - `view()` reshapes a flat buffer to 2-D as  grid[j, i]  without copying

Three generations per channel:
  current  → authoritative state after the last step
  previous → scratch input for diffusion/advection (and projection)
  source   → staged rates, consumed and cleared by the next step

Alongside them sits `held`, the staged temperature targets of heat and gas
sources (NaN where nothing is held). The next step assigns them instead of
adding, so a covered cell sits at the source temperature and never above.

All buffers are float64, not float32: relaxation sweeps and source
accumulation run over many frames at full precision.
"""

from enum import Enum

import numpy as np


class Channel(Enum):
    """The four simulated quantities."""
    X_VELOCITY = "x_velocity"
    Y_VELOCITY = "y_velocity"
    DENSITY = "density"
    TEMPERATURE = "temperature"


# Boundary kinds for set_boundary
BOUNDARY_SCALAR = 0
BOUNDARY_X = 1
BOUNDARY_Y = 2


def set_boundary(b: int, x: np.ndarray):
    """
    Fill the ghost ring of a 2-D [j, i] field in-place.

    - b=1: x-velocity is negated across the left/right walls
    - b=2: y-velocity is negated across the bottom/top walls
    - otherwise the nearest interior value is copied (zero gradient)

    Corners become the average of their two edge neighbours.
    """
    x[1:-1, 0] = -x[1:-1, 1] if b == BOUNDARY_X else x[1:-1, 1]
    x[1:-1, -1] = -x[1:-1, -2] if b == BOUNDARY_X else x[1:-1, -2]
    x[0, 1:-1] = -x[1, 1:-1] if b == BOUNDARY_Y else x[1, 1:-1]
    x[-1, 1:-1] = -x[-2, 1:-1] if b == BOUNDARY_Y else x[-2, 1:-1]

    x[0, 0] = 0.5 * (x[0, 1] + x[1, 0])
    x[0, -1] = 0.5 * (x[0, -2] + x[1, -1])
    x[-1, 0] = 0.5 * (x[-1, 1] + x[-2, 0])
    x[-1, -1] = 0.5 * (x[-1, -2] + x[-2, -1])


def compute_divergence(u: np.ndarray, v: np.ndarray, h: float) -> np.ndarray:
    """
    Central-difference divergence du/dx + dv/dy on the interior cells.

    Returns an (N, N) array. For an incompressible fluid this should be ~0.
    """
    return 0.5 * (
        (u[1:-1, 2:] - u[1:-1, :-2]) +
        (v[2:, 1:-1] - v[:-2, 1:-1])
    ) / h


class FieldStore:
    """
    All buffers of one simulation instance.
    Owned exclusively by a Simulation; other code goes through its methods.
    """

    def __init__(self, N: int):
        if N <= 0:
            raise ValueError(f"Grid resolution must be positive, got N={N}")

        self.N = N
        self.size = (N + 2) * (N + 2)

        self.current = {ch: np.zeros(self.size, dtype=np.float64) for ch in Channel}
        self.previous = {ch: np.zeros(self.size, dtype=np.float64) for ch in Channel}
        self.source = {ch: np.zeros(self.size, dtype=np.float64) for ch in Channel}
        self.held = np.full(self.size, np.nan)

    def IX(self, i: int, j: int) -> int:
        """Linear index of cell (i, j), both in [0, N+1]."""
        n = self.N + 1
        if not (0 <= i <= n and 0 <= j <= n):
            raise IndexError(f"Cell ({i}, {j}) outside the {n + 1}x{n + 1} grid")
        return i + (self.N + 2) * j

    def check_index(self, index):
        """Raise IndexError unless every linear index lies in [0, size)."""
        idx = np.asarray(index)
        if idx.size and (idx.min() < 0 or idx.max() >= self.size):
            raise IndexError(f"Linear index out of range [0, {self.size})")
        return idx

    def view(self, buffer: np.ndarray) -> np.ndarray:
        """2-D [j, i] view sharing memory with a flat buffer."""
        return buffer.reshape(self.N + 2, self.N + 2)

    def clear_sources(self):
        for arr in self.source.values():
            arr[:] = 0.0
        self.held[:] = np.nan

    def reset(self):
        """Zero out all fields. Useful for running multiple simulations."""
        for generation in (self.current, self.previous, self.source):
            for arr in generation.values():
                arr[:] = 0.0
        self.held[:] = np.nan

    def __repr__(self):
        d = self.current[Channel.DENSITY]
        return f"FieldStore(N={self.N}, size={self.size}, density_sum={d.sum():.2f})"
