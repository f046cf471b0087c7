"""
forces.py — External Forces (Staged Sources, Buoyancy)
======================================================
Applies body forces and staged source rates to a field each timestep.

Buoyancy is the most important one: hot smoke rises because warm air is
less dense than cool air, and heavy gas sinks. The force comes from the
mixture model (see mixture.py):

  F_buoyancy = g · (ρ_air - ρ_mix) / ρ_mix,air

applied as an upward acceleration on the y-velocity component.
"""

import numpy as np

from .mixture import buoyancy
from .params import SimParams


def add_source(x: np.ndarray, s: np.ndarray, dt: float):
    """x += dt · s  (sources are rates per second)."""
    x += dt * s


def apply_buoyancy(v: np.ndarray, density: np.ndarray, temperature: np.ndarray,
                   params: SimParams, dt: float):
    """
    Add dt · buoyancy to the y-velocity of every interior cell.

    Modifies: v (in-place)
    """
    force = buoyancy(params, density[1:-1, 1:-1], temperature[1:-1, 1:-1])
    v[1:-1, 1:-1] += dt * force
