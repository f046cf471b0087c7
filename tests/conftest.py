"""Pytest configuration and fixtures for the plume simulator tests."""

import numpy as np
import pytest

from plume import SimParams, Simulation, SourceManager


@pytest.fixture
def default_params():
    """The documented default preset."""
    return SimParams()


@pytest.fixture
def unit_params():
    """Default preset in a unit box (cell size 1/N)."""
    return SimParams(length_scale=1.0)


@pytest.fixture
def still_params():
    """Unit box, no gravity: velocity stays zero unless something pushes it."""
    return SimParams(length_scale=1.0, gravity_enabled=False)


@pytest.fixture
def small_sim(unit_params):
    """A 10x10 simulation in a unit box (cell size 0.1)."""
    return Simulation(10, unit_params)


@pytest.fixture
def small_sources(small_sim):
    return SourceManager(small_sim)


@pytest.fixture
def cell_centers():
    """Factory for physical cell-center coordinates on the full (N+2)² grid."""
    def _centers(N, length_scale=1.0):
        h = length_scale / N
        coords = (np.arange(N + 2) - 0.5) * h
        y, x = np.meshgrid(coords, coords, indexing="ij")
        return x, y
    return _centers
