"""Tests for the air + gas mixture model and buoyancy."""

import numpy as np
import pytest

from plume import SimParams
from plume.mixture import (Coefficient, adjusted_mass_diffusivity, adjusted_thermal_diffusivity,
                           adjusted_viscosity, buoyancy, coefficient, mixed_density,
                           mixed_density_at_air_temp, mixed_temperature)


@pytest.fixture
def params():
    return SimParams(viscosity=1e-4, diffusion=2e-4, diffusivity_temperature=3e-4)


class TestMixture:

    def test_ambient_cell_is_plain_air(self, params):
        zero = np.zeros(3)
        np.testing.assert_allclose(mixed_temperature(params, zero, zero), params.air_temperature)
        np.testing.assert_allclose(mixed_density(params, zero, zero), params.air_density)
        np.testing.assert_allclose(buoyancy(params, zero, zero), 0.0)

    def test_gas_adds_mass(self, params):
        rho = mixed_density_at_air_temp(params, np.array([0.5]), np.array([0.0]))
        assert rho[0] == pytest.approx(params.air_density + params.mass_ratio * 0.5)

    def test_hot_air_rises(self, params):
        f = buoyancy(params, np.array([0.0]), np.array([100.0]))
        assert f[0] > 0.0

    def test_heavy_cold_gas_sinks(self, params):
        f = buoyancy(params, np.array([1.0]), np.array([0.0]))
        assert f[0] < 0.0

    def test_buoyancy_scales_with_gravity(self, params):
        strong = SimParams(gravity=2 * params.gravity)
        theta = np.array([50.0])
        zero = np.zeros(1)
        assert buoyancy(strong, zero, theta)[0] == pytest.approx(2 * buoyancy(params, zero, theta)[0])

    def test_temperature_floor(self, params):
        T = mixed_temperature(params, np.zeros(1), np.array([-1e6]))
        assert T[0] > 0.0
        assert np.isfinite(mixed_density(params, np.zeros(1), np.array([-1e6]))).all()


class TestAdjustedCoefficients:

    def test_constants_when_disabled(self, params):
        density = np.ones((4, 4))
        temperature = np.full((4, 4), 80.0)
        assert adjusted_viscosity(params, density, temperature) == params.viscosity
        assert adjusted_mass_diffusivity(params, density, temperature) == params.diffusion
        assert (adjusted_thermal_diffusivity(params, density, temperature)
                == params.diffusivity_temperature)

    def test_advanced_matches_constants_at_ambient(self, params):
        advanced = SimParams(viscosity=1e-4, diffusion=2e-4, diffusivity_temperature=3e-4,
                             advanced_coefficients=True)
        zero = np.zeros((4, 4))
        np.testing.assert_allclose(adjusted_viscosity(advanced, zero, zero), 1e-4)
        np.testing.assert_allclose(adjusted_mass_diffusivity(advanced, zero, zero), 2e-4)
        np.testing.assert_allclose(adjusted_thermal_diffusivity(advanced, zero, zero), 3e-4)

    def test_advanced_varies_with_temperature(self):
        advanced = SimParams(diffusion=1e-3, advanced_coefficients=True)
        zero = np.zeros(2)
        D = adjusted_mass_diffusivity(advanced, zero, np.array([0.0, 100.0]))
        assert D.shape == (2,)
        assert D[1] > D[0]

    def test_strategy_selects_adjuster(self, params):
        zero = np.zeros(1)
        assert coefficient(Coefficient.VISCOSITY, params, zero, zero) == params.viscosity
        assert coefficient(Coefficient.MASS_DIFFUSIVITY, params, zero, zero) == params.diffusion
        assert (coefficient(Coefficient.THERMAL_DIFFUSIVITY, params, zero, zero)
                == params.diffusivity_temperature)
