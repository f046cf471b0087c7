"""
mixture.py — Air + Injected Gas Mixture Model
==============================================
Every cell holds a blend of ambient air and the injected gas. From the raw
grid values we derive an effective local temperature and density:

  T_mix      = T_air + θ                         (θ = temperature channel)
  ρ_mix,air  = ρ_air + massRatio · ρ             (ρ = density channel)
  ρ_mix      = ρ_mix,air · T_air / T_mix         (ideal gas, constant pressure)

Hot cells get lighter, gas-laden cells get heavier. Buoyancy and the
optional spatially varying coefficients are built on these.

All functions are vectorized: they take whole density/temperature arrays
and return an array of the same shape.
"""

from enum import Enum

import numpy as np

from .params import SimParams


# Absolute temperatures below this are clipped (keeps ρ_mix finite)
MIN_TEMPERATURE = 1e-3

# Power-law temperature exponents for the adjusted coefficients
VISCOSITY_EXPONENT = 0.7
MASS_DIFFUSIVITY_EXPONENT = 1.75
THERMAL_CONDUCTIVITY_EXPONENT = 0.8


class Coefficient(Enum):
    """Which diffusivity a diffusion solve uses."""
    VISCOSITY = "viscosity"
    MASS_DIFFUSIVITY = "mass_diffusivity"
    THERMAL_DIFFUSIVITY = "thermal_diffusivity"


def mixed_temperature(params: SimParams, density: np.ndarray,
                      temperature: np.ndarray) -> np.ndarray:
    """Absolute mixture temperature (K)."""
    return np.maximum(params.air_temperature + temperature, MIN_TEMPERATURE)


def mixed_density_at_air_temp(params: SimParams, density: np.ndarray,
                              temperature: np.ndarray) -> np.ndarray:
    """Mixture density if the cell were at ambient temperature."""
    return params.air_density + params.mass_ratio * density


def mixed_density(params: SimParams, density: np.ndarray,
                  temperature: np.ndarray) -> np.ndarray:
    """Mixture density at the local mixture temperature."""
    T = mixed_temperature(params, density, temperature)
    return mixed_density_at_air_temp(params, density, temperature) * params.air_temperature / T


def buoyancy(params: SimParams, density: np.ndarray, temperature: np.ndarray) -> np.ndarray:
    """
    Upward acceleration per cell:
      g · (ρ_air - ρ_mix) / ρ_mix,air
    Positive where the mixture is lighter than the surrounding air.
    """
    rho_ref = mixed_density_at_air_temp(params, density, temperature)
    rho = mixed_density(params, density, temperature)
    return params.gravity * (params.air_density - rho) / rho_ref


def adjusted_viscosity(params: SimParams, density, temperature):
    """Viscosity, scaled by (T/T_air)^0.7 and the inverse mixture density when advanced."""
    if not params.advanced_coefficients:
        return params.viscosity
    ratio = mixed_temperature(params, density, temperature) / params.air_temperature
    rho = mixed_density(params, density, temperature)
    return params.viscosity * ratio ** VISCOSITY_EXPONENT * params.air_density / rho


def adjusted_mass_diffusivity(params: SimParams, density, temperature):
    """Mass diffusivity, scaled by (T/T_air)^1.75 when advanced."""
    if not params.advanced_coefficients:
        return params.diffusion
    ratio = mixed_temperature(params, density, temperature) / params.air_temperature
    return params.diffusion * ratio ** MASS_DIFFUSIVITY_EXPONENT


def adjusted_thermal_diffusivity(params: SimParams, density, temperature):
    """Thermal diffusivity, scaled by (T/T_air)^0.8 over the mixture density when advanced."""
    if not params.advanced_coefficients:
        return params.diffusivity_temperature
    ratio = mixed_temperature(params, density, temperature) / params.air_temperature
    rho = mixed_density(params, density, temperature)
    return (params.diffusivity_temperature * ratio ** THERMAL_CONDUCTIVITY_EXPONENT
            * params.air_density / rho)


_ADJUSTERS = {
    Coefficient.VISCOSITY: adjusted_viscosity,
    Coefficient.MASS_DIFFUSIVITY: adjusted_mass_diffusivity,
    Coefficient.THERMAL_DIFFUSIVITY: adjusted_thermal_diffusivity,
}


def coefficient(kind: Coefficient, params: SimParams, density, temperature):
    """
    Diffusivity selected by `kind`: a float when advanced coefficients are
    off, otherwise an array shaped like `density`.
    """
    return _ADJUSTERS[kind](params, density, temperature)
