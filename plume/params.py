"""Physical constants and solver options for one simulation."""

from dataclasses import dataclass, fields
from typing import Optional


@dataclass
class SimParams:
    """
    Parameter set read by every step.

    The defaults are the documented preset: still air at room
    temperature in grid units (one cell is one unit of length), no
    viscosity or mass diffusion, gravity and temperature coupling on.
    Set `length_scale` to give the box a physical side length instead.

    Constants are assumed non-negative where noted; the iterative solvers
    do not converge for negative diffusivities.
    """

    length_scale: Optional[float] = None  # side length of the box (>0); None = N
    viscosity: float = 0.0               # kinematic viscosity (>=0)
    diffusion: float = 0.0               # mass diffusivity of the gas (>=0)
    gravity: float = 9.81
    air_density: float = 1.225
    mass_ratio: float = 1.0              # gas mass per unit of grid density
    air_temperature: float = 293.15      # ambient temperature (K)
    diffusivity_temperature: float = 0.0  # thermal diffusivity (>=0)
    density_decay_rate: float = 0.0
    temperature_decay_rate: float = 0.0
    relaxation_iterations: int = 20

    advanced_coefficients: bool = False
    gravity_enabled: bool = True
    temperature_enabled: bool = True

    def __post_init__(self):
        if self.length_scale is not None and self.length_scale <= 0:
            raise ValueError(f"length_scale must be positive, got {self.length_scale}")
        if self.relaxation_iterations < 1:
            raise ValueError(
                f"relaxation_iterations must be >= 1, got {self.relaxation_iterations}")
        for name in ("viscosity", "diffusion", "diffusivity_temperature"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    def box_size(self, N: int) -> float:
        """Side length of an N-cell box: length_scale, or N in grid units."""
        return float(N) if self.length_scale is None else self.length_scale

    @classmethod
    def from_dict(cls, values: dict) -> "SimParams":
        """Build from a plain mapping, ignoring keys that are not parameters."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})
