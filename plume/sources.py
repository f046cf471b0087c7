"""
sources.py — Gas, Wind, Heat and Energy Emitters
=================================================
A source is a geometric region (square, circle or diamond) plus an
emission kind. The cells it covers are computed once, when it is created:
every interior cell whose physical center lies inside the shape.

Shape membership, with (dx, dy) the offset of a cell center from the
source center in physical units:
  square  → max(|dx|, |dy|) ≤ r
  circle  → dx² + dy² ≤ r²
  diamond → |dx| + |dy| ≤ r

Each tick `update_sources()` stages every active source's emission through
`Simulation.inject_source` and `Simulation.hold_temperature`. The next
`step()` consumes it, so calling `update_sources()` twice before stepping
doubles the additive rates. Held temperatures do not stack.

Emission per covered cell (rates per second, except held temperatures):
  gas    → density += flow_rate, temperature held at T_gas
  wind   → velocity += speed · (cos angle, sin angle)     (angle in radians)
  heat   → temperature held at T_heat
  energy → temperature += flux · sign(gap) · |gap|^exponent,
           gap = T_ref - T_local   (linear Newton-type transfer by default)

A held temperature is assigned by the step rather than added, so a heat or
gas source keeps its cells at its own temperature however long it runs.
"""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .grid import Channel

log = logging.getLogger(__name__)


class Shape(Enum):
    SQUARE = "square"
    CIRCLE = "circle"
    DIAMOND = "diamond"


class SourceKind(Enum):
    GAS = "gas"
    WIND = "wind"
    HEAT = "heat"
    ENERGY = "energy"


@dataclass
class GasPayload:
    flow_rate: float
    temperature: float


@dataclass
class WindPayload:
    speed: float
    angle: float


@dataclass
class HeatPayload:
    temperature: float


@dataclass
class EnergyPayload:
    flux: float
    reference_temperature: float
    exponent: float = 1.0


@dataclass(eq=False)
class Source:
    """Shared geometry record plus a kind-tagged payload."""

    shape: Shape
    kind: SourceKind
    radius: float
    indices: np.ndarray
    payload: object
    active: bool = True

    def set_active(self, is_active: bool):
        """Toggle the contribution without removing the source."""
        self.active = bool(is_active)

    @property
    def n_cells(self) -> int:
        return len(self.indices)


def cell_indices(N: int, length_scale: float, shape, x_center: float,
                 y_center: float, radius: float) -> np.ndarray:
    """
    Linear indices (ascending) of the interior cells covered by a shape.
    A non-positive radius covers nothing.
    """
    shape = Shape(shape)
    if radius <= 0:
        return np.empty(0, dtype=np.int64)

    h = length_scale / N
    jj, ii = np.meshgrid(np.arange(1, N + 1), np.arange(1, N + 1), indexing='ij')
    dx = (ii - 0.5) * h - x_center
    dy = (jj - 0.5) * h - y_center

    if shape is Shape.SQUARE:
        inside = np.maximum(np.abs(dx), np.abs(dy)) <= radius
    elif shape is Shape.CIRCLE:
        inside = dx * dx + dy * dy <= radius * radius
    else:
        inside = np.abs(dx) + np.abs(dy) <= radius

    return (ii + (N + 2) * jj)[inside].astype(np.int64)


def energy_transfer(flux: float, reference_temperature: float,
                    local_temperature: np.ndarray, exponent: float = 1.0) -> np.ndarray:
    """
    Heating rate of an energy source: flux · sign(gap) · |gap|^exponent.

    Cells colder than the reference warm up, hotter ones cool down, and
    the rate shrinks as the gap closes.

    The rate is applied explicitly, one step at a time. With the linear
    default a cell approaches the reference monotonically while
    flux · dt ≤ 1, overshoots and oscillates up to 2, and diverges beyond.
    """
    gap = reference_temperature - local_temperature
    return flux * np.sign(gap) * np.abs(gap) ** exponent


class SourceManager:
    """
    Keeps the sources placed on one simulation and stages their emissions.

    The manager never touches the simulation's buffers directly; it goes
    through Simulation.inject_source, Simulation.hold_temperature and the
    read-only accessors.
    """

    def __init__(self, simulation):
        self.sim = simulation
        self.sources = []

    def __len__(self):
        return len(self.sources)

    def __iter__(self):
        return iter(self.sources)

    def _create(self, shape, kind: SourceKind, payload, x_center: float,
                y_center: float, radius: float) -> Source:
        shape = Shape(shape)
        indices = cell_indices(self.sim.N, self.sim.length_scale,
                               shape, x_center, y_center, radius)
        source = Source(shape=shape, kind=kind, radius=radius,
                        indices=indices, payload=payload)
        self.sources.append(source)

        log.info("Created %s %s source at (%.3f, %.3f), r=%.3f covering %d cells",
                 shape.value, kind.value, x_center, y_center, radius, len(indices))
        if not len(indices):
            log.warning("%s source at (%.3f, %.3f) covers no cells",
                        kind.value, x_center, y_center)
        return source

    def create_gas_source(self, shape, flow_rate: float, temperature: float,
                          x_center: float, y_center: float, radius: float) -> Source:
        return self._create(shape, SourceKind.GAS, GasPayload(flow_rate, temperature),
                            x_center, y_center, radius)

    def create_wind_source(self, shape, angle: float, speed: float,
                           x_center: float, y_center: float, radius: float) -> Source:
        return self._create(shape, SourceKind.WIND, WindPayload(speed, angle),
                            x_center, y_center, radius)

    def create_heat_source(self, shape, temperature: float,
                           x_center: float, y_center: float, radius: float) -> Source:
        return self._create(shape, SourceKind.HEAT, HeatPayload(temperature),
                            x_center, y_center, radius)

    def create_energy_source(self, shape, flux: float, reference_temperature: float,
                             x_center: float, y_center: float, radius: float,
                             exponent: float = 1.0) -> Source:
        return self._create(shape, SourceKind.ENERGY,
                            EnergyPayload(flux, reference_temperature, exponent),
                            x_center, y_center, radius)

    def update_sources(self):
        """Stage the emission of every active source for the next step."""
        for source in self.sources:
            if source.active and source.n_cells:
                self._emitters[source.kind](self, source)

    # ── Per-kind emission ─────────────────────────────────────────────────

    def _emit_gas(self, source: Source):
        gas = source.payload
        self.sim.inject_source(Channel.DENSITY, source.indices, gas.flow_rate)
        self.sim.hold_temperature(source.indices, gas.temperature)

    def _emit_wind(self, source: Source):
        wind = source.payload
        self.sim.inject_source(Channel.X_VELOCITY, source.indices,
                               wind.speed * np.cos(wind.angle))
        self.sim.inject_source(Channel.Y_VELOCITY, source.indices,
                               wind.speed * np.sin(wind.angle))

    def _emit_heat(self, source: Source):
        heat = source.payload
        self.sim.hold_temperature(source.indices, heat.temperature)

    def _emit_energy(self, source: Source):
        energy = source.payload
        local = self.sim.params.air_temperature + self.sim.get_temperature()[source.indices]
        rate = energy_transfer(energy.flux, energy.reference_temperature, local, energy.exponent)
        self.sim.inject_source(Channel.TEMPERATURE, source.indices, rate)

    _emitters = {
        SourceKind.GAS: _emit_gas,
        SourceKind.WIND: _emit_wind,
        SourceKind.HEAT: _emit_heat,
        SourceKind.ENERGY: _emit_energy,
    }
