"""
plume/ — 2-D Stable Fluids Smoke and Gas Simulator
===================================================
Exports the interfaces an embedding application uses.

  Simulation    → step(), field accessors, set_sources(), inject_source()
  SourceManager → create_*_source(), update_sources()
  SimParams     → physical constants and solver options
"""

from .grid import Channel, FieldStore
from .mixture import Coefficient
from .params import SimParams
from .simulation import Simulation
from .sources import Shape, Source, SourceKind, SourceManager

__all__ = [
    "Channel", "Coefficient", "FieldStore", "Shape", "SimParams", "Simulation",
    "Source", "SourceKind", "SourceManager",
]
