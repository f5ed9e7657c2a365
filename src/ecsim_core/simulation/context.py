# src/ecsim_core/simulation/context.py
"""
Defines the `SimulationContext`, the immutable input of the simulation engine.
"""
from dataclasses import dataclass, field

from ..cache.service import SimulationCache
from ..schematic.schematic import Schematic
from .config import SimulationOptions


@dataclass(frozen=True)
class SimulationContext:
    """
    An immutable container for the complete input of a single simulation run: the
    schematic, the options and the shared cache service. It is passed to the
    `SimulationEngine`, which operates on it.
    """
    schematic: Schematic
    options: SimulationOptions = field(default_factory=SimulationOptions)
    cache: SimulationCache = field(default_factory=SimulationCache)
