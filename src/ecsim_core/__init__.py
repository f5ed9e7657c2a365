# src/ecsim_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("ecsim_core package initialized.")

from .units import ureg, pint, Quantity, ADMITTANCE_DIMENSIONALITY, IMPEDANCE_DIMENSIONALITY
from .geometry import Position
from .components import (
    Resistor, Capacitor, Inductor, Ground,
    DCVoltageSource, ACVoltageSource, CurrentSource, OpAmp,
)
from .schematic import Schematic, Wire
from .cache import SimulationCache
from .results import BiasResults, TimeResults, PowerInformation, PowerType
# simulation must be imported before validation
from .simulation import (
    SimulationOptions, SimulationType, FrequencySweepResult,
    run_bias, run_ac_cycle, run_frequency_sweep, simulate_file,
)
from .validation import SchematicValidator
from .info import InfoSection, describe_component
from .parser import SchematicParser
from .schematic_builder import SchematicBuilder, load_schematic
from .errors import EcsimError, SchematicBuildError, SimulationRunError

__all__ = [
    # Units
    "ureg", "pint", "Quantity",
    "ADMITTANCE_DIMENSIONALITY", "IMPEDANCE_DIMENSIONALITY",
    # Schematic model
    "Position", "Schematic", "Wire",
    "Resistor", "Capacitor", "Inductor", "Ground",
    "DCVoltageSource", "ACVoltageSource", "CurrentSource", "OpAmp",
    # Services and results
    "SimulationCache", "BiasResults", "TimeResults", "PowerInformation", "PowerType",
    "FrequencySweepResult", "InfoSection", "describe_component",
    # Configuration
    "SimulationOptions", "SimulationType",
    # Loading
    "SchematicParser", "SchematicBuilder", "load_schematic",
    # Validation
    "SchematicValidator",
    # Simulation
    "run_bias", "run_ac_cycle", "run_frequency_sweep", "simulate_file",
    # Top-Level Errors (Actionable Diagnostics)
    "EcsimError", "SchematicBuildError", "SimulationRunError",
]
