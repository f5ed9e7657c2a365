# src/ecsim_core/simulation/__init__.py
from .exceptions import (
    MnaInputError,
    MatrixDimensionError,
    SingularMatrixError,
    OpAmpOutputGroundedError,
    OscillatingOperatingPointError,
)
from .config import SimulationOptions, ConfigParsingError, parse_simulation_options, parse_sweep_config
from .nodes import Node, NodeGenerationResult, NodeGenerator
from .solver import gauss_jordan_solve
from .matrix import AdmittanceMatrix, MnaSolution
from .factory import AdmittanceMatrixFactory, OpAmpOperationMode
from .operating_point import OperatingPointIterator, OperatingPointResult
from .states import PartialStates, PhasorState, InstantaneousState, WaveformState
from .context import SimulationContext
from .engine import SimulationEngine, SimulationType
from .results import FrequencySweepResult
from .execution import run_bias, run_ac_cycle, run_frequency_sweep, simulate_file

__all__ = [
    # Exceptions
    "MnaInputError",
    "MatrixDimensionError",
    "SingularMatrixError",
    "OpAmpOutputGroundedError",
    "OscillatingOperatingPointError",
    "ConfigParsingError",
    # Configuration
    "SimulationOptions",
    "parse_simulation_options",
    "parse_sweep_config",
    # Core Classes
    "Node",
    "NodeGenerationResult",
    "NodeGenerator",
    "gauss_jordan_solve",
    "AdmittanceMatrix",
    "MnaSolution",
    "AdmittanceMatrixFactory",
    "OpAmpOperationMode",
    "OperatingPointIterator",
    "OperatingPointResult",
    "PartialStates",
    "PhasorState",
    "InstantaneousState",
    "WaveformState",
    "SimulationContext",
    "SimulationEngine",
    "SimulationType",
    "FrequencySweepResult",
    # Public API
    "run_bias",
    "run_ac_cycle",
    "run_frequency_sweep",
    "simulate_file",
]
