# src/ecsim_core/constants.py
import logging

logger = logging.getLogger(__name__)

# --- Topology ---

#: Index reserved for the merged reference (ground) node. Non-reference nodes are
#: indexed densely from 0 once the reference has been removed.
GROUND_NODE_INDEX: int = -1

#: Absolute tolerance (in schematic plane units) used when deciding whether a point
#: lies on a wire segment. Terminal grouping itself uses exact position equality.
POSITION_TOLERANCE: float = 1.0e-9

# --- Numerical Constants for Simulation ---

#: Large finite admittance used to represent ideal shorts (R=0, or an inductor at DC)
#: in the admittance matrix.
#: Value: 1e12 Siemens (equivalent to 1 micro-ohm impedance).
LARGE_ADMITTANCE_SIEMENS: float = 1.0e12 # Siemens

# --- Op-amp Operating Point ---

#: Default cap on the number of aggregate DC solves the operating-point iterator may
#: perform before declaring the op-amp configuration oscillating.
DEFAULT_MAX_OPERATING_POINT_ITERATIONS: int = 64

#: Default open-loop gain and supply rails used by OpAmp when none are given.
DEFAULT_OPAMP_GAIN: float = 1.0e6
DEFAULT_OPAMP_POSITIVE_SUPPLY: float = 15.0 # Volts
DEFAULT_OPAMP_NEGATIVE_SUPPLY: float = -15.0 # Volts

# --- Time-Domain Rendering ---

DEFAULT_POINTS_PER_CYCLE: int = 256
MIN_POINTS_PER_CYCLE: int = 8
DEFAULT_CYCLES: float = 1.0
DEFAULT_DC_TIME_WINDOW_S: float = 1.0 # Seconds

logger.debug("Defined core constants: GROUND_NODE_INDEX, LARGE_ADMITTANCE_SIEMENS, DEFAULT_MAX_OPERATING_POINT_ITERATIONS")
