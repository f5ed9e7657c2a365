# tests/conftest.py
import pytest

from ecsim_core.cache import SimulationCache
from ecsim_core.components import (
    ACVoltageSource, Capacitor, CurrentSource, DCVoltageSource, Ground, OpAmp, Resistor,
)
from ecsim_core.schematic import Schematic


@pytest.fixture(autouse=True)
def clean_process_cache():
    """Node generation results must not leak between tests."""
    SimulationCache.clear_process_cache()
    yield
    SimulationCache.clear_process_cache()


# --- Scenario builders ---

def build_single_resistor(voltage: float = 5.0, resistance: float = 1000.0) -> Schematic:
    """
    V1 from ground (0,0) to node (0,10); R1 from (0,10) back to ground.
    One non-reference node.
    """
    schematic = Schematic("single_resistor")
    schematic.add_component(DCVoltageSource("V1", {'A': (0, 0), 'B': (0, 10)}, voltage=voltage))
    schematic.add_component(Resistor("R1", {'A': (0, 10), 'B': (0, 0)}, resistance=resistance))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    return schematic


def build_two_dc_sources() -> Schematic:
    """
    V1 (10 V) - R1 (1k) - mid - R3 (3k) - V2 (5 V), with R2 (2k) from mid to the bottom
    rail. The bottom rail is a single wire that touches every grounded terminal.

    Nodes: 0 = V1 top, 1 = mid, 2 = V2 top. V(mid) = 70/11 V.
    """
    schematic = Schematic("two_dc_sources")
    schematic.add_component(DCVoltageSource("V1", {'A': (0, 0), 'B': (0, 10)}, voltage=10.0))
    schematic.add_component(Resistor("R1", {'A': (0, 10), 'B': (10, 10)}, resistance=1000.0))
    schematic.add_component(Resistor("R2", {'A': (10, 10), 'B': (10, 0)}, resistance=2000.0))
    schematic.add_component(Resistor("R3", {'A': (10, 10), 'B': (20, 10)}, resistance=3000.0))
    schematic.add_component(DCVoltageSource("V2", {'A': (20, 0), 'B': (20, 10)}, voltage=5.0))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    schematic.add_wire("W_RAIL", [(0, 0), (20, 0)])
    return schematic


def build_buffer(input_voltage: float = 20.0) -> Schematic:
    """
    Unity-gain follower (gain 1e6, rails +-15 V) driven by a DC source, with a 1k load.
    Nodes: 0 = input, 1 = output.
    """
    schematic = Schematic("buffer")
    schematic.add_component(DCVoltageSource("V1", {'A': (0, 0), 'B': (0, 10)}, voltage=input_voltage))
    schematic.add_component(OpAmp(
        "U1", {'A': (0, 10), 'B': (20, 10), 'C': (20, 10)},
        open_loop_gain=1e6, positive_supply=15.0, negative_supply=-15.0
    ))
    schematic.add_component(Resistor("RL", {'A': (20, 10), 'B': (20, 0)}, resistance=1000.0))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    schematic.add_wire("W_RAIL", [(0, 0), (20, 0)])
    return schematic


def build_inverting_amplifier(input_voltage: float = 1.0, gain: float = 1e6) -> Schematic:
    """
    Inverting amplifier with Rin = 1k and Rf = 10k: ideal closed-loop gain -10.
    Nodes: 0 = input, 1 = inverting input, 2 = output.
    """
    schematic = Schematic("inverting_amplifier")
    schematic.add_component(DCVoltageSource("V1", {'A': (0, 0), 'B': (0, 10)}, voltage=input_voltage))
    schematic.add_component(Resistor("RIN", {'A': (0, 10), 'B': (10, 10)}, resistance=1000.0))
    schematic.add_component(Resistor("RF", {'A': (10, 10), 'B': (30, 10)}, resistance=10000.0))
    schematic.add_component(OpAmp(
        "U1", {'A': (10, 0), 'B': (10, 10), 'C': (30, 10)},
        open_loop_gain=gain, positive_supply=15.0, negative_supply=-15.0
    ))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    schematic.add_wire("W_RAIL", [(0, 0), (10, 0)])
    return schematic


def build_rc_lowpass(frequency: float = 1000.0, peak: float = 1.0, dc_offset: float = 0.0) -> Schematic:
    """
    AC source into R1 (1k) and C1 (1 uF) to ground. Nodes: 0 = source, 1 = capacitor.
    """
    schematic = Schematic("rc_lowpass")
    schematic.add_component(ACVoltageSource(
        "VAC", {'A': (0, 0), 'B': (0, 10)}, peak_voltage=peak, frequency=frequency, dc_offset=dc_offset
    ))
    schematic.add_component(Resistor("R1", {'A': (0, 10), 'B': (10, 10)}, resistance=1000.0))
    schematic.add_component(Capacitor("C1", {'A': (10, 10), 'B': (10, 0)}, capacitance=1e-6))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    schematic.add_wire("W_RAIL", [(0, 0), (10, 0)])
    return schematic


def build_current_source_load(current: float = 2e-3, resistance: float = 1000.0) -> Schematic:
    """
    I1 pushes `current` from ground (A) into node 0 (B); R1 returns it to ground.
    """
    schematic = Schematic("current_source_load")
    schematic.add_component(CurrentSource("I1", {'A': (0, 0), 'B': (0, 10)}, current=current))
    schematic.add_component(Resistor("R1", {'A': (0, 10), 'B': (0, 0)}, resistance=resistance))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    return schematic


@pytest.fixture
def single_resistor():
    return build_single_resistor()


@pytest.fixture
def two_dc_sources():
    return build_two_dc_sources()


@pytest.fixture
def buffer_schematic():
    return build_buffer()


@pytest.fixture
def inverting_amplifier():
    return build_inverting_amplifier()


@pytest.fixture
def rc_lowpass():
    return build_rc_lowpass()


@pytest.fixture
def current_source_load():
    return build_current_source_load()


@pytest.fixture
def write_yaml(tmp_path):
    """Writes a YAML document into tmp_path and returns its path."""
    def _write(content: str, name: str = "schematic.yaml"):
        path = tmp_path / name
        path.write_text(content)
        return path
    return _write


@pytest.fixture
def make_buffer():
    return build_buffer


@pytest.fixture
def make_inverting_amplifier():
    return build_inverting_amplifier


@pytest.fixture
def make_rc_lowpass():
    return build_rc_lowpass
