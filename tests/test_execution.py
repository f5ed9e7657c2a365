# tests/test_execution.py
import logging
import math

import numpy as np
import pytest

from ecsim_core import SimulationRunError, run_ac_cycle, run_bias, run_frequency_sweep, simulate_file
from ecsim_core.cache import SimulationCache
from ecsim_core.components import DCVoltageSource, Ground, OpAmp
from ecsim_core.schematic import Schematic
from ecsim_core.simulation import SimulationOptions, SimulationType
from ecsim_core.simulation.engine import SimulationEngine
from ecsim_core.simulation.exceptions import OscillatingOperatingPointError
from ecsim_core.validation import SemanticValidationError

BUFFER_YAML = """
name: yaml_buffer
components:
  - type: DCVoltageSource
    id: V1
    terminals: {A: [0, 0], B: [0, 10]}
    parameters: {voltage: "20 V"}
  - type: OpAmp
    id: U1
    terminals: {A: [0, 10], B: [20, 10], C: [20, 10]}
    parameters: {open_loop_gain: 1e6, positive_supply: "15 V", negative_supply: "-15 V"}
  - type: Resistor
    id: RL
    terminals: {A: [20, 10], B: [20, 0]}
    parameters: {resistance: "1 kohm"}
  - type: Ground
    id: GND
    terminals: {G: [0, 0]}
wires:
  - id: W_RAIL
    points: [[0, 0], [20, 0]]
"""


def grounded_output_schematic() -> Schematic:
    schematic = Schematic("grounded_output")
    schematic.add_component(DCVoltageSource("V1", {'A': (0, 0), 'B': (0, 10)}, voltage=1.0))
    schematic.add_component(OpAmp("U1", {'A': (0, 10), 'B': (0, 0), 'C': (0, 0)}))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    return schematic


class TestRunBias:

    def test_returns_results_and_a_fresh_cache(self, two_dc_sources):
        results, cache = run_bias(two_dc_sources, SimulationType.DC_BIAS)
        assert isinstance(cache, SimulationCache)
        assert results.get_node_potential(1).dc == pytest.approx(70.0 / 11.0)

    def test_reuses_the_given_cache(self, two_dc_sources):
        cache = SimulationCache()
        _, returned = run_bias(two_dc_sources, cache=cache)
        assert returned is cache
        run_bias(two_dc_sources, cache=cache)
        assert cache.get_stats()['process']['hits'] >= 1

    def test_saturated_buffer(self, buffer_schematic):
        results, _ = run_bias(buffer_schematic)
        assert results.get_node_potential(1).dc == pytest.approx(15.0)
        assert results.operating_point.saturated_op_amps == ["U1"]

    def test_logs_start_and_success(self, single_resistor, caplog):
        with caplog.at_level(logging.INFO, logger="ecsim_core"):
            run_bias(single_resistor)
        messages = [record.getMessage() for record in caplog.records]
        assert any("Starting" in message and "single_resistor" in message for message in messages)
        assert any("successful" in message for message in messages)


class TestRunErrors:

    def test_validation_errors_stop_the_run(self):
        with pytest.raises(SimulationRunError) as excinfo:
            run_bias(grounded_output_schematic())
        assert isinstance(excinfo.value.__cause__, SemanticValidationError)
        assert "Schematic Validation Error" in str(excinfo.value)
        assert "U1" in str(excinfo.value)

    def test_unsettled_operating_point_is_reported(self, buffer_schematic):
        options = SimulationOptions(max_operating_point_iterations=1)
        with pytest.raises(SimulationRunError) as excinfo:
            run_bias(buffer_schematic, options=options)
        assert isinstance(excinfo.value.__cause__, OscillatingOperatingPointError)
        assert "Oscillating Op-amp Operating Point" in str(excinfo.value)

    def test_unexpected_errors_get_a_generic_report(self, single_resistor, monkeypatch, caplog):
        def explode(self, simulation_type=SimulationType.AC_BIAS):
            raise RuntimeError("boom")

        monkeypatch.setattr(SimulationEngine, "execute_bias", explode)
        with caplog.at_level(logging.CRITICAL, logger="ecsim_core"):
            with pytest.raises(SimulationRunError, match="RuntimeError") as excinfo:
                run_bias(single_resistor)
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert any(record.levelno == logging.CRITICAL for record in caplog.records)


class TestOtherEntryPoints:

    def test_run_ac_cycle(self, rc_lowpass):
        time_results, _ = run_ac_cycle(rc_lowpass, options=SimulationOptions(points_per_cycle=32))
        assert len(time_results.times()) == 32
        assert time_results.get_node_potential(0).maximum() == pytest.approx(1.0, rel=1e-2)

    def test_run_frequency_sweep(self, rc_lowpass):
        sweep, _ = run_frequency_sweep(rc_lowpass, np.array([1000.0]), "VAC")
        expected = 1.0 / (1.0 + 2j * math.pi)
        np.testing.assert_allclose(sweep.transfer(1), [expected])

    def test_unknown_sweep_source_becomes_a_run_error(self, rc_lowpass):
        with pytest.raises(SimulationRunError, match="VXX"):
            run_frequency_sweep(rc_lowpass, np.array([1000.0]), "VXX")

    def test_simulate_file(self, write_yaml):
        results, cache = simulate_file(write_yaml(BUFFER_YAML), SimulationType.DC_BIAS)
        assert results.get_node_potential(1).dc == pytest.approx(15.0)
        assert results.get_node_potential(0).dc == pytest.approx(20.0)
        assert cache.get_stats()['process']['misses'] == 1

    def test_simulate_file_honours_declared_options(self, write_yaml):
        content = BUFFER_YAML + "simulation:\n  max_operating_point_iterations: 1\n"
        with pytest.raises(SimulationRunError, match="Oscillating"):
            simulate_file(write_yaml(content))
