# tests/test_results.py
import math

import pytest

from ecsim_core.cache import SimulationCache
from ecsim_core.components import ACVoltageSource, Resistor
from ecsim_core.results import NO_POWER, BiasResults, PowerInformation, PowerType
from ecsim_core.signals import PhasorSignal, SourceDescription, SourceType, negate
from ecsim_core.simulation import SimulationContext, SimulationEngine, SimulationType

AC_50 = SourceDescription(SourceType.AC_VOLTAGE_SOURCE, 50.0, 1.0, "VA")


def bias_of(schematic, simulation_type=SimulationType.AC_BIAS) -> BiasResults:
    engine = SimulationEngine(SimulationContext(schematic, cache=SimulationCache()))
    return engine.execute_bias(simulation_type)


@pytest.fixture
def loaded_results():
    results = BiasResults()
    results.load_new_data(
        {0: PhasorSignal(5.0, {AC_50: 1 + 1j}), 1: PhasorSignal(2.0)},
        {0: PhasorSignal(-1e-3)},
    )
    return results


class TestVoltageDrops:

    def test_drop_is_first_minus_second(self, loaded_results):
        drop = loaded_results.try_get_voltage_drop(0, 1)
        assert drop.dc == pytest.approx(3.0)
        assert drop.phasors[AC_50] == 1 + 1j

    def test_reverse_drop_is_exact_negation(self, loaded_results):
        forward = loaded_results.try_get_voltage_drop(0, 1)
        backward = loaded_results.try_get_voltage_drop(1, 0)
        assert backward == negate(forward)
        assert negate(backward) == forward

    def test_reverse_query_is_a_cache_hit(self, loaded_results):
        loaded_results.try_get_voltage_drop(0, 1)
        loaded_results.try_get_voltage_drop(1, 0)
        loaded_results.try_get_voltage_drop(0, 1)
        assert loaded_results.get_stats() == {'hits': 2, 'misses': 1}

    def test_identical_nodes_give_zero(self, loaded_results):
        drop = loaded_results.try_get_voltage_drop(1, 1)
        assert drop.dc == 0.0
        assert drop.phasors == {}

    def test_reference_node_is_zero_potential(self, loaded_results):
        assert loaded_results.get_node_potential(-1).dc == 0.0
        assert loaded_results.get_node_potential(1).dc == 2.0

    @pytest.mark.parametrize("node_a, node_b", [(2, 0), (0, 2), (-2, 0), (0, 99)])
    def test_out_of_range_nodes(self, loaded_results, node_a, node_b):
        assert loaded_results.try_get_voltage_drop(node_a, node_b) is None
        assert loaded_results.get_voltage_drop_or_zero(node_a, node_b).rms() == 0.0

    def test_load_new_data_clears_memoized_queries(self, loaded_results):
        loaded_results.try_get_voltage_drop(0, 1)
        loaded_results.load_new_data({0: PhasorSignal(1.0), 1: PhasorSignal(4.0)}, {})
        assert loaded_results.get_stats() == {'hits': 0, 'misses': 0}
        assert loaded_results.try_get_voltage_drop(0, 1).dc == pytest.approx(-3.0)

    def test_active_current_lookup(self, loaded_results):
        assert loaded_results.get_current_or_zero(0).dc == -1e-3
        assert loaded_results.get_current_or_zero(0, reverse=True).dc == 1e-3
        assert loaded_results.get_current_or_zero(7).dc == 0.0


class TestComponentQueries:

    def test_resistor_current_follows_the_drop(self, single_resistor):
        results = bias_of(single_resistor)
        resistor = single_resistor.components["R1"]
        assert results.get_current(resistor).dc == pytest.approx(5e-3)
        assert results.get_current(resistor, reverse=True).dc == pytest.approx(-5e-3)

    def test_ground_has_no_current(self, single_resistor):
        results = bias_of(single_resistor)
        assert results.get_current(single_resistor.components["GND"]) is None

    def test_capacitor_current_leads_the_voltage(self, rc_lowpass):
        results = bias_of(rc_lowpass)
        capacitor = rc_lowpass.components["C1"]
        drop = results.get_node_potential(1)
        current = results.get_current(capacitor)
        [(description, phasor)] = current.phasors.items()
        assert phasor == pytest.approx(drop.phasors[description] * 2j * math.pi * 1000.0 * 1e-6)


class TestPower:

    def test_resistor_dissipates_v_squared_over_r(self, single_resistor):
        power = bias_of(single_resistor).get_power(single_resistor.components["R1"])
        assert power.average == pytest.approx(25e-3)
        assert power.maximum == pytest.approx(25e-3)
        assert power.minimum == pytest.approx(25e-3)
        assert power.power_type is PowerType.DISSIPATED

    def test_dc_source_supplies_power(self, single_resistor):
        power = bias_of(single_resistor).get_power(single_resistor.components["V1"])
        assert power.average == pytest.approx(-25e-3)
        assert power.power_type is PowerType.SUPPLIED

    def test_power_balance_with_two_sources(self, two_dc_sources):
        results = bias_of(two_dc_sources)
        total = sum(results.get_power(component).average for component in two_dc_sources.components.values())
        assert total == pytest.approx(0.0, abs=1e-12)

    def test_current_source_power(self, current_source_load):
        results = bias_of(current_source_load)
        assert results.get_power(current_source_load.components["I1"]).average == pytest.approx(-4e-3)
        assert results.get_power(current_source_load.components["R1"]).average == pytest.approx(4e-3)

    def test_ac_resistor_power_uses_half_peak_squared(self, make_rc_lowpass):
        schematic = make_rc_lowpass(peak=2.0)
        results = bias_of(schematic)
        drop = results.try_get_voltage_drop(0, 1)
        [phasor] = drop.phasors.values()
        power = results.get_power(schematic.components["R1"])
        assert power.average == pytest.approx(abs(phasor) ** 2 / 2.0 / 1000.0)
        assert power.minimum == 0.0

    def test_ac_source_power_matches_resistor(self, make_rc_lowpass):
        schematic = make_rc_lowpass(peak=2.0)
        results = bias_of(schematic)
        source = results.get_power(schematic.components["VAC"])
        resistor = results.get_power(schematic.components["R1"])
        assert source.average == pytest.approx(-resistor.average)
        assert math.isnan(source.maximum)

    def test_ac_source_power_is_undefined_across_frequencies(self, rc_lowpass):
        rc_lowpass.add_component(ACVoltageSource("VHF", {'A': (0, 0), 'B': (0, 30)}, peak_voltage=1.0, frequency=5000.0))
        rc_lowpass.add_component(Resistor("RHF", {'A': (0, 30), 'B': (10, 10)}, resistance=1000.0))
        results = bias_of(rc_lowpass)
        power = results.get_power(rc_lowpass.components["VAC"])
        assert math.isnan(power.average)
        assert power.power_type is PowerType.NONE

    def test_components_without_power(self, single_resistor):
        assert bias_of(single_resistor).get_power(single_resistor.components["GND"]) == NO_POWER

    def test_power_is_memoized(self, single_resistor):
        results = bias_of(single_resistor)
        resistor = single_resistor.components["R1"]
        assert results.get_power(resistor) is results.get_power(resistor)

    def test_from_bounds_orders_extremes(self):
        info = PowerInformation.from_bounds(1.0, 3.0, -2.0)
        assert (info.maximum, info.minimum) == (3.0, -2.0)
