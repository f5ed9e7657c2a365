# tests/test_factory.py
import numpy as np
import pytest

from ecsim_core.components import ACVoltageSource, DCVoltageSource, Ground, OpAmp, Resistor
from ecsim_core.schematic import Schematic
from ecsim_core.signals import SourceDescription, SourceType
from ecsim_core.simulation import (
    AdmittanceMatrixFactory,
    MnaInputError,
    OpAmpOperationMode,
    OpAmpOutputGroundedError,
)

GAIN = 1e6


def _mixed_sources() -> Schematic:
    """AC source added before a DC source, then an op-amp; nodes 0 and 1 are source tops."""
    schematic = Schematic("mixed")
    schematic.add_component(ACVoltageSource("VAC", {'A': (0, 0), 'B': (0, 10)}, peak_voltage=1.0, frequency=50.0))
    schematic.add_component(DCVoltageSource("VDC", {'A': (0, 0), 'B': (30, 10)}, voltage=2.0))
    schematic.add_component(Resistor("R1", {'A': (0, 10), 'B': (0, 0)}, resistance=100.0))
    schematic.add_component(Resistor("R2", {'A': (30, 10), 'B': (0, 0)}, resistance=100.0))
    schematic.add_component(OpAmp("U1", {'A': (0, 10), 'B': (60, 10), 'C': (60, 10)}, open_loop_gain=GAIN))
    schematic.add_component(Resistor("RL", {'A': (60, 10), 'B': (0, 0)}, resistance=1000.0))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    return schematic


def _two_followers() -> Schematic:
    """Two unity followers of one 20 V input. Nodes: 0 = input, 1 = U1 out, 2 = U2 out."""
    schematic = Schematic("two_followers")
    schematic.add_component(DCVoltageSource("V1", {'A': (0, 0), 'B': (0, 10)}, voltage=20.0))
    schematic.add_component(OpAmp("U1", {'A': (0, 10), 'B': (20, 10), 'C': (20, 10)}, open_loop_gain=GAIN))
    schematic.add_component(OpAmp("U2", {'A': (0, 10), 'B': (40, 10), 'C': (40, 10)}, open_loop_gain=GAIN))
    schematic.add_component(Ground("GND", {'G': (0, 0)}))
    return schematic


class TestIndexing:

    def test_active_index_order_is_dc_then_ac_then_op_amps(self):
        schematic = _mixed_sources()
        factory = AdmittanceMatrixFactory(schematic)
        assert schematic.components["VDC"].active_component_index == 0
        assert schematic.components["VAC"].active_component_index == 1
        assert schematic.components["U1"].active_component_index == 2
        assert factory.active_component_count == 3
        assert factory.active_component_indices == [0, 1, 2]

    def test_current_sources_have_their_own_index_space(self, current_source_load):
        factory = AdmittanceMatrixFactory(current_source_load)
        assert factory.active_component_count == 0
        assert current_source_load.components["I1"].current_source_index == 0

    def test_source_lists_and_frequencies(self, make_rc_lowpass):
        factory = AdmittanceMatrixFactory(make_rc_lowpass(dc_offset=0.5))
        assert [d.source_type for d in factory.dc_sources] == [SourceType.DC_OFFSET_OF_AC_VOLTAGE_SOURCE]
        assert [d.frequency for d in factory.ac_sources] == [1000.0]
        assert factory.frequencies == [1000.0]
        assert factory.lowest_frequency == factory.highest_frequency == 1000.0
        assert len(factory.all_sources) == 2

    def test_missing_schematic_is_rejected(self):
        with pytest.raises(MnaInputError):
            AdmittanceMatrixFactory(None)


class TestStamping:

    def test_passive_block_is_symmetric(self, rc_lowpass):
        factory = AdmittanceMatrixFactory(rc_lowpass)
        matrix = factory.construct(factory.ac_sources[0])
        np.testing.assert_allclose(matrix.a, matrix.a.T)
        assert matrix.a[1, 1] == pytest.approx(1e-3 + 2j * np.pi * 1000.0 * 1e-6)
        assert matrix.a[0, 1] == pytest.approx(-1e-3)
        assert matrix.frequency == 1000.0

    def test_capacitor_is_open_at_dc(self, rc_lowpass):
        factory = AdmittanceMatrixFactory(rc_lowpass)
        matrix = factory.construct_dc_aggregate()
        assert matrix.a[1, 1] == pytest.approx(1e-3)

    def test_voltage_source_stamps_and_single_drive(self, two_dc_sources):
        factory = AdmittanceMatrixFactory(two_dc_sources)
        v1, v2 = factory.dc_sources
        matrix = factory.construct(v1)
        # Negative terminals sit on the reference node and contribute nothing.
        np.testing.assert_array_equal(matrix.b, [[1, 0], [0, 0], [0, 1]])
        np.testing.assert_array_equal(matrix.c, matrix.b.T)
        np.testing.assert_array_equal(matrix.e, [10, 0])
        np.testing.assert_array_equal(factory.construct(v2).e, [0, 5])
        assert np.count_nonzero(matrix.i) == 0

    def test_current_source_injects_into_positive_node(self, current_source_load):
        factory = AdmittanceMatrixFactory(current_source_load)
        matrix = factory.construct(factory.current_sources[0])
        np.testing.assert_allclose(matrix.i, [2e-3])
        assert matrix.e.shape == (0,)

    def test_dc_offset_shares_the_ac_source_index(self, make_rc_lowpass):
        factory = AdmittanceMatrixFactory(make_rc_lowpass(dc_offset=0.5))
        offset_matrix = factory.construct(factory.dc_sources[0])
        ac_matrix = factory.construct(factory.ac_sources[0])
        assert offset_matrix.e[0] == 0.5
        assert offset_matrix.frequency == 0.0
        assert ac_matrix.e[0] == 1.0
        assert ac_matrix.frequency == 1000.0

    def test_mixed_frequencies_cannot_be_combined(self, make_rc_lowpass):
        factory = AdmittanceMatrixFactory(make_rc_lowpass(dc_offset=0.5))
        with pytest.raises(ValueError, match="share a frequency"):
            factory.construct_combined(factory.dc_sources + factory.ac_sources)

    def test_transfer_matrix_drives_with_unit_amplitude(self, make_rc_lowpass):
        factory = AdmittanceMatrixFactory(make_rc_lowpass(peak=7.0))
        matrix = factory.construct_transfer(factory.ac_sources[0], 50.0)
        assert matrix.frequency == 50.0
        np.testing.assert_array_equal(matrix.e, [1.0])
        dc_description = SourceDescription(SourceType.DC_VOLTAGE_SOURCE, 0.0, 1.0, "VAC")
        with pytest.raises(ValueError):
            factory.construct_transfer(dc_description, 50.0)


class TestOpAmpStamps:

    def test_active_inverting_amplifier_row(self, inverting_amplifier):
        factory = AdmittanceMatrixFactory(inverting_amplifier)
        matrix = factory.construct(factory.dc_sources[0])
        # Row 1 belongs to U1: non-inverting input is grounded, inverting is node 1, output node 2.
        np.testing.assert_array_equal(matrix.c[1], [0, GAIN, 1])
        np.testing.assert_array_equal(matrix.b[:, 1], [0, 0, 1])

    def test_follower_row_omits_output_term(self, buffer_schematic):
        factory = AdmittanceMatrixFactory(buffer_schematic)
        matrix = factory.construct(factory.dc_sources[0])
        np.testing.assert_array_equal(matrix.c[1], [-GAIN, GAIN])

    def test_saturated_row_pins_the_output(self, inverting_amplifier):
        factory = AdmittanceMatrixFactory(inverting_amplifier)
        factory.set_op_amp_modes({"U1": OpAmpOperationMode.POSITIVE_SATURATION})
        matrix = factory.construct_dc_for_saturated_op_amps_only()
        np.testing.assert_array_equal(matrix.c[1], [0, 0, 1])
        np.testing.assert_array_equal(matrix.e, [0, 15.0])

    def test_negative_saturation_drives_the_negative_rail(self, inverting_amplifier):
        factory = AdmittanceMatrixFactory(inverting_amplifier)
        factory.set_op_amp_modes({"U1": OpAmpOperationMode.NEGATIVE_SATURATION})
        assert factory.has_saturated_op_amps
        assert factory.construct_dc_aggregate().e[1] == -15.0

    def test_grounded_output_is_rejected_at_construction(self):
        schematic = Schematic("grounded_output")
        schematic.add_component(DCVoltageSource("V1", {'A': (0, 0), 'B': (0, 10)}, voltage=1.0))
        schematic.add_component(OpAmp("U1", {'A': (0, 10), 'B': (0, 0), 'C': (0, 0)}))
        schematic.add_component(Ground("GND", {'G': (0, 0)}))
        factory = AdmittanceMatrixFactory(schematic)
        with pytest.raises(OpAmpOutputGroundedError) as excinfo:
            factory.construct_dc_aggregate()
        assert excinfo.value.component_id == "U1"

    def test_unknown_op_amp_mode_is_rejected(self, buffer_schematic):
        factory = AdmittanceMatrixFactory(buffer_schematic)
        with pytest.raises(MnaInputError):
            factory.set_op_amp_modes({"U9": OpAmpOperationMode.ACTIVE})


class TestCheckOperation:

    @pytest.mark.parametrize("output, expected", [
        (0.0, OpAmpOperationMode.ACTIVE),
        (14.999, OpAmpOperationMode.ACTIVE),
        (15.0, OpAmpOperationMode.POSITIVE_SATURATION),
        (-15.0, OpAmpOperationMode.NEGATIVE_SATURATION),
        (-40.0, OpAmpOperationMode.NEGATIVE_SATURATION),
    ])
    def test_expected_mode_boundaries(self, buffer_schematic, output, expected):
        factory = AdmittanceMatrixFactory(buffer_schematic)
        assert factory.expected_mode("U1", output) is expected

    def test_adjustment_is_idempotent(self, buffer_schematic):
        factory = AdmittanceMatrixFactory(buffer_schematic)
        assert factory.check_operation([20.0, 20.0], adjust=False) is False
        assert factory.op_amp_modes["U1"] is OpAmpOperationMode.ACTIVE
        assert factory.check_operation([20.0, 20.0]) is False
        assert factory.op_amp_modes["U1"] is OpAmpOperationMode.POSITIVE_SATURATION
        assert factory.check_operation([20.0, 20.0]) is True
        assert factory.check_operation([20.0, 20.0]) is True

    def test_only_the_first_mismatch_is_adjusted(self):
        factory = AdmittanceMatrixFactory(_two_followers())
        potentials = [20.0, 20.0, -20.0]
        assert factory.check_operation(potentials) is False
        assert factory.op_amp_modes == {
            "U1": OpAmpOperationMode.POSITIVE_SATURATION,
            "U2": OpAmpOperationMode.ACTIVE,
        }
        assert factory.check_operation(potentials) is False
        assert factory.op_amp_modes["U2"] is OpAmpOperationMode.NEGATIVE_SATURATION
        assert factory.check_operation(potentials) is True

    def test_reset_returns_every_op_amp_to_active(self, buffer_schematic):
        factory = AdmittanceMatrixFactory(buffer_schematic)
        factory.check_operation([20.0, 20.0])
        factory.reset_op_amp_operation()
        assert not factory.has_saturated_op_amps
