# src/ecsim_core/simulation/factory.py
"""
Builds one fully configured `AdmittanceMatrix` per independent source.

The factory indexes the active elements once (DC voltage sources, then AC voltage
sources, then op-amps; current sources get their own index space), records every
op-amp's assumed operating mode and stamps matrices on demand. Superposition is
enabled by turning on exactly one source's drive term per matrix while every other
source stays at its "off" contribution: a shorted voltage source, an open current
source, a saturated op-amp output held at 0 V.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from ..cache.service import SimulationCache
from ..components.capabilities import (
    IAdmittanceProvider,
    ICurrentSourceComponent,
    IOpAmpComponent,
    IVoltageSourceComponent,
)
from ..constants import GROUND_NODE_INDEX
from ..schematic.schematic import Schematic
from ..signals.descriptions import OPAMP_SATURATION_SOURCE, SourceDescription, SourceType
from .exceptions import MnaInputError, OpAmpOutputGroundedError
from .matrix import AdmittanceMatrix
from .nodes import NodeGenerationResult, NodeGenerator

logger = logging.getLogger(__name__)


class OpAmpOperationMode(Enum):
    ACTIVE = "active"
    POSITIVE_SATURATION = "positive_saturation"
    NEGATIVE_SATURATION = "negative_saturation"

    @property
    def is_saturated(self) -> bool:
        return self is not OpAmpOperationMode.ACTIVE


@dataclass(frozen=True)
class SourceNodeInfo:
    """Node indices and matrix index of an independent source."""
    component_id: str
    negative_node: int
    positive_node: int
    index: int


@dataclass(frozen=True)
class OpAmpNodeInfo:
    """The op-amp node triple plus its gain and supply rails."""
    component_id: str
    non_inverting: int
    inverting: int
    output: int
    open_loop_gain: float
    positive_supply: float
    negative_supply: float
    index: int


class AdmittanceMatrixFactory:
    """
    Assembles MNA matrices for a schematic under the current op-amp mode assumption.

    Args:
        schematic: The schematic to simulate. Node indices are (re)assigned to its
                   terminals on construction.
        node_generator: Optional node generator; a cache-backed one is created when
                        omitted.
        cache: Optional simulation cache used by the default node generator.
    """

    def __init__(
        self,
        schematic: Schematic,
        node_generator: Optional[NodeGenerator] = None,
        cache: Optional[SimulationCache] = None,
    ):
        if schematic is None:
            raise MnaInputError(context="AdmittanceMatrixFactory", details="A schematic is required to build admittance matrices.")
        self.schematic = schematic
        generator = node_generator if node_generator is not None else NodeGenerator(cache)
        self.nodes: NodeGenerationResult = generator.generate_and_apply(schematic)

        self._passives = schematic.components_of_type(IAdmittanceProvider)
        voltage_sources = schematic.components_of_type(IVoltageSourceComponent)
        self._dc_voltage_sources = [
            source for source in voltage_sources
            if all(description.is_dc for description in source.source_descriptions())
        ]
        self._ac_voltage_sources = [source for source in voltage_sources if source not in self._dc_voltage_sources]
        self._op_amps = schematic.components_of_type(IOpAmpComponent)
        self._current_sources = schematic.components_of_type(ICurrentSourceComponent)

        for index, component in enumerate(self._dc_voltage_sources + self._ac_voltage_sources + self._op_amps):
            component.active_component_index = index
        for index, component in enumerate(self._current_sources):
            component.current_source_index = index

        self._voltage_source_nodes: Dict[str, SourceNodeInfo] = {
            source.instance_id: SourceNodeInfo(
                source.instance_id,
                source.negative_terminal.node_index,
                source.positive_terminal.node_index,
                source.active_component_index,
            )
            for source in self._dc_voltage_sources + self._ac_voltage_sources
        }
        self._current_source_nodes: Dict[str, SourceNodeInfo] = {
            source.instance_id: SourceNodeInfo(
                source.instance_id,
                source.negative_terminal.node_index,
                source.positive_terminal.node_index,
                source.current_source_index,
            )
            for source in self._current_sources
        }
        self._op_amp_nodes: Dict[str, OpAmpNodeInfo] = {
            op_amp.instance_id: OpAmpNodeInfo(
                op_amp.instance_id,
                op_amp.non_inverting.node_index,
                op_amp.inverting.node_index,
                op_amp.output.node_index,
                float(op_amp.open_loop_gain),
                float(op_amp.positive_supply),
                float(op_amp.negative_supply),
                op_amp.active_component_index,
            )
            for op_amp in self._op_amps
        }
        self._modes: Dict[str, OpAmpOperationMode] = {}
        self.reset_op_amp_operation()
        logger.debug(
            f"Factory for '{schematic.name}': {self.node_count} nodes, {self.active_component_count} active elements "
            f"({len(self._dc_voltage_sources)} DC, {len(self._ac_voltage_sources)} AC, {len(self._op_amps)} op-amps), "
            f"{len(self._current_sources)} current sources."
        )

    # --- Queries ---

    @property
    def node_count(self) -> int:
        return self.nodes.node_count

    @property
    def node_indices(self) -> List[int]:
        return self.nodes.node_indices

    @property
    def active_component_count(self) -> int:
        return len(self._dc_voltage_sources) + len(self._ac_voltage_sources) + len(self._op_amps)

    @property
    def active_component_indices(self) -> List[int]:
        return list(range(self.active_component_count))

    @property
    def dc_sources(self) -> List[SourceDescription]:
        """DC voltage sources followed by the non-zero DC offsets of AC sources."""
        result = [source.description for source in self._dc_voltage_sources]
        result += [source.dc_offset_description for source in self._ac_voltage_sources if source.dc_offset_description is not None]
        return result

    @property
    def ac_sources(self) -> List[SourceDescription]:
        return [source.description for source in self._ac_voltage_sources]

    @property
    def current_sources(self) -> List[SourceDescription]:
        return [source.description for source in self._current_sources]

    @property
    def all_sources(self) -> List[SourceDescription]:
        return self.dc_sources + self.ac_sources + self.current_sources

    @property
    def frequencies(self) -> List[float]:
        """Distinct AC frequencies in ascending order."""
        return sorted({description.frequency for description in self.ac_sources})

    @property
    def lowest_frequency(self) -> float:
        frequencies = self.frequencies
        return frequencies[0] if frequencies else 0.0

    @property
    def highest_frequency(self) -> float:
        frequencies = self.frequencies
        return frequencies[-1] if frequencies else 0.0

    @property
    def op_amp_modes(self) -> Dict[str, OpAmpOperationMode]:
        return dict(self._modes)

    @property
    def op_amp_nodes(self) -> Dict[str, OpAmpNodeInfo]:
        return dict(self._op_amp_nodes)

    @property
    def has_saturated_op_amps(self) -> bool:
        return any(mode.is_saturated for mode in self._modes.values())

    def set_op_amp_modes(self, modes: Dict[str, OpAmpOperationMode]) -> None:
        """Restores a previously determined operating point."""
        unknown = sorted(set(modes) - set(self._modes))
        if unknown:
            raise MnaInputError(context="AdmittanceMatrixFactory", details=f"Unknown op-amp id(s) {unknown}.")
        self._modes.update(modes)

    # --- Construction ---

    def construct(self, source: SourceDescription) -> AdmittanceMatrix:
        """The matrix at the source's frequency with only that source on."""
        return self.construct_combined([source])

    def construct_combined(self, sources: Sequence[SourceDescription]) -> AdmittanceMatrix:
        """The matrix with several same-frequency sources on simultaneously."""
        frequencies = {source.frequency for source in sources}
        if len(frequencies) > 1:
            raise ValueError(f"Sources combined in one matrix must share a frequency, got {sorted(frequencies)}.")
        frequency = frequencies.pop() if frequencies else 0.0
        matrix = self._construct_base(frequency)
        for source in sources:
            self._apply_source(matrix, source)
        return matrix

    def construct_dc_aggregate(self) -> AdmittanceMatrix:
        """Every DC source on and every saturated op-amp driven at its rail."""
        sources = self.dc_sources + self.current_sources
        if self.has_saturated_op_amps:
            sources.append(OPAMP_SATURATION_SOURCE)
        return self.construct_combined(sources)

    def construct_dc_for_saturated_op_amps_only(self) -> AdmittanceMatrix:
        """Every independent source off; only saturated op-amps drive their rails."""
        return self.construct(OPAMP_SATURATION_SOURCE)

    def construct_transfer(self, source: SourceDescription, frequency: float) -> AdmittanceMatrix:
        """The matrix for one AC source at an arbitrary frequency, driven with E = 1."""
        if source.source_type is not SourceType.AC_VOLTAGE_SOURCE:
            raise ValueError(f"Transfer functions are defined for AC voltage sources only, got {source}.")
        info = self._voltage_source_nodes.get(source.component_id)
        if info is None:
            raise MnaInputError(context=str(source.component_id), details="AC source is not part of this schematic.")
        matrix = self._construct_base(frequency)
        matrix.e[info.index] = 1.0
        return matrix

    # --- Op-amp operation ---

    def expected_mode(self, op_amp_id: str, output_potential: float) -> OpAmpOperationMode:
        info = self._op_amp_nodes[op_amp_id]
        if info.negative_supply < output_potential < info.positive_supply:
            return OpAmpOperationMode.ACTIVE
        if output_potential >= info.positive_supply:
            return OpAmpOperationMode.POSITIVE_SATURATION
        return OpAmpOperationMode.NEGATIVE_SATURATION

    def check_operation(self, node_potentials: Iterable[complex], adjust: bool = True) -> bool:
        """
        Compares every op-amp's output potential with its rails, in schematic order.

        Returns True when every op-amp operates in its assumed mode. On the first
        mismatch returns False, after switching that op-amp to the expected mode if
        `adjust` is set. Later op-amps are not examined in the same call.
        """
        potentials = np.asarray(list(node_potentials))
        for op_amp_id, info in self._op_amp_nodes.items():
            output = 0.0 if info.output < 0 else float(np.real(potentials[info.output]))
            expected = self.expected_mode(op_amp_id, output)
            if expected is not self._modes[op_amp_id]:
                logger.debug(
                    f"Op-amp '{op_amp_id}' output at {output:.6g} V expects {expected.value}, "
                    f"assumed {self._modes[op_amp_id].value}."
                )
                if adjust:
                    self._modes[op_amp_id] = expected
                return False
        return True

    def reset_op_amp_operation(self) -> None:
        self._modes = {op_amp_id: OpAmpOperationMode.ACTIVE for op_amp_id in self._op_amp_nodes}

    # --- Stamping ---

    def _construct_base(self, frequency: float) -> AdmittanceMatrix:
        for info in self._op_amp_nodes.values():
            if info.output == GROUND_NODE_INDEX:
                raise OpAmpOutputGroundedError(component_id=info.component_id)
        matrix = AdmittanceMatrix(self.node_count, self.active_component_count, frequency)
        self._stamp_passives(matrix, frequency)
        self._stamp_voltage_sources(matrix)
        self._stamp_op_amps(matrix)
        return matrix

    def _stamp_passives(self, matrix: AdmittanceMatrix, frequency: float) -> None:
        a = matrix.a
        for component in self._passives:
            node_a, node_b = component.terminal_a.node_index, component.terminal_b.node_index
            if node_a is None or node_b is None:
                raise MnaInputError(context=component.instance_id, details="Terminals have no node assigned.")
            if node_a == node_b:
                continue
            admittance = component.get_conductance() if frequency == 0 else component.get_admittance(frequency)
            if node_a >= 0:
                a[node_a, node_a] += admittance
            if node_b >= 0:
                a[node_b, node_b] += admittance
            if node_a >= 0 and node_b >= 0:
                a[node_a, node_b] -= admittance
                a[node_b, node_a] -= admittance

    def _stamp_voltage_sources(self, matrix: AdmittanceMatrix) -> None:
        b, c = matrix.b, matrix.c
        for info in self._voltage_source_nodes.values():
            if info.positive_node >= 0:
                b[info.positive_node, info.index] = 1
                c[info.index, info.positive_node] = 1
            if info.negative_node >= 0:
                b[info.negative_node, info.index] = -1
                c[info.index, info.negative_node] = -1

    def _stamp_op_amps(self, matrix: AdmittanceMatrix) -> None:
        b, c = matrix.b, matrix.c
        for op_amp_id, info in self._op_amp_nodes.items():
            k = info.index
            b[info.output, k] = 1
            if self._modes[op_amp_id].is_saturated:
                # Output becomes an ideal source; E is set when the saturation source is on.
                c[k, :] = 0
                c[k, info.output] = 1
                continue
            if info.non_inverting >= 0 and info.non_inverting != info.output:
                c[k, info.non_inverting] += -info.open_loop_gain
            if info.inverting >= 0:
                c[k, info.inverting] += info.open_loop_gain
            if info.output != info.inverting:
                c[k, info.output] += 1

    def _apply_source(self, matrix: AdmittanceMatrix, source: SourceDescription) -> None:
        if source.source_type is SourceType.OPAMP_SATURATION:
            for op_amp_id, info in self._op_amp_nodes.items():
                mode = self._modes[op_amp_id]
                if mode is OpAmpOperationMode.POSITIVE_SATURATION:
                    matrix.e[info.index] = info.positive_supply
                elif mode is OpAmpOperationMode.NEGATIVE_SATURATION:
                    matrix.e[info.index] = info.negative_supply
            return

        if source.source_type is SourceType.DC_CURRENT_SOURCE:
            info = self._current_source_nodes.get(source.component_id)
            if info is None:
                raise MnaInputError(context=str(source.component_id), details="Current source is not part of this schematic.")
            if info.positive_node >= 0:
                matrix.i[info.positive_node] += source.output_value
            if info.negative_node >= 0:
                matrix.i[info.negative_node] -= source.output_value
            return

        info = self._voltage_source_nodes.get(source.component_id)
        if info is None:
            raise MnaInputError(context=str(source.component_id), details="Voltage source is not part of this schematic.")
        matrix.e[info.index] = source.output_value
