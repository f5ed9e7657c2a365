# src/ecsim_core/simulation/engine.py
"""
Defines the `SimulationEngine`, the service that orchestrates a simulation.

The engine holds the imperative logic (the "how") and operates on a
`SimulationContext` (the "what"). Every run follows the same pipeline:

    node generation -> matrix factory -> op-amp operating point
        -> one solve per independent source -> superposition -> results
"""
import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..cache.keys import create_operating_point_key
from ..cache.service import CacheScope, SimulationCache
from ..results.bias import BiasResults
from ..results.time import TimeResults
from ..schematic.schematic import Schematic
from ..signals.descriptions import OPAMP_SATURATION_SOURCE, SourceDescription
from ..signals.waveforms import WaveformBuilder
from .config import SimulationOptions
from .context import SimulationContext
from .exceptions import MnaInputError
from .factory import AdmittanceMatrixFactory
from .nodes import NodeGenerator
from .operating_point import OperatingPointIterator, OperatingPointResult
from .results import FrequencySweepResult
from .states import PartialStates, PhasorState

logger = logging.getLogger(__name__)


class SimulationType(Enum):
    """Which sources take part in a bias simulation."""
    DC_BIAS = "dc_bias"
    AC_BIAS = "ac_bias"


class SimulationEngine:
    """
    Orchestrates the simulation pipeline for one `SimulationContext`.
    """

    def __init__(self, context: SimulationContext):
        self.context: SimulationContext = context
        self.schematic: Schematic = context.schematic
        self.options: SimulationOptions = context.options
        self.cache: SimulationCache = context.cache
        logger.debug(f"SimulationEngine initialized for '{self.schematic.name}'.")

    # --- Pipeline stages ---

    def _build_factory(self) -> AdmittanceMatrixFactory:
        return AdmittanceMatrixFactory(self.schematic, node_generator=NodeGenerator(self.cache))

    def _operating_point(self, factory: AdmittanceMatrixFactory) -> OperatingPointResult:
        """Runs (or reuses from the run cache) the op-amp operating-point iteration."""
        key = create_operating_point_key(self.schematic)
        cached: Optional[OperatingPointResult] = self.cache.get(key, CacheScope.RUN)
        if cached is not None:
            logger.info(f"Reusing cached op-amp operating point for '{self.schematic.name}'.")
            factory.set_op_amp_modes(cached.modes)
            return cached
        result = OperatingPointIterator(factory, self.options.max_operating_point_iterations).run()
        self.cache.put(key, result, CacheScope.RUN)
        return result

    @staticmethod
    def _bias_sources(factory: AdmittanceMatrixFactory, simulation_type: SimulationType) -> List[SourceDescription]:
        sources = factory.dc_sources + factory.current_sources
        if factory.has_saturated_op_amps:
            sources.append(OPAMP_SATURATION_SOURCE)
        if simulation_type is SimulationType.AC_BIAS:
            sources += factory.ac_sources
        return sources

    def _run_bias(self, simulation_type: SimulationType) -> Tuple[BiasResults, Optional[AdmittanceMatrixFactory]]:
        results = BiasResults()
        factory = self._build_factory()
        if factory.node_count == 0:
            logger.info(f"Schematic '{self.schematic.name}' has no non-reference nodes; results are empty.")
            results.load_new_data({}, {})
            return results, factory

        operating_point = self._operating_point(factory)
        states = PartialStates(factory.node_count, factory.active_component_count)
        for source in self._bias_sources(factory, simulation_type):
            solution = factory.construct(source).solve()
            states.add_state(PhasorState.from_solution(source, solution))
            logger.debug(f"Solved per-source system for {source}.")

        results.load_new_data(
            states.combined_node_potentials(),
            states.combined_active_currents(),
            operating_point=operating_point,
            partial_states=states,
        )
        logger.info(
            f"{simulation_type.value} simulation of '{self.schematic.name}' solved {len(states)} source(s) "
            f"over {factory.node_count} node(s)."
        )
        return results, factory

    # --- Public entry points ---

    def execute_bias(self, simulation_type: SimulationType = SimulationType.AC_BIAS) -> BiasResults:
        results, _ = self._run_bias(simulation_type)
        return results

    def execute_ac_cycle(self) -> TimeResults:
        """AC bias rendered over `cycles` periods of the lowest AC frequency."""
        bias, factory = self._run_bias(SimulationType.AC_BIAS)
        builder = WaveformBuilder.for_lowest_frequency(
            factory.lowest_frequency,
            points_per_cycle=self.options.points_per_cycle,
            cycles=self.options.cycles,
            dc_time_window=self.options.dc_time_window,
        )
        return TimeResults(bias, builder)

    def execute_frequency_sweep(self, source_id: str, frequencies_hz: Sequence[float]) -> FrequencySweepResult:
        """
        Node transfer functions of AC source `source_id` over `frequencies_hz`, with
        op-amp modes taken from the DC operating point.
        """
        frequencies = np.asarray(frequencies_hz, dtype=float).reshape(-1)
        factory = self._build_factory()
        description = next((source for source in factory.ac_sources if source.component_id == source_id), None)
        if description is None:
            raise MnaInputError(
                context=source_id,
                details=f"No AC voltage source '{source_id}' in schematic '{self.schematic.name}'. "
                        f"AC sources: {[source.component_id for source in factory.ac_sources]}."
            )
        if factory.node_count == 0:
            return FrequencySweepResult(source_id, frequencies, np.zeros((len(frequencies), 0), dtype=np.complex128))

        operating_point = self._operating_point(factory)
        transfer = np.zeros((len(frequencies), factory.node_count), dtype=np.complex128)
        for row, frequency in enumerate(frequencies):
            transfer[row] = factory.construct_transfer(description, float(frequency)).solve().node_potentials
        logger.info(f"Swept '{source_id}' over {len(frequencies)} frequencies.")
        return FrequencySweepResult(source_id, frequencies, transfer, operating_point)
