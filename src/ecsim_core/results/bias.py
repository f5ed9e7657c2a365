# src/ecsim_core/results/bias.py
import logging
import math
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from ..components.base import ComponentBase
from ..components.capabilities import IAdmittanceProvider
from ..components.elements import Resistor
from ..components.sources import ACVoltageSource, CurrentSource, DCVoltageSource
from ..constants import GROUND_NODE_INDEX
from ..signals.phasor import PhasorSignal
from .base import ResultsCacheBase
from .power import NO_POWER, PowerInformation

if TYPE_CHECKING:
    from ..simulation.operating_point import OperatingPointResult
    from ..simulation.states import InstantaneousState, PartialStates

logger = logging.getLogger(__name__)


class BiasResults(ResultsCacheBase[PhasorSignal]):
    """
    Phasor-domain results of a bias simulation.

    Node potentials and active-element branch currents are supplied at load time.
    Everything else (drops, passive currents, power) is derived on demand.
    """

    def __init__(self):
        super().__init__()
        self._node_potentials: Dict[int, PhasorSignal] = {}
        self._active_currents: Dict[int, PhasorSignal] = {}
        self.operating_point: Optional["OperatingPointResult"] = None
        self.partial_states: Optional["PartialStates"] = None

    def load_new_data(
        self,
        node_potentials: Mapping[int, PhasorSignal],
        active_currents: Mapping[int, PhasorSignal],
        operating_point: Optional["OperatingPointResult"] = None,
        partial_states: Optional["PartialStates"] = None,
    ) -> None:
        """Replaces the raw data. Every memoized query is discarded."""
        self._clear_caches()
        self._node_potentials = dict(node_potentials)
        self._active_currents = dict(active_currents)
        self._node_count = len(self._node_potentials)
        self.operating_point = operating_point
        self.partial_states = partial_states
        logger.debug(f"BiasResults loaded: {self._node_count} nodes, {len(self._active_currents)} active currents.")

    @property
    def node_potentials(self) -> Dict[int, PhasorSignal]:
        return dict(self._node_potentials)

    @property
    def active_currents(self) -> Dict[int, PhasorSignal]:
        return dict(self._active_currents)

    def zero_signal(self) -> PhasorSignal:
        return PhasorSignal()

    def _potential(self, node_index: int) -> PhasorSignal:
        if node_index == GROUND_NODE_INDEX:
            return PhasorSignal()
        return self._node_potentials[node_index]

    def _compute_voltage_drop(self, node_a: int, node_b: int) -> PhasorSignal:
        return self._potential(node_a) - self._potential(node_b)

    def _active_current(self, active_index: int) -> Optional[PhasorSignal]:
        return self._active_currents.get(active_index)

    def _compute_current(self, component: ComponentBase) -> Optional[PhasorSignal]:
        if isinstance(component, IAdmittanceProvider):
            drop = self._terminal_drop(component, 'A', 'B')
            return drop.transform(component.get_conductance(), lambda source: component.get_admittance(source.frequency))
        if isinstance(component, CurrentSource):
            return PhasorSignal(dc=component.current)
        index = getattr(component, 'active_component_index', None)
        if index is not None:
            return self._active_current(index)
        return None

    def _compute_power(self, component: ComponentBase) -> PowerInformation:
        if isinstance(component, Resistor):
            return self._resistor_power(component)
        if isinstance(component, DCVoltageSource):
            current = self.get_current(component)
            if current is None:
                return NO_POWER
            voltage = component.voltage
            return PowerInformation.from_bounds(current.dc * voltage, current.minimum() * voltage, current.maximum() * voltage)
        if isinstance(component, CurrentSource):
            # Voltage across the source from its positive to its negative terminal.
            voltage = self._terminal_drop(component, 'B', 'A')
            current = component.current
            return PowerInformation.from_bounds(-voltage.dc * current, -voltage.maximum() * current, -voltage.minimum() * current)
        if isinstance(component, ACVoltageSource):
            return self._ac_source_power(component)
        return NO_POWER

    def _resistor_power(self, resistor: Resistor) -> PowerInformation:
        drop = self._terminal_drop(resistor, 'A', 'B')
        conductance = resistor.get_conductance()
        average = (sum(abs(value) ** 2 for value in drop.phasors.values()) / 2.0 + drop.dc ** 2) * conductance
        high, low = drop.maximum(), drop.minimum()
        maximum = max(high ** 2, low ** 2) * conductance
        if low <= 0 <= high:
            minimum = 0.0
        else:
            minimum = min(high ** 2, low ** 2) * conductance
        return PowerInformation(average=average, maximum=maximum, minimum=minimum)

    def _ac_source_power(self, source: ACVoltageSource) -> PowerInformation:
        current = self.get_current(source)
        if current is None:
            return NO_POWER
        average = current.dc * source.dc_offset
        by_frequency = current.ac_potentials_by_frequency()
        if any(frequency != source.frequency for frequency in by_frequency):
            average = math.nan
        elif by_frequency:
            peak_current = by_frequency[source.frequency]
            average += 0.5 * (source.peak_voltage * peak_current.conjugate()).real
        return PowerInformation(average=average, maximum=math.nan, minimum=math.nan)

    def snapshot(self, time: float) -> Optional["InstantaneousState"]:
        """Real node potentials and branch currents at `time`, if per-source states were loaded."""
        if self.partial_states is None:
            return None
        return self.partial_states.instantaneous(time)
