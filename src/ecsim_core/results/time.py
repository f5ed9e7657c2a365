# src/ecsim_core/results/time.py
import logging
from typing import Optional

import numpy as np

from ..components.base import ComponentBase
from ..components.capabilities import IAdmittanceProvider, IVoltageSourceComponent
from ..components.sources import CurrentSource
from ..signals.time_domain import TimeDomainSignal
from ..signals.waveforms import WaveformBuilder
from .base import ResultsCacheBase
from .bias import BiasResults
from .power import NO_POWER, PowerInformation

logger = logging.getLogger(__name__)


class TimeResults(ResultsCacheBase[TimeDomainSignal]):
    """
    Time-domain view of a set of phasor-domain results.

    Every signal is the waveform-builder rendering of the matching phasor signal.
    Power comes from the sampled instantaneous product v(t)·i(t).
    """

    def __init__(self, bias: BiasResults, builder: WaveformBuilder):
        super().__init__()
        self.load_new_data(bias, builder)

    def load_new_data(self, bias: BiasResults, builder: WaveformBuilder) -> None:
        self._clear_caches()
        self.bias = bias
        self.builder = builder
        self._node_count = bias.node_count
        logger.debug(f"TimeResults loaded: {builder.sample_count} samples, step {builder.time_step:.4e} s.")

    @property
    def operating_point(self):
        return self.bias.operating_point

    def times(self) -> np.ndarray:
        return self.builder.times()

    def zero_signal(self) -> TimeDomainSignal:
        return self.builder.zero()

    def _compute_voltage_drop(self, node_a: int, node_b: int) -> TimeDomainSignal:
        return self.builder.build(self.bias.get_voltage_drop_or_zero(node_a, node_b))

    def _compute_current(self, component: ComponentBase) -> Optional[TimeDomainSignal]:
        current = self.bias.get_current(component)
        return None if current is None else self.builder.build(current)

    def _active_current(self, active_index: int) -> Optional[TimeDomainSignal]:
        current = self.bias.active_currents.get(active_index)
        return None if current is None else self.builder.build(current)

    def _compute_power(self, component: ComponentBase) -> PowerInformation:
        if isinstance(component, IAdmittanceProvider):
            instantaneous = self._terminal_drop(component, 'A', 'B') * self.get_current(component)
        elif isinstance(component, IVoltageSourceComponent):
            current = self.get_current(component)
            if current is None:
                return NO_POWER
            # Branch current flows into the positive terminal: v·i is absorbed power.
            instantaneous = self._terminal_drop(component, 'B', 'A') * current
        elif isinstance(component, CurrentSource):
            # Source current leaves through the positive terminal: -v·i is absorbed power.
            instantaneous = -(self._terminal_drop(component, 'B', 'A') * self.get_current(component))
        else:
            return NO_POWER
        return PowerInformation(
            average=instantaneous.average(),
            maximum=instantaneous.maximum(),
            minimum=instantaneous.minimum(),
        )
