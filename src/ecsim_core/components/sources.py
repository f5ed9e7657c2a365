# src/ecsim_core/components/sources.py
"""
Active components: independent voltage and current sources and the op-amp.

Source terminal convention: terminal A is the negative terminal, terminal B the
positive one. Op-amp terminals: A is non-inverting, B inverting, C the output.
"""

import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence, Union

from ..constants import (
    DEFAULT_OPAMP_GAIN,
    DEFAULT_OPAMP_NEGATIVE_SUPPLY,
    DEFAULT_OPAMP_POSITIVE_SUPPLY,
)
from ..geometry import Position
from ..signals.descriptions import SourceDescription, SourceType
from .base import ComponentBase, Terminal, TwoTerminalBase, register_component
from .exceptions import ComponentError

logger = logging.getLogger(__name__)

Positions = Mapping[str, Union[Position, Sequence[float]]]


def _validate_finite(value: float, component_id: str, param_name: str) -> float:
    try:
        magnitude = float(value)
    except (TypeError, ValueError) as e:
        raise ComponentError(
            component_id=component_id,
            details=f"Parameter '{param_name}' must be a real number, got {value!r}: {e}"
        ) from e
    if not math.isfinite(magnitude):
        raise ComponentError(component_id=component_id, details=f"Parameter '{param_name}' must be finite, got {magnitude}.")
    return magnitude


class _SourceBase(TwoTerminalBase):

    @property
    def negative_terminal(self) -> Terminal:
        return self.terminal_a

    @property
    def positive_terminal(self) -> Terminal:
        return self.terminal_b


@register_component("DCVoltageSource")
class DCVoltageSource(_SourceBase):
    """An ideal DC voltage source: V(B) - V(A) = voltage."""

    def __init__(self, instance_id: str, positions: Positions, voltage: float):
        super().__init__(instance_id, positions)
        self.voltage = _validate_finite(voltage, instance_id, "voltage")
        self.active_component_index: Optional[int] = None

    @property
    def description(self) -> SourceDescription:
        return SourceDescription(SourceType.DC_VOLTAGE_SOURCE, 0.0, self.voltage, self.instance_id)

    def source_descriptions(self) -> List[SourceDescription]:
        return [self.description]

    @classmethod
    def declare_parameters(cls) -> Dict[str, str]: return {"voltage": "volt"}


@register_component("ACVoltageSource")
class ACVoltageSource(_SourceBase):
    """
    An ideal sinusoidal voltage source: V(B) - V(A) = dc_offset + peak_voltage * sin(2*pi*f*t).

    A non-zero DC offset appears as a separate DC-kind source description sharing this
    source's active index.
    """

    def __init__(self, instance_id: str, positions: Positions, peak_voltage: float, frequency: float, dc_offset: float = 0.0):
        super().__init__(instance_id, positions)
        self.peak_voltage = _validate_finite(peak_voltage, instance_id, "peak_voltage")
        self.frequency = _validate_finite(frequency, instance_id, "frequency")
        if self.frequency <= 0:
            raise ComponentError(
                component_id=instance_id,
                details=f"AC source frequency must be positive, got {self.frequency:g} Hz."
            )
        self.dc_offset = _validate_finite(dc_offset, instance_id, "dc_offset")
        self.active_component_index: Optional[int] = None

    @property
    def description(self) -> SourceDescription:
        return SourceDescription(SourceType.AC_VOLTAGE_SOURCE, self.frequency, self.peak_voltage, self.instance_id)

    @property
    def dc_offset_description(self) -> Optional[SourceDescription]:
        if self.dc_offset == 0.0:
            return None
        return SourceDescription(SourceType.DC_OFFSET_OF_AC_VOLTAGE_SOURCE, 0.0, self.dc_offset, self.instance_id)

    def source_descriptions(self) -> List[SourceDescription]:
        offset = self.dc_offset_description
        return [self.description] if offset is None else [self.description, offset]

    @classmethod
    def declare_parameters(cls) -> Dict[str, str]:
        return {"peak_voltage": "volt", "frequency": "hertz", "dc_offset": "volt"}


@register_component("CurrentSource")
class CurrentSource(_SourceBase):
    """An ideal DC current source pushing `current` through itself from A to B."""

    def __init__(self, instance_id: str, positions: Positions, current: float):
        super().__init__(instance_id, positions)
        self.current = _validate_finite(current, instance_id, "current")
        self.current_source_index: Optional[int] = None

    @property
    def description(self) -> SourceDescription:
        return SourceDescription(SourceType.DC_CURRENT_SOURCE, 0.0, self.current, self.instance_id)

    def source_descriptions(self) -> List[SourceDescription]:
        return [self.description]

    @classmethod
    def declare_parameters(cls) -> Dict[str, str]: return {"current": "ampere"}


@register_component("OpAmp")
class OpAmp(ComponentBase):
    """A finite-gain op-amp whose output saturates at its supply rails."""

    def __init__(
        self,
        instance_id: str,
        positions: Positions,
        open_loop_gain: float = DEFAULT_OPAMP_GAIN,
        positive_supply: float = DEFAULT_OPAMP_POSITIVE_SUPPLY,
        negative_supply: float = DEFAULT_OPAMP_NEGATIVE_SUPPLY,
    ):
        super().__init__(instance_id, positions)
        self.open_loop_gain = _validate_finite(open_loop_gain, instance_id, "open_loop_gain")
        self.positive_supply = _validate_finite(positive_supply, instance_id, "positive_supply")
        self.negative_supply = _validate_finite(negative_supply, instance_id, "negative_supply")
        if self.open_loop_gain <= 0:
            raise ComponentError(component_id=instance_id, details=f"Open-loop gain must be positive, got {self.open_loop_gain:g}.")
        if self.negative_supply >= self.positive_supply:
            raise ComponentError(
                component_id=instance_id,
                details=f"Supply rails must satisfy negative < positive, got {self.negative_supply:g} V and {self.positive_supply:g} V."
            )
        self.active_component_index: Optional[int] = None

    @property
    def non_inverting(self) -> Terminal:
        return self.terminals['A']

    @property
    def inverting(self) -> Terminal:
        return self.terminals['B']

    @property
    def output(self) -> Terminal:
        return self.terminals['C']

    @classmethod
    def declare_terminals(cls) -> List[str]: return ['A', 'B', 'C']

    @classmethod
    def declare_parameters(cls) -> Dict[str, str]:
        return {"open_loop_gain": "dimensionless", "positive_supply": "volt", "negative_supply": "volt"}
