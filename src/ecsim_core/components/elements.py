# src/ecsim_core/components/elements.py
"""
This module provides the passive, "leaf-level" circuit elements: Resistor,
Capacitor and Inductor, plus the Ground marker.
"""

import logging
import math
from typing import Dict, List, Mapping, Sequence, Union

from ..constants import LARGE_ADMITTANCE_SIEMENS
from ..geometry import Position
from .base import ComponentBase, Terminal, TwoTerminalBase, register_component
from .exceptions import ComponentError

logger = logging.getLogger(__name__)

Positions = Mapping[str, Union[Position, Sequence[float]]]


def _validate_non_negative(value: float, component_id: str, param_name: str) -> float:
    """Enforces a real, finite-or-infinite, non-negative magnitude for a passive parameter."""
    try:
        magnitude = float(value)
    except (TypeError, ValueError) as e:
        raise ComponentError(
            component_id=component_id,
            details=f"Parameter '{param_name}' must be a real number, got {value!r}: {e}"
        ) from e
    if math.isnan(magnitude):
        raise ComponentError(component_id=component_id, details=f"Parameter '{param_name}' must not be NaN.")
    if magnitude < 0:
        raise ComponentError(
            component_id=component_id,
            details=f"Parameter '{param_name}' must be non-negative, got {magnitude:g}."
        )
    return magnitude


@register_component("Resistor")
class Resistor(TwoTerminalBase):
    """Represents an ideal Resistor. R=0 is a short, R=inf an open circuit."""

    def __init__(self, instance_id: str, positions: Positions, resistance: float):
        super().__init__(instance_id, positions)
        self.resistance = _validate_non_negative(resistance, instance_id, "resistance")

    def get_conductance(self) -> float:
        if self.resistance == 0.0:
            return LARGE_ADMITTANCE_SIEMENS
        if math.isinf(self.resistance):
            return 0.0
        return 1.0 / self.resistance

    def get_admittance(self, frequency: float) -> complex:
        return complex(self.get_conductance())

    @classmethod
    def declare_parameters(cls) -> Dict[str, str]: return {"resistance": "ohm"}


@register_component("Capacitor")
class Capacitor(TwoTerminalBase):
    """Represents an ideal Capacitor. Open at DC."""

    def __init__(self, instance_id: str, positions: Positions, capacitance: float):
        super().__init__(instance_id, positions)
        self.capacitance = _validate_non_negative(capacitance, instance_id, "capacitance")

    def get_conductance(self) -> float:
        return LARGE_ADMITTANCE_SIEMENS if math.isinf(self.capacitance) else 0.0

    def get_admittance(self, frequency: float) -> complex:
        if frequency == 0:
            return complex(self.get_conductance())
        if math.isinf(self.capacitance):
            return complex(LARGE_ADMITTANCE_SIEMENS)
        return 1j * 2.0 * math.pi * frequency * self.capacitance

    @classmethod
    def declare_parameters(cls) -> Dict[str, str]: return {"capacitance": "farad"}


@register_component("Inductor")
class Inductor(TwoTerminalBase):
    """Represents an ideal Inductor. Short at DC."""

    def __init__(self, instance_id: str, positions: Positions, inductance: float):
        super().__init__(instance_id, positions)
        self.inductance = _validate_non_negative(inductance, instance_id, "inductance")

    def get_conductance(self) -> float:
        return 0.0 if math.isinf(self.inductance) else LARGE_ADMITTANCE_SIEMENS

    def get_admittance(self, frequency: float) -> complex:
        if math.isinf(self.inductance):
            return 0j
        impedance = 1j * 2.0 * math.pi * frequency * self.inductance
        if impedance == 0:
            return complex(LARGE_ADMITTANCE_SIEMENS)
        return 1.0 / impedance

    @classmethod
    def declare_parameters(cls) -> Dict[str, str]: return {"inductance": "henry"}


@register_component("Ground")
class Ground(ComponentBase):
    """Ties the node under its single terminal to the reference node."""

    @property
    def ground_terminal(self) -> Terminal:
        return self.terminals['G']

    @classmethod
    def declare_terminals(cls) -> List[str]: return ['G']

    @classmethod
    def declare_parameters(cls) -> Dict[str, str]: return {}
