# src/ecsim_core/info/registry.py
"""
Static registry of the information sections shown for each component type.

The mapping is filled at import time by plain `register_info_sections` calls, keyed by
the component type string used in the component registry.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union

from ..components.base import ComponentBase
from ..results.base import ResultsCacheBase
from ..results.power import PowerInformation
from ..signals.base import SignalInterpreter

logger = logging.getLogger(__name__)


class InfoSection(Enum):
    VOLTAGE_DROP = "voltage_drop"
    CURRENT = "current"
    POWER = "power"


@dataclass(frozen=True)
class SignalSummary:
    """Characteristic values of one signal, as shown in a component's info panel."""
    maximum: float
    minimum: float
    rms: float
    average: float

    @classmethod
    def of(cls, signal: SignalInterpreter) -> "SignalSummary":
        return cls(
            maximum=signal.maximum(),
            minimum=signal.minimum(),
            rms=signal.rms(),
            average=signal.average(),
        )


InfoEntry = Union[SignalSummary, PowerInformation]

_INFO_SECTIONS: Dict[str, List[InfoSection]] = {}


def register_info_sections(component_type: str, *sections: InfoSection) -> None:
    """Declares the sections displayed for `component_type`, replacing any earlier declaration."""
    if component_type in _INFO_SECTIONS:
        logger.debug(f"Info sections for '{component_type}' are being replaced.")
    _INFO_SECTIONS[component_type] = list(sections)


def get_info_sections(component_type: str) -> List[InfoSection]:
    return list(_INFO_SECTIONS.get(component_type, []))


def describe_component(results: ResultsCacheBase, component: ComponentBase) -> Dict[InfoSection, InfoEntry]:
    """
    Queries `results` for every section registered for the component's type.

    The voltage drop is taken from the first to the second declared terminal. A
    component without a defined current reports a zero current.
    """
    entries: Dict[InfoSection, InfoEntry] = {}
    for section in get_info_sections(component.component_type):
        if section is InfoSection.VOLTAGE_DROP:
            first, second = list(component.terminals.values())[:2]
            if first.node_index is None or second.node_index is None:
                drop = results.zero_signal()
            else:
                drop = results.get_voltage_drop_or_zero(first.node_index, second.node_index)
            entries[section] = SignalSummary.of(drop)
        elif section is InfoSection.CURRENT:
            current = results.get_current(component)
            entries[section] = SignalSummary.of(current if current is not None else results.zero_signal())
        else:
            entries[section] = results.get_power(component)
    return entries


# --- Default registrations ---

register_info_sections("Resistor", InfoSection.VOLTAGE_DROP, InfoSection.CURRENT, InfoSection.POWER)
register_info_sections("Capacitor", InfoSection.VOLTAGE_DROP, InfoSection.CURRENT)
register_info_sections("Inductor", InfoSection.VOLTAGE_DROP, InfoSection.CURRENT)
register_info_sections("DCVoltageSource", InfoSection.CURRENT, InfoSection.POWER)
register_info_sections("ACVoltageSource", InfoSection.CURRENT, InfoSection.POWER)
register_info_sections("CurrentSource", InfoSection.VOLTAGE_DROP, InfoSection.POWER)
register_info_sections("OpAmp", InfoSection.CURRENT)
register_info_sections("Ground")
