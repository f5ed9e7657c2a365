# src/ecsim_core/components/__init__.py
import logging
logger = logging.getLogger(__name__)

# Import base first to define registry and decorator
from .base import (
    ComponentBase, COMPONENT_REGISTRY, Terminal, TerminalKey, TwoTerminalBase, register_component
)
from .capabilities import (
    IAdmittanceProvider, ICurrentSourceComponent, IGroundComponent, IOpAmpComponent, IVoltageSourceComponent
)
from .exceptions import ComponentError, ParameterConversionError
# Import concrete elements to trigger registration
from .elements import Resistor, Capacitor, Inductor, Ground
from .sources import DCVoltageSource, ACVoltageSource, CurrentSource, OpAmp

logger.debug(f"Available component types: {list(COMPONENT_REGISTRY.keys())}")

__all__ = [
    "ComponentBase",
    "COMPONENT_REGISTRY",
    "Terminal",
    "TerminalKey",
    "TwoTerminalBase",
    "register_component",
    "IAdmittanceProvider",
    "ICurrentSourceComponent",
    "IGroundComponent",
    "IOpAmpComponent",
    "IVoltageSourceComponent",
    "ComponentError",
    "ParameterConversionError",
    "Resistor",
    "Capacitor",
    "Inductor",
    "Ground",
    "DCVoltageSource",
    "ACVoltageSource",
    "CurrentSource",
    "OpAmp",
]
