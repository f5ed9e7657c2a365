# src/ecsim_core/components/capabilities.py
"""
Defines the capability protocols through which the simulation core talks to
components.

The core never checks for concrete component classes. It asks whether a component
satisfies a protocol (`isinstance(component, IAdmittanceProvider)`) and uses only the
members that protocol names. New component types plug into node generation, matrix
assembly and result queries by satisfying the matching protocol.

- IAdmittanceProvider: a two-terminal passive element stamped into A.
- IVoltageSourceComponent: an independent voltage source (a B/C/E unknown).
- ICurrentSourceComponent: an independent current source (injected into I).
- IOpAmpComponent: an op-amp with non-inverting, inverting and output terminals.
- IGroundComponent: marks the node it sits on as the reference.
"""
import logging
from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..signals.descriptions import SourceDescription
    from .base import Terminal

logger = logging.getLogger(__name__)


@runtime_checkable
class IAdmittanceProvider(Protocol):
    """A two-terminal passive element with a frequency-dependent admittance."""

    terminal_a: "Terminal"
    terminal_b: "Terminal"

    def get_admittance(self, frequency: float) -> complex:
        """Admittance in siemens at `frequency` Hz."""
        ...

    def get_conductance(self) -> float:
        """Admittance at DC, as a real number."""
        ...


@runtime_checkable
class IVoltageSourceComponent(Protocol):
    """
    An independent voltage source. Terminal A is negative, terminal B is positive.
    `active_component_index` is assigned by the admittance matrix factory.
    """

    active_component_index: Optional[int]
    negative_terminal: "Terminal"
    positive_terminal: "Terminal"

    def source_descriptions(self) -> List["SourceDescription"]:
        ...


@runtime_checkable
class ICurrentSourceComponent(Protocol):
    """
    An independent DC current source driving current through itself from terminal A
    to terminal B. `current_source_index` is assigned by the factory.
    """

    current_source_index: Optional[int]
    negative_terminal: "Terminal"
    positive_terminal: "Terminal"

    def source_descriptions(self) -> List["SourceDescription"]:
        ...


@runtime_checkable
class IOpAmpComponent(Protocol):
    """An op-amp: open-loop gain, supply rails and three terminals."""

    active_component_index: Optional[int]
    non_inverting: "Terminal"
    inverting: "Terminal"
    output: "Terminal"
    open_loop_gain: float
    positive_supply: float
    negative_supply: float


@runtime_checkable
class IGroundComponent(Protocol):
    """A component whose single terminal ties its node to the reference."""

    ground_terminal: "Terminal"
