# src/ecsim_core/schematic/schematic.py
import logging
from typing import Dict, Iterator, List, Sequence, Type, TypeVar, Union

from ..components.base import ComponentBase, Terminal
from ..geometry import Position
from .wire import Wire

logger = logging.getLogger(__name__)

TComponent = TypeVar("TComponent")


class Schematic:
    """
    The editable circuit description consumed by the simulation core: ordered
    components, ordered wires and explicit wire-to-wire connections.

    Insertion order is significant. It decides node numbering and the fallback
    reference node when the schematic has no ground.
    """

    def __init__(self, name: str = "schematic"):
        self.name = name
        self.components: Dict[str, ComponentBase] = {}
        self.wires: Dict[str, Wire] = {}

    def add_component(self, component: ComponentBase) -> ComponentBase:
        if component.instance_id in self.components:
            raise ValueError(f"Duplicate component id '{component.instance_id}' in schematic '{self.name}'.")
        self.components[component.instance_id] = component
        return component

    def add_wire(self, wire_or_id: Union[Wire, str], points: Sequence = ()) -> Wire:
        wire = wire_or_id if isinstance(wire_or_id, Wire) else Wire(wire_or_id, points)
        if wire.wire_id in self.wires:
            raise ValueError(f"Duplicate wire id '{wire.wire_id}' in schematic '{self.name}'.")
        self.wires[wire.wire_id] = wire
        return wire

    def connect_wires(self, first_id: str, second_id: str) -> None:
        """Records a symmetric, explicit connection between two wires."""
        for wire_id in (first_id, second_id):
            if wire_id not in self.wires:
                raise KeyError(f"Unknown wire '{wire_id}' in schematic '{self.name}'.")
        if first_id == second_id:
            return
        self.wires[first_id].connected_to.add(second_id)
        self.wires[second_id].connected_to.add(first_id)

    def components_of_type(self, component_type: Type[TComponent]) -> List[TComponent]:
        """Components that are instances of (or satisfy the protocol) `component_type`, in order."""
        return [component for component in self.components.values() if isinstance(component, component_type)]

    def iter_terminals(self) -> Iterator[Terminal]:
        for component in self.components.values():
            yield from component.terminals.values()

    def terminal_positions(self) -> List[Position]:
        return [terminal.position for terminal in self.iter_terminals()]

    def __len__(self) -> int:
        return len(self.components)

    def __repr__(self) -> str:
        return f"Schematic('{self.name}', components={len(self.components)}, wires={len(self.wires)})"
