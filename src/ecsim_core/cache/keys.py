# src/ecsim_core/cache/keys.py
"""
Centralizes the logic for generating cache keys.

Two families live here:

- process-scope keys (`create_topology_key`), which must capture every input that can
  change a topology-derived result;
- the small frozen key types the results layer uses for its own memo tables.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from ..schematic.schematic import Schematic


@dataclass(frozen=True)
class VoltageDropKey:
    """Memo key for the drop V(node_a) - V(node_b)."""
    node_a: int
    node_b: int

    def reversed(self) -> "VoltageDropKey":
        return VoltageDropKey(self.node_b, self.node_a)


@dataclass(frozen=True)
class CurrentKey:
    """Memo key for the current through a component, optionally reversed (B to A)."""
    component_id: str
    reverse: bool = False

    def reversed(self) -> "CurrentKey":
        return CurrentKey(self.component_id, not self.reverse)


def create_topology_key(schematic: "Schematic") -> Tuple:
    """
    Creates the cache key for a node generation result.

    The key covers everything node generation reads: each component's id, type and
    terminal positions in schematic order (order decides node numbering and the
    fallback reference), each wire's points, and the explicit wire connections.
    Component parameter values are not part of the key.
    """
    components = tuple(
        (
            component.instance_id,
            component.component_type,
            tuple((name, terminal.position.x, terminal.position.y) for name, terminal in component.terminals.items()),
        )
        for component in schematic.components.values()
    )
    wires = tuple(
        (
            wire.wire_id,
            tuple((point.x, point.y) for point in wire.points),
            tuple(sorted(wire.connected_to)),
        )
        for wire in schematic.wires.values()
    )
    return ("topology", components, wires)


def create_operating_point_key(schematic: "Schematic") -> Tuple:
    """
    Creates the run-scope key for an op-amp operating point. Unlike topology, the
    operating point depends on every component parameter, so the key adds each
    component's public numeric attributes.
    """
    values = tuple(
        (
            component.instance_id,
            tuple(sorted(
                (name, value) for name, value in vars(component).items()
                if isinstance(value, (int, float)) and not isinstance(value, bool) and not name.endswith("_index")
            )),
        )
        for component in schematic.components.values()
    )
    return ("operating_point",) + create_topology_key(schematic)[1:] + (values,)
