# src/ecsim_core/simulation/nodes.py
"""
Turns schematic topology into electrical nodes.

Terminals sharing an exact position form provisional nodes. Wires then merge every
provisional node they touch, and wires merge with each other through explicit
connections or when an endpoint of one lies on the other's polyline. The merge is the
set of connected components of a `networkx` graph whose vertices are the provisional
nodes and the wires.

The result is an arena: nodes are immutable records addressed by integer index, and
terminals receive the index (never a node object) when the result is applied to a
schematic.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import networkx as nx

from ..cache.keys import create_topology_key
from ..cache.service import CacheScope, SimulationCache
from ..components.base import TerminalKey
from ..components.capabilities import ICurrentSourceComponent, IGroundComponent, IVoltageSourceComponent
from ..constants import GROUND_NODE_INDEX
from ..geometry import Position
from ..schematic.schematic import Schematic
from .exceptions import MnaInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Node:
    """An electrical point: the terminals and components merged into it."""
    index: int
    terminals: Tuple[TerminalKey, ...]
    component_ids: Tuple[str, ...]
    positions: Tuple[Position, ...]

    @property
    def is_reference(self) -> bool:
        return self.index == GROUND_NODE_INDEX

    @property
    def position(self) -> Position:
        return self.positions[0]


@dataclass(frozen=True)
class NodeGenerationResult:
    """
    The outcome of node generation.

    Attributes:
        nodes: Non-reference nodes, where `nodes[i].index == i`.
        reference_node: The merged reference node, or None for a schematic with no
                        terminals at all.
        terminal_nodes: Node index of every terminal, GROUND_NODE_INDEX for the reference.
        reference_origin: How the reference was chosen: 'ground', 'source', 'all' (no
                          ground and no source) or 'none' (no terminals).
    """
    nodes: Tuple[Node, ...]
    reference_node: Optional[Node]
    terminal_nodes: Mapping[TerminalKey, int] = field(default_factory=dict)
    reference_origin: str = "none"

    def __post_init__(self):
        object.__setattr__(self, 'terminal_nodes', MappingProxyType(dict(self.terminal_nodes)))

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def node_indices(self) -> List[int]:
        return [node.index for node in self.nodes]

    def node(self, index: int) -> Node:
        if index == GROUND_NODE_INDEX and self.reference_node is not None:
            return self.reference_node
        if 0 <= index < len(self.nodes):
            return self.nodes[index]
        raise IndexError(f"Node index {index} is out of range [-1, {len(self.nodes)}).")

    def node_of(self, key: TerminalKey) -> int:
        return self.terminal_nodes[key]

    def apply(self, schematic: Schematic) -> None:
        """Writes each terminal's node index into the schematic's terminals."""
        for terminal in schematic.iter_terminals():
            try:
                terminal.node_index = self.terminal_nodes[terminal.key]
            except KeyError:
                raise MnaInputError(
                    context=terminal.component_id,
                    details=f"Terminal '{terminal.key}' is not part of this node generation result. Regenerate the nodes after editing the schematic."
                ) from None


class NodeGenerator:
    """
    Converts a schematic into a `NodeGenerationResult`.

    When a `SimulationCache` is supplied, results are memoized in its 'process' scope
    under the schematic's topology key.
    """

    def __init__(self, cache: Optional[SimulationCache] = None):
        self.cache = cache

    def generate(self, schematic: Schematic) -> NodeGenerationResult:
        if self.cache is None:
            return self._generate(schematic)
        return self.cache.get_or_compute(
            create_topology_key(schematic), lambda: self._generate(schematic), scope=CacheScope.PROCESS
        )

    def generate_and_apply(self, schematic: Schematic) -> NodeGenerationResult:
        result = self.generate(schematic)
        result.apply(schematic)
        return result

    def _generate(self, schematic: Schematic) -> NodeGenerationResult:
        # 1. Provisional nodes: terminals grouped by exact position, in order of first appearance.
        groups: Dict[Position, List[TerminalKey]] = {}
        for terminal in schematic.iter_terminals():
            groups.setdefault(terminal.position, []).append(terminal.key)
        if not groups:
            logger.debug(f"Schematic '{schematic.name}' has no terminals; no nodes generated.")
            return NodeGenerationResult(nodes=(), reference_node=None)
        positions = list(groups)

        # 2. Merge through wires.
        graph = nx.Graph()
        graph.add_nodes_from(("position", i) for i in range(len(positions)))
        wires = list(schematic.wires.values())
        graph.add_nodes_from(("wire", wire.wire_id) for wire in wires)
        for wire in wires:
            for i, position in enumerate(positions):
                if wire.touches(position):
                    graph.add_edge(("wire", wire.wire_id), ("position", i))
            for other_id in wire.connected_to:
                if other_id in schematic.wires:
                    graph.add_edge(("wire", wire.wire_id), ("wire", other_id))
        for i, wire in enumerate(wires):
            for other in wires[i + 1:]:
                if wire.touches_wire(other):
                    graph.add_edge(("wire", wire.wire_id), ("wire", other.wire_id))

        merged: List[List[int]] = []
        for component in nx.connected_components(graph):
            members = sorted(index for kind, index in component if kind == "position")
            if members:
                merged.append(members)
        merged.sort(key=lambda members: members[0])
        logger.debug(
            f"Schematic '{schematic.name}': {len(positions)} terminal positions merged into "
            f"{len(merged)} electrical points by {len(wires)} wires."
        )

        group_of_terminal: Dict[TerminalKey, int] = {}
        for group_index, members in enumerate(merged):
            for member in members:
                for key in groups[positions[member]]:
                    group_of_terminal[key] = group_index

        # 3. Reference selection.
        reference_groups, origin = self._select_reference(schematic, group_of_terminal, len(merged))

        # 4. Dense indices after reference removal.
        index_of_group: Dict[int, int] = {}
        next_index = 0
        for group_index in range(len(merged)):
            if group_index in reference_groups:
                index_of_group[group_index] = GROUND_NODE_INDEX
            else:
                index_of_group[group_index] = next_index
                next_index += 1

        def build_node(index: int, group_indices: List[int]) -> Node:
            members = [member for group_index in group_indices for member in merged[group_index]]
            keys = tuple(key for member in members for key in groups[positions[member]])
            component_ids = tuple(dict.fromkeys(key.component_id for key in keys))
            return Node(index, keys, component_ids, tuple(positions[member] for member in members))

        nodes = tuple(
            build_node(index_of_group[group_index], [group_index])
            for group_index in range(len(merged)) if group_index not in reference_groups
        )
        reference_node = build_node(GROUND_NODE_INDEX, sorted(reference_groups))
        terminal_nodes = {key: index_of_group[group_index] for key, group_index in group_of_terminal.items()}

        logger.info(
            f"Generated {len(nodes)} non-reference node(s) for schematic '{schematic.name}' "
            f"(reference from {origin})."
        )
        return NodeGenerationResult(nodes, reference_node, terminal_nodes, origin)

    @staticmethod
    def _select_reference(
        schematic: Schematic, group_of_terminal: Dict[TerminalKey, int], group_count: int
    ) -> Tuple[set, str]:
        grounded = {
            group_of_terminal[component.ground_terminal.key]
            for component in schematic.components_of_type(IGroundComponent)
        }
        if grounded:
            return grounded, "ground"

        for component in schematic.components.values():
            if isinstance(component, (IVoltageSourceComponent, ICurrentSourceComponent)):
                return {group_of_terminal[component.negative_terminal.key]}, "source"

        logger.debug(f"Schematic '{schematic.name}' has no ground and no source; every node is a reference.")
        return set(range(group_count)), "all"
