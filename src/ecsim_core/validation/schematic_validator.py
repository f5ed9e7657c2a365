# src/ecsim_core/validation/schematic_validator.py
import logging
from collections import Counter
from typing import List, Optional, Set

import networkx as nx

from ..cache.service import SimulationCache
from ..components import Capacitor, Resistor
from ..components.capabilities import (
    ICurrentSourceComponent,
    IOpAmpComponent,
    IVoltageSourceComponent,
)
from ..constants import GROUND_NODE_INDEX
from ..schematic.schematic import Schematic
from ..simulation.nodes import NodeGenerationResult, NodeGenerator
from .issue_codes import SchematicIssueCode
from .issues import ValidationIssue

logger = logging.getLogger(__name__)


class SchematicValidator:
    """
    Checks a built schematic for logical and topological problems before simulation.

    The validator runs node generation itself (sharing the process-level cache when
    one is given) and reports what it finds as `ValidationIssue` objects. Halting on
    error-level issues is left to the caller.
    """

    def __init__(self, schematic: Schematic, cache: Optional[SimulationCache] = None):
        if not isinstance(schematic, Schematic):
            raise TypeError("SchematicValidator requires a Schematic object.")
        self.schematic = schematic
        self.cache = cache
        self.issues: List[ValidationIssue] = []

    def validate(self) -> List[ValidationIssue]:
        """
        Returns every issue found (errors, warnings and info messages).
        """
        self.issues = []
        logger.info(f"Starting validation for schematic '{self.schematic.name}'...")
        nodes = NodeGenerator(self.cache).generate_and_apply(self.schematic)

        self._check_reference(nodes)
        self._check_op_amps(nodes)
        self._check_voltage_sources()
        self._check_wires()
        self._check_floating_terminals(nodes)
        self._check_ideal_values()

        counts = Counter(str(issue.level) for issue in self.issues)
        logger.info(
            f"Validation of '{self.schematic.name}' complete: {counts['ERROR']} error(s), "
            f"{counts['WARNING']} warning(s), {counts['INFO']} info message(s)."
        )
        return self.issues

    def _add_issue(self, issue_code: SchematicIssueCode, **details):
        self.issues.append(ValidationIssue.from_code(issue_code, **details))

    # --- Checks ---

    def _check_reference(self, nodes: NodeGenerationResult):
        if nodes.reference_origin == "all":
            self._add_issue(SchematicIssueCode.REF_NONE)
        elif nodes.reference_origin == "source":
            first_source = next(
                component for component in self.schematic.components.values()
                if isinstance(component, (IVoltageSourceComponent, ICurrentSourceComponent))
            )
            self._add_issue(SchematicIssueCode.REF_IMPLICIT, component_id=first_source.instance_id)

    def _check_op_amps(self, nodes: NodeGenerationResult):
        if nodes.reference_origin == "all":
            return
        for op_amp in self.schematic.components_of_type(IOpAmpComponent):
            if op_amp.output.node_index == GROUND_NODE_INDEX:
                self._add_issue(SchematicIssueCode.OPAMP_OUT_GND, component_id=op_amp.instance_id)

    def _check_voltage_sources(self):
        for source in self.schematic.components_of_type(IVoltageSourceComponent):
            if source.negative_terminal.node_index == source.positive_terminal.node_index:
                self._add_issue(
                    SchematicIssueCode.VSRC_SHORTED,
                    component_id=source.instance_id, node_index=source.positive_terminal.node_index
                )

    def _check_wires(self):
        wires = list(self.schematic.wires.values())
        for wire in wires:
            for target_id in sorted(wire.connected_to):
                if target_id not in self.schematic.wires:
                    self._add_issue(
                        SchematicIssueCode.WIRE_UNKNOWN_CONN,
                        wire_id=wire.wire_id, target_id=target_id
                    )

        graph = nx.Graph()
        graph.add_nodes_from(wire.wire_id for wire in wires)
        for i, wire in enumerate(wires):
            for target_id in wire.connected_to:
                if target_id in self.schematic.wires:
                    graph.add_edge(wire.wire_id, target_id)
            for other in wires[i + 1:]:
                if wire.touches_wire(other):
                    graph.add_edge(wire.wire_id, other.wire_id)

        positions = set(self.schematic.terminal_positions())
        reaching: Set[str] = set()
        for group in nx.connected_components(graph):
            if any(self.schematic.wires[wire_id].touches(position) for wire_id in group for position in positions):
                reaching.update(group)
        for wire in wires:
            if wire.wire_id not in reaching:
                self._add_issue(SchematicIssueCode.WIRE_DANGLING, wire_id=wire.wire_id)

    def _check_floating_terminals(self, nodes: NodeGenerationResult):
        candidates = list(nodes.nodes)
        if nodes.reference_node is not None and nodes.reference_origin != "all":
            candidates.append(nodes.reference_node)
        for node in candidates:
            if len(node.terminals) == 1:
                terminal = node.terminals[0]
                self._add_issue(
                    SchematicIssueCode.TERM_FLOATING,
                    component_id=terminal.component_id, terminal=str(terminal)
                )

    def _check_ideal_values(self):
        for resistor in self.schematic.components_of_type(Resistor):
            if resistor.resistance == 0:
                self._add_issue(SchematicIssueCode.DC_INFO_SHORT_R0, component_id=resistor.instance_id)
        for capacitor in self.schematic.components_of_type(Capacitor):
            if capacitor.capacitance == 0:
                self._add_issue(SchematicIssueCode.DC_INFO_OPEN_C0, component_id=capacitor.instance_id)
