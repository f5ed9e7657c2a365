# src/ecsim_core/parser/raw_data.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

# Intermediate representation handed from the SchematicParser to the SchematicBuilder.


@dataclass(frozen=True)
class ParsedComponentData:
    """IR for one component entry: its type, id, terminal positions and raw parameters."""
    instance_id: str
    component_type: str
    raw_terminals: Dict[str, Tuple[float, float]]
    raw_parameters: Dict[str, Any]
    source_yaml_path: Path


@dataclass(frozen=True)
class ParsedWireData:
    """IR for one wire: its polyline and explicit connections to other wires."""
    wire_id: str
    points: List[Tuple[float, float]]
    connected_to: List[str]
    source_yaml_path: Path


@dataclass(frozen=True)
class ParsedSchematic:
    """Top-level IR of a schematic file."""
    name: str
    source_yaml_path: Path
    components: List[ParsedComponentData]
    wires: List[ParsedWireData] = field(default_factory=list)
    raw_simulation_options: Dict[str, Any] = field(default_factory=dict)
    raw_sweep_config: Optional[Dict[str, Any]] = None
