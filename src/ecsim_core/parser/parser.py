# src/ecsim_core/parser/parser.py
import logging
import numbers
import re
import string
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import cerberus
import yaml

from .exceptions import ParsingError, SchemaValidationError
from .raw_data import ParsedComponentData, ParsedSchematic, ParsedWireData

logger = logging.getLogger(__name__)

# Identifiers are single tokens; '.' and '-' are reserved for terminal references.
ID_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
ALLOWED_ID_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def _is_real_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


class SchematicSchemaValidator(cerberus.Validator):
    """Cerberus validator with the schematic-specific rules id_regex, coordinates and unique_elements_by_key."""

    def _validate_id_regex(self, constraint: bool, field: str, value: Any):
        """
        The rule's arguments are validated against this schema:
        {'type': 'boolean'}
        """
        # Non-strings are already reported by the 'type' rule.
        if not constraint or not isinstance(value, str) or ID_PATTERN.match(value):
            return
        forbidden = sorted(set(value) - ALLOWED_ID_CHARS)
        self._error(
            field,
            f"Identifier '{value}' must start with a letter or underscore and contain only letters, digits "
            f"and underscores; found forbidden character(s) {forbidden}."
        )

    def _validate_coordinates(self, constraint: bool, field: str, value: Any):
        """
        The rule's arguments are validated against this schema:
        {'type': 'boolean'}
        """
        if not constraint:
            return
        if not isinstance(value, (list, tuple)) or len(value) != 2 or not all(_is_real_number(v) for v in value):
            self._error(field, f"Coordinates must be a pair of numbers [x, y], got {value!r}.")

    def _validate_unique_elements_by_key(self, key: str, field: str, value: Any):
        """
        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        if not isinstance(value, list):
            return
        counts = Counter(
            str(item[key]) for item in value if isinstance(item, dict) and item.get(key) is not None
        )
        duplicates = sorted(name for name, count in counts.items() if count > 1)
        if duplicates:
            self._error(field, f"Duplicate values found for key '{key}': {duplicates}")


class SchematicParser:
    """
    Parses and validates a schematic YAML file into the intermediate representation.
    """
    _id_rule = {"type": "string", "required": True, "empty": False, "id_regex": True}
    _point_rule = {"coordinates": True}

    _component_schema = {
        "type": {"type": "string", "required": True, "empty": False, "id_regex": True},
        "id": _id_rule,
        "terminals": {
            "type": "dict", "required": True, "minlength": 1,
            "keysrules": {"type": "string", "id_regex": True},
            "valuesrules": _point_rule,
        },
        "parameters": {
            "type": "dict", "required": False,
            "keysrules": {"type": "string", "id_regex": True},
            "valuesrules": {"type": ["string", "number"]},
        },
    }

    _wire_schema = {
        "id": _id_rule,
        "points": {"type": "list", "required": True, "minlength": 2, "schema": _point_rule},
        "connected_to": {"type": "list", "required": False, "schema": {"type": "string", "id_regex": True}},
    }

    _schema = {
        "name": {"type": "string", "required": False, "empty": False},
        "components": {
            "type": "list", "required": True, "unique_elements_by_key": "id",
            "schema": {"type": "dict", "schema": _component_schema},
        },
        "wires": {
            "type": "list", "required": False, "unique_elements_by_key": "id",
            "schema": {"type": "dict", "schema": _wire_schema},
        },
        "simulation": {
            "type": "dict", "required": False, "schema": {
                "max_operating_point_iterations": {"type": "integer", "min": 1},
                "points_per_cycle": {"type": "integer", "min": 1},
                "cycles": {"type": "number"},
                "dc_time_window": {"type": ["string", "number"]},
            },
        },
        "sweep": {
            "type": "dict", "required": False, "schema": {
                "type": {"type": "string", "required": True, "allowed": ["linear", "log", "list"]},
                "start": {"type": ["string", "number"], "required": True, "dependencies": {"type": ["linear", "log"]}},
                "stop": {"type": ["string", "number"], "required": True, "dependencies": {"type": ["linear", "log"]}},
                "num_points": {"type": "integer", "required": True, "min": 1, "dependencies": {"type": ["linear", "log"]}},
                "points": {"type": "list", "required": True, "minlength": 1, "schema": {"type": ["string", "number"]}, "dependencies": {"type": ["list"]}},
            },
        },
    }

    def __init__(self):
        self._validator = SchematicSchemaValidator(self._schema)
        self._validator.allow_unknown = False
        logger.info("SchematicParser initialized with strict structural validation rules.")

    def parse(self, yaml_path: Union[str, Path]) -> ParsedSchematic:
        """Parses one schematic file and returns its IR."""
        resolved_path = Path(yaml_path).resolve()
        logger.info(f"Parsing schematic file: {resolved_path}")

        yaml_content = self._load_yaml(resolved_path)
        if not self._validator.validate(yaml_content):
            raise SchemaValidationError(self._validator.errors, resolved_path)
        validated_data = self._validator.document

        components = [
            ParsedComponentData(
                instance_id=raw["id"],
                component_type=raw["type"],
                raw_terminals={name: _as_point(point) for name, point in raw["terminals"].items()},
                raw_parameters=dict(raw.get("parameters", {})),
                source_yaml_path=resolved_path,
            )
            for raw in validated_data.get("components", [])
        ]
        wires = [
            ParsedWireData(
                wire_id=raw["id"],
                points=[_as_point(point) for point in raw["points"]],
                connected_to=list(raw.get("connected_to", [])),
                source_yaml_path=resolved_path,
            )
            for raw in validated_data.get("wires", [])
        ]
        logger.debug(f"Parsed {len(components)} component(s) and {len(wires)} wire(s) from {resolved_path.name}.")

        return ParsedSchematic(
            name=validated_data.get("name", resolved_path.stem),
            source_yaml_path=resolved_path,
            components=components,
            wires=wires,
            raw_simulation_options=dict(validated_data.get("simulation", {})),
            raw_sweep_config=validated_data.get("sweep"),
        )

    def _load_yaml(self, source: Path) -> Dict[str, Any]:
        """Loads and performs basic sanity checks on a YAML file."""
        if not source.is_file():
            raise ParsingError(details=f"Schematic file not found at path: {source}", file_path=source)
        try:
            with source.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except PermissionError as e:
            raise ParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
        except yaml.YAMLError as e:
            raise ParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
        if content is None:
            raise ParsingError(details="The YAML file is empty or contains no valid content.", file_path=source)
        if not isinstance(content, dict):
            raise ParsingError(details="The root of the YAML file must be a dictionary (mapping).", file_path=source)
        return content


def _as_point(raw: Any) -> Tuple[float, float]:
    return float(raw[0]), float(raw[1])
