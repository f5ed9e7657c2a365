# src/ecsim_core/schematic_builder.py

"""
Defines the SchematicBuilder, which turns the parsed intermediate representation of a
schematic file into a simulation-ready `Schematic`.

The builder resolves component types through the component registry, converts every
raw parameter value with pint into the canonical SI magnitude the component declares,
and recreates the wires with their explicit connections. Any diagnosable failure on
the way is re-raised as a single, user-facing `SchematicBuildError`.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import numpy as np
import pint

from .components.base import COMPONENT_REGISTRY, ComponentBase
from .components.exceptions import ComponentError, ParameterConversionError
from .errors import DiagnosableError, SchematicBuildError, format_diagnostic_report
from .parser.parser import SchematicParser
from .parser.raw_data import ParsedComponentData, ParsedSchematic
from .schematic.schematic import Schematic
from .simulation.config import ConfigParsingError, SimulationOptions, parse_simulation_options, parse_sweep_config
from .units import to_si_magnitude

logger = logging.getLogger(__name__)


class SchematicBuilder:
    """
    Synthesizes a `Schematic` from a `ParsedSchematic`.
    """

    def build(self, parsed: ParsedSchematic) -> Schematic:
        logger.info(f"--- Starting schematic synthesis for '{parsed.name}' ---")
        try:
            schematic = Schematic(parsed.name)
            for component_ir in parsed.components:
                schematic.add_component(self._build_component(component_ir))

            for wire_ir in parsed.wires:
                schematic.add_wire(wire_ir.wire_id, wire_ir.points)
            for wire_ir in parsed.wires:
                for target_id in wire_ir.connected_to:
                    if target_id in schematic.wires:
                        schematic.connect_wires(wire_ir.wire_id, target_id)
                    else:
                        # Kept so the validator can report it.
                        logger.warning(f"Wire '{wire_ir.wire_id}' references unknown wire '{target_id}'.")
                        schematic.wires[wire_ir.wire_id].connected_to.add(target_id)

            logger.info(
                f"--- Schematic synthesis for '{schematic.name}' successful: "
                f"{len(schematic.components)} component(s), {len(schematic.wires)} wire(s). ---"
            )
            return schematic

        except DiagnosableError as e:
            raise SchematicBuildError(e.get_diagnostic_report()) from e

        except Exception as e:
            report = format_diagnostic_report(
                error_type=f"An Unexpected Error Occurred ({type(e).__name__})",
                details=f"The schematic builder encountered an unexpected internal error: {e}",
                suggestion="This may indicate a bug in ecsim_core. Please review the traceback.",
                context={'source_file': parsed.source_yaml_path}
            )
            raise SchematicBuildError(report) from e

    def _build_component(self, component_ir: ParsedComponentData) -> ComponentBase:
        if component_ir.component_type not in COMPONENT_REGISTRY:
            raise ComponentError(
                component_id=component_ir.instance_id,
                details=(
                    f"Unknown component type '{component_ir.component_type}'. "
                    f"Registered types: {sorted(COMPONENT_REGISTRY)}."
                )
            )
        ComponentClass = COMPONENT_REGISTRY[component_ir.component_type]
        declared_params = ComponentClass.declare_parameters()

        undeclared = sorted(set(component_ir.raw_parameters) - set(declared_params))
        if undeclared:
            raise ComponentError(
                component_id=component_ir.instance_id,
                details=f"Undeclared parameter(s) {undeclared} for {component_ir.component_type}. Declared: {list(declared_params)}."
            )

        parameters: Dict[str, float] = {}
        for name, raw_value in component_ir.raw_parameters.items():
            unit = declared_params[name]
            try:
                parameters[name] = to_si_magnitude(raw_value, unit)
            except (pint.DimensionalityError, pint.UndefinedUnitError, ValueError, TypeError) as e:
                raise ParameterConversionError(
                    component_id=component_ir.instance_id,
                    parameter=name,
                    user_input=str(raw_value),
                    expected_unit=unit,
                    details=str(e)
                ) from e

        component = ComponentClass.from_parameters(component_ir.instance_id, component_ir.raw_terminals, parameters)
        logger.debug(f"Built {component} with parameters {parameters}.")
        return component


def load_schematic(path: Union[str, Path]) -> Tuple[Schematic, SimulationOptions, Optional[np.ndarray]]:
    """
    Parses, validates and builds a schematic file.

    Returns:
        The schematic, the simulation options declared in the file (defaults when
        absent) and the sweep frequencies in Hz, or None when the file has no sweep.

    Raises:
        SchematicBuildError: For any parsing, schema, component or configuration error.
    """
    try:
        parsed = SchematicParser().parse(path)
    except DiagnosableError as e:
        raise SchematicBuildError(e.get_diagnostic_report()) from e

    schematic = SchematicBuilder().build(parsed)

    try:
        options = parse_simulation_options(parsed.raw_simulation_options)
        sweep = parse_sweep_config(parsed.raw_sweep_config) if parsed.raw_sweep_config else None
    except ConfigParsingError as e:
        report = format_diagnostic_report(
            error_type="Simulation Configuration Error",
            details=str(e),
            suggestion="Check the 'simulation' and 'sweep' sections of the schematic file.",
            context={'source_file': parsed.source_yaml_path}
        )
        raise SchematicBuildError(report) from e
    return schematic, options, sweep
