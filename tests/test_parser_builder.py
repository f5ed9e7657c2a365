# tests/test_parser_builder.py
import textwrap

import numpy as np
import pytest

from ecsim_core import SchematicBuildError
from ecsim_core.components import DCVoltageSource, Resistor
from ecsim_core.parser import ParsingError, SchemaValidationError, SchematicParser
from ecsim_core.schematic_builder import SchematicBuilder, load_schematic

DIVIDER_YAML = """
name: divider
components:
  - type: DCVoltageSource
    id: V1
    terminals: {A: [0, 0], B: [0, 10]}
    parameters: {voltage: "10 V"}
  - type: Resistor
    id: R1
    terminals: {A: [0, 10], B: [10, 10]}
    parameters: {resistance: "1 kohm"}
  - type: Resistor
    id: R2
    terminals: {A: [10, 10], B: [10, 0]}
    parameters: {resistance: 1000}
  - type: Ground
    id: GND
    terminals: {G: [0, 0]}
wires:
  - id: W_RAIL
    points: [[0, 0], [10, 0]]
"""


def component_yaml(type_name: str, parameters: str) -> str:
    return textwrap.dedent(f"""
    components:
      - type: {type_name}
        id: X1
        terminals: {{A: [0, 0], B: [0, 10]}}
        parameters: {parameters}
    """)


class TestSchematicParser:

    def test_parses_components_and_wires(self, write_yaml):
        parsed = SchematicParser().parse(write_yaml(DIVIDER_YAML))
        assert parsed.name == "divider"
        assert [c.instance_id for c in parsed.components] == ["V1", "R1", "R2", "GND"]
        assert parsed.components[1].raw_parameters == {"resistance": "1 kohm"}
        assert parsed.components[0].raw_terminals == {"A": (0.0, 0.0), "B": (0.0, 10.0)}
        assert parsed.wires[0].points == [(0.0, 0.0), (10.0, 0.0)]
        assert parsed.wires[0].connected_to == []
        assert parsed.raw_sweep_config is None

    def test_name_defaults_to_file_stem(self, write_yaml):
        content = DIVIDER_YAML.replace("name: divider\n", "")
        parsed = SchematicParser().parse(write_yaml(content, name="my_board.yaml"))
        assert parsed.name == "my_board"

    @pytest.mark.parametrize("content, fragment", [
        (DIVIDER_YAML.replace("id: R1", "id: R-1"), "forbidden character"),
        (DIVIDER_YAML.replace("id: R2", "id: R1"), "Duplicate values"),
        (DIVIDER_YAML.replace("B: [10, 10]}", "B: [10]}"), "Coordinates"),
        (DIVIDER_YAML.replace("[[0, 0], [10, 0]]", "[[0, 0]]"), "min length"),
        (DIVIDER_YAML + "extra_section: 1\n", "unknown field"),
        ("name: nothing\n", "required field"),
    ])
    def test_schema_violations(self, write_yaml, content, fragment):
        with pytest.raises(SchemaValidationError) as excinfo:
            SchematicParser().parse(write_yaml(content))
        assert fragment in str(excinfo.value)
        assert "YAML Schema Validation Error" in excinfo.value.get_diagnostic_report()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParsingError, match="not found"):
            SchematicParser().parse(tmp_path / "absent.yaml")

    @pytest.mark.parametrize("content, fragment", [
        ("components: [", "Invalid YAML syntax"),
        ("", "empty"),
        ("- just\n- a list\n", "dictionary"),
    ])
    def test_unreadable_content(self, write_yaml, content, fragment):
        with pytest.raises(ParsingError) as excinfo:
            SchematicParser().parse(write_yaml(content))
        assert fragment in excinfo.value.details


class TestSchematicBuilder:

    def test_builds_typed_components_with_si_values(self, write_yaml):
        schematic = SchematicBuilder().build(SchematicParser().parse(write_yaml(DIVIDER_YAML)))
        assert isinstance(schematic.components["V1"], DCVoltageSource)
        assert isinstance(schematic.components["R1"], Resistor)
        assert schematic.components["R1"].resistance == pytest.approx(1000.0)
        assert schematic.components["R2"].resistance == 1000.0
        assert list(schematic.wires) == ["W_RAIL"]

    def test_explicit_connections_are_symmetric(self, write_yaml):
        content = DIVIDER_YAML + "  - id: W_A\n    points: [[0, 20], [5, 20]]\n    connected_to: [W_RAIL]\n"
        schematic = SchematicBuilder().build(SchematicParser().parse(write_yaml(content)))
        assert schematic.wires["W_RAIL"].connected_to == {"W_A"}
        assert schematic.wires["W_A"].connected_to == {"W_RAIL"}

    def test_unknown_connection_target_is_kept(self, write_yaml):
        content = DIVIDER_YAML.replace("points: [[0, 0], [10, 0]]", "points: [[0, 0], [10, 0]]\n    connected_to: [W_GHOST]")
        schematic = SchematicBuilder().build(SchematicParser().parse(write_yaml(content)))
        assert "W_GHOST" in schematic.wires["W_RAIL"].connected_to

    @pytest.mark.parametrize("type_name, parameters, fragment", [
        ("Transistor", "{}", "Unknown component type"),
        ("Resistor", '{resistance: "10 farad"}', "Parameter Unit Error"),
        ("Resistor", '{resistance: "10 blorbs"}', "Parameter Unit Error"),
        ("Resistor", "{}", "Missing required parameter"),
        ("Resistor", "{resistance: -5}", "non-negative"),
        ("Resistor", "{resistance: 5, color: 1}", "Undeclared parameter"),
    ])
    def test_component_errors_become_build_errors(self, write_yaml, type_name, parameters, fragment):
        parsed = SchematicParser().parse(write_yaml(component_yaml(type_name, parameters)))
        with pytest.raises(SchematicBuildError) as excinfo:
            SchematicBuilder().build(parsed)
        assert fragment in str(excinfo.value)
        assert "X1" in str(excinfo.value)

    def test_wrong_terminal_names_are_reported(self, write_yaml):
        content = component_yaml("Resistor", "{resistance: 5}").replace("{A: [0, 0], B: [0, 10]}", "{A: [0, 0], Q: [0, 10]}")
        with pytest.raises(SchematicBuildError, match="Terminal layout"):
            SchematicBuilder().build(SchematicParser().parse(write_yaml(content)))


class TestLoadSchematic:

    def test_defaults_without_simulation_section(self, write_yaml):
        schematic, options, sweep = load_schematic(write_yaml(DIVIDER_YAML))
        assert schematic.name == "divider"
        assert options.max_operating_point_iterations == 64
        assert sweep is None

    def test_options_and_sweep_sections(self, write_yaml):
        content = DIVIDER_YAML + textwrap.dedent("""
        simulation:
          max_operating_point_iterations: 16
          points_per_cycle: 32
          cycles: 3
          dc_time_window: "10 ms"
        sweep:
          type: log
          start: "10 Hz"
          stop: "1 kHz"
          num_points: 3
        """)
        _, options, sweep = load_schematic(write_yaml(content))
        assert options.max_operating_point_iterations == 16
        assert options.points_per_cycle == 32
        assert options.cycles == 3.0
        assert options.dc_time_window == pytest.approx(0.01)
        np.testing.assert_allclose(sweep, [10.0, 100.0, 1000.0])

    def test_invalid_option_value_is_a_build_error(self, write_yaml):
        content = DIVIDER_YAML + "simulation:\n  cycles: -1\n"
        with pytest.raises(SchematicBuildError, match="Simulation Configuration Error"):
            load_schematic(write_yaml(content))

    def test_parsing_errors_are_wrapped(self, tmp_path):
        with pytest.raises(SchematicBuildError, match="YAML Parsing or File Error"):
            load_schematic(tmp_path / "absent.yaml")
