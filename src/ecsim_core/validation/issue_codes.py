# src/ecsim_core/validation/issue_codes.py
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ValidationIssueLevel(Enum):
    """Severity of a validation issue. Only ERROR stops a simulation run."""
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"

    def __str__(self):
        return self.value


_ERROR, _WARNING, _INFO = ValidationIssueLevel.ERROR, ValidationIssueLevel.WARNING, ValidationIssueLevel.INFO


class SchematicIssueCode(Enum):
    """
    Schematic validation issue codes. Each member's value is a
    (code_str, level, message_template_str) tuple, so a code always carries the same
    severity.
    """

    # --- Errors: the MNA system would be singular or meaningless ---
    OPAMP_OUT_GND = ("OPAMP_OUT_GND", _ERROR, "Output terminal of op-amp '{component_id}' is connected to the reference node.")
    VSRC_SHORTED = ("VSRC_SHORTED", _ERROR, "Voltage source '{component_id}' has both terminals on node {node_index}.")
    WIRE_UNKNOWN_CONN = ("WIRE_UNKNOWN_CONN", _ERROR, "Wire '{wire_id}' is connected to unknown wire '{target_id}'.")

    # --- Warnings: probably a drawing mistake ---
    WIRE_DANGLING = ("WIRE_DANGLING", _WARNING, "Wire '{wire_id}' does not reach any component terminal.")
    TERM_FLOATING = ("TERM_FLOATING", _WARNING, "Terminal '{terminal}' is not connected to any other terminal.")

    # --- Info: how the schematic will be interpreted ---
    REF_NONE = ("REF_NONE", _INFO, "Schematic has no ground and no source; every node is treated as the reference.")
    REF_IMPLICIT = ("REF_IMPLICIT", _INFO, "Schematic has no ground; the negative terminal of '{component_id}' is used as the reference.")
    DC_INFO_SHORT_R0 = ("DC_INFO_SHORT_R0", _INFO, "Resistor '{component_id}' with zero resistance will be treated as an ideal short.")
    DC_INFO_OPEN_C0 = ("DC_INFO_OPEN_C0", _INFO, "Capacitor '{component_id}' with zero capacitance will be treated as an ideal open.")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def level(self) -> ValidationIssueLevel:
        return self.value[1]

    @property
    def template(self) -> str:
        return self.value[2]

    def format_message(self, **kwargs) -> str:
        """Fills the template. A missing argument yields a readable placeholder message."""
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            logger.error(f"Missing key {e} for {self.code} message template. Provided args: {kwargs}")
            return f"{self.code}: Missing key {e} for template '{self.template}'."
