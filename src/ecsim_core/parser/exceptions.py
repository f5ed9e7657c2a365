# src/ecsim_core/parser/exceptions.py
"""
Diagnosable exceptions for the YAML parsing and schema validation stage.

`ParsingError` covers file-level and syntax problems; `SchemaValidationError` covers
structural violations found by the Cerberus schema. Both derive from
`DiagnosableError`, so the builder can catch them with a single clause.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from ..errors import DiagnosableError, format_diagnostic_report


class BaseParsingError(DiagnosableError):
    """Common base of all schematic file parsing errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Parsing Error",
            details=str(self),
            suggestion="Please check the format and content of the schematic YAML file.",
            context={}
        )


@dataclass()
class ParsingError(BaseParsingError):
    """
    Raised when a schematic file is missing, unreadable, empty, or not valid YAML.
    """
    details: str
    file_path: Path

    def __str__(self):
        return f"Parsing error in file '{self.file_path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="YAML Parsing or File Error",
            details=self.details,
            suggestion="Ensure the file exists, has the correct read permissions, and contains valid YAML syntax.",
            context={'source_file': self.file_path}
        )


@dataclass()
class SchemaValidationError(BaseParsingError):
    """
    Raised when the YAML is syntactically valid but does not match the schematic
    schema (missing keys, invalid identifiers, duplicate ids, malformed coordinates).
    """
    errors: Dict[str, Any]
    file_path: Path

    def _error_lines(self, prefix: str):
        return [f"  - {prefix} '{field}': {messages}" for field, messages in sorted(self.errors.items(), key=lambda kv: str(kv[0]))]

    def __str__(self):
        return (
            f"YAML schema validation failed for file '{self.file_path}':\n"
            + "\n".join(self._error_lines("In field"))
        )

    def get_diagnostic_report(self) -> str:
        details = (
            "The structure of the YAML file does not conform to the schematic schema.\n"
            f"See details for {len(self.errors)} issue(s) below:\n\n" + "\n".join(self._error_lines("Field"))
        )
        return format_diagnostic_report(
            error_type="YAML Schema Validation Error",
            details=details,
            suggestion="Correct the specified fields. Check for invalid identifiers (e.g., using '-' or '.'), duplicate component or wire ids, and coordinates that are not [x, y] number pairs.",
            context={'source_file': self.file_path}
        )
