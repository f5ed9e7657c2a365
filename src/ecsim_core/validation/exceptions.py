# src/ecsim_core/validation/exceptions.py
from typing import List

from ..errors import DiagnosableError, format_diagnostic_report
from .issues import ValidationIssue


class SemanticValidationError(DiagnosableError):
    """
    Raised when the schematic validator reports error-level issues. Warnings and info
    messages passed in are dropped.
    """

    def __init__(self, issues: List[ValidationIssue]):
        self.issues: List[ValidationIssue] = [issue for issue in issues if issue.is_error]
        super().__init__(f"Schematic validation failed with {len(self.issues)} error(s): {self._listing()}")

    def _listing(self) -> str:
        return "\n".join(f"  - {issue}" for issue in self.issues)

    @property
    def component_ids(self) -> List[str]:
        """Components (or wires) named by the errors, in first-seen order."""
        ids = [issue.component_id or issue.details.get('wire_id') for issue in self.issues]
        return list(dict.fromkeys(i for i in ids if i))

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Schematic Validation Error",
            details=f"The schematic cannot be simulated:\n{self._listing()}",
            suggestion="Fix the listed problems: move op-amp outputs off the reference node, un-short voltage sources, and remove connections to missing wires.",
            context={'component': ", ".join(self.component_ids) or None}
        )
