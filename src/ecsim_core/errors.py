# src/ecsim_core/errors.py
import logging
from abc import abstractmethod
from typing import Any, Dict, List, Protocol, Tuple, runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class EcsimError(Exception):
    """Base class for every error ecsim_core raises to its callers."""
    pass

class SchematicBuildError(EcsimError):
    """
    Loading a schematic file failed: unreadable YAML, a schema violation, an unknown
    component type, a bad unit or an invalid parameter. The message is a diagnostic
    report.
    """
    pass

class SimulationRunError(EcsimError):
    """
    A simulation of a built schematic failed: validation errors, a malformed or
    singular MNA system, or an op-amp operating point that never settles. The message
    is a diagnostic report.
    """
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """Anything that can describe itself as a multi-line diagnostic report."""
    def get_diagnostic_report(self) -> str:
        ...

class DiagnosableError(Exception, Diagnosable):
    """
    Concrete base of all internal errors. Subclasses must implement
    `get_diagnostic_report`; the public entry points turn that report into the message
    of a `SchematicBuildError` or `SimulationRunError`.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        raise NotImplementedError


# --- Report Formatting ---

# (context key, label), in display order.
_CONTEXT_LABELS: Tuple[Tuple[str, str], ...] = (
    ('component', "Component"),
    ('node', "Node"),
    ('source_file', "Source File"),
    ('user_input', "User Input"),
    ('frequency', "Frequency"),
    ('iterations', "Iterations"),
)
_RULE_WIDTH = 70


def _indented(text: str) -> List[str]:
    return [f"  {line}" for line in text.splitlines()]


def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    Formats a diagnostic report in the common layout: a header, the known context
    fields, the details and an optional suggestion.

    Context keys understood: component, node, source_file, user_input, frequency and
    iterations. Entries that are None or empty are left out. Unknown keys are ignored.
    """
    lines = ["\n", " ecsim_core: Actionable Diagnostic Report ".center(_RULE_WIDTH, "="), f"{'Error Type:':<16}{error_type}"]
    for key, label in _CONTEXT_LABELS:
        value = context.get(key)
        if value is None or value == "":
            continue
        shown = f"'{value}'" if key == 'user_input' else value
        lines.append(f"{label + ':':<16}{shown}")

    lines.append("\nDetails:")
    lines.extend(_indented(details))
    if suggestion:
        lines.append("\nSuggestion:")
        lines.extend(_indented(suggestion))
    lines.append("=" * _RULE_WIDTH)
    return "\n".join(lines)
