# src/ecsim_core/components/exceptions.py
"""
Defines the custom, diagnosable exceptions for the components subsystem.
"""
from dataclasses import dataclass
from typing import Optional

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class ComponentError(DiagnosableError):
    """
    The canonical, diagnosable exception for all component-related errors.

    Raised when a component is constructed with an invalid parameter (negative
    resistance, non-positive AC frequency, unordered supply rails, ...) or with a
    terminal layout that does not match its declaration.
    """
    component_id: str
    details: str
    frequency: Optional[float] = None

    def __str__(self) -> str:
        return f"Component '{self.component_id}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Invalid Component",
            details=self.details,
            suggestion="Check the component's parameters and terminals (e.g., non-negative resistance, positive AC frequency, ordered supply rails).",
            context={
                'component': self.component_id,
                'frequency': f"{self.frequency:.4e} Hz" if self.frequency is not None else None,
            }
        )


@dataclass()
class ParameterConversionError(DiagnosableError):
    """
    Raised when a raw parameter value from a schematic file cannot be converted to the
    canonical unit the component declares for it.
    """
    component_id: str
    parameter: str
    user_input: str
    expected_unit: str
    details: str

    def __str__(self) -> str:
        return f"Component '{self.component_id}', parameter '{self.parameter}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Parameter Unit Error",
            details=f"Parameter '{self.parameter}' expects a value compatible with '{self.expected_unit}'.\n{self.details}",
            suggestion=f"Give '{self.parameter}' as a plain number in {self.expected_unit} or as a string with compatible units.",
            context={'component': self.component_id, 'user_input': self.user_input}
        )
