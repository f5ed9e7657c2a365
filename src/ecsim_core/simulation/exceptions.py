# src/ecsim_core/simulation/exceptions.py
"""
Defines custom, diagnosable exceptions specific to building and solving MNA systems.

All exceptions in this module inherit from `DiagnosableError`, so they can be caught
explicitly, are guaranteed to implement `get_diagnostic_report()`, and can be handled
together under the common base type by the execution facade.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class MnaInputError(DiagnosableError):
    """
    Raised for logical or structural errors encountered while setting up an MNA
    system, before any matrix assembly (missing collaborators, unassigned nodes).
    """
    context: str
    details: str

    def __str__(self) -> str:
        return f"MNA input error in {self.context}: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="MNA Input Error",
            details=self.details,
            suggestion="Make sure the schematic has been passed through node generation and that every referenced component belongs to it.",
            context={'component': self.context}
        )


@dataclass()
class MatrixDimensionError(DiagnosableError, ValueError):
    """
    Raised when an admittance matrix is constructed with a non-positive dimension or
    when a submatrix or free-term vector does not have the exact expected shape.
    """
    details: str
    expected_shape: Optional[Tuple[int, ...]] = None
    actual_shape: Optional[Tuple[int, ...]] = None

    def __str__(self) -> str:
        if self.expected_shape is not None:
            return f"{self.details} (expected shape {self.expected_shape}, got {self.actual_shape})"
        return self.details

    def get_diagnostic_report(self) -> str:
        details = self.details
        if self.expected_shape is not None:
            details += f"\nExpected shape: {self.expected_shape}\nActual shape:   {self.actual_shape}"
        return format_diagnostic_report(
            error_type="Matrix Dimension Mismatch",
            details=details,
            suggestion="This indicates an internal inconsistency between node generation and matrix assembly. Rebuild the nodes before assembling the matrix.",
            context={}
        )


@dataclass()
class SingularMatrixError(DiagnosableError, np.linalg.LinAlgError):
    """
    Raised when Gauss-Jordan elimination finds a column with no non-zero pivot, or
    when the solution contains non-finite values.

    This class uses multiple inheritance to be catchable both as our custom
    `DiagnosableError` and as a standard `LinAlgError`.
    """
    details: str
    frequency: Optional[float] = None

    def __str__(self):
        freq_str = f" at frequency {self.frequency:.4e} Hz" if self.frequency is not None else ""
        return f"Singular matrix detected{freq_str}: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Singular Matrix Encountered",
            details=self.details,
            suggestion="This is often caused by a floating part of the circuit with no path to the reference node, a loop of ideal voltage sources, or a voltage source shorted by a wire.",
            context={'frequency': f"{self.frequency:.4e} Hz" if self.frequency is not None else "N/A (DC)"}
        )


@dataclass()
class OpAmpOutputGroundedError(DiagnosableError):
    """Raised when an op-amp's output terminal lands on the reference node."""
    component_id: str

    def __str__(self) -> str:
        return f"Op-amp '{self.component_id}' has its output connected to the reference node."

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Op-amp Output Grounded",
            details=(
                f"The output of op-amp '{self.component_id}' is connected to the reference (ground) node. "
                "The op-amp branch current would be unconstrained."
            ),
            suggestion="Connect the op-amp output to a non-ground node, e.g. through a load resistor.",
            context={'component': self.component_id, 'node': -1}
        )


@dataclass()
class OscillatingOperatingPointError(DiagnosableError):
    """
    Raised when the op-amp operating-point iteration exceeds its iteration cap
    without reaching a self-consistent set of modes.
    """
    iterations: int
    mode_history: List[Dict[str, str]] = field(default_factory=list)

    def __str__(self) -> str:
        return f"Op-amp operating point did not settle after {self.iterations} iterations."

    def get_diagnostic_report(self) -> str:
        tail = self.mode_history[-4:]
        history = "\n".join(
            f"  pass {len(self.mode_history) - len(tail) + i + 1}: "
            + ", ".join(f"{op_amp}={mode}" for op_amp, mode in modes.items())
            for i, modes in enumerate(tail)
        )
        return format_diagnostic_report(
            error_type="Oscillating Op-amp Operating Point",
            details=(
                "The op-amp modes kept changing between passes.\n"
                f"Last mode assignments:\n{history or '  (none)'}"
            ),
            suggestion="Check for positive feedback loops or raise 'max_operating_point_iterations' in the simulation options.",
            context={'iterations': self.iterations}
        )
