# src/ecsim_core/validation/issues.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .issue_codes import SchematicIssueCode, ValidationIssueLevel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    """One finding of the schematic validator."""
    level: ValidationIssueLevel
    code: str
    message: str
    component_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_code(cls, issue_code: SchematicIssueCode, **details) -> "ValidationIssue":
        """Builds an issue with the code's own level and formatted message."""
        return cls(
            level=issue_code.level,
            code=issue_code.code,
            message=issue_code.format_message(**details),
            component_id=details.get('component_id'),
            details=details,
        )

    @property
    def is_error(self) -> bool:
        return self.level is ValidationIssueLevel.ERROR

    def __str__(self) -> str:
        text = f"[{self.level} - {self.code}] {self.message}"
        extra = {k: v for k, v in self.details.items() if k != 'component_id'}
        if extra:
            text += " (" + ", ".join(f"{k}={v}" for k, v in sorted(extra.items())) + ")"
        return text
