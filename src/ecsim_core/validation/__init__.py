# src/ecsim_core/validation/__init__.py
import logging
logger = logging.getLogger(__name__)

from .issue_codes import SchematicIssueCode, ValidationIssueLevel
from .issues import ValidationIssue
from .schematic_validator import SchematicValidator
from .exceptions import SemanticValidationError

__all__ = [
    "ValidationIssue",
    "ValidationIssueLevel",
    "SchematicIssueCode",
    "SchematicValidator",
    "SemanticValidationError",
]
